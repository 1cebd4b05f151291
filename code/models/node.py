# models/node.py
import numpy as np


class Node:
    """
    Représente un nœud mobile du réseau opportuniste.
    """

    def __init__(self, id, x=0.0, y=0.0, router=None, movement=None):
        """
        Constructeur d'un objet Node

        Args:
            id (int): numéro d'identification du nœud (obligatoire)
            x (float, optional): coordonnée x du nœud. Par défaut 0.0.
            y (float, optional): coordonnée y du nœud. Par défaut 0.0.
            router (DTNRouter, optional): routeur du nœud. Par défaut None.
            movement (RandomWalk, optional): modèle de mobilité du nœud. Par défaut None.
        """
        self.id = int(id)
        self.pos = np.array([float(x), float(y)], dtype=float)
        self.neighbors = []  # Liste des nœuds voisins
        self.router = router
        self.movement = movement

    #*************** Opérations courantes ****************
    def add_neighbor(self, node):
        """
        Ajoute un nœud à la liste des voisins s'il n'y est pas déjà.

        Args:
            node (Node): le nœud à ajouter.
        """
        if node not in self.neighbors:
            self.neighbors.append(node)

    def distance_to(self, node):
        """
        Calcule la distance euclidienne entre deux nœuds.

        Args:
            node (Node): le nœud avec lequel calculer la distance.

        Returns:
            float: la distance euclidienne entre les deux nœuds.
        """
        return np.linalg.norm(self.pos - node.pos)

    def is_neighbor(self, node, connection_range=0):
        """
        Vérifie si deux nœuds sont voisins ou non, selon la portée de connexion.
        Ajoute ou supprime le second nœud de la liste des voisins du premier.

        Args:
            node (Node): le second nœud à analyser.
            connection_range (int, optional): distance maximale pour établir une connexion. Par défaut 0.

        Returns:
            int: 1 si voisins, 0 sinon.
        """
        if node.id != self.id:
            if self.distance_to(node) <= connection_range:
                self.add_neighbor(node)
                return 1
            self.remove_neighbor(node)
        return 0

    def remove_neighbor(self, node):
        """
        Supprime un nœud de la liste des voisins s'il y est présent.

        Args:
            node (Node): le nœud à supprimer
        """
        if node in self.neighbors:
            self.neighbors.remove(node)

    def move(self, dt: float):
        """
        Fait avancer le nœud selon son modèle de mobilité.

        Args:
            dt (float): durée du pas de temps (secondes)
        """
        if self.movement is not None:
            self.pos = self.movement.advance(self.pos, dt)
