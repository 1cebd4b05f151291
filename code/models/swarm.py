# models/swarm.py
import networkx as nx


class Swarm:
    """
    Représente l'ensemble des nœuds mobiles d'une simulation.
    """

    def __init__(self, connection_range=0, nodes=None):
        """
        Constructeur d'un objet Swarm

        Args:
            connection_range (int, optional): distance maximale entre deux nœuds pour établir une connexion. Par défaut 0.
            nodes (list, optional): liste des objets Node. Par défaut None.
        """
        self.connection_range = connection_range
        self.nodes = nodes if nodes else []

    #*************** Opérations courantes ***************
    def move(self, dt: float):
        for node in self.nodes:
            node.move(dt)

    def swarm_to_nxgraph(self):
        """
        Convertit l'ensemble des nœuds en graphe NetworkX des contacts courants.
        Met aussi à jour les listes de voisins des nœuds.

        Returns:
            nx.Graph: le graphe des contacts.
        """
        G = nx.Graph()
        G.add_nodes_from([n.id for n in self.nodes])
        for i, ni in enumerate(self.nodes):
            for nj in self.nodes[i + 1:]:
                if ni.is_neighbor(nj, self.connection_range) == 1:
                    nj.add_neighbor(ni)
                    G.add_edge(ni.id, nj.id)
                else:
                    nj.remove_neighbor(ni)
        return G

    def contacts(self):
        """
        Calcule l'ensemble des contacts courants.

        Returns:
            set(tuple(int, int)): paires (id_min, id_max) des nœuds à portée
        """
        return {tuple(sorted(edge)) for edge in self.swarm_to_nxgraph().edges()}
