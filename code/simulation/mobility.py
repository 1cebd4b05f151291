# simulation/mobility.py
import numpy as np

# Zones de placement initial: (borne d'adresse exclusive, x_min, y_min)
CLUSTERS = (
    (20, 750, 750),
    (40, 3250, 750),
    (60, 750, 3250),
    (80, 3250, 3250),
    (100, 2000, 2000),
)
CLUSTER_SIDE = 1000


class RandomWalk:
    """
    Modèle de mobilité en marche aléatoire.

    Chaque étape choisit un angle uniforme et une distance dans [min_distance, max_distance],
    en restant à l'intérieur de la zone simulée.
    """

    def __init__(self, rng, world_size=(4500, 4500), speed=(0.5, 1.5),
                 min_distance=0.0, max_distance=50.0):
        """
        Args:
            rng (numpy.random.Generator): générateur aléatoire de la simulation
            world_size (tuple): dimensions (largeur, hauteur) de la zone en mètres
            speed (tuple): vitesse minimale et maximale (m/s)
            min_distance (float): longueur minimale d'une étape
            max_distance (float): longueur maximale d'une étape
        """
        self.rng = rng
        self.max_x, self.max_y = world_size
        self.speed = speed
        self.min_distance = min_distance
        self.max_distance = max_distance
        self.waypoint = None
        self.current_speed = 0.0

    def initial_location(self, address: int):
        """
        Position initiale d'un nœud: les 100 premiers nœuds sont répartis en cinq
        groupes de 20 dans des carrés fixes, les suivants uniformément.

        Args:
            address (int): adresse (ID) du nœud

        Returns:
            np.ndarray: coordonnées (x, y)
        """
        for bound, x_min, y_min in CLUSTERS:
            if address < bound:
                x = float(self.rng.integers(CLUSTER_SIDE) + x_min)
                y = float(self.rng.integers(CLUSTER_SIDE) + y_min)
                break
        else:
            x = self.rng.random() * self.max_x
            y = self.rng.random() * self.max_y
        self.waypoint = np.array([x, y])
        return self.waypoint.copy()

    def next_waypoint(self, origin):
        """Tire la prochaine destination à partir de origin."""
        while True:
            angle = self.rng.random() * 2 * np.pi
            distance = self.min_distance + self.rng.random() * (self.max_distance - self.min_distance)
            x = origin[0] + distance * np.cos(angle)
            y = origin[1] + distance * np.sin(angle)
            if 0 < x < self.max_x and 0 < y < self.max_y:
                break
        self.current_speed = self.rng.uniform(*self.speed)
        return np.array([x, y])

    def advance(self, pos, dt: float):
        """
        Déplace un nœud vers sa destination pendant dt secondes.

        Returns:
            np.ndarray: nouvelle position
        """
        if self.waypoint is None or np.allclose(pos, self.waypoint):
            self.waypoint = self.next_waypoint(pos)
        step = self.current_speed * dt
        delta = self.waypoint - pos
        dist = np.linalg.norm(delta)
        if dist <= step:
            return self.waypoint.copy()
        return pos + delta * (step / dist)
