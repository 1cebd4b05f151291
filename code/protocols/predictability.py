#!/usr/bin/env python3
# protocols/predictability.py
"""
Tables de probabilités de livraison ("delivery predictability") d'un nœud.

Règles PRoPHET:
- Rencontre directe: P(a,b) = P(a,b)_ancien + (1 - P(a,b)_ancien) * P_INIT
- Vieillissement:    P(a,b) = P(a,b)_ancien * GAMMA^k, k = unités de temps écoulées
- Transitivité:      P(a,c) = P(a,c)_ancien + (1 - P(a,c)_ancien) * P(a,b) * P(b,c) * beta

Aucune valeur n'est bornée explicitement: avec beta dans [0, 1] et des entrées
dans [0, 1], les formules restent dans [0, 1].

Référence: Lindgren, A., Doria, A., & Schelén, O. (2003).
"Probabilistic routing in intermittently connected networks"
"""
from typing import Callable, Dict, Hashable

P_INIT = 0.75       # Constante d'initialisation de la probabilité
DEFAULT_BETA = 0.25  # Constante de transitivité par défaut
GAMMA = 0.98        # Constante de vieillissement


def reinforce(old_value: float) -> float:
    """Applique la règle de rencontre directe à une probabilité."""
    return old_value + (1 - old_value) * P_INIT


class PeerPredictabilityStore:
    """
    Probabilités de livraison d'un nœud vers ses pairs.

    Le vieillissement est paresseux: il est appliqué à toute la table à chaque
    lecture (get, export_snapshot), jamais de manière anticipée.
    """

    def __init__(self, owner: Hashable, seconds_in_time_unit: float, clock: Callable[[], float]):
        """
        Args:
            owner: Identifiant du nœud propriétaire (jamais présent dans la table)
            seconds_in_time_unit (float): Secondes par unité de temps de vieillissement
            clock (Callable[[], float]): Horloge simulée (secondes, monotone)
        """
        if seconds_in_time_unit is None or seconds_in_time_unit <= 0:
            raise ValueError("seconds_in_time_unit doit être strictement positif")
        self.owner = owner
        self.seconds_in_time_unit = seconds_in_time_unit
        self.clock = clock
        self.preds: Dict[Hashable, float] = {}
        self.last_aged_at = 0.0

    def __len__(self):
        return len(self.preds)

    def age(self):
        """
        Vieillit toutes les entrées en fonction du temps écoulé depuis le dernier passage.
        """
        now = self.clock()
        # L'horodatage de vieillissement ne recule jamais
        if now <= self.last_aged_at:
            return
        time_diff = (now - self.last_aged_at) / self.seconds_in_time_unit
        mult = GAMMA ** time_diff
        for peer in self.preds:
            self.preds[peer] *= mult
        self.last_aged_at = now

    def get(self, peer: Hashable) -> float:
        """
        Retourne la probabilité (vieillie) de livraison vers peer, 0 si inconnue.
        """
        self.age()
        return self.preds.get(peer, 0.0)

    def observe_contact(self, peer: Hashable) -> float:
        """
        Met à jour la probabilité lors d'une rencontre directe avec peer.

        Returns:
            float: la nouvelle probabilité
        """
        if peer == self.owner:
            raise ValueError("un nœud ne se rencontre pas lui-même")
        new_value = reinforce(self.get(peer))
        self.preds[peer] = new_value
        return new_value

    def merge_transitive(self, peer: Hashable, peer_table: Dict[Hashable, float], beta: float = DEFAULT_BETA):
        """
        Met à jour les probabilités par transitivité (A -> B -> C).

        Args:
            peer: Le nœud B rencontré
            peer_table (dict): Table de probabilités exportée par B
            beta (float): Facteur de transitivité

        Returns:
            int: Nombre d'entrées mises à jour
        """
        p_ab = self.get(peer)
        updated = 0
        for other, p_bc in peer_table.items():
            if other == self.owner:
                continue  # on ne s'ajoute pas soi-même
            p_old = self.get(other)
            self.preds[other] = p_old + (1 - p_old) * p_ab * p_bc * beta
            updated += 1
        return updated

    def export_snapshot(self) -> Dict[Hashable, float]:
        """
        Exporte une copie de la table entièrement vieillie, lue par un pair
        pour sa propre mise à jour transitive.
        """
        self.age()
        return dict(self.preds)


class ContentPredictabilityStore:
    """
    Probabilités de livraison d'un nœud par identifiant de contenu (sans vieillissement).
    """

    def __init__(self):
        self.cpreds: Dict[str, float] = {}

    def __len__(self):
        return len(self.cpreds)

    def get(self, content_id: str) -> float:
        return self.cpreds.get(content_id, 0.0)

    def observe(self, content_id: str) -> float:
        """Renforce la probabilité d'un contenu vu chez un pair rencontré."""
        new_value = reinforce(self.get(content_id))
        self.cpreds[content_id] = new_value
        return new_value

    def set_initial(self, content_id: str, value: float = 1.0):
        """Fixe la probabilité d'un contenu, utilisé par son créateur."""
        self.cpreds[content_id] = value

    def snapshot(self) -> Dict[str, float]:
        return dict(self.cpreds)
