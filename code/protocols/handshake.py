#!/usr/bin/env python3
# protocols/handshake.py
"""
Poignée de main PRoPHET exécutée une fois par établissement de lien:

1. Rencontre directe: renforcement de P(a,b)
2. Vérification que le pair expose le même protocole (sinon arrêt, sans échec)
3. Fusion transitive à partir de la table exportée par le pair
4. Renforcement des probabilités des contenus détenus par le pair
5. Fusion des ensembles de demandeurs
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Optional

from models.message import MessageKind
from protocols.requesters import merge_requesters

logger = logging.getLogger(__name__)


class HandshakeState(Enum):
    IDLE = 'idle'
    CONTACT_OBSERVED = 'contact_observed'
    TRANSITIVELY_MERGED = 'transitively_merged'
    CONTENT_UPDATED = 'content_updated'
    REQUESTERS_MERGED = 'requesters_merged'


class HandshakeError(Enum):
    CAPABILITY_MISMATCH = 'capability_mismatch'


@dataclass(frozen=True)
class HandshakeResult:
    """
    Résultat d'une poignée de main.

    Attributes:
        peer: Pair rencontré
        transitive_merged: True si la fusion transitive a eu lieu
        contents_observed: Nombre de contenus du pair pris en compte
        requesters_merged: Nombre de demandeurs ajoutés localement
        error: Erreur non fatale éventuelle
    """
    peer: Hashable
    transitive_merged: bool = False
    contents_observed: int = 0
    requesters_merged: int = 0
    error: Optional[HandshakeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ContactHandshake:
    """Orchestre la mise à jour des probabilités d'un routeur lors d'un contact."""

    def __init__(self, router):
        """
        Args:
            router (ProphetRouter): Routeur local dont l'état est mis à jour
        """
        self.router = router
        self.state = HandshakeState.IDLE
        self.history = []  # États traversés lors de la dernière poignée de main

    def _enter(self, state: HandshakeState):
        self.state = state
        self.history.append(state)

    def run(self, peer: Hashable, peer_router) -> HandshakeResult:
        """
        Exécute la poignée de main avec un pair.

        Args:
            peer: Identifiant du pair
            peer_router: Routeur du pair

        Returns:
            HandshakeResult: bilan de la poignée de main
        """
        router = self.router
        self.history = []
        try:
            router.peer_preds.observe_contact(peer)
            self._enter(HandshakeState.CONTACT_OBSERVED)

            if not router.supports(peer_router):
                logger.warning("Nœud %s: le pair %s n'expose pas le protocole PRoPHET",
                               router.node_id, peer)
                return HandshakeResult(peer, error=HandshakeError.CAPABILITY_MISMATCH)

            router.peer_preds.merge_transitive(peer, peer_router.export_snapshot(), router.beta)
            self._enter(HandshakeState.TRANSITIVELY_MERGED)

            # Une seule vue des messages du pair pour les deux dernières étapes
            views = peer_router.message_views()
            observed = 0
            for view in views:
                if view.kind is MessageKind.CONTENT:
                    router.content_preds.observe(view.id)
                    observed += 1
            self._enter(HandshakeState.CONTENT_UPDATED)

            added = merge_requesters(router.buffer, views)
            self._enter(HandshakeState.REQUESTERS_MERGED)
        finally:
            self.state = HandshakeState.IDLE

        logger.debug("Nœud %s <-> %s: %d contenus observés, %d demandeurs ajoutés",
                     router.node_id, peer, observed, added)
        return HandshakeResult(peer, True, observed, added)
