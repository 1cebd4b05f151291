#!/usr/bin/env python3
# protocols/base.py
"""
Classe de base pour les routeurs DTN (Delay-Tolerant Networking).
Définit l'interface commune exposée au moteur de simulation.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Hashable

from models.buffer import MessageBuffer
from models.message import MessageKind

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """
    Contact actif avec un pair.

    Attributes:
        peer: Identifiant du pair
        router: Routeur du pair (accès aux vues exportées)
        compatible: True si le pair parle le même protocole de probabilités
    """
    peer: Hashable
    router: object
    compatible: bool = False


@dataclass(frozen=True)
class TransferCommand:
    """Ordre de transfert d'un message vers un pair, émis vers le moteur."""
    message: object
    peer: Hashable


class DTNRouter:
    """
    Classe de base pour les routeurs DTN.
    Cette classe gère les contacts, le buffer et les messages en cours de réception;
    la décision de transfert est laissée aux sous-classes.
    """

    def __init__(self, node_id: Hashable, clock: Callable[[], float], buffer: MessageBuffer = None):
        """
        Initialise un routeur DTN.

        Args:
            node_id: Identifiant du nœud propriétaire
            clock (Callable[[], float]): Horloge simulée (secondes)
            buffer (MessageBuffer, optional): Buffer de messages. Par défaut un buffer sans limite.
        """
        self.node_id = node_id
        self.clock = clock
        self.buffer = buffer if buffer is not None else MessageBuffer()
        self.connections = {}  # pair -> Connection, dans l'ordre d'établissement
        self.incoming = {}     # id -> (message, pair émetteur)
        self.sending = None    # id du message en cours d'envoi
        self.evicted = []      # messages supprimés faute de place, non encore signalés

    #*************** Contacts ****************
    def on_contact(self, peer: Hashable, link_up: bool, peer_router=None):
        """
        Traite l'apparition ou la disparition d'un lien avec un pair.

        Args:
            peer: Identifiant du pair
            link_up (bool): True à l'établissement du lien, False à sa rupture
            peer_router: Routeur du pair (None si inaccessible)
        """
        if link_up:
            self.connections[peer] = Connection(peer, peer_router)
        else:
            self.connections.pop(peer, None)
            for message_id, (_, sender) in list(self.incoming.items()):
                if sender == peer:
                    self.abort_receive(message_id)
        return None

    def active_connections(self):
        return list(self.connections.values())

    #*************** Transferts ****************
    def is_transferring(self) -> bool:
        return self.sending is not None or bool(self.incoming)

    def can_start_transfer(self) -> bool:
        return bool(self.connections) and len(self.buffer) > 0

    def transfer_started(self, message_id: str):
        self.sending = message_id

    def transfer_done(self):
        self.sending = None

    def receive_message(self, message, from_peer: Hashable):
        """Enregistre un message en cours de réception."""
        self.incoming[message.id] = (message, from_peer)

    def abort_receive(self, message_id: str):
        self.incoming.pop(message_id, None)

    def on_transfer_arrived(self, message_id: str, from_peer: Hashable):
        """
        Finalise la réception d'un message et l'ajoute au buffer.

        Args:
            message_id (str): Identifiant du message reçu
            from_peer: Pair émetteur

        Returns:
            Message: le message reçu, ou None s'il ne peut pas tenir dans le buffer

        Raises:
            KeyError: si aucun message de cet identifiant n'est en cours de réception
        """
        message, sender = self.incoming.pop(message_id)
        if sender != from_peer:
            logger.warning("Nœud %s: %s annoncé par %s mais reçu de %s",
                           self.node_id, message_id, sender, from_peer)
        if not self.store(message):
            logger.info("Nœud %s: %s refusé, buffer trop petit (%d octets)",
                        self.node_id, message_id, message.size)
            return None
        message.received_at = self.clock()
        message.hop_count += 1
        return message

    def store(self, message) -> bool:
        """
        Ajoute un message au buffer en supprimant au besoin les plus anciens.
        Le message en cours d'envoi n'est jamais supprimé.

        Returns:
            bool: False si le message ne peut pas tenir (le buffer est alors inchangé)
        """
        dropped = self.buffer.make_room(message.size, protected={self.sending})
        if dropped is None:
            return False
        self.evicted.extend(dropped)
        self.buffer.add(message)
        return True

    def drain_evicted(self):
        """Retourne et oublie les messages supprimés faute de place depuis le dernier appel."""
        evicted, self.evicted = self.evicted, []
        return evicted

    def deliverable_command(self):
        """
        Cherche un contenu directement livrable: un pair connecté et libre qui en
        est demandeur et ne le détient pas encore.

        Returns:
            TransferCommand ou None
        """
        for connection in self.active_connections():
            peer_router = connection.router
            if peer_router is None or peer_router.is_transferring():
                continue
            for message in self.buffer:
                if (message.kind is MessageKind.CONTENT and connection.peer in message.requesters
                        and not peer_router.has_message(message.id)):
                    return TransferCommand(message, connection.peer)
        return None

    #*************** Vues exportées ****************
    def has_message(self, message_id: str) -> bool:
        return self.buffer.has_message(message_id)

    def has_content(self, content_id: str) -> bool:
        return self.buffer.content(content_id) is not None

    def has_interest_for(self, content_id: str) -> bool:
        return self.buffer.interest_for(content_id) is not None

    def message_views(self):
        """Vues immuables des messages détenus, lues par un pair pendant un contact."""
        return [m.view() for m in self.buffer]

    #*************** Interface à implémenter ****************
    def on_tick(self):
        """
        Occasion périodique de démarrer un transfert.

        Returns:
            TransferCommand ou None
        """
        raise NotImplementedError("Cette méthode doit être implémentée par les sous-classes")

    def create_message(self, message_id: str, size: int):
        """
        Crée un message à partir de son identifiant.

        Returns:
            Message ou CreationFailure
        """
        raise NotImplementedError("Cette méthode doit être implémentée par les sous-classes")
