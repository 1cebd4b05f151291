# models/buffer.py
import logging

from models.message import MessageKind

logger = logging.getLogger(__name__)


class MessageBuffer:
    """
    Stockage des messages détenus par un nœud.

    L'ordre d'insertion est conservé: c'est l'ordre d'itération utilisé par la
    politique de transfert.
    """

    def __init__(self, capacity: int = None):
        """
        Args:
            capacity (int, optional): Capacité en octets. Si None, pas de limite.
        """
        self.capacity = capacity
        self.messages = {}  # id -> Message

    def __len__(self):
        return len(self.messages)

    def __iter__(self):
        return iter(list(self.messages.values()))

    def __contains__(self, message_id):
        return message_id in self.messages

    #*************** Opérations courantes ****************
    def get(self, message_id: str):
        return self.messages.get(message_id)

    def add(self, message):
        """Ajoute (ou remplace) un message dans le buffer."""
        self.messages[message.id] = message

    def remove(self, message_id: str):
        """
        Retire un message du buffer.

        Returns:
            Message: le message retiré, ou None s'il n'était pas présent
        """
        return self.messages.pop(message_id, None)

    def has_message(self, message_id: str) -> bool:
        return message_id in self.messages

    def content(self, content_id: str):
        """
        Retourne le contenu d'identifiant content_id s'il est détenu.

        Un contenu porte toujours son propre identifiant comme content_id.
        """
        message = self.messages.get(content_id)
        if message is not None and message.kind is MessageKind.CONTENT:
            return message
        return None

    def interest_for(self, content_id: str):
        """
        Retourne le premier intérêt détenu qui cible content_id, ou None.
        """
        for message in self.messages.values():
            if message.kind is MessageKind.INTEREST and message.content_id == content_id:
                return message
        return None

    #*************** Capacité et durée de vie ****************
    def free_space(self) -> float:
        if self.capacity is None:
            return float('inf')
        return self.capacity - sum(m.size for m in self.messages.values())

    def can_hold(self, size: int, protected=()) -> bool:
        """Vérifie qu'un message de size octets peut tenir, quitte à supprimer les messages non protégés."""
        if self.capacity is None:
            return True
        kept = sum(m.size for m in self.messages.values() if m.id in protected)
        return size <= self.capacity - kept

    def make_room(self, size: int, protected=()):
        """
        Libère de la place en supprimant les messages les plus anciens.

        Args:
            size (int): Nombre d'octets nécessaires
            protected (iterable): Identifiants à ne pas supprimer (messages en cours d'envoi)

        Returns:
            list: Les messages supprimés, ou None si le message ne peut pas tenir
            même en vidant tout le buffer (rien n'est alors supprimé)
        """
        dropped = []
        if self.capacity is None:
            return dropped
        if not self.can_hold(size, protected):
            logger.debug("Buffer: %d octets demandés, impossible de libérer la place", size)
            return None
        candidates = sorted(
            (m for m in self.messages.values() if m.id not in protected),
            key=lambda m: m.received_at
        )
        for message in candidates:
            if self.free_space() >= size:
                break
            self.remove(message.id)
            dropped.append(message)
            logger.debug("Buffer plein: %s supprimé", message.id)
        return dropped

    def expire(self, now: float):
        """
        Supprime les messages dont la durée de vie est écoulée.

        Args:
            now (float): Temps simulé courant

        Returns:
            list: Les messages expirés
        """
        expired = [m for m in self.messages.values() if m.remaining_ttl(now) <= 0]
        for message in expired:
            self.remove(message.id)
        return expired
