# models/message.py
"""
Messages du modèle publication/récupération (contenus nommés et intérêts).

Un identifiant de message a la forme '<préfixe><numéro>' où le préfixe vaut 'C'
pour un contenu et 'I' pour un intérêt. L'identifiant n'est analysé qu'une seule
fois, à la frontière (création), puis le type est porté explicitement par le message.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from config import SECONDS_PER_TTL_UNIT


class MessageKind(Enum):
    """Type d'un message."""
    CONTENT = 'C'
    INTEREST = 'I'


class CreationError(Enum):
    """Raisons d'échec de la création d'un message."""
    INVALID_IDENTITY = 'invalid_identity'
    NO_ELIGIBLE_TARGET = 'no_eligible_target'
    NO_SPACE = 'no_space'


@dataclass(frozen=True)
class CreationFailure:
    """
    Résultat d'une création de message refusée.

    Attributes:
        reason: Raison de l'échec
        message_id: Identifiant demandé
        detail: Description lisible de l'échec
    """
    reason: CreationError
    message_id: str
    detail: str = ''

    def __bool__(self):
        return False


def parse_message_id(message_id: str):
    """
    Décompose un identifiant en (type, numéro de séquence).

    Args:
        message_id (str): Identifiant, par exemple 'C12' ou 'I7'

    Returns:
        tuple: (MessageKind, int) ou None si l'identifiant est mal formé
    """
    if not isinstance(message_id, str) or len(message_id) < 2:
        return None
    try:
        kind = MessageKind(message_id[0])
    except ValueError:
        return None
    suffix = message_id[1:]
    if not suffix.isdigit():
        return None
    return kind, int(suffix)


def content_id_for(seq: int) -> str:
    """Identifiant du contenu de numéro seq."""
    return f"{MessageKind.CONTENT.value}{seq}"


@dataclass(frozen=True)
class MessageView:
    """
    Vue immuable d'un message, exposée aux pairs pendant une poignée de main.

    Les pairs ne lisent jamais directement les ensembles de demandeurs vivants
    d'un autre nœud: ils reçoivent une copie figée.
    """
    id: str
    kind: MessageKind
    content_id: str
    requesters: frozenset


@dataclass(eq=False)
class Message:
    """
    Message détenu par le buffer d'un nœud.

    Attributes:
        id: Identifiant du message
        kind: Type (contenu ou intérêt)
        seq: Numéro de séquence
        source: Nœud créateur
        size: Taille en octets
        created_at: Instant de création (secondes simulées)
        content_id: Contenu représenté (contenu) ou ciblé (intérêt)
        ttl: Durée de vie en minutes, comptée depuis ttl_set_at
        ttl_set_at: Instant auquel la durée de vie a été fixée
        requesters: Ensemble des nœuds demandeurs
        hop_count: Nombre de sauts parcourus
        received_at: Instant de réception dans le buffer courant
    """
    id: str
    kind: MessageKind
    seq: int
    source: int
    size: int
    created_at: float
    content_id: Optional[str] = None
    ttl: Optional[float] = None
    ttl_set_at: float = 0.0
    requesters: set = field(default_factory=set)
    hop_count: int = 0
    received_at: float = 0.0

    def set_ttl(self, ttl: float, now: float):
        """
        Fixe la durée de vie restante du message.

        Args:
            ttl (float): Durée de vie en minutes
            now (float): Temps simulé courant
        """
        self.ttl = ttl
        self.ttl_set_at = now

    def remaining_ttl(self, now: float) -> float:
        """
        Calcule la durée de vie restante.

        Args:
            now (float): Temps simulé courant

        Returns:
            float: Minutes restantes, ou inf si aucune durée de vie n'est fixée
        """
        if self.ttl is None:
            return float('inf')
        return self.ttl - (now - self.ttl_set_at) / SECONDS_PER_TTL_UNIT

    def add_requesters(self, requesters) -> int:
        """
        Ajoute des demandeurs absents de l'ensemble.

        Returns:
            int: Nombre de demandeurs effectivement ajoutés
        """
        before = len(self.requesters)
        self.requesters.update(requesters)
        return len(self.requesters) - before

    def replicate(self):
        """
        Copie le message pour un transfert: l'ensemble des demandeurs est dupliqué,
        la copie n'est jamais partagée avec l'original.
        """
        return Message(
            id=self.id,
            kind=self.kind,
            seq=self.seq,
            source=self.source,
            size=self.size,
            created_at=self.created_at,
            content_id=self.content_id,
            ttl=self.ttl,
            ttl_set_at=self.ttl_set_at,
            requesters=set(self.requesters),
            hop_count=self.hop_count,
            received_at=self.received_at,
        )

    def view(self) -> MessageView:
        return MessageView(self.id, self.kind, self.content_id, frozenset(self.requesters))


CreationResult = Union[Message, CreationFailure]
