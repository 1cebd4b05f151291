#!/usr/bin/env python3
# protocols/lifecycle.py
"""
Cycle de vie des messages: création (contenus et intérêts) et ajustement de la
durée de vie et des demandeurs à la réception d'un transfert.
"""
import logging

from config import ProphetSettings
from models.message import (
    CreationError, CreationFailure, Message, MessageKind, content_id_for, parse_message_id
)

logger = logging.getLogger(__name__)


class MessageLifecycle:
    """
    Création et réception des messages d'un routeur.

    Le générateur aléatoire est injecté: un seul générateur initialisé par
    simulation garantit la reproductibilité du choix des cibles d'intérêt.
    """

    def __init__(self, settings: ProphetSettings, rng):
        """
        Args:
            settings (ProphetSettings): Bornes et durées de vie
            rng (numpy.random.Generator): Générateur aléatoire de la simulation
        """
        self.settings = settings
        self.rng = rng

    def bound_for(self, kind: MessageKind) -> int:
        if kind is MessageKind.CONTENT:
            return self.settings.nrof_contents
        return self.settings.nrof_interests

    def choose_target(self, buffer):
        """
        Tire uniformément un contenu que le nœud ne détient pas.

        Returns:
            str: l'identifiant du contenu ciblé, ou None si tous sont détenus
        """
        eligible = [content_id_for(n) for n in range(1, self.settings.nrof_contents + 1)
                    if not buffer.has_message(content_id_for(n))]
        if not eligible:
            return None
        return eligible[int(self.rng.integers(len(eligible)))]

    def create(self, message_id: str, size: int, source, now: float, buffer, content_preds,
               protected=()):
        """
        Crée un message à partir de son identifiant.

        Args:
            message_id (str): Identifiant 'C<n>' ou 'I<n>'
            size (int): Taille en octets
            source: Nœud créateur
            now (float): Temps simulé courant
            buffer (MessageBuffer): Buffer du créateur (consulté, non modifié)
            content_preds (ContentPredictabilityStore): Probabilités de contenu du créateur
            protected (iterable): Identifiants non supprimables pour faire de la place

        Returns:
            Message ou CreationFailure
        """
        parsed = parse_message_id(message_id)
        if parsed is None:
            return CreationFailure(CreationError.INVALID_IDENTITY, message_id,
                                   "identifiant mal formé")
        kind, seq = parsed
        bound = self.bound_for(kind)
        if not 1 <= seq <= bound:
            return CreationFailure(CreationError.INVALID_IDENTITY, message_id,
                                   f"numéro {seq} hors de [1, {bound}]")
        if not buffer.can_hold(size, protected):
            return CreationFailure(CreationError.NO_SPACE, message_id,
                                   f"{size} octets ne tiennent pas dans le buffer")

        message = Message(id=message_id, kind=kind, seq=seq, source=source,
                          size=size, created_at=now, received_at=now)

        if kind is MessageKind.CONTENT:
            message.content_id = message_id
            message.set_ttl(self.settings.content_ttl, now)
            content_preds.set_initial(message_id, 1.0)
        else:
            target = self.choose_target(buffer)
            if target is None:
                return CreationFailure(CreationError.NO_ELIGIBLE_TARGET, message_id,
                                       "tous les contenus sont déjà détenus")
            message.content_id = target
            message.set_ttl(self.settings.interest_ttl, now)
            message.requesters.add(source)
        return message

    def on_arrival(self, node_id, message, now: float):
        """
        Ajuste un message reçu par node_id.

        Un contenu reçu par l'un de ses demandeurs consomme cette demande: le
        nœud est retiré des demandeurs, sauf s'il est le dernier, auquel cas le
        message expire presque immédiatement.
        """
        if message.kind is MessageKind.CONTENT:
            message.set_ttl(self.settings.content_delivered_ttl, now)
            if node_id in message.requesters:
                if len(message.requesters) > 1:
                    message.requesters.discard(node_id)
                else:
                    message.set_ttl(self.settings.expire_ttl, now)
        else:
            message.set_ttl(self.settings.interest_transferred_ttl, now)
        return message
