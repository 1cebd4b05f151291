#!/usr/bin/env python3
# protocols/forwarding.py
"""
Politique de transfert PRoPHET orientée contenu.

À chaque tick, le routeur parcourt ses contacts actifs (dans leur ordre) puis ses
messages (dans l'ordre du buffer) et retient le premier couple (contact, message)
qui satisfait sa règle. Aucun classement par probabilité n'est effectué: la
sélection est le premier couple éligible, de manière déterministe.

Règles:
- Contenu X: ignoré si le pair détient déjà X. Sinon transfert si la règle de
  comparaison des demandeurs est satisfaite ou si le pair est lui-même demandeur.
- Intérêt pour C: ignoré si le pair détient un intérêt ou le contenu C. Sinon
  transfert si P_pair(C) > P_local(C) (inégalité stricte).
"""
import logging
from typing import Callable, Dict

from models.message import MessageKind

logger = logging.getLogger(__name__)


def any_requester_rule(requesters, local_pred: Callable, peer_pred: Callable) -> bool:
    """Règle disjonctive: un seul demandeur mieux placé chez le pair suffit."""
    return any(peer_pred(r) >= local_pred(r) for r in requesters)


def all_requesters_rule(requesters, local_pred: Callable, peer_pred: Callable) -> bool:
    """Règle conjonctive: le pair doit être au moins aussi bien placé pour tous les demandeurs."""
    return all(peer_pred(r) >= local_pred(r) for r in requesters)


def average_rule(requesters, local_pred: Callable, peer_pred: Callable) -> bool:
    """
    Compare la moyenne des probabilités non nulles du pair à celle du nœud local.

    Si le pair ou le nœud local ne connaît aucun demandeur, le pair n'est pas
    retenu (seule la livraison directe à un pair demandeur reste possible).
    """
    peer_values = [p for p in (peer_pred(r) for r in requesters) if p > 0]
    local_values = [p for p in (local_pred(r) for r in requesters) if p > 0]
    if not peer_values or not local_values:
        return False
    return sum(peer_values) / len(peer_values) >= sum(local_values) / len(local_values)


RULES: Dict[str, Callable] = {
    'any': any_requester_rule,
    'all': all_requesters_rule,
    'average': average_rule,
}


class ForwardingPolicy:
    """
    Décide, pour un tick, quel message pousser vers quel contact.
    """

    def __init__(self, rule: str = 'any'):
        """
        Args:
            rule (str): Règle de comparaison des demandeurs ('any', 'all' ou 'average')
        """
        if rule not in RULES:
            raise ValueError(f"règle de demandeurs inconnue: {rule!r}")
        self.rule = rule
        self.compare_requesters = RULES[rule]

    def should_forward_content(self, router, peer, peer_router, message) -> bool:
        if peer_router.has_message(message.id):
            return False  # le pair détient déjà ce contenu
        if peer in message.requesters:
            return True
        return self.compare_requesters(
            message.requesters,
            router.get_peer_delivery_predictability,
            peer_router.get_peer_delivery_predictability,
        )

    def should_forward_interest(self, router, peer_router, message) -> bool:
        content_id = message.content_id
        if peer_router.has_interest_for(content_id) or peer_router.has_content(content_id):
            return False  # le pair traite déjà ce contenu
        return (peer_router.get_content_predictability(content_id) >
                router.get_content_predictability(content_id))

    def select(self, router, connections):
        """
        Sélectionne le premier couple (connexion, message) à transférer.

        Args:
            router: Routeur local
            connections (iterable[Connection]): Contacts actifs, dans leur ordre

        Returns:
            tuple: (Connection, Message) ou None si aucun transfert n'est justifié
        """
        messages = [m for m in router.buffer if m.requesters]
        if not messages:
            return None

        for connection in connections:
            peer_router = connection.router
            if not connection.compatible or peer_router.is_transferring():
                continue  # ignorer les pairs incompatibles ou occupés

            for message in messages:
                if message.kind is MessageKind.CONTENT:
                    chosen = self.should_forward_content(router, connection.peer, peer_router, message)
                else:
                    chosen = self.should_forward_interest(router, peer_router, message)
                if chosen:
                    logger.debug("Nœud %s: %s sélectionné pour %s", router.node_id, message.id, connection.peer)
                    return connection, message
        return None
