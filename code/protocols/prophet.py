#!/usr/bin/env python3
# protocols/prophet.py
"""
Implémentation du protocole PRoPHET (Probabilistic Routing Protocol using History of Encounters
and Transitivity) étendu au modèle publication/récupération orienté contenu.

Principe:
1. Chaque nœud maintient P(a,b), la probabilité de livrer un message au nœud b
   (rencontre directe, transitivité et vieillissement, voir protocols.predictability).
2. Chaque nœud maintient aussi P(a,X) pour chaque contenu X, renforcée quand X
   est vu chez un pair rencontré.
3. Les contenus portent l'ensemble de leurs demandeurs; les intérêts propagent la
   demande. Les ensembles de demandeurs sont fusionnés à chaque contact.
4. Politique de transfert (protocols.forwarding):
   - un contenu est copié vers un pair mieux placé pour au moins un demandeur;
   - un intérêt est copié vers un pair dont P(pair, C) est strictement supérieure.

Référence: Lindgren, A., Doria, A., & Schelén, O. (2003).
"Probabilistic routing in intermittently connected networks"
ACM SIGMOBILE mobile computing and communications review, 7(3), 19-20.
"""
import logging
from typing import Callable, Hashable

from config import ProphetSettings
from models.buffer import MessageBuffer
from protocols.base import DTNRouter, TransferCommand
from protocols.forwarding import ForwardingPolicy
from protocols.handshake import ContactHandshake
from protocols.lifecycle import MessageLifecycle
from protocols.predictability import ContentPredictabilityStore, PeerPredictabilityStore

logger = logging.getLogger(__name__)


class ProphetRouter(DTNRouter):
    """
    Routeur PRoPHET orienté contenu d'un nœud.

    Le moteur de simulation lui délivre deux types d'événements: les contacts
    (on_contact) et les ticks (on_tick). Chaque tick émet au plus un ordre de transfert.
    """

    def __init__(self, node_id: Hashable, settings: ProphetSettings, clock: Callable[[], float],
                 rng, buffer: MessageBuffer = None):
        """
        Initialise le routeur.

        Args:
            node_id: Identifiant du nœud
            settings (ProphetSettings): Paramètres du protocole
            clock (Callable[[], float]): Horloge simulée (secondes)
            rng (numpy.random.Generator): Générateur aléatoire partagé de la simulation
            buffer (MessageBuffer, optional): Buffer de messages
        """
        super().__init__(node_id, clock, buffer)
        self.settings = settings
        self.beta = settings.beta
        self.peer_preds = PeerPredictabilityStore(node_id, settings.seconds_in_time_unit, clock)
        self.content_preds = ContentPredictabilityStore()
        self.policy = ForwardingPolicy(settings.requester_rule)
        self.lifecycle = MessageLifecycle(settings, rng)
        self.handshake = ContactHandshake(self)

    def supports(self, other) -> bool:
        """Vérifie qu'un routeur pair expose les probabilités et les contenus."""
        return isinstance(other, ProphetRouter)

    #*************** Événements du moteur ****************
    def on_contact(self, peer: Hashable, link_up: bool, peer_router=None):
        """
        Traite un changement de lien.

        Returns:
            HandshakeResult à l'établissement du lien, None à sa rupture
        """
        super().on_contact(peer, link_up, peer_router)
        if not link_up:
            return None
        result = self.handshake.run(peer, peer_router)
        self.connections[peer].compatible = result.ok
        return result

    def on_tick(self):
        """
        Choisit au plus un message à transférer.

        Les contenus directement livrables à un pair demandeur passent en premier,
        puis la politique de transfert est évaluée.

        Returns:
            TransferCommand ou None
        """
        if not self.can_start_transfer() or self.is_transferring():
            return None

        command = self.deliverable_command()
        if command is not None:
            return command

        selected = self.policy.select(self, self.active_connections())
        if selected is None:
            return None
        connection, message = selected
        return TransferCommand(message, connection.peer)

    def create_message(self, message_id: str, size: int = 0):
        """
        Crée un message et l'ajoute au buffer si la création réussit.

        Returns:
            Message ou CreationFailure
        """
        now = self.clock()
        protected = {self.sending}
        result = self.lifecycle.create(message_id, size, self.node_id, now,
                                       self.buffer, self.content_preds, protected)
        if not result:
            logger.debug("Nœud %s: création de %s refusée (%s)",
                         self.node_id, message_id, result.reason.value)
            return result
        self.store(result)
        return result

    def on_transfer_arrived(self, message_id: str, from_peer: Hashable):
        message = super().on_transfer_arrived(message_id, from_peer)
        if message is None:
            return None
        return self.lifecycle.on_arrival(self.node_id, message, self.clock())

    #*************** Probabilités ****************
    def get_peer_delivery_predictability(self, peer: Hashable) -> float:
        return self.peer_preds.get(peer)

    def get_content_predictability(self, content_id: str) -> float:
        return self.content_preds.get(content_id)

    def export_snapshot(self):
        return self.peer_preds.export_snapshot()

    def routing_info(self):
        """
        Décrit l'état des tables de probabilités, pour le diagnostic.

        Returns:
            list(str): une ligne d'en-tête par table suivie d'une ligne par entrée
        """
        preds = self.peer_preds.export_snapshot()
        cpreds = self.content_preds.snapshot()
        lines = [f"{len(preds)} delivery prediction(s)"]
        lines += [f"{peer} : {value:.6f}" for peer, value in preds.items()]
        lines.append(f"{len(cpreds)} content prediction(s)")
        lines += [f"{cid} : {value:.6f}" for cid, value in cpreds.items()]
        return lines
