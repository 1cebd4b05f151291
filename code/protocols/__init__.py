#!/usr/bin/env python3
# protocols/__init__.py
"""
Package des protocoles DTN.

Ce package contient le routeur PRoPHET orienté contenu et ses composants:
- DTNRouter: Classe de base définissant l'interface exposée au moteur
- PeerPredictabilityStore / ContentPredictabilityStore: tables de probabilités
- merge_requesters: fusion des ensembles de demandeurs entre pairs
- ContactHandshake: mise à jour des tables à l'établissement d'un lien
- ForwardingPolicy: décision de transfert à chaque tick
- MessageLifecycle: création des messages et ajustement à la réception
- ProphetRouter: Implémentation du protocole PRoPHET (Probabilistic Routing Protocol
  using History of Encounters and Transitivity) pour les contenus et intérêts
"""

from protocols.base import Connection, DTNRouter, TransferCommand
from protocols.predictability import ContentPredictabilityStore, PeerPredictabilityStore
from protocols.requesters import merge_requesters
from protocols.handshake import ContactHandshake, HandshakeError, HandshakeResult
from protocols.forwarding import ForwardingPolicy
from protocols.lifecycle import MessageLifecycle
from protocols.prophet import ProphetRouter

__all__ = ['Connection', 'DTNRouter', 'TransferCommand', 'ContentPredictabilityStore',
           'PeerPredictabilityStore', 'merge_requesters', 'ContactHandshake', 'HandshakeError',
           'HandshakeResult', 'ForwardingPolicy', 'MessageLifecycle', 'ProphetRouter']
