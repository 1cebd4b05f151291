# simulation/engine.py
"""
Moteur de simulation à pas de temps fixe.

À chaque pas:
1. déplacement des nœuds et détection des liens (établissements et ruptures);
2. fin des transferts en cours;
3. expiration des messages dont la durée de vie est écoulée;
4. génération périodique de messages;
5. tick de chaque routeur (au plus un transfert démarré par routeur).
"""
import logging
from dataclasses import dataclass

import numpy as np
from tqdm import tqdm

from config import ProphetSettings
from models.buffer import MessageBuffer
from models.message import Message, MessageKind
from models.node import Node
from models.swarm import Swarm
from protocols.prophet import ProphetRouter
from simulation.metrics import MessageStatsReport
from simulation.mobility import RandomWalk

logger = logging.getLogger(__name__)


class SimClock:
    """Horloge simulée partagée par tous les routeurs (secondes)."""

    def __init__(self, start: float = 0.0):
        self.time = start

    def __call__(self) -> float:
        return self.time

    def advance(self, dt: float):
        self.time += dt


@dataclass
class Transfer:
    message: Message
    sender: int
    receiver: int
    done_at: float


class Simulator:
    """
    Simulation d'un réseau de nœuds mobiles utilisant le routeur PRoPHET orienté contenu.
    """

    def __init__(self, settings: ProphetSettings, scenario: dict, messages: dict, rng=None):
        """
        Initialise la simulation.

        Args:
            settings (ProphetSettings): paramètres du routeur
            scenario (dict): section 'scenario' de CONFIG
            messages (dict): section 'messages' de CONFIG
            rng (numpy.random.Generator, optional): générateur de la simulation.
                Par défaut initialisé avec scenario['seed'].
        """
        self.settings = settings
        self.scenario = scenario
        self.rng = rng if rng is not None else np.random.default_rng(scenario.get('seed'))
        self.clock = SimClock()
        self.dt = scenario.get('update_interval', 1.0)
        self.transmit_speed = scenario.get('transmit_speed', 250000)
        self.message_size = messages.get('size', 500000)
        self.interval = messages.get('interval', 20)
        self.content_ratio = scenario.get('content_ratio', 0.1)

        nodes = []
        for i in range(scenario['num_nodes']):
            movement = RandomWalk(self.rng, scenario.get('world_size', (4500, 4500)),
                                  scenario.get('speed', (0.5, 1.5)))
            router = ProphetRouter(i, settings, self.clock, self.rng,
                                   MessageBuffer(scenario.get('buffer_size')))
            x, y = movement.initial_location(i)
            nodes.append(Node(i, x, y, router=router, movement=movement))
        self.swarm = Swarm(scenario.get('transmit_range', 10), nodes)

        self.links = set()
        self.transfers = {}  # émetteur -> Transfer
        self.report = MessageStatsReport(scenario.get('warmup', 0))
        self.next_generation = self.interval
        self.content_seq = 0
        self.interest_seq = 0

    def router(self, node_id: int) -> ProphetRouter:
        return self.swarm.nodes[node_id].router

    #*************** Liens ****************
    def update_links(self):
        """Détecte les liens établis et rompus depuis le pas précédent."""
        current = self.swarm.contacts()
        for a, b in sorted(self.links - current):
            self.abort_transfers(a, b)
            self.router(a).on_contact(b, False)
            self.router(b).on_contact(a, False)
        for a, b in sorted(current - self.links):
            self.router(a).on_contact(b, True, self.router(b))
            self.router(b).on_contact(a, True, self.router(a))
        self.links = current

    def abort_transfers(self, a: int, b: int):
        for sender, transfer in list(self.transfers.items()):
            if {transfer.sender, transfer.receiver} == {a, b}:
                self.router(transfer.receiver).abort_receive(transfer.message.id)
                self.router(transfer.sender).transfer_done()
                del self.transfers[sender]
                logger.debug("t=%.0f: transfert %s %d->%d interrompu", self.clock(),
                             transfer.message.id, transfer.sender, transfer.receiver)

    #*************** Transferts ****************
    def start_transfer(self, sender: int, command):
        receiver = command.peer
        copy = command.message.replicate()
        self.router(receiver).receive_message(copy, sender)
        self.router(sender).transfer_started(copy.id)
        duration = copy.size / self.transmit_speed if self.transmit_speed else 0.0
        self.transfers[sender] = Transfer(copy, sender, receiver, self.clock() + duration)

    def complete_transfers(self):
        now = self.clock()
        for sender, transfer in list(self.transfers.items()):
            if transfer.done_at > now:
                continue
            receiver = self.router(transfer.receiver)
            message = transfer.message
            if message.kind is MessageKind.CONTENT:
                final_target = transfer.receiver in message.requesters
            else:
                final_target = receiver.has_content(message.content_id)
            arrived = receiver.on_transfer_arrived(message.id, sender)
            self.router(sender).transfer_done()
            del self.transfers[sender]
            self.report_evictions(transfer.receiver)
            if arrived is not None:
                self.report.message_transferred(message, sender, transfer.receiver, final_target, now)

    def report_evictions(self, node_id: int):
        now = self.clock()
        for message in self.router(node_id).drain_evicted():
            self.report.message_deleted(message, node_id, True, now)

    def expire_messages(self):
        now = self.clock()
        for node in self.swarm.nodes:
            for message in node.router.buffer.expire(now):
                self.report.message_deleted(message, node.id, False, now)

    #*************** Génération ****************
    def next_message_id(self):
        """Choisit le prochain identifiant à créer, ou None si les bornes sont atteintes."""
        want_content = self.rng.random() < self.content_ratio
        if (want_content or self.interest_seq >= self.settings.nrof_interests) \
                and self.content_seq < self.settings.nrof_contents:
            self.content_seq += 1
            return f"{MessageKind.CONTENT.value}{self.content_seq}"
        if self.interest_seq < self.settings.nrof_interests:
            self.interest_seq += 1
            return f"{MessageKind.INTEREST.value}{self.interest_seq}"
        return None

    def generate_message(self):
        message_id = self.next_message_id()
        if message_id is None:
            return None
        node = self.swarm.nodes[int(self.rng.integers(len(self.swarm.nodes)))]
        result = node.router.create_message(message_id, self.message_size)
        if not result:
            logger.warning("t=%.0f: création de %s refusée sur %d: %s",
                           self.clock(), message_id, node.id, result.detail)
            return None
        self.report_evictions(node.id)
        self.report.new_message(result, self.clock())
        return result

    #*************** Boucle ****************
    def step(self):
        """Exécute un pas de simulation."""
        self.clock.advance(self.dt)
        self.swarm.move(self.dt)
        self.update_links()
        self.complete_transfers()
        self.expire_messages()

        while self.clock() >= self.next_generation:
            self.generate_message()
            self.next_generation += self.interval

        for node in self.swarm.nodes:
            command = node.router.on_tick()
            if command is not None:
                self.start_transfer(node.id, command)

    def run(self, duration: float = None, progress: bool = False):
        """
        Exécute la simulation.

        Args:
            duration (float, optional): durée simulée. Par défaut scenario['duration'].
            progress (bool): affiche une barre de progression

        Returns:
            Metric: statistiques finales
        """
        duration = duration if duration is not None else self.scenario['duration']
        steps = int(duration / self.dt)
        for _ in tqdm(range(steps), desc="Simulation", disable=not progress):
            self.step()
        return self.report.done()
