# simulation/metrics.py
import math
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd
from tabulate import tabulate

from models.message import MessageKind


@dataclass
class Metric:
    """Statistiques de relais des messages d'une simulation.

    Attributes:
        ContentsCreated: Nombre de contenus créés
        ContentsRelayed: Nombre de transferts de contenus
        InterestsCreated: Nombre d'intérêts créés
        InterestsRelayed: Nombre de transferts d'intérêts
        ContentsDelivered: Nombre de contenus reçus par un demandeur
        InterestsDelivered: Nombre d'intérêts reçus par un détenteur du contenu
        ContentDeliveryProb: Contenus livrés par intérêt créé
        InterestDeliveryProb: Intérêts livrés par intérêt créé
        ContentOverhead: (relais - livraisons) / livraisons pour les contenus
        InterestOverhead: (relais - livraisons) / livraisons pour les intérêts
        ContentLatency: Latence moyenne de livraison des contenus (secondes)
        InterestLatency: Latence moyenne de livraison des intérêts (secondes)
        MessagesDropped: Nombre de messages supprimés faute de place
    """
    ContentsCreated: int
    ContentsRelayed: int
    InterestsCreated: int
    InterestsRelayed: int
    ContentsDelivered: int
    InterestsDelivered: int
    ContentDeliveryProb: float
    InterestDeliveryProb: float
    ContentOverhead: float
    InterestOverhead: float
    ContentLatency: float
    InterestLatency: float
    MessagesDropped: int


def _ratio(num, den, default):
    return num / den if den > 0 else default


class MessageStatsReport:
    """
    Collecte les événements de messages et calcule les statistiques de relais.
    Les messages créés pendant la période de chauffe sont ignorés.
    """

    def __init__(self, warmup: float = 0.0):
        """
        Args:
            warmup (float): durée de la période de chauffe (secondes)
        """
        self.warmup = warmup
        self.warmup_ids = set()
        self.creation_times = {}
        self.created = {MessageKind.CONTENT: 0, MessageKind.INTEREST: 0}
        self.relayed = {MessageKind.CONTENT: 0, MessageKind.INTEREST: 0}
        self.delivered = {MessageKind.CONTENT: 0, MessageKind.INTEREST: 0}
        self.latencies = {MessageKind.CONTENT: [], MessageKind.INTEREST: []}
        self.dropped = 0
        self.events = []  # Journal des événements (pour l'export et les tracés)

    def new_message(self, message, now: float):
        if now < self.warmup:
            self.warmup_ids.add(message.id)
            return
        self.creation_times[message.id] = now
        self.created[message.kind] += 1
        self.events.append({'time': now, 'event': 'created', 'id': message.id,
                            'kind': message.kind.name, 'node': message.source})

    def message_transferred(self, message, from_node, to_node, final_target: bool, now: float):
        if message.id in self.warmup_ids:
            return
        self.relayed[message.kind] += 1
        event = 'delivered' if final_target else 'relayed'
        if final_target:
            self.delivered[message.kind] += 1
            created_at = self.creation_times.get(message.id, message.created_at)
            self.latencies[message.kind].append(now - created_at)
        self.events.append({'time': now, 'event': event, 'id': message.id,
                            'kind': message.kind.name, 'from': from_node, 'to': to_node})

    def message_deleted(self, message, where, dropped: bool, now: float):
        if message.id in self.warmup_ids:
            return
        if dropped:
            self.dropped += 1
            self.events.append({'time': now, 'event': 'dropped', 'id': message.id,
                                'kind': message.kind.name, 'node': where})

    def done(self) -> Metric:
        """
        Calcule les statistiques finales.

        La probabilité de livraison des contenus est rapportée au nombre d'intérêts
        créés: chaque intérêt représente une demande à satisfaire.

        Returns:
            Metric: statistiques agrégées (NaN lorsque non calculables)
        """
        c, i = MessageKind.CONTENT, MessageKind.INTEREST
        latency = {k: float(np.mean(v)) if v else math.nan for k, v in self.latencies.items()}
        return Metric(
            ContentsCreated=self.created[c],
            ContentsRelayed=self.relayed[c],
            InterestsCreated=self.created[i],
            InterestsRelayed=self.relayed[i],
            ContentsDelivered=self.delivered[c],
            InterestsDelivered=self.delivered[i],
            ContentDeliveryProb=_ratio(self.delivered[c], self.created[i], 0.0),
            InterestDeliveryProb=_ratio(self.delivered[i], self.created[i], 0.0),
            ContentOverhead=_ratio(self.relayed[c] - self.delivered[c], self.delivered[c], math.nan),
            InterestOverhead=_ratio(self.relayed[i] - self.delivered[i], self.delivered[i], math.nan),
            ContentLatency=latency[c],
            InterestLatency=latency[i],
            MessagesDropped=self.dropped,
        )

    def events_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.events, columns=['time', 'event', 'id', 'kind', 'node', 'from', 'to'])

    def summary_table(self) -> str:
        """Formate les statistiques finales sous forme de tableau."""
        rows = [[name, f"{value:.4f}" if isinstance(value, float) else value]
                for name, value in asdict(self.done()).items()]
        return tabulate(rows, headers=["Métrique", "Valeur"], tablefmt="grid")
