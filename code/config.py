# config.py
from dataclasses import dataclass

# Configuration centralisée pour tout le projet
CONFIG = {
    'outdir': '../data_logs',
    'prophet': {
        'seconds_in_time_unit': 30,  # Nombre de secondes par unité de temps pour le vieillissement
        'beta': 0.25,                # Facteur de transitivité
        'requester_rule': 'any',     # Règle de comparaison des demandeurs: any, all, average
    },
    'messages': {
        'nrof_contents': 100,        # Borne des numéros de séquence des contenus (C1..C100)
        'nrof_interests': 1000,      # Borne des numéros de séquence des intérêts (I1..I1000)
        'interval': 20,              # Secondes entre deux générations de message
        'size': 500000,              # Taille d'un message (octets)
        'ttl': {                     # Durées de vie, en minutes
            'content': 1440,
            'content_delivered': 300,
            'interest': 1440,
            'interest_transferred': 60,
            'expire': 1,             # Expiration quasi immédiate
        },
    },
    'scenario': {
        'num_nodes': 120,
        'duration': 43200,           # Durée simulée (secondes)
        'update_interval': 1.0,      # Pas de temps du moteur (secondes)
        'warmup': 0,                 # Les messages créés avant ce temps sont ignorés
        'world_size': (4500, 4500),  # Dimensions de la zone (mètres)
        'transmit_range': 10,        # Portée radio (mètres)
        'transmit_speed': 250000,    # Débit (octets/seconde)
        'buffer_size': 50000000,     # Capacité des buffers (octets)
        'speed': (0.5, 1.5),         # Vitesse de marche min/max (m/s)
        'content_ratio': 0.1,        # Part des générations consacrée aux contenus
        'seed': 1,
    },
}

# Facteur de conversion des TTL (minutes) en secondes simulées
SECONDS_PER_TTL_UNIT = 60

REQUESTER_RULES = ('any', 'all', 'average')


class SettingsError(ValueError):
    """Erreur levée lorsqu'une section de configuration est invalide ou incomplète."""


@dataclass(frozen=True)
class ProphetSettings:
    """
    Paramètres validés du routeur PRoPHET orienté contenu.

    Attributes:
        seconds_in_time_unit: Secondes par unité de temps de vieillissement (obligatoire)
        beta: Facteur de transitivité, entre 0 et 1
        nrof_contents: Borne des numéros de séquence des contenus
        nrof_interests: Borne des numéros de séquence des intérêts
        content_ttl: TTL d'un contenu à sa création (minutes)
        content_delivered_ttl: TTL d'un contenu après livraison (minutes)
        interest_ttl: TTL d'un intérêt à sa création (minutes)
        interest_transferred_ttl: TTL d'un intérêt après transfert (minutes)
        expire_ttl: TTL d'expiration quasi immédiate (minutes)
        requester_rule: Règle de comparaison des demandeurs active
    """
    seconds_in_time_unit: float
    beta: float = 0.25
    nrof_contents: int = 100
    nrof_interests: int = 1000
    content_ttl: int = 1440
    content_delivered_ttl: int = 300
    interest_ttl: int = 1440
    interest_transferred_ttl: int = 60
    expire_ttl: int = 1
    requester_rule: str = 'any'

    def __post_init__(self):
        if self.seconds_in_time_unit is None or self.seconds_in_time_unit <= 0:
            raise SettingsError("seconds_in_time_unit doit être strictement positif")
        if not 0.0 <= self.beta <= 1.0:
            raise SettingsError(f"beta doit être compris entre 0 et 1 (reçu {self.beta})")
        if self.nrof_contents < 1 or self.nrof_interests < 1:
            raise SettingsError("les bornes de contenus et d'intérêts doivent être >= 1")
        if self.requester_rule not in REQUESTER_RULES:
            raise SettingsError(f"règle de demandeurs inconnue: {self.requester_rule!r}")

    @classmethod
    def from_config(cls, prophet: dict, messages: dict = None):
        """
        Construit les paramètres à partir des sections 'prophet' et 'messages' de CONFIG.

        Args:
            prophet (dict): Section de configuration du routeur
            messages (dict, optional): Section de configuration des messages

        Returns:
            ProphetSettings: les paramètres validés

        Raises:
            SettingsError: si seconds_in_time_unit est absent ou si une valeur est invalide
        """
        if 'seconds_in_time_unit' not in prophet:
            raise SettingsError("paramètre obligatoire manquant: seconds_in_time_unit")
        messages = messages or {}
        ttl = messages.get('ttl', {})
        return cls(
            seconds_in_time_unit=prophet['seconds_in_time_unit'],
            beta=prophet.get('beta', 0.25),
            nrof_contents=messages.get('nrof_contents', 100),
            nrof_interests=messages.get('nrof_interests', 1000),
            content_ttl=ttl.get('content', 1440),
            content_delivered_ttl=ttl.get('content_delivered', 300),
            interest_ttl=ttl.get('interest', 1440),
            interest_transferred_ttl=ttl.get('interest_transferred', 60),
            expire_ttl=ttl.get('expire', 1),
            requester_rule=prophet.get('requester_rule', 'any'),
        )
