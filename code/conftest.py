# conftest.py
"""
Fixtures partagées des tests du routeur PRoPHET orienté contenu.
"""
import numpy as np
import pytest

from config import ProphetSettings
from models.message import Message, MessageKind
from protocols.base import DTNRouter
from protocols.prophet import ProphetRouter
from simulation.engine import SimClock


class PassiveRouter(DTNRouter):
    """Routeur qui n'expose pas le protocole de probabilités."""

    def on_tick(self):
        return None

    def create_message(self, message_id, size=0):
        return None


@pytest.fixture
def clock():
    return SimClock()


@pytest.fixture
def rng():
    """Générateur initialisé pour des tests reproductibles"""
    return np.random.default_rng(42)


@pytest.fixture
def settings():
    return ProphetSettings(seconds_in_time_unit=30)


@pytest.fixture
def make_router(settings, clock, rng):
    """Fabrique de routeurs partageant la même horloge."""
    def _make(node_id, **overrides):
        s = settings
        if overrides:
            s = ProphetSettings(**{**settings.__dict__, **overrides})
        return ProphetRouter(node_id, s, clock, rng)
    return _make


def make_content(content_id, requesters=(), source=0):
    seq = int(content_id[1:])
    return Message(id=content_id, kind=MessageKind.CONTENT, seq=seq, source=source,
                   size=100, created_at=0.0, content_id=content_id, ttl=1440,
                   requesters=set(requesters))


def make_interest(interest_id, target, requesters=(), source=0):
    seq = int(interest_id[1:])
    return Message(id=interest_id, kind=MessageKind.INTEREST, seq=seq, source=source,
                   size=100, created_at=0.0, content_id=target, ttl=1440,
                   requesters=set(requesters))


@pytest.fixture(name='content')
def content_factory():
    return make_content


@pytest.fixture(name='interest')
def interest_factory():
    return make_interest


@pytest.fixture
def passive_router(clock):
    """Fabrique de routeurs incompatibles avec PRoPHET."""
    def _make(node_id):
        return PassiveRouter(node_id, clock)
    return _make
