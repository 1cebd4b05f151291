#!/usr/bin/env python3
# test_handshake.py
"""
Tests de la poignée de main exécutée à l'établissement d'un lien.
"""
import pytest

from protocols.handshake import HandshakeError, HandshakeState


def test_link_up_runs_every_step(make_router, content, interest):
    a, b = make_router(0), make_router(1)
    b.peer_preds.preds = {2: 0.8, 0: 0.5}
    a.buffer.add(content("C1", requesters={5}))
    b.buffer.add(content("C1", requesters={6}))
    b.buffer.add(content("C3"))
    b.buffer.add(interest("I4", "C1", requesters={1}))

    result = a.on_contact(1, True, b)

    assert result.ok
    assert result.transitive_merged
    assert result.contents_observed == 2
    assert result.requesters_merged == 2
    assert a.get_peer_delivery_predictability(1) == pytest.approx(0.75)
    assert a.get_peer_delivery_predictability(2) == pytest.approx(0.75 * 0.8 * 0.25)
    assert a.get_content_predictability("C3") == pytest.approx(0.75)
    assert a.buffer.get("C1").requesters == {1, 5, 6}
    assert a.connections[1].compatible

    assert a.handshake.history == [
        HandshakeState.CONTACT_OBSERVED,
        HandshakeState.TRANSITIVELY_MERGED,
        HandshakeState.CONTENT_UPDATED,
        HandshakeState.REQUESTERS_MERGED,
    ]
    assert a.handshake.state is HandshakeState.IDLE


def test_handshake_leaves_peer_untouched(make_router, content):
    a, b = make_router(0), make_router(1)
    a.buffer.add(content("C1", requesters={5}))
    b.buffer.add(content("C1", requesters={6}))

    a.on_contact(1, True, b)

    assert b.buffer.get("C1").requesters == {6}
    assert b.export_snapshot() == {}


def test_capability_mismatch_keeps_direct_observation(make_router, passive_router, content):
    a, other = make_router(0), passive_router(7)
    other.buffer.add(content("C2", requesters={9}))

    result = a.on_contact(7, True, other)

    assert result.error is HandshakeError.CAPABILITY_MISMATCH
    assert not result.transitive_merged
    assert a.get_peer_delivery_predictability(7) == pytest.approx(0.75)
    assert a.get_content_predictability("C2") == 0
    assert not a.connections[7].compatible
    assert a.handshake.history == [HandshakeState.CONTACT_OBSERVED]


def test_link_down_keeps_predictabilities(make_router, clock):
    a, b = make_router(0), make_router(1)
    a.on_contact(1, True, b)
    assert a.on_contact(1, False) is None

    assert 1 not in a.connections
    assert a.get_peer_delivery_predictability(1) == pytest.approx(0.75)


def test_repeated_contacts_reinforce(make_router, clock):
    a, b = make_router(0), make_router(1)
    a.on_contact(1, True, b)
    a.on_contact(1, False)
    clock.advance(30)
    a.on_contact(1, True, b)

    aged = 0.75 * 0.98
    assert a.get_peer_delivery_predictability(1) == pytest.approx(aged + (1 - aged) * 0.75)


def test_link_down_aborts_incoming_from_peer(make_router, content):
    a, b = make_router(0), make_router(1)
    a.on_contact(1, True, b)
    a.receive_message(content("C1"), 1)
    assert a.is_transferring()

    a.on_contact(1, False)
    assert not a.is_transferring()


def test_routing_info_lists_tables(make_router, clock):
    a, b = make_router(0), make_router(1)
    a.create_message("C1", 10)
    a.on_contact(1, True, b)

    info = a.routing_info()

    assert info[0] == "1 delivery prediction(s)"
    assert info[1] == "1 : 0.750000"
    assert info[2] == "1 content prediction(s)"
    assert info[3] == "C1 : 1.000000"
