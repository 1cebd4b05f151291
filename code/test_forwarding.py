#!/usr/bin/env python3
# test_forwarding.py
"""
Tests de la politique de transfert PRoPHET orientée contenu.
"""
import pytest

from protocols.forwarding import ForwardingPolicy, average_rule


@pytest.fixture
def pair(make_router):
    """Deux routeurs compatibles en contact, tables remises à zéro après la poignée de main."""
    local, peer = make_router(0), make_router(1)
    local.on_contact(1, True, peer)
    peer.on_contact(0, True, local)
    for router in (local, peer):
        router.peer_preds.preds = {}
        router.content_preds.cpreds = {}
    return local, peer


def test_content_forwarded_when_one_requester_is_better_placed(pair, content):
    local, peer = pair
    local.buffer.add(content("C1", requesters={10, 11}))
    local.peer_preds.preds = {10: 0.3, 11: 0.6}
    peer.peer_preds.preds = {10: 0.5, 11: 0.1}

    command = local.on_tick()

    assert command is not None
    assert command.message.id == "C1"
    assert command.peer == 1


def test_conjunctive_rule_requires_every_requester(make_router, content):
    local, peer = make_router(0, requester_rule='all'), make_router(1)
    local.on_contact(1, True, peer)
    local.buffer.add(content("C1", requesters={10, 11}))
    local.peer_preds.preds = {10: 0.3, 11: 0.6}
    peer.peer_preds.preds = {10: 0.5, 11: 0.1}

    assert local.on_tick() is None

    peer.peer_preds.preds = {10: 0.5, 11: 0.6}
    assert local.on_tick().message.id == "C1"


def test_average_rule():
    local = {10: 0.3, 11: 0.6}.get
    assert average_rule({10, 11}, lambda r: local(r, 0), {10: 0.5, 11: 0.5}.get) is True
    assert average_rule({10, 11}, lambda r: local(r, 0), {10: 0.1, 11: 0.2}.get) is False
    assert average_rule({10, 11}, lambda r: local(r, 0), lambda r: 0.0) is False


def test_average_rule_needs_local_knowledge():
    peer = {10: 0.4}.get
    assert average_rule({10}, lambda r: 0.0, peer) is False


def test_average_rule_still_delivers_to_requesting_peer(make_router, content):
    local, peer = make_router(0, requester_rule='average'), make_router(1)
    local.on_contact(1, True, peer)
    local.peer_preds.preds = {}
    local.buffer.add(content("C1", requesters={10}))
    peer.peer_preds.preds = {10: 0.4}

    assert local.on_tick() is None

    local.buffer.get("C1").requesters.add(1)
    assert local.on_tick().message.id == "C1"


def test_content_not_forwarded_when_peer_is_worse(pair, content):
    local, peer = pair
    local.buffer.add(content("C1", requesters={10}))
    local.peer_preds.preds = {10: 0.6}
    peer.peer_preds.preds = {10: 0.5}
    assert local.on_tick() is None


def test_content_forwarded_to_requesting_peer(pair, content):
    local, peer = pair
    local.buffer.add(content("C1", requesters={1, 10}))
    local.peer_preds.preds = {10: 0.9}
    assert local.on_tick().peer == 1


def test_content_skipped_when_peer_already_holds_it(pair, content):
    local, peer = pair
    local.buffer.add(content("C1", requesters={10}))
    peer.buffer.add(content("C1", requesters={10}))
    peer.peer_preds.preds = {10: 0.9}
    assert local.on_tick() is None


def test_message_without_requesters_is_never_forwarded(pair, content):
    local, peer = pair
    local.buffer.add(content("C1"))
    peer.peer_preds.preds = {10: 0.9}
    assert local.on_tick() is None


def test_interest_requires_strictly_better_content_predictability(pair, interest):
    local, peer = pair
    local.buffer.add(interest("I1", "C7", requesters={0}))
    local.content_preds.cpreds = {"C7": 0.2}

    peer.content_preds.cpreds = {"C7": 0.4}
    command = local.on_tick()
    assert command.message.id == "I1"

    peer.content_preds.cpreds = {"C7": 0.2}
    assert local.on_tick() is None


def test_interest_skipped_when_peer_works_on_content(pair, content, interest):
    local, peer = pair
    local.buffer.add(interest("I1", "C7", requesters={0}))
    peer.content_preds.cpreds = {"C7": 0.9}

    peer.buffer.add(interest("I2", "C7", requesters={1}))
    assert local.on_tick() is None

    peer.buffer.remove("I2")
    peer.buffer.add(content("C7"))
    assert local.on_tick() is None


def test_busy_peer_is_skipped(pair, content):
    local, peer = pair
    local.buffer.add(content("C1", requesters={10}))
    peer.peer_preds.preds = {10: 0.9}
    peer.transfer_started("X")
    assert local.on_tick() is None


def test_local_transfer_in_progress_blocks_tick(pair, content):
    local, peer = pair
    local.buffer.add(content("C1", requesters={1}))
    local.transfer_started("C1")
    assert local.on_tick() is None


def test_single_command_follows_buffer_order(pair, content):
    local, peer = pair
    local.buffer.add(content("C2", requesters={10}))
    local.buffer.add(content("C1", requesters={10}))
    peer.peer_preds.preds = {10: 0.9}

    command = local.on_tick()
    assert command.message.id == "C2"


def test_contacts_evaluated_in_order(make_router, content):
    local, first, second = make_router(0), make_router(1), make_router(2)
    local.on_contact(1, True, first)
    local.on_contact(2, True, second)
    local.buffer.add(content("C1", requesters={10}))
    local.peer_preds.preds = {10: 0.1}
    first.peer_preds.preds = {10: 0.2}
    second.peer_preds.preds = {10: 0.9}

    assert local.on_tick().peer == 1


def test_incompatible_peer_is_ignored(make_router, passive_router, content):
    local = make_router(0)
    passive = passive_router(5)
    local.on_contact(5, True, passive)
    local.buffer.add(content("C1", requesters={10}))
    assert local.on_tick() is None


def test_unknown_rule_rejected():
    with pytest.raises(ValueError):
        ForwardingPolicy('best')
