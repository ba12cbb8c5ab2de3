from __future__ import annotations

import pytest

from nfteth.events import EventLog
from nfteth.journal import Journal
from nfteth.state import CustodyState


class _Box:
    def __init__(self) -> None:
        self.value = 0

    def snapshot(self):
        return self.value

    def restore(self, snap):
        self.value = snap


def test_commit_keeps_changes():
    j, box = Journal(), _Box()
    j.register(box)
    with j.atomic():
        box.value = 5
    assert box.value == 5
    assert j.depth() == 0


def test_exception_reverts_and_propagates():
    j, box = Journal(), _Box()
    j.register(box)
    with pytest.raises(KeyError):
        with j.atomic("boom"):
            box.value = 9
            raise KeyError("x")
    assert box.value == 0
    assert j.depth() == 0


def test_nested_revert_keeps_outer_changes():
    j, box = Journal(), _Box()
    j.register(box)
    with j.atomic() as outer:
        box.value = 1
        with pytest.raises(ValueError):
            with j.atomic() as inner:
                assert inner == outer + 1
                box.value = 2
                raise ValueError
        assert box.value == 1
    assert box.value == 1


def test_register_rules():
    j = Journal()
    with pytest.raises(TypeError):
        j.register(object())
    box = _Box()
    j.register(box)
    j.register(box)
    j.begin()
    with pytest.raises(RuntimeError):
        j.register(_Box())
    j.commit()
    with pytest.raises(RuntimeError):
        j.commit()
    with pytest.raises(RuntimeError):
        j.revert()


def test_custody_state_and_event_log_are_journaled():
    j = Journal()
    state = CustodyState(administrator=b"\x01" * 20)
    events = EventLog()
    j.register(state)
    j.register(events)
    with pytest.raises(RuntimeError):
        with j.atomic():
            state.counter += 3
            state.accepted[b"\x02" * 20] = True
            events.emit(b"Minted", {"token_id": 1})
            raise RuntimeError
    assert state.counter == 1
    assert state.accepted == {}
    assert len(events) == 0


def test_token_failure_rolls_back_every_contract(vault, token, alice):
    token.approve(alice, vault.address, 100)
    vault.deposit(alice, token.address, 40)

    def hook(tok, sender, to, value):
        raise RuntimeError("token exploded")

    token.on_transfer = hook
    snapshot = (token.balance_of(alice), token.balance_of(vault.address), token.allowance(alice, vault.address))
    with pytest.raises(RuntimeError):
        vault.deposit(alice, token.address, 10)
    token.on_transfer = None

    assert (token.balance_of(alice), token.balance_of(vault.address), token.allowance(alice, vault.address)) == snapshot
    assert vault.next_id() == 2
    assert vault.balance_of(alice) == 1
