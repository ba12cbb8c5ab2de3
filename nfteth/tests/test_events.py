from __future__ import annotations

import pytest

from nfteth.errors import AuthorizationError, CustodyError, NotHolderError, TokenError, UnknownContractError
from nfteth.events import EVT_WITHDRAWN, EventLog


def test_emit_validates_keys_and_values():
    log = EventLog()
    with pytest.raises(TypeError):
        log.emit("Minted", {})
    with pytest.raises(ValueError):
        log.emit(b"Minted", {"bad key": 1})
    with pytest.raises(TypeError):
        log.emit(b"Minted", {"token_id": 1.5})
    assert len(log) == 0


def test_receipt_view_is_hex():
    log = EventLog()
    log.emit(EVT_WITHDRAWN, {"to": b"\x01\x02", "token": bytearray(b"\xff"), "amount": 7})
    assert log.for_receipt() == [
        {"name": "0x" + EVT_WITHDRAWN.hex(), "args": {"to": "0x0102", "token": "0xff", "amount": 7}}
    ]
    assert log.last().to_json()["name"] == "Withdrawn"


def test_snapshot_restore_truncates():
    log = EventLog()
    log.emit(b"A")
    mark = log.snapshot()
    log.emit(b"B")
    log.emit(b"C")
    log.restore(mark)
    assert [e.name for e in log] == [b"A"]


def test_error_shapes():
    e = NotHolderError(context={"token_id": 3})
    assert isinstance(e, AuthorizationError)
    assert e.to_dict() == {"code": "OnlyNftOwner", "message": "only certificate holder", "context": {"token_id": 3}}
    assert str(e).startswith("OnlyNftOwner: only certificate holder")

    t = UnknownContractError("no contract at address", address="0x01")
    assert not isinstance(t, CustodyError)
    assert isinstance(t, TokenError)
    assert t.to_dict()["code"] == "UnknownContract"
