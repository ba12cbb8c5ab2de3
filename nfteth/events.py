"""
nfteth.events: per-contract event logs.

Each deployed contract owns one :class:`EventLog`. Names are ``bytes`` and
argument values are restricted to bytes, ints, bools and lists of those, which
keeps them trivially JSON-renderable for receipts and CLI output.

Canonical receipt view (``EventLog.for_receipt``):

    {"name": "0x" + hex(name), "args": {key: value}}

with bytes values rendered as 0x-hex. The log participates in the journal:
events emitted by a call that later fails are discarded on revert.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64

_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

EVT_ACCEPTED_TOKENS = b"AcceptedTokens"
EVT_MINTED = b"Minted"
EVT_WITHDRAWN = b"Withdrawn"
EVT_OWNERSHIP_TRANSFERRED = b"OwnershipTransferred"
EVT_TRANSFER = b"Transfer"
EVT_APPROVAL = b"Approval"
EVT_APPROVAL_FOR_ALL = b"ApprovalForAll"


@dataclass(frozen=True)
class Event:
    """An emitted event."""

    name: bytes
    args: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name.decode("ascii", "replace"), "args": {k: _jsonify(v) for k, v in self.args.items()}}


def _jsonify(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    if isinstance(v, (list, tuple)):
        return [_jsonify(x) for x in v]
    return v


def _check_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, (bool, int)):
        return value
    if isinstance(value, (list, tuple)):
        return [_check_value(x) for x in value]
    raise TypeError(f"unsupported event arg type: {type(value).__name__}")


class EventLog:
    """Append-only event list with snapshot/restore for the journal."""

    def __init__(self) -> None:
        self._events: List[Event] = []

    def emit(self, name: bytes, args: Optional[Mapping[str, Any]] = None) -> Event:
        if not isinstance(name, (bytes, bytearray)) or not name:
            raise TypeError("event name must be non-empty bytes")
        if len(name) > MAX_EVENT_NAME_BYTES:
            raise ValueError("event name too long")
        checked: Dict[str, Any] = {}
        for k, v in (args or {}).items():
            if not isinstance(k, str) or len(k) > MAX_KEY_LEN or not _KEY_RE.match(k):
                raise ValueError(f"invalid event key: {k!r}")
            checked[k] = _check_value(v)
        ev = Event(bytes(name), checked)
        self._events.append(ev)
        return ev

    def __iter__(self) -> Iterator[Event]:
        return iter(tuple(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def named(self, name: bytes) -> List[Event]:
        return [e for e in self._events if e.name == name]

    def last(self, name: Optional[bytes] = None) -> Optional[Event]:
        for ev in reversed(self._events):
            if name is None or ev.name == name:
                return ev
        return None

    def for_receipt(self) -> List[Dict[str, Any]]:
        return [
            {"name": "0x" + ev.name.hex(), "args": {k: _jsonify(v) for k, v in ev.args.items()}}
            for ev in self._events
        ]

    # journal hooks

    def snapshot(self) -> int:
        return len(self._events)

    def restore(self, snap: int) -> None:
        del self._events[snap:]

    def clear(self) -> None:
        self._events.clear()


__all__ = [
    "Event",
    "EventLog",
    "EVT_ACCEPTED_TOKENS",
    "EVT_MINTED",
    "EVT_WITHDRAWN",
    "EVT_OWNERSHIP_TRANSFERRED",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "EVT_APPROVAL_FOR_ALL",
]
