"""
Certificate registry (in-memory, ERC-721 style)
===============================================

Ownership bookkeeping for certificates: who holds which id, per-id approvals
and operator approvals. The custody contract owns one registry and only uses
``mint``, ``burn`` and ``owner_of``; the approval/transfer surface is what lets
a holder hand the right to redeem to somebody else.

Events (on the registry's log):
    b"Transfer"       {"sender", "to", "token_id"}   (sender = 0x00 on mint, to = 0x00 on burn)
    b"Approval"       {"owner", "approved", "token_id"}
    b"ApprovalForAll" {"owner", "operator", "approved"}

``owner_of`` on an id that was never minted or has been burned raises
:class:`~nfteth.errors.NoSuchCertificateError` ("invalid token ID").
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Set, Tuple

from ..address import require_address
from ..errors import NoSuchCertificateError, TransferRejected
from ..events import EVT_APPROVAL, EVT_APPROVAL_FOR_ALL, EVT_TRANSFER, EventLog

ZERO_ADDR = b"\x00"


class CertificateRegistry:
    def __init__(self, name: str, symbol: str, *, events: Optional[EventLog] = None) -> None:
        self.name = name
        self.symbol = symbol
        self.events = events if events is not None else EventLog()
        self._owners: Dict[int, bytes] = {}
        self._balances: Dict[bytes, int] = {}
        self._approvals: Dict[int, bytes] = {}
        self._operators: Set[Tuple[bytes, bytes]] = set()

    # --- views ---------------------------------------------------------------

    def exists(self, token_id: int) -> bool:
        return token_id in self._owners

    def owner_of(self, token_id: int) -> bytes:
        owner = self._owners.get(token_id)
        if owner is None:
            raise NoSuchCertificateError(context={"token_id": token_id})
        return owner

    def balance_of(self, owner: bytes) -> int:
        return self._balances.get(require_address(owner), 0)

    def get_approved(self, token_id: int) -> Optional[bytes]:
        self.owner_of(token_id)
        return self._approvals.get(token_id)

    def is_approved_for_all(self, owner: bytes, operator: bytes) -> bool:
        return (bytes(owner), bytes(operator)) in self._operators

    def tokens_of(self, owner: bytes) -> list[int]:
        owner = bytes(owner)
        return sorted(tid for tid, o in self._owners.items() if o == owner)

    # --- custody-facing primitives -------------------------------------------

    def mint(self, to: bytes, token_id: int) -> None:
        to = require_address(to)
        if token_id in self._owners:
            raise TransferRejected("ERC721: token already minted", token_id=token_id)
        self._owners[token_id] = to
        self._balances[to] = self._balances.get(to, 0) + 1
        self.events.emit(EVT_TRANSFER, {"sender": ZERO_ADDR, "to": to, "token_id": token_id})

    def burn(self, token_id: int) -> None:
        owner = self.owner_of(token_id)
        self._approvals.pop(token_id, None)
        del self._owners[token_id]
        self._balances[owner] -= 1
        self.events.emit(EVT_TRANSFER, {"sender": owner, "to": ZERO_ADDR, "token_id": token_id})

    # --- holder-facing transfer surface --------------------------------------

    def approve(self, caller: bytes, approved: bytes, token_id: int) -> None:
        caller = require_address(caller)
        owner = self.owner_of(token_id)
        if caller != owner and not self.is_approved_for_all(owner, caller):
            raise TransferRejected("ERC721: approve caller is not token owner or approved for all")
        if approved == owner:
            raise TransferRejected("ERC721: approval to current owner")
        self._approvals[token_id] = require_address(approved)
        self.events.emit(EVT_APPROVAL, {"owner": owner, "approved": approved, "token_id": token_id})

    def set_approval_for_all(self, caller: bytes, operator: bytes, approved: bool) -> None:
        caller = require_address(caller)
        operator = require_address(operator)
        if caller == operator:
            raise TransferRejected("ERC721: approve to caller")
        if approved:
            self._operators.add((caller, operator))
        else:
            self._operators.discard((caller, operator))
        self.events.emit(EVT_APPROVAL_FOR_ALL, {"owner": caller, "operator": operator, "approved": bool(approved)})

    def transfer_from(self, caller: bytes, sender: bytes, to: bytes, token_id: int) -> None:
        caller = require_address(caller)
        sender = require_address(sender)
        to = require_address(to)
        owner = self.owner_of(token_id)
        if owner != sender:
            raise TransferRejected("ERC721: transfer from incorrect owner", token_id=token_id)
        if not (caller == owner or self._approvals.get(token_id) == caller or self.is_approved_for_all(owner, caller)):
            raise TransferRejected("ERC721: caller is not token owner or approved", token_id=token_id)
        self._approvals.pop(token_id, None)
        self._balances[owner] -= 1
        self._balances[to] = self._balances.get(to, 0) + 1
        self._owners[token_id] = to
        self.events.emit(EVT_TRANSFER, {"sender": owner, "to": to, "token_id": token_id})

    # --- journal hooks -------------------------------------------------------

    def snapshot(self) -> Any:
        return (
            dict(self._owners),
            dict(self._balances),
            dict(self._approvals),
            set(self._operators),
            self.events.snapshot(),
        )

    def restore(self, snap: Any) -> None:
        owners, balances, approvals, operators, ev = snap
        self._owners = dict(owners)
        self._balances = dict(balances)
        self._approvals = dict(approvals)
        self._operators = set(operators)
        self.events.restore(ev)


__all__ = ["CertificateRegistry"]
