"""
Fungible token (in-memory, ERC-20 style)
========================================

Explicit-caller token with balances and allowances:

- ``transfer(caller, to, amount)``
- ``approve(caller, spender, amount)``
- ``transfer_from(caller, owner, to, amount)``  (caller is the spender)
- ``increase_allowance`` / ``decrease_allowance``
- owner-gated ``mint``; holder ``burn``

Events (on the token's own log):
    b"Transfer" {"sender", "to", "value"}
    b"Approval" {"owner", "spender", "value"}

Failures raise :class:`~nfteth.errors.TransferRejected`; the custody core lets
them propagate untouched.

``on_transfer`` is an optional receiver hook invoked after every balance move
(``hook(token, sender, to, amount)``). Tokens with such callbacks are exactly
what makes reentrancy possible, so tests use it to call back into custody.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from ..address import require_address
from ..errors import TransferRejected
from ..events import EVT_APPROVAL, EVT_TRANSFER, EventLog

ZERO_ADDR = b"\x00"
U256_MAX = (1 << 256) - 1

TransferHook = Callable[["FungibleToken", bytes, bytes, int], None]


def _amount(n: Any) -> int:
    if isinstance(n, bool) or not isinstance(n, int) or n < 0 or n > U256_MAX:
        raise TransferRejected("TOKEN:BAD_AMOUNT", amount=repr(n))
    return n


class FungibleToken:
    def __init__(
        self,
        address: bytes,
        name: str,
        symbol: str,
        owner: bytes,
        *,
        decimals: int = 18,
        initial_supply: int = 0,
    ) -> None:
        self.address = require_address(address)
        self.name = name
        self.symbol = symbol.upper()
        self.decimals = max(0, min(36, int(decimals)))
        self.owner = require_address(owner)
        self.events = EventLog()
        self.on_transfer: Optional[TransferHook] = None
        self._balances: Dict[bytes, int] = {}
        self._allowances: Dict[Tuple[bytes, bytes], int] = {}
        self._total = 0
        if initial_supply:
            self._mint_to(self.owner, _amount(initial_supply))

    def __repr__(self) -> str:
        return f"FungibleToken({self.symbol}, 0x{self.address.hex()})"

    # --- views ---------------------------------------------------------------

    def total_supply(self) -> int:
        return self._total

    def balance_of(self, addr: bytes) -> int:
        return self._balances.get(bytes(addr), 0)

    def allowance(self, owner: bytes, spender: bytes) -> int:
        return self._allowances.get((bytes(owner), bytes(spender)), 0)

    # --- mutations -----------------------------------------------------------

    def transfer(self, caller: bytes, to: bytes, amount: int) -> bool:
        caller = require_address(caller)
        to = require_address(to)
        self._move(caller, to, _amount(amount))
        return True

    def approve(self, caller: bytes, spender: bytes, amount: int) -> bool:
        caller = require_address(caller)
        spender = require_address(spender)
        self._set_allowance(caller, spender, _amount(amount))
        return True

    def transfer_from(self, caller: bytes, owner: bytes, to: bytes, amount: int) -> bool:
        """Spender (``caller``) moves ``amount`` from ``owner`` to ``to`` using allowance."""
        caller = require_address(caller)
        owner = require_address(owner)
        to = require_address(to)
        amount = _amount(amount)
        allowed = self.allowance(owner, caller)
        if allowed < amount:
            raise TransferRejected("TOKEN:ALLOWANCE_LOW", owner=owner.hex(), spender=caller.hex())
        if self.balance_of(owner) < amount:
            raise TransferRejected("TOKEN:INSUFFICIENT_BALANCE", owner=owner.hex())
        self._allowances[(owner, caller)] = allowed - amount
        self._move(owner, to, amount)
        return True

    def increase_allowance(self, caller: bytes, spender: bytes, added: int) -> bool:
        caller = require_address(caller)
        spender = require_address(spender)
        new = self.allowance(caller, spender) + _amount(added)
        self._set_allowance(caller, spender, _amount(new))
        return True

    def decrease_allowance(self, caller: bytes, spender: bytes, subtracted: int) -> bool:
        caller = require_address(caller)
        spender = require_address(spender)
        cur = self.allowance(caller, spender)
        if cur < _amount(subtracted):
            raise TransferRejected("TOKEN:ALLOWANCE_LOW", owner=caller.hex(), spender=spender.hex())
        self._set_allowance(caller, spender, cur - subtracted)
        return True

    def mint(self, caller: bytes, to: bytes, amount: int) -> bool:
        if require_address(caller) != self.owner:
            raise TransferRejected("TOKEN:NOT_OWNER", caller=caller.hex())
        self._mint_to(require_address(to), _amount(amount))
        return True

    def burn(self, caller: bytes, amount: int) -> bool:
        caller = require_address(caller)
        amount = _amount(amount)
        bal = self.balance_of(caller)
        if bal < amount:
            raise TransferRejected("TOKEN:INSUFFICIENT_BALANCE", owner=caller.hex())
        self._balances[caller] = bal - amount
        self._total -= amount
        self.events.emit(EVT_TRANSFER, {"sender": caller, "to": ZERO_ADDR, "value": amount})
        return True

    # --- journal hooks -------------------------------------------------------

    def snapshot(self) -> Any:
        return (dict(self._balances), dict(self._allowances), self._total, self.events.snapshot())

    def restore(self, snap: Any) -> None:
        balances, allowances, total, ev = snap
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        self._total = total
        self.events.restore(ev)

    # --- internals -----------------------------------------------------------

    def _set_allowance(self, owner: bytes, spender: bytes, amount: int) -> None:
        self._allowances[(owner, spender)] = amount
        self.events.emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "value": amount})

    def _move(self, sender: bytes, to: bytes, amount: int) -> None:
        bal = self.balance_of(sender)
        if bal < amount:
            raise TransferRejected("TOKEN:INSUFFICIENT_BALANCE", owner=sender.hex())
        self._balances[sender] = bal - amount
        self._balances[to] = self.balance_of(to) + amount
        self.events.emit(EVT_TRANSFER, {"sender": sender, "to": to, "value": amount})
        if self.on_transfer is not None:
            self.on_transfer(self, sender, to, amount)

    def _mint_to(self, to: bytes, amount: int) -> None:
        if amount == 0:
            return
        if self._total + amount > U256_MAX:
            raise TransferRejected("TOKEN:SUPPLY_OVERFLOW")
        self._total += amount
        self._balances[to] = self.balance_of(to) + amount
        self.events.emit(EVT_TRANSFER, {"sender": ZERO_ADDR, "to": to, "value": amount})


__all__ = ["FungibleToken", "TransferHook", "ZERO_ADDR"]
