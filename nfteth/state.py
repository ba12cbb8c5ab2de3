"""
nfteth.state: the custody contract's own state.

A single mutable :class:`CustodyState` is created per custody contract and
passed by reference to every whitelist, guard and ledger function. There is no
module-level state: two contracts in one process never share a counter.

Layout
------
- ``administrator``: privileged identity, ``None`` once renounced.
- ``counter``: next certificate id; starts at 1, +1 per successful mint.
- ``accepted``: token address -> eligibility flag (absent means ineligible).
- ``records``: certificate id -> :class:`Certificate`. A redeemed id is
  *removed*, so "absent" and "never minted" look the same to callers and
  neither is confused with a zero-amount record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

FIRST_CERTIFICATE_ID = 1


@dataclass(frozen=True)
class Certificate:
    """Immutable record of one deposit."""

    token: bytes
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {"token": "0x" + self.token.hex(), "amount": self.amount}


@dataclass
class CustodyState:
    administrator: Optional[bytes]
    counter: int = FIRST_CERTIFICATE_ID
    accepted: Dict[bytes, bool] = field(default_factory=dict)
    records: Dict[int, Certificate] = field(default_factory=dict)

    def minted_total(self) -> int:
        """Certificates ever minted (live or redeemed)."""
        return self.counter - FIRST_CERTIFICATE_ID

    # journal hooks; Certificate is frozen so shallow copies suffice

    def snapshot(self) -> Any:
        return (self.administrator, self.counter, dict(self.accepted), dict(self.records))

    def restore(self, snap: Any) -> None:
        self.administrator, self.counter, accepted, records = snap
        self.accepted = dict(accepted)
        self.records = dict(records)


__all__ = ["Certificate", "CustodyState", "FIRST_CERTIFICATE_ID"]
