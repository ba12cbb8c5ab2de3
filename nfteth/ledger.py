"""
nfteth.ledger: deposit/redeem state machine for certificates.

Deposit
-------
Checks run in a fixed order and stop at the first failure:

    whitelist -> amount -> depositor balance -> allowance to custody

then: pull funds into custody, allocate ``state.counter``, store the
:class:`~nfteth.state.Certificate`, mint the certificate to the depositor and
emit ``Minted{token_id}``.

Redeem
------
    record exists? -> caller holds it? -> drop record -> burn -> pay out

The record is removed and the certificate burned *before* the outward
transfer. A token that calls back into custody during that transfer finds no
record for the id and gets :class:`~nfteth.errors.NoSuchCertificateError`.
Emits ``Withdrawn{to, token, amount}``.

Both operations check that the custody balance of the token moved by exactly
the recorded amount and raise :class:`~nfteth.errors.InvariantViolationError`
otherwise (fee-on-transfer or rebasing tokens cannot be custodied).

These functions mutate in place and rely on the caller's journal checkpoint for
all-or-nothing behaviour; use them through :class:`nfteth.vault.Nfteth`.
"""

from __future__ import annotations

from typing import Dict, Optional

from .access import require_holder
from .adapter import AssetTransferAdapter
from .address import require_address, require_amount
from .errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvariantViolationError,
    NoSuchCertificateError,
    UnacceptedAssetError,
)
from .events import EVT_MINTED, EVT_WITHDRAWN, EventLog
from .logging import get_logger
from .state import Certificate, CustodyState
from .whitelist import is_accepted

log = get_logger(__name__)


def deposit(
    state: CustodyState,
    adapter: AssetTransferAdapter,
    events: EventLog,
    caller: bytes,
    token: bytes,
    amount: int,
    *,
    max_amount_bits: int = 256,
) -> int:
    caller = require_address(caller)
    token = require_address(token)
    if not is_accepted(state, token):
        raise UnacceptedAssetError(context={"token": "0x" + token.hex()})
    amount = require_amount(amount, max_bits=max_amount_bits)

    balance = adapter.balance_of(token, caller)
    if balance < amount:
        raise InsufficientBalanceError(context={"balance": balance, "amount": amount})
    allowed = adapter.allowance(token, caller)
    if allowed < amount:
        raise InsufficientAllowanceError(context={"allowance": allowed, "amount": amount})

    held_before = adapter.held_balance(token)
    adapter.pull_in(token, caller, amount)
    received = adapter.held_balance(token) - held_before
    if received != amount:
        raise InvariantViolationError(context={"expected": amount, "received": received})

    certificate_id = state.counter
    state.counter += 1
    state.records[certificate_id] = Certificate(token=token, amount=amount)
    adapter.mint_certificate(caller, certificate_id)

    events.emit(EVT_MINTED, {"token_id": certificate_id})
    log.info("deposit_ok", certificate_id=certificate_id, depositor=caller, token=token, amount=amount)
    return certificate_id


def redeem(
    state: CustodyState,
    adapter: AssetTransferAdapter,
    events: EventLog,
    caller: bytes,
    certificate_id: int,
) -> Certificate:
    """Burn ``certificate_id`` and pay its amount to ``caller``. Returns the cleared record."""
    caller = require_address(caller)
    record = record_of(state, certificate_id)
    if record is None:
        raise NoSuchCertificateError(context={"token_id": certificate_id})
    require_holder(adapter, certificate_id, caller)

    del state.records[certificate_id]
    adapter.burn_certificate(certificate_id)

    held_before = adapter.held_balance(record.token)
    adapter.push_out(record.token, caller, record.amount)
    sent = held_before - adapter.held_balance(record.token)
    if sent != record.amount:
        raise InvariantViolationError(context={"expected": record.amount, "sent": sent})

    events.emit(EVT_WITHDRAWN, {"to": caller, "token": record.token, "amount": record.amount})
    log.info("redeem_ok", certificate_id=certificate_id, recipient=caller, token=record.token, amount=record.amount)
    return record


def record_of(state: CustodyState, certificate_id: int) -> Optional[Certificate]:
    if isinstance(certificate_id, bool) or not isinstance(certificate_id, int):
        return None
    return state.records.get(certificate_id)


def next_id(state: CustodyState) -> int:
    return state.counter


def liabilities(state: CustodyState) -> Dict[bytes, int]:
    """Sum of live certificate amounts per token."""
    out: Dict[bytes, int] = {}
    for cert in state.records.values():
        out[cert.token] = out.get(cert.token, 0) + cert.amount
    return out


def check_solvency(state: CustodyState, adapter: AssetTransferAdapter) -> Dict[bytes, int]:
    """
    Verify custody holds at least the live liabilities of every token.

    Returns the surplus per token (held minus owed); raises
    :class:`InvariantViolationError` on any shortfall.
    """
    surplus: Dict[bytes, int] = {}
    for token, owed in liabilities(state).items():
        held = adapter.held_balance(token)
        if held < owed:
            raise InvariantViolationError(
                "custody holds less than the live certificates owe",
                context={"token": "0x" + token.hex(), "held": held, "owed": owed},
            )
        surplus[token] = held - owed
    return surplus


__all__ = ["deposit", "redeem", "record_of", "next_id", "liabilities", "check_solvency"]
