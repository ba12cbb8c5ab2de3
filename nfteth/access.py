"""
nfteth.access: who may call what.

Two independent checks, evaluated before any state is touched:

- :func:`require_administrator`: caller must be the single administrator held
  in :class:`~nfteth.state.CustodyState`. Fails with
  :class:`~nfteth.errors.NotAdministratorError` ("OnlyOwner").
- :func:`require_holder`: caller must be the current holder of a certificate
  as reported by the certificate registry. Fails with
  :class:`~nfteth.errors.NotHolderError` ("OnlyNftOwner").

Both errors are :class:`~nfteth.errors.AuthorizationError` subclasses but are
never raised interchangeably.

Administrator lifecycle helpers (``transfer_ownership``,
``renounce_ownership``) emit ``OwnershipTransferred``.
"""

from __future__ import annotations

from .adapter import AssetTransferAdapter
from .address import require_address
from .errors import InvalidAddressError, NotAdministratorError, NotHolderError
from .events import EVT_OWNERSHIP_TRANSFERRED, EventLog
from .state import CustodyState


def require_administrator(state: CustodyState, caller: bytes) -> None:
    if state.administrator is None or state.administrator != caller:
        raise NotAdministratorError(context={"caller": "0x" + bytes(caller).hex()})


def require_holder(adapter: AssetTransferAdapter, certificate_id: int, caller: bytes) -> bytes:
    """Return the holder, raising unless it is ``caller``."""
    holder = adapter.owner_of(certificate_id)
    if holder is None or holder != caller:
        raise NotHolderError(context={"caller": "0x" + bytes(caller).hex(), "token_id": certificate_id})
    return holder


def transfer_ownership(state: CustodyState, events: EventLog, caller: bytes, new_owner: bytes) -> None:
    require_administrator(state, caller)
    try:
        new_owner = require_address(new_owner)
    except InvalidAddressError:
        raise InvalidAddressError("new owner must be non-empty; use renounce_ownership instead") from None
    previous = state.administrator or b""
    state.administrator = new_owner
    events.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": previous, "new": new_owner})


def renounce_ownership(state: CustodyState, events: EventLog, caller: bytes) -> None:
    """After this, every administrator-only call fails."""
    require_administrator(state, caller)
    previous = state.administrator or b""
    state.administrator = None
    events.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": previous, "new": b""})


__all__ = [
    "require_administrator",
    "require_holder",
    "transfer_ownership",
    "renounce_ownership",
]
