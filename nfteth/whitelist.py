"""
nfteth.whitelist: tokens eligible for deposit.

The whitelist only grows: :func:`set_accepted` marks every listed token as
eligible and leaves existing entries untouched. Unknown tokens are ineligible.
"""

from __future__ import annotations

from typing import Iterable, List

from .access import require_administrator
from .address import require_address
from .events import EVT_ACCEPTED_TOKENS, EventLog
from .logging import get_logger
from .state import CustodyState

log = get_logger(__name__)


def set_accepted(state: CustodyState, events: EventLog, caller: bytes, tokens: Iterable[bytes]) -> List[bytes]:
    """
    Administrator-only. Flag each token as accepted; duplicates are harmless.

    Emits ``AcceptedTokens`` with the input sequence as given (order and
    duplicates preserved), including when it is empty.
    """
    require_administrator(state, caller)
    listed = [require_address(t) for t in tokens]
    for t in listed:
        state.accepted[t] = True
    events.emit(EVT_ACCEPTED_TOKENS, {"tokens": listed})
    log.info("whitelist_updated", tokens=listed, accepted_total=len(accepted_tokens(state)))
    return listed


def is_accepted(state: CustodyState, token: bytes) -> bool:
    return state.accepted.get(bytes(token), False)


def accepted_tokens(state: CustodyState) -> List[bytes]:
    """Eligible tokens in insertion order."""
    return [t for t, ok in state.accepted.items() if ok]


__all__ = ["set_accepted", "is_accepted", "accepted_tokens"]
