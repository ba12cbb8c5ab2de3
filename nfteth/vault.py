"""
nfteth.vault: the custody contract.

:class:`Nfteth` is the deployable unit: a certificate registry whose ids are
backed by custodied fungible tokens. It owns a :class:`~nfteth.state.CustodyState`,
an :class:`~nfteth.events.EventLog` (shared with its certificate registry) and
an :class:`~nfteth.adapter.AssetTransferAdapter`, and runs every mutating call
inside a journal checkpoint.

Public interface
----------------
# custody (explicit caller)
deposit(caller, token, amount) -> int          alias: mint
redeem(caller, certificate_id) -> Certificate  alias: burn
set_accepted(caller, tokens) -> list[bytes]    alias: add_accepted_tokens

# views
is_accepted(token) -> bool                     alias: accepted_tokens
record_of(certificate_id) -> Certificate|None  alias: nfts_data
next_id() -> int                               alias: token_ids_counter
owner() -> bytes|None
accepted() -> list[bytes]
check_solvency() -> dict[bytes, int]

# administrator lifecycle
transfer_ownership(caller, new_owner)
renounce_ownership(caller)

# certificate ownership (delegated to the registry)
owner_of, balance_of, approve, get_approved, set_approval_for_all,
is_approved_for_all, transfer_from

Addresses may be given as bytes or 0x-hex strings.

Atomicity: when deployed through :class:`nfteth.chain.LocalChain` the journal
covers every token contract too, so a failure anywhere (including inside a
token) leaves all balances, records and events as they were.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Union

from . import access, ledger, whitelist
from .adapter import AssetTransferAdapter, TokenResolver
from .address import to_bytes
from .config import NftethConfig, load_config
from .events import EventLog
from .journal import Journal
from .logging import call_context, get_logger
from .state import Certificate, CustodyState
from .tokens.nonfungible import CertificateRegistry

log = get_logger(__name__)

AddressLike = Union[bytes, bytearray, str]


class Nfteth:
    def __init__(
        self,
        address: AddressLike,
        administrator: AddressLike,
        resolve_token: TokenResolver,
        *,
        name: Optional[str] = None,
        symbol: Optional[str] = None,
        journal: Optional[Journal] = None,
        config: Optional[NftethConfig] = None,
    ) -> None:
        self.config = config or load_config()
        self.address = to_bytes(address)
        self.name = name or self.config.name
        self.symbol = symbol or self.config.symbol
        self.state = CustodyState(administrator=to_bytes(administrator))
        self.events = EventLog()
        self.certificates = CertificateRegistry(self.name, self.symbol, events=self.events)
        self.adapter = AssetTransferAdapter(self.address, self.certificates, resolve_token)
        self.journal = journal if journal is not None else Journal()
        self.journal.register(self.state)
        self.journal.register(self.certificates)

    def __repr__(self) -> str:
        return f"Nfteth({self.symbol}, 0x{self.address.hex()})"

    # --- custody ---------------------------------------------------------------

    def deposit(self, caller: AddressLike, token: AddressLike, amount: int) -> int:
        caller_b, token_b = to_bytes(caller), to_bytes(token)
        with self._call("deposit", caller_b):
            return ledger.deposit(
                self.state,
                self.adapter,
                self.events,
                caller_b,
                token_b,
                amount,
                max_amount_bits=self.config.max_amount_bits,
            )

    def redeem(self, caller: AddressLike, certificate_id: int) -> Certificate:
        caller_b = to_bytes(caller)
        with self._call("redeem", caller_b):
            return ledger.redeem(self.state, self.adapter, self.events, caller_b, certificate_id)

    def set_accepted(self, caller: AddressLike, tokens: Iterable[AddressLike]) -> List[bytes]:
        caller_b = to_bytes(caller)
        with self._call("set_accepted", caller_b):
            access.require_administrator(self.state, caller_b)
            listed = [to_bytes(t) for t in tokens]
            return whitelist.set_accepted(self.state, self.events, caller_b, listed)

    mint = deposit
    burn = redeem
    add_accepted_tokens = set_accepted

    # --- views -----------------------------------------------------------------

    def is_accepted(self, token: AddressLike) -> bool:
        return whitelist.is_accepted(self.state, to_bytes(token))

    def accepted(self) -> List[bytes]:
        return whitelist.accepted_tokens(self.state)

    def record_of(self, certificate_id: int) -> Optional[Certificate]:
        return ledger.record_of(self.state, certificate_id)

    def next_id(self) -> int:
        return ledger.next_id(self.state)

    def owner(self) -> Optional[bytes]:
        return self.state.administrator

    def check_solvency(self) -> Dict[bytes, int]:
        return ledger.check_solvency(self.state, self.adapter)

    accepted_tokens = is_accepted
    nfts_data = record_of
    token_ids_counter = next_id

    # --- administrator lifecycle ---------------------------------------------

    def transfer_ownership(self, caller: AddressLike, new_owner: AddressLike) -> None:
        caller_b = to_bytes(caller)
        with self._call("transfer_ownership", caller_b):
            access.transfer_ownership(self.state, self.events, caller_b, to_bytes(new_owner))

    def renounce_ownership(self, caller: AddressLike) -> None:
        caller_b = to_bytes(caller)
        with self._call("renounce_ownership", caller_b):
            access.renounce_ownership(self.state, self.events, caller_b)

    # --- certificate ownership -------------------------------------------------

    def owner_of(self, certificate_id: int) -> bytes:
        return self.certificates.owner_of(certificate_id)

    def balance_of(self, holder: AddressLike) -> int:
        return self.certificates.balance_of(to_bytes(holder))

    def get_approved(self, certificate_id: int) -> Optional[bytes]:
        return self.certificates.get_approved(certificate_id)

    def is_approved_for_all(self, holder: AddressLike, operator: AddressLike) -> bool:
        return self.certificates.is_approved_for_all(to_bytes(holder), to_bytes(operator))

    def approve(self, caller: AddressLike, approved: AddressLike, certificate_id: int) -> None:
        caller_b = to_bytes(caller)
        with self._call("approve", caller_b):
            self.certificates.approve(caller_b, to_bytes(approved), certificate_id)

    def set_approval_for_all(self, caller: AddressLike, operator: AddressLike, approved: bool) -> None:
        caller_b = to_bytes(caller)
        with self._call("set_approval_for_all", caller_b):
            self.certificates.set_approval_for_all(caller_b, to_bytes(operator), approved)

    def transfer_from(self, caller: AddressLike, sender: AddressLike, to: AddressLike, certificate_id: int) -> None:
        caller_b = to_bytes(caller)
        with self._call("transfer_from", caller_b):
            self.certificates.transfer_from(caller_b, to_bytes(sender), to_bytes(to), certificate_id)

    # --- internals -------------------------------------------------------------

    @contextmanager
    def _call(self, op: str, caller: bytes) -> Iterator[int]:
        with call_context(op=op, caller="0x" + caller.hex()):
            try:
                with self.journal.atomic(op) as depth:
                    yield depth
            except Exception as e:
                log.info("call_rejected", error=type(e).__name__, code=getattr(e, "code", None))
                raise


__all__ = ["Nfteth"]
