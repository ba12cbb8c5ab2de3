"""
nfteth.chain: a tiny deterministic local chain.

It provides just enough environment to deploy and exercise the custody
contract without a node:

- deterministic addresses for labelled accounts and deployed contracts
  (sha3-256 of a label, truncated to ``config.address_len`` bytes);
- a contract directory used as the custody contract's token resolver
  (``contract_at`` raises :class:`~nfteth.errors.UnknownContractError`);
- one shared :class:`~nfteth.journal.Journal` covering every deployed contract,
  so a failed custody call also rolls back token balances and events.

Usage
-----
    chain = LocalChain()
    admin, alice = chain.account("admin"), chain.account("alice")
    token = chain.deploy_token("Dummy", "DERC20", owner=admin, label="derc20")
    token.mint(admin, alice, 10_000)
    vault = chain.deploy_custody(administrator=admin)
    vault.set_accepted(admin, [token.address])
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from .address import derive_address, to_bytes
from .config import NftethConfig, load_config
from .errors import UnknownContractError
from .journal import Journal
from .logging import get_logger
from .tokens.fungible import FungibleToken
from .vault import Nfteth

log = get_logger(__name__)


class LocalChain:
    def __init__(self, config: Optional[NftethConfig] = None) -> None:
        self.config = config or load_config()
        self.journal = Journal()
        self.contracts: Dict[bytes, Any] = {}
        self.labels: Dict[str, bytes] = {}
        self.deploy_nonce = 0

    # --- addresses -------------------------------------------------------------

    def account(self, label: str) -> bytes:
        """Address for a labelled externally-owned account (stable across runs)."""
        addr = self.labels.get(label)
        if addr is None:
            addr = derive_address("account:" + label, length=self.config.address_len)
            self.labels[label] = addr
        return addr

    def label_of(self, addr: bytes) -> Optional[str]:
        for label, a in self.labels.items():
            if a == addr:
                return label
        return None

    def resolve(self, ref: Union[str, bytes]) -> bytes:
        """Known label, or 0x-hex / raw bytes address."""
        if isinstance(ref, str) and ref in self.labels:
            return self.labels[ref]
        return to_bytes(ref)

    def _next_contract_address(self, label: str) -> bytes:
        self.deploy_nonce += 1
        return derive_address(f"contract:{label}:{self.deploy_nonce}", length=self.config.address_len)

    # --- directory -------------------------------------------------------------

    def contract_at(self, address: bytes) -> Any:
        c = self.contracts.get(bytes(address))
        if c is None:
            raise UnknownContractError("no contract at address", address="0x" + bytes(address).hex())
        return c

    def token_at(self, address: bytes) -> FungibleToken:
        c = self.contract_at(address)
        if not isinstance(c, FungibleToken):
            raise UnknownContractError("contract is not a fungible token", address="0x" + bytes(address).hex())
        return c

    def custody(self) -> Nfteth:
        for c in self.contracts.values():
            if isinstance(c, Nfteth):
                return c
        raise UnknownContractError("no custody contract deployed")

    # --- deployment ------------------------------------------------------------

    def deploy_token(
        self,
        name: str,
        symbol: str,
        owner: bytes,
        *,
        decimals: int = 18,
        initial_supply: int = 0,
        label: Optional[str] = None,
        address: Optional[bytes] = None,
    ) -> FungibleToken:
        label = label or symbol.lower()
        addr = address or self._next_contract_address(label)
        token = FungibleToken(addr, name, symbol, owner, decimals=decimals, initial_supply=initial_supply)
        self._register(label, addr, token)
        self.journal.register(token)
        log.info("token_deployed", label=label, address=addr, symbol=token.symbol)
        return token

    def deploy_custody(
        self,
        administrator: bytes,
        *,
        name: Optional[str] = None,
        symbol: Optional[str] = None,
        label: str = "nfteth",
        address: Optional[bytes] = None,
    ) -> Nfteth:
        addr = address or self._next_contract_address(label)
        vault = Nfteth(
            addr,
            administrator,
            self.token_at,
            name=name,
            symbol=symbol,
            journal=self.journal,
            config=self.config,
        )
        self._register(label, addr, vault)
        log.info("custody_deployed", label=label, address=addr, administrator=administrator)
        return vault

    def _register(self, label: str, addr: bytes, contract: Any) -> None:
        if addr in self.contracts:
            raise ValueError(f"address already in use: 0x{addr.hex()}")
        if label in self.labels and self.labels[label] != addr:
            raise ValueError(f"label already in use: {label}")
        self.contracts[addr] = contract
        self.labels[label] = addr


__all__ = ["LocalChain"]
