"""
nfteth.state_file: persist a LocalChain as JSON between CLI invocations.

The file is a plain JSON document validated with pydantic models on load:

    {
      "version": "0.1.0",
      "address_len": 20,
      "deploy_nonce": 2,
      "labels": {"admin": "0x…", "derc20": "0x…", "nfteth": "0x…"},
      "tokens": [{...balances, allowances...}],
      "custody": {"counter": 2, "accepted": ["0x…"], "certificates": [...]}
    }

Addresses are 0x-hex strings; amounts are JSON integers (arbitrary precision).
Event logs are not persisted.
"""

from __future__ import annotations

import json
import os
import string
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt

from .address import to_bytes, to_hex
from .chain import LocalChain
from .config import NftethConfig, load_config
from .state import Certificate
from .tokens.fungible import FungibleToken
from .version import __version__
from .vault import Nfteth


def _check_hex(v: str) -> str:
    if not isinstance(v, str) or not v.startswith("0x"):
        raise ValueError("expected 0x-prefixed hex")
    body = v[2:]
    if len(body) == 0 or len(body) % 2 != 0:
        raise ValueError("hex must be non-empty and even-length")
    if any(c not in string.hexdigits for c in body):
        raise ValueError("hex must contain only hex digits")
    return v.lower()


HexAddress = Annotated[str, AfterValidator(_check_hex)]


class AllowanceModel(BaseModel):
    model_config = ConfigDict(frozen=True)
    owner: HexAddress
    spender: HexAddress
    value: NonNegativeInt


class TokenModel(BaseModel):
    model_config = ConfigDict(frozen=True)
    label: str
    address: HexAddress
    name: str
    symbol: str
    decimals: NonNegativeInt = 18
    owner: HexAddress
    total_supply: NonNegativeInt = 0
    balances: Dict[HexAddress, NonNegativeInt] = Field(default_factory=dict)
    allowances: List[AllowanceModel] = Field(default_factory=list)


class CertificateModel(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: PositiveInt
    token: HexAddress
    amount: PositiveInt
    holder: HexAddress
    approved: Optional[HexAddress] = None


class OperatorModel(BaseModel):
    model_config = ConfigDict(frozen=True)
    owner: HexAddress
    operator: HexAddress


class CustodyModel(BaseModel):
    model_config = ConfigDict(frozen=True)
    label: str
    address: HexAddress
    name: str
    symbol: str
    administrator: Optional[HexAddress] = None
    counter: PositiveInt = 1
    accepted: List[HexAddress] = Field(default_factory=list)
    certificates: List[CertificateModel] = Field(default_factory=list)
    operators: List[OperatorModel] = Field(default_factory=list)


class ChainModel(BaseModel):
    model_config = ConfigDict(frozen=True)
    version: str = __version__
    address_len: int = Field(default=20, ge=4, le=64)
    deploy_nonce: NonNegativeInt = 0
    labels: Dict[str, HexAddress] = Field(default_factory=dict)
    tokens: List[TokenModel] = Field(default_factory=list)
    custody: Optional[CustodyModel] = None


# ---------------------------------------------------------------------------
# LocalChain <-> model
# ---------------------------------------------------------------------------


def dump_chain(chain: LocalChain) -> ChainModel:
    tokens: List[TokenModel] = []
    custody: Optional[CustodyModel] = None
    for addr, c in chain.contracts.items():
        label = chain.label_of(addr) or to_hex(addr)
        if isinstance(c, FungibleToken):
            balances, allowances, total, _ = c.snapshot()
            tokens.append(
                TokenModel(
                    label=label,
                    address=to_hex(addr),
                    name=c.name,
                    symbol=c.symbol,
                    decimals=c.decimals,
                    owner=to_hex(c.owner),
                    total_supply=total,
                    balances={to_hex(a): v for a, v in balances.items() if v},
                    allowances=[
                        AllowanceModel(owner=to_hex(o), spender=to_hex(s), value=v)
                        for (o, s), v in allowances.items()
                        if v
                    ],
                )
            )
        elif isinstance(c, Nfteth):
            owners, _, approvals, operators, _ = c.certificates.snapshot()
            certs = [
                CertificateModel(
                    id=tid,
                    token=to_hex(rec.token),
                    amount=rec.amount,
                    holder=to_hex(owners[tid]),
                    approved=to_hex(approvals[tid]) if tid in approvals else None,
                )
                for tid, rec in sorted(c.state.records.items())
            ]
            custody = CustodyModel(
                label=label,
                address=to_hex(addr),
                name=c.name,
                symbol=c.symbol,
                administrator=to_hex(c.state.administrator) if c.state.administrator else None,
                counter=c.state.counter,
                accepted=[to_hex(t) for t in c.accepted()],
                certificates=certs,
                operators=[OperatorModel(owner=to_hex(o), operator=to_hex(op)) for o, op in sorted(operators)],
            )
    return ChainModel(
        address_len=chain.config.address_len,
        deploy_nonce=chain.deploy_nonce,
        labels={k: to_hex(v) for k, v in chain.labels.items()},
        tokens=tokens,
        custody=custody,
    )


def restore_chain(model: ChainModel, config: Optional[NftethConfig] = None) -> LocalChain:
    # addresses already on file fix the width of every address derived later
    cfg = replace(config or load_config(), address_len=model.address_len)
    chain = LocalChain(config=cfg)
    for t in model.tokens:
        token = chain.deploy_token(
            t.name, t.symbol, to_bytes(t.owner), decimals=t.decimals, label=t.label, address=to_bytes(t.address)
        )
        token.restore(
            (
                {to_bytes(a): v for a, v in t.balances.items()},
                {(to_bytes(a.owner), to_bytes(a.spender)): a.value for a in t.allowances},
                t.total_supply,
                0,
            )
        )
    if model.custody is not None:
        m = model.custody
        admin = to_bytes(m.administrator) if m.administrator else b"\x00"
        vault = chain.deploy_custody(admin, name=m.name, symbol=m.symbol, label=m.label, address=to_bytes(m.address))
        vault.state.administrator = to_bytes(m.administrator) if m.administrator else None
        vault.state.counter = m.counter
        vault.state.accepted = {to_bytes(a): True for a in m.accepted}
        vault.state.records = {c.id: Certificate(token=to_bytes(c.token), amount=c.amount) for c in m.certificates}
        owners = {c.id: to_bytes(c.holder) for c in m.certificates}
        balances: Dict[bytes, int] = {}
        for holder in owners.values():
            balances[holder] = balances.get(holder, 0) + 1
        vault.certificates.restore(
            (
                owners,
                balances,
                {c.id: to_bytes(c.approved) for c in m.certificates if c.approved},
                {(to_bytes(o.owner), to_bytes(o.operator)) for o in m.operators},
                0,
            )
        )
    chain.labels.update({k: to_bytes(v) for k, v in model.labels.items()})
    chain.deploy_nonce = model.deploy_nonce
    return chain


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def save(chain: LocalChain, path: Path) -> None:
    """Write atomically (temp file + rename)."""
    path = Path(path)
    data = dump_chain(chain).model_dump(mode="json")
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    os.replace(tmp, path)


def load(path: Path, config: Optional[NftethConfig] = None) -> LocalChain:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return restore_chain(ChainModel.model_validate(raw), config=config)


__all__ = [
    "ChainModel",
    "TokenModel",
    "CustodyModel",
    "CertificateModel",
    "dump_chain",
    "restore_chain",
    "save",
    "load",
]
