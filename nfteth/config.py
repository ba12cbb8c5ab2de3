"""
nfteth.config: metadata, numeric caps and tooling defaults.

Configuration precedence:
  1) Environment variables (NFTETH_*)
  2) Hardcoded safe defaults below

Key env vars:
  - NFTETH_NAME              (str)  default: "Nfteth"
  - NFTETH_SYMBOL            (str)  default: "NFTETH"
  - NFTETH_MAX_AMOUNT_BITS   (int)  default: 256     (clamped to [8, 256])
  - NFTETH_ADDRESS_LEN       (int)  default: 20      (clamped to [4, 64])
  - NFTETH_STATE_PATH        (path) default: nfteth-state.json
  - NFTETH_LOG_LEVEL         (str)  default: INFO
  - NFTETH_LOG_FORMAT        (str)  default: console ("json" or "console")

Usage:
    from nfteth.config import load_config
    CFG = load_config()
    CFG.max_amount_bits
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


@dataclass(frozen=True)
class NftethConfig:
    name: str
    symbol: str
    max_amount_bits: int
    address_len: int
    state_path: Path
    log_level: str
    log_format: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "max_amount_bits": self.max_amount_bits,
            "address_len": self.address_len,
            "state_path": str(self.state_path),
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


@lru_cache(maxsize=1)
def load_config() -> NftethConfig:
    """
    Build and cache an NftethConfig from environment + safe defaults.

    Tests that tweak the environment should call ``load_config.cache_clear()``.
    """
    log_format = _env_str("NFTETH_LOG_FORMAT", "console").lower()
    if log_format not in ("json", "console"):
        log_format = "console"
    return NftethConfig(
        name=_env_str("NFTETH_NAME", "Nfteth"),
        symbol=_env_str("NFTETH_SYMBOL", "NFTETH"),
        max_amount_bits=_env_int("NFTETH_MAX_AMOUNT_BITS", 256, min_v=8, max_v=256),
        address_len=_env_int("NFTETH_ADDRESS_LEN", 20, min_v=4, max_v=64),
        state_path=Path(_env_str("NFTETH_STATE_PATH", "nfteth-state.json")).expanduser(),
        log_level=_env_str("NFTETH_LOG_LEVEL", "INFO").upper(),
        log_format=log_format,
    )


__all__ = ["NftethConfig", "load_config"]
