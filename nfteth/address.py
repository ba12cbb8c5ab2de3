"""
nfteth.address: byte-first address and amount helpers.

Addresses are raw ``bytes`` everywhere inside the package. Hex strings (with or
without ``0x``) are accepted at the edges (CLI, state files, tests) and
normalised once with :func:`to_bytes`. Amounts are plain Python ``int`` values
bounded by the configured bit width (256 by default), never floats.
"""

from __future__ import annotations

import hashlib
from typing import Any, Union

from .errors import InvalidAddressError, InvalidAmountError

BytesLike = Union[bytes, bytearray, memoryview]

U256_MAX = (1 << 256) - 1


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: Union[BytesLike, str]) -> bytes:
    """
    Coerce ``value`` to immutable bytes.

    - ``str`` is interpreted as hex (``0x`` optional); odd length is rejected.
    - bytes-like objects are copied.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise InvalidAddressError(
                f"hex string must have even length, got {len(h)}", context={"value": value}
            )
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise InvalidAddressError(f"invalid hex string: {value!r}") from e
    raise InvalidAddressError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: BytesLike) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def require_address(addr: Any) -> bytes:
    """Return ``addr`` as bytes, raising :class:`InvalidAddressError` if empty or not bytes."""
    if not isinstance(addr, (bytes, bytearray)) or len(addr) == 0:
        raise InvalidAddressError(context={"value": repr(addr)})
    return bytes(addr)


def require_amount(n: Any, *, max_bits: int = 256, allow_zero: bool = False) -> int:
    """
    Ensure ``n`` is an ``int`` in ``[1, 2**max_bits - 1]`` (or ``[0, ...]`` with
    ``allow_zero``). ``bool`` is rejected even though it subclasses ``int``.
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidAmountError(context={"amount": repr(n)})
    lower = 0 if allow_zero else 1
    if n < lower or n.bit_length() > max_bits:
        raise InvalidAmountError(context={"amount": n, "max_bits": max_bits})
    return n


def derive_address(label: str, *, length: int = 20) -> bytes:
    """
    Deterministic address from a human label (sha3-256, truncated).

    Used by the local chain for accounts and deployed contracts so that test
    fixtures and CLI state files are reproducible.
    """
    return hashlib.sha3_256(b"nfteth-address|" + label.encode("utf-8")).digest()[:length]


__all__ = [
    "U256_MAX",
    "to_bytes",
    "to_hex",
    "require_address",
    "require_amount",
    "derive_address",
]
