"""
nfteth.tokens
=============

In-memory token libraries the custody contract calls into:

- :class:`~nfteth.tokens.fungible.FungibleToken`: AN20 (ERC-20-like) balances,
  allowances and transfers.
- :class:`~nfteth.tokens.nonfungible.CertificateRegistry`: AN721
  (ERC-721-like) ownership, approvals and transfers for certificates.

They stand in for the chain's token contracts in local runs and tests. Both are
explicit-caller, deterministic, and journaled (``snapshot``/``restore``).
"""

from .fungible import FungibleToken
from .nonfungible import CertificateRegistry

__all__ = ["FungibleToken", "CertificateRegistry"]
