"""
nfteth
======

Token custody expressed as certificates: depositing a whitelisted fungible
token mints a certificate recording ``{token, amount}``; redeeming (burning)
the certificate pays that amount to whoever holds it at that moment.

Layout
------
- :mod:`nfteth.state`     : ``CustodyState`` / ``Certificate``
- :mod:`nfteth.whitelist` : accepted-token registry
- :mod:`nfteth.access`    : administrator and holder checks
- :mod:`nfteth.adapter`   : calls into token libraries
- :mod:`nfteth.ledger`    : deposit / redeem state machine
- :mod:`nfteth.vault`     : the ``Nfteth`` contract (journaled public API)
- :mod:`nfteth.chain`     : deterministic local chain for runs and tests
- :mod:`nfteth.tokens`    : in-memory fungible token and certificate registry

Quick start
-----------
    from nfteth import LocalChain

    chain = LocalChain()
    admin, alice = chain.account("admin"), chain.account("alice")
    token = chain.deploy_token("DummyErc20", "DERC20", owner=admin)
    token.mint(admin, alice, 10_000)
    vault = chain.deploy_custody(administrator=admin)
    vault.set_accepted(admin, [token.address])
    token.approve(alice, vault.address, 100)
    cid = vault.deposit(alice, token.address, 100)   # -> 1
    vault.redeem(alice, cid)
"""

from .chain import LocalChain
from .errors import (
    AuthorizationError,
    CustodyError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidAddressError,
    InvalidAmountError,
    InvariantViolationError,
    NoSuchCertificateError,
    NotAdministratorError,
    NotHolderError,
    TokenError,
    TransferRejected,
    UnacceptedAssetError,
    UnknownContractError,
)
from .state import Certificate, CustodyState
from .vault import Nfteth
from .version import __version__

__all__ = [
    "__version__",
    "LocalChain",
    "Nfteth",
    "Certificate",
    "CustodyState",
    "CustodyError",
    "AuthorizationError",
    "NotAdministratorError",
    "NotHolderError",
    "UnacceptedAssetError",
    "InvalidAmountError",
    "InvalidAddressError",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
    "NoSuchCertificateError",
    "InvariantViolationError",
    "TokenError",
    "TransferRejected",
    "UnknownContractError",
]
