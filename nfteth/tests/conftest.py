"""
nfteth.tests.conftest
=====================

Fixtures for custody tests.

- ``chain``: a fresh :class:`~nfteth.chain.LocalChain` per test.
- ``admin`` / ``alice`` / ``bob``: deterministic account addresses.
- ``token``: a dummy fungible token; every account starts with 10_000.
- ``vault``: the custody contract, administered by ``admin``, with ``token``
  already whitelisted.

Usage (inside a test file):
    def test_flow(vault, token, alice):
        token.approve(alice, vault.address, 100)
        assert vault.deposit(alice, token.address, 100) == 1
"""

from __future__ import annotations

from typing import Dict

import pytest

from nfteth.chain import LocalChain
from nfteth.config import load_config
from nfteth.tokens.fungible import FungibleToken
from nfteth.vault import Nfteth

INITIAL_BALANCE = 10_000


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    for var in (
        "NFTETH_NAME",
        "NFTETH_SYMBOL",
        "NFTETH_MAX_AMOUNT_BITS",
        "NFTETH_ADDRESS_LEN",
        "NFTETH_STATE_PATH",
        "NFTETH_LOG_LEVEL",
        "NFTETH_LOG_FORMAT",
    ):
        monkeypatch.delenv(var, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def chain() -> LocalChain:
    return LocalChain()


@pytest.fixture
def admin(chain: LocalChain) -> bytes:
    return chain.account("admin")


@pytest.fixture
def alice(chain: LocalChain) -> bytes:
    return chain.account("alice")


@pytest.fixture
def bob(chain: LocalChain) -> bytes:
    return chain.account("bob")


@pytest.fixture
def token(chain: LocalChain, admin: bytes, alice: bytes, bob: bytes) -> FungibleToken:
    tok = chain.deploy_token("DummyErc20", "DERC20", owner=admin)
    for who in (admin, alice, bob):
        tok.mint(admin, who, INITIAL_BALANCE)
    return tok


@pytest.fixture
def vault(chain: LocalChain, admin: bytes, token: FungibleToken) -> Nfteth:
    v = chain.deploy_custody(administrator=admin)
    v.set_accepted(admin, [token.address])
    return v


@pytest.fixture
def deposited(vault: Nfteth, token: FungibleToken, alice: bytes) -> Dict[str, int]:
    """Alice deposits 100 and holds certificate 1."""
    token.approve(alice, vault.address, 100)
    cid = vault.deposit(alice, token.address, 100)
    return {"id": cid, "amount": 100}
