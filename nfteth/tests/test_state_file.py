from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from nfteth import state_file
from nfteth.chain import LocalChain
from nfteth.config import load_config
from nfteth.state_file import ChainModel


def test_save_and_load_preserves_custody(tmp_path, chain, vault, token, admin, alice, bob):
    token.approve(alice, vault.address, 300)
    first = vault.deposit(alice, token.address, 100)
    second = vault.deposit(alice, token.address, 50)
    vault.redeem(alice, first)
    vault.transfer_from(alice, alice, bob, second)
    vault.set_approval_for_all(bob, admin, True)

    path = tmp_path / "state.json"
    state_file.save(chain, path)
    assert not path.with_suffix(".json.tmp").exists()

    restored = state_file.load(path)
    v2 = restored.custody()
    t2 = restored.token_at(token.address)

    assert v2.address == vault.address
    assert v2.owner() == admin
    assert v2.next_id() == 3
    assert v2.record_of(first) is None
    assert v2.record_of(second).amount == 50
    assert v2.owner_of(second) == bob
    assert v2.is_approved_for_all(bob, admin)
    assert v2.is_accepted(token.address)
    assert t2.balance_of(vault.address) == 50
    assert t2.allowance(alice, vault.address) == 150
    assert t2.total_supply() == token.total_supply()
    assert restored.account("alice") == alice
    assert restored.deploy_nonce == chain.deploy_nonce

    # the restored chain is fully live
    v2.redeem(bob, second)
    assert t2.balance_of(bob) == 10_050
    v2.check_solvency()


def test_renounced_administrator_survives_reload(tmp_path, chain, vault, admin):
    vault.renounce_ownership(admin)
    path = tmp_path / "s.json"
    state_file.save(chain, path)
    assert state_file.load(path).custody().owner() is None


def test_document_uses_hex_addresses(tmp_path, chain, vault, token):
    path = tmp_path / "s.json"
    state_file.save(chain, path)
    doc = json.loads(path.read_text())
    assert doc["custody"]["accepted"] == ["0x" + token.address.hex()]
    assert doc["custody"]["counter"] == 1
    assert doc["labels"]["derc20"] == "0x" + token.address.hex()


@pytest.mark.parametrize(
    "bad",
    [
        {"labels": {"a": "nothex"}},
        {"labels": {"a": "0xabc"}},
        {"labels": {"a": "0x-1"}},
        {"labels": {"a": "0xa_bc"}},
        {"labels": {"a": "0xab c"}},
        {"address_len": 2},
        {"custody": {"label": "n", "address": "0x01", "name": "N", "symbol": "N", "counter": 0}},
    ],
)
def test_malformed_documents_are_rejected(bad):
    with pytest.raises(ValidationError):
        ChainModel.model_validate(bad)


def test_reload_keeps_the_saved_address_width(tmp_path, monkeypatch):
    monkeypatch.setenv("NFTETH_ADDRESS_LEN", "8")
    load_config.cache_clear()
    chain = LocalChain()
    chain.deploy_custody(chain.account("admin"))
    path = tmp_path / "s.json"
    state_file.save(chain, path)

    monkeypatch.delenv("NFTETH_ADDRESS_LEN")
    load_config.cache_clear()
    restored = state_file.load(path)
    assert restored.config.address_len == 8
    assert len(restored.account("carol")) == 8
    assert restored.account("admin") == chain.account("admin")
