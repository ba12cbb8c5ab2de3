from __future__ import annotations

import pytest

from nfteth.errors import AuthorizationError, InvalidAddressError, NotAdministratorError
from nfteth.events import EVT_ACCEPTED_TOKENS

RETH = bytes.fromhex("ae78736cd615f374d3085123a210448e74fc6393")
WSTETH = bytes.fromhex("7f39c581f595b53c5cb19bd0b3f8da6c935e2ca0")
WETH = bytes.fromhex("c02aaa39b223fe8d0a0e5c4f27ead9083c756cc2")


def test_deploy_sets_owner_and_counter(chain, admin):
    v = chain.deploy_custody(administrator=admin)
    assert v.owner() == admin
    assert v.next_id() == 1
    assert v.token_ids_counter() == 1
    assert v.accepted() == []


def test_setup_accepted_tokens_is_additive(vault, admin):
    vault.set_accepted(admin, [RETH, WSTETH])
    assert vault.is_accepted(RETH)
    assert vault.is_accepted(WSTETH)
    assert not vault.is_accepted(WETH)

    vault.add_accepted_tokens(admin, [WETH])
    assert vault.accepted_tokens(RETH)
    assert vault.accepted_tokens(WSTETH)
    assert vault.accepted_tokens(WETH)


def test_emits_event_with_full_input(vault, admin):
    vault.set_accepted(admin, [RETH, RETH, WSTETH])
    ev = vault.events.last(EVT_ACCEPTED_TOKENS)
    assert ev is not None
    assert ev.args["tokens"] == [RETH, RETH, WSTETH]
    # duplicates are idempotent
    assert vault.accepted().count(RETH) == 1


def test_empty_input_still_emits(vault, admin):
    before = len(vault.events.named(EVT_ACCEPTED_TOKENS))
    assert vault.set_accepted(admin, []) == []
    assert len(vault.events.named(EVT_ACCEPTED_TOKENS)) == before + 1


def test_hex_strings_are_accepted(vault, admin):
    vault.set_accepted("0x" + admin.hex(), ["0x" + RETH.hex()])
    assert vault.is_accepted("0x" + RETH.hex())
    assert vault.is_accepted(RETH)


def test_non_administrator_is_rejected_and_state_unchanged(vault, alice, token):
    before = vault.accepted()
    events_before = len(vault.events)
    with pytest.raises(NotAdministratorError) as ei:
        vault.set_accepted(alice, [RETH])
    assert isinstance(ei.value, AuthorizationError)
    assert ei.value.code == "OnlyOwner"
    assert vault.accepted() == before
    assert not vault.is_accepted(RETH)
    assert len(vault.events) == events_before


def test_non_administrator_empty_call_is_rejected(vault, alice):
    with pytest.raises(NotAdministratorError):
        vault.add_accepted_tokens(alice, [])


@pytest.mark.parametrize("junk", ["0xabc", "0xzz", "not-hex"])
def test_non_administrator_with_malformed_tokens_gets_authorization_error(vault, alice, junk):
    events_before = len(vault.events)
    with pytest.raises(NotAdministratorError):
        vault.set_accepted(alice, [junk])
    assert len(vault.events) == events_before


def test_administrator_with_malformed_token_gets_address_error(vault, admin, token):
    with pytest.raises(InvalidAddressError):
        vault.set_accepted(admin, [RETH, "0xabc"])
    assert vault.accepted() == [token.address]


def test_unknown_token_is_not_accepted(vault):
    assert vault.is_accepted(b"\x42" * 20) is False
