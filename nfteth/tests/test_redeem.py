from __future__ import annotations

import pytest

from nfteth.errors import AuthorizationError, NoSuchCertificateError, NotHolderError
from nfteth.events import EVT_WITHDRAWN

from .conftest import INITIAL_BALANCE


def test_non_holder_is_rejected_and_record_kept(vault, token, deposited, bob):
    cid = deposited["id"]
    with pytest.raises(NotHolderError) as ei:
        vault.burn(bob, cid)
    assert isinstance(ei.value, AuthorizationError)
    assert ei.value.code == "OnlyNftOwner"
    assert vault.record_of(cid) is not None
    assert token.balance_of(vault.address) == deposited["amount"]


def test_redeem_pays_holder_and_emits(vault, token, deposited, alice):
    cid, amount = deposited["id"], deposited["amount"]
    before = token.balance_of(alice)

    record = vault.redeem(alice, cid)

    assert record.amount == amount
    assert token.balance_of(alice) == before + amount
    assert token.balance_of(vault.address) == 0
    assert vault.record_of(cid) is None
    assert vault.balance_of(alice) == 0
    ev = vault.events.last(EVT_WITHDRAWN)
    assert ev.args == {"to": alice, "token": token.address, "amount": amount}


def test_second_redeem_is_nonexistent(vault, deposited, alice):
    cid = deposited["id"]
    vault.burn(alice, cid)
    with pytest.raises(NoSuchCertificateError) as ei:
        vault.burn(alice, cid)
    assert ei.value.code == "NonexistentToken"
    assert not isinstance(ei.value, AuthorizationError)


def test_unknown_id_is_nonexistent_not_unauthorized(vault, bob):
    for bad in (1, 0, 999, -1):
        with pytest.raises(NoSuchCertificateError):
            vault.redeem(bob, bad)


def test_transferred_certificate_pays_new_holder(vault, token, deposited, alice, bob):
    cid, amount = deposited["id"], deposited["amount"]
    vault.transfer_from(alice, alice, bob, cid)

    with pytest.raises(NotHolderError):
        vault.redeem(alice, cid)

    vault.redeem(bob, cid)
    assert token.balance_of(bob) == INITIAL_BALANCE + amount
    assert token.balance_of(alice) == INITIAL_BALANCE - amount


def test_approved_operator_cannot_redeem(vault, deposited, alice, bob):
    # approval lets bob move the certificate, not redeem it for himself
    cid = deposited["id"]
    vault.approve(alice, bob, cid)
    assert vault.get_approved(cid) == bob
    with pytest.raises(NotHolderError):
        vault.redeem(bob, cid)


def test_redeem_only_touches_its_own_certificate(vault, token, alice, bob):
    token.approve(alice, vault.address, 300)
    token.approve(bob, vault.address, 300)
    a = vault.deposit(alice, token.address, 100)
    b = vault.deposit(bob, token.address, 250)

    vault.redeem(alice, a)

    assert vault.record_of(b).amount == 250
    assert token.balance_of(vault.address) == 250
    assert vault.check_solvency() == {token.address: 0}


def test_failed_redeem_leaves_events_untouched(vault, deposited, bob):
    n = len(vault.events)
    with pytest.raises(NotHolderError):
        vault.redeem(bob, deposited["id"])
    assert len(vault.events) == n
