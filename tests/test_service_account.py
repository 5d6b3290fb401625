from datetime import timedelta

import pytest

from minerent.exceptions import UserNotFoundError
from minerent.services.account_service import AccountService
from minerent.utils.constants import ContractStatus


def test_create_account(store):
    ok, msg, uid = AccountService.create_account("zoe", 50.0, store=store)
    assert ok, msg
    assert AccountService.account(uid, store=store) == {"user_id": uid, "username": "zoe", "balance": 50.0}


@pytest.mark.parametrize("username,balance", [("", 1.0), ("   ", 1.0), ("neg", -5.0)])
def test_create_account_rejects_bad_input(store, username, balance):
    ok, msg, uid = AccountService.create_account(username, balance, store=store)
    assert not ok and uid is None


def test_create_account_rejects_duplicate(store, alice):
    ok, msg, _ = AccountService.create_account("alice", store=store)
    assert not ok and "exists" in msg.lower()


def test_unknown_account(store):
    with pytest.raises(UserNotFoundError):
        AccountService.account("ghost", store=store)
    with pytest.raises(UserNotFoundError):
        AccountService.transactions("ghost", store=store)


def test_refresh_status_and_put_contract(service, store, clock, alice):
    c = service.create(alice, "epic", 3)
    assert service.refresh_status(c.id).status == ContractStatus.ACTIVE

    clock.advance(timedelta(days=3))
    settled = service.refresh_status(c.id)
    assert settled.status == ContractStatus.COMPLETED
    assert settled.version == 1

    # a plain put overwrites the stored record
    settled.claimed_earnings = 1.5
    store.put_contract(settled)
    assert store.get_contract(c.id).claimed_earnings == 1.5
