import gc
from datetime import timedelta

import pytest

from minerent.exceptions import ContractNotFoundError, NotOwnerError, NothingToClaimError, UnknownTierError
from minerent.models.tier import TierCatalog, TierSpec
from minerent.services.accrual_service import AccrualService
from minerent.services.rental_service import RentalService
from minerent.utils.constants import ContractStatus, TransactionType


def test_worked_example(service, store, clock, alice):
    """Rate 0.8, price 15, 7 days: claim half way, then after the end."""
    c = service.create(alice, "epic", 7)
    assert store.balance(alice) == 906

    clock.advance(hours=84)
    first = service.claim(alice, c.id)
    assert first == pytest.approx(67.2)
    mid = store.get_contract(c.id)
    assert mid.claimed_earnings == pytest.approx(67.2)
    assert mid.status == ContractStatus.ACTIVE

    clock.advance(days=30)
    second = service.claim(alice, c.id)
    assert second == pytest.approx(67.2)
    done = store.get_contract(c.id)
    assert done.status == ContractStatus.COMPLETED
    assert done.claimed_earnings == done.total_potential_earnings
    assert first + second == pytest.approx(done.claimed_earnings)
    assert store.balance(alice) == pytest.approx(906 + 134.4)


def test_claim_right_after_creation_is_nothing(service, alice):
    c = service.create(alice, "epic", 7)
    with pytest.raises(NothingToClaimError):
        service.claim(alice, c.id)


def test_second_claim_at_same_instant_is_nothing(service, store, clock, alice):
    c = service.create(alice, "epic", 7)
    clock.advance(hours=3)
    service.claim(alice, c.id)
    balance = store.balance(alice)

    with pytest.raises(NothingToClaimError):
        service.claim(alice, c.id)
    assert store.balance(alice) == balance


def test_completed_and_fully_claimed_is_nothing(service, clock, alice):
    c = service.create(alice, "epic", 3)
    clock.advance(days=3)
    service.claim(alice, c.id)
    clock.advance(days=1)
    with pytest.raises(NothingToClaimError):
        service.claim(alice, c.id)
    assert service.get(c.id).status == ContractStatus.COMPLETED


def test_lazily_completed_contract_still_pays_out(service, store, clock, alice):
    c = service.create(alice, "epic", 3)
    clock.advance(days=5)

    assert service.get(c.id).status == ContractStatus.COMPLETED
    paid = service.claim(alice, c.id)
    assert paid == store.get_contract(c.id).total_potential_earnings


def test_claim_conservation_over_many_claims(service, store, clock):
    rich = store.create_user("rich", 1e6)
    c = service.create(rich, "super", 3)
    total = 0.0
    for _ in range(20):
        clock.advance(minutes=241)
        try:
            total += service.claim(rich, c.id)
        except NothingToClaimError:
            pass
        current = store.get_contract(c.id)
        assert current.claimed_earnings <= service.accrual.accrued(current, clock.now())

    final = store.get_contract(c.id)
    assert total == pytest.approx(final.claimed_earnings)
    assert final.claimed_earnings == final.total_potential_earnings


def test_claim_records_reward_transactions(service, store, clock, alice):
    c = service.create(alice, "epic", 7)
    clock.advance(hours=10)
    amount = service.claim(alice, c.id)

    rewards = [t for t in store.transactions_for(alice) if t["type"] == TransactionType.MINING_REWARD]
    assert len(rewards) == 1
    assert rewards[0]["amount"] == amount
    assert rewards[0]["contract_id"] == c.id


def test_claim_by_non_owner_rejected(service, store, clock, alice, bob):
    c = service.create(alice, "epic", 7)
    clock.advance(hours=10)
    with pytest.raises(NotOwnerError):
        service.claim(bob, c.id)
    assert store.balance(bob) == 1000.0
    assert store.get_contract(c.id).claimed_earnings == 0


def test_get_by_non_owner_rejected(service, alice, bob):
    c = service.create(alice, "epic", 7)
    with pytest.raises(NotOwnerError):
        service.get(c.id, user_id=bob)


def test_claim_missing_contract(service, alice):
    with pytest.raises(ContractNotFoundError):
        service.claim(alice, "does-not-exist")


def test_accrual_survives_tier_removed_from_catalog(service, store, clock, alice):
    c = service.create(alice, "epic", 7)
    clock.advance(hours=84)

    trimmed = TierCatalog([TierSpec("free", 0.1, 0)])
    other = RentalService(store=store, catalog=trimmed, clock=clock)
    assert other.claim(alice, c.id) == pytest.approx(67.2)


def test_legacy_record_without_rate_or_catalog_is_unknown_tier(service, store, clock, alice):
    c = service.create(alice, "epic", 7)
    legacy = store.get_contract(c.id)
    legacy.hourly_rate = None
    clock.advance(hours=1)
    with pytest.raises(UnknownTierError):
        AccrualService().accrued(legacy, clock.now())


def test_claim_locks_are_released_after_use(service, clock, alice):
    c = service.create(alice, "epic", 7)
    clock.advance(hours=2)
    service.claim(alice, c.id)
    gc.collect()
    assert c.id not in service._locks

    held = service._lock_for(c.id)
    assert service._lock_for(c.id) is held
