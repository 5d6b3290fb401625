"""Rental lifecycle: create contracts, claim earnings, settle finished terms."""

import logging
import threading
import weakref
from typing import Optional

from minerent.exceptions import (
    ClaimRetryExhaustedError,
    ConcurrentUpdateConflict,
    InsufficientFundsError,
    NothingToClaimError,
    NotOwnerError,
)
from minerent.models.contract import RentalContract
from minerent.models.store import Store
from minerent.models.tier import TierCatalog
from minerent.services.accrual_service import AccrualService
from minerent.services.common import new_id, round2
from minerent.services.pricing_service import PricingService
from minerent.utils.clock import SystemClock
from minerent.utils.constants import POOL_NAME, ContractStatus, TransactionType

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3


class _ContractLock:
    """threading.Lock wrapper; plain locks cannot be weakly referenced."""

    def __init__(self):
        self._lock = threading.Lock()

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._lock.release()
        return False


class RentalService:
    """
    Contract manager and claim ledger.

    Claims on one contract are serialized by a per-contract lock, and the
    commit itself is a conditional update on the contract version, so a claim
    can never credit the same accrued value twice. Claims on different
    contracts share no lock here.
    """

    def __init__(self, store: Store, catalog: TierCatalog, clock=None,
                 max_retries: int = DEFAULT_MAX_RETRIES):
        self.store = store
        self.catalog = catalog
        self.clock = clock or SystemClock()
        self.max_retries = max(0, int(max_retries))
        self.pricing = PricingService(catalog)
        self.accrual = AccrualService(catalog)
        # A lock lives only while some claim holds a reference to it
        self._locks = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _lock_for(self, contract_id: str) -> "_ContractLock":
        with self._locks_guard:
            lock = self._locks.get(contract_id)
            if lock is None:
                lock = self._locks[contract_id] = _ContractLock()
            return lock

    def _tier_label(self, tier_id: str) -> str:
        if tier_id in self.catalog:
            return self.catalog.lookup(tier_id).name or tier_id
        return tier_id.replace("-", " ")

    # --------------- Commands ---------------
    def create(self, user_id: str, tier_id: str, days: int) -> RentalContract:
        """
        Rent a miner for one of the offered plans.
        The price is debited, the contract stored and a rental transaction
        recorded together; nothing is written if any step fails.
        """
        plan = self.pricing.quote(tier_id, days)
        tier = self.catalog.lookup(tier_id)

        balance = self.store.balance(user_id)
        if balance < plan.total_price:
            raise InsufficientFundsError(
                f"Error: balance {balance:.2f} is below the price {plan.total_price}")

        now = self.clock.now()
        contract = RentalContract.open(
            contract_id=new_id(),
            owner_id=str(user_id),
            tier_id=tier.tier_id,
            days=plan.days,
            start=now,
            price=plan.total_price,
            cap=plan.total_potential_earnings,
            hourly_rate=tier.hourly_rate,
        )
        tx = {
            "user_id": str(user_id),
            "type": TransactionType.MINER_RENTAL,
            "amount": plan.total_price,
            "fee": 0.0,
            "sender": "You",
            "recipient": POOL_NAME,
            "status": "completed",
            "description": f"Rented {self._tier_label(tier_id)} for {plan.days} days",
            "contract_id": contract.id,
            "created_at": now.isoformat(),
        }
        self.store.open_contract(contract, tx)
        logger.info("Rental %s opened: user=%s tier=%s days=%d price=%s",
                    contract.id, user_id, tier_id, plan.days, plan.total_price)
        return contract

    def claim(self, user_id: str, contract_id: str) -> float:
        """
        Credit everything accrued but not yet claimed and return that amount.

        Raises NothingToClaimError when nothing is claimable right now, and
        ClaimRetryExhaustedError if the conditional update kept conflicting.
        """
        contract_id = str(contract_id)
        if self.store.owner_of(contract_id) != str(user_id):
            raise NotOwnerError()

        with self._lock_for(contract_id):
            for attempt in range(self.max_retries + 1):
                contract = self.store.get_contract(contract_id)
                now = self.clock.now()
                accrued = self.accrual.accrued(contract, now)
                claimable = accrued - contract.claimed_earnings
                finished = self.accrual.is_complete(contract, now)

                try:
                    if claimable <= 0:
                        if finished and contract.is_active:
                            self.store.set_status(contract_id, contract.version,
                                                  ContractStatus.COMPLETED)
                        raise NothingToClaimError()

                    status = ContractStatus.COMPLETED if finished else contract.status
                    self.store.commit_claim(
                        contract_id,
                        contract.version,
                        # == claimed + claimable, and never above accrued
                        claimed_earnings=accrued,
                        status=status,
                        amount=claimable,
                        tx={
                            "user_id": contract.owner_id,
                            "type": TransactionType.MINING_REWARD,
                            "amount": claimable,
                            "fee": 0.0,
                            "sender": POOL_NAME,
                            "recipient": "You",
                            "status": "completed",
                            "description": f"Mining earnings from {self._tier_label(contract.tier_id)}",
                            "contract_id": contract_id,
                            "created_at": now.isoformat(),
                        },
                    )
                except ConcurrentUpdateConflict:
                    logger.warning("Claim on rental %s conflicted (attempt %d/%d)",
                                   contract_id, attempt + 1, self.max_retries + 1)
                    continue

                logger.info("Rental %s claimed %s (status=%s)", contract_id, round2(claimable), status)
                return claimable

        raise ClaimRetryExhaustedError()

    # --------------- Queries ---------------
    def _settle(self, contract: RentalContract) -> RentalContract:
        """Lazily mark a contract completed once its term is over."""
        while contract.is_active and self.accrual.is_complete(contract, self.clock.now()):
            try:
                return self.store.set_status(contract.id, contract.version, ContractStatus.COMPLETED)
            except ConcurrentUpdateConflict:
                contract = self.store.get_contract(contract.id)
        return contract

    def get(self, contract_id: str, user_id: Optional[str] = None) -> RentalContract:
        """Fetch a contract; when `user_id` is given, only its owner may read it."""
        contract = self.store.get_contract(str(contract_id))
        if user_id is not None and contract.owner_id != str(user_id):
            raise NotOwnerError()
        return self._settle(contract)

    def refresh_status(self, contract_id: str) -> RentalContract:
        return self._settle(self.store.get_contract(str(contract_id)))

    def contracts_for(self, user_id: str, status: Optional[str] = None) -> list[RentalContract]:
        """A user's contracts, newest first, optionally filtered by status."""
        out = [self._settle(c) for c in self.store.contracts_for(user_id)]
        if status:
            out = [c for c in out if c.status == status]
        out.sort(key=lambda c: c.start_time, reverse=True)
        return out

    def snapshot(self, contract: RentalContract) -> dict:
        """Contract plus live accrual figures and the tier's display name."""
        out = self.accrual.snapshot(contract, self.clock.now())
        out["miner_name"] = self._tier_label(contract.tier_id)
        return out
