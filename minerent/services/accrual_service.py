"""Time-based accrual for rental contracts."""

from datetime import datetime, timedelta
from typing import Optional

from minerent.exceptions import UnknownTierError
from minerent.models.contract import RentalContract
from minerent.models.tier import TierCatalog

_HOUR = timedelta(hours=1)


class AccrualService:
    """
    Pure accrual math. Nothing here reads the wall clock or claimed earnings:
    the curve depends only on the contract's start, end, hourly rate and cap.
    """

    def __init__(self, catalog: Optional[TierCatalog] = None):
        # Only consulted for records created before the rate was snapshotted
        self.catalog = catalog

    def hourly_rate(self, contract: RentalContract) -> float:
        if contract.hourly_rate is not None:
            return contract.hourly_rate
        if self.catalog is None:
            raise UnknownTierError(
                f"Error: rental '{contract.id}' has no hourly rate and no catalog to find tier '{contract.tier_id}'")
        return self.catalog.lookup(contract.tier_id).hourly_rate

    @staticmethod
    def elapsed(contract: RentalContract, now: datetime) -> timedelta:
        """Time mined so far, clamped to [0, term]."""
        term = contract.term
        spent = now - contract.start_time
        if spent < timedelta(0):
            return timedelta(0)
        return min(spent, term)

    def accrued(self, contract: RentalContract, now: datetime) -> float:
        """
        Earnings accrued at `now`. Exactly the cap at or after the end time;
        never negative before the start.
        """
        cap = contract.total_potential_earnings
        elapsed = self.elapsed(contract, now)
        if elapsed >= contract.term:
            return cap
        raw = self.hourly_rate(contract) * (elapsed / _HOUR)
        return min(raw, cap)

    def claimable(self, contract: RentalContract, now: datetime) -> float:
        return max(0.0, self.accrued(contract, now) - contract.claimed_earnings)

    @staticmethod
    def is_complete(contract: RentalContract, now: datetime) -> bool:
        return now >= contract.end_time

    def progress(self, contract: RentalContract, now: datetime) -> float:
        """Percent of the term elapsed, in [0, 100]."""
        return self.elapsed(contract, now) / contract.term * 100

    @staticmethod
    def time_remaining(contract: RentalContract, now: datetime) -> timedelta:
        left = contract.end_time - now
        return left if left > timedelta(0) else timedelta(0)

    def snapshot(self, contract: RentalContract, now: datetime) -> dict:
        """Contract fields plus the live accrual figures shown on a rental card."""
        accrued = self.accrued(contract, now)
        remaining = self.time_remaining(contract, now)
        out = contract.to_dict()
        out.update({
            "accrued": accrued,
            "claimable": max(0.0, accrued - contract.claimed_earnings),
            "progress": round(self.progress(contract, now), 2),
            "seconds_remaining": int(remaining.total_seconds()),
            "is_complete": self.is_complete(contract, now),
        })
        return out
