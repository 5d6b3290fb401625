"""Plan pricing: price and earnings cap for a (tier, duration) pair."""

import math

from minerent.exceptions import UnsupportedDurationError
from minerent.models.plan import RentalPlan
from minerent.models.tier import TierCatalog
from minerent.utils.constants import HOURS_PER_DAY, PLAN_DISCOUNTS, SUPPORTED_DURATIONS


class PricingService:
    """
    Quotes rental plans against an injected catalog.
    Longer plans get a discount on price only, never on the earnings cap:
      - 3 days: list price
      - 7 days: 10% off
      - 14 days: 20% off
    Prices are floored to whole coins so rounding never under-charges.
    """

    def __init__(self, catalog: TierCatalog):
        self.catalog = catalog

    @staticmethod
    def _discount_for(days) -> float:
        """Return the price multiplier for a plan or raise UnsupportedDurationError."""
        try:
            return PLAN_DISCOUNTS[days]
        except (KeyError, TypeError):
            allowed = ", ".join(str(d) for d in SUPPORTED_DURATIONS)
            raise UnsupportedDurationError(
                f"Error: {days!r} days is not a rental plan (choose {allowed})") from None

    def quote(self, tier_id: str, days: int) -> RentalPlan:
        multiplier = self._discount_for(days)
        tier = self.catalog.lookup(tier_id)

        base_price = tier.base_daily_price * days
        total_price = math.floor(base_price * multiplier)
        potential = tier.hourly_rate * HOURS_PER_DAY * days

        return RentalPlan(
            tier_id=tier.tier_id,
            days=days,
            discount=multiplier,
            total_price=total_price,
            total_potential_earnings=potential,
        )

    def plans(self, tier_id: str) -> list[RentalPlan]:
        """Every offered plan for a tier, shortest first."""
        return [self.quote(tier_id, d) for d in SUPPORTED_DURATIONS]
