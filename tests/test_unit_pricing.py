import math

import pytest

from minerent.exceptions import UnknownTierError, UnsupportedDurationError
from minerent.services.pricing_service import PricingService


def test_plan_discounts(catalog):
    pricing = PricingService(catalog)
    assert pricing.quote("epic", 3).discount == 1.0
    assert pricing.quote("epic", 7).discount == 0.9
    assert pricing.quote("epic", 14).discount == 0.8


def test_seven_day_plan_is_floored(catalog):
    plan = PricingService(catalog).quote("epic", 7)
    # 15 * 7 * 0.9 = 94.5 -> 94
    assert plan.total_price == 94
    assert plan.total_price == math.floor(15 * 7 * 0.9)
    assert plan.total_potential_earnings == pytest.approx(134.4)


def test_fourteen_day_plan(catalog):
    plan = PricingService(catalog).quote("super", 14)
    assert plan.total_price == math.floor(2500 * 14 * 0.8)
    assert plan.total_potential_earnings == 8 * 24 * 14


def test_earnings_cap_is_not_discounted(catalog):
    pricing = PricingService(catalog)
    three = pricing.quote("super", 3)
    fourteen = pricing.quote("super", 14)
    assert fourteen.total_potential_earnings == three.total_potential_earnings / 3 * 14


@pytest.mark.parametrize("days", [3, 7, 14])
def test_free_tier_costs_nothing(catalog, days):
    assert PricingService(catalog).quote("free", days).total_price == 0


@pytest.mark.parametrize("days", [0, 1, 5, 10, 30, -7, None, "7"])
def test_unsupported_duration_rejected(catalog, days):
    with pytest.raises(UnsupportedDurationError):
        PricingService(catalog).quote("epic", days)


def test_unknown_tier_is_not_defaulted(catalog):
    with pytest.raises(UnknownTierError):
        PricingService(catalog).quote("mystery-miner", 7)


def test_plans_lists_every_duration(catalog):
    plans = PricingService(catalog).plans("epic")
    assert [p.days for p in plans] == [3, 7, 14]
    assert plans[1].estimated_profit == pytest.approx(134.4 - 94)
