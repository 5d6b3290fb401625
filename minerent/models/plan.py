from dataclasses import dataclass


@dataclass(frozen=True)
class RentalPlan:
    """Priced (tier, duration) pair. Derived on demand, never persisted."""
    tier_id: str
    days: int
    discount: float  # price multiplier, e.g. 0.9 means 10% off
    total_price: int
    total_potential_earnings: float

    @property
    def estimated_profit(self) -> float:
        return self.total_potential_earnings - self.total_price

    def to_dict(self) -> dict:
        return {
            "tier_id": self.tier_id,
            "days": self.days,
            "discount": self.discount,
            "total_price": self.total_price,
            "total_potential_earnings": self.total_potential_earnings,
            "estimated_profit": self.estimated_profit,
        }
