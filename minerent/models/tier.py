from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping

from ..exceptions import UnknownTierError
from ..utils.constants import PLACEHOLDER


@dataclass(frozen=True)
class TierSpec:
    """
    One catalog entry. Rates are in coins per hour, prices in coins per day.
    A tier with base_daily_price == 0 is the free tier.
    """
    tier_id: str
    hourly_rate: float
    base_daily_price: float
    name: str = ""
    description: str = ""
    image: str = PLACEHOLDER

    def __post_init__(self):
        if not self.tier_id:
            raise ValueError("tier_id is required")
        if not math.isfinite(self.hourly_rate) or self.hourly_rate < 0:
            raise ValueError(f"hourly_rate must be a finite number >= 0 for tier {self.tier_id!r}")
        if not math.isfinite(self.base_daily_price) or self.base_daily_price < 0:
            raise ValueError(f"base_daily_price must be a finite number >= 0 for tier {self.tier_id!r}")

    @property
    def is_free(self) -> bool:
        return self.base_daily_price == 0

    def to_dict(self) -> dict:
        return {
            "tier_id": self.tier_id,
            "name": self.name or self.tier_id,
            "description": self.description,
            "image": self.image,
            "hourly_rate": self.hourly_rate,
            "base_daily_price": self.base_daily_price,
            "is_free": self.is_free,
        }


class TierCatalog:
    """
    Read-only table of miner tiers, built once and passed to the pricing and
    accrual services. Lookups never fall back to a default rate.
    """

    def __init__(self, tiers: Iterable[TierSpec]):
        table: dict[str, TierSpec] = {}
        for t in tiers:
            if t.tier_id in table:
                raise ValueError(f"Duplicate tier id {t.tier_id!r}")
            table[t.tier_id] = t
        self._tiers = table

    @classmethod
    def from_dicts(cls, rows: Iterable[Mapping]) -> "TierCatalog":
        """Build from plain mappings using either camelCase or snake_case keys."""
        tiers = []
        for d in rows:
            tiers.append(TierSpec(
                tier_id=str(d.get("tier_id") or d.get("id") or ""),
                hourly_rate=float(d.get("hourly_rate", d.get("hourlyRate", 0)) or 0),
                base_daily_price=float(d.get("base_daily_price", d.get("baseDailyPrice", 0)) or 0),
                name=d.get("name") or "",
                description=d.get("description") or "",
                image=d.get("image") or PLACEHOLDER,
            ))
        return cls(tiers)

    @classmethod
    def default(cls) -> "TierCatalog":
        return cls.from_dicts(DEFAULT_MINERS)

    def lookup(self, tier_id: str) -> TierSpec:
        try:
            return self._tiers[tier_id]
        except KeyError:
            raise UnknownTierError(f"Error: miner tier '{tier_id}' not found") from None

    def all(self) -> list[TierSpec]:
        return list(self._tiers.values())

    def __contains__(self, tier_id) -> bool:
        return tier_id in self._tiers

    def __iter__(self) -> Iterator[TierSpec]:
        return iter(self._tiers.values())

    def __len__(self) -> int:
        return len(self._tiers)


# Stock miners offered by the rental page
DEFAULT_MINERS = [
    {
        "id": "free-miner",
        "name": "Basic Miner",
        "description": "Perfect for beginners. Low power consumption with steady returns.",
        "image": "/miners/free-miner.png",
        "hourlyRate": 25,
        "baseDailyPrice": 150,
    },
    {
        "id": "epic-miner",
        "name": "Epic Miner",
        "description": "High-performance mining with excellent efficiency and returns.",
        "image": "/miners/epic-miner.png",
        "hourlyRate": 75,
        "baseDailyPrice": 500,
    },
    {
        "id": "legendary-miner",
        "name": "Legendary Miner",
        "description": "Premium mining equipment for serious miners seeking maximum profits.",
        "image": "/miners/legendary-miner.png",
        "hourlyRate": 150,
        "baseDailyPrice": 1200,
    },
    {
        "id": "super-miner",
        "name": "Super Miner",
        "description": "Top-tier mining powerhouse with incredible hash rates and returns.",
        "image": "/miners/super-miner.png",
        "hourlyRate": 300,
        "baseDailyPrice": 2500,
    },
]
