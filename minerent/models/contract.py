from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..utils.constants import ContractStatus


def _to_dt(x) -> datetime:
    """Coerce an ISO string or datetime to an aware UTC datetime."""
    if isinstance(x, datetime):
        dt = x
    elif isinstance(x, str):
        s = x.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    else:
        raise ValueError(f"Unsupported timestamp: {x!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class RentalContract:
    """
    A time-bounded lease of one miner tier.

    The Store keeps raw dicts; services wrap them into this object to run
    accrual and claim rules. `total_potential_earnings` and `hourly_rate` are
    fixed at creation and never re-read from the catalog.
    """
    id: str
    owner_id: str
    tier_id: str
    rental_days: int
    start_time: datetime
    end_time: datetime
    price_paid: float
    total_potential_earnings: float
    hourly_rate: Optional[float]
    claimed_earnings: float = 0.0
    status: str = ContractStatus.ACTIVE
    version: int = 0
    created_at: Optional[datetime] = field(default=None)

    @classmethod
    def open(cls, *, contract_id: str, owner_id: str, tier_id: str, days: int,
             start: datetime, price: float, cap: float, hourly_rate: float) -> "RentalContract":
        start = _to_dt(start)
        return cls(
            id=contract_id,
            owner_id=owner_id,
            tier_id=tier_id,
            rental_days=days,
            start_time=start,
            end_time=start + timedelta(days=days),
            price_paid=price,
            total_potential_earnings=cap,
            hourly_rate=hourly_rate,
            created_at=start,
        )

    @property
    def term(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def is_active(self) -> bool:
        return self.status == ContractStatus.ACTIVE

    # ---------- dict mapping ----------
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "tier_id": self.tier_id,
            "rental_days": self.rental_days,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "price_paid": self.price_paid,
            "total_potential_earnings": self.total_potential_earnings,
            "hourly_rate": self.hourly_rate,
            "claimed_earnings": self.claimed_earnings,
            "status": self.status,
            "version": self.version,
            "created_at": (self.created_at or self.start_time).isoformat(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "RentalContract":
        return cls(
            id=str(d["id"]),
            owner_id=str(d["owner_id"]),
            tier_id=d["tier_id"],
            rental_days=int(d["rental_days"]),
            start_time=_to_dt(d["start_time"]),
            end_time=_to_dt(d["end_time"]),
            price_paid=float(d.get("price_paid") or 0),
            total_potential_earnings=float(d["total_potential_earnings"]),
            hourly_rate=float(d["hourly_rate"]) if d.get("hourly_rate") is not None else None,
            claimed_earnings=float(d.get("claimed_earnings") or 0),
            status=d.get("status") or ContractStatus.ACTIVE,
            version=int(d.get("version") or 0),
            created_at=_to_dt(d["created_at"]) if d.get("created_at") else None,
        )
