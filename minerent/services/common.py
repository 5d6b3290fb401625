"""Shared service helpers."""

import uuid
from typing import Optional

from minerent.models.store import Store


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


def new_id() -> str:
    return str(uuid.uuid4())


def round2(x: float) -> float:
    return round(float(x), 2)


def to_int_safe(value) -> Optional[int]:
    """Safely convert to int; return None if invalid (floats must be whole)."""
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if not f.is_integer():
        return None
    return int(f)
