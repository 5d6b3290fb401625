from flask import Blueprint, jsonify, request

from ..exceptions import UnsupportedDurationError
from ..services.common import to_int_safe
from ..utils.decorators import rental_service

bp = Blueprint("miners", __name__, url_prefix="/miners")


@bp.get("")
def list_miners():
    """Catalog with every plan priced, for the rental page."""
    svc = rental_service()
    miners = []
    for tier in svc.catalog:
        item = tier.to_dict()
        item["plans"] = [p.to_dict() for p in svc.pricing.plans(tier.tier_id)]
        miners.append(item)
    return jsonify({"miners": miners})


@bp.get("/<tier_id>/quote")
def quote(tier_id):
    """Price one plan: /miners/<tier_id>/quote?days=7"""
    raw = request.args.get("days")
    days = to_int_safe(raw)
    if days is None:
        raise UnsupportedDurationError(f"Error: {raw!r} days is not a rental plan")
    plan = rental_service().pricing.quote(tier_id, days)
    return jsonify(plan.to_dict())
