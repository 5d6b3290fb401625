from flask import Blueprint, current_app, g, jsonify, request

from ..exceptions import InvalidRequestError, NothingToClaimError, UnknownTierError, UnsupportedDurationError
from ..services.common import to_int_safe
from ..utils.decorators import identity_required, rental_service
from ..utils.filters import fmt_amount, fmt_local, fmt_time_remaining

bp = Blueprint("rentals", __name__, url_prefix="/rentals")


def _render(contract) -> dict:
    """Snapshot plus display strings in the configured timezone."""
    svc = rental_service()
    tz = current_app.config.get("DISPLAY_TIMEZONE", "UTC")
    out = svc.snapshot(contract)
    out["end_time_local"] = fmt_local(contract.end_time, tz)
    out["time_remaining"] = fmt_time_remaining(svc.accrual.time_remaining(contract, svc.clock.now()))
    return out


@bp.post("")
@identity_required
def rent_miner():
    """Rent a miner for the caller: JSON body {"tier_id": ..., "days": 3|7|14}."""
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise InvalidRequestError()
    tier_id = body.get("tier_id")
    if not isinstance(tier_id, str):
        raise UnknownTierError(f"Error: miner tier {tier_id!r} not found")
    tier_id = tier_id.strip()
    days = to_int_safe(body.get("days"))
    if days is None:
        raise UnsupportedDurationError(f"Error: {body.get('days')!r} days is not a rental plan")

    contract = rental_service().create(g.user_id, tier_id, days)
    return jsonify(_render(contract)), 201


@bp.get("")
@identity_required
def my_rentals():
    """The caller's rentals, newest first; ?status=active|completed filters."""
    status = (request.args.get("status") or "").strip().lower() or None
    contracts = rental_service().contracts_for(g.user_id, status=status)
    return jsonify({"rentals": [_render(c) for c in contracts]})


@bp.get("/<rental_id>")
@identity_required
def rental_detail(rental_id):
    contract = rental_service().get(rental_id, user_id=g.user_id)
    return jsonify(_render(contract))


@bp.post("/<rental_id>/claim")
@identity_required
def claim_earnings(rental_id):
    """Claim accrued earnings. Nothing to claim is a normal 200 with claimed == 0."""
    svc = rental_service()
    try:
        amount = svc.claim(g.user_id, rental_id)
        outcome = "claimed"
    except NothingToClaimError as e:
        amount = 0.0
        outcome = "nothing_to_claim"
        current_app.logger.info("Rental %s: %s", rental_id, e.message)

    contract = svc.get(rental_id, user_id=g.user_id)
    return jsonify({
        "status": outcome,
        "claimed": amount,
        "claimed_display": fmt_amount(amount),
        "rental": _render(contract),
    })
