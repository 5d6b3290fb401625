from flask import Blueprint, g, jsonify

from ..services.account_service import AccountService
from ..utils.decorators import identity_required, rental_service

bp = Blueprint("account", __name__)


@bp.get("/health")
def health():
    return jsonify({"status": "ok"})


@bp.get("/account")
@identity_required
def account():
    return jsonify(AccountService.account(g.user_id, store=rental_service().store))


@bp.get("/account/transactions")
@identity_required
def transactions():
    txs = AccountService.transactions(g.user_id, store=rental_service().store)
    return jsonify({"transactions": txs})
