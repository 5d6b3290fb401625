from flask import Blueprint, current_app, jsonify

from ..exceptions import (
    ClaimRetryExhaustedError,
    ContractNotFoundError,
    InsufficientFundsError,
    InvalidRequestError,
    MineRentError,
    NotOwnerError,
    NothingToClaimError,
    UnknownTierError,
    UnsupportedDurationError,
    UserNotFoundError,
)

bp = Blueprint("errors", __name__)

# exception class -> (http status, error code)
ERROR_STATUS = {
    UnknownTierError: (404, "unknown_tier"),
    ContractNotFoundError: (404, "not_found"),
    UserNotFoundError: (404, "user_not_found"),
    UnsupportedDurationError: (400, "unsupported_duration"),
    InvalidRequestError: (400, "invalid_request"),
    InsufficientFundsError: (402, "insufficient_funds"),
    NotOwnerError: (403, "not_owner"),
    NothingToClaimError: (200, "nothing_to_claim"),
    ClaimRetryExhaustedError: (503, "claim_conflict"),
}


@bp.app_errorhandler(MineRentError)
def handle_minerent_error(err: MineRentError):
    status, code = ERROR_STATUS.get(type(err), (500, "internal_error"))
    if status >= 500:
        current_app.logger.error("%s: %s", type(err).__name__, err.message)
    return jsonify({"error": code, "message": err.message}), status
