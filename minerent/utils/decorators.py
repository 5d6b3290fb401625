from functools import wraps

from flask import current_app, g, jsonify, request

from .constants import USER_HEADER


def identity_required(fn):
    """Resolve the caller from the identity header into `g.user_id`, or answer 401."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        uid = (request.headers.get(USER_HEADER) or "").strip()
        if not uid:
            return jsonify({"error": "unauthenticated", "message": f"Missing {USER_HEADER} header"}), 401
        g.user_id = uid
        return fn(*args, **kwargs)

    return wrapper


def rental_service():
    """The RentalService bound to the running app."""
    return current_app.extensions["minerent"]
