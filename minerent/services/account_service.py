from __future__ import annotations

from typing import Optional

from minerent.exceptions import UserNotFoundError
from minerent.models.store import Store
from minerent.services.common import _store, round2


class AccountService:
    """Account admin operations (create, balance) and per-user transaction history."""

    @staticmethod
    def create_account(username: str, balance: float = 0.0, store: Optional[Store] = None):
        """
        Returns:
            (ok: bool, message: str, user_id: Optional[str])
        """
        st = store or _store()
        username = (username or "").strip()
        if not username:
            return False, "Username is required", None
        if balance < 0:
            return False, "Starting balance cannot be negative", None
        if st.user_exists(username):
            return False, "Username exists", None
        uid = st.create_user(username, balance)
        return True, "Account created", uid

    @staticmethod
    def account(user_id: str, store: Optional[Store] = None) -> dict:
        st = store or _store()
        u = st.get_user(user_id)
        if not u:
            raise UserNotFoundError(f"Error: user with ID '{user_id}' not found")
        return {
            "user_id": u["user_id"],
            "username": u["username"],
            "balance": round2(u["balance"]),
        }

    @staticmethod
    def transactions(user_id: str, store: Optional[Store] = None) -> list[dict]:
        """This user's transactions, newest first."""
        st = store or _store()
        if not st.get_user(user_id):
            raise UserNotFoundError(f"Error: user with ID '{user_id}' not found")
        return st.transactions_for(user_id)
