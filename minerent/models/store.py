import atexit
import logging
import os
import pickle
import threading
import uuid
from datetime import datetime, timezone

from ..exceptions import (
    ContractNotFoundError,
    ConcurrentUpdateConflict,
    InsufficientFundsError,
    UserNotFoundError,
)
from .contract import RentalContract

logger = logging.getLogger(__name__)


def _stamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class Store:
    """
    In-process persistence for accounts, rental contracts and transactions.

    Every mutating method runs under one re-entrant lock and writes the pickle
    file before returning, so each call is a single all-or-nothing unit. If the
    write fails the in-memory change is rolled back and the error propagates.
    With no path the store lives in memory only.
    """

    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path) if path else None
        self.users: dict[str, dict] = {}
        self.contracts: dict[str, dict] = {}
        self.transactions: dict[str, dict] = {}
        self._rw = threading.RLock()

        if self.path:
            logger.info("Store using file %s", self.path)
            self._load()
            # Save on exit (skipped in test environments)
            if not Store._atexit_registered and os.getenv("APP_ENV") != "test":
                atexit.register(self.save)
                Store._atexit_registered = True

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = None):
        """Return the process-wide Store, creating it on first use."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path)
        return cls._inst

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("Store load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            self.users = data.get("users", {}) or {}
            self.contracts = data.get("contracts", {}) or {}
            self.transactions = data.get("transactions", {}) or {}
            logger.info("Store loaded: users=%d, contracts=%d, transactions=%d",
                        len(self.users), len(self.contracts), len(self.transactions))
        else:
            # Incompatible data format: back up the old file and start empty
            bak = self.path + ".bak"
            try:
                os.replace(self.path, bak)
                logger.warning("Incompatible store (%s); backed up to %s. Starting empty.",
                               type(data).__name__, bak)
            except OSError as e:
                logger.warning("Store backup failed: %s", e)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        if not self.path:
            return
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        tmp = self.path + ".tmp"
        payload = {
            "users": self.users,
            "contracts": self.contracts,
            "transactions": self.transactions,
        }
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            self._dump()

    def clear(self):
        with self._rw:
            self.users.clear()
            self.contracts.clear()
            self.transactions.clear()
            self._dump()

    # ---------- Users / balances ----------
    def user_exists(self, username: str) -> bool:
        return any(u["username"] == username for u in self.users.values())

    def find_user(self, username: str) -> dict | None:
        for u in self.users.values():
            if u["username"] == username:
                return u
        return None

    def get_user(self, user_id: str) -> dict | None:
        return self.users.get(str(user_id))

    def create_user(self, username: str, balance: float = 0.0) -> str:
        """Create an account and return its ID."""
        with self._rw:
            if self.user_exists(username):
                raise ValueError("Username already exists")
            uid = str(uuid.uuid4())
            self.users[uid] = {
                "user_id": uid,
                "username": username,
                "balance": float(balance),
                "created_at": _stamp(),
            }
            self._dump()
            return uid

    def _user(self, user_id: str) -> dict:
        u = self.users.get(str(user_id))
        if u is None:
            raise UserNotFoundError(f"Error: user with ID '{user_id}' not found")
        return u

    def balance(self, user_id: str) -> float:
        return float(self._user(user_id)["balance"])

    def debit(self, user_id: str, amount: float) -> float:
        """Take `amount` from the balance; return the new balance."""
        with self._rw:
            u = self._user(user_id)
            before = float(u["balance"])
            if before < amount:
                raise InsufficientFundsError(
                    f"Error: balance {before:.2f} is below the required {amount:.2f}")
            u["balance"] = before - amount
            try:
                self._dump()
            except Exception:
                u["balance"] = before
                raise
            return u["balance"]

    def credit(self, user_id: str, amount: float) -> float:
        """Add `amount` to the balance; return the new balance."""
        with self._rw:
            u = self._user(user_id)
            before = float(u["balance"])
            u["balance"] = before + amount
            try:
                self._dump()
            except Exception:
                u["balance"] = before
                raise
            return u["balance"]

    # ---------- Contracts ----------
    def get_contract(self, contract_id: str) -> RentalContract:
        """Return a detached copy of the stored contract."""
        with self._rw:
            d = self.contracts.get(str(contract_id))
            if d is None:
                raise ContractNotFoundError(f"Error: rental with ID '{contract_id}' not found")
            return RentalContract.from_dict(d)

    def put_contract(self, contract: RentalContract) -> None:
        with self._rw:
            self.contracts[contract.id] = contract.to_dict()
            self._dump()

    def owner_of(self, contract_id: str) -> str:
        with self._rw:
            d = self.contracts.get(str(contract_id))
            if d is None:
                raise ContractNotFoundError(f"Error: rental with ID '{contract_id}' not found")
            return d["owner_id"]

    def contracts_for(self, owner_id: str) -> list[RentalContract]:
        with self._rw:
            rows = [d for d in self.contracts.values() if d.get("owner_id") == str(owner_id)]
            return [RentalContract.from_dict(d) for d in rows]

    def open_contract(self, contract: RentalContract, tx: dict) -> RentalContract:
        """
        Debit the price, store the contract and record the rental transaction
        as one unit.
        """
        with self._rw:
            if contract.id in self.contracts:
                raise ValueError(f"Duplicate rental id {contract.id!r}")
            u = self._user(contract.owner_id)
            before = float(u["balance"])
            if before < contract.price_paid:
                raise InsufficientFundsError(
                    f"Error: balance {before:.2f} is below the price {contract.price_paid:.2f}")

            tid = self._new_tx_id()
            u["balance"] = before - contract.price_paid
            self.contracts[contract.id] = contract.to_dict()
            self.transactions[tid] = dict(tx, id=tid)
            try:
                self._dump()
            except Exception:
                u["balance"] = before
                self.contracts.pop(contract.id, None)
                self.transactions.pop(tid, None)
                raise
            return contract

    def commit_claim(self, contract_id: str, expected_version: int, *,
                     claimed_earnings: float, status: str, amount: float, tx: dict) -> RentalContract:
        """
        Conditional update for a claim: write the new claimed total and status,
        credit the owner and record the reward transaction, but only if the
        stored version still equals `expected_version`. Raises
        ConcurrentUpdateConflict otherwise. Returns the committed contract.
        """
        with self._rw:
            d = self.contracts.get(str(contract_id))
            if d is None:
                raise ContractNotFoundError(f"Error: rental with ID '{contract_id}' not found")
            if int(d.get("version") or 0) != expected_version:
                raise ConcurrentUpdateConflict()

            u = self._user(d["owner_id"])
            prev_contract = dict(d)
            prev_balance = float(u["balance"])

            tid = self._new_tx_id()
            d.update({
                "claimed_earnings": claimed_earnings,
                "status": status,
                "version": expected_version + 1,
            })
            u["balance"] = prev_balance + amount
            self.transactions[tid] = dict(tx, id=tid)
            try:
                self._dump()
            except Exception:
                d.clear()
                d.update(prev_contract)
                u["balance"] = prev_balance
                self.transactions.pop(tid, None)
                raise
            return RentalContract.from_dict(d)

    def set_status(self, contract_id: str, expected_version: int, status: str) -> RentalContract:
        """Conditional status-only update; raises ConcurrentUpdateConflict on a stale version."""
        with self._rw:
            d = self.contracts.get(str(contract_id))
            if d is None:
                raise ContractNotFoundError(f"Error: rental with ID '{contract_id}' not found")
            if int(d.get("version") or 0) != expected_version:
                raise ConcurrentUpdateConflict()
            prev = dict(d)
            d.update({"status": status, "version": expected_version + 1})
            try:
                self._dump()
            except Exception:
                d.clear()
                d.update(prev)
                raise
            return RentalContract.from_dict(d)

    # ---------- Transactions ----------
    def _new_tx_id(self) -> str:
        return str(uuid.uuid4())

    def transactions_for(self, user_id: str) -> list[dict]:
        with self._rw:
            out = [dict(t) for t in self.transactions.values() if t.get("user_id") == str(user_id)]
        out.sort(key=lambda t: t.get("created_at") or "", reverse=True)
        return out
