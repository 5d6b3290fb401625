from minerent.config import Config
from minerent.models.store import Store
from minerent.services.account_service import AccountService

DEMO_ACCOUNTS = {
    "miner": 5000.0,
    "whale": 100000.0,
}


def ensure_account(store: Store, username: str, balance: float):
    """
    Ensure an account with `username` exists in the store.
    - If exists: top the balance up to `balance` (idempotent).
    - If not:    create it with `balance`.
    """
    u = store.find_user(username)
    if u:
        if u["balance"] < balance:
            store.credit(u["user_id"], balance - u["balance"])
        return u["user_id"]
    ok, msg, uid = AccountService.create_account(username, balance, store=store)
    if not ok:
        raise SystemExit(f"Could not create {username}: {msg}")
    return uid


def main():
    store = Store.instance(Config.DATA_PATH or None)

    ids = {}
    for username, balance in DEMO_ACCOUNTS.items():
        ids[username] = ensure_account(store, username, max(balance, Config.STARTING_BALANCE))

    store.save()

    print("✅ Seed complete.")
    for username, uid in ids.items():
        print(f"👤 {username}: send header X-User-Id: {uid}")


if __name__ == "__main__":
    main()
