# minerent/utils/constants.py

"""
Global constants for statuses, plans and transaction types.
These constants are imported by both models and services.
"""

HOURS_PER_DAY = 24


class ContractStatus:
    ACTIVE = "active"
    COMPLETED = "completed"


class TransactionType:
    MINER_RENTAL = "miner_rental"
    MINING_REWARD = "mining_reward"


# --- Plans: rental days -> price multiplier ---
PLAN_DISCOUNTS = {
    3: 1.00,
    7: 0.90,
    14: 0.80,
}
SUPPORTED_DURATIONS = tuple(sorted(PLAN_DISCOUNTS))

# --- Misc ---
POOL_NAME = "Mining Pool"
PLACEHOLDER = "/placeholder.svg"
USER_HEADER = "X-User-Id"
