"""
Custom exception classes for the MineRent rental engine.

These exceptions provide precise error types that the service layer raises
and controllers catch to render a JSON error instead of a generic 500.
"""


class MineRentError(Exception):
    """Base class for every error raised by the rental engine."""

    default_message = "Error: rental operation failed"

    def __init__(self, message: str = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class UnknownTierError(MineRentError):
    """Raised when a tier ID is absent from the catalog."""

    default_message = "Error: unknown miner tier"


class UnsupportedDurationError(MineRentError):
    """Raised when a rental duration is not one of the offered plans."""

    default_message = "Error: unsupported rental duration"


class InsufficientFundsError(MineRentError):
    """Raised when the renter's balance is below the rental price."""

    default_message = "Error: insufficient balance to rent this miner"


class UserNotFoundError(MineRentError):
    """Raised when an account ID cannot be found in the store."""

    default_message = "Error: user not found"


class ContractNotFoundError(MineRentError):
    """Raised when a rental contract cannot be found in the store."""

    default_message = "Error: rental not found"


class NotOwnerError(MineRentError):
    """Raised when a caller acts on a contract they do not own."""

    default_message = "Error: not allowed to access this rental"


class NothingToClaimError(MineRentError):
    """
    Informational outcome: the contract has no unclaimed earnings right now.
    Not a fault; callers should not retry it with backoff.
    """

    default_message = "No earnings available to claim yet"


class ConcurrentUpdateConflict(MineRentError):
    """Raised by the store when a conditional claim update loses a race."""

    default_message = "Error: rental was updated concurrently"


class ClaimRetryExhaustedError(MineRentError):
    """Raised when a claim kept conflicting after the allowed retries."""

    default_message = "Error: claim could not be applied, try again shortly"


class InvalidRequestError(MineRentError):
    """Raised when a request body is not the JSON object an endpoint expects."""

    default_message = "Error: request body must be a JSON object"
