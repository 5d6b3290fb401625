from .accrual_service import AccrualService
from .account_service import AccountService
from .pricing_service import PricingService
from .rental_service import RentalService

__all__ = [
    "AccrualService",
    "AccountService",
    "PricingService",
    "RentalService",
]
