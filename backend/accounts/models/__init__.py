from accounts.models.banking_details import BankingDetails
from accounts.models.user import DEFAULT_ROLE, ROLES, User

__all__ = [
    "BankingDetails",
    "DEFAULT_ROLE",
    "ROLES",
    "User",
]
