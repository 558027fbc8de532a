"""
CardLedger services.

Business rules that sit between the API and the repository.
"""

from cardledger.services.card_validation import (
    check_sale_dates,
    validate_card_draft,
    validate_grade,
    validate_sale,
)
from cardledger.services.subscriptions import (
    Entitlements,
    Plan,
    check_card_capacity,
    get_plan,
    require_premium,
)

__all__ = [
    "Entitlements",
    "Plan",
    "check_card_capacity",
    "check_sale_dates",
    "get_plan",
    "require_premium",
    "validate_card_draft",
    "validate_grade",
    "validate_sale",
]
