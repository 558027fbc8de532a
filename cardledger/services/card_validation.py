"""
Card write boundary.

Every card payload, whether typed into the API or read from a spreadsheet,
passes through `validate_card_draft` before it reaches the repository.
The statistics engines downstream assume these invariants hold:

- price is positive and the bought date is present
- the sold date is never earlier than the bought date
- sold cards carry a sold price and a sold date; bought cards carry neither
- grading company and grade are present together, only on graded cards
"""

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from cardledger.config import MAIN_COLLECTION_ID, settings
from cardledger.models.card import (
    Card,
    CardDraft,
    CardStatus,
    GradingCompany,
    parse_card_date,
    parse_money,
)
from cardledger.models.failure import CardValidationError

logger = logging.getLogger(__name__)

GRADE_MIN = Decimal(1)
GRADE_MAX = Decimal(10)

# Money columns are NUMERIC(12, 2)
CENT = Decimal("0.01")
MONEY_LIMIT = Decimal(10) ** 10

_TRUTHY = {"true", "1", "yes", "y"}


def _is_graded(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, int | float | Decimal):
        return value == 1
    return str(value).strip().lower() in _TRUTHY


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return None
    return text


def _parse_status(value: Any) -> CardStatus:
    text = _clean_text(value)
    if text is None:
        return CardStatus.BOUGHT
    try:
        return CardStatus(text.lower())
    except ValueError:
        raise CardValidationError(
            f"Status must be 'bought' or 'sold', got '{text}'", field="status"
        ) from None


def _require_date(value: Any, label: str, field: str) -> date:
    if _clean_text(value) is None and not isinstance(value, date):
        raise CardValidationError(f"{label} is required", field=field)
    parsed = parse_card_date(value)
    if parsed is None:
        raise CardValidationError(f"{label} is not a valid date", field=field)
    return parsed


def _require_positive_money(value: Any, label: str, field: str) -> Decimal:
    amount = parse_money(value)
    if amount is None:
        raise CardValidationError(f"{label} is required", field=field)
    if amount <= 0:
        raise CardValidationError(f"{label} must be greater than zero", field=field)
    if amount >= MONEY_LIMIT:
        raise CardValidationError(f"{label} must be less than {MONEY_LIMIT:,}", field=field)
    if amount != amount.quantize(CENT):
        raise CardValidationError(f"{label} cannot have more than 2 decimal places", field=field)
    return amount.quantize(CENT)


def validate_grade(company: GradingCompany, value: Decimal) -> None:
    """
    Check a grade against the company's scale.

    PSA grades whole numbers 1-10; BGS grades 1-10 in half steps.
    """
    if not GRADE_MIN <= value <= GRADE_MAX:
        raise CardValidationError(
            f"{company.value} grade must be between 1 and 10", field="grading_value"
        )
    step = Decimal(1) if company == GradingCompany.PSA else Decimal("0.5")
    if value % step != 0:
        raise CardValidationError(
            f"{company.value} grade must be a multiple of {step}", field="grading_value"
        )


def check_sale_dates(bought_date: date, sold_date: date) -> None:
    """Date-only comparison; selling on the purchase day is allowed."""
    if sold_date < bought_date:
        raise CardValidationError(
            "Sold date cannot be earlier than bought date", field="sold_date"
        )


def validate_card_draft(data: Mapping[str, Any]) -> CardDraft:
    """
    Validate and normalize a raw card payload.

    Args:
        data: Field name -> loosely typed value. Strings are accepted for
            money and dates so spreadsheet rows can be passed as-is.

    Returns:
        CardDraft satisfying every card invariant.

    Raises:
        CardValidationError: On the first violated rule.
    """
    name = _clean_text(data.get("name"))
    if name is None:
        raise CardValidationError("Name is required", field="name")

    price = _require_positive_money(data.get("price"), "Price", "price")

    category = _clean_text(data.get("category"))
    if category is None:
        raise CardValidationError("Category is required", field="category")

    bought_date = _require_date(data.get("bought_date"), "Bought date", "bought_date")
    status = _parse_status(data.get("status"))

    sold_price: Decimal | None = None
    sold_date: date | None = None
    if status == CardStatus.SOLD:
        sold_price = _require_positive_money(data.get("sold_price"), "Sold price", "sold_price")
        sold_date = _require_date(data.get("sold_date"), "Sold date", "sold_date")
        check_sale_dates(bought_date, sold_date)

    graded = _is_graded(data.get("graded"))
    grading_company: GradingCompany | None = None
    grading_value: Decimal | None = None
    if graded:
        company_text = _clean_text(data.get("grading_company"))
        grade = parse_money(data.get("grading_value"))
        if company_text is None or grade is None:
            raise CardValidationError(
                "Grading company and value are required for graded cards",
                field="grading_company" if company_text is None else "grading_value",
            )
        try:
            grading_company = GradingCompany(company_text.upper())
        except ValueError:
            raise CardValidationError(
                f"Grading company must be PSA or BGS, got '{company_text}'",
                field="grading_company",
            ) from None
        validate_grade(grading_company, grade)
        grading_value = grade

    collection_id = data.get("collection_id")

    return CardDraft(
        name=name,
        price=price,
        category=category,
        bought_date=bought_date,
        status=status,
        sold_price=sold_price,
        sold_date=sold_date,
        description=_clean_text(data.get("description")),
        image_url=_clean_text(data.get("image_url")) or settings.default_image_url,
        collection_id=int(collection_id) if collection_id else MAIN_COLLECTION_ID,
        graded=graded,
        grading_company=grading_company,
        grading_value=grading_value,
    )


def validate_sale(card: Card, sold_price: Any, sold_date: Any) -> tuple[Decimal, date]:
    """
    Validate the bought -> sold transition of an existing card.

    Returns:
        (sold_price, sold_date) ready to stamp on the card.
    """
    if card.is_sold:
        raise CardValidationError("Card is already sold", field="status")
    if card.bought_date is None:
        raise CardValidationError(
            "Purchase date is required before selling a card", field="bought_date"
        )

    price = _require_positive_money(sold_price, "Sold price", "sold_price")
    when = _require_date(sold_date, "Sold date", "sold_date")
    check_sale_dates(card.bought_date, when)

    logger.debug("Sale of card %d validated at %s on %s", card.id, price, when)
    return price, when
