from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from cardledger.config import MAIN_COLLECTION_ID

ZERO = Decimal(0)


class CardStatus(str, Enum):
    """Ownership state of a card."""

    BOUGHT = "bought"
    SOLD = "sold"


class GradingCompany(str, Enum):
    """Third-party grading services a card can be slabbed by."""

    PSA = "PSA"
    BGS = "BGS"


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card the user bought, and possibly sold.

    Attributes:
        id: Database identifier
        name: Card name as entered by the user
        price: Purchase price
        status: bought or sold
        bought_date: Purchase date; None when the stored value was unparseable
        sold_price: Sale price (sold cards only)
        sold_date: Sale date (sold cards only)
        category: Sport or game, e.g. "Hockey"
        collection_id: Owning collection (1 = Main Collection)
        graded: Whether the card was graded
        grading_company: PSA or BGS when graded
        grading_value: Numeric grade when graded
    """

    id: int
    name: str
    price: Decimal
    status: CardStatus
    bought_date: date | None
    sold_price: Decimal | None = None
    sold_date: date | None = None
    category: str | None = None
    collection_id: int = MAIN_COLLECTION_ID
    graded: bool = False
    grading_company: GradingCompany | None = None
    grading_value: Decimal | None = None
    image_url: str | None = None
    description: str | None = None
    user_id: str = ""
    created_at: datetime | None = None

    @property
    def is_sold(self) -> bool:
        return self.status == CardStatus.SOLD

    @property
    def proceeds(self) -> Decimal:
        """Sale proceeds, zero when no sold price was recorded."""
        return self.sold_price or ZERO

    def profit(self) -> Decimal:
        """Realized profit. Only meaningful for sold cards."""
        return self.proceeds - self.price

    def roi(self) -> Decimal | None:
        """Return on investment in percent, None for unsold or zero-cost cards."""
        if not self.is_sold or not self.price:
            return None
        return self.profit() / self.price * 100


@dataclass(frozen=True, slots=True)
class CardDraft:
    """
    A validated card payload, ready to be written.

    Only `validate_card_draft` should build these; every field already
    satisfies the card invariants.
    """

    name: str
    price: Decimal
    category: str
    bought_date: date
    status: CardStatus = CardStatus.BOUGHT
    sold_price: Decimal | None = None
    sold_date: date | None = None
    description: str | None = None
    image_url: str | None = None
    collection_id: int = MAIN_COLLECTION_ID
    graded: bool = False
    grading_company: GradingCompany | None = None
    grading_value: Decimal | None = None


def parse_card_date(value: Any) -> date | None:
    """
    Coerce a loosely typed date value to a calendar date.

    Accepts date/datetime objects (time of day dropped), ISO strings
    ("2024-01-31" or "2024-01-31T10:00:00Z") and pandas timestamps.
    Returns None for blanks and anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text or text.lower() in ("nan", "nat", "none"):
        return None

    try:
        return date.fromisoformat(text.split("T")[0].split(" ")[0])
    except ValueError:
        return None


def parse_money(value: Any) -> Decimal | None:
    """Coerce a price-like value to Decimal, None for blanks and garbage."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value

    text = str(value).strip().replace("$", "").replace(",", "")
    if not text or text.lower() in ("nan", "none"):
        return None

    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount
