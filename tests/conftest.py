from datetime import date
from decimal import Decimal

import pytest

from cardledger.models.card import Card, CardStatus


@pytest.fixture
def today() -> date:
    """Fixed reference date so window tests never depend on the clock."""
    return date(2024, 6, 15)


@pytest.fixture
def make_card():
    """Factory for domain cards with sensible defaults."""
    counter = iter(range(1, 10_000))

    def _make(
        price: str | int = 10,
        *,
        status: CardStatus = CardStatus.BOUGHT,
        bought_date: date | None = date(2024, 1, 1),
        sold_price: str | int | None = None,
        sold_date: date | None = None,
        category: str | None = "Hockey",
        name: str = "Test Card",
    ) -> Card:
        return Card(
            id=next(counter),
            name=name,
            price=Decimal(str(price)),
            status=status,
            bought_date=bought_date,
            sold_price=Decimal(str(sold_price)) if sold_price is not None else None,
            sold_date=sold_date,
            category=category,
            user_id="user-1",
        )

    return _make


@pytest.fixture
def sold_card(make_card):
    """Factory for sold cards: price, proceeds, sale date."""

    def _make(
        price: str | int,
        sold_price: str | int | None,
        sold_date: date | None,
        *,
        category: str | None = "Hockey",
        bought_date: date | None = date(2024, 1, 1),
    ) -> Card:
        return make_card(
            price,
            status=CardStatus.SOLD,
            bought_date=bought_date,
            sold_price=sold_price,
            sold_date=sold_date,
            category=category,
        )

    return _make
