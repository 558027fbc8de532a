"""
Statistics result records.

Every record is immutable. Breakdown entries are grown by returning a new
entry from `add`, so the aggregation engine builds its tables as a fold
without sharing mutable accumulators.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from types import MappingProxyType

from cardledger.models.card import ZERO


@dataclass(frozen=True, slots=True)
class CategoryProfit:
    """Realized profit of sold cards in one category."""

    total_profit: Decimal = ZERO
    total_sold: Decimal = ZERO
    count: int = 0

    def add(self, price: Decimal, proceeds: Decimal) -> "CategoryProfit":
        return CategoryProfit(
            total_profit=self.total_profit + (proceeds - price),
            total_sold=self.total_sold + proceeds,
            count=self.count + 1,
        )

    @property
    def average_profit(self) -> Decimal:
        return self.total_profit / self.count if self.count else ZERO


@dataclass(frozen=True, slots=True)
class CategoryInvestment:
    """Money put into one category, bought and sold cards alike."""

    total_investment: Decimal = ZERO
    count: int = 0

    def add(self, price: Decimal) -> "CategoryInvestment":
        return CategoryInvestment(
            total_investment=self.total_investment + price,
            count=self.count + 1,
        )

    @property
    def average_investment(self) -> Decimal:
        return self.total_investment / self.count if self.count else ZERO


@dataclass(frozen=True, slots=True)
class CategoryRoi:
    """Return on investment of sold cards in one category."""

    total_profit: Decimal = ZERO
    total_investment: Decimal = ZERO
    count: int = 0

    def add(self, price: Decimal, proceeds: Decimal) -> "CategoryRoi":
        return CategoryRoi(
            total_profit=self.total_profit + (proceeds - price),
            total_investment=self.total_investment + price,
            count=self.count + 1,
        )

    @property
    def roi(self) -> Decimal:
        """Percent. Zero when nothing was invested."""
        if not self.total_investment:
            return ZERO
        return self.total_profit / self.total_investment * 100


@dataclass(frozen=True, slots=True)
class MonthlySales:
    """Sales closed in one calendar month (key "YYYY-MM")."""

    total_sales: Decimal = ZERO
    count: int = 0
    total_profit: Decimal = ZERO

    def add(self, price: Decimal, proceeds: Decimal) -> "MonthlySales":
        return MonthlySales(
            total_sales=self.total_sales + proceeds,
            count=self.count + 1,
            total_profit=self.total_profit + (proceeds - price),
        )


def _frozen(table: Mapping[str, object] | None = None) -> Mapping[str, object]:
    return MappingProxyType(dict(table or {}))


@dataclass(frozen=True)
class CardStats:
    """
    Investment statistics over a set of cards.

    Totals cover the cards that survived the time-window filter. Tables are
    read-only mappings keyed by category (or "YYYY-MM" for sales); rankings
    are tuples of (key, entry) pairs, best first.
    """

    bought_investment: Decimal = ZERO
    sold_investment: Decimal = ZERO
    total_investment: Decimal = ZERO
    total_sold: Decimal = ZERO
    profit: Decimal = ZERO
    cards_bought: int = 0
    cards_sold: int = 0

    profits_by_category: Mapping[str, CategoryProfit] = field(default_factory=_frozen)
    investments_by_category: Mapping[str, CategoryInvestment] = field(default_factory=_frozen)
    roi_by_category: Mapping[str, CategoryRoi] = field(default_factory=_frozen)
    sales_by_month: Mapping[str, MonthlySales] = field(default_factory=_frozen)

    top_categories: tuple[tuple[str, CategoryProfit], ...] = ()
    top_investment_categories: tuple[tuple[str, CategoryInvestment], ...] = ()
    top_roi_categories: tuple[tuple[str, CategoryRoi], ...] = ()
    top_months: tuple[tuple[str, MonthlySales], ...] = ()

    @property
    def roi(self) -> Decimal:
        """Overall ROI of sold cards in percent, zero without sales."""
        if not self.sold_investment:
            return ZERO
        return self.profit / self.sold_investment * 100


@dataclass(frozen=True, slots=True)
class ValuationPoint:
    """Owned collection value (acquisition cost) at the end of a day."""

    date: date
    value: Decimal

    @property
    def display_date(self) -> str:
        return self.date.strftime("%d-%m-%Y")
