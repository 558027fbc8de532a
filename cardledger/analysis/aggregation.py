"""
Investment statistics over a user's cards.

`compute_stats` is the single entry point for every statistics view: the
windowed views (week, month, year) and the all-time view call it with a
different timeframe, so they can never disagree.

The computation is a pure fold over an already-fetched card list:
no I/O, no shared state, and no exceptions for odd data. Missing
categories land in "Uncategorized", missing sold prices count as zero and
cards whose relevant date is missing drop out of windowed results.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date
from decimal import Decimal
from functools import reduce
from types import MappingProxyType
from typing import TypeVar

from cardledger.analysis.windows import Timeframe, cutoff_date, in_window, resolve_today
from cardledger.config import ROI_MIN_SOLD_CARDS, TOP_N, UNCATEGORIZED
from cardledger.models.card import ZERO, Card, CardStatus
from cardledger.models.stats import (
    CardStats,
    CategoryInvestment,
    CategoryProfit,
    CategoryRoi,
    MonthlySales,
)

E = TypeVar("E")


def category_of(card: Card) -> str:
    return card.category or UNCATEGORIZED


def month_key(day: date) -> str:
    return f"{day.year}-{day.month:02d}"


def filter_window(
    cards: Iterable[Card],
    timeframe: Timeframe | str | None,
    today: date,
) -> tuple[list[Card], list[Card]]:
    """
    Split cards by status and keep those inside the window.

    Bought cards are dated by purchase, sold cards by sale.

    Returns:
        (bought_cards, sold_cards) in input order.
    """
    cutoff = cutoff_date(timeframe, today)
    bought: list[Card] = []
    sold: list[Card] = []

    for card in cards:
        if card.status == CardStatus.BOUGHT:
            if in_window(card.bought_date, cutoff, today):
                bought.append(card)
        elif card.status == CardStatus.SOLD:
            if in_window(card.sold_date, cutoff, today):
                sold.append(card)

    return bought, sold


def _fold_table(
    cards: Iterable[Card],
    key: Callable[[Card], str | None],
    empty: E,
    step: Callable[[E, Card], E],
) -> Mapping[str, E]:
    """
    Group cards by key and fold each group into an immutable entry.

    Cards whose key is None are skipped. Keys keep first-encounter order.
    """

    def accumulate(table: dict[str, E], card: Card) -> dict[str, E]:
        k = key(card)
        if k is None:
            return table
        return {**table, k: step(table.get(k, empty), card)}

    return MappingProxyType(reduce(accumulate, cards, {}))


def top_entries(
    table: Mapping[str, E],
    score: Callable[[E], Decimal],
    include: Callable[[E], bool] = lambda _entry: True,
    limit: int = TOP_N,
) -> tuple[tuple[str, E], ...]:
    """
    Rank table entries by score, highest first.

    Ties keep first-encounter order (sorting is stable).
    """
    candidates = [(k, entry) for k, entry in table.items() if include(entry)]
    ranked = sorted(candidates, key=lambda item: score(item[1]), reverse=True)
    return tuple(ranked[:limit])


def _sum_prices(cards: Sequence[Card]) -> Decimal:
    return sum((card.price for card in cards), ZERO)


def compute_stats(
    cards: Iterable[Card],
    timeframe: Timeframe | str | None = None,
    *,
    today: date | None = None,
) -> CardStats:
    """
    Compute investment statistics for a card list.

    Args:
        cards: Every card the user owns or owned, across all collections
        timeframe: week, month, year, or None/"all" for all-time
        today: Window end date; defaults to the current date

    Returns:
        Immutable CardStats. Identical input always gives identical output.
    """
    today = resolve_today(today)
    bought, sold = filter_window(cards, timeframe, today)

    bought_investment = _sum_prices(bought)
    sold_investment = _sum_prices(sold)
    total_sold = sum((card.proceeds for card in sold), ZERO)

    profits_by_category = _fold_table(
        sold,
        category_of,
        CategoryProfit(),
        lambda entry, card: entry.add(card.price, card.proceeds),
    )
    investments_by_category = _fold_table(
        [*bought, *sold],
        category_of,
        CategoryInvestment(),
        lambda entry, card: entry.add(card.price),
    )
    roi_by_category = _fold_table(
        sold,
        category_of,
        CategoryRoi(),
        lambda entry, card: entry.add(card.price, card.proceeds),
    )
    sales_by_month = _fold_table(
        sold,
        lambda card: month_key(card.sold_date) if card.sold_date else None,
        MonthlySales(),
        lambda entry, card: entry.add(card.price, card.proceeds),
    )

    return CardStats(
        bought_investment=bought_investment,
        sold_investment=sold_investment,
        total_investment=bought_investment + sold_investment,
        total_sold=total_sold,
        profit=total_sold - sold_investment,
        cards_bought=len(bought),
        cards_sold=len(sold),
        profits_by_category=profits_by_category,
        investments_by_category=investments_by_category,
        roi_by_category=roi_by_category,
        sales_by_month=sales_by_month,
        top_categories=top_entries(profits_by_category, lambda e: e.total_profit),
        top_investment_categories=top_entries(
            investments_by_category, lambda e: e.total_investment
        ),
        top_roi_categories=top_entries(
            roi_by_category,
            lambda e: e.roi,
            include=lambda e: e.count >= ROI_MIN_SOLD_CARDS,
        ),
        top_months=top_entries(sales_by_month, lambda e: e.total_sales),
    )
