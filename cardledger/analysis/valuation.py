"""
Collection value over time.

Builds a chartable step series of the collection's acquisition-cost value.
A card is "in the collection on day D" when it was bought on or before D
and has not been sold, or was sold after D. Samples sit exactly on the
days value changes (purchases and sales) plus the window start and today,
then get thinned out for long windows.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date

from cardledger.analysis.aggregation import compute_stats, month_key
from cardledger.analysis.windows import Timeframe, cutoff_date, resolve_today
from cardledger.config import ALL_TIME_MAX_POINTS, YEAR_MAX_POINTS
from cardledger.models.card import ZERO, Card
from cardledger.models.stats import ValuationPoint

logger = logging.getLogger(__name__)

# Year windows keep one sample per this many weeks
YEAR_BUCKET_WEEKS = 2


def owned_value(cards: Iterable[Card], day: date) -> ValuationPoint:
    """
    Value of the cards owned at the end of `day`.

    A card sold on `day` itself is no longer owned.
    """
    value = sum(
        (
            card.price
            for card in cards
            if card.bought_date is not None
            and card.bought_date <= day
            and (card.sold_date is None or card.sold_date > day)
        ),
        ZERO,
    )
    return ValuationPoint(date=day, value=value)


def _series_start(cards: Sequence[Card], timeframe: Timeframe, today: date) -> date:
    cutoff = cutoff_date(timeframe, today)
    if cutoff is not None:
        return cutoff
    # All-time starts at the first purchase, never after today
    return min([today, *(card.bought_date for card in cards if card.bought_date)])


def sample_dates(cards: Sequence[Card], start: date, today: date) -> list[date]:
    """Window start, every purchase and sale inside [start, today], and today."""
    days = {start, today}
    for card in cards:
        for event in (card.bought_date, card.sold_date):
            if event is not None and start <= event <= today:
                days.add(event)
    return sorted(days)


def _keep_ends(thinned: Iterable[date], days: Sequence[date]) -> list[date]:
    return sorted({*thinned, days[0], days[-1]})


def downsample(days: Sequence[date], timeframe: Timeframe, start: date) -> list[date]:
    """
    Thin a sorted sample list for readability.

    All-time over ALL_TIME_MAX_POINTS samples: last sample of each month.
    Year over YEAR_MAX_POINTS samples: last sample of every other two-week
    bucket counted from start. First and last samples always survive.
    Week and month windows are returned untouched.
    """
    if timeframe == Timeframe.ALL and len(days) > ALL_TIME_MAX_POINTS:
        by_month: dict[str, date] = {}
        for day in days:
            by_month[month_key(day)] = day
        return _keep_ends(by_month.values(), days)

    if timeframe == Timeframe.YEAR and len(days) > YEAR_MAX_POINTS:
        by_week: dict[int, date] = {}
        for day in days:
            week = (day - start).days // 7
            if week % YEAR_BUCKET_WEEKS == 0:
                by_week[week] = day
        return _keep_ends(by_week.values(), days)

    return list(days)


def build_valuation_series(
    cards: Iterable[Card],
    timeframe: Timeframe | str | None = None,
    *,
    today: date | None = None,
) -> list[ValuationPoint]:
    """
    Build the collection-value-over-time series for a window.

    Args:
        cards: Every card the user owns or owned
        timeframe: week, month, year, or None/"all"
        today: Series end date; defaults to the current date

    Returns:
        Points in strictly increasing date order, ending today.
    """
    today = resolve_today(today)
    timeframe = Timeframe.parse(timeframe)
    all_cards = list(cards)
    dated = [card for card in all_cards if card.bought_date is not None]

    if not dated:
        # Nothing to replay; show the current holdings as a single point
        stats = compute_stats(all_cards, timeframe, today=today)
        return [ValuationPoint(date=today, value=stats.bought_investment)]

    skipped = len(all_cards) - len(dated)
    if skipped:
        logger.debug("Valuation skipped %d cards without a bought date", skipped)

    start = _series_start(dated, timeframe, today)
    days = downsample(sample_dates(dated, start, today), timeframe, start)
    return [owned_value(dated, day) for day in days]
