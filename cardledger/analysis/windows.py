"""
Trailing time windows used to scope statistics.

Both the aggregation engine and the valuation builder take their cutoff
from `cutoff_date`, so the two views always agree on what "last month"
means. Month and year use calendar arithmetic (31 March minus one month
is 29 February in a leap year), not fixed day counts.
"""

from datetime import date, timedelta
from enum import Enum

import pandas as pd


class Timeframe(str, Enum):
    """Trailing period a statistics computation covers."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"

    @classmethod
    def parse(cls, value: "Timeframe | str | None") -> "Timeframe":
        """None and empty strings mean all-time."""
        if value is None or value == "":
            return cls.ALL
        return cls(value)


def resolve_today(today: date | None = None) -> date:
    return today if today is not None else date.today()


def cutoff_date(timeframe: Timeframe | str | None, today: date) -> date | None:
    """
    First day included in the window ending today.

    Returns None for all-time (no lower bound).
    """
    timeframe = Timeframe.parse(timeframe)

    if timeframe == Timeframe.WEEK:
        return today - timedelta(days=7)
    if timeframe == Timeframe.MONTH:
        return (pd.Timestamp(today) - pd.DateOffset(months=1)).date()
    if timeframe == Timeframe.YEAR:
        return (pd.Timestamp(today) - pd.DateOffset(years=1)).date()
    return None


def in_window(value: date | None, cutoff: date | None, today: date) -> bool:
    """
    Whether a card date falls in [cutoff, today].

    A missing date never qualifies for a bounded window.
    """
    if cutoff is None:
        return True
    if value is None:
        return False
    return cutoff <= value <= today
