"""Tests for the collection value series."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from cardledger.analysis.valuation import (
    build_valuation_series,
    downsample,
    owned_value,
    sample_dates,
)
from cardledger.analysis.windows import Timeframe
from cardledger.config import ALL_TIME_MAX_POINTS, YEAR_MAX_POINTS
from cardledger.models.stats import ValuationPoint


class TestOwnedValue:
    def test_card_sold_on_day_is_not_owned(self, sold_card) -> None:
        """A card sold on the day itself no longer counts."""
        card = sold_card(40, 60, date(2024, 3, 1), bought_date=date(2024, 1, 1))

        assert owned_value([card], date(2024, 3, 1)).value == 0
        assert owned_value([card], date(2024, 2, 29)).value == Decimal(40)

    def test_card_bought_on_day_is_owned(self, make_card) -> None:
        """A purchase counts from its own day onwards."""
        card = make_card(25, bought_date=date(2024, 3, 1))

        assert owned_value([card], date(2024, 3, 1)).value == Decimal(25)
        assert owned_value([card], date(2024, 2, 29)).value == 0


class TestSeries:
    def test_dates_strictly_increasing(self, make_card, sold_card, today: date) -> None:
        """Every point is later than the one before."""
        cards = [
            make_card(10, bought_date=date(2024, 1, 10)),
            make_card(20, bought_date=date(2024, 1, 10)),
            sold_card(5, 9, date(2024, 4, 1), bought_date=date(2024, 2, 2)),
        ]

        series = build_valuation_series(cards, today=today)
        days = [point.date for point in series]

        assert days == sorted(set(days))

    def test_all_time_starts_at_first_purchase(self, make_card, today: date) -> None:
        """The all-time series starts on the first purchase and ends today."""
        cards = [make_card(10, bought_date=date(2024, 2, 1)), make_card(5, bought_date=date(2024, 4, 1))]

        series = build_valuation_series(cards, "all", today=today)

        assert series[0] == ValuationPoint(date=date(2024, 2, 1), value=Decimal(10))
        assert series[-1] == ValuationPoint(date=today, value=Decimal(15))

    def test_step_values(self, make_card, sold_card, today: date) -> None:
        """Value changes exactly on purchase and sale days."""
        cards = [
            make_card(100, bought_date=date(2024, 1, 1)),
            sold_card(50, 80, date(2024, 2, 1), bought_date=date(2024, 1, 15)),
        ]

        series = build_valuation_series(cards, today=today)

        assert [(p.date, p.value) for p in series] == [
            (date(2024, 1, 1), Decimal(100)),
            (date(2024, 1, 15), Decimal(150)),
            (date(2024, 2, 1), Decimal(100)),
            (today, Decimal(100)),
        ]

    def test_last_value_bounded_by_unsold_purchases(
        self, make_card, sold_card, today: date
    ) -> None:
        """Today's value never exceeds the cost of the cards still held."""
        cards = [
            make_card(100, bought_date=date(2023, 5, 1)),
            make_card(30, bought_date=date(2024, 6, 1)),
            sold_card(50, 80, date(2024, 2, 1), bought_date=date(2023, 1, 15)),
            sold_card(70, 10, today, bought_date=date(2024, 1, 15)),
        ]
        unsold_cost = sum((c.price for c in cards if not c.is_sold), Decimal(0))

        series = build_valuation_series(cards, "all", today=today)

        assert series[-1].date == today
        assert series[-1].value <= unsold_cost

    def test_sold_today_excluded_from_today(self, sold_card, today: date) -> None:
        """A card sold today is not part of today's value."""
        card = sold_card(70, 10, today, bought_date=date(2024, 1, 15))

        series = build_valuation_series([card], today=today)

        assert series[-1].value == 0

    def test_week_window_carries_earlier_purchases(self, make_card, today: date) -> None:
        """The week starts with everything already owned at the cutoff."""
        cards = [
            make_card(100, bought_date=date(2023, 1, 1)),
            make_card(10, bought_date=today - timedelta(days=2)),
        ]

        series = build_valuation_series(cards, Timeframe.WEEK, today=today)

        assert series[0] == ValuationPoint(date=today - timedelta(days=7), value=Decimal(100))
        assert series[-1].value == Decimal(110)
        assert len(series) == 3

    def test_future_purchases_are_not_sampled(self, make_card, today: date) -> None:
        """Dates after today never appear in the series."""
        cards = [
            make_card(10, bought_date=date(2024, 1, 1)),
            make_card(99, bought_date=today + timedelta(days=3)),
        ]

        series = build_valuation_series(cards, today=today)

        assert all(point.date <= today for point in series)
        assert series[-1].value == Decimal(10)

    def test_no_dated_cards_single_point(self, make_card, today: date) -> None:
        """Without purchase dates the series is today's holdings only."""
        series = build_valuation_series([make_card(40, bought_date=None)], today=today)

        assert series == [ValuationPoint(date=today, value=Decimal(40))]

    def test_empty_input(self, today: date) -> None:
        """No cards gives a single zero point for today."""
        assert build_valuation_series([], "year", today=today) == [
            ValuationPoint(date=today, value=Decimal(0))
        ]

    def test_display_date(self) -> None:
        """Points render as DD-MM-YYYY."""
        assert ValuationPoint(date=date(2024, 3, 9), value=Decimal(0)).display_date == "09-03-2024"


class TestDownsampling:
    def test_all_time_one_sample_per_month(self, make_card, today: date) -> None:
        """Long all-time series keep the last sample of each month."""
        start = date(2022, 1, 3)
        cards = [make_card(1, bought_date=start + timedelta(days=9 * i)) for i in range(80)]

        series = build_valuation_series(cards, "all", today=today)
        months = [(p.date.year, p.date.month) for p in series[1:-1]]

        assert len(months) == len(set(months))
        assert series[0].date == start
        assert series[-1].date == today

    def test_all_time_short_series_untouched(self) -> None:
        """At or below the threshold every sample is kept."""
        days = [date(2024, 1, 1) + timedelta(days=i) for i in range(ALL_TIME_MAX_POINTS)]

        assert downsample(days, Timeframe.ALL, days[0]) == days

    def test_year_keeps_even_two_week_buckets(self) -> None:
        """Year series keep only even week buckets, plus both ends."""
        start = date(2023, 6, 15)
        days = [start + timedelta(days=3 * i) for i in range(YEAR_MAX_POINTS + 40)]

        thinned = downsample(days, Timeframe.YEAR, start)

        assert thinned[0] == days[0]
        assert thinned[-1] == days[-1]
        assert len(thinned) < len(days)
        for day in thinned[1:-1]:
            assert ((day - start).days // 7) % 2 == 0

    @pytest.mark.parametrize("timeframe", [Timeframe.WEEK, Timeframe.MONTH])
    def test_short_windows_untouched(self, timeframe: Timeframe) -> None:
        """Week and month windows are never thinned."""
        days = [date(2024, 1, 1) + timedelta(days=i) for i in range(40)]

        assert downsample(days, timeframe, days[0]) == days

    def test_sample_dates_include_bounds(self, make_card) -> None:
        """Samples are the window start, events inside it, and today."""
        cards = [
            make_card(1, bought_date=date(2024, 1, 5)),
            make_card(1, bought_date=date(2023, 12, 1)),
        ]

        days = sample_dates(cards, date(2024, 1, 1), date(2024, 1, 31))

        assert days == [date(2024, 1, 1), date(2024, 1, 5), date(2024, 1, 31)]
