"""Tests for trailing statistics windows."""

from datetime import date

import pytest

from cardledger.analysis.windows import Timeframe, cutoff_date, in_window, resolve_today


class TestTimeframeParse:
    @pytest.mark.parametrize("value", [None, "", "all", Timeframe.ALL])
    def test_all_time_spellings(self, value) -> None:
        """None, empty and 'all' all mean all-time."""
        assert Timeframe.parse(value) == Timeframe.ALL

    def test_named_windows(self) -> None:
        """Window names map to their members."""
        assert Timeframe.parse("week") == Timeframe.WEEK
        assert Timeframe.parse("month") == Timeframe.MONTH
        assert Timeframe.parse("year") == Timeframe.YEAR

    def test_unknown_window_rejected(self) -> None:
        """Unknown names raise instead of silently meaning all-time."""
        with pytest.raises(ValueError):
            Timeframe.parse("decade")


class TestCutoffDate:
    def test_week(self) -> None:
        """A week reaches back seven days."""
        assert cutoff_date("week", date(2024, 6, 15)) == date(2024, 6, 8)

    def test_month_end_of_month(self) -> None:
        """Month arithmetic clamps to the shorter month."""
        assert cutoff_date("month", date(2024, 3, 31)) == date(2024, 2, 29)
        assert cutoff_date("month", date(2023, 3, 31)) == date(2023, 2, 28)

    def test_year_from_leap_day(self) -> None:
        """A year before 29 February is 28 February."""
        assert cutoff_date("year", date(2024, 2, 29)) == date(2023, 2, 28)

    def test_all_time_has_no_cutoff(self) -> None:
        """All-time is unbounded."""
        assert cutoff_date(None, date(2024, 6, 15)) is None
        assert cutoff_date(Timeframe.ALL, date(2024, 6, 15)) is None


class TestInWindow:
    def test_bounds_inclusive(self) -> None:
        """Both the cutoff and today are inside the window."""
        cutoff, today = date(2024, 6, 8), date(2024, 6, 15)

        assert in_window(cutoff, cutoff, today)
        assert in_window(today, cutoff, today)
        assert not in_window(date(2024, 6, 7), cutoff, today)
        assert not in_window(date(2024, 6, 16), cutoff, today)

    def test_missing_date(self) -> None:
        """Missing dates only qualify when there is no cutoff."""
        assert not in_window(None, date(2024, 6, 8), date(2024, 6, 15))
        assert in_window(None, None, date(2024, 6, 15))

    def test_resolve_today_passthrough(self) -> None:
        """An explicit today is used as is."""
        assert resolve_today(date(2020, 1, 1)) == date(2020, 1, 1)
        assert isinstance(resolve_today(), date)
