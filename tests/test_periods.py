from datetime import date, timedelta

import pytest

from plan_todos.core.periods import Frequency, check_in_streak, period_key, undo_streak


def test_period_key_per_frequency() -> None:
    day = date(2026, 2, 14)
    assert period_key("daily", day) == "2026-02-14"
    assert period_key("weekly", day) == "2026-W07"
    assert period_key(Frequency.MONTHLY, day) == "2026-02"


def test_weekly_period_key_uses_iso_year() -> None:
    assert period_key("weekly", date(2026, 1, 1)) == "2026-W01"
    assert period_key("weekly", date(2027, 1, 1)) == "2026-W53"


def test_frequency_parse_rejects_unknown() -> None:
    assert Frequency.parse(" Weekly ") is Frequency.WEEKLY
    with pytest.raises(ValueError):
        Frequency.parse("hourly")


def test_first_check_in_starts_streak_at_one() -> None:
    today = date(2026, 3, 10)
    for freq in ("daily", "weekly", "monthly"):
        assert check_in_streak(freq, [], today) == 1


def test_daily_streak_counts_consecutive_days() -> None:
    today = date(2026, 3, 10)
    history = [today - timedelta(days=n) for n in (1, 2, 3)]
    assert check_in_streak("daily", history, today) == 4


def test_daily_streak_stops_at_gap() -> None:
    today = date(2026, 3, 10)
    history = [date(2026, 3, 9), date(2026, 3, 7), date(2026, 3, 6)]
    assert check_in_streak("daily", history, today) == 2


def test_daily_streak_skips_same_day_duplicates() -> None:
    today = date(2026, 3, 10)
    history = [date(2026, 3, 10), date(2026, 3, 9), date(2026, 3, 9), date(2026, 3, 8)]
    assert check_in_streak("daily", history, today) == 3


def test_weekly_streak_uses_fourteen_day_window() -> None:
    today = date(2026, 3, 18)  # Wednesday, W12
    history = [date(2026, 3, 16), date(2026, 3, 10), date(2026, 3, 3)]
    # same week skipped, 8 days back counts, 15 days back falls outside the window
    assert check_in_streak("weekly", history, today) == 2


def test_monthly_streak_walks_back_month_by_month() -> None:
    today = date(2026, 4, 2)
    history = [date(2026, 4, 1), date(2026, 3, 31), date(2026, 2, 1), date(2025, 12, 20)]
    assert check_in_streak("monthly", history, today) == 3


def test_undo_streak_daily_excludes_today() -> None:
    today = date(2026, 3, 10)
    history = [today, today - timedelta(days=1), today - timedelta(days=2)]
    assert undo_streak("daily", history, today) == 2


def test_undo_streak_requires_yesterday() -> None:
    today = date(2026, 3, 10)
    assert undo_streak("daily", [today, date(2026, 3, 7)], today) == 0


def test_undo_streak_empty_and_non_daily() -> None:
    today = date(2026, 3, 10)
    assert undo_streak("daily", [], today) == 0
    assert undo_streak("weekly", [today], today) == 1
    assert undo_streak("monthly", [today, date(2026, 1, 5)], today) == 1
