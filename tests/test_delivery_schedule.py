# tests/test_delivery_schedule.py
import json
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from shop_v2.config.holidays import (
    HolidayCalendar,
    easter_sunday,
    first_friday_of_december,
    load_calendar,
)
from shop_v2.domain.delivery_schedule import (
    MSG_BLACKOUT,
    MSG_LEAD_TIME,
    MSG_PAST,
    DeliveryScheduler,
    days_difference,
    parse_delivery_date,
)


# ------------------------------------------------------------
# single rules
# ------------------------------------------------------------

@pytest.mark.parametrize("days_ago", [1, 2, 7, 30, 365])
def test_dates_before_today_are_past(scheduler, now, days_ago):
    assert scheduler.is_past_date(now.date() - timedelta(days=days_ago), now) is True


@pytest.mark.parametrize("days_ahead", [0, 1, 14, 30])
def test_today_and_later_are_not_past(scheduler, now, days_ahead):
    assert scheduler.is_past_date(now.date() + timedelta(days=days_ahead), now) is False


def test_past_check_ignores_time_of_day(scheduler):
    late_evening = datetime(2025, 6, 10, 23, 59)
    assert scheduler.is_past_date(datetime(2025, 6, 10, 0, 1), late_evening) is False
    assert scheduler.is_past_date("2025-06-09", late_evening) is True


def test_future_limit_boundary(scheduler, now):
    assert scheduler.is_too_far_in_future(date(2025, 6, 24), now) is False
    assert scheduler.is_too_far_in_future(date(2025, 6, 25), now) is True
    assert scheduler.is_too_far_in_future(date(2025, 12, 31), now) is True


def test_every_sunday_is_blackout(scheduler):
    day = date(2025, 1, 5)  # Sunday
    for _ in range(104):
        assert scheduler.is_sunday(day)
        assert scheduler.is_blackout_date(day)
        day += timedelta(days=7)


@pytest.mark.parametrize(
    "holiday",
    [
        "2025-01-01",
        "2025-03-06",
        "2025-04-18",
        "2025-04-21",
        "2025-05-01",
        "2025-07-01",
        "2025-12-01",
        "2025-12-25",
        "2025-12-26",
    ],
)
def test_2025_public_holidays_are_blackout(scheduler, holiday):
    assert scheduler.is_public_holiday(holiday)
    assert scheduler.is_blackout_date(holiday)


def test_holidays_are_not_pinned_to_one_year(scheduler):
    # Republic Day and Good Friday 2026
    assert scheduler.is_blackout_date("2026-07-01")
    assert scheduler.is_blackout_date("2026-04-03")


def test_ordinary_weekday_is_not_blackout(scheduler):
    assert scheduler.is_blackout_date("2025-06-11") is False


# ------------------------------------------------------------
# min / max window
# ------------------------------------------------------------

def test_min_date_before_cutoff_is_tomorrow(scheduler, now):
    assert scheduler.get_min_delivery_date(now) == date(2025, 6, 11)


def test_min_date_at_cutoff_is_day_after_tomorrow(scheduler):
    assert scheduler.get_min_delivery_date(datetime(2025, 6, 10, 18, 0)) == date(2025, 6, 12)


def test_min_date_skips_sunday(scheduler):
    # Friday evening -> Sunday -> Monday
    assert scheduler.get_min_delivery_date(datetime(2025, 6, 13, 19, 0)) == date(2025, 6, 16)
    # Saturday morning -> Sunday -> Monday
    assert scheduler.get_min_delivery_date(datetime(2025, 6, 14, 9, 0)) == date(2025, 6, 16)


def test_min_date_skips_holiday_run(scheduler):
    # Christmas, Boxing Day, then Saturday
    assert scheduler.get_min_delivery_date(datetime(2025, 12, 24, 10, 0)) == date(2025, 12, 27)
    # Republic Day
    assert scheduler.get_min_delivery_date(datetime(2025, 6, 30, 10, 0)) == date(2025, 7, 2)


def test_min_date_is_never_blackout_and_respects_lead_time(scheduler):
    start = datetime(2025, 1, 1, 0, 0)
    for hours in range(0, 24 * 400, 5):
        ref = start + timedelta(hours=hours)
        min_date = scheduler.get_min_delivery_date(ref)
        lead = 1 if ref.hour < 18 else 2

        assert not scheduler.is_blackout_date(min_date)
        assert min_date >= ref.date() + timedelta(days=lead)


def test_min_date_uses_shop_timezone(scheduler):
    # 18:30 in London (BST) is 17:30 in Accra: still before cutoff
    london = datetime(2025, 6, 10, 18, 30, tzinfo=ZoneInfo("Europe/London"))
    assert scheduler.get_min_delivery_date(london) == date(2025, 6, 11)


def test_max_date_is_fourteen_days_out(scheduler, now):
    assert scheduler.get_max_delivery_date(now) == date(2025, 6, 24)
    # Sunday max date is still returned as-is
    assert scheduler.get_max_delivery_date(datetime(2025, 6, 8, 12, 0)) == date(2025, 6, 22)


# ------------------------------------------------------------
# composite check
# ------------------------------------------------------------

def test_valid_delivery_date(scheduler, now):
    check = scheduler.is_valid_delivery_date("2025-06-11", now)
    assert check.is_valid is True
    assert check.error is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-06-09", MSG_PAST),
        ("2025-06-25", "Delivery date cannot be more than 14 days in the future"),
        ("2025-06-15", MSG_BLACKOUT),
        ("2025-06-10", MSG_LEAD_TIME),
    ],
)
def test_invalid_delivery_date_reasons(scheduler, now, value, expected):
    check = scheduler.is_valid_delivery_date(value, now)
    assert check.is_valid is False
    assert check.error == expected


def test_past_rule_reported_before_blackout(scheduler, now):
    # Sunday 2025-06-08 is both past and blackout
    assert scheduler.is_valid_delivery_date("2025-06-08", now).error == MSG_PAST


def test_after_cutoff_tomorrow_needs_more_lead_time(scheduler):
    evening = datetime(2025, 6, 10, 20, 0)
    assert scheduler.is_valid_delivery_date("2025-06-11", evening).error == MSG_LEAD_TIME
    assert scheduler.is_valid_delivery_date("2025-06-12", evening).is_valid


# ------------------------------------------------------------
# listing
# ------------------------------------------------------------

def test_valid_delivery_dates(scheduler, now):
    dates = scheduler.get_valid_delivery_dates(now)

    assert dates[0] == date(2025, 6, 11)
    assert dates[-1] == date(2025, 6, 24)
    assert date(2025, 6, 15) not in dates
    assert date(2025, 6, 22) not in dates
    assert len(dates) == 12
    assert dates == sorted(dates)
    assert all(scheduler.is_valid_delivery_date(d, now).is_valid for d in dates)


def test_valid_delivery_dates_are_restartable(scheduler, now):
    first = list(scheduler.iter_valid_delivery_dates(now))
    second = list(scheduler.iter_valid_delivery_dates(now))
    assert first == second == scheduler.get_valid_delivery_dates(now)


# ------------------------------------------------------------
# parsing / helpers
# ------------------------------------------------------------

def test_parse_delivery_date_formats():
    assert parse_delivery_date("2025-06-11") == date(2025, 6, 11)
    assert parse_delivery_date("2025-06-11T23:30:00Z") == date(2025, 6, 11)
    assert parse_delivery_date(datetime(2025, 6, 11, 8, 0)) == date(2025, 6, 11)
    assert parse_delivery_date(date(2025, 6, 11)) == date(2025, 6, 11)


@pytest.mark.parametrize("bad", ["", "   ", "tomorrow", "2025-13-01", 20250611])
def test_parse_delivery_date_rejects_garbage(bad):
    with pytest.raises(ValueError):
        parse_delivery_date(bad)


def test_days_difference():
    assert days_difference("2025-06-24", "2025-06-10") == 14
    assert days_difference("2025-06-10", "2025-06-11") == -1


# ------------------------------------------------------------
# holiday calendar
# ------------------------------------------------------------

def test_movable_holiday_rules():
    assert easter_sunday(2025) == date(2025, 4, 20)
    assert easter_sunday(2026) == date(2026, 4, 5)
    assert first_friday_of_december(2025) == date(2025, 12, 5)
    assert first_friday_of_december(2026) == date(2026, 12, 4)


def test_holidays_for_year_is_sorted_and_complete():
    calendar = load_calendar()
    days = calendar.holidays_for_year(2026)

    assert days == sorted(days)
    assert date(2026, 1, 1) in days
    assert date(2026, 4, 6) in days  # Easter Monday
    assert all(d.year == 2026 for d in days)


def test_load_calendar_from_json(tmp_path):
    path = tmp_path / "holidays.json"
    path.write_text(
        json.dumps({"recurring": ["01-07"], "dates": ["2026-06-17"]}),
        encoding="utf-8",
    )

    calendar = load_calendar(path)
    scheduler = DeliveryScheduler(calendar=calendar)

    assert scheduler.is_public_holiday("2027-01-07")
    assert scheduler.is_public_holiday("2026-06-17")
    assert not scheduler.is_public_holiday("2027-06-17")
    # built-in entries are kept
    assert scheduler.is_public_holiday("2026-12-25")


def test_load_calendar_rejects_bad_entries(tmp_path):
    path = tmp_path / "holidays.json"
    path.write_text(json.dumps({"recurring": ["13-40"]}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_calendar(path)


def test_empty_calendar_only_blocks_sundays():
    scheduler = DeliveryScheduler(calendar=HolidayCalendar(include_movable=False))
    assert not scheduler.is_blackout_date("2025-12-25")
    assert scheduler.is_blackout_date("2025-12-28")
