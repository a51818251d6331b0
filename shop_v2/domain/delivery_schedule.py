# shop_v2/domain/delivery_schedule.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterator, List, Optional, Union

from shop_v2.config.checkout_rules import (
    CUTOFF_HOUR,
    HOLIDAYS_PATH,
    MAX_FUTURE_DAYS,
    SHOP_TIMEZONE,
)
from shop_v2.config.holidays import HolidayCalendar, load_calendar

DateLike = Union[date, datetime, str]

MSG_PAST = "Delivery date cannot be in the past"
MSG_TOO_FAR = "Delivery date cannot be more than {days} days in the future"
MSG_BLACKOUT = "Delivery is not available on Sundays or public holidays"
MSG_LEAD_TIME = "Please select a date with sufficient lead time"


@dataclass(frozen=True)
class DeliveryDateCheck:
    """
    Result of the composite delivery date check.

    is_valid:
        True when every rule passes
    error:
        human readable reason of the first failing rule, None when valid
    """

    is_valid: bool
    error: Optional[str] = None


# ============================================================
# date coercion
# ============================================================

def parse_delivery_date(value: DateLike, tz: tzinfo = SHOP_TIMEZONE) -> date:
    """
    Accepts date / datetime / ISO string and returns the calendar day in the
    shop time zone.

    Strings may be "2025-06-11" or a full ISO datetime
    ("2025-06-11T00:00:00+00:00"). Anything else raises ValueError.
    """
    if isinstance(value, datetime):
        return _to_local(value, tz).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("empty date string")
        if len(text) == 10:
            return date.fromisoformat(text)
        # "Z" suffix is common from browser clients
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return _to_local(datetime.fromisoformat(text), tz).date()
    raise ValueError(f"unsupported date value: {value!r}")


def _to_local(dt: datetime, tz: tzinfo) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def days_difference(a: DateLike, b: DateLike) -> int:
    """Whole days from b to a (positive if a is later)."""
    return (parse_delivery_date(a) - parse_delivery_date(b)).days


# ============================================================
# Scheduler
# ============================================================

class DeliveryScheduler:
    """
    Delivery date business rules.

    Rules:
    - no dates before today
    - no dates more than max_future_days after today
    - no Sundays / public holidays (blackout days)
    - lead time: before cutoff_hour -> tomorrow, otherwise the day after,
      pushed forward past blackout days

    Every method takes an optional reference `now`; when omitted the current
    time in the shop time zone is used.
    """

    def __init__(
        self,
        *,
        calendar: Optional[HolidayCalendar] = None,
        cutoff_hour: int = CUTOFF_HOUR,
        max_future_days: int = MAX_FUTURE_DAYS,
        tz: tzinfo = SHOP_TIMEZONE,
    ) -> None:
        self.calendar = (
            calendar if calendar is not None else load_calendar(HOLIDAYS_PATH)
        )
        self.cutoff_hour = cutoff_hour
        self.max_future_days = max_future_days
        self.tz = tz

    # --------------------------------------------------------
    # reference time
    # --------------------------------------------------------

    def _now(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return datetime.now(self.tz)
        return _to_local(now, self.tz)

    def _today(self, now: Optional[datetime]) -> date:
        return self._now(now).date()

    def _day(self, value: DateLike) -> date:
        return parse_delivery_date(value, self.tz)

    # --------------------------------------------------------
    # single rules
    # --------------------------------------------------------

    def is_past_date(self, value: DateLike, now: Optional[datetime] = None) -> bool:
        return self._day(value) < self._today(now)

    def is_too_far_in_future(
        self, value: DateLike, now: Optional[datetime] = None
    ) -> bool:
        return self._day(value) > self.get_max_delivery_date(now)

    def is_sunday(self, value: DateLike) -> bool:
        return self._day(value).weekday() == 6

    def is_public_holiday(self, value: DateLike) -> bool:
        return self.calendar.is_holiday(self._day(value))

    def is_blackout_date(self, value: DateLike) -> bool:
        day = self._day(value)
        return day.weekday() == 6 or self.calendar.is_holiday(day)

    # --------------------------------------------------------
    # window
    # --------------------------------------------------------

    def get_min_delivery_date(self, now: Optional[datetime] = None) -> date:
        current = self._now(now)
        days_to_add = 1 if current.hour < self.cutoff_hour else 2

        min_date = current.date() + timedelta(days=days_to_add)
        while self.is_blackout_date(min_date):
            min_date += timedelta(days=1)
        return min_date

    def get_max_delivery_date(self, now: Optional[datetime] = None) -> date:
        return self._today(now) + timedelta(days=self.max_future_days)

    # --------------------------------------------------------
    # composite
    # --------------------------------------------------------

    def is_valid_delivery_date(
        self, value: DateLike, now: Optional[datetime] = None
    ) -> DeliveryDateCheck:
        now = self._now(now)
        day = self._day(value)

        if self.is_past_date(day, now):
            return DeliveryDateCheck(False, MSG_PAST)

        if self.is_too_far_in_future(day, now):
            return DeliveryDateCheck(
                False, MSG_TOO_FAR.format(days=self.max_future_days)
            )

        if self.is_blackout_date(day):
            return DeliveryDateCheck(False, MSG_BLACKOUT)

        if day < self.get_min_delivery_date(now):
            return DeliveryDateCheck(False, MSG_LEAD_TIME)

        return DeliveryDateCheck(True)

    def iter_valid_delivery_dates(
        self, now: Optional[datetime] = None
    ) -> Iterator[date]:
        now = self._now(now)
        current = self.get_min_delivery_date(now)
        max_date = self.get_max_delivery_date(now)

        while current <= max_date:
            if not self.is_blackout_date(current):
                yield current
            current += timedelta(days=1)

    def get_valid_delivery_dates(self, now: Optional[datetime] = None) -> List[date]:
        return list(self.iter_valid_delivery_dates(now))


# ============================================================
# module level helpers (default scheduler)
# ============================================================

_default_scheduler: Optional[DeliveryScheduler] = None


def get_default_scheduler() -> DeliveryScheduler:
    global _default_scheduler
    if _default_scheduler is None:
        _default_scheduler = DeliveryScheduler()
    return _default_scheduler


def is_past_date(value: DateLike, now: Optional[datetime] = None) -> bool:
    return get_default_scheduler().is_past_date(value, now)


def is_too_far_in_future(value: DateLike, now: Optional[datetime] = None) -> bool:
    return get_default_scheduler().is_too_far_in_future(value, now)


def is_blackout_date(value: DateLike) -> bool:
    return get_default_scheduler().is_blackout_date(value)


def get_min_delivery_date(now: Optional[datetime] = None) -> date:
    return get_default_scheduler().get_min_delivery_date(now)


def get_max_delivery_date(now: Optional[datetime] = None) -> date:
    return get_default_scheduler().get_max_delivery_date(now)


def is_valid_delivery_date(
    value: DateLike, now: Optional[datetime] = None
) -> DeliveryDateCheck:
    return get_default_scheduler().is_valid_delivery_date(value, now)


def get_valid_delivery_dates(now: Optional[datetime] = None) -> List[date]:
    return get_default_scheduler().get_valid_delivery_dates(now)
