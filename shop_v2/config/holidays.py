# shop_v2/config/holidays.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


# ============================================================
# Default Ghana holiday table
# ============================================================

# Same calendar day every year (month, day).
GHANA_RECURRING_HOLIDAYS: Tuple[Tuple[int, int], ...] = (
    (1, 1),    # New Year's Day
    (3, 6),    # Independence Day
    (5, 1),    # May Day
    (5, 25),   # Africa Day
    (7, 1),    # Republic Day
    (8, 4),    # Founders' Day
    (9, 21),   # Kwame Nkrumah Memorial Day
    (12, 25),  # Christmas Day
    (12, 26),  # Boxing Day
)

# One-off dated entries kept from the 2025 published calendar.
GHANA_DATED_HOLIDAYS: Tuple[date, ...] = (
    date(2025, 4, 18),  # Good Friday
    date(2025, 4, 21),  # Easter Monday
    date(2025, 12, 1),  # Farmers' Day (as published)
)


def easter_sunday(year: int) -> date:
    """
    Gregorian Easter Sunday (anonymous Gregorian computus).
    """
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def first_friday_of_december(year: int) -> date:
    first = date(year, 12, 1)
    # Friday == 4
    return first + timedelta(days=(4 - first.weekday()) % 7)


def _movable_holidays(year: int) -> List[date]:
    easter = easter_sunday(year)
    return [
        easter - timedelta(days=2),  # Good Friday
        easter + timedelta(days=1),  # Easter Monday
        first_friday_of_december(year),  # Farmers' Day
    ]


# ============================================================
# Calendar
# ============================================================

@dataclass(frozen=True)
class HolidayCalendar:
    """
    Year-agnostic public holiday table.

    A day is a holiday when it matches a recurring (month, day) entry,
    one of the movable rules (Easter based, Farmers' Day), or an explicit
    dated entry.
    """

    recurring: FrozenSet[Tuple[int, int]] = field(default_factory=frozenset)
    dated: FrozenSet[date] = field(default_factory=frozenset)
    include_movable: bool = True

    def is_holiday(self, day: date) -> bool:
        if (day.month, day.day) in self.recurring:
            return True
        if day in self.dated:
            return True
        if self.include_movable and day in _movable_holidays(day.year):
            return True
        return False

    def holidays_for_year(self, year: int) -> List[date]:
        days = set()
        for month, dom in self.recurring:
            try:
                days.add(date(year, month, dom))
            except ValueError:
                # 02-29 outside leap years
                continue
        days.update(d for d in self.dated if d.year == year)
        if self.include_movable:
            days.update(_movable_holidays(year))
        return sorted(days)

    def with_entries(
        self,
        *,
        recurring: Iterable[Tuple[int, int]] = (),
        dated: Iterable[date] = (),
    ) -> "HolidayCalendar":
        return HolidayCalendar(
            recurring=self.recurring | frozenset(recurring),
            dated=self.dated | frozenset(dated),
            include_movable=self.include_movable,
        )


def default_calendar() -> HolidayCalendar:
    return HolidayCalendar(
        recurring=frozenset(GHANA_RECURRING_HOLIDAYS),
        dated=frozenset(GHANA_DATED_HOLIDAYS),
    )


def _parse_month_day(value: str) -> Tuple[int, int]:
    parts = value.strip().split("-")
    if len(parts) != 2:
        raise ValueError(f"recurring holiday must be MM-DD: {value!r}")
    month, dom = int(parts[0]), int(parts[1])
    # validate against a leap year so 02-29 is accepted
    date(2024, month, dom)
    return month, dom


def load_calendar(path: Optional[str | Path] = None) -> HolidayCalendar:
    """
    Build the holiday calendar, optionally extended from a JSON file:

        {"recurring": ["01-07"], "dates": ["2026-04-03"]}

    A malformed file raises ValueError.
    """
    calendar = default_calendar()
    if not path:
        return calendar

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("holiday file must contain a JSON object")

    recurring = [_parse_month_day(v) for v in raw.get("recurring", [])]
    dated = [date.fromisoformat(v) for v in raw.get("dates", [])]

    logger.info(
        "Loaded holiday table %s (recurring=%d, dated=%d)",
        path,
        len(recurring),
        len(dated),
    )
    return calendar.with_entries(recurring=recurring, dated=dated)
