# shop_v2/checkout/utils/display_format.py
from __future__ import annotations

from datetime import date

from shop_v2.checkout.dtos import PAYMENT_METHOD_LABELS, TIME_WINDOW_LABELS
from shop_v2.config.checkout_rules import CURRENCY_SYMBOL
from shop_v2.domain.delivery_schedule import DateLike, parse_delivery_date

_WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def format_price(amount: float) -> str:
    """
    20 -> "GH₵ 20.00"
    """
    return f"{CURRENCY_SYMBOL} {amount:,.2f}"


def format_delivery_fee(fee: float) -> str:
    return format_price(fee)


def format_date_iso(value: DateLike) -> str:
    return parse_delivery_date(value).isoformat()


def format_delivery_date_label(value: DateLike) -> str:
    """
    2025-06-11 -> "Wed, 11 Jun 2025"

    Names are fixed English, not the process locale.
    """
    day: date = parse_delivery_date(value)
    return f"{_WEEKDAYS[day.weekday()]}, {day.day} {_MONTHS[day.month - 1]} {day.year}"


def format_time_window(time_window: str) -> str:
    return TIME_WINDOW_LABELS.get(time_window, time_window)


def format_payment_method(payment_method: str) -> str:
    return PAYMENT_METHOD_LABELS.get(payment_method, payment_method)


def format_schedule_label(value: DateLike, time_window: str) -> str:
    """
    "Wed, 11 Jun 2025 · Morning (9AM - 12PM)"
    """
    return f"{format_delivery_date_label(value)} · {format_time_window(time_window)}"
