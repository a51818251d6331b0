"""
Checkout form validation.

Every field is checked in one pass and all failures are returned, so the
storefront can show an error next to each field. Nothing here raises for bad
input: callers get a CheckoutValidationResult either way.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from shop_v2.checkout.dtos import (
    MSG_CITY,
    MSG_DATE_REQUIRED,
    MSG_EMAIL,
    MSG_NAME,
    MSG_ORDER_ID,
    MSG_PAYMENT_METHOD,
    MSG_PHONE,
    MSG_REGION,
    MSG_STREET,
    MSG_TIME_WINDOW,
    OPTIONAL_EMAIL,
    CheckoutFormData,
    OrderLookupForm,
    blank_to_none,
    check_name,
    check_phone,
)
from shop_v2.domain.delivery_fees import is_valid_region
from shop_v2.domain.delivery_schedule import DeliveryScheduler, get_default_scheduler

T = TypeVar("T", bound=BaseModel)

# Messages for pydantic's built-in error types (missing / wrong type / enum)
FIELD_MESSAGES: Dict[str, str] = {
    "customerName": MSG_NAME,
    "phone": MSG_PHONE,
    "email": MSG_EMAIL,
    "deliveryDate": MSG_DATE_REQUIRED,
    "timeWindow": MSG_TIME_WINDOW,
    "paymentMethod": MSG_PAYMENT_METHOD,
    "address": "Delivery address is required",
    "address.street": MSG_STREET,
    "address.city": MSG_CITY,
    "address.region": MSG_REGION,
    "address.directions": "Directions must be text",
    "address.coordinates": "Coordinates must include lat and lng",
    "address.coordinates.lat": "Latitude must be a number",
    "address.coordinates.lng": "Longitude must be a number",
    "orderId": MSG_ORDER_ID,
}

FORM_FIELD = "form"


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass
class ValidationResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    errors: List[FieldError] = field(default_factory=list)

    def error_map(self) -> Dict[str, str]:
        """First message per field, in report order."""
        out: Dict[str, str] = {}
        for err in self.errors:
            out.setdefault(err.field, err.message)
        return out


CheckoutValidationResult = ValidationResult[CheckoutFormData]


# ============================================================
# pydantic error -> FieldError
# ============================================================

def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or FORM_FIELD


def _to_field_errors(exc: ValidationError) -> List[FieldError]:
    errors: List[FieldError] = []
    for err in exc.errors():
        path = _field_path(err["loc"])
        ctx = err.get("ctx") or {}
        if err["type"] == "value_error" and "error" in ctx:
            # raised by our own validators; message is already user facing
            message = str(ctx["error"])
        else:
            message = FIELD_MESSAGES.get(path, err["msg"])
        errors.append(FieldError(field=path, message=message))
    return errors


def _validate(
    model: type[T],
    data: Any,
    context: Optional[Dict[str, Any]] = None,
) -> ValidationResult[T]:
    if not isinstance(data, dict):
        return ValidationResult(
            success=False,
            errors=[FieldError(FORM_FIELD, "Form data must be an object")],
        )
    try:
        parsed = model.model_validate(data, context=context)
    except ValidationError as e:
        return ValidationResult(success=False, errors=_to_field_errors(e))
    return ValidationResult(success=True, data=parsed)


# ============================================================
# public API
# ============================================================

def validate_checkout_form(
    data: Any,
    *,
    now: Optional[datetime] = None,
    check_delivery_rules: bool = True,
    scheduler: Optional[DeliveryScheduler] = None,
) -> CheckoutValidationResult:
    """
    Validate a raw checkout submission.

    With check_delivery_rules (default) the delivery date must also be
    schedulable relative to `now`; its failure is reported under
    "deliveryDate" together with any other field errors.
    """
    context = {
        "check_delivery_rules": check_delivery_rules,
        "scheduler": scheduler or get_default_scheduler(),
        "now": now,
    }
    return _validate(CheckoutFormData, data, context)


def validate_order_lookup(data: Any) -> ValidationResult[OrderLookupForm]:
    return _validate(OrderLookupForm, data)


def _passes(check, value: Any) -> bool:
    try:
        check(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return True


def validate_name(name: Any) -> bool:
    return isinstance(name, str) and _passes(check_name, name)


def validate_phone(phone: Any) -> bool:
    return isinstance(phone, str) and _passes(check_phone, phone)


def validate_email(email: Any) -> bool:
    if email is not None and not isinstance(email, str):
        return False
    try:
        OPTIONAL_EMAIL.validate_python(blank_to_none(email))
    except ValidationError:
        return False
    return True


def validate_region(region: Any) -> bool:
    return is_valid_region(region)
