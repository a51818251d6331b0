from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationInfo,
    conint,
    field_validator,
)

from shop_v2.config.checkout_rules import SHOP_TIMEZONE
from shop_v2.domain.cart_ledger import CartLineItem
from shop_v2.domain.delivery_fees import GhanaRegion
from shop_v2.domain.delivery_schedule import (
    DeliveryScheduler,
    get_default_scheduler,
    parse_delivery_date,
)

# ============================================================
# Field rules / messages
# ============================================================

# +233XXXXXXXXX or 0XXXXXXXXX
GHANA_PHONE_REGEX = re.compile(r"^(\+233|0)[0-9]{9}$")

MSG_NAME = "Name must be at least 2 characters"
MSG_PHONE = "Please enter a valid Ghana phone number (+233XXXXXXXXX or 0XXXXXXXXX)"
MSG_EMAIL = "Please enter a valid email address"
MSG_REGION = "Please select a valid region"
MSG_STREET = "Street address is required"
MSG_CITY = "City is required"
MSG_DATE_REQUIRED = "Delivery date is required"
MSG_DATE_FORMAT = "Invalid delivery date format"
MSG_TIME_WINDOW = "Please select a delivery time window"
MSG_PAYMENT_METHOD = "Please select a payment method"
MSG_ORDER_ID = "Order ID is required"

TimeWindow = Literal["morning", "afternoon", "evening", "any"]
PaymentMethod = Literal["cod", "paystack"]

TIME_WINDOW_LABELS: Dict[str, str] = {
    "morning": "Morning (9AM - 12PM)",
    "afternoon": "Afternoon (12PM - 4PM)",
    "evening": "Evening (4PM - 7PM)",
    "any": "Any time",
}

PAYMENT_METHOD_LABELS: Dict[str, str] = {
    "cod": "Cash on Delivery",
    "paystack": "Pay Online (Paystack)",
}


def check_name(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise ValueError(MSG_NAME)
    return value


def check_phone(value: str) -> str:
    if not GHANA_PHONE_REGEX.fullmatch(value):
        raise ValueError(MSG_PHONE)
    return value


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


# standalone check for the optional email field
OPTIONAL_EMAIL = TypeAdapter(Optional[EmailStr])


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ============================================================
# Checkout form
# ============================================================

class Coordinates(_CamelModel):
    lat: float
    lng: float


class DeliveryAddress(_CamelModel):
    street: str  # e.g. "12 Oxford Street"
    city: str  # e.g. "Accra"
    region: GhanaRegion  # slug, e.g. "greater-accra"
    directions: Optional[str] = None  # landmark notes for the rider
    coordinates: Optional[Coordinates] = None  # map pin, if shared

    @field_validator("street")
    @classmethod
    def _street_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError(MSG_STREET)
        return v.strip()

    @field_validator("city")
    @classmethod
    def _city_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError(MSG_CITY)
        return v.strip()


class CheckoutFormData(_CamelModel):
    """
    Checkout submission as sent by the storefront.

    Validation context (optional):
        {"scheduler": DeliveryScheduler, "now": datetime,
         "check_delivery_rules": bool}
    When check_delivery_rules is set the delivery date must also pass the
    scheduling rules (past / too far / blackout / lead time). Full ISO
    datetimes are reduced to a calendar day in the scheduler's time zone.
    """

    customer_name: str = Field(alias="customerName")  # e.g. "Ama Mensah"
    phone: str  # e.g. "0241234567" / "+233241234567"
    email: Optional[EmailStr] = None  # optional, blank -> None
    delivery_date: date = Field(alias="deliveryDate")  # e.g. "2025-06-11"
    time_window: TimeWindow = Field(alias="timeWindow")
    address: DeliveryAddress
    payment_method: PaymentMethod = Field(alias="paymentMethod")

    @field_validator("customer_name")
    @classmethod
    def _name(cls, v: str) -> str:
        return check_name(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return check_phone(v)

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("delivery_date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any, info: ValidationInfo) -> date:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError(MSG_DATE_REQUIRED)
        if not isinstance(v, (str, date)):
            raise ValueError(MSG_DATE_FORMAT)

        scheduler = (info.context or {}).get("scheduler")
        tz = scheduler.tz if scheduler is not None else SHOP_TIMEZONE
        try:
            return parse_delivery_date(v, tz)
        except ValueError:
            raise ValueError(MSG_DATE_FORMAT)

    @field_validator("delivery_date")
    @classmethod
    def _delivery_rules(cls, v: date, info: ValidationInfo) -> date:
        ctx = info.context or {}
        if not ctx.get("check_delivery_rules"):
            return v

        scheduler: DeliveryScheduler = ctx.get("scheduler") or get_default_scheduler()
        check = scheduler.is_valid_delivery_date(v, ctx.get("now"))
        if not check.is_valid:
            raise ValueError(check.error)
        return v


class OrderLookupForm(_CamelModel):
    order_id: str = Field(alias="orderId")
    phone: str

    @field_validator("order_id")
    @classmethod
    def _order_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError(MSG_ORDER_ID)
        return v.strip()

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return check_phone(v)


# ============================================================
# External order API contract
# ============================================================

class OrderItemRequest(_CamelModel):
    variant_id: str = Field(alias="variantId")
    quantity: conint(ge=1)


class CreateOrderRequest(_CamelModel):
    items: List[OrderItemRequest]
    customer_name: str = Field(alias="customerName")
    customer_phone: str = Field(alias="customerPhone")
    customer_email: Optional[str] = Field(default=None, alias="customerEmail")
    delivery_date: str = Field(alias="deliveryDate")  # YYYY-MM-DD
    time_window: TimeWindow = Field(alias="timeWindow")
    shipping_address: DeliveryAddress = Field(alias="shippingAddress")
    payment_method: PaymentMethod = Field(alias="paymentMethod")

    def to_json_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class OrderCreatedData(_CamelModel):
    order_id: str = Field(alias="orderId")
    status: str = "PENDING"  # PENDING / CONFIRMED / ...
    scheduled_date: Optional[str] = Field(default=None, alias="scheduledDate")
    time_window: Optional[str] = Field(default=None, alias="timeWindow")
    total_amount: Optional[float] = Field(default=None, alias="totalAmount")
    delivery_fee: Optional[float] = Field(default=None, alias="deliveryFee")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    # Paystack checkout page; only set for paystack orders
    payment_url: Optional[str] = Field(default=None, alias="paymentUrl")


class CreateOrderResponse(_CamelModel):
    success: Literal[True] = True
    data: OrderCreatedData


class InventoryError(_CamelModel):
    variant_id: str = Field(alias="variantId")
    product_title: str = Field(alias="productTitle")
    size: str
    color: str
    requested: int  # quantity in the cart
    available: int  # stock left, may be 0


class InventoryErrorResponse(_CamelModel):
    success: Literal[False] = False
    error: Literal["INVENTORY_ERROR"] = "INVENTORY_ERROR"
    message: str = "Some items are out of stock"
    items: List[InventoryError] = Field(default_factory=list)


class GuestOrderItem(_CamelModel):
    variant_id: Optional[str] = Field(default=None, alias="variantId")
    quantity: int
    price_at_purchase: Optional[float] = Field(default=None, alias="priceAtPurchase")


class GuestOrderSummary(_CamelModel):
    """
    Order as returned by the guest lookup endpoint (only the fields the
    storefront shows).
    """

    id: str
    status: str
    total_amount: float = Field(alias="totalAmount")
    delivery_fee: Optional[float] = Field(default=None, alias="deliveryFee")
    scheduled_date: Optional[str] = Field(default=None, alias="scheduledDate")
    time_window: Optional[str] = Field(default=None, alias="timeWindow")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    items: List[GuestOrderItem] = Field(default_factory=list)


# ============================================================
# Confirmation
# ============================================================

class CheckoutTotals(_CamelModel):
    subtotal: float
    delivery_fee: float = Field(alias="deliveryFee")
    total: float


class OrderConfirmation(_CamelModel):
    order_id: str = Field(alias="orderId")
    scheduled_date: str = Field(alias="scheduledDate")
    time_window: TimeWindow = Field(alias="timeWindow")
    address: DeliveryAddress
    items: List[CartLineItem]
    totals: CheckoutTotals
    payment_method: PaymentMethod = Field(alias="paymentMethod")
    payment_url: Optional[str] = Field(default=None, alias="paymentUrl")
