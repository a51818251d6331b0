from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Literal, Optional

from shop_v2.cart.services.cart_service import CartService
from shop_v2.checkout.dtos import (
    CheckoutFormData,
    CheckoutTotals,
    CreateOrderRequest,
    CreateOrderResponse,
    InventoryError,
    InventoryErrorResponse,
    OrderConfirmation,
    OrderItemRequest,
)
from shop_v2.checkout.validation import FieldError, validate_checkout_form
from shop_v2.domain.cart_ledger import CartLineItem
from shop_v2.domain.delivery_fees import calculate_delivery_fee
from shop_v2.domain.delivery_schedule import DeliveryScheduler, get_default_scheduler
from shop_v2.integrations.orders.order_api_client import OrderApiClient

logger = logging.getLogger(__name__)

MSG_EMPTY_CART = "Your cart is empty"


def calculate_checkout_totals(
    items: Iterable[CartLineItem],
    delivery_fee: float,
) -> CheckoutTotals:
    subtotal = sum(i.unit_price * i.quantity for i in items)
    return CheckoutTotals(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        total=subtotal + delivery_fee,
    )


def build_order_request(
    form: CheckoutFormData,
    items: Iterable[CartLineItem],
) -> CreateOrderRequest:
    return CreateOrderRequest(
        items=[
            OrderItemRequest(variant_id=i.variant_id, quantity=i.quantity)
            for i in items
        ],
        customer_name=form.customer_name,
        customer_phone=form.phone,
        customer_email=form.email or None,
        delivery_date=form.delivery_date.isoformat(),
        time_window=form.time_window,
        shipping_address=form.address,
        payment_method=form.payment_method,
    )


@dataclass
class CheckoutOutcome:
    """
    Result of a checkout submission.

    status:
        "invalid"          form / cart problems, see errors
        "inventory_error"  the order API refused some items, see inventory_errors
        "confirmed"        order created, see confirmation
    """

    status: Literal["invalid", "inventory_error", "confirmed"]
    errors: List[FieldError] = field(default_factory=list)
    inventory_errors: List[InventoryError] = field(default_factory=list)
    message: Optional[str] = None
    confirmation: Optional[OrderConfirmation] = None

    @property
    def requires_redirect(self) -> bool:
        return (
            self.confirmation is not None
            and self.confirmation.payment_method == "paystack"
            and bool(self.confirmation.payment_url)
        )


class CheckoutService:
    """
    Checkout orchestration for one device's cart.

    Responsibilities:
    - validate the submitted form (fields + delivery rules)
    - build the order request from the form and the cart lines
    - hand it to the order API (guest or authenticated)
    - on success assemble the confirmation and clear the cart

    Stock checks, pricing of record, and payment belong to the order API.
    """

    def __init__(
        self,
        cart: CartService,
        *,
        client: Optional[OrderApiClient] = None,
        scheduler: Optional[DeliveryScheduler] = None,
    ) -> None:
        self.cart = cart
        self.client = client or OrderApiClient()
        self.scheduler = scheduler or get_default_scheduler()

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    def preview_totals(self, region: Optional[str]) -> CheckoutTotals:
        return calculate_checkout_totals(
            self.cart.items, calculate_delivery_fee(region)
        )

    def submit_order(
        self,
        raw_form: Any,
        *,
        now: Optional[datetime] = None,
        auth_token: Optional[str] = None,
    ) -> CheckoutOutcome:
        result = validate_checkout_form(raw_form, now=now, scheduler=self.scheduler)

        items = self.cart.items
        errors = list(result.errors)
        if not items:
            errors.append(FieldError("items", MSG_EMPTY_CART))

        if errors:
            return CheckoutOutcome(status="invalid", errors=errors)

        form = result.data
        request = build_order_request(form, items)

        if auth_token:
            response = self.client.create_order(request, token=auth_token)
        else:
            response = self.client.create_guest_order(request)

        if isinstance(response, InventoryErrorResponse):
            return CheckoutOutcome(
                status="inventory_error",
                inventory_errors=list(response.items),
                message=response.message,
            )

        confirmation = self._build_confirmation(form, items, response)

        # the confirmation keeps its own copy of the lines
        self.cart.clear_cart()

        logger.info(
            "Checkout confirmed: order_id=%s payment=%s",
            confirmation.order_id,
            confirmation.payment_method,
        )
        return CheckoutOutcome(status="confirmed", confirmation=confirmation)

    # ========================================================
    # Internal helpers
    # ========================================================

    @staticmethod
    def _build_confirmation(
        form: CheckoutFormData,
        items: List[CartLineItem],
        response: CreateOrderResponse,
    ) -> OrderConfirmation:
        data = response.data

        delivery_fee = data.delivery_fee or calculate_delivery_fee(form.address.region)
        totals = calculate_checkout_totals(items, delivery_fee)
        if data.total_amount:
            totals = CheckoutTotals(
                subtotal=totals.subtotal,
                delivery_fee=delivery_fee,
                total=data.total_amount,
            )

        return OrderConfirmation(
            order_id=data.order_id,
            scheduled_date=data.scheduled_date or form.delivery_date.isoformat(),
            time_window=form.time_window,
            address=form.address,
            items=[i.model_copy() for i in items],
            totals=totals,
            payment_method=form.payment_method,
            payment_url=data.payment_url,
        )
