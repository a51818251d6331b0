from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import requests
from pydantic import ValidationError

from shop_v2.checkout.dtos import (
    CreateOrderRequest,
    CreateOrderResponse,
    GuestOrderSummary,
    InventoryErrorResponse,
)
from shop_v2.config.checkout_rules import ORDER_API_BASE_URL, ORDER_API_TIMEOUT

logger = logging.getLogger(__name__)

OrderApiResult = Union[CreateOrderResponse, InventoryErrorResponse]


class OrderApiError(RuntimeError):
    """
    The order API could not be reached or answered with a non-inventory
    failure.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OrderApiClient:
    """
    Thin client for the storefront order API.

    - POST /orders/guest  guest checkout
    - POST /orders        authenticated checkout (Bearer token)
    - GET  /orders/lookup guest order lookup by id + phone

    Inventory rejections come back as InventoryErrorResponse; every other
    failure raises OrderApiError.
    """

    def __init__(
        self,
        base_url: str = ORDER_API_BASE_URL,
        *,
        timeout: float = ORDER_API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # ============================================================
    # orders
    # ============================================================

    def create_guest_order(self, request: CreateOrderRequest) -> OrderApiResult:
        return self._create("/orders/guest", request, headers={})

    def create_order(self, request: CreateOrderRequest, *, token: str) -> OrderApiResult:
        return self._create(
            "/orders",
            request,
            headers={"Authorization": f"Bearer {token}"},
        )

    def lookup_guest_order(self, *, order_id: str, phone: str) -> GuestOrderSummary:
        resp = self._send(
            "GET",
            "/orders/lookup",
            params={"orderId": order_id, "phone": phone},
        )
        body = self._json(resp)

        if not resp.ok:
            raise OrderApiError(
                body.get("message") or f"Order lookup failed ({resp.status_code})",
                status_code=resp.status_code,
            )

        try:
            return GuestOrderSummary.model_validate(body.get("data", body))
        except ValidationError as e:
            raise OrderApiError(
                f"Unexpected lookup response: {e}", status_code=resp.status_code
            ) from e

    # ============================================================
    # internal
    # ============================================================

    def _create(
        self,
        path: str,
        request: CreateOrderRequest,
        *,
        headers: Dict[str, str],
    ) -> OrderApiResult:
        payload = request.to_json_payload()
        resp = self._send("POST", path, json=payload, headers=headers)
        body = self._json(resp)

        if not resp.ok:
            if body.get("error") == "INVENTORY_ERROR":
                logger.info(
                    "Order rejected for stock: %d item(s)", len(body.get("items", []))
                )
                try:
                    return InventoryErrorResponse.model_validate(body)
                except ValidationError as e:
                    raise OrderApiError(
                        f"Unexpected inventory error response: {e}",
                        status_code=resp.status_code,
                    ) from e

            logger.error(
                "Order creation failed: status=%s body=%s",
                resp.status_code,
                body,
            )
            raise OrderApiError(
                body.get("message") or f"Failed to create order ({resp.status_code})",
                status_code=resp.status_code,
            )

        try:
            result = CreateOrderResponse.model_validate(body)
        except ValidationError as e:
            raise OrderApiError(
                f"Unexpected order response: {e}", status_code=resp.status_code
            ) from e

        logger.info(
            "Order created: order_id=%s status=%s",
            result.data.order_id,
            result.data.status,
        )
        return result

    def _send(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json", **kwargs.pop("headers", {})}
        try:
            return self.session.request(
                method,
                url,
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise OrderApiError(f"Order API unreachable: {e}") from e

    @staticmethod
    def _json(resp: requests.Response) -> Dict[str, Any]:
        try:
            body = resp.json()
        except ValueError as e:
            raise OrderApiError(
                f"Failed to parse server response ({resp.status_code})",
                status_code=resp.status_code,
            ) from e

        if not isinstance(body, dict):
            raise OrderApiError(
                f"Unexpected server response ({resp.status_code})",
                status_code=resp.status_code,
            )
        return body
