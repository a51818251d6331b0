# tests/conftest.py
from datetime import datetime

import pytest

from shop_v2.cart.services.cart_service import CartService
from shop_v2.config.holidays import default_calendar
from shop_v2.domain.delivery_schedule import DeliveryScheduler
from shop_v2.storage.local_state_repo import LocalStateRepository

# Tuesday, before the 18:00 cutoff
REFERENCE_NOW = datetime(2025, 6, 10, 10, 0)


@pytest.fixture
def now():
    return REFERENCE_NOW


@pytest.fixture
def scheduler():
    """Built-in holiday table only (ignores HOLIDAYS_PATH)."""
    return DeliveryScheduler(
        calendar=default_calendar(),
        cutoff_hour=18,
        max_future_days=14,
    )


@pytest.fixture
def repo(tmp_path):
    """LocalStateRepository on a throwaway sqlite file."""
    return LocalStateRepository(db_path=tmp_path / "state.db")


@pytest.fixture
def cart(repo):
    return CartService("device-1", repo=repo)


def make_item(**overrides):
    base = {
        "productId": "prod-1",
        "variantId": "var-1",
        "title": "Heavyweight Hoodie",
        "size": "L",
        "color": "Black",
        "price": 100,
        "quantity": 1,
        "image": "/img/hoodie.jpg",
    }
    base.update(overrides)
    return base


def make_form(**overrides):
    base = {
        "customerName": "Ama Mensah",
        "phone": "0241234567",
        "email": "ama@example.com",
        "deliveryDate": "2025-06-11",
        "timeWindow": "morning",
        "address": {
            "street": "12 Oxford Street",
            "city": "Accra",
            "region": "greater-accra",
            "directions": "Opposite the mall",
        },
        "paymentMethod": "cod",
    }
    base.update(overrides)
    return base
