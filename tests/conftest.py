import os
from pathlib import Path

import pytest

from storefront.cart.service import CartService
from storefront.coupons.service import CouponService
from storefront.transport.fake_adapter import FakeCartBackend

BOOKS = {
    1: {"price": 100, "sku": "BK-0001", "title": "Dế Mèn Phiêu Lưu Ký"},
    2: {"price": 250, "sku": "BK-0002", "title": "Tắt Đèn"},
    3: {"price": 80, "sku": None, "title": "Số Đỏ"},
}


def pytest_sessionstart(session):
    """Quiet, structured logging for the whole run."""
    os.environ.setdefault("STOREFRONT_ENV", "test")

    from storefront.utils.logging import configure_logging

    configure_logging()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture()
def backend():
    fake = FakeCartBackend(books={k: dict(v) for k, v in BOOKS.items()})
    fake.add_coupon("SAVE10", type="percentage", value=10, maximum_discount=30)
    fake.add_coupon("BIGSPEND", type="fixed", value=50, minimum_amount=9999)
    fake.add_coupon("FLAT20", type="fixed", value=20, minimum_amount=150)
    return fake


@pytest.fixture()
def cart_service(backend):
    return CartService(backend)


@pytest.fixture()
def coupon_service(backend):
    return CouponService(backend)
