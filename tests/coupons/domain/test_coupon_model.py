"""Tests for coupon value objects and display-only estimates."""

import pytest
from pydantic import ValidationError

from storefront.coupons.coupon import Coupon, CouponType


class TestCoupon:
    def test_parses_server_payload(self):
        coupon = Coupon.model_validate(
            {"id": 4, "code": "SAVE10", "type": "percentage", "value": "10.00", "minimum_amount": None, "is_active": True}
        )
        assert coupon.type == CouponType.PERCENTAGE
        assert coupon.value == 10

    def test_is_immutable(self):
        coupon = Coupon(code="SAVE10")
        with pytest.raises(ValidationError):
            coupon.code = "OTHER"

    @pytest.mark.parametrize(
        "minimum, amount, eligible",
        [(None, 0, True), (9999, 5000, False), (9999, 9999, True), (0, 1, True)],
    )
    def test_eligibility(self, minimum, amount, eligible):
        assert Coupon(code="X", minimum_amount=minimum).is_eligible(amount) is eligible


class TestEstimateDiscount:
    def test_percentage(self):
        assert Coupon(code="P", type="percentage", value=10).estimate_discount(500) == 50

    def test_percentage_capped(self):
        coupon = Coupon(code="P", type="percentage", value=50, maximum_discount=100)
        assert coupon.estimate_discount(1000) == 100

    def test_fixed_never_exceeds_order(self):
        assert Coupon(code="F", type="fixed", value=300).estimate_discount(200) == 200

    def test_below_minimum_is_zero(self):
        assert Coupon(code="F", type="fixed", value=50, minimum_amount=9999).estimate_discount(5000) == 0
