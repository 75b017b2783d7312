"""Tests for CouponService against the in-memory backend."""

import pytest

from storefront.coupons.coupon import CouponType, RejectionCode
from storefront.errors import CouponRejectedError, TransportError


class TestValidate:
    async def test_valid_percentage_coupon(self, coupon_service, backend):
        applied = await coupon_service.validate("SAVE10", 200)
        assert applied.code == "SAVE10"
        assert applied.coupon.type == CouponType.PERCENTAGE
        assert applied.discount_amount == 20
        assert applied.final_amount == 180
        assert applied.order_amount == 200
        assert backend.calls_to("POST", "/coupons/validate")[0][2] == {"code": "SAVE10", "order_amount": 200}

    async def test_trusts_server_amounts(self, coupon_service, backend):
        applied = await coupon_service.validate("SAVE10", 1000)
        # capped by maximum_discount on the server
        assert applied.discount_amount == 30
        assert applied.final_amount == 970

    async def test_unknown_code(self, coupon_service):
        with pytest.raises(CouponRejectedError) as exc_info:
            await coupon_service.validate("NOPE", 200)
        assert exc_info.value.rejection.code == RejectionCode.NOT_FOUND

    async def test_minimum_amount_uses_structured_payload(self, coupon_service):
        with pytest.raises(CouponRejectedError) as exc_info:
            await coupon_service.validate("BIGSPEND", 5000)
        rejection = exc_info.value.rejection
        assert rejection.code == RejectionCode.MIN_AMOUNT
        assert rejection.minimum == 9999
        assert rejection.order_amount == 5000

    async def test_success_false_body(self, backend, coupon_service):
        async def reject(method, path, json=None):
            return {"success": False, "message": "Coupon has expired"}

        backend.request = reject
        with pytest.raises(CouponRejectedError) as exc_info:
            await coupon_service.validate("SAVE10", 200)
        assert exc_info.value.rejection.code == RejectionCode.INVALID
        assert exc_info.value.rejection.server_message == "Coupon has expired"

    async def test_server_fault_propagates(self, coupon_service, backend):
        backend.configure(failures={("POST", "/coupons/validate"): (500, "Server Error")})
        with pytest.raises(TransportError) as exc_info:
            await coupon_service.validate("SAVE10", 200)
        assert exc_info.value.status == 500

    async def test_unauthorized_is_not_a_rejection(self, coupon_service, backend):
        backend.configure(failures={("POST", "/coupons/validate"): (401, "Unauthenticated.")})
        with pytest.raises(TransportError):
            await coupon_service.validate("SAVE10", 200)


class TestListActive:
    async def test_lists_active_coupons(self, coupon_service, backend):
        backend.add_coupon("OLD", value=5, is_active=False)
        coupons = await coupon_service.list_active()
        assert {c.code for c in coupons} == {"SAVE10", "BIGSPEND", "FLAT20"}

    async def test_keeps_minimum_amounts(self, coupon_service):
        coupons = {c.code: c for c in await coupon_service.list_active()}
        assert coupons["BIGSPEND"].minimum_amount == 9999
