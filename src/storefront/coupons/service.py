"""Coupon service — remote validation and listing of active coupons."""

from typing import Any

from storefront.coupons.coupon import AppliedCoupon, Coupon, CouponRejection, RejectionCode
from storefront.errors import CouponRejectedError, TransportError, unwrap_error
from storefront.transport.port import TransportPort
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# Statuses the validate endpoint uses for business rejections
REJECTION_STATUSES = frozenset({400, 404, 422})


def rejection_from_payload(payload: dict, order_amount: float, status: int | None = None) -> CouponRejection:
    """Build a rejection from the server's structured error payload."""
    try:
        code = RejectionCode(payload.get("code"))
    except ValueError:
        code = RejectionCode.NOT_FOUND if status == 404 else RejectionCode.INVALID

    server_message = payload.get("message")
    return CouponRejection(
        code=code,
        order_amount=order_amount,
        minimum=payload.get("minimum"),
        server_message=server_message,
        message=server_message or "",
    )


class CouponService:
    def __init__(self, transport: TransportPort):
        self.transport = transport

    async def validate(self, code: str, order_amount: float) -> AppliedCoupon:
        """Ask the server whether ``code`` applies to ``order_amount``.

        Raises:
            CouponRejectedError: the server refused the coupon.
            TransportError: any other failure.
        """
        try:
            data: Any = await self.transport.post("/coupons/validate", json={"code": code, "order_amount": order_amount})
        except TransportError as exc:
            if exc.status in REJECTION_STATUSES and isinstance(exc.data, dict):
                raise CouponRejectedError(rejection_from_payload(exc.data, order_amount, exc.status)) from exc
            logger.error("validate_coupon failed", code=code, **unwrap_error(exc).as_log_context())
            raise

        if not isinstance(data, dict) or not data.get("success"):
            raise CouponRejectedError(rejection_from_payload(data if isinstance(data, dict) else {}, order_amount))

        result = data.get("data") or {}
        return AppliedCoupon(
            code=code,
            coupon=Coupon.model_validate(result["coupon"]),
            discount_amount=result["discount_amount"],
            final_amount=result["final_amount"],
            order_amount=order_amount,
        )

    async def list_active(self) -> list[Coupon]:
        try:
            data = await self.transport.get("/coupons/active")
        except Exception as exc:
            logger.error("list_active_coupons failed", **unwrap_error(exc).as_log_context())
            raise
        items = data.get("data") if isinstance(data, dict) else data
        return [Coupon.model_validate(item) for item in items or []]
