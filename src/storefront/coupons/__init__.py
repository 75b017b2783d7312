"""Coupon models, remote validation and the coupon-entry gate."""

from storefront.coupons.coupon import AppliedCoupon, Coupon, CouponRejection, CouponType, RejectionCode
from storefront.coupons.gate import CouponGate, GateState
from storefront.coupons.messages import CouponMessages
from storefront.coupons.service import CouponService

__all__ = [
    "AppliedCoupon",
    "Coupon",
    "CouponGate",
    "CouponMessages",
    "CouponRejection",
    "CouponService",
    "CouponType",
    "GateState",
    "RejectionCode",
]
