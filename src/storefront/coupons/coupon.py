"""Coupon value objects.

Coupons are read-only on the client: they are fetched from the server and
used to gate eligibility and to render. The authoritative discount is always
the server's ``discount_amount``.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CouponType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class RejectionCode(Enum):
    EMPTY_CODE = "EMPTY_CODE"
    MIN_AMOUNT = "MIN_AMOUNT"
    NOT_FOUND = "NOT_FOUND"
    INVALID = "INVALID"


class Coupon(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    code: str
    type: CouponType = CouponType.FIXED
    value: float = Field(default=0, ge=0)
    minimum_amount: float | None = None
    maximum_discount: float | None = None
    id: int | str | None = None
    name: str | None = None
    description: str | None = None
    end_date: str | None = None

    def is_eligible(self, order_amount: float) -> bool:
        return not self.minimum_amount or order_amount >= self.minimum_amount

    def estimate_discount(self, order_amount: float) -> float:
        """Display-only estimate of the discount. Never use it as the charged amount."""
        if not self.is_eligible(order_amount):
            return 0
        if self.type == CouponType.PERCENTAGE:
            discount = order_amount * self.value / 100
            if self.maximum_discount:
                discount = min(discount, self.maximum_discount)
            return discount
        return min(self.value, order_amount)


class AppliedCoupon(BaseModel):
    """A coupon accepted by the server for a specific order amount."""

    model_config = ConfigDict(frozen=True)

    code: str
    coupon: Coupon
    discount_amount: float
    final_amount: float
    order_amount: float


class CouponRejection(BaseModel):
    """Structured reason a coupon was refused, localized by ``CouponMessages``."""

    model_config = ConfigDict(frozen=True)

    code: RejectionCode
    order_amount: float | None = None
    minimum: float | None = None
    server_message: str | None = None
    message: str = ""
