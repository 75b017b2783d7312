"""Coupon validation gate — the state machine behind one coupon-entry widget.

    IDLE --submit/select--> VALIDATING --ok--> APPLIED
                                       --rejected--> IDLE_WITH_ERROR
    APPLIED --remove--> IDLE

Two entry variants share the machine. The selector variant knows each
coupon's minimum order up front and refuses ineligible coupons locally,
without a round trip. The free-text variant always asks the server.

Business rejections are expected outcomes: they are recorded on the gate and
logged at info level, never raised. Transport faults are re-raised.
"""

from enum import Enum

from storefront.coupons.coupon import AppliedCoupon, Coupon, CouponRejection, RejectionCode
from storefront.coupons.messages import CouponMessages
from storefront.coupons.service import CouponService
from storefront.errors import CouponRejectedError, StorefrontError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class GateState(Enum):
    IDLE = "Idle"
    VALIDATING = "Validating"
    APPLIED = "Applied"
    IDLE_WITH_ERROR = "IdleWithError"


class CouponGateBusyError(StorefrontError):
    """A validation is already in flight for this gate."""


class CouponGate:
    def __init__(self, service: CouponService, order_amount: float = 0, messages: CouponMessages | None = None):
        self.service = service
        self.order_amount = order_amount
        self.messages = messages or CouponMessages()
        self.state = GateState.IDLE
        self.applied: AppliedCoupon | None = None
        self.rejection: CouponRejection | None = None

    @property
    def error(self) -> str | None:
        if self.state != GateState.IDLE_WITH_ERROR:
            return None
        return self.rejection.message if self.rejection else self.messages.request_failed()

    @property
    def discount_amount(self) -> float:
        return self.applied.discount_amount if self.applied else 0

    @property
    def final_amount(self) -> float:
        return self.applied.final_amount if self.applied else self.order_amount

    # -------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------
    async def submit_code(self, code: str) -> AppliedCoupon | None:
        """Free-text entry. Replaces any applied coupon."""
        code = (code or "").strip().upper()
        self.applied = None
        if not code:
            self._reject(CouponRejection(code=RejectionCode.EMPTY_CODE, order_amount=self.order_amount))
            return None
        return await self._validate(code)

    async def select(self, coupon: Coupon) -> AppliedCoupon | None:
        """Selector entry. Selecting the applied coupon again deselects it."""
        if self.applied and self._same_coupon(self.applied.coupon, coupon):
            self.remove()
            return None

        self.applied = None
        if not coupon.is_eligible(self.order_amount):
            self._reject(self._below_minimum(coupon))
            return None
        return await self._validate(coupon.code)

    def remove(self) -> None:
        self.applied = None
        self.rejection = None
        self.state = GateState.IDLE

    async def update_order_amount(self, order_amount: float) -> AppliedCoupon | None:
        """Track a new order amount; an applied coupon is re-validated or dropped.

        A validation still in flight is repeated against the new amount.
        """
        self.order_amount = order_amount
        if self.state == GateState.IDLE_WITH_ERROR:
            self.rejection = None
            self.state = GateState.IDLE

        applied = self.applied
        if applied is None or applied.order_amount == order_amount:
            return applied

        self.applied = None
        if not applied.coupon.is_eligible(order_amount):
            self._reject(self._below_minimum(applied.coupon))
            return None
        return await self._validate(applied.code)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    @staticmethod
    def _same_coupon(a: Coupon, b: Coupon) -> bool:
        if a.id is not None and b.id is not None:
            return a.id == b.id
        return a.code.upper() == b.code.upper()

    def _below_minimum(self, coupon: Coupon) -> CouponRejection:
        return CouponRejection(
            code=RejectionCode.MIN_AMOUNT,
            order_amount=self.order_amount,
            minimum=coupon.minimum_amount,
        )

    async def _validate(self, code: str) -> AppliedCoupon | None:
        if self.state == GateState.VALIDATING:
            raise CouponGateBusyError(f"Coupon validation already in progress for {code}")

        self.state = GateState.VALIDATING
        self.rejection = None
        while True:
            order_amount = self.order_amount
            try:
                applied = await self.service.validate(code, order_amount)
            except CouponRejectedError as exc:
                if self.order_amount != order_amount:
                    continue
                self._reject(exc.rejection)
                return None
            except Exception:
                self.applied = None
                self.state = GateState.IDLE_WITH_ERROR
                raise

            # The result only holds for the amount it was validated against
            if self.order_amount == order_amount:
                break
            logger.debug(
                "Order amount changed during validation", code=code, validated=order_amount, current=self.order_amount
            )

        self.applied = applied
        self.state = GateState.APPLIED
        logger.info("Coupon applied", code=code, discount_amount=applied.discount_amount)
        return applied

    def _reject(self, rejection: CouponRejection) -> None:
        self.rejection = self.messages.localize(rejection)
        self.applied = None
        self.state = GateState.IDLE_WITH_ERROR
        logger.info("Coupon rejected", reason=rejection.code.value, order_amount=self.order_amount)
