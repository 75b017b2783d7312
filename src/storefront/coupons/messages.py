"""Localized coupon messages, rendered from structured rejection data."""

from storefront.config import get_settings
from storefront.coupons.coupon import CouponRejection, RejectionCode

CATALOGUES = {
    "en": {
        RejectionCode.EMPTY_CODE: "Please enter a coupon code",
        RejectionCode.MIN_AMOUNT: (
            "This coupon requires a minimum order of {minimum}. Current order: {order_amount}"
        ),
        RejectionCode.NOT_FOUND: "Coupon code does not exist",
        RejectionCode.INVALID: "Invalid coupon code",
        "request_failed": "Something went wrong while checking the coupon",
    },
    "vi": {
        RejectionCode.EMPTY_CODE: "Vui lòng nhập mã khuyến mại",
        RejectionCode.MIN_AMOUNT: (
            "Mã khuyến mại này yêu cầu đơn hàng tối thiểu {minimum} VND. Đơn hàng hiện tại: {order_amount} VND"
        ),
        RejectionCode.NOT_FOUND: "Mã khuyến mại không tồn tại",
        RejectionCode.INVALID: "Mã khuyến mại không hợp lệ",
        "request_failed": "Có lỗi xảy ra khi kiểm tra mã khuyến mại",
    },
}


def format_amount(amount: float | None) -> str:
    if amount is None:
        return "?"
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:.2f}"


class CouponMessages:
    def __init__(self, locale: str | None = None):
        locale = locale or get_settings().locale
        if locale not in CATALOGUES:
            raise ValueError(f"Unsupported locale: {locale}")
        self.locale = locale
        self.catalogue = CATALOGUES[locale]

    def render(self, rejection: CouponRejection) -> str:
        # Server text is only a fallback for generic rejections; it is never parsed.
        if rejection.code == RejectionCode.INVALID and rejection.server_message:
            return rejection.server_message
        return self.catalogue[rejection.code].format(
            minimum=format_amount(rejection.minimum),
            order_amount=format_amount(rejection.order_amount),
        )

    def localize(self, rejection: CouponRejection) -> CouponRejection:
        return rejection.model_copy(update={"message": self.render(rejection)})

    def request_failed(self) -> str:
        return self.catalogue["request_failed"]
