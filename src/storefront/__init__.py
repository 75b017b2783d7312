"""Storefront cart client — cart, coupon and checkout selection over the bookstore API."""

from storefront.cart.guest import GuestCart, GuestLine
from storefront.cart.normalizer import Cart, normalize_cart
from storefront.cart.service import CartService
from storefront.cart.store import CartStore
from storefront.coupons import CouponGate, CouponService

__version__ = "0.1.0"

__all__ = [
    "Cart",
    "CartService",
    "CartStore",
    "CouponGate",
    "CouponService",
    "GuestCart",
    "GuestLine",
    "normalize_cart",
]
