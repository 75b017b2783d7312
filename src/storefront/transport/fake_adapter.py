"""Fake storefront backend — deterministic in-memory cart API.

Implements the cart and coupon REST surface the client depends on, for
development and testing. Endpoints can be switched off to exercise the
client's fallback cascades, and individual calls can be forced to fail.
"""

import copy
import re
from typing import Any

from storefront.errors import TransportError, extract_message
from storefront.transport.port import TransportPort

_LINE_PATH = re.compile(r"^/cart/items/(?P<line_id>[^/]+)$")


class FakeCartBackend(TransportPort):
    """In-memory cart backend that speaks the storefront API."""

    def __init__(self, books: dict | None = None, coupons: dict | None = None, envelope: bool = True):
        # book_id -> {"price": ..., "sku": ..., "title": ...}
        self.books = dict(books or {})
        # upper-cased code -> coupon payload
        self.coupons = {code.upper(): dict(c, code=code.upper()) for code, c in (coupons or {}).items()}
        self.envelope = envelope
        self.disabled: set[tuple[str, str]] = set()
        self.failures: dict[tuple[str, str], tuple[int, str]] = {}
        self.calls: list[tuple[str, str, Any]] = []
        self.lines: dict[int, dict] = {}
        self._next_line_id = 1

    # -------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------
    def configure(self, envelope: bool | None = None, disabled=(), failures: dict | None = None):
        """Configure the fake backend behavior for testing."""
        if envelope is not None:
            self.envelope = envelope
        self.disabled = {(m.upper(), p) for m, p in disabled}
        self.failures = {(m.upper(), p): v for (m, p), v in (failures or {}).items()}

    def add_book(self, book_id, price, sku=None, title=None):
        self.books[book_id] = {"price": price, "sku": sku, "title": title or f"Book {book_id}"}

    def add_coupon(self, code, type="percentage", value=10, minimum_amount=None, maximum_discount=None, **extra):
        self.coupons[code.upper()] = {
            "id": len(self.coupons) + 1,
            "code": code.upper(),
            "type": type,
            "value": value,
            "minimum_amount": minimum_amount,
            "maximum_discount": maximum_discount,
            "is_active": True,
            **extra,
        }

    def reset(self):
        self.lines.clear()
        self.calls.clear()
        self._next_line_id = 1

    def calls_to(self, method: str, path: str) -> list:
        return [c for c in self.calls if c[0] == method.upper() and c[1] == path]

    # -------------------------------------------------------------------
    # TransportPort
    # -------------------------------------------------------------------
    async def request(self, method: str, path: str, json: Any = None) -> Any:
        status, body = self.handle(method, path, json)
        if status >= 400:
            raise TransportError(
                extract_message(body) or f"HTTP {status}", status=status, data=body, method=method.upper(), path=path
            )
        return body

    def handle(self, method: str, path: str, json: Any = None) -> tuple[int, Any]:
        """Dispatch one request and return ``(status, body)``."""
        method = method.upper()
        path = "/" + path.split("?", 1)[0].strip("/")
        self.calls.append((method, path, copy.deepcopy(json)))

        if (method, path) in self.disabled:
            return 404, {"message": f"The route {path.lstrip('/')} could not be found."}
        if (method, path) in self.failures:
            status, message = self.failures[(method, path)]
            return status, {"message": message}

        body = json or {}
        if path == "/cart":
            if method == "GET":
                return self._cart_response()
            if method == "DELETE":
                return self._clear()
        elif path == "/cart/items" and method == "POST":
            return self._add(body)
        elif path in ("/cart/items/bulk-delete", "/cart/items/batch-delete") and method == "POST":
            return self._bulk_delete(body)
        elif path == "/cart/merge" and method == "POST":
            return self._merge(body)
        elif path == "/cart/clear" and method == "POST":
            return self._clear()
        elif path == "/coupons/validate" and method == "POST":
            return self._validate_coupon(body)
        elif path == "/coupons/active" and method == "GET":
            active = [c for c in self.coupons.values() if c.get("is_active", True)]
            return 200, {"success": True, "data": copy.deepcopy(active)}
        elif match := _LINE_PATH.match(path):
            line_id = match.group("line_id")
            if method == "PUT":
                return self._update(line_id, body)
            if method == "DELETE":
                return self._remove(line_id)

        return 404, {"message": f"The route {path.lstrip('/')} could not be found."}

    # -------------------------------------------------------------------
    # Cart handlers
    # -------------------------------------------------------------------
    def _serialize(self) -> dict:
        items = [dict(line) for line in self.lines.values()]
        return {
            "items": items,
            "total": sum(line["price"] * line["quantity"] for line in items),
            "count": sum(line["quantity"] for line in items),
        }

    def _cart_response(self, status: int = 200, message: str | None = None) -> tuple[int, dict]:
        cart = self._serialize()
        if not self.envelope:
            return status, cart
        body = {"cart": cart}
        if message:
            body["message"] = message
        return status, body

    def _find_line(self, line_id) -> dict | None:
        try:
            return self.lines.get(int(line_id))
        except (TypeError, ValueError):
            return None

    def _put_line(self, book_id, quantity, variation_id=None) -> None:
        existing = next(
            (
                line
                for line in self.lines.values()
                if str(line["book_id"]) == str(book_id) and line["variation_id"] == variation_id
            ),
            None,
        )
        if existing:
            existing["quantity"] += quantity
            return

        book = self.books[book_id]
        sku = book.get("sku")
        line_id = self._next_line_id
        self._next_line_id += 1
        self.lines[line_id] = {
            "id": line_id,
            "book_id": book_id,
            "variation_id": variation_id,
            "title": book.get("title"),
            "quantity": quantity,
            "price": book["price"],
            "sku": sku if variation_id is None else None,
            "variant_sku": f"{sku}-{variation_id}" if sku and variation_id is not None else None,
        }

    @staticmethod
    def _invalid_quantity(quantity) -> bool:
        return not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1

    def _add(self, body: dict) -> tuple[int, dict]:
        book_id = body.get("book_id")
        quantity = body.get("quantity", 1)
        if book_id not in self.books:
            return 404, {"message": "Book not found"}
        if self._invalid_quantity(quantity):
            return 422, {"message": "The quantity field must be at least 1."}
        self._put_line(book_id, quantity, body.get("variation_id"))
        return self._cart_response(message="Added to cart")

    def _update(self, line_id, body: dict) -> tuple[int, dict]:
        line = self._find_line(line_id)
        if line is None:
            return 404, {"message": "Cart item not found"}
        quantity = body.get("quantity")
        if self._invalid_quantity(quantity):
            return 422, {"message": "The quantity field must be at least 1."}
        line["quantity"] = quantity
        return self._cart_response(message="Quantity updated")

    def _remove(self, line_id) -> tuple[int, dict]:
        line = self._find_line(line_id)
        if line is None:
            return 404, {"message": "Cart item not found"}
        del self.lines[line["id"]]
        return self._cart_response(message="Item removed")

    def _bulk_delete(self, body: dict) -> tuple[int, dict]:
        ids = body.get("ids")
        if not isinstance(ids, list):
            return 422, {"message": "The ids field is required."}
        for line_id in ids:
            line = self._find_line(line_id)
            if line is not None:
                del self.lines[line["id"]]
        return self._cart_response()

    def _merge(self, body: dict) -> tuple[int, dict]:
        items = body.get("items")
        if not isinstance(items, list):
            return 422, {"message": "The items field is required."}
        for item in items:
            book_id = item.get("book_id")
            quantity = item.get("quantity", 1)
            if book_id not in self.books or self._invalid_quantity(quantity):
                continue
            self._put_line(book_id, quantity, item.get("variation_id"))
        return self._cart_response(message="Cart merged")

    def _clear(self) -> tuple[int, dict]:
        self.lines.clear()
        return self._cart_response(message="Cart cleared")

    # -------------------------------------------------------------------
    # Coupon handlers
    # -------------------------------------------------------------------
    def _validate_coupon(self, body: dict) -> tuple[int, dict]:
        code = str(body.get("code") or "").upper()
        order_amount = body.get("order_amount")
        if not code or not isinstance(order_amount, (int, float)) or order_amount < 0:
            return 422, {"success": False, "code": "INVALID", "message": "Invalid data"}

        coupon = self.coupons.get(code)
        if coupon is None:
            return 404, {"success": False, "code": "NOT_FOUND", "message": "Coupon does not exist"}
        if not coupon.get("is_active", True):
            return 422, {"success": False, "code": "INVALID", "message": "Coupon has been disabled"}

        minimum = coupon.get("minimum_amount")
        if minimum and order_amount < minimum:
            return 422, {
                "success": False,
                "code": "MIN_AMOUNT",
                "minimum": minimum,
                "message": f"Order must be at least {minimum} to use this coupon",
            }

        if coupon["type"] == "percentage":
            discount = order_amount * coupon["value"] / 100
            if coupon.get("maximum_discount"):
                discount = min(discount, coupon["maximum_discount"])
        else:
            discount = min(coupon["value"], order_amount)

        if discount <= 0:
            return 422, {"success": False, "code": "INVALID", "message": "Order is not eligible for this coupon"}

        return 200, {
            "success": True,
            "message": "Coupon is valid",
            "data": {
                "coupon": copy.deepcopy(coupon),
                "discount_amount": round(discount, 2),
                "final_amount": round(order_amount - discount, 2),
            },
        }
