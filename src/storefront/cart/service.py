"""Cart service — the operation surface over the remote cart API.

Every operation returns a freshly normalized ``Cart``. Failures are unwrapped
for logging and the original exception is re-raised unchanged.

The only retries are the endpoint-variant cascades in ``remove_items`` and
``clear_cart``: older backends expose bulk delete and clear under different
routes. They fall through on an error response from the server, never on a
network fault.
"""

from collections.abc import Iterable
from typing import Any

from storefront.cart.guest import GuestCart, GuestLine
from storefront.cart.normalizer import Cart, normalize_cart, unwrap_envelope
from storefront.errors import InvalidQuantityError, TransportError, unwrap_error
from storefront.transport.port import TransportPort
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

BULK_DELETE_PATHS = ("/cart/items/bulk-delete", "/cart/items/batch-delete")


def ensure_positive_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantityError(quantity)
    return quantity


def to_merge_line(line: Any) -> dict:
    """Map a guest line (``book_id`` or bare ``id``) to the merge payload shape."""
    if isinstance(line, GuestLine):
        line = line.model_dump()
    return {
        "book_id": line.get("book_id") or line.get("id"),
        "quantity": line.get("quantity") or 1,
        "variation_id": line.get("variation_id") or None,
    }


def _is_endpoint_fallback(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and exc.status is not None


class CartService:
    def __init__(self, transport: TransportPort):
        self.transport = transport
        # Last snapshot received from the server
        self.cart = Cart()

    def _remember(self, data: Any) -> Cart:
        self.cart = normalize_cart(unwrap_envelope(data))
        return self.cart

    async def _send(self, operation: str, method: str, path: str, json: Any = None, **context) -> Cart:
        try:
            data = await self.transport.request(method, path, json=json)
        except Exception as exc:
            detail = unwrap_error(exc)
            logger.error(f"{operation} failed", operation=operation, **detail.as_log_context(), **context)
            raise
        return self._remember(data)

    # -------------------------------------------------------------------
    # Single-line operations
    # -------------------------------------------------------------------
    async def get_cart(self) -> Cart:
        return await self._send("get_cart", "GET", "/cart")

    async def add_item(self, book_id, quantity: int = 1, variation_id=None) -> Cart:
        payload = {"book_id": book_id, "quantity": ensure_positive_quantity(quantity)}
        if variation_id:
            payload["variation_id"] = variation_id
        return await self._send("add_item", "POST", "/cart/items", json=payload, book_id=book_id)

    async def update_item(self, line_id, quantity: int) -> Cart:
        """Set the absolute quantity of one line.

        Non-positive quantities are rejected locally; removal is the caller's
        decision (see ``CartStore.change_quantity``).
        """
        payload = {"quantity": ensure_positive_quantity(quantity)}
        return await self._send(
            "update_item", "PUT", f"/cart/items/{line_id}", json=payload, line_id=line_id, quantity=quantity
        )

    async def remove_item(self, line_id) -> Cart:
        return await self._send("remove_item", "DELETE", f"/cart/items/{line_id}", line_id=line_id)

    # -------------------------------------------------------------------
    # Bulk operations
    # -------------------------------------------------------------------
    async def remove_items(self, line_ids: Iterable) -> Cart:
        """Remove several lines: bulk-delete, then batch-delete, then one by one.

        An empty id list returns the last known snapshot without a request.
        """
        ids = list(line_ids or [])
        if not ids:
            return self.cart

        for path in BULK_DELETE_PATHS:
            try:
                data = await self.transport.post(path, json={"ids": ids})
            except Exception as exc:
                if not _is_endpoint_fallback(exc):
                    logger.error("remove_items failed", operation="remove_items", **unwrap_error(exc).as_log_context())
                    raise
                logger.warning("Bulk delete endpoint rejected, falling back", path=path, status=exc.status)
                continue
            return self._remember(data)

        for line_id in ids:
            await self.remove_item(line_id)
        return await self.get_cart()

    async def merge_cart(self, guest_lines: Iterable | GuestCart) -> Cart:
        """Merge an anonymous session's lines into the authenticated cart."""
        if isinstance(guest_lines, GuestCart):
            guest_lines = guest_lines.lines
        items = [to_merge_line(line) for line in guest_lines or []]
        return await self._send("merge_cart", "POST", "/cart/merge", json={"items": items}, line_count=len(items))

    async def clear_cart(self) -> Cart:
        try:
            data = await self.transport.post("/cart/clear")
        except Exception as exc:
            if not _is_endpoint_fallback(exc):
                logger.error("clear_cart failed", operation="clear_cart", **unwrap_error(exc).as_log_context())
                raise
            logger.warning("Clear endpoint rejected, falling back", path="/cart/clear", status=exc.status)
            return await self._send("clear_cart", "DELETE", "/cart")
        return self._remember(data)
