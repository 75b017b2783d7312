"""Cart snapshot model and normalization of raw server payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from storefront.cart.lines import CartLine, server_key, with_client_key


class Cart(BaseModel):
    """A normalized cart snapshot. Always replaced whole, never patched."""

    model_config = ConfigDict(frozen=True)

    items: list[CartLine] = Field(default_factory=list)
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def total(self) -> float:
        return sum(line.line_total for line in self.items)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def line_ids(self) -> set:
        return {line.id for line in self.items}

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, line_id) -> CartLine | None:
        return next((line for line in self.items if str(line.id) == str(line_id)), None)

    def dump(self) -> dict:
        """Flatten back to the server-like shape (``items`` plus top-level fields)."""
        return {**self.extra, "items": [line.model_dump() for line in self.items]}


def unwrap_envelope(data: Any) -> dict:
    """Accept ``{"cart": {...}}`` or a bare cart and return the cart mapping."""
    if not isinstance(data, dict):
        return {}
    cart = data.get("cart")
    return cart if isinstance(cart, dict) else data


def normalize_cart(raw: Any) -> Cart:
    """Map a raw server cart into a ``Cart`` with resolved client keys.

    A missing, null or non-list ``items`` field yields an empty cart. Keys stay
    unique within the snapshot: a line whose SKU is already taken falls back to
    its server key.
    """
    raw = raw if isinstance(raw, dict) else {}
    items = raw.get("items")
    if not isinstance(items, list):
        items = []

    lines = []
    seen = set()
    for item in items:
        if not isinstance(item, dict):
            continue
        keyed = with_client_key(item)
        if keyed["client_key"] in seen:
            keyed["client_key"] = server_key(item.get("id"))
        seen.add(keyed["client_key"])
        lines.append(CartLine.model_validate(keyed))

    extra = {k: v for k, v in raw.items() if k != "items"}
    return Cart(items=lines, extra=extra)
