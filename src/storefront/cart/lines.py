"""Cart lines and their client-side identity.

A line's ``client_key`` is derived locally for list identity only and is
never sent back to the server. Precedence: ``sku``, then ``variant_sku``,
then ``server_<id>``.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def server_key(line_id: Any) -> str:
    return f"server_{line_id}"


def resolve_client_key(item: Any) -> str:
    """Return the stable client key for a raw server line (mapping or object)."""
    if isinstance(item, dict):
        sku, variant_sku, line_id = item.get("sku"), item.get("variant_sku"), item.get("id")
    else:
        sku = getattr(item, "sku", None)
        variant_sku = getattr(item, "variant_sku", None)
        line_id = getattr(item, "id", None)
    return sku or variant_sku or server_key(line_id)


def with_client_key(item: dict) -> dict:
    """Return a copy of ``item`` with ``client_key`` resolved."""
    return {**item, "client_key": resolve_client_key(item)}


class CartLine(BaseModel):
    """One row of a server cart snapshot."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    id: int | str
    book_id: int | str | None = None
    variation_id: int | str | None = None
    quantity: int = Field(ge=0)
    unit_price: float = Field(default=0, validation_alias=AliasChoices("unit_price", "price"))
    sku: str | None = None
    variant_sku: str | None = None
    client_key: str = ""

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity
