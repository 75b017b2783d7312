"""Guest cart — the anonymous, client-held cart used before login.

At login its lines are handed to ``CartService.merge_cart`` exactly once and
the guest cart is cleared.
"""

import json

from pydantic import BaseModel, Field


class GuestLine(BaseModel):
    book_id: int | str
    quantity: int = Field(default=1, ge=1)
    variation_id: int | str | None = None
    price: float = 0

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class GuestCart:
    """Local cart lines keyed by ``(book_id, variation_id)``."""

    def __init__(self, lines: list[GuestLine] | None = None):
        self._lines: dict[tuple, GuestLine] = {}
        for line in lines or []:
            self.add(line.book_id, line.quantity, line.variation_id, line.price)

    @staticmethod
    def _key(book_id, variation_id=None) -> tuple:
        return (str(book_id), None if variation_id is None else str(variation_id))

    @property
    def lines(self) -> list[GuestLine]:
        return list(self._lines.values())

    @property
    def total(self) -> float:
        return sum(line.line_total for line in self._lines.values())

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def __len__(self):
        return len(self._lines)

    def __bool__(self):
        return bool(self._lines)

    def add(self, book_id, quantity: int = 1, variation_id=None, price: float = 0) -> GuestLine:
        """Add a book, or increase the quantity of the matching line."""
        key = self._key(book_id, variation_id)
        existing = self._lines.get(key)
        if existing:
            line = existing.model_copy(update={"quantity": existing.quantity + quantity})
        else:
            line = GuestLine(book_id=book_id, quantity=quantity, variation_id=variation_id, price=price)
        self._lines[key] = line
        return line

    def update(self, book_id, quantity: int, variation_id=None) -> None:
        """Set the quantity of a line; zero or less removes it."""
        key = self._key(book_id, variation_id)
        if key not in self._lines:
            return
        if quantity <= 0:
            del self._lines[key]
            return
        self._lines[key] = self._lines[key].model_copy(update={"quantity": quantity})

    def remove(self, book_id, variation_id=None) -> None:
        self._lines.pop(self._key(book_id, variation_id), None)

    def clear(self) -> None:
        self._lines.clear()

    def to_merge_payload(self) -> list[dict]:
        return [
            {"book_id": line.book_id, "quantity": line.quantity, "variation_id": line.variation_id}
            for line in self._lines.values()
        ]

    def to_json(self) -> str:
        return json.dumps([line.model_dump() for line in self._lines.values()])

    @classmethod
    def from_json(cls, payload: str | None) -> "GuestCart":
        if not payload:
            return cls()
        return cls([GuestLine.model_validate(item) for item in json.loads(payload)])
