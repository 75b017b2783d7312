"""Selection of cart lines for checkout, and the totals derived from it.

Pure derived state over cart snapshots: no network calls. Membership is by
server line id, so quantity changes never alter it. Ids are matched by their
string form, so ``"1"`` and ``1`` name the same line.
"""

from dataclasses import dataclass

from storefront.cart.lines import CartLine
from storefront.cart.normalizer import Cart

_MISSING = object()


@dataclass(frozen=True)
class PricingRules:
    """Display-side tax and shipping rules applied to the selected subtotal."""

    tax_rate: float = 0.08
    free_shipping_threshold: float = 1_200_000
    shipping_fee: float = 120_000

    def shipping_for(self, subtotal: float) -> float:
        if subtotal <= 0 or subtotal > self.free_shipping_threshold:
            return 0
        return self.shipping_fee


@dataclass(frozen=True)
class CheckoutSummary:
    selected_count: int
    subtotal: float
    tax: float
    shipping: float

    @property
    def total(self) -> float:
        return self.subtotal + self.tax + self.shipping


class CartSelection:
    def __init__(self):
        self._selected: set = set()
        # str(id) -> id as the server sent it
        self._known: dict = {}

    def __contains__(self, line_id):
        return self._known.get(str(line_id), _MISSING) in self._selected

    def __len__(self):
        return len(self._selected)

    @property
    def ids(self) -> frozenset:
        return frozenset(self._selected)

    # -------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------
    def reset(self, cart: Cart) -> None:
        """Select every line (the state right after a cart load)."""
        self._selected = set(cart.line_ids)
        self._known = {str(i): i for i in cart.line_ids}

    def sync(self, cart: Cart) -> None:
        """Follow a new snapshot: drop vanished ids, select newly added lines."""
        current = cart.line_ids
        selected = {str(i) for i in self._selected}
        self._selected = {i for i in current if str(i) in selected or str(i) not in self._known}
        self._known = {str(i): i for i in current}

    def toggle(self, line_id) -> bool:
        """Flip one line; returns whether it is now selected."""
        if str(line_id) not in self._known:
            raise KeyError(line_id)
        line_id = self._known[str(line_id)]
        if line_id in self._selected:
            self._selected.discard(line_id)
            return False
        self._selected.add(line_id)
        return True

    def select_all(self, cart: Cart) -> None:
        self._selected = set(cart.line_ids)

    def deselect_all(self) -> None:
        self._selected = set()

    def all_selected(self, cart: Cart) -> bool:
        return not cart.is_empty and cart.line_ids <= self._selected

    def toggle_all(self, cart: Cart) -> None:
        if self.all_selected(cart):
            self.deselect_all()
        else:
            self.select_all(cart)

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def selected_lines(self, cart: Cart) -> list[CartLine]:
        return [line for line in cart.items if line.id in self._selected]

    def selected_total(self, cart: Cart) -> float:
        return sum(line.unit_price * line.quantity for line in self.selected_lines(cart))

    def selected_count(self, cart: Cart) -> int:
        return len(self.selected_lines(cart))

    def checkout_summary(self, cart: Cart, pricing: PricingRules | None = None) -> CheckoutSummary:
        pricing = pricing or PricingRules()
        subtotal = self.selected_total(cart)
        return CheckoutSummary(
            selected_count=self.selected_count(cart),
            subtotal=subtotal,
            tax=round(subtotal * pricing.tax_rate),
            shipping=pricing.shipping_for(subtotal),
        )
