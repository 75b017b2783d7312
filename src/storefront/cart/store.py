"""Cart store — the single owner of the local cart snapshot.

Consumers receive a ``CartStore`` explicitly instead of reaching for shared
module state. Every mutation goes through the ``CartService``; the resolved
snapshot fully replaces the previous one and the selection follows it.
Responses overtaken by a newer request are discarded.
"""

from storefront.cart.guest import GuestCart
from storefront.cart.normalizer import Cart
from storefront.cart.selection import CartSelection, CheckoutSummary, PricingRules
from storefront.cart.sequencing import RequestSequencer, Ticket
from storefront.cart.service import CartService, ensure_positive_quantity
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartStore:
    def __init__(self, service: CartService, pricing: PricingRules | None = None):
        self.service = service
        self.pricing = pricing or PricingRules()
        self.cart = Cart()
        self.selection = CartSelection()
        self.sequencer = RequestSequencer()
        self.loaded = False

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def total(self) -> float:
        return self.cart.total

    @property
    def selected_total(self) -> float:
        return self.selection.selected_total(self.cart)

    @property
    def selected_lines(self):
        return self.selection.selected_lines(self.cart)

    def checkout_summary(self) -> CheckoutSummary:
        return self.selection.checkout_summary(self.cart, self.pricing)

    def toggle(self, line_id) -> bool:
        return self.selection.toggle(line_id)

    def toggle_all(self) -> None:
        self.selection.toggle_all(self.cart)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    async def load(self) -> Cart:
        ticket = self.sequencer.issue()
        cart = await self.service.get_cart()
        if self._apply(ticket, cart):
            self.selection.reset(cart)
            self.loaded = True
        return self.cart

    async def add(self, book_id, quantity: int = 1, variation_id=None) -> Cart:
        existing = next(
            (
                line
                for line in self.cart.items
                if str(line.book_id) == str(book_id) and line.variation_id == variation_id
            ),
            None,
        )
        ticket = self.sequencer.issue([existing.id] if existing else [f"book:{book_id}:{variation_id}"])
        cart = await self.service.add_item(book_id, quantity, variation_id)
        self._apply(ticket, cart)
        return self.cart

    async def change_quantity(self, line_id, quantity: int) -> Cart:
        """Set a line's quantity. Zero or less removes the line.

        Anything that is not an integer raises ``InvalidQuantityError``.
        """
        if isinstance(quantity, int) and not isinstance(quantity, bool) and quantity <= 0:
            return await self.remove(line_id)
        ensure_positive_quantity(quantity)
        ticket = self.sequencer.issue([line_id])
        cart = await self.service.update_item(line_id, quantity)
        self._apply(ticket, cart)
        return self.cart

    async def remove(self, line_id) -> Cart:
        ticket = self.sequencer.issue([line_id])
        cart = await self.service.remove_item(line_id)
        self._apply(ticket, cart)
        return self.cart

    async def remove_selected(self) -> Cart:
        ids = sorted(self.selection.ids, key=str)
        if not ids:
            return self.cart
        ticket = self.sequencer.issue(ids)
        cart = await self.service.remove_items(ids)
        self._apply(ticket, cart)
        return self.cart

    async def clear(self) -> Cart:
        ticket = self.sequencer.issue()
        cart = await self.service.clear_cart()
        self._apply(ticket, cart)
        return self.cart

    async def merge_guest(self, guest_cart: GuestCart) -> Cart:
        """Fold the anonymous cart into the server cart after login."""
        if not guest_cart:
            return await self.load()
        ticket = self.sequencer.issue()
        cart = await self.service.merge_cart(guest_cart)
        guest_cart.clear()
        if self._apply(ticket, cart):
            self.selection.reset(cart)
            self.loaded = True
        return self.cart

    def _apply(self, ticket: Ticket, cart: Cart) -> bool:
        if not self.sequencer.accept(ticket):
            logger.debug("Discarding stale cart response", ticket=ticket.number, last_applied=self.sequencer.last_applied)
            return False
        self.cart = cart
        self.selection.sync(cart)
        return True
