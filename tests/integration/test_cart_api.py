"""End-to-end cart and coupon flows over HTTP."""

import pytest

from storefront.cart.guest import GuestCart
from storefront.cart.service import BULK_DELETE_PATHS
from storefront.cart.store import CartStore
from storefront.coupons.coupon import RejectionCode
from storefront.coupons.gate import CouponGate, GateState
from storefront.coupons.messages import CouponMessages
from storefront.errors import CouponRejectedError, InvalidQuantityError, TransportError


@pytest.fixture()
def store(http_cart_service):
    return CartStore(http_cart_service)


class TestCartOverHttp:
    async def test_totals_follow_edits(self, store):
        await store.load()
        await store.add(1, 2)
        assert store.total == 200

        line = store.cart.items[0]
        assert line.client_key == "BK-0001"

        await store.change_quantity(line.id, 5)
        assert store.total == 500

        await store.remove(line.id)
        assert store.total == 0
        assert store.cart.is_empty

    async def test_bare_cart_responses(self, store, backend):
        backend.configure(envelope=False)
        await store.add(2, 1)
        assert store.total == 250

    async def test_remove_selected_falls_back_to_batch(self, store, backend):
        backend.configure(disabled=[("POST", BULK_DELETE_PATHS[0])])
        await store.add(1)
        await store.add(2)
        await store.remove_selected()

        assert store.cart.is_empty
        assert len(backend.calls_to("POST", BULK_DELETE_PATHS[1])) == 1
        assert not any(call[0] == "DELETE" for call in backend.calls)

    async def test_clear_falls_back_to_delete(self, store, backend):
        backend.configure(disabled=[("POST", "/cart/clear")])
        await store.add(1, 3)
        await store.clear()
        assert store.cart.is_empty
        assert len(backend.calls_to("DELETE", "/cart")) == 1

    async def test_merge_guest_cart(self, store):
        guest = GuestCart()
        guest.add(1, 1, price=100)
        guest.add(3, 2, price=80)
        await store.merge_guest(guest)
        assert store.total == 260
        assert {line.client_key for line in store.cart.items} == {"BK-0001", f"server_{store.cart.items[1].id}"}

    async def test_invalid_quantity_never_reaches_server(self, http_cart_service, backend):
        with pytest.raises(InvalidQuantityError):
            await http_cart_service.add_item(1, 0)
        assert backend.calls == []

    async def test_server_error_propagates(self, http_cart_service, backend):
        backend.configure(failures={("GET", "/cart"): (500, "Server Error")})
        with pytest.raises(TransportError) as exc_info:
            await http_cart_service.get_cart()
        assert exc_info.value.status == 500


class TestCouponsOverHttp:
    async def test_validate(self, http_coupon_service):
        applied = await http_coupon_service.validate("SAVE10", 200)
        assert applied.discount_amount == 20
        assert applied.final_amount == 180

    async def test_minimum_amount_rejection(self, http_coupon_service):
        with pytest.raises(CouponRejectedError) as exc_info:
            await http_coupon_service.validate("BIGSPEND", 5000)
        assert exc_info.value.rejection.code == RejectionCode.MIN_AMOUNT
        assert exc_info.value.rejection.minimum == 9999

    async def test_gate_with_selected_total(self, store, http_coupon_service):
        await store.add(1, 1)
        await store.add(2, 1)
        store.toggle(store.cart.items[1].id)

        gate = CouponGate(http_coupon_service, order_amount=store.selected_total, messages=CouponMessages("en"))
        await gate.submit_code("FLAT20")
        assert gate.state == GateState.IDLE_WITH_ERROR
        assert "150" in gate.error

        store.toggle(store.cart.items[1].id)
        await gate.update_order_amount(store.selected_total)
        await gate.submit_code("FLAT20")
        assert gate.state == GateState.APPLIED
        assert gate.final_amount == 330
