"""Tests for cart line client keys."""

from storefront.cart.lines import CartLine, resolve_client_key, with_client_key


class TestResolveClientKey:
    def test_sku_takes_precedence(self):
        assert resolve_client_key({"id": 7, "sku": "BK-1", "variant_sku": "BK-1-RED"}) == "BK-1"

    def test_variant_sku_when_no_sku(self):
        assert resolve_client_key({"id": 7, "sku": None, "variant_sku": "BK-1-RED"}) == "BK-1-RED"

    def test_falls_back_to_server_id(self):
        assert resolve_client_key({"id": 7}) == "server_7"

    def test_empty_sku_counts_as_absent(self):
        assert resolve_client_key({"id": 7, "sku": "", "variant_sku": ""}) == "server_7"

    def test_deterministic(self):
        item = {"id": 42, "variant_sku": "V-9"}
        assert resolve_client_key(item) == resolve_client_key(dict(item))

    def test_accepts_objects(self):
        line = CartLine(id=3, quantity=1, variant_sku="V-3")
        assert resolve_client_key(line) == "V-3"


class TestWithClientKey:
    def test_adds_key_without_mutating_input(self):
        item = {"id": 5, "quantity": 2}
        keyed = with_client_key(item)
        assert keyed["client_key"] == "server_5"
        assert "client_key" not in item

    def test_preserves_other_fields(self):
        keyed = with_client_key({"id": 5, "quantity": 2, "title": "Tắt Đèn"})
        assert keyed["title"] == "Tắt Đèn"
        assert keyed["quantity"] == 2


class TestCartLine:
    def test_price_alias(self):
        line = CartLine.model_validate({"id": 1, "quantity": 3, "price": "100.00"})
        assert line.unit_price == 100
        assert line.line_total == 300

    def test_unknown_fields_are_kept(self):
        line = CartLine.model_validate({"id": 1, "quantity": 1, "title": "Số Đỏ"})
        assert line.model_dump()["title"] == "Số Đỏ"
