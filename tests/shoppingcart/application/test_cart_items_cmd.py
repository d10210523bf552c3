"""Application tests for the cart item commands."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from shoppingcart.cart.items import AddProductToCart, MigrateCart, RemoveCartItem, UpdateCartItem
from shoppingcart.cart.line_item import CartLineItem
from shoppingcart.catalog.port import BundleItem, Product, ProductType


@pytest.fixture(autouse=True)
def collaborators(settings, catalog, materializer, permissions):
    catalog.add_product(Product(id="p1", name="Mug"))
    catalog.add_product(Product(id="kit", name="Kit", product_type=ProductType.BUNDLED))
    catalog.add_bundle_item(BundleItem(id="b1", bundle_product_id="kit", product_id="p1"))
    return catalog


def _lines(customer_id="cust-001"):
    return current_domain.repository_for(CartLineItem).items_for(customer_id)


def _add(**overrides):
    defaults = {"customer_id": "cust-001", "product_id": "p1", "quantity": 1, "store_id": 1}
    defaults.update(overrides)
    return current_domain.process(AddProductToCart(**defaults), asynchronous=False)


class TestAddProductToCartCommand:
    def test_add_persists_line(self):
        result = _add(quantity=2)

        assert result.accepted
        lines = _lines()
        assert len(lines) == 1
        assert lines[0].quantity == 2
        assert lines[0].id == result.item.id

    def test_second_add_merges(self):
        _add(quantity=2)
        result = _add(quantity=3)

        assert result.merged
        assert [line.quantity for line in _lines()] == [5]

    def test_bundle_is_persisted_with_children(self):
        result = _add(product_id="kit")

        assert result.accepted
        assert sorted(line.product_id for line in _lines()) == ["kit", "p1"]

    def test_unknown_product_is_rejected(self):
        result = _add(product_id="missing")

        assert result.violations == ["Product with ID missing could not be found."]
        assert _lines() == []

    def test_bots_are_rejected(self):
        result = _add(is_bot=True)

        assert result.violations == ["Bots are not permitted to use the shopping cart."]
        assert _lines() == []

    def test_wishlist(self):
        _add(cart_type="Wishlist")
        assert [line.cart_type for line in _lines()] == ["Wishlist"]


class TestUpdateCartItemCommand:
    def test_update_quantity_persists(self):
        item_id = str(_add().item.id)

        violations = current_domain.process(
            UpdateCartItem(customer_id="cust-001", item_id=item_id, quantity=4),
            asynchronous=False,
        )

        assert violations == []
        assert _lines()[0].quantity == 4

    def test_zero_quantity_removes(self):
        item_id = str(_add().item.id)

        current_domain.process(UpdateCartItem(customer_id="cust-001", item_id=item_id, quantity=0), asynchronous=False)

        assert _lines() == []


class TestRemoveCartItemCommand:
    def test_remove_bundle_with_children(self):
        item_id = str(_add(product_id="kit").item.id)

        removed = current_domain.process(RemoveCartItem(customer_id="cust-001", item_id=item_id), asynchronous=False)

        assert removed == 2
        assert _lines() == []

    def test_remove_foreign_item_fails(self):
        item_id = str(_add().item.id)

        with pytest.raises(ValueError):
            current_domain.process(RemoveCartItem(customer_id="cust-002", item_id=item_id), asynchronous=False)
        assert len(_lines()) == 1

    def test_remove_missing_item_fails(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(RemoveCartItem(customer_id="cust-001", item_id="missing"), asynchronous=False)


class TestMigrateCartCommand:
    def test_migrates_guest_cart(self):
        _add(customer_id="guest-1", quantity=2)

        migrated = current_domain.process(
            MigrateCart(from_customer_id="guest-1", to_customer_id="cust-001"),
            asynchronous=False,
        )

        assert migrated is True
        assert _lines("guest-1") == []
        assert [line.quantity for line in _lines()] == [2]

    def test_migrating_into_a_bot_is_a_noop(self):
        _add(customer_id="guest-1")

        migrated = current_domain.process(
            MigrateCart(from_customer_id="guest-1", to_customer_id="crawler", to_customer_is_bot=True),
            asynchronous=False,
        )

        assert migrated is False
        assert len(_lines("guest-1")) == 1
