"""Tests for catalog snapshots and the in-memory catalog."""

from shoppingcart.catalog.fake_adapter import InMemoryCatalog
from shoppingcart.catalog.port import (
    AttributeCombination,
    BackorderMode,
    BundleItem,
    CheckoutAttribute,
    Product,
    ProductType,
)


class TestEffectiveValue:
    def test_falls_back_to_stored_value(self):
        product = Product(id="p1", name="Mug", stock_quantity=4)
        assert product.effective_value("stock_quantity") == 4

    def test_combination_overrides_stock_and_price(self):
        product = Product(id="p1", name="Mug", price=10.0, stock_quantity=4)
        combination = AttributeCombination(id="c1", product_id="p1", stock_quantity=1, price=12.5)

        merged = product.merged_with(combination)

        assert merged.effective_value("stock_quantity") == 1
        assert merged.effective_value("price") == 12.5
        # Stored values stay untouched
        assert merged.stock_quantity == 4
        assert product.effective_value("stock_quantity") == 4

    def test_out_of_stock_orders_allow_backorders(self):
        product = Product(id="p1", name="Mug")
        combination = AttributeCombination(id="c1", product_id="p1", allow_out_of_stock_orders=True)

        merged = product.merged_with(combination)
        assert merged.effective_value("backorder_mode") == BackorderMode.ALLOW_QTY_BELOW_ZERO
        assert merged.backorder_mode == BackorderMode.NO_BACKORDERS

    def test_merging_nothing_returns_same_snapshot(self):
        product = Product(id="p1", name="Mug")
        assert product.merged_with(None) is product

    def test_merged_snapshot_still_equals_original(self):
        product = Product(id="p1", name="Mug")
        merged = product.merged_with(AttributeCombination(id="c1", product_id="p1", stock_quantity=9))
        assert merged == product


class TestParsing:
    def test_allowed_quantities_are_sorted_unique_positive(self):
        product = Product(id="p1", name="Mug", allowed_quantities=" 10, 5,abc, 0, 5, 1")
        assert product.parse_allowed_quantities() == [1, 5, 10]

    def test_no_allowed_quantities(self):
        assert Product(id="p1", name="Mug").parse_allowed_quantities() == []

    def test_required_product_ids_keep_order(self):
        product = Product(id="p1", name="Printer", required_product_ids="p3, p2, ,p3")
        assert product.parse_required_product_ids() == ["p3", "p2"]


class TestBundleEligibility:
    def test_simple_product_can_be_bundled(self):
        assert Product(id="p1", name="Mug").can_be_bundle_item

    def test_downloads_recurring_and_bundles_cannot(self):
        assert not Product(id="p1", name="E-book", is_download=True).can_be_bundle_item
        assert not Product(id="p2", name="Coffee club", is_recurring=True).can_be_bundle_item
        assert not Product(id="p3", name="Kit", product_type=ProductType.BUNDLED).can_be_bundle_item


class TestInMemoryCatalog:
    def test_unknown_products_are_left_out(self):
        catalog = InMemoryCatalog()
        catalog.add_product(Product(id="p1", name="Mug"))

        assert catalog.get_product("missing") is None
        assert catalog.get_product(None) is None
        assert list(catalog.get_products(["p1", "missing"])) == ["p1"]

    def test_bundle_items_resolve_products_in_display_order(self):
        catalog = InMemoryCatalog()
        catalog.add_product(Product(id="kit", name="Kit", product_type=ProductType.BUNDLED))
        catalog.add_product(Product(id="p1", name="Mug"))
        catalog.add_bundle_item(BundleItem(id="b2", bundle_product_id="kit", product_id="p1", display_order=2))
        catalog.add_bundle_item(BundleItem(id="b1", bundle_product_id="kit", product_id="gone", display_order=1))

        slots = catalog.get_bundle_items("kit")

        assert [slot.id for slot in slots] == ["b1", "b2"]
        assert slots[0].product is None
        assert slots[0].display_name == "gone"
        assert slots[1].product.name == "Mug"
        assert slots[1].bundle_product.id == "kit"

    def test_checkout_attributes_filtered_by_store(self):
        catalog = InMemoryCatalog()
        catalog.add_checkout_attribute(CheckoutAttribute(id="ca1", name="Gift wrap"))
        catalog.add_checkout_attribute(CheckoutAttribute(id="ca2", name="Note", store_ids=(2,)))

        assert [a.id for a in catalog.get_checkout_attributes(1)] == ["ca1"]
        assert {a.id for a in catalog.get_checkout_attributes(2)} == {"ca1", "ca2"}
