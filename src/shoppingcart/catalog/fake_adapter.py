"""In-memory catalog for development and testing.

Holds products, bundle slots, variant attributes, attribute combinations and
checkout attributes in dictionaries. Tests seed it directly with the ``add_*``
helpers and install it with ``set_catalog()``.
"""

from dataclasses import replace

from shoppingcart.catalog.port import (
    AttributeCombination,
    BundleItem,
    Catalog,
    CheckoutAttribute,
    Product,
    ProductVariantAttribute,
)


class InMemoryCatalog(Catalog):
    def __init__(self) -> None:
        self.products: dict[str, Product] = {}
        self.bundle_items: dict[str, BundleItem] = {}
        self.variant_attributes: dict[str, ProductVariantAttribute] = {}
        self.combinations: dict[str, AttributeCombination] = {}
        self.checkout_attributes: dict[str, CheckoutAttribute] = {}

    # -------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------
    def add_product(self, product: Product) -> Product:
        self.products[product.id] = product
        return product

    def add_bundle_item(self, bundle_item: BundleItem) -> BundleItem:
        self.bundle_items[bundle_item.id] = bundle_item
        return bundle_item

    def add_variant_attribute(self, attribute: ProductVariantAttribute) -> ProductVariantAttribute:
        self.variant_attributes[attribute.id] = attribute
        return attribute

    def add_attribute_combination(self, combination: AttributeCombination) -> AttributeCombination:
        self.combinations[combination.id] = combination
        return combination

    def add_checkout_attribute(self, attribute: CheckoutAttribute) -> CheckoutAttribute:
        self.checkout_attributes[attribute.id] = attribute
        return attribute

    # -------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------
    def get_product(self, product_id):
        if product_id is None:
            return None
        return self.products.get(str(product_id))

    def get_products(self, product_ids):
        found = {}
        for product_id in product_ids:
            product = self.get_product(product_id)
            if product is not None:
                found[product.id] = product
        return found

    def _resolve(self, bundle_item: BundleItem) -> BundleItem:
        return replace(
            bundle_item,
            product=self.get_product(bundle_item.product_id),
            bundle_product=self.get_product(bundle_item.bundle_product_id),
        )

    def get_bundle_items(self, bundle_product_id):
        slots = [bi for bi in self.bundle_items.values() if bi.bundle_product_id == str(bundle_product_id)]
        slots.sort(key=lambda bi: (bi.display_order, bi.id))
        return [self._resolve(bi) for bi in slots]

    def get_bundle_item(self, bundle_item_id):
        bundle_item = self.bundle_items.get(str(bundle_item_id)) if bundle_item_id else None
        return self._resolve(bundle_item) if bundle_item else None

    def get_variant_attributes(self, product_id):
        return [a for a in self.variant_attributes.values() if a.product_id == str(product_id)]

    def get_variant_attribute(self, attribute_id):
        return self.variant_attributes.get(str(attribute_id))

    def get_attribute_combinations(self, product_id):
        return [c for c in self.combinations.values() if c.product_id == str(product_id)]

    def get_checkout_attributes(self, store_id):
        return [a for a in self.checkout_attributes.values() if not a.store_ids or store_id in a.store_ids]

    def get_checkout_attribute(self, attribute_id):
        return self.checkout_attributes.get(str(attribute_id))
