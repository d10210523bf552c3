"""Catalog-backed attribute materializers for development and testing."""

from shoppingcart.attributes.port import AttributeMaterializer, CheckoutAttributeMaterializer
from shoppingcart.catalog import get_catalog
from shoppingcart.shared.attribute_selection import AttributeSelection


class InMemoryAttributeMaterializer(AttributeMaterializer):
    """Resolves selections against the active catalog.

    ``calls`` records every prefetch so tests can assert on read paths.
    """

    def __init__(self, catalog=None) -> None:
        self._catalog = catalog
        self._prefetched: dict[str, object] = {}
        self.calls: list[dict] = []

    @property
    def catalog(self):
        return self._catalog or get_catalog()

    def _attribute(self, attribute_id):
        if attribute_id in self._prefetched:
            return self._prefetched[attribute_id]
        return self.catalog.get_variant_attribute(attribute_id)

    def create_selection_from_query(self, query, attributes, product_id, bundle_item_id=None):
        selection = AttributeSelection()
        warnings = []

        for attribute in attributes:
            posted = [
                item.value
                for item in query.variants
                if item.product_id == product_id
                and item.attribute_id == attribute.id
                and (item.bundle_item_id or None) == (bundle_item_id or None)
            ]
            if not posted:
                continue

            if attribute.control_type.is_list_type:
                known = {v.id for v in attribute.values}
                for value in posted:
                    if value in known:
                        selection.add_attribute_value(attribute.id, value)
                    else:
                        warnings.append(f"Unknown value {value!r} for attribute {attribute.display_name!r}")
            else:
                text = " ".join(v.strip() for v in posted if v and v.strip())
                if text:
                    selection.add_attribute_value(attribute.id, text)

        return selection, warnings

    def materialize_attributes(self, selection):
        attributes = []
        for attribute_id in selection.attribute_ids:
            attribute = self._attribute(attribute_id)
            if attribute is not None:
                attributes.append(attribute)
        return attributes

    def materialize_values(self, selection):
        values = []
        for attribute in self.materialize_attributes(selection):
            if not attribute.control_type.is_list_type:
                continue
            selected = set(selection.get_attribute_values(attribute.id) or [])
            values.extend(v for v in attribute.values if v.id in selected)
        return values

    def find_attribute_combination(self, product_id, selection):
        if selection is None or not selection.has_attributes:
            return None
        for combination in self.catalog.get_attribute_combinations(product_id):
            if combination.selection == selection:
                return combination
        return None

    def merge_with_combination(self, product, selection):
        return product.merged_with(self.find_attribute_combination(product.id, selection))

    def prefetch(self, selections):
        attribute_ids = set()
        for selection in selections:
            attribute_ids.update(selection.attribute_ids)

        self.calls.append({"method": "prefetch", "attribute_ids": sorted(attribute_ids)})
        for attribute_id in attribute_ids:
            if attribute_id not in self._prefetched:
                self._prefetched[attribute_id] = self.catalog.get_variant_attribute(attribute_id)


class InMemoryCheckoutAttributeMaterializer(CheckoutAttributeMaterializer):
    def __init__(self, catalog=None) -> None:
        self._catalog = catalog

    @property
    def catalog(self):
        return self._catalog or get_catalog()

    def materialize(self, selection):
        attributes = []
        for attribute_id in selection.attribute_ids:
            attribute = self.catalog.get_checkout_attribute(attribute_id)
            if attribute is not None:
                attributes.append(attribute)
        return attributes
