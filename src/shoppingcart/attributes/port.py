"""Attribute materializer ports.

Resolve raw attribute selections into the catalog's attribute and value
objects, find attribute combinations, and layer combination data over a
product snapshot. A second, narrower port does the same for checkout
attributes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shoppingcart.catalog.port import (
    AttributeCombination,
    AttributeValue,
    CheckoutAttribute,
    Product,
    ProductVariantAttribute,
)
from shoppingcart.shared.attribute_selection import (
    AttributeSelection,
    CheckoutAttributeSelection,
    GiftCardInfo,
)


@dataclass(frozen=True)
class VariantQueryItem:
    """One posted attribute value, e.g. from a product detail form."""

    product_id: str
    attribute_id: str
    value: str
    bundle_item_id: str | None = None


@dataclass(frozen=True)
class GiftCardQueryItem:
    product_id: str
    field: str  # one of the GiftCardInfo field names
    value: str
    bundle_item_id: str | None = None


@dataclass(frozen=True)
class VariantQuery:
    """Raw variant selection as posted by the storefront, before materialization."""

    variants: tuple[VariantQueryItem, ...] = ()
    gift_cards: tuple[GiftCardQueryItem, ...] = ()

    def gift_card_info(self, product_id: str, bundle_item_id: str | None = None) -> GiftCardInfo | None:
        fields = {
            item.field: item.value
            for item in self.gift_cards
            if item.product_id == product_id and (item.bundle_item_id or None) == (bundle_item_id or None)
        }
        return GiftCardInfo.from_dict(fields)


class AttributeMaterializer(ABC):
    """Product attribute materializer interface."""

    @abstractmethod
    def create_selection_from_query(
        self,
        query: VariantQuery,
        attributes: list[ProductVariantAttribute],
        product_id: str,
        bundle_item_id: str | None = None,
    ) -> tuple[AttributeSelection, list[str]]:
        """Build a selection for ``product_id`` from a posted query. Returns the selection and warnings."""
        ...

    @abstractmethod
    def materialize_attributes(self, selection: AttributeSelection) -> list[ProductVariantAttribute]:
        """Resolve the selected attribute ids into attribute objects."""
        ...

    @abstractmethod
    def materialize_values(self, selection: AttributeSelection) -> list[AttributeValue]:
        """Resolve the selected list-type values into value objects."""
        ...

    @abstractmethod
    def find_attribute_combination(
        self, product_id: str, selection: AttributeSelection
    ) -> AttributeCombination | None:
        ...

    @abstractmethod
    def merge_with_combination(self, product: Product, selection: AttributeSelection) -> Product:
        """Return ``product`` with the matching combination's data layered over it."""
        ...

    @abstractmethod
    def prefetch(self, selections) -> None:
        """Warm up attribute lookups for many selections at once."""
        ...


class CheckoutAttributeMaterializer(ABC):
    @abstractmethod
    def materialize(self, selection: CheckoutAttributeSelection) -> list[CheckoutAttribute]:
        ...
