"""Add-to-cart request and result types."""

from dataclasses import dataclass, field

from shoppingcart.attributes.port import VariantQuery
from shoppingcart.cart.line_item import CartLineItem, CartType
from shoppingcart.cart.messages import Violation
from shoppingcart.cart.organized import OrganizedCartItem
from shoppingcart.catalog.port import BundleItem, Product
from shoppingcart.shared.attribute_selection import AttributeSelection
from shoppingcart.shared.customer import Customer


@dataclass
class AddToCartRequest:
    """One add-to-cart attempt.

    Attributes come either as a JSON blob (``raw_attributes``), a structured
    ``selection``, or a storefront ``variant_query`` to be materialized.
    ``bundle_item`` is set when the request fills one slot of a bundle.
    ``child_items`` carries existing bundle children over when a line is copied.
    """

    customer: Customer
    product: Product
    cart_type: CartType = CartType.SHOPPING_CART
    store_id: int | None = None
    quantity: int = 1
    raw_attributes: str | None = None
    selection: AttributeSelection | None = None
    variant_query: VariantQuery | None = None
    customer_entered_price: float = 0.0
    bundle_item: BundleItem | None = None
    child_items: list[OrganizedCartItem] = field(default_factory=list)
    add_required_products: bool = True
    add_bundle_items: bool = True

    def __post_init__(self):
        if self.customer is None:
            raise ValueError("An add-to-cart request needs a customer")
        if self.product is None:
            raise ValueError("An add-to-cart request needs a product")

        if self.selection is not None and self.raw_attributes is None:
            self.raw_attributes = self.selection.as_json()

    @property
    def attribute_selection(self) -> AttributeSelection:
        return AttributeSelection(self.raw_attributes)

    @property
    def is_bundle_slot(self) -> bool:
        return self.bundle_item is not None


@dataclass
class AddToCartResult:
    """Outcome of one add-to-cart attempt.

    For a top-level request ``item`` is the committed (or merged) line and
    ``children`` its persisted bundle children. For a bundle slot ``item`` is
    the staged, not yet persisted child line.

    ``skipped_children`` holds the violations of copied children that were left
    out of an accepted best-effort copy.
    """

    violations: list[Violation] = field(default_factory=list)
    item: CartLineItem | None = None
    children: list[CartLineItem] = field(default_factory=list)
    merged: bool = False
    skipped_children: list[Violation] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return not self.violations

    @classmethod
    def rejected(cls, violations) -> "AddToCartResult":
        return cls(violations=list(violations))
