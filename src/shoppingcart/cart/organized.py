"""Read-side cart tree.

``OrganizedCartItem`` wraps one persisted line with its resolved product and
its bundle children. ``ShoppingCart`` is the organized view of one customer's
cart of one type in one store. Both are rebuilt on every read and never stored.
"""

from dataclasses import dataclass, field

from shoppingcart.catalog.port import BundleItem, Product
from shoppingcart.cart.line_item import CartLineItem, CartType
from shoppingcart.shared.customer import Customer


@dataclass
class OrganizedCartItem:
    item: CartLineItem
    product: Product | None = None  # None when the catalog cannot load it
    bundle_item: BundleItem | None = None
    children: list["OrganizedCartItem"] = field(default_factory=list)
    additional_charge: float = 0.0
    active: bool = True

    @property
    def quantity(self) -> int:
        return self.item.quantity

    @property
    def product_id(self) -> str:
        return str(self.item.product_id)

    def line_items(self) -> list[CartLineItem]:
        """This line followed by its children."""
        return [self.item, *(child.item for child in self.children)]


@dataclass
class ShoppingCart:
    customer: Customer
    store_id: int
    cart_type: CartType = CartType.SHOPPING_CART
    items: list[OrganizedCartItem] = field(default_factory=list)

    @property
    def has_items(self) -> bool:
        return len(self.items) > 0

    @property
    def is_shipping_required(self) -> bool:
        return self.includes_matching_items(lambda product: product.is_ship_enabled)

    def includes_matching_items(self, predicate) -> bool:
        """Whether any top-level line's (loadable) product satisfies ``predicate``."""
        return any(entry.product is not None and predicate(entry.product) for entry in self.items)

    def total_quantity(self) -> int:
        return sum(entry.quantity for entry in self.items)

    def product_ids(self) -> set[str]:
        return {entry.product_id for entry in self.items}

    def recurring_cycles(self) -> set[tuple]:
        """Distinct (cycle length, cycle period, total cycles) of the recurring products in the cart."""
        return {
            (
                entry.product.recurring_cycle_length,
                entry.product.recurring_cycle_period,
                entry.product.recurring_total_cycles,
            )
            for entry in self.items
            if entry.product is not None and entry.product.is_recurring
        }

    def line_items(self) -> list[CartLineItem]:
        lines = []
        for entry in self.items:
            lines.extend(entry.line_items())
        return lines
