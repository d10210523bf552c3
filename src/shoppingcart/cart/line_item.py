"""CartLineItem aggregate: one persisted row of a cart or wishlist.

Bundle children are line items too; they point at their bundle's line through
``parent_item_id`` and at the bundle slot they fill through ``bundle_item_id``.
Line items are created, merged and removed by the cart composer only.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from shoppingcart.cart.events import CartItemAdded, CartItemQuantityUpdated
from shoppingcart.domain import shoppingcart
from shoppingcart.shared.attribute_selection import AttributeSelection


class CartType(Enum):
    SHOPPING_CART = "ShoppingCart"
    WISHLIST = "Wishlist"


@shoppingcart.aggregate
class CartLineItem:
    customer_id = Identifier(required=True)
    store_id = Integer(required=True)
    cart_type = String(choices=CartType, default=CartType.SHOPPING_CART.value)
    product_id = Identifier(required=True)
    # Positivity is a commit rule, not a field rule: rejected candidates may carry any quantity
    quantity = Integer(required=True)
    raw_attributes = Text()  # JSON, see AttributeSelection
    customer_entered_price = Float(default=0.0)
    parent_item_id = Identifier()
    bundle_item_id = Identifier()
    active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        customer_id,
        store_id,
        cart_type,
        product_id,
        quantity,
        raw_attributes=None,
        customer_entered_price=0.0,
        bundle_item_id=None,
    ):
        now = datetime.now(UTC)
        item = cls(
            customer_id=customer_id,
            store_id=store_id,
            cart_type=CartType(cart_type).value,
            product_id=product_id,
            quantity=quantity,
            raw_attributes=raw_attributes,
            customer_entered_price=customer_entered_price or 0.0,
            bundle_item_id=bundle_item_id,
            active=True,
            created_at=now,
            updated_at=now,
        )

        item.raise_(
            CartItemAdded(
                item_id=str(item.id),
                customer_id=str(customer_id),
                store_id=store_id,
                cart_type=item.cart_type,
                product_id=str(product_id),
                quantity=quantity,
                bundle_item_id=str(bundle_item_id) if bundle_item_id else None,
            )
        )
        return item

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def attribute_selection(self) -> AttributeSelection:
        return AttributeSelection(self.raw_attributes)

    @property
    def is_child(self) -> bool:
        return self.parent_item_id is not None

    def matches(self, cart_type: CartType, store_id: int | None = None) -> bool:
        if self.cart_type != cart_type.value:
            return False
        return not store_id or self.store_id == store_id

    # -------------------------------------------------------------------
    # Behavior
    # -------------------------------------------------------------------
    def attach_to(self, parent_item_id):
        """Make this line a child of the bundle line ``parent_item_id``."""
        if str(parent_item_id) == str(self.id):
            raise ValidationError({"parent_item_id": ["A cart item cannot be its own parent"]})
        self.parent_item_id = parent_item_id

    def change_quantity(self, new_quantity, raw_attributes=None, active=None):
        if new_quantity is None or new_quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous_quantity = self.quantity
        self.quantity = new_quantity
        if raw_attributes is not None:
            self.raw_attributes = raw_attributes
        if active is not None:
            self.active = active
        self.updated_at = datetime.now(UTC)

        if previous_quantity != new_quantity:
            self.raise_(
                CartItemQuantityUpdated(
                    item_id=str(self.id),
                    customer_id=str(self.customer_id),
                    previous_quantity=previous_quantity,
                    new_quantity=new_quantity,
                )
            )
