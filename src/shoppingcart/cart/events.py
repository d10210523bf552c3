"""Domain events for cart line items and checkout state."""

from protean.fields import Identifier, Integer, String

from shoppingcart.domain import shoppingcart


@shoppingcart.event(part_of="CartLineItem")
class CartItemAdded:
    """A product line was placed in a cart or wishlist."""

    __version__ = "v1"

    item_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    store_id = Integer(required=True)
    cart_type = String(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    bundle_item_id = Identifier()


@shoppingcart.event(part_of="CartLineItem")
class CartItemQuantityUpdated:
    """The quantity of a line changed, either by merging an add or by an explicit update."""

    __version__ = "v1"

    item_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@shoppingcart.event(part_of="CheckoutState")
class CheckoutDataReset:
    """Payment and shipping selections were cleared because the cart changed."""

    __version__ = "v1"

    customer_id = Identifier(required=True)
    store_id = Integer(required=True)
