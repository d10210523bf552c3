"""Cart item commands and handler.

Each command gets its own ``CartComposer`` and with it a fresh organized-cart
cache, so one command is one unit of work.
"""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from shoppingcart.cart.composer import CartComposer
from shoppingcart.cart.context import AddToCartRequest, AddToCartResult
from shoppingcart.cart.line_item import CartLineItem, CartType
from shoppingcart.cart.messages import Localizer
from shoppingcart.catalog import get_catalog
from shoppingcart.domain import shoppingcart
from shoppingcart.shared.customer import Customer
from shoppingcart.utils.logging import cart_context


@shoppingcart.command(part_of="CartLineItem")
class AddProductToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    store_id = Integer()
    cart_type = String(choices=CartType, default=CartType.SHOPPING_CART.value)
    raw_attributes = Text()
    customer_entered_price = Float(default=0.0)
    is_bot = Boolean(default=False)


@shoppingcart.command(part_of="CartLineItem")
class UpdateCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer()
    active = Boolean()
    reset_checkout_data = Boolean(default=False)


@shoppingcart.command(part_of="CartLineItem")
class RemoveCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    reset_checkout_data = Boolean(default=True)


@shoppingcart.command(part_of="CartLineItem")
class MigrateCart:
    from_customer_id = Identifier(required=True)
    to_customer_id = Identifier(required=True)
    to_customer_is_bot = Boolean(default=False)


@shoppingcart.command_handler(part_of=CartLineItem)
class ManageCartItemsHandler:
    @handle(AddProductToCart)
    def add_product_to_cart(self, command) -> AddToCartResult:
        product = get_catalog().get_product(command.product_id)
        if product is None:
            return AddToCartResult.rejected([Localizer()("Products.NotFound", command.product_id)])

        with cart_context(command="AddProductToCart", customer_id=str(command.customer_id)):
            return CartComposer().add_to_cart(
                AddToCartRequest(
                    customer=Customer(id=str(command.customer_id), is_bot=bool(command.is_bot)),
                    product=product,
                    cart_type=CartType(command.cart_type),
                    store_id=command.store_id,
                    quantity=command.quantity,
                    raw_attributes=command.raw_attributes,
                    customer_entered_price=command.customer_entered_price or 0.0,
                )
            )

    @handle(UpdateCartItem)
    def update_cart_item(self, command) -> list:
        with cart_context(command="UpdateCartItem", customer_id=str(command.customer_id)):
            return CartComposer().update_cart_item(
                Customer(id=str(command.customer_id)),
                command.item_id,
                quantity=command.quantity,
                active=command.active,
                reset_checkout_data=bool(command.reset_checkout_data),
            )

    @handle(RemoveCartItem)
    def remove_cart_item(self, command) -> int:
        line = current_domain.repository_for(CartLineItem).get(command.item_id)
        if str(line.customer_id) != str(command.customer_id):
            raise ValueError(f"Cart item {command.item_id} does not belong to customer {command.customer_id}")

        with cart_context(command="RemoveCartItem", customer_id=str(command.customer_id)):
            return CartComposer().delete_cart_item(
                line,
                reset_checkout_data=bool(command.reset_checkout_data),
                remove_invalid_checkout_attributes=True,
            )

    @handle(MigrateCart)
    def migrate_cart(self, command) -> bool:
        with cart_context(command="MigrateCart", customer_id=str(command.to_customer_id)):
            return CartComposer().migrate_cart(
                Customer(id=str(command.from_customer_id)),
                Customer(id=str(command.to_customer_id), is_bot=bool(command.to_customer_is_bot)),
            )
