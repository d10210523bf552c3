"""CheckoutState aggregate: a customer's in-progress checkout choices per store.

Holds the selected payment method and shipping option, the checkout-attribute
selection and the reward-points choice. Any change to the cart resets the
progress markers so the customer re-confirms payment and shipping.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from shoppingcart.cart.events import CheckoutDataReset
from shoppingcart.domain import shoppingcart
from shoppingcart.shared.attribute_selection import CheckoutAttributeSelection


@shoppingcart.aggregate
class CheckoutState:
    customer_id = Identifier(required=True)
    store_id = Integer(required=True)
    payment_method = String(max_length=255)
    shipping_option = String(max_length=255)
    checkout_attributes = Text()  # JSON, see CheckoutAttributeSelection
    use_reward_points = Boolean(default=False)
    updated_at = DateTime()

    @property
    def checkout_attribute_selection(self) -> CheckoutAttributeSelection:
        return CheckoutAttributeSelection(self.checkout_attributes)

    def store_checkout_attributes(self, selection: CheckoutAttributeSelection | None) -> None:
        self.checkout_attributes = selection.as_json() if selection is not None else None
        self.updated_at = datetime.now(UTC)

    def reset(self) -> bool:
        """Clear payment, shipping and reward-point choices. Returns False when there was nothing to clear."""
        if not (self.payment_method or self.shipping_option or self.use_reward_points):
            return False

        self.payment_method = None
        self.shipping_option = None
        self.use_reward_points = False
        self.updated_at = datetime.now(UTC)

        self.raise_(CheckoutDataReset(customer_id=str(self.customer_id), store_id=self.store_id))
        return True


@shoppingcart.repository(part_of=CheckoutState)
class CheckoutStateRepository:
    def for_customer(self, customer_id, store_id: int) -> CheckoutState | None:
        found = self._dao.query.filter(customer_id=str(customer_id), store_id=store_id).all().items
        return found[0] if found else None

    def get_or_create(self, customer_id, store_id: int) -> CheckoutState:
        state = self.for_customer(customer_id, store_id)
        if state is None:
            state = CheckoutState(customer_id=str(customer_id), store_id=store_id)
        return state
