"""Tests for the CheckoutState aggregate."""

from protean import current_domain

from shoppingcart.cart.checkout_state import CheckoutState
from shoppingcart.cart.events import CheckoutDataReset
from shoppingcart.shared.attribute_selection import CheckoutAttributeSelection


def _state(**overrides):
    defaults = {"customer_id": "cust-001", "store_id": 1}
    defaults.update(overrides)
    return CheckoutState(**defaults)


class TestReset:
    def test_reset_clears_progress_markers(self):
        state = _state(payment_method="card", shipping_option="ground", use_reward_points=True)

        assert state.reset() is True
        assert state.payment_method is None
        assert state.shipping_option is None
        assert state.use_reward_points is False

    def test_reset_raises_event(self):
        state = _state(payment_method="card")
        state.reset()

        assert len(state._events) == 1
        event = state._events[0]
        assert isinstance(event, CheckoutDataReset)
        assert event.customer_id == "cust-001"
        assert event.store_id == 1

    def test_reset_without_selection_is_a_noop(self):
        state = _state()
        assert state.reset() is False
        assert state._events == []

    def test_reset_keeps_checkout_attributes(self):
        state = _state(shipping_option="ground")
        state.store_checkout_attributes(CheckoutAttributeSelection.from_map({"gift-wrap": ["yes"]}))
        state.reset()
        assert state.checkout_attribute_selection.get_attribute_values("gift-wrap") == ["yes"]


class TestCheckoutAttributes:
    def test_store_and_read_back(self):
        state = _state()
        state.store_checkout_attributes(CheckoutAttributeSelection.from_map({"note": ["leave at door"]}))
        selection = state.checkout_attribute_selection
        assert isinstance(selection, CheckoutAttributeSelection)
        assert selection.get_attribute_values("note") == ["leave at door"]

    def test_store_none_clears(self):
        state = _state(checkout_attributes='{"attributes": {"note": ["x"]}}')
        state.store_checkout_attributes(None)
        assert state.checkout_attributes is None
        assert state.checkout_attribute_selection.has_attributes is False


class TestRepository:
    def test_for_customer_finds_state_per_store(self):
        repo = current_domain.repository_for(CheckoutState)
        repo.add(_state(store_id=1, payment_method="card"))
        repo.add(_state(store_id=2, payment_method="invoice"))

        assert repo.for_customer("cust-001", 2).payment_method == "invoice"
        assert repo.for_customer("cust-002", 1) is None

    def test_get_or_create_returns_unsaved_state(self):
        repo = current_domain.repository_for(CheckoutState)
        state = repo.get_or_create("cust-009", 1)
        assert state.customer_id == "cust-009"
        assert repo.for_customer("cust-009", 1) is None
