"""Shared BDD fixtures and step definitions for the shopping cart."""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then, when

from shoppingcart.cart.context import AddToCartRequest
from shoppingcart.cart.line_item import CartLineItem
from shoppingcart.cart.messages import ViolationKind
from shoppingcart.catalog.port import BundleItem, ManageInventoryMethod, Product, ProductType
from shoppingcart.shared.attribute_selection import AttributeSelection
from shoppingcart.shared.customer import Customer

_VIOLATION_KINDS = {
    "stock": ViolationKind.STOCK_INSUFFICIENT,
    "cart limit": ViolationKind.CART_LIMIT_EXCEEDED,
    "bundle": ViolationKind.BUNDLE_INVALID,
    "not available": ViolationKind.NOT_AVAILABLE,
}


@pytest.fixture()
def outcome():
    """Holds the most recent add-to-cart result."""
    return {}


def _lines(customer_id="cust-001"):
    return current_domain.repository_for(CartLineItem).items_for(customer_id)


def _top_level_line(product_id):
    return next(line for line in _lines() if line.product_id == product_id and line.parent_item_id is None)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a customer with an empty cart")
def empty_cart(customer):
    assert _lines(customer.id) == []


@given(parsers.cfparse("the cart limit is {limit:d}"))
def cart_limit(settings, limit):
    settings.maximum_shopping_cart_items = limit


@given(parsers.cfparse('a product "{product_id}"'))
def simple_product(catalog, product_id):
    catalog.add_product(Product(id=product_id, name=product_id.title()))


@given(parsers.cfparse('a product "{product_id}" with stock {stock:d}'))
def stocked_product(catalog, product_id, stock):
    catalog.add_product(
        Product(
            id=product_id,
            name=product_id.title(),
            manage_inventory_method=ManageInventoryMethod.MANAGE_STOCK,
            stock_quantity=stock,
        )
    )


@given(parsers.cfparse('a product "{product_id}" whose availability starts tomorrow and ended yesterday'))
def product_outside_window(catalog, product_id):
    now = datetime.now(UTC)
    catalog.add_product(
        Product(
            id=product_id,
            name=product_id.title(),
            available_start_date_time_utc=now + timedelta(days=1),
            available_end_date_time_utc=now - timedelta(days=1),
        )
    )


@given(parsers.cfparse('a bundle "{bundle_id}"'))
def bundle_product(catalog, bundle_id):
    catalog.add_product(Product(id=bundle_id, name=bundle_id.title(), product_type=ProductType.BUNDLED))


@given(parsers.cfparse('bundle "{bundle_id}" has slot "{slot_id}" holding {quantity:d} of "{product_id}"'))
def bundle_slot(catalog, bundle_id, slot_id, quantity, product_id):
    order = len(catalog.get_bundle_items(bundle_id))
    catalog.add_bundle_item(
        BundleItem(
            id=slot_id,
            bundle_product_id=bundle_id,
            product_id=product_id,
            quantity=quantity,
            name=slot_id,
            display_order=order,
        )
    )


@given(parsers.cfparse('bundle "{bundle_id}" has unpublished slot "{slot_id}" holding "{product_id}"'))
def unpublished_bundle_slot(catalog, bundle_id, slot_id, product_id):
    order = len(catalog.get_bundle_items(bundle_id))
    catalog.add_bundle_item(
        BundleItem(
            id=slot_id,
            bundle_product_id=bundle_id,
            product_id=product_id,
            name=slot_id,
            published=False,
            display_order=order,
        )
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
def _add(composer, catalog, customer, product_id, quantity, selection=None):
    request = AddToCartRequest(
        customer=customer,
        product=catalog.get_product(product_id),
        store_id=1,
        quantity=quantity,
        selection=selection,
    )
    return composer.add_to_cart(request)


@when(parsers.cfparse('the customer adds {quantity:d} of product "{product_id}"'))
def add_product(composer, catalog, customer, outcome, quantity, product_id):
    outcome["result"] = _add(composer, catalog, customer, product_id, quantity)


@when(parsers.cfparse('the customer adds {quantity:d} of "{product_id}" with color "{color}"'))
def add_product_with_color(composer, catalog, customer, outcome, quantity, product_id, color):
    selection = AttributeSelection.from_map({"color": [color]})
    outcome["result"] = _add(composer, catalog, customer, product_id, quantity, selection)


@when(parsers.cfparse('another customer adds {quantity:d} of product "{product_id}"'))
def another_customer_adds(composer, catalog, outcome, quantity, product_id):
    outcome["other"] = _add(composer, catalog, Customer(id="cust-002"), product_id, quantity)


@when(parsers.cfparse('the customer deletes the cart line of "{product_id}"'))
def delete_line(composer, product_id):
    composer.delete_cart_item(_top_level_line(product_id))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the add is accepted")
def add_accepted(outcome):
    assert outcome["result"].accepted, outcome["result"].violations


@then(parsers.cfparse('the add is rejected with "{message}"'))
def add_rejected_with_message(outcome, message):
    assert not outcome["result"].accepted
    assert message in outcome["result"].violations


@then(parsers.cfparse("the add is rejected with a {kind} violation"))
def add_rejected_with_kind(outcome, kind):
    result = outcome["result"]
    assert not result.accepted
    assert _VIOLATION_KINDS[kind] in {violation.kind for violation in result.violations}


@then(parsers.cfparse("the add is rejected with exactly {count:d} violation"))
def add_rejected_with_count(outcome, count):
    assert len(outcome["result"].violations) == count


@then(parsers.cfparse("the cart has {count:d} line"))
def cart_has_one_line(count):
    assert len([line for line in _lines() if line.parent_item_id is None]) == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_n_lines(count):
    assert len([line for line in _lines() if line.parent_item_id is None]) == count


@then(parsers.cfparse('the cart line of "{product_id}" has quantity {quantity:d}'))
def line_quantity(product_id, quantity):
    assert _top_level_line(product_id).quantity == quantity


@then(parsers.cfparse('the cart line of "{product_id}" has {count:d} children'))
def line_children(product_id, count):
    parent = _top_level_line(product_id)
    assert len([line for line in _lines() if line.parent_item_id == parent.id]) == count


@then("the store holds no cart lines")
def store_is_empty():
    assert _lines() == []


@then(parsers.cfparse("the store holds {count:d} cart lines"))
def store_holds(count):
    assert len(_lines()) == count
