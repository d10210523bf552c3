import pytest
from pydantic import ValidationError

from shoppingcart.config import CartSettings, get_settings, reset_settings, set_settings


def test_defaults():
    settings = CartSettings(_env_file=None)
    assert settings.maximum_shopping_cart_items == 1000
    assert settings.maximum_wishlist_items == 1000
    assert settings.add_products_to_basket_in_single_positions is False
    assert settings.allow_out_of_stock_items_to_be_added_to_wishlist is False
    assert settings.allow_activatable_cart_items is False
    assert settings.best_effort_cart_copy is False
    assert settings.default_store_id == 1


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("CART_MAXIMUM_SHOPPING_CART_ITEMS", "5")
    monkeypatch.setenv("CART_ADD_PRODUCTS_TO_BASKET_IN_SINGLE_POSITIONS", "true")

    settings = CartSettings(_env_file=None)
    assert settings.maximum_shopping_cart_items == 5
    assert settings.add_products_to_basket_in_single_positions is True


def test_rejects_negative_limits():
    with pytest.raises(ValidationError):
        CartSettings(_env_file=None, maximum_wishlist_items=-1)


def test_rejects_non_positive_default_store():
    with pytest.raises(ValidationError):
        CartSettings(_env_file=None, default_store_id=0)


def test_set_and_reset_settings():
    custom = CartSettings(_env_file=None, maximum_shopping_cart_items=3)
    set_settings(custom)
    try:
        assert get_settings() is custom
    finally:
        reset_settings()
    assert get_settings() is not custom
    reset_settings()
