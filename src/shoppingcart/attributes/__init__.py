"""Attribute materializer factories.

Provides get/set/reset pairs for the product attribute materializer and the
checkout attribute materializer. Both default to catalog-backed in-memory
implementations.
"""

from shoppingcart.attributes.fake_adapter import (
    InMemoryAttributeMaterializer,
    InMemoryCheckoutAttributeMaterializer,
)
from shoppingcart.attributes.port import AttributeMaterializer, CheckoutAttributeMaterializer

_current_materializer: AttributeMaterializer | None = None
_current_checkout_materializer: CheckoutAttributeMaterializer | None = None


def get_attribute_materializer() -> AttributeMaterializer:
    global _current_materializer
    if _current_materializer is None:
        _current_materializer = InMemoryAttributeMaterializer()
    return _current_materializer


def set_attribute_materializer(materializer: AttributeMaterializer) -> None:
    global _current_materializer
    _current_materializer = materializer


def get_checkout_attribute_materializer() -> CheckoutAttributeMaterializer:
    global _current_checkout_materializer
    if _current_checkout_materializer is None:
        _current_checkout_materializer = InMemoryCheckoutAttributeMaterializer()
    return _current_checkout_materializer


def set_checkout_attribute_materializer(materializer: CheckoutAttributeMaterializer) -> None:
    global _current_checkout_materializer
    _current_checkout_materializer = materializer


def reset_materializers() -> None:
    """Reset both materializers to their defaults."""
    global _current_materializer, _current_checkout_materializer
    _current_materializer = None
    _current_checkout_materializer = None
