import pytest
from protean.integrations.pytest import DomainFixture

from shoppingcart.attributes import (
    reset_materializers,
    set_attribute_materializer,
    set_checkout_attribute_materializer,
)
from shoppingcart.attributes.fake_adapter import (
    InMemoryAttributeMaterializer,
    InMemoryCheckoutAttributeMaterializer,
)
from shoppingcart.catalog import reset_catalog, set_catalog
from shoppingcart.catalog.fake_adapter import InMemoryCatalog
from shoppingcart.config import CartSettings, reset_settings, set_settings
from shoppingcart.permissions import reset_permission_service, set_permission_service
from shoppingcart.permissions.fake_adapter import FakePermissionService
from shoppingcart.shared.customer import Customer


@pytest.fixture(scope="session")
def shoppingcart_bed():
    from shoppingcart.domain import shoppingcart

    bed = DomainFixture(shoppingcart)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(shoppingcart_bed):
    with shoppingcart_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
@pytest.fixture()
def settings():
    cart_settings = CartSettings(_env_file=None)
    set_settings(cart_settings)
    yield cart_settings
    reset_settings()


@pytest.fixture()
def catalog():
    fake = InMemoryCatalog()
    set_catalog(fake)
    yield fake
    reset_catalog()


@pytest.fixture()
def materializer(catalog):
    fake = InMemoryAttributeMaterializer(catalog)
    set_attribute_materializer(fake)
    set_checkout_attribute_materializer(InMemoryCheckoutAttributeMaterializer(catalog))
    yield fake
    reset_materializers()


@pytest.fixture()
def permissions():
    fake = FakePermissionService()
    set_permission_service(fake)
    yield fake
    reset_permission_service()


@pytest.fixture()
def composer(settings, catalog, materializer, permissions):
    from shoppingcart.cart.composer import CartComposer

    return CartComposer()


@pytest.fixture()
def validator(settings, catalog, materializer, permissions):
    from shoppingcart.cart.validator import CartValidator

    return CartValidator()


@pytest.fixture()
def customer():
    return Customer(id="cust-001")
