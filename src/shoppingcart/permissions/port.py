"""Permission port (abstract interface).

Covers the three checks the cart needs from the security layer: capability
permissions (may this customer use a cart or wishlist at all), product ACLs,
and store mappings.
"""

from abc import ABC, abstractmethod

from shoppingcart.catalog.port import Product
from shoppingcart.shared.customer import Customer


class Permissions:
    ACCESS_SHOPPING_CART = "cart.accessshoppingcart"
    ACCESS_WISHLIST = "cart.accesswishlist"


class PermissionService(ABC):
    @abstractmethod
    def authorize(self, permission: str, customer: Customer) -> bool:
        """Whether ``customer`` holds ``permission``."""
        ...

    @abstractmethod
    def authorize_product(self, product: Product, customer: Customer) -> bool:
        """Whether the product's ACL lets ``customer`` see it."""
        ...

    @abstractmethod
    def authorize_store(self, product: Product, store_id: int) -> bool:
        """Whether the product is mapped to ``store_id``."""
        ...
