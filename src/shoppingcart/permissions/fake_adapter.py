"""Configurable fake permission service.

Grants everything by default. Tests deny individual permissions, hide products
from customers, or restrict products to stores.
"""

from shoppingcart.permissions.port import PermissionService


class FakePermissionService(PermissionService):
    def __init__(self) -> None:
        self.denied_permissions: set[str] = set()
        self.hidden_products: set[str] = set()
        self.store_mappings: dict[str, set[int]] = {}
        self.calls: list[dict] = []

    def deny(self, permission: str) -> None:
        self.denied_permissions.add(permission)

    def hide_product(self, product_id: str) -> None:
        self.hidden_products.add(product_id)

    def limit_to_stores(self, product_id: str, *store_ids: int) -> None:
        self.store_mappings[product_id] = set(store_ids)

    def authorize(self, permission, customer):
        self.calls.append({"method": "authorize", "permission": permission, "customer_id": customer.id})
        return permission not in self.denied_permissions

    def authorize_product(self, product, customer):  # noqa: ARG002
        return product.id not in self.hidden_products

    def authorize_store(self, product, store_id):
        stores = self.store_mappings.get(product.id)
        return stores is None or store_id in stores
