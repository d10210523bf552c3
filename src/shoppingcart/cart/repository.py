"""Cart item store: query and mutation helpers over persisted line items.

Every write goes through here so a composer can treat the store as one
collaborator. Reads return plain lists of ``CartLineItem`` aggregates.
"""

from datetime import UTC

from shoppingcart.cart.line_item import CartLineItem, CartType
from shoppingcart.domain import shoppingcart

# Queries are unbounded in practice; lift protean's default page size
_MAX_ROWS = 100_000


def _naive_utc(value):
    return value.astimezone(UTC).replace(tzinfo=None) if value.tzinfo is not None else value


@shoppingcart.repository(part_of=CartLineItem)
class CartLineItemRepository:
    def _query_items(self, **criteria) -> list[CartLineItem]:
        return self._dao.query.filter(**criteria).limit(_MAX_ROWS).all().items

    def items_for(self, customer_id, cart_type: CartType | None = None, store_id: int | None = None):
        """Line items of a customer, narrowed to a cart type and store when given.

        Items come back in creation order, parents and children mixed.
        """
        criteria = {"customer_id": str(customer_id)}
        if cart_type is not None:
            criteria["cart_type"] = cart_type.value
        if store_id:
            criteria["store_id"] = store_id

        items = self._query_items(**criteria)
        return sorted(items, key=lambda item: _naive_utc(item.created_at))

    def updated_before(self, cutoff, customer_id=None) -> list[CartLineItem]:
        criteria = {}
        if customer_id is not None:
            criteria["customer_id"] = str(customer_id)

        items = self._query_items(**criteria)
        cutoff = _naive_utc(cutoff)
        return [item for item in items if item.updated_at is not None and _naive_utc(item.updated_at) < cutoff]

    def children_of(self, parent_ids) -> list[CartLineItem]:
        children = []
        for parent_id in {str(pid) for pid in parent_ids}:
            children.extend(self._query_items(parent_item_id=parent_id))
        return children

    # -------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------
    def add_children(self, parent_id, items) -> None:
        for item in items:
            item.attach_to(parent_id)
            self.add(item)

    def update_quantity(self, item: CartLineItem, new_quantity: int, raw_attributes=None) -> None:
        item.change_quantity(new_quantity, raw_attributes=raw_attributes)
        self.add(item)

    def remove_items(self, items) -> int:
        removed = 0
        for item in items:
            self._dao.delete(item)
            removed += 1
        return removed

    def remove_children_of(self, parent_ids, exclude_ids=()) -> int:
        """Delete the children of ``parent_ids`` that are not themselves in ``exclude_ids``."""
        excluded = {str(item_id) for item_id in exclude_ids}
        orphans = [child for child in self.children_of(parent_ids) if str(child.id) not in excluded]
        return self.remove_items(orphans)
