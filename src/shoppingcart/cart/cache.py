"""Unit-of-work scoped memo of organized carts.

Entries are keyed by ``(customer_id, cart_type, store_id, active_only)``.
Invalidation drops the entries of one (customer, cart type, store) directly,
whatever their ``active_only`` variant.
"""

from collections.abc import Callable

from shoppingcart.cart.line_item import CartType

_ACTIVE_VARIANTS = (None, True, False)


def cache_key(customer_id, cart_type: CartType, store_id: int, active_only: bool | None = None) -> tuple:
    return (str(customer_id), cart_type, store_id, active_only)


class CartCache:
    def __init__(self) -> None:
        self._entries: dict[tuple, object] = {}

    def __contains__(self, key: tuple) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: tuple):
        return self._entries.get(key)

    def get_or_load(self, key: tuple, loader: Callable[[], object]):
        if key not in self._entries:
            self._entries[key] = loader()
        return self._entries[key]

    def invalidate(self, customer_id, cart_type: CartType, store_id: int) -> None:
        for active_only in _ACTIVE_VARIANTS:
            self._entries.pop(cache_key(customer_id, cart_type, store_id, active_only), None)

    def clear(self) -> None:
        self._entries.clear()
