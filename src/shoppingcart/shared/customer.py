"""Reference to the acting customer.

Customers live in the identity context; the cart only needs their id and
whether the request comes from a crawler.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Customer:
    id: str
    is_bot: bool = False

    def __post_init__(self):
        if not self.id:
            raise ValueError("Customer id is required")
