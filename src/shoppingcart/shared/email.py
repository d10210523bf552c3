"""Email address of a gift-card recipient or sender."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from shoppingcart.domain import shoppingcart


@shoppingcart.value_object
class GiftCardEmail:
    """A recipient or sender address as entered on a gift card.

    It must hold exactly one ``@`` that is neither its first nor its last
    character; ``jane@intranet`` is accepted.
    """

    address: String(required=True, max_length=254)

    @invariant.post
    def has_single_inner_at_sign(self):
        address = self.address or ""
        at = address.find("@")
        if at <= 0 or at == len(address) - 1 or at != address.rfind("@"):
            raise ValueError(f"Invalid gift card email: {address!r}")


def is_email(value: str | None) -> bool:
    """Return True when ``value`` can be used as a gift-card email."""
    if not value or not value.strip():
        return False
    try:
        GiftCardEmail(address=value.strip())
    except (ValueError, ValidationError):
        return False
    return True
