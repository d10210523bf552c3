"""Shopping cart bounded context.

Decides whether items (simple products, gift cards, multi-level bundles) may
be added to, merged into or removed from a customer's cart or wishlist, and
reorganizes the flat line items into parent/child trees for checkout.
"""

from protean.domain import Domain

from shoppingcart.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
shoppingcart = Domain(name="shoppingcart")
