"""Violation messages.

Every check reports plain, human-readable strings. Each one is a ``Violation``:
a ``str`` that also knows which kind of rule produced it, so callers that need
to branch on the category can do so without parsing text.

Texts are looked up by resource key through a ``Localizer``. The English
defaults below are used unless the caller supplies its own resources.
"""

from enum import Enum


class ViolationKind(Enum):
    ACCESS_DENIED = "AccessDenied"
    PRODUCT_INVALID = "ProductInvalid"
    QUANTITY_INVALID = "QuantityInvalid"
    STOCK_INSUFFICIENT = "StockInsufficient"
    NOT_AVAILABLE = "NotAvailable"
    ATTRIBUTE_INCOMPLETE = "AttributeIncomplete"
    GIFT_CARD_INCOMPLETE = "GiftCardIncomplete"
    REQUIRED_PRODUCT_MISSING = "RequiredProductMissing"
    BUNDLE_INVALID = "BundleInvalid"
    CART_LIMIT_EXCEEDED = "CartLimitExceeded"
    CHECKOUT_ATTRIBUTE_INCOMPLETE = "CheckoutAttributeIncomplete"
    RECURRING_CONFLICT = "RecurringConflict"


class Violation(str):
    """A violation message tagged with the kind of rule that produced it."""

    kind: ViolationKind

    def __new__(cls, text: str, kind: ViolationKind):
        obj = super().__new__(cls, text)
        obj.kind = kind
        return obj

    def __reduce__(self):
        return (Violation, (str(self), self.kind))


_K = ViolationKind

# resource key -> (default text, kind)
RESOURCES: dict[str, tuple[str, ViolationKind]] = {
    # Access
    "ShoppingCart.IsDisabled": ("The shopping cart is disabled.", _K.ACCESS_DENIED),
    "Wishlist.IsDisabled": ("The wishlist is disabled.", _K.ACCESS_DENIED),
    "Common.Error.BotsNotPermitted": ("Bots are not permitted to use the shopping cart.", _K.ACCESS_DENIED),
    # Product
    "Products.NotFound": ("Product with ID {0} could not be found.", _K.PRODUCT_INVALID),
    "ShoppingCart.ProductDeleted": ("The product has been deleted.", _K.PRODUCT_INVALID),
    "ShoppingCart.ProductNotAvailableForOrder": ("This product is not available for order.", _K.PRODUCT_INVALID),
    "ShoppingCart.ProductUnpublished": ("The product is not published.", _K.PRODUCT_INVALID),
    "ShoppingCart.BuyingDisabled": ("Buying is disabled for this product.", _K.PRODUCT_INVALID),
    "ShoppingCart.WishlistDisabled": ("This product cannot be added to the wishlist.", _K.PRODUCT_INVALID),
    "Products.CallForPrice": ("Call for price.", _K.PRODUCT_INVALID),
    "ShoppingCart.CustomerEnteredPrice.RangeError": (
        "The entered price must be between {0} and {1}.",
        _K.PRODUCT_INVALID,
    ),
    "ShoppingCart.CannotLoadProduct": ("The product with ID {0} could not be loaded.", _K.PRODUCT_INVALID),
    # Quantity
    "ShoppingCart.QuantityShouldPositive": ("The quantity must be a positive number.", _K.QUANTITY_INVALID),
    "ShoppingCart.MinimumQuantity": ("The minimum quantity allowed for purchase is {0}.", _K.QUANTITY_INVALID),
    "ShoppingCart.MaximumQuantity": ("The maximum quantity allowed for purchase is {0}.", _K.QUANTITY_INVALID),
    "ShoppingCart.AllowedQuantities": ("Allowed quantities for this product: {0}.", _K.QUANTITY_INVALID),
    # Stock
    "ShoppingCart.QuantityExceedsStock": (
        "The requested quantity exceeds the stock. Only {0} left.",
        _K.STOCK_INSUFFICIENT,
    ),
    "ShoppingCart.OutOfStock": ("The product is out of stock.", _K.STOCK_INSUFFICIENT),
    # Availability
    "ShoppingCart.NotAvailable": ("The product is not available.", _K.NOT_AVAILABLE),
    # Attributes
    "ShoppingCart.AttributeError": ("The selected attributes do not belong to this product.", _K.ATTRIBUTE_INCOMPLETE),
    "ShoppingCart.Bundle.NoAttributes": ("Bundles cannot have attributes.", _K.ATTRIBUTE_INCOMPLETE),
    "ShoppingCart.SelectAttribute": ("Please select {0}.", _K.ATTRIBUTE_INCOMPLETE),
    "ShoppingCart.EnterAttributeValue": ("Please enter {0}.", _K.ATTRIBUTE_INCOMPLETE),
    "ShoppingCart.UploadAttributeFile": ("Please upload {0}.", _K.ATTRIBUTE_INCOMPLETE),
    "ShoppingCart.ProductLinkageAttributeWarning": ("{0}. {1}: {2}", _K.ATTRIBUTE_INCOMPLETE),
    "ShoppingCart.ProductLinkageProductNotLoading": (
        "The linked product with ID {0} could not be loaded.",
        _K.ATTRIBUTE_INCOMPLETE,
    ),
    # Gift cards
    "ShoppingCart.RecipientNameError": ("Please enter the recipient's name.", _K.GIFT_CARD_INCOMPLETE),
    "ShoppingCart.RecipientEmailError": ("Please enter a valid recipient email.", _K.GIFT_CARD_INCOMPLETE),
    "ShoppingCart.SenderNameError": ("Please enter your name.", _K.GIFT_CARD_INCOMPLETE),
    "ShoppingCart.SenderEmailError": ("Please enter a valid sender email.", _K.GIFT_CARD_INCOMPLETE),
    # Required products
    "ShoppingCart.RequiredProductWarning": (
        "This product requires the following product to be added to the cart: {0}.",
        _K.REQUIRED_PRODUCT_MISSING,
    ),
    # Bundles
    "ShoppingCart.Bundle.BundleItemUnpublished": ('The bundle item "{0}" is not published.', _K.BUNDLE_INVALID),
    "ShoppingCart.Bundle.MissingProduct": ('The product of bundle item "{0}" is missing.', _K.BUNDLE_INVALID),
    "ShoppingCart.Bundle.Quantity": ('The quantity of bundle item "{0}" must be positive.', _K.BUNDLE_INVALID),
    "ShoppingCart.Bundle.ProductRestrictions": (
        'The bundle item "{0}" cannot be a downloadable or recurring product.',
        _K.BUNDLE_INVALID,
    ),
    "ShoppingCart.Bundle.NoCustomerEnteredPrice": (
        "A price cannot be entered for bundles with per-item pricing.",
        _K.PRODUCT_INVALID,
    ),
    # Cart size
    "ShoppingCart.MaximumShoppingCartItems": (
        "The shopping cart cannot hold more than {0} items.",
        _K.CART_LIMIT_EXCEEDED,
    ),
    "ShoppingCart.MaximumWishlistItems": ("The wishlist cannot hold more than {0} items.", _K.CART_LIMIT_EXCEEDED),
    # Cart wide
    "ShoppingCart.CheckoutAttributeRequired": ("Please specify {0}.", _K.CHECKOUT_ATTRIBUTE_INCOMPLETE),
    "ShoppingCart.CannotMixStandardAndAutoshipProducts": (
        "Standard and recurring products cannot be mixed in one cart.",
        _K.RECURRING_CONFLICT,
    ),
    "ShoppingCart.ConflictingShipmentSchedules": (
        "The cart contains recurring products with conflicting shipment schedules.",
        _K.RECURRING_CONFLICT,
    ),
}


class Localizer:
    """Renders resource keys into ``Violation`` objects.

    ``resources`` maps keys to replacement texts; missing keys fall back to the
    English defaults. Arguments are substituted positionally (``{0}``, ``{1}``).
    """

    def __init__(self, resources: dict[str, str] | None = None):
        self.resources = dict(resources or {})

    def __call__(self, key: str, *args) -> Violation:
        try:
            default, kind = RESOURCES[key]
        except KeyError:
            raise KeyError(f"Unknown message resource: {key}") from None

        text = self.resources.get(key, default)
        return Violation(text.format(*args) if args else text, kind)
