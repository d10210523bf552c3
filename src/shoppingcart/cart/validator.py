"""Cart validator: the business rules a cart line has to satisfy.

Each check takes the slice of state it needs plus a ``violations`` list,
appends what it finds and returns whether it passed. Checks never mutate
cart state and never raise for rule failures; a missing argument the caller
was obliged to pass raises ``ValueError``.
"""

from datetime import UTC, datetime

from protean.utils.globals import current_domain

from shoppingcart.attributes import get_attribute_materializer, get_checkout_attribute_materializer
from shoppingcart.cart.checkout_state import CheckoutState
from shoppingcart.cart.line_item import CartLineItem, CartType
from shoppingcart.cart.messages import Localizer
from shoppingcart.catalog import get_catalog
from shoppingcart.catalog.port import (
    AttributeControlType,
    AttributeValueType,
    BackorderMode,
    GiftCardType,
    ManageInventoryMethod,
    ProductType,
)
from shoppingcart.config import get_settings
from shoppingcart.permissions import Permissions, get_permission_service
from shoppingcart.shared.attribute_selection import CheckoutAttributeSelection
from shoppingcart.shared.email import is_email

_TEXT_CONTROLS = (
    AttributeControlType.TEXTBOX,
    AttributeControlType.MULTILINE_TEXTBOX,
    AttributeControlType.DATEPICKER,
)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


class CartValidator:
    def __init__(
        self,
        settings=None,
        permissions=None,
        materializer=None,
        checkout_materializer=None,
        catalog=None,
        localizer: Localizer | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.permissions = permissions or get_permission_service()
        self.materializer = materializer or get_attribute_materializer()
        self.checkout_materializer = checkout_materializer or get_checkout_attribute_materializer()
        self.catalog = catalog or get_catalog()
        self.T = localizer or Localizer()

    # -------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------
    def validate_access_permissions(self, customer, cart_type: CartType, violations: list) -> bool:
        if customer is None:
            raise ValueError("customer is required")

        if cart_type == CartType.SHOPPING_CART and not self.permissions.authorize(
            Permissions.ACCESS_SHOPPING_CART, customer
        ):
            violations.append(self.T("ShoppingCart.IsDisabled"))
            return False

        if cart_type == CartType.WISHLIST and not self.permissions.authorize(Permissions.ACCESS_WISHLIST, customer):
            violations.append(self.T("Wishlist.IsDisabled"))
            return False

        return True

    # -------------------------------------------------------------------
    # Bundle slots
    # -------------------------------------------------------------------
    def validate_bundle_item(self, bundle_item, violations: list) -> bool:
        if bundle_item is None:
            raise ValueError("bundle_item is required")

        current = []
        name = bundle_item.display_name

        if not bundle_item.published:
            current.append(self.T("ShoppingCart.Bundle.BundleItemUnpublished", name))

        if bundle_item.product is None or bundle_item.bundle_product is None:
            current.append(self.T("ShoppingCart.Bundle.MissingProduct", name))

        if bundle_item.quantity <= 0:
            current.append(self.T("ShoppingCart.Bundle.Quantity", name))

        if bundle_item.product is not None and (bundle_item.product.is_download or bundle_item.product.is_recurring):
            current.append(self.T("ShoppingCart.Bundle.ProductRestrictions", name))

        violations.extend(current)
        return not current

    # -------------------------------------------------------------------
    # Cart size
    # -------------------------------------------------------------------
    def validate_cart_size(self, cart_type: CartType, cart_items_count: int, violations: list) -> bool:
        if cart_type == CartType.SHOPPING_CART:
            limit = self.settings.maximum_shopping_cart_items
            if cart_items_count >= limit:
                violations.append(self.T("ShoppingCart.MaximumShoppingCartItems", limit))
                return False
        elif cart_type == CartType.WISHLIST:
            limit = self.settings.maximum_wishlist_items
            if cart_items_count >= limit:
                violations.append(self.T("ShoppingCart.MaximumWishlistItems", limit))
                return False

        return True

    # -------------------------------------------------------------------
    # Gift cards
    # -------------------------------------------------------------------
    def validate_gift_card_info(self, product, selection, violations: list) -> bool:
        if product is None or selection is None:
            raise ValueError("product and selection are required")

        if not product.is_gift_card:
            return True

        current = []
        info = selection.gift_card

        if not (info and info.recipient_name and info.recipient_name.strip()):
            current.append(self.T("ShoppingCart.RecipientNameError"))

        if not (info and info.sender_name and info.sender_name.strip()):
            current.append(self.T("ShoppingCart.SenderNameError"))

        if product.gift_card_type == GiftCardType.VIRTUAL:
            if not is_email(info.recipient_email if info else None):
                current.append(self.T("ShoppingCart.RecipientEmailError"))

            if not is_email(info.sender_email if info else None):
                current.append(self.T("ShoppingCart.SenderEmailError"))

        violations.extend(current)
        return not current

    # -------------------------------------------------------------------
    # Product
    # -------------------------------------------------------------------
    def validate_product(
        self,
        candidate: CartLineItem,
        product,
        cart_items,
        violations: list,
        customer=None,
        store_id: int | None = None,
        quantity: int | None = None,
    ) -> bool:
        """Check that ``product`` may be ordered in ``quantity`` (default: the candidate's)."""
        if candidate is None:
            raise ValueError("candidate is required")

        p = product
        if p is None:
            violations.append(self.T("Products.NotFound", candidate.product_id))
            return False

        if p.deleted:
            violations.append(self.T("ShoppingCart.ProductDeleted"))
            return False

        current = []
        cart_type = CartType(candidate.cart_type)
        store_id = store_id or candidate.store_id or self.settings.default_store_id

        if p.product_type == ProductType.GROUPED:
            current.append(self.T("ShoppingCart.ProductNotAvailableForOrder"))

        if p.is_bundle and p.bundle_per_item_pricing and candidate.customer_entered_price:
            current.append(self.T("ShoppingCart.Bundle.NoCustomerEnteredPrice"))

        if (
            not p.published
            or (customer is not None and not self.permissions.authorize_product(p, customer))
            or not self.permissions.authorize_store(p, store_id)
        ):
            current.append(self.T("ShoppingCart.ProductUnpublished"))

        if cart_type == CartType.SHOPPING_CART and p.disable_buy_button:
            current.append(self.T("ShoppingCart.BuyingDisabled"))

        if cart_type == CartType.WISHLIST and p.disable_wishlist_button:
            current.append(self.T("ShoppingCart.WishlistDisabled"))

        if cart_type == CartType.SHOPPING_CART and p.call_for_price:
            current.append(self.T("Products.CallForPrice"))

        entered_price = candidate.customer_entered_price or 0.0
        if p.customer_enters_price and (
            entered_price < p.minimum_customer_entered_price or entered_price > p.maximum_customer_entered_price
        ):
            current.append(
                self.T(
                    "ShoppingCart.CustomerEnteredPrice.RangeError",
                    p.minimum_customer_entered_price,
                    p.maximum_customer_entered_price,
                )
            )

        # Quantity
        has_quantity_violations = False
        quantity_to_validate = quantity if quantity is not None else candidate.quantity
        if quantity_to_validate <= 0:
            current.append(self.T("ShoppingCart.QuantityShouldPositive"))
            has_quantity_violations = True

        allowed_quantities = p.parse_allowed_quantities()

        min_qty = max(1, allowed_quantities[0] if allowed_quantities else p.order_minimum_quantity)
        if quantity_to_validate < min_qty:
            current.append(self.T("ShoppingCart.MinimumQuantity", min_qty))
            has_quantity_violations = True

        max_qty = max(min_qty, allowed_quantities[-1] if allowed_quantities else p.order_maximum_quantity)
        if quantity_to_validate > max_qty:
            current.append(self.T("ShoppingCart.MaximumQuantity", max_qty))
            has_quantity_violations = True

        if allowed_quantities and quantity_to_validate not in allowed_quantities:
            current.append(self.T("ShoppingCart.AllowedQuantities", ", ".join(str(q) for q in allowed_quantities)))

        # Stock
        validate_stock = (
            cart_type == CartType.SHOPPING_CART or not self.settings.allow_out_of_stock_items_to_be_added_to_wishlist
        )
        if validate_stock and not has_quantity_violations:
            current.extend(self._stock_violations(candidate, p, cart_items, quantity_to_validate))

        # Availability window; a window that has not opened yet hides the end date
        now = datetime.now(UTC)
        invalid_start_date = False
        if p.available_start_date_time_utc is not None and _as_utc(p.available_start_date_time_utc) > now:
            current.append(self.T("ShoppingCart.NotAvailable"))
            invalid_start_date = True

        if (
            p.available_end_date_time_utc is not None
            and not invalid_start_date
            and _as_utc(p.available_end_date_time_utc) < now
        ):
            current.append(self.T("ShoppingCart.NotAvailable"))

        violations.extend(current)
        return not current

    def _stock_violations(self, candidate, product, cart_items, quantity: int) -> list:
        method = product.manage_inventory_method
        single_positions = self.settings.add_products_to_basket_in_single_positions

        if method == ManageInventoryMethod.MANAGE_STOCK:
            if product.effective_value("backorder_mode") != BackorderMode.NO_BACKORDERS:
                return []

            # Per-item priced bundles never merge, so their lines add up like single positions
            if cart_items is not None and (single_positions or (product.is_bundle and product.bundle_per_item_pricing)):
                quantity += self._other_lines_quantity(candidate, product, cart_items)

            return self._stock_message(product.effective_value("stock_quantity"), quantity)

        if method == ManageInventoryMethod.MANAGE_STOCK_BY_ATTRIBUTES:
            selection = candidate.attribute_selection
            combination = self.materializer.find_attribute_combination(product.id, selection)
            if combination is None or combination.allow_out_of_stock_orders:
                return []

            if cart_items is not None and single_positions:
                quantity += self._other_lines_quantity(candidate, product, cart_items, selection)

            return self._stock_message(combination.stock_quantity, quantity)

        return []

    @staticmethod
    def _other_lines_quantity(candidate, product, cart_items, selection=None) -> int:
        total = 0
        for entry in cart_items:
            line = entry.item
            if str(line.product_id) != str(product.id) or line.is_child:
                continue
            if str(line.id) == str(candidate.id):
                continue
            if selection is not None and line.attribute_selection != selection:
                continue
            total += line.quantity
        return total

    def _stock_message(self, stock_quantity: int, quantity: int) -> list:
        if stock_quantity >= quantity:
            return []
        if stock_quantity > 0:
            return [self.T("ShoppingCart.QuantityExceedsStock", stock_quantity)]
        return [self.T("ShoppingCart.OutOfStock")]

    # -------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------
    def validate_product_attributes(
        self,
        product,
        selection,
        store_id: int,
        violations: list,
        quantity: int = 1,
        customer=None,
        bundle_item=None,
        cart_type: CartType = CartType.SHOPPING_CART,
        cart_items=(),
    ) -> bool:
        # Attributes on the bundle itself are rejected by the composer before validation
        if product.is_bundle:
            return True

        # Slots of a bundle priced as a whole carry no attributes
        if (
            bundle_item is not None
            and bundle_item.bundle_product is not None
            and not bundle_item.bundle_product.bundle_per_item_pricing
        ):
            if selection.has_attributes:
                violations.append(self.T("ShoppingCart.Bundle.NoAttributes"))
                return False
            return True

        selected_attributes = self.materializer.materialize_attributes(selection)
        for attribute in selected_attributes:
            if str(attribute.product_id) != str(product.id):
                violations.append(self.T("ShoppingCart.AttributeError"))
                return False

        combination = self.materializer.find_attribute_combination(product.id, selection)
        if (combination is not None and not combination.is_active) or (
            product.attribute_combination_required and combination is None
        ):
            violations.append(self.T("ShoppingCart.NotAvailable"))
            return False

        current = []
        selected_ids = {attribute.id for attribute in selected_attributes}

        for attribute in self.catalog.get_variant_attributes(product.id):
            if not attribute.is_required:
                continue

            found = attribute.id in selected_ids and any(
                value and value.strip() for value in selection.get_attribute_values(attribute.id) or []
            )

            # Attributes filtered away by the bundle slot cannot be chosen by the customer
            if (
                not found
                and bundle_item is not None
                and bundle_item.filter_attributes
                and not any(f.attribute_id == attribute.id for f in bundle_item.attribute_filters)
            ):
                found = True

            if not found:
                current.append(self._attribute_required_violation(attribute.control_type, attribute.display_name))

        if current:
            violations.extend(current)
            return False

        current.extend(self._product_linkage_violations(selection, store_id, quantity, customer, cart_type, cart_items))

        violations.extend(current)
        return not current

    def _product_linkage_violations(self, selection, store_id, quantity, customer, cart_type, cart_items) -> list:
        linkage_values = [
            value
            for value in self.materializer.materialize_values(selection)
            if value.value_type == AttributeValueType.PRODUCT_LINKAGE
        ]
        if not linkage_values:
            return []

        linked_ids = {value.linked_product_id for value in linkage_values if value.linked_product_id}
        linked_products = self.catalog.get_products(linked_ids)

        current = []
        for value in linkage_values:
            linked_product = linked_products.get(value.linked_product_id)
            if linked_product is None:
                current.append(self.T("ShoppingCart.ProductLinkageProductNotLoading", value.linked_product_id))
                continue

            linked_quantity = quantity * value.quantity
            line = CartLineItem(
                customer_id=str(customer.id) if customer else "anonymous",
                store_id=store_id,
                cart_type=cart_type.value,
                product_id=linked_product.id,
                quantity=linked_quantity,
            )

            nested = []
            self._validate_line(line, linked_product, cart_items, nested, customer, store_id, cart_type)

            attribute = self.catalog.get_variant_attribute(value.attribute_id)
            attribute_name = attribute.name if attribute else value.attribute_id
            for violation in nested:
                current.append(self.T("ShoppingCart.ProductLinkageAttributeWarning", attribute_name, value.name, violation))

        return current

    def _attribute_required_violation(self, control_type: AttributeControlType, prompt: str):
        if control_type in _TEXT_CONTROLS:
            return self.T("ShoppingCart.EnterAttributeValue", prompt)
        if control_type == AttributeControlType.FILE_UPLOAD:
            return self.T("ShoppingCart.UploadAttributeFile", prompt)
        return self.T("ShoppingCart.SelectAttribute", prompt)

    # -------------------------------------------------------------------
    # Required products
    # -------------------------------------------------------------------
    def validate_required_products(self, product, cart_items, violations: list) -> bool:
        if product is None:
            raise ValueError("product is required")

        if not product.require_other_products:
            return True

        required_ids = product.parse_required_product_ids()
        if not required_ids:
            return True

        in_cart = {entry.product_id for entry in cart_items}
        missing_ids = [product_id for product_id in required_ids if product_id not in in_cart]
        if not missing_ids:
            return True

        missing_products = self.catalog.get_products(missing_ids)
        for product_id in missing_ids:
            if product_id in missing_products:
                violations.append(self.T("ShoppingCart.RequiredProductWarning", missing_products[product_id].name))

        return not missing_products

    # -------------------------------------------------------------------
    # Composite checks
    # -------------------------------------------------------------------
    def validate_add_to_cart_item(self, request, candidate: CartLineItem, cart_items, violations: list, quantity=None):
        """Product, attribute, gift-card and bundle-slot checks for one prospective line."""
        if request is None or candidate is None or cart_items is None:
            raise ValueError("request, candidate and cart_items are required")

        bundle_item = request.bundle_item
        if bundle_item is None and request.child_items:
            bundle_item = next((child.bundle_item for child in request.child_items if child.bundle_item), None)

        current = []
        self._validate_line(
            candidate,
            request.product,
            cart_items,
            current,
            request.customer,
            request.store_id,
            request.cart_type,
            quantity=quantity,
            bundle_item=request.bundle_item,
        )

        if bundle_item is not None:
            self.validate_bundle_item(bundle_item, current)

        violations.extend(current)
        return not current

    def _validate_line(
        self, line, product, cart_items, violations, customer, store_id, cart_type, quantity=None, bundle_item=None
    ):
        self.validate_product(line, product, cart_items, violations, customer, store_id, quantity)
        if product is None:
            return

        selection = line.attribute_selection
        self.validate_product_attributes(
            product,
            selection,
            store_id,
            violations,
            quantity=quantity if quantity is not None else line.quantity,
            customer=customer,
            bundle_item=bundle_item,
            cart_type=cart_type,
            cart_items=cart_items,
        )
        self.validate_gift_card_info(product, selection, violations)

    def validate_cart(self, cart, violations: list, validate_checkout_attributes: bool = False, checkout_selection=None):
        """Cart-wide checks: loadable products, recurring exclusivity, checkout attributes."""
        if cart is None:
            raise ValueError("cart is required")

        current = []

        missing = next((entry for entry in cart.items if entry.product is None), None)
        if missing is not None:
            current.append(self.T("ShoppingCart.CannotLoadProduct", missing.product_id))

        has_recurring = cart.includes_matching_items(lambda product: product.is_recurring)
        has_non_recurring = cart.includes_matching_items(lambda product: not product.is_recurring)

        if has_recurring and has_non_recurring:
            current.append(self.T("ShoppingCart.CannotMixStandardAndAutoshipProducts"))

        if has_recurring and len(cart.recurring_cycles()) > 1:
            current.append(self.T("ShoppingCart.ConflictingShipmentSchedules"))

        if validate_checkout_attributes:
            if checkout_selection is None:
                state = current_domain.repository_for(CheckoutState).for_customer(cart.customer.id, cart.store_id)
                checkout_selection = state.checkout_attribute_selection if state else CheckoutAttributeSelection()

            current.extend(self._checkout_attribute_violations(cart, checkout_selection))

        violations.extend(current)
        return not current

    def _checkout_attribute_violations(self, cart, checkout_selection) -> list:
        existing = self.catalog.get_checkout_attributes(cart.store_id)
        if not cart.is_shipping_required:
            existing = [attribute for attribute in existing if not attribute.shippable_product_required]

        selected_ids = {attribute.id for attribute in self.checkout_materializer.materialize(checkout_selection)}

        return [
            self.T("ShoppingCart.CheckoutAttributeRequired", attribute.display_name)
            for attribute in existing
            if attribute.is_required and attribute.is_active and attribute.id not in selected_ids
        ]
