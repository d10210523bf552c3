"""Cart composer: adds, merges, copies, organizes and removes cart lines.

A composer is built per unit of work and owns that unit's organized-cart
cache. Every mutation it performs invalidates the affected cache entries.

Adding runs depth-first: required products are courtesy-added first, then
the line is merged into a matching one or validated as a new line, then a
bundle's slots are expanded one by one. Products the slots require are
courtesy-added only after every slot has validated. Each recursive call
returns its own ``AddToCartResult``; nothing of the bundle tree is written
until all of it is known to be valid.
"""

from collections import defaultdict
from dataclasses import replace
from datetime import datetime

import structlog
from protean.utils.globals import current_domain

from shoppingcart.attributes import get_attribute_materializer, get_checkout_attribute_materializer
from shoppingcart.cart.cache import CartCache, cache_key
from shoppingcart.cart.checkout_state import CheckoutState
from shoppingcart.cart.context import AddToCartRequest, AddToCartResult
from shoppingcart.cart.line_item import CartLineItem, CartType
from shoppingcart.cart.messages import Localizer
from shoppingcart.cart.organized import OrganizedCartItem, ShoppingCart
from shoppingcart.cart.validator import CartValidator
from shoppingcart.catalog import get_catalog
from shoppingcart.config import get_settings
from shoppingcart.permissions import get_permission_service
from shoppingcart.shared.attribute_selection import AttributeSelection
from shoppingcart.shared.customer import Customer

logger = structlog.get_logger(__name__)


class CartComposer:
    def __init__(
        self,
        settings=None,
        catalog=None,
        materializer=None,
        checkout_materializer=None,
        permissions=None,
        localizer: Localizer | None = None,
        validator: CartValidator | None = None,
        cache: CartCache | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.catalog = catalog or get_catalog()
        self.materializer = materializer or get_attribute_materializer()
        self.checkout_materializer = checkout_materializer or get_checkout_attribute_materializer()
        self.T = localizer or Localizer()
        self.validator = validator or CartValidator(
            settings=self.settings,
            permissions=permissions or get_permission_service(),
            materializer=self.materializer,
            checkout_materializer=self.checkout_materializer,
            catalog=self.catalog,
            localizer=self.T,
        )
        self.cache = cache if cache is not None else CartCache()

    @property
    def store(self):
        return current_domain.repository_for(CartLineItem)

    @property
    def checkout_states(self):
        return current_domain.repository_for(CheckoutState)

    def _store_id(self, store_id: int | None) -> int:
        return store_id or self.settings.default_store_id

    # -------------------------------------------------------------------
    # Add to cart
    # -------------------------------------------------------------------
    def add_to_cart(self, request: AddToCartRequest) -> AddToCartResult:
        if request is None:
            raise ValueError("request is required")

        result = self._add_to_cart(request)

        log = logger.bind(
            customer_id=request.customer.id,
            store_id=request.store_id,
            cart_type=request.cart_type.value,
            product_id=request.product.id,
        )
        if result.accepted:
            log.info(
                "Cart item merged" if result.merged else "Cart item added",
                item_id=str(result.item.id),
                quantity=result.item.quantity,
                child_count=len(result.children),
            )
        else:
            log.info("Add to cart rejected", violation_count=len(result.violations))
        return result

    def _add_to_cart(self, request: AddToCartRequest, staged_children=()) -> AddToCartResult:
        customer = request.customer
        product = request.product
        request.store_id = self._store_id(request.store_id)
        violations = []

        if customer.is_bot:
            return AddToCartResult.rejected([self.T("Common.Error.BotsNotPermitted")])

        self.reset_checkout_data(customer.id, request.store_id)

        if request.variant_query is not None:
            request.raw_attributes = self._selection_from_query(request).as_json()

        if product.is_bundle and request.attribute_selection.has_attributes:
            violations.append(self.T("ShoppingCart.Bundle.NoAttributes"))
            if request.is_bundle_slot:
                return AddToCartResult.rejected(violations)

        if not self.validator.validate_access_permissions(customer, request.cart_type, violations):
            return AddToCartResult.rejected(violations)

        cart = self.get_cart(customer, request.cart_type, request.store_id)

        if request.add_required_products and product.require_other_products:
            cart = self._add_required_products(request, cart, violations)

        # Bundle children are checked for required products once the whole tree is valid
        if not request.is_bundle_slot:
            self.validator.validate_required_products(product, cart.items, violations)

        existing = None
        if not request.is_bundle_slot and not self.settings.add_products_to_basket_in_single_positions:
            existing = self.find_item_in_cart(
                cart, request.cart_type, product, request.attribute_selection, request.customer_entered_price
            )

        if existing is not None:
            return self._merge_into(existing.item, request, cart, violations)

        if not request.is_bundle_slot and not self.validator.validate_cart_size(
            request.cart_type, len(cart.items), violations
        ):
            return AddToCartResult.rejected(violations)

        candidate = CartLineItem.create(
            customer_id=customer.id,
            store_id=request.store_id,
            cart_type=request.cart_type.value,
            product_id=product.id,
            quantity=request.quantity,
            raw_attributes=request.raw_attributes,
            customer_entered_price=request.customer_entered_price,
            bundle_item_id=request.bundle_item.id if request.bundle_item else None,
        )
        self.validator.validate_add_to_cart_item(request, candidate, cart.items, violations)
        if violations:
            return AddToCartResult.rejected(violations)

        if request.is_bundle_slot:
            # Staged only; the top-level request persists it with its parent
            return AddToCartResult(item=candidate)

        children = list(staged_children)
        if product.is_bundle and request.add_bundle_items:
            slot_violations, expanded = self._expand_bundle(request)
            if slot_violations:
                return AddToCartResult.rejected(slot_violations)
            children.extend(expanded)

        if children:
            slot_violations = self._complete_child_requirements(request, children)
            if slot_violations:
                return AddToCartResult.rejected(slot_violations)

        self.store.add(candidate)
        if children:
            self.store.add_children(candidate.id, children)
        self.cache.invalidate(customer.id, request.cart_type, request.store_id)

        return AddToCartResult(item=candidate, children=children)

    def _selection_from_query(self, request: AddToCartRequest) -> AttributeSelection:
        product = request.product
        bundle_item_id = request.bundle_item.id if request.bundle_item else None

        selection, warnings = self.materializer.create_selection_from_query(
            request.variant_query,
            self.catalog.get_variant_attributes(product.id),
            product.id,
            bundle_item_id,
        )
        if warnings:
            logger.debug("Ignored variant query values", product_id=product.id, warnings=warnings)

        if product.is_gift_card:
            selection.gift_card = request.variant_query.gift_card_info(product.id, bundle_item_id)
        return selection

    def _merge_into(self, line: CartLineItem, request: AddToCartRequest, cart: ShoppingCart, violations):
        new_quantity = line.quantity + request.quantity

        # Validate a detached copy so that a rejected merge leaves the stored line untouched
        candidate = CartLineItem(
            id=line.id,
            customer_id=line.customer_id,
            store_id=line.store_id,
            cart_type=line.cart_type,
            product_id=line.product_id,
            quantity=line.quantity,
            raw_attributes=request.raw_attributes,
            customer_entered_price=line.customer_entered_price,
            bundle_item_id=line.bundle_item_id,
        )
        self.validator.validate_add_to_cart_item(request, candidate, cart.items, violations, quantity=new_quantity)
        if violations:
            return AddToCartResult.rejected(violations)

        self.store.update_quantity(line, new_quantity, raw_attributes=request.raw_attributes)
        self.cache.invalidate(line.customer_id, request.cart_type, line.store_id)
        return AddToCartResult(item=line, merged=True)

    def _add_required_products(self, request: AddToCartRequest, cart: ShoppingCart, violations) -> ShoppingCart:
        """Courtesy-add the required products missing from the cart. Returns the refreshed cart."""
        in_cart = cart.product_ids()
        missing_ids = [pid for pid in request.product.parse_required_product_ids() if pid not in in_cart]
        if not missing_ids:
            return cart

        missing_products = self.catalog.get_products(missing_ids)
        for product_id in missing_ids:
            required = missing_products.get(product_id)
            if required is None:
                continue

            result = self._add_to_cart(
                AddToCartRequest(
                    customer=request.customer,
                    product=required,
                    cart_type=request.cart_type,
                    store_id=request.store_id,
                    quantity=1,
                    selection=self._preselected_selection(required),
                    add_required_products=False,
                )
            )
            if not result.accepted:
                violations.extend(result.violations)

        return self.get_cart(request.customer, request.cart_type, request.store_id)

    def _complete_child_requirements(self, request: AddToCartRequest, children) -> list:
        """Courtesy-add and then check the products that staged bundle children require."""
        violations = []
        products = self.catalog.get_products({child.product_id for child in children})
        requiring = [
            products[child.product_id]
            for child in children
            if child.product_id in products and products[child.product_id].require_other_products
        ]
        if not requiring:
            return violations

        cart = self.get_cart(request.customer, request.cart_type, request.store_id)
        for product in requiring:
            if request.add_required_products:
                cart = self._add_required_products(replace(request, product=product), cart, violations)
            self.validator.validate_required_products(product, cart.items, violations)
        return violations

    def _preselected_selection(self, product) -> AttributeSelection:
        selection = AttributeSelection()
        attributes = [
            attribute
            for attribute in self.catalog.get_variant_attributes(product.id)
            if attribute.is_required and attribute.control_type.is_list_type
        ]
        for attribute in sorted(attributes, key=lambda a: a.id):
            preselected = [value.id for value in attribute.values if value.is_preselected]
            if preselected:
                selection.add_attribute(attribute.id, preselected)
        return selection

    def _expand_bundle(self, request: AddToCartRequest):
        """Stage one child line per bundle slot. Stops at the first rejected slot.

        Returns ``(violations, staged children)``; children are meaningless when
        violations are present.
        """
        staged = []
        for bundle_item in self.catalog.get_bundle_items(request.product.id):
            bundle_item = replace(bundle_item, bundle_product=request.product)

            if bundle_item.product is None:
                slot_violations = []
                self.validator.validate_bundle_item(bundle_item, slot_violations)
                return slot_violations, []

            result = self._add_to_cart(
                AddToCartRequest(
                    customer=request.customer,
                    product=bundle_item.product,
                    cart_type=request.cart_type,
                    store_id=request.store_id,
                    quantity=bundle_item.quantity,
                    raw_attributes=request.raw_attributes,
                    variant_query=request.variant_query,
                    customer_entered_price=request.customer_entered_price,
                    bundle_item=bundle_item,
                    add_required_products=False,
                )
            )
            if not result.accepted:
                return result.violations, []
            staged.append(result.item)

        return [], staged

    # -------------------------------------------------------------------
    # Copy
    # -------------------------------------------------------------------
    def copy(self, request: AddToCartRequest) -> AddToCartResult:
        """Add a copy of an existing line, carrying its bundle children in ``request.child_items``.

        Any failing child rejects the copy unless ``best_effort_cart_copy`` is
        set, in which case the accepted children are kept, the parent is still
        attempted and the violations of the dropped children are reported in
        ``skipped_children``.
        """
        if request is None:
            raise ValueError("request is required")

        staged = []
        violations = []
        for child in request.child_items:
            if child.product is None or child.bundle_item is None:
                violations.append(self.T("ShoppingCart.CannotLoadProduct", child.product_id))
                continue

            result = self._add_to_cart(
                AddToCartRequest(
                    customer=request.customer,
                    product=child.product,
                    cart_type=request.cart_type,
                    store_id=request.store_id,
                    quantity=child.quantity,
                    raw_attributes=child.item.raw_attributes,
                    customer_entered_price=child.item.customer_entered_price or 0.0,
                    bundle_item=child.bundle_item,
                    add_required_products=False,
                )
            )
            if result.accepted:
                staged.append(result.item)
            else:
                violations.extend(result.violations)

        if violations and not self.settings.best_effort_cart_copy:
            logger.info("Cart item copy rejected", customer_id=request.customer.id, violation_count=len(violations))
            return AddToCartResult.rejected(violations)

        parent_request = replace(request, child_items=[], add_bundle_items=not request.child_items)
        result = self._add_to_cart(parent_request, staged_children=staged)
        if result.accepted:
            result.skipped_children = violations
        else:
            result.violations = violations + result.violations
        return result

    # -------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------
    def find_item_in_cart(
        self,
        cart: ShoppingCart,
        cart_type: CartType,
        product,
        selection: AttributeSelection | None = None,
        customer_entered_price: float | None = None,
    ) -> OrganizedCartItem | None:
        """The top-level line that an add of ``product`` would merge into, if any."""
        if cart is None or product is None:
            raise ValueError("cart and product are required")

        # Per-item priced bundles are too complex to compare
        if product.is_bundle and product.bundle_per_item_pricing:
            return None

        for entry in cart.items:
            line = entry.item
            if not line.matches(cart_type, cart.store_id) or line.is_child:
                continue
            if str(line.product_id) != str(product.id):
                continue
            if entry.product is not None and entry.product.product_type != product.product_type:
                continue

            line_selection = line.attribute_selection
            if line_selection != selection:
                continue

            if product.is_gift_card:
                info1 = line_selection.gift_card
                info2 = selection.gift_card if selection is not None else None
                if info1 is not None and info2 is not None and (
                    (info1.recipient_name or "").casefold() != (info2.recipient_name or "").casefold()
                    or (info1.sender_name or "").casefold() != (info2.sender_name or "").casefold()
                ):
                    continue

            # A system product may only be placed once, whatever the entered price
            if customer_entered_price is not None and product.customer_enters_price and not product.is_system_product:
                if round(line.customer_entered_price or 0.0, 2) != round(customer_entered_price, 2):
                    continue

            return entry

        return None

    def get_cart(
        self,
        customer: Customer,
        cart_type: CartType = CartType.SHOPPING_CART,
        store_id: int | None = None,
        active_only: bool | None = True,
    ) -> ShoppingCart:
        if customer is None:
            raise ValueError("customer is required")

        store_id = self._store_id(store_id)
        if not self.settings.allow_activatable_cart_items:
            active_only = None

        key = cache_key(customer.id, cart_type, store_id, active_only)
        return self.cache.get_or_load(key, lambda: self._load_cart(customer, cart_type, store_id, active_only))

    def _load_cart(self, customer, cart_type, store_id, active_only) -> ShoppingCart:
        lines = self.store.items_for(customer.id, cart_type, store_id)
        if active_only is not None:
            lines = [line for line in lines if bool(line.active) == active_only]

        self.materializer.prefetch([line.attribute_selection for line in lines])
        return ShoppingCart(customer, store_id, cart_type, self.organize_cart_items(lines))

    def organize_cart_items(self, lines) -> list[OrganizedCartItem]:
        """Turn flat line items into one tree per top-level line."""
        lines = list(lines or [])
        if not lines:
            return []

        products = self.catalog.get_products({str(line.product_id) for line in lines})

        children_of = defaultdict(list)
        for line in lines:
            if line.is_child:
                children_of[str(line.parent_item_id)].append(line)

        organized = []
        for parent in lines:
            if parent.is_child:
                continue

            parent_product = products.get(str(parent.product_id))
            entry = self._organized(parent, parent_product)

            for child in children_of.get(str(parent.id), []):
                if str(child.id) == str(parent.id) or not child.matches(CartType(parent.cart_type)):
                    continue

                child_product = products.get(str(child.product_id))
                if child_product is None or not child_product.can_be_bundle_item:
                    continue

                child_entry = self._organized(child, child_product, self.catalog.get_bundle_item(child.bundle_item_id))

                if (
                    child.raw_attributes
                    and parent_product is not None
                    and parent_product.bundle_per_item_pricing
                    and child.bundle_item_id
                ):
                    selection = child.attribute_selection
                    child_entry.product = self.materializer.merge_with_combination(child_product, selection)
                    child_entry.additional_charge += sum(
                        value.price_adjustment for value in self.materializer.materialize_values(selection)
                    )

                entry.children.append(child_entry)

            organized.append(entry)

        return organized

    def _organized(self, line, product, bundle_item=None) -> OrganizedCartItem:
        return OrganizedCartItem(
            item=line,
            product=product,
            bundle_item=bundle_item,
            active=not self.settings.allow_activatable_cart_items or bool(line.active),
        )

    def count_products_in_cart(
        self,
        customer: Customer,
        cart_type: CartType = CartType.SHOPPING_CART,
        store_id: int | None = None,
        active_only: bool | None = True,
    ) -> int:
        if customer is None:
            raise ValueError("customer is required")

        store_id = self._store_id(store_id)
        if not self.settings.allow_activatable_cart_items:
            active_only = None

        cached = self.cache.get(cache_key(customer.id, cart_type, store_id, active_only))
        if cached is not None:
            return cached.total_quantity()

        return sum(
            line.quantity
            for line in self.store.items_for(customer.id, cart_type, store_id)
            if not line.is_child and (active_only is None or bool(line.active) == active_only)
        )

    # -------------------------------------------------------------------
    # Updating
    # -------------------------------------------------------------------
    def update_cart_item(
        self,
        customer: Customer,
        item_id,
        quantity: int | None = None,
        active: bool | None = None,
        reset_checkout_data: bool = False,
    ) -> list:
        """Change quantity or active flag of a top-level line.

        A quantity of zero or less deletes the line. Otherwise the change is
        stored even when the line no longer validates; the violations are
        returned so the caller can show them.
        """
        if customer is None:
            raise ValueError("customer is required")

        line = next(
            (
                line
                for line in self.store.items_for(customer.id)
                if str(line.id) == str(item_id) and not line.is_child
            ),
            None,
        )
        if line is None:
            return []

        if quantity is not None and quantity <= 0:
            self.delete_cart_item(line, reset_checkout_data=reset_checkout_data, remove_invalid_checkout_attributes=True)
            return []

        if reset_checkout_data:
            self.reset_checkout_data(customer.id, line.store_id)

        cart_type = CartType(line.cart_type)
        cart = self.get_cart(customer, cart_type, line.store_id)

        line.change_quantity(quantity if quantity is not None else line.quantity, active=active)

        violations = []
        product = self.catalog.get_product(line.product_id)
        if product is None:
            violations.append(self.T("ShoppingCart.CannotLoadProduct", line.product_id))
        else:
            request = AddToCartRequest(
                customer=customer,
                product=product,
                cart_type=cart_type,
                store_id=line.store_id,
                quantity=line.quantity,
                raw_attributes=line.raw_attributes,
                customer_entered_price=line.customer_entered_price or 0.0,
                add_required_products=False,
            )
            self.validator.validate_add_to_cart_item(request, line, cart.items, violations)

        self.store.add(line)
        self.cache.invalidate(customer.id, cart_type, line.store_id)

        logger.info(
            "Cart item updated",
            customer_id=customer.id,
            store_id=line.store_id,
            cart_type=cart_type.value,
            item_id=str(line.id),
            quantity=line.quantity,
            violation_count=len(violations),
        )
        return violations

    def reset_checkout_data(self, customer_id, store_id: int) -> None:
        repo = self.checkout_states
        state = repo.for_customer(customer_id, store_id)
        if state is not None and state.reset():
            repo.add(state)

    def save_cart_data(
        self,
        cart: ShoppingCart,
        checkout_selection=None,
        use_reward_points: bool | None = None,
        reset_checkout_data: bool = True,
        validate_checkout_attributes: bool = True,
    ) -> list:
        """Store the customer's checkout choices, then validate the whole cart."""
        if cart is None:
            raise ValueError("cart is required")

        if cart.customer.is_bot:
            return [self.T("Common.Error.BotsNotPermitted")]

        if reset_checkout_data:
            self.reset_checkout_data(cart.customer.id, cart.store_id)

        repo = self.checkout_states
        state = repo.get_or_create(cart.customer.id, cart.store_id)
        if checkout_selection is not None:
            state.store_checkout_attributes(checkout_selection)
        if use_reward_points is not None:
            state.use_reward_points = use_reward_points
        repo.add(state)

        violations = []
        self.validator.validate_cart(
            cart,
            violations,
            validate_checkout_attributes,
            checkout_selection=state.checkout_attribute_selection,
        )
        return violations

    # -------------------------------------------------------------------
    # Deleting
    # -------------------------------------------------------------------
    def delete_cart_item(
        self, line: CartLineItem, reset_checkout_data: bool = True, remove_invalid_checkout_attributes: bool = False
    ) -> int:
        if line is None:
            raise ValueError("line is required")
        return self.delete_cart_items([line], reset_checkout_data, remove_invalid_checkout_attributes)

    def delete_cart_items(
        self, lines, reset_checkout_data: bool = True, remove_invalid_checkout_attributes: bool = False
    ) -> int:
        """Delete ``lines`` and every child of them that is not itself in ``lines``. Returns the count removed."""
        lines = list(lines)
        if not lines:
            return 0

        ids = [line.id for line in lines]
        removed = self.store.remove_items(lines)
        removed += self.store.remove_children_of(ids, exclude_ids=ids)
        self._after_delete(lines, reset_checkout_data, remove_invalid_checkout_attributes)

        logger.info("Cart items deleted", customer_ids=sorted({str(line.customer_id) for line in lines}), removed=removed)
        return removed

    def delete_cart(
        self, cart: ShoppingCart, reset_checkout_data: bool = True, remove_invalid_checkout_attributes: bool = False
    ) -> int:
        """Delete every line of ``cart`` including bundle children. Returns the count removed."""
        if cart is None:
            raise ValueError("cart is required")

        lines = cart.line_items()
        removed = self.store.remove_items(lines)
        # Children the organized tree left out (unloadable or retired products) go too
        removed += self.store.remove_children_of(
            [line.id for line in lines if not line.is_child], exclude_ids=[line.id for line in lines]
        )
        self.cache.invalidate(cart.customer.id, cart.cart_type, cart.store_id)
        self._after_delete(lines, reset_checkout_data, remove_invalid_checkout_attributes)

        logger.info(
            "Cart deleted",
            customer_id=cart.customer.id,
            store_id=cart.store_id,
            cart_type=cart.cart_type.value,
            removed=removed,
        )
        return removed

    def _after_delete(self, lines, reset_checkout_data: bool, remove_invalid_checkout_attributes: bool) -> None:
        scopes = {(str(line.customer_id), CartType(line.cart_type), line.store_id) for line in lines}

        for customer_id, cart_type, store_id in scopes:
            self.cache.invalidate(customer_id, cart_type, store_id)

        for customer_id, store_id in {(customer_id, store_id) for customer_id, _, store_id in scopes}:
            if reset_checkout_data:
                self.reset_checkout_data(customer_id, store_id)

        if remove_invalid_checkout_attributes:
            for customer_id, cart_type, store_id in scopes:
                if cart_type == CartType.SHOPPING_CART:
                    self.remove_invalid_checkout_attributes(Customer(id=customer_id), store_id)

    def remove_invalid_checkout_attributes(self, customer: Customer, store_id: int) -> int:
        """Drop inactive checkout attributes, and shipping ones when nothing in the cart ships."""
        repo = self.checkout_states
        state = repo.for_customer(customer.id, store_id)
        if state is None:
            return 0

        selection = state.checkout_attribute_selection
        if not selection.has_attributes:
            return 0

        attributes = self.checkout_materializer.materialize(selection)
        cart = self.get_cart(customer, CartType.SHOPPING_CART, store_id)

        to_remove = {attribute.id for attribute in attributes if not attribute.is_active}
        if not cart.is_shipping_required:
            to_remove.update(attribute.id for attribute in attributes if attribute.shippable_product_required)

        if to_remove:
            selection.remove_attributes(to_remove)
            state.store_checkout_attributes(selection)
            repo.add(state)

        return len(to_remove)

    def delete_expired_cart_items(self, older_than_utc: datetime, customer_id=None) -> int:
        """Delete top-level lines (and their children) not updated since ``older_than_utc``."""
        if older_than_utc is None:
            raise ValueError("older_than_utc is required")

        expired = [line for line in self.store.updated_before(older_than_utc, customer_id) if not line.is_child]
        if not expired:
            return 0

        ids = [line.id for line in expired]
        self.store.remove_children_of(ids, exclude_ids=ids)
        self.store.remove_items(expired)

        for scope in {(str(line.customer_id), CartType(line.cart_type), line.store_id) for line in expired}:
            self.cache.invalidate(*scope)

        logger.info("Expired cart items deleted", older_than=older_than_utc.isoformat(), count=len(expired))
        return len(expired)

    # -------------------------------------------------------------------
    # Migration
    # -------------------------------------------------------------------
    def migrate_cart(self, from_customer: Customer, to_customer: Customer) -> bool:
        """Move every line of ``from_customer`` to ``to_customer``, e.g. after a guest logs in.

        Returns False when nothing was migrated or when any line failed to copy.
        The source cart is deleted either way.
        """
        if from_customer is None or to_customer is None:
            raise ValueError("from_customer and to_customer are required")

        if str(from_customer.id) == str(to_customer.id) or to_customer.is_bot:
            return False

        organized = self.organize_cart_items(self.store.items_for(from_customer.id))
        if not organized:
            return False

        succeeded = True
        for entry in organized:
            line = entry.item
            if entry.product is None:
                succeeded = False
                continue

            result = self.copy(
                AddToCartRequest(
                    customer=to_customer,
                    product=entry.product,
                    cart_type=CartType(line.cart_type),
                    store_id=line.store_id,
                    quantity=line.quantity,
                    raw_attributes=line.raw_attributes,
                    customer_entered_price=line.customer_entered_price or 0.0,
                    child_items=entry.children,
                )
            )
            if not result.accepted or result.skipped_children:
                succeeded = False

        first = organized[0].item
        source = ShoppingCart(from_customer, first.store_id, CartType(first.cart_type), organized)
        self.delete_cart(source)

        logger.info(
            "Cart migrated",
            from_customer_id=from_customer.id,
            to_customer_id=to_customer.id,
            line_count=len(organized),
            succeeded=succeeded,
        )
        return succeeded
