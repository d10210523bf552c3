"""Catalog port (abstract interface) and the catalog snapshots the cart reads.

The catalog is owned by another context. The cart only ever reads it: products,
bundle-item definitions, variant attributes, attribute combinations and the
store's checkout attributes. Adapters hand out immutable snapshots.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from shoppingcart.shared.attribute_selection import AttributeSelection


class ProductType(Enum):
    SIMPLE = "Simple"
    GROUPED = "Grouped"
    BUNDLED = "Bundled"


class ManageInventoryMethod(Enum):
    DONT_MANAGE_STOCK = "DontManageStock"
    MANAGE_STOCK = "ManageStock"
    MANAGE_STOCK_BY_ATTRIBUTES = "ManageStockByAttributes"


class BackorderMode(Enum):
    NO_BACKORDERS = "NoBackorders"
    ALLOW_QTY_BELOW_ZERO = "AllowQtyBelow0"
    ALLOW_QTY_BELOW_ZERO_AND_NOTIFY = "AllowQtyBelow0AndNotifyCustomer"


class GiftCardType(Enum):
    VIRTUAL = "Virtual"
    PHYSICAL = "Physical"


class RecurringCyclePeriod(Enum):
    DAYS = "Days"
    WEEKS = "Weeks"
    MONTHS = "Months"
    YEARS = "Years"


class AttributeControlType(Enum):
    DROPDOWN_LIST = "DropdownList"
    RADIO_LIST = "RadioList"
    CHECKBOXES = "Checkboxes"
    BOXES = "Boxes"
    TEXTBOX = "TextBox"
    MULTILINE_TEXTBOX = "MultilineTextbox"
    DATEPICKER = "Datepicker"
    FILE_UPLOAD = "FileUpload"

    @property
    def is_list_type(self) -> bool:
        return self in (
            AttributeControlType.DROPDOWN_LIST,
            AttributeControlType.RADIO_LIST,
            AttributeControlType.CHECKBOXES,
            AttributeControlType.BOXES,
        )


class AttributeValueType(Enum):
    SIMPLE = "Simple"
    PRODUCT_LINKAGE = "ProductLinkage"


@dataclass(frozen=True)
class AttributeCombination:
    """A catalog-defined pairing of attribute values with its own stock, price and availability."""

    id: str
    product_id: str
    attributes: dict = field(default_factory=dict, hash=False)
    is_active: bool = True
    stock_quantity: int = 0
    allow_out_of_stock_orders: bool = False
    price: float | None = None

    @property
    def selection(self) -> AttributeSelection:
        return AttributeSelection.from_map(self.attributes)


@dataclass(frozen=True)
class Product:
    """Catalog snapshot of a product.

    ``merged_data`` layers attribute-combination overrides over the stored
    values; read them through ``effective_value``.
    """

    id: str
    name: str
    product_type: ProductType = ProductType.SIMPLE
    price: float = 0.0
    deleted: bool = False
    published: bool = True
    is_system_product: bool = False
    disable_buy_button: bool = False
    disable_wishlist_button: bool = False
    call_for_price: bool = False
    customer_enters_price: bool = False
    minimum_customer_entered_price: float = 0.0
    maximum_customer_entered_price: float = 0.0
    order_minimum_quantity: int = 1
    order_maximum_quantity: int = 10000
    allowed_quantities: str | None = None  # comma separated, e.g. "1, 5, 10"
    manage_inventory_method: ManageInventoryMethod = ManageInventoryMethod.DONT_MANAGE_STOCK
    backorder_mode: BackorderMode = BackorderMode.NO_BACKORDERS
    stock_quantity: int = 0
    available_start_date_time_utc: datetime | None = None
    available_end_date_time_utc: datetime | None = None
    bundle_per_item_pricing: bool = False
    is_gift_card: bool = False
    gift_card_type: GiftCardType = GiftCardType.VIRTUAL
    require_other_products: bool = False
    required_product_ids: str | None = None  # comma separated product ids
    is_download: bool = False
    is_recurring: bool = False
    recurring_cycle_length: int = 100
    recurring_cycle_period: RecurringCyclePeriod = RecurringCyclePeriod.DAYS
    recurring_total_cycles: int = 10
    is_ship_enabled: bool = True
    attribute_combination_required: bool = False
    merged_data: dict = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_bundle(self) -> bool:
        return self.product_type == ProductType.BUNDLED

    @property
    def can_be_bundle_item(self) -> bool:
        return self.product_type == ProductType.SIMPLE and not self.is_download and not self.is_recurring

    def effective_value(self, name: str):
        """Return the overridden value of ``name`` if one is layered on, else the stored one."""
        if name in self.merged_data:
            return self.merged_data[name]
        return getattr(self, name)

    def merged_with(self, combination: AttributeCombination | None) -> "Product":
        if combination is None:
            return self

        overrides = {"stock_quantity": combination.stock_quantity}
        if combination.price is not None:
            overrides["price"] = combination.price
        if combination.allow_out_of_stock_orders:
            overrides["backorder_mode"] = BackorderMode.ALLOW_QTY_BELOW_ZERO
        return replace(self, merged_data={**self.merged_data, **overrides})

    def parse_allowed_quantities(self) -> list[int]:
        if not self.allowed_quantities:
            return []
        quantities = set()
        for part in self.allowed_quantities.split(","):
            part = part.strip()
            if part.isdigit() and int(part) > 0:
                quantities.add(int(part))
        return sorted(quantities)

    def parse_required_product_ids(self) -> list[str]:
        if not self.required_product_ids:
            return []
        ids = []
        for part in self.required_product_ids.split(","):
            part = part.strip()
            if part and part not in ids:
                ids.append(part)
        return ids


@dataclass(frozen=True)
class AttributeValue:
    id: str
    attribute_id: str
    name: str
    price_adjustment: float = 0.0
    value_type: AttributeValueType = AttributeValueType.SIMPLE
    linked_product_id: str | None = None
    quantity: int = 1
    is_preselected: bool = False


@dataclass(frozen=True)
class ProductVariantAttribute:
    """An attribute (color, size, engraving text, ...) offered on a product."""

    id: str
    product_id: str
    name: str
    text_prompt: str | None = None
    is_required: bool = False
    control_type: AttributeControlType = AttributeControlType.DROPDOWN_LIST
    values: tuple[AttributeValue, ...] = ()

    @property
    def display_name(self) -> str:
        return self.text_prompt or self.name


@dataclass(frozen=True)
class AttributeFilter:
    attribute_id: str
    attribute_value_id: str
    is_preselected: bool = False


@dataclass(frozen=True)
class BundleItem:
    """One slot of a bundle product. ``product`` and ``bundle_product`` are
    resolved by the adapter and are None when the catalog cannot load them."""

    id: str
    bundle_product_id: str
    product_id: str
    quantity: int = 1
    name: str | None = None
    discount: float | None = None
    published: bool = True
    visible: bool = True
    display_order: int = 0
    filter_attributes: bool = False
    attribute_filters: tuple[AttributeFilter, ...] = ()
    product: Product | None = field(default=None, compare=False, hash=False)
    bundle_product: Product | None = field(default=None, compare=False, hash=False)

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return self.product.name if self.product else self.product_id


@dataclass(frozen=True)
class CheckoutAttribute:
    id: str
    name: str
    text_prompt: str | None = None
    is_required: bool = False
    is_active: bool = True
    shippable_product_required: bool = False
    control_type: AttributeControlType = AttributeControlType.DROPDOWN_LIST
    store_ids: tuple[int, ...] = ()  # empty means every store

    @property
    def display_name(self) -> str:
        return self.text_prompt or self.name


class Catalog(ABC):
    """Read-only catalog interface."""

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        """Load a product, or None when it does not exist."""
        ...

    @abstractmethod
    def get_products(self, product_ids) -> dict[str, Product]:
        """Load several products keyed by id; unknown ids are left out."""
        ...

    @abstractmethod
    def get_bundle_items(self, bundle_product_id: str) -> list[BundleItem]:
        """All slots of a bundle product in catalog (display) order, hidden ones included."""
        ...

    @abstractmethod
    def get_bundle_item(self, bundle_item_id: str) -> BundleItem | None:
        ...

    @abstractmethod
    def get_variant_attributes(self, product_id: str) -> list[ProductVariantAttribute]:
        ...

    @abstractmethod
    def get_variant_attribute(self, attribute_id: str) -> ProductVariantAttribute | None:
        ...

    @abstractmethod
    def get_attribute_combinations(self, product_id: str) -> list[AttributeCombination]:
        ...

    @abstractmethod
    def get_checkout_attributes(self, store_id: int) -> list[CheckoutAttribute]:
        """Checkout attributes available in a store."""
        ...

    @abstractmethod
    def get_checkout_attribute(self, attribute_id: str) -> CheckoutAttribute | None:
        ...
