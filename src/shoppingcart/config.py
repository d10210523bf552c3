"""Shopping cart settings.

Values are read from ``CART_``-prefixed environment variables (or a ``.env``
file) and can be swapped at runtime with ``set_settings()``, which is what the
test-suite does.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CartSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CART_", env_file=".env", extra="ignore")

    # Ceilings on distinct top-level lines, per cart type
    maximum_shopping_cart_items: int = Field(default=1000, ge=0)
    maximum_wishlist_items: int = Field(default=1000, ge=0)

    # Never merge: every add creates its own line
    add_products_to_basket_in_single_positions: bool = False

    allow_out_of_stock_items_to_be_added_to_wishlist: bool = False

    # Honour the per-line ``active`` flag when reading carts
    allow_activatable_cart_items: bool = False

    # Copy keeps the accepted bundle children when some of them fail
    best_effort_cart_copy: bool = False

    default_store_id: int = 1

    @field_validator("default_store_id")
    @classmethod
    def store_id_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("default_store_id must be a positive store id")
        return v


_current_settings: CartSettings | None = None


def get_settings() -> CartSettings:
    """Return the active cart settings, loading them from the environment on first use."""
    global _current_settings
    if _current_settings is None:
        _current_settings = CartSettings()
    return _current_settings


def set_settings(settings: CartSettings) -> None:
    """Override the active settings (useful for tests)."""
    global _current_settings
    _current_settings = settings


def reset_settings() -> None:
    """Drop overrides; the next ``get_settings()`` reloads from the environment."""
    global _current_settings
    _current_settings = None
