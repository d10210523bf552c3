"""Permission service factory.

Provides get_permission_service() / set_permission_service() to swap
implementations. Defaults to FakePermissionService, which grants everything.
"""

from shoppingcart.permissions.fake_adapter import FakePermissionService
from shoppingcart.permissions.port import PermissionService, Permissions

__all__ = ["Permissions", "get_permission_service", "set_permission_service", "reset_permission_service"]

_current_service: PermissionService | None = None


def get_permission_service() -> PermissionService:
    """Return the current permission service. Defaults to FakePermissionService."""
    global _current_service
    if _current_service is None:
        _current_service = FakePermissionService()
    return _current_service


def set_permission_service(service: PermissionService) -> None:
    """Override the active permission service (useful for tests)."""
    global _current_service
    _current_service = service


def reset_permission_service() -> None:
    """Reset to default permission service."""
    global _current_service
    _current_service = None
