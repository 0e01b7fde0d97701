# Overview: Permission system package.
# Re-exports all public APIs for convenient imports.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    USER_PERMISSIONS,
    SHOP_PERMISSIONS,
    WAREHOUSE_PERMISSIONS,
    CATALOG_PERMISSIONS,
    ORDER_PERMISSIONS,
    SHOPPING_PERMISSIONS,
    NOTIFICATION_PERMISSIONS,
)
from .roles import (
    SystemRole,
    ROLE_LABELS,
    ROLE_DESCRIPTIONS,
    ROLE_PERMISSIONS,
    REQUESTABLE_ROLES,
    STAFF_ROLES,
)
from .helpers import (
    AuthorizationResult,
    authorize,
    get_all_permission_codes,
    get_permissions_by_category,
    get_permission_definition,
    get_role_permissions,
    resolve_role,
    validate_permission_code,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "USER_PERMISSIONS",
    "SHOP_PERMISSIONS",
    "WAREHOUSE_PERMISSIONS",
    "CATALOG_PERMISSIONS",
    "ORDER_PERMISSIONS",
    "SHOPPING_PERMISSIONS",
    "NOTIFICATION_PERMISSIONS",
    "SystemRole",
    "ROLE_LABELS",
    "ROLE_DESCRIPTIONS",
    "ROLE_PERMISSIONS",
    "REQUESTABLE_ROLES",
    "STAFF_ROLES",
    "AuthorizationResult",
    "authorize",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "get_permission_definition",
    "get_role_permissions",
    "resolve_role",
    "validate_permission_code",
]
