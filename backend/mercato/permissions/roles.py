# Overview: The fixed role enumeration and its role -> permission lookup table.

from enum import IntEnum


class SystemRole(IntEnum):
    """Roles with the ids they are stored under in the roles table."""
    DEVELOPER = 1
    PLATFORM_ADMIN = 2
    OPERATIONS_ADMIN = 3
    RETAILER = 4
    MERCHANT = 5
    SUPPLIER = 6
    COURIER = 7
    CUSTOMER = 8

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "SystemRole | None":
        for role, name in ROLE_LABELS.items():
            if name == label:
                return role
        return None


ROLE_LABELS = {
    SystemRole.DEVELOPER: "Developer",
    SystemRole.PLATFORM_ADMIN: "PlatformAdmin",
    SystemRole.OPERATIONS_ADMIN: "OperationsAdmin",
    SystemRole.RETAILER: "Retailer",
    SystemRole.MERCHANT: "Merchant",
    SystemRole.SUPPLIER: "Supplier",
    SystemRole.COURIER: "Courier",
    SystemRole.CUSTOMER: "Customer",
}

ROLE_DESCRIPTIONS = {
    SystemRole.DEVELOPER: "Platform developer; reviews role requests and staff accounts",
    SystemRole.PLATFORM_ADMIN: "Approves shops and warehouses",
    SystemRole.OPERATIONS_ADMIN: "Runs order fulfilment and the category catalog",
    SystemRole.RETAILER: "Owns shops and restocks them from warehouses",
    SystemRole.MERCHANT: "Owns shops and restocks them from warehouses",
    SystemRole.SUPPLIER: "Owns one warehouse and its products",
    SystemRole.COURIER: "Delivery partner",
    SystemRole.CUSTOMER: "Buys from shops and warehouses",
}

# Roles a user may ask to be promoted into
REQUESTABLE_ROLES = frozenset({
    SystemRole.RETAILER,
    SystemRole.MERCHANT,
    SystemRole.SUPPLIER,
    SystemRole.COURIER,
    SystemRole.CUSTOMER,
})

# Roles that only staff can hand out via account creation
STAFF_ROLES = frozenset({
    SystemRole.DEVELOPER,
    SystemRole.PLATFORM_ADMIN,
    SystemRole.OPERATIONS_ADMIN,
})


_EVERYONE = [
    "MANAGE_OWN_PROFILE",
    "REQUEST_ROLE",
    "VIEW_PRODUCTS",
    "PLACE_ORDER",
    "REQUEST_WAREHOUSE_ORDER",
    "CANCEL_ORDER",
    "USE_CART",
    "USE_WISHLIST",
    "VIEW_NOTIFICATIONS",
]

_ADMIN_READS = [
    "VIEW_USERS",
    "VIEW_ALL_ORDERS",
]

_SHOP_OWNER = _EVERYONE + [
    "MANAGE_SHOP",
    "MANAGE_SHOP_PRODUCTS",
    "CREATE_WAREHOUSE_ORDER",
    "RESTOCK_SHOP",
]


ROLE_PERMISSIONS: dict[SystemRole, frozenset[str]] = {
    SystemRole.DEVELOPER: frozenset(_EVERYONE + _ADMIN_READS + [
        "CREATE_STAFF_USERS",
        "VIEW_USER_DETAILS",
        "REVIEW_ROLE_REQUESTS",
        "APPROVE_SHOPS",
        "APPROVE_WAREHOUSES",
        "MANAGE_CATEGORIES",
    ]),
    SystemRole.PLATFORM_ADMIN: frozenset(_EVERYONE + _ADMIN_READS + [
        "CREATE_STAFF_USERS",
        "APPROVE_SHOPS",
        "APPROVE_WAREHOUSES",
        "MANAGE_CATEGORIES",
    ]),
    SystemRole.OPERATIONS_ADMIN: frozenset(_EVERYONE + _ADMIN_READS + [
        "CREATE_STAFF_USERS",
        "MANAGE_CATEGORIES",
        "UPDATE_ORDER_STATUS",
        "APPROVE_ORDER_REQUESTS",
    ]),
    SystemRole.RETAILER: frozenset(_SHOP_OWNER),
    SystemRole.MERCHANT: frozenset(_SHOP_OWNER),
    SystemRole.SUPPLIER: frozenset(_EVERYONE + [
        "MANAGE_WAREHOUSE",
        "MANAGE_WAREHOUSE_PRODUCTS",
        "CREATE_WAREHOUSE_ORDER",
        "APPROVE_ORDER_REQUESTS",
    ]),
    SystemRole.COURIER: frozenset(_EVERYONE),
    SystemRole.CUSTOMER: frozenset(_EVERYONE + [
        "CREATE_WAREHOUSE_ORDER",
    ]),
}
