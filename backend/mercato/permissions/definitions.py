# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- USERS --

USER_PERMISSIONS = [
    (
        "MANAGE_OWN_PROFILE",
        "Manage Own Profile",
        "Edit own account, profile, password and avatar",
        PermissionCategory.USERS,
    ),
    (
        "CREATE_STAFF_USERS",
        "Create Staff Users",
        "Create PlatformAdmin, OperationsAdmin and Developer accounts",
        PermissionCategory.USERS,
    ),
    (
        "VIEW_USERS",
        "View Users",
        "List non-developer user accounts",
        PermissionCategory.USERS,
    ),
    (
        "VIEW_USER_DETAILS",
        "View User Details",
        "Read any single user and the developer roster",
        PermissionCategory.USERS,
    ),
    (
        "REQUEST_ROLE",
        "Request Role",
        "Ask for a role upgrade",
        PermissionCategory.USERS,
    ),
    (
        "REVIEW_ROLE_REQUESTS",
        "Review Role Requests",
        "List, approve and reject role requests",
        PermissionCategory.USERS,
    ),
]


# -- SHOPS --

SHOP_PERMISSIONS = [
    (
        "MANAGE_SHOP",
        "Manage Shop",
        "Create, edit and delete own shops",
        PermissionCategory.SHOPS,
    ),
    (
        "APPROVE_SHOPS",
        "Approve Shops",
        "List pending shops and approve or reject them",
        PermissionCategory.SHOPS,
    ),
]


# -- WAREHOUSES --

WAREHOUSE_PERMISSIONS = [
    (
        "MANAGE_WAREHOUSE",
        "Manage Warehouse",
        "Create, edit and delete own warehouse",
        PermissionCategory.WAREHOUSES,
    ),
    (
        "APPROVE_WAREHOUSES",
        "Approve Warehouses",
        "List pending warehouses and approve or reject them",
        PermissionCategory.WAREHOUSES,
    ),
]


# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        "VIEW_PRODUCTS",
        "View Products",
        "Browse products and categories",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_SHOP_PRODUCTS",
        "Manage Shop Products",
        "Create, edit and delete products of own shops",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_WAREHOUSE_PRODUCTS",
        "Manage Warehouse Products",
        "Create, edit and delete products of own warehouse",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_CATEGORIES",
        "Manage Categories",
        "Create, rename, renumber and delete categories",
        PermissionCategory.CATALOG,
    ),
]


# -- ORDERS --

ORDER_PERMISSIONS = [
    (
        "PLACE_ORDER",
        "Place Order",
        "Buy a product from an approved shop",
        PermissionCategory.ORDERS,
    ),
    (
        "CREATE_WAREHOUSE_ORDER",
        "Create Warehouse Order",
        "Buy directly from an approved warehouse",
        PermissionCategory.ORDERS,
    ),
    (
        "RESTOCK_SHOP",
        "Restock Shop",
        "Place or request warehouse orders on behalf of an owned shop",
        PermissionCategory.ORDERS,
    ),
    (
        "REQUEST_WAREHOUSE_ORDER",
        "Request Warehouse Order",
        "Request warehouse stock without reserving it",
        PermissionCategory.ORDERS,
    ),
    (
        "CANCEL_ORDER",
        "Cancel Order",
        "Cancel an open order the caller placed",
        PermissionCategory.ORDERS,
    ),
    (
        "APPROVE_ORDER_REQUESTS",
        "Approve Order Requests",
        "Approve or reject requests against a warehouse",
        PermissionCategory.ORDERS,
    ),
    (
        "UPDATE_ORDER_STATUS",
        "Update Order Status",
        "Move any order through the fulfilment flow",
        PermissionCategory.ORDERS,
    ),
    (
        "VIEW_ALL_ORDERS",
        "View All Orders",
        "List and read every order in the system",
        PermissionCategory.ORDERS,
    ),
]


# -- SHOPPING --

SHOPPING_PERMISSIONS = [
    (
        "USE_CART",
        "Use Cart",
        "Add, change and remove cart items",
        PermissionCategory.SHOPPING,
    ),
    (
        "USE_WISHLIST",
        "Use Wishlist",
        "Add and remove wishlist items",
        PermissionCategory.SHOPPING,
    ),
]


# -- NOTIFICATIONS --

NOTIFICATION_PERMISSIONS = [
    (
        "VIEW_NOTIFICATIONS",
        "View Notifications",
        "Read own notifications",
        PermissionCategory.NOTIFICATIONS,
    ),
]


PERMISSION_DEFINITIONS = (
    USER_PERMISSIONS
    + SHOP_PERMISSIONS
    + WAREHOUSE_PERMISSIONS
    + CATALOG_PERMISSIONS
    + ORDER_PERMISSIONS
    + SHOPPING_PERMISSIONS
    + NOTIFICATION_PERMISSIONS
)
