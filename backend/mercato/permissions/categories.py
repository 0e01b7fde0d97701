# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and CLI display."""
    USERS = "USERS"
    SHOPS = "SHOPS"
    WAREHOUSES = "WAREHOUSES"
    CATALOG = "CATALOG"
    ORDERS = "ORDERS"
    SHOPPING = "SHOPPING"
    NOTIFICATIONS = "NOTIFICATIONS"
