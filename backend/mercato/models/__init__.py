from .auth import Role, User, Profile, SessionToken, RoleRequest
from .security import SecurityEvent
from .catalog import ApprovalStatus, Shop, Warehouse, Category, Product
from .orders import OrderStatus, Order
from .shopping import CartItem, WishlistItem
from .notifications import NotificationType, Notification

__all__ = [
    'Role', 'User', 'Profile', 'SessionToken', 'RoleRequest',
    'SecurityEvent',
    'ApprovalStatus', 'Shop', 'Warehouse', 'Category', 'Product',
    'OrderStatus', 'Order',
    'CartItem', 'WishlistItem',
    'NotificationType', 'Notification',
]
