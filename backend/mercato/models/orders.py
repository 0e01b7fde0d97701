from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class OrderStatus:
    REQUESTED = "REQUESTED"
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"

    # Settable through update_order_status
    FLOW = (REQUESTED, PENDING, PROCESSING, SHIPPED, DELIVERED)
    # Reached only through cancel/reject; no way out
    TERMINAL = (CANCELLED, REJECTED)
    # Statuses that must be backed by reserved stock
    COMMITTED = (PENDING, PROCESSING, SHIPPED, DELIVERED)


class Order(db.Model):
    """
    One purchase of one product.

    total is price * quantity frozen at creation. stock_reserved records
    whether this order's quantity has been debited from Product.stock, so
    the debit happens once and a cancellation can hand it back.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_orders_quantity_positive"),
        db.Index("ix_orders_user_id", "user_id"),
        db.Index("ix_orders_product_id", "product_id"),
        db.Index("ix_orders_shop_id", "shop_id"),
        db.Index("ix_orders_warehouse_id", "warehouse_id"),
        db.Index("ix_orders_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    # Set for shop orders and for shop-initiated warehouse orders
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=True)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=True)

    quantity = db.Column(db.Integer, nullable=False)
    total = db.Column(db.Numeric(14, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False)
    stock_reserved = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User")
    product = db.relationship("Product")
    shop = db.relationship("Shop")
    warehouse = db.relationship("Warehouse")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "product_id": self.product_id,
            "shop_id": self.shop_id,
            "warehouse_id": self.warehouse_id,
            "quantity": self.quantity,
            "total": str(self.total),
            "status": self.status,
            "stock_reserved": self.stock_reserved,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
