from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class ApprovalStatus:
    """Lifecycle shared by shops and warehouses."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Shop(db.Model):
    """
    A storefront owned by a Retailer or Merchant.

    Created PENDING; only APPROVED shops may list products or take orders.
    """
    __tablename__ = "shops"
    __table_args__ = (
        db.Index("ix_shops_owner_id", "owner_id"),
        db.Index("ix_shops_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=ApprovalStatus.PENDING)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    owner = db.relationship("User")
    products = db.relationship("Product", back_populates="shop", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "owner_id": self.owner_id,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Warehouse(db.Model):
    """A supplier's stock location. One per supplier; same approval lifecycle as Shop."""
    __tablename__ = "warehouses"
    __table_args__ = (
        db.Index("ix_warehouses_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    name = db.Column(db.String(128), nullable=False)
    location = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)
    capacity = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(16), nullable=False, default=ApprovalStatus.PENDING)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    supplier = db.relationship("User")
    products = db.relationship("Product", back_populates="warehouse", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplier_id": self.supplier_id,
            "name": self.name,
            "location": self.location,
            "description": self.description,
            "capacity": self.capacity,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Category(db.Model):
    """
    Product category with a caller-chosen id in 1..9999.

    Changing the id replaces the row (see category_service.update_category);
    created_by_id and created_at survive the replacement.
    """
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(128), nullable=False, unique=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    updated_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_by_id": self.created_by_id,
            "updated_by_id": self.updated_by_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Product(db.Model):
    """
    Sellable item held by exactly one shop or one warehouse.

    stock is the only shared mutable quantity in the system; it is changed
    through stock_service so it can never go below zero.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        db.CheckConstraint(
            "(shop_id IS NULL) <> (warehouse_id IS NULL)",
            name="ck_products_single_owner",
        ),
        db.Index("ix_products_shop_id", "shop_id"),
        db.Index("ix_products_warehouse_id", "warehouse_id"),
        db.Index("ix_products_category_id", "category_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)

    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=True)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    shop = db.relationship("Shop", back_populates="products")
    warehouse = db.relationship("Warehouse", back_populates="products")
    category = db.relationship("Category")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": str(self.price) if self.price is not None else None,
            "stock": self.stock,
            "shop_id": self.shop_id,
            "warehouse_id": self.warehouse_id,
            "category_id": self.category_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
