from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class CartItem(db.Model):
    __tablename__ = "cart_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
    )

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), primary_key=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product", backref=db.backref("cart_items", cascade="all, delete-orphan"))

    def to_dict(self) -> dict:
        product = self.product
        line_total = product.price * self.quantity if product else None
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "product": product.to_dict() if product else None,
            "line_total": str(line_total) if line_total is not None else None,
            "created_at": to_utc_z(self.created_at),
        }


class WishlistItem(db.Model):
    __tablename__ = "wishlist_items"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), primary_key=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product", backref=db.backref("wishlist_items", cascade="all, delete-orphan"))

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product": self.product.to_dict() if self.product else None,
            "created_at": to_utc_z(self.created_at),
        }
