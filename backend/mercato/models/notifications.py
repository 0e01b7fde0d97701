from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class NotificationType:
    ORDER_PLACED = "ORDER_PLACED"
    ORDER_RECEIVED = "ORDER_RECEIVED"
    ORDER_REQUESTED = "ORDER_REQUESTED"
    ORDER_REQUEST_RECEIVED = "ORDER_REQUEST_RECEIVED"
    ORDER_STATUS_UPDATED = "ORDER_STATUS_UPDATED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    ORDER_REJECTED = "ORDER_REJECTED"
    SHOP_APPROVED = "SHOP_APPROVED"
    SHOP_REJECTED = "SHOP_REJECTED"
    WAREHOUSE_APPROVED = "WAREHOUSE_APPROVED"
    WAREHOUSE_REJECTED = "WAREHOUSE_REJECTED"
    ROLE_REQUEST_APPROVED = "ROLE_REQUEST_APPROVED"
    ROLE_REQUEST_REJECTED = "ROLE_REQUEST_REJECTED"


class Notification(db.Model):
    __tablename__ = "notifications"
    __table_args__ = (
        db.Index("ix_notifications_user_id", "user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    message = db.Column(db.String(512), nullable=False)
    type = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "message": self.message,
            "type": self.type,
            "created_at": to_utc_z(self.created_at),
        }
