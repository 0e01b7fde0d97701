from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class SecurityEvent(db.Model):
    """
    Append-only audit trail of authentication and authorization events
    (login failures, permission denials, logouts).
    """
    __tablename__ = "security_events"
    __table_args__ = (
        db.Index("ix_security_events_user_id", "user_id"),
        db.Index("ix_security_events_event_type", "event_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    role_id = db.Column(db.Integer, nullable=True)

    event_type = db.Column(db.String(64), nullable=False)
    resource = db.Column(db.String(255), nullable=True)
    action = db.Column(db.String(64), nullable=True)
    success = db.Column(db.Boolean, nullable=False)
    reason = db.Column(db.String(255), nullable=True)

    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "role_id": self.role_id,
            "event_type": self.event_type,
            "resource": self.resource,
            "action": self.action,
            "success": self.success,
            "reason": self.reason,
            "occurred_at": to_utc_z(self.occurred_at),
        }
