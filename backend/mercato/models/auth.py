from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Role(db.Model):
    """
    Static role reference data. Ids are fixed (see permissions.SystemRole)
    and seeded once; rows are never created at runtime.
    """
    __tablename__ = "roles"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(32), nullable=False, unique=True)
    description = db.Column(db.String(255), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
        }


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Username is globally unique; email and phone are optional contact
    fields and may repeat. role_id changes only through an approved
    role request (or staff account creation).
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_role_id", "role_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(64), nullable=False, unique=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role_id = db.Column(db.Integer, db.ForeignKey("roles.id"), nullable=False)

    # Public path of the current avatar, e.g. /uploads/avatars/7-1700000000000-me.png
    profile_picture_path = db.Column(db.String(512), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    role = db.relationship("Role")
    profile = db.relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "phone": self.phone,
            "role_id": self.role_id,
            "role": self.role.name if self.role else None,
            "profile_picture": self.profile_picture_path,
            "profile": self.profile.to_dict() if self.profile else None,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }


class Profile(db.Model):
    """Optional 1:1 personal details for a user, created on first write."""
    __tablename__ = "profiles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)

    name = db.Column(db.String(128), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(128), nullable=True)
    country = db.Column(db.String(128), nullable=True)

    user = db.relationship("User", back_populates="profile")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "country": self.country,
        }


class SessionToken(db.Model):
    """
    Opaque bearer sessions. Only the SHA-256 of the token is stored.

    username and role_id are captured when the session is issued and are
    the identity every request on this session runs under.
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_id", "user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    username = db.Column(db.String(64), nullable=False)
    role_id = db.Column(db.Integer, nullable=False)

    token_hash = db.Column(db.String(64), nullable=False, unique=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(255), nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)

    user = db.relationship("User")


class RoleRequest(db.Model):
    """
    A user's request to be promoted into another role.

    A user has at most one PENDING request; a newer request for a
    different role overwrites the pending row in place.
    """
    __tablename__ = "role_requests"
    __table_args__ = (
        db.Index(
            "uq_role_requests_user_pending",
            "user_id",
            unique=True,
            sqlite_where=db.text("status = 'PENDING'"),
            postgresql_where=db.text("status = 'PENDING'"),
        ),
        db.Index("ix_role_requests_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    requested_role = db.Column(db.String(32), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="PENDING")
    admin_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User", foreign_keys=[user_id])
    admin = db.relationship("User", foreign_keys=[admin_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "requested_role": self.requested_role,
            "status": self.status,
            "admin_id": self.admin_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
