# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Passwords are hashed with bcrypt (cost from BCRYPT_ROUNDS, default 12)
and must be at least 6 characters. Session tokens are managed separately
(see session_service.py).
"""

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import Role, User, Profile
from ..permissions import SystemRole, ROLE_LABELS, ROLE_DESCRIPTIONS
from ..time_utils import utcnow
from ..validation import ValidationError, ConflictError


MIN_PASSWORD_LENGTH = 6


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password) -> None:
    if not isinstance(password, str) or not password:
        raise PasswordValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def hash_password(password: str) -> str:
    """Validate then bcrypt-hash a password; the hash is stored as text."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def _clean_username(username) -> str:
    if not isinstance(username, str) or not username.strip():
        raise ValidationError("username is required")
    username = username.strip()
    if len(username) > 64:
        raise ValidationError("username exceeds max length 64")
    return username


def username_taken(username: str, exclude_user_id: int | None = None) -> bool:
    query = db.session.query(User.id).filter(User.username == username)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def create_user(
    username: str,
    password: str,
    role: SystemRole,
    email: str | None = None,
    phone: str | None = None,
    profile: dict | None = None,
) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises PasswordValidationError for weak passwords and ConflictError
    when the username is already taken. Commits.
    """
    username = _clean_username(username)
    if username_taken(username):
        raise ConflictError("Username already exists")

    user = User(
        username=username,
        email=email,
        phone=phone,
        password_hash=hash_password(password),
        role_id=int(role),
        is_active=True,
    )
    if profile:
        user.profile = Profile(**profile)

    db.session.add(user)
    db.session.commit()

    return user


def authenticate(identifier: str, password: str) -> User | None:
    """
    Authenticate by username (or email when no username matches).

    Returns the User on success, None otherwise. Updates last_login_at.
    """
    if not identifier or not password:
        return None

    user = db.session.query(User).filter_by(username=identifier).first()
    if not user:
        user = db.session.query(User).filter_by(email=identifier).first()

    if not user or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()

    return user


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    db.session.commit()


def seed_roles() -> list[Role]:
    """
    Ensure the eight fixed roles exist with their fixed ids. Idempotent.

    Returns the roles that were created.
    """
    created = []
    for role in SystemRole:
        existing = db.session.get(Role, int(role))
        if existing:
            continue
        row = Role(id=int(role), name=ROLE_LABELS[role], description=ROLE_DESCRIPTIONS[role])
        db.session.add(row)
        created.append(row)

    db.session.commit()
    return created


def ensure_developer_user(username: str, password: str) -> tuple[User, bool]:
    """Create the bootstrap developer account if missing. Returns (user, created)."""
    user = db.session.query(User).filter_by(username=username).first()
    if user:
        return user, False
    return create_user(username, password, SystemRole.DEVELOPER), True
