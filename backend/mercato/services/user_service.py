# Overview: Service-layer operations for users; encapsulates business logic and database work.

from __future__ import annotations

import logging
import os

from flask import current_app
from werkzeug.utils import secure_filename

from ..extensions import db
from ..models import Profile, User
from ..permissions import STAFF_ROLES, SystemRole
from ..time_utils import epoch_millis
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    apply_patch,
    validate_payload,
)
from . import auth_service, session_service
from .concurrency import atomic
from .permission_service import Actor, require_permission


logger = logging.getLogger(__name__)

ACCOUNT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"username", "email", "phone"}),
)

PROFILE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "address", "city", "country"}),
)

AVATAR_SUBDIR = "avatars"
AVATAR_URL_PREFIX = "/uploads/avatars/"


def _split_signup_payload(payload: dict) -> tuple[dict, dict | None]:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    contact = validate_payload(
        model=User,
        payload={k: payload[k] for k in ("email", "phone") if k in payload},
        policy=ACCOUNT_POLICY,
        partial=True,
    )
    profile = None
    if payload.get("profile") is not None:
        profile = validate_payload(
            model=Profile, payload=payload["profile"], policy=PROFILE_POLICY, partial=True
        )
    return contact, profile


def signup(payload: dict) -> User:
    """Self-service registration; every new account starts as a Customer."""
    contact, profile = _split_signup_payload(payload)
    user = auth_service.create_user(
        payload.get("username"),
        payload.get("password"),
        SystemRole.CUSTOMER,
        profile=profile,
        **contact,
    )
    logger.info("User %s signed up", user.id)
    return user


def create_staff_user(actor: Actor, payload: dict) -> User:
    require_permission(actor, "CREATE_STAFF_USERS")
    contact, profile = _split_signup_payload(payload)

    role = SystemRole.from_label(payload.get("role"))
    if role not in STAFF_ROLES:
        allowed = ", ".join(sorted(r.label for r in STAFF_ROLES))
        raise ValidationError(f"role must be one of: {allowed}")

    user = auth_service.create_user(
        payload.get("username"),
        payload.get("password"),
        role,
        profile=profile,
        **contact,
    )
    logger.info("User %s created %s account %s", actor.user_id, role.label, user.id)
    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def get_user_details(actor: Actor, user_id: int) -> User:
    require_permission(actor, "VIEW_USER_DETAILS")
    return get_user(user_id)


def list_users(actor: Actor) -> list[User]:
    require_permission(actor, "VIEW_USERS")
    return (
        db.session.query(User)
        .filter(User.role_id != int(SystemRole.DEVELOPER))
        .order_by(User.id)
        .all()
    )


def list_developer_users(actor: Actor) -> list[User]:
    require_permission(actor, "VIEW_USER_DETAILS")
    return db.session.query(User).filter_by(role_id=int(SystemRole.DEVELOPER)).order_by(User.id).all()


def update_profile(actor: Actor, payload: dict) -> User:
    """
    Patch the caller's account and profile.

    Top-level keys username/email/phone and a nested "profile" object
    follow patch semantics: absent keys are left alone, null clears a
    nullable field.
    """
    require_permission(actor, "MANAGE_OWN_PROFILE")
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    account_payload = {k: v for k, v in payload.items() if k != "profile"}
    account_patch = validate_payload(model=User, payload=account_payload, policy=ACCOUNT_POLICY, partial=True)

    profile_patch = None
    if "profile" in payload:
        if payload["profile"] is None:
            raise ValidationError("profile cannot be null")
        profile_patch = validate_payload(
            model=Profile, payload=payload["profile"], policy=PROFILE_POLICY, partial=True
        )

    user = get_user(actor.user_id)

    if "username" in account_patch and auth_service.username_taken(account_patch["username"], exclude_user_id=user.id):
        raise ConflictError("Username already exists")

    with atomic():
        apply_patch(user, account_patch)
        if profile_patch:
            if user.profile is None:
                user.profile = Profile()
            apply_patch(user.profile, profile_patch)

    return user


def change_password(actor: Actor, current_password, new_password, keep_session_id: int | None = None) -> int:
    """Change the caller's password and revoke their other sessions. Returns the revoked count."""
    require_permission(actor, "MANAGE_OWN_PROFILE")
    user = get_user(actor.user_id)
    auth_service.change_password(user, current_password, new_password)
    return session_service.revoke_all_user_sessions(
        user.id, reason="Password changed", keep_session_id=keep_session_id
    )


def _avatar_dir() -> str:
    folder = current_app.config.get("UPLOAD_FOLDER", "uploads")
    if not os.path.isabs(folder):
        folder = os.path.join(current_app.instance_path, folder)
    path = os.path.join(folder, AVATAR_SUBDIR)
    os.makedirs(path, exist_ok=True)
    return path


def _avatar_file(public_path: str | None) -> str | None:
    if not public_path or not public_path.startswith(AVATAR_URL_PREFIX):
        return None
    return os.path.join(_avatar_dir(), public_path[len(AVATAR_URL_PREFIX):])


def upload_avatar(actor: Actor, original_name: str | None, content: bytes) -> User:
    """
    Store a new avatar as <user id>-<epoch millis>-<sanitized name> and
    remove the previous file. The database keeps only the public path.
    """
    require_permission(actor, "MANAGE_OWN_PROFILE")

    limit = current_app.config.get("MAX_AVATAR_BYTES", 10 * 1024 * 1024)
    if not content:
        raise ValidationError("Avatar file is empty")
    if len(content) > limit:
        raise ValidationError(f"Avatar exceeds {limit} bytes")

    safe_name = secure_filename((original_name or "").replace(" ", "-")) or "avatar"
    filename = f"{actor.user_id}-{epoch_millis()}-{safe_name}"
    target = os.path.join(_avatar_dir(), filename)

    user = get_user(actor.user_id)
    previous = _avatar_file(user.profile_picture_path)

    with open(target, "wb") as fh:
        fh.write(content)

    try:
        with atomic():
            user.profile_picture_path = AVATAR_URL_PREFIX + filename
    except Exception:
        os.remove(target)
        raise

    if previous and previous != target and os.path.exists(previous):
        try:
            os.remove(previous)
        except OSError:
            logger.warning("Could not remove old avatar %s", previous, exc_info=True)

    return user


def avatar_directory() -> str:
    return _avatar_dir()
