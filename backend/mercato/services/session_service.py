# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

Tokens are random, hashed in the database, and time-limited.

Sessions capture username and role_id at creation time. That snapshot is
the identity a request runs under; a role change made later (approved
role request) applies from the next login onwards.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- Absolute timeout (SESSION_ABSOLUTE_TIMEOUT_HOURS, default 24)
- Idle timeout (SESSION_IDLE_TIMEOUT_HOURS, default 2)
- Revocable on logout, password change or account deactivation
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from ..time_utils import utcnow
from .permission_service import Actor


@dataclass
class SessionContext:
    """Result of a successful validate_session."""
    user: User
    session: SessionToken
    username: str
    role_id: int

    @property
    def actor(self) -> Actor:
        return Actor(user_id=self.user.id, role_id=self.role_id, username=self.username)


def _absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24))


def _idle_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_IDLE_TIMEOUT_HOURS", 2))


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy). Sent to the client, never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(
    user: User,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Create new session token for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        user_id=user.id,
        username=user.username,
        role_id=user.role_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_timeout(),
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()


def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if:
    - Token is unknown, expired, or revoked
    - Session sat idle past the idle timeout (the session is revoked)
    - User account is deactivated (the session is revoked)

    Updates last_used_at on successful validation.
    """
    if not token:
        return None

    now = utcnow()
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        return None

    if now - session.last_used_at > _idle_timeout():
        _revoke(session, "Idle timeout")
        return None

    user = session.user
    if not user or not user.is_active:
        _revoke(session, "User account deactivated")
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(
        user=user,
        session=session,
        username=session.username,
        role_id=session.role_id,
    )


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """Revoke one session. Returns False if no live session matches the token."""
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    _revoke(session, reason)
    return True


def revoke_all_user_sessions(
    user_id: int,
    reason: str = "Revoke all sessions",
    keep_session_id: int | None = None,
) -> int:
    """
    Revoke all active sessions for a user, optionally sparing the caller's own.

    Returns count of sessions revoked.
    """
    now = utcnow()

    query = db.session.query(SessionToken).filter_by(user_id=user_id, is_revoked=False)
    if keep_session_id is not None:
        query = query.filter(SessionToken.id != keep_session_id)

    count = 0
    for session in query.all():
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = reason
        count += 1

    db.session.commit()
    return count
