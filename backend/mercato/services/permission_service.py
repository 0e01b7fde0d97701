# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Permission Checking and Security Event Logging

Authorization is a lookup of the caller's role in the static
ROLE_PERMISSIONS table (see mercato.permissions). This module wraps that
pure check with the audit trail: every denial is written to
security_events before PermissionDeniedError is raised.

DESIGN PRINCIPLES:
- Fail closed: deny unknown roles and unknown permission codes
- Log denials only: grants are not logged
- No bypass: every role, Developer included, goes through the table
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import SecurityEvent
from ..permissions import authorize as _authorize, AuthorizationResult
from ..time_utils import utcnow
from ..validation import DomainError


logger = logging.getLogger(__name__)


class PermissionDeniedError(DomainError):
    """Role gate failure or ownership mismatch."""
    kind = "UNAUTHORIZED"
    status_code = 403


@dataclass(frozen=True)
class Actor:
    """The authenticated caller as seen by the services."""
    user_id: int
    role_id: int
    username: str | None = None


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    role_id: int | None = None,
) -> SecurityEvent | None:
    """
    Log security event to audit trail.

    Written in its own commit. A failing audit write is logged and
    dropped so it never masks the error the caller is about to see.

    event_type examples:
    - PERMISSION_DENIED
    - OWNERSHIP_DENIED
    - LOGIN_FAILED
    - LOGIN_SUCCESS
    - LOGOUT
    """
    event = SecurityEvent(
        user_id=user_id,
        role_id=role_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )

    try:
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.warning("Could not record security event %s for user %s", event_type, user_id, exc_info=True)
        return None

    return event


def authorize(actor: Actor, permission_code: str) -> AuthorizationResult:
    return _authorize(actor.role_id, permission_code)


def has_permission(actor: Actor, permission_code: str) -> bool:
    return authorize(actor, permission_code).allowed


def require_permission(
    actor: Actor,
    permission_code: str,
    resource: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """
    Require the actor's role to grant permission_code.

    Logs the denial to security_events and raises PermissionDeniedError.

    Usage:
        require_permission(actor, "UPDATE_ORDER_STATUS", resource="/api/orders/4/status")
    """
    result = authorize(actor, permission_code)
    if result.allowed:
        return

    log_security_event(
        user_id=actor.user_id,
        role_id=actor.role_id,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=resource,
        action=permission_code,
        reason=result.reason,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    raise PermissionDeniedError(f"Permission denied: {permission_code}")


def deny_ownership(actor: Actor, resource: str, message: str) -> PermissionDeniedError:
    """
    Record an ownership mismatch and build the error to raise.

    Usage:
        raise deny_ownership(actor, f"shop:{shop.id}", "You do not own this shop")
    """
    log_security_event(
        user_id=actor.user_id,
        role_id=actor.role_id,
        event_type="OWNERSHIP_DENIED",
        success=False,
        resource=resource,
        reason=message,
    )
    return PermissionDeniedError(message)
