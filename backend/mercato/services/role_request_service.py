# Overview: Service-layer operations for role requests; encapsulates business logic and database work.

"""
Role upgrade requests.

A user holds at most one PENDING request. Asking again for the role that
is already pending is a conflict; asking for a different role replaces
the pending request's role in place. Only a Developer decides, and an
approval rewrites the user's role_id.
"""

from __future__ import annotations

import logging

from ..extensions import db
from ..models import NotificationType, RoleRequest, User
from ..permissions import REQUESTABLE_ROLES, SystemRole
from ..time_utils import utcnow
from ..validation import ConflictError, NotFoundError, ValidationError
from . import notification_service
from .concurrency import atomic, lock_for_update
from .permission_service import Actor, require_permission


logger = logging.getLogger(__name__)

STATUS_PENDING = "PENDING"
STATUS_APPROVED = "APPROVED"
STATUS_REJECTED = "REJECTED"


def _requestable(role_name) -> SystemRole:
    role = SystemRole.from_label(role_name) if isinstance(role_name, str) else None
    if role is None or role not in REQUESTABLE_ROLES:
        allowed = ", ".join(sorted(r.label for r in REQUESTABLE_ROLES))
        raise ValidationError(f"Invalid role: {role_name}. Allowed roles: {allowed}")
    return role


def request_role(actor: Actor, role_name) -> RoleRequest:
    require_permission(actor, "REQUEST_ROLE")
    role = _requestable(role_name)

    with atomic():
        pending = lock_for_update(
            db.session.query(RoleRequest).filter_by(user_id=actor.user_id, status=STATUS_PENDING)
        ).first()

        if pending and pending.requested_role == role.label:
            raise ConflictError(f"A pending request for {role.label} already exists")

        if pending:
            logger.info(
                "Role request %s superseded: %s -> %s", pending.id, pending.requested_role, role.label
            )
            pending.requested_role = role.label
            pending.updated_at = utcnow()
            request = pending
        else:
            request = RoleRequest(user_id=actor.user_id, requested_role=role.label, status=STATUS_PENDING)
            db.session.add(request)

    return request


def list_role_requests(actor: Actor, status: str | None = None) -> list[RoleRequest]:
    require_permission(actor, "REVIEW_ROLE_REQUESTS")
    query = db.session.query(RoleRequest)
    if status:
        query = query.filter_by(status=status)
    return query.order_by(RoleRequest.created_at.desc(), RoleRequest.id.desc()).all()


def list_my_role_requests(actor: Actor) -> list[RoleRequest]:
    return (
        db.session.query(RoleRequest)
        .filter_by(user_id=actor.user_id)
        .order_by(RoleRequest.created_at.desc(), RoleRequest.id.desc())
        .all()
    )


def _pending_request(request_id: int) -> RoleRequest:
    request = lock_for_update(
        db.session.query(RoleRequest).filter_by(id=request_id, status=STATUS_PENDING)
    ).first()
    if not request:
        raise NotFoundError("Role request not found or already processed")
    return request


def approve_role_request(actor: Actor, request_id: int) -> RoleRequest:
    require_permission(actor, "REVIEW_ROLE_REQUESTS")

    with atomic():
        request = _pending_request(request_id)
        role = SystemRole.from_label(request.requested_role)
        user = db.session.get(User, request.user_id)
        if role is None or user is None:
            raise NotFoundError("Role request refers to a missing role or user")

        user.role_id = int(role)
        request.status = STATUS_APPROVED
        request.admin_id = actor.user_id

    logger.info("Role request %s approved: user %s is now %s", request.id, request.user_id, role.label)
    notification_service.emit(
        request.user_id,
        f"Your request to become {role.label} has been approved. Sign in again to use it.",
        NotificationType.ROLE_REQUEST_APPROVED,
    )
    return request


def reject_role_request(actor: Actor, request_id: int) -> RoleRequest:
    require_permission(actor, "REVIEW_ROLE_REQUESTS")

    with atomic():
        request = _pending_request(request_id)
        request.status = STATUS_REJECTED
        request.admin_id = actor.user_id

    logger.info("Role request %s rejected by user %s", request.id, actor.user_id)
    notification_service.emit(
        request.user_id,
        f"Your request to become {request.requested_role} has been rejected",
        NotificationType.ROLE_REQUEST_REJECTED,
    )
    return request
