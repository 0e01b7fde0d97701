# Overview: Best-effort notification emission and the recipient's inbox.

"""
Notifications are a side channel of the workflows. They are written after
the triggering transaction has committed, each in its own commit; a failed
write is logged and dropped, never raised into the workflow.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Notification


logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def emit(user_id: int | None, message: str, type_: str) -> Notification | None:
    if user_id is None:
        return None

    try:
        notification = Notification(user_id=user_id, message=message, type=type_)
        db.session.add(notification)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.warning("Dropped %s notification for user %s", type_, user_id, exc_info=True)
        return None

    return notification


def list_for_user(user_id: int, limit: int = DEFAULT_LIMIT) -> list[Notification]:
    limit = max(1, min(limit, MAX_LIMIT))
    return (
        db.session.query(Notification)
        .filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )
