# Overview: PENDING -> APPROVED/REJECTED decisions shared by shops and warehouses.

import logging

from ..models import ApprovalStatus
from ..validation import ConflictError, ValidationError
from .concurrency import atomic


logger = logging.getLogger(__name__)

DECISIONS = {
    ApprovalStatus.APPROVED: "approve",
    ApprovalStatus.REJECTED: "reject",
}


def decide(entity, decision: str, label: str):
    """
    Move a PENDING shop or warehouse to APPROVED or REJECTED and commit.

    A second decision on the same entity raises ConflictError and leaves
    the stored status as it was.
    """
    if decision not in DECISIONS:
        raise ValidationError(f"Invalid decision: {decision}")

    with atomic():
        if entity.status != ApprovalStatus.PENDING:
            raise ConflictError(f"Cannot {DECISIONS[decision]} {label} in {entity.status} status")
        entity.status = decision

    logger.info("%s %s -> %s", label, entity.id, decision)
    return entity


def require_approved(entity, label: str) -> None:
    if entity.status != ApprovalStatus.APPROVED:
        raise ValidationError(f"{label.capitalize()} is not approved")
