# Overview: Service-layer operations for warehouses; encapsulates business logic and database work.

from __future__ import annotations

import logging

from ..extensions import db
from ..models import ApprovalStatus, NotificationType, Order, Warehouse
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    apply_patch,
    validate_payload,
)
from . import approval_service, notification_service
from .concurrency import atomic
from .permission_service import Actor, require_permission


logger = logging.getLogger(__name__)

WAREHOUSE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "location", "description", "capacity"}),
    required_on_create=frozenset({"name"}),
)


def _enforce_capacity(patch: dict) -> None:
    if patch.get("capacity") is not None and patch["capacity"] < 0:
        raise ValidationError("capacity must be >= 0")


def get_warehouse(warehouse_id: int) -> Warehouse:
    warehouse = db.session.get(Warehouse, warehouse_id)
    if not warehouse:
        raise NotFoundError("Warehouse not found")
    return warehouse


def find_supplier_warehouse(supplier_id: int) -> Warehouse | None:
    return db.session.query(Warehouse).filter_by(supplier_id=supplier_id).first()


def get_my_warehouse(actor: Actor) -> Warehouse:
    require_permission(actor, "MANAGE_WAREHOUSE")
    warehouse = find_supplier_warehouse(actor.user_id)
    if not warehouse:
        raise NotFoundError("Warehouse not found")
    return warehouse


def create_warehouse(actor: Actor, payload: dict) -> Warehouse:
    require_permission(actor, "MANAGE_WAREHOUSE")
    data = validate_payload(model=Warehouse, payload=payload, policy=WAREHOUSE_POLICY, partial=False)
    _enforce_capacity(data)

    if find_supplier_warehouse(actor.user_id):
        raise ConflictError("Warehouse already exists for this supplier")

    with atomic():
        warehouse = Warehouse(supplier_id=actor.user_id, status=ApprovalStatus.PENDING, **data)
        db.session.add(warehouse)

    logger.info("Warehouse %s created by supplier %s", warehouse.id, actor.user_id)
    return warehouse


def update_my_warehouse(actor: Actor, payload: dict) -> Warehouse:
    require_permission(actor, "MANAGE_WAREHOUSE")
    patch = validate_payload(model=Warehouse, payload=payload, policy=WAREHOUSE_POLICY, partial=True)
    _enforce_capacity(patch)
    warehouse = get_my_warehouse(actor)

    with atomic():
        apply_patch(warehouse, patch)

    return warehouse


def delete_my_warehouse(actor: Actor) -> None:
    warehouse = get_my_warehouse(actor)

    if db.session.query(Order.id).filter(Order.warehouse_id == warehouse.id).first():
        raise ConflictError("Warehouse has orders and cannot be deleted")

    with atomic():
        db.session.delete(warehouse)

    logger.info("Warehouse %s deleted by supplier %s", warehouse.id, actor.user_id)


def list_pending_warehouses(actor: Actor) -> list[Warehouse]:
    require_permission(actor, "APPROVE_WAREHOUSES")
    return (
        db.session.query(Warehouse)
        .filter_by(status=ApprovalStatus.PENDING)
        .order_by(Warehouse.created_at, Warehouse.id)
        .all()
    )


def approve_warehouse(actor: Actor, warehouse_id: int) -> Warehouse:
    return _decide(actor, warehouse_id, ApprovalStatus.APPROVED)


def reject_warehouse(actor: Actor, warehouse_id: int) -> Warehouse:
    return _decide(actor, warehouse_id, ApprovalStatus.REJECTED)


def _decide(actor: Actor, warehouse_id: int, decision: str) -> Warehouse:
    require_permission(actor, "APPROVE_WAREHOUSES")
    warehouse = approval_service.decide(get_warehouse(warehouse_id), decision, "warehouse")

    if decision == ApprovalStatus.APPROVED:
        message, type_ = f"Your warehouse '{warehouse.name}' has been approved", NotificationType.WAREHOUSE_APPROVED
    else:
        message, type_ = f"Your warehouse '{warehouse.name}' has been rejected", NotificationType.WAREHOUSE_REJECTED
    notification_service.emit(warehouse.supplier_id, message, type_)
    return warehouse
