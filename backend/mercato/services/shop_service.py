# Overview: Service-layer operations for shops; encapsulates business logic and database work.

from __future__ import annotations

import logging

from ..extensions import db
from ..models import ApprovalStatus, NotificationType, Order, Shop
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    apply_patch,
    validate_payload,
)
from . import approval_service, notification_service
from .concurrency import atomic
from .permission_service import Actor, deny_ownership, require_permission


logger = logging.getLogger(__name__)

SHOP_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "description"}),
    required_on_create=frozenset({"name"}),
)


def get_shop(shop_id: int) -> Shop:
    shop = db.session.get(Shop, shop_id)
    if not shop:
        raise NotFoundError("Shop not found")
    return shop


def get_owned_shop(actor: Actor, shop_id: int) -> Shop:
    shop = get_shop(shop_id)
    if shop.owner_id != actor.user_id:
        raise deny_ownership(actor, f"shop:{shop_id}", "You do not own this shop")
    return shop


def create_shop(actor: Actor, payload: dict) -> Shop:
    require_permission(actor, "MANAGE_SHOP")
    data = validate_payload(model=Shop, payload=payload, policy=SHOP_POLICY, partial=False)

    with atomic():
        shop = Shop(owner_id=actor.user_id, status=ApprovalStatus.PENDING, **data)
        db.session.add(shop)

    logger.info("Shop %s created by user %s", shop.id, actor.user_id)
    return shop


def update_shop(actor: Actor, shop_id: int, payload: dict) -> Shop:
    require_permission(actor, "MANAGE_SHOP")
    patch = validate_payload(model=Shop, payload=payload, policy=SHOP_POLICY, partial=True)
    shop = get_owned_shop(actor, shop_id)

    with atomic():
        apply_patch(shop, patch)

    return shop


def delete_shop(actor: Actor, shop_id: int) -> None:
    require_permission(actor, "MANAGE_SHOP")
    shop = get_owned_shop(actor, shop_id)

    if db.session.query(Order.id).filter(Order.shop_id == shop.id).first():
        raise ConflictError("Shop has orders and cannot be deleted")

    with atomic():
        db.session.delete(shop)

    logger.info("Shop %s deleted by user %s", shop_id, actor.user_id)


def list_my_shops(actor: Actor) -> list[Shop]:
    require_permission(actor, "MANAGE_SHOP")
    return db.session.query(Shop).filter_by(owner_id=actor.user_id).order_by(Shop.id).all()


def list_approved_shops() -> list[Shop]:
    return db.session.query(Shop).filter_by(status=ApprovalStatus.APPROVED).order_by(Shop.name).all()


def list_pending_shops(actor: Actor) -> list[Shop]:
    require_permission(actor, "APPROVE_SHOPS")
    return db.session.query(Shop).filter_by(status=ApprovalStatus.PENDING).order_by(Shop.created_at, Shop.id).all()


def approve_shop(actor: Actor, shop_id: int) -> Shop:
    return _decide(actor, shop_id, ApprovalStatus.APPROVED)


def reject_shop(actor: Actor, shop_id: int) -> Shop:
    return _decide(actor, shop_id, ApprovalStatus.REJECTED)


def _decide(actor: Actor, shop_id: int, decision: str) -> Shop:
    require_permission(actor, "APPROVE_SHOPS")
    shop = approval_service.decide(get_shop(shop_id), decision, "shop")

    if decision == ApprovalStatus.APPROVED:
        notification_service.emit(
            shop.owner_id, f"Your shop '{shop.name}' has been approved", NotificationType.SHOP_APPROVED
        )
    else:
        notification_service.emit(
            shop.owner_id, f"Your shop '{shop.name}' has been rejected", NotificationType.SHOP_REJECTED
        )
    return shop
