# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Order Workflow

Entry points:
- create_order: buy from an APPROVED shop. Stock reserved, order PENDING.
- create_warehouse_order: buy from an APPROVED warehouse. Stock reserved;
  PROCESSING when bought directly, PENDING when a shop owner restocks a shop.
- request_warehouse_order: same preconditions, but the order is REQUESTED
  and no stock moves until the request is approved.

Transitions:
- update_order_status (operations admin): any flow status. Leaving
  REQUESTED for a committed status reserves the stock at that moment; if
  the stock is gone the order stays REQUESTED.
- approve_order_request (supplier or operations admin): REQUESTED -> PENDING.
- cancel_order (buyer or operations admin), reject_order_request (supplier
  or operations admin): terminal states. Reserved stock is released.

Every entry point checks the caller's role before it reads stock or
touches a row. The order write and the stock movement commit together;
notifications follow the commit and can never undo it.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from ..extensions import db
from ..models import (
    ApprovalStatus,
    NotificationType,
    Order,
    OrderStatus,
    Product,
    Shop,
)
from ..validation import NotFoundError, ValidationError, require_id, require_positive_int
from . import notification_service, stock_service, warehouse_service
from .concurrency import atomic, lock_for_update
from .permission_service import (
    Actor,
    PermissionDeniedError,
    deny_ownership,
    has_permission,
    require_permission,
)


logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def compute_total(price, quantity: int) -> Decimal:
    return (Decimal(price) * quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


def _load_product(product_id) -> Product:
    product = db.session.get(Product, require_id(product_id, "product_id"))
    if not product:
        raise NotFoundError("Product not found")
    return product


def _load_order(order_id: int, *, for_update: bool = False) -> Order:
    query = db.session.query(Order).filter(Order.id == order_id)
    if for_update:
        query = lock_for_update(query)
    order = query.first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def _warehouse_product(product_id) -> Product:
    product = _load_product(product_id)
    if product.warehouse_id is None:
        raise ValidationError("Product does not belong to a warehouse")
    if product.warehouse.status != ApprovalStatus.APPROVED:
        raise ValidationError("Warehouse is not approved")
    return product


def _requesting_shop(actor: Actor, shop_id) -> Shop | None:
    """Resolve the shop a warehouse order is placed for, if any."""
    if shop_id is None:
        return None

    require_permission(actor, "RESTOCK_SHOP")
    shop = db.session.get(Shop, require_id(shop_id, "shop_id"))
    if not shop:
        raise NotFoundError("Shop not found")
    if shop.owner_id != actor.user_id:
        raise deny_ownership(actor, f"shop:{shop.id}", "You do not own this shop")
    return shop


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def create_order(actor: Actor, product_id, quantity) -> Order:
    require_permission(actor, "PLACE_ORDER")
    quantity = require_positive_int(quantity)
    product = _load_product(product_id)

    if product.shop_id is None:
        raise ValidationError("Product does not belong to a shop")
    shop = product.shop
    if shop.status != ApprovalStatus.APPROVED:
        raise ValidationError("Shop is not approved")

    with atomic():
        reserved = stock_service.reserve(product.id, quantity)
        order = Order(
            user_id=actor.user_id,
            product_id=reserved.id,
            shop_id=shop.id,
            quantity=quantity,
            total=compute_total(reserved.price, quantity),
            status=OrderStatus.PENDING,
            stock_reserved=True,
        )
        db.session.add(order)

    logger.info("Order %s placed by user %s on shop %s", order.id, actor.user_id, shop.id)

    notification_service.emit(
        actor.user_id,
        f"Your order #{order.id} for {quantity} x {product.name} has been placed",
        NotificationType.ORDER_PLACED,
    )
    notification_service.emit(
        shop.owner_id,
        f"New order #{order.id} received for {quantity} x {product.name}",
        NotificationType.ORDER_RECEIVED,
    )
    return order


def create_warehouse_order(actor: Actor, product_id, quantity, shop_id=None) -> Order:
    require_permission(actor, "CREATE_WAREHOUSE_ORDER")
    shop = _requesting_shop(actor, shop_id)
    quantity = require_positive_int(quantity)
    product = _warehouse_product(product_id)

    status = OrderStatus.PENDING if shop else OrderStatus.PROCESSING

    with atomic():
        reserved = stock_service.reserve(product.id, quantity)
        order = Order(
            user_id=actor.user_id,
            product_id=reserved.id,
            shop_id=shop.id if shop else None,
            warehouse_id=reserved.warehouse_id,
            quantity=quantity,
            total=compute_total(reserved.price, quantity),
            status=status,
            stock_reserved=True,
        )
        db.session.add(order)

    logger.info(
        "Warehouse order %s placed by user %s on warehouse %s (%s)",
        order.id, actor.user_id, order.warehouse_id, status,
    )

    notification_service.emit(
        actor.user_id,
        f"Your order #{order.id} for {quantity} x {product.name} has been placed",
        NotificationType.ORDER_PLACED,
    )
    if shop:
        notification_service.emit(
            product.warehouse.supplier_id,
            f"New order #{order.id} from shop '{shop.name}' for {quantity} x {product.name}",
            NotificationType.ORDER_RECEIVED,
        )
    return order


def request_warehouse_order(actor: Actor, product_id, quantity, shop_id=None) -> Order:
    require_permission(actor, "REQUEST_WAREHOUSE_ORDER")
    shop = _requesting_shop(actor, shop_id)
    quantity = require_positive_int(quantity)
    product = _warehouse_product(product_id)

    on_hand = stock_service.available(product.id)
    if on_hand < quantity:
        raise stock_service.InsufficientStockError(
            f"Insufficient stock for product {product.id}: requested {quantity}, available {on_hand}"
        )

    with atomic():
        order = Order(
            user_id=actor.user_id,
            product_id=product.id,
            shop_id=shop.id if shop else None,
            warehouse_id=product.warehouse_id,
            quantity=quantity,
            total=compute_total(product.price, quantity),
            status=OrderStatus.REQUESTED,
            stock_reserved=False,
        )
        db.session.add(order)

    logger.info("Order request %s by user %s on warehouse %s", order.id, actor.user_id, order.warehouse_id)

    notification_service.emit(
        actor.user_id,
        f"Your request #{order.id} for {quantity} x {product.name} has been sent",
        NotificationType.ORDER_REQUESTED,
    )
    notification_service.emit(
        product.warehouse.supplier_id,
        f"New order request #{order.id} for {quantity} x {product.name}",
        NotificationType.ORDER_REQUEST_RECEIVED,
    )
    return order


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def _move(order: Order, status: str) -> None:
    """
    Apply a flow transition to a locked order inside the caller's transaction.

    The first move into a committed status reserves the order's quantity.
    InsufficientStockError propagates and the caller's rollback keeps the
    order where it was.
    """
    if order.status in OrderStatus.TERMINAL:
        raise ValidationError(f"Order is {order.status} and can no longer change")

    if status in OrderStatus.COMMITTED and not order.stock_reserved:
        stock_service.reserve(order.product_id, order.quantity)
        order.stock_reserved = True

    order.status = status


def _close(order: Order, status: str, allowed_from: tuple[str, ...]) -> None:
    if order.status not in allowed_from:
        raise ValidationError(f"Cannot move order from {order.status} to {status}")

    if order.stock_reserved:
        stock_service.release(order.product_id, order.quantity)
        order.stock_reserved = False

    order.status = status


def _notify_buyer(order: Order, message: str, type_: str) -> None:
    notification_service.emit(order.user_id, message, type_)


def update_order_status(actor: Actor, order_id: int, status) -> Order:
    require_permission(actor, "UPDATE_ORDER_STATUS")
    if status not in OrderStatus.FLOW:
        raise ValidationError(f"Invalid status: {status}")

    with atomic():
        order = _load_order(order_id, for_update=True)
        previous = order.status
        _move(order, status)

    logger.info("Order %s: %s -> %s by user %s", order.id, previous, status, actor.user_id)
    _notify_buyer(
        order,
        f"Your order #{order.id} status changed to {status}",
        NotificationType.ORDER_STATUS_UPDATED,
    )
    return order


def _check_supplier(actor: Actor, order: Order) -> None:
    """Suppliers may only act on orders against their own warehouse."""
    if has_permission(actor, "UPDATE_ORDER_STATUS"):
        return
    if order.warehouse is None or order.warehouse.supplier_id != actor.user_id:
        raise deny_ownership(actor, f"order:{order.id}", "Order is not against your warehouse")


def approve_order_request(actor: Actor, order_id: int) -> Order:
    require_permission(actor, "APPROVE_ORDER_REQUESTS")
    order = _load_order(order_id)
    _check_supplier(actor, order)

    with atomic():
        order = _load_order(order_id, for_update=True)
        if order.status != OrderStatus.REQUESTED:
            raise ValidationError(f"Cannot approve order in {order.status} status")
        _move(order, OrderStatus.PENDING)

    logger.info("Order request %s approved by user %s", order.id, actor.user_id)
    _notify_buyer(
        order,
        f"Your request #{order.id} has been approved",
        NotificationType.ORDER_STATUS_UPDATED,
    )
    return order


def reject_order_request(actor: Actor, order_id: int) -> Order:
    require_permission(actor, "APPROVE_ORDER_REQUESTS")
    order = _load_order(order_id)
    _check_supplier(actor, order)

    with atomic():
        order = _load_order(order_id, for_update=True)
        _close(order, OrderStatus.REJECTED, (OrderStatus.REQUESTED, OrderStatus.PENDING))

    logger.info("Order %s rejected by user %s", order.id, actor.user_id)
    _notify_buyer(order, f"Your order #{order.id} has been rejected", NotificationType.ORDER_REJECTED)
    return order


def cancel_order(actor: Actor, order_id: int) -> Order:
    require_permission(actor, "CANCEL_ORDER")
    order = _load_order(order_id)
    if order.user_id != actor.user_id and not has_permission(actor, "UPDATE_ORDER_STATUS"):
        raise deny_ownership(actor, f"order:{order.id}", "You did not place this order")

    with atomic():
        order = _load_order(order_id, for_update=True)
        _close(
            order,
            OrderStatus.CANCELLED,
            (OrderStatus.REQUESTED, OrderStatus.PENDING, OrderStatus.PROCESSING),
        )

    logger.info("Order %s cancelled by user %s", order.id, actor.user_id)
    _notify_buyer(order, f"Your order #{order.id} has been cancelled", NotificationType.ORDER_CANCELLED)
    return order


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def _newest_first(query):
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def list_my_orders(actor: Actor) -> list[Order]:
    return _newest_first(db.session.query(Order).filter(Order.user_id == actor.user_id))


def list_shop_orders(actor: Actor, shop_id: int) -> list[Order]:
    shop = db.session.get(Shop, shop_id)
    if not shop:
        raise NotFoundError("Shop not found")
    if shop.owner_id != actor.user_id and not has_permission(actor, "VIEW_ALL_ORDERS"):
        raise deny_ownership(actor, f"shop:{shop_id}", "You do not own this shop")
    return _newest_first(
        db.session.query(Order).filter(Order.shop_id == shop_id, Order.warehouse_id.is_(None))
    )


def _with_status(query, status: str | None):
    if status:
        if status not in OrderStatus.FLOW + OrderStatus.TERMINAL:
            raise ValidationError(f"Invalid status: {status}")
        query = query.filter(Order.status == status)
    return query


def list_warehouse_orders(actor: Actor, status: str | None = None) -> list[Order]:
    warehouse = warehouse_service.get_my_warehouse(actor)
    query = db.session.query(Order).filter(Order.warehouse_id == warehouse.id)
    return _newest_first(_with_status(query, status))


def list_all_orders(actor: Actor, status: str | None = None) -> list[Order]:
    require_permission(actor, "VIEW_ALL_ORDERS")
    return _newest_first(_with_status(db.session.query(Order), status))


def get_order(actor: Actor, order_id: int) -> Order:
    order = _load_order(order_id)

    involved = {order.user_id}
    if order.shop is not None:
        involved.add(order.shop.owner_id)
    if order.warehouse is not None:
        involved.add(order.warehouse.supplier_id)

    if actor.user_id not in involved and not has_permission(actor, "VIEW_ALL_ORDERS"):
        raise PermissionDeniedError("You are not involved in this order")
    return order
