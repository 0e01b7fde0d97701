# Overview: Flask API routes for orders operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request, g

from ..decorators import require_auth, require_permission
from ..services import order_service
from ..validation import DomainError, error_response


orders_bp = Blueprint("orders", __name__, url_prefix="/api")

INTERNAL_ERROR = {"error": "Internal server error", "kind": "INTERNAL"}


@orders_bp.post("/orders")
@require_auth
@require_permission("PLACE_ORDER")
def create_order():
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.create_order(g.actor, data.get("product_id"), data.get("quantity"))
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify(INTERNAL_ERROR), 500
    return jsonify(order.to_dict()), 201


@orders_bp.post("/warehouse-orders")
@require_auth
@require_permission("CREATE_WAREHOUSE_ORDER")
def create_warehouse_order():
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.create_warehouse_order(
            g.actor,
            data.get("product_id"),
            data.get("quantity"),
            shop_id=data.get("shop_id"),
        )
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create warehouse order")
        return jsonify(INTERNAL_ERROR), 500
    return jsonify(order.to_dict()), 201


@orders_bp.post("/request-warehouse-order")
@require_auth
@require_permission("REQUEST_WAREHOUSE_ORDER")
def request_warehouse_order():
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.request_warehouse_order(
            g.actor,
            data.get("product_id"),
            data.get("quantity"),
            shop_id=data.get("shop_id"),
        )
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to request warehouse order")
        return jsonify(INTERNAL_ERROR), 500
    return jsonify(order.to_dict()), 201


@orders_bp.get("/orders")
@require_auth
@require_permission("VIEW_ALL_ORDERS")
def list_all_orders():
    try:
        orders = order_service.list_all_orders(g.actor, status=request.args.get("status"))
    except DomainError as exc:
        return error_response(exc)
    return jsonify([order.to_dict() for order in orders]), 200


@orders_bp.get("/orders/mine")
@require_auth
def list_my_orders():
    orders = order_service.list_my_orders(g.actor)
    return jsonify([order.to_dict() for order in orders]), 200


@orders_bp.get("/orders/<int:order_id>")
@require_auth
def get_order(order_id: int):
    try:
        order = order_service.get_order(g.actor, order_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(order.to_dict()), 200


@orders_bp.put("/orders/<int:order_id>/status")
@require_auth
@require_permission("UPDATE_ORDER_STATUS")
def update_order_status(order_id: int):
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.update_order_status(g.actor, order_id, data.get("status"))
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to update order %s", order_id)
        return jsonify(INTERNAL_ERROR), 500
    return jsonify(order.to_dict()), 200


@orders_bp.put("/orders/<int:order_id>/approve-request")
@require_auth
@require_permission("APPROVE_ORDER_REQUESTS")
def approve_order_request(order_id: int):
    try:
        order = order_service.approve_order_request(g.actor, order_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(order.to_dict()), 200


@orders_bp.put("/orders/<int:order_id>/reject-request")
@require_auth
@require_permission("APPROVE_ORDER_REQUESTS")
def reject_order_request(order_id: int):
    try:
        order = order_service.reject_order_request(g.actor, order_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(order.to_dict()), 200


@orders_bp.put("/orders/<int:order_id>/cancel")
@require_auth
@require_permission("CANCEL_ORDER")
def cancel_order(order_id: int):
    try:
        order = order_service.cancel_order(g.actor, order_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(order.to_dict()), 200
