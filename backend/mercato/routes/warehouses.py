# Overview: Flask API routes for warehouses operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request, g

from ..decorators import require_auth, require_permission
from ..services import order_service, warehouse_service
from ..validation import DomainError, error_response


warehouses_bp = Blueprint("warehouses", __name__, url_prefix="/api/warehouses")


@warehouses_bp.post("")
@require_auth
@require_permission("MANAGE_WAREHOUSE")
def create_warehouse():
    try:
        warehouse = warehouse_service.create_warehouse(g.actor, request.get_json(silent=True) or {})
    except DomainError as exc:
        return error_response(exc)
    return jsonify(warehouse.to_dict()), 201


@warehouses_bp.get("/mine")
@require_auth
@require_permission("MANAGE_WAREHOUSE")
def get_my_warehouse():
    try:
        warehouse = warehouse_service.get_my_warehouse(g.actor)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(warehouse.to_dict()), 200


@warehouses_bp.patch("/mine")
@require_auth
@require_permission("MANAGE_WAREHOUSE")
def update_my_warehouse():
    try:
        warehouse = warehouse_service.update_my_warehouse(g.actor, request.get_json(silent=True))
    except DomainError as exc:
        return error_response(exc)
    return jsonify(warehouse.to_dict()), 200


@warehouses_bp.delete("/mine")
@require_auth
@require_permission("MANAGE_WAREHOUSE")
def delete_my_warehouse():
    try:
        warehouse_service.delete_my_warehouse(g.actor)
    except DomainError as exc:
        return error_response(exc)
    return jsonify({"message": "Warehouse deleted"}), 200


@warehouses_bp.get("/mine/orders")
@require_auth
@require_permission("MANAGE_WAREHOUSE")
def list_my_warehouse_orders():
    try:
        orders = order_service.list_warehouse_orders(g.actor, status=request.args.get("status"))
    except DomainError as exc:
        return error_response(exc)
    return jsonify([order.to_dict() for order in orders]), 200


@warehouses_bp.get("/pending")
@require_auth
@require_permission("APPROVE_WAREHOUSES")
def list_pending_warehouses():
    warehouses = warehouse_service.list_pending_warehouses(g.actor)
    return jsonify([w.to_dict() for w in warehouses]), 200


@warehouses_bp.put("/<int:warehouse_id>/approve")
@require_auth
@require_permission("APPROVE_WAREHOUSES")
def approve_warehouse(warehouse_id: int):
    try:
        warehouse = warehouse_service.approve_warehouse(g.actor, warehouse_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(warehouse.to_dict()), 200


@warehouses_bp.put("/<int:warehouse_id>/reject")
@require_auth
@require_permission("APPROVE_WAREHOUSES")
def reject_warehouse(warehouse_id: int):
    try:
        warehouse = warehouse_service.reject_warehouse(g.actor, warehouse_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(warehouse.to_dict()), 200
