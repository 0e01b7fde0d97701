# Overview: Flask API routes for shops operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request, g

from ..decorators import require_auth, require_permission
from ..services import order_service, shop_service
from ..validation import DomainError, error_response


shops_bp = Blueprint("shops", __name__, url_prefix="/api/shops")


@shops_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_approved_shops():
    shops = shop_service.list_approved_shops()
    return jsonify([shop.to_dict() for shop in shops]), 200


@shops_bp.post("")
@require_auth
@require_permission("MANAGE_SHOP")
def create_shop():
    try:
        shop = shop_service.create_shop(g.actor, request.get_json(silent=True) or {})
    except DomainError as exc:
        return error_response(exc)
    return jsonify(shop.to_dict()), 201


@shops_bp.get("/mine")
@require_auth
@require_permission("MANAGE_SHOP")
def list_my_shops():
    shops = shop_service.list_my_shops(g.actor)
    return jsonify([shop.to_dict() for shop in shops]), 200


@shops_bp.get("/pending")
@require_auth
@require_permission("APPROVE_SHOPS")
def list_pending_shops():
    shops = shop_service.list_pending_shops(g.actor)
    return jsonify([shop.to_dict() for shop in shops]), 200


@shops_bp.patch("/<int:shop_id>")
@require_auth
@require_permission("MANAGE_SHOP")
def update_shop(shop_id: int):
    try:
        shop = shop_service.update_shop(g.actor, shop_id, request.get_json(silent=True))
    except DomainError as exc:
        return error_response(exc)
    return jsonify(shop.to_dict()), 200


@shops_bp.delete("/<int:shop_id>")
@require_auth
@require_permission("MANAGE_SHOP")
def delete_shop(shop_id: int):
    try:
        shop_service.delete_shop(g.actor, shop_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify({"message": "Shop deleted"}), 200


@shops_bp.put("/<int:shop_id>/approve")
@require_auth
@require_permission("APPROVE_SHOPS")
def approve_shop(shop_id: int):
    try:
        shop = shop_service.approve_shop(g.actor, shop_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(shop.to_dict()), 200


@shops_bp.put("/<int:shop_id>/reject")
@require_auth
@require_permission("APPROVE_SHOPS")
def reject_shop(shop_id: int):
    try:
        shop = shop_service.reject_shop(g.actor, shop_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(shop.to_dict()), 200


@shops_bp.get("/<int:shop_id>/orders")
@require_auth
def list_shop_orders(shop_id: int):
    try:
        orders = order_service.list_shop_orders(g.actor, shop_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify([order.to_dict() for order in orders]), 200
