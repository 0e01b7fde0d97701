# Overview: Flask API routes for cart and wishlist operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request, g

from ..decorators import require_auth, require_permission
from ..services import cart_service
from ..validation import DomainError, error_response


shopping_bp = Blueprint("shopping", __name__, url_prefix="/api")


@shopping_bp.get("/cart")
@require_auth
@require_permission("USE_CART")
def get_cart():
    cart = cart_service.list_cart(g.actor)
    return jsonify({
        "items": [item.to_dict() for item in cart["items"]],
        "subtotal": str(cart["subtotal"]),
    }), 200


@shopping_bp.post("/cart")
@require_auth
@require_permission("USE_CART")
def add_to_cart():
    data = request.get_json(silent=True) or {}
    try:
        item = cart_service.add_to_cart(g.actor, data.get("product_id"), data.get("quantity", 1))
    except DomainError as exc:
        return error_response(exc)
    return jsonify(item.to_dict()), 201


@shopping_bp.put("/cart/<int:product_id>")
@require_auth
@require_permission("USE_CART")
def update_cart_item(product_id: int):
    data = request.get_json(silent=True) or {}
    try:
        item = cart_service.update_cart_item(g.actor, product_id, data.get("quantity"))
    except DomainError as exc:
        return error_response(exc)
    return jsonify(item.to_dict()), 200


@shopping_bp.delete("/cart/<int:product_id>")
@require_auth
@require_permission("USE_CART")
def remove_from_cart(product_id: int):
    try:
        cart_service.remove_from_cart(g.actor, product_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify({"message": "Removed from cart"}), 200


@shopping_bp.delete("/cart")
@require_auth
@require_permission("USE_CART")
def clear_cart():
    removed = cart_service.clear_cart(g.actor)
    return jsonify({"removed": removed}), 200


@shopping_bp.get("/wishlist")
@require_auth
@require_permission("USE_WISHLIST")
def get_wishlist():
    items = cart_service.list_wishlist(g.actor)
    return jsonify([item.to_dict() for item in items]), 200


@shopping_bp.post("/wishlist")
@require_auth
@require_permission("USE_WISHLIST")
def add_to_wishlist():
    data = request.get_json(silent=True) or {}
    try:
        item = cart_service.add_to_wishlist(g.actor, data.get("product_id"))
    except DomainError as exc:
        return error_response(exc)
    return jsonify(item.to_dict()), 201


@shopping_bp.delete("/wishlist/<int:product_id>")
@require_auth
@require_permission("USE_WISHLIST")
def remove_from_wishlist(product_id: int):
    try:
        cart_service.remove_from_wishlist(g.actor, product_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify({"message": "Removed from wishlist"}), 200
