# Overview: Flask API routes for categories operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request, g

from ..decorators import require_auth, require_permission
from ..services import category_service
from ..validation import DomainError, error_response


categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_categories():
    categories = category_service.list_categories()
    return jsonify([category.to_dict() for category in categories]), 200


@categories_bp.post("")
@require_auth
@require_permission("MANAGE_CATEGORIES")
def create_category():
    data = request.get_json(silent=True) or {}
    try:
        category = category_service.create_category(g.actor, data.get("id"), data.get("name"))
    except DomainError as exc:
        return error_response(exc)
    return jsonify(category.to_dict()), 201


@categories_bp.put("/<int:category_id>")
@require_auth
@require_permission("MANAGE_CATEGORIES")
def update_category(category_id: int):
    data = request.get_json(silent=True) or {}
    try:
        category = category_service.update_category(
            g.actor,
            category_id,
            new_id=data.get("id"),
            name=data.get("name"),
        )
    except DomainError as exc:
        return error_response(exc)
    return jsonify(category.to_dict()), 200


@categories_bp.delete("/<int:category_id>")
@require_auth
@require_permission("MANAGE_CATEGORIES")
def delete_category(category_id: int):
    try:
        category_service.delete_category(g.actor, category_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify({"message": "Category deleted"}), 200
