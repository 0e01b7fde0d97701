# Overview: Flask API routes for products operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request, g

from ..decorators import require_auth, require_permission
from ..services import product_service
from ..validation import DomainError, error_response


products_bp = Blueprint("products", __name__, url_prefix="/api")


@products_bp.get("/products")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_products():
    try:
        result = product_service.list_products(
            shop_id=request.args.get("shop_id"),
            warehouse_id=request.args.get("warehouse_id"),
            category_id=request.args.get("category_id"),
            q=request.args.get("q"),
            page=request.args.get("page"),
            page_size=request.args.get("page_size"),
        )
    except DomainError as exc:
        return error_response(exc)

    return jsonify({
        "items": [product.to_dict() for product in result["items"]],
        "page": result["page"],
        "page_size": result["page_size"],
        "total": result["total"],
    }), 200


@products_bp.get("/products/search-warehouse")
@require_auth
@require_permission("VIEW_PRODUCTS")
def search_warehouse_products():
    products = product_service.search_warehouse_products(request.args.get("q"))
    return jsonify([product.to_dict() for product in products]), 200


@products_bp.get("/products/<int:product_id>")
@require_auth
@require_permission("VIEW_PRODUCTS")
def get_product(product_id: int):
    try:
        product = product_service.get_product(product_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(product.to_dict()), 200


@products_bp.post("/shop-products")
@require_auth
@require_permission("MANAGE_SHOP_PRODUCTS")
def create_shop_product():
    try:
        product = product_service.create_shop_product(g.actor, request.get_json(silent=True) or {})
    except DomainError as exc:
        return error_response(exc)
    return jsonify(product.to_dict()), 201


@products_bp.post("/warehouse-products")
@require_auth
@require_permission("MANAGE_WAREHOUSE_PRODUCTS")
def create_warehouse_product():
    try:
        product = product_service.create_warehouse_product(g.actor, request.get_json(silent=True) or {})
    except DomainError as exc:
        return error_response(exc)
    return jsonify(product.to_dict()), 201


# Shop and warehouse products share these two; the service picks the gate
@products_bp.patch("/products/<int:product_id>")
@require_auth
def update_product(product_id: int):
    try:
        product = product_service.update_product(g.actor, product_id, request.get_json(silent=True))
    except DomainError as exc:
        return error_response(exc)
    return jsonify(product.to_dict()), 200


@products_bp.delete("/products/<int:product_id>")
@require_auth
def delete_product(product_id: int):
    try:
        product_service.delete_product(g.actor, product_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify({"message": "Product deleted"}), 200
