# Overview: Service-layer operations for products; encapsulates business logic and database work.

"""
Products belong to exactly one shop or one warehouse. Only the owner of
that shop/warehouse may create, edit or delete them, and only while the
shop/warehouse is APPROVED for creation. Browsing only ever shows products
whose shop or warehouse is APPROVED.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_

from ..extensions import db
from ..models import ApprovalStatus, Category, Order, Product, Shop, Warehouse
from ..validation import (
    ConflictError,
    MAX_DB_INT,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    apply_patch,
    enforce_rules_product,
    require_id,
    validate_payload,
)
from . import approval_service, shop_service, warehouse_service
from .concurrency import atomic
from .permission_service import Actor, deny_ownership, require_permission


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

PRODUCT_FIELDS = frozenset({"name", "description", "price", "stock", "category_id"})

SHOP_PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=PRODUCT_FIELDS | {"shop_id"},
    required_on_create=frozenset({"name", "price", "stock", "shop_id"}),
)

WAREHOUSE_PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=PRODUCT_FIELDS,
    required_on_create=frozenset({"name", "price", "stock"}),
)


def _check_category(patch: dict) -> None:
    category_id = patch.get("category_id")
    if category_id is not None and not db.session.get(Category, category_id):
        raise NotFoundError("Category not found")


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def create_shop_product(actor: Actor, payload: dict) -> Product:
    require_permission(actor, "MANAGE_SHOP_PRODUCTS")
    data = validate_payload(model=Product, payload=payload, policy=SHOP_PRODUCT_POLICY, partial=False)
    enforce_rules_product(data)

    shop = shop_service.get_owned_shop(actor, data["shop_id"])
    approval_service.require_approved(shop, "shop")
    _check_category(data)

    with atomic():
        product = Product(**data)
        db.session.add(product)

    logger.info("Product %s created in shop %s", product.id, shop.id)
    return product


def create_warehouse_product(actor: Actor, payload: dict) -> Product:
    require_permission(actor, "MANAGE_WAREHOUSE_PRODUCTS")
    data = validate_payload(model=Product, payload=payload, policy=WAREHOUSE_PRODUCT_POLICY, partial=False)
    enforce_rules_product(data)

    warehouse = warehouse_service.find_supplier_warehouse(actor.user_id)
    if not warehouse:
        raise NotFoundError("Warehouse not found")
    approval_service.require_approved(warehouse, "warehouse")
    _check_category(data)

    with atomic():
        product = Product(warehouse_id=warehouse.id, **data)
        db.session.add(product)

    logger.info("Product %s created in warehouse %s", product.id, warehouse.id)
    return product


def _get_owned_product(actor: Actor, product_id: int) -> Product:
    product = get_product(product_id)

    if product.shop_id is not None:
        require_permission(actor, "MANAGE_SHOP_PRODUCTS")
        owner_id = product.shop.owner_id
    else:
        require_permission(actor, "MANAGE_WAREHOUSE_PRODUCTS")
        owner_id = product.warehouse.supplier_id

    if owner_id != actor.user_id:
        raise deny_ownership(actor, f"product:{product_id}", "You do not own this product")
    return product


def update_product(actor: Actor, product_id: int, payload: dict) -> Product:
    product = _get_owned_product(actor, product_id)

    policy = SHOP_PRODUCT_POLICY if product.shop_id is not None else WAREHOUSE_PRODUCT_POLICY
    patch = validate_payload(model=Product, payload=payload, policy=policy, partial=True)
    enforce_rules_product(patch)
    _check_category(patch)

    if "shop_id" in patch and patch["shop_id"] != product.shop_id:
        target = shop_service.get_owned_shop(actor, patch["shop_id"])
        approval_service.require_approved(target, "shop")

    with atomic():
        apply_patch(product, patch)

    return product


def delete_product(actor: Actor, product_id: int) -> None:
    product = _get_owned_product(actor, product_id)

    if db.session.query(Order.id).filter(Order.product_id == product.id).first():
        raise ConflictError("Product has orders and cannot be deleted")

    with atomic():
        db.session.delete(product)


def _visible_products():
    return (
        db.session.query(Product)
        .outerjoin(Shop, Product.shop_id == Shop.id)
        .outerjoin(Warehouse, Product.warehouse_id == Warehouse.id)
        .filter(or_(
            Shop.status == ApprovalStatus.APPROVED,
            Warehouse.status == ApprovalStatus.APPROVED,
        ))
    )


def _page_bounds(page, page_size) -> tuple[int, int]:
    page = require_id(page, "page") if page is not None else 1
    page_size = require_id(page_size, "page_size") if page_size is not None else DEFAULT_PAGE_SIZE
    if page < 1:
        raise ValidationError("page must be >= 1")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValidationError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
    if (page - 1) * page_size > MAX_DB_INT:
        raise ValidationError("page is out of range")
    return page, page_size


def list_products(
    *,
    shop_id: int | None = None,
    warehouse_id: int | None = None,
    category_id: int | None = None,
    q: str | None = None,
    page=None,
    page_size=None,
) -> dict:
    page, page_size = _page_bounds(page, page_size)

    query = _visible_products()
    if shop_id is not None:
        query = query.filter(Product.shop_id == require_id(shop_id, "shop_id"))
    if warehouse_id is not None:
        query = query.filter(Product.warehouse_id == require_id(warehouse_id, "warehouse_id"))
    if category_id is not None:
        query = query.filter(Product.category_id == require_id(category_id, "category_id"))
    if q:
        query = query.filter(Product.name.ilike(f"%{q.strip()}%"))

    total = query.count()
    items = (
        query.order_by(Product.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": items, "page": page, "page_size": page_size, "total": total}


def search_warehouse_products(q: str | None) -> list[Product]:
    query = _visible_products().filter(Product.warehouse_id.isnot(None))
    if q:
        query = query.filter(Product.name.ilike(f"%{q.strip()}%"))
    return query.order_by(Product.name, Product.id).all()
