# Overview: Service-layer operations for categories; encapsulates business logic and database work.

"""
Categories carry caller-chosen ids (1..9999). Renumbering a category is a
replace: detach its products, delete the old row, insert the new row with
the original created_by_id/created_at, re-attach the products. All of it
runs in one transaction, so a failure at any step leaves the original row
and its product links exactly as they were.
"""

from __future__ import annotations

import logging

from ..extensions import db
from ..models import Category, Product
from ..time_utils import utcnow
from ..validation import ConflictError, NotFoundError, ValidationError, enforce_category_id
from .concurrency import atomic, lock_for_update
from .permission_service import Actor, require_permission


logger = logging.getLogger(__name__)


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required")
    name = name.strip()
    if len(name) > 128:
        raise ValidationError("name exceeds max length 128")
    return name


def _name_taken(name: str, exclude_id: int | None = None) -> bool:
    query = db.session.query(Category.id).filter(Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


def get_category(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


def list_categories() -> list[Category]:
    return db.session.query(Category).order_by(Category.id).all()


def create_category(actor: Actor, category_id, name) -> Category:
    require_permission(actor, "MANAGE_CATEGORIES")
    category_id = enforce_category_id(category_id)
    name = _clean_name(name)

    if db.session.get(Category, category_id):
        raise ConflictError(f"Category id {category_id} already exists")
    if _name_taken(name):
        raise ConflictError("Category name already exists")

    with atomic():
        category = Category(id=category_id, name=name, created_by_id=actor.user_id, updated_by_id=actor.user_id)
        db.session.add(category)

    logger.info("Category %s created by user %s", category_id, actor.user_id)
    return category


def _detach_products(category_id: int) -> list[int]:
    product_ids = [
        pid for (pid,) in db.session.query(Product.id).filter(Product.category_id == category_id).all()
    ]
    if product_ids:
        db.session.query(Product).filter(Product.id.in_(product_ids)).update(
            {Product.category_id: None}, synchronize_session=False
        )
    return product_ids


def _reattach_products(product_ids: list[int], category_id: int) -> None:
    if product_ids:
        db.session.query(Product).filter(Product.id.in_(product_ids)).update(
            {Product.category_id: category_id}, synchronize_session=False
        )


def update_category(actor: Actor, category_id: int, *, new_id=None, name=None) -> Category:
    require_permission(actor, "MANAGE_CATEGORIES")
    category = get_category(category_id)

    if name is not None:
        name = _clean_name(name)
        if _name_taken(name, exclude_id=category.id):
            raise ConflictError("Category name already exists")

    if new_id is not None:
        new_id = enforce_category_id(new_id)

    if new_id is None or new_id == category.id:
        with atomic():
            if name is not None:
                category.name = name
            category.updated_by_id = actor.user_id
        return category

    if db.session.get(Category, new_id):
        raise ConflictError(f"Category id {new_id} already exists")

    with atomic():
        old = lock_for_update(db.session.query(Category).filter(Category.id == category_id)).one()
        created_by_id = old.created_by_id
        created_at = old.created_at
        final_name = name if name is not None else old.name

        product_ids = _detach_products(old.id)
        db.session.delete(old)
        db.session.flush()

        replacement = Category(
            id=new_id,
            name=final_name,
            created_by_id=created_by_id,
            created_at=created_at,
            updated_by_id=actor.user_id,
            updated_at=utcnow(),
        )
        db.session.add(replacement)
        db.session.flush()

        _reattach_products(product_ids, new_id)

    logger.info("Category %s renumbered to %s by user %s", category_id, new_id, actor.user_id)
    return replacement


def delete_category(actor: Actor, category_id: int) -> None:
    require_permission(actor, "MANAGE_CATEGORIES")
    category = get_category(category_id)

    with atomic():
        _detach_products(category.id)
        db.session.delete(category)

    logger.info("Category %s deleted by user %s", category_id, actor.user_id)
