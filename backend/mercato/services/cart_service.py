# Overview: Service-layer operations for carts and wishlists; encapsulates business logic and database work.

"""
Carts and wishlists are (user, product) rows. Adding a product that is
already present is a ConflictError; quantity changes go through
update_cart_item.
"""

from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..models import CartItem, Product, WishlistItem
from ..validation import ConflictError, NotFoundError, require_id, require_positive_int
from .concurrency import atomic
from .permission_service import Actor, require_permission


def _product(product_id) -> Product:
    product = db.session.get(Product, require_id(product_id, "product_id"))
    if not product:
        raise NotFoundError("Product not found")
    return product


# -- Cart --

def add_to_cart(actor: Actor, product_id, quantity=1) -> CartItem:
    require_permission(actor, "USE_CART")
    quantity = require_positive_int(quantity)
    product = _product(product_id)

    if db.session.get(CartItem, (actor.user_id, product.id)):
        raise ConflictError("Product already in cart")

    with atomic():
        item = CartItem(user_id=actor.user_id, product_id=product.id, quantity=quantity)
        db.session.add(item)
    return item


def _cart_item(actor: Actor, product_id) -> CartItem:
    item = db.session.get(CartItem, (actor.user_id, require_id(product_id, "product_id")))
    if not item:
        raise NotFoundError("Product not in cart")
    return item


def update_cart_item(actor: Actor, product_id, quantity) -> CartItem:
    require_permission(actor, "USE_CART")
    quantity = require_positive_int(quantity)
    item = _cart_item(actor, product_id)

    with atomic():
        item.quantity = quantity
    return item


def remove_from_cart(actor: Actor, product_id) -> None:
    require_permission(actor, "USE_CART")
    item = _cart_item(actor, product_id)
    with atomic():
        db.session.delete(item)


def clear_cart(actor: Actor) -> int:
    require_permission(actor, "USE_CART")
    with atomic():
        removed = db.session.query(CartItem).filter_by(user_id=actor.user_id).delete()
    return removed


def list_cart(actor: Actor) -> dict:
    require_permission(actor, "USE_CART")
    items = (
        db.session.query(CartItem)
        .filter_by(user_id=actor.user_id)
        .order_by(CartItem.created_at, CartItem.product_id)
        .all()
    )
    subtotal = sum((item.product.price * item.quantity for item in items), Decimal("0.00"))
    return {"items": items, "subtotal": subtotal}


# -- Wishlist --

def add_to_wishlist(actor: Actor, product_id) -> WishlistItem:
    require_permission(actor, "USE_WISHLIST")
    product = _product(product_id)

    if db.session.get(WishlistItem, (actor.user_id, product.id)):
        raise ConflictError("Product already in wishlist")

    with atomic():
        item = WishlistItem(user_id=actor.user_id, product_id=product.id)
        db.session.add(item)
    return item


def remove_from_wishlist(actor: Actor, product_id) -> None:
    require_permission(actor, "USE_WISHLIST")
    item = db.session.get(WishlistItem, (actor.user_id, require_id(product_id, "product_id")))
    if not item:
        raise NotFoundError("Product not in wishlist")
    with atomic():
        db.session.delete(item)


def list_wishlist(actor: Actor) -> list[WishlistItem]:
    require_permission(actor, "USE_WISHLIST")
    return (
        db.session.query(WishlistItem)
        .filter_by(user_id=actor.user_id)
        .order_by(WishlistItem.created_at, WishlistItem.product_id)
        .all()
    )
