# Overview: The stock ledger; the only code that changes Product.stock.

"""
Stock Ledger

reserve() is a single conditional UPDATE:

    UPDATE products SET stock = stock - :q WHERE id = :id AND stock >= :q

and inspects the affected-row count, so two reservations racing for the
same product can never both succeed when together they exceed the stock.
A stale in-memory Product never feeds the decision.

Neither function commits. The caller owns the transaction so the debit
and the order row land (or roll back) together.
"""

from __future__ import annotations

import logging

from sqlalchemy import update

from ..extensions import db
from ..models import Product
from ..validation import ValidationError, NotFoundError, require_positive_int


logger = logging.getLogger(__name__)


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the product's current stock."""
    kind = "INSUFFICIENT_STOCK"


def _conditional_update(statement):
    return db.session.execute(statement.execution_options(synchronize_session=False))


def reserve(product_id: int, quantity) -> Product:
    """
    Debit quantity from the product's stock.

    Returns the product refreshed from the database, so product.price is
    the price the order total should be frozen at.

    Raises NotFoundError if the product does not exist and
    InsufficientStockError if stock < quantity (stock is left unchanged).
    """
    quantity = require_positive_int(quantity)

    result = _conditional_update(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
    )

    if result.rowcount != 1:
        current = db.session.query(Product.stock).filter(Product.id == product_id).scalar()
        if current is None:
            raise NotFoundError("Product not found")
        raise InsufficientStockError(
            f"Insufficient stock for product {product_id}: requested {quantity}, available {current}"
        )

    product = db.session.get(Product, product_id, populate_existing=True)
    logger.info("Reserved %s of product %s (stock now %s)", quantity, product_id, product.stock)
    return product


def release(product_id: int, quantity) -> Product:
    """Return previously reserved quantity to the product's stock."""
    quantity = require_positive_int(quantity)

    result = _conditional_update(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity)
    )
    if result.rowcount != 1:
        raise NotFoundError("Product not found")

    product = db.session.get(Product, product_id, populate_existing=True)
    logger.info("Released %s of product %s (stock now %s)", quantity, product_id, product.stock)
    return product


def available(product_id: int) -> int:
    """Current stock as stored, bypassing any cached instance."""
    current = db.session.query(Product.stock).filter(Product.id == product_id).scalar()
    if current is None:
        raise NotFoundError("Product not found")
    return current
