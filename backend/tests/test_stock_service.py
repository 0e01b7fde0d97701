"""
Stock ledger tests.

Verifies:
- reserve() debits only when enough stock is stored
- A stale in-memory Product never decides a reservation
- Concurrent reservations cannot oversell
- Nothing is committed by the ledger itself
"""

import threading
from decimal import Decimal

import pytest
from sqlalchemy import update

from mercato.extensions import db
from mercato.models import Product
from mercato.services import stock_service
from mercato.services.stock_service import InsufficientStockError
from mercato.validation import NotFoundError, ValidationError


class TestReserve:

    def test_debits_and_returns_fresh_product(self, shop, make_product, current_stock):
        product = make_product(shop=shop, price="12.50", stock=8)

        reserved = stock_service.reserve(product.id, 3)
        db.session.commit()

        assert reserved.stock == 5
        assert reserved.price == Decimal("12.50")
        assert current_stock(product.id) == 5

    def test_exact_stock_empties_the_product(self, shop, make_product, current_stock):
        product = make_product(shop=shop, stock=4)

        stock_service.reserve(product.id, 4)
        db.session.commit()

        assert current_stock(product.id) == 0

    def test_insufficient_leaves_stock_unchanged(self, shop, make_product, current_stock):
        product = make_product(shop=shop, stock=2)

        with pytest.raises(InsufficientStockError) as excinfo:
            stock_service.reserve(product.id, 3)
        db.session.rollback()

        assert "available 2" in str(excinfo.value)
        assert excinfo.value.kind == "INSUFFICIENT_STOCK"
        assert current_stock(product.id) == 2

    def test_missing_product(self, db_session):
        with pytest.raises(NotFoundError):
            stock_service.reserve(987654, 1)

    @pytest.mark.parametrize("quantity", [0, -3, 1.5, "abc"])
    def test_rejects_bad_quantities(self, shop, make_product, quantity):
        product = make_product(shop=shop)
        with pytest.raises(ValidationError):
            stock_service.reserve(product.id, quantity)

    def test_does_not_commit(self, shop, make_product, current_stock):
        product = make_product(shop=shop, stock=6)

        stock_service.reserve(product.id, 5)
        db.session.rollback()

        assert current_stock(product.id) == 6

    def test_stale_instance_does_not_decide(self, shop, make_product, current_stock):
        product = make_product(shop=shop, stock=5)
        assert product.stock == 5

        db.session.execute(
            update(Product).where(Product.id == product.id).values(stock=1)
        )
        db.session.commit()

        with pytest.raises(InsufficientStockError):
            stock_service.reserve(product.id, 3)
        db.session.rollback()
        assert current_stock(product.id) == 1


class TestConcurrentReserve:
    """Two callers racing for the same units: exactly one wins."""

    def test_second_reservation_sees_first_commit(self, app, shop, make_product, current_stock):
        product = make_product(shop=shop, stock=5)
        product_id = product.id

        # Load the row in this session so it holds a stale stock of 5.
        assert db.session.get(Product, product_id).stock == 5

        with app.app_context():
            stock_service.reserve(product_id, 4)
            db.session.commit()

        with pytest.raises(InsufficientStockError):
            stock_service.reserve(product_id, 3)
        db.session.rollback()

        assert current_stock(product_id) == 1

    def test_threads_racing_for_the_same_units(self, app, shop, make_product, current_stock):
        product_id = make_product(shop=shop, stock=5).id
        db.session.commit()

        outcomes = []
        errors = []
        lock = threading.Lock()
        barrier = threading.Barrier(2)

        def worker(quantity):
            with app.app_context():
                try:
                    barrier.wait(timeout=10)
                    stock_service.reserve(product_id, quantity)
                    db.session.commit()
                    result = "ok"
                except InsufficientStockError:
                    db.session.rollback()
                    result = "insufficient"
                except Exception as exc:
                    db.session.rollback()
                    with lock:
                        errors.append(exc)
                    return
                finally:
                    db.session.remove()
                with lock:
                    outcomes.append((quantity, result))

        threads = [threading.Thread(target=worker, args=(q,)) for q in (4, 3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(result for _, result in outcomes) == ["insufficient", "ok"]
        winner = next(quantity for quantity, result in outcomes if result == "ok")
        assert current_stock(product_id) == 5 - winner

    def test_sequential_reservations_stop_at_zero(self, shop, make_product, current_stock):
        product = make_product(shop=shop, stock=5)
        outcomes = []

        for _ in range(4):
            try:
                stock_service.reserve(product.id, 2)
                db.session.commit()
                outcomes.append(True)
            except InsufficientStockError:
                db.session.rollback()
                outcomes.append(False)

        assert outcomes == [True, True, False, False]
        assert current_stock(product.id) == 1


class TestReleaseAndAvailable:

    def test_release_adds_back(self, shop, make_product, current_stock):
        product = make_product(shop=shop, stock=1)

        released = stock_service.release(product.id, 4)
        db.session.commit()

        assert released.stock == 5
        assert current_stock(product.id) == 5

    def test_release_missing_product(self, db_session):
        with pytest.raises(NotFoundError):
            stock_service.release(987654, 1)

    def test_available_reads_stored_value(self, shop, make_product):
        product = make_product(shop=shop, stock=7)
        assert stock_service.available(product.id) == 7

    def test_available_missing_product(self, db_session):
        with pytest.raises(NotFoundError):
            stock_service.available(987654)
