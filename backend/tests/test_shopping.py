"""
Cart, wishlist and notification inbox tests.
"""

from decimal import Decimal

import pytest

from mercato.extensions import db
from mercato.models import CartItem, Notification
from mercato.permissions import SystemRole
from mercato.services import cart_service, notification_service, product_service
from mercato.validation import ConflictError, NotFoundError, ValidationError


class TestCart:

    def test_add_and_subtotal(self, customer, shop, make_product, as_actor):
        mug = make_product(shop=shop, price="4.50")
        lamp = make_product(shop=shop, price="19.99")
        actor = as_actor(customer)

        cart_service.add_to_cart(actor, mug.id, 2)
        cart_service.add_to_cart(actor, lamp.id)

        cart = cart_service.list_cart(actor)
        assert [(i.product_id, i.quantity) for i in cart["items"]] == [(mug.id, 2), (lamp.id, 1)]
        assert cart["subtotal"] == Decimal("28.99")

    def test_adding_twice_conflicts(self, customer, shop, make_product, as_actor):
        mug = make_product(shop=shop)
        cart_service.add_to_cart(as_actor(customer), mug.id)

        with pytest.raises(ConflictError):
            cart_service.add_to_cart(as_actor(customer), mug.id, 3)

    @pytest.mark.parametrize("quantity", [0, -2, "many"])
    def test_bad_quantity(self, customer, shop, make_product, as_actor, quantity):
        mug = make_product(shop=shop)
        with pytest.raises(ValidationError):
            cart_service.add_to_cart(as_actor(customer), mug.id, quantity)

    def test_update_remove_clear(self, customer, shop, make_product, as_actor):
        mug = make_product(shop=shop)
        lamp = make_product(shop=shop)
        actor = as_actor(customer)
        cart_service.add_to_cart(actor, mug.id)
        cart_service.add_to_cart(actor, lamp.id)

        assert cart_service.update_cart_item(actor, mug.id, 5).quantity == 5

        cart_service.remove_from_cart(actor, lamp.id)
        with pytest.raises(NotFoundError):
            cart_service.remove_from_cart(actor, lamp.id)

        assert cart_service.clear_cart(actor) == 1
        assert cart_service.list_cart(actor) == {"items": [], "subtotal": Decimal("0.00")}

    def test_missing_product(self, customer, as_actor):
        with pytest.raises(NotFoundError):
            cart_service.add_to_cart(as_actor(customer), 5555)

    def test_carts_are_per_user(self, customer, make_user, shop, make_product, as_actor):
        other = make_user(SystemRole.CUSTOMER)
        mug = make_product(shop=shop)
        cart_service.add_to_cart(as_actor(customer), mug.id)

        assert cart_service.list_cart(as_actor(other))["items"] == []
        with pytest.raises(NotFoundError):
            cart_service.update_cart_item(as_actor(other), mug.id, 2)

    def test_deleting_product_empties_carts(self, customer, retailer, shop, make_product, as_actor):
        mug = make_product(shop=shop)
        cart_service.add_to_cart(as_actor(customer), mug.id)

        product_service.delete_product(as_actor(retailer), mug.id)

        assert db.session.query(CartItem).count() == 0


class TestWishlist:

    def test_add_list_remove(self, customer, shop, make_product, as_actor):
        mug = make_product(shop=shop)
        actor = as_actor(customer)

        cart_service.add_to_wishlist(actor, mug.id)
        with pytest.raises(ConflictError):
            cart_service.add_to_wishlist(actor, mug.id)

        assert [w.product_id for w in cart_service.list_wishlist(actor)] == [mug.id]

        cart_service.remove_from_wishlist(actor, mug.id)
        assert cart_service.list_wishlist(actor) == []
        with pytest.raises(NotFoundError):
            cart_service.remove_from_wishlist(actor, mug.id)


class TestNotifications:

    def test_inbox_is_newest_first_and_limited(self, customer):
        for i in range(5):
            notification_service.emit(customer.id, f"message {i}", "TEST")

        inbox = notification_service.list_for_user(customer.id, limit=3)

        assert [n.message for n in inbox] == ["message 4", "message 3", "message 2"]

    def test_limit_is_clamped(self, customer):
        for i in range(3):
            notification_service.emit(customer.id, f"message {i}", "TEST")

        assert len(notification_service.list_for_user(customer.id, limit=0)) == 1
        assert len(notification_service.list_for_user(customer.id, limit=10_000)) == 3

    def test_no_recipient_is_a_no_op(self, db_session):
        assert notification_service.emit(None, "nobody", "TEST") is None
        assert db.session.query(Notification).count() == 0
