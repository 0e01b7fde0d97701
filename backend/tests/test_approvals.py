"""
Shop, warehouse and product ownership tests.

Verifies:
- New shops and warehouses start PENDING and need a platform admin decision
- A decision can only be taken once
- Products can only be created in an owned, APPROVED shop or warehouse
- Browsing hides products of unapproved shops and warehouses
"""

from decimal import Decimal

import pytest

from mercato.extensions import db
from mercato.models import ApprovalStatus, Notification, NotificationType, Product, SecurityEvent
from mercato.permissions import SystemRole
from mercato.services import order_service, product_service, shop_service, warehouse_service
from mercato.services.permission_service import PermissionDeniedError
from mercato.validation import ConflictError, NotFoundError, ValidationError


# =============================================================================
# SHOPS
# =============================================================================


class TestShopLifecycle:

    def test_new_shop_is_pending(self, retailer, as_actor):
        shop = shop_service.create_shop(as_actor(retailer), {"name": "Corner", "description": "Books"})

        assert shop.status == ApprovalStatus.PENDING
        assert shop.owner_id == retailer.id
        assert [s.id for s in shop_service.list_my_shops(as_actor(retailer))] == [shop.id]
        assert shop_service.list_approved_shops() == []

    def test_customer_cannot_create_shop(self, customer, as_actor):
        with pytest.raises(PermissionDeniedError):
            shop_service.create_shop(as_actor(customer), {"name": "Nope"})

    @pytest.mark.parametrize(
        "payload",
        [{}, {"name": ""}, {"name": "x", "status": "APPROVED"}, {"name": "x", "owner_id": 1}],
    )
    def test_invalid_payloads(self, merchant, as_actor, payload):
        with pytest.raises(ValidationError):
            shop_service.create_shop(as_actor(merchant), payload)

    def test_platform_admin_approves(self, retailer, platform_admin, as_actor):
        shop = shop_service.create_shop(as_actor(retailer), {"name": "Corner"})

        pending = shop_service.list_pending_shops(as_actor(platform_admin))
        assert [s.id for s in pending] == [shop.id]

        approved = shop_service.approve_shop(as_actor(platform_admin), shop.id)

        assert approved.status == ApprovalStatus.APPROVED
        assert [s.id for s in shop_service.list_approved_shops()] == [shop.id]
        types = [n.type for n in db.session.query(Notification).filter_by(user_id=retailer.id)]
        assert types == [NotificationType.SHOP_APPROVED]

    def test_second_decision_conflicts(self, retailer, platform_admin, as_actor):
        shop = shop_service.create_shop(as_actor(retailer), {"name": "Corner"})
        shop_service.reject_shop(as_actor(platform_admin), shop.id)

        with pytest.raises(ConflictError):
            shop_service.approve_shop(as_actor(platform_admin), shop.id)

        db.session.expire_all()
        assert shop_service.get_shop(shop.id).status == ApprovalStatus.REJECTED

    @pytest.mark.parametrize(
        "role",
        [SystemRole.OPERATIONS_ADMIN, SystemRole.RETAILER, SystemRole.SUPPLIER, SystemRole.CUSTOMER],
    )
    def test_only_platform_admin_and_developer_decide(self, retailer, make_user, as_actor, role):
        shop = shop_service.create_shop(as_actor(retailer), {"name": "Corner"})
        with pytest.raises(PermissionDeniedError):
            shop_service.approve_shop(as_actor(make_user(role)), shop.id)

    def test_developer_can_decide(self, retailer, developer, as_actor):
        shop = shop_service.create_shop(as_actor(retailer), {"name": "Corner"})
        assert shop_service.approve_shop(as_actor(developer), shop.id).status == ApprovalStatus.APPROVED

    def test_missing_shop(self, platform_admin, as_actor):
        with pytest.raises(NotFoundError):
            shop_service.approve_shop(as_actor(platform_admin), 31337)

    def test_only_owner_updates(self, shop, merchant, retailer, as_actor):
        with pytest.raises(PermissionDeniedError):
            shop_service.update_shop(as_actor(merchant), shop.id, {"name": "Mine now"})

        event = db.session.query(SecurityEvent).filter_by(user_id=merchant.id).one()
        assert event.event_type == "OWNERSHIP_DENIED"

        updated = shop_service.update_shop(as_actor(retailer), shop.id, {"description": None})
        assert updated.description is None

    def test_shop_with_orders_cannot_be_deleted(self, shop, retailer, customer, make_product, as_actor):
        product = make_product(shop=shop)
        order_service.create_order(as_actor(customer), product.id, 1)

        with pytest.raises(ConflictError):
            shop_service.delete_shop(as_actor(retailer), shop.id)

    def test_delete_takes_products_along(self, shop, retailer, make_product, as_actor):
        product = make_product(shop=shop)

        shop_service.delete_shop(as_actor(retailer), shop.id)

        assert db.session.get(Product, product.id) is None


# =============================================================================
# WAREHOUSES
# =============================================================================


class TestWarehouseLifecycle:

    def test_one_warehouse_per_supplier(self, supplier, as_actor):
        warehouse = warehouse_service.create_warehouse(
            as_actor(supplier), {"name": "Depot", "location": "Harbor", "capacity": 500}
        )
        assert warehouse.status == ApprovalStatus.PENDING

        with pytest.raises(ConflictError):
            warehouse_service.create_warehouse(as_actor(supplier), {"name": "Second"})

    def test_negative_capacity(self, supplier, as_actor):
        with pytest.raises(ValidationError):
            warehouse_service.create_warehouse(as_actor(supplier), {"name": "Depot", "capacity": -1})

    def test_retailer_has_no_warehouse(self, retailer, as_actor):
        with pytest.raises(PermissionDeniedError):
            warehouse_service.create_warehouse(as_actor(retailer), {"name": "Depot"})

    @pytest.mark.parametrize("payload", [{"capacity": -1}, {"name": None}, {"supplier_id": 1}])
    def test_update_checks_role_before_payload(self, retailer, as_actor, payload):
        with pytest.raises(PermissionDeniedError):
            warehouse_service.update_my_warehouse(as_actor(retailer), payload)

        event = db.session.query(SecurityEvent).filter_by(user_id=retailer.id).one()
        assert event.action == "MANAGE_WAREHOUSE"

    def test_update_my_warehouse(self, warehouse, supplier, as_actor):
        updated = warehouse_service.update_my_warehouse(as_actor(supplier), {"capacity": 40, "location": None})

        assert updated.id == warehouse.id
        assert updated.capacity == 40
        assert updated.location is None

    def test_get_my_warehouse_without_one(self, supplier, as_actor):
        with pytest.raises(NotFoundError):
            warehouse_service.get_my_warehouse(as_actor(supplier))

    def test_decisions_notify_supplier(self, supplier, platform_admin, as_actor):
        warehouse = warehouse_service.create_warehouse(as_actor(supplier), {"name": "Depot"})
        assert [w.id for w in warehouse_service.list_pending_warehouses(as_actor(platform_admin))] == [warehouse.id]

        warehouse_service.reject_warehouse(as_actor(platform_admin), warehouse.id)

        types = [n.type for n in db.session.query(Notification).filter_by(user_id=supplier.id)]
        assert types == [NotificationType.WAREHOUSE_REJECTED]
        with pytest.raises(ConflictError):
            warehouse_service.reject_warehouse(as_actor(platform_admin), warehouse.id)

    def test_update_and_delete_own(self, warehouse, supplier, as_actor):
        updated = warehouse_service.update_my_warehouse(as_actor(supplier), {"location": "Dock 4"})
        assert updated.location == "Dock 4"

        warehouse_service.delete_my_warehouse(as_actor(supplier))
        assert warehouse_service.find_supplier_warehouse(supplier.id) is None


# =============================================================================
# PRODUCTS
# =============================================================================


class TestProductOwnership:

    def test_create_in_approved_shop(self, shop, retailer, as_actor):
        product = product_service.create_shop_product(
            as_actor(retailer),
            {"name": "Mug", "price": "7.25", "stock": 12, "shop_id": shop.id},
        )
        assert product.price == Decimal("7.25")
        assert product.shop_id == shop.id
        assert product.warehouse_id is None

    def test_pending_shop_refuses_products(self, retailer, make_shop, as_actor):
        pending = make_shop(retailer, status=ApprovalStatus.PENDING)
        with pytest.raises(ValidationError):
            product_service.create_shop_product(
                as_actor(retailer),
                {"name": "Mug", "price": "7.25", "stock": 1, "shop_id": pending.id},
            )

    def test_someone_elses_shop(self, shop, merchant, as_actor):
        with pytest.raises(PermissionDeniedError):
            product_service.create_shop_product(
                as_actor(merchant),
                {"name": "Mug", "price": "7.25", "stock": 1, "shop_id": shop.id},
            )

    @pytest.mark.parametrize(
        "overrides",
        [
            {"price": "-1"},
            {"price": "1.999"},
            {"price": "10000000000.00"},
            {"price": "NaN"},
            {"stock": -1},
            {"stock": "3.5"},
            {"stock": True},
            {"warehouse_id": 1},
        ],
    )
    def test_invalid_product_fields(self, shop, retailer, as_actor, overrides):
        payload = {"name": "Mug", "price": "7.25", "stock": 1, "shop_id": shop.id}
        payload.update(overrides)
        with pytest.raises(ValidationError):
            product_service.create_shop_product(as_actor(retailer), payload)

    def test_warehouse_product_goes_to_own_warehouse(self, warehouse, supplier, as_actor):
        product = product_service.create_warehouse_product(
            as_actor(supplier), {"name": "Pallet", "price": "100.00", "stock": 40}
        )
        assert product.warehouse_id == warehouse.id
        assert product.shop_id is None

    def test_unapproved_warehouse_refuses_products(self, supplier, make_warehouse, as_actor):
        make_warehouse(supplier, status=ApprovalStatus.PENDING)
        with pytest.raises(ValidationError):
            product_service.create_warehouse_product(
                as_actor(supplier), {"name": "Pallet", "price": "1.00", "stock": 1}
            )

    def test_unknown_category(self, shop, retailer, as_actor):
        with pytest.raises(NotFoundError):
            product_service.create_shop_product(
                as_actor(retailer),
                {"name": "Mug", "price": "1.00", "stock": 1, "shop_id": shop.id, "category_id": 77},
            )

    def test_update_and_delete_require_ownership(self, shop, retailer, merchant, make_product, as_actor):
        product = make_product(shop=shop)

        with pytest.raises(PermissionDeniedError):
            product_service.update_product(as_actor(merchant), product.id, {"stock": 0})
        with pytest.raises(PermissionDeniedError):
            product_service.delete_product(as_actor(merchant), product.id)

        updated = product_service.update_product(as_actor(retailer), product.id, {"stock": 0, "price": "3.10"})
        assert updated.stock == 0
        assert updated.price == Decimal("3.10")

        product_service.delete_product(as_actor(retailer), product.id)
        assert db.session.get(Product, product.id) is None

    def test_move_to_another_owned_shop(self, shop, retailer, make_shop, make_product, as_actor):
        product = make_product(shop=shop)
        other = make_shop(retailer)
        pending = make_shop(retailer, status=ApprovalStatus.PENDING)

        with pytest.raises(ValidationError):
            product_service.update_product(as_actor(retailer), product.id, {"shop_id": pending.id})

        moved = product_service.update_product(as_actor(retailer), product.id, {"shop_id": other.id})
        assert moved.shop_id == other.id

    def test_product_with_orders_cannot_be_deleted(self, shop, retailer, customer, make_product, as_actor):
        product = make_product(shop=shop)
        order_service.create_order(as_actor(customer), product.id, 1)

        with pytest.raises(ConflictError):
            product_service.delete_product(as_actor(retailer), product.id)


class TestProductBrowsing:

    def test_only_approved_owners_are_visible(self, retailer, supplier, make_shop, make_warehouse, make_product):
        open_shop = make_shop(retailer)
        closed_shop = make_shop(retailer, status=ApprovalStatus.PENDING)
        depot = make_warehouse(supplier)
        visible = make_product(shop=open_shop, name="Kettle")
        make_product(shop=closed_shop, name="Hidden kettle")
        stocked = make_product(warehouse=depot, name="Kettle crate")

        listing = product_service.list_products()

        assert [p.id for p in listing["items"]] == [visible.id, stocked.id]
        assert listing["total"] == 2
        assert listing["page"] == 1

    def test_filters_and_paging(self, shop, make_product):
        for i in range(5):
            make_product(shop=shop, name=f"Lamp {i}")
        make_product(shop=shop, name="Chair")

        found = product_service.list_products(shop_id=shop.id, q="lamp", page=2, page_size=2)

        assert found["total"] == 5
        assert [p.name for p in found["items"]] == ["Lamp 2", "Lamp 3"]

    @pytest.mark.parametrize(
        "page,page_size",
        [(0, 10), (1, 0), (1, 201), ("x", 10), ("9" * 30, 10), (2**62, 200)],
    )
    def test_bad_paging(self, db_session, page, page_size):
        with pytest.raises(ValidationError):
            product_service.list_products(page=page, page_size=page_size)

    @pytest.mark.parametrize("field", ["shop_id", "warehouse_id", "category_id"])
    def test_oversized_filter_ids(self, client, customer, headers_for, field):
        resp = client.get(f"/api/products?{field}={10**30}", headers=headers_for(customer))

        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "INVALID_INPUT"

    def test_search_warehouse_products(self, shop, warehouse, make_product):
        make_product(shop=shop, name="Rope")
        crate = make_product(warehouse=warehouse, name="Rope crate")

        assert [p.id for p in product_service.search_warehouse_products("rope")] == [crate.id]
