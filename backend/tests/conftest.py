"""
Pytest fixtures for mercato backend tests.

Provides a file-backed SQLite app, a wiped and role-seeded database per
test, user factories per role, and catalog factories for approved shops,
warehouses and their products.
"""

from decimal import Decimal
from itertools import count

import pytest

from mercato import create_app
from mercato.extensions import db
from mercato.models import ApprovalStatus, Product, Shop, Warehouse
from mercato.permissions import SystemRole
from mercato.services import auth_service
from mercato.services.permission_service import Actor


PASSWORD = "secret123"

_sequence = count(1)


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    db_file = tmp_path_factory.mktemp("db") / "mercato-test.sqlite3"
    uploads = tmp_path_factory.mktemp("uploads")

    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_file}',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'UPLOAD_FOLDER': str(uploads),
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every table, then seed the fixed roles."""
    with app.app_context():
        db.session.rollback()
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        auth_service.seed_roles()

        yield db.session

        db.session.rollback()


def actor_for(user) -> Actor:
    return Actor(user_id=user.id, role_id=user.role_id, username=user.username)


@pytest.fixture
def make_user(db_session):
    def _make(role: SystemRole, username: str | None = None, **kwargs):
        username = username or f"{role.label.lower()}{next(_sequence)}"
        return auth_service.create_user(username, PASSWORD, role, **kwargs)
    return _make


@pytest.fixture
def customer(make_user):
    return make_user(SystemRole.CUSTOMER)


@pytest.fixture
def retailer(make_user):
    return make_user(SystemRole.RETAILER)


@pytest.fixture
def merchant(make_user):
    return make_user(SystemRole.MERCHANT)


@pytest.fixture
def supplier(make_user):
    return make_user(SystemRole.SUPPLIER)


@pytest.fixture
def ops_admin(make_user):
    return make_user(SystemRole.OPERATIONS_ADMIN)


@pytest.fixture
def platform_admin(make_user):
    return make_user(SystemRole.PLATFORM_ADMIN)


@pytest.fixture
def developer(make_user):
    return make_user(SystemRole.DEVELOPER)


@pytest.fixture
def make_shop(db_session):
    def _make(owner, status=ApprovalStatus.APPROVED, name=None, **kwargs):
        shop = Shop(owner_id=owner.id, name=name or f"Shop {next(_sequence)}", status=status, **kwargs)
        db_session.add(shop)
        db_session.commit()
        return shop
    return _make


@pytest.fixture
def make_warehouse(db_session):
    def _make(supplier, status=ApprovalStatus.APPROVED, name=None, **kwargs):
        warehouse = Warehouse(
            supplier_id=supplier.id,
            name=name or f"Warehouse {next(_sequence)}",
            status=status,
            **kwargs,
        )
        db_session.add(warehouse)
        db_session.commit()
        return warehouse
    return _make


@pytest.fixture
def make_product(db_session):
    def _make(*, shop=None, warehouse=None, price="20.00", stock=10, name=None, **kwargs):
        product = Product(
            name=name or f"Product {next(_sequence)}",
            price=Decimal(price),
            stock=stock,
            shop_id=shop.id if shop else None,
            warehouse_id=warehouse.id if warehouse else None,
            **kwargs,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture
def shop(retailer, make_shop):
    return make_shop(retailer)


@pytest.fixture
def warehouse(supplier, make_warehouse):
    return make_warehouse(supplier)


def get_auth_token(client, username, password=PASSWORD):
    """Log in through the API and return the bearer token."""
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["token"]


def auth_headers(client, user, password=PASSWORD):
    return {"Authorization": f"Bearer {get_auth_token(client, user.username, password)}"}


def stock_of(product_id) -> int:
    """Stored stock, ignoring anything cached in the session."""
    return db.session.query(Product.stock).filter(Product.id == product_id).scalar()


@pytest.fixture
def as_actor():
    return actor_for


@pytest.fixture
def headers_for(client):
    def _headers(user, password=PASSWORD):
        return auth_headers(client, user, password)
    return _headers


@pytest.fixture
def current_stock():
    return stock_of


@pytest.fixture
def login(client):
    """Token for username, logging in through the API."""
    def _login(username, password=PASSWORD):
        return get_auth_token(client, username, password)
    return _login


@pytest.fixture
def password():
    return PASSWORD
