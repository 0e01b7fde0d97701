"""
Payload validation tests.
"""

from decimal import Decimal

import pytest

from mercato.models import Product, Shop
from mercato.services.product_service import SHOP_PRODUCT_POLICY
from mercato.services.shop_service import SHOP_POLICY
from mercato.validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    enforce_category_id,
    enforce_rules_product,
    error_response,
    require_positive_int,
    validate_payload,
)


def _product(payload, partial=False):
    return validate_payload(model=Product, payload=payload, policy=SHOP_PRODUCT_POLICY, partial=partial)


class TestValidatePayload:

    def test_create_normalizes(self):
        patch = _product({"name": "  Mug ", "price": 7.1, "stock": "12", "shop_id": 3})

        assert patch == {"name": "Mug", "price": Decimal("7.1"), "stock": 12, "shop_id": 3}

    def test_missing_required_fields_are_listed(self):
        with pytest.raises(ValidationError) as excinfo:
            _product({"name": "Mug"})
        assert str(excinfo.value) == "Missing required fields: price, shop_id, stock"

    def test_partial_only_checks_given_keys(self):
        assert _product({"stock": 0}, partial=True) == {"stock": 0}
        assert _product({}, partial=True) == {}

    def test_null_clears_nullable_columns(self):
        assert _product({"description": None}, partial=True) == {"description": None}
        with pytest.raises(ValidationError):
            _product({"name": None}, partial=True)

    @pytest.mark.parametrize(
        "payload",
        [
            {"stock": "1e3"},
            {"stock": 2.0},
            {"stock": False},
            {"price": True},
            {"price": "ten"},
            {"price": "Infinity"},
            {"name": {"nested": 1}},
            {"name": "x" * 256},
            {"id": 4},
        ],
    )
    def test_rejects(self, payload):
        with pytest.raises(ValidationError):
            _product(payload, partial=True)

    def test_missing_body_is_an_empty_patch(self):
        assert validate_payload(model=Shop, payload=None, policy=SHOP_POLICY, partial=True) == {}

    @pytest.mark.parametrize("payload", [[], "name", 3])
    def test_non_object_payloads(self, payload):
        with pytest.raises(ValidationError):
            validate_payload(model=Shop, payload=payload, policy=SHOP_POLICY, partial=True)


class TestRules:

    @pytest.mark.parametrize("price", ["0", "0.00", "9999999999.99"])
    def test_price_bounds_ok(self, price):
        enforce_rules_product({"price": Decimal(price)})

    @pytest.mark.parametrize("patch", [{"price": Decimal("-0.01")}, {"price": Decimal("10000000000")}, {"stock": -1}])
    def test_rule_violations(self, patch):
        with pytest.raises(ValidationError):
            enforce_rules_product(patch)

    @pytest.mark.parametrize("value,expected", [(1, 1), ("9999", 9999), (" 42 ", 42)])
    def test_category_ids(self, value, expected):
        assert enforce_category_id(value) == expected

    @pytest.mark.parametrize("value", [1, "3", 2**63 - 1])
    def test_positive_ints(self, value):
        assert require_positive_int(value) == int(value)

    @pytest.mark.parametrize("value", [2**63, 10**30, str(10**30)])
    def test_ints_beyond_64_bits(self, value):
        with pytest.raises(ValidationError, match="quantity is out of range"):
            require_positive_int(value)

    def test_patch_ints_beyond_64_bits(self):
        with pytest.raises(ValidationError, match="stock is out of range"):
            _product({"stock": 10**30}, partial=True)


class TestErrorResponse:

    @pytest.mark.parametrize(
        "exc,kind,status",
        [
            (ValidationError("bad"), "INVALID_INPUT", 400),
            (ConflictError("dupe"), "CONFLICT", 409),
            (NotFoundError("gone"), "NOT_FOUND", 404),
        ],
    )
    def test_shape(self, exc, kind, status):
        body, code = error_response(exc)
        assert body == {"error": str(exc), "kind": kind}
        assert code == status
