from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Maximum price: 9,999,999,999.99 fits Numeric(12, 2)
MAX_PRICE = Decimal("9999999999.99")

CATEGORY_ID_MIN = 1
CATEGORY_ID_MAX = 9999

# Signed 64-bit INTEGER/BIGINT bound
MAX_DB_INT = 2**63 - 1


class DomainError(Exception):
    """Base for errors that map onto a client-visible error kind."""
    kind = "ERROR"
    status_code = 400


class ValidationError(DomainError, ValueError):
    """400-level input problem."""
    kind = "INVALID_INPUT"
    status_code = 400


class ConflictError(DomainError, ValueError):
    """409-level business rule conflict (e.g., duplicate username)."""
    kind = "CONFLICT"
    status_code = 409


class NotFoundError(DomainError, LookupError):
    """404-level missing entity."""
    kind = "NOT_FOUND"
    status_code = 404


def error_response(exc: DomainError) -> tuple[dict, int]:
    """Body and status for a DomainError, used by every blueprint."""
    return {"error": str(exc), "kind": exc.kind}, exc.status_code


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST

    The dict produced by validate_payload(partial=True) is the entity's patch:
    a key that is absent leaves the field untouched, a key mapped to None
    clears it (only for nullable columns), any other value replaces it.
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _parse_int(key: str, value: Any) -> int:
    # bool is a subclass of int; reject it explicitly
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def _coerce_int(key: str, value: Any) -> int:
    number = _parse_int(key, value)
    if abs(number) > MAX_DB_INT:
        raise ValidationError(f"{key} is out of range")
    return number


def _coerce_decimal(key: str, value: Any, scale: int | None) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ValidationError(f"{key} must be a number")
    try:
        # str() first so floats like 19.99 do not drag binary noise along
        dec = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{key} must be a number")
    if not dec.is_finite():
        raise ValidationError(f"{key} must be a finite number")
    if scale is not None and dec != dec.quantize(Decimal(1).scaleb(-scale)):
        raise ValidationError(f"{key} allows at most {scale} decimal places")
    return dec


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return _coerce_int(col.key, value)

    if isinstance(coltype, Numeric):
        return _coerce_decimal(col.key, value, coltype.scale)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def apply_patch(entity, patch: dict) -> None:
    """Write every key present in a validated patch onto the entity."""
    for key, value in patch.items():
        setattr(entity, key, value)


def require_positive_int(value: Any, field: str = "quantity") -> int:
    if value is None:
        raise ValidationError(f"{field} is required")
    number = _coerce_int(field, value)
    if number <= 0:
        raise ValidationError(f"{field} must be > 0")
    return number


def require_id(value: Any, field: str) -> int:
    if value is None:
        raise ValidationError(f"{field} is required")
    return _coerce_int(field, value)


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if patch.get("price") is not None:
        price = patch["price"]
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_PRICE:
            raise ValidationError(f"price cannot exceed {MAX_PRICE}")

    if patch.get("stock") is not None and patch["stock"] < 0:
        raise ValidationError("stock must be >= 0")


def enforce_category_id(value: Any) -> int:
    category_id = require_id(value, "id")
    if not CATEGORY_ID_MIN <= category_id <= CATEGORY_ID_MAX:
        raise ValidationError(
            f"Category id must be between {CATEGORY_ID_MIN} and {CATEGORY_ID_MAX}"
        )
    return category_id
