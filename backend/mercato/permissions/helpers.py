# Overview: Utility functions for permission lookups and the pure authorization check.

from dataclasses import dataclass

from .definitions import PERMISSION_DEFINITIONS
from .roles import ROLE_PERMISSIONS, SystemRole


@dataclass(frozen=True)
class AuthorizationResult:
    allowed: bool
    reason: str | None = None


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permissions_by_category(category):
    """Get all permissions in a category."""
    return [perm for perm in PERMISSION_DEFINITIONS if perm[3] == category]


def get_permission_definition(code):
    """Get full definition for a permission code."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == code:
            return {
                "code": perm[0],
                "name": perm[1],
                "description": perm[2],
                "category": perm[3],
            }
    return None


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()


def resolve_role(role_id) -> SystemRole | None:
    try:
        return SystemRole(role_id)
    except (ValueError, TypeError):
        return None


def get_role_permissions(role_id) -> frozenset[str]:
    role = resolve_role(role_id)
    if role is None:
        return frozenset()
    return ROLE_PERMISSIONS[role]


def authorize(role_id, permission_code: str) -> AuthorizationResult:
    """
    Decide whether a role may perform an operation.

    Pure lookup against ROLE_PERMISSIONS: no database access, no side
    effects, and no role is exempt from the table.
    """
    role = resolve_role(role_id)
    if role is None:
        return AuthorizationResult(False, f"Unknown role: {role_id}")
    if not validate_permission_code(permission_code):
        return AuthorizationResult(False, f"Unknown permission: {permission_code}")
    if permission_code not in ROLE_PERMISSIONS[role]:
        return AuthorizationResult(False, f"{role.label} lacks permission: {permission_code}")
    return AuthorizationResult(True)
