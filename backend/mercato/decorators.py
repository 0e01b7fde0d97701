# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service, permission_service
from .services.permission_service import PermissionDeniedError


def _is_authenticated() -> bool:
    return hasattr(g, "actor") and hasattr(g, "current_user")


def require_auth(f):
    """
    Require a valid bearer session.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object
    - g.actor: Actor(user_id, role_id, username) captured at login

    Returns 401 for a missing, malformed, unknown, expired or revoked token.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required", "kind": "UNAUTHENTICATED"}), 401

        token = auth_header.split(" ", 1)[1].strip()
        context = session_service.validate_session(token)

        if not context:
            return jsonify({"error": "Invalid or expired token", "kind": "UNAUTHENTICATED"}), 401

        g.current_user = context.user
        g.session_context = context
        g.actor = context.actor
        g.token = token

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require the session's role to grant permission_code.

    Denials are written to security_events and answered with 403 before
    the view runs.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required", "kind": "UNAUTHENTICATED"}), 401

            try:
                permission_service.require_permission(
                    g.actor,
                    permission_code,
                    resource=request.path,
                    ip_address=request.remote_addr,
                    user_agent=request.headers.get("User-Agent"),
                )
            except PermissionDeniedError as e:
                return jsonify({
                    "error": "Permission denied",
                    "kind": e.kind,
                    "required_permission": permission_code,
                    "message": str(e),
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
