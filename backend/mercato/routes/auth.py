# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes.

Signup always yields a Customer. Login, signup and verify all return the
same shape: {"user": ..., "token": ..., "role_id": ...}.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service, permission_service, session_service, user_service
from ..validation import DomainError, error_response
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _issue(user, status: int):
    session, token = session_service.create_session(
        user,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify({
        "user": user.to_dict(),
        "token": token,
        "role_id": session.role_id,
        "expires_at": session.expires_at.isoformat() + "Z",
    }), status


@auth_bp.post("/signup")
def signup_route():
    data = request.get_json(silent=True) or {}
    try:
        user = user_service.signup(data)
    except DomainError as exc:
        return error_response(exc)
    return _issue(user, 201)


@auth_bp.post("/login")
def login_route():
    data = request.get_json(silent=True) or {}
    identifier = data.get("username") or data.get("email")
    password = data.get("password")

    if not identifier or not password:
        return jsonify({"error": "username/email and password required", "kind": "INVALID_INPUT"}), 400

    user = auth_service.authenticate(identifier, password)
    if not user:
        permission_service.log_security_event(
            user_id=None,
            event_type="LOGIN_FAILED",
            success=False,
            resource="/api/auth/login",
            reason=f"Invalid credentials for {identifier}",
            ip_address=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )
        return jsonify({"error": "Invalid credentials", "kind": "UNAUTHENTICATED"}), 401

    current_app.logger.info("User %s logged in", user.id)
    return _issue(user, 200)


@auth_bp.get("/verify")
@require_auth
def verify_route():
    context = g.session_context
    return jsonify({
        "valid": True,
        "user_id": context.user.id,
        "username": context.username,
        "role_id": context.role_id,
    }), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(g.token, reason="User logout")
    permission_service.log_security_event(
        user_id=g.actor.user_id,
        role_id=g.actor.role_id,
        event_type="LOGOUT",
        success=True,
        resource="/api/auth/logout",
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    return jsonify({"message": "Logged out"}), 200


@auth_bp.post("/change-password")
@require_auth
def change_password_route():
    data = request.get_json(silent=True) or {}
    try:
        revoked = user_service.change_password(
            g.actor,
            data.get("current_password"),
            data.get("new_password"),
            keep_session_id=g.session_context.session.id,
        )
    except DomainError as exc:
        return error_response(exc)
    return jsonify({"message": "Password changed", "revoked_sessions": revoked}), 200
