# Overview: Flask API routes for users operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request, g

from ..decorators import require_auth, require_permission
from ..services import user_service
from ..validation import DomainError, error_response


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.post("")
@require_auth
@require_permission("CREATE_STAFF_USERS")
def create_staff_user():
    try:
        user = user_service.create_staff_user(g.actor, request.get_json(silent=True) or {})
    except DomainError as exc:
        return error_response(exc)
    return jsonify(user.to_dict()), 201


@users_bp.get("")
@require_auth
@require_permission("VIEW_USERS")
def list_users():
    users = user_service.list_users(g.actor)
    return jsonify([user.to_dict() for user in users]), 200


@users_bp.get("/developers")
@require_auth
@require_permission("VIEW_USER_DETAILS")
def list_developers():
    users = user_service.list_developer_users(g.actor)
    return jsonify([user.to_dict() for user in users]), 200


@users_bp.get("/me")
@require_auth
def get_me():
    return jsonify(g.current_user.to_dict()), 200


@users_bp.patch("/me")
@require_auth
@require_permission("MANAGE_OWN_PROFILE")
def update_me():
    try:
        user = user_service.update_profile(g.actor, request.get_json(silent=True))
    except DomainError as exc:
        return error_response(exc)
    return jsonify(user.to_dict()), 200


@users_bp.put("/me/avatar")
@require_auth
@require_permission("MANAGE_OWN_PROFILE")
def upload_avatar():
    upload = request.files.get("profilePicture")
    if upload is None:
        return jsonify({"error": "profilePicture file is required", "kind": "INVALID_INPUT"}), 400
    try:
        user = user_service.upload_avatar(g.actor, upload.filename, upload.read())
    except DomainError as exc:
        return error_response(exc)
    return jsonify(user.to_dict()), 200


@users_bp.get("/<int:user_id>")
@require_auth
@require_permission("VIEW_USER_DETAILS")
def get_user(user_id: int):
    try:
        user = user_service.get_user_details(g.actor, user_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(user.to_dict()), 200
