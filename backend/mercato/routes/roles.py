# Overview: Flask API routes for role requests; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request, g

from ..decorators import require_auth, require_permission
from ..services import role_request_service
from ..validation import DomainError, error_response


roles_bp = Blueprint("roles", __name__, url_prefix="/api")


@roles_bp.post("/role-requests")
@require_auth
@require_permission("REQUEST_ROLE")
def request_role():
    data = request.get_json(silent=True) or {}
    try:
        role_request = role_request_service.request_role(g.actor, data.get("role"))
    except DomainError as exc:
        return error_response(exc)
    return jsonify(role_request.to_dict()), 201


@roles_bp.get("/role-requests")
@require_auth
@require_permission("REVIEW_ROLE_REQUESTS")
def list_role_requests():
    requests = role_request_service.list_role_requests(g.actor, status=request.args.get("status"))
    return jsonify([r.to_dict() for r in requests]), 200


@roles_bp.get("/role-requests/mine")
@require_auth
def list_my_role_requests():
    requests = role_request_service.list_my_role_requests(g.actor)
    return jsonify([r.to_dict() for r in requests]), 200


@roles_bp.post("/role/approve/<int:request_id>")
@require_auth
@require_permission("REVIEW_ROLE_REQUESTS")
def approve_role_request(request_id: int):
    try:
        role_request = role_request_service.approve_role_request(g.actor, request_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(role_request.to_dict()), 200


@roles_bp.post("/role/reject/<int:request_id>")
@require_auth
@require_permission("REVIEW_ROLE_REQUESTS")
def reject_role_request(request_id: int):
    try:
        role_request = role_request_service.reject_role_request(g.actor, request_id)
    except DomainError as exc:
        return error_response(exc)
    return jsonify(role_request.to_dict()), 200
