# Overview: Flask API routes for notifications; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request, g

from ..decorators import require_auth, require_permission
from ..services import notification_service


notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.get("")
@require_auth
@require_permission("VIEW_NOTIFICATIONS")
def list_notifications():
    limit = request.args.get("limit", default=notification_service.DEFAULT_LIMIT, type=int)
    notifications = notification_service.list_for_user(g.actor.user_id, limit=limit)
    return jsonify([n.to_dict() for n in notifications]), 200
