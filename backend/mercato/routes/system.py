# backend/mercato/routes/system.py
"""System health and uploaded-file endpoints."""

import time
from flask import Blueprint, jsonify, send_from_directory
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Role, User
from ..services import user_service
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        role_count = db.session.query(Role).count()
        user_count = db.session.query(User).count()
    except SQLAlchemyError as exc:
        db.session.rollback()
        return {"status": "unhealthy", "error": type(exc).__name__}

    return {
        "status": "healthy",
        "latency_ms": round((time.time() - start_time) * 1000, 2),
        "details": {"roles": role_count, "users": user_count},
    }


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    return jsonify({
        "status": "ok" if healthy else "degraded",
        "checked_at": to_utc_z(utcnow()),
        "database": database,
    }), 200 if healthy else 503


@system_bp.get("/uploads/avatars/<path:filename>")
def serve_avatar(filename: str):
    return send_from_directory(user_service.avatar_directory(), filename)
