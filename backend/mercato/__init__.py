# backend/mercato/__init__.py
from flask import Flask, jsonify, request
from werkzeug.routing import IntegerConverter

from .config import Config
from .extensions import db, migrate
from .logging_config import configure_logging
from .validation import MAX_DB_INT


class BoundedIntegerConverter(IntegerConverter):
    """<int:...> path segments limited to what an INTEGER column can hold."""

    def __init__(self, map, *args, **kwargs):
        kwargs.setdefault("max", MAX_DB_INT)
        super().__init__(map, *args, **kwargs)


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.url_map.converters["int"] = BoundedIntegerConverter
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.roles import roles_bp
    from .routes.shops import shops_bp
    from .routes.warehouses import warehouses_bp
    from .routes.products import products_bp
    from .routes.categories import categories_bp
    from .routes.orders import orders_bp
    from .routes.shopping import shopping_bp
    from .routes.notifications import notifications_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(roles_bp)
    app.register_blueprint(shops_bp)
    app.register_blueprint(warehouses_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(shopping_bp)
    app.register_blueprint(notifications_bp)

    @app.errorhandler(413)
    def payload_too_large(_exc):
        return jsonify({"error": "Upload too large", "kind": "INVALID_INPUT"}), 413

    @app.errorhandler(500)
    def internal_error(_exc):
        return jsonify({"error": "Internal server error", "kind": "INTERNAL"}), 500

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:4200",
            "http://127.0.0.1:4200",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
