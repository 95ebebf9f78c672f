# backend/dronemart/__init__.py
import logging
import time

from flask import Flask, g, request
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from werkzeug.exceptions import InternalServerError

from .config import Config, engine_options_for
from .errors import MarketplaceError, service_unavailable
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)

    # Overrides must land before the engine is created in db.init_app
    if test_config:
        app.config.update(test_config)
        if "SQLALCHEMY_DATABASE_URI" in test_config and "SQLALCHEMY_ENGINE_OPTIONS" not in test_config:
            app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options_for(app.config["SQLALCHEMY_DATABASE_URI"])

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Signing settings are read once; the codec is shared by every request
    from .services.credential_service import CredentialCodec, CredentialSettings
    app.extensions["credential_codec"] = CredentialCodec(CredentialSettings.from_config(app.config))

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.businesses import businesses_bp
    from .routes.products import products_bp
    from .routes.drones import drones_bp
    from .routes.orders import orders_bp
    from .routes.trips import trips_bp
    from .routes.stats import stats_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(businesses_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(drones_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(trips_bp)
    app.register_blueprint(stats_bp)

    if app.config.get("REQUEST_LOGGING", True):
        @app.before_request
        def log_request_start():
            g.request_started = time.perf_counter()
            app.logger.info("%s %s", request.method, request.path)

        @app.after_request
        def log_request_end(response):
            started = g.get("request_started")
            elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            app.logger.log(
                level,
                "%s %s - Status: %s (%.1f ms)",
                request.method, request.path, response.status_code, elapsed_ms,
            )
            return response

    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(e):
        return e.to_dict(), e.status_code

    @app.errorhandler(PoolTimeoutError)
    def handle_pool_timeout(e):
        app.logger.error("Database connection pool exhausted on %s %s", request.method, request.path)
        return service_unavailable()

    @app.errorhandler(InternalServerError)
    def handle_internal_error(e):
        return {"error": "Internal server error"}, 500

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
