import logging
import os
from flask import Flask, jsonify, request
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

load_dotenv()

logger = logging.getLogger(__name__)


def _config_name():
    name = os.environ.get("FLASK_ENV")
    if name:
        return name
    # Managed platforms set PORT; never fall back to debug settings there
    if os.environ.get("RAILWAY_ENVIRONMENT") or os.environ.get("PORT"):
        return "production"
    return "development"


def create_app(config_name=None):
    flask_app = Flask(__name__)

    from app.config import config_map

    config_cls = config_map.get(config_name or _config_name(), config_map["development"])
    flask_app.config.from_object(config_cls)
    config_cls.init_app(flask_app)

    from app.extensions import db, migrate, init_queue

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    init_queue(flask_app)

    # Import models so Alembic sees them
    from app.models import Generation, Asset  # noqa: F401

    from app.blueprints.public import public_bp
    from app.blueprints.api import api_bp
    from app.blueprints.preview import preview_bp

    flask_app.register_blueprint(public_bp)
    flask_app.register_blueprint(api_bp)
    flask_app.register_blueprint(preview_bp)

    from app.cli import register_cli

    register_cli(flask_app)

    _register_error_handlers(flask_app)
    _register_health(flask_app)

    if not flask_app.debug:
        from whitenoise import WhiteNoise

        # Vendor bundles are versioned by sync_vendor.py, not by filename
        flask_app.wsgi_app = WhiteNoise(
            flask_app.wsgi_app,
            root=flask_app.static_folder,
            prefix="static/",
            max_age=86400,
        )

    if flask_app.config["PREVIEW_WARMUP"] and not flask_app.testing:
        from app.sandbox.inpage import warm_up

        warm_up()

    return flask_app


def _wants_json():
    return request.path.startswith(("/api/", "/preview/live"))


def _register_error_handlers(flask_app):
    """JSON bodies for API errors; HTML pages keep Flask's defaults."""

    @flask_app.errorhandler(HTTPException)
    def http_error(e):
        if not _wants_json():
            return e
        return jsonify({"error": e.description or e.name}), e.code

    @flask_app.errorhandler(Exception)
    def unhandled_error(e):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if _wants_json():
            return jsonify({"error": "Internal server error"}), 500
        return "Internal server error", 500


def _register_health(flask_app):
    @flask_app.route("/health")
    def health():
        from app import extensions
        from app.sandbox.transpiler import shared_transpiler

        checks = {"status": "ok", "preview": flask_app.config["PREVIEW_ISOLATION"]}
        try:
            extensions.db.session.execute(extensions.db.text("SELECT 1"))
            checks["db"] = "ok"
        except Exception:
            flask_app.logger.exception("Health check DB probe failed")
            checks["db"] = "error"
            checks["status"] = "degraded"

        if extensions.redis_client is None:
            checks["queue"] = extensions.task_queue.name
        else:
            try:
                extensions.redis_client.ping()
                checks["queue"] = "ok"
            except Exception:
                flask_app.logger.exception("Health check Redis probe failed")
                checks["queue"] = "error"
                checks["status"] = "degraded"

        # Informational only; the transpiler loads on first in-page render
        checks["transpiler"] = "ready" if shared_transpiler().ready else "not loaded"
        return checks, 200 if checks["status"] == "ok" else 503
