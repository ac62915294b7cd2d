from __future__ import annotations

import logging
from flask import Flask, g, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from piscan.app.config import Config
from piscan.app.extensions import db, migrate, cors
from piscan.app.common.errors import ApiError
from piscan.app.common.request_id import echo_request_id, init_request_id
from piscan.app.cli import cli_bp
from piscan.modules.items.routes import api_bp as items_api_bp, bp as items_bp
from piscan.modules.lookup.routes import bp as lookup_bp, init_vendor_client


def _wants_json() -> bool:
    return request.path.startswith("/api/") or request.path == "/api"


def create_app(config_object: type[Config] = Config) -> Flask:
    app = Flask(__name__, template_folder="templates")
    app.config.from_object(config_object)

    logging.basicConfig(
        level=getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}})
    init_vendor_client(app)

    # The local store is created on first start, like the device's embedded db
    with app.app_context():
        db.create_all()

    # Request id
    @app.before_request
    def _before_request():
        init_request_id()

    app.after_request(echo_request_id)

    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    # Blueprints
    app.register_blueprint(items_bp)
    app.register_blueprint(items_api_bp, url_prefix="/api")
    app.register_blueprint(lookup_bp, url_prefix="/api")

    # CLI (flask seed, flask lookup)
    app.register_blueprint(cli_bp)

    @app.get("/api")
    def api_index():
        return {
            "name": "PiScan API",
            "version": "0.1.0",
            "endpoints": {
                "items": ["/items"],
                "lookup": ["/lookup/<barcode>"],
            },
        }, 200

    # Error handlers
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return jsonify(err.to_dict(g.get("request_id"))), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 500
        if _wants_json():
            payload = {
                "error": {
                    "code": "http_error",
                    "message": err.description,
                    "details": {"name": err.name},
                    "request_id": g.get("request_id"),
                }
            }
            return jsonify(payload), status
        return render_template("error.html", status=status, name=err.name, message=err.description), status

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled exception")
        db.session.rollback()
        if _wants_json():
            payload = {
                "error": {
                    "code": "internal_error",
                    "message": "Internal server error",
                    "details": {},
                    "request_id": g.get("request_id"),
                }
            }
            return jsonify(payload), 500
        return render_template("error.html", status=500, name="Internal Server Error", message=str(err)), 500

    return app
