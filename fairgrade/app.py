#!/usr/bin/env python3
"""
FairGrade - Activity Tracking Functions
=======================================
Run: python3 -m fairgrade.app
Then point the extension at: http://localhost:3000/functions/v1/
"""
import atexit
import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from fairgrade import config as settings_module
from fairgrade.auth import init_auth
from fairgrade.config import Config, CORS_ALLOW_HEADERS
from fairgrade.errors import FairGradeError
from fairgrade.routes import register_routes
from fairgrade.services.recalculation import build_queue
from fairgrade.services.store import supabase_store_factory

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    @app.errorhandler(FairGradeError)
    def handle_fairgrade_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unexpected error: %s", e)
        return jsonify({"error": "Internal server error"}), 500


def create_app(settings=None, store_factory=None, recalculation=None):
    """
    Build the Flask app.

    ``settings`` overrides values read from the environment. ``store_factory``
    (a zero-argument callable returning a store) and ``recalculation`` (an
    object with ``dispatch(project_id, student_id)``) default to the Supabase
    store and the queue chosen by RECALC_MODE.
    """
    cfg = Config.from_env()
    if settings:
        cfg.update(settings)
    cfg.validate()

    if store_factory is None:
        store_factory = supabase_store_factory(cfg.supabase_url, cfg.supabase_service_key)
    if recalculation is None:
        recalculation = build_queue(cfg, store_factory)
        atexit.register(recalculation.shutdown, wait=False)

    app = Flask(__name__)
    CORS(
        app,
        resources={r"/functions/*": {"origins": "*"}},
        allow_headers=CORS_ALLOW_HEADERS,
        methods=["GET", "POST", "OPTIONS"],
        send_wildcard=True,
    )
    app.extensions["fairgrade"] = {
        "config": cfg,
        "store_factory": store_factory,
        "recalculation": recalculation,
    }

    init_auth(app)
    register_error_handlers(app)
    register_routes(app)

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    return app


def main():
    logging.basicConfig(
        level=settings_module.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()
    logger.info("FairGrade functions listening on http://%s:%s", settings_module.HOST, settings_module.PORT)
    app.run(host=settings_module.HOST, port=settings_module.PORT, debug=settings_module.DEBUG)


if __name__ == '__main__':
    main()
