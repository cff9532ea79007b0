# app.py — Contact Intake backend-API (formulario + admin + health)
import os, logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

import click
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Settings
from crud import SubmissionStore
from defense import init_defense
from errors import ContactAPIError, PersistenceError
from extensions import db
from routes_contact import AVAILABLE_ENDPOINTS, bp_contact
from services_admin import AdminQuery
from services_intake import IntakePipeline
from services_notify import NotificationDispatcher, build_notifier
from services_recaptcha import SpamGate

ENGINE_OPTIONS = {"pool_pre_ping": True, "pool_recycle": 300}
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass
class ContactServices:
    settings: Settings
    store: SubmissionStore
    spam_gate: SpamGate
    notifier: object
    dispatcher: NotificationDispatcher
    intake: IntakePipeline
    admin: AdminQuery


def build_services(settings: Settings) -> ContactServices:
    store = SubmissionStore()
    spam_gate = SpamGate(settings)
    notifier = build_notifier(settings)
    dispatcher = NotificationDispatcher(notifier)
    return ContactServices(
        settings=settings,
        store=store,
        spam_gate=spam_gate,
        notifier=notifier,
        dispatcher=dispatcher,
        intake=IntakePipeline(store, spam_gate, dispatcher),
        admin=AdminQuery(store),
    )


def create_app(test_config=None, settings: Settings = None, services: ContactServices = None):
    settings = settings or Settings.from_env()
    app = Flask(__name__)

    app.config.update(
        SQLALCHEMY_DATABASE_URI=settings.database_url,
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        SQLALCHEMY_ENGINE_OPTIONS=ENGINE_OPTIONS,
        MAX_CONTENT_LENGTH=10 * 1024 * 1024,
        CONTACT_RATE_LIMIT=settings.submission_rate_limit,
        ADMIN_API_TOKEN=settings.admin_api_token,
        EXPOSE_ERRORS=settings.permissive,
    )
    if test_config:
        app.config.update(test_config)

    _init_logging(app, settings)
    db.init_app(app)
    CORS(
        app,
        resources={r"/api/*": {"origins": list(settings.cors_origins)}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )
    init_defense(app)

    app.extensions["contact"] = services or build_services(settings)
    app.register_blueprint(bp_contact)
    _register_error_handlers(app)

    @app.cli.command("init-db")
    def init_db():
        """Crea la tabla contact_submissions y sus índices."""
        db.create_all()
        click.echo("Database tables and indexes created")

    app.logger.info(
        "Contact API listo (env=%s, email=%s, recaptcha=%s)",
        settings.environment,
        "enabled" if app.extensions["contact"].notifier.enabled else "disabled",
        app.extensions["contact"].spam_gate.status(),
    )
    return app


def _register_error_handlers(app):
    @app.errorhandler(ContactAPIError)
    def _contact_error(e):
        expose = isinstance(e, PersistenceError) and app.config.get("EXPOSE_ERRORS", False)
        if e.status_code >= 500:
            app.logger.error("%s: %s", e.__class__.__name__, e.detail or e.message)
        return jsonify(e.to_dict(expose_detail=expose)), e.status_code

    @app.errorhandler(405)
    def _method_not_allowed(e):
        # /api/* con método equivocado se trata como ruta inexistente
        if request.path.startswith("/api/") and request.method != "OPTIONS":
            return _not_found(e)
        return jsonify(success=False, message=e.description), 405

    @app.errorhandler(404)
    def _not_found(e):
        if request.path.startswith("/api/"):
            return jsonify(
                success=False,
                message=f"API endpoint not found: {request.method} {request.full_path.rstrip('?')}",
                availableEndpoints=AVAILABLE_ENDPOINTS,
            ), 404
        return jsonify(
            success=False,
            message="Endpoint not found",
            requestedUrl=request.full_path.rstrip("?"),
            method=request.method,
        ), 404

    @app.errorhandler(HTTPException)
    def _http_error(e):
        return jsonify(success=False, message=e.description), e.code

    @app.errorhandler(Exception)
    def _unhandled(e):
        app.logger.exception("Unhandled error: %s", e)
        body = {"success": False, "message": "Internal server error"}
        if app.config.get("EXPOSE_ERRORS"):
            body["error"] = str(e)
        return jsonify(body), 500


def _init_logging(app, settings: Settings):
    fmt = logging.Formatter(LOG_FORMAT)
    targets = [app.logger, logging.getLogger("contact")]
    for lg in targets:
        lg.setLevel(logging.INFO)
    if any(getattr(h, "_contact_handler", False) for h in targets[1].handlers):
        return
    handlers = [logging.StreamHandler()]
    logs_dir = Path(settings.log_dir)
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(logs_dir / "backend.log", maxBytes=5_000_000, backupCount=3, encoding="utf-8"))
    except OSError as e:
        app.logger.warning("File logging disabled: %s", e)
    for h in handlers:
        h.setFormatter(fmt)
        h._contact_handler = True
        for lg in targets:
            lg.addHandler(h)
    app.logger.info("Logging listo")


if __name__ == "__main__":
    settings = Settings.from_env()
    app = create_app(settings=settings)
    with app.app_context():
        db.create_all()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", str(settings.port))), debug=settings.permissive)
