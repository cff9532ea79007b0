# defense.py — Contact BACKEND
# Defensa básica: rate limit del formulario (flask-limiter), cabeceras seguras y token opcional de admin.
import hmac
from functools import wraps

from flask import current_app, jsonify, request

from extensions import limiter

RATE_LIMIT_MESSAGE = "Too many form submissions, please try again later."


def submission_limit() -> str:
    """Límite dinámico del POST /api/contact (depende del modo)."""
    return current_app.config["CONTACT_RATE_LIMIT"]


def admin_guard(f):
    """Exige `Authorization: Bearer <ADMIN_API_TOKEN>` solo si el token está configurado."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        token = current_app.config.get("ADMIN_API_TOKEN") or ""
        if not token:
            return f(*args, **kwargs)
        auth = request.headers.get("Authorization", "")
        given = auth[7:].strip() if auth.lower().startswith("bearer ") else ""
        if not (given and hmac.compare_digest(given, token)):
            current_app.logger.warning("[DEFENSE] admin token rejected for %s %s", request.method, request.path)
            return jsonify(success=False, message="Unauthorized"), 401
        return f(*args, **kwargs)
    return wrapper


def init_defense(app):
    """Activa defensas en una app Flask. Devuelve True al finalizar."""
    app.config.setdefault("RATELIMIT_STRATEGY", "moving-window")
    app.config.setdefault("RATELIMIT_STORAGE_URI", "memory://")
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)
    limiter.init_app(app)
    app.logger.info("[DEFENSE] Rate limit ON for submissions (%s)", app.config["CONTACT_RATE_LIMIT"])

    @app.errorhandler(429)
    def _rate_limited(e):
        return jsonify(success=False, error=RATE_LIMIT_MESSAGE), 429

    @app.after_request
    def _secure_headers(resp):
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        return resp

    if app.config.get("ADMIN_API_TOKEN"):
        app.logger.info("[DEFENSE] admin endpoints require bearer token")
    else:
        app.logger.warning("[DEFENSE] admin endpoints are open (ADMIN_API_TOKEN not set)")
    return True
