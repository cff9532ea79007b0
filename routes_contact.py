# routes_contact.py
import re

from flask import Blueprint, current_app, jsonify, request

from defense import admin_guard, submission_limit
from extensions import limiter
from utils import iso_utc, utcnow

bp_contact = Blueprint("contact", __name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
LEADING_INT_RE = re.compile(r"\s*[+-]?\d+")

AVAILABLE_ENDPOINTS = [
    "GET /api/health",
    "POST /api/contact",
    "GET /api/contacts",
    "PATCH /api/contacts/:id/status",
]


def _svc():
    return current_app.extensions["contact"]


def _int_arg(name: str, default: int) -> int:
    # como parseInt(x) || default: dígitos iniciales ("2abc" -> 2); vacío, basura, 0 o negativo -> default
    m = LEADING_INT_RE.match(request.args.get(name, ""))
    value = int(m.group(0)) if m else 0
    return value if value > 0 else default


@bp_contact.get("/")
def index():
    return jsonify(
        success=True,
        message="Contact Intake API",
        version="1.0.0",
        endpoints={"health": "/api/health", "contact": "/api/contact", "contacts": "/api/contacts"},
        timestamp=iso_utc(utcnow()),
    )


@bp_contact.get("/api/health")
def health():
    svc = _svc()
    return jsonify(
        success=True,
        message="Server is running",
        status="healthy",
        environment=svc.settings.environment,
        timestamp=iso_utc(utcnow()),
        services={
            "database": "connected" if svc.store.ping() else "disconnected",
            "email": "configured" if svc.notifier.enabled else "not configured",
            "spamGate": svc.spam_gate.status(),
        },
    )


@bp_contact.post("/api/contact")
@limiter.limit(submission_limit)
def submit_contact():
    data = request.get_json(silent=True) or {}
    summary = _svc().intake.submit(data)
    return jsonify(
        success=True,
        message="Thank you for your inquiry! We will contact you within 24 hours.",
        data=summary.to_dict(),
    ), 201


@bp_contact.get("/api/contacts")
@admin_guard
def list_contacts():
    page = _int_arg("page", DEFAULT_PAGE)
    limit = min(_int_arg("limit", DEFAULT_LIMIT), MAX_LIMIT)
    result = _svc().admin.list_submissions(page, limit)
    return jsonify(success=True, **result.to_dict())


@bp_contact.patch("/api/contacts/<submission_id>/status")
@admin_guard
def update_contact_status(submission_id: str):
    data = request.get_json(silent=True) or {}
    status = data.get("status") if isinstance(data, dict) else None
    row = _svc().admin.update_status(submission_id, status)
    current_app.logger.info("[ADMIN] %s -> %s", row.id, row.status)
    return jsonify(success=True, data=row.to_dict())
