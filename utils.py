# utils.py — helpers comunes (tiempo UTC y máscaras de PII para logs)
from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC: SQLite no guarda tzinfo y así comparamos siempre igual
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_utc(dt: datetime) -> str:
    return dt.isoformat(timespec="milliseconds") + "Z"


def mask_email(email: str) -> str:
    if not email or "@" not in email:
        return email
    local, domain = email.split("@", 1)
    return (local[:1] + "***@" + domain) if local else "***@" + domain


def mask_phone(phone: str) -> str:
    if not phone or len(phone) < 7:
        return phone
    return phone[:-6] + "******"
