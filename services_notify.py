# services_notify.py — avisos por email al operador y acuse al remitente
import logging
import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from email.mime.text import MIMEText
from typing import Any, Callable, Dict, List, Tuple

from config import Settings
from errors import NotifyError
from utils import mask_email

log = logging.getLogger("contact.notify")


def render_operator(data: Dict[str, Any], cc: str) -> Tuple[str, str]:
    form = (data.get("formType") or "").upper()
    phone = data.get("phone") or ""
    subject = f"New Contact Form Submission - {form}"
    body = (
        f"Form Type: {form}\n"
        f"Name: {data.get('name')}\n"
        f"Email: {data.get('email')}\n"
        f"Phone: +{cc}-{phone}\n"
        f"Submitted At: {data.get('submittedAt')}\n"
        f"ID: {data.get('id')}\n\n"
        f"Message:\n{data.get('message')}\n\n"
        f"Quick Actions:\n"
        f"  Call: tel:+{cc}{phone}\n"
        f"  Reply: mailto:{data.get('email')}\n"
        f"  WhatsApp: https://wa.me/{cc}{phone}\n"
    )
    return subject, body


def render_applicant(data: Dict[str, Any], company: str) -> Tuple[str, str]:
    subject = f"Thank you for contacting {company}"
    body = (
        f"Dear {data.get('name')},\n\n"
        f"Thank you for reaching out to {company}! We have received your message "
        f"and our team will review it carefully.\n\n"
        f"What happens next?\n"
        f"  - Our team will review your requirements\n"
        f"  - You'll receive a detailed response within 24 hours\n\n"
        f"Best regards,\n"
        f"{company}\n\n"
        f"This is an automated response. Please do not reply to this email.\n"
    )
    return subject, body


class DisabledNotifier:
    """SMTP sin configurar: las llamadas no hacen nada y no es un error."""

    enabled = False

    def notify_operator(self, data: Dict[str, Any]) -> None:
        log.info("[NOTIFY] email not configured, skipping operator notification")

    def notify_applicant(self, data: Dict[str, Any]) -> None:
        log.info("[NOTIFY] email not configured, skipping auto-reply")


class SmtpNotifier:
    enabled = True

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.pwd = settings.smtp_pass
        self.from_email = settings.mail_from or settings.smtp_user
        self.admin_email = settings.admin_email
        self.company = settings.company_name
        self.cc = settings.phone_country_code

    def _send(self, kind: str, to_email: str, subject: str, body: str) -> None:
        try:
            msg = MIMEText(body, "plain", "utf-8")
            msg["Subject"] = subject
            msg["From"]    = self.from_email
            msg["To"]      = to_email
            with smtplib.SMTP(self.host, self.port, timeout=10) as s:
                s.starttls()
                s.login(self.user, self.pwd)
                s.sendmail(self.from_email, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotifyError(kind, to_email, str(e)) from e
        log.info("[NOTIFY] %s email sent to %s", kind, mask_email(to_email))

    def notify_operator(self, data: Dict[str, Any]) -> None:
        subject, body = render_operator(data, self.cc)
        self._send("operator", self.admin_email, subject, body)

    def notify_applicant(self, data: Dict[str, Any]) -> None:
        subject, body = render_applicant(data, self.company)
        self._send("applicant", data["email"], subject, body)


def build_notifier(settings: Settings):
    if settings.smtp_configured:
        log.info("[NOTIFY] SMTP notifier ready (%s:%s)", settings.smtp_host, settings.smtp_port)
        return SmtpNotifier(settings)
    log.warning("[NOTIFY] SMTP not configured; notifications disabled")
    return DisabledNotifier()


class NotificationDispatcher:
    """Runs both notifications on a background pool; never joined with the request."""

    def __init__(self, notifier, max_workers: int = 2):
        self.notifier = notifier
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="contact_notify")

    def dispatch(self, data: Dict[str, Any]) -> List[Future]:
        return [
            self._executor.submit(self._run, "operator", self.notifier.notify_operator, data),
            self._executor.submit(self._run, "applicant", self.notifier.notify_applicant, data),
        ]

    @staticmethod
    def _run(kind: str, fn: Callable[[Dict[str, Any]], None], data: Dict[str, Any]) -> bool:
        try:
            fn(data)
            return True
        except NotifyError as e:
            log.error("[NOTIFY] %s", e)
        except Exception:
            log.exception("[NOTIFY] unexpected error in %s notification", kind)
        return False

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
