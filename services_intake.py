# services_intake.py — pipeline de alta de un formulario de contacto
#   validación -> reCAPTCHA -> duplicados (1h) -> guardar -> avisos (fire-and-forget)
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict

from crud import SubmissionStore
from errors import DuplicateSubmission, SpamRejected
from models_contact import Submission
from schemas import parse_contact_form
from services_notify import NotificationDispatcher
from services_recaptcha import SpamGate
from utils import iso_utc, mask_email, mask_phone, utcnow

log = logging.getLogger("contact.intake")

DUPLICATE_WINDOW = timedelta(hours=1)


@dataclass(frozen=True)
class SubmissionSummary:
    id: str
    submitted_at: datetime
    form_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "submittedAt": iso_utc(self.submitted_at), "formType": self.form_type}


class IntakePipeline:
    def __init__(
        self,
        store: SubmissionStore,
        spam_gate: SpamGate,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.spam_gate = spam_gate
        self.dispatcher = dispatcher
        self.clock = clock

    def submit(self, raw: Any) -> SubmissionSummary:
        """Run one submission through every gate.

        Raises ValidationError, SpamRejected, DuplicateSubmission or
        PersistenceError. Notification failures never surface here.
        """
        form = parse_contact_form(raw)

        if not self.spam_gate.verify(form.recaptcha_token):
            log.info("[INTAKE] captcha rejected for %s", mask_email(form.email))
            raise SpamRejected()

        now = self.clock()
        existing = self.store.find_recent_by_contact(form.email, form.phone, now - DUPLICATE_WINDOW)
        if existing is not None:
            log.info("[INTAKE] duplicate within window: %s / %s", mask_email(form.email), mask_phone(form.phone))
            raise DuplicateSubmission()

        row = Submission(
            name=form.name,
            email=form.email,
            phone=form.phone,
            message=form.message,
            form_type=form.form_type,
            status="new",
            submitted_at=now,
        )
        submission_id = self.store.insert(row)
        log.info("[INTAKE] saved %s (%s) - %s form", submission_id, mask_email(form.email), form.form_type)

        # snapshot: el hilo de avisos no toca la sesión de BD
        try:
            self.dispatcher.dispatch(row.to_dict())
        except Exception:
            log.exception("[INTAKE] notification dispatch failed for %s", submission_id)

        return SubmissionSummary(id=submission_id, submitted_at=now, form_type=form.form_type)
