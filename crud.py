# crud.py — acceso a datos de Submission (SubmissionStore)
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select, text
from sqlalchemy.exc import SQLAlchemyError

from errors import InvalidStatus, PersistenceError
from extensions import db
from models_contact import STATUSES, Submission, new_submission_id

log = logging.getLogger("contact.store")


class SubmissionStore:
    """Durable collection of submissions backed by the shared Flask-SQLAlchemy session."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def insert(self, submission: Submission) -> str:
        if not submission.id:
            submission.id = new_submission_id()
        try:
            self.session.add(submission)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            log.error("[STORE] insert failed: %s", e)
            raise PersistenceError(detail=str(e)) from e
        return submission.id

    def find_recent_by_contact(self, email: str, phone: str, window_start: datetime) -> Optional[Submission]:
        q = (
            select(Submission)
            .where(or_(Submission.email == email, Submission.phone == phone))
            .where(Submission.submitted_at >= window_start)
            .limit(1)
        )
        try:
            return self.session.execute(q).scalars().first()
        except SQLAlchemyError as e:
            self.session.rollback()
            log.error("[STORE] duplicate lookup failed: %s", e)
            raise PersistenceError(detail=str(e)) from e

    def list(self, page: int, page_size: int) -> Tuple[List[Submission], int]:
        try:
            total = self.session.execute(select(func.count(Submission.id))).scalar() or 0
            if page < 1 or page_size < 1:
                return [], total
            q = (
                select(Submission)
                .order_by(Submission.submitted_at.desc(), Submission.id)
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            items = self.session.execute(q).scalars().all()
        except SQLAlchemyError as e:
            self.session.rollback()
            log.error("[STORE] list failed: %s", e)
            raise PersistenceError("Error fetching contacts", detail=str(e)) from e
        return list(items), total

    def update_status(self, submission_id: str, new_status: str) -> Optional[Submission]:
        if new_status not in STATUSES:
            raise InvalidStatus(new_status)
        try:
            row = self.session.get(Submission, submission_id)
            if row is None:
                return None
            row.status = new_status
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            log.error("[STORE] status update failed for %s: %s", submission_id, e)
            raise PersistenceError("Error updating contact status", detail=str(e)) from e
        return row

    def ping(self) -> bool:
        try:
            self.session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            self.session.rollback()
            log.warning("[STORE] ping failed: %s", e)
            return False
