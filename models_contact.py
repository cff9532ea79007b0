# models_contact.py
import uuid

from extensions import db
from utils import utcnow, iso_utc

FORM_TYPES = ("hero", "final")
STATUSES = ("new", "contacted", "converted")


def new_submission_id() -> str:
    return uuid.uuid4().hex


class Submission(db.Model):
    __tablename__ = "contact_submissions"
    id           = db.Column(db.String(32), primary_key=True, default=new_submission_id)
    submitted_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # datos de quien escribe
    name         = db.Column(db.String(100), nullable=False)
    email        = db.Column(db.String(255), nullable=False, index=True)
    phone        = db.Column(db.String(10), nullable=False, index=True)
    message      = db.Column(db.Text, nullable=False)

    form_type    = db.Column(db.String(16), nullable=False)                 # hero|final
    status       = db.Column(db.String(16), default="new", nullable=False, index=True)  # new|contacted|converted

    __table_args__ = (
        db.Index("ix_contact_submissions_submitted_at_desc", submitted_at.desc()),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "message": self.message,
            "formType": self.form_type,
            "submittedAt": iso_utc(self.submitted_at),
            "status": self.status,
        }

    def __repr__(self):
        return f"<Submission {self.id} {self.form_type} {self.status}>"
