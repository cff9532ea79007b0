# services_admin.py — consultas de administración sobre los contactos
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

from crud import SubmissionStore
from errors import InvalidStatus, NotFound
from models_contact import STATUSES, Submission


@dataclass
class PagedResult:
    items: List[Submission] = field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit > 0 else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [s.to_dict() for s in self.items],
            "pagination": {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages},
        }


class AdminQuery:
    def __init__(self, store: SubmissionStore):
        self.store = store

    def list_submissions(self, page: int, page_size: int) -> PagedResult:
        items, total = self.store.list(page, page_size)
        return PagedResult(items=items, page=page, limit=page_size, total=total)

    def update_status(self, submission_id: str, status: Any) -> Submission:
        if status not in STATUSES:
            raise InvalidStatus(status)
        row = self.store.update_status(submission_id, status)
        if row is None:
            raise NotFound()
        return row
