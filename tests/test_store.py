from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from crud import SubmissionStore
from errors import InvalidStatus, PersistenceError
from extensions import db
from models_contact import Submission

T0 = datetime(2024, 5, 1, 12, 0, 0)


def make_row(i=0, **kw):
    base = dict(
        name="Jane Doe",
        email=f"user{i}@x.com",
        phone=f"{9000000000 + i}",
        message="Interested in your product",
        form_type="hero",
        status="new",
        submitted_at=T0 + timedelta(minutes=i),
    )
    base.update(kw)
    return Submission(**base)


@pytest.fixture
def store(ctx):
    return SubmissionStore()


def test_insert_assigns_unique_ids(store):
    a = store.insert(make_row(1))
    b = store.insert(make_row(2))
    assert a and b and a != b
    assert len(a) == 32
    assert db.session.get(Submission, a).status == "new"


def test_find_recent_matches_email_or_phone(store):
    store.insert(make_row(1))
    window = T0
    assert store.find_recent_by_contact("user1@x.com", "0000000000", window) is not None
    assert store.find_recent_by_contact("other@x.com", "9000000001", window) is not None
    assert store.find_recent_by_contact("other@x.com", "0000000000", window) is None


def test_find_recent_ignores_rows_before_window(store):
    store.insert(make_row(1))
    assert store.find_recent_by_contact("user1@x.com", "9000000001", T0 + timedelta(hours=1)) is None


def test_list_orders_newest_first_with_total(store):
    for i in range(5):
        store.insert(make_row(i))
    items, total = store.list(1, 2)
    assert total == 5
    assert [r.email for r in items] == ["user4@x.com", "user3@x.com"]
    items, total = store.list(3, 2)
    assert [r.email for r in items] == ["user0@x.com"]


def test_list_out_of_range_is_empty(store):
    store.insert(make_row(1))
    assert store.list(5, 10) == ([], 1)
    assert store.list(0, 10) == ([], 1)
    assert store.list(1, 0) == ([], 1)


def test_update_status(store):
    sid = store.insert(make_row(1))
    row = store.update_status(sid, "contacted")
    assert row.status == "contacted"
    assert row.submitted_at == T0 + timedelta(minutes=1)
    assert store.update_status("missing", "contacted") is None


def test_update_status_rejects_unknown_value(store):
    sid = store.insert(make_row(1))
    with pytest.raises(InvalidStatus):
        store.update_status(sid, "bogus")
    assert db.session.get(Submission, sid).status == "new"


class BrokenSession:
    def __init__(self):
        self.rolled_back = False

    def add(self, obj):
        pass

    def commit(self):
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    def execute(self, *a, **kw):
        raise OperationalError("SELECT", {}, Exception("database is gone"))

    def rollback(self):
        self.rolled_back = True


def test_insert_failure_raises_persistence_error():
    session = BrokenSession()
    store = SubmissionStore(session=session)
    with pytest.raises(PersistenceError) as ei:
        store.insert(make_row(1))
    assert session.rolled_back
    assert "database is locked" in ei.value.detail
    assert ei.value.status_code == 500


def test_read_failures_and_ping():
    store = SubmissionStore(session=BrokenSession())
    with pytest.raises(PersistenceError):
        store.find_recent_by_contact("a@x.com", "1234567890", T0)
    with pytest.raises(PersistenceError):
        store.list(1, 10)
    assert store.ping() is False


def test_ping_ok(store):
    assert store.ping() is True
