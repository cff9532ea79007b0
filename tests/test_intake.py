import threading
from datetime import datetime, timedelta

import pytest

from crud import SubmissionStore
from errors import DuplicateSubmission, NotifyError, PersistenceError, SpamRejected, ValidationError
from extensions import db
from models_contact import Submission
from services_intake import IntakePipeline
from services_notify import NotificationDispatcher


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class FakeGate:
    def __init__(self, verdict=True):
        self.verdict = verdict
        self.tokens = []

    def verify(self, token):
        self.tokens.append(token)
        return self.verdict


class RecordingDispatcher:
    def __init__(self):
        self.sent = []

    def dispatch(self, data):
        self.sent.append(data)
        return []


@pytest.fixture
def clock():
    return Clock(datetime(2024, 5, 1, 9, 30))


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def pipeline(ctx, clock, dispatcher):
    return IntakePipeline(SubmissionStore(), FakeGate(), dispatcher, clock=clock)


def _count():
    return db.session.query(Submission).count()


def test_jane_doe_scenario(pipeline, valid_payload, dispatcher, clock):
    summary = pipeline.submit(valid_payload)
    row = db.session.get(Submission, summary.id)
    assert row.email == "jane@x.com"
    assert row.status == "new"
    assert row.submitted_at == clock.now
    assert summary.to_dict() == {"id": row.id, "submittedAt": "2024-05-01T09:30:00.000Z", "formType": "hero"}
    assert dispatcher.sent[0]["email"] == "jane@x.com"
    assert dispatcher.sent[0]["id"] == row.id


def test_invalid_name_never_reaches_gate_or_store(ctx, valid_payload, dispatcher):
    gate = FakeGate()
    pipeline = IntakePipeline(SubmissionStore(), gate, dispatcher)
    valid_payload["name"] = "R2D2"
    with pytest.raises(ValidationError) as ei:
        pipeline.submit(valid_payload)
    assert ei.value.errors[0]["field"] == "name"
    assert gate.tokens == []
    assert _count() == 0
    assert dispatcher.sent == []


def test_spam_rejection_stops_before_store(ctx, valid_payload, dispatcher):
    pipeline = IntakePipeline(SubmissionStore(), FakeGate(verdict=False), dispatcher)
    with pytest.raises(SpamRejected):
        pipeline.submit(valid_payload)
    assert _count() == 0


@pytest.mark.parametrize("change", [
    {"phone": "1111111111"},
    {"email": "someone.else@x.com"},
])
def test_duplicate_within_window(pipeline, valid_payload, clock, change):
    pipeline.submit(valid_payload)
    clock.now += timedelta(minutes=59)
    second = dict(valid_payload, **change)
    with pytest.raises(DuplicateSubmission) as ei:
        pipeline.submit(second)
    assert ei.value.status_code == 429
    assert "wait" in ei.value.message
    assert _count() == 1


def test_resubmission_after_window_succeeds(pipeline, valid_payload, clock):
    first = pipeline.submit(valid_payload)
    clock.now += timedelta(hours=1, seconds=1)
    second = pipeline.submit(valid_payload)
    assert first.id != second.id
    assert _count() == 2


def test_persistence_failure_propagates(ctx, valid_payload, dispatcher, monkeypatch):
    store = SubmissionStore()

    def broken_insert(row):
        raise PersistenceError(detail="disk full")

    monkeypatch.setattr(store, "insert", broken_insert)
    pipeline = IntakePipeline(store, FakeGate(), dispatcher)
    with pytest.raises(PersistenceError):
        pipeline.submit(valid_payload)
    assert dispatcher.sent == []


class FailingOperatorNotifier:
    enabled = True

    def __init__(self):
        self.applicants = []

    def notify_operator(self, data):
        raise NotifyError("operator", "ops@x.com", "connection refused")

    def notify_applicant(self, data):
        self.applicants.append(data["email"])


def test_notification_failure_does_not_fail_submission(ctx, valid_payload):
    notifier = FailingOperatorNotifier()
    dispatcher = NotificationDispatcher(notifier)
    pipeline = IntakePipeline(SubmissionStore(), FakeGate(), dispatcher)
    summary = pipeline.submit(valid_payload)
    dispatcher.shutdown(wait=True)
    assert db.session.get(Submission, summary.id) is not None
    assert notifier.applicants == ["jane@x.com"]


class ExplodingDispatcher:
    def dispatch(self, data):
        raise RuntimeError("cannot schedule new futures after shutdown")


def test_dispatch_failure_after_commit_still_succeeds(ctx, valid_payload):
    pipeline = IntakePipeline(SubmissionStore(), FakeGate(), ExplodingDispatcher())
    summary = pipeline.submit(valid_payload)
    assert db.session.get(Submission, summary.id) is not None
    assert _count() == 1


class BlockingNotifier:
    enabled = True

    def __init__(self):
        self.release = threading.Event()
        self.done = []

    def notify_operator(self, data):
        self.release.wait(timeout=10)
        self.done.append("operator")

    def notify_applicant(self, data):
        self.release.wait(timeout=10)
        self.done.append("applicant")


def test_submit_returns_before_notifications_finish(ctx, valid_payload):
    notifier = BlockingNotifier()
    dispatcher = NotificationDispatcher(notifier)
    pipeline = IntakePipeline(SubmissionStore(), FakeGate(), dispatcher)
    summary = pipeline.submit(valid_payload)
    assert summary.id
    assert not notifier.release.is_set()
    assert notifier.done == []
    notifier.release.set()
    dispatcher.shutdown(wait=True)
    assert sorted(notifier.done) == ["applicant", "operator"]
