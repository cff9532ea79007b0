import pytest

from app import create_app
from config import Settings
from extensions import db

VALID = {
    "name": "Jane Doe",
    "email": "JANE@X.COM",
    "phone": "9876543210",
    "message": "Interested in your product",
    "formType": "hero",
    "recaptchaToken": "test_token",
}


def make_settings(tmp_path, **overrides):
    base = dict(
        environment="production",
        database_url="sqlite://",
        recaptcha_skip=True,
        log_dir=tmp_path / "logs",
    )
    base.update(overrides)
    return Settings(**base)


@pytest.fixture
def valid_payload():
    return dict(VALID)


@pytest.fixture
def make_app(tmp_path):
    apps = []

    def _make(test_config=None, **settings_overrides):
        cfg = {"TESTING": True, "SQLALCHEMY_ENGINE_OPTIONS": {}, "RATELIMIT_ENABLED": False}
        cfg.update(test_config or {})
        app = create_app(cfg, settings=make_settings(tmp_path, **settings_overrides))
        with app.app_context():
            db.create_all()
        apps.append(app)
        return app

    yield _make

    for app in apps:
        with app.app_context():
            db.session.remove()
            db.drop_all()
        app.extensions["contact"].dispatcher.shutdown()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app
