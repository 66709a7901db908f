from datetime import datetime

import pytest

from app import create_app
from config import Config
from models import db
from security.bruteforce import PolicyConfig
from security.ledger import AttemptLedger
from security.login import LoginService
from utils.seed import create_user

FIXED_NOW = datetime(2026, 1, 1, 12, 0, 0)


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    USER_LOCK_THRESHOLD = 3
    IP_BAN_THRESHOLD = 10
    TRUST_X_FORWARDED_FOR = False
    LOG_LEVEL = "INFO"


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ledger(app):
    return AttemptLedger(db.session)


@pytest.fixture
def policy_config(app):
    return app.extensions["login_policy"]


@pytest.fixture
def make_service(ledger):
    def _make(user_lock_threshold=3, ip_ban_threshold=10):
        config = PolicyConfig(user_lock_threshold=user_lock_threshold, ip_ban_threshold=ip_ban_threshold)
        return LoginService(ledger, config, clock=lambda: FIXED_NOW)
    return _make


@pytest.fixture
def service(make_service):
    return make_service()


@pytest.fixture
def make_user(app):
    def _make(login="alice", password="correct-horse"):
        return create_user(login, password)
    return _make
