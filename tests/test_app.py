"""App factory and CLI tests."""
import json
import logging
import os
import subprocess
import sys

import pytest
from flask.logging import default_handler

from app import create_app
from config import Config
from models import db
from models.user import User
from security.errors import InvalidConfig
from security.password import verify_password


class _ZeroThreshold(Config):
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    USER_LOCK_THRESHOLD = 0


class _BadIpThreshold(Config):
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    IP_BAN_THRESHOLD = "ten"


@pytest.mark.parametrize("config", [_ZeroThreshold, _BadIpThreshold])
def test_invalid_thresholds_fail_at_startup(config):
    with pytest.raises(InvalidConfig):
        create_app(config)


def test_policy_loaded_from_config(app):
    policy = app.extensions["login_policy"]
    assert policy.user_lock_threshold == 3
    assert policy.ip_ban_threshold == 10


def test_create_user_command(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["create-user", "alice", "pw"])
    assert result.exit_code == 0
    assert "alice created" in result.output

    user = User.query.filter_by(login="alice").one()
    assert verify_password("pw", user)

    result = runner.invoke(args=["create-user", "alice", "other"])
    assert "already exists" in result.output


def test_seed_users_command(app, tmp_path):
    seed = tmp_path / "users.tsv"
    seed.write_text("# login\tpassword\nalice\tpw1\nbob\tpw2\n\nalice\tdup\n", encoding="utf-8")

    result = app.test_cli_runner().invoke(args=["seed-users", str(seed)])
    assert result.exit_code == 0
    assert "2 users created" in result.output
    assert verify_password("pw1", User.query.filter_by(login="alice").one())


def test_seed_users_rejects_malformed_lines(app, tmp_path):
    seed = tmp_path / "users.tsv"
    seed.write_text("alice pw1\n", encoding="utf-8")

    result = app.test_cli_runner().invoke(args=["seed-users", str(seed)])
    assert result.exit_code != 0
    assert "line 1" in result.output


def test_report_command(app, ledger, make_user):
    user = make_user("alice")
    for _ in range(3):
        ledger.append(False, "alice", "10.0.0.1", user_id=user.id)

    result = app.test_cli_runner().invoke(args=["report"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"banned_ips": [], "locked_users": ["alice"]}


def test_init_db_command(app):
    db.drop_all()
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert User.query.count() == 0


def test_audit_logger_has_handler(app):
    assert default_handler in logging.getLogger("loginguard.audit").handlers


def test_audit_lines_reach_stderr_without_test_logging(tmp_path):
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    script = (
        "from app import create_app\n"
        "from models import db\n"
        "app = create_app()\n"
        "with app.app_context():\n"
        "    db.create_all()\n"
        "    app.test_client().post('/login', json={'login': 'ghost', 'password': 's3cret-guess-42'})\n"
    )
    env = dict(os.environ, DATABASE_URL="sqlite://", LOG_LEVEL="INFO", PYTHONPATH=root)
    result = subprocess.run(
        [sys.executable, "-c", script],
        cwd=str(tmp_path),
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr
    assert "LOGIN_FAIL" in result.stderr
    assert "s3cret-guess-42" not in result.stderr
