import json
import logging

import click
from flask import Flask, jsonify
from flask.logging import default_handler

from config import Config
from routes import health_bp, auth_bp, report_bp

from models import db
from flask_migrate import Migrate
from security.bruteforce import PolicyConfig
from security.errors import StorageUnavailable
from utils.auth_context import get_login_service, load_current_user
from utils.timing import init_request_timing


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Fail at startup, never per request, on bad thresholds
    policy = PolicyConfig.from_mapping(app.config)
    app.extensions["login_policy"] = policy

    _configure_logging(app)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(report_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    if app.config.get("REQUEST_TIMING", True):
        with app.app_context():
            init_request_timing(app, db.engine)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.errorhandler(StorageUnavailable)
    def _storage_unavailable(exc):
        app.logger.error("Storage unavailable: %s", exc, exc_info=exc.__cause__)
        return jsonify(error="Storage unavailable"), 503

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    app.logger.info(
        "Lockout policy: user_lock_threshold=%s ip_ban_threshold=%s",
        policy.user_lock_threshold,
        policy.ip_ban_threshold,
    )

    register_cli(app)

    return app


def _configure_logging(app):
    level = logging.getLevelName(app.config.get("LOG_LEVEL", "INFO"))
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)
    audit_logger = logging.getLogger("loginguard.audit")
    audit_logger.setLevel(level)
    if default_handler not in audit_logger.handlers:
        audit_logger.addHandler(default_handler)

#-------------------------
from utils.seed import create_user, seed_users
from security.accounts import find_user_by_login


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create the users and login_log tables."""
        db.create_all()
        click.echo("Database initialised")

    @app.cli.command("create-user")
    @click.argument("login")
    @click.argument("password")
    def create_user_command(login, password):
        """Create a user with a fresh salt."""
        if find_user_by_login(login):
            click.echo("User already exists")
            return
        user = create_user(login, password)
        click.echo(f"{user.login} created (id={user.id})")

    @app.cli.command("seed-users")
    @click.argument("path", type=click.File("r", encoding="utf-8"))
    def seed_users_command(path):
        """Create users from a file of login<TAB>password lines."""
        try:
            created = seed_users(path)
        except ValueError as exc:
            raise click.ClickException(str(exc))
        click.echo(f"{created} users created")

    @app.cli.command("report")
    def report_command():
        """Print currently banned ips and locked users as JSON."""
        report = get_login_service().build_report()
        click.echo(json.dumps(report.to_dict()))

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
