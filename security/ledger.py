"""
Append-only store of login attempts, backed by the ``login_log`` table.

Rows are inserted and read, never updated or deleted. Every lock and ban
decision is recomputed from these rows, so there is no separate state to
keep in sync.
"""
from datetime import datetime
from functools import wraps

from sqlalchemy import Integer, and_, cast, func
from sqlalchemy.exc import SQLAlchemyError

from models.login_log import IP_MAX_LENGTH, LoginLog
from security.errors import StorageUnavailable

KEYS = ("user_id", "ip")

_ANY = object()


def _storage_errors(fn):
    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageUnavailable(f"login ledger {fn.__name__} failed") from exc
    return wrapper


def _column(key: str):
    if key not in KEYS:
        raise ValueError(f"Unknown ledger key: {key!r}")
    return getattr(LoginLog, key)


def _key_value(key: str, value):
    # ip column is bounded; reads must match what append stored
    if key == "ip" and isinstance(value, str):
        return value[:IP_MAX_LENGTH]
    return value


class AttemptLedger:
    def __init__(self, session):
        self.session = session

    @_storage_errors
    def append(self, succeeded: bool, login: str, ip: str, user_id=None, created_at=None) -> int:
        """
        Inserts one attempt and returns its sequence id.
        """
        row = LoginLog(
            created_at=created_at or datetime.utcnow(),
            user_id=user_id,
            login=login or "",
            ip=_key_value("ip", ip),
            succeeded=bool(succeeded),
        )
        self.session.add(row)
        self.session.commit()
        return row.id

    @_storage_errors
    def query(self, user_id=_ANY, ip=None, succeeded=None, after_id=None) -> list:
        """
        Returns matching attempts ordered by sequence id.
        Passing user_id=None selects attempts against unknown logins.
        """
        q = self.session.query(LoginLog)
        if user_id is None:
            q = q.filter(LoginLog.user_id.is_(None))
        elif user_id is not _ANY:
            q = q.filter(LoginLog.user_id == user_id)
        if ip is not None:
            q = q.filter(LoginLog.ip == _key_value("ip", ip))
        if succeeded is not None:
            q = q.filter(LoginLog.succeeded.is_(bool(succeeded)))
        if after_id is not None:
            q = q.filter(LoginLog.id > after_id)
        return q.order_by(LoginLog.id.asc()).all()

    @_storage_errors
    def count_after(self, key: str, value, after_id: int) -> int:
        col = _column(key)
        value = _key_value(key, value)
        return (
            self.session.query(func.count(LoginLog.id))
            .filter(col == value, LoginLog.id > after_id)
            .scalar()
        ) or 0

    @_storage_errors
    def last_success_id(self, key: str, value):
        col = _column(key)
        value = _key_value(key, value)
        return (
            self.session.query(func.max(LoginLog.id))
            .filter(col == value, LoginLog.succeeded.is_(True))
            .scalar()
        )

    @_storage_errors
    def recent_successes(self, user_id: int, limit: int = 2) -> list:
        return (
            self.session.query(LoginLog)
            .filter(LoginLog.user_id == user_id, LoginLog.succeeded.is_(True))
            .order_by(LoginLog.id.desc())
            .limit(limit)
            .all()
        )

    @_storage_errors
    def never_succeeded(self, key: str, threshold: int) -> list:
        """
        Keys that have no successful attempt at all and at least
        ``threshold`` attempts in total.
        """
        col = _column(key)
        attempts = func.count(LoginLog.id)
        q = (
            self.session.query(col)
            .filter(col.isnot(None))
            .group_by(col)
            .having(func.max(cast(LoginLog.succeeded, Integer)) == 0)
            .having(attempts >= threshold)
        )
        return [row[0] for row in q.all()]

    @_storage_errors
    def failing_since_last_success(self, key: str, threshold: int) -> list:
        """
        Keys with at least one success and at least ``threshold`` attempts
        after their most recent success.
        """
        col = _column(key)
        last = (
            self.session.query(col.label("key"), func.max(LoginLog.id).label("last_id"))
            .filter(col.isnot(None), LoginLog.succeeded.is_(True))
            .group_by(col)
            .subquery()
        )
        attempts = func.count(LoginLog.id)
        q = (
            self.session.query(last.c.key)
            .join(LoginLog, and_(col == last.c.key, LoginLog.id > last.c.last_id))
            .group_by(last.c.key)
            .having(attempts >= threshold)
        )
        return [row[0] for row in q.all()]
