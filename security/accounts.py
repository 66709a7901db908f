from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.user import User
from security.errors import StorageUnavailable


def find_user_by_login(login: str):
    if not login:
        return None
    try:
        return User.query.filter_by(login=login).first()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageUnavailable("user lookup failed") from exc


def find_user_by_id(user_id):
    if user_id is None:
        return None
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageUnavailable("user lookup failed") from exc


def logins_for_user_ids(user_ids) -> dict:
    ids = [i for i in user_ids if i is not None]
    if not ids:
        return {}
    try:
        rows = db.session.query(User.id, User.login).filter(User.id.in_(ids)).all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageUnavailable("user lookup failed") from exc
    return {row.id: row.login for row in rows}
