from models import db
from models.user import User
from security.password import calculate_password_hash, generate_salt


def create_user(login: str, password: str, salt: str = None) -> User:
    salt = salt or generate_salt()
    user = User(
        login=login,
        salt=salt,
        password_hash=calculate_password_hash(password, salt),
    )
    db.session.add(user)
    db.session.commit()
    return user


def parse_seed_lines(lines):
    """
    Yields (login, password) from tab-separated lines.
    Blank lines and lines starting with '#' are skipped.
    """
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        parts = line.split("\t")
        if len(parts) != 2 or not parts[0]:
            raise ValueError(f"line {lineno}: expected 'login<TAB>password'")
        yield parts[0], parts[1]


def seed_users(lines) -> int:
    """
    Creates users from seed lines, skipping logins that already exist.
    Returns the number of users created.
    """
    existing = {login for (login,) in db.session.query(User.login).all()}
    created = 0
    for login, password in parse_seed_lines(lines):
        if login in existing:
            continue
        salt = generate_salt()
        db.session.add(User(
            login=login,
            salt=salt,
            password_hash=calculate_password_hash(password, salt),
        ))
        existing.add(login)
        created += 1
    db.session.commit()
    return created
