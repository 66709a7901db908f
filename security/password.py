import hashlib
import hmac
import secrets


def calculate_password_hash(password: str, salt: str) -> str:
    return hashlib.sha256(f"{password}:{salt}".encode("utf-8")).hexdigest()


def verify_password(password: str, user) -> bool:
    if user is None or not user.password_hash:
        return False
    if not isinstance(password, str):
        return False

    candidate = calculate_password_hash(password, user.salt or "")
    return hmac.compare_digest(
        candidate.encode("utf-8"),
        user.password_hash.encode("utf-8"),
    )


def generate_salt() -> str:
    return secrets.token_urlsafe(16)
