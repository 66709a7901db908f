"""
Login attempt orchestration.

Checks run in a fixed order: origin ban, account lock, password. Whatever
the result, exactly one row is appended to the ledger before returning.
Rejections are returned as values; only storage failures raise.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from security.accounts import find_user_by_login
from security.bruteforce import LockoutPolicy, PolicyConfig
from security.password import verify_password
from security.report import Report, build_report


class LoginFailure(str, Enum):
    BANNED = "banned"
    LOCKED = "locked"
    WRONG_PASSWORD = "wrong_password"
    WRONG_LOGIN = "wrong_login"


@dataclass(frozen=True)
class LoginOutcome:
    user: Optional[object] = None
    failure: Optional[LoginFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None and self.user is not None


class LoginService:
    def __init__(self, ledger, config: PolicyConfig, clock: Callable[[], datetime] = datetime.utcnow):
        self.ledger = ledger
        self.config = config
        self.policy = LockoutPolicy(ledger, config)
        self.clock = clock

    def _record(self, succeeded: bool, login: str, ip: str, user=None) -> int:
        return self.ledger.append(
            succeeded=succeeded,
            login=login,
            ip=ip,
            user_id=user.id if user is not None else None,
            created_at=self.clock(),
        )

    def attempt_login(self, login: str, password: str, ip: str) -> LoginOutcome:
        user = find_user_by_login(login)

        if self.policy.is_ip_banned(ip):
            self._record(False, login, ip, user)
            return LoginOutcome(failure=LoginFailure.BANNED)

        if self.policy.is_user_locked(user):
            self._record(False, login, ip, user)
            return LoginOutcome(failure=LoginFailure.LOCKED)

        if user is not None and verify_password(password, user):
            self._record(True, login, ip, user)
            return LoginOutcome(user=user)

        if user is not None:
            self._record(False, login, ip, user)
            return LoginOutcome(failure=LoginFailure.WRONG_PASSWORD)

        self._record(False, login, ip)
        return LoginOutcome(failure=LoginFailure.WRONG_LOGIN)

    def is_login_locked(self, login: str) -> bool:
        return self.policy.is_login_locked(login)

    def is_ip_banned(self, ip: str) -> bool:
        return self.policy.is_ip_banned(ip)

    def last_login(self, user):
        """
        The login before the current one: the second most recent success,
        or the only success when there has been just one.
        """
        if user is None:
            return None
        recent = self.ledger.recent_successes(user.id, limit=2)
        return recent[-1] if recent else None

    def build_report(self) -> Report:
        return build_report(self.ledger, self.config)
