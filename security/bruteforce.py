from dataclasses import dataclass

from security.accounts import find_user_by_login
from security.errors import InvalidConfig

DEFAULT_USER_LOCK_THRESHOLD = 3
DEFAULT_IP_BAN_THRESHOLD = 10


def _positive_int(name: str, value) -> int:
    if isinstance(value, bool):
        raise InvalidConfig(f"{name} must be a positive integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidConfig(f"{name} must be a positive integer, got {value!r}") from None
    if isinstance(value, float) and number != value:
        raise InvalidConfig(f"{name} must be a positive integer, got {value!r}")
    if number < 1:
        raise InvalidConfig(f"{name} must be a positive integer, got {value!r}")
    return number


@dataclass(frozen=True)
class PolicyConfig:
    user_lock_threshold: int = DEFAULT_USER_LOCK_THRESHOLD
    ip_ban_threshold: int = DEFAULT_IP_BAN_THRESHOLD

    @classmethod
    def from_mapping(cls, config) -> "PolicyConfig":
        """
        Builds the policy from app.config. Raises InvalidConfig on a
        non-positive or non-integer threshold.
        """
        return cls(
            user_lock_threshold=_positive_int(
                "USER_LOCK_THRESHOLD",
                config.get("USER_LOCK_THRESHOLD", DEFAULT_USER_LOCK_THRESHOLD),
            ),
            ip_ban_threshold=_positive_int(
                "IP_BAN_THRESHOLD",
                config.get("IP_BAN_THRESHOLD", DEFAULT_IP_BAN_THRESHOLD),
            ),
        )


class LockoutPolicy:
    """
    A key (user id or ip) is blocked once its failure streak reaches the
    threshold. The streak counts attempts after the key's latest success,
    or all attempts if it never succeeded. No time window applies.
    """

    def __init__(self, ledger, config: PolicyConfig):
        self.ledger = ledger
        self.config = config

    def failure_streak(self, key: str, value) -> int:
        last_success = self.ledger.last_success_id(key, value) or 0
        return self.ledger.count_after(key, value, last_success)

    def is_user_locked(self, user) -> bool:
        if user is None:
            return False
        return self.failure_streak("user_id", user.id) >= self.config.user_lock_threshold

    def is_ip_banned(self, ip: str) -> bool:
        return self.failure_streak("ip", ip) >= self.config.ip_ban_threshold

    def is_login_locked(self, login: str) -> bool:
        return self.is_user_locked(find_user_by_login(login))
