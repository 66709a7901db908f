from dataclasses import dataclass, field

from security.accounts import logins_for_user_ids


@dataclass
class Report:
    locked_users: set = field(default_factory=set)
    banned_ips: set = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "banned_ips": sorted(self.banned_ips),
            "locked_users": sorted(self.locked_users),
        }


def _blocked_keys(ledger, key: str, threshold: int) -> set:
    # Keys that never succeeded, then keys failing since their last success
    keys = set(ledger.never_succeeded(key, threshold))
    keys.update(ledger.failing_since_last_success(key, threshold))
    return keys


def banned_ips(ledger, config) -> set:
    return _blocked_keys(ledger, "ip", config.ip_ban_threshold)


def locked_users(ledger, config) -> set:
    user_ids = _blocked_keys(ledger, "user_id", config.user_lock_threshold)
    return set(logins_for_user_ids(user_ids).values())


def build_report(ledger, config) -> Report:
    return Report(
        locked_users=locked_users(ledger, config),
        banned_ips=banned_ips(ledger, config),
    )
