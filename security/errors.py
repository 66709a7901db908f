class StorageUnavailable(Exception):
    """The login ledger or user table could not be read or written."""


class InvalidConfig(ValueError):
    """Lockout thresholds must be positive integers."""
