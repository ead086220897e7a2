"""
Errors raised by the usage metering services.
"Limit reached" is not an error: the usage gate reports it in its result.
"""


class UsageError(Exception):
    """Base class for usage metering failures."""


class ValidationError(UsageError):
    """The request cannot be metered: missing identity fields or a malformed day.

    Raised before the ledger is touched. Surfaced to the caller as a 400.
    """


class LedgerUnavailable(UsageError):
    """The usage ledger (or the subscription lookup behind it) failed.

    Surfaced as a 503. Never means the quota is exhausted.
    """
