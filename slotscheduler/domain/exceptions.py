"""
Domain-specific exception hierarchy for the slot scheduler.

All validation failures are raised synchronously by the stage that detects
them and are never retried. Malformed busy intervals are not errors: the
engines drop them silently.
"""


class SchedulingError(Exception):
    """Base class for all scheduling errors."""


class PreconditionViolation(SchedulingError, ValueError):
    """Raised when an argument breaks a documented precondition."""


class InvalidTimeSpec(SchedulingError, ValueError):
    """Raised for malformed or out-of-range time-of-day values."""


class InvalidTimezone(SchedulingError, ValueError):
    """Raised when an IANA timezone identifier cannot be resolved."""
