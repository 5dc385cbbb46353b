"""
Custom error classes for Agency Pulse.
Structured error handling with error codes across all modules.

Hierarchy:
    PulseError
    ├── DataError
    │   ├── ConfigError
    │   ├── DataFetchError
    │   ├── DataWriteError
    │   ├── DecodeError
    │   └── InvalidDateRangeError
    └── AggregationCancelledError
"""


class PulseError(Exception):
    """Base exception for all Agency Pulse errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict = None):
        self.code = code
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


# --- Data Errors ---

class DataError(PulseError):
    """Base class for data access and shaping errors."""
    pass


class ConfigError(DataError):
    """Missing or invalid configuration."""

    def __init__(self, message: str, setting: str = None):
        super().__init__(
            message, code="CONFIG_ERROR",
            details={"setting": setting},
        )


class DataFetchError(DataError):
    """A table query or RPC call against the store failed."""

    def __init__(self, message: str, source: str = None, cause: Exception = None):
        self.source = source
        self.cause = cause
        super().__init__(
            message, code="DATA_FETCH_FAILED",
            details={"source": source, "cause": repr(cause) if cause else None},
        )


class DataWriteError(DataError):
    """An insert or delete against the store failed."""

    def __init__(self, message: str, table: str = None, cause: Exception = None):
        self.table = table
        self.cause = cause
        super().__init__(
            message, code="DATA_WRITE_FAILED",
            details={"table": table, "cause": repr(cause) if cause else None},
        )


class DecodeError(DataError):
    """A store payload did not match its expected shape."""

    def __init__(self, message: str, source: str = None, field: str = None):
        self.source = source
        super().__init__(
            message, code="DECODE_FAILED",
            details={"source": source, "field": field},
        )


class InvalidDateRangeError(DataError):
    """Malformed date input or a range whose start is after its end."""

    def __init__(self, from_date, to_date, reason: str):
        super().__init__(
            f"Invalid date range {from_date!r}..{to_date!r}: {reason}",
            code="INVALID_DATE_RANGE",
            details={"from_date": from_date, "to_date": to_date},
        )


# --- Request lifecycle ---

class AggregationCancelledError(PulseError):
    """The caller abandoned an in-flight aggregation."""

    def __init__(self, stage: str):
        super().__init__(
            f"Aggregation cancelled before {stage}",
            code="AGGREGATION_CANCELLED",
            details={"stage": stage},
        )
