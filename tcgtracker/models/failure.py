"""
Failure classification for API responses.

Every user-visible failure is one of a small set of kinds so the frontend
can tell "resource not found" from "missing required field" from
"operation failed". Known failures carry their own HTTP status; store
failures are classified after the fact from the driver's error text.
"""

from enum import Enum

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    MISSING_REQUIRED = "missing_required"
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"

    # Only one catalog sync may run at a time
    CONFLICT = "conflict"

    # Store failures
    TABLE_MISSING = "table_missing"
    STORE_UNAVAILABLE = "store_unavailable"

    # Service failures
    EXTERNAL_API_ERROR = "external_api_error"

    UNKNOWN = "unknown"


class FailureDetail(BaseModel):
    """Body returned for every failed request."""

    error: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a response body."""
        return FailureDetail(
            error=self.message,
            kind=self.kind,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class NotFoundError(KnownError):
    """Requested record does not exist."""

    def __init__(self, message: str = "Card not found", detail: str | None = None):
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=message,
            detail=detail,
            status_code=404,
        )


class MissingFieldsError(KnownError):
    """One or more required creation fields were not supplied."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(
            kind=FailureKind.MISSING_REQUIRED,
            message="Missing required fields: name, set, and value are required",
            detail=", ".join(fields),
            status_code=400,
        )


class InvalidFieldError(KnownError):
    """A supplied field could not be interpreted."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=field,
            status_code=400,
        )


class SyncConflictError(KnownError):
    """
    A catalog sync was requested while another is still running.

    The in-flight run is left untouched.
    """

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.CONFLICT,
            message="Sync is already in progress",
            suggestion="Poll the sync status endpoint until the current run finishes.",
            status_code=409,
        )


_MISSING_TABLE_MARKERS = ("does not exist", "no such table", "undefinedtable")
_CONNECTION_MARKERS = (
    "connection refused",
    "could not connect",
    "connect call failed",
    "name or service not known",
    "nodename nor servname",
    "timeout",
)


def classify_store_error(exc: SQLAlchemyError) -> KnownError:
    """
    Turn a raw store failure into a generic 500 with a diagnostic hint.

    Distinguishes a missing table from an unreachable database where the
    driver's message makes that possible.
    """
    text = str(exc).lower()

    if any(marker in text for marker in _MISSING_TABLE_MARKERS):
        return KnownError(
            kind=FailureKind.TABLE_MISSING,
            message="Operation failed",
            detail="A required database table does not exist.",
            suggestion="Start the service once so it can create its tables.",
            status_code=500,
        )

    if any(marker in text for marker in _CONNECTION_MARKERS):
        return KnownError(
            kind=FailureKind.STORE_UNAVAILABLE,
            message="Operation failed",
            detail="Cannot connect to database.",
            suggestion="Check the DATABASE_URL setting and that the database is running.",
            status_code=500,
        )

    return KnownError(
        kind=FailureKind.UNKNOWN,
        message="Operation failed",
        detail=type(exc).__name__,
        suggestion="If this persists, please report the issue.",
        status_code=500,
    )
