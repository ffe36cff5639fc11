"""Domain errors for teamboard.

Every failure a caller can act on is raised as a :class:`TeamboardError`
subclass. Each carries an :class:`ErrorKind` so clients branch on a stable
code instead of comparing message text.

Hierarchy::

    TeamboardError
    ├── ValidationFailed        VALIDATION_ERROR
    ├── Unauthenticated         UNAUTHENTICATED
    ├── Forbidden               FORBIDDEN
    ├── NotFound                NOT_FOUND
    ├── Conflict                CONFLICT
    ├── ExpiredToken            EXPIRED_TOKEN
    ├── EmailMismatch           EMAIL_MISMATCH
    └── EmailDeliveryError      UPSTREAM_DELIVERY_FAILURE
"""

import enum
from typing import Any, Dict, Optional


class ErrorKind(str, enum.Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    EXPIRED_TOKEN = "EXPIRED_TOKEN"
    EMAIL_MISMATCH = "EMAIL_MISMATCH"
    UPSTREAM_DELIVERY_FAILURE = "UPSTREAM_DELIVERY_FAILURE"


HTTP_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: 422,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.EXPIRED_TOKEN: 410,
    ErrorKind.EMAIL_MISMATCH: 400,
    ErrorKind.UPSTREAM_DELIVERY_FAILURE: 502,
}


class TeamboardError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details: Dict[str, Any] = details or {}
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": self.kind.value, "message": self.message}
        if self.details:
            body["details"] = self.details
        return {"error": body}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


class ValidationFailed(TeamboardError):
    kind = ErrorKind.VALIDATION_ERROR


class Unauthenticated(TeamboardError):
    kind = ErrorKind.UNAUTHENTICATED


class Forbidden(TeamboardError):
    kind = ErrorKind.FORBIDDEN


class NotFound(TeamboardError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, identifier: Any = None, details: Optional[Dict[str, Any]] = None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found", details)


class Conflict(TeamboardError):
    kind = ErrorKind.CONFLICT


class ExpiredToken(TeamboardError):
    kind = ErrorKind.EXPIRED_TOKEN


class EmailMismatch(TeamboardError):
    kind = ErrorKind.EMAIL_MISMATCH


class EmailDeliveryError(TeamboardError):
    """Raised by email senders when the provider rejects or cannot be reached."""

    kind = ErrorKind.UPSTREAM_DELIVERY_FAILURE
