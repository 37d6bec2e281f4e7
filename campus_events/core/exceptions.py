"""
Error taxonomy for the campus events service.

Every failure raised by the services carries a ``kind`` and a human readable
``message``; the API layer turns them into JSON responses with the matching
HTTP status. Nothing here is retried.
"""
from typing import Any, Dict, Optional


class CampusEventsError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"kind": self.kind, "message": self.message, "detail": self.message}
        body.update(self.details)
        return body


class NotFound(CampusEventsError):
    kind = "not_found"
    status_code = 404


class InvalidState(CampusEventsError):
    kind = "invalid_state"
    status_code = 400


class Conflict(CampusEventsError):
    kind = "conflict"
    status_code = 400


class ValidationError(CampusEventsError):
    kind = "validation_error"
    status_code = 400


class Forbidden(CampusEventsError):
    kind = "forbidden"
    status_code = 403


class AuthenticationError(CampusEventsError):
    kind = "unauthorized"
    status_code = 401
