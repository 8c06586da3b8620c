"""
Bagshare Error Taxonomy
=======================
Every failure the core reports to a caller is one of these kinds.

- VALIDATION_FAILED      malformed or missing input (400)
- AUTHENTICATION_FAILED  missing or invalid credential (401)
- AUTHORIZATION_FAILED   wrong actor for the requested action (403)
- NOT_FOUND              referenced listing or match absent (404)
- PRECONDITION_FAILED    lifecycle transition attempted out of order (409)
- CONFLICT               duplicate match pair (409)

Authorization is always checked before preconditions, so a wrong actor gets
AUTHORIZATION_FAILED whatever the state of the match.
"""

from enum import Enum
from typing import Any, Dict, Optional


class MarketErrorCode(Enum):
    VALIDATION_FAILED = "VALIDATION_FAILED"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    CONFLICT = "CONFLICT"


class MarketException(Exception):
    """Base exception for request-terminal marketplace failures."""

    error_code = MarketErrorCode.VALIDATION_FAILED
    http_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(f"{self.error_code.value}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "error": self.error_code.value,
            "detail": self.message,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationFailed(MarketException):
    error_code = MarketErrorCode.VALIDATION_FAILED
    http_code = 400


class AuthenticationFailed(MarketException):
    error_code = MarketErrorCode.AUTHENTICATION_FAILED
    http_code = 401


class AuthorizationFailed(MarketException):
    error_code = MarketErrorCode.AUTHORIZATION_FAILED
    http_code = 403


class NotFound(MarketException):
    error_code = MarketErrorCode.NOT_FOUND
    http_code = 404


class PreconditionFailed(MarketException):
    error_code = MarketErrorCode.PRECONDITION_FAILED
    http_code = 409


class DuplicateMatch(MarketException):
    """Raised by stores when a second match is inserted for the same pair."""
    error_code = MarketErrorCode.CONFLICT
    http_code = 409
