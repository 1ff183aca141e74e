"""
Error taxonomy for the service.

Each error maps to one HTTP status and a short message that the client can
show as a dismissible notification.
"""

from __future__ import annotations


class TradeDeskError(Exception):
    status_code = 500
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TradeDeskError):
    """Missing or malformed input, rejected before any store write."""

    status_code = 400
    kind = "validation_error"


class AuthenticationError(TradeDeskError):
    """Missing, invalid, expired or revoked session, or bad credentials."""

    status_code = 401
    kind = "authentication_error"


class AuthorizationError(TradeDeskError):
    """A row-level policy denied the operation."""

    status_code = 403
    kind = "authorization_error"


class NotFoundError(TradeDeskError):
    status_code = 404
    kind = "not_found"


class ConflictError(TradeDeskError):
    status_code = 409
    kind = "conflict"
