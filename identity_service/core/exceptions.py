# identity_service/core/exceptions.py
"""
Typed failures raised by the authentication services.

Each one is an ``HTTPException`` with a fixed status code, so routes can let
them propagate and FastAPI renders ``{"detail": message}``. None of them is
retried by the services.
"""

from fastapi import HTTPException, status


class AuthServiceError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)


class ConflictError(AuthServiceError):
    """Duplicate registration (409)."""
    status_code = status.HTTP_409_CONFLICT


class UnauthorizedError(AuthServiceError):
    """Bad credentials, inactive account or unusable token (401)."""
    status_code = status.HTTP_401_UNAUTHORIZED


class BadRequestError(AuthServiceError):
    """Invalid, expired or already used reset token (400)."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AuthServiceError):
    """Target user missing or without a password (404)."""
    status_code = status.HTTP_404_NOT_FOUND
