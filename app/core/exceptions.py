# app/core/exceptions.py
"""Custom exceptions for the Stand Strong application."""
from fastapi import HTTPException
from typing import Any, Dict, Optional


class StandStrongException(HTTPException):
    """Base exception for request-level failures."""
    error = "Error"
    status_code = 500

    def __init__(
        self,
        message: str,
        headers: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        super().__init__(
            status_code=type(self).status_code,
            detail={"error": self.error, "message": message},
            headers=headers
        )


class BadRequestError(StandStrongException):
    """Invalid status value, missing field or malformed input."""
    error = "Bad Request"
    status_code = 400


class UnauthorizedError(StandStrongException):
    """Missing or invalid credentials."""
    error = "Unauthorized"
    status_code = 401

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(StandStrongException):
    """Acting on another user's resource or without the required role."""
    error = "Forbidden"
    status_code = 403


class NotFoundError(StandStrongException):
    """Exception raised when a resource is not found."""
    error = "Not Found"
    status_code = 404

    def __init__(self, resource: str, id: Any = None):
        message = f"{resource} not found"
        if id is not None:
            message += f" with id: {id}"
        super().__init__(message)


class ConflictError(StandStrongException):
    """Duplicate registration, full class, duplicate check-in or session."""
    error = "Conflict"
    status_code = 409
