"""
Application error taxonomy.

Every error is an ``HTTPException`` so services can raise it directly and the
gateway renders it as ``{"success": false, "message": ..., "errors": ...}``.
"""
from typing import Any, Optional

from fastapi import HTTPException, status


class AppException(HTTPException):
    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, errors: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.status_code_default, detail=message)
        self.message = message
        self.errors = errors


class ValidationFailedError(AppException):
    """Malformed or missing input."""
    status_code_default = status.HTTP_400_BAD_REQUEST


class ConflictError(AppException):
    """Uniqueness violation."""
    status_code_default = status.HTTP_409_CONFLICT


class NotFoundError(AppException):
    """Unknown id or code."""
    status_code_default = status.HTTP_404_NOT_FOUND


class DomainRuleError(AppException):
    """Well-formed request rejected by the resource's state (inactive, expired)."""
    status_code_default = status.HTTP_400_BAD_REQUEST


class ServerError(AppException):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
