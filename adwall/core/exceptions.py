"""
Exception types shared by the storage layer and the HTTP routes.
"""

from typing import Any, Optional


class StorageError(Exception):
    """Raised when the ads document cannot be read or written."""


class ApiError(Exception):
    """
    An error that maps directly onto the failure envelope.

    Routes raise this; the exception handler in ``main`` renders it as
    ``{"success": false, "message": ..., "error": ..., "tip": ...}``.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        error: Optional[Any] = None,
        tip: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error
        self.tip = tip


class UploadRejected(ApiError):
    """An upload that breaks the count, type or size limits."""
