"""
Models module containing Pydantic schemas.
"""

from .schemas import (
    FormConfig,
    UploadedFile,
    SuccessResponse,
    ErrorResponse,
    ServiceInfo,
    HealthResponse
)

__all__ = [
    "FormConfig",
    "UploadedFile",
    "SuccessResponse",
    "ErrorResponse",
    "ServiceInfo",
    "HealthResponse"
]
