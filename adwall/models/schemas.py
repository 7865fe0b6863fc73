"""
Pydantic models for the response envelopes.

Ads themselves are free-form JSON objects and stay plain dictionaries;
these models only describe the fixed parts of the API contract.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional


# ============================================================
# Domain Models
# ============================================================

class FormConfig(BaseModel):
    """
    Configuration document the frontend uses to render the ad form.

    Attributes:
        title: Heading shown above the form
        fields: Ordered names of the form fields
    """
    title: str = Field(..., min_length=1, description="Heading of the ad form")
    fields: list[str] = Field(..., description="Ordered form field names")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Ad Form",
                "fields": ["title", "description", "link", "videos"]
            }
        }


class UploadedFile(BaseModel):
    """Descriptor of one stored video file."""
    filename: str = Field(..., description="Name the file is stored under")
    original_name: Optional[str] = Field(
        default=None,
        description="File name as sent by the client"
    )
    content_type: Optional[str] = None
    size: int = Field(..., ge=0, description="Size in bytes")
    url: str = Field(..., description="Path the file is served from")


# ============================================================
# Response Envelopes
# ============================================================

class SuccessResponse(BaseModel):
    """
    Envelope for every successful response.

    Carries either ``data`` or a ``message`` (delete confirmations).
    """
    success: bool = True
    data: Optional[Any] = None
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "data": {
                    "id": "1767225600000",
                    "clicked": 0,
                    "videos": [],
                    "title": "Bike for sale"
                }
            }
        }


class ErrorResponse(BaseModel):
    """Envelope for every failed response."""
    success: bool = False
    message: str
    error: Optional[Any] = None
    tip: Optional[str] = None


class ServiceInfo(BaseModel):
    """Root endpoint banner."""
    success: bool = True
    message: str
    docs: dict[str, str]
    timestamp: str


class HealthResponse(BaseModel):
    """Health check response."""
    success: bool = True
    status: str = "healthy"
    service: str = "ad-wall-backend"
    version: str
    store: str
    store_connected: bool
    timestamp: str
