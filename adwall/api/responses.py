"""
Response envelopes shared by the routes, the exception handlers and
the ASGI middleware.
"""

from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..models.schemas import ErrorResponse


def success(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK
) -> JSONResponse:
    """Wrap ``data`` (or a bare ``message``) in the success envelope."""
    content: dict[str, Any] = {"success": True}
    if data is not None:
        content["data"] = jsonable_encoder(data)
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def error_response(
    status_code: int,
    message: str,
    error: Any = None,
    tip: Optional[str] = None
) -> JSONResponse:
    """Render the failure envelope, leaving out empty optional fields."""
    body = ErrorResponse(message=message, error=error, tip=tip)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True)
    )
