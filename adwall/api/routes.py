"""
API Routes - FastAPI endpoints for the ad wall.

- GET    /api/form-config     : the ad form configuration
- GET    /api/ads             : every ad
- GET    /api/ads/{id}        : one ad
- POST   /api/ads             : create an ad
- PUT    /api/ads/{id}        : merge fields into an ad
- DELETE /api/ads/{id}        : delete an ad
- PATCH  /api/ads/{id}/click  : count a click
- POST   /api/upload          : store up to N video files
- GET    /api/health          : service and storage health

Every ad operation is wrapped so an unexpected failure is logged and
answered with a 500 carrying an operation-specific message.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse

from ..core.exceptions import ApiError
from ..core.utils import get_timestamp
from ..models.schemas import (
    ErrorResponse,
    FormConfig,
    HealthResponse,
    SuccessResponse
)
from ..storage import AdRepository, VideoUploadStorage
from .middleware import is_json_content_type
from .responses import success

# Configure logging
logger = logging.getLogger(__name__)

# Create the router
router = APIRouter(prefix="/api")

AD_NOT_FOUND = "Ad not found"


# ============================================================
# Dependencies and helpers
# ============================================================

def get_repository(request: Request) -> AdRepository:
    return request.app.state.ads


def get_upload_storage(request: Request) -> VideoUploadStorage:
    return request.app.state.uploads


async def read_ad_fields(request: Request) -> dict[str, Any]:
    """
    The request body as ad fields.

    Only JSON bodies are read. Text and form bodies, an empty body and
    a JSON ``null`` all count as an empty object.
    """
    if not is_json_content_type(request.headers.get("content-type")):
        return {}

    raw = await request.body()
    if not raw.strip():
        return {}

    try:
        fields = json.loads(raw)
    except ValueError as e:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Invalid JSON body",
            error=str(e)
        ) from e

    if fields is None:
        return {}
    if not isinstance(fields, dict):
        raise ApiError(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation failed",
            error="Request body must be a JSON object"
        )
    return fields


def failed(operation: str, exc: Exception) -> ApiError:
    """Log an unexpected failure and turn it into a 500 ApiError."""
    logger.error(f"{operation}: {exc}", exc_info=True)
    return ApiError(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        operation,
        error=str(exc)
    )


NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": AD_NOT_FOUND}}
FAILURE_RESPONSE = {500: {"model": ErrorResponse, "description": "Storage failure"}}
AD_BODY = {
    "requestBody": {
        "content": {"application/json": {"schema": {"type": "object"}}}
    }
}


# ============================================================
# Form Configuration
# ============================================================

@router.get(
    "/form-config",
    response_model=SuccessResponse,
    summary="Get the ad form configuration"
)
async def get_form_config(request: Request) -> JSONResponse:
    form_config: FormConfig = request.app.state.form_config
    return success(form_config.model_dump())


# ============================================================
# Ad Endpoints
# ============================================================

@router.get(
    "/ads",
    response_model=SuccessResponse,
    summary="List all ads",
    responses=FAILURE_RESPONSE
)
async def list_ads(repo: AdRepository = Depends(get_repository)) -> JSONResponse:
    try:
        ads = await repo.list_ads()
    except Exception as e:
        raise failed("Failed to load ads", e) from e
    return success(ads)


@router.get(
    "/ads/{ad_id}",
    response_model=SuccessResponse,
    summary="Get one ad",
    responses={**NOT_FOUND_RESPONSE, **FAILURE_RESPONSE}
)
async def get_ad(
    ad_id: str,
    repo: AdRepository = Depends(get_repository)
) -> JSONResponse:
    try:
        ad = await repo.get_ad(ad_id)
    except Exception as e:
        raise failed("Failed to load ads", e) from e

    if ad is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, AD_NOT_FOUND)
    return success(ad)


@router.post(
    "/ads",
    response_model=SuccessResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an ad",
    description="""
    Store a new ad. The body is any JSON object; its fields are kept as-is.

    The server assigns `id` and defaults `clicked` to 0 and `videos`
    to an empty list unless the body provides them.
    """,
    responses=FAILURE_RESPONSE,
    openapi_extra=AD_BODY
)
async def create_ad(
    fields: dict[str, Any] = Depends(read_ad_fields),
    repo: AdRepository = Depends(get_repository)
) -> JSONResponse:
    try:
        ad = await repo.create_ad(fields)
    except Exception as e:
        raise failed("Failed to create ad", e) from e
    return success(ad, status_code=status.HTTP_201_CREATED)


@router.put(
    "/ads/{ad_id}",
    response_model=SuccessResponse,
    summary="Update an ad",
    description="Shallow-merge the body into the stored ad. The ad's `id` never changes.",
    responses={**NOT_FOUND_RESPONSE, **FAILURE_RESPONSE},
    openapi_extra=AD_BODY
)
async def update_ad(
    ad_id: str,
    fields: dict[str, Any] = Depends(read_ad_fields),
    repo: AdRepository = Depends(get_repository)
) -> JSONResponse:
    try:
        ad = await repo.update_ad(ad_id, fields)
    except Exception as e:
        raise failed("Failed to update ad", e) from e

    if ad is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, AD_NOT_FOUND)
    return success(ad)


@router.delete(
    "/ads/{ad_id}",
    response_model=SuccessResponse,
    summary="Delete an ad",
    responses={**NOT_FOUND_RESPONSE, **FAILURE_RESPONSE}
)
async def delete_ad(
    ad_id: str,
    repo: AdRepository = Depends(get_repository)
) -> JSONResponse:
    try:
        deleted = await repo.delete_ad(ad_id)
    except Exception as e:
        raise failed("Failed to delete ad", e) from e

    if not deleted:
        raise ApiError(status.HTTP_404_NOT_FOUND, AD_NOT_FOUND)
    return success(message="Ad deleted successfully")


@router.patch(
    "/ads/{ad_id}/click",
    response_model=SuccessResponse,
    summary="Count a click on an ad",
    responses={**NOT_FOUND_RESPONSE, **FAILURE_RESPONSE}
)
async def record_click(
    ad_id: str,
    repo: AdRepository = Depends(get_repository)
) -> JSONResponse:
    try:
        ad = await repo.record_click(ad_id)
    except Exception as e:
        raise failed("Failed to update click count", e) from e

    if ad is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, AD_NOT_FOUND)
    return success(ad)


# ============================================================
# Uploads
# ============================================================

@router.post(
    "/upload",
    response_model=SuccessResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload videos",
    description="""
    Multipart upload, form field `videos`. Only `video/*` files are
    accepted, up to the configured count and per-file size.

    Returns one descriptor per stored file; its `url` can be put in
    an ad's `videos` list.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Bad file count or type"},
        413: {"model": ErrorResponse, "description": "File too large"}
    }
)
async def upload_videos(
    videos: Optional[list[UploadFile]] = File(default=None),
    uploads: VideoUploadStorage = Depends(get_upload_storage)
) -> JSONResponse:
    try:
        stored = await uploads.save(videos or [])
    except ApiError:
        raise
    except Exception as e:
        raise failed("Failed to upload videos", e) from e
    finally:
        for upload in videos or []:
            await upload.close()

    return success(stored, status_code=status.HTTP_201_CREATED)


# ============================================================
# Utility Endpoints
# ============================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health of the API and its storage backend."
)
async def health_check(
    request: Request,
    repo: AdRepository = Depends(get_repository)
) -> HealthResponse:
    store_ok = await repo.store.health_check()

    return HealthResponse(
        status="healthy" if store_ok else "degraded",
        version=request.app.state.settings.api_version,
        store=repo.store.name,
        store_connected=store_ok,
        timestamp=get_timestamp()
    )
