"""
FastAPI Application Entry Point

Configures the ad wall API: storage backend, upload directory, CORS,
the JSON body limit and the error envelope.

Run with: uvicorn adwall.main:app --host 0.0.0.0 --port 8000
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.middleware import ErrorEnvelopeMiddleware, JsonBodyLimitMiddleware
from .api.responses import error_response
from .api.routes import router
from .core.config import DEFAULT_FORM_CONFIG, Settings, settings as default_settings
from .core.exceptions import ApiError
from .core.utils import get_timestamp
from .models.schemas import FormConfig, ServiceInfo
from .storage import AdRepository, VideoUploadStorage, build_store

logger = logging.getLogger(__name__)

VALID_ENDPOINTS_TIP = "Valid endpoints: /api/ads, /api/form-config"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def load_form_config(path: Optional[str]) -> FormConfig:
    """
    Load the form configuration document.

    Args:
        path: JSON file to read, or None for the built-in default

    Returns:
        Validated FormConfig
    """
    if not path:
        return FormConfig(**DEFAULT_FORM_CONFIG)

    logger.info(f"Loading form configuration from {path}")
    with open(path, encoding="utf-8") as handle:
        return FormConfig(**json.load(handle))


# ============================================================
# Application Lifespan Handler
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: log configuration, verify the storage backend
    - Shutdown: release storage resources
    """
    cfg: Settings = app.state.settings
    repo: AdRepository = app.state.ads

    # ---- Startup ----
    logger.info("=" * 60)
    logger.info("AD WALL API STARTING")
    logger.info("=" * 60)
    logger.info(f"Server Port: {cfg.server_port}")
    logger.info(f"API Version: {cfg.api_version}")
    logger.info(f"Ad Store: {repo.store.name}")
    logger.info(f"Upload Dir: {cfg.upload.directory} (max {cfg.upload.max_files} files)")

    if await repo.store.health_check():
        logger.info(f"✓ '{repo.store.name}' store reachable")
    else:
        logger.warning(f"⚠ Could not verify '{repo.store.name}' store")

    logger.info("=" * 60)

    yield  # Application runs here

    # ---- Shutdown ----
    logger.info("API shutting down...")
    await repo.store.close()


# ============================================================
# Application Factory
# ============================================================

def create_app(cfg: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        cfg: Settings to use; the environment-derived global settings
            when omitted

    Returns:
        Configured FastAPI application instance
    """
    cfg = cfg or default_settings

    app = FastAPI(
        title=cfg.api_title,
        description=cfg.api_description,
        version=cfg.api_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )

    app.state.settings = cfg
    app.state.ads = AdRepository(build_store(cfg))
    app.state.form_config = load_form_config(cfg.form_config_file)
    app.state.uploads = VideoUploadStorage(cfg.upload)

    _register_middleware(app, cfg)
    _register_exception_handlers(app)

    app.include_router(router, tags=["Ads"])

    try:
        app.state.uploads.ensure_directory()
    except OSError as e:
        logger.warning(f"Upload directory unavailable, /uploads not served: {e}")
    else:
        app.mount(
            "/uploads",
            StaticFiles(directory=cfg.upload.directory),
            name="uploads"
        )

    @app.get("/", response_model=ServiceInfo, tags=["Root"])
    async def root() -> ServiceInfo:
        """Service banner with the main endpoints."""
        return ServiceInfo(
            message="Ad wall backend is running",
            docs={
                "ads": "GET /api/ads",
                "form_config": "GET /api/form-config",
                "upload": "POST /api/upload",
                "health": "GET /api/health",
                "openapi": "GET /docs"
            },
            timestamp=get_timestamp()
        )

    return app


# ============================================================
# Middleware Configuration
# ============================================================

def _register_middleware(app: FastAPI, cfg: Settings) -> None:
    # Each add wraps the previous one: CORS ends up outermost, so the
    # 413s and 500s produced below it carry CORS headers too
    app.add_middleware(ErrorEnvelopeMiddleware)
    app.add_middleware(JsonBodyLimitMiddleware, limit=cfg.json_limit_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )


# ============================================================
# Exception Handlers
# ============================================================

def _register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return error_response(exc.status_code, exc.message, exc.error, exc.tip)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
    ):
        """Return 422 with details about what failed validation."""
        logger.warning(f"Validation error: {exc.errors()}")
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation failed",
            error=jsonable_encoder(exc.errors(), exclude={"ctx", "url"})
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException
    ):
        """
        Unknown paths and known paths with an unsupported method both
        get the same 404 with a hint at the real endpoints.
        """
        if exc.status_code in (
            status.HTTP_404_NOT_FOUND,
            status.HTTP_405_METHOD_NOT_ALLOWED
        ):
            return error_response(
                status.HTTP_404_NOT_FOUND,
                "Endpoint not found",
                tip=VALID_ENDPOINTS_TIP
            )
        return error_response(exc.status_code, str(exc.detail))


# ============================================================
# Application Instance
# ============================================================

configure_logging(default_settings.log_level)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "adwall.main:app",
        host="0.0.0.0",
        port=default_settings.server_port,
        reload=False,
        workers=1,
        log_level="info"
    )
