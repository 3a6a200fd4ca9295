import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .database import engine, init_db
from .domain.mappings import router as mappings_router
from .domain.overrides import router as overrides_router
from .errors import OverrideConsoleError
from .logging_config import setup_logging
from .rate_limiter import create_rate_limiter
from .security_headers import SecurityHeadersMiddleware
from .services.mock_wxcc import InMemoryWxccApiClient, build_demo_containers
from .services.wxcc_api_client import WxccApiClient
from .utils.time_window import utc_now

setup_logging(
    level=config.LOG_LEVEL,
    fmt=config.LOG_FORMAT,
    service=config.SERVICE_NAME,
    environment=config.ENVIRONMENT,
)
logger = logging.getLogger(__name__)


def build_wxcc_client():
    """Real WxCC client, or the in-memory demo vendor in mock mode"""
    if config.WXCC_MOCK_MODE:
        logger.warning("🧪 WXCC_MOCK_MODE enabled - serving in-memory demo containers")
        return InMemoryWxccApiClient(build_demo_containers(utc_now()))

    return WxccApiClient(
        base_url=config.WXCC_API_BASE_URL,
        access_token=config.WXCC_ACCESS_TOKEN,
        organization_id=config.WXCC_ORG_ID,
        timeout_ms=config.WXCC_API_TIMEOUT,
        retry_attempts=config.API_RETRY_ATTEMPTS,
        retry_delay_ms=config.API_RETRY_DELAY,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        config.validate_config()
        logger.info("Configuration validated successfully")
    except OverrideConsoleError as e:
        logger.error(f"❌ Configuration validation failed: {e.message}")
        raise

    try:
        init_db(engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Failed to create database tables: {e}")
        raise

    app.state.wxcc_client = build_wxcc_client()
    logger.info(
        "Server started successfully",
        extra={"port": config.PORT, "environment": config.ENVIRONMENT},
    )

    yield

    logger.info("Application shutting down...")
    await app.state.wxcc_client.aclose()
    logger.info("Graceful shutdown completed")


app = FastAPI(title="WxCC Overrides API", version=config.SERVICE_VERSION, lifespan=lifespan)


# ============================================================================
# ERROR HANDLERS
# ============================================================================


@app.exception_handler(OverrideConsoleError)
async def override_console_error_handler(request: Request, exc: OverrideConsoleError):
    """Render domain errors with their own status code"""
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(level, f"{request.method} {request.url.path} - {exc.error}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are a 400, not FastAPI's default 422"""
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Invalid request data",
            "message": "; ".join(str(e.get("msg")) for e in exc.errors()),
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        logger.warning(f"Route not found: {request.method} {request.url.path}")
        error, message = "Route not found", f"{request.method} {request.url.path} not found"
    elif exc.status_code == 429:
        error, message = "Too many requests", str(exc.detail)
    else:
        error, message = str(exc.detail), str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": error, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "message": str(exc) if config.ENVIRONMENT == "development" else "Something went wrong",
        },
    )


# ============================================================================
# MIDDLEWARE
# ============================================================================


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    logger.info(
        "Incoming request",
        extra={
            "type": "http_request",
            "method": request.method,
            "url": str(request.url.path),
            "userAgent": request.headers.get("user-agent"),
        },
    )
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise

    logger.info(
        "Request completed",
        extra={
            "type": "http_response",
            "method": request.method,
            "url": str(request.url.path),
            "statusCode": response.status_code,
            "duration": round((time.perf_counter() - start) * 1000, 2),
            "success": response.status_code < 400,
        },
    )
    return response


if config.SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)


# ============================================================================
# ROUTES
# ============================================================================

api_dependencies = []
if config.RATE_LIMIT_ENABLED:
    api_dependencies.append(
        Depends(create_rate_limiter(config.RATE_LIMIT_MAX, config.RATE_LIMIT_WINDOW, key_prefix="api"))
    )

app.include_router(overrides_router, dependencies=api_dependencies)
app.include_router(mappings_router, dependencies=api_dependencies)


@app.get("/status")
def service_status():
    return {
        "service": "WxCC Overrides API",
        "version": config.SERVICE_VERSION,
        "status": "running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


public_dir = Path(config.PUBLIC_DIR)
if public_dir.is_dir():
    app.mount("/static", StaticFiles(directory=public_dir), name="static")


@app.get("/", include_in_schema=False)
def root():
    """Serve the browser console"""
    index = public_dir / "index.html"
    if index.is_file():
        return FileResponse(index)
    return {"message": "WxCC Overrides API is running"}
