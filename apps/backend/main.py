"""
Modpack Index backend.

Federated Minecraft modpack search over the local store, Modrinth and
CurseForge, plus admin-triggered catalog sync.
"""
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env", override=False)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from catalog.cache import build_response_cache
from catalog.store import CatalogStore
from database import async_session_factory, engine, get_session, init_db
from dependencies import build_http_client
from exceptions import ModpackIndexError, ValidationError
from observability import metrics_registry, setup_logging
from observability.middleware import ObservabilityMiddleware
from routes.admin import router as admin_router
from routes.health import APP_VERSION, router as health_router
from routes.search import router as search_router

setup_logging()
logger = logging.getLogger(__name__)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
DB_AUTO_CREATE = os.getenv("DB_AUTO_CREATE", "true").lower() == "true"

app = FastAPI(
    title="Modpack Index Backend",
    description="Federated Minecraft modpack search and catalog sync",
    version=APP_VERSION,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(search_router)
app.include_router(admin_router)

__all__ = ["app", "get_session"]


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return Response(content=generate_latest(metrics_registry), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = ValidationError(
        "Invalid request parameters",
        detail={
            "errors": [
                {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                for err in exc.errors()
            ]
        },
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(ModpackIndexError)
async def modpack_index_error_handler(request: Request, exc: ModpackIndexError):
    logger.warning(
        "Request failed with application error",
        extra={"path": request.url.path, "kind": exc.kind.value, "error_message": exc.message},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log the traceback server-side and return a safe message."""
    error_id = f"ERR-{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')}-{id(exc)}"
    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "method": request.method},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please try again.",
        },
    )


@app.on_event("startup")
async def startup_event():
    logger.info(
        "Modpack Index backend starting",
        extra={"environment": os.getenv("ENVIRONMENT", "development")},
    )
    if DB_AUTO_CREATE:
        await init_db()
    app.state.http_client = build_http_client()
    app.state.response_cache = build_response_cache()
    app.state.catalog_store = CatalogStore(async_session_factory)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Modpack Index backend shutting down")
    await app.state.http_client.aclose()
    await app.state.response_cache.close()
    await engine.dispose()
