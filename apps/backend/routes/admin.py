"""Admin endpoints: catalog sync and store status. Access control is handled upstream."""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from catalog.store import CatalogStore
from catalog.sync import CatalogSyncService, sync_failure_response
from config import env_int
from dependencies import get_catalog_store, get_sync_service
from exceptions import EmptyUpstreamPageError, ModpackIndexError, StorageUnavailableError, ValidationError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])

SYNC_DEFAULT_PAGE_SIZE = env_int("SYNC_DEFAULT_PAGE_SIZE", 100)


@router.post("/sync")
async def sync_platform(
    platform: str = "Modrinth",
    page_size: int = Query(SYNC_DEFAULT_PAGE_SIZE, alias="pageSize"),
    service: CatalogSyncService = Depends(get_sync_service),
):
    """Reconcile one page of the named platform into the local store."""
    try:
        outcome = await service.reconcile(platform, page_size)
    except ValidationError as e:
        return JSONResponse(status_code=400, content=sync_failure_response(e, platform))
    except EmptyUpstreamPageError as e:
        return JSONResponse(status_code=502, content=sync_failure_response(e, platform))
    except ModpackIndexError as e:
        logger.error(
            "Sync failed",
            extra={"platform": platform, "kind": e.kind.value, "error_message": e.message},
        )
        return JSONResponse(status_code=500, content=sync_failure_response(e, platform))

    return outcome.to_response()


@router.get("/db-status")
async def db_status(store: CatalogStore = Depends(get_catalog_store)):
    try:
        status = await store.catalog_status()
    except StorageUnavailableError as e:
        logger.error("Database status check failed", extra={"error_message": e.message})
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error": e.message,
                "details": f"{type(e.cause).__name__}: {e.cause}" if e.cause else None,
            },
        )

    return {
        "status": "connected",
        "counts": status["counts"],
        "data": {
            "platforms": status["platforms"],
            "recentModpacks": status["recent_modpacks"],
        },
    }
