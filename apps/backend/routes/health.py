"""Liveness, readiness and detailed health endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlmodel.ext.asyncio.session import AsyncSession

from database import check_db_health, get_session
from observability.health import check_database, run_health_checks

router = APIRouter(tags=["health"])

APP_VERSION = "0.1.0"


class HealthResponse(BaseModel):
    status: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return {"status": "healthy", "version": APP_VERSION}


@router.get("/health/ready")
async def readiness_check(session: AsyncSession = Depends(get_session)):
    """Returns 503 when the database is unreachable."""
    database = await check_database(session)
    return JSONResponse(
        status_code=200 if database.is_healthy else 503,
        content={
            "status": "ready" if database.is_healthy else "degraded",
            "checks": {"database": database.to_dict()},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get("/health/detailed")
async def detailed_health_check(session: AsyncSession = Depends(get_session)):
    report = await run_health_checks(session)
    report["pool"] = await check_db_health()
    return JSONResponse(status_code=503 if report["status"] == "unhealthy" else 200, content=report)
