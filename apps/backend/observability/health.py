"""
Dependency checks behind /health/ready and /health/detailed.

- database: round-trip `SELECT 1`
- catalog_sources: which upstream catalogs are configured (never pinged)
- system_resources: memory and disk pressure via psutil
"""

import asyncio
import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psutil
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession

from .logging import get_logger

logger = get_logger(__name__)

MEMORY_THRESHOLDS = (90.0, 95.0)  # degraded, error
DISK_THRESHOLDS = (85.0, 95.0)

_SEVERITY = {"ok": 0, "degraded": 1, "error": 2}


@dataclass
class HealthCheckResult:
    name: str
    status: str  # ok, degraded, error
    details: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"status": self.status, "details": self.details}
        if self.error:
            result["error"] = self.error
        return result

    @property
    def is_healthy(self) -> bool:
        return self.status == "ok"


async def check_database(session: AsyncSession, timeout: float = 5.0) -> HealthCheckResult:
    started = time.monotonic()
    try:
        await asyncio.wait_for(session.execute(text("SELECT 1")), timeout=timeout)
    except asyncio.TimeoutError:
        return HealthCheckResult("database", "error", error=f"Database query timeout after {timeout}s")
    except Exception as e:
        logger.error("Database health check failed", exc_info=True)
        return HealthCheckResult("database", "error", error=str(e)[:200])
    return HealthCheckResult(
        "database", "ok", details={"latency_ms": round((time.monotonic() - started) * 1000, 2)}
    )


def check_catalog_sources() -> HealthCheckResult:
    """Modrinth needs no credentials; CurseForge is unusable without CURSEFORGE_API_KEY."""
    configured = ["modrinth"]
    if os.getenv("CURSEFORGE_API_KEY"):
        configured.append("curseforge")
        return HealthCheckResult("catalog_sources", "ok", details={"configured_sources": configured})
    return HealthCheckResult(
        "catalog_sources",
        "degraded",
        details={
            "configured_sources": configured,
            "message": "CurseForge not configured (CURSEFORGE_API_KEY not set)",
        },
    )


def _grade(label: str, percent: float, thresholds, warnings: List[str]) -> str:
    degraded_at, error_at = thresholds
    if percent > error_at:
        warnings.append(f"Critical {label} usage: {percent}%")
        return "error"
    if percent > degraded_at:
        warnings.append(f"High {label} usage: {percent}%")
        return "degraded"
    return "ok"


def check_system_resources() -> HealthCheckResult:
    try:
        memory = psutil.virtual_memory()
        disk = psutil.disk_usage("/")
    except Exception as e:
        logger.error("System resource check failed", exc_info=True)
        return HealthCheckResult("system_resources", "error", error=str(e)[:200])

    warnings: List[str] = []
    grades = [
        _grade("memory", memory.percent, MEMORY_THRESHOLDS, warnings),
        _grade("disk", disk.percent, DISK_THRESHOLDS, warnings),
    ]
    return HealthCheckResult(
        "system_resources",
        max(grades, key=_SEVERITY.__getitem__),
        details={
            "memory_percent": round(memory.percent, 1),
            "disk_percent": round(disk.percent, 1),
            "warnings": warnings or None,
        },
    )


async def run_health_checks(session: AsyncSession) -> Dict[str, Any]:
    checks = [await check_database(session), check_catalog_sources(), check_system_resources()]
    worst = max((check.status for check in checks), key=_SEVERITY.__getitem__)
    overall = {"ok": "healthy", "degraded": "degraded", "error": "unhealthy"}[worst]
    return {
        "status": overall,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {check.name: check.to_dict() for check in checks},
    }
