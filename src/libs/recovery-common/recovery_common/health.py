# src/libs/recovery-common/recovery_common/health.py
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, HTTPException, status

logger = logging.getLogger(__name__)

DependencyCheck = Callable[[], Awaitable[bool]]

def create_health_router(checks: Optional[Dict[str, DependencyCheck]] = None) -> APIRouter:
    """
    Creates a standardized health check router.

    Args:
        checks: Optional mapping of dependency name to an async check returning
                True when the dependency is usable. A service without external
                dependencies passes nothing and is ready as soon as it is alive.

    Returns:
        A FastAPI APIRouter with /health/live and /health/ready endpoints.
    """
    router = APIRouter(tags=["Health"])
    checks = dict(checks or {})

    @router.get("/health/live", status_code=status.HTTP_200_OK)
    async def liveness_probe():
        return {"status": "alive"}

    @router.get("/health/ready", status_code=status.HTTP_200_OK)
    async def readiness_probe():
        names = list(checks)
        results = await asyncio.gather(*[checks[name]() for name in names])

        dep_status = {
            name: "ok" if ok else "unavailable" for name, ok in zip(names, results)
        }

        if all(results):
            return {"status": "ready", "dependencies": dep_status}

        logger.error("Readiness probe failed: %s", dep_status)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "not_ready", "dependencies": dep_status},
        )

    return router
