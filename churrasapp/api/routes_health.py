"""
Health probes - /health and /health/detailed

Both answer 503 with status DEGRADED while the database is unreachable.
"""

import os
import platform
import time

from fastapi import APIRouter, Request, status

from churrasapp.schemas.common import wire_name
from churrasapp.utils.responses import envelope_response

router = APIRouter()


def _database_status(request: Request):
    db = request.app.state.db
    info = db.get_connection_info()
    if info["details"] is not None:
        info["details"] = {wire_name(key): value for key, value in info["details"].items()}
    healthy = db.is_ready() and db.health_check()
    return healthy, info


def _uptime(request: Request) -> float:
    started_at = getattr(request.app.state, "started_at", None)
    return round(time.monotonic() - started_at, 3) if started_at is not None else 0.0


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", "no-id")


@router.get("/health")
async def health_check(request: Request):
    """Liveness plus a database ping"""
    settings = request.app.state.settings
    healthy, info = _database_status(request)
    data = {
        "status": "OK" if healthy else "DEGRADED",
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "uptime": _uptime(request),
        "database": {"status": info["status"]},
    }
    return envelope_response(
        data=data,
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        requestId=_request_id(request),
    )


@router.get("/health/detailed")
async def detailed_health_check(request: Request):
    """Health plus connection details and process information"""
    settings = request.app.state.settings
    healthy, info = _database_status(request)
    cpu = os.times()
    data = {
        "status": "OK" if healthy else "DEGRADED",
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "uptime": _uptime(request),
        "database": info,
        "system": {
            "pythonVersion": platform.python_version(),
            "platform": platform.platform(),
            "pid": os.getpid(),
            "cpuUser": round(cpu.user, 3),
            "cpuSystem": round(cpu.system, 3),
        },
    }
    return envelope_response(
        data=data,
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        requestId=_request_id(request),
    )
