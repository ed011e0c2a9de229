# 📄 File: app/api/v1/health.py
# 🧭 Purpose (Layman Explanation):
# Checkup endpoints that say whether the service is working: is the database
# reachable, which plant identification services are switched on, and are any
# of them currently failing.
# 🧪 Purpose (Technical Summary):
# Health, liveness and readiness endpoints reporting database status, provider
# configuration from the ProviderRegistry, circuit breaker state and psutil
# system metrics.
# 🔗 Dependencies:
# FastAPI, psutil, app.shared.infrastructure (database, external_apis)
# 🔄 Connected Modules / Calls From:
# app.api.v1.router, monitoring systems, load balancers

from datetime import datetime, timezone
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from app.shared.config.settings import get_settings
from app.shared.infrastructure.database.connection import database_health_check as db_health_check
from app.shared.infrastructure.external_apis.circuit_breaker import circuit_breaker_manager
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)

# Create router for health endpoints
health_router = APIRouter()

# Application start time for uptime calculation
_app_start_time = datetime.now(timezone.utc)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@health_router.get("/health",
                   summary="Basic Health Check",
                   description="Basic health check endpoint for load balancers and monitoring")
async def health_check() -> JSONResponse:
    """Simple OK status for quick health verification."""
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "timestamp": _now(),
            "service": "plant-sightings-api",
            "version": get_settings().APP_VERSION,
        }
    )


@health_router.get("/health/detailed",
                   summary="Detailed Health Check",
                   description="Database, identification providers, circuit breakers and system resources")
async def detailed_health_check(request: Request) -> JSONResponse:
    """
    Comprehensive health check for all system components.

    Providers without credentials are reported as disabled, which does not
    degrade the service; an open circuit does.
    """
    overall_status = "healthy"
    components: Dict[str, Any] = {}

    db_health = await db_health_check()
    components["database"] = db_health
    if db_health["status"] != "healthy":
        overall_status = "unhealthy"

    providers = getattr(request.app.state, "providers", None)
    components["providers"] = providers.status() if providers is not None else {"status": "not_initialized"}
    if providers is not None:
        components["provider_clients"] = {client.api_name: client.get_stats() for client in providers.clients}

    api_health = _check_external_apis_health()
    components["external_apis"] = api_health
    if api_health["status"] == "degraded" and overall_status == "healthy":
        overall_status = "degraded"

    system_metrics = _get_system_metrics()
    components["system"] = system_metrics
    if (system_metrics["memory_percent"] > 90 or system_metrics["disk_percent"] > 95) and overall_status == "healthy":
        overall_status = "degraded"

    return JSONResponse(
        status_code=503 if overall_status == "unhealthy" else 200,
        content={
            "status": overall_status,
            "timestamp": _now(),
            "service": "plant-sightings-api",
            "version": get_settings().APP_VERSION,
            "uptime_seconds": (datetime.now(timezone.utc) - _app_start_time).total_seconds(),
            "components": components,
        }
    )


@health_router.get("/health/live",
                   summary="Liveness Probe",
                   description="Kubernetes liveness probe endpoint")
async def liveness_probe() -> Response:
    """Returns 200 while the process is alive."""
    return Response(status_code=200, content="OK")


@health_router.get("/health/ready",
                   summary="Readiness Probe",
                   description="Kubernetes readiness probe endpoint")
async def readiness_probe() -> JSONResponse:
    """Returns 200 once the database is reachable."""
    db_health = await db_health_check()
    if db_health["status"] == "healthy":
        return JSONResponse(status_code=200, content={"status": "ready", "timestamp": _now()})

    logger.warning(f"Readiness probe failed: {db_health.get('error')}")
    return JSONResponse(
        status_code=503,
        content={
            "status": "not_ready",
            "reason": "database_unhealthy",
            "timestamp": _now(),
        }
    )


def _check_external_apis_health() -> Dict[str, Any]:
    """Circuit breaker state for every registered provider."""
    all_metrics = circuit_breaker_manager.get_all_metrics()
    unhealthy_circuits = circuit_breaker_manager.get_unhealthy_circuits()

    if not all_metrics:
        status = "no_circuits"
    elif unhealthy_circuits:
        status = "degraded"
    else:
        status = "healthy"

    return {
        "status": status,
        "total_circuits": len(all_metrics),
        "unhealthy_circuit_names": unhealthy_circuits,
        "circuits": all_metrics,
        "timestamp": _now(),
    }


def _get_system_metrics() -> Dict[str, Any]:
    """Basic process host metrics."""
    memory = psutil.virtual_memory()
    disk = psutil.disk_usage("/")
    return {
        "cpu_percent": psutil.cpu_percent(interval=None),
        "memory_percent": memory.percent,
        "memory_available_mb": round(memory.available / (1024 * 1024), 1),
        "disk_percent": disk.percent,
        "timestamp": _now(),
    }
