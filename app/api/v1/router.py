# 📄 File: app/api/v1/router.py
# 🧭 Purpose (Layman Explanation):
# The traffic director for version 1 requests: health checks go one way,
# sightings, plants and tours go to the plant identification module.
# 🧪 Purpose (Technical Summary):
# Main API v1 router aggregation combining the health router and the module
# routers, plus the v1 information endpoint.
# 🔗 Dependencies:
# FastAPI, app.api.v1.health, plant_identification presentation routers
# 🔄 Connected Modules / Calls From:
# app.main

from fastapi import APIRouter

from app.modules.plant_identification.presentation.api.v1 import plant_identification_router
from app.shared.utils.logging import get_logger

from . import get_api_info
from .health import health_router

logger = get_logger(__name__)

# Create main API v1 router
api_v1_router = APIRouter()

api_v1_router.include_router(health_router, tags=["Health Check"])
api_v1_router.include_router(plant_identification_router)


# =========================================================================
# API V1 INFO ENDPOINT
# =========================================================================

@api_v1_router.get("/",
                   summary="API v1 Information",
                   description="Get API v1 version information and available endpoints",
                   tags=["API Info"])
async def api_v1_info() -> dict:
    """Version details, route prefixes and documentation links."""
    return {
        **get_api_info(),
        "documentation": {
            "openapi_schema": "/openapi.json",
            "swagger_ui": "/docs",
            "redoc": "/redoc",
        },
    }
