# 📄 File: app/modules/plant_identification/presentation/api/v1/__init__.py
# 🧭 Purpose (Layman Explanation):
# Gathers all the plant-related web endpoints under one roof.
# 🧪 Purpose (Technical Summary):
# Aggregates the plant identification v1 routers with their prefixes and tags.
# 🔗 Dependencies:
# FastAPI APIRouter
# 🔄 Connected Modules / Calls From:
# app.api.v1.router

from fastapi import APIRouter

from .entitlements import entitlements_router
from .plant_profiles import plant_profiles_router
from .sightings import sightings_router
from .tours import tours_router

plant_identification_router = APIRouter()
plant_identification_router.include_router(sightings_router, prefix="/sightings", tags=["Sightings"])
plant_identification_router.include_router(plant_profiles_router, prefix="/plants", tags=["Plant Profiles"])
plant_identification_router.include_router(entitlements_router, prefix="/entitlements", tags=["Entitlements"])
plant_identification_router.include_router(tours_router, prefix="/tours", tags=["Tours"])

__all__ = ["plant_identification_router"]
