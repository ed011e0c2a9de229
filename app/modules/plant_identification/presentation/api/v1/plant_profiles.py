# 📄 File: app/modules/plant_identification/presentation/api/v1/plant_profiles.py
# 🧭 Purpose (Layman Explanation):
# The web endpoints for the shared plant catalogue: search it, read a plant,
# and ask for richer details about a plant.
# 🧪 Purpose (Technical Summary):
# FastAPI router for plant profiles. Enhancement is rate limited and returns
# a discriminated result; an unconfigured content provider is a normal
# ``not_configured`` result rather than an HTTP error.
# 🔗 Dependencies:
# FastAPI, slowapi, application handlers/DTOs, presentation dependencies
# 🔄 Connected Modules / Calls From:
# presentation.api.v1.__init__

"""
Plant Profiles API Endpoints

- GET  /plants/search?q=...          ranked search by scientific, common or family name
- GET  /plants/{plant_id}            one profile
- POST /plants/{plant_id}/enhance    fill in descriptive fields from Gemini
"""

from fastapi import APIRouter, Depends, Query, Request

from app.modules.plant_identification.application.commands import EnhanceProfileCommand
from app.modules.plant_identification.application.dto import (
    EnhancementResultDTO,
    PlantProfileDTO,
    ProfileSearchResultDTO,
)
from app.modules.plant_identification.application.handlers import (
    EnhanceProfileHandler,
    GetProfileHandler,
    SearchProfilesHandler,
)
from app.modules.plant_identification.application.queries import GetProfileQuery, SearchProfilesQuery
from app.modules.plant_identification.presentation.dependencies import (
    get_current_user_id,
    get_enhance_profile_handler,
    get_profile_handler,
    get_search_profiles_handler,
    identification_rate_limit,
    limiter,
)

plant_profiles_router = APIRouter()


@plant_profiles_router.get("/search", response_model=ProfileSearchResultDTO, summary="Search plant profiles")
async def search_profiles(
    q: str = Query(..., min_length=1, max_length=200, description="Name, alias or family"),
    limit: int = Query(20, ge=1, le=100),
    handler: SearchProfilesHandler = Depends(get_search_profiles_handler),
) -> ProfileSearchResultDTO:
    return await handler.handle(SearchProfilesQuery(term=q, limit=limit))


@plant_profiles_router.get(
    "/{plant_id}",
    response_model=PlantProfileDTO,
    summary="Get a plant profile",
    responses={404: {"description": "Plant not found"}},
)
async def get_profile(
    plant_id: str,
    handler: GetProfileHandler = Depends(get_profile_handler),
) -> PlantProfileDTO:
    return await handler.handle(GetProfileQuery(plant_id=plant_id))


@plant_profiles_router.post(
    "/{plant_id}/enhance",
    response_model=EnhancementResultDTO,
    summary="Enhance a plant profile",
    responses={429: {"description": "Too many requests"}},
)
@limiter.limit(identification_rate_limit)
async def enhance_profile(
    request: Request,
    plant_id: str,
    user_id: str = Depends(get_current_user_id),
    handler: EnhanceProfileHandler = Depends(get_enhance_profile_handler),
) -> EnhancementResultDTO:
    return await handler.handle(EnhanceProfileCommand(plant_id=plant_id, requested_by=user_id))
