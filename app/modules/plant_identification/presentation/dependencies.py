# 📄 File: app/modules/plant_identification/presentation/dependencies.py
# 🧭 Purpose (Layman Explanation):
# The wiring closet for the plant endpoints: works out who is calling, opens
# the database for the request, and hands each endpoint a ready-made worker
# connected to the right storage and identification services.
# 🧪 Purpose (Technical Summary):
# FastAPI dependencies for the plant identification module: caller identity
# from the X-User-ID header (authentication happens upstream), per-request
# repositories sharing one AsyncSession, the provider registry from
# app.state, the slowapi limiter, and handler factories.
# 🔗 Dependencies:
# FastAPI, slowapi, SQLAlchemy AsyncSession, app.shared.config.settings,
# application handlers, infrastructure repositories and adapters
# 🔄 Connected Modules / Calls From:
# app.modules.plant_identification.presentation.api.v1.*, app.main

"""
Plant Identification Module Dependencies

- get_current_user_id: caller identity from the ``X-User-ID`` header
- get_provider_registry: PlantNet / Gemini / storage adapters built at startup
- repository and domain-service factories bound to the request session
- one factory per command/query handler
- limiter: slowapi limiter keyed by caller id, falling back to client address
"""

from typing import Optional

from fastapi import Depends, Header, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.plant_identification.application.handlers import (
    AddTourStopHandler,
    CreateSightingHandler,
    CreateTourHandler,
    DeleteSightingHandler,
    DeleteTourHandler,
    EditSightingHandler,
    EnhanceProfileHandler,
    GetEntitlementHandler,
    GetProfileHandler,
    GetSightingHandler,
    GetTourHandler,
    IdentifySightingByNameHandler,
    IdentifySightingByPhotoHandler,
    ListPublicToursHandler,
    ListSightingsHandler,
    ListToursHandler,
    RemoveTourStopHandler,
    SearchProfilesHandler,
    UpdateTourHandler,
    UpdateTourStopHandler,
)
from app.modules.plant_identification.domain.providers.photo_storage import PhotoStorage
from app.modules.plant_identification.domain.repositories import (
    AccountRepository,
    PlantProfileRepository,
    SightingRepository,
    TourRepository,
)
from app.modules.plant_identification.domain.services.identification_orchestrator import (
    IdentificationOrchestrator,
)
from app.modules.plant_identification.domain.services.sighting_lifecycle import (
    SightingLifecycleManager,
)
from app.modules.plant_identification.infrastructure.database import (
    AccountRepositoryImpl,
    PlantProfileRepositoryImpl,
    SightingRepositoryImpl,
    TourRepositoryImpl,
)
from app.modules.plant_identification.infrastructure.external.provider_registry import (
    ProviderRegistry,
)
from app.shared.config.settings import Settings, get_settings
from app.shared.core.exceptions import AuthenticationError, ConfigurationError
from app.shared.infrastructure.database.session import get_db_session
from app.shared.utils.logging import get_logger, user_id_var

logger = get_logger(__name__)

# Matches the width of the user_id columns
MAX_USER_ID_LENGTH = 36


# =========================================================================
# CALLER IDENTITY
# =========================================================================

async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
) -> str:
    """
    Caller identity forwarded by the upstream authentication layer.

    Raises:
        AuthenticationError: If the header is missing or malformed
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise AuthenticationError("Missing X-User-ID header")
    if len(user_id) > MAX_USER_ID_LENGTH:
        raise AuthenticationError("Invalid X-User-ID header")

    user_id_var.set(user_id)
    return user_id


# =========================================================================
# RATE LIMITING
# =========================================================================

def rate_limit_key(request: Request) -> str:
    return request.headers.get("X-User-ID") or get_remote_address(request)


def identification_rate_limit() -> str:
    return get_settings().IDENTIFICATION_RATE_LIMIT


limiter = Limiter(key_func=rate_limit_key)


# =========================================================================
# PROVIDERS AND REPOSITORIES
# =========================================================================

def get_provider_registry(request: Request) -> ProviderRegistry:
    registry = getattr(request.app.state, "providers", None)
    if registry is None:
        raise ConfigurationError("Identification providers are not initialised", component="providers")
    return registry


def get_photo_storage(registry: ProviderRegistry = Depends(get_provider_registry)) -> Optional[PhotoStorage]:
    return registry.photo_storage


def get_plant_profile_repository(session: AsyncSession = Depends(get_db_session)) -> PlantProfileRepository:
    return PlantProfileRepositoryImpl(session)


def get_sighting_repository(session: AsyncSession = Depends(get_db_session)) -> SightingRepository:
    return SightingRepositoryImpl(session)


def get_tour_repository(session: AsyncSession = Depends(get_db_session)) -> TourRepository:
    return TourRepositoryImpl(session)


def get_account_repository(session: AsyncSession = Depends(get_db_session)) -> AccountRepository:
    return AccountRepositoryImpl(session)


def get_lifecycle(
    sightings: SightingRepository = Depends(get_sighting_repository),
    profiles: PlantProfileRepository = Depends(get_plant_profile_repository),
) -> SightingLifecycleManager:
    return SightingLifecycleManager(sightings, profiles)


def get_orchestrator(
    profiles: PlantProfileRepository = Depends(get_plant_profile_repository),
    lifecycle: SightingLifecycleManager = Depends(get_lifecycle),
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> IdentificationOrchestrator:
    return IdentificationOrchestrator(
        plant_profile_repository=profiles,
        lifecycle=lifecycle,
        visual_identifier=registry.visual_identifier,
        content_generator=registry.content_generator,
        photo_storage=registry.photo_storage,
    )


# =========================================================================
# HANDLERS
# =========================================================================

def get_entitlement_handler(
    accounts: AccountRepository = Depends(get_account_repository),
    sightings: SightingRepository = Depends(get_sighting_repository),
    tours: TourRepository = Depends(get_tour_repository),
) -> GetEntitlementHandler:
    return GetEntitlementHandler(accounts, sightings, tours)


def get_create_sighting_handler(
    lifecycle: SightingLifecycleManager = Depends(get_lifecycle),
    entitlements: GetEntitlementHandler = Depends(get_entitlement_handler),
    photo_storage: Optional[PhotoStorage] = Depends(get_photo_storage),
    settings: Settings = Depends(get_settings),
) -> CreateSightingHandler:
    return CreateSightingHandler(
        lifecycle,
        entitlements,
        photo_storage=photo_storage,
        enforce_usage_limits=settings.ENFORCE_USAGE_LIMITS,
    )


def get_identify_by_name_handler(
    lifecycle: SightingLifecycleManager = Depends(get_lifecycle),
    orchestrator: IdentificationOrchestrator = Depends(get_orchestrator),
) -> IdentifySightingByNameHandler:
    return IdentifySightingByNameHandler(lifecycle, orchestrator)


def get_identify_by_photo_handler(
    lifecycle: SightingLifecycleManager = Depends(get_lifecycle),
    orchestrator: IdentificationOrchestrator = Depends(get_orchestrator),
) -> IdentifySightingByPhotoHandler:
    return IdentifySightingByPhotoHandler(lifecycle, orchestrator)


def get_edit_sighting_handler(
    lifecycle: SightingLifecycleManager = Depends(get_lifecycle),
    photo_storage: Optional[PhotoStorage] = Depends(get_photo_storage),
) -> EditSightingHandler:
    return EditSightingHandler(lifecycle, photo_storage)


def get_delete_sighting_handler(
    lifecycle: SightingLifecycleManager = Depends(get_lifecycle),
    photo_storage: Optional[PhotoStorage] = Depends(get_photo_storage),
) -> DeleteSightingHandler:
    return DeleteSightingHandler(lifecycle, photo_storage)


def get_sighting_handler(
    sightings: SightingRepository = Depends(get_sighting_repository),
    profiles: PlantProfileRepository = Depends(get_plant_profile_repository),
    photo_storage: Optional[PhotoStorage] = Depends(get_photo_storage),
) -> GetSightingHandler:
    return GetSightingHandler(sightings, profiles, photo_storage)


def get_list_sightings_handler(
    sightings: SightingRepository = Depends(get_sighting_repository),
) -> ListSightingsHandler:
    return ListSightingsHandler(sightings)


def get_enhance_profile_handler(
    orchestrator: IdentificationOrchestrator = Depends(get_orchestrator),
) -> EnhanceProfileHandler:
    return EnhanceProfileHandler(orchestrator)


def get_search_profiles_handler(
    profiles: PlantProfileRepository = Depends(get_plant_profile_repository),
) -> SearchProfilesHandler:
    return SearchProfilesHandler(profiles)


def get_profile_handler(
    profiles: PlantProfileRepository = Depends(get_plant_profile_repository),
) -> GetProfileHandler:
    return GetProfileHandler(profiles)


def get_create_tour_handler(
    tours: TourRepository = Depends(get_tour_repository),
    entitlements: GetEntitlementHandler = Depends(get_entitlement_handler),
    settings: Settings = Depends(get_settings),
) -> CreateTourHandler:
    return CreateTourHandler(tours, entitlements, enforce_usage_limits=settings.ENFORCE_USAGE_LIMITS)


def get_add_tour_stop_handler(
    tours: TourRepository = Depends(get_tour_repository),
    sightings: SightingRepository = Depends(get_sighting_repository),
) -> AddTourStopHandler:
    return AddTourStopHandler(tours, sightings)


def get_tour_handler(
    tours: TourRepository = Depends(get_tour_repository),
    sightings: SightingRepository = Depends(get_sighting_repository),
    profiles: PlantProfileRepository = Depends(get_plant_profile_repository),
) -> GetTourHandler:
    return GetTourHandler(tours, sightings, profiles)


def get_list_tours_handler(
    tours: TourRepository = Depends(get_tour_repository),
) -> ListToursHandler:
    return ListToursHandler(tours)


def get_list_public_tours_handler(
    tours: TourRepository = Depends(get_tour_repository),
) -> ListPublicToursHandler:
    return ListPublicToursHandler(tours)


def get_update_tour_handler(
    tours: TourRepository = Depends(get_tour_repository),
    entitlements: GetEntitlementHandler = Depends(get_entitlement_handler),
    settings: Settings = Depends(get_settings),
) -> UpdateTourHandler:
    return UpdateTourHandler(tours, entitlements, enforce_usage_limits=settings.ENFORCE_USAGE_LIMITS)


def get_delete_tour_handler(
    tours: TourRepository = Depends(get_tour_repository),
) -> DeleteTourHandler:
    return DeleteTourHandler(tours)


def get_update_tour_stop_handler(
    tours: TourRepository = Depends(get_tour_repository),
) -> UpdateTourStopHandler:
    return UpdateTourStopHandler(tours)


def get_remove_tour_stop_handler(
    tours: TourRepository = Depends(get_tour_repository),
) -> RemoveTourStopHandler:
    return RemoveTourStopHandler(tours)
