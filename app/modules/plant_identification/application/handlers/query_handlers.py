# 📄 File: app/modules/plant_identification/application/handlers/query_handlers.py
# 🧭 Purpose (Layman Explanation):
# Answers the read-only questions: find plants by name, show a plant, show my
# sightings, show a tour, browse public tours, and tell me what my plan still
# allows today.
# 🧪 Purpose (Technical Summary):
# CQRS query handlers for the plant identification module. Includes the
# usage/entitlement gate evaluation reused by the gated command handlers.
# Ownership is enforced here; shared plant profiles are readable by anyone.
# 🔗 Dependencies:
# Domain repositories, entitlement service, PhotoStorage port, DTOs
# 🔄 Connected Modules / Calls From:
# presentation routers (via dependencies.py), command_handlers.py

__all__ = [
    "GetEntitlementHandler",
    "SearchProfilesHandler",
    "GetProfileHandler",
    "GetSightingHandler",
    "ListSightingsHandler",
    "GetTourHandler",
    "ListToursHandler",
    "ListPublicToursHandler",
    "resolve_photo_url",
    "ensure_owner",
]

from datetime import datetime
from typing import Optional

from app.modules.plant_identification.application.dto import (
    EntitlementDTO,
    PlantProfileDTO,
    ProfileSearchResultDTO,
    SightingDTO,
    SightingListDTO,
    TourDetailDTO,
    TourDTO,
)
from app.modules.plant_identification.application.queries import (
    GetEntitlementQuery,
    GetProfileQuery,
    GetSightingQuery,
    GetTourQuery,
    ListPublicToursQuery,
    ListSightingsQuery,
    ListToursQuery,
    SearchProfilesQuery,
)
from app.modules.plant_identification.domain.models.entitlement import Entitlement, PlanTier
from app.modules.plant_identification.domain.models.tour import TourDetail, TourStopDetail
from app.modules.plant_identification.domain.providers.photo_storage import PhotoStorage
from app.modules.plant_identification.domain.repositories import (
    AccountRepository,
    PlantProfileRepository,
    SightingRepository,
    TourRepository,
)
from app.modules.plant_identification.domain.services.entitlement_service import (
    compute_entitlement,
    start_of_day_utc,
)
from app.shared.core.exceptions import AuthorizationError, NotFoundError
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def ensure_owner(owner_id: str, user_id: str, resource_type: str, resource_id: str) -> None:
    """Raise AuthorizationError unless ``user_id`` owns the resource."""
    if owner_id != user_id:
        logger.warning(f"User {user_id} denied access to {resource_type} {resource_id}")
        raise AuthorizationError(
            f"You do not have access to this {resource_type}",
            resource_type=resource_type,
            resource_id=resource_id,
            user_id=user_id,
        )


async def resolve_photo_url(photo_storage: Optional[PhotoStorage], photo_ref: str) -> Optional[str]:
    """Fetchable URL for a photo reference; absolute URLs pass through without storage."""
    if photo_storage is not None:
        return await photo_storage.resolve_url(photo_ref)
    if photo_ref.startswith(("http://", "https://")):
        return photo_ref
    return None


# =============================================================================
# ENTITLEMENTS
# =============================================================================

class GetEntitlementHandler:
    """
    Evaluates the usage gate for a user.

    Today's identification count is the number of sightings the user created
    since midnight UTC. Users without an account row are treated as free.
    """

    def __init__(
        self,
        account_repository: AccountRepository,
        sighting_repository: SightingRepository,
        tour_repository: TourRepository,
    ):
        self._accounts = account_repository
        self._sightings = sighting_repository
        self._tours = tour_repository

    async def evaluate(self, user_id: str, now: Optional[datetime] = None, provision: bool = False) -> Entitlement:
        """
        Compute the user's entitlement.

        Args:
            user_id: Caller
            now: Reference time for the daily window
            provision: Create the free account row when missing (write paths)
        """
        if provision:
            account = await self._accounts.get_or_create(user_id)
        else:
            account = await self._accounts.get_by_id(user_id)
        plan = account.effective_plan if account else PlanTier.FREE

        daily = await self._sightings.count_created_since(user_id, start_of_day_utc(now))
        private_tours, public_tours = await self._tours.count_by_user(user_id)

        entitlement = compute_entitlement(plan, daily, private_tours, public_tours)
        logger.debug(
            f"Entitlement for {user_id}: plan={plan.value} identify={entitlement.can_identify}",
            daily_identifications=daily,
        )
        return entitlement

    async def handle(self, query: GetEntitlementQuery) -> EntitlementDTO:
        entitlement = await self.evaluate(query.user_id, query.now)
        return EntitlementDTO.from_domain(query.user_id, entitlement)


# =============================================================================
# PLANT PROFILES
# =============================================================================

class SearchProfilesHandler:
    def __init__(self, plant_profile_repository: PlantProfileRepository):
        self._profiles = plant_profile_repository

    async def handle(self, query: SearchProfilesQuery) -> ProfileSearchResultDTO:
        matches = await self._profiles.find_by_name_or_alias(query.term, limit=query.limit)
        return ProfileSearchResultDTO(
            term=query.term,
            total=len(matches),
            profiles=[PlantProfileDTO.from_domain(profile) for profile in matches],
        )


class GetProfileHandler:
    def __init__(self, plant_profile_repository: PlantProfileRepository):
        self._profiles = plant_profile_repository

    async def handle(self, query: GetProfileQuery) -> PlantProfileDTO:
        profile = await self._profiles.get_by_id(query.plant_id)
        if profile is None:
            raise NotFoundError("Plant not found", resource_type="plant_profile", resource_id=query.plant_id)
        return PlantProfileDTO.from_domain(profile)


# =============================================================================
# SIGHTINGS
# =============================================================================

class GetSightingHandler:
    """One sighting with its plant profile and a resolved photo URL."""

    def __init__(
        self,
        sighting_repository: SightingRepository,
        plant_profile_repository: PlantProfileRepository,
        photo_storage: Optional[PhotoStorage] = None,
    ):
        self._sightings = sighting_repository
        self._profiles = plant_profile_repository
        self._photo_storage = photo_storage

    async def handle(self, query: GetSightingQuery) -> SightingDTO:
        sighting = await self._sightings.get_by_id(query.sighting_id)
        if sighting is None:
            raise NotFoundError("Sighting not found", resource_type="sighting", resource_id=query.sighting_id)
        ensure_owner(sighting.user_id, query.user_id, "sighting", sighting.id)

        profile = await self._profiles.get_by_id(sighting.plant_id) if sighting.plant_id else None
        photo_url = await resolve_photo_url(self._photo_storage, sighting.photo_ref)
        return SightingDTO.from_domain(sighting, photo_url=photo_url, plant_profile=profile)


class ListSightingsHandler:
    """A user's sightings, newest first. Photo URLs are not signed for lists."""

    def __init__(self, sighting_repository: SightingRepository):
        self._sightings = sighting_repository

    async def handle(self, query: ListSightingsQuery) -> SightingListDTO:
        sightings = await self._sightings.list_by_user(query.user_id, limit=query.limit, offset=query.offset)
        return SightingListDTO(
            sightings=[SightingDTO.from_domain(s) for s in sightings],
            limit=query.limit,
            offset=query.offset,
        )


# =============================================================================
# TOURS
# =============================================================================

class GetTourHandler:
    """
    A tour with its stops in order.

    Stops whose sighting no longer exists are left out.
    """

    def __init__(
        self,
        tour_repository: TourRepository,
        sighting_repository: SightingRepository,
        plant_profile_repository: PlantProfileRepository,
    ):
        self._tours = tour_repository
        self._sightings = sighting_repository
        self._profiles = plant_profile_repository

    async def handle(self, query: GetTourQuery) -> TourDetailDTO:
        tour = await self._tours.get_by_id(query.tour_id)
        if tour is None:
            raise NotFoundError("Tour not found", resource_type="tour", resource_id=query.tour_id)
        if not tour.is_public:
            ensure_owner(tour.user_id, query.user_id, "tour", tour.id)

        details = []
        for stop in await self._tours.list_stops(tour.id):
            sighting = await self._sightings.get_by_id(stop.sighting_id)
            if sighting is None:
                continue
            profile = await self._profiles.get_by_id(sighting.plant_id) if sighting.plant_id else None
            details.append(TourStopDetail(stop=stop, sighting=sighting, plant_profile=profile))

        return TourDetailDTO.from_domain(TourDetail(tour=tour, stops=details))


class ListToursHandler:
    def __init__(self, tour_repository: TourRepository):
        self._tours = tour_repository

    async def handle(self, query: ListToursQuery) -> list:
        return [TourDTO.from_domain(tour) for tour in await self._tours.list_by_user(query.user_id)]


class ListPublicToursHandler:
    """Every user's public tours, for discovery."""

    def __init__(self, tour_repository: TourRepository):
        self._tours = tour_repository

    async def handle(self, query: ListPublicToursQuery) -> list:
        listed = await self._tours.list_public(limit=query.limit, offset=query.offset)
        return [TourDTO.from_domain(tour, stop_count=count) for tour, count in listed]
