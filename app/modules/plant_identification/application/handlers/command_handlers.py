# 📄 File: app/modules/plant_identification/application/handlers/command_handlers.py
# 🧭 Purpose (Layman Explanation):
# The "action processors" for sightings, plants and tours: they check that
# the user owns what they are touching and that their plan allows it, then
# hand the real work to the identification engine or the database.
# 🧪 Purpose (Technical Summary):
# CQRS command handlers for the plant identification write side. Ownership
# and usage entitlements are enforced here, never inside the orchestrator.
# Handlers flush through the request session; the session manager commits.
# 🔗 Dependencies:
# Domain services (SightingLifecycleManager, IdentificationOrchestrator),
# repositories, PhotoStorage port, GetEntitlementHandler, DTOs
# 🔄 Connected Modules / Calls From:
# presentation routers (via dependencies.py)

__all__ = [
    "CreateSightingHandler",
    "IdentifySightingByNameHandler",
    "IdentifySightingByPhotoHandler",
    "EditSightingHandler",
    "DeleteSightingHandler",
    "EnhanceProfileHandler",
    "CreateTourHandler",
    "AddTourStopHandler",
    "UpdateTourHandler",
    "DeleteTourHandler",
    "UpdateTourStopHandler",
    "RemoveTourStopHandler",
]

from typing import Optional

from app.modules.plant_identification.application.commands import (
    AddTourStopCommand,
    CreateSightingCommand,
    CreateTourCommand,
    DeleteSightingCommand,
    DeleteTourCommand,
    EditSightingCommand,
    EnhanceProfileCommand,
    IdentifySightingByNameCommand,
    IdentifySightingByPhotoCommand,
    RemoveTourStopCommand,
    UpdateTourCommand,
    UpdateTourStopCommand,
)
from app.modules.plant_identification.application.dto import (
    EnhancementResultDTO,
    IdentificationResultDTO,
    SightingDTO,
    TourDTO,
    TourStopDTO,
)
from app.modules.plant_identification.domain.models.entitlement import Entitlement
from app.modules.plant_identification.domain.models.sighting import GeoLocation
from app.modules.plant_identification.domain.models.tour import Tour, TourStop
from app.modules.plant_identification.domain.providers.photo_storage import PhotoStorage
from app.modules.plant_identification.domain.repositories import SightingRepository, TourRepository
from app.modules.plant_identification.domain.services.identification_orchestrator import (
    IdentificationOrchestrator,
)
from app.modules.plant_identification.domain.services.sighting_lifecycle import (
    SightingLifecycleManager,
)
from app.shared.core.exceptions import ConfigurationError, NotFoundError, UsageLimitExceededError
from app.shared.utils.logging import get_logger

from .query_handlers import GetEntitlementHandler, ensure_owner, resolve_photo_url

logger = get_logger(__name__)


# =============================================================================
# SIGHTINGS
# =============================================================================

class CreateSightingHandler:
    """
    Records a new pending sighting.

    When usage limits are enforced the caller must still have an
    identification left today; each sighting counts as one.
    """

    def __init__(
        self,
        lifecycle: SightingLifecycleManager,
        entitlements: GetEntitlementHandler,
        photo_storage: Optional[PhotoStorage] = None,
        enforce_usage_limits: bool = True,
    ):
        self._lifecycle = lifecycle
        self._entitlements = entitlements
        self._photo_storage = photo_storage
        self._enforce_usage_limits = enforce_usage_limits

    async def handle(self, command: CreateSightingCommand) -> SightingDTO:
        """
        Raises:
            UsageLimitExceededError: The plan's daily identifications are used up
            ConfigurationError: Photo bytes were sent but storage is not configured
            FileTooLargeError / InvalidFileTypeError / FileIntegrityError: Photo rejected
        """
        entitlement = await self._entitlements.evaluate(command.user_id, provision=True)
        if self._enforce_usage_limits and not entitlement.can_identify:
            raise UsageLimitExceededError(
                "identification",
                entitlement.plan.value,
                limit=entitlement.limits.daily_identifications,
                used=entitlement.usage.daily_identifications,
            )

        uploaded = command.photo_url is None
        photo_ref = command.photo_url or await self._store_photo(command)

        try:
            sighting = await self._lifecycle.create(
                user_id=command.user_id,
                photo_ref=photo_ref,
                location=GeoLocation(
                    latitude=command.latitude,
                    longitude=command.longitude,
                    address=command.address,
                ),
                user_provided_name=command.user_provided_name,
                private_notes=command.private_notes,
            )
        except Exception:
            if uploaded:
                await self._photo_storage.delete(photo_ref)
            raise

        photo_url = await resolve_photo_url(self._photo_storage, sighting.photo_ref)
        return SightingDTO.from_domain(sighting, photo_url=photo_url)

    async def _store_photo(self, command: CreateSightingCommand) -> str:
        if self._photo_storage is None:
            raise ConfigurationError("Photo storage is not configured", component="storage")
        return await self._photo_storage.upload(
            command.user_id,
            command.photo_data,
            command.photo_filename or "sighting.jpg",
            command.photo_content_type,
        )


class IdentifySightingByNameHandler:
    def __init__(self, lifecycle: SightingLifecycleManager, orchestrator: IdentificationOrchestrator):
        self._lifecycle = lifecycle
        self._orchestrator = orchestrator

    async def handle(self, command: IdentifySightingByNameCommand) -> IdentificationResultDTO:
        sighting = await self._lifecycle.get(command.sighting_id)
        ensure_owner(sighting.user_id, command.user_id, "sighting", sighting.id)

        result = await self._orchestrator.identify_by_name(sighting.id, command.plant_name)
        return IdentificationResultDTO.from_domain(result)


class IdentifySightingByPhotoHandler:
    def __init__(self, lifecycle: SightingLifecycleManager, orchestrator: IdentificationOrchestrator):
        self._lifecycle = lifecycle
        self._orchestrator = orchestrator

    async def handle(self, command: IdentifySightingByPhotoCommand) -> IdentificationResultDTO:
        sighting = await self._lifecycle.get(command.sighting_id)
        ensure_owner(sighting.user_id, command.user_id, "sighting", sighting.id)

        result = await self._orchestrator.identify_by_photo(sighting.id, command.photo_ref)
        return IdentificationResultDTO.from_domain(result)


class EditSightingHandler:
    """Edits name/notes in any status; identification state is untouched."""

    def __init__(self, lifecycle: SightingLifecycleManager, photo_storage: Optional[PhotoStorage] = None):
        self._lifecycle = lifecycle
        self._photo_storage = photo_storage

    async def handle(self, command: EditSightingCommand) -> SightingDTO:
        sighting = await self._lifecycle.get(command.sighting_id)
        ensure_owner(sighting.user_id, command.user_id, "sighting", sighting.id)

        updated = await self._lifecycle.edit_user_fields(
            sighting.id,
            user_provided_name=command.user_provided_name,
            private_notes=command.private_notes,
        )
        photo_url = await resolve_photo_url(self._photo_storage, updated.photo_ref)
        return SightingDTO.from_domain(updated, photo_url=photo_url)


class DeleteSightingHandler:
    """Deletes a sighting; tours survive, their stops for it do not."""

    def __init__(self, lifecycle: SightingLifecycleManager, photo_storage: Optional[PhotoStorage] = None):
        self._lifecycle = lifecycle
        self._photo_storage = photo_storage

    async def handle(self, command: DeleteSightingCommand) -> bool:
        sighting = await self._lifecycle.get(command.sighting_id)
        ensure_owner(sighting.user_id, command.user_id, "sighting", sighting.id)

        deleted = await self._lifecycle.delete(sighting.id)
        if deleted and command.delete_photo and self._photo_storage is not None:
            if not await self._photo_storage.delete(sighting.photo_ref):
                logger.warning(f"Photo for deleted sighting {sighting.id} was not removed: {sighting.photo_ref}")
        return deleted


# =============================================================================
# PLANT PROFILES
# =============================================================================

class EnhanceProfileHandler:
    def __init__(self, orchestrator: IdentificationOrchestrator):
        self._orchestrator = orchestrator

    async def handle(self, command: EnhanceProfileCommand) -> EnhancementResultDTO:
        logger.info(f"Enhancement requested for plant {command.plant_id}", requested_by=command.requested_by)
        result = await self._orchestrator.enhance_profile(command.plant_id)
        return EnhancementResultDTO.from_domain(result)


# =============================================================================
# TOURS
# =============================================================================

def _ensure_tour_allowance(entitlement: Entitlement, is_public: bool) -> None:
    if not entitlement.can_create_tour(is_public):
        kind = "public" if is_public else "private"
        raise UsageLimitExceededError(
            f"{kind} tour",
            entitlement.plan.value,
            limit=getattr(entitlement.limits, f"{kind}_tours"),
            used=getattr(entitlement.usage, f"{kind}_tours"),
        )


class CreateTourHandler:
    def __init__(
        self,
        tour_repository: TourRepository,
        entitlements: GetEntitlementHandler,
        enforce_usage_limits: bool = True,
    ):
        self._tours = tour_repository
        self._entitlements = entitlements
        self._enforce_usage_limits = enforce_usage_limits

    async def handle(self, command: CreateTourCommand) -> TourDTO:
        """
        Raises:
            UsageLimitExceededError: The plan allows no more tours of this visibility
        """
        entitlement = await self._entitlements.evaluate(command.user_id, provision=True)
        if self._enforce_usage_limits:
            _ensure_tour_allowance(entitlement, command.is_public)

        tour = await self._tours.create(
            Tour(
                user_id=command.user_id,
                name=command.name,
                description=command.description,
                is_public=command.is_public,
                difficulty=command.difficulty,
                estimated_duration_minutes=command.estimated_duration_minutes,
                tags=list(command.tags),
            )
        )
        return TourDTO.from_domain(tour)


class AddTourStopHandler:
    """Appends one of the user's sightings to the end of one of their tours."""

    def __init__(self, tour_repository: TourRepository, sighting_repository: SightingRepository):
        self._tours = tour_repository
        self._sightings = sighting_repository

    async def handle(self, command: AddTourStopCommand) -> TourStopDTO:
        tour = await self._tours.get_by_id(command.tour_id)
        if tour is None:
            raise NotFoundError("Tour not found", resource_type="tour", resource_id=command.tour_id)
        ensure_owner(tour.user_id, command.user_id, "tour", tour.id)

        sighting = await self._sightings.get_by_id(command.sighting_id)
        if sighting is None:
            raise NotFoundError("Sighting not found", resource_type="sighting", resource_id=command.sighting_id)
        ensure_owner(sighting.user_id, command.user_id, "sighting", sighting.id)

        # Order is assigned by the repository
        stop = await self._tours.add_stop(
            TourStop(
                tour_id=tour.id,
                sighting_id=sighting.id,
                order=0,
                stop_title=command.stop_title,
                custom_notes=command.custom_notes,
            )
        )
        logger.info(f"Stop {stop.order} added to tour {tour.id}", sighting_id=sighting.id)
        return TourStopDTO.from_domain(stop, SightingDTO.from_domain(sighting))


async def _load_owned_tour(tours: TourRepository, tour_id: str, user_id: str) -> Tour:
    tour = await tours.get_by_id(tour_id)
    if tour is None:
        raise NotFoundError("Tour not found", resource_type="tour", resource_id=tour_id)
    ensure_owner(tour.user_id, user_id, "tour", tour.id)
    return tour


async def _load_stop_on_tour(tours: TourRepository, tour: Tour, stop_id: str) -> TourStop:
    stop = await tours.get_stop(stop_id)
    if stop is None or stop.tour_id != tour.id:
        raise NotFoundError("Tour stop not found", resource_type="tour_stop", resource_id=stop_id)
    return stop


class UpdateTourHandler:
    """
    Renames, re-describes or re-publishes one of the user's tours.

    Moving a tour between private and public spends the plan's allowance for
    the visibility it moves into, exactly as creating one would.
    """

    def __init__(
        self,
        tour_repository: TourRepository,
        entitlements: GetEntitlementHandler,
        enforce_usage_limits: bool = True,
    ):
        self._tours = tour_repository
        self._entitlements = entitlements
        self._enforce_usage_limits = enforce_usage_limits

    async def handle(self, command: UpdateTourCommand) -> TourDTO:
        tour = await _load_owned_tour(self._tours, command.tour_id, command.user_id)
        changes = command.changes()

        visibility = changes.get("is_public", tour.is_public)
        if self._enforce_usage_limits and visibility != tour.is_public:
            entitlement = await self._entitlements.evaluate(command.user_id, provision=True)
            _ensure_tour_allowance(entitlement, visibility)

        updated = await self._tours.update(Tour.model_validate({**tour.model_dump(), **changes}))
        logger.info(f"Tour {tour.id} updated", fields=sorted(changes))
        return TourDTO.from_domain(updated)


class DeleteTourHandler:
    """Deletes one of the user's tours with all of its stops; sightings are kept."""

    def __init__(self, tour_repository: TourRepository):
        self._tours = tour_repository

    async def handle(self, command: DeleteTourCommand) -> bool:
        tour = await _load_owned_tour(self._tours, command.tour_id, command.user_id)
        return await self._tours.delete(tour.id)


class UpdateTourStopHandler:
    def __init__(self, tour_repository: TourRepository):
        self._tours = tour_repository

    async def handle(self, command: UpdateTourStopCommand) -> TourStopDTO:
        tour = await _load_owned_tour(self._tours, command.tour_id, command.user_id)
        stop = await _load_stop_on_tour(self._tours, tour, command.stop_id)

        changes = command.model_dump(include={"stop_title", "custom_notes"}, exclude_none=True)
        updated = await self._tours.update_stop(stop.model_copy(update=changes))
        return TourStopDTO.from_domain(updated)


class RemoveTourStopHandler:
    """Removes a stop; the stops after it move up one place."""

    def __init__(self, tour_repository: TourRepository):
        self._tours = tour_repository

    async def handle(self, command: RemoveTourStopCommand) -> bool:
        tour = await _load_owned_tour(self._tours, command.tour_id, command.user_id)
        stop = await _load_stop_on_tour(self._tours, tour, command.stop_id)

        removed = await self._tours.remove_stop(stop.id)
        logger.info(f"Stop {stop.order} removed from tour {tour.id}", stop_id=stop.id)
        return removed
