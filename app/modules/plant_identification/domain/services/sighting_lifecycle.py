# 📄 File: app/modules/plant_identification/domain/services/sighting_lifecycle.py
# 🧭 Purpose (Layman Explanation):
# Keeps track of where each sighting stands: waiting to be identified,
# identified as a particular plant, or not identified. It is the only place
# allowed to move a sighting between those stages.
# 🧪 Purpose (Technical Summary):
# Sighting Lifecycle Manager: create, begin (re-open), mark identified/failed,
# force-terminal, user edits and cascading delete, all going through the
# Sighting entity's transition methods and the repositories.
# 🔗 Dependencies:
# Domain models (Sighting, GeoLocation, IdentificationMethod), sighting and
# plant profile repositories, shared exceptions and logging
# 🔄 Connected Modules / Calls From:
# Identification orchestrator, sighting command handlers

from typing import List, Optional

from app.shared.core.exceptions import NotFoundError
from app.shared.utils.logging import get_logger

from ..models.sighting import GeoLocation, IdentificationMethod, Sighting
from ..repositories.plant_profile_repository import PlantProfileRepository
from ..repositories.sighting_repository import SightingRepository

logger = get_logger(__name__)


class SightingLifecycleManager:
    """
    Owns the pending -> identified | failed state machine of sightings.

    Every status change is loaded, applied on the entity and written back
    through the repository; nothing else writes those fields.
    """

    def __init__(
        self,
        sighting_repository: SightingRepository,
        plant_profile_repository: PlantProfileRepository,
    ):
        self.sighting_repository = sighting_repository
        self.plant_profile_repository = plant_profile_repository

    async def create(
        self,
        user_id: str,
        photo_ref: str,
        location: GeoLocation,
        user_provided_name: Optional[str] = None,
        private_notes: Optional[str] = None,
    ) -> Sighting:
        """
        Record a new sighting in the ``pending`` state.

        Args:
            user_id: Owner of the sighting
            photo_ref: Stored photo reference
            location: Where the plant was seen
            user_provided_name: Optional name typed at capture time
            private_notes: Optional note

        Returns:
            The stored Sighting
        """
        sighting = Sighting(
            user_id=user_id,
            photo_ref=photo_ref,
            location=location,
            user_provided_name=user_provided_name,
            private_notes=private_notes,
        )
        created = await self.sighting_repository.add(sighting)
        logger.info(f"Sighting created: {created.id}", user_id=user_id)
        return created

    async def get(self, sighting_id: str) -> Sighting:
        sighting = await self.sighting_repository.get_by_id(sighting_id)
        if sighting is None:
            raise NotFoundError("Sighting not found", resource_type="sighting", resource_id=sighting_id)
        return sighting

    async def begin_identification(self, sighting_id: str) -> Sighting:
        """Re-open a sighting to ``pending`` at the start of an identification attempt."""
        sighting = await self.get(sighting_id)
        sighting.reopen()
        return await self.sighting_repository.save(sighting)

    async def mark_identified(
        self,
        sighting_id: str,
        plant_id: str,
        method: IdentificationMethod,
        confidence_score: Optional[float] = None,
        user_provided_name: Optional[str] = None,
    ) -> Sighting:
        """
        Bind a pending sighting to an existing plant profile.

        Raises:
            NotFoundError: If the sighting or the plant profile does not exist
            InvalidStateTransitionError: If the sighting is not pending
        """
        if await self.plant_profile_repository.get_by_id(plant_id) is None:
            raise NotFoundError("Plant not found", resource_type="plant_profile", resource_id=plant_id)

        sighting = await self.get(sighting_id)
        sighting.mark_identified(
            plant_id=plant_id,
            method=method,
            confidence_score=confidence_score,
            user_provided_name=user_provided_name,
        )
        saved = await self.sighting_repository.save(sighting)
        logger.info(
            f"✅ Sighting {sighting_id} identified as {plant_id} via {method.value}",
            confidence=confidence_score,
        )
        return saved

    async def mark_failed(
        self,
        sighting_id: str,
        user_provided_name: Optional[str] = None,
        alternative_names: Optional[List[str]] = None,
    ) -> Sighting:
        """
        End a pending sighting's attempt without a plant.

        Raises:
            NotFoundError: If the sighting does not exist
            InvalidStateTransitionError: If the sighting is not pending
        """
        sighting = await self.get(sighting_id)
        sighting.mark_failed(
            user_provided_name=user_provided_name,
            alternative_names=alternative_names,
        )
        saved = await self.sighting_repository.save(sighting)
        logger.info(f"❌ Sighting {sighting_id} marked failed")
        return saved

    async def ensure_terminal(
        self,
        sighting_id: str,
        user_provided_name: Optional[str] = None,
    ) -> Optional[Sighting]:
        """
        Force a still-pending sighting to ``failed``; terminal sightings are left alone.

        Returns:
            The sighting as stored afterwards, None if it no longer exists
        """
        sighting = await self.sighting_repository.get_by_id(sighting_id)
        if sighting is None:
            return None
        if not sighting.is_pending:
            return sighting

        sighting.mark_failed(user_provided_name=user_provided_name)
        logger.warning(f"Sighting {sighting_id} forced to failed after an aborted identification")
        return await self.sighting_repository.save(sighting)

    async def edit_user_fields(
        self,
        sighting_id: str,
        user_provided_name: Optional[str] = None,
        private_notes: Optional[str] = None,
    ) -> Sighting:
        """Update the user's name/notes in any state; status is not affected."""
        sighting = await self.get(sighting_id)
        if sighting.edit_user_fields(user_provided_name, private_notes):
            sighting = await self.sighting_repository.save(sighting)
        return sighting

    async def delete(self, sighting_id: str) -> bool:
        """Delete a sighting; stops referencing it are removed, tours are kept."""
        deleted = await self.sighting_repository.delete(sighting_id)
        if deleted:
            logger.info(f"Sighting deleted: {sighting_id}")
        return deleted
