# 📄 File: app/modules/plant_identification/domain/repositories/plant_profile_repository.py
# 🧭 Purpose (Layman Explanation):
# The rulebook for how plant species records are looked up, created once and
# only once, and filled in with more detail later.
# 🧪 Purpose (Technical Summary):
# Repository interface for PlantProfile persistence: ranked name search,
# atomic create-if-absent keyed on the normalised scientific name and
# merge-only field patching.
# 🔗 Dependencies:
# Domain models (PlantProfile, PlantProfileDraft), typing, abc
# 🔄 Connected Modules / Calls From:
# Identification orchestrator, query handlers, infrastructure implementation

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..models.plant_profile import PlantProfile, PlantProfileDraft


class PlantProfileRepository(ABC):
    """
    Repository interface for PlantProfile data access.

    Implementation Notes:
    - Methods return domain entities, not database models
    - ``create_if_absent`` must be atomic on the scientific-name key; a
      check-then-insert implementation is not acceptable
    - Profiles are never deleted through this interface
    """

    @abstractmethod
    async def find_by_name_or_alias(self, term: str, limit: Optional[int] = None) -> List[PlantProfile]:
        """
        Case-insensitive substring search over scientific name, common names and family.

        Args:
            term: Search text; blank terms return an empty list
            limit: Optional cap on the number of results

        Returns:
            Matches ordered exact scientific name first, then other scientific
            name matches, then common-name matches, then family matches; ties
            keep insertion order.
        """

    @abstractmethod
    async def create_if_absent(self, draft: PlantProfileDraft) -> str:
        """
        Insert a profile unless one with the same scientific name exists.

        Args:
            draft: Profile content to insert

        Returns:
            The id of the new profile, or of the existing one (in which case
            the draft is discarded)

        Raises:
            RepositoryError: If the database operation fails
        """

    @abstractmethod
    async def patch_fields(self, plant_id: str, partial: Dict[str, Any]) -> List[str]:
        """
        Merge descriptive fields into an existing profile.

        Only keys present with a non-None value are applied. Identity fields
        (scientific name, common names) and unknown keys are ignored. A patch
        with nothing to apply is a no-op.

        Args:
            plant_id: Profile to update
            partial: Field name to new value

        Returns:
            Names of the fields that were written

        Raises:
            NotFoundError: If the profile does not exist and there is something to apply
        """

    @abstractmethod
    async def get_by_id(self, plant_id: str) -> Optional[PlantProfile]:
        """Get a profile by id, None if absent."""

    @abstractmethod
    async def get_by_scientific_name(self, scientific_name: str) -> Optional[PlantProfile]:
        """Get a profile by scientific name (normalised comparison), None if absent."""
