# 📄 File: app/modules/plant_identification/domain/repositories/sighting_repository.py
# 🧭 Purpose (Layman Explanation):
# The rulebook for saving, finding, updating and removing plant sightings.
# 🧪 Purpose (Technical Summary):
# Repository interface for Sighting persistence. Deleting a sighting must also
# remove the tour stops that reference it.
# 🔗 Dependencies:
# Domain models (Sighting), typing, abc, datetime
# 🔄 Connected Modules / Calls From:
# Sighting lifecycle manager, entitlement query handler, infrastructure implementation

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..models.sighting import Sighting


class SightingRepository(ABC):
    """Repository interface for Sighting data access."""

    @abstractmethod
    async def add(self, sighting: Sighting) -> Sighting:
        """
        Persist a new sighting.

        Returns:
            The stored sighting
        """

    @abstractmethod
    async def get_by_id(self, sighting_id: str) -> Optional[Sighting]:
        """Get a sighting by id, None if absent."""

    @abstractmethod
    async def save(self, sighting: Sighting) -> Sighting:
        """
        Write back every mutable field of an existing sighting.

        Raises:
            NotFoundError: If the sighting no longer exists
        """

    @abstractmethod
    async def delete(self, sighting_id: str) -> bool:
        """
        Delete a sighting and every tour stop referencing it.

        Returns:
            True if deleted, False if it did not exist
        """

    @abstractmethod
    async def list_by_user(self, user_id: str, limit: int = 50, offset: int = 0) -> List[Sighting]:
        """A user's sightings, newest first."""

    @abstractmethod
    async def count_created_since(self, user_id: str, since: datetime) -> int:
        """Number of sightings the user created at or after ``since``."""
