# 📄 File: app/modules/plant_identification/domain/repositories/tour_repository.py
# 🧭 Purpose (Layman Explanation):
# The rulebook for storing tours and the stops along them.
# 🧪 Purpose (Technical Summary):
# Repository interface for Tour and TourStop persistence, public tour
# discovery, stop removal with renumbering, and the per-user
# private/public tour counts the entitlement gate needs.
# 🔗 Dependencies:
# Domain models (Tour, TourStop), typing, abc
# 🔄 Connected Modules / Calls From:
# Tour command/query handlers, entitlement query handler, infrastructure implementation

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..models.tour import Tour, TourStop


class TourRepository(ABC):
    """Repository interface for tours and their stops."""

    @abstractmethod
    async def create(self, tour: Tour) -> Tour:
        """Persist a new tour."""

    @abstractmethod
    async def get_by_id(self, tour_id: str) -> Optional[Tour]:
        """Get a tour by id, None if absent."""

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Tour]:
        """A user's tours, newest first."""

    @abstractmethod
    async def update(self, tour: Tour) -> Tour:
        """
        Overwrite a tour's editable fields.

        Raises:
            NotFoundError: If the tour does not exist
        """

    @abstractmethod
    async def delete(self, tour_id: str) -> bool:
        """Delete a tour and all of its stops. False if it did not exist."""

    @abstractmethod
    async def list_public(self, limit: int = 50, offset: int = 0) -> List[Tuple[Tour, int]]:
        """Public tours of every user, newest first, each with its stop count."""

    @abstractmethod
    async def add_stop(self, stop: TourStop) -> TourStop:
        """
        Append a stop; its ``order`` is replaced by the tour's current stop count.

        Returns:
            The stored stop with its assigned order
        """

    @abstractmethod
    async def get_stop(self, stop_id: str) -> Optional[TourStop]:
        """Get a stop by id, None if absent."""

    @abstractmethod
    async def update_stop(self, stop: TourStop) -> TourStop:
        """
        Overwrite a stop's title and notes. Its position is left alone.

        Raises:
            NotFoundError: If the stop does not exist
        """

    @abstractmethod
    async def remove_stop(self, stop_id: str) -> bool:
        """
        Remove a stop and close the gap it leaves.

        The tour's remaining stops keep their relative order and are
        renumbered 0..n-1.

        Returns:
            False if the stop did not exist
        """

    @abstractmethod
    async def list_stops(self, tour_id: str) -> List[TourStop]:
        """Stops of a tour in ascending order."""

    @abstractmethod
    async def count_by_user(self, user_id: str) -> Tuple[int, int]:
        """
        Count a user's tours.

        Returns:
            (private_count, public_count)
        """
