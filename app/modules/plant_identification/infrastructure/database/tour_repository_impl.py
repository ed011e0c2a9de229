# 📄 File: app/modules/plant_identification/infrastructure/database/tour_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Saves tours and the stops along them, and counts how many private and
# public tours each user has.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy implementation of TourRepository. A new stop is appended after
# the current last stop. Removing a stop renumbers the rest 0..n-1, and
# public tours are listed with a correlated stop count.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - Domain repository interface and models
# - app.shared.core.exceptions (RepositoryError, NotFoundError)
#
# 🔄 Connected Modules / Calls From:
# - Tour command/query handlers, entitlement query handler

from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.plant_identification.domain.models.tour import Tour, TourStop
from app.modules.plant_identification.domain.repositories.tour_repository import TourRepository
from app.shared.core.exceptions import NotFoundError, RepositoryError
from app.shared.utils.logging import get_logger

from .mappers import tour_stop_to_domain, tour_to_domain
from .models import PlantSightingModel, TourModel, TourStopModel

logger = get_logger(__name__)


class TourRepositoryImpl(TourRepository):
    """SQLAlchemy implementation of the TourRepository interface."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, tour: Tour) -> Tour:
        model = TourModel(
            id=tour.id,
            user_id=tour.user_id,
            name=tour.name,
            description=tour.description,
            is_public=tour.is_public,
            difficulty=tour.difficulty.value if tour.difficulty else None,
            estimated_duration_minutes=tour.estimated_duration_minutes,
            tags=list(tour.tags),
            created_at=tour.created_at,
        )
        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database error creating tour: {e}")
            raise RepositoryError(f"Failed to create tour: {e}", operation="create", entity="tour") from e

        logger.info(f"Tour created: {model.id}", user_id=tour.user_id, is_public=tour.is_public)
        return tour_to_domain(model)

    async def get_by_id(self, tour_id: str) -> Optional[Tour]:
        try:
            model = await self._session.get(TourModel, tour_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to retrieve tour: {e}", operation="get", entity="tour") from e
        return tour_to_domain(model) if model else None

    async def list_by_user(self, user_id: str) -> List[Tour]:
        stmt = (
            select(TourModel)
            .where(TourModel.user_id == user_id)
            .order_by(TourModel.created_at.desc(), TourModel.id)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to list tours: {e}", operation="list", entity="tour") from e
        return [tour_to_domain(model) for model in result.scalars().all()]

    async def update(self, tour: Tour) -> Tour:
        try:
            model = await self._session.get(TourModel, tour.id)
            if model is None:
                raise NotFoundError("Tour not found", resource_type="tour", resource_id=tour.id)

            model.name = tour.name
            model.description = tour.description
            model.is_public = tour.is_public
            model.difficulty = tour.difficulty.value if tour.difficulty else None
            model.estimated_duration_minutes = tour.estimated_duration_minutes
            model.tags = list(tour.tags)
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database error updating tour {tour.id}: {e}")
            raise RepositoryError(f"Failed to update tour: {e}", operation="update", entity="tour") from e

        return tour_to_domain(model)

    async def delete(self, tour_id: str) -> bool:
        try:
            model = await self._session.get(TourModel, tour_id)
            if model is None:
                return False

            stops = await self._session.execute(
                delete(TourStopModel).where(TourStopModel.tour_id == tour_id)
            )
            await self._session.delete(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database error deleting tour {tour_id}: {e}")
            raise RepositoryError(f"Failed to delete tour: {e}", operation="delete", entity="tour") from e

        logger.info(f"Deleted tour {tour_id} with {stops.rowcount} stops")
        return True

    async def list_public(self, limit: int = 50, offset: int = 0) -> List[Tuple[Tour, int]]:
        stop_count = (
            select(func.count(TourStopModel.id))
            .where(TourStopModel.tour_id == TourModel.id)
            .correlate(TourModel)
            .scalar_subquery()
        )
        stmt = (
            select(TourModel, stop_count)
            .where(TourModel.is_public.is_(True))
            .order_by(TourModel.created_at.desc(), TourModel.id)
            .limit(limit)
            .offset(offset)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to list public tours: {e}", operation="list", entity="tour") from e
        return [(tour_to_domain(model), count) for model, count in result.all()]

    async def add_stop(self, stop: TourStop) -> TourStop:
        try:
            if await self._session.get(TourModel, stop.tour_id) is None:
                raise NotFoundError("Tour not found", resource_type="tour", resource_id=stop.tour_id)
            if await self._session.get(PlantSightingModel, stop.sighting_id) is None:
                raise NotFoundError("Sighting not found", resource_type="sighting", resource_id=stop.sighting_id)

            last_order = await self._session.execute(
                select(func.max(TourStopModel.stop_order)).where(TourStopModel.tour_id == stop.tour_id)
            )
            current_max = last_order.scalar_one_or_none()
            next_order = 0 if current_max is None else current_max + 1

            model = TourStopModel(
                id=stop.id,
                tour_id=stop.tour_id,
                sighting_id=stop.sighting_id,
                stop_order=next_order,
                stop_title=stop.stop_title,
                custom_notes=stop.custom_notes,
                created_at=stop.created_at,
            )
            self._session.add(model)
            await self._session.flush()
        except IntegrityError as e:
            logger.warning(f"Concurrent stop append on tour {stop.tour_id}: {e}")
            raise RepositoryError(
                "Another stop was added at the same time; please retry",
                operation="add_stop",
                entity="tour_stop",
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Database error adding stop to tour {stop.tour_id}: {e}")
            raise RepositoryError(
                f"Failed to add tour stop: {e}", operation="add_stop", entity="tour_stop"
            ) from e

        return tour_stop_to_domain(model)

    async def get_stop(self, stop_id: str) -> Optional[TourStop]:
        try:
            model = await self._session.get(TourStopModel, stop_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to retrieve tour stop: {e}", operation="get", entity="tour_stop") from e
        return tour_stop_to_domain(model) if model else None

    async def update_stop(self, stop: TourStop) -> TourStop:
        try:
            model = await self._session.get(TourStopModel, stop.id)
            if model is None:
                raise NotFoundError("Tour stop not found", resource_type="tour_stop", resource_id=stop.id)

            model.stop_title = stop.stop_title
            model.custom_notes = stop.custom_notes
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database error updating tour stop {stop.id}: {e}")
            raise RepositoryError(
                f"Failed to update tour stop: {e}", operation="update", entity="tour_stop"
            ) from e

        return tour_stop_to_domain(model)

    async def remove_stop(self, stop_id: str) -> bool:
        try:
            model = await self._session.get(TourStopModel, stop_id)
            if model is None:
                return False

            tour_id = model.tour_id
            await self._session.delete(model)
            await self._session.flush()

            remaining = await self._session.execute(
                select(TourStopModel)
                .where(TourStopModel.tour_id == tour_id)
                .order_by(TourStopModel.stop_order)
            )
            # One flush per move keeps (tour_id, stop_order) unique at every step
            for position, stop in enumerate(remaining.scalars().all()):
                if stop.stop_order != position:
                    stop.stop_order = position
                    await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database error removing tour stop {stop_id}: {e}")
            raise RepositoryError(
                f"Failed to remove tour stop: {e}", operation="remove_stop", entity="tour_stop"
            ) from e

        logger.debug(f"Removed stop {stop_id} from tour {tour_id}")
        return True

    async def list_stops(self, tour_id: str) -> List[TourStop]:
        stmt = (
            select(TourStopModel)
            .where(TourStopModel.tour_id == tour_id)
            .order_by(TourStopModel.stop_order)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to list tour stops: {e}", operation="list", entity="tour_stop"
            ) from e
        return [tour_stop_to_domain(model) for model in result.scalars().all()]

    async def count_by_user(self, user_id: str) -> Tuple[int, int]:
        stmt = (
            select(TourModel.is_public, func.count())
            .where(TourModel.user_id == user_id)
            .group_by(TourModel.is_public)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to count tours: {e}", operation="count", entity="tour") from e

        counts = {bool(is_public): count for is_public, count in result.all()}
        return counts.get(False, 0), counts.get(True, 0)
