# 📄 File: app/modules/plant_identification/infrastructure/database/sighting_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Saves and loads plant sightings, and when a sighting is removed also removes
# it from any tour it was part of.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy implementation of SightingRepository. Deletion removes dependent
# tour stops explicitly before the sighting row, so the guarantee holds even
# where the database does not enforce ON DELETE CASCADE.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - Domain repository interface and models
# - app.shared.core.exceptions (RepositoryError, NotFoundError)
#
# 🔄 Connected Modules / Calls From:
# - SightingLifecycleManager, sighting query handlers, entitlement query handler

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.plant_identification.domain.models.sighting import Sighting
from app.modules.plant_identification.domain.repositories.sighting_repository import (
    SightingRepository,
)
from app.shared.core.exceptions import NotFoundError, RepositoryError
from app.shared.utils.logging import get_logger

from .mappers import apply_sighting, sighting_to_domain
from .models import PlantSightingModel, TourStopModel

logger = get_logger(__name__)


class SightingRepositoryImpl(SightingRepository):
    """SQLAlchemy implementation of the SightingRepository interface."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, sighting: Sighting) -> Sighting:
        model = apply_sighting(PlantSightingModel(id=sighting.id), sighting)
        model.created_at = sighting.created_at

        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database error creating sighting: {e}")
            raise RepositoryError(
                f"Failed to create sighting: {e}", operation="create", entity="sighting"
            ) from e

        return sighting_to_domain(model)

    async def get_by_id(self, sighting_id: str) -> Optional[Sighting]:
        try:
            model = await self._session.get(PlantSightingModel, sighting_id)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to retrieve sighting: {e}", operation="get", entity="sighting"
            ) from e
        return sighting_to_domain(model) if model else None

    async def save(self, sighting: Sighting) -> Sighting:
        try:
            model = await self._session.get(PlantSightingModel, sighting.id)
            if model is None:
                raise NotFoundError("Sighting not found", resource_type="sighting", resource_id=sighting.id)

            apply_sighting(model, sighting)
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database error saving sighting {sighting.id}: {e}")
            raise RepositoryError(
                f"Failed to save sighting: {e}", operation="update", entity="sighting"
            ) from e

        return sighting_to_domain(model)

    async def delete(self, sighting_id: str) -> bool:
        try:
            model = await self._session.get(PlantSightingModel, sighting_id)
            if model is None:
                return False

            stops = await self._session.execute(
                delete(TourStopModel).where(TourStopModel.sighting_id == sighting_id)
            )
            await self._session.delete(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database error deleting sighting {sighting_id}: {e}")
            raise RepositoryError(
                f"Failed to delete sighting: {e}", operation="delete", entity="sighting"
            ) from e

        logger.debug(f"Deleted sighting {sighting_id} and {stops.rowcount} tour stops")
        return True

    async def list_by_user(self, user_id: str, limit: int = 50, offset: int = 0) -> List[Sighting]:
        stmt = (
            select(PlantSightingModel)
            .where(PlantSightingModel.user_id == user_id)
            .order_by(PlantSightingModel.created_at.desc(), PlantSightingModel.id)
            .limit(limit)
            .offset(offset)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to list sightings: {e}", operation="list", entity="sighting"
            ) from e
        return [sighting_to_domain(model) for model in result.scalars().all()]

    async def count_created_since(self, user_id: str, since: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(PlantSightingModel)
            .where(
                PlantSightingModel.user_id == user_id,
                PlantSightingModel.created_at >= since,
            )
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to count sightings: {e}", operation="count", entity="sighting"
            ) from e
        return int(result.scalar_one())
