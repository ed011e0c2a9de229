# 📄 File: app/modules/plant_identification/infrastructure/database/plant_profile_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Stores and finds plant species in the database, makes sure the same species
# is never saved twice even when two people identify it at the same moment,
# and fills in extra details without wiping what is already there.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy implementation of PlantProfileRepository. create_if_absent uses a
# dialect INSERT ... ON CONFLICT DO NOTHING on the unique scientific-name key
# (PostgreSQL, SQLite) followed by a read of the winning row; other dialects
# use a SAVEPOINT and treat IntegrityError as "already there". Search runs a
# substring prefilter over a column folded in Python (so matching does not
# depend on the database collation) and ranks the candidates in Python.
#
# 🔗 Dependencies:
# - SQLAlchemy async session, dialect insert constructs
# - Domain repository interface and models
# - app.shared.core.exceptions (RepositoryError, NotFoundError)
#
# 🔄 Connected Modules / Calls From:
# - Identification orchestrator, query handlers, SightingLifecycleManager

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.plant_identification.domain.models.plant_profile import (
    PATCHABLE_FIELDS,
    PlantProfile,
    PlantProfileDraft,
)
from app.modules.plant_identification.domain.repositories.plant_profile_repository import (
    PlantProfileRepository,
)
from app.shared.core.exceptions import NotFoundError, RepositoryError
from app.shared.utils.logging import get_logger
from app.shared.utils.validators import fold_for_search, normalize_scientific_name

from .mappers import draft_to_row, profile_to_domain
from .models import PlantProfileModel

logger = get_logger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class PlantProfileRepositoryImpl(PlantProfileRepository):
    """
    SQLAlchemy implementation of the PlantProfileRepository interface.

    Writes are flushed, not committed; the request's session manager owns
    the transaction.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    # =========================================================================
    # SEARCH
    # =========================================================================

    async def find_by_name_or_alias(self, term: str, limit: Optional[int] = None) -> List[PlantProfile]:
        needle = (term or "").strip()
        if not needle:
            return []

        stmt = (
            select(PlantProfileModel)
            .where(PlantProfileModel.search_text.contains(fold_for_search(needle), autoescape=True))
            .order_by(PlantProfileModel.created_at, PlantProfileModel.id)
        )

        try:
            result = await self._session.execute(stmt)
            candidates = [profile_to_domain(model) for model in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Database error searching plant profiles for '{needle}': {e}")
            raise RepositoryError(
                f"Failed to search plant profiles: {e}", operation="search", entity="plant_profile"
            ) from e

        ranked = [(profile.match_rank(needle), index, profile) for index, profile in enumerate(candidates)]
        ranked = sorted((r for r in ranked if r[0] is not None), key=lambda r: (r[0], r[1]))
        matches = [profile for _, _, profile in ranked]

        logger.debug(f"Plant profile search '{needle}' matched {len(matches)} profiles")
        return matches[:limit] if limit else matches

    # =========================================================================
    # CREATE IF ABSENT
    # =========================================================================

    async def create_if_absent(self, draft: PlantProfileDraft) -> str:
        key = draft.scientific_name_key
        new_id = str(uuid4())
        row = draft_to_row(draft, new_id, datetime.now(timezone.utc))

        try:
            dialect_insert = _UPSERT_INSERTS.get(self._dialect_name())
            if dialect_insert is not None:
                stmt = dialect_insert(PlantProfileModel).values(**row).on_conflict_do_nothing(
                    index_elements=["scientific_name_key"]
                )
                await self._session.execute(stmt)
            else:
                await self._insert_in_savepoint(row)

            plant_id = await self._id_for_key(key)
        except SQLAlchemyError as e:
            logger.error(f"Database error creating plant profile '{draft.scientific_name}': {e}")
            raise RepositoryError(
                f"Failed to create plant profile: {e}", operation="create_if_absent", entity="plant_profile"
            ) from e

        if plant_id is None:
            raise RepositoryError(
                f"Plant profile '{draft.scientific_name}' vanished after insert",
                operation="create_if_absent",
                entity="plant_profile",
            )

        if plant_id == new_id:
            logger.info(f"✅ Created plant profile {plant_id} for '{draft.scientific_name}'")
        else:
            logger.info(f"Reusing plant profile {plant_id} for '{draft.scientific_name}'")
        return plant_id

    async def _insert_in_savepoint(self, row: Dict[str, Any]) -> None:
        try:
            async with self._session.begin_nested():
                await self._session.execute(insert(PlantProfileModel).values(**row))
        except IntegrityError:
            logger.debug(f"Plant profile '{row['scientific_name']}' already exists")

    async def _id_for_key(self, key: str) -> Optional[str]:
        stmt = select(PlantProfileModel.id).where(PlantProfileModel.scientific_name_key == key)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _dialect_name(self) -> str:
        return self._session.get_bind().dialect.name

    # =========================================================================
    # PATCH
    # =========================================================================

    async def patch_fields(self, plant_id: str, partial: Dict[str, Any]) -> List[str]:
        updates = {
            key: value for key, value in (partial or {}).items()
            if key in PATCHABLE_FIELDS and value is not None
        }
        if not updates:
            return []

        try:
            model = await self._session.get(PlantProfileModel, plant_id)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to load plant profile: {e}", operation="patch", entity="plant_profile"
            ) from e
        if model is None:
            raise NotFoundError("Plant not found", resource_type="plant_profile", resource_id=plant_id)

        # Validate the merged result so patched values get the entity's normalisation
        merged = PlantProfile.model_validate({**profile_to_domain(model).model_dump(), **updates})
        for key in updates:
            setattr(model, key, getattr(merged, key))
        model.search_text = merged.search_text
        model.updated_at = datetime.now(timezone.utc)

        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database error patching plant profile {plant_id}: {e}")
            raise RepositoryError(
                f"Failed to patch plant profile: {e}", operation="patch", entity="plant_profile"
            ) from e

        logger.debug(f"Patched plant profile {plant_id}: {sorted(updates)}")
        return list(updates)

    # =========================================================================
    # READS
    # =========================================================================

    async def get_by_id(self, plant_id: str) -> Optional[PlantProfile]:
        try:
            model = await self._session.get(PlantProfileModel, plant_id)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to retrieve plant profile: {e}", operation="get", entity="plant_profile"
            ) from e
        return profile_to_domain(model) if model else None

    async def get_by_scientific_name(self, scientific_name: str) -> Optional[PlantProfile]:
        key = normalize_scientific_name(scientific_name or "")
        if not key:
            return None
        stmt = select(PlantProfileModel).where(PlantProfileModel.scientific_name_key == key)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to retrieve plant profile: {e}", operation="get", entity="plant_profile"
            ) from e
        model = result.scalar_one_or_none()
        return profile_to_domain(model) if model else None
