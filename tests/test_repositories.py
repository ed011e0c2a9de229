"""
Tests for the SQLAlchemy repositories against in-memory SQLite.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.modules.plant_identification.domain.models.entitlement import PlanTier, SubscriptionStatus
from app.modules.plant_identification.domain.models.sighting import GeoLocation, Sighting
from app.modules.plant_identification.domain.models.tour import Tour, TourStop
from app.modules.plant_identification.infrastructure.database import PlantProfileRepositoryImpl
from app.modules.plant_identification.infrastructure.database.models import PlantProfileModel
from app.shared.config.settings import Settings
from app.shared.core.exceptions import NotFoundError
from app.shared.infrastructure.database.connection import DatabaseConnectionManager

from conftest import make_draft


class TestPlantProfileRepository:
    """Tests for profile creation, search and patching."""

    async def test_create_if_absent_is_idempotent_on_normalised_name(self, profile_repo):
        first = await profile_repo.create_if_absent(make_draft("Ficus lyrata", common_names=["Fiddle-leaf fig"]))
        second = await profile_repo.create_if_absent(make_draft("  FICUS   lyrata "))

        assert first == second
        profile = await profile_repo.get_by_id(first)
        assert profile.scientific_name == "Ficus lyrata"
        assert profile.common_names == ["Fiddle-leaf fig"]

    async def test_get_by_scientific_name_uses_key(self, profile_repo):
        plant_id = await profile_repo.create_if_absent(make_draft("Monstera deliciosa"))

        found = await profile_repo.get_by_scientific_name("monstera  DELICIOSA")

        assert found.id == plant_id

    async def test_search_ranks_exact_before_partial_common_and_family(self, profile_repo):
        await profile_repo.create_if_absent(make_draft("Prunus avium", family="Rosaceae"))
        await profile_repo.create_if_absent(make_draft("Camellia japonica", common_names=["Winter rosa"]))
        await profile_repo.create_if_absent(make_draft("Rosa canina"))
        await profile_repo.create_if_absent(make_draft("Rosa"))
        await profile_repo.create_if_absent(make_draft("Quercus robur"))

        matches = await profile_repo.find_by_name_or_alias("rosa")

        assert [p.scientific_name for p in matches] == [
            "Rosa", "Rosa canina", "Camellia japonica", "Prunus avium",
        ]

    async def test_search_matches_common_names_case_insensitively(self, profile_repo):
        plant_id = await profile_repo.create_if_absent(
            make_draft("Ficus lyrata", common_names=["Fiddle-leaf fig"])
        )

        matches = await profile_repo.find_by_name_or_alias("FIDDLE")

        assert [p.id for p in matches] == [plant_id]

    async def test_search_folds_accented_and_special_letters(self, profile_repo):
        maple = await profile_repo.create_if_absent(make_draft("Acer rubrum", common_names=["Érable rouge"]))
        grass = await profile_repo.create_if_absent(make_draft("Agrostis capillaris", common_names=["Rotes Straußgras"]))

        assert [p.id for p in await profile_repo.find_by_name_or_alias("érable")] == [maple]
        assert [p.id for p in await profile_repo.find_by_name_or_alias("ÉRABLE")] == [maple]
        assert [p.id for p in await profile_repo.find_by_name_or_alias("STRAUSSGRAS")] == [grass]

    async def test_search_sees_patched_family(self, profile_repo):
        plant_id = await profile_repo.create_if_absent(make_draft("Hedera helix"))

        await profile_repo.patch_fields(plant_id, {"family": "Araliaceae"})

        assert [p.id for p in await profile_repo.find_by_name_or_alias("araliaceae")] == [plant_id]

    async def test_search_respects_limit_and_empty_term(self, profile_repo):
        for name in ("Acer rubrum", "Acer saccharum", "Acer palmatum"):
            await profile_repo.create_if_absent(make_draft(name))

        assert len(await profile_repo.find_by_name_or_alias("acer", limit=2)) == 2
        assert await profile_repo.find_by_name_or_alias("   ") == []

    async def test_patch_ignores_identity_fields(self, profile_repo):
        plant_id = await profile_repo.create_if_absent(make_draft("Ficus lyrata", common_names=["Fig"]))

        patched = await profile_repo.patch_fields(plant_id, {
            "scientific_name": "Something else",
            "common_names": ["Other"],
            "habitat": "Tropical West Africa",
            "native_regions": ["Cameroon", "Cameroon", "Sierra Leone"],
            "ai_enhanced": True,
        })

        profile = await profile_repo.get_by_id(plant_id)
        assert set(patched) == {"habitat", "native_regions", "ai_enhanced"}
        assert profile.scientific_name == "Ficus lyrata"
        assert profile.common_names == ["Fig"]
        assert profile.habitat == "Tropical West Africa"
        assert profile.native_regions == ["Cameroon", "Sierra Leone"]
        assert profile.ai_enhanced is True

    async def test_patch_unknown_profile_raises(self, profile_repo):
        with pytest.raises(NotFoundError):
            await profile_repo.patch_fields("missing", {"habitat": "Bog"})


class TestSightingRepository:
    """Tests for sighting persistence."""

    async def test_round_trips_location_and_status(self, sighting_repo, new_sighting):
        sighting = await new_sighting(user_provided_name="Fern", private_notes="by the gate")

        stored = await sighting_repo.get_by_id(sighting.id)

        assert stored.location.latitude == 51.5
        assert stored.user_provided_name == "Fern"
        assert stored.is_pending
        assert stored.created_at.tzinfo is not None

    async def test_list_by_user_is_newest_first_and_scoped(self, sighting_repo, new_sighting):
        older = await sighting_repo.add(Sighting(
            user_id="user-1",
            photo_ref="https://photos.test/old.jpg",
            location=GeoLocation(latitude=0.0, longitude=0.0),
            created_at=datetime.now(timezone.utc) - timedelta(hours=1),
        ))
        newer = await new_sighting()
        await new_sighting(user_id="someone-else")

        listed = await sighting_repo.list_by_user("user-1")

        assert [s.id for s in listed] == [newer.id, older.id]

    async def test_count_created_since(self, sighting_repo, new_sighting):
        await new_sighting()
        await new_sighting()

        midnight = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)

        assert await sighting_repo.count_created_since("user-1", midnight) == 2
        assert await sighting_repo.count_created_since("user-1", datetime.now(timezone.utc) + timedelta(hours=1)) == 0

    async def test_delete_missing_returns_false(self, sighting_repo):
        assert await sighting_repo.delete("missing") is False


class TestTourRepository:
    """Tests for tours and their ordered stops."""

    async def test_stops_get_zero_based_sequential_order(self, tour_repo, new_sighting):
        tour = await tour_repo.create(Tour(user_id="user-1", name="Riverside walk"))
        first, second = await new_sighting(), await new_sighting()

        stop_a = await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=first.id, order=0))
        stop_b = await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=second.id, order=0))

        assert (stop_a.order, stop_b.order) == (0, 1)
        assert [s.sighting_id for s in await tour_repo.list_stops(tour.id)] == [first.id, second.id]

    async def test_add_stop_to_missing_tour_raises(self, tour_repo, new_sighting):
        sighting = await new_sighting()

        with pytest.raises(NotFoundError):
            await tour_repo.add_stop(TourStop(tour_id="missing", sighting_id=sighting.id, order=0))

    async def test_deleting_sighting_removes_its_stops_but_keeps_tour(self, tour_repo, sighting_repo, new_sighting):
        tour = await tour_repo.create(Tour(user_id="user-1", name="Park loop"))
        kept, removed = await new_sighting(), await new_sighting()
        await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=kept.id, order=0))
        await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=removed.id, order=0))

        assert await sighting_repo.delete(removed.id) is True

        assert await tour_repo.get_by_id(tour.id) is not None
        assert [s.sighting_id for s in await tour_repo.list_stops(tour.id)] == [kept.id]
        assert await sighting_repo.get_by_id(removed.id) is None

    async def test_count_by_user_splits_private_and_public(self, tour_repo):
        await tour_repo.create(Tour(user_id="user-1", name="Private one"))
        await tour_repo.create(Tour(user_id="user-1", name="Public one", is_public=True))
        await tour_repo.create(Tour(user_id="user-1", name="Public two", is_public=True))
        await tour_repo.create(Tour(user_id="user-2", name="Not mine"))

        assert await tour_repo.count_by_user("user-1") == (1, 2)
        assert await tour_repo.count_by_user("nobody") == (0, 0)

    async def test_removing_a_stop_renumbers_the_rest(self, tour_repo, new_sighting):
        tour = await tour_repo.create(Tour(user_id="user-1", name="Canal path"))
        sightings = [await new_sighting() for _ in range(4)]
        stops = [
            await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=s.id, order=0)) for s in sightings
        ]

        assert await tour_repo.remove_stop(stops[1].id) is True

        remaining = await tour_repo.list_stops(tour.id)
        assert [s.order for s in remaining] == [0, 1, 2]
        assert [s.id for s in remaining] == [stops[0].id, stops[2].id, stops[3].id]

    async def test_stop_added_after_removal_goes_last(self, tour_repo, new_sighting):
        tour = await tour_repo.create(Tour(user_id="user-1", name="Canal path"))
        first, second, third = await new_sighting(), await new_sighting(), await new_sighting()
        removed = await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=first.id, order=0))
        await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=second.id, order=0))
        await tour_repo.remove_stop(removed.id)

        appended = await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=third.id, order=0))

        assert appended.order == 1

    async def test_remove_missing_stop_returns_false(self, tour_repo):
        assert await tour_repo.remove_stop("missing") is False

    async def test_update_stop_keeps_position(self, tour_repo, new_sighting):
        tour = await tour_repo.create(Tour(user_id="user-1", name="Heath loop"))
        sighting = await new_sighting()
        stop = await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=sighting.id, order=0))

        updated = await tour_repo.update_stop(stop.model_copy(update={"custom_notes": "Look under the bench"}))

        assert updated.custom_notes == "Look under the bench"
        assert (await tour_repo.get_stop(stop.id)).order == 0

    async def test_delete_tour_removes_stops_but_keeps_sightings(self, tour_repo, sighting_repo, new_sighting):
        tour = await tour_repo.create(Tour(user_id="user-1", name="Old route"))
        sighting = await new_sighting()
        stop = await tour_repo.add_stop(TourStop(tour_id=tour.id, sighting_id=sighting.id, order=0))

        assert await tour_repo.delete(tour.id) is True

        assert await tour_repo.get_by_id(tour.id) is None
        assert await tour_repo.get_stop(stop.id) is None
        assert await sighting_repo.get_by_id(sighting.id) is not None
        assert await tour_repo.delete(tour.id) is False

    async def test_update_tour_overwrites_editable_fields(self, tour_repo):
        tour = await tour_repo.create(Tour(user_id="user-1", name="Draft"))

        updated = await tour_repo.update(tour.model_copy(update={"name": "Bluebell wood", "is_public": True}))

        assert (updated.name, updated.is_public) == ("Bluebell wood", True)
        assert await tour_repo.count_by_user("user-1") == (0, 1)

    async def test_update_missing_tour_raises(self, tour_repo):
        with pytest.raises(NotFoundError):
            await tour_repo.update(Tour(user_id="user-1", name="Ghost"))

    async def test_list_public_is_newest_first_with_stop_counts(self, tour_repo, new_sighting):
        now = datetime.now(timezone.utc)
        older = await tour_repo.create(
            Tour(user_id="user-1", name="Older", is_public=True, created_at=now - timedelta(days=2))
        )
        newer = await tour_repo.create(
            Tour(user_id="user-2", name="Newer", is_public=True, created_at=now - timedelta(days=1))
        )
        await tour_repo.create(Tour(user_id="user-1", name="Hidden"))
        for _ in range(2):
            sighting = await new_sighting()
            await tour_repo.add_stop(TourStop(tour_id=older.id, sighting_id=sighting.id, order=0))

        listed = await tour_repo.list_public()

        assert [(tour.id, count) for tour, count in listed] == [(newer.id, 0), (older.id, 2)]


class TestAccountRepository:
    async def test_get_or_create_provisions_free_account_once(self, account_repo):
        created = await account_repo.get_or_create("user-1")
        again = await account_repo.get_or_create("user-1")

        assert created.subscription_plan == PlanTier.FREE
        assert created.subscription_status == SubscriptionStatus.ACTIVE
        assert again.id == created.id

    async def test_update_subscription(self, account_repo):
        await account_repo.get_or_create("user-1")

        account = await account_repo.update_subscription("user-1", PlanTier.PRO, SubscriptionStatus.CANCELLED)

        assert account.subscription_plan == PlanTier.PRO
        assert account.effective_plan == PlanTier.FREE

    async def test_update_subscription_for_unknown_account_raises(self, account_repo):
        with pytest.raises(NotFoundError):
            await account_repo.update_subscription("missing", PlanTier.PRO)


class TestConcurrentProfileCreation:
    """Two sessions racing to create the same species on a file-backed database."""

    @pytest.fixture
    async def file_engine(self, tmp_path):
        manager = DatabaseConnectionManager()
        await manager.initialize(Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'race.db'}"))
        await manager.create_tables()
        yield manager.engine
        await manager.close()

    async def test_racing_create_if_absent_yields_one_row(self, file_engine):
        session_factory = async_sessionmaker(file_engine, expire_on_commit=False)

        async def create(name: str) -> str:
            async with session_factory() as session:
                plant_id = await PlantProfileRepositoryImpl(session).create_if_absent(make_draft(name))
                await session.commit()
                return plant_id

        first, second = await asyncio.gather(create("Ficus lyrata"), create("FICUS  lyrata"))

        async with session_factory() as session:
            rows = (await session.execute(select(func.count()).select_from(PlantProfileModel))).scalar_one()
        assert first == second
        assert rows == 1
