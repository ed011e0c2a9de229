"""
Tests for the sighting state machine and its manager.
"""

import pytest

from app.modules.plant_identification.domain.models.sighting import (
    GeoLocation,
    IdentificationMethod,
    IdentificationStatus,
    Sighting,
)
from app.shared.core.exceptions import InvalidStateTransitionError, NotFoundError

from conftest import make_draft


def pending_sighting(**kwargs) -> Sighting:
    return Sighting(
        user_id="user-1",
        photo_ref="https://photos.test/leaf.jpg",
        location=GeoLocation(latitude=10.0, longitude=20.0),
        **kwargs,
    )


class TestSightingEntity:
    """Tests for transitions on the entity itself."""

    def test_new_sighting_is_pending(self):
        sighting = pending_sighting()

        assert sighting.status == IdentificationStatus.PENDING
        assert sighting.plant_id is None

    def test_identified_requires_plant(self):
        with pytest.raises(ValueError):
            pending_sighting(status=IdentificationStatus.IDENTIFIED)

    def test_mark_identified_binds_plant(self):
        sighting = pending_sighting()

        sighting.mark_identified("plant-1", IdentificationMethod.PLANTNET, confidence_score=0.87)

        assert sighting.status == IdentificationStatus.IDENTIFIED
        assert sighting.plant_id == "plant-1"
        assert sighting.confidence_score == 0.87

    def test_terminal_sighting_cannot_transition_again(self):
        sighting = pending_sighting()
        sighting.mark_failed()

        with pytest.raises(InvalidStateTransitionError):
            sighting.mark_identified("plant-1", IdentificationMethod.MANUAL)

    def test_mark_failed_keeps_previous_name(self):
        sighting = pending_sighting(user_provided_name="Fern")

        sighting.mark_failed(alternative_names=["Bracken", "Hart's-tongue"])

        assert sighting.user_provided_name == "Fern"
        assert sighting.alternative_names == ["Bracken", "Hart's-tongue"]

    def test_reopen_clears_identification(self):
        sighting = pending_sighting()
        sighting.mark_identified("plant-1", IdentificationMethod.GEMINI, confidence_score=0.5)

        sighting.reopen()

        assert sighting.is_pending
        assert sighting.plant_id is None
        assert sighting.identification_method is None
        assert sighting.confidence_score is None

    def test_invalid_confidence_leaves_entity_untouched(self):
        sighting = pending_sighting()

        with pytest.raises(ValueError):
            sighting.mark_identified("plant-1", IdentificationMethod.PLANTNET, confidence_score=1.5)

        assert sighting.is_pending

    def test_edit_user_fields_reports_change(self):
        sighting = pending_sighting()

        assert sighting.edit_user_fields(private_notes="north bank") is True
        assert sighting.edit_user_fields(private_notes="north bank") is False


class TestSightingLifecycleManager:
    """Tests for persisted transitions."""

    async def test_mark_identified_requires_existing_profile(self, lifecycle, new_sighting):
        sighting = await new_sighting()
        await lifecycle.begin_identification(sighting.id)

        with pytest.raises(NotFoundError):
            await lifecycle.mark_identified(sighting.id, "no-such-plant", IdentificationMethod.MANUAL)

    async def test_identify_then_reopen(self, lifecycle, profile_repo, new_sighting):
        sighting = await new_sighting()
        plant_id = await profile_repo.create_if_absent(make_draft("Hedera helix"))

        await lifecycle.begin_identification(sighting.id)
        identified = await lifecycle.mark_identified(
            sighting.id, plant_id, IdentificationMethod.MANUAL, user_provided_name="Ivy"
        )
        reopened = await lifecycle.begin_identification(sighting.id)

        assert identified.status == IdentificationStatus.IDENTIFIED
        assert identified.user_provided_name == "Ivy"
        assert reopened.is_pending
        assert reopened.plant_id is None

    async def test_ensure_terminal_forces_pending_to_failed(self, lifecycle, new_sighting):
        sighting = await new_sighting()

        result = await lifecycle.ensure_terminal(sighting.id, user_provided_name="Mystery shrub")

        assert result.status == IdentificationStatus.FAILED
        assert result.user_provided_name == "Mystery shrub"

    async def test_ensure_terminal_leaves_terminal_sighting_alone(self, lifecycle, new_sighting):
        sighting = await new_sighting()
        await lifecycle.mark_failed(sighting.id, alternative_names=["Oak"])

        result = await lifecycle.ensure_terminal(sighting.id)

        assert result.status == IdentificationStatus.FAILED
        assert result.alternative_names == ["Oak"]

    async def test_ensure_terminal_for_missing_sighting_returns_none(self, lifecycle):
        assert await lifecycle.ensure_terminal("missing") is None

    async def test_get_missing_sighting_raises(self, lifecycle):
        with pytest.raises(NotFoundError):
            await lifecycle.get("missing")

    async def test_edit_does_not_touch_status(self, lifecycle, new_sighting):
        sighting = await new_sighting()
        await lifecycle.mark_failed(sighting.id)

        edited = await lifecycle.edit_user_fields(sighting.id, user_provided_name="Alder")

        assert edited.user_provided_name == "Alder"
        assert edited.status == IdentificationStatus.FAILED
