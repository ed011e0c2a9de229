"""
Tests for the identification orchestrator.

Covers the by-name flow (local match, provider validation, suggestions,
degradation to the typed name), the photo fallback chain and profile
enhancement. Every flow must leave the sighting in a terminal state.
"""

from unittest.mock import AsyncMock

import pytest

from app.modules.plant_identification.domain.models.identification import (
    ContentIntent,
    EnhancementStatus,
    OutcomeKind,
    ProviderOutcome,
)
from app.modules.plant_identification.domain.models.sighting import (
    IdentificationMethod,
    IdentificationStatus,
)
from app.modules.plant_identification.domain.services.identification_orchestrator import (
    MSG_ENHANCE_NOT_CONFIGURED,
    MSG_NAME_FAILED,
    MSG_NAME_NOT_RECOGNISED,
    MSG_PHOTO_INACCESSIBLE,
    MSG_PHOTO_NO_MATCH,
    MSG_PHOTO_NO_PROVIDER,
    MSG_PHOTO_UNAVAILABLE,
    MSG_SUGGESTIONS,
)
from app.shared.core.exceptions import NotFoundError

from conftest import make_draft


def success(provider: str, scientific_name: str, confidence=None, **fields) -> ProviderOutcome:
    return ProviderOutcome.success(
        provider, draft=make_draft(scientific_name, **fields), confidence=confidence
    )


class TestIdentifyByName:
    """Tests for identification from a typed name."""

    async def test_local_match_binds_without_provider_call(
        self, orchestrator, profile_repo, lifecycle, content_generator, new_sighting
    ):
        plant_id = await profile_repo.create_if_absent(
            make_draft("Monstera deliciosa", common_names=["Swiss cheese plant"])
        )
        sighting = await new_sighting()

        result = await orchestrator.identify_by_name(sighting.id, "swiss cheese")

        stored = await lifecycle.get(sighting.id)
        assert result.success
        assert result.plant_id == plant_id
        assert result.method == IdentificationMethod.MANUAL
        assert content_generator.calls == []
        assert stored.status == IdentificationStatus.IDENTIFIED
        assert stored.user_provided_name == "swiss cheese"

    async def test_local_match_on_accented_common_name(
        self, orchestrator, profile_repo, content_generator, new_sighting
    ):
        plant_id = await profile_repo.create_if_absent(make_draft("Acer rubrum", common_names=["Érable rouge"]))
        sighting = await new_sighting()

        result = await orchestrator.identify_by_name(sighting.id, "érable")

        assert result.plant_id == plant_id
        assert content_generator.calls == []

    async def test_unconfigured_generator_records_typed_name(
        self, orchestrator, content_generator, lifecycle, new_sighting
    ):
        content_generator.configured = False
        sighting = await new_sighting()

        result = await orchestrator.identify_by_name(sighting.id, "  Moon   flower ")

        assert result.success
        assert result.plant_profile.scientific_name == "Moon flower"
        assert result.plant_profile.common_names == ["Moon flower"]
        assert result.plant_profile.description == 'User-provided identification for "Moon flower".'
        assert content_generator.calls == []
        assert (await lifecycle.get(sighting.id)).plant_id == result.plant_id

    async def test_validated_name_creates_profile_from_provider_draft(
        self, orchestrator, content_generator, profile_repo, new_sighting
    ):
        content_generator.respond(
            ContentIntent.VALIDATE_AND_DESCRIBE,
            success("gemini", "Taraxacum officinale", common_names=["Dandelion"], family="Asteraceae"),
        )
        sighting = await new_sighting()

        result = await orchestrator.identify_by_name(sighting.id, "dandelion")

        assert result.success
        assert result.plant_profile.scientific_name == "Taraxacum officinale"
        assert result.plant_profile.family == "Asteraceae"
        assert content_generator.calls_for(ContentIntent.VALIDATE_AND_DESCRIBE) == ["dandelion"]
        assert await profile_repo.get_by_scientific_name("taraxacum officinale") is not None

    async def test_provider_draft_reuses_existing_profile(
        self, orchestrator, content_generator, profile_repo, new_sighting
    ):
        existing = await profile_repo.create_if_absent(make_draft("Bellis perennis"))
        content_generator.respond(
            ContentIntent.VALIDATE_AND_DESCRIBE, success("gemini", "BELLIS  perennis", common_names=["Daisy"])
        )
        sighting = await new_sighting()

        # "daisy" has no local match, so the provider is asked
        result = await orchestrator.identify_by_name(sighting.id, "daisy")

        assert result.plant_id == existing

    async def test_clarification_returns_suggestions_and_creates_nothing(
        self, orchestrator, content_generator, profile_repo, lifecycle, new_sighting
    ):
        content_generator.respond(
            ContentIntent.VALIDATE_AND_DESCRIBE,
            ProviderOutcome.failure(
                OutcomeKind.NEEDS_CLARIFICATION, "gemini", suggestions=["Rosa rugosa", "", "Rosa canina"]
            ),
        )
        sighting = await new_sighting()

        result = await orchestrator.identify_by_name(sighting.id, "rosee")

        stored = await lifecycle.get(sighting.id)
        assert not result.success
        assert result.error == MSG_SUGGESTIONS
        assert result.suggestions == ["Rosa rugosa", "Rosa canina"]
        assert stored.status == IdentificationStatus.FAILED
        assert stored.alternative_names == ["Rosa rugosa", "Rosa canina"]
        assert stored.user_provided_name == "rosee"
        assert await profile_repo.find_by_name_or_alias("rosa") == []

    async def test_unrecognised_name_without_suggestions(
        self, orchestrator, content_generator, new_sighting
    ):
        content_generator.respond(
            ContentIntent.VALIDATE_AND_DESCRIBE, ProviderOutcome.failure(OutcomeKind.NO_MATCH, "gemini")
        )
        sighting = await new_sighting()

        result = await orchestrator.identify_by_name(sighting.id, "asdf")

        assert not result.success
        assert result.suggestions == []
        assert result.error == MSG_NAME_NOT_RECOGNISED

    @pytest.mark.parametrize("kind", [
        OutcomeKind.UNAVAILABLE,
        OutcomeKind.RATE_LIMITED,
        OutcomeKind.MALFORMED_RESPONSE,
    ])
    async def test_provider_trouble_degrades_to_typed_name(
        self, orchestrator, content_generator, lifecycle, new_sighting, kind
    ):
        content_generator.respond(ContentIntent.VALIDATE_AND_DESCRIBE, ProviderOutcome.failure(kind, "gemini"))
        sighting = await new_sighting()

        result = await orchestrator.identify_by_name(sighting.id, "Wild garlic")

        assert result.success
        assert result.plant_profile.scientific_name == "Wild garlic"
        assert (await lifecycle.get(sighting.id)).status == IdentificationStatus.IDENTIFIED

    @pytest.mark.parametrize("name", [None, "", "   ", "rose\x00", "x" * 201])
    async def test_invalid_name_has_no_side_effects(
        self, orchestrator, content_generator, lifecycle, new_sighting, name
    ):
        sighting = await new_sighting()
        await lifecycle.mark_failed(sighting.id, alternative_names=["Ash"])

        result = await orchestrator.identify_by_name(sighting.id, name)

        stored = await lifecycle.get(sighting.id)
        assert not result.success
        assert result.error
        assert content_generator.calls == []
        assert stored.status == IdentificationStatus.FAILED
        assert stored.alternative_names == ["Ash"]

    @pytest.mark.parametrize("name", ["Devil’s ivy", 'Prunus "Kanzan"'])
    async def test_punctuated_names_reach_a_terminal_state(
        self, orchestrator, content_generator, lifecycle, new_sighting, name
    ):
        content_generator.configured = False
        sighting = await new_sighting()

        result = await orchestrator.identify_by_name(sighting.id, name)

        stored = await lifecycle.get(sighting.id)
        assert result.success
        assert result.plant_profile.scientific_name == name
        assert stored.status == IdentificationStatus.IDENTIFIED

    async def test_unexpected_error_leaves_sighting_failed(
        self, orchestrator, content_generator, lifecycle, new_sighting
    ):
        content_generator.respond(ContentIntent.VALIDATE_AND_DESCRIBE, RuntimeError("socket exploded"))
        sighting = await new_sighting()

        result = await orchestrator.identify_by_name(sighting.id, "Yarrow")

        stored = await lifecycle.get(sighting.id)
        assert not result.success
        assert result.error == MSG_NAME_FAILED
        assert stored.status == IdentificationStatus.FAILED
        assert stored.user_provided_name == "Yarrow"

    async def test_missing_sighting_raises_not_found(self, orchestrator):
        with pytest.raises(NotFoundError):
            await orchestrator.identify_by_name("missing", "Yarrow")

    async def test_reidentifying_replaces_previous_binding(
        self, orchestrator, content_generator, lifecycle, new_sighting
    ):
        content_generator.configured = False
        sighting = await new_sighting()

        first = await orchestrator.identify_by_name(sighting.id, "Nettle")
        second = await orchestrator.identify_by_name(sighting.id, "Dock")

        assert first.plant_id != second.plant_id
        assert (await lifecycle.get(sighting.id)).plant_id == second.plant_id


class TestIdentifyByPhoto:
    """Tests for the photo fallback chain."""

    async def test_visual_provider_success_is_enhanced_and_bound(
        self, orchestrator, visual_identifier, content_generator, lifecycle, new_sighting
    ):
        visual_identifier.outcome = success(
            "plantnet", "Quercus robur", confidence=0.91, common_names=["English oak"],
            description="Quercus robur identified with 91% confidence using PlantNet.",
        )
        content_generator.respond(
            ContentIntent.ENHANCE,
            ProviderOutcome.success("gemini", fields={"habitat": "Temperate woodland", "scientific_name": "Nope"}),
        )
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        stored = await lifecycle.get(sighting.id)
        assert result.success
        assert result.method == IdentificationMethod.PLANTNET
        assert result.confidence == 0.91
        assert result.plant_profile.scientific_name == "Quercus robur"
        assert result.plant_profile.habitat == "Temperate woodland"
        assert result.plant_profile.ai_enhanced is True
        assert [a.strategy for a in result.attempts] == ["plantnet"]
        assert visual_identifier.calls == ["https://photos.test/leaf.jpg"]
        assert stored.identification_method == IdentificationMethod.PLANTNET
        assert stored.confidence_score == 0.91

    async def test_failed_enhancement_keeps_visual_draft(
        self, orchestrator, visual_identifier, content_generator, new_sighting
    ):
        visual_identifier.outcome = success("plantnet", "Betula pendula", confidence=0.7)
        content_generator.respond(ContentIntent.ENHANCE, ProviderOutcome.failure(OutcomeKind.RATE_LIMITED, "gemini"))
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        assert result.success
        assert result.plant_profile.ai_enhanced is False

    async def test_falls_back_to_generative_vision(
        self, orchestrator, visual_identifier, content_generator, new_sighting
    ):
        visual_identifier.outcome = ProviderOutcome.failure(OutcomeKind.UNAVAILABLE, "plantnet")
        content_generator.image_identification = True
        content_generator.respond(
            ContentIntent.IDENTIFY_IMAGE, success("gemini", "Digitalis purpurea", confidence=0.6)
        )
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        assert result.success
        assert result.method == IdentificationMethod.GEMINI
        assert [(a.strategy, a.kind) for a in result.attempts] == [
            ("plantnet", OutcomeKind.UNAVAILABLE),
            ("gemini", OutcomeKind.SUCCESS),
        ]
        assert content_generator.calls_for(ContentIntent.ENHANCE) == []

    async def test_rate_limited_visual_provider_falls_back_to_generative_vision(
        self, orchestrator, visual_identifier, content_generator, lifecycle, new_sighting
    ):
        visual_identifier.outcome = ProviderOutcome.failure(OutcomeKind.RATE_LIMITED, "plantnet")
        content_generator.image_identification = True
        content_generator.respond(
            ContentIntent.IDENTIFY_IMAGE, success("gemini", "Hedera helix", confidence=0.55)
        )
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        stored = await lifecycle.get(sighting.id)
        assert result.success
        assert result.method == IdentificationMethod.GEMINI
        assert [(a.strategy, a.kind) for a in result.attempts] == [
            ("plantnet", OutcomeKind.RATE_LIMITED),
            ("gemini", OutcomeKind.SUCCESS),
        ]
        assert visual_identifier.calls == ["https://photos.test/leaf.jpg"]
        assert content_generator.calls_for(ContentIntent.IDENTIFY_IMAGE) == ["https://photos.test/leaf.jpg"]
        assert stored.status == IdentificationStatus.IDENTIFIED
        assert stored.identification_method == IdentificationMethod.GEMINI

    async def test_unconfigured_visual_provider_goes_straight_to_generative_vision(
        self, orchestrator, visual_identifier, content_generator, new_sighting
    ):
        visual_identifier.configured = False
        content_generator.image_identification = True
        content_generator.respond(
            ContentIntent.IDENTIFY_IMAGE, success("gemini", "Papaver rhoeas", confidence=0.8)
        )
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        assert result.success
        assert result.method == IdentificationMethod.GEMINI
        assert result.plant_profile.scientific_name == "Papaver rhoeas"
        assert visual_identifier.calls == []
        assert [(a.strategy, a.kind) for a in result.attempts] == [
            ("plantnet", OutcomeKind.NOT_CONFIGURED),
            ("gemini", OutcomeKind.SUCCESS),
        ]

    async def test_no_match_everywhere_marks_failed(
        self, orchestrator, visual_identifier, content_generator, lifecycle, new_sighting
    ):
        content_generator.image_identification = True
        content_generator.respond(ContentIntent.IDENTIFY_IMAGE, ProviderOutcome.failure(OutcomeKind.NO_MATCH, "gemini"))
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        assert not result.success
        assert result.error == MSG_PHOTO_NO_MATCH
        assert len(result.attempts) == 2
        assert (await lifecycle.get(sighting.id)).status == IdentificationStatus.FAILED

    async def test_unconfigured_providers_are_recorded_and_skipped(
        self, orchestrator, visual_identifier, content_generator, new_sighting
    ):
        visual_identifier.configured = False
        content_generator.configured = False
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        assert not result.success
        assert result.error == MSG_PHOTO_NO_PROVIDER
        assert {a.kind for a in result.attempts} == {OutcomeKind.NOT_CONFIGURED}
        assert visual_identifier.calls == []

    async def test_rate_limit_without_fallback_reports_unavailable(self, orchestrator, visual_identifier, new_sighting):
        visual_identifier.outcome = ProviderOutcome.failure(OutcomeKind.RATE_LIMITED, "plantnet")
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        assert result.error == MSG_PHOTO_UNAVAILABLE

    async def test_strategy_exception_becomes_unavailable_attempt(
        self, orchestrator, visual_identifier, lifecycle, new_sighting
    ):
        visual_identifier.outcome = RuntimeError("bad parse")
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        assert not result.success
        assert result.attempts[0].kind == OutcomeKind.UNAVAILABLE
        assert (await lifecycle.get(sighting.id)).status == IdentificationStatus.FAILED

    async def test_unresolvable_photo_marks_failed(self, orchestrator, photo_storage, lifecycle, new_sighting):
        sighting = await new_sighting(photo_ref="photos/user-1/gone.jpg")

        result = await orchestrator.identify_by_photo(sighting.id)

        assert result.error == MSG_PHOTO_INACCESSIBLE
        assert (await lifecycle.get(sighting.id)).status == IdentificationStatus.FAILED

    async def test_stored_photo_is_resolved_to_signed_url(
        self, orchestrator, photo_storage, visual_identifier, new_sighting
    ):
        ref = await photo_storage.upload("user-1", b"jpeg-bytes", "leaf.jpg")
        sighting = await new_sighting(photo_ref=ref)

        await orchestrator.identify_by_photo(sighting.id)

        assert visual_identifier.calls == [f"https://storage.test/signed/{ref}"]

    async def test_storage_crash_still_ends_terminal(self, orchestrator, photo_storage, lifecycle, new_sighting):
        photo_storage.resolve_url = AsyncMock(side_effect=RuntimeError("bucket on fire"))
        sighting = await new_sighting()

        result = await orchestrator.identify_by_photo(sighting.id)

        assert not result.success
        assert result.error == MSG_PHOTO_UNAVAILABLE
        assert (await lifecycle.get(sighting.id)).status == IdentificationStatus.FAILED


class TestEnhanceProfile:
    """Tests for profile enhancement."""

    async def test_not_configured(self, orchestrator, content_generator):
        content_generator.configured = False

        result = await orchestrator.enhance_profile("any")

        assert result.status == EnhancementStatus.NOT_CONFIGURED
        assert result.error == MSG_ENHANCE_NOT_CONFIGURED

    async def test_unknown_plant(self, orchestrator):
        result = await orchestrator.enhance_profile("missing")

        assert result.status == EnhancementStatus.NOT_FOUND

    async def test_provider_failure_leaves_profile_unchanged(self, orchestrator, content_generator, profile_repo):
        plant_id = await profile_repo.create_if_absent(make_draft("Salix alba", habitat="Riverbanks"))
        content_generator.respond(ContentIntent.ENHANCE, ProviderOutcome.failure(OutcomeKind.MALFORMED_RESPONSE, "gemini"))

        result = await orchestrator.enhance_profile(plant_id)

        profile = await profile_repo.get_by_id(plant_id)
        assert result.status == EnhancementStatus.FAILED
        assert profile.habitat == "Riverbanks"
        assert profile.ai_enhanced is False

    async def test_patches_descriptive_fields_only(self, orchestrator, content_generator, profile_repo):
        plant_id = await profile_repo.create_if_absent(make_draft("Salix alba", common_names=["White willow"]))
        content_generator.respond(
            ContentIntent.ENHANCE,
            ProviderOutcome.success("gemini", fields={
                "scientific_name": "Salix babylonica",
                "common_names": ["Weeping willow"],
                "water_needs": "High",
                "blooming_season": "",
                "native_regions": ["Europe", "Western Asia"],
            }),
        )

        result = await orchestrator.enhance_profile(plant_id)

        profile = await profile_repo.get_by_id(plant_id)
        assert result.success
        assert set(result.updated_fields) == {"water_needs", "native_regions", "ai_enhanced"}
        assert profile.scientific_name == "Salix alba"
        assert profile.common_names == ["White willow"]
        assert profile.water_needs == "High"
        assert profile.ai_enhanced is True
