"""
Tests for the PlantNet and Gemini adapters.

The APIClient is replaced by an AsyncMock; each test scripts the raw
payload or error and checks the tagged outcome the adapter produces.
"""

import json
from unittest.mock import AsyncMock

import pytest

from app.modules.plant_identification.domain.models.identification import ContentIntent, OutcomeKind
from app.modules.plant_identification.infrastructure.external.gemini_client import GeminiContentGenerator
from app.modules.plant_identification.infrastructure.external.plantnet_client import PlantNetIdentifier
from app.shared.core.exceptions import (
    APIConnectionError,
    APIRateLimitError,
    ExternalAPIError,
)
from app.shared.infrastructure.external_apis.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
)

from conftest import make_draft

IMAGE_URL = "https://photos.test/leaf.jpg"


def mock_client(api_key: str = "test-key") -> AsyncMock:
    client = AsyncMock()
    client.api_key = api_key
    client.fetch_bytes.return_value = b"not really an image"
    return client


def plantnet_payload(*results) -> dict:
    return {"results": list(results), "remainingIdentificationRequests": 480}


def plantnet_result(score: float, name: str, family: str = None, common_names=None) -> dict:
    species = {"scientificNameWithoutAuthor": name, "commonNames": common_names or []}
    if family:
        species["family"] = {"scientificNameWithoutAuthor": family}
    return {
        "score": score,
        "species": species,
        "images": [{"organ": "leaf", "url": {"o": "https://bs.plantnet.org/o.jpg", "m": "https://bs.plantnet.org/m.jpg"}}],
    }


def gemini_payload(data) -> dict:
    text = data if isinstance(data, str) else f"```json\n{json.dumps(data)}\n```"
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


class TestPlantNetIdentifier:
    """Tests for the visual provider adapter."""

    async def test_not_configured_without_key(self):
        identifier = PlantNetIdentifier(None)

        outcome = await identifier.identify(IMAGE_URL)

        assert outcome.kind == OutcomeKind.NOT_CONFIGURED
        assert not identifier.is_configured

    async def test_empty_key_means_not_configured(self):
        client = mock_client(api_key="")

        outcome = await PlantNetIdentifier(client).identify(IMAGE_URL)

        assert outcome.kind == OutcomeKind.NOT_CONFIGURED
        client.upload_file.assert_not_called()

    async def test_picks_highest_score(self):
        client = mock_client()
        client.upload_file.return_value = plantnet_payload(
            plantnet_result(0.12, "Acer campestre"),
            plantnet_result(0.873, "Acer platanoides", family="Sapindaceae", common_names=["Norway maple"]),
        )

        outcome = await PlantNetIdentifier(client, project="weurope").identify(IMAGE_URL)

        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.confidence == pytest.approx(0.873)
        assert outcome.draft.scientific_name == "Acer platanoides"
        assert outcome.draft.family == "Sapindaceae"
        assert outcome.draft.common_names == ["Norway maple"]
        assert outcome.draft.image_url == "https://bs.plantnet.org/m.jpg"
        assert outcome.draft.description == "Acer platanoides identified with 87% confidence using PlantNet."
        client.fetch_bytes.assert_awaited_once_with(IMAGE_URL)
        args, kwargs = client.upload_file.call_args
        assert args[0] == "weurope"
        assert kwargs["field_name"] == "images"
        assert kwargs["additional_fields"] == {"organs": "auto"}
        assert kwargs["params"] == {"include-related-images": "true", "no-reject": "false", "lang": "en"}

    async def test_common_names_use_configured_language(self):
        client = mock_client()
        client.upload_file.return_value = plantnet_payload(
            plantnet_result(0.6, "Acer campestre", common_names=["Érable champêtre"])
        )

        outcome = await PlantNetIdentifier(client, lang="fr").identify(IMAGE_URL)

        assert outcome.draft.common_names == ["Érable champêtre"]
        assert client.upload_file.call_args.kwargs["params"]["lang"] == "fr"

    async def test_falls_back_to_scientific_name_without_common_names(self):
        client = mock_client()
        client.upload_file.return_value = plantnet_payload(plantnet_result(0.5, "Urtica dioica"))

        outcome = await PlantNetIdentifier(client).identify(IMAGE_URL)

        assert outcome.draft.common_names == ["Urtica dioica"]

    async def test_empty_results_is_no_match(self):
        client = mock_client()
        client.upload_file.return_value = plantnet_payload()

        outcome = await PlantNetIdentifier(client).identify(IMAGE_URL)

        assert outcome.kind == OutcomeKind.NO_MATCH

    async def test_http_404_is_no_match(self):
        client = mock_client()
        client.upload_file.side_effect = ExternalAPIError("Species not found", api_name="plantnet", api_status_code=404)

        outcome = await PlantNetIdentifier(client).identify(IMAGE_URL)

        assert outcome.kind == OutcomeKind.NO_MATCH

    async def test_rate_limit(self):
        client = mock_client()
        client.upload_file.side_effect = APIRateLimitError("plantnet", retry_after=60)

        outcome = await PlantNetIdentifier(client).identify(IMAGE_URL)

        assert outcome.kind == OutcomeKind.RATE_LIMITED

    async def test_malformed_payload(self):
        client = mock_client()
        client.upload_file.return_value = {"results": [{"score": "high", "species": {}}]}

        outcome = await PlantNetIdentifier(client).identify(IMAGE_URL)

        assert outcome.kind == OutcomeKind.MALFORMED_RESPONSE

    async def test_unreachable_photo_is_unavailable_without_provider_call(self):
        client = mock_client()
        client.fetch_bytes.side_effect = APIConnectionError("photo", "connection refused")

        outcome = await PlantNetIdentifier(client).identify(IMAGE_URL)

        assert outcome.kind == OutcomeKind.UNAVAILABLE
        client.upload_file.assert_not_called()

    async def test_open_circuit_short_circuits(self):
        client = mock_client()
        breaker = CircuitBreaker("plantnet_test", CircuitBreakerConfig(failure_threshold=1, recovery_timeout_seconds=3600))
        breaker.force_open("test")

        outcome = await PlantNetIdentifier(client, breaker).identify(IMAGE_URL)

        assert outcome.kind == OutcomeKind.UNAVAILABLE
        client.upload_file.assert_not_called()

    async def test_server_errors_open_circuit(self):
        client = mock_client()
        client.upload_file.side_effect = ExternalAPIError("boom", api_name="plantnet", api_status_code=500)
        breaker = CircuitBreaker("plantnet_test", CircuitBreakerConfig(failure_threshold=2))
        identifier = PlantNetIdentifier(client, breaker)

        for _ in range(2):
            assert (await identifier.identify(IMAGE_URL)).kind == OutcomeKind.UNAVAILABLE

        assert breaker.get_state() == CircuitState.OPEN


class TestGeminiContentGenerator:
    """Tests for the generative provider adapter."""

    async def test_not_configured_without_client(self):
        generator = GeminiContentGenerator(None)

        outcome = await generator.generate_content(ContentIntent.VALIDATE_AND_DESCRIBE, "Oak")

        assert outcome.kind == OutcomeKind.NOT_CONFIGURED
        assert not generator.supports_image_identification

    async def test_valid_name_returns_draft(self):
        client = mock_client()
        client.post.return_value = gemini_payload({
            "isValidPlant": True,
            "correctedName": "Quercus robur",
            "suggestions": [],
            "scientificName": "Quercus robur",
            "commonNames": ["English oak", "Pedunculate oak"],
            "family": "Fagaceae",
            "description": "A large deciduous tree.",
        })

        outcome = await GeminiContentGenerator(client, model="gemini-test").generate_content(
            ContentIntent.VALIDATE_AND_DESCRIBE, "english oak"
        )

        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.draft.scientific_name == "Quercus robur"
        assert outcome.draft.common_names == ["English oak", "Pedunculate oak"]
        assert outcome.draft.family == "Fagaceae"
        args, kwargs = client.post.call_args
        assert args[0] == "gemini-test:generateContent"
        assert "english oak" in kwargs["data"]["contents"][0]["parts"][0]["text"]

    async def test_missing_scientific_name_falls_back_to_typed_name(self):
        client = mock_client()
        client.post.return_value = gemini_payload({"isValidPlant": True})

        outcome = await GeminiContentGenerator(client).generate_content(
            ContentIntent.VALIDATE_AND_DESCRIBE, "Bluebell"
        )

        assert outcome.draft.scientific_name == "Bluebell"
        assert outcome.draft.common_names == ["Bluebell"]

    async def test_invalid_name_needs_clarification(self):
        client = mock_client()
        client.post.return_value = gemini_payload({
            "isValidPlant": False,
            "suggestions": ["Rosa rugosa", "Rosa canina"],
        })

        outcome = await GeminiContentGenerator(client).generate_content(
            ContentIntent.VALIDATE_AND_DESCRIBE, "rosee"
        )

        assert outcome.kind == OutcomeKind.NEEDS_CLARIFICATION
        assert outcome.suggestions == ["Rosa rugosa", "Rosa canina"]

    async def test_suggestions_on_valid_name_still_clarify(self):
        client = mock_client()
        client.post.return_value = gemini_payload({"isValidPlant": True, "suggestions": "Lavandula angustifolia"})

        outcome = await GeminiContentGenerator(client).generate_content(
            ContentIntent.VALIDATE_AND_DESCRIBE, "lavender"
        )

        assert outcome.kind == OutcomeKind.NEEDS_CLARIFICATION
        assert outcome.suggestions == ["Lavandula angustifolia"]

    async def test_enhancement_returns_non_empty_fields(self):
        client = mock_client()
        client.post.return_value = gemini_payload({
            "habitat": "Woodland edges",
            "waterNeeds": " ",
            "nativeRegions": ["Europe", ""],
            "conservationStatus": None,
        })

        outcome = await GeminiContentGenerator(client).generate_content(
            ContentIntent.ENHANCE, make_draft("Corylus avellana", common_names=["Hazel"])
        )

        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.fields == {"habitat": "Woodland edges", "native_regions": ["Europe"]}
        assert "Corylus avellana" in client.post.call_args.kwargs["data"]["contents"][0]["parts"][0]["text"]

    async def test_empty_enhancement_is_malformed(self):
        client = mock_client()
        client.post.return_value = gemini_payload({})

        outcome = await GeminiContentGenerator(client).generate_content(ContentIntent.ENHANCE, "Corylus avellana")

        assert outcome.kind == OutcomeKind.MALFORMED_RESPONSE

    @pytest.mark.parametrize("payload", [
        {"candidates": []},
        gemini_payload("I am not sure what this is."),
        gemini_payload({"isValidPlant": "perhaps"}),
    ])
    async def test_unusable_replies_are_malformed(self, payload):
        client = mock_client()
        client.post.return_value = payload

        outcome = await GeminiContentGenerator(client).generate_content(
            ContentIntent.VALIDATE_AND_DESCRIBE, "Oak"
        )

        assert outcome.kind == OutcomeKind.MALFORMED_RESPONSE

    async def test_rate_limit(self):
        client = mock_client()
        client.post.side_effect = APIRateLimitError("gemini")

        outcome = await GeminiContentGenerator(client).generate_content(
            ContentIntent.VALIDATE_AND_DESCRIBE, "Oak"
        )

        assert outcome.kind == OutcomeKind.RATE_LIMITED

    async def test_image_identification_disabled_by_default(self):
        client = mock_client()
        generator = GeminiContentGenerator(client)

        outcome = await generator.generate_content(ContentIntent.IDENTIFY_IMAGE, IMAGE_URL)

        assert not generator.supports_image_identification
        assert outcome.kind == OutcomeKind.NOT_CONFIGURED
        client.fetch_bytes.assert_not_called()

    async def test_image_identification(self):
        client = mock_client()
        client.post.return_value = gemini_payload({
            "identified": True,
            "scientificName": "Digitalis purpurea",
            "commonNames": ["Foxglove"],
            "confidence": 0.72,
        })

        outcome = await GeminiContentGenerator(client, image_identification=True).generate_content(
            ContentIntent.IDENTIFY_IMAGE, IMAGE_URL
        )

        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.confidence == pytest.approx(0.72)
        assert outcome.draft.scientific_name == "Digitalis purpurea"
        parts = client.post.call_args.kwargs["data"]["contents"][0]["parts"]
        assert parts[1]["inline_data"]["mime_type"] == "image/jpeg"

    async def test_unidentified_image_is_no_match(self):
        client = mock_client()
        client.post.return_value = gemini_payload({"identified": False, "scientificName": None})

        outcome = await GeminiContentGenerator(client, image_identification=True).generate_content(
            ContentIntent.IDENTIFY_IMAGE, IMAGE_URL
        )

        assert outcome.kind == OutcomeKind.NO_MATCH

    async def test_empty_subject_raises(self):
        with pytest.raises(ValueError):
            await GeminiContentGenerator(mock_client()).generate_content(ContentIntent.VALIDATE_AND_DESCRIBE, "  ")
