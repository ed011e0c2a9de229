# 📄 File: app/modules/plant_identification/infrastructure/external/plantnet_client.py
# 🧭 Purpose (Layman Explanation):
# Sends a plant photo to PlantNet, a botanical image-recognition service, and
# turns its best guess into a plant record we can save.
# 🧪 Purpose (Technical Summary):
# VisualIdentifier adapter for the PlantNet v2 identify endpoint. Downloads the
# photo, uploads it as multipart form data, validates the ranked response with
# pydantic schemas and maps the top-scored candidate to a PlantProfileDraft.
# HTTP 404 ("Species not found") and an empty result list map to NO_MATCH.
# 🔗 Dependencies:
# pydantic, APIClient (aiohttp), circuit breaker, ProviderAdapter
# 🔄 Connected Modules / Calls From:
# provider_registry.py, VisualProviderStrategy

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.modules.plant_identification.domain.models.identification import (
    OutcomeKind,
    ProviderOutcome,
)
from app.modules.plant_identification.domain.models.plant_profile import PlantProfileDraft
from app.modules.plant_identification.domain.providers.identification_providers import (
    VisualIdentifier,
)
from app.shared.core.exceptions import ExternalAPIError
from app.shared.infrastructure.external_apis.api_client import APIClient
from app.shared.infrastructure.external_apis.circuit_breaker import CircuitBreaker
from app.shared.utils.logging import get_logger

from .provider_adapter import ProviderAdapter

logger = get_logger(__name__)

# v2 always returns common names; related images carry the reference photo URL
IDENTIFY_QUERY = {"include-related-images": "true", "no-reject": "false"}
IDENTIFY_FORM = {"organs": "auto"}


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class _PlantNetModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PlantNetTaxon(_PlantNetModel):
    scientific_name: str = Field(..., alias="scientificNameWithoutAuthor", min_length=1)


class PlantNetSpecies(_PlantNetModel):
    scientific_name: str = Field(..., alias="scientificNameWithoutAuthor", min_length=1)
    authorship: Optional[str] = Field(None, alias="scientificNameAuthorship")
    genus: Optional[PlantNetTaxon] = None
    family: Optional[PlantNetTaxon] = None
    common_names: List[str] = Field(default_factory=list, alias="commonNames")

    @field_validator("common_names", mode="before")
    @classmethod
    def _flatten_common_names(cls, v: Any) -> List[str]:
        """Older answers carry ``{"name": ...}`` objects instead of plain strings."""
        if v is None:
            return []
        names = []
        for item in v:
            if isinstance(item, dict):
                item = item.get("name")
            if isinstance(item, str) and item.strip():
                names.append(item.strip())
        return names


class PlantNetImageUrls(_PlantNetModel):
    o: Optional[str] = None
    m: Optional[str] = None
    s: Optional[str] = None


class PlantNetImage(_PlantNetModel):
    organ: Optional[str] = None
    url: Optional[PlantNetImageUrls] = None


class PlantNetResult(_PlantNetModel):
    score: float = Field(..., ge=0)
    species: PlantNetSpecies
    images: List[PlantNetImage] = Field(default_factory=list)

    @field_validator("score")
    @classmethod
    def _clamp_score(cls, v: float) -> float:
        return min(v, 1.0)


class PlantNetResponse(_PlantNetModel):
    results: List[PlantNetResult] = Field(default_factory=list)
    best_match: Optional[str] = Field(None, alias="bestMatch")
    remaining_requests: Optional[int] = Field(None, alias="remainingIdentificationRequests")


# =============================================================================
# ADAPTER
# =============================================================================

class PlantNetIdentifier(ProviderAdapter, VisualIdentifier):
    """
    PlantNet visual identification.

    The project path segment selects the flora (``all`` by default); the
    api-key query parameter is added by the APIClient.
    """

    api_name = "plantnet"

    def __init__(
        self,
        client: Optional[APIClient],
        circuit_breaker: Optional[CircuitBreaker] = None,
        project: str = "all",
        lang: str = "en",
    ):
        super().__init__(client, circuit_breaker)
        self.project = project
        self.lang = lang

    async def identify(self, image_url: str) -> ProviderOutcome:
        if not self.is_configured:
            return self.not_configured()

        try:
            image = await self._download_image(image_url)
        except ExternalAPIError as e:
            logger.warning(f"Could not download photo for PlantNet: {e.message}")
            return ProviderOutcome.failure(
                OutcomeKind.UNAVAILABLE, self.api_name, message="Could not access uploaded image"
            )

        async def send():
            return await self.client.upload_file(
                self.project,
                file_data=image,
                filename="sighting.jpg",
                field_name="images",
                content_type="image/jpeg",
                additional_fields=IDENTIFY_FORM,
                params={**IDENTIFY_QUERY, "lang": self.lang},
            )

        return await self._execute(send, self._parse)

    def _map_error(self, error: ExternalAPIError) -> ProviderOutcome:
        # PlantNet answers 404 when no species reaches its threshold
        if error.api_status_code == 404:
            logger.info("PlantNet found no matching species")
            return ProviderOutcome.failure(
                OutcomeKind.NO_MATCH, self.api_name, message="No matching species"
            )
        return super()._map_error(error)

    def _parse(self, payload: Any) -> ProviderOutcome:
        response = PlantNetResponse.model_validate(payload)
        if not response.results:
            return ProviderOutcome.failure(
                OutcomeKind.NO_MATCH, self.api_name, message="No matching species"
            )

        best = max(response.results, key=lambda result: result.score)
        species = best.species
        percent = int(best.score * 100 + 0.5)

        draft = PlantProfileDraft(
            scientific_name=species.scientific_name,
            common_names=species.common_names or [species.scientific_name],
            family=species.family.scientific_name if species.family else None,
            image_url=_first_image_url(best.images),
            description=f"{species.scientific_name} identified with {percent}% confidence using PlantNet.",
        )

        logger.info(
            f"PlantNet identified {species.scientific_name} ({percent}%)",
            remaining_requests=response.remaining_requests,
        )
        return ProviderOutcome.success(self.api_name, draft=draft, confidence=best.score)


def _first_image_url(images: List[PlantNetImage]) -> Optional[str]:
    for image in images:
        if image.url and (image.url.m or image.url.o):
            return image.url.m or image.url.o
    return None
