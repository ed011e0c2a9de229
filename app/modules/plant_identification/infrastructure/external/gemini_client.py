# 📄 File: app/modules/plant_identification/infrastructure/external/gemini_client.py
# 🧭 Purpose (Layman Explanation):
# Asks Google's Gemini model three kinds of plant questions: "is this a real
# plant name, and what is it?", "tell me more about this plant", and (when
# switched on) "what plant is in this photo?".
# 🧪 Purpose (Technical Summary):
# BotanicalContentGenerator adapter for the Gemini generateContent REST
# endpoint. Each ContentIntent has its own prompt and generation profile;
# replies are unwrapped from the candidates envelope, stripped of code fences,
# parsed as one JSON object and validated with pydantic before being mapped to
# a ProviderOutcome. Unparseable replies become MALFORMED_RESPONSE.
# 🔗 Dependencies:
# pydantic, Pillow (mime sniffing for inline images), APIClient, ProviderAdapter,
# app.shared.utils.validators.parse_json_object
# 🔄 Connected Modules / Calls From:
# provider_registry.py, IdentificationOrchestrator, GenerativeVisionStrategy

import base64
import io
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.modules.plant_identification.domain.models.identification import (
    ContentIntent,
    OutcomeKind,
    ProviderOutcome,
)
from app.modules.plant_identification.domain.models.plant_profile import (
    ENHANCEABLE_FIELDS,
    PlantProfile,
    PlantProfileDraft,
)
from app.modules.plant_identification.domain.providers.identification_providers import (
    BotanicalContentGenerator,
    ContentSubject,
)
from app.shared.core.exceptions import ExternalAPIError
from app.shared.infrastructure.external_apis.api_client import APIClient
from app.shared.infrastructure.external_apis.circuit_breaker import CircuitBreaker
from app.shared.utils.logging import get_logger
from app.shared.utils.validators import parse_json_object

from .provider_adapter import ProviderAdapter

logger = get_logger(__name__)


# =============================================================================
# GENERATION PROFILES
# =============================================================================

@dataclass(frozen=True)
class GenerationProfile:
    temperature: float
    max_output_tokens: int
    top_k: int = 1
    top_p: float = 1.0

    def as_config(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "topK": self.top_k,
            "topP": self.top_p,
            "maxOutputTokens": self.max_output_tokens,
            "responseMimeType": "application/json",
        }


GENERATION_PROFILES: Dict[ContentIntent, GenerationProfile] = {
    ContentIntent.VALIDATE_AND_DESCRIBE: GenerationProfile(temperature=0.2, max_output_tokens=1024),
    ContentIntent.ENHANCE: GenerationProfile(temperature=0.4, max_output_tokens=2048),
    ContentIntent.IDENTIFY_IMAGE: GenerationProfile(temperature=0.2, max_output_tokens=1024),
}


# =============================================================================
# PROMPTS
# =============================================================================

VALIDATION_PROMPT = """You are a botanist. A user typed the plant name "{name}".
Decide whether it names a real plant (common or scientific name, minor typos allowed).
Respond with a single JSON object and nothing else:
{{
  "isValidPlant": true or false,
  "correctedName": "the correctly spelled name, or null",
  "suggestions": ["up to 5 real plant names the user may have meant, empty if the name is clear"],
  "scientificName": "accepted scientific name without author",
  "commonNames": ["common names in English"],
  "family": "botanical family",
  "description": "two or three sentence overview",
  "careInstructions": "short care guidance",
  "ecologicalRole": "role in its ecosystem",
  "habitat": "where it naturally grows"
}}"""

ENHANCEMENT_PROMPT = """You are a botanist writing a field guide entry for {scientific_name}{common_hint}.
Respond with a single JSON object and nothing else. Omit keys you are unsure about:
{{
  "description": "concise overview",
  "detailedDescription": "in-depth description of appearance and lifecycle",
  "careInstructions": "how to grow and care for it",
  "ecologicalRole": "role in its ecosystem",
  "culturalSignificance": "uses and cultural history",
  "habitat": "natural habitat",
  "growthHabits": "size, form and growth rate",
  "seasonalChanges": "how it changes through the year",
  "bloomingSeason": "when it flowers",
  "lightRequirements": "light needs",
  "waterNeeds": "water needs",
  "soilPreferences": "soil preferences",
  "nativeRegions": ["regions where it is native"],
  "conservationStatus": "IUCN or regional status if known"
}}"""

IMAGE_IDENTIFICATION_PROMPT = """You are a botanist. Identify the plant in this photo.
Respond with a single JSON object and nothing else:
{
  "identified": true or false,
  "scientificName": "accepted scientific name without author, or null",
  "commonNames": ["common names in English"],
  "family": "botanical family",
  "confidence": number between 0 and 1,
  "description": "two or three sentence overview",
  "careInstructions": "short care guidance",
  "ecologicalRole": "role in its ecosystem",
  "habitat": "where it naturally grows"
}"""


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class _GeminiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GeminiPart(_GeminiModel):
    text: Optional[str] = None


class GeminiContent(_GeminiModel):
    parts: List[GeminiPart] = Field(default_factory=list)


class GeminiCandidate(_GeminiModel):
    content: Optional[GeminiContent] = None
    finish_reason: Optional[str] = Field(None, alias="finishReason")


class GeminiResponse(_GeminiModel):
    candidates: List[GeminiCandidate] = Field(default_factory=list)

    def text(self) -> str:
        if not self.candidates or self.candidates[0].content is None:
            raise ValueError("Gemini returned no candidates")
        text = "".join(part.text or "" for part in self.candidates[0].content.parts)
        if not text.strip():
            reason = self.candidates[0].finish_reason or "unknown"
            raise ValueError(f"Gemini returned an empty candidate (finishReason={reason})")
        return text


def _string_list(v: Any) -> List[str]:
    if v is None:
        return []
    if isinstance(v, str):
        v = [v]
    return [item.strip() for item in v if isinstance(item, str) and item.strip()]


class _BotanicalContent(_GeminiModel):
    scientific_name: Optional[str] = Field(None, alias="scientificName")
    common_names: List[str] = Field(default_factory=list, alias="commonNames")
    family: Optional[str] = None
    description: Optional[str] = None
    care_instructions: Optional[str] = Field(None, alias="careInstructions")
    ecological_role: Optional[str] = Field(None, alias="ecologicalRole")
    habitat: Optional[str] = None

    @field_validator("common_names", mode="before")
    @classmethod
    def _normalize_names(cls, v: Any) -> List[str]:
        return _string_list(v)

    def to_draft(self, fallback_name: str) -> PlantProfileDraft:
        scientific_name = (self.scientific_name or "").strip() or fallback_name
        return PlantProfileDraft(
            scientific_name=scientific_name,
            common_names=self.common_names or [fallback_name],
            family=self.family,
            description=self.description,
            care_instructions=self.care_instructions,
            ecological_role=self.ecological_role,
            habitat=self.habitat,
        )


class NameValidationContent(_BotanicalContent):
    is_valid_plant: bool = Field(..., alias="isValidPlant")
    corrected_name: Optional[str] = Field(None, alias="correctedName")
    suggestions: List[str] = Field(default_factory=list)

    @field_validator("suggestions", mode="before")
    @classmethod
    def _normalize_suggestions(cls, v: Any) -> List[str]:
        return _string_list(v)


class ImageIdentificationContent(_BotanicalContent):
    identified: bool = False
    confidence: Optional[float] = Field(None, ge=0, le=1)


class EnhancementContent(_GeminiModel):
    description: Optional[str] = None
    detailed_description: Optional[str] = Field(None, alias="detailedDescription")
    care_instructions: Optional[str] = Field(None, alias="careInstructions")
    ecological_role: Optional[str] = Field(None, alias="ecologicalRole")
    cultural_significance: Optional[str] = Field(None, alias="culturalSignificance")
    habitat: Optional[str] = None
    growth_habits: Optional[str] = Field(None, alias="growthHabits")
    seasonal_changes: Optional[str] = Field(None, alias="seasonalChanges")
    blooming_season: Optional[str] = Field(None, alias="bloomingSeason")
    light_requirements: Optional[str] = Field(None, alias="lightRequirements")
    water_needs: Optional[str] = Field(None, alias="waterNeeds")
    soil_preferences: Optional[str] = Field(None, alias="soilPreferences")
    native_regions: List[str] = Field(default_factory=list, alias="nativeRegions")
    conservation_status: Optional[str] = Field(None, alias="conservationStatus")

    @field_validator("native_regions", mode="before")
    @classmethod
    def _normalize_regions(cls, v: Any) -> List[str]:
        return _string_list(v)

    def non_empty_fields(self) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        for name in ENHANCEABLE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str):
                value = value.strip()
            if value:
                fields[name] = value
        return fields


# =============================================================================
# ADAPTER
# =============================================================================

class GeminiContentGenerator(ProviderAdapter, BotanicalContentGenerator):
    """
    Gemini generative content.

    Image identification is opt-in through ``image_identification``; without it
    the vision strategy reports itself unavailable.
    """

    api_name = "gemini"

    def __init__(
        self,
        client: Optional[APIClient],
        circuit_breaker: Optional[CircuitBreaker] = None,
        model: str = "gemini-1.5-flash",
        image_identification: bool = False,
    ):
        super().__init__(client, circuit_breaker)
        self.model = model
        self.image_identification = image_identification

    @property
    def supports_image_identification(self) -> bool:
        return self.is_configured and self.image_identification

    async def generate_content(self, intent: ContentIntent, subject: ContentSubject) -> ProviderOutcome:
        """
        Route one request by intent.

        Raises:
            ValueError: If the subject is empty
        """
        if not self.is_configured:
            return self.not_configured()

        if intent == ContentIntent.VALIDATE_AND_DESCRIBE:
            name = _require_text(subject)
            prompt = VALIDATION_PROMPT.format(name=name.replace('"', "'"))
            return await self._generate(intent, [{"text": prompt}], lambda data: self._parse_validation(data, name))

        if intent == ContentIntent.ENHANCE:
            if isinstance(subject, (PlantProfile, PlantProfileDraft)):
                scientific_name, common_names = subject.scientific_name, subject.common_names
            else:
                scientific_name, common_names = _require_text(subject), []
            common_hint = f" (also known as {', '.join(common_names[:3])})" if common_names else ""
            prompt = ENHANCEMENT_PROMPT.format(scientific_name=scientific_name, common_hint=common_hint)
            return await self._generate(intent, [{"text": prompt}], self._parse_enhancement)

        if intent == ContentIntent.IDENTIFY_IMAGE:
            image_url = _require_text(subject)
            if not self.image_identification:
                return ProviderOutcome.failure(
                    OutcomeKind.NOT_CONFIGURED, self.api_name, message="Gemini image identification disabled"
                )
            try:
                image = await self._download_image(image_url)
            except ExternalAPIError as e:
                logger.warning(f"Could not download photo for Gemini: {e.message}")
                return ProviderOutcome.failure(
                    OutcomeKind.UNAVAILABLE, self.api_name, message="Could not access uploaded image"
                )
            parts = [
                {"text": IMAGE_IDENTIFICATION_PROMPT},
                {"inline_data": {"mime_type": _sniff_mime_type(image), "data": base64.b64encode(image).decode("ascii")}},
            ]
            return await self._generate(intent, parts, self._parse_image_identification)

        raise ValueError(f"Unsupported content intent: {intent}")

    async def _generate(self, intent: ContentIntent, parts: List[Dict[str, Any]], parse) -> ProviderOutcome:
        body = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": GENERATION_PROFILES[intent].as_config(),
        }

        async def send():
            return await self.client.post(f"{self.model}:generateContent", data=body)

        def parse_envelope(payload: Any) -> ProviderOutcome:
            text = GeminiResponse.model_validate(payload).text()
            return parse(parse_json_object(text))

        logger.debug(f"Gemini request ({intent.value})")
        return await self._execute(send, parse_envelope)

    # =========================================================================
    # PARSERS
    # =========================================================================

    def _parse_validation(self, data: Dict[str, Any], typed_name: str) -> ProviderOutcome:
        content = NameValidationContent.model_validate(data)

        if not content.is_valid_plant or content.suggestions:
            suggestions = content.suggestions or _string_list(content.corrected_name)
            logger.info(f"Gemini asked for clarification of '{typed_name}': {suggestions}")
            return ProviderOutcome.failure(
                OutcomeKind.NEEDS_CLARIFICATION,
                self.api_name,
                message="Name not recognised as a plant",
                suggestions=suggestions,
            )

        fallback = (content.corrected_name or "").strip() or typed_name
        return ProviderOutcome.success(self.api_name, draft=content.to_draft(fallback))

    def _parse_enhancement(self, data: Dict[str, Any]) -> ProviderOutcome:
        fields = EnhancementContent.model_validate(data).non_empty_fields()
        if not fields:
            raise ValueError("Enhancement reply contained no content")
        return ProviderOutcome.success(self.api_name, fields=fields)

    def _parse_image_identification(self, data: Dict[str, Any]) -> ProviderOutcome:
        content = ImageIdentificationContent.model_validate(data)
        if not content.identified or not (content.scientific_name or "").strip():
            return ProviderOutcome.failure(
                OutcomeKind.NO_MATCH, self.api_name, message="Gemini could not identify the plant"
            )
        draft = content.to_draft(content.scientific_name.strip())
        return ProviderOutcome.success(self.api_name, draft=draft, confidence=content.confidence)


def _require_text(subject: ContentSubject) -> str:
    if not isinstance(subject, str) or not subject.strip():
        raise ValueError("Content subject must be a non-empty string")
    return subject.strip()


def _sniff_mime_type(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as image:
            return Image.MIME.get(image.format, "image/jpeg")
    except UnidentifiedImageError:
        return "image/jpeg"
