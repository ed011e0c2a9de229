# 📄 File: app/modules/plant_identification/domain/providers/identification_providers.py
# 🧭 Purpose (Layman Explanation):
# Describes, without naming any company, the two kinds of helpers we ask to
# recognise plants: one that looks at photos and one that reads and writes
# plant descriptions.
# 🧪 Purpose (Technical Summary):
# Provider ports for the orchestrator. Implementations never raise for
# provider-side failures; every call returns a tagged ProviderOutcome.
# An unconfigured provider reports ``is_configured = False`` and answers
# NOT_CONFIGURED.
# 🔗 Dependencies:
# Domain models (ProviderOutcome, ContentIntent, PlantProfile), abc
# 🔄 Connected Modules / Calls From:
# Identification orchestrator, photo strategies, PlantNet/Gemini adapters

from abc import ABC, abstractmethod
from typing import Union

from ..models.identification import ContentIntent, ProviderOutcome
from ..models.plant_profile import PlantProfile, PlantProfileDraft

# Name for validation, profile/draft for enhancement, image URL for vision
ContentSubject = Union[str, PlantProfile, PlantProfileDraft]


class VisualIdentifier(ABC):
    """Image -> best species candidate."""

    name: str = "visual"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials were supplied."""

    @abstractmethod
    async def identify(self, image_url: str) -> ProviderOutcome:
        """
        Identify the plant in the image behind ``image_url``.

        Returns:
            SUCCESS with a profile draft and confidence, NO_MATCH when the
            provider found no candidates, RATE_LIMITED on HTTP 429, otherwise
            UNAVAILABLE / MALFORMED_RESPONSE / NOT_CONFIGURED
        """


class BotanicalContentGenerator(ABC):
    """Generative text provider for name validation, enhancement and optional vision."""

    name: str = "generative"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials were supplied."""

    @property
    def supports_image_identification(self) -> bool:
        """Whether ``ContentIntent.IDENTIFY_IMAGE`` is available."""
        return False

    @abstractmethod
    async def generate_content(self, intent: ContentIntent, subject: ContentSubject) -> ProviderOutcome:
        """
        Ask the provider for botanical content.

        Args:
            intent: VALIDATE_AND_DESCRIBE takes a typed name, ENHANCE a profile
                or draft, IDENTIFY_IMAGE an image URL
            subject: What the intent is about; must not be empty

        Returns:
            VALIDATE_AND_DESCRIBE: SUCCESS with a draft or NEEDS_CLARIFICATION
            with suggestions. ENHANCE: SUCCESS with partial ``fields``.
            IDENTIFY_IMAGE: SUCCESS with a draft or NO_MATCH. Any intent may
            answer UNAVAILABLE, MALFORMED_RESPONSE or NOT_CONFIGURED.
        """
