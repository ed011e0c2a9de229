# 📄 File: app/modules/plant_identification/domain/services/photo_strategies.py
# 🧭 Purpose (Layman Explanation):
# The ordered list of ways we try to recognise a plant from a photo: first the
# photo-recognition service, then, if that cannot help, the AI model that can
# also look at pictures.
# 🧪 Purpose (Technical Summary):
# Explicit fallback chain for the by-photo flow. Each strategy wraps one
# provider capability, reports whether it can run, and always yields a tagged
# ProviderOutcome. The orchestrator walks the list and stops at the first
# success.
# 🔗 Dependencies:
# Domain models (ProviderOutcome, OutcomeKind, ContentIntent,
# IdentificationMethod), provider ports, shared logging
# 🔄 Connected Modules / Calls From:
# Identification orchestrator, presentation dependencies (chain assembly)

from abc import ABC, abstractmethod
from typing import List

from app.shared.utils.logging import get_logger

from ..models.identification import ContentIntent, OutcomeKind, ProviderOutcome
from ..models.sighting import IdentificationMethod
from ..providers.identification_providers import BotanicalContentGenerator, VisualIdentifier

logger = get_logger(__name__)


class PhotoIdentificationStrategy(ABC):
    """One step of the photo fallback chain."""

    name: str
    method: IdentificationMethod
    # Whether a successful draft should be enriched by the generative provider
    enhance_on_success: bool = False

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """True when the strategy can be attempted at all."""

    @abstractmethod
    async def _attempt(self, image_url: str) -> ProviderOutcome:
        """Provider call; may raise on programming errors only."""

    async def attempt(self, image_url: str) -> ProviderOutcome:
        """
        Run the strategy, converting anything unexpected into UNAVAILABLE.

        Returns:
            The provider's tagged outcome
        """
        try:
            return await self._attempt(image_url)
        except Exception as e:
            logger.error(f"Photo strategy '{self.name}' raised unexpectedly: {e}", exc_info=True)
            return ProviderOutcome.failure(OutcomeKind.UNAVAILABLE, self.name, message=str(e))


class VisualProviderStrategy(PhotoIdentificationStrategy):
    """Priority path: the visual recognition provider."""

    method = IdentificationMethod.PLANTNET
    enhance_on_success = True

    def __init__(self, identifier: VisualIdentifier):
        self.identifier = identifier
        self.name = identifier.name

    @property
    def is_available(self) -> bool:
        return self.identifier.is_configured

    async def _attempt(self, image_url: str) -> ProviderOutcome:
        return await self.identifier.identify(image_url)


class GenerativeVisionStrategy(PhotoIdentificationStrategy):
    """Fallback path: image identification by the generative provider."""

    method = IdentificationMethod.GEMINI

    def __init__(self, generator: BotanicalContentGenerator):
        self.generator = generator
        self.name = generator.name

    @property
    def is_available(self) -> bool:
        return self.generator.is_configured and self.generator.supports_image_identification

    async def _attempt(self, image_url: str) -> ProviderOutcome:
        return await self.generator.generate_content(ContentIntent.IDENTIFY_IMAGE, image_url)


def default_photo_strategies(
    visual_identifier: VisualIdentifier,
    content_generator: BotanicalContentGenerator,
) -> List[PhotoIdentificationStrategy]:
    """The production chain: visual provider first, generative vision second."""
    return [
        VisualProviderStrategy(visual_identifier),
        GenerativeVisionStrategy(content_generator),
    ]
