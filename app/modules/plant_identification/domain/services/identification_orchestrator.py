# 📄 File: app/modules/plant_identification/domain/services/identification_orchestrator.py
# 🧭 Purpose (Layman Explanation):
# The brain of plant identification. Given a sighting and either a typed name
# or a photo, it decides which services to ask and in what order, reuses
# plants we already know, copes with services being down or unsure, and
# always leaves the sighting clearly marked as identified or not.
# 🧪 Purpose (Technical Summary):
# Identification Orchestrator with three flows: identify_by_name,
# identify_by_photo and enhance_profile. Expected failures (provider down,
# rate limited, malformed answer, ambiguous name) come back as structured
# results; unexpected errors are caught at the flow boundary after forcing the
# sighting to a terminal state.
# 🔗 Dependencies:
# Domain models, repositories, provider ports, SightingLifecycleManager,
# photo strategies, shared validators and logging
# 🔄 Connected Modules / Calls From:
# Identification command handlers (identify by name/photo, enhance profile)

from typing import List, Optional, Sequence

from app.shared.core.exceptions import FileStorageError
from app.shared.utils.logging import get_logger
from app.shared.utils.validators import clean_plant_name, validate_plant_name

from ..models.identification import (
    ContentIntent,
    EnhancementResult,
    EnhancementStatus,
    IdentificationResult,
    OutcomeKind,
    ProviderOutcome,
    StrategyAttempt,
)
from ..models.plant_profile import ENHANCEABLE_FIELDS, PlantProfileDraft
from ..models.sighting import IdentificationMethod
from ..providers.identification_providers import BotanicalContentGenerator, VisualIdentifier
from ..providers.photo_storage import PhotoStorage
from ..repositories.plant_profile_repository import PlantProfileRepository
from .photo_strategies import PhotoIdentificationStrategy, default_photo_strategies
from .sighting_lifecycle import SightingLifecycleManager

logger = get_logger(__name__)


# =============================================================================
# USER-FACING MESSAGES
# =============================================================================

MSG_SUGGESTIONS = "Did you mean one of these plants?"
MSG_NAME_NOT_RECOGNISED = (
    "We couldn't recognise that plant name. Please check the spelling or try a different name."
)
MSG_NAME_FAILED = "Failed to identify plant. Please check the spelling or try a different name."
MSG_PHOTO_INACCESSIBLE = "Could not access uploaded image."
MSG_PHOTO_NO_MATCH = (
    "Could not identify plant automatically. "
    "Please try manual identification or take a clearer photo."
)
MSG_PHOTO_NO_PROVIDER = (
    "No photo identification service is configured. Please identify the plant manually."
)
MSG_PHOTO_UNAVAILABLE = "Plant identification service temporarily unavailable."
MSG_ENHANCE_NOT_CONFIGURED = "Plant content provider not configured"
MSG_PLANT_NOT_FOUND = "Plant not found"
MSG_ENHANCE_FAILED = "Could not enhance plant profile. Please try again later."

# Provider answers that fall back to the typed-name profile in the by-name flow
_DEGRADE_TO_TYPED_NAME = frozenset({
    OutcomeKind.NOT_CONFIGURED,
    OutcomeKind.UNAVAILABLE,
    OutcomeKind.RATE_LIMITED,
    OutcomeKind.MALFORMED_RESPONSE,
})


class IdentificationOrchestrator:
    """
    Drives providers, the plant profile repository and the sighting lifecycle
    to resolve identifications.

    Within one flow every step is sequential. The orchestrator never checks
    usage entitlements; callers do that before invoking a flow.
    """

    def __init__(
        self,
        plant_profile_repository: PlantProfileRepository,
        lifecycle: SightingLifecycleManager,
        visual_identifier: VisualIdentifier,
        content_generator: BotanicalContentGenerator,
        photo_storage: Optional[PhotoStorage] = None,
        photo_strategies: Optional[Sequence[PhotoIdentificationStrategy]] = None,
    ):
        self.plant_profile_repository = plant_profile_repository
        self.lifecycle = lifecycle
        self.visual_identifier = visual_identifier
        self.content_generator = content_generator
        self.photo_storage = photo_storage
        self.photo_strategies: List[PhotoIdentificationStrategy] = list(
            photo_strategies
            if photo_strategies is not None
            else default_photo_strategies(visual_identifier, content_generator)
        )

    # =========================================================================
    # BY-NAME FLOW
    # =========================================================================

    async def identify_by_name(self, sighting_id: str, typed_name: Optional[str]) -> IdentificationResult:
        """
        Identify a sighting from a name the user typed.

        Order: local match (no provider call), typed-name profile when the
        generative provider cannot help, otherwise provider validation with a
        suggestion path that creates nothing.

        Args:
            sighting_id: Sighting to resolve
            typed_name: Scientific or common name as typed

        Returns:
            IdentificationResult; ``suggestions`` is filled when the name needs
            clarification

        Raises:
            NotFoundError: If the sighting does not exist
        """
        validation = validate_plant_name(typed_name)
        if not validation.is_valid:
            # Rejected before any side effect
            return IdentificationResult(
                success=False,
                sighting_id=sighting_id,
                error="; ".join(validation.errors),
            )

        name = clean_plant_name(typed_name)
        await self.lifecycle.begin_identification(sighting_id)

        try:
            return await self._identify_by_name(sighting_id, name)
        except Exception as e:
            logger.error(f"Manual plant identification failed for sighting {sighting_id}: {e}", exc_info=True)
            await self.lifecycle.ensure_terminal(sighting_id, user_provided_name=name)
            return IdentificationResult(success=False, sighting_id=sighting_id, error=MSG_NAME_FAILED)

    async def _identify_by_name(self, sighting_id: str, name: str) -> IdentificationResult:
        matches = await self.plant_profile_repository.find_by_name_or_alias(name)
        if matches:
            best_match = matches[0]
            logger.info(f"Local match for '{name}': {best_match.scientific_name}")
            await self.lifecycle.mark_identified(
                sighting_id, best_match.id, IdentificationMethod.MANUAL, user_provided_name=name
            )
            return IdentificationResult(
                success=True,
                sighting_id=sighting_id,
                plant_id=best_match.id,
                plant_profile=best_match,
                method=IdentificationMethod.MANUAL,
            )

        if not self.content_generator.is_configured:
            logger.info(f"Content provider not configured; recording '{name}' as typed")
            return await self._bind_typed_name(sighting_id, name)

        outcome = await self.content_generator.generate_content(ContentIntent.VALIDATE_AND_DESCRIBE, name)

        if outcome.kind in (OutcomeKind.NEEDS_CLARIFICATION, OutcomeKind.NO_MATCH):
            suggestions = [s for s in outcome.suggestions if s]
            await self.lifecycle.mark_failed(
                sighting_id, user_provided_name=name, alternative_names=suggestions
            )
            return IdentificationResult(
                success=False,
                sighting_id=sighting_id,
                suggestions=suggestions,
                error=MSG_SUGGESTIONS if suggestions else MSG_NAME_NOT_RECOGNISED,
            )

        if outcome.kind in _DEGRADE_TO_TYPED_NAME:
            logger.warning(
                f"Content provider answered {outcome.kind.value} for '{name}'; recording it as typed"
            )
            return await self._bind_typed_name(sighting_id, name)

        return await self._bind_draft(
            sighting_id, outcome.draft, IdentificationMethod.MANUAL, user_provided_name=name
        )

    async def _bind_typed_name(self, sighting_id: str, name: str) -> IdentificationResult:
        draft = PlantProfileDraft.from_typed_name(name)
        return await self._bind_draft(
            sighting_id, draft, IdentificationMethod.MANUAL, user_provided_name=name
        )

    async def _bind_draft(
        self,
        sighting_id: str,
        draft: PlantProfileDraft,
        method: IdentificationMethod,
        confidence: Optional[float] = None,
        user_provided_name: Optional[str] = None,
        attempts: Optional[List[StrategyAttempt]] = None,
    ) -> IdentificationResult:
        plant_id = await self.plant_profile_repository.create_if_absent(draft)
        await self.lifecycle.mark_identified(
            sighting_id,
            plant_id,
            method,
            confidence_score=confidence,
            user_provided_name=user_provided_name,
        )
        profile = await self.plant_profile_repository.get_by_id(plant_id)
        return IdentificationResult(
            success=True,
            sighting_id=sighting_id,
            plant_id=plant_id,
            plant_profile=profile,
            method=method,
            confidence=confidence,
            attempts=attempts or [],
        )

    # =========================================================================
    # BY-PHOTO FLOW
    # =========================================================================

    async def identify_by_photo(self, sighting_id: str, photo_ref: Optional[str] = None) -> IdentificationResult:
        """
        Identify a sighting from its photo by walking the strategy chain.

        Args:
            sighting_id: Sighting to resolve
            photo_ref: Stored photo reference; defaults to the sighting's own

        Returns:
            IdentificationResult with ``attempts`` listing each strategy tried

        Raises:
            NotFoundError: If the sighting does not exist
        """
        sighting = await self.lifecycle.begin_identification(sighting_id)
        photo_ref = photo_ref or sighting.photo_ref

        try:
            return await self._identify_by_photo(sighting_id, photo_ref)
        except Exception as e:
            logger.error(f"Photo identification failed for sighting {sighting_id}: {e}", exc_info=True)
            await self.lifecycle.ensure_terminal(sighting_id)
            return IdentificationResult(success=False, sighting_id=sighting_id, error=MSG_PHOTO_UNAVAILABLE)

    async def _identify_by_photo(self, sighting_id: str, photo_ref: str) -> IdentificationResult:
        image_url = await self._resolve_photo_url(photo_ref)
        if not image_url:
            await self.lifecycle.mark_failed(sighting_id)
            return IdentificationResult(success=False, sighting_id=sighting_id, error=MSG_PHOTO_INACCESSIBLE)

        attempts: List[StrategyAttempt] = []
        for strategy in self.photo_strategies:
            if not strategy.is_available:
                attempts.append(StrategyAttempt(strategy.name, OutcomeKind.NOT_CONFIGURED))
                continue

            outcome = await strategy.attempt(image_url)
            attempts.append(StrategyAttempt(strategy.name, outcome.kind, outcome.message))

            if not outcome.is_success or outcome.draft is None:
                logger.info(f"Photo strategy '{strategy.name}' answered {outcome.kind.value}; trying next")
                continue

            draft = outcome.draft
            if strategy.enhance_on_success:
                draft = await self._enhance_draft(draft)

            return await self._bind_draft(
                sighting_id,
                draft,
                strategy.method,
                confidence=outcome.confidence,
                attempts=attempts,
            )

        await self.lifecycle.mark_failed(sighting_id)
        return IdentificationResult(
            success=False,
            sighting_id=sighting_id,
            error=self._photo_failure_message(attempts),
            attempts=attempts,
        )

    async def _resolve_photo_url(self, photo_ref: str) -> Optional[str]:
        if not photo_ref:
            return None
        if self.photo_storage is None:
            return photo_ref if photo_ref.startswith(("http://", "https://")) else None
        try:
            return await self.photo_storage.resolve_url(photo_ref)
        except FileStorageError as e:
            logger.warning(f"Could not resolve photo '{photo_ref}': {e.message}")
            return None

    async def _enhance_draft(self, draft: PlantProfileDraft) -> PlantProfileDraft:
        """Best-effort enrichment; any failure keeps the draft as it was."""
        if not self.content_generator.is_configured:
            return draft
        try:
            outcome = await self.content_generator.generate_content(ContentIntent.ENHANCE, draft)
        except Exception as e:
            logger.warning(f"Enhancement of '{draft.scientific_name}' raised: {e}", exc_info=True)
            return draft

        if not outcome.is_success:
            logger.info(f"Enhancement of '{draft.scientific_name}' skipped: {outcome.kind.value}")
            return draft
        return draft.with_enhancement(outcome.fields)

    @staticmethod
    def _photo_failure_message(attempts: List[StrategyAttempt]) -> str:
        kinds = {attempt.kind for attempt in attempts}
        if OutcomeKind.NO_MATCH in kinds:
            return MSG_PHOTO_NO_MATCH
        if not kinds or kinds == {OutcomeKind.NOT_CONFIGURED}:
            return MSG_PHOTO_NO_PROVIDER
        return MSG_PHOTO_UNAVAILABLE

    # =========================================================================
    # ENHANCEMENT FLOW
    # =========================================================================

    async def enhance_profile(self, plant_id: str) -> EnhancementResult:
        """
        Refresh a profile's descriptive fields from the generative provider.

        Scientific and common names are never touched. Concurrent runs for the
        same plant are last-writer-wins.

        Args:
            plant_id: Profile to enhance

        Returns:
            EnhancementResult; the profile is unchanged unless status is ENHANCED
        """
        if not self.content_generator.is_configured:
            return EnhancementResult(
                success=False,
                status=EnhancementStatus.NOT_CONFIGURED,
                plant_id=plant_id,
                error=MSG_ENHANCE_NOT_CONFIGURED,
            )

        profile = await self.plant_profile_repository.get_by_id(plant_id)
        if profile is None:
            return EnhancementResult(
                success=False,
                status=EnhancementStatus.NOT_FOUND,
                plant_id=plant_id,
                error=MSG_PLANT_NOT_FOUND,
            )

        outcome: ProviderOutcome = await self.content_generator.generate_content(ContentIntent.ENHANCE, profile)
        if not outcome.is_success:
            logger.warning(f"Enhancement of {plant_id} failed: {outcome.kind.value}")
            return EnhancementResult(
                success=False,
                status=EnhancementStatus.FAILED,
                plant_id=plant_id,
                plant_profile=profile,
                error=MSG_ENHANCE_FAILED,
            )

        partial = {
            key: value for key, value in outcome.fields.items()
            if key in ENHANCEABLE_FIELDS and value not in (None, "", [])
        }
        partial["ai_enhanced"] = True
        updated_fields = await self.plant_profile_repository.patch_fields(plant_id, partial)
        refreshed = await self.plant_profile_repository.get_by_id(plant_id)

        logger.info(f"✅ Plant profile {plant_id} enhanced", fields=updated_fields)
        return EnhancementResult(
            success=True,
            status=EnhancementStatus.ENHANCED,
            plant_id=plant_id,
            plant_profile=refreshed,
            updated_fields=updated_fields,
        )
