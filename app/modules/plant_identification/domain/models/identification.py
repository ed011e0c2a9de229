# 📄 File: app/modules/plant_identification/domain/models/identification.py
# 🧭 Purpose (Layman Explanation):
# The vocabulary for what an identification service told us ("found it",
# "too busy", "never heard of it", "did you mean...") and what we finally tell
# the user.
# 🧪 Purpose (Technical Summary):
# Tagged provider outcomes (OutcomeKind + ProviderOutcome), the generative
# content intents, and the structured results returned by the orchestrator
# flows. Flows never raise for expected failures; they return these.
# 🔗 Dependencies:
# dataclasses, enum
# 🔄 Connected Modules / Calls From:
# Provider adapters, photo strategies, identification orchestrator,
# application handlers, presentation schemas

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .plant_profile import PlantProfile, PlantProfileDraft
from .sighting import IdentificationMethod


class OutcomeKind(str, Enum):
    """Uniform result tags across providers"""
    SUCCESS = "success"
    NO_MATCH = "no_match"
    NEEDS_CLARIFICATION = "needs_clarification"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    UNAVAILABLE = "unavailable"
    NOT_CONFIGURED = "not_configured"

    @property
    def is_success(self) -> bool:
        return self == OutcomeKind.SUCCESS


class ContentIntent(str, Enum):
    """What we ask the generative provider to do"""
    VALIDATE_AND_DESCRIBE = "validate_and_describe"
    ENHANCE = "enhance"
    IDENTIFY_IMAGE = "identify_image"


@dataclass
class ProviderOutcome:
    """
    Tagged result of one provider call.

    ``draft`` is a full profile draft for identifications, ``fields`` a partial
    mapping of descriptive fields for enhancement.
    """
    kind: OutcomeKind
    provider: str
    draft: Optional[PlantProfileDraft] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    confidence: Optional[float] = None
    suggestions: List[str] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.kind.is_success

    @classmethod
    def success(cls, provider: str, **kwargs) -> "ProviderOutcome":
        return cls(kind=OutcomeKind.SUCCESS, provider=provider, **kwargs)

    @classmethod
    def failure(cls, kind: OutcomeKind, provider: str, message: Optional[str] = None,
                **kwargs) -> "ProviderOutcome":
        return cls(kind=kind, provider=provider, message=message, **kwargs)


@dataclass
class StrategyAttempt:
    """One entry in the photo fallback audit trail."""
    strategy: str
    kind: OutcomeKind
    message: Optional[str] = None


@dataclass
class IdentificationResult:
    """What an identification flow reports back to its caller."""
    success: bool
    sighting_id: str
    plant_id: Optional[str] = None
    plant_profile: Optional[PlantProfile] = None
    method: Optional[IdentificationMethod] = None
    confidence: Optional[float] = None
    suggestions: List[str] = field(default_factory=list)
    error: Optional[str] = None
    attempts: List[StrategyAttempt] = field(default_factory=list)


class EnhancementStatus(str, Enum):
    """How an enhancement request ended"""
    ENHANCED = "enhanced"
    NOT_CONFIGURED = "not_configured"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class EnhancementResult:
    """What the enhancement flow reports back to its caller."""
    success: bool
    status: EnhancementStatus
    plant_id: str
    plant_profile: Optional[PlantProfile] = None
    updated_fields: List[str] = field(default_factory=list)
    error: Optional[str] = None
