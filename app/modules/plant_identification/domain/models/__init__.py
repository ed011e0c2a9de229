# 📄 File: app/modules/plant_identification/domain/models/__init__.py
# 🧭 Purpose (Layman Explanation):
# Gathers the core records of the plant identification feature: plants,
# sightings, tours, plans and identification results.
# 🧪 Purpose (Technical Summary):
# Package initialization re-exporting the domain entities, enums and result
# types of the plant identification module.
# 🔗 Dependencies:
# Domain model modules in this package
# 🔄 Connected Modules / Calls From:
# Domain services, repositories, application layer, infrastructure layer

"""
Plant Identification Domain Models

Models:
- PlantProfile / PlantProfileDraft: canonical species record and its unsaved form
- Sighting: one observation with the pending -> identified | failed lifecycle
- Tour / TourStop: ordered walks assembled from sightings
- Account / Entitlement: plan tier and what it currently allows
- ProviderOutcome / IdentificationResult / EnhancementResult: tagged results
"""

from .entitlement import (
    PLAN_LIMITS,
    UNLIMITED,
    Account,
    Entitlement,
    PlanTier,
    SubscriptionStatus,
    TierLimits,
    UsageSnapshot,
)
from .identification import (
    ContentIntent,
    EnhancementResult,
    EnhancementStatus,
    IdentificationResult,
    OutcomeKind,
    ProviderOutcome,
    StrategyAttempt,
)
from .plant_profile import (
    ENHANCEABLE_FIELDS,
    IDENTITY_FIELDS,
    PATCHABLE_FIELDS,
    PlantProfile,
    PlantProfileDraft,
)
from .sighting import GeoLocation, IdentificationMethod, IdentificationStatus, Sighting
from .tour import Tour, TourDetail, TourDifficulty, TourStop, TourStopDetail

__all__ = [
    # Plant profiles
    "ENHANCEABLE_FIELDS",
    "IDENTITY_FIELDS",
    "PATCHABLE_FIELDS",
    "PlantProfile",
    "PlantProfileDraft",
    # Sightings
    "GeoLocation",
    "IdentificationMethod",
    "IdentificationStatus",
    "Sighting",
    # Tours
    "Tour",
    "TourDetail",
    "TourDifficulty",
    "TourStop",
    "TourStopDetail",
    # Plans
    "PLAN_LIMITS",
    "UNLIMITED",
    "Account",
    "Entitlement",
    "PlanTier",
    "SubscriptionStatus",
    "TierLimits",
    "UsageSnapshot",
    # Identification results
    "ContentIntent",
    "EnhancementResult",
    "EnhancementStatus",
    "IdentificationResult",
    "OutcomeKind",
    "ProviderOutcome",
    "StrategyAttempt",
]
