# 📄 File: app/modules/plant_identification/domain/__init__.py
# 🧭 Purpose (Layman Explanation):
# The core rules of plant identification: what a sighting and a plant are, and
# how we go from a photo or a name to a known plant.
# 🧪 Purpose (Technical Summary):
# Domain layer of the plant identification module: entities, repository and
# provider ports, and domain services.
# 🔗 Dependencies:
# models, repositories, providers, services subpackages
# 🔄 Connected Modules / Calls From:
# Application layer, infrastructure layer, presentation layer

"""
Plant Identification Domain Layer

Domain Models:
- PlantProfile, Sighting, Tour, Account/Entitlement, tagged provider outcomes

Repository Interfaces:
- PlantProfileRepository, SightingRepository, TourRepository, AccountRepository

Provider Ports:
- VisualIdentifier, BotanicalContentGenerator, PhotoStorage

Domain Services:
- SightingLifecycleManager: pending -> identified | failed
- IdentificationOrchestrator: by-name, by-photo and enhancement flows
- compute_entitlement: plan-tier usage gate

Business Rules Enforced:
- At most one plant profile per scientific name
- A sighting never stays pending after an identification flow returns
- Enhancement merges descriptive fields and never touches identity fields
"""

from .models import (
    Entitlement,
    IdentificationMethod,
    IdentificationResult,
    IdentificationStatus,
    PlantProfile,
    PlantProfileDraft,
    Sighting,
    Tour,
    TourStop,
)
from .services import IdentificationOrchestrator, SightingLifecycleManager, compute_entitlement

__all__ = [
    "Entitlement",
    "IdentificationMethod",
    "IdentificationResult",
    "IdentificationStatus",
    "PlantProfile",
    "PlantProfileDraft",
    "Sighting",
    "Tour",
    "TourStop",
    "IdentificationOrchestrator",
    "SightingLifecycleManager",
    "compute_entitlement",
]
