# 📄 File: app/modules/plant_identification/domain/services/__init__.py
# 🧭 Purpose (Layman Explanation):
# Collects the business logic: the sighting lifecycle, the plan gate, the
# photo fallback chain and the identification brain.
# 🧪 Purpose (Technical Summary):
# Re-exports the domain services of the plant identification module.
# 🔗 Dependencies:
# Service modules in this package
# 🔄 Connected Modules / Calls From:
# Application handlers, presentation dependencies

from .entitlement_service import compute_entitlement, start_of_day_utc
from .identification_orchestrator import IdentificationOrchestrator
from .photo_strategies import (
    GenerativeVisionStrategy,
    PhotoIdentificationStrategy,
    VisualProviderStrategy,
    default_photo_strategies,
)
from .sighting_lifecycle import SightingLifecycleManager

__all__ = [
    "compute_entitlement",
    "start_of_day_utc",
    "IdentificationOrchestrator",
    "GenerativeVisionStrategy",
    "PhotoIdentificationStrategy",
    "VisualProviderStrategy",
    "default_photo_strategies",
    "SightingLifecycleManager",
]
