# 📄 File: app/modules/plant_identification/application/dto/__init__.py
# 🧭 Purpose (Layman Explanation):
# The data packages handed from the app's use cases to the web layer.
# 🧪 Purpose (Technical Summary):
# Re-exports the plant identification DTOs.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# application handlers, presentation routers

from .entitlement_dto import EntitlementDTO
from .profile_dto import EnhancementResultDTO, PlantProfileDTO, ProfileSearchResultDTO
from .sighting_dto import (
    IdentificationResultDTO,
    SightingDTO,
    SightingListDTO,
    StrategyAttemptDTO,
)
from .tour_dto import TourDetailDTO, TourDTO, TourStopDTO

__all__ = [
    "EntitlementDTO",
    "EnhancementResultDTO",
    "PlantProfileDTO",
    "ProfileSearchResultDTO",
    "IdentificationResultDTO",
    "SightingDTO",
    "SightingListDTO",
    "StrategyAttemptDTO",
    "TourDetailDTO",
    "TourDTO",
    "TourStopDTO",
]
