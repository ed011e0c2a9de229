# 📄 File: app/modules/plant_identification/application/dto/profile_dto.py
# 🧭 Purpose (Layman Explanation):
# The shape in which a plant's details leave the app: names, family, care
# tips and so on, plus the report card of an "add more detail" request.
# 🧪 Purpose (Technical Summary):
# Plant profile DTOs returned by query and command handlers and used directly
# as FastAPI response models.
# 🔗 Dependencies:
# pydantic, domain PlantProfile / EnhancementResult
# 🔄 Connected Modules / Calls From:
# application handlers, presentation routers

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.modules.plant_identification.domain.models.identification import (
    EnhancementResult,
    EnhancementStatus,
)
from app.modules.plant_identification.domain.models.plant_profile import PlantProfile


class PlantProfileDTO(BaseModel):
    """Full plant profile as exposed to clients."""

    id: str
    scientific_name: str
    common_names: List[str] = Field(default_factory=list)
    family: Optional[str] = None
    image_url: Optional[str] = None

    description: Optional[str] = None
    detailed_description: Optional[str] = None
    care_instructions: Optional[str] = None
    ecological_role: Optional[str] = None
    cultural_significance: Optional[str] = None
    habitat: Optional[str] = None
    growth_habits: Optional[str] = None
    seasonal_changes: Optional[str] = None
    blooming_season: Optional[str] = None
    light_requirements: Optional[str] = None
    water_needs: Optional[str] = None
    soil_preferences: Optional[str] = None
    native_regions: List[str] = Field(default_factory=list)
    conservation_status: Optional[str] = None

    ai_enhanced: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, profile: PlantProfile) -> "PlantProfileDTO":
        return cls(**profile.model_dump())


class ProfileSearchResultDTO(BaseModel):
    """Ranked search hits."""

    term: str
    total: int
    profiles: List[PlantProfileDTO] = Field(default_factory=list)


class EnhancementResultDTO(BaseModel):
    """Outcome of an enhancement request."""

    success: bool
    status: EnhancementStatus
    plant_id: str
    plant_profile: Optional[PlantProfileDTO] = None
    updated_fields: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, result: EnhancementResult) -> "EnhancementResultDTO":
        return cls(
            success=result.success,
            status=result.status,
            plant_id=result.plant_id,
            plant_profile=PlantProfileDTO.from_domain(result.plant_profile) if result.plant_profile else None,
            updated_fields=list(result.updated_fields),
            error=result.error,
        )
