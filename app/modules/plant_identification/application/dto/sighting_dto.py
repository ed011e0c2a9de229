# 📄 File: app/modules/plant_identification/application/dto/sighting_dto.py
# 🧭 Purpose (Layman Explanation):
# The shape in which a sighting leaves the app (where, when, which plant, a
# link to the photo) and the answer to "what plant is this?".
# 🧪 Purpose (Technical Summary):
# Sighting and identification-result DTOs. Photo references are swapped for a
# resolved URL here; the storage path itself is kept for clients that need it.
# 🔗 Dependencies:
# pydantic, domain Sighting / IdentificationResult
# 🔄 Connected Modules / Calls From:
# application handlers, presentation routers

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.modules.plant_identification.domain.models.identification import (
    IdentificationResult,
    OutcomeKind,
)
from app.modules.plant_identification.domain.models.plant_profile import PlantProfile
from app.modules.plant_identification.domain.models.sighting import (
    IdentificationMethod,
    IdentificationStatus,
    Sighting,
)

from .profile_dto import PlantProfileDTO


class SightingDTO(BaseModel):
    """A sighting as exposed to its owner."""

    id: str
    user_id: str
    plant_id: Optional[str] = None
    user_provided_name: Optional[str] = None
    private_notes: Optional[str] = None
    photo_ref: str
    photo_url: Optional[str] = None
    latitude: float
    longitude: float
    address: Optional[str] = None
    identification_status: IdentificationStatus
    identification_method: Optional[IdentificationMethod] = None
    confidence_score: Optional[float] = None
    alternative_names: List[str] = Field(default_factory=list)
    plant_profile: Optional[PlantProfileDTO] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(
        cls,
        sighting: Sighting,
        photo_url: Optional[str] = None,
        plant_profile: Optional[PlantProfile] = None,
    ) -> "SightingDTO":
        return cls(
            id=sighting.id,
            user_id=sighting.user_id,
            plant_id=sighting.plant_id,
            user_provided_name=sighting.user_provided_name,
            private_notes=sighting.private_notes,
            photo_ref=sighting.photo_ref,
            photo_url=photo_url,
            latitude=sighting.location.latitude,
            longitude=sighting.location.longitude,
            address=sighting.location.address,
            identification_status=sighting.status,
            identification_method=sighting.identification_method,
            confidence_score=sighting.confidence_score,
            alternative_names=list(sighting.alternative_names),
            plant_profile=PlantProfileDTO.from_domain(plant_profile) if plant_profile else None,
            created_at=sighting.created_at,
            updated_at=sighting.updated_at,
        )


class SightingListDTO(BaseModel):
    sightings: List[SightingDTO] = Field(default_factory=list)
    limit: int
    offset: int


class StrategyAttemptDTO(BaseModel):
    strategy: str
    outcome: OutcomeKind
    message: Optional[str] = None


class IdentificationResultDTO(BaseModel):
    """
    Discriminated identification outcome.

    ``success`` is the discriminator: on success ``plant_id`` and
    ``plant_profile`` are set, on failure ``error`` is, with ``suggestions``
    when the provider offered alternatives.
    """

    success: bool
    sighting_id: str
    plant_id: Optional[str] = None
    plant_profile: Optional[PlantProfileDTO] = None
    method: Optional[IdentificationMethod] = None
    confidence: Optional[float] = None
    suggestions: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    attempts: List[StrategyAttemptDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: IdentificationResult) -> "IdentificationResultDTO":
        return cls(
            success=result.success,
            sighting_id=result.sighting_id,
            plant_id=result.plant_id,
            plant_profile=PlantProfileDTO.from_domain(result.plant_profile) if result.plant_profile else None,
            method=result.method,
            confidence=result.confidence,
            suggestions=list(result.suggestions),
            error=result.error,
            attempts=[
                StrategyAttemptDTO(strategy=a.strategy, outcome=a.kind, message=a.message)
                for a in result.attempts
            ],
        )
