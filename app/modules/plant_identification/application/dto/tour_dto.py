# 📄 File: app/modules/plant_identification/application/dto/tour_dto.py
# 🧭 Purpose (Layman Explanation):
# The shape in which a plant tour and its stops leave the app.
# 🧪 Purpose (Technical Summary):
# Tour, stop and tour-detail DTOs.
# 🔗 Dependencies:
# pydantic, domain tour models
# 🔄 Connected Modules / Calls From:
# application handlers, presentation tours router

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.modules.plant_identification.domain.models.tour import (
    Tour,
    TourDetail,
    TourDifficulty,
    TourStop,
)

from .sighting_dto import SightingDTO


class TourDTO(BaseModel):
    id: str
    user_id: str
    name: str
    description: str = ""
    is_public: bool
    difficulty: Optional[TourDifficulty] = None
    estimated_duration_minutes: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    # Only filled on public listings
    stop_count: Optional[int] = None

    @classmethod
    def from_domain(cls, tour: Tour, stop_count: Optional[int] = None) -> "TourDTO":
        return cls(**tour.model_dump(), stop_count=stop_count)


class TourStopDTO(BaseModel):
    id: str
    tour_id: str
    sighting_id: str
    order: int
    stop_title: Optional[str] = None
    custom_notes: Optional[str] = None
    created_at: datetime
    sighting: Optional[SightingDTO] = None

    @classmethod
    def from_domain(cls, stop: TourStop, sighting: Optional[SightingDTO] = None) -> "TourStopDTO":
        return cls(**stop.model_dump(), sighting=sighting)


class TourDetailDTO(BaseModel):
    """A tour with its live stops in visiting order."""

    tour: TourDTO
    stops: List[TourStopDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, detail: TourDetail) -> "TourDetailDTO":
        return cls(
            tour=TourDTO.from_domain(detail.tour),
            stops=[
                TourStopDTO.from_domain(
                    item.stop,
                    SightingDTO.from_domain(item.sighting, plant_profile=item.plant_profile),
                )
                for item in detail.stops
            ],
        )
