# 📄 File: app/modules/plant_identification/domain/models/tour.py
# 🧭 Purpose (Layman Explanation):
# A tour is a guided walk a user puts together from their sightings, visited
# in a fixed order.
# 🧪 Purpose (Technical Summary):
# Tour and TourStop entities. Stops reference sightings by id; deleting a
# sighting deletes its stops but never the tour.
# 🔗 Dependencies:
# pydantic, enum, datetime
# 🔄 Connected Modules / Calls From:
# Tour repository, tour command/query handlers, entitlement gate (tour counts)

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .plant_profile import PlantProfile
from .sighting import Sighting


class TourDifficulty(str, Enum):
    """How demanding the walk is"""
    EASY = "easy"
    MODERATE = "moderate"
    CHALLENGING = "challenging"


class Tour(BaseModel):
    """A user-curated, ordered sequence of sightings."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)
    is_public: bool = False
    difficulty: Optional[TourDifficulty] = None
    estimated_duration_minutes: Optional[int] = Field(None, ge=0)
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TourStop(BaseModel):
    """One stop on a tour; ``order`` is zero-based."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    tour_id: str
    sighting_id: str
    order: int = Field(..., ge=0)
    stop_title: Optional[str] = Field(None, max_length=200)
    custom_notes: Optional[str] = Field(None, max_length=2000)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TourStopDetail(BaseModel):
    """A stop joined with its sighting and, when identified, the plant."""

    stop: TourStop
    sighting: Sighting
    plant_profile: Optional[PlantProfile] = None


class TourDetail(BaseModel):
    """A tour with its live stops in visiting order."""

    tour: Tour
    stops: List[TourStopDetail] = Field(default_factory=list)
