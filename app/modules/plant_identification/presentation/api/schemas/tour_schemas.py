# 📄 File: app/modules/plant_identification/presentation/api/schemas/tour_schemas.py
# 🧭 Purpose (Layman Explanation):
# Describes what the app must send to create or edit a tour and its stops.
# 🧪 Purpose (Technical Summary):
# Request bodies for the tours endpoints with conversion into commands.
# 🔗 Dependencies:
# pydantic, application commands
# 🔄 Connected Modules / Calls From:
# presentation.api.v1.tours

from typing import List, Optional

from pydantic import BaseModel, Field

from app.modules.plant_identification.application.commands import (
    AddTourStopCommand,
    CreateTourCommand,
    UpdateTourCommand,
    UpdateTourStopCommand,
)
from app.modules.plant_identification.domain.models.tour import TourDifficulty


class CreateTourRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, examples=["Riverside spring walk"])
    description: str = Field("", max_length=2000)
    is_public: bool = False
    difficulty: Optional[TourDifficulty] = None
    estimated_duration_minutes: Optional[int] = Field(None, ge=0)
    tags: List[str] = Field(default_factory=list)

    def to_command(self, user_id: str) -> CreateTourCommand:
        return CreateTourCommand(user_id=user_id, **self.model_dump())


class AddTourStopRequest(BaseModel):
    sighting_id: str = Field(..., min_length=1)
    stop_title: Optional[str] = Field(None, max_length=200)
    custom_notes: Optional[str] = Field(None, max_length=2000)

    def to_command(self, user_id: str, tour_id: str) -> AddTourStopCommand:
        return AddTourStopCommand(user_id=user_id, tour_id=tour_id, **self.model_dump())


class UpdateTourRequest(BaseModel):
    """Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    is_public: Optional[bool] = None
    difficulty: Optional[TourDifficulty] = None
    estimated_duration_minutes: Optional[int] = Field(None, ge=0)
    tags: Optional[List[str]] = None

    def to_command(self, user_id: str, tour_id: str) -> UpdateTourCommand:
        return UpdateTourCommand(user_id=user_id, tour_id=tour_id, **self.model_dump())


class UpdateTourStopRequest(BaseModel):
    """Omitted fields are left unchanged."""

    stop_title: Optional[str] = Field(None, max_length=200)
    custom_notes: Optional[str] = Field(None, max_length=2000)

    def to_command(self, user_id: str, tour_id: str, stop_id: str) -> UpdateTourStopCommand:
        return UpdateTourStopCommand(user_id=user_id, tour_id=tour_id, stop_id=stop_id, **self.model_dump())
