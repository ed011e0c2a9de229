# 📄 File: app/modules/plant_identification/application/commands/tour_commands.py
# 🧭 Purpose (Layman Explanation):
# The requests for building plant tours: start, rename, publish or delete a
# tour, and add, annotate or remove its stops.
# 🧪 Purpose (Technical Summary):
# CQRS commands for the tour write side.
# 🔗 Dependencies:
# pydantic, domain TourDifficulty
# 🔄 Connected Modules / Calls From:
# Tour command handlers, tours router

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.modules.plant_identification.domain.models.tour import TourDifficulty


class CreateTourCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)
    is_public: bool = False
    difficulty: Optional[TourDifficulty] = None
    estimated_duration_minutes: Optional[int] = Field(None, ge=0)
    tags: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Tour name cannot be blank")
        return v


class AddTourStopCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    tour_id: str = Field(..., min_length=1)
    sighting_id: str = Field(..., min_length=1)
    stop_title: Optional[str] = Field(None, max_length=200)
    custom_notes: Optional[str] = Field(None, max_length=2000)


class UpdateTourCommand(BaseModel):
    """None means "leave unchanged"."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    tour_id: str = Field(..., min_length=1)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    is_public: Optional[bool] = None
    difficulty: Optional[TourDifficulty] = None
    estimated_duration_minutes: Optional[int] = Field(None, ge=0)
    tags: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Tour name cannot be blank")
        return v

    def changes(self) -> dict:
        """The tour fields this command sets."""
        return self.model_dump(exclude={"user_id", "tour_id"}, exclude_none=True)


class DeleteTourCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    tour_id: str = Field(..., min_length=1)


class UpdateTourStopCommand(BaseModel):
    """None means "leave unchanged"."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    tour_id: str = Field(..., min_length=1)
    stop_id: str = Field(..., min_length=1)
    stop_title: Optional[str] = Field(None, max_length=200)
    custom_notes: Optional[str] = Field(None, max_length=2000)


class RemoveTourStopCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    tour_id: str = Field(..., min_length=1)
    stop_id: str = Field(..., min_length=1)
