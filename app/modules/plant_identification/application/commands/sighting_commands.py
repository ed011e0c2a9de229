# 📄 File: app/modules/plant_identification/application/commands/sighting_commands.py
# 🧭 Purpose (Layman Explanation):
# The requests a user can make about their own sightings: record one, ask
# what plant it is (by typing a name or from the photo), fix the name or
# notes, or delete it.
# 🧪 Purpose (Technical Summary):
# CQRS commands for the sighting write side. Every command carries the
# requesting user's id so handlers can enforce ownership.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# application.handlers.command_handlers, presentation sightings router

"""
Sighting Commands

- CreateSightingCommand: new pending sighting from uploaded bytes or a photo URL
- IdentifySightingByNameCommand: resolve a sighting from a typed plant name
- IdentifySightingByPhotoCommand: resolve a sighting from its photo
- EditSightingCommand: change the user's name/notes without touching status
- DeleteSightingCommand: remove a sighting and its tour stops
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CreateSightingCommand(BaseModel):
    """
    Record a new sighting.

    Exactly one photo source is required: raw ``photo_data`` to be stored, or
    an absolute ``photo_url`` already hosted elsewhere.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    address: Optional[str] = Field(None, max_length=500)
    user_provided_name: Optional[str] = Field(None, max_length=200)
    private_notes: Optional[str] = Field(None, max_length=2000)

    photo_data: Optional[bytes] = Field(None, repr=False)
    photo_filename: Optional[str] = Field(None, max_length=255)
    photo_content_type: Optional[str] = None
    photo_url: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def _one_photo_source(self) -> "CreateSightingCommand":
        has_data = bool(self.photo_data)
        has_url = bool(self.photo_url)
        if has_data == has_url:
            raise ValueError("Provide either photo data or a photo URL")
        if has_url and not self.photo_url.startswith(("http://", "https://")):
            raise ValueError("Photo URL must be an absolute http(s) URL")
        return self


class IdentifySightingByNameCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    sighting_id: str = Field(..., min_length=1)
    plant_name: Optional[str] = Field(None, description="Name as typed by the user")


class IdentifySightingByPhotoCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    sighting_id: str = Field(..., min_length=1)
    photo_ref: Optional[str] = Field(None, description="Defaults to the sighting's own photo")


class EditSightingCommand(BaseModel):
    """None means "leave unchanged"."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    sighting_id: str = Field(..., min_length=1)
    user_provided_name: Optional[str] = Field(None, max_length=200)
    private_notes: Optional[str] = Field(None, max_length=2000)


class DeleteSightingCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    sighting_id: str = Field(..., min_length=1)
    delete_photo: bool = True
