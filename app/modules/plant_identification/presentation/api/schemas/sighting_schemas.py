# 📄 File: app/modules/plant_identification/presentation/api/schemas/sighting_schemas.py
# 🧭 Purpose (Layman Explanation):
# Describes what the app must send when it asks to identify or edit a sighting.
# 🧪 Purpose (Technical Summary):
# Request bodies for the sightings endpoints with conversion into commands.
# Sighting creation is multipart (photo upload) and is read from form fields
# in the router instead.
# 🔗 Dependencies:
# pydantic, application commands
# 🔄 Connected Modules / Calls From:
# presentation.api.v1.sightings

from typing import Optional

from pydantic import BaseModel, Field

from app.modules.plant_identification.application.commands import (
    EditSightingCommand,
    IdentifySightingByNameCommand,
    IdentifySightingByPhotoCommand,
)


class IdentifyByNameRequest(BaseModel):
    plant_name: Optional[str] = Field(
        None,
        description="Scientific or common name as typed",
        examples=["Monstera deliciosa"],
    )

    def to_command(self, user_id: str, sighting_id: str) -> IdentifySightingByNameCommand:
        return IdentifySightingByNameCommand(
            user_id=user_id, sighting_id=sighting_id, plant_name=self.plant_name
        )


class IdentifyByPhotoRequest(BaseModel):
    photo_ref: Optional[str] = Field(
        None,
        max_length=1000,
        description="Photo to identify; defaults to the sighting's own photo",
    )

    def to_command(self, user_id: str, sighting_id: str) -> IdentifySightingByPhotoCommand:
        return IdentifySightingByPhotoCommand(
            user_id=user_id, sighting_id=sighting_id, photo_ref=self.photo_ref
        )


class EditSightingRequest(BaseModel):
    """Omitted fields are left unchanged."""

    user_provided_name: Optional[str] = Field(None, max_length=200)
    private_notes: Optional[str] = Field(None, max_length=2000)

    def to_command(self, user_id: str, sighting_id: str) -> EditSightingCommand:
        return EditSightingCommand(
            user_id=user_id,
            sighting_id=sighting_id,
            user_provided_name=self.user_provided_name,
            private_notes=self.private_notes,
        )
