# 📄 File: app/modules/plant_identification/presentation/api/schemas/__init__.py
# 🧭 Purpose (Layman Explanation):
# The request forms for the plant endpoints.
# 🧪 Purpose (Technical Summary):
# Request schemas; responses use the application DTOs directly.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# presentation.api.v1 routers

from .sighting_schemas import EditSightingRequest, IdentifyByNameRequest, IdentifyByPhotoRequest
from .tour_schemas import (
    AddTourStopRequest,
    CreateTourRequest,
    UpdateTourRequest,
    UpdateTourStopRequest,
)

__all__ = [
    "EditSightingRequest",
    "IdentifyByNameRequest",
    "IdentifyByPhotoRequest",
    "AddTourStopRequest",
    "CreateTourRequest",
    "UpdateTourRequest",
    "UpdateTourStopRequest",
]
