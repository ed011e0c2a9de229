# 📄 File: app/modules/plant_identification/application/handlers/__init__.py
# 🧭 Purpose (Layman Explanation):
# The workers that carry out each user request about sightings, plants and tours.
# 🧪 Purpose (Technical Summary):
# Re-exports the CQRS command and query handlers.
# 🔗 Dependencies:
# command_handlers, query_handlers
# 🔄 Connected Modules / Calls From:
# presentation dependencies

from .command_handlers import (
    AddTourStopHandler,
    CreateSightingHandler,
    CreateTourHandler,
    DeleteSightingHandler,
    DeleteTourHandler,
    EditSightingHandler,
    EnhanceProfileHandler,
    IdentifySightingByNameHandler,
    IdentifySightingByPhotoHandler,
    RemoveTourStopHandler,
    UpdateTourHandler,
    UpdateTourStopHandler,
)
from .query_handlers import (
    GetEntitlementHandler,
    GetProfileHandler,
    GetSightingHandler,
    GetTourHandler,
    ListPublicToursHandler,
    ListSightingsHandler,
    ListToursHandler,
    SearchProfilesHandler,
)

__all__ = [
    "AddTourStopHandler",
    "CreateSightingHandler",
    "CreateTourHandler",
    "DeleteSightingHandler",
    "DeleteTourHandler",
    "EditSightingHandler",
    "EnhanceProfileHandler",
    "IdentifySightingByNameHandler",
    "IdentifySightingByPhotoHandler",
    "RemoveTourStopHandler",
    "UpdateTourHandler",
    "UpdateTourStopHandler",
    "GetEntitlementHandler",
    "GetProfileHandler",
    "GetSightingHandler",
    "GetTourHandler",
    "ListPublicToursHandler",
    "ListSightingsHandler",
    "ListToursHandler",
    "SearchProfilesHandler",
]
