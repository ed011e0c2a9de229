# 📄 File: app/modules/plant_identification/application/commands/__init__.py
# 🧭 Purpose (Layman Explanation):
# Everything a user can ask the app to DO with sightings, plants and tours.
# 🧪 Purpose (Technical Summary):
# CQRS command definitions for the plant identification write side.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# application.handlers.command_handlers, presentation routers

from .profile_commands import EnhanceProfileCommand
from .sighting_commands import (
    CreateSightingCommand,
    DeleteSightingCommand,
    EditSightingCommand,
    IdentifySightingByNameCommand,
    IdentifySightingByPhotoCommand,
)
from .tour_commands import (
    AddTourStopCommand,
    CreateTourCommand,
    DeleteTourCommand,
    RemoveTourStopCommand,
    UpdateTourCommand,
    UpdateTourStopCommand,
)

__all__ = [
    "EnhanceProfileCommand",
    "CreateSightingCommand",
    "DeleteSightingCommand",
    "EditSightingCommand",
    "IdentifySightingByNameCommand",
    "IdentifySightingByPhotoCommand",
    "AddTourStopCommand",
    "CreateTourCommand",
    "DeleteTourCommand",
    "RemoveTourStopCommand",
    "UpdateTourCommand",
    "UpdateTourStopCommand",
]
