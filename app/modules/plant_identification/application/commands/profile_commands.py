# 📄 File: app/modules/plant_identification/application/commands/profile_commands.py
# 🧭 Purpose (Layman Explanation):
# The request to fill in a plant's missing details (care tips, habitat and so on).
# 🧪 Purpose (Technical Summary):
# CQRS command for profile enhancement. Profiles are shared, so only the
# requester's id is recorded for logging.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# EnhanceProfileHandler, plant profiles router

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EnhanceProfileCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    plant_id: str = Field(..., min_length=1)
    requested_by: Optional[str] = None
