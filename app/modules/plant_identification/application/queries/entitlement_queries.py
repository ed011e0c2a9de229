# 📄 File: app/modules/plant_identification/application/queries/entitlement_queries.py
# 🧭 Purpose (Layman Explanation):
# "What does my plan still let me do today?"
# 🧪 Purpose (Technical Summary):
# CQRS query for the usage/entitlement gate. ``now`` is injectable so the
# daily window can be pinned in tests.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# GetEntitlementHandler, entitlements router, gated command handlers

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GetEntitlementQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    now: Optional[datetime] = None
