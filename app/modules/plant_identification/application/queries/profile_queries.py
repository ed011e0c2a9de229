# 📄 File: app/modules/plant_identification/application/queries/profile_queries.py
# 🧭 Purpose (Layman Explanation):
# Questions about plants: "which plants match this word?" and "show me this plant".
# 🧪 Purpose (Technical Summary):
# CQRS queries for plant profile reads.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# query handlers, plant profiles router

from pydantic import BaseModel, ConfigDict, Field


class SearchProfilesQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    term: str = Field(..., max_length=200)
    limit: int = Field(20, ge=1, le=100)


class GetProfileQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    plant_id: str = Field(..., min_length=1)
