# 📄 File: app/modules/plant_identification/application/queries/sighting_queries.py
# 🧭 Purpose (Layman Explanation):
# Questions a user asks about their own sightings.
# 🧪 Purpose (Technical Summary):
# CQRS queries for sighting reads; results are limited to the requester's own.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# query handlers, sightings router

from pydantic import BaseModel, ConfigDict, Field


class GetSightingQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    sighting_id: str = Field(..., min_length=1)


class ListSightingsQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    limit: int = Field(50, ge=1, le=200)
    offset: int = Field(0, ge=0)
