# 📄 File: app/modules/plant_identification/application/queries/tour_queries.py
# 🧭 Purpose (Layman Explanation):
# Questions about tours: "show me this tour", "list my tours" and "what's
# out there to walk".
# 🧪 Purpose (Technical Summary):
# CQRS queries for tour reads. Public tours are readable by anyone; private
# ones only by their owner.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# query handlers, tours router

from pydantic import BaseModel, ConfigDict, Field


class GetTourQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    tour_id: str = Field(..., min_length=1)


class ListToursQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)


class ListPublicToursQuery(BaseModel):
    """Public tours of every user, newest first."""

    model_config = ConfigDict(frozen=True)

    limit: int = Field(50, ge=1, le=100)
    offset: int = Field(0, ge=0)
