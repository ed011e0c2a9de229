# 📄 File: app/modules/plant_identification/application/queries/__init__.py
# 🧭 Purpose (Layman Explanation):
# Everything a user can ASK the app about sightings, plants, tours and plans.
# 🧪 Purpose (Technical Summary):
# CQRS query definitions for the plant identification read side.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# application.handlers.query_handlers, presentation routers

from .entitlement_queries import GetEntitlementQuery
from .profile_queries import GetProfileQuery, SearchProfilesQuery
from .sighting_queries import GetSightingQuery, ListSightingsQuery
from .tour_queries import GetTourQuery, ListPublicToursQuery, ListToursQuery

__all__ = [
    "GetEntitlementQuery",
    "GetProfileQuery",
    "SearchProfilesQuery",
    "GetSightingQuery",
    "ListSightingsQuery",
    "GetTourQuery",
    "ListPublicToursQuery",
    "ListToursQuery",
]
