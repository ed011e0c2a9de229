# 📄 File: app/api/v1/__init__.py
# 🧭 Purpose (Layman Explanation):
# Version 1 of the Plant Sightings web API, kept in its own section so a
# later version can be added without breaking existing apps.
# 🧪 Purpose (Technical Summary):
# Package initialization for API version 1: version metadata, route prefixes
# and OpenAPI tag descriptions shared by the v1 router.
# 🔗 Dependencies:
# None
# 🔄 Connected Modules / Calls From:
# app.api.v1.router, app.main

"""
Plant Sightings API Version 1

Structure:
    v1/
    ├── __init__.py          # This file
    ├── router.py            # Main v1 router aggregation
    └── health.py            # Health check endpoints

Module routers live with their modules, e.g.
app.modules.plant_identification.presentation.api.v1.
"""

from typing import Any, Dict

# API v1 metadata
__version__ = "1.0.0"
__api_version__ = "v1"
__status__ = "stable"

API_V1_CONFIG = {
    "version": __version__,
    "api_version": __api_version__,
    "status": __status__,
    "description": "Plant Sightings API Version 1",
    "features": [
        "sightings",
        "plant_identification",
        "plant_profiles",
        "tours",
        "entitlements",
    ],
}

# API v1 route prefixes
ROUTE_PREFIXES = {
    "sightings": "/sightings",
    "plants": "/plants",
    "entitlements": "/entitlements",
    "tours": "/tours",
    "health": "/health",
}

# API v1 tags for OpenAPI documentation
API_TAGS = [
    {"name": "Sightings", "description": "Record sightings and identify the plant in them"},
    {"name": "Plant Profiles", "description": "Search and enhance the shared plant catalogue"},
    {"name": "Entitlements", "description": "Plan limits and remaining usage"},
    {"name": "Tours", "description": "Ordered collections of sightings"},
    {"name": "Health Check", "description": "System health and status monitoring"},
]


def get_api_info() -> Dict[str, Any]:
    """API v1 metadata, prefixes and tags."""
    return {
        "api_info": API_V1_CONFIG,
        "route_prefixes": ROUTE_PREFIXES,
        "tags": API_TAGS,
    }


__all__ = [
    "API_V1_CONFIG",
    "ROUTE_PREFIXES",
    "API_TAGS",
    "get_api_info",
]
