# 📄 File: app/modules/plant_identification/__init__.py
# 🧭 Purpose (Layman Explanation):
# The plant identification module: record plant sightings, find out what
# plant each one is, keep a shared catalogue of plant species and let users
# string sightings together into tours.
# 🧪 Purpose (Technical Summary):
# Package initialization for the plant identification module, laid out with
# domain-driven design and CQRS (domain / application / infrastructure /
# presentation).
# 🔗 Dependencies:
# FastAPI, SQLAlchemy, pydantic, aiohttp, supabase
# 🔄 Connected Modules / Calls From:
# app.main, app.api.v1.router

"""
Plant Identification Module

- Sightings: pending -> identified | failed, one terminal state per attempt
- Identification: by typed name (local catalogue, then Gemini) or by photo
  (PlantNet, then optional Gemini vision)
- Plant profiles: one per scientific name, enhanced in place
- Tours: ordered walks over a user's sightings
- Usage gate: daily identifications and tour counts per plan
"""

from typing import Any, Dict

__version__ = "1.0.0"
__module_name__ = "plant_identification"
__description__ = "Plant sighting identification module"


def get_module_info() -> Dict[str, Any]:
    return {
        "name": __module_name__,
        "version": __version__,
        "description": __description__,
    }


__all__ = ["__version__", "__module_name__", "__description__", "get_module_info"]
