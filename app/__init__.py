# 📄 File: app/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Marks the 'app' folder as the Plant Sightings backend: the service that
# identifies plants from photos or names and keeps a diary of every sighting.
#
# 🧪 Purpose (Technical Summary):
# Application package initialization with version metadata for the
# Plant Sightings FastAPI application.
#
# 🔗 Dependencies:
# - Python packaging system
#
# 🔄 Connected Modules / Calls From:
# - main.py (application entry point)
# - Package imports throughout the application

"""
Plant Sightings API - plant identification, sightings and tours

Identifies plants from photos (PlantNet, with a Gemini vision fallback) or
typed names (Gemini validation), keeps one canonical profile per species and
tracks each user's sightings through their identification lifecycle.
"""

__version__ = "1.0.0"
__title__ = "Plant Sightings API"
__description__ = "Plant identification, sightings and tours"

__all__ = [
    "__version__",
    "__title__",
    "__description__",
]
