# 📄 File: app/modules/plant_identification/domain/repositories/__init__.py
# 🧭 Purpose (Layman Explanation):
# Collects the storage rulebooks for plants, sightings, tours and accounts.
# 🧪 Purpose (Technical Summary):
# Re-exports the repository interfaces of the plant identification domain.
# 🔗 Dependencies:
# Repository interface modules in this package
# 🔄 Connected Modules / Calls From:
# Domain services, application handlers, infrastructure implementations

from .account_repository import AccountRepository
from .plant_profile_repository import PlantProfileRepository
from .sighting_repository import SightingRepository
from .tour_repository import TourRepository

__all__ = [
    "AccountRepository",
    "PlantProfileRepository",
    "SightingRepository",
    "TourRepository",
]
