# 📄 File: app/modules/plant_identification/infrastructure/database/__init__.py
# 🧭 Purpose (Layman Explanation):
# Collects the database pieces of plant identification: table definitions and
# the code that reads and writes them.
# 🧪 Purpose (Technical Summary):
# Re-exports SQLAlchemy models and repository implementations.
# 🔗 Dependencies:
# models, *_repository_impl modules in this package
# 🔄 Connected Modules / Calls From:
# Presentation dependencies, database table creation, migrations, tests

from .account_repository_impl import AccountRepositoryImpl
from .models import AccountModel, PlantProfileModel, PlantSightingModel, TourModel, TourStopModel
from .plant_profile_repository_impl import PlantProfileRepositoryImpl
from .sighting_repository_impl import SightingRepositoryImpl
from .tour_repository_impl import TourRepositoryImpl

__all__ = [
    "AccountModel",
    "PlantProfileModel",
    "PlantSightingModel",
    "TourModel",
    "TourStopModel",
    "AccountRepositoryImpl",
    "PlantProfileRepositoryImpl",
    "SightingRepositoryImpl",
    "TourRepositoryImpl",
]
