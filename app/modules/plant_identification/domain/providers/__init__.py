# 📄 File: app/modules/plant_identification/domain/providers/__init__.py
# 🧭 Purpose (Layman Explanation):
# Collects the descriptions of the outside helpers the identification flows use.
# 🧪 Purpose (Technical Summary):
# Re-exports the provider and storage ports.
# 🔗 Dependencies:
# Port modules in this package
# 🔄 Connected Modules / Calls From:
# Domain services, infrastructure adapters, presentation dependencies

from .identification_providers import BotanicalContentGenerator, ContentSubject, VisualIdentifier
from .photo_storage import PhotoStorage

__all__ = [
    "BotanicalContentGenerator",
    "ContentSubject",
    "PhotoStorage",
    "VisualIdentifier",
]
