# 📄 File: app/modules/plant_identification/infrastructure/external/__init__.py
# 🧭 Purpose (Layman Explanation):
# The connectors to the outside services that recognise plants and store photos.
# 🧪 Purpose (Technical Summary):
# Exports the PlantNet/Gemini adapters, the Supabase photo storage adapter and
# the settings-driven provider registry.
# 🔗 Dependencies:
# app.shared.infrastructure.external_apis, app.shared.infrastructure.storage
# 🔄 Connected Modules / Calls From:
# app.main, presentation dependencies

from .gemini_client import GeminiContentGenerator
from .plantnet_client import PlantNetIdentifier
from .provider_adapter import ProviderAdapter
from .provider_registry import ProviderRegistry, build_provider_registry
from .supabase_photo_storage import SupabasePhotoStorage

__all__ = [
    "GeminiContentGenerator",
    "PlantNetIdentifier",
    "ProviderAdapter",
    "ProviderRegistry",
    "build_provider_registry",
    "SupabasePhotoStorage",
]
