# 📄 File: app/modules/plant_identification/infrastructure/external/provider_registry.py
# 🧭 Purpose (Layman Explanation):
# Reads the app settings once at startup and prepares the PlantNet, Gemini
# and photo storage connections, leaving out whatever has no key configured.
# 🧪 Purpose (Technical Summary):
# Builds the provider adapters with their APIClients and circuit breakers.
# A missing credential yields an adapter that answers NOT_CONFIGURED rather
# than no adapter at all, so the orchestrator always has both collaborators.
# 🔗 Dependencies:
# Settings (pydantic-settings), APIClient, circuit breaker manager,
# SupabaseStorageClient
# 🔄 Connected Modules / Calls From:
# app.main lifespan, presentation dependencies, tests

from dataclasses import dataclass, field
from typing import List, Optional

from app.modules.plant_identification.domain.providers.photo_storage import PhotoStorage
from app.shared.config.settings import Settings
from app.shared.infrastructure.external_apis.api_client import (
    APIClient,
    cleanup_api_clients,
    create_api_client,
)
from app.shared.infrastructure.external_apis.circuit_breaker import create_api_circuit_breaker
from app.shared.infrastructure.storage.supabase_storage import SupabaseStorageClient
from app.shared.utils.logging import get_logger

from .gemini_client import GeminiContentGenerator
from .plantnet_client import PlantNetIdentifier
from .supabase_photo_storage import SupabasePhotoStorage

logger = get_logger(__name__)


@dataclass
class ProviderRegistry:
    """The external collaborators shared by every request."""
    visual_identifier: PlantNetIdentifier
    content_generator: GeminiContentGenerator
    photo_storage: Optional[PhotoStorage] = None
    clients: List[APIClient] = field(default_factory=list)

    def status(self) -> dict:
        return {
            "plantnet": self.visual_identifier.is_configured,
            "gemini": self.content_generator.is_configured,
            "gemini_image_identification": self.content_generator.supports_image_identification,
            "photo_storage": self.photo_storage is not None,
        }

    async def close(self) -> None:
        await cleanup_api_clients(self.clients)


def _build_client(settings: Settings, api_name: str, base_url: str, api_key: Optional[str]) -> Optional[APIClient]:
    if not api_key:
        logger.warning(f"{api_name} API key not set; provider disabled")
        return None
    return create_api_client(
        api_name,
        base_url,
        api_key,
        timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        max_retries=settings.PROVIDER_MAX_RETRIES,
    )


def build_provider_registry(
    settings: Settings,
    storage_client: Optional[SupabaseStorageClient] = None,
) -> ProviderRegistry:
    """
    Wire the provider adapters from settings.

    Args:
        settings: Application settings
        storage_client: Initialised Supabase client, None when storage is off

    Returns:
        ProviderRegistry ready for the orchestrator
    """
    config = settings.get_plant_api_config()
    plantnet_cfg, gemini_cfg = config["plantnet"], config["gemini"]

    plantnet_client = _build_client(settings, "plantnet", plantnet_cfg["api_url"], plantnet_cfg["api_key"])
    gemini_client = _build_client(settings, "gemini", gemini_cfg["api_url"], gemini_cfg["api_key"])

    breaker_options = {
        "failure_threshold": settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
        "recovery_timeout": settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT,
    }

    registry = ProviderRegistry(
        visual_identifier=PlantNetIdentifier(
            plantnet_client,
            create_api_circuit_breaker("plantnet", **breaker_options),
            project=plantnet_cfg["project"],
            lang=plantnet_cfg["lang"],
        ),
        content_generator=GeminiContentGenerator(
            gemini_client,
            create_api_circuit_breaker("gemini", **breaker_options),
            model=gemini_cfg["model"],
            image_identification=gemini_cfg["image_identification"],
        ),
        photo_storage=SupabasePhotoStorage(storage_client) if storage_client else None,
        clients=[client for client in (plantnet_client, gemini_client) if client is not None],
    )

    logger.info(f"✅ Identification providers wired: {registry.status()}")
    return registry
