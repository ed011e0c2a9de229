# 📄 File: app/modules/plant_identification/infrastructure/external/supabase_photo_storage.py
# 🧭 Purpose (Layman Explanation):
# Connects sightings to the photo locker in Supabase: saves the picture and
# later hands out a temporary link that PlantNet or Gemini can open.
# 🧪 Purpose (Technical Summary):
# PhotoStorage adapter over SupabaseStorageClient. References are storage
# paths; absolute http(s) references (photos hosted elsewhere) resolve to
# themselves. Signing failures resolve to None so callers can fail cleanly.
# 🔗 Dependencies:
# app.shared.infrastructure.storage (supabase-py, Pillow)
# 🔄 Connected Modules / Calls From:
# provider_registry.py, IdentificationOrchestrator, sighting handlers

from typing import Optional

from app.modules.plant_identification.domain.providers.photo_storage import PhotoStorage
from app.shared.core.exceptions import FileStorageError
from app.shared.infrastructure.storage.supabase_storage import SupabaseStorageClient
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)


def is_absolute_url(photo_ref: str) -> bool:
    return photo_ref.startswith(("http://", "https://"))


class SupabasePhotoStorage(PhotoStorage):
    """Sighting photos kept in a private Supabase bucket."""

    def __init__(self, client: SupabaseStorageClient):
        self._client = client

    async def upload(
        self,
        user_id: str,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> str:
        result = await self._client.upload_sighting_photo(user_id, data, filename, content_type)
        return result["path"]

    async def resolve_url(self, photo_ref: str) -> Optional[str]:
        if not photo_ref:
            return None
        if is_absolute_url(photo_ref):
            return photo_ref
        try:
            return await self._client.get_file_url(photo_ref)
        except FileStorageError as e:
            logger.warning(f"Could not sign photo URL for {photo_ref}: {e.message}")
            return None

    async def delete(self, photo_ref: str) -> bool:
        if not photo_ref or is_absolute_url(photo_ref):
            return False
        return await self._client.delete_file(photo_ref)
