# 📄 File: app/modules/plant_identification/domain/providers/photo_storage.py
# 🧭 Purpose (Layman Explanation):
# Describes the photo locker: put a photo in, get a claim ticket back, and
# later swap the ticket for a link the identification services can open.
# 🧪 Purpose (Technical Summary):
# Storage port treated as an opaque collaborator by the orchestrator.
# 🔗 Dependencies:
# abc, typing
# 🔄 Connected Modules / Calls From:
# Identification orchestrator, create-sighting handler, sighting queries,
# Supabase storage adapter

from abc import ABC, abstractmethod
from typing import Optional


class PhotoStorage(ABC):
    """Stores sighting photos and resolves references to fetchable URLs."""

    @abstractmethod
    async def upload(
        self,
        user_id: str,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Store photo bytes.

        Returns:
            Opaque photo reference to keep on the sighting

        Raises:
            FileStorageError and its validation subclasses on rejection/failure
        """

    @abstractmethod
    async def resolve_url(self, photo_ref: str) -> Optional[str]:
        """Fetchable URL for a stored photo, None when it cannot be resolved."""

    @abstractmethod
    async def delete(self, photo_ref: str) -> bool:
        """Remove a stored photo; False when nothing was removed."""
