# 📄 File: app/shared/infrastructure/storage/supabase_storage.py

# 🧭 Purpose (Layman Explanation):
# Keeps the photos people take of plants in cloud storage: it checks each photo
# is a real image, shrinks oversized ones, files it under the user's folder and
# later hands out a temporary link so identification services can look at it.

# 🧪 Purpose (Technical Summary):
# Supabase Storage client wrapper: Pillow-based validation and optimisation,
# per-user path organisation, upload, signed URL generation, deletion and a
# health check. The synchronous supabase-py calls run in a worker thread.

# 🔗 Dependencies:
# - supabase: Storage client
# - PIL (Pillow): Image validation and optimization
# - asyncio: Offloading blocking storage calls

# 🔄 Connected Modules / Calls From:
# Called by: plant_identification photo storage adapter (sighting uploads and
# photo URL resolution), app.main (startup), health endpoint

import asyncio
import io
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from PIL import Image, ImageOps, UnidentifiedImageError
from supabase import Client, create_client

from app.shared.config.settings import Settings
from app.shared.core.exceptions import (
    FileIntegrityError,
    FileStorageError,
    FileTooLargeError,
    InvalidFileTypeError,
)
from app.shared.utils.logging import get_logger
from app.shared.utils.validators import sanitize_filename

logger = get_logger(__name__)


class SupabaseStorageClient:
    """
    Supabase Storage client for sighting photos.

    Handles:
    - Photo validation (size, declared type, decodable image)
    - Orientation fix, downscaling and JPEG re-encoding
    - Uploads under ``sightings/{user_id}/``
    - Signed URL generation for private photos
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        bucket_name: str,
        max_file_size: int = 10 * 1024 * 1024,
        allowed_image_types: Optional[List[str]] = None,
        max_dimension: int = 2048,
        image_quality: int = 85,
        signed_url_ttl: int = 3600,
    ):
        """Initialize Supabase Storage client with configuration."""
        self.supabase_url = supabase_url
        self.supabase_key = supabase_key
        self.bucket_name = bucket_name

        self.client: Optional[Client] = None

        self.image_quality = image_quality
        self.max_image_size = (max_dimension, max_dimension)
        self.max_file_size = max_file_size
        self.allowed_image_types = set(
            allowed_image_types or ['image/jpeg', 'image/png', 'image/webp']
        )
        self.signed_url_ttl = signed_url_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseStorageClient":
        return cls(
            supabase_url=settings.SUPABASE_URL,
            supabase_key=settings.SUPABASE_SERVICE_ROLE_KEY,
            bucket_name=settings.SUPABASE_STORAGE_BUCKET,
            max_file_size=settings.MAX_PHOTO_SIZE_MB * 1024 * 1024,
            allowed_image_types=settings.allowed_photo_types_list,
            max_dimension=settings.PHOTO_MAX_DIMENSION,
            image_quality=settings.PHOTO_JPEG_QUALITY,
            signed_url_ttl=settings.SUPABASE_SIGNED_URL_TTL,
        )

    def initialize(self) -> None:
        """Create the Supabase client."""
        if self.client is not None:
            return

        try:
            self.client = create_client(self.supabase_url, self.supabase_key)
        except Exception as e:
            logger.error(f"Failed to initialize Supabase Storage: {e}")
            raise FileStorageError(f"Storage initialization failed: {e}", operation="initialize") from e

        logger.info("Supabase Storage client initialized successfully")

    @property
    def _bucket(self):
        if self.client is None:
            self.initialize()
        return self.client.storage.from_(self.bucket_name)

    # =========================================================================
    # VALIDATION & OPTIMISATION
    # =========================================================================

    def _generate_file_path(self, user_id: str, filename: str) -> str:
        """Generate ``sightings/{user_id}/{timestamp}_{uuid}.jpg``."""
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        file_uuid = str(uuid4())[:8]
        stem = Path(sanitize_filename(filename)).stem[:40]
        return f"sightings/{user_id}/{timestamp}_{file_uuid}_{stem}.jpg"

    def _validate_file(self, file_data: bytes, content_type: Optional[str], filename: str) -> None:
        """Validate file size, type, and content."""
        file_size = len(file_data)
        if file_size == 0:
            raise FileIntegrityError("Uploaded photo is empty", filename=filename)

        if file_size > self.max_file_size:
            raise FileTooLargeError(
                max_size_mb=self.max_file_size / (1024 * 1024),
                actual_size_mb=file_size / (1024 * 1024),
                filename=filename
            )

        if content_type and content_type not in self.allowed_image_types:
            raise InvalidFileTypeError(
                actual_type=content_type,
                expected_types=sorted(self.allowed_image_types),
                filename=filename
            )

        try:
            with Image.open(io.BytesIO(file_data)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise FileIntegrityError(f"Photo could not be decoded: {e}", filename=filename) from e

    def _optimize_image(self, image_data: bytes) -> Tuple[bytes, Dict[str, Any]]:
        """
        Optimize image for storage with orientation fix, resizing and
        JPEG compression.

        Args:
            image_data: Original image bytes

        Returns:
            Tuple of (optimized_bytes, metadata)
        """
        with Image.open(io.BytesIO(image_data)) as original:
            original_size = original.size
            img = ImageOps.exif_transpose(original)

            if img.mode != 'RGB':
                img = img.convert('RGB')

            if img.size[0] > self.max_image_size[0] or img.size[1] > self.max_image_size[1]:
                img.thumbnail(self.max_image_size, Image.Resampling.LANCZOS)

            output = io.BytesIO()
            img.save(
                output,
                format='JPEG',
                quality=self.image_quality,
                optimize=True,
                progressive=True
            )

        optimized_data = output.getvalue()
        metadata = {
            'original_size': original_size,
            'optimized_size': img.size,
            'original_bytes': len(image_data),
            'optimized_bytes': len(optimized_data),
            'format': 'JPEG',
            'quality': self.image_quality
        }
        return optimized_data, metadata

    def prepare_photo(
        self,
        file_data: bytes,
        filename: str,
        content_type: Optional[str] = None
    ) -> Tuple[bytes, Dict[str, Any]]:
        """Validate then optimise a photo; exposed for callers and tests."""
        self._validate_file(file_data, content_type, filename)
        return self._optimize_image(file_data)

    # =========================================================================
    # STORAGE OPERATIONS
    # =========================================================================

    async def upload_sighting_photo(
        self,
        user_id: str,
        file_data: bytes,
        filename: str,
        content_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Upload a sighting photo.

        Args:
            user_id: Owner, used for path organisation
            file_data: Raw photo bytes
            filename: Original filename
            content_type: Declared MIME type

        Returns:
            Dict with the storage path and optimisation metadata

        Raises:
            FileTooLargeError / InvalidFileTypeError / FileIntegrityError:
                the photo was rejected
            FileStorageError: the upload failed
        """
        upload_data, metadata = self.prepare_photo(file_data, filename, content_type)
        storage_path = self._generate_file_path(user_id, filename)

        try:
            await asyncio.to_thread(
                self._bucket.upload,
                path=storage_path,
                file=upload_data,
                file_options={
                    "content-type": "image/jpeg",
                    "cache-control": "3600",
                    "upsert": "false"
                }
            )
        except Exception as e:
            logger.error(f"Photo upload failed: {e}")
            raise FileStorageError(
                f"Upload failed: {e}", operation="upload", storage_path=storage_path
            ) from e

        logger.info(f"Photo uploaded successfully: {storage_path}")
        return {
            'path': storage_path,
            'file_size': len(upload_data),
            'optimization': metadata,
            'uploaded_at': datetime.now(timezone.utc).isoformat()
        }

    async def get_file_url(self, file_path: str, expires_in: Optional[int] = None) -> str:
        """Generate signed URL for private file access."""
        expires_in = expires_in or self.signed_url_ttl
        try:
            response = await asyncio.to_thread(
                self._bucket.create_signed_url, file_path, expires_in
            )
        except Exception as e:
            logger.error(f"URL generation failed: {e}")
            raise FileStorageError(
                f"URL generation failed: {e}", operation="sign", storage_path=file_path
            ) from e

        signed_url = response.get('signedURL') or response.get('signedUrl')
        if not signed_url:
            raise FileStorageError(
                "Storage returned no signed URL", operation="sign", storage_path=file_path
            )
        return signed_url

    async def delete_file(self, file_path: str) -> bool:
        """Delete file from storage."""
        try:
            await asyncio.to_thread(self._bucket.remove, [file_path])
        except Exception as e:
            logger.error(f"File deletion failed: {e}")
            return False

        logger.info(f"File deleted successfully: {file_path}")
        return True

    async def health_check(self) -> Dict[str, Any]:
        """Perform storage health check."""
        try:
            await asyncio.to_thread(self._bucket.list, "", {"limit": 1})
            return {
                'status': 'healthy',
                'bucket': self.bucket_name,
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        except Exception as e:
            return {
                'status': 'unhealthy',
                'error': str(e),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }


# Global storage client instance
storage_client: Optional[SupabaseStorageClient] = None


def init_storage_client(settings: Settings) -> Optional[SupabaseStorageClient]:
    """Create the global storage client when Supabase is configured."""
    global storage_client

    if not settings.storage_configured:
        logger.warning("Supabase storage not configured; photo uploads are disabled")
        storage_client = None
        return None

    storage_client = SupabaseStorageClient.from_settings(settings)
    storage_client.initialize()
    return storage_client


def get_storage_client() -> Optional[SupabaseStorageClient]:
    """Get the storage client (None when storage is not configured)."""
    return storage_client


def cleanup_storage_client():
    """Clean up storage client resources."""
    global storage_client
    if storage_client:
        storage_client = None
        logger.info("Storage client cleaned up")
