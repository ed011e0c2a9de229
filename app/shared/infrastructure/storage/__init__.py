# 📄 File: app/shared/infrastructure/storage/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Sets up the photo storage used for the pictures attached to plant sightings.
#
# 🧪 Purpose (Technical Summary):
# Initializes the storage infrastructure layer with the Supabase Storage client.
#
# 🔗 Dependencies:
# - app/shared/infrastructure/storage/supabase_storage.py
# - supabase (storage client)
#
# 🔄 Connected Modules / Calls From:
# - app.main (startup/shutdown)
# - plant_identification photo storage adapter

"""
Storage Infrastructure Package

Storage Organization:
- sightings/{user_id}/ - Sighting photos (re-encoded as JPEG)

Supported File Types:
- Images: JPEG, PNG, WebP (auto-optimized)
"""

from .supabase_storage import (
    SupabaseStorageClient,
    cleanup_storage_client,
    get_storage_client,
    init_storage_client,
)

__all__ = [
    "SupabaseStorageClient",
    "cleanup_storage_client",
    "get_storage_client",
    "init_storage_client",
]
