# 📄 File: app/shared/config/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# The folder holding the service's settings: where the database lives, which
# plant identification services we can call, and how patient to be with them.
#
# 🧪 Purpose (Technical Summary):
# Configuration package initialization exporting the cached settings factory.
#
# 🔗 Dependencies:
# - settings.py (application settings)
#
# 🔄 Connected Modules / Calls From:
# - app.main (application startup)
# - Infrastructure components and the provider composition root

"""
Configuration Management Package

Handles all application configuration including:
- Environment-based settings
- Database connection configuration
- Identification provider credentials and endpoints
- Supabase photo storage settings
"""

from .settings import get_settings, Settings

__all__ = [
    "get_settings",
    "Settings",
]
