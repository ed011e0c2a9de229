# 📄 File: app/shared/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# The shared toolbox every part of the Plant Sightings service can use:
# settings, error types, logging, the database and outside-service helpers.
#
# 🧪 Purpose (Technical Summary):
# Shared kernel package initialization for configuration, exceptions,
# utilities and infrastructure used by the feature modules.
#
# 🔗 Dependencies:
# - Python packaging system
#
# 🔄 Connected Modules / Calls From:
# - app.modules.plant_identification
# - app.main

"""
Shared Kernel - Common Utilities and Infrastructure

- Configuration management
- Exception hierarchy
- Structured logging and validators
- Database, photo storage and external API infrastructure
"""

__all__ = []
