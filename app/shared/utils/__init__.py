# 📄 File: app/shared/utils/__init__.py

# 🧭 Purpose (Layman Explanation):
# A toolbox of helpers the rest of the service shares: writing logs and
# checking names, coordinates, photos and AI replies.

# 🧪 Purpose (Technical Summary):
# Initializes the utilities package and re-exports the logging and
# validation helpers used across the application.

# 🔗 Dependencies:
# - logging: Structured logging utilities
# - validators: Data validation functions

# 🔄 Connected Modules / Calls From:
# Used by: all application modules

"""
Shared Utilities Package

- Structured logging with JSON formatting
- Plant name, coordinate and photo validation
- Generative provider reply parsing
"""

from .logging import get_logger, log_context, setup_logging
from .validators import (
    ValidationResult,
    clean_plant_name,
    fold_for_search,
    normalize_scientific_name,
    parse_json_object,
    strip_code_fences,
    validate_coordinates,
    validate_image_file,
    validate_plant_name,
)

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "ValidationResult",
    "clean_plant_name",
    "fold_for_search",
    "normalize_scientific_name",
    "parse_json_object",
    "strip_code_fences",
    "validate_coordinates",
    "validate_image_file",
    "validate_plant_name",
]
