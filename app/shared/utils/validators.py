# 📄 File: app/shared/utils/validators.py

# 🧭 Purpose (Layman Explanation):
# Small checkers that make sure what users type (plant names, coordinates,
# photo files) and what AI services send back makes sense before we use it.

# 🧪 Purpose (Technical Summary):
# Validation helpers for plant names, geolocation and photo uploads, the
# scientific-name normalisation used as the profile uniqueness key, and the
# fenced-JSON extraction applied to generative provider replies.

# 🔗 Dependencies:
# - re: Regular expression patterns for validation
# - json: Provider reply parsing

# 🔄 Connected Modules / Calls From:
# Used by: sighting/profile domain models, the Gemini adapter, the Supabase
# storage client and API request schemas

import json
import re
import unicodedata
from pathlib import Path
from typing import Any, Dict, List, Optional

# Text validation patterns
PLANT_NAME_MAX_LENGTH = 200
# Any C0/C1 control character other than ordinary whitespace
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
WHITESPACE_PATTERN = re.compile(r"\s+")

# Matches an opening ```json / ``` fence or a closing ``` fence
CODE_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*\n?|\n?\s*```")

# File validation constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_IMAGE_TYPES = {'image/jpeg', 'image/png', 'image/webp'}


class ValidationResult:
    """Result object for validation operations"""
    def __init__(self, is_valid: bool, errors: List[str] = None, warnings: List[str] = None):
        self.is_valid = is_valid
        self.errors = errors or []
        self.warnings = warnings or []

    def add_error(self, error: str):
        """Add validation error"""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str):
        """Add validation warning"""
        self.warnings.append(warning)


# ==============================================================================
# PLANT NAME VALIDATION
# ==============================================================================

def validate_plant_name(name: Optional[str]) -> ValidationResult:
    """
    Validate a typed plant name (scientific or common).

    Punctuation is left alone: keyboards insert curly apostrophes and
    cultivar names carry quotes, e.g. Prunus "Kanzan".

    Args:
        name: Plant name to validate

    Returns:
        ValidationResult with validation status and errors
    """
    result = ValidationResult(True)

    if not name or not isinstance(name, str) or not name.strip():
        result.add_error("Plant name is required")
        return result

    name = name.strip()

    if len(name) > PLANT_NAME_MAX_LENGTH:
        result.add_error(f"Plant name must be at most {PLANT_NAME_MAX_LENGTH} characters")

    if CONTROL_CHAR_PATTERN.search(name):
        result.add_error("Plant name contains control characters")

    return result


def clean_plant_name(name: str) -> str:
    """Trim and collapse internal whitespace, keeping the user's casing."""
    return WHITESPACE_PATTERN.sub(" ", name).strip()


def normalize_scientific_name(name: str) -> str:
    """
    Build the uniqueness key for a plant profile.

    "Ficus  lyrata", " ficus lyrata" and "FICUS LYRATA" all collapse to
    "ficus lyrata" so they resolve to the same profile.
    """
    return clean_plant_name(name).casefold()


def fold_for_search(text: str) -> str:
    """
    Case- and compatibility-fold text for substring search.

    Applied in Python on both sides so accented and special letters
    ("Érable", "Straußgras") match regardless of the database collation.
    """
    return unicodedata.normalize("NFKC", clean_plant_name(text)).casefold()


# ==============================================================================
# LOCATION VALIDATION
# ==============================================================================

def validate_coordinates(latitude: float, longitude: float) -> ValidationResult:
    result = ValidationResult(True)

    if not -90.0 <= latitude <= 90.0:
        result.add_error("Latitude must be between -90 and 90")
    if not -180.0 <= longitude <= 180.0:
        result.add_error("Longitude must be between -180 and 180")

    return result


# ==============================================================================
# FILE VALIDATION
# ==============================================================================

def validate_image_file(
    filename: str,
    file_size: int,
    content_type: Optional[str] = None,
    max_size: int = MAX_FILE_SIZE,
    allowed_types: Optional[set] = None
) -> ValidationResult:
    """
    Validate an uploaded sighting photo before it is decoded.

    Args:
        filename: Original file name
        file_size: Size in bytes
        content_type: Declared MIME type
        max_size: Upper bound in bytes
        allowed_types: Accepted MIME types

    Returns:
        ValidationResult with validation status and errors
    """
    result = ValidationResult(True)
    allowed_types = allowed_types or ALLOWED_IMAGE_TYPES

    if file_size <= 0:
        result.add_error("Photo is empty")
    elif file_size > max_size:
        result.add_error(f"Photo exceeds maximum size of {max_size // (1024 * 1024)}MB")

    if content_type and content_type not in allowed_types:
        result.add_error(f"Unsupported photo type: {content_type}")

    if filename and Path(filename).suffix.lower() not in ('', '.jpg', '.jpeg', '.png', '.webp'):
        result.add_warning(f"Unexpected photo extension: {Path(filename).suffix}")

    return result


# ==============================================================================
# PROVIDER RESPONSE PARSING
# ==============================================================================

def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ```) around a model reply."""
    return CODE_FENCE_PATTERN.sub("", text).strip()


def parse_json_object(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse a model reply expected to contain exactly one JSON object.

    Fences are stripped first. When the model wraps the object in prose the
    outermost ``{...}`` span is tried as a last resort.

    Args:
        text: Raw text returned by the provider

    Returns:
        Dict: The parsed object

    Raises:
        ValueError: If no JSON object can be recovered
    """
    if not text or not text.strip():
        raise ValueError("Empty response text")

    cleaned = strip_code_fences(text)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("Response does not contain a JSON object")
        try:
            data = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in response: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Response JSON must be an object")

    return data


# ==============================================================================
# UTILITY FUNCTIONS
# ==============================================================================

def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename for safe storage

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    if not filename:
        return "unnamed_file"

    # Remove path separators and dangerous characters
    filename = re.sub(r'[^\w\-_\.\s]', '', filename)
    filename = re.sub(r'\s+', '_', filename)
    filename = filename.strip('._')

    if len(filename) > 100:
        name, ext = Path(filename).stem[:95], Path(filename).suffix
        filename = f"{name}{ext}"

    return filename or "unnamed_file"
