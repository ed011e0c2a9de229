"""
Core utilities package for the Plant Sightings service.
Provides the exception hierarchy shared by every layer.
"""

from .exceptions import (
    PlantSightingsException,
    AuthenticationError,
    AuthorizationError,
    ValidationError,
    NotFoundError,
    InvalidStateTransitionError,
    UsageLimitExceededError,
    ConfigurationError,
    ExternalAPIError,
    APIRateLimitError,
    APITimeoutError,
    DatabaseError,
    RepositoryError,
)

__all__ = [
    "PlantSightingsException",
    "AuthenticationError",
    "AuthorizationError",
    "ValidationError",
    "NotFoundError",
    "InvalidStateTransitionError",
    "UsageLimitExceededError",
    "ConfigurationError",
    "ExternalAPIError",
    "APIRateLimitError",
    "APITimeoutError",
    "DatabaseError",
    "RepositoryError",
]
