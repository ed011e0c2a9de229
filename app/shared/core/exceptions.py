# 📄 File: app/shared/core/exceptions.py
# 🧭 Purpose (Layman Explanation):
# The list of things that can go wrong in the Plant Sightings service, each with
# a clear name and a friendly message, so errors reach the app in a tidy shape.
# 🧪 Purpose (Technical Summary):
# Custom exception hierarchy with HTTP status codes, error codes and details,
# serialised into the API error envelope by the FastAPI exception handler.
# 🔗 Dependencies:
# FastAPI HTTP status constants, typing
# 🔄 Connected Modules / Calls From:
# Repositories, provider adapters, storage client, API routers, app.main

from typing import Any, Dict, List, Optional

from fastapi import status


class PlantSightingsException(Exception):
    """
    Base exception class for the Plant Sightings service.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__.upper()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
                "status_code": self.status_code
            }
        }


# =============================================================================
# AUTHENTICATION EXCEPTIONS
# =============================================================================

class AuthenticationError(PlantSightingsException):
    """
    Exception raised when the caller identity is missing.
    Authentication itself lives in front of this service.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
            error_code="AUTHENTICATION_ERROR"
        )


class AuthorizationError(PlantSightingsException):
    """Raised when a user touches a sighting or tour they do not own."""

    def __init__(
        self,
        message: str = "Access denied",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        user_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        if user_id:
            details["user_id"] = user_id

        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
            error_code="AUTHORIZATION_ERROR"
        )


# =============================================================================
# VALIDATION & DATA EXCEPTIONS
# =============================================================================

class ValidationError(PlantSightingsException):
    """
    Exception raised for data validation failures.
    Used when input data doesn't meet validation requirements.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if constraint:
            details["constraint"] = constraint

        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
            error_code="VALIDATION_ERROR"
        )


class NotFoundError(PlantSightingsException):
    """
    Exception raised when requested resource is not found.
    Used for missing sightings, plant profiles, tours, etc.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
            error_code="NOT_FOUND"
        )


# =============================================================================
# BUSINESS LOGIC EXCEPTIONS
# =============================================================================

class InvalidStateTransitionError(PlantSightingsException):
    """
    Raised when a sighting is asked to move between identification states
    the lifecycle does not allow (for example identified -> failed without
    re-opening first).
    """

    def __init__(
        self,
        current_status: str,
        target_status: str,
        sighting_id: Optional[str] = None
    ):
        details = {
            "current_status": current_status,
            "target_status": target_status,
        }
        if sighting_id:
            details["sighting_id"] = sighting_id

        super().__init__(
            message=f"Cannot move sighting from '{current_status}' to '{target_status}'",
            status_code=status.HTTP_409_CONFLICT,
            details=details,
            error_code="INVALID_STATE_TRANSITION"
        )


class UsageLimitExceededError(PlantSightingsException):
    """
    Raised by the HTTP layer when the caller's plan does not allow the action.
    """

    def __init__(
        self,
        action: str,
        plan: str,
        limit: Optional[int] = None,
        used: Optional[int] = None
    ):
        details: Dict[str, Any] = {"action": action, "plan": plan}
        if limit is not None:
            details["limit"] = limit
        if used is not None:
            details["used"] = used
        details["suggestion"] = "Upgrade your plan or try again tomorrow"

        super().__init__(
            message=f"The {plan} plan does not allow another {action}",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
            error_code="USAGE_LIMIT_EXCEEDED"
        )


class ConfigurationError(PlantSightingsException):
    """Raised when a required collaborator has not been configured."""

    def __init__(
        self,
        message: str = "Service is not configured",
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}
        if component:
            details["component"] = component

        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details,
            error_code="CONFIGURATION_ERROR"
        )


# =============================================================================
# EXTERNAL SERVICE EXCEPTIONS
# =============================================================================

class ExternalAPIError(PlantSightingsException):
    """
    Exception raised for external API failures.
    Used when third-party services (PlantNet, Gemini) fail.
    """

    def __init__(
        self,
        message: str = "External API error",
        api_name: Optional[str] = None,
        api_status_code: Optional[int] = None,
        api_response: Optional[Dict[str, Any]] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        error_code: str = "EXTERNAL_API_ERROR"
    ):
        if not details:
            details = {}

        if api_name:
            details["api_name"] = api_name
        if api_status_code:
            details["api_status_code"] = api_status_code
        if api_response:
            details["api_response"] = api_response

        self.api_name = api_name
        self.api_status_code = api_status_code

        super().__init__(
            message=message,
            status_code=status_code,
            details=details,
            error_code=error_code
        )


class APIRateLimitError(ExternalAPIError):
    """Provider answered HTTP 429."""

    def __init__(self, api_name: str, retry_after: Optional[int] = None):
        details: Dict[str, Any] = {}
        if retry_after:
            details["retry_after"] = retry_after
        self.retry_after = retry_after

        super().__init__(
            message=f"{api_name} API rate limit exceeded",
            api_name=api_name,
            api_status_code=429,
            details=details,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code="API_RATE_LIMITED"
        )


class APIQuotaExceededError(ExternalAPIError):
    """Exception when external API quota is exceeded."""

    def __init__(self, api_name: str, quota_type: str = "daily"):
        super().__init__(
            message=f"{api_name} API {quota_type} quota exceeded",
            api_name=api_name,
            details={
                "quota_type": quota_type,
                "suggestion": "Try again tomorrow or raise the provider quota"
            },
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code="API_QUOTA_EXCEEDED"
        )


class APITimeoutError(ExternalAPIError):
    """Exception raised when an external API call times out."""

    def __init__(self, api_name: str, timeout_seconds: float = 30):
        super().__init__(
            message=f"{api_name} API request timed out after {timeout_seconds} seconds",
            api_name=api_name,
            details={
                "timeout_seconds": timeout_seconds,
                "suggestion": "Retry after some time or check network"
            },
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            error_code="API_TIMEOUT"
        )


class APIConnectionError(ExternalAPIError):
    """Transport level failure (DNS, refused connection, reset)."""

    def __init__(self, api_name: str, reason: str):
        super().__init__(
            message=f"Could not reach {api_name} API: {reason}",
            api_name=api_name,
            error_code="API_CONNECTION_ERROR"
        )


class APIAuthenticationError(ExternalAPIError):
    """Exception raised when an external API rejects our credentials."""

    def __init__(self, api_name: str, api_status_code: int = 401):
        super().__init__(
            message=f"Authentication failed for {api_name} API",
            api_name=api_name,
            api_status_code=api_status_code,
            error_code="API_AUTHENTICATION_ERROR"
        )


# =============================================================================
# DATABASE & STORAGE EXCEPTIONS
# =============================================================================

class DatabaseError(PlantSightingsException):
    """
    Exception raised for database operation failures.
    Used for connection issues, query failures, etc.
    """

    def __init__(
        self,
        message: str = "Database error",
        operation: Optional[str] = None,
        table: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code="DATABASE_ERROR"
        )


class RepositoryError(PlantSightingsException):
    """
    Exception raised for repository/database operation failures.
    Used when database operations fail at the repository layer.
    """

    def __init__(
        self,
        message: str = "Repository operation failed",
        operation: Optional[str] = None,
        entity: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if entity:
            details["entity"] = entity

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code="REPOSITORY_ERROR"
        )


class TransactionError(PlantSightingsException):
    """
    Exception raised when a database transaction fails.
    Used to wrap commit/rollback errors in DB sessions.
    """

    def __init__(
        self,
        message: str = "Database transaction failed",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code="TRANSACTION_ERROR"
        )


class FileStorageError(PlantSightingsException):
    """
    Exception raised for photo storage failures.
    Used for upload/signing errors against the storage bucket.
    """

    def __init__(
        self,
        message: str = "File storage error",
        operation: Optional[str] = None,
        storage_path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if storage_path:
            details["storage_path"] = storage_path

        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details,
            error_code="FILE_STORAGE_ERROR"
        )


class FileTooLargeError(PlantSightingsException):
    """
    Exception raised when uploaded file exceeds allowed size.
    """
    def __init__(
        self,
        max_size_mb: float,
        actual_size_mb: float,
        filename: Optional[str] = None
    ):
        details: Dict[str, Any] = {
            "max_size_mb": max_size_mb,
            "actual_size_mb": round(actual_size_mb, 2),
        }
        if filename:
            details["filename"] = filename

        super().__init__(
            message=f"Photo is larger than {max_size_mb} MB",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            details=details,
            error_code="FILE_TOO_LARGE"
        )


class InvalidFileTypeError(PlantSightingsException):
    """
    Exception raised when the uploaded file type is not supported.
    """
    def __init__(
        self,
        actual_type: Optional[str],
        expected_types: List[str],
        filename: Optional[str] = None
    ):
        details: Dict[str, Any] = {
            "expected_types": expected_types,
            "actual_type": actual_type,
        }
        if filename:
            details["filename"] = filename

        super().__init__(
            message="Invalid or unsupported photo type",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code="INVALID_FILE_TYPE"
        )


class FileIntegrityError(PlantSightingsException):
    """
    Exception raised when uploaded file fails integrity checks (e.g., corruption).
    """
    def __init__(
        self,
        message: str = "Uploaded photo is corrupted or incomplete",
        filename: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"filename": filename} if filename else {},
            error_code="FILE_INTEGRITY_ERROR"
        )

