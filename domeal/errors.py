"""Exception hierarchy shared by services and rendered by the API layer."""

from fastapi import status


class DomealError(Exception):
    """Base error carrying the HTTP status it is surfaced with."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthorized(DomealError):
    """No session, or the session has expired."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class Forbidden(DomealError):
    """Authenticated, but not a member of the group."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFound(DomealError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationError(DomealError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class Conflict(DomealError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class ConfigError(DomealError):
    """A required external-service setting is missing."""

    default_detail = "Service configuration error"


class StorageConfigError(ConfigError):
    default_detail = "S3 configuration error"


class OCRConfigError(ConfigError):
    default_detail = "OCR provider is not configured"


class TransportError(DomealError):
    """An external service was unreachable or rejected the call."""

    default_detail = "External service request failed"


class EmptyResponseError(TransportError):
    default_detail = "OCR provider returned no content"


class SigningError(DomealError):
    default_detail = "Failed to generate presigned URL"


class PersistenceError(DomealError):
    """Database failure; the open transaction has been rolled back."""

    default_detail = "Database operation failed"


class EnrichmentError(DomealError):
    """OCR output could not be turned into purchase items.

    Never reaches the client: the confirmation flow absorbs it.
    """

    default_detail = "Receipt enrichment failed"
