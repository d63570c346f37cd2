"""Exceptions raised by repository implementations."""

from article_importer.exceptions import ImporterError


class RepositoryError(ImporterError):
    """Base exception for all repository errors."""

    pass


class EntityNotFoundError(RepositoryError):
    """Raised when an entity to update or delete does not exist."""

    def __init__(self, kind: str, entity_id: int | str | None):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class ConnectionError(RepositoryError):
    """Raised when a network connection to the repository fails."""

    pass


class APIError(RepositoryError):
    """Raised when the repository API returns a non-2xx response."""

    def __init__(self, message: str, status_code: int, *args, **kwargs):
        self.status_code = status_code
        super().__init__(message, *args, **kwargs)


class RateLimitError(APIError):
    """Raised when the repository API returns a 429 rate limit response."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message, status_code=429)


class NotFoundError(APIError):
    """Raised when the repository API returns a 404 not found response."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ValidationError(RepositoryError):
    """Raised when response data fails schema validation."""

    def __init__(self, message: str, errors: list | None = None, *args, **kwargs):
        self.errors = errors or []
        super().__init__(message, *args, **kwargs)
