"""Repository collaborators: the abstract interface and its implementations."""

from .base import Entity, Repository
from .client import Client
from .exceptions import (
    APIError,
    ConnectionError,
    EntityNotFoundError,
    NotFoundError,
    RateLimitError,
    RepositoryError,
    ValidationError,
)
from .memory import InMemoryRepository
from .rest import RestRepository

__all__ = [
    "APIError",
    "Client",
    "ConnectionError",
    "Entity",
    "EntityNotFoundError",
    "InMemoryRepository",
    "NotFoundError",
    "RateLimitError",
    "Repository",
    "RepositoryError",
    "RestRepository",
    "ValidationError",
]
