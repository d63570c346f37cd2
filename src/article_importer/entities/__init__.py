"""Run-scoped entity resolution and per-attempt rollback tracking."""

from .cache import EntityResolutionCache
from .tracker import EntityTracker

__all__ = ["EntityResolutionCache", "EntityTracker"]
