"""Tracking of the entities created by one article attempt."""

import logging
from typing import TYPE_CHECKING

from article_importer.repository import Entity, Repository

if TYPE_CHECKING:
    from .cache import EntityResolutionCache

logger = logging.getLogger(__name__)


class EntityTracker:
    """Append-only record of the entities an article attempt inserted.

    When the attempt fails, ``rollback()`` deletes them again, newest
    first, so dependents go before the records they point to. Entities
    that were only resolved, never created, are not tracked and survive
    the rollback.
    """

    def __init__(self, repository: Repository, cache: "EntityResolutionCache | None" = None):
        self.repository = repository
        self.cache = cache
        self._entities: list[Entity] = []

    def __len__(self) -> int:
        return len(self._entities)

    @property
    def entities(self) -> list[Entity]:
        return list(self._entities)

    def track(self, entity: Entity) -> None:
        self._entities.append(entity)

    def clear(self) -> None:
        self._entities.clear()

    def rollback(self) -> int:
        """Delete the tracked entities, logging failures instead of raising.

        Returns:
            Number of entities deleted
        """
        deleted = 0
        for entity in reversed(self._entities):
            kind = type(entity).__name__
            try:
                self.repository.delete_entity(entity)
            except Exception as e:
                logger.error(f"Failed to delete {kind} {entity.id} during rollback: {e}")
                continue
            if self.cache is not None:
                self.cache.evict(entity)
            deleted += 1
            logger.debug(f"Rolled back {kind} {entity.id}")
        self.clear()
        return deleted
