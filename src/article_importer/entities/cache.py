"""Run-scoped cache of shared entities.

Sections, issues and categories are shared by many articles, and a
submission is shared by the versions of one article. The cache makes sure
each of them is created at most once per run, whatever the number of
articles that refer to it.

Keys per kind:
    section      (title, locale)
    issue        (volume, number)
    category     path
    submission   (volume, issue, article), cache only
"""

import logging
import threading
from collections.abc import Callable, Hashable
from typing import Literal

from article_importer.repository import Entity, Repository

from .tracker import EntityTracker

logger = logging.getLogger(__name__)

EntityKind = Literal["section", "issue", "category", "submission"]
KINDS: tuple[EntityKind, ...] = ("section", "issue", "category", "submission")


class EntityResolutionCache:
    """Lookup-or-create access to shared entities for one import run.

    Lookups check the cache first, then the repository; repository hits are
    cached. Creations go through the repository, are cached and are
    recorded on the caller's tracker so a failed article can undo them.

    Attributes:
        repository: Repository used for lookups and inserts
        context_id: Journal the run imports into
    """

    def __init__(self, repository: Repository, context_id: int):
        self.repository = repository
        self.context_id = context_id
        self._entries: dict[str, dict[Hashable, Entity]] = {kind: {} for kind in KINDS}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def count(self, kind: EntityKind) -> int:
        return len(self._entries[kind])

    def get(self, kind: EntityKind, key: Hashable) -> Entity | None:
        """Return a cached entity without consulting the repository."""
        return self._entries[kind].get(key)

    def register(self, kind: EntityKind, key: Hashable, entity: Entity) -> None:
        with self._lock:
            self._entries[kind][key] = entity

    def resolve(self, kind: EntityKind, key: Hashable) -> Entity | None:
        """Find an entity by its natural key.

        Args:
            kind: Entity kind
            key: Natural key of the entity (see module docstring)

        Returns:
            The cached or stored entity, None when it does not exist yet
        """
        with self._lock:
            entity = self._entries[kind].get(key)
            if entity is not None:
                return entity

            entity = self._lookup(kind, key)
            if entity is not None:
                logger.debug(f"Resolved existing {kind} {key!r} from the repository")
                self._entries[kind][key] = entity
            return entity

    def _lookup(self, kind: EntityKind, key: Hashable) -> Entity | None:
        if kind == "section":
            title, _locale = key
            return self.repository.find_section(self.context_id, title)
        if kind == "issue":
            volume, number = key
            return self.repository.find_issue(self.context_id, volume, number)
        if kind == "category":
            return self.repository.find_category(self.context_id, key)
        return None

    def resolve_section(self, title: str, locale: str):
        return self.resolve("section", (title, locale))

    def resolve_issue(self, volume: int, number: str):
        return self.resolve("issue", (volume, number))

    def resolve_category(self, path: str):
        return self.resolve("category", path)

    def resolve_submission(self, key: tuple[int, str, str]):
        return self.resolve("submission", key)

    def create(
        self,
        kind: EntityKind,
        key: Hashable,
        builder: Callable[[], Entity],
        tracker: EntityTracker,
    ) -> Entity:
        """Insert a new entity and register it in the cache and the tracker.

        Args:
            kind: Entity kind
            key: Natural key the entity is cached under
            builder: Returns the unsaved entity
            tracker: Tracker of the article attempt creating the entity

        Returns:
            The stored entity
        """
        with self._lock:
            entity = self.repository.add_entity(builder())
            self._entries[kind][key] = entity
            tracker.track(entity)
            logger.debug(f"Created {kind} {key!r} with id {entity.id}")
            return entity

    def resolve_or_create(
        self,
        kind: EntityKind,
        key: Hashable,
        builder: Callable[[], Entity],
        tracker: EntityTracker,
    ) -> tuple[Entity, bool]:
        """Resolve an entity, creating it when it does not exist.

        The lookup and the insert happen under one lock, so a key is never
        created twice.

        Returns:
            The entity and whether it was created by this call
        """
        with self._lock:
            entity = self.resolve(kind, key)
            if entity is not None:
                return entity, False
            return self.create(kind, key, builder, tracker), True

    def evict(self, entity: Entity) -> None:
        """Remove an entity from every key that refers to it."""
        with self._lock:
            for kind, entries in self._entries.items():
                for key in [k for k, v in entries.items() if v is entity]:
                    del entries[key]
                    logger.debug(f"Evicted {kind} {key!r} from the cache")

    def clear(self) -> None:
        with self._lock:
            for entries in self._entries.values():
                entries.clear()
