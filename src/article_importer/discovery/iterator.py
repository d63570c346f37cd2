"""Lazy traversal of an import directory."""

import logging
import re
from collections.abc import Iterator
from pathlib import Path

from .entry import ArticleEntry
from .file_set import DEFAULT_IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

ARTICLE_DEPTH = 3


def natural_key(name: str) -> list:
    """Sort key ordering "2" before "10".

    Examples:
        >>> sorted(["10", "2", "1a"], key=natural_key)
        ['1a', '2', '10']
    """
    return [
        (0, int(part), "") if part.isdigit() else (1, 0, part.lower())
        for part in re.split(r"(\d+)", name)
        if part
    ]


def _subdirectories(path: Path) -> list[Path]:
    return sorted(
        (p for p in path.iterdir() if p.is_dir() and not p.name.startswith(".")),
        key=lambda p: natural_key(p.name),
    )


class ArticleIterator:
    """Yields an ArticleEntry for every ``volume/issue/article`` directory.

    Only directories exactly three levels below the root are entries;
    files at any level above are ignored. Entries come out ordered by
    volume, issue and article, and empty article directories are skipped.
    The iterator keeps no state besides the root, so iterating again walks
    the tree again.

    Example:
        for entry in ArticleIterator(Path("/data/import")):
            for version in entry.versions():
                ...
    """

    def __init__(
        self,
        root: Path,
        cover_filename: str = "cover",
        image_extensions: tuple[str, ...] = DEFAULT_IMAGE_EXTENSIONS,
    ):
        self.root = Path(root)
        self.cover_filename = cover_filename
        self.image_extensions = tuple(image_extensions)

    def __iter__(self) -> Iterator[ArticleEntry]:
        yield from self._walk(self.root, 1)

    def _walk(self, path: Path, depth: int) -> Iterator[ArticleEntry]:
        for directory in _subdirectories(path):
            if depth < ARTICLE_DEPTH:
                yield from self._walk(directory, depth + 1)
                continue
            if not any(directory.iterdir()):
                logger.debug(f"Skipping empty article directory {directory}")
                continue
            yield ArticleEntry(
                directory,
                cover_filename=self.cover_filename,
                image_extensions=self.image_extensions,
            )
