"""Article entries and their versions.

An import directory is laid out as ``<volume>/<issue>/<article>`` with an
optional numbered ``<version>`` level below each article::

    12/3/7/1/article.xml     version 1 of article 7 in volume 12, issue 3
    12/3/7/2/article.xml     version 2
    12/3/8/article.xml       article 8, implicit version 1
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .file_set import DEFAULT_IMAGE_EXTENSIONS, FileSetResolver

logger = logging.getLogger(__name__)


def _volume_number(label: str) -> int:
    return int(label) if label.isdigit() else 0


@dataclass
class ArticleEntry:
    """One logical article, identified by its volume, issue and article labels.

    Attributes:
        directory: The article directory
        volume: Volume number, 0 when the label is not numeric
        issue: Issue label
        article: Article label
    """

    directory: Path
    cover_filename: str = "cover"
    image_extensions: tuple[str, ...] = DEFAULT_IMAGE_EXTENSIONS
    volume: int = field(init=False)
    issue: str = field(init=False)
    article: str = field(init=False)

    def __post_init__(self):
        self.directory = Path(self.directory)
        self.article = self.directory.name
        self.issue = self.directory.parent.name
        self.volume = _volume_number(self.directory.parent.parent.name)

    @property
    def key(self) -> tuple[int, str, str]:
        return (self.volume, self.issue, self.article)

    @property
    def label(self) -> str:
        return f"{self.volume}-{self.issue}-{self.article}"

    @property
    def issue_directory(self) -> Path:
        return self.directory.parent

    def versions(self) -> list["ArticleVersion"]:
        """Discover the versions of the article, oldest first.

        Numbered sub-directories are versions. When there are none and the
        article directory holds files, the directory itself is version 1.

        Returns:
            The versions, empty when the article has nothing to import
        """
        version_dirs = sorted(
            (
                p
                for p in self.directory.iterdir()
                if p.is_dir() and p.name.isdigit()
            ),
            key=lambda p: int(p.name),
        )
        if version_dirs:
            return [ArticleVersion(self, p, int(p.name)) for p in version_dirs]

        if any(p.is_file() for p in self.directory.iterdir()):
            return [ArticleVersion(self, self.directory, 1)]

        logger.debug(f"No versions found in {self.directory}")
        return []

    def issue_files(self) -> FileSetResolver:
        """Files of the issue directory, used to locate the issue cover."""
        return FileSetResolver(
            self.issue_directory, self.cover_filename, self.image_extensions
        )


class ArticleVersion:
    """One revision of an article and the files that make it up.

    Attributes:
        entry: The owning article entry
        directory: Directory holding the version files
        version: Version number
        files: Classified files of the version directory
    """

    def __init__(self, entry: ArticleEntry, directory: Path, version: int):
        self.entry = entry
        self.directory = Path(directory)
        self.version = version
        self.files = FileSetResolver(
            self.directory, entry.cover_filename, entry.image_extensions
        )

    @property
    def label(self) -> str:
        return f"{self.entry.label} (version {self.version})"

    def __repr__(self) -> str:
        return f"ArticleVersion({self.entry.label!r}, version={self.version})"
