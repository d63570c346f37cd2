"""Classification of the files of an article version by role."""

import logging
import re
from pathlib import Path

from article_importer.exceptions import (
    UnexpectedCoverCountError,
    UnexpectedGalleyCountError,
    UnexpectedMetadataCountError,
)

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_EXTENSIONS = ("tif", "tiff", "jpg", "jpeg", "png")
SUPPLEMENTARY_DIR = "supplementary"

METADATA_PATTERN = re.compile(r"\.xml$", re.IGNORECASE)
GALLEY_PATTERN = re.compile(r"\.pdf$", re.IGNORECASE)
HTML_PATTERN = re.compile(r"\.html?$", re.IGNORECASE)


class FileSetResolver:
    """Classifies the files of a directory into metadata, galleys and assets.

    Classification runs over a snapshot of the directory listing, taken on
    first access. Call ``reload()`` after writing new files into the
    directory (e.g., generated HTML renditions) to refresh the snapshot.

    Attributes:
        directory: Directory being classified
        cover_filename: File stem of cover images (e.g., "cover")
        image_extensions: Accepted cover image extensions, lower-case
    """

    def __init__(
        self,
        directory: Path,
        cover_filename: str = "cover",
        image_extensions: tuple[str, ...] | list[str] = DEFAULT_IMAGE_EXTENSIONS,
    ):
        self.directory = Path(directory)
        self.cover_filename = cover_filename
        self.image_extensions = tuple(ext.lower() for ext in image_extensions)
        self._files: list[Path] | None = None

    @property
    def files(self) -> list[Path]:
        """Regular files of the directory, sorted by name."""
        if self._files is None:
            self._files = sorted(
                (p for p in self.directory.iterdir() if p.is_file()),
                key=lambda p: p.name,
            )
        return self._files

    def reload(self) -> None:
        """Discard the directory snapshot."""
        self._files = None
        logger.debug(f"Reloaded file listing of {self.directory}")

    def _matching(self, pattern: re.Pattern) -> list[Path]:
        return [p for p in self.files if pattern.search(p.name)]

    @property
    def metadata_file(self) -> Path:
        """The XML metadata file.

        Raises:
            UnexpectedMetadataCountError: If there is not exactly one XML file
        """
        paths = self._matching(METADATA_PATTERN)
        if len(paths) != 1:
            raise UnexpectedMetadataCountError(len(paths))
        return paths[0]

    @property
    def submission_file(self) -> Path | None:
        """The PDF galley, None when the version has none.

        Raises:
            UnexpectedGalleyCountError: If there is more than one PDF file
        """
        paths = self._matching(GALLEY_PATTERN)
        if len(paths) > 1:
            raise UnexpectedGalleyCountError(len(paths))
        return paths[0] if paths else None

    @property
    def html_files(self) -> list[Path]:
        return self._matching(HTML_PATTERN)

    @property
    def cover_file(self) -> Path | None:
        """The cover image, None when the directory has none.

        Raises:
            UnexpectedCoverCountError: If there is more than one cover image
        """
        stem = self.cover_filename.lower()
        paths = [
            p
            for p in self.files
            if p.stem.lower() == stem
            and p.suffix[1:].lower() in self.image_extensions
        ]
        if len(paths) > 1:
            raise UnexpectedCoverCountError(len(paths))
        return paths[0] if paths else None

    @property
    def supplementary_files(self) -> list[Path]:
        """Files of the supplementary directory next to the metadata file."""
        supplementary_dir = self.metadata_file.parent / SUPPLEMENTARY_DIR
        if not supplementary_dir.is_dir():
            return []
        return sorted(
            (p for p in supplementary_dir.iterdir() if p.is_file()),
            key=lambda p: p.name,
        )
