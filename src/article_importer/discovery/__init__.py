"""Discovery of article entries and versions in an import directory."""

from .entry import ArticleEntry, ArticleVersion
from .file_set import DEFAULT_IMAGE_EXTENSIONS, FileSetResolver
from .iterator import ArticleIterator

__all__ = [
    "ArticleEntry",
    "ArticleIterator",
    "ArticleVersion",
    "DEFAULT_IMAGE_EXTENSIONS",
    "FileSetResolver",
]
