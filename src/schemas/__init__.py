"""Schema definitions for Article Importer."""

from .category import Category
from .context import Context, User
from .issue import Issue
from .report import ImportReport, VersionOutcome
from .section import Section
from .submission import (
    Author,
    CoverImage,
    Doi,
    Galley,
    Publication,
    PublicFile,
    Submission,
    SubmissionFile,
)

__all__ = [
    "Author",
    "Category",
    "Context",
    "CoverImage",
    "Doi",
    "Galley",
    "ImportReport",
    "Issue",
    "Publication",
    "PublicFile",
    "Section",
    "Submission",
    "SubmissionFile",
    "User",
    "VersionOutcome",
]
