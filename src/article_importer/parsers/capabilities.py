"""Capability interfaces implemented by the dialect parsers.

A dialect parser combines these on top of BaseParser. Author extraction is
delegated to a separate AuthorExtractor object owned by the parser.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from schemas import Author, Issue, Publication, Section

if TYPE_CHECKING:
    from .base import BaseParser


@dataclass(frozen=True)
class MatchResult:
    """Outcome of probing a document with a parser.

    Attributes:
        matched: Whether the parser understands the document
        reason: What matched, or why nothing did
    """

    matched: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.matched


class IssueResolver(ABC):
    @abstractmethod
    def get_issue(self) -> Issue:
        """Resolve or create the issue the article belongs to."""

    @abstractmethod
    def get_issue_publication_date(self) -> date | None:
        """Publication date of the issue as declared in the metadata."""


class SectionResolver(ABC):
    @abstractmethod
    def get_section(self) -> Section:
        """Resolve or create the section the article is filed under."""


class PublicationBuilder(ABC):
    @abstractmethod
    def get_publication(self) -> Publication:
        """Build, store and publish the publication of the version."""

    @abstractmethod
    def get_public_ids(self) -> dict[str, str]:
        """Public identifiers of the article by type (e.g., "publisher-id", "doi")."""

    @abstractmethod
    def get_publication_date(self) -> date:
        """Publication date of the article.

        Raises:
            MissingPublicationDateError: If no date can be determined
        """

    @abstractmethod
    def get_date_submitted(self) -> date:
        """Date the article was received."""


class AuthorExtractor(ABC):
    """Reads the contributors of a document into unsaved Author records.

    Attributes:
        parser: The parser whose document and locale the extractor uses
    """

    def __init__(self, parser: "BaseParser"):
        self.parser = parser

    @abstractmethod
    def extract(self) -> list[Author]:
        """Return the authors in document order, without ids or sequence."""
