"""Parser for A++ article metadata."""

import logging
import string
from datetime import date, timedelta

from lxml import etree

from article_importer.exceptions import MissingPublicationDateError, MissingTitleError
from article_importer.parsers.base import BaseParser
from article_importer.parsers.capabilities import MatchResult
from article_importer.parsers.document import XMLDocument
from article_importer.transformers.jats_markup import local_name, render
from schemas import Issue, Publication, Section

from .authors import AplusplusAuthorExtractor

logger = logging.getLogger(__name__)

ARTICLE = "Journal/Volume/Issue/Article"
ARTICLE_INFO = f"{ARTICLE}/ArticleInfo"
ARTICLE_HEADER = f"{ARTICLE}/ArticleHeader"
ISSUE_HISTORY = "Journal/Volume/Issue/IssueInfo/IssueHistory"

ABSTRACT_TAGS = {
    "Emphasis": "em",
    "Subscript": "sub",
    "Superscript": "sup",
    "Para": "p",
}


def convert_abstract(abstract: etree._Element) -> str:
    """Convert an A++ abstract to HTML.

    The heading of the abstract itself ("Abstract") is dropped and inner
    headings become bold paragraphs.

    Examples:
        >>> from lxml import etree
        >>> node = etree.fromstring(
        ...     "<Abstract><Heading>Abstract</Heading><Para>A <Emphasis>b</Emphasis></Para></Abstract>"
        ... )
        >>> convert_abstract(node)
        '<p>A <em>b</em></p>'
    """

    def wrap(node: etree._Element, content: str) -> str:
        name = local_name(node)
        if name == "Heading":
            if node.getparent() is abstract:
                return ""
            return f"<p><strong>{content}</strong></p>"
        tag = ABSTRACT_TAGS.get(name)
        return f"<{tag}>{content}</{tag}>" if tag else content

    parts = []
    for child in abstract:
        if isinstance(child.tag, str):
            parts.append(render(child, wrap))
    return "".join(parts).strip()


class AplusplusParser(BaseParser):
    """Imports article versions described by A++ metadata.

    Documents are recognized structurally, by the presence of an
    ``ArticleTitle``. The issue is always the one named by the directory
    layout.
    """

    NAME = "aplusplus"
    DATE_PARTS = ("Year", "Month", "Day")
    author_extractor_class = AplusplusAuthorExtractor

    @classmethod
    def probe(cls, document: XMLDocument) -> MatchResult:
        if document.exists(f"{ARTICLE_INFO}/ArticleTitle"):
            return MatchResult(True, "A++ ArticleTitle found")
        return MatchResult(False, "No A++ ArticleTitle")

    def publication_locale(self) -> str:
        """The language of the first title."""
        node = self.document.select_first(f"{ARTICLE_INFO}/ArticleTitle")
        return self.get_locale(node.get("Language") if node is not None else None)

    # Issue

    def get_issue(self) -> Issue:
        volume, number = self.entry.volume, self.entry.issue

        def build() -> Issue:
            published = self.get_issue_publication_date() or self.get_publication_date()
            return self.build_issue(volume, number, published)

        return self.resolve_issue(volume, number, build)

    def get_issue_publication_date(self) -> date | None:
        return self.date_from_node(
            self.document.select_first(f"{ISSUE_HISTORY}/OnlineDate")
        ) or self.date_from_node(self.document.select_first(f"{ISSUE_HISTORY}/CoverDate"))

    # Section

    def get_section(self) -> Section:
        if self._section is not None:
            return self._section

        name = ""
        locale = self.get_locale()
        if self.configuration.category_as_section:
            node = self.document.select_first(f"{ARTICLE_INFO}/ArticleCategory")
            if node is not None:
                name = string.capwords(self.document.select_text(".", node).lower())
                locale = self.get_locale(node.get("Language"))

        return self.resolve_section(name or self.configuration.default_section_name, locale)

    # Publication

    def get_public_ids(self) -> dict[str, str]:
        entry = self.entry
        ids = {
            "publisher-id": self.document.select_text(f"{ARTICLE}/@ID")
            or f"{entry.volume}.{entry.issue}.{entry.article}.{self.version.version}"
        }
        doi = self.document.select_text(f"{ARTICLE_INFO}/ArticleDOI")
        if doi:
            ids["doi"] = doi
        return ids

    def get_publication_date(self) -> date:
        published = (
            self.date_from_node(self.document.select_first(f"{ARTICLE_INFO}/ArticleHistory/OnlineDate"))
            or self.get_issue_publication_date()
        )
        if published is None:
            raise MissingPublicationDateError()
        return published

    def get_date_submitted(self) -> date:
        registered = self.document.select_first(f"{ARTICLE_INFO}/ArticleHistory/RegistrationDate")
        return self.date_from_node(registered) or self.get_publication_date() + timedelta(days=1)

    def access_status(self) -> str:
        """Articles with any grant other than OpenAccess follow the issue's access."""
        restricted = self.document.evaluate(
            f"count({ARTICLE_INFO}/ArticleGrants/*[@Grant!='OpenAccess'])"
        )
        return "issue_default" if restricted > 0 else "open"

    def populate_publication(self, publication: Publication) -> None:
        publication.access_status = self.access_status()

        first_page = self.document.select_text(f"{ARTICLE_INFO}/ArticleFirstPage")
        last_page = self.document.select_text(f"{ARTICLE_INFO}/ArticleLastPage")
        if first_page:
            publication.pages = f"{first_page}-{last_page}" if last_page else first_page

        for node in self.document.select(f"{ARTICLE_INFO}/ArticleTitle"):
            title = self.document.select_text(".", node)
            if title:
                publication.title[self.get_locale(node.get("Language"))] = title
        if not publication.title:
            raise MissingTitleError()

        for node in self.document.select(f"{ARTICLE_INFO}/ArticleSubTitle"):
            subtitle = self.document.select_text(".", node)
            if subtitle:
                publication.subtitle[self.get_locale(node.get("Language"))] = subtitle

        for node in self.document.select(f"{ARTICLE_HEADER}/Abstract"):
            abstract = convert_abstract(node)
            if abstract:
                publication.abstract[self.get_locale(node.get("Language"))] = abstract

        holder = self.document.select_text(f"{ARTICLE_INFO}/ArticleCopyright/CopyrightHolderName")
        if holder:
            publication.copyright_holder[self.get_locale()] = holder
        publication.copyright_year = self.document.select_text(
            f"{ARTICLE_INFO}/ArticleCopyright/CopyrightYear"
        ) or str(self.get_publication_date().year)

        for group in self.document.select(f"{ARTICLE_HEADER}/KeywordGroup"):
            locale = self.get_locale(group.get("Language"))
            for node in self.document.select("Keyword", group):
                keyword = self.document.select_text(".", node)
                if keyword:
                    publication.keywords.setdefault(locale, []).append(keyword)
