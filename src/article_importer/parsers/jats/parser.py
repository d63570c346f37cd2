"""Parser for JATS article metadata."""

import logging
import re
import string
import unicodedata
from datetime import date, timedelta
from typing import Any

from lxml import etree

from article_importer.exceptions import MissingPublicationDateError, MissingTitleError
from article_importer.parsers.base import BaseParser
from article_importer.parsers.capabilities import MatchResult
from article_importer.parsers.document import DocType, XMLDocument, lang_of
from article_importer.transformers.jats_markup import ABSTRACT_TAGS, convert_tags, plain_text
from schemas import Category, Issue, Publication, Section

from .authors import JatsAuthorExtractor

logger = logging.getLogger(__name__)

JATS_DOCTYPES = (
    DocType(
        "article",
        "-//EDP//DTD EDP Publishing JATS v1.0 20130606//EN",
        "JATS-edppublishing1.dtd",
    ),
    DocType(
        "article",
        "-//NLM//DTD Journal Archiving with OASIS Tables v3.0 20080202//EN",
        "http://dtd.nlm.nih.gov/archiving/3.0/archive-oasis-article3.dtd",
    ),
    DocType(
        "article",
        "-//NLM//DTD JATS (Z39.96) Journal Publishing DTD v1.2 20190208//EN",
        "http://jats.nlm.nih.gov/publishing/1.2/JATS-journalpublishing1.dtd",
    ),
)

ELECTRONIC_PUB_TYPES = ("given-online-pub", "epub")
SECONDARY_CATEGORY_LOCALE = "en"


def category_path(name: str, locale: str) -> str:
    """Build the URL path of a category.

    Examples:
        >>> category_path("Santé Publique", "fr_CA")
        'sante-publique-fr'
    """
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"\s+", "-", ascii_name.strip().lower())
    slug = re.sub(r"[^a-z0-9\-_.]", "", slug)
    return f"{slug}-{locale[:2]}"


class JatsParser(BaseParser):
    """Imports article versions described by JATS metadata.

    Documents are recognized by their DOCTYPE. Besides the metadata file,
    the parser renders the JATS body to HTML (when enabled) and stores the
    XML itself with the images it references.

    An optional issue metadata file ``<issue>/<issue>.xml`` provides the
    issue title, date and the section of each article (matched by DOI).
    """

    NAME = "jats"
    DATE_PARTS = ("year", "month", "day")
    author_extractor_class = JatsAuthorExtractor

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._issue_meta: dict[str, Any] | None = None

    @classmethod
    def probe(cls, document: XMLDocument) -> MatchResult:
        doctype = document.doctype
        if doctype in JATS_DOCTYPES:
            return MatchResult(True, f"DOCTYPE {doctype.public_id}")
        return MatchResult(False, f"Unsupported DOCTYPE {doctype.public_id or doctype.name}")

    # Issue

    def issue_meta(self) -> dict[str, Any]:
        """Read the issue metadata file, when the issue directory has one."""
        if self._issue_meta is not None:
            return self._issue_meta

        self._issue_meta = {"date": None, "title": "", "section": ""}
        path = self.entry.issue_directory / f"{self.entry.issue}.xml"
        if not path.is_file():
            return self._issue_meta

        meta = XMLDocument.load(path)
        doi = self.get_public_ids().get("doi")
        self._issue_meta["date"] = self.date_from_node(meta.select_first("issue-meta/pub-date"))
        self._issue_meta["title"] = meta.select_text("issue-meta/issue-title")
        if doi:
            self._issue_meta["section"] = meta.select_text(
                "//article-id[.=$doi]/ancestor::issue-subject-group/issue-subject-title", doi=doi
            )
        logger.debug(f"Read issue metadata from {path.name}")
        return self._issue_meta

    def get_issue(self) -> Issue:
        volume_text = self.document.select_text("front/article-meta/volume")
        volume = int(volume_text) if volume_text.isdigit() else self.entry.volume
        number = self.document.select_text("front/article-meta/issue") or self.entry.issue

        def build() -> Issue:
            title = self.issue_meta()["title"]
            return self.build_issue(
                volume,
                number,
                self.get_issue_publication_date(),
                title={self.get_locale(): title} if title else {},
                show_title=True,
            )

        return self.resolve_issue(volume, number, build)

    def get_issue_publication_date(self) -> date:
        collection = self.document.select_first("front/article-meta/pub-date[@pub-type='collection']")
        return (
            self.issue_meta()["date"]
            or self.date_from_node(collection)
            or self.get_publication_date()
        )

    # Section

    def get_section(self) -> Section:
        if self._section is not None:
            return self._section

        name = ""
        locale = self.get_locale()
        if self.configuration.category_as_section:
            node = self.document.select_first("front/article-meta/article-categories/subj-group")
            if node is not None:
                name = string.capwords(self.document.select_text("subject", node).lower())
                locale = self.get_locale(lang_of(node))

        name = name or self.issue_meta()["section"] or self.configuration.default_section_name
        return self.resolve_section(name, locale)

    # Publication

    def get_public_ids(self) -> dict[str, str]:
        ids = {}
        for node in self.document.select("front/article-meta/article-id"):
            id_type = node.get("pub-id-type", "").lower()
            value = plain_text(node)
            if id_type and value:
                ids[id_type] = value
        return ids

    def get_publication_date(self) -> date:
        nodes = self.document.select("front/article-meta/pub-date")
        node = next(
            (
                n
                for n in nodes
                if n.get("pub-type") in ELECTRONIC_PUB_TYPES
                or n.get("publication-format") == "electronic"
            ),
            nodes[-1] if nodes else None,
        )
        published = self.date_from_node(node)
        if published is None:
            raise MissingPublicationDateError()
        return published

    def get_date_submitted(self) -> date:
        received = self.document.select_first(
            "front/article-meta/history/date[@date-type='received']"
        )
        return self.date_from_node(received) or self.get_publication_date() + timedelta(days=1)

    def populate_publication(self, publication: Publication) -> None:
        first_page = self.document.select_text("front/article-meta/fpage")
        last_page = self.document.select_text("front/article-meta/lpage")
        if first_page:
            publication.pages = f"{first_page}-{last_page}" if last_page else first_page

        self.set_titles(publication)
        self.set_abstracts(publication)
        self.set_copyright(publication)
        self.set_citations(publication)
        self.set_keywords(publication)
        self.set_categories(publication)

    def _clean_title(self, node: etree._Element | None) -> str:
        """Title text without its cross references (footnote markers)."""
        if node is None:
            return ""
        node = etree.fromstring(etree.tostring(node))
        for xref in node.xpath(".//xref"):
            parent = xref.getparent()
            previous = xref.getprevious()
            if xref.tail:
                if previous is not None:
                    previous.tail = (previous.tail or "") + xref.tail
                else:
                    parent.text = (parent.text or "") + xref.tail
            parent.remove(xref)
        return plain_text(node)

    def set_titles(self, publication: Publication) -> None:
        """Set the titles and subtitles, translations included.

        Raises:
            MissingTitleError: If the article has no title
        """
        group = self.document.select_first("front/article-meta/title-group")
        if group is not None:
            node = self.document.select_first("article-title", group)
            if node is not None:
                title = self._clean_title(node)
                if title:
                    publication.title[self.get_locale(lang_of(node))] = title

            node = self.document.select_first("subtitle", group)
            if node is not None:
                subtitle = self._clean_title(node)
                if subtitle:
                    publication.subtitle[self.get_locale(lang_of(node))] = subtitle

            for node in self.document.select("trans-title-group", group):
                locale = self.get_locale(lang_of(node))
                title = self._clean_title(self.document.select_first("trans-title", node))
                if title:
                    publication.title[locale] = title
                subtitle = self._clean_title(self.document.select_first("trans-subtitle", node))
                if subtitle:
                    publication.subtitle[locale] = subtitle

        if not publication.title:
            raise MissingTitleError()

    def set_abstracts(self, publication: Publication) -> None:
        for node in self.document.select("front/article-meta/abstract|front/article-meta/trans-abstract"):
            value = convert_tags(node, ABSTRACT_TAGS).strip()
            if value:
                publication.abstract[self.get_locale(lang_of(node))] = value

    def set_copyright(self, publication: Publication) -> None:
        locale = self.get_locale()
        holder = self.document.select_text("front/article-meta/permissions/copyright-holder")
        statement = self.document.select_text("front/article-meta/permissions/copyright-statement")
        if holder:
            publication.copyright_holder[locale] = holder
        if statement:
            publication.copyright_notice[locale] = statement
        publication.copyright_year = (
            self.document.select_text("front/article-meta/permissions/copyright-year")
            or str(self.get_publication_date().year)
        )
        publication.license_url = (
            self.document.select_text("front/article-meta/permissions/license/@xlink:href") or None
        )

    def set_citations(self, publication: Publication) -> None:
        citations = [
            text for text in (plain_text(ref) for ref in self.document.select("back/ref-list/ref")) if text
        ]
        if citations:
            publication.citations_raw = "\n".join(citations)

    def set_keywords(self, publication: Publication) -> None:
        for group in self.document.select("front/article-meta/kwd-group"):
            locale = self.get_locale(lang_of(group))
            for node in self.document.select("kwd", group):
                keyword = plain_text(node)
                if keyword:
                    publication.keywords.setdefault(locale, []).append(keyword)

    def set_categories(self, publication: Publication) -> None:
        """Link the subject groups as categories, creating missing ones.

        A subject may carry two names separated by a slash
        ("Santé / Health"); the second one is the English title.
        """
        for node in self.document.select("front/article-meta/article-categories/subj-group"):
            subject = self.document.select_text("subject", node)
            if not subject:
                continue
            locale = self.get_locale(lang_of(node))
            names = re.split(r"\s*/\s*", subject, maxsplit=1)
            titles = {locale: names[0]}
            if len(names) > 1:
                titles[self.get_locale(SECONDARY_CATEGORY_LOCALE)] = names[1]
            path = category_path(names[0], locale)

            def build(titles=titles, path=path) -> Category:
                return Category(context_id=self.context.id, path=path, title=titles)

            category, _created = self.cache.resolve_or_create(
                "category", path, build, self.tracker
            )
            if category.id not in publication.category_ids:
                publication.category_ids.append(category.id)

    # Galleys

    def generate_html(self) -> None:
        """Render the JATS body next to the metadata file.

        Delivered HTML renditions are imported as they are and never
        overwritten.
        """
        if self.html_transformer is None or not self.configuration.generate_html:
            return
        if not self.document.exists("body"):
            return
        if self.files.html_files:
            logger.debug(f"{self.version.label} has delivered HTML, not rendering the body")
            return
        paths = self.html_transformer.transform(
            self.document, self.files.metadata_file, self.locales.default_locale
        )
        if paths:
            self.files.reload()
            logger.debug(f"Rendered {len(paths)} HTML renditions for {self.version.label}")

    def add_galleys(self, publication: Publication) -> None:
        self.generate_html()
        seq = self.add_pdf_galley(publication)
        self.add_jats_file(publication)
        seq = self.add_html_galleys(publication, seq + 1)
        self.add_supplementary_galleys(publication, seq + 1)
