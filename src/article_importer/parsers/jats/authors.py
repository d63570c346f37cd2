"""Author extraction from JATS contributor groups."""

import logging

from lxml import etree

from article_importer.parsers.capabilities import AuthorExtractor
from article_importer.transformers.jats_markup import inner_html, plain_text
from schemas import Author

logger = logging.getLogger(__name__)

CONTRIB_PATH = (
    "front/article-meta/contrib-group[@content-type='authors']/contrib"
    "|front/article-meta/contrib-group/contrib[@contrib-type='author']"
)


class JatsAuthorExtractor(AuthorExtractor):
    """Reads ``<contrib>`` elements into authors.

    Affiliations, corresponding emails and biographies are resolved
    through the contributor's ``<xref>`` elements.
    """

    def extract(self) -> list[Author]:
        document = self.parser.document
        return [self._author(node) for node in document.select(CONTRIB_PATH)]

    def _author(self, contrib: etree._Element) -> Author:
        document = self.parser.document
        locale = self.parser.get_locale()

        name = document.select_first("name|string-name", contrib)
        given = document.select_text("given-names", name) if name is not None else ""
        family = document.select_text("surname", name) if name is not None else ""
        if family and not given:
            given, family = family, ""
        elif not given:
            given = self.parser.context.localized_name(locale)

        email = document.select_text("email", contrib)
        affiliations = []
        biography = ""

        for xref in document.select("xref", contrib):
            rid = xref.get("rid", "")
            ref_type = xref.get("ref-type")
            if ref_type == "aff":
                affiliation = document.select_text(
                    "../aff[@id=$rid]//institution", contrib, rid=rid
                ) or document.select_text("front/article-meta/aff[@id=$rid]//institution", rid=rid)
                if affiliation:
                    affiliations.append(affiliation)
            elif ref_type == "corresp":
                email = email or document.select_text(
                    "front/article-meta/author-notes/corresp[@id=$rid]//email", rid=rid
                )
            elif ref_type == "fn":
                note = document.select_first("back/fn-group/fn[@id=$rid]", rid=rid)
                if note is None:
                    continue
                email = email or plain_text(document.select_first(".//email", note))
                biography = inner_html(note, skip=("label",))

        orcid = document.select_text("contrib-id[@contrib-id-type='orcid']", contrib)
        author = Author(
            given_name={locale: given},
            family_name={locale: family} if family else {},
            email=email or None,
            affiliation={locale: "; ".join(affiliations)} if affiliations else {},
            biography={locale: biography} if biography else {},
            orcid=orcid or None,
        )
        logger.debug(f"Extracted author {given} {family}".rstrip())
        return author
