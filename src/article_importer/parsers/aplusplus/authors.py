"""Author extraction from A++ author groups."""

from lxml import etree

from article_importer.parsers.capabilities import AuthorExtractor
from schemas import Author

AUTHOR_GROUP = "Journal/Volume/Issue/Article/ArticleHeader/AuthorGroup"


class AplusplusAuthorExtractor(AuthorExtractor):
    """Reads ``AuthorGroup/Author`` elements into authors."""

    def extract(self) -> list[Author]:
        document = self.parser.document
        return [self._author(node) for node in document.select(f"{AUTHOR_GROUP}/Author")]

    def _author(self, node: etree._Element) -> Author:
        document = self.parser.document
        locale = self.parser.get_locale()

        given, family = "", ""
        name = document.select_first("AuthorName", node)
        if name is not None:
            given_names = [document.select_text(".", n) for n in document.select("GivenName", name)]
            given = " ".join(n for n in given_names if n)
            family_parts = [
                document.select_text("Particle", name),
                document.select_text("FamilyName", name),
            ]
            family = " ".join(p for p in family_parts if p)
        if family and not given:
            given, family = family, ""
        elif not given:
            given = self.parser.context.localized_name(locale)

        affiliation = ""
        affiliation_ids = node.get("AffiliationIDS", "").split()
        affiliation_id = node.get("CorrespondingAffiliationID") or next(iter(affiliation_ids), "")
        if affiliation_id:
            affiliation = document.select_text(
                f"{AUTHOR_GROUP}/Affiliation[@ID=$id]/OrgName", id=affiliation_id
            )

        return Author(
            given_name={locale: given},
            family_name={locale: family} if family else {},
            email=document.select_text("Contact/Email", node) or None,
            url=document.select_text("Contact/URL", node) or None,
            affiliation={locale: affiliation} if affiliation else {},
        )
