"""HTML Transformer for rendering JATS full text as HTML galleys.

Renders the ``<body>`` of a JATS article through a Jinja2 template, next
to the metadata file. Articles whose sections are written in several
languages get one HTML file per language.
"""

import copy
import logging
import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, Template
from lxml import etree

from article_importer.dates import date_from_parts
from article_importer.parsers.document import XML_LANG, XMLDocument

from .filters import FILTERS
from .jats_markup import ABSTRACT_TAGS, convert_tags, inner_html, plain_text, to_html

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "resources" / "templates"


def _remove(node: etree._Element) -> None:
    """Remove an element, keeping its tail text in place."""
    parent = node.getparent()
    if parent is None:
        return
    if node.tail:
        previous = node.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + node.tail
        else:
            parent.text = (parent.text or "") + node.tail
    parent.remove(node)


def _unwrap(node: etree._Element) -> None:
    """Replace an element with its text content."""
    text = "".join(node.itertext()) + (node.tail or "")
    parent = node.getparent()
    if parent is None:
        return
    previous = node.getprevious()
    if previous is not None:
        previous.tail = (previous.tail or "") + text
    else:
        parent.text = (parent.text or "") + text
    parent.remove(node)


class JatsHTMLTransformer:
    """Render JATS articles to standalone HTML files.

    The JatsHTMLTransformer:
    1. Detects the languages of the article body
    2. For each language, drops the sections written in other languages
    3. Swaps in the translated title when one exists
    4. Drops cross references to missing targets
    5. Renders the article through a Jinja2 template

    Attributes:
        template_name: Name of the Jinja2 template file
        templates_dir: Directory containing the template
    """

    def __init__(
        self,
        template_name: str = "article.html.j2",
        templates_dir: Path | None = None,
    ):
        """Initialize the HTML transformer.

        Args:
            template_name: Name of the Jinja2 template file
            templates_dir: Directory containing templates (default: packaged templates)
        """
        self.template_name = template_name
        self.templates_dir = templates_dir or TEMPLATES_DIR

        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
        )
        for name, func in FILTERS.items():
            self._env.filters[name] = func

    def languages(self, document: XMLDocument, default_lang: str) -> list[str]:
        """Languages of the article body, the document language first."""
        langs = [document.language or default_lang]
        for sec in document.select("body//sec[@xml:lang]"):
            lang = sec.get(XML_LANG)
            if lang and lang not in langs:
                langs.append(lang)
        return langs

    def transform(self, document: XMLDocument, metadata_file: Path, default_lang: str) -> list[Path]:
        """Render the article body to HTML files next to the metadata file.

        Args:
            document: Parsed JATS document
            metadata_file: The JATS file the document was loaded from
            default_lang: Language used when the article declares none

        Returns:
            Paths of the written HTML files, empty when there is no body
        """
        if not document.exists("body"):
            logger.debug(f"No full text in {metadata_file.name}")
            return []

        template = self._env.get_template(self.template_name)
        langs = self.languages(document, default_lang)
        multilingual = len(langs) > 1

        paths = []
        for lang in langs:
            root = copy.deepcopy(document.root)
            if multilingual:
                self._filter_language(root, lang, langs)
            html_content = self._render(root, lang, template)

            suffix = f".{lang}.html" if multilingual else ".html"
            path = metadata_file.parent / f"{metadata_file.stem}{suffix}"
            path.write_text(html_content, encoding="utf-8")
            logger.debug(f"Wrote HTML full text {path.name}")
            paths.append(path)

        return paths

    def _filter_language(self, root: etree._Element, lang: str, langs: list[str]) -> None:
        """Drop body sections and footnotes written in other languages."""
        is_default = lang == langs[0]
        doomed = root.xpath("body//sec[@xml:lang!=$lang]", lang=lang)
        if not is_default:
            doomed += root.xpath("body//sec[not(@xml:lang)]")

        fn_groups = root.xpath("back/fn-group")
        if len(fn_groups) == len(langs):
            doomed += root.xpath("back/fn-group[@xml:lang!=$lang]", lang=lang)
            if not is_default:
                doomed += root.xpath("back/fn-group[not(@xml:lang)]")

        for node in doomed:
            if node.getparent() is not None:
                _remove(node)

    def _render(self, root: etree._Element, lang: str, template: Template) -> str:
        self._merge_labels(root)
        self._drop_invalid_xrefs(root)
        title, subtitle = self._titles(root, lang)

        return template.render(
            lang=lang,
            title=title,
            subtitle=subtitle,
            journal_title=plain_text(self._first(root, "front/journal-meta//journal-title")),
            authors=self._authors(root),
            doi=plain_text(self._first(root, "front/article-meta/article-id[@pub-id-type='doi']")),
            published=self._published(root),
            abstract=self._abstract(root, lang),
            body=to_html(self._first(root, "body")),
            footnotes="".join(to_html(fn) for fn in root.xpath("back/fn-group/fn")),
            references=[
                text
                for text in (plain_text(ref) for ref in root.xpath("back/ref-list/ref"))
                if text
            ],
        )

    def _first(self, root: etree._Element, path: str, **variables) -> etree._Element | None:
        nodes = root.xpath(path, **variables)
        return nodes[0] if nodes else None

    def _merge_labels(self, root: etree._Element) -> None:
        """Move section labels ("1.2") into the following title."""
        for label in root.xpath("body//sec//label"):
            title = label.getnext()
            if title is None or etree.QName(title).localname != "title":
                continue
            title.text = f"{plain_text(label)} {title.text or ''}"
            _remove(label)

    def _drop_invalid_xrefs(self, root: etree._Element) -> None:
        ids = set(root.xpath("//@id"))
        for xref in root.xpath("//xref"):
            rid = (xref.get("rid") or "").split()
            if rid and rid[0] not in ids:
                logger.warning(f"Dropped invalid xref to {rid[0]}")
                _unwrap(xref)

    def _titles(self, root: etree._Element, lang: str) -> tuple[str, str]:
        group = self._first(root, "front/article-meta/title-group")
        if group is None:
            return "", ""
        title = inner_html(self._first(group, "article-title"), skip=("xref",))
        subtitle = inner_html(self._first(group, "subtitle"), skip=("xref",))
        title_lang = self._first(group, "article-title/@xml:lang")
        if title_lang is not None and title_lang != lang:
            translated = self._first(group, "trans-title-group[@xml:lang=$lang]", lang=lang)
            if translated is not None:
                title = inner_html(self._first(translated, "trans-title"), skip=("xref",)) or title
                subtitle = inner_html(self._first(translated, "trans-subtitle"), skip=("xref",)) or subtitle
        return title, subtitle

    def _authors(self, root: etree._Element) -> list[dict]:
        authors = []
        for contrib in root.xpath("front/article-meta/contrib-group/contrib"):
            name = self._first(contrib, "name|string-name")
            given = plain_text(self._first(name, "given-names")) if name is not None else ""
            surname = plain_text(self._first(name, "surname")) if name is not None else ""
            affiliations = []
            biography = ""
            for xref in contrib.xpath("xref"):
                rid = xref.get("rid", "")
                ref_type = xref.get("ref-type")
                if ref_type == "aff":
                    aff = self._first(root, "//aff[@id=$rid]", rid=rid)
                    text = re.sub(r"\s+([,.])", r"\1", plain_text(aff))
                    if text:
                        affiliations.append(text)
                elif ref_type == "fn":
                    fn = self._first(root, "back/fn-group/fn[@id=$rid]", rid=rid)
                    biography = inner_html(fn, skip=("label",))
            full_name = " ".join(part for part in (given, surname) if part)
            if full_name:
                authors.append(
                    {"name": full_name, "affiliations": affiliations, "biography": biography}
                )
        return authors

    def _published(self, root: etree._Element):
        node = self._first(root, "front/article-meta/pub-date")
        if node is None:
            return None
        return date_from_parts(
            plain_text(self._first(node, "year")),
            plain_text(self._first(node, "month")),
            plain_text(self._first(node, "day")),
        )

    def _abstract(self, root: etree._Element, lang: str) -> str:
        node = self._first(
            root,
            "front/article-meta/abstract[@xml:lang=$lang]"
            "|front/article-meta/trans-abstract[@xml:lang=$lang]",
            lang=lang,
        )
        if node is None:
            node = self._first(root, "front/article-meta/abstract")
        return convert_tags(node, ABSTRACT_TAGS).strip()
