"""Parsed XML metadata documents and XPath helpers."""

import logging
from dataclasses import dataclass
from pathlib import Path

from lxml import etree

from article_importer.exceptions import FailedToParseXMLDocumentError

logger = logging.getLogger(__name__)

NAMESPACES = {"xlink": "http://www.w3.org/1999/xlink"}
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
XLINK_HREF = "{http://www.w3.org/1999/xlink}href"


@dataclass(frozen=True)
class DocType:
    """A DOCTYPE declaration: root name, public identifier and system identifier."""

    name: str | None
    public_id: str | None
    system_id: str | None


class XMLDocument:
    """A metadata file parsed once and queried by every parser probe.

    XPath expressions are evaluated relative to the root element unless a
    context element is given, and the ``xlink`` prefix is always bound.

    Attributes:
        path: File the document was loaded from
        tree: Parsed lxml tree
    """

    def __init__(self, tree: etree._ElementTree, path: Path | None = None):
        self.tree = tree
        self.path = path

    @classmethod
    def load(cls, path: Path) -> "XMLDocument":
        """Parse a metadata file without fetching its DTD.

        Raises:
            FailedToParseXMLDocumentError: If the file is not well-formed XML
        """
        parser = etree.XMLParser(
            load_dtd=False,
            no_network=True,
            resolve_entities=False,
            remove_comments=True,
        )
        try:
            tree = etree.parse(str(path), parser)
        except (etree.XMLSyntaxError, OSError) as e:
            raise FailedToParseXMLDocumentError(
                f"Failed to parse XML document {Path(path).name}: {e}"
            ) from e
        logger.debug(f"Loaded XML document {path}")
        return cls(tree, Path(path))

    @classmethod
    def from_string(cls, xml: str | bytes) -> "XMLDocument":
        if isinstance(xml, str):
            xml = xml.encode("utf-8")
        parser = etree.XMLParser(load_dtd=False, no_network=True, resolve_entities=False)
        try:
            root = etree.fromstring(xml, parser)
        except etree.XMLSyntaxError as e:
            raise FailedToParseXMLDocumentError(f"Failed to parse XML document: {e}") from e
        return cls(root.getroottree())

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()

    @property
    def doctype(self) -> DocType:
        docinfo = self.tree.docinfo
        return DocType(
            name=docinfo.root_name if docinfo.doctype else None,
            public_id=docinfo.public_id,
            system_id=docinfo.system_url,
        )

    @property
    def language(self) -> str:
        return self.root.get(XML_LANG, "")

    def evaluate(self, path: str, context: etree._Element | None = None, **variables):
        """Evaluate ``path``; keyword arguments are bound as XPath variables ($name)."""
        node = self.root if context is None else context
        return node.xpath(path, namespaces=NAMESPACES, **variables)

    def select(
        self, path: str, context: etree._Element | None = None, **variables
    ) -> list[etree._Element]:
        nodes = self.evaluate(path, context, **variables)
        return [n for n in nodes if isinstance(n, etree._Element)]

    def select_first(
        self, path: str, context: etree._Element | None = None, **variables
    ) -> etree._Element | None:
        nodes = self.select(path, context, **variables)
        return nodes[0] if nodes else None

    def select_text(self, path: str, context: etree._Element | None = None, **variables) -> str:
        """Return the trimmed string value of the first node matching ``path``."""
        value = self.evaluate(f"string({path})", context, **variables)
        return str(value).strip()

    def exists(self, path: str, context: etree._Element | None = None) -> bool:
        return self.select_first(path, context) is not None


def lang_of(node: etree._Element | None) -> str:
    """The xml:lang attribute of a node, empty when absent."""
    if node is None:
        return ""
    return node.get(XML_LANG, "")
