"""Conversion of JATS and A++ inline markup to HTML.

Metadata fields such as abstracts and author notes carry publisher markup
(``<italic>``, ``<Emphasis>``, ``<xref>``). The functions here walk an
element and rebuild its content as HTML: text is escaped and each element
is handed to a callback that decides how to wrap its converted content.
"""

from collections.abc import Callable
from html import escape

from lxml import etree

XLINK_HREF = "{http://www.w3.org/1999/xlink}href"

Callback = Callable[[etree._Element, str], str]

ABSTRACT_TAGS = {
    "title": "strong",
    "italic": "em",
    "sub": "sub",
    "sup": "sup",
    "p": "p",
}

INLINE_TAGS = {
    "p": "p",
    "italic": "em",
    "bold": "strong",
    "sub": "sub",
    "sup": "sup",
    "underline": "u",
    "monospace": "code",
    "list-item": "li",
    "disp-quote": "blockquote",
    "caption": "figcaption",
    "boxed-text": "aside",
    "preformat": "pre",
    "def-list": "dl",
    "term": "dt",
    "def": "dd",
    "table": "table",
    "thead": "thead",
    "tbody": "tbody",
    "tfoot": "tfoot",
    "tr": "tr",
}

ORDERED_LIST_TYPES = ("order", "alpha-lower", "alpha-upper", "roman-lower", "roman-upper")


def local_name(node: etree._Element) -> str:
    return etree.QName(node).localname


def render(node: etree._Element | None, callback: Callback) -> str:
    """Convert an element and its descendants, bottom-up.

    Args:
        node: Element to convert
        callback: Receives each element and its converted content, and
            returns the HTML that replaces the element

    Returns:
        The converted HTML, empty for a missing node
    """
    if node is None:
        return ""
    parts = [escape(node.text or "", quote=False)]
    for child in node:
        if isinstance(child.tag, str):
            parts.append(render(child, callback))
        parts.append(escape(child.tail or "", quote=False))
    return callback(node, "".join(parts))


def convert_tags(node: etree._Element | None, tag_map: dict[str, str]) -> str:
    """Convert the tags named in ``tag_map`` and strip every other tag.

    Examples:
        >>> from lxml import etree
        >>> node = etree.fromstring("<abstract><p>A <italic>b</italic> <x>c</x></p></abstract>")
        >>> convert_tags(node, ABSTRACT_TAGS)
        '<p>A <em>b</em> c</p>'
    """

    def wrap(element: etree._Element, content: str) -> str:
        tag = tag_map.get(local_name(element))
        return f"<{tag}>{content}</{tag}>" if tag else content

    return render(node, wrap)


def _attrs(**attributes: str | None) -> str:
    return "".join(
        f' {name.rstrip("_")}="{escape(value)}"'
        for name, value in attributes.items()
        if value
    )


def _section_level(node: etree._Element) -> int:
    depth = sum(1 for ancestor in node.iterancestors() if local_name(ancestor) == "sec")
    return min(depth + 1, 6)


def _to_html(node: etree._Element, content: str) -> str:
    name = local_name(node)
    node_id = node.get("id")

    if name in INLINE_TAGS:
        tag = INLINE_TAGS[name]
        return f"<{tag}{_attrs(id=node_id)}>{content}</{tag}>"
    if name == "sec":
        return f"<section{_attrs(id=node_id)}>{content}</section>"
    if name == "title":
        level = _section_level(node)
        return f"<h{level}>{content}</h{level}>"
    if name == "sc":
        return f'<span class="small-caps">{content}</span>'
    if name == "label":
        return f'<span class="label">{content}</span>'
    if name == "list":
        tag = "ol" if node.get("list-type", "") in ORDERED_LIST_TYPES else "ul"
        return f"<{tag}>{content}</{tag}>"
    if name in ("ext-link", "uri"):
        href = node.get(XLINK_HREF) or "".join(node.itertext()).strip()
        return f"<a{_attrs(href=href)}>{content}</a>"
    if name == "email":
        address = "".join(node.itertext()).strip()
        return f"<a{_attrs(href=f'mailto:{address}')}>{content}</a>"
    if name == "xref":
        rid = (node.get("rid") or "").split()
        href = f"#{rid[0]}" if rid else None
        return f'<a class="xref"{_attrs(href=href)}>{content}</a>'
    if name == "fig":
        return f"<figure{_attrs(id=node_id)}>{content}</figure>"
    if name in ("graphic", "inline-graphic"):
        href = node.get(XLINK_HREF)
        src = f"graphic/{href}" if href else None
        return f'<img{_attrs(src=src)} alt="">{content}'
    if name == "table-wrap":
        return f'<div class="table-wrap"{_attrs(id=node_id)}>{content}</div>'
    if name in ("th", "td"):
        spans = _attrs(colspan=node.get("colspan"), rowspan=node.get("rowspan"))
        return f"<{name}{spans}>{content}</{name}>"
    if name == "fn":
        return f'<div class="fn"{_attrs(id=node_id)}>{content}</div>'
    if name == "break":
        return "<br>"
    return content


def to_html(node: etree._Element | None) -> str:
    """Convert a JATS element (e.g., ``<body>``) to HTML."""
    return render(node, _to_html)


def inner_html(node: etree._Element | None, skip: tuple[str, ...] = ()) -> str:
    """Convert the children of an element, leaving the element itself out.

    Args:
        node: Element whose content to convert
        skip: Local names of child elements to drop (e.g., "label")
    """
    if node is None:
        return ""
    parts = [escape(node.text or "", quote=False)]
    for child in node:
        if isinstance(child.tag, str) and local_name(child) not in skip:
            parts.append(to_html(child))
        parts.append(escape(child.tail or "", quote=False))
    return "".join(parts).strip()


def plain_text(node: etree._Element | None) -> str:
    """Whitespace-normalized text content of an element."""
    if node is None:
        return ""
    return " ".join("".join(node.itertext()).split())
