"""Jinja2 filters for HTML template rendering.

These filters are used in article.html.j2 to format article metadata.
"""

import re
from datetime import date, datetime


def format_date(value: date | str | None) -> str:
    """Format a date as a human-readable string.

    Args:
        value: A date, or an ISO date string ("YYYY-MM-DD")

    Returns:
        Formatted date string like "January 29, 2026"

    Examples:
        >>> format_date("2026-01-09")
        'January 9, 2026'
    """
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            return value
    return value.strftime("%B %d, %Y").replace(" 0", " ")


def format_authors(authors: list) -> str:
    """Format a list of author dicts as a comma-separated string.

    Args:
        authors: List of dicts with a 'name' key

    Returns:
        Comma-separated author names

    Examples:
        >>> format_authors([{"name": "Ada Lovelace"}, {"name": "Alan Turing"}])
        'Ada Lovelace, Alan Turing'
    """
    if not authors:
        return ""
    return ", ".join(a["name"] for a in authors if a.get("name"))


def doi_url(doi: str | None) -> str:
    """Resolver URL of a DOI.

    Examples:
        >>> doi_url("10.1000/xyz123")
        'https://doi.org/10.1000/xyz123'
    """
    if not doi:
        return ""
    doi = re.sub(r"^(https?://(dx\.)?doi\.org/|doi:)", "", doi.strip(), flags=re.IGNORECASE)
    return f"https://doi.org/{doi}"


# Elements removed together with their content.
EMBEDDED_ELEMENTS = ("script", "iframe", "object", "embed")
EVENT_ATTRIBUTE = re.compile(r"""\s+on[a-z]+\s*=\s*("[^"]*"|'[^']*'|[^\s>]+)""", re.IGNORECASE)
SCRIPT_URL = re.compile(r"""(href|src)\s*=\s*(["'])\s*javascript:[^"']*\2""", re.IGNORECASE)


def clean_content(html: str) -> str:
    """Sanitize converted article HTML before it is written as a galley.

    Embedded elements are removed together with their content, event
    handler attributes are dropped and ``javascript:`` links are emptied.

    Examples:
        >>> clean_content('<p>Hello</p><script>alert("x")</script>')
        '<p>Hello</p>'
        >>> clean_content('<a href="javascript:go()" onclick="go()">x</a>')
        '<a href="">x</a>'
    """
    if not html:
        return ""

    for name in EMBEDDED_ELEMENTS:
        html = re.sub(rf"<{name}\b[^>]*>.*?</{name}>", "", html, flags=re.DOTALL | re.IGNORECASE)
        html = re.sub(rf"<{name}\b[^>]*/?>", "", html, flags=re.IGNORECASE)

    html = re.sub(r"<[^>]+>", lambda tag: EVENT_ATTRIBUTE.sub("", tag.group(0)), html)
    html = SCRIPT_URL.sub(r'\1=\2\2', html)

    return html.strip()


# Registry of all filters for easy registration with Jinja2
FILTERS = {
    "format_date": format_date,
    "format_authors": format_authors,
    "doi_url": doi_url,
    "clean_content": clean_content,
}
