"""Metadata parsers and the dispatcher choosing between them.

Parsers are registered by name. The configured names decide which
parsers are tried and in which order.
"""

from .aplusplus import AplusplusParser
from .base import BaseParser
from .capabilities import (
    AuthorExtractor,
    IssueResolver,
    MatchResult,
    PublicationBuilder,
    SectionResolver,
)
from .dispatcher import DispatchState, DoctypeDispatcher
from .document import DocType, XMLDocument
from .jats import JatsParser

PARSERS: dict[str, type[BaseParser]] = {
    AplusplusParser.NAME: AplusplusParser,
    JatsParser.NAME: JatsParser,
}

__all__ = [
    "AplusplusParser",
    "AuthorExtractor",
    "BaseParser",
    "DispatchState",
    "DocType",
    "DoctypeDispatcher",
    "IssueResolver",
    "JatsParser",
    "MatchResult",
    "PARSERS",
    "PublicationBuilder",
    "SectionResolver",
    "XMLDocument",
]
