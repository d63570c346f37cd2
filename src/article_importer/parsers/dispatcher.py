"""Selection of the parser that handles an article version."""

import logging
from enum import Enum

from article_importer.config import ImportContext
from article_importer.discovery import ArticleVersion
from article_importer.entities import EntityResolutionCache
from article_importer.exceptions import InvalidDocTypeError, NoSuitableParserError
from article_importer.repository import Repository

from .base import BaseParser
from .document import XMLDocument

logger = logging.getLogger(__name__)


class DispatchState(Enum):
    NOT_ATTEMPTED = "not_attempted"
    PROBING = "probing"
    MATCHED = "matched"
    EXECUTING = "executing"
    SUCCESS = "success"
    FAILED_EXECUTION = "failed_execution"
    EXHAUSTED = "exhausted"


class DoctypeDispatcher:
    """Tries the registered parsers in order and runs the first that matches.

    The metadata file is parsed once per version and the same document is
    probed by every parser. A parser that does not match is skipped
    silently. Once a parser matched, its outcome is final: a failure rolls
    back its work and propagates, and no other parser is tried.

    Attributes:
        parser_classes: Parsers in probing order
        state: State of the latest dispatch
    """

    def __init__(
        self,
        parser_classes: list[type[BaseParser]],
        import_context: ImportContext,
        repository: Repository,
        cache: EntityResolutionCache,
        html_transformer=None,
    ):
        self.parser_classes = list(parser_classes)
        self.import_context = import_context
        self.repository = repository
        self.cache = cache
        self.html_transformer = html_transformer
        self.state = DispatchState.NOT_ATTEMPTED

    def dispatch(self, version: ArticleVersion) -> BaseParser:
        """Import a version with the first parser that understands it.

        Args:
            version: The article version to import

        Returns:
            The parser that imported the version

        Raises:
            NoSuitableParserError: If no parser matches the document
            FailedToParseXMLDocumentError: If the metadata file is not XML
            ImporterError: If the matching parser fails
        """
        self.state = DispatchState.NOT_ATTEMPTED
        metadata_file = version.files.metadata_file
        document = XMLDocument.load(metadata_file)

        for parser_class in self.parser_classes:
            self.state = DispatchState.PROBING
            match = parser_class.probe(document)
            if not match:
                logger.debug(f"{parser_class.NAME} parser skipped {metadata_file.name}: {match.reason}")
                continue

            self.state = DispatchState.MATCHED
            logger.debug(f"{parser_class.NAME} parser matched {metadata_file.name}: {match.reason}")
            parser = parser_class(
                self.import_context,
                version,
                document,
                self.repository,
                self.cache,
                html_transformer=self.html_transformer,
            )

            self.state = DispatchState.EXECUTING
            try:
                parser.execute()
            except InvalidDocTypeError as e:
                logger.debug(f"{parser_class.NAME} parser rejected {metadata_file.name}: {e.message}")
                continue
            except Exception:
                self.state = DispatchState.FAILED_EXECUTION
                raise

            self.state = DispatchState.SUCCESS
            return parser

        self.state = DispatchState.EXHAUSTED
        raise NoSuitableParserError(f"No parser could handle {metadata_file.name}")
