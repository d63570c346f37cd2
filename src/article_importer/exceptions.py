"""Exceptions raised while importing articles.

Errors fall into three classes, which decide how the orchestrator tallies
an article version:

- ArticleSkippedError: the version is skipped (wrong format, already imported)
- ArticleImportError: the version failed and its partial work was rolled back
- ConfigurationError: the run cannot start at all
"""


class ImporterError(Exception):
    """Base exception for all importer errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class ConfigurationError(ImporterError):
    """Raised when the run configuration cannot be resolved."""

    pass


class ArticleSkippedError(ImporterError):
    """Base exception for versions that are skipped rather than failed."""

    pass


class NoSuitableParserError(ArticleSkippedError):
    """Raised when no registered parser understands the metadata document."""

    def __init__(self, message: str = "No parser could handle the document type"):
        super().__init__(message)


class InvalidDocTypeError(ArticleSkippedError):
    """Raised when a parser is executed against a document it does not match."""

    def __init__(self, message: str = "Invalid document type"):
        super().__init__(message)


class AlreadyExistsError(ArticleSkippedError):
    """Raised when a submission with the same publisher id already exists."""

    def __init__(self, id_type: str, value: str):
        self.id_type = id_type
        self.value = value
        super().__init__(f"A submission with the {id_type} {value!r} already exists")


class NoVersionsError(ArticleSkippedError):
    """Raised when an article directory holds no importable version."""

    def __init__(self, message: str = "No versions were processed"):
        super().__init__(message)


class ArticleImportError(ImporterError):
    """Base exception for versions whose import failed."""

    pass


class FailedToParseXMLDocumentError(ArticleImportError):
    """Raised when the metadata file is not well-formed XML."""

    pass


class UnexpectedMetadataCountError(ArticleImportError):
    """Raised when a version does not hold exactly one XML metadata file."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Expected exactly one metadata file, found {count}")


class UnexpectedGalleyCountError(ArticleImportError):
    """Raised when a version holds more than one PDF galley."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Expected at most one PDF galley, found {count}")


class UnexpectedCoverCountError(ArticleImportError):
    """Raised when a directory holds more than one cover image."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Expected at most one cover image, found {count}")


class MissingTitleError(ArticleImportError):
    """Raised when the article has no title in any language."""

    def __init__(self, message: str = "The article title is missing"):
        super().__init__(message)


class MissingPublicationDateError(ArticleImportError):
    """Raised when no publication date can be determined."""

    def __init__(self, message: str = "The publication date is missing"):
        super().__init__(message)


class MissingAssetError(ArticleImportError):
    """Raised when an HTML galley references an asset that is not on disk."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)
