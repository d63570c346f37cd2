"""Orchestrator driving an import run from discovery to the final report."""

import logging
import re

from article_importer.config import ImportContext
from article_importer.discovery import ArticleEntry, ArticleIterator
from article_importer.entities import EntityResolutionCache
from article_importer.exceptions import ArticleSkippedError, NoVersionsError
from article_importer.parsers.dispatcher import DoctypeDispatcher
from article_importer.repository import Repository
from schemas import ImportReport, Issue, VersionOutcome

logger = logging.getLogger(__name__)


def issue_sort_key(issue: Issue) -> tuple[int, int]:
    """Order key of an issue: volume, then the leading number of its label."""
    match = re.match(r"\d+", issue.number or "")
    return (issue.volume, int(match.group()) if match else 0)


class Orchestrator:
    """Imports every article version found below the import path.

    Versions are imported one at a time, oldest first within an article.
    Each outcome is tallied independently: a skipped or failed version
    never stops the run.

    Attributes:
        import_context: Resolved journal, accounts and settings
        repository: Repository records are written to
        cache: Entity cache of the current run
        dispatcher: Parser dispatcher of the current run
    """

    def __init__(
        self,
        import_context: ImportContext,
        repository: Repository,
        html_transformer=None,
    ):
        self.import_context = import_context
        self.repository = repository
        self.html_transformer = html_transformer
        self.cache: EntityResolutionCache | None = None
        self.dispatcher: DoctypeDispatcher | None = None

    @property
    def configuration(self):
        return self.import_context.configuration

    def run(self) -> ImportReport:
        """Import the whole tree.

        Returns:
            The report with one outcome per article version
        """
        configuration = self.configuration
        context = self.import_context.context
        logger.info(f"Importing {configuration.import_path} into {context.path}")

        self.cache = EntityResolutionCache(self.repository, context.id)
        self.dispatcher = DoctypeDispatcher(
            self.import_context.parser_classes,
            self.import_context,
            self.repository,
            self.cache,
            html_transformer=self.html_transformer,
        )

        report = ImportReport()
        articles = ArticleIterator(
            configuration.import_path,
            cover_filename=configuration.cover_filename,
            image_extensions=configuration.image_extensions,
        )
        for entry in articles:
            self.import_entry(entry, report)

        if report.imported:
            self.resequence_issues()

        logger.info(report.summary)
        return report

    def import_entry(self, entry: ArticleEntry, report: ImportReport) -> None:
        try:
            versions = entry.versions()
        except OSError as e:
            logger.error(f"{entry.label}: failed, cannot read {entry.directory}: {e}")
            report.record(
                VersionOutcome(article=entry.label, status="failed", message=str(e))
            )
            return
        if not versions:
            error = NoVersionsError()
            logger.warning(f"{entry.label}: skipped, {error.message}")
            report.record(
                VersionOutcome(article=entry.label, status="skipped", message=error.message)
            )
            return

        for version in versions:
            report.record(self.import_version(version))

    def import_version(self, version) -> VersionOutcome:
        """Dispatch one version and classify its outcome."""
        label = version.entry.label
        try:
            parser = self.dispatcher.dispatch(version)
        except ArticleSkippedError as e:
            logger.warning(f"{version.label}: skipped, {e.message}")
            return VersionOutcome(
                article=label, version=version.version, status="skipped", message=e.message
            )
        except Exception as e:
            logger.error(f"{version.label}: failed, {e}")
            logger.debug(f"Failure details for {version.label}", exc_info=True)
            return VersionOutcome(
                article=label, version=version.version, status="failed", message=str(e)
            )

        publication = parser.get_publication()
        logger.info(f"{version.label}: imported with the {parser.NAME} parser")
        return VersionOutcome(
            article=label,
            version=version.version,
            status="imported",
            publication_id=publication.id,
            parser=parser.NAME,
        )

    def resequence_issues(self) -> None:
        """Order the published issues newest first and make the newest current."""
        context_id = self.import_context.context.id
        issues = sorted(
            self.repository.get_published_issues(context_id), key=issue_sort_key, reverse=True
        )
        for seq, issue in enumerate(issues, start=1):
            self.repository.set_issue_order(context_id, issue.id, seq)
        if issues:
            self.repository.set_current_issue(context_id, issues[0].id)
            logger.info(
                f"Current issue set to volume {issues[0].volume}, number {issues[0].number}"
            )
