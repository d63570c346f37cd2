"""Import run report schemas."""

from typing import Literal

from pydantic import BaseModel

OutcomeStatus = Literal["imported", "skipped", "failed"]


class VersionOutcome(BaseModel):
    """Result of importing one article version.

    Attributes:
        article: Article label ("volume-issue-article")
        version: Version number, None when the article had no version
        status: imported, skipped or failed
        message: Error message for skipped/failed versions
        publication_id: Created publication for imported versions
        parser: Dialect of the parser that handled the version
    """

    article: str
    version: int | None = None
    status: OutcomeStatus
    message: str | None = None
    publication_id: int | None = None
    parser: str | None = None


class ImportReport(BaseModel):
    """Tally of an import run.

    ``count`` always equals ``imported + skipped + failed``.
    """

    count: int = 0
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    outcomes: list[VersionOutcome] = []

    def record(self, outcome: VersionOutcome) -> None:
        self.outcomes.append(outcome)
        self.count += 1
        if outcome.status == "imported":
            self.imported += 1
        elif outcome.status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def summary(self) -> str:
        return (
            f"{self.count} article versions processed: {self.imported} imported, "
            f"{self.skipped} skipped, {self.failed} failed"
        )
