"""Abstract interface of the journal repository the importer writes into."""

from abc import ABC, abstractmethod

from schemas import (
    Author,
    Category,
    Context,
    Doi,
    Galley,
    Issue,
    Publication,
    PublicFile,
    Section,
    Submission,
    SubmissionFile,
    User,
)

from .exceptions import RepositoryError

Entity = (
    Section | Issue | Category | Submission | Publication | Doi | SubmissionFile | PublicFile
)


class Repository(ABC):
    """Persistence operations the importer needs.

    Implementations own durability of each call. The importer does not
    rely on transactions: it deletes what it created when an article
    version fails (see ``EntityTracker``).
    """

    # Contexts and users

    @abstractmethod
    def get_context(self, path: str) -> Context | None:
        """Find a journal by its URL path."""

    @abstractmethod
    def get_user(self, context_id: int, username: str) -> User | None:
        """Find a user, with the roles held in the given journal."""

    # Sections

    @abstractmethod
    def find_section(self, context_id: int, title: str) -> Section | None:
        """Find a section whose title matches in any locale."""

    @abstractmethod
    def add_section(self, section: Section) -> Section: ...

    @abstractmethod
    def delete_section(self, section_id: int) -> None: ...

    @abstractmethod
    def get_section_order(self, issue_id: int, section_id: int) -> int | None:
        """Position of a section in an issue's table of contents."""

    @abstractmethod
    def set_section_order(self, issue_id: int, section_id: int, seq: int) -> None: ...

    # Issues

    @abstractmethod
    def find_issue(self, context_id: int, volume: int, number: str) -> Issue | None: ...

    @abstractmethod
    def get_published_issues(self, context_id: int) -> list[Issue]: ...

    @abstractmethod
    def add_issue(self, issue: Issue) -> Issue: ...

    @abstractmethod
    def update_issue(self, issue: Issue) -> Issue: ...

    @abstractmethod
    def delete_issue(self, issue_id: int) -> None: ...

    @abstractmethod
    def set_issue_order(self, context_id: int, issue_id: int, seq: int) -> None: ...

    @abstractmethod
    def set_current_issue(self, context_id: int, issue_id: int) -> None:
        """Mark an issue as current, clearing the flag on every other issue."""

    @abstractmethod
    def store_public_file(self, context_id: int, filename: str, content: bytes) -> str:
        """Store a publicly served journal file and return its stored name."""

    @abstractmethod
    def delete_public_file(self, context_id: int, filename: str) -> None: ...

    # Categories

    @abstractmethod
    def find_category(self, context_id: int, path: str) -> Category | None: ...

    @abstractmethod
    def add_category(self, category: Category) -> Category: ...

    @abstractmethod
    def delete_category(self, category_id: int) -> None: ...

    # Submissions and publications

    @abstractmethod
    def find_submission_by_pub_id(
        self, context_id: int, id_type: str, value: str
    ) -> Submission | None:
        """Find a submission owning a publication with the given public id."""

    @abstractmethod
    def add_submission(self, submission: Submission) -> Submission: ...

    @abstractmethod
    def update_submission(self, submission: Submission) -> Submission: ...

    @abstractmethod
    def delete_submission(self, submission_id: int) -> None:
        """Delete a submission with its publications and files."""

    @abstractmethod
    def assign_participant(
        self, submission_id: int, user_group_id: int, user_id: int
    ) -> None: ...

    @abstractmethod
    def add_publication(self, publication: Publication) -> Publication: ...

    @abstractmethod
    def update_publication(self, publication: Publication) -> Publication: ...

    @abstractmethod
    def publish_publication(self, publication_id: int) -> Publication: ...

    @abstractmethod
    def delete_publication(self, publication_id: int) -> None:
        """Delete a publication with its authors and galleys."""

    @abstractmethod
    def add_author(self, author: Author) -> Author: ...

    @abstractmethod
    def find_doi(self, doi: str) -> Doi | None: ...

    @abstractmethod
    def add_doi(self, doi: Doi) -> Doi: ...

    @abstractmethod
    def delete_doi(self, doi_id: int) -> None: ...

    @abstractmethod
    def add_galley(self, galley: Galley) -> Galley: ...

    @abstractmethod
    def update_galley(self, galley: Galley) -> Galley: ...

    @abstractmethod
    def add_submission_file(self, file: SubmissionFile, content: bytes) -> SubmissionFile:
        """Store file content and record it against its submission."""

    @abstractmethod
    def delete_submission_file(self, file_id: int) -> None: ...

    # Generic dispatch used by the entity cache and tracker

    def add_entity(self, entity: Entity) -> Entity:
        """Insert any entity the importer tracks for rollback."""
        if isinstance(entity, Section):
            return self.add_section(entity)
        if isinstance(entity, Issue):
            return self.add_issue(entity)
        if isinstance(entity, Category):
            return self.add_category(entity)
        if isinstance(entity, Submission):
            return self.add_submission(entity)
        if isinstance(entity, Publication):
            return self.add_publication(entity)
        if isinstance(entity, Doi):
            return self.add_doi(entity)
        raise RepositoryError(f"Unexpected entity type {type(entity).__name__}")

    def delete_entity(self, entity: Entity) -> None:
        """Delete any entity the importer tracks for rollback."""
        if isinstance(entity, Section):
            self.delete_section(entity.id)
        elif isinstance(entity, Issue):
            self.delete_issue(entity.id)
        elif isinstance(entity, Category):
            self.delete_category(entity.id)
        elif isinstance(entity, Submission):
            self.delete_submission(entity.id)
        elif isinstance(entity, Publication):
            self.delete_publication(entity.id)
        elif isinstance(entity, Doi):
            self.delete_doi(entity.id)
        elif isinstance(entity, SubmissionFile):
            self.delete_submission_file(entity.id)
        elif isinstance(entity, PublicFile):
            self.delete_public_file(entity.context_id, entity.id)
        else:
            raise RepositoryError(f"Unexpected entity type {type(entity).__name__}")
