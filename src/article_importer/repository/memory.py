"""In-memory repository, used for dry runs and tests."""

import itertools
import logging
import uuid
from pathlib import Path

from schemas import (
    Author,
    Category,
    Context,
    Doi,
    Galley,
    Issue,
    Publication,
    Section,
    Submission,
    SubmissionFile,
    User,
)

from .base import Repository
from .exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


class InMemoryRepository(Repository):
    """Repository keeping every record in dictionaries.

    Records are stored as the objects handed in, with their ``id``
    assigned on insert. File contents are kept in memory, or written
    below ``files_dir`` when one is given.

    Example:
        repository = InMemoryRepository()
        context = repository.add_context(Context(id=0, path="journal"))
    """

    def __init__(self, files_dir: Path | None = None):
        self.files_dir = Path(files_dir) if files_dir else None
        self._ids = itertools.count(1)

        self.contexts: dict[int, Context] = {}
        self.users: dict[int, User] = {}
        self.sections: dict[int, Section] = {}
        self.issues: dict[int, Issue] = {}
        self.categories: dict[int, Category] = {}
        self.submissions: dict[int, Submission] = {}
        self.publications: dict[int, Publication] = {}
        self.authors: dict[int, Author] = {}
        self.dois: dict[int, Doi] = {}
        self.galleys: dict[int, Galley] = {}
        self.submission_files: dict[int, SubmissionFile] = {}

        self.file_contents: dict[int, bytes] = {}
        self.public_files: dict[str, bytes] = {}
        self.section_order: dict[tuple[int, int], int] = {}
        self.issue_order: dict[int, int] = {}
        self.participants: list[tuple[int, int, int]] = []

    def _insert(self, store: dict, entity):
        entity.id = next(self._ids)
        store[entity.id] = entity
        return entity

    def _replace(self, store: dict, entity, kind: str):
        if entity.id not in store:
            raise EntityNotFoundError(kind, entity.id)
        store[entity.id] = entity
        return entity

    def _remove(self, store: dict, entity_id: int, kind: str):
        if entity_id not in store:
            raise EntityNotFoundError(kind, entity_id)
        return store.pop(entity_id)

    # Seeding

    def add_context(self, context: Context) -> Context:
        return self._insert(self.contexts, context)

    def add_user(self, user: User) -> User:
        return self._insert(self.users, user)

    # Contexts and users

    def get_context(self, path: str) -> Context | None:
        return next((c for c in self.contexts.values() if c.path == path), None)

    def get_user(self, context_id: int, username: str) -> User | None:
        return next((u for u in self.users.values() if u.username == username), None)

    # Sections

    def find_section(self, context_id: int, title: str) -> Section | None:
        return next(
            (
                s
                for s in self.sections.values()
                if s.context_id == context_id and title in s.title.values()
            ),
            None,
        )

    def add_section(self, section: Section) -> Section:
        return self._insert(self.sections, section)

    def delete_section(self, section_id: int) -> None:
        self._remove(self.sections, section_id, "Section")
        for key in [k for k in self.section_order if k[1] == section_id]:
            del self.section_order[key]

    def get_section_order(self, issue_id: int, section_id: int) -> int | None:
        return self.section_order.get((issue_id, section_id))

    def set_section_order(self, issue_id: int, section_id: int, seq: int) -> None:
        self.section_order[(issue_id, section_id)] = seq

    # Issues

    def find_issue(self, context_id: int, volume: int, number: str) -> Issue | None:
        return next(
            (
                i
                for i in self.issues.values()
                if i.context_id == context_id
                and i.volume == volume
                and i.number == number
            ),
            None,
        )

    def get_published_issues(self, context_id: int) -> list[Issue]:
        return [
            i for i in self.issues.values() if i.context_id == context_id and i.published
        ]

    def add_issue(self, issue: Issue) -> Issue:
        return self._insert(self.issues, issue)

    def update_issue(self, issue: Issue) -> Issue:
        return self._replace(self.issues, issue, "Issue")

    def delete_issue(self, issue_id: int) -> None:
        self._remove(self.issues, issue_id, "Issue")
        self.issue_order.pop(issue_id, None)
        for key in [k for k in self.section_order if k[0] == issue_id]:
            del self.section_order[key]

    def set_issue_order(self, context_id: int, issue_id: int, seq: int) -> None:
        self.issue_order[issue_id] = seq

    def set_current_issue(self, context_id: int, issue_id: int) -> None:
        if issue_id not in self.issues:
            raise EntityNotFoundError("Issue", issue_id)
        for issue in self.issues.values():
            if issue.context_id == context_id:
                issue.current = issue.id == issue_id

    def store_public_file(self, context_id: int, filename: str, content: bytes) -> str:
        self.public_files[filename] = content
        if self.files_dir:
            path = self.files_dir / "journals" / str(context_id) / filename
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        return filename

    def delete_public_file(self, context_id: int, filename: str) -> None:
        if self.public_files.pop(filename, None) is None:
            raise EntityNotFoundError("PublicFile", filename)
        if self.files_dir:
            (self.files_dir / "journals" / str(context_id) / filename).unlink(missing_ok=True)

    # Categories

    def find_category(self, context_id: int, path: str) -> Category | None:
        return next(
            (
                c
                for c in self.categories.values()
                if c.context_id == context_id and c.path == path
            ),
            None,
        )

    def add_category(self, category: Category) -> Category:
        return self._insert(self.categories, category)

    def delete_category(self, category_id: int) -> None:
        self._remove(self.categories, category_id, "Category")
        for publication in self.publications.values():
            if category_id in publication.category_ids:
                publication.category_ids.remove(category_id)

    # Submissions and publications

    def find_submission_by_pub_id(
        self, context_id: int, id_type: str, value: str
    ) -> Submission | None:
        for publication in self.publications.values():
            submission = self.submissions.get(publication.submission_id)
            if submission is None or submission.context_id != context_id:
                continue
            if id_type == "doi":
                doi = self.dois.get(publication.doi_id) if publication.doi_id else None
                if doi is not None and doi.doi == value:
                    return submission
            elif publication.pub_ids.get(id_type) == value:
                return submission
        return None

    def add_submission(self, submission: Submission) -> Submission:
        return self._insert(self.submissions, submission)

    def update_submission(self, submission: Submission) -> Submission:
        return self._replace(self.submissions, submission, "Submission")

    def delete_submission(self, submission_id: int) -> None:
        self._remove(self.submissions, submission_id, "Submission")
        for publication in [
            p for p in self.publications.values() if p.submission_id == submission_id
        ]:
            self.delete_publication(publication.id)
        for file in [
            f for f in self.submission_files.values() if f.submission_id == submission_id
        ]:
            del self.submission_files[file.id]
            self.file_contents.pop(file.id, None)
        self.participants = [p for p in self.participants if p[0] != submission_id]

    def assign_participant(
        self, submission_id: int, user_group_id: int, user_id: int
    ) -> None:
        self.participants.append((submission_id, user_group_id, user_id))

    def add_publication(self, publication: Publication) -> Publication:
        return self._insert(self.publications, publication)

    def update_publication(self, publication: Publication) -> Publication:
        return self._replace(self.publications, publication, "Publication")

    def publish_publication(self, publication_id: int) -> Publication:
        publication = self.publications.get(publication_id)
        if publication is None:
            raise EntityNotFoundError("Publication", publication_id)
        publication.status = "published"
        submission = self.submissions.get(publication.submission_id)
        if submission is not None:
            submission.status = "published"
            submission.current_publication_id = publication.id
        return publication

    def delete_publication(self, publication_id: int) -> None:
        self._remove(self.publications, publication_id, "Publication")
        for author in [
            a for a in self.authors.values() if a.publication_id == publication_id
        ]:
            del self.authors[author.id]
        for galley in [
            g for g in self.galleys.values() if g.publication_id == publication_id
        ]:
            del self.galleys[galley.id]

    def add_author(self, author: Author) -> Author:
        return self._insert(self.authors, author)

    def find_doi(self, doi: str) -> Doi | None:
        return next((d for d in self.dois.values() if d.doi == doi), None)

    def add_doi(self, doi: Doi) -> Doi:
        return self._insert(self.dois, doi)

    def delete_doi(self, doi_id: int) -> None:
        self._remove(self.dois, doi_id, "DOI")

    def add_galley(self, galley: Galley) -> Galley:
        return self._insert(self.galleys, galley)

    def update_galley(self, galley: Galley) -> Galley:
        return self._replace(self.galleys, galley, "Galley")

    def add_submission_file(self, file: SubmissionFile, content: bytes) -> SubmissionFile:
        if file.submission_id not in self.submissions:
            raise EntityNotFoundError("Submission", file.submission_id)
        self._insert(self.submission_files, file)
        original = next(iter(file.name.values()), "")
        stored_name = f"{uuid.uuid4().hex}{Path(original).suffix}"
        file.path = f"submissions/{file.submission_id}/{stored_name}"
        self.file_contents[file.id] = content
        if self.files_dir:
            path = self.files_dir / file.path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        logger.debug(f"Stored {original} as {file.path}")
        return file

    def delete_submission_file(self, file_id: int) -> None:
        file = self._remove(self.submission_files, file_id, "SubmissionFile")
        self.file_contents.pop(file_id, None)
        if self.files_dir and file.path:
            (self.files_dir / file.path).unlink(missing_ok=True)
