"""Repository backed by a JSON-over-HTTP journal API."""

import json
import logging
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

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
from .client import Client
from .exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RestRepository(Client, Repository):
    """Repository client for the journal's REST API.

    Lookups take query parameters and answer with a JSON list of matching
    records. Inserts POST the record and answer with it, identifier
    included. Deletes of missing records answer 404.

    Example:
        config = {"base_url": "https://journal.example.org/api/v1"}
        with RestRepository(config) as repository:
            context = repository.get_context("jdoe")
    """

    def fetch(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a path and return the decoded JSON body."""
        return self.get(path, params=params).json()

    def _validate(self, model: type[ModelT], data: dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"{model.__name__} response failed validation",
                errors=[str(err) for err in e.errors()],
            ) from e

    def _first(
        self, model: type[ModelT], path: str, params: dict[str, Any]
    ) -> ModelT | None:
        items = self.fetch(path, params=params)
        if not items:
            return None
        return self._validate(model, items[0])

    def _send(self, method: str, model: type[ModelT], path: str, entity: BaseModel) -> ModelT:
        payload = entity.model_dump(mode="json", exclude={"id"})
        response = self._request(method, path, json=payload)
        return self._validate(model, response.json())

    # Contexts and users

    def get_context(self, path: str) -> Context | None:
        return self._first(Context, "/contexts", {"path": path})

    def get_user(self, context_id: int, username: str) -> User | None:
        return self._first(User, f"/contexts/{context_id}/users", {"username": username})

    # Sections

    def find_section(self, context_id: int, title: str) -> Section | None:
        return self._first(Section, f"/contexts/{context_id}/sections", {"title": title})

    def add_section(self, section: Section) -> Section:
        return self._send("POST", Section, f"/contexts/{section.context_id}/sections", section)

    def delete_section(self, section_id: int) -> None:
        self.delete(f"/sections/{section_id}")

    def get_section_order(self, issue_id: int, section_id: int) -> int | None:
        try:
            data = self.fetch(f"/issues/{issue_id}/section-order/{section_id}")
        except NotFoundError:
            return None
        return int(data["seq"])

    def set_section_order(self, issue_id: int, section_id: int, seq: int) -> None:
        self.put(f"/issues/{issue_id}/section-order/{section_id}", json={"seq": seq})

    # Issues

    def find_issue(self, context_id: int, volume: int, number: str) -> Issue | None:
        return self._first(
            Issue,
            f"/contexts/{context_id}/issues",
            {"volume": volume, "number": number},
        )

    def get_published_issues(self, context_id: int) -> list[Issue]:
        items = self.fetch(f"/contexts/{context_id}/issues", params={"published": "true"})
        return [self._validate(Issue, item) for item in items]

    def add_issue(self, issue: Issue) -> Issue:
        return self._send("POST", Issue, f"/contexts/{issue.context_id}/issues", issue)

    def update_issue(self, issue: Issue) -> Issue:
        return self._send("PUT", Issue, f"/issues/{issue.id}", issue)

    def delete_issue(self, issue_id: int) -> None:
        self.delete(f"/issues/{issue_id}")

    def set_issue_order(self, context_id: int, issue_id: int, seq: int) -> None:
        self.put(f"/contexts/{context_id}/issue-order/{issue_id}", json={"seq": seq})

    def set_current_issue(self, context_id: int, issue_id: int) -> None:
        self.put(f"/contexts/{context_id}/current-issue", json={"issue_id": issue_id})

    def store_public_file(self, context_id: int, filename: str, content: bytes) -> str:
        response = self.post(
            f"/contexts/{context_id}/public-files",
            files={"file": (filename, content)},
        )
        return str(response.json()["name"])

    def delete_public_file(self, context_id: int, filename: str) -> None:
        self.delete(f"/contexts/{context_id}/public-files/{filename}")

    # Categories

    def find_category(self, context_id: int, path: str) -> Category | None:
        return self._first(Category, f"/contexts/{context_id}/categories", {"path": path})

    def add_category(self, category: Category) -> Category:
        return self._send(
            "POST", Category, f"/contexts/{category.context_id}/categories", category
        )

    def delete_category(self, category_id: int) -> None:
        self.delete(f"/categories/{category_id}")

    # Submissions and publications

    def find_submission_by_pub_id(
        self, context_id: int, id_type: str, value: str
    ) -> Submission | None:
        return self._first(
            Submission,
            f"/contexts/{context_id}/submissions",
            {"pub_id_type": id_type, "pub_id": value},
        )

    def add_submission(self, submission: Submission) -> Submission:
        return self._send(
            "POST", Submission, f"/contexts/{submission.context_id}/submissions", submission
        )

    def update_submission(self, submission: Submission) -> Submission:
        return self._send("PUT", Submission, f"/submissions/{submission.id}", submission)

    def delete_submission(self, submission_id: int) -> None:
        self.delete(f"/submissions/{submission_id}")

    def assign_participant(
        self, submission_id: int, user_group_id: int, user_id: int
    ) -> None:
        self.post(
            f"/submissions/{submission_id}/participants",
            json={"user_group_id": user_group_id, "user_id": user_id},
        )

    def add_publication(self, publication: Publication) -> Publication:
        return self._send(
            "POST",
            Publication,
            f"/submissions/{publication.submission_id}/publications",
            publication,
        )

    def update_publication(self, publication: Publication) -> Publication:
        return self._send("PUT", Publication, f"/publications/{publication.id}", publication)

    def publish_publication(self, publication_id: int) -> Publication:
        response = self.post(f"/publications/{publication_id}/publish")
        return self._validate(Publication, response.json())

    def delete_publication(self, publication_id: int) -> None:
        self.delete(f"/publications/{publication_id}")

    def add_author(self, author: Author) -> Author:
        return self._send("POST", Author, f"/publications/{author.publication_id}/authors", author)

    def find_doi(self, doi: str) -> Doi | None:
        return self._first(Doi, "/dois", {"doi": doi})

    def add_doi(self, doi: Doi) -> Doi:
        return self._send("POST", Doi, f"/contexts/{doi.context_id}/dois", doi)

    def delete_doi(self, doi_id: int) -> None:
        self.delete(f"/dois/{doi_id}")

    def add_galley(self, galley: Galley) -> Galley:
        return self._send("POST", Galley, f"/publications/{galley.publication_id}/galleys", galley)

    def update_galley(self, galley: Galley) -> Galley:
        return self._send("PUT", Galley, f"/galleys/{galley.id}", galley)

    def add_submission_file(self, file: SubmissionFile, content: bytes) -> SubmissionFile:
        filename = next(iter(file.name.values()), "file")
        metadata = file.model_dump(mode="json", exclude={"id", "path"})
        response = self.post(
            f"/submissions/{file.submission_id}/files",
            data={"metadata": json.dumps(metadata)},
            files={"file": (filename, content)},
        )
        logger.debug(f"Uploaded {filename} to submission {file.submission_id}")
        return self._validate(SubmissionFile, response.json())

    def delete_submission_file(self, file_id: int) -> None:
        self.delete(f"/files/{file_id}")
