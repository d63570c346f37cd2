"""Submission, publication and attached record schemas.

A submission is one article. Each imported article version becomes a
publication of that submission, with its own authors, galleys and files.

Structure:
    Submission
    └── Publication (one per version)
        ├── Author
        └── Galley ── SubmissionFile
                      └── SubmissionFile (dependent assets)
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

SubmissionStatus = Literal["queued", "published"]
FileStage = Literal["proof", "jats", "dependent"]


class Submission(BaseModel):
    """An article in the target repository.

    Attributes:
        id: Repository identifier, None until inserted
        context_id: Owning journal
        section_id: Section the article is filed under
        locale: Submission language
        status: Workflow status
        stage: Workflow stage
        date_submitted: When the article was received
        current_publication_id: Latest publication
    """

    id: int | None = None
    context_id: int
    section_id: int | None = None
    locale: str | None = None
    status: SubmissionStatus = "published"
    stage: str = "production"
    submission_progress: str = ""
    date_submitted: datetime | None = None
    current_publication_id: int | None = None


class Doi(BaseModel):
    """A registered DOI."""

    id: int | None = None
    context_id: int
    doi: str


class PublicFile(BaseModel):
    """A publicly served journal file, such as an issue or publication cover.

    Attributes:
        id: Stored file name
        context_id: Owning journal
    """

    id: str
    context_id: int


class CoverImage(BaseModel):
    """Publication cover image metadata."""

    upload_name: str
    alt_text: str = "Publication image"
    date_uploaded: datetime = Field(default_factory=datetime.now)


class Publication(BaseModel):
    """One version of an article.

    Attributes:
        id: Repository identifier, None until inserted
        submission_id: Owning submission
        version: Version number, taken from the version directory
        seq: Display sequence
        status: Publication status
        access_status: Open access or issue default
        date_published: Publication date
        section_id: Section the publication is listed under
        issue_id: Issue the publication belongs to
        pages: Page range (e.g., "12-34")
        title: Localized title
        subtitle: Localized subtitle
        abstract: Localized abstract HTML
        keywords: Localized keyword lists
        pub_ids: Public identifiers by type, excluding the DOI
        doi_id: Linked DOI record
        category_ids: Categories the publication is listed under
        citations_raw: Newline-separated reference list
        cover_image: Localized cover image metadata
        primary_contact_id: Primary contact author
    """

    id: int | None = None
    submission_id: int
    version: int = 1
    seq: int = 1
    status: SubmissionStatus = "queued"
    access_status: Literal["open", "issue_default"] = "open"
    date_published: datetime | None = None
    section_id: int | None = None
    issue_id: int | None = None
    url_path: str | None = None
    pages: str | None = None
    locale: str | None = None
    language: str | None = None
    title: dict[str, str] = {}
    subtitle: dict[str, str] = {}
    abstract: dict[str, str] = {}
    keywords: dict[str, list[str]] = {}
    pub_ids: dict[str, str] = {}
    doi_id: int | None = None
    category_ids: list[int] = []
    copyright_holder: dict[str, str] = {}
    copyright_notice: dict[str, str] = {}
    copyright_year: str | None = None
    license_url: str | None = None
    citations_raw: str | None = None
    cover_image: dict[str, CoverImage] = {}
    primary_contact_id: int | None = None


class Author(BaseModel):
    """A contributor of a publication.

    Attributes:
        given_name: Localized given name (always set)
        family_name: Localized family name
        affiliation: Localized affiliation, several joined with "; "
        biography: Localized biography HTML
        seq: 1-based position in the author list
        primary_contact: Whether this author is the primary contact
        user_group_id: Author user group of the journal
    """

    id: int | None = None
    publication_id: int | None = None
    given_name: dict[str, str] = {}
    family_name: dict[str, str] = {}
    email: str | None = None
    affiliation: dict[str, str] = {}
    biography: dict[str, str] = {}
    url: str | None = None
    orcid: str | None = None
    seq: int = 1
    include_in_browse: bool = True
    primary_contact: bool = False
    user_group_id: int | None = None


class Galley(BaseModel):
    """A publication-ready rendition (PDF, HTML, supplement).

    Attributes:
        publication_id: Owning publication
        label: Display label (e.g., "PDF", "HTML", "Supplement 2")
        locale: Rendition language
        name: Localized file name
        seq: Display sequence
        submission_file_id: Stored file backing the galley
    """

    id: int | None = None
    publication_id: int
    label: str
    locale: str
    name: dict[str, str] = {}
    seq: int = 1
    submission_file_id: int | None = None


class SubmissionFile(BaseModel):
    """A stored file attached to a submission.

    Attributes:
        submission_id: Owning submission
        file_stage: Role of the file (galley proof, JATS source, dependent asset)
        genre: File genre (e.g., "SUBMISSION", "IMAGE", "MULTIMEDIA", "DOCUMENT")
        name: Localized original file name
        path: Storage location assigned by the repository
        assoc_type: What the file is attached to ("galley" or "submission_file")
        assoc_id: Identifier of the galley or parent file
        uploader_user_id: Account recorded as uploader
    """

    id: int | None = None
    submission_id: int
    file_stage: FileStage = "proof"
    genre: str = "SUBMISSION"
    name: dict[str, str] = {}
    path: str | None = None
    assoc_type: Literal["galley", "submission_file"] | None = None
    assoc_id: int | None = None
    uploader_user_id: int | None = None
    created_at: datetime = Field(default_factory=datetime.now)
