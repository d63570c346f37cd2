"""Base parser shared by the JATS and A++ dialects.

A parser turns one article version into repository records. It resolves
the shared entities (section, issue, categories, submission) through the
run cache, builds the publication with its authors and galleys and
publishes it. Everything it creates is tracked so a failure part-way
deletes it again.
"""

import logging
import re
from abc import abstractmethod
from datetime import date, datetime, time
from pathlib import Path
from urllib.parse import unquote

from lxml import etree

from article_importer.config import ImportContext
from article_importer.dates import date_from_parts
from article_importer.discovery import ArticleVersion
from article_importer.entities import EntityResolutionCache, EntityTracker
from article_importer.exceptions import (
    AlreadyExistsError,
    ArticleImportError,
    InvalidDocTypeError,
    MissingAssetError,
)
from article_importer.locales import LocaleResolver, iso1_from_locale
from article_importer.repository import Repository
from schemas import (
    Author,
    CoverImage,
    Doi,
    Galley,
    Issue,
    Publication,
    PublicFile,
    Section,
    Submission,
    SubmissionFile,
)

from .capabilities import (
    AuthorExtractor,
    IssueResolver,
    MatchResult,
    PublicationBuilder,
    SectionResolver,
)
from .document import XMLDocument

logger = logging.getLogger(__name__)

PRIMARY_ID_TYPE = "publisher-id"
GRAPHIC_DIR = "graphic"
IMAGE_SUFFIXES = (".gif", ".jpg", ".jpeg", ".png", ".svg", ".tif", ".tiff")
TIFF_SUFFIXES = (".tif", ".tiff")

SRC_PATTERN = re.compile(r'src="([^"]*)"')
HREF_PATTERN = re.compile(r'href="([^"]*)"')
ID_PATTERN = re.compile(r'\bid="([^"]*)"')
EMAIL_PATTERN = re.compile(r"^[^@\s/:]+@[^@\s/]+\.[^@\s/]+$")


def as_datetime(value: date | None) -> datetime | None:
    return datetime.combine(value, time()) if value else None


class BaseParser(IssueResolver, SectionResolver, PublicationBuilder):
    """Common import workflow of the dialect parsers.

    Subclasses implement ``probe()``, the capability interfaces and the
    dialect-specific parts of the publication (``populate_publication``).

    Attributes:
        import_context: Resolved journal, accounts and settings of the run
        version: Article version being imported
        document: Parsed metadata document of the version
        repository: Repository records are written to
        cache: Run-scoped entity cache
        tracker: Entities created by this attempt
        locales: Locale resolver of this attempt
    """

    NAME = ""
    DATE_PARTS = ("year", "month", "day")
    author_extractor_class: type[AuthorExtractor]

    def __init__(
        self,
        import_context: ImportContext,
        version: ArticleVersion,
        document: XMLDocument,
        repository: Repository,
        cache: EntityResolutionCache,
        html_transformer=None,
    ):
        self.import_context = import_context
        self.version = version
        self.document = document
        self.repository = repository
        self.cache = cache
        self.html_transformer = html_transformer
        self.tracker = EntityTracker(repository, cache)
        self.locales = LocaleResolver(
            import_context.supported_locales, import_context.context.primary_locale
        )

        self._submission: Submission | None = None
        self._issue: Issue | None = None
        self._section: Section | None = None
        self._publication: Publication | None = None

    @classmethod
    @abstractmethod
    def probe(cls, document: XMLDocument) -> MatchResult:
        """Tell whether this parser understands the document."""

    @property
    def configuration(self):
        return self.import_context.configuration

    @property
    def context(self):
        return self.import_context.context

    @property
    def entry(self):
        return self.version.entry

    @property
    def files(self):
        return self.version.files

    @property
    def used_locales(self) -> list[str]:
        return list(self.locales.used_locales)

    def execute(self) -> Publication:
        """Import the article version.

        Returns:
            The published publication

        Raises:
            InvalidDocTypeError: If the document does not match this parser
            AlreadyExistsError: If the article was imported before
            ArticleImportError: If the metadata or files are unusable
        """
        try:
            match = self.probe(self.document)
            if not match:
                raise InvalidDocTypeError(f"{self.NAME} parser: {match.reason}")

            self.locales.default_locale = self.get_locale(self.document.language)
            self.check_duplicates()
            publication = self.get_publication()
        except Exception:
            self.rollback()
            raise

        logger.debug(
            f"Imported {self.version.label} with {len(self.tracker)} new records, "
            f"locales used: {', '.join(self.used_locales)}"
        )
        self.tracker.clear()
        return publication

    def rollback(self) -> int:
        """Delete everything this attempt created."""
        if not len(self.tracker):
            return 0
        deleted = self.tracker.rollback()
        logger.info(f"Rolled back {deleted} records of {self.version.label}")
        return deleted

    def get_locale(self, raw: str | None = None) -> str:
        return self.locales.resolve(raw)

    def publication_locale(self) -> str:
        """Locale of the publication, the document language by default."""
        return self.locales.default_locale

    def date_from_node(self, node: etree._Element | None) -> date | None:
        """Read a date from the year, month and day children of a node."""
        if node is None:
            return None
        year, month, day = (self.document.select_text(part, node) for part in self.DATE_PARTS)
        return date_from_parts(year, month, day)

    def check_duplicates(self) -> None:
        """Refuse to import an article that already exists in the journal.

        Raises:
            AlreadyExistsError: If another submission has the same publisher id
        """
        current = self.cache.resolve_submission(self.entry.key)
        for id_type, value in self.get_public_ids().items():
            if not value:
                continue
            found = self.repository.find_submission_by_pub_id(self.context.id, id_type, value)
            if found is None:
                continue
            if current is not None and found.id == current.id:
                continue
            if id_type == PRIMARY_ID_TYPE:
                raise AlreadyExistsError(id_type, value)
            logger.warning(
                f"Submission {found.id} already has the {id_type} {value!r}, "
                f"importing {self.version.label} anyway"
            )

    # Shared entities

    def get_submission(self) -> Submission:
        """Resolve the submission of the article, creating it for its first version."""
        if self._submission is not None:
            return self._submission

        def build() -> Submission:
            return Submission(
                context_id=self.context.id,
                section_id=self.get_section().id,
                locale=self.publication_locale(),
                date_submitted=as_datetime(self.get_date_submitted()),
            )

        submission, created = self.cache.resolve_or_create(
            "submission", self.entry.key, build, self.tracker
        )
        if created:
            self.repository.assign_participant(
                submission.id, self.import_context.editor_group_id, self.import_context.editor.id
            )
        self._submission = submission
        return submission

    def build_issue(
        self,
        volume: int,
        number: str,
        published: date | None,
        title: dict[str, str] | None = None,
        show_title: bool = False,
    ) -> Issue:
        return Issue(
            context_id=self.context.id,
            volume=volume,
            number=number,
            year=published.year if published else None,
            title=title or {},
            date_published=as_datetime(published),
            show_title=show_title,
        )

    def resolve_issue(self, volume: int, number: str, builder) -> Issue:
        if self._issue is None:
            issue, created = self.cache.resolve_or_create(
                "issue", (volume, number), builder, self.tracker
            )
            if created:
                issue = self._attach_issue_cover(issue)
            self._issue = issue
        return self._issue

    def _attach_issue_cover(self, issue: Issue) -> Issue:
        cover = self.entry.issue_files().cover_file
        if cover is None:
            return issue
        locale = self.get_locale()
        filename = f"cover_issue_{issue.id}_{locale}{cover.suffix.lower()}"
        stored = self.repository.store_public_file(self.context.id, filename, cover.read_bytes())
        self.tracker.track(PublicFile(id=stored, context_id=self.context.id))
        issue.cover_image[locale] = stored
        logger.debug(f"Stored issue cover {cover.name} as {stored}")
        return self.repository.update_issue(issue)

    def resolve_section(self, name: str, locale: str) -> Section:
        """Resolve or create a section and list it in the issue's table of contents."""
        if self._section is not None:
            return self._section

        def build() -> Section:
            return Section(
                context_id=self.context.id,
                title={locale: name},
                abbrev={locale: name[:3].upper()},
                policy={locale: ""},
            )

        section, _created = self.cache.resolve_or_create(
            "section", (name, locale), build, self.tracker
        )
        issue = self.get_issue()
        if self.repository.get_section_order(issue.id, section.id) is None:
            self.repository.set_section_order(issue.id, section.id, self.cache.count("section"))
        self._section = section
        return section

    # Publication

    @abstractmethod
    def populate_publication(self, publication: Publication) -> None:
        """Fill the dialect-specific metadata of an unsaved publication."""

    def add_galleys(self, publication: Publication) -> None:
        """Attach the renditions of the version, the PDF first."""
        seq = self.add_pdf_galley(publication)
        self.add_supplementary_galleys(publication, seq + 1)

    def get_publication(self) -> Publication:
        if self._publication is not None:
            return self._publication

        submission = self.get_submission()
        issue = self.get_issue()
        section = self.get_section()
        locale = self.publication_locale()

        publication = Publication(
            submission_id=submission.id,
            version=self.version.version,
            seq=self.version.version,
            date_published=as_datetime(self.get_publication_date()),
            section_id=section.id,
            issue_id=issue.id,
            locale=locale,
            language=iso1_from_locale(locale),
        )
        self.populate_publication(publication)
        self.apply_public_ids(publication)

        publication = self.repository.add_publication(publication)
        self.tracker.track(publication)
        self._publication = publication

        self.attach_cover_image(publication)
        publication = self.attach_authors(publication)
        self.add_galleys(publication)

        self._publication = self.repository.publish_publication(publication.id)
        logger.debug(f"Published publication {publication.id} of submission {submission.id}")
        return self._publication

    def apply_public_ids(self, publication: Publication) -> None:
        """Link the DOI record and copy the other public ids onto the publication."""
        for id_type, value in self.get_public_ids().items():
            if not value:
                continue
            if id_type != "doi":
                publication.pub_ids[id_type] = value
                continue
            doi = self.repository.find_doi(value)
            if doi is None:
                doi = self.repository.add_doi(Doi(context_id=self.context.id, doi=value))
                self.tracker.track(doi)
            publication.doi_id = doi.id

    def attach_cover_image(self, publication: Publication) -> None:
        cover = self.files.cover_file
        if cover is None:
            return
        locale = publication.locale or self.get_locale()
        filename = (
            f"submission_{publication.submission_id}_{publication.id}"
            f"_coverImage_{locale}{cover.suffix.lower()}"
        )
        stored = self.repository.store_public_file(self.context.id, filename, cover.read_bytes())
        self.tracker.track(PublicFile(id=stored, context_id=self.context.id))
        publication.cover_image[locale] = CoverImage(upload_name=stored)

    def default_author(self) -> Author:
        """Author standing in for articles without contributors: the journal itself."""
        locale = self.get_locale()
        return Author(
            given_name={locale: self.context.localized_name(locale)},
            email=self.configuration.email,
        )

    def attach_authors(self, publication: Publication) -> Publication:
        authors = self.author_extractor_class(self).extract()
        if not authors:
            logger.warning(f"No authors in {self.version.label}, using the journal name")
            authors = [self.default_author()]

        for seq, author in enumerate(authors, start=1):
            author.publication_id = publication.id
            author.seq = seq
            author.primary_contact = seq == 1
            author.user_group_id = self.import_context.author_group_id
            author.email = author.email or self.configuration.email
            stored = self.repository.add_author(author)
            if seq == 1:
                publication.primary_contact_id = stored.id

        return self.repository.update_publication(publication)

    # Files and galleys

    def add_file(
        self,
        path: Path,
        locale: str,
        file_stage: str = "proof",
        genre: str = "SUBMISSION",
        assoc_type: str | None = None,
        assoc_id: int | None = None,
        content: bytes | None = None,
    ) -> SubmissionFile:
        file = SubmissionFile(
            submission_id=self.get_submission().id,
            file_stage=file_stage,
            genre=genre,
            name={locale: path.name},
            assoc_type=assoc_type,
            assoc_id=assoc_id,
            uploader_user_id=self.import_context.user.id,
        )
        stored = self.repository.add_submission_file(
            file, path.read_bytes() if content is None else content
        )
        self.tracker.track(stored)
        return stored

    def add_dependent_file(self, path: Path, parent: SubmissionFile, locale: str) -> SubmissionFile:
        genre = "IMAGE" if path.suffix.lower() in IMAGE_SUFFIXES else "MULTIMEDIA"
        return self.add_file(
            path,
            locale,
            file_stage="dependent",
            genre=genre,
            assoc_type="submission_file",
            assoc_id=parent.id,
        )

    def add_galley(
        self,
        publication: Publication,
        path: Path,
        label: str,
        locale: str,
        seq: int,
        genre: str = "SUBMISSION",
        content: bytes | None = None,
    ) -> tuple[Galley, SubmissionFile]:
        galley = self.repository.add_galley(
            Galley(
                publication_id=publication.id,
                label=label,
                locale=locale,
                name={locale: path.name},
                seq=seq,
            )
        )
        file = self.add_file(
            path, locale, genre=genre, assoc_type="galley", assoc_id=galley.id, content=content
        )
        galley.submission_file_id = file.id
        galley = self.repository.update_galley(galley)
        logger.debug(f"Added {label} galley {path.name} to publication {publication.id}")
        return galley, file

    def add_pdf_galley(self, publication: Publication) -> int:
        """Attach the PDF as galley 1.

        Returns:
            The last galley sequence used, 0 when there is no PDF
        """
        pdf = self.files.submission_file
        if pdf is None:
            logger.warning(f"No PDF galley in {self.version.label}")
            return 0
        self.add_galley(publication, pdf, "PDF", publication.locale, 1)
        return 1

    def add_supplementary_galleys(self, publication: Publication, first_seq: int) -> int:
        supplements = self.files.supplementary_files
        for i, path in enumerate(supplements):
            label = "Supplement" if len(supplements) == 1 else f"Supplement {i + 1}"
            self.add_galley(
                publication, path, label, publication.locale, first_seq + i, genre="OTHER"
            )
        return first_seq + len(supplements) - 1

    def add_html_galleys(self, publication: Publication, first_seq: int) -> int:
        """Attach the HTML renditions with the images they embed.

        A rendition named ``<name>.<lang>.html`` gets the locale of ``<lang>``,
        others get the publication locale. Images are served from the
        ``graphic/`` directory next to the file.

        Returns:
            The last galley sequence used

        Raises:
            MissingAssetError: If an embedded image is not on disk
        """
        html_files = self.files.html_files
        for i, path in enumerate(html_files):
            parts = path.stem.split(".")
            locale = self.get_locale(parts[-1]) if len(parts) > 1 else publication.locale
            content = self.prepare_html(path)
            _galley, file = self.add_galley(
                publication, path, "HTML", locale, first_seq + i, content=content.encode("utf-8")
            )
            graphic_dir = path.parent / GRAPHIC_DIR
            if graphic_dir.is_dir():
                for asset in sorted(graphic_dir.iterdir()):
                    if asset.is_dir():
                        raise ArticleImportError(
                            f"Unexpected directory {asset.name} in {GRAPHIC_DIR}/ of {self.version.label}"
                        )
                    self.add_dependent_file(asset, file, locale)
        return first_seq + len(html_files) - 1

    def prepare_html(self, path: Path) -> str:
        """Rewrite an HTML rendition for serving as a galley.

        Image sources lose their ``graphic/`` prefix, TIFF images are
        swapped for their JPEG conversion and bare email links become
        ``mailto:`` links.

        Raises:
            MissingAssetError: If an image, or the JPEG of a TIFF image, is missing
        """
        graphic_dir = path.parent / GRAPHIC_DIR
        html = path.read_text(encoding="utf-8").replace(f'src="{GRAPHIC_DIR}/', 'src="')

        def fix_src(match: re.Match) -> str:
            src = unquote(match.group(1))
            if not src or src.startswith(("/", "http:", "https:", "data:")):
                return match.group(0)
            asset = Path(src)
            if asset.suffix.lower() in TIFF_SUFFIXES:
                jpg = asset.with_suffix(".jpg")
                if not (graphic_dir / jpg).is_file():
                    raise MissingAssetError(f"Convert {src} to jpg", path=str(graphic_dir / src))
                return f'src="{jpg.as_posix()}"'
            if not (graphic_dir / asset).is_file():
                raise MissingAssetError(f"Missing file {src}", path=str(graphic_dir / src))
            return match.group(0)

        html = SRC_PATTERN.sub(fix_src, html)
        ids = set(ID_PATTERN.findall(html))

        def fix_href(match: re.Match) -> str:
            href = match.group(1)
            if EMAIL_PATTERN.match(href):
                return f'href="mailto:{href}"'
            if href.startswith("#") and href[1:] and href[1:] not in ids:
                logger.warning(f"Broken anchor {href} in {path.name}")
            return match.group(0)

        return HREF_PATTERN.sub(fix_href, html)

    def add_jats_file(self, publication: Publication) -> SubmissionFile:
        """Store the metadata file itself with the assets it references."""
        metadata = self.files.metadata_file
        locale = publication.locale
        jats_file = self.add_file(metadata, locale, file_stage="jats", genre="DOCUMENT")

        seen = set()
        for href in self.document.evaluate("//asset/@xlink:href|//graphic/@xlink:href"):
            href = str(href).strip()
            if not href or href.lower() in seen:
                continue
            seen.add(href.lower())
            asset = self.find_asset(metadata.parent, href)
            if asset is None:
                logger.warning(f"Asset {href} referenced by {metadata.name} not found")
                continue
            self.add_dependent_file(asset, jats_file, locale)
        return jats_file

    def find_asset(self, directory: Path, href: str) -> Path | None:
        """Locate a referenced asset next to the metadata file or in ``graphic/``.

        Names are compared case-insensitively, and a reference without an
        extension matches a file with the same stem.
        """
        wanted = href.lower()
        for folder in (directory, directory / GRAPHIC_DIR):
            if not folder.is_dir():
                continue
            candidates = sorted(p for p in folder.iterdir() if p.is_file())
            for path in candidates:
                if path.name.lower() == wanted:
                    return path
            for path in candidates:
                if path.stem.lower() == wanted:
                    return path
        return None
