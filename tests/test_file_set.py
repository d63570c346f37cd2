"""Tests for FileSetResolver."""

import pytest

from article_importer.discovery import FileSetResolver
from article_importer.exceptions import (
    UnexpectedCoverCountError,
    UnexpectedGalleyCountError,
    UnexpectedMetadataCountError,
)


def touch(directory, *names):
    for name in names:
        path = directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x")


class TestMetadataFile:
    """Tests for locating the XML metadata file."""

    def test_single_xml_file(self, tmp_path):
        """The only XML file is the metadata file."""
        touch(tmp_path, "article.xml", "article.pdf")

        assert FileSetResolver(tmp_path).metadata_file == tmp_path / "article.xml"

    def test_extension_is_case_insensitive(self, tmp_path):
        """Upper-case extensions are recognized."""
        touch(tmp_path, "ARTICLE.XML")

        assert FileSetResolver(tmp_path).metadata_file.name == "ARTICLE.XML"

    def test_missing_xml_raises(self, tmp_path):
        """A directory without XML raises with a count of zero."""
        touch(tmp_path, "article.pdf")

        with pytest.raises(UnexpectedMetadataCountError) as exc_info:
            FileSetResolver(tmp_path).metadata_file

        assert exc_info.value.count == 0

    def test_two_xml_files_raise(self, tmp_path):
        """Two XML files are ambiguous."""
        touch(tmp_path, "a.xml", "b.xml")

        with pytest.raises(UnexpectedMetadataCountError) as exc_info:
            FileSetResolver(tmp_path).metadata_file

        assert exc_info.value.count == 2


class TestSubmissionFile:
    """Tests for locating the PDF galley."""

    def test_single_pdf(self, tmp_path):
        """The PDF file is the submission file."""
        touch(tmp_path, "article.xml", "article.PDF")

        assert FileSetResolver(tmp_path).submission_file.name == "article.PDF"

    def test_no_pdf_returns_none(self, tmp_path):
        """A version without PDF has no submission file."""
        touch(tmp_path, "article.xml")

        assert FileSetResolver(tmp_path).submission_file is None

    def test_two_pdfs_raise(self, tmp_path):
        """Two PDF files are ambiguous."""
        touch(tmp_path, "a.pdf", "b.pdf")

        with pytest.raises(UnexpectedGalleyCountError):
            FileSetResolver(tmp_path).submission_file


class TestHtmlFiles:
    """Tests for HTML renditions."""

    def test_html_and_htm_sorted(self, tmp_path):
        """Both extensions are returned, sorted by name."""
        touch(tmp_path, "b.html", "a.fr.htm", "c.txt")

        names = [p.name for p in FileSetResolver(tmp_path).html_files]

        assert names == ["a.fr.htm", "b.html"]


class TestCoverFile:
    """Tests for cover image detection."""

    def test_cover_with_accepted_extension(self, tmp_path):
        """A cover image with an accepted extension is found."""
        touch(tmp_path, "cover.png", "article.xml")

        assert FileSetResolver(tmp_path).cover_file.name == "cover.png"

    def test_custom_cover_name_and_extensions(self, tmp_path):
        """The cover stem and extensions are configurable."""
        touch(tmp_path, "front.gif", "cover.png")

        resolver = FileSetResolver(tmp_path, cover_filename="front", image_extensions=["GIF"])

        assert resolver.cover_file.name == "front.gif"

    def test_other_extensions_ignored(self, tmp_path):
        """Files named like the cover with other extensions are ignored."""
        touch(tmp_path, "cover.pdf")

        assert FileSetResolver(tmp_path).cover_file is None

    def test_two_covers_raise(self, tmp_path):
        """Two cover images are ambiguous."""
        touch(tmp_path, "cover.jpg", "cover.png")

        with pytest.raises(UnexpectedCoverCountError) as exc_info:
            FileSetResolver(tmp_path).cover_file

        assert exc_info.value.count == 2


class TestSupplementaryFiles:
    """Tests for supplementary files."""

    def test_files_of_supplementary_directory(self, tmp_path):
        """Files next to the metadata file under supplementary/ are returned sorted."""
        touch(tmp_path, "article.xml", "supplementary/b.csv", "supplementary/a.zip")

        names = [p.name for p in FileSetResolver(tmp_path).supplementary_files]

        assert names == ["a.zip", "b.csv"]

    def test_no_supplementary_directory(self, tmp_path):
        """Without the directory there are no supplementary files."""
        touch(tmp_path, "article.xml")

        assert FileSetResolver(tmp_path).supplementary_files == []


class TestSnapshot:
    """Tests for the directory snapshot."""

    def test_snapshot_ignores_new_files_until_reload(self, tmp_path):
        """Files written after the first access appear only after reload()."""
        touch(tmp_path, "article.xml")
        resolver = FileSetResolver(tmp_path)
        assert resolver.html_files == []

        touch(tmp_path, "article.html")
        assert resolver.html_files == []

        resolver.reload()
        assert [p.name for p in resolver.html_files] == ["article.html"]

    def test_directories_are_not_files(self, tmp_path):
        """Subdirectories are not part of the file listing."""
        touch(tmp_path, "article.xml", "graphic/fig1.jpg")

        assert [p.name for p in FileSetResolver(tmp_path).files] == ["article.xml"]
