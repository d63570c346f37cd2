"""Tests for ArticleIterator, ArticleEntry and ArticleVersion."""

from article_importer.discovery import ArticleEntry, ArticleIterator
from article_importer.discovery.iterator import natural_key


def make_dirs(root, *paths, files=("article.xml",)):
    for path in paths:
        directory = root / path
        directory.mkdir(parents=True, exist_ok=True)
        for name in files:
            (directory / name).write_text("<x/>")


class TestArticleIterator:
    """Tests for directory traversal."""

    def test_yields_every_article_directory(self, tmp_path):
        """Every directory three levels deep is an entry."""
        make_dirs(tmp_path, "1/1/1", "1/1/2", "1/2/1", "2/1/1")

        labels = [entry.label for entry in ArticleIterator(tmp_path)]

        assert labels == ["1-1-1", "1-1-2", "1-2-1", "2-1-1"]

    def test_natural_order(self, tmp_path):
        """Numeric labels sort numerically."""
        make_dirs(tmp_path, "10/1/1", "2/1/1", "2/1/10", "2/1/9")

        labels = [entry.label for entry in ArticleIterator(tmp_path)]

        assert labels == ["2-1-1", "2-1-9", "2-1-10", "10-1-1"]

    def test_files_at_upper_levels_are_ignored(self, tmp_path):
        """Loose files above the article level are not entries."""
        make_dirs(tmp_path, "1/1/1")
        (tmp_path / "readme.txt").write_text("x")
        (tmp_path / "1" / "notes.txt").write_text("x")
        (tmp_path / "1" / "1" / "1.xml").write_text("<issue/>")

        assert [entry.label for entry in ArticleIterator(tmp_path)] == ["1-1-1"]

    def test_empty_article_directories_are_skipped(self, tmp_path):
        """Article directories without content are not entries."""
        make_dirs(tmp_path, "1/1/1")
        (tmp_path / "1" / "1" / "2").mkdir()

        assert [entry.label for entry in ArticleIterator(tmp_path)] == ["1-1-1"]

    def test_hidden_directories_are_skipped(self, tmp_path):
        """Dot-directories are never traversed."""
        make_dirs(tmp_path, "1/1/1", ".git/1/1")

        assert [entry.label for entry in ArticleIterator(tmp_path)] == ["1-1-1"]

    def test_restartable(self, tmp_path):
        """Iterating twice walks the tree twice."""
        make_dirs(tmp_path, "1/1/1", "1/1/2")
        iterator = ArticleIterator(tmp_path)

        assert len(list(iterator)) == 2
        assert len(list(iterator)) == 2

    def test_entries_carry_cover_settings(self, tmp_path):
        """Cover settings are handed to every entry."""
        make_dirs(tmp_path, "1/1/1")

        entry = next(iter(ArticleIterator(tmp_path, cover_filename="front", image_extensions=("png",))))

        assert entry.cover_filename == "front"
        assert entry.image_extensions == ("png",)


class TestArticleEntry:
    """Tests for entry identity and version discovery."""

    def test_identity_from_directory_names(self, tmp_path):
        """Volume, issue and article come from the directory names."""
        make_dirs(tmp_path, "12/3-4/a7")

        entry = ArticleEntry(tmp_path / "12" / "3-4" / "a7")

        assert entry.volume == 12
        assert entry.issue == "3-4"
        assert entry.article == "a7"
        assert entry.key == (12, "3-4", "a7")
        assert entry.label == "12-3-4-a7"

    def test_non_numeric_volume_is_zero(self, tmp_path):
        """Only the volume is coerced, to 0 when it is not a number."""
        make_dirs(tmp_path, "special/1/1")

        assert ArticleEntry(tmp_path / "special" / "1" / "1").volume == 0

    def test_numbered_versions_sorted_numerically(self, tmp_path):
        """Numbered subdirectories are versions, oldest first."""
        make_dirs(tmp_path, "1/1/1/10", "1/1/1/2", "1/1/1/1")
        (tmp_path / "1" / "1" / "1" / "graphic").mkdir()

        versions = ArticleEntry(tmp_path / "1" / "1" / "1").versions()

        assert [v.version for v in versions] == [1, 2, 10]
        assert versions[0].directory == tmp_path / "1" / "1" / "1" / "1"

    def test_implicit_version(self, tmp_path):
        """An article directory with files and no version level is version 1."""
        make_dirs(tmp_path, "1/1/1")

        versions = ArticleEntry(tmp_path / "1" / "1" / "1").versions()

        assert len(versions) == 1
        assert versions[0].version == 1
        assert versions[0].directory == tmp_path / "1" / "1" / "1"

    def test_no_versions(self, tmp_path):
        """A directory holding only non-version subdirectories has no versions."""
        (tmp_path / "1" / "1" / "1" / "extra").mkdir(parents=True)

        assert ArticleEntry(tmp_path / "1" / "1" / "1").versions() == []

    def test_version_files_and_label(self, tmp_path):
        """Each version classifies its own files."""
        make_dirs(tmp_path, "1/1/1/2", files=("article.xml", "article.pdf"))

        version = ArticleEntry(tmp_path / "1" / "1" / "1").versions()[0]

        assert version.files.submission_file.name == "article.pdf"
        assert version.label == "1-1-1 (version 2)"

    def test_issue_files_locate_issue_cover(self, tmp_path):
        """The issue cover is looked up in the issue directory."""
        make_dirs(tmp_path, "1/1/1")
        (tmp_path / "1" / "1" / "cover.jpg").write_bytes(b"jpg")

        entry = ArticleEntry(tmp_path / "1" / "1" / "1")

        assert entry.issue_files().cover_file == tmp_path / "1" / "1" / "cover.jpg"


class TestNaturalKey:
    """Tests for the natural sort key."""

    def test_mixed_labels(self):
        """Digits compare as numbers, text case-insensitively."""
        assert sorted(["b", "10", "2", "A", "1a"], key=natural_key) == ["1a", "2", "10", "A", "b"]
