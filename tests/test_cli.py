"""Tests for the CLI module."""

import argparse
import logging
from unittest.mock import patch

import httpx
import pytest

from article_importer.cli import build_repository, main
from article_importer.repository import InMemoryRepository, RestRepository

BODY = "<body><sec><title>Introduction</title><p>Text.</p></sec></body>"


def cli_args(import_root, *options):
    return [*options, "journal", "importer", "editor", "imports@example.org", str(import_root)]


class TestCLIImport:
    """Tests for the import command."""

    def test_dry_run(self, import_root, make_article, jats_xml, caplog):
        """A dry run imports into memory and reports the counts."""
        make_article(xml=jats_xml())

        with caplog.at_level(logging.INFO):
            result = main(cli_args(import_root, "--dry-run"))

        assert result == 0
        assert "Dry run" in caplog.text
        assert "Imported: 1" in caplog.text
        assert "Skipped: 0" in caplog.text

    def test_html_generated_by_default(self, import_root, make_article, jats_xml):
        directory = make_article(xml=jats_xml(body=BODY))

        assert main(cli_args(import_root)) == 0
        assert (directory / "article.html").exists()

    def test_no_html_flag(self, import_root, make_article, jats_xml):
        """--no-html leaves the JATS body unrendered."""
        directory = make_article(xml=jats_xml(body=BODY))

        assert main(cli_args(import_root, "--no-html")) == 0
        assert not (directory / "article.html").exists()

    def test_skips_do_not_fail_the_run(self, import_root, make_article, caplog):
        make_article(xml="<record/>")

        with caplog.at_level(logging.INFO):
            result = main(cli_args(import_root))

        assert result == 0
        assert "Skipped: 1" in caplog.text

    def test_missing_import_path(self, tmp_path, caplog):
        result = main(cli_args(tmp_path / "missing"))

        assert result == 1
        assert "Invalid configuration: Import path not found" in caplog.text

    @patch("article_importer.cli.Orchestrator")
    def test_handles_exception(self, mock_orchestrator_class, import_root, caplog):
        """Unexpected errors end the run with exit code 1."""
        mock_orchestrator_class.return_value.run.side_effect = RuntimeError("boom")

        result = main(cli_args(import_root))

        assert result == 1
        assert "Import failed: boom" in caplog.text

    def test_unknown_journal_on_repository(self, import_root, caplog):
        """A journal missing from the REST repository is a configuration error."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
        repository = RestRepository(
            {"base_url": "https://journal.example.org/api", "transport": transport}
        )

        with patch("article_importer.cli.build_repository", return_value=repository):
            result = main(cli_args(import_root, "--repository", "https://journal.example.org/api"))

        assert result == 1
        assert "Invalid configuration: Journal not found: journal" in caplog.text
        assert repository._client is None


class TestCLIArguments:
    """Tests for argument parsing."""

    def test_missing_arguments(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["journal"])

        assert exc_info.value.code == 2

    def test_repository_and_dry_run_are_exclusive(self, import_root):
        with pytest.raises(SystemExit) as exc_info:
            main(cli_args(import_root, "--dry-run", "--repository", "https://example.org"))

        assert exc_info.value.code == 2

    def test_help_flag(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "--no-html" in captured.out

    def test_verbose_flag_accepted(self, import_root):
        assert main(cli_args(import_root, "-v")) == 0


class TestBuildRepository:
    """Tests for choosing the repository."""

    def make_args(self, **overrides):
        values = {
            "repository": None,
            "dry_run": False,
            "token": None,
            "context": "journal",
            "username": "importer",
            "editor": "editor",
            "email": "imports@example.org",
        }
        values.update(overrides)
        return argparse.Namespace(**values)

    def test_in_memory_without_url(self):
        """Without a repository URL the journal and accounts are simulated."""
        repository = build_repository(self.make_args())

        assert isinstance(repository, InMemoryRepository)
        context = repository.get_context("journal")
        assert context.user_groups == {"author": 1, "editor": 2}
        assert repository.get_user(context.id, "editor").has_role("editor")

    def test_same_user_and_editor(self):
        repository = build_repository(self.make_args(editor="importer"))

        assert len(repository.users) == 1

    def test_rest_repository_with_token(self):
        repository = build_repository(
            self.make_args(repository="https://journal.example.org/api", token="secret")
        )

        assert isinstance(repository, RestRepository)
        assert repository.base_url == "https://journal.example.org/api"
        assert repository.headers["Authorization"] == "Bearer secret"
        assert "User-Agent" in repository.headers

    def test_dry_run_wins(self):
        repository = build_repository(
            self.make_args(repository="https://journal.example.org/api", dry_run=True)
        )

        assert isinstance(repository, InMemoryRepository)
