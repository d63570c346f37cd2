"""Command-line interface for article-importer."""

import argparse
import logging
import sys
from pathlib import Path

from article_importer.config import AUTHOR_ROLE, EDITOR_ROLE, ImportConfiguration
from article_importer.exceptions import ConfigurationError
from article_importer.pipeline import Orchestrator
from article_importer.repository import InMemoryRepository, Repository, RestRepository
from article_importer.transformers import JatsHTMLTransformer
from schemas import Context, User

DEFAULT_SECTION_NAME = "Articles"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def dry_run_repository(args: argparse.Namespace) -> InMemoryRepository:
    """Build an in-memory repository holding the journal and accounts named on the command line."""
    repository = InMemoryRepository()
    repository.add_context(
        Context(
            id=0,
            path=args.context,
            name={"en": args.context},
            supported_locales=["en"],
            user_groups={AUTHOR_ROLE: 1, EDITOR_ROLE: 2},
        )
    )
    for username in dict.fromkeys([args.username, args.editor]):
        repository.add_user(
            User(id=0, username=username, email=args.email, roles=[EDITOR_ROLE, AUTHOR_ROLE])
        )
    return repository


def build_repository(args: argparse.Namespace) -> Repository:
    if args.dry_run or not args.repository:
        return dry_run_repository(args)
    return RestRepository({"base_url": args.repository, "token": args.token})


def import_articles(args: argparse.Namespace) -> int:
    """Execute the import.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 when the run completed, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    configuration = ImportConfiguration(
        context_path=args.context,
        username=args.username,
        editor_username=args.editor,
        email=args.email,
        import_path=args.import_path.resolve(),
        generate_html=not args.no_html,
        default_section_name=args.section,
        category_as_section=args.category_as_section,
    )

    repository = build_repository(args)
    if isinstance(repository, InMemoryRepository):
        logger.info("Dry run: records are kept in memory and discarded")

    try:
        import_context = configuration.resolve(repository)
        transformer = JatsHTMLTransformer() if configuration.generate_html else None
        report = Orchestrator(import_context, repository, html_transformer=transformer).run()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e.message}")
        return 1
    except Exception as e:
        logger.error(f"Import failed: {e}")
        return 1
    finally:
        if isinstance(repository, RestRepository):
            repository.close()

    logger.info(f"  Imported: {report.imported}")
    logger.info(f"  Skipped: {report.skipped}")
    logger.info(f"  Failed: {report.failed}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="article-importer",
        description="Import JATS and A++ article exports into a journal.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--no-html",
        action="store_true",
        help="Do not render HTML galleys from JATS full text",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--repository",
        metavar="URL",
        help="Base URL of the journal REST API",
    )
    target.add_argument(
        "--dry-run",
        action="store_true",
        help="Import into an in-memory repository (default when no --repository is given)",
    )
    parser.add_argument(
        "--token",
        help="API token sent as a bearer token to the repository",
    )
    parser.add_argument(
        "--section",
        default=DEFAULT_SECTION_NAME,
        help=f"Section for articles that name none (default: {DEFAULT_SECTION_NAME})",
    )
    parser.add_argument(
        "--category-as-section",
        action="store_true",
        help="Use the first subject category of an article as its section",
    )
    parser.add_argument("context", help="URL path of the target journal")
    parser.add_argument("username", help="Account the import runs as")
    parser.add_argument("editor", help="Account assigned as editor of the submissions")
    parser.add_argument("email", help="Email for authors that have none")
    parser.add_argument("import_path", type=Path, help="Root of the volume/issue/article tree")

    args = parser.parse_args(argv)
    return import_articles(args)


if __name__ == "__main__":
    sys.exit(main())
