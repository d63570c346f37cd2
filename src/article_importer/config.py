"""Run configuration and its resolution against the repository."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel

from article_importer.discovery import DEFAULT_IMAGE_EXTENSIONS
from article_importer.exceptions import ConfigurationError
from schemas import Context, User

if TYPE_CHECKING:
    from article_importer.parsers.base import BaseParser
    from article_importer.repository import Repository

logger = logging.getLogger(__name__)

AUTHOR_ROLE = "author"
EDITOR_ROLE = "editor"


class ImportConfiguration(BaseModel):
    """Settings of one import run.

    Attributes:
        context_path: URL path of the target journal
        username: Account the import runs as
        editor_username: Account assigned as editor of every submission
        email: Fallback email for authors without one
        import_path: Root of the volume/issue/article tree
        generate_html: Render HTML galleys from JATS full text
        default_section_name: Section used when the metadata names none
        category_as_section: Use the first subject category as section
        cover_filename: File stem of article and issue cover images
        image_extensions: Accepted image extensions, lower-case
        parser_names: Registered parser names, in probing order
    """

    context_path: str
    username: str
    editor_username: str
    email: str
    import_path: Path
    generate_html: bool = True
    default_section_name: str = "Articles"
    category_as_section: bool = False
    cover_filename: str = "cover"
    image_extensions: tuple[str, ...] = DEFAULT_IMAGE_EXTENSIONS
    parser_names: list[str] = ["aplusplus", "jats"]

    def parser_classes(self) -> list[type["BaseParser"]]:
        """Look up the configured parsers in the registry.

        Raises:
            ConfigurationError: If a name is not registered
        """
        from article_importer.parsers import PARSERS

        classes = []
        for name in self.parser_names:
            if name not in PARSERS:
                raise ConfigurationError(
                    f"Unknown parser {name!r}, expected one of {', '.join(PARSERS)}"
                )
            classes.append(PARSERS[name])
        return classes

    def resolve(self, repository: "Repository") -> "ImportContext":
        """Resolve the journal and accounts this configuration names.

        Args:
            repository: Repository to look them up in

        Returns:
            The resolved ImportContext

        Raises:
            ConfigurationError: If the journal, a user or a user group is
                missing, the editor lacks the editor role, or the import
                path is not a directory
        """
        if not self.import_path.is_dir():
            raise ConfigurationError(f"Import path not found: {self.import_path}")

        context = repository.get_context(self.context_path)
        if context is None:
            raise ConfigurationError(f"Journal not found: {self.context_path}")

        user = repository.get_user(context.id, self.username)
        if user is None:
            raise ConfigurationError(f"User not found: {self.username}")

        editor = repository.get_user(context.id, self.editor_username)
        if editor is None:
            raise ConfigurationError(f"Editor not found: {self.editor_username}")
        if not editor.has_role(EDITOR_ROLE):
            raise ConfigurationError(
                f"User {self.editor_username} is not an editor of {self.context_path}"
            )

        for role in (AUTHOR_ROLE, EDITOR_ROLE):
            if role not in context.user_groups:
                raise ConfigurationError(
                    f"Journal {self.context_path} has no {role} user group"
                )

        logger.debug(
            f"Resolved journal {context.path} (id {context.id}), "
            f"user {user.username}, editor {editor.username}"
        )
        return ImportContext(
            configuration=self,
            context=context,
            user=user,
            editor=editor,
            author_group_id=context.user_groups[AUTHOR_ROLE],
            editor_group_id=context.user_groups[EDITOR_ROLE],
            parser_classes=self.parser_classes(),
        )


@dataclass
class ImportContext:
    """A configuration resolved against the repository.

    Attributes:
        configuration: The settings of the run
        context: Target journal
        user: Account the import runs as
        editor: Editor assigned to imported submissions
        author_group_id: User group given to imported authors
        editor_group_id: User group of the editor assignment
        parser_classes: Parsers in probing order
    """

    configuration: ImportConfiguration
    context: Context
    user: User
    editor: User
    author_group_id: int
    editor_group_id: int
    parser_classes: list = field(default_factory=list)

    @property
    def supported_locales(self) -> list[str]:
        return self.context.supported_locales or [self.context.primary_locale]
