"""Journal section schema."""

from pydantic import BaseModel


class Section(BaseModel):
    """A journal section (e.g., "Articles", "Reviews").

    Sections are shared by many articles and are resolved by their title.

    Attributes:
        id: Repository identifier, None until inserted
        context_id: Owning journal
        title: Localized section title
        abbrev: Localized abbreviation
        policy: Localized section policy text
    """

    id: int | None = None
    context_id: int
    title: dict[str, str] = {}
    abbrev: dict[str, str] = {}
    policy: dict[str, str] = {}
    abstracts_not_required: bool = True
    meta_indexed: bool = True
    meta_reviewed: bool = False
    editor_restricted: bool = True
    hide_title: bool = False
    hide_author: bool = False
