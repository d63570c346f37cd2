"""Journal issue schema."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class Issue(BaseModel):
    """A journal issue, identified by its volume and number.

    Attributes:
        id: Repository identifier, None until inserted
        context_id: Owning journal
        volume: Volume number
        number: Issue number label (may be non-numeric, e.g., "1-2")
        year: Publication year
        title: Localized issue title
        published: Whether the issue is published
        current: Whether this is the journal's current issue
        date_published: Publication timestamp
        access_status: Open access or subscription
        cover_image: Locale to public file name of the cover
    """

    id: int | None = None
    context_id: int
    volume: int
    number: str
    year: int | None = None
    title: dict[str, str] = {}
    published: bool = True
    current: bool = False
    date_published: datetime | None = None
    date_modified: datetime | None = None
    access_status: Literal["open", "subscription"] = "open"
    show_volume: bool = True
    show_number: bool = True
    show_year: bool = True
    show_title: bool = False
    cover_image: dict[str, str] = {}
