"""Journal category schema."""

from pydantic import BaseModel


class Category(BaseModel):
    """A browsing category, resolved by its URL path.

    Attributes:
        id: Repository identifier, None until inserted
        context_id: Owning journal
        path: URL-safe unique path (e.g., "public-health-en")
        title: Localized category title
        parent_id: Parent category, None for top-level categories
        sort_option: Listing order of the category's publications
    """

    id: int | None = None
    context_id: int
    path: str
    title: dict[str, str] = {}
    parent_id: int | None = None
    sort_option: str = "datePublished-2"
