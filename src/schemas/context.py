"""Journal context and user account schemas.

A context is the journal the import targets. Users are the accounts the
importer acts as: the default author and the editor assigned to every
imported submission.
"""

from pydantic import BaseModel


class Context(BaseModel):
    """A journal in the target repository.

    Attributes:
        id: Repository identifier
        path: URL path of the journal (e.g., "jdoe")
        name: Localized journal name
        primary_locale: Locale used when a document declares none
        supported_locales: Locales the journal accepts for content
        user_groups: Role name to user group identifier (e.g., "author", "editor")
    """

    id: int
    path: str
    name: dict[str, str] = {}
    primary_locale: str = "en"
    supported_locales: list[str] = []
    user_groups: dict[str, int] = {}

    def localized_name(self, locale: str | None = None) -> str:
        """Return the journal name in *locale*, falling back to the primary locale."""
        if locale and self.name.get(locale):
            return self.name[locale]
        if self.name.get(self.primary_locale):
            return self.name[self.primary_locale]
        return next(iter(self.name.values()), self.path)


class User(BaseModel):
    """A user account.

    Attributes:
        id: Repository identifier
        username: Login name
        email: Contact email
        roles: Role names the user holds in the target journal
    """

    id: int
    username: str
    email: str | None = None
    roles: list[str] = []

    def has_role(self, role: str) -> bool:
        return role in self.roles
