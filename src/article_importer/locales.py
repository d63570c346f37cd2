"""Locale resolution for language tags found in article metadata.

Documents declare languages loosely ("EN", "fre", "pt-BR"). The journal
only accepts its supported locales ("en", "fr_CA", "pt_BR"), so every tag
is mapped onto that space through ISO 639 conversions.
"""

import logging
from functools import cache

import pycountry

logger = logging.getLogger(__name__)


@cache
def iso3_from_iso1(code: str) -> str | None:
    """Convert an ISO 639-1 code to ISO 639-3.

    Examples:
        >>> iso3_from_iso1("fr")
        'fra'
    """
    if len(code) != 2:
        return None
    try:
        found = pycountry.languages.get(alpha_2=code)
    except (KeyError, LookupError):
        return None
    return found.alpha_3 if found else None


@cache
def iso3_from_locale(locale: str) -> str | None:
    """Convert a locale ("pt_BR", "pt-br", "por") to its ISO 639-3 language.

    Examples:
        >>> iso3_from_locale("pt_BR")
        'por'
    """
    language = locale.replace("-", "_").split("_")[0].lower()
    if len(language) == 2:
        return iso3_from_iso1(language)
    if len(language) == 3:
        try:
            found = pycountry.languages.lookup(language)
        except LookupError:
            return None
        return found.alpha_3
    return None


@cache
def iso1_from_iso3(code: str) -> str | None:
    """Convert an ISO 639-3 code to ISO 639-1, None when the language has none."""
    try:
        found = pycountry.languages.get(alpha_3=code)
    except (KeyError, LookupError):
        return None
    if found is None:
        return None
    return getattr(found, "alpha_2", None)


def iso1_from_locale(locale: str | None) -> str | None:
    """Return the two-letter language of a locale (e.g., "fr_CA" -> "fr")."""
    if not locale:
        return None
    iso3 = iso3_from_locale(locale)
    return iso1_from_iso3(iso3) if iso3 else None


class LocaleResolver:
    """Maps raw language tags onto the journal's locales.

    The resolver carries a default locale, which starts as the journal's
    primary locale and is replaced by the document language once the
    metadata is loaded. Every locale handed out is recorded in
    ``used_locales``.

    Attributes:
        supported_locales: Locales the journal accepts
        default_locale: Locale returned for empty or unresolvable tags
        used_locales: Locales returned so far, in first-use order
    """

    def __init__(self, supported_locales: list[str], default_locale: str):
        self.supported_locales = list(supported_locales)
        self.default_locale = default_locale
        self.used_locales: dict[str, None] = {}

    def is_valid(self, locale: str) -> bool:
        return locale in self.supported_locales

    def resolve(self, raw: str | None = None) -> str:
        """Resolve a language tag to a locale.

        A tag that is already a supported locale is returned unchanged.
        Otherwise its language is compared with the default locale and the
        supported locales, so "fr" in a journal using "fr_CA" becomes
        "fr_CA" rather than a near-duplicate "fr". Languages the journal
        does not support map to their ISO 639-1 code.

        Args:
            raw: Language tag from the document, may be empty

        Returns:
            The resolved locale
        """
        locale = raw.strip() if raw else None
        if locale and not self.is_valid(locale):
            locale = self._convert(locale.lower())
        locale = locale or self.default_locale
        self.used_locales.setdefault(locale, None)
        return locale

    def _convert(self, tag: str) -> str | None:
        iso3 = iso3_from_iso1(tag) or iso3_from_locale(tag)
        if not iso3:
            logger.debug(f"Unrecognized language tag {tag!r}, using {self.default_locale}")
            return None
        if iso3 == iso3_from_locale(self.default_locale):
            return self.default_locale
        for supported in self.supported_locales:
            if iso3_from_locale(supported) == iso3:
                return supported
        return iso1_from_iso3(iso3)
