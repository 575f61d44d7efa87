"""Localized value lookup.

A localizable value is a plain ``dict`` keyed by language code.  Partial
localization is normal, so lookups never fail: they walk a fallback chain
and return ``None`` only when nothing is set at all.

All runtime code resolves localized text through :func:`resolve_localized`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

DEFAULT_LANGUAGE = "en-US"

AVAILABLE_LANGUAGES = ["en-US", "pt-BR"]


def resolve_localized[T](
    value: Mapping[str, T] | None,
    lang: str,
    fallback: str = DEFAULT_LANGUAGE,
) -> T | None:
    """Return the value for *lang*, falling back to *fallback*, then to the first key.

    Lookup order:

    1. exact ``lang`` key
    2. ``fallback`` key
    3. first key in insertion order
    4. ``None`` if the map is empty or absent
    """
    if not value:
        return None
    if value.get(lang) is not None:
        return value[lang]
    if value.get(fallback) is not None:
        return value[fallback]
    return next(iter(value.values()))


def set_localized[T](value: Mapping[str, T] | None, lang: str, item: T) -> dict[str, T]:
    """Return a copy of *value* with *lang* set to *item*."""
    result = dict(value or {})
    result[lang] = item
    return result


def create_localizable[T](lang: str, item: T) -> dict[str, T]:
    return {lang: item}


def add_language[T](value: Mapping[str, T] | None, lang: str, empty: T) -> dict[str, T]:
    """Add *lang* with an empty value unless it already exists."""
    if value is not None and value.get(lang) is not None:
        return dict(value)
    return set_localized(value, lang, empty)


def has_language(value: Mapping[str, object] | None, lang: str) -> bool:
    return value is not None and value.get(lang) is not None


def available_languages(value: Mapping[str, object] | None) -> list[str]:
    return list(value) if value else []


def is_complete(
    value: Mapping[str, object] | None,
    required_languages: Iterable[str] = AVAILABLE_LANGUAGES,
) -> bool:
    """True if *value* has an entry for every required language."""
    if value is None:
        return False
    return all(value.get(lang) is not None for lang in required_languages)
