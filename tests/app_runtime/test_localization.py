"""Unit tests for localized value lookup and helpers."""

from __future__ import annotations

from hector.app_runtime.localization import (
    AVAILABLE_LANGUAGES,
    DEFAULT_LANGUAGE,
    add_language,
    available_languages,
    create_localizable,
    has_language,
    is_complete,
    resolve_localized,
    set_localized,
)

# ---------------------------------------------------------------------------
# resolve_localized
# ---------------------------------------------------------------------------


def test_resolve_empty_or_missing_is_none() -> None:
    assert resolve_localized({}, "pt-BR") is None
    assert resolve_localized(None, "pt-BR") is None


def test_resolve_exact_language() -> None:
    assert resolve_localized({"en-US": "Hi", "pt-BR": "Oi"}, "pt-BR") == "Oi"


def test_resolve_falls_back_to_default_language() -> None:
    assert resolve_localized({"en-US": "Hi"}, "pt-BR") == "Hi"


def test_resolve_falls_back_to_first_key() -> None:
    assert resolve_localized({"fr-FR": "Bonjour"}, "pt-BR", "en-US") == "Bonjour"
    assert resolve_localized({"fr-FR": "Bonjour", "de-DE": "Hallo"}, "pt-BR") == "Bonjour"


def test_resolve_custom_fallback() -> None:
    value = {"es-ES": "Hola", "en-US": "Hi", "fr-FR": "Salut"}
    assert resolve_localized(value, "ja-JP", "fr-FR") == "Salut"


def test_resolve_skips_none_entries() -> None:
    assert resolve_localized({"pt-BR": None, "en-US": "Hi"}, "pt-BR") == "Hi"


def test_resolve_keeps_empty_string() -> None:
    # An explicitly empty translation is still a translation.
    assert resolve_localized({"pt-BR": "", "en-US": "Hi"}, "pt-BR") == ""


def test_resolve_non_string_values() -> None:
    assert resolve_localized({"en-US": ["a", "b"]}, "en-US") == ["a", "b"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_set_localized_returns_copy() -> None:
    original = {"en-US": "Hi"}
    updated = set_localized(original, "pt-BR", "Oi")
    assert updated == {"en-US": "Hi", "pt-BR": "Oi"}
    assert original == {"en-US": "Hi"}


def test_set_localized_from_none() -> None:
    assert set_localized(None, "en-US", "Hi") == {"en-US": "Hi"}


def test_create_localizable() -> None:
    assert create_localizable(DEFAULT_LANGUAGE, "Untitled App") == {"en-US": "Untitled App"}


def test_add_language_keeps_existing_value() -> None:
    assert add_language({"en-US": "Hi"}, "en-US", "") == {"en-US": "Hi"}
    assert add_language({"en-US": "Hi"}, "pt-BR", "") == {"en-US": "Hi", "pt-BR": ""}


def test_has_language_and_available_languages() -> None:
    value = {"en-US": "Hi", "pt-BR": "Oi"}
    assert has_language(value, "pt-BR") is True
    assert has_language(value, "fr-FR") is False
    assert has_language(None, "en-US") is False
    assert available_languages(value) == ["en-US", "pt-BR"]
    assert available_languages(None) == []


def test_is_complete() -> None:
    value = {"en-US": "Hi", "pt-BR": "Oi"}
    assert is_complete(value, ["en-US", "pt-BR"]) is True
    assert is_complete(value, ["en-US", "fr-FR"]) is False
    assert is_complete(None, ["en-US"]) is False


def test_is_complete_defaults_to_shipped_languages() -> None:
    assert AVAILABLE_LANGUAGES == ["en-US", "pt-BR"]
    assert is_complete({"en-US": "Hi", "pt-BR": "Oi"}) is True
    assert is_complete({"en-US": "Hi"}) is False
