"""Tests for the translator."""

from __future__ import annotations

import json

import pytest

from bookmark_keeper.config import LANGUAGE_STORAGE_KEY
from bookmark_keeper.i18n import TRANSLATIONS, Translator
from bookmark_keeper.storage import MemoryStore


def test_default_language_and_lookup() -> None:
    translator = Translator(MemoryStore())
    if translator.language != "cn":
        raise AssertionError("Chinese is the default language")
    if translator.t("app.title") != "书签管理器":
        raise AssertionError("Lookup failed")


def test_unknown_key_echoes_key() -> None:
    translator = Translator(MemoryStore())
    if translator.translate("does.not.exist") != "does.not.exist":
        raise AssertionError("Unknown keys should be echoed")


def test_set_and_toggle_language_persist() -> None:
    store = MemoryStore()
    translator = Translator(store)
    translator.set_language("en")
    if translator.t("app.title") != "Bookmark Manager":
        raise AssertionError("English lookup failed")
    if json.loads(store.get_item(LANGUAGE_STORAGE_KEY) or "null") != "en":
        raise AssertionError("Language should be persisted as JSON")
    if Translator(store).language != "en":
        raise AssertionError("A new translator should pick up the saved language")
    if translator.toggle_language() != "cn":
        raise AssertionError("Toggle should flip back to Chinese")
    with pytest.raises(ValueError, match="Unsupported language"):
        translator.set_language("fr")


def test_catalogues_have_same_keys() -> None:
    if set(TRANSLATIONS["cn"]) != set(TRANSLATIONS["en"]):
        raise AssertionError("Every key should exist in both languages")
