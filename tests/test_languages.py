from __future__ import annotations

import pytest

from turntalk.contracts import LanguageDescriptor
from turntalk.languages import LANGUAGES, LanguageRegistry


def test_default_languages() -> None:
    assert LANGUAGES.codes() == ["en", "hi", "te", "ta", "bho"]
    assert [lang.display_name for lang in LANGUAGES] == ["English", "Hindi", "Telugu", "Tamil", "Bhojpuri"]
    assert LANGUAGES.recognition_locale("bho") == "bho-IN"
    assert LANGUAGES.recognition_locale("en") == "en-US"
    assert "ta" in LANGUAGES
    assert "fr" not in LANGUAGES
    assert len(LANGUAGES) == 5


def test_unknown_code_lookup() -> None:
    with pytest.raises(ValueError, match="unsupported language code"):
        LANGUAGES.get("fr")
    assert LANGUAGES.display_name("fr") == "FR"


def test_registry_rejects_duplicate_and_empty() -> None:
    en = LanguageDescriptor("en", "English", "en-US")
    with pytest.raises(ValueError, match="duplicate"):
        LanguageRegistry([en, LanguageDescriptor("en", "English (UK)", "en-GB")])
    with pytest.raises(ValueError):
        LanguageRegistry([])
