"""
Supported conversation languages.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from turntalk.contracts import LanguageDescriptor

DEFAULT_LANGUAGES: tuple[LanguageDescriptor, ...] = (
    LanguageDescriptor(code="en", display_name="English", recognition_locale="en-US"),
    LanguageDescriptor(code="hi", display_name="Hindi", recognition_locale="hi-IN"),
    LanguageDescriptor(code="te", display_name="Telugu", recognition_locale="te-IN"),
    LanguageDescriptor(code="ta", display_name="Tamil", recognition_locale="ta-IN"),
    LanguageDescriptor(code="bho", display_name="Bhojpuri", recognition_locale="bho-IN"),
)


class LanguageRegistry:
    """Fixed, ordered set of languages keyed by unique code."""

    def __init__(self, languages: Iterable[LanguageDescriptor] = DEFAULT_LANGUAGES) -> None:
        self._by_code: dict[str, LanguageDescriptor] = {}
        for lang in languages:
            if lang.code in self._by_code:
                raise ValueError(f"duplicate language code: {lang.code}")
            self._by_code[lang.code] = lang
        if not self._by_code:
            raise ValueError("language registry must not be empty")

    def __iter__(self) -> Iterator[LanguageDescriptor]:
        return iter(self._by_code.values())

    def __len__(self) -> int:
        return len(self._by_code)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def get(self, code: str) -> LanguageDescriptor:
        try:
            return self._by_code[code]
        except KeyError:
            raise ValueError(f"unsupported language code: {code}") from None

    def codes(self) -> list[str]:
        return list(self._by_code.keys())

    def display_name(self, code: str) -> str:
        """Display name for a code, falling back to the upper-cased code."""
        lang = self._by_code.get(code)
        if lang is None:
            return code.upper()
        return lang.display_name

    def recognition_locale(self, code: str) -> str:
        return self.get(code).recognition_locale


LANGUAGES = LanguageRegistry()
