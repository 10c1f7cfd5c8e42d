from __future__ import annotations

import logging

from turntalk.app.diagnostics import describe_failure
from turntalk.contracts import TranslationOutcome, TranslationRequest
from turntalk.nlp.translator.base import Translator

_QUOTE_PAIRS = (('"', '"'), ("'", "'"), ("“", "”"), ("‘", "’"), ("«", "»"))

TRANSLATION_FAILED = "Translation failed. Please try again."


def clean_reply(text: str) -> str:
    """Strip whitespace and one layer of wrapping quotes the model was told not to add."""
    out = str(text or "").strip()
    for left, right in _QUOTE_PAIRS:
        if len(out) >= 2 and out.startswith(left) and out.endswith(right):
            return out[len(left) : -len(right)].strip()
    return out


class TranslationClient:
    """
    Single request/response translation. Never raises: transport, service and
    empty-reply errors all come back as a failed TranslationOutcome. No retry.
    """

    def __init__(self, translator: Translator, *, logger: logging.Logger | None = None) -> None:
        self.translator = translator
        self.logger = logger

    def translate(self, text: str, target_code: str, source_code: str = "en") -> TranslationOutcome:
        req = TranslationRequest(text=text, source_lang=source_code, target_lang=target_code)
        try:
            res = self.translator.translate(req)
        except Exception as e:
            if self.logger is not None:
                self.logger.exception(
                    "translation_error",
                    extra={"provider": self.translator.name, "target": target_code, "chars": len(text)},
                )
            return TranslationOutcome(error=describe_failure("Translation failed", e))

        translated = clean_reply(getattr(res, "translated_text", ""))
        if not translated:
            if self.logger is not None:
                self.logger.warning(
                    "translation_empty",
                    extra={"provider": self.translator.name, "target": target_code},
                )
            return TranslationOutcome(error=TRANSLATION_FAILED)
        return TranslationOutcome(text=translated)
