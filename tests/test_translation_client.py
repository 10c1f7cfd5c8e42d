from __future__ import annotations

import logging

import pytest

from turntalk.contracts import TranslationRequest, TranslationResult
from turntalk.nlp.translator.base import Translator
from turntalk.nlp.translator.client import TRANSLATION_FAILED, TranslationClient, clean_reply


class _ReplyTranslator(Translator):
    def __init__(self, reply: str = "", fail: Exception | None = None) -> None:
        self.reply = reply
        self.fail = fail
        self.requests: list[TranslationRequest] = []

    @property
    def name(self) -> str:
        return "reply"

    def translate(self, req: TranslationRequest) -> TranslationResult:
        self.requests.append(req)
        if self.fail is not None:
            raise self.fail
        return TranslationResult(source_text=req.text, translated_text=self.reply, provider=self.name)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("  नमस्ते \n", "नमस्ते"),
        ('"Hello"', "Hello"),
        ("'Hello'", "Hello"),
        ("“வணக்கம்”", "வணக்கம்"),
        ("«Bonjour»", "Bonjour"),
        ('""Hello""', '"Hello"'),
        ('He said "hi"', 'He said "hi"'),
        ('"', '"'),
        ("", ""),
    ],
)
def test_clean_reply(raw: str, expected: str) -> None:
    assert clean_reply(raw) == expected


def test_client_builds_request_and_returns_text() -> None:
    translator = _ReplyTranslator('"नमस्ते"')
    outcome = TranslationClient(translator).translate("Hello", "hi", "en")

    assert outcome.ok
    assert outcome.text == "नमस्ते"
    assert outcome.error is None
    assert translator.requests == [TranslationRequest(text="Hello", source_lang="en", target_lang="hi")]


def test_client_turns_exception_into_failure(caplog) -> None:
    logger = logging.getLogger("turntalk.test.client")
    translator = _ReplyTranslator(fail=ConnectionError("connection reset"))

    with caplog.at_level(logging.ERROR, logger="turntalk.test.client"):
        outcome = TranslationClient(translator, logger=logger).translate("Hello", "ta")

    assert not outcome.ok
    assert outcome.text == ""
    assert outcome.error.startswith("Translation failed")
    assert "connection reset" in outcome.error
    assert any(r.getMessage() == "translation_error" for r in caplog.records)


@pytest.mark.parametrize("reply", ["", "   ", '""'])
def test_client_empty_reply_is_failure(reply: str) -> None:
    outcome = TranslationClient(_ReplyTranslator(reply)).translate("Hello", "hi")
    assert not outcome.ok
    assert outcome.error == TRANSLATION_FAILED
