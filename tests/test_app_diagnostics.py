from __future__ import annotations

from turntalk.app.diagnostics import describe_failure, hint_for_exception, summarize_exception


def test_summarize_exception_picks_last_meaningful_line() -> None:
    detail = (
        "Traceback (most recent call last):\n"
        '  File "x.py", line 1, in <module>\n'
        "    boom()\n"
        "RuntimeError: failed to start worker"
    )
    assert summarize_exception(detail) == "RuntimeError: failed to start worker"


def test_summarize_exception_truncates_long_line() -> None:
    detail = "ValueError: " + ("x" * 500)
    out = summarize_exception(detail, max_len=60)
    assert out.startswith("ValueError: ")
    assert out.endswith("...")
    assert len(out) <= 60


def test_summarize_exception_empty() -> None:
    assert summarize_exception("") == "Unknown error."
    assert summarize_exception("  \n ") == "Unknown error."


def test_hint_for_exception_missing_api_key() -> None:
    hint = hint_for_exception("RuntimeError: GEMINI_API_KEY is not set")
    assert "GEMINI_API_KEY" in hint


def test_hint_for_exception_missing_package() -> None:
    hint = hint_for_exception("ModuleNotFoundError: No module named 'pyttsx3'")
    assert "package is missing" in hint


def test_hint_for_exception_default() -> None:
    hint = hint_for_exception("RuntimeError: unknown")
    assert hint == "Check logs for full traceback."


def test_describe_failure_without_specific_hint() -> None:
    out = describe_failure("Translation failed", TimeoutError("deadline exceeded"))
    assert out == "Translation failed. Please try again. (TimeoutError: deadline exceeded)"


def test_describe_failure_with_hint() -> None:
    out = describe_failure("Speech recognition failed", RuntimeError("Microphone init failed"))
    assert out.startswith("Speech recognition failed. Microphone init failed.")
    assert out.endswith("(RuntimeError: Microphone init failed)")
