from __future__ import annotations


def summarize_exception(detail: str, *, max_len: int = 220) -> str:
    text = str(detail or "").strip()
    if not text:
        return "Unknown error."
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines:
        return "Unknown error."
    for ln in reversed(lines):
        if ln.startswith("File "):
            continue
        if ln.startswith("^"):
            continue
        if ln.startswith("Traceback "):
            continue
        out = ln
        break
    else:
        out = lines[-1]
    if len(out) > max_len:
        return out[: max_len - 3].rstrip() + "..."
    return out


def hint_for_exception(summary: str) -> str:
    s = str(summary or "").lower()
    if "gemini_api_key" in s or "api key" in s or "api_key" in s:
        return "Set GEMINI_API_KEY in the environment and restart."
    if "no module named" in s or "is not installed" in s or "is not available" in s:
        return "A required package is missing in this virtualenv. Reinstall dependencies and retry."
    if "config file not found" in s:
        return "Configured JSON file is missing. Update the config path or restore the file."
    if "microphone" in s or ("sounddevice" in s and "failed" in s):
        return "Microphone init failed. Check input device selection and app mic permissions."
    if "argos" in s and "package" in s:
        return "No offline model for this language pair. Switch translator to gemini."
    return "Check logs for full traceback."


def describe_failure(prefix: str, exc: BaseException, *, max_len: int = 160) -> str:
    """One human-readable line for an adapter failure: what failed, why, and what to try."""
    summary = summarize_exception(f"{type(exc).__name__}: {exc}", max_len=max_len)
    hint = hint_for_exception(summary)
    if hint == "Check logs for full traceback.":
        return f"{prefix}. Please try again. ({summary})"
    return f"{prefix}. {hint} ({summary})"
