from __future__ import annotations
from .base import Translator
from .argos import ArgosTranslator
from .gemini import DEFAULT_MODEL, GeminiTranslator
from .stub import StubTranslator

PROVIDERS = ("gemini", "argos", "stub")


def get_translator(provider: str | None = None, *, gemini_model: str = DEFAULT_MODEL) -> Translator:
    provider = (provider or "gemini").lower().strip()

    if provider == "gemini":
        return GeminiTranslator(model_name=gemini_model)
    if provider == "argos":
        return ArgosTranslator()
    if provider == "stub":
        return StubTranslator()

    raise ValueError(f"Unknown translator provider: {provider}")
