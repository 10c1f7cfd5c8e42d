from __future__ import annotations
import os
from typing import Any, Optional
from .base import Translator
from turntalk.contracts import TranslationRequest, TranslationResult
from turntalk.languages import LANGUAGES, LanguageRegistry

DEFAULT_MODEL = "gemini-2.0-flash"
API_KEY_ENV = "GEMINI_API_KEY"


def build_prompt(text: str, target_name: str) -> str:
    return (
        f"Translate this to {target_name} "
        f"(return only translated text without any additional text or quotes): {text}"
    )


class GeminiTranslator(Translator):
    """Translate by prompting a hosted Gemini model. The reply is taken verbatim."""

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        *,
        api_key: Optional[str] = None,
        languages: LanguageRegistry = LANGUAGES,
        model: Any = None,
    ) -> None:
        self.model_name = model_name
        self.api_key = api_key
        self.languages = languages
        self._model = model

    @property
    def name(self) -> str:
        return "gemini"

    def _get_model(self):
        if self._model is not None:
            return self._model

        key = self.api_key or os.getenv(API_KEY_ENV, "")
        if not key.strip():
            raise RuntimeError(f"{API_KEY_ENV} is not set; Gemini translation needs an API key")

        import google.generativeai as genai

        genai.configure(api_key=key)
        self._model = genai.GenerativeModel(model_name=self.model_name)
        return self._model

    def translate(self, req: TranslationRequest) -> TranslationResult:
        prompt = build_prompt(req.text, self.languages.display_name(req.target_lang))
        response = self._get_model().generate_content(prompt)
        return TranslationResult(
            source_text=req.text,
            translated_text=str(response.text or ""),
            provider=self.name,
        )
