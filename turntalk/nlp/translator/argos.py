from __future__ import annotations
import threading
from .base import Translator
from turntalk.contracts import TranslationRequest, TranslationResult

class ArgosTranslator(Translator):
    """Offline translation; installs the pair's Argos package on first use."""

    def __init__(self, auto_install: bool = True):
        self.auto_install = auto_install
        self._ready_pairs: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "argos"

    def _ensure_ready(self, from_code: str, to_code: str) -> None:
        with self._lock:
            if (from_code, to_code) in self._ready_pairs:
                return

            import argostranslate.package
            import argostranslate.translate

            installed = argostranslate.translate.get_installed_languages()
            have_from = any(l.code == from_code for l in installed)
            have_to = any(l.code == to_code for l in installed)

            if not (have_from and have_to):
                if not self.auto_install:
                    raise RuntimeError("Argos model not installed and auto_install=False")

                argostranslate.package.update_package_index()
                available = argostranslate.package.get_available_packages()

                pkg = None
                for p in available:
                    if p.from_code == from_code and p.to_code == to_code:
                        pkg = p
                        break
                if pkg is None:
                    raise RuntimeError(f"No Argos package found for {from_code}->{to_code}")

                path = pkg.download()
                argostranslate.package.install_from_path(path)

            self._ready_pairs.add((from_code, to_code))

    def translate(self, req: TranslationRequest) -> TranslationResult:
        self._ensure_ready(req.source_lang, req.target_lang)
        import argostranslate.translate
        out = argostranslate.translate.translate(req.text, req.source_lang, req.target_lang)
        return TranslationResult(source_text=req.text, translated_text=out, provider=self.name)
