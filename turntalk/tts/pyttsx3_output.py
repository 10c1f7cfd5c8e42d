from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Iterable, Optional

from turntalk.app.diagnostics import describe_failure
from turntalk.contracts import SpeechResult
from turntalk.tts.base import SpeechOutput


def _norm_tag(value: Any) -> str:
    if isinstance(value, bytes):
        # espeak reports languages as length-prefixed bytes, e.g. b"\x05en-us"
        value = value.decode("utf-8", errors="ignore")
    text = "".join(ch for ch in str(value) if ch.isprintable())
    return text.strip().lower().replace("_", "-")


def pick_voice(voices: Iterable[Any], locale: str) -> Optional[Any]:
    """Best voice for a locale: exact locale, then primary language, then voice id. None if no match."""
    want = _norm_tag(locale)
    primary = want.split("-")[0]
    if not primary:
        return None

    voices = list(voices)
    by_primary = None
    by_id = None
    for voice in voices:
        tags = [_norm_tag(v) for v in (getattr(voice, "languages", None) or [])]
        if want in tags:
            return voice
        if by_primary is None and any(t.split("-")[0] == primary for t in tags):
            by_primary = voice
        if by_id is None:
            ident = _norm_tag(getattr(voice, "id", "")).replace("\\", "/")
            tokens = ident.replace(".", "/").replace("+", "/").split("/")
            if primary in tokens or want in tokens:
                by_id = voice
    return by_primary or by_id


class Pyttsx3SpeechOutput(SpeechOutput):
    """
    Platform TTS through pyttsx3. The engine is created and driven on one
    dedicated worker thread; speak() queues behind any utterance in progress.
    """

    def __init__(
        self,
        *,
        rate: int = 170,
        volume: float = 1.0,
        engine_factory: Callable[[], Any] | None = None,
    ) -> None:
        self.rate = int(rate)
        self.volume = max(0.0, min(1.0, float(volume)))
        self._engine_factory = engine_factory
        self._engine: Any = None
        self._speaking = threading.Event()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="turntalk-tts")

    def _get_engine(self) -> Any:
        if self._engine is None:
            if self._engine_factory is not None:
                self._engine = self._engine_factory()
            else:
                import pyttsx3

                self._engine = pyttsx3.init()
        return self._engine

    def is_supported(self) -> bool:
        try:
            self._executor.submit(self._get_engine).result(timeout=15)
        except Exception:
            return False
        return True

    @property
    def is_speaking(self) -> bool:
        return self._speaking.is_set()

    def speak(self, text: str, locale: str) -> "Future[SpeechResult]":
        return self._executor.submit(self._speak_blocking, text, locale)

    def _speak_blocking(self, text: str, locale: str) -> SpeechResult:
        self._speaking.set()
        try:
            engine = self._get_engine()
            voice = pick_voice(engine.getProperty("voices") or [], locale)
            if voice is not None:
                engine.setProperty("voice", voice.id)
            engine.setProperty("rate", self.rate)
            engine.setProperty("volume", self.volume)
            engine.say(text)
            engine.runAndWait()
            return SpeechResult()
        except Exception as e:
            return SpeechResult(error=describe_failure("Speech synthesis failed", e))
        finally:
            self._speaking.clear()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
