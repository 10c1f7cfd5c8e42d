from __future__ import annotations

import contextlib
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from turntalk.app.diagnostics import describe_failure
from turntalk.asr.base import UtteranceTranscriber
from turntalk.audio.mic import SoundDeviceMicSource
from turntalk.contracts import CaptureFinished, TranscriptUpdated
from turntalk.live.utterance import SingleUtteranceEndpointer

# Whisper has no model for these; recognise with the closest supported language.
_WHISPER_FALLBACKS = {
    "bho": "hi",
}


def whisper_language_for_locale(locale: str | None) -> Optional[str]:
    primary = str(locale or "").split("-")[0].strip().lower()
    if not primary:
        return None
    return _WHISPER_FALLBACKS.get(primary, primary)


class SpeechCapture(ABC):
    """
    One-shot speech capture. Each start listens for a single utterance and then
    goes idle, reporting through the event sink:
      TranscriptUpdated(text) while text accumulates,
      CaptureFinished(transcript, error) exactly once per started session.
    """

    @abstractmethod
    def is_supported(self) -> bool: ...

    @property
    @abstractmethod
    def is_capturing(self) -> bool: ...

    @abstractmethod
    def start_capture(self, locale: str) -> None: ...

    @abstractmethod
    def stop_capture(self) -> None: ...


class MicSpeechCapture(SpeechCapture):
    def __init__(
        self,
        *,
        mic: SoundDeviceMicSource,
        transcriber: UtteranceTranscriber,
        endpointer: SingleUtteranceEndpointer,
        emit: Callable[[object], None],
    ) -> None:
        self.mic = mic
        self.transcriber = transcriber
        self.endpointer = endpointer
        self.emit = emit
        self._lock = threading.Lock()
        self._stop_event: threading.Event | None = None
        self._active = False

    def is_supported(self) -> bool:
        return self.transcriber.is_available() and self.mic.has_input_device()

    @property
    def is_capturing(self) -> bool:
        with self._lock:
            return self._active

    def start_capture(self, locale: str) -> None:
        with self._lock:
            if self._active:
                return
            self._active = True
            stop_event = threading.Event()
            self._stop_event = stop_event
        threading.Thread(
            target=self._run_session,
            args=(locale, stop_event),
            name="turntalk-capture",
            daemon=True,
        ).start()

    def stop_capture(self) -> None:
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()

    def _run_session(self, locale: str, stop_event: threading.Event) -> None:
        transcript = ""
        error: str | None = None
        try:
            transcript = self._listen_once(locale, stop_event)
        except Exception as e:
            error = describe_failure("Speech recognition failed", e)
        finally:
            with self._lock:
                self._active = False
            self.emit(CaptureFinished(transcript=transcript, error=error))

    def _listen_once(self, locale: str, stop_event: threading.Event) -> str:
        with contextlib.closing(self.mic.chunks(stop_event)) as chunks:
            utterance = self.endpointer.listen(chunks)
        if utterance is None or stop_event.is_set():
            return ""

        parts: list[str] = []
        segments = self.transcriber.transcribe_utterance(
            utterance.pcm16,
            sample_rate=utterance.sample_rate,
            channels=utterance.channels,
            language=whisper_language_for_locale(locale),
        )
        for seg in segments:
            text = (seg.text or "").strip()
            if not text:
                continue
            parts.append(text)
            self.emit(TranscriptUpdated(text=" ".join(parts)))
        return " ".join(parts)
