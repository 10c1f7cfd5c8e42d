from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Party(str, Enum):
    SELF = "self"
    PEER = "peer"

    @property
    def other(self) -> "Party":
        return Party.PEER if self is Party.SELF else Party.SELF


class Speaker(str, Enum):
    SELF = "self"
    SELF_TRANSLATED = "self_translated"
    PEER = "peer"
    PEER_TRANSLATED = "peer_translated"

    @property
    def label(self) -> str:
        return _SPEAKER_LABELS[self]


_SPEAKER_LABELS = {
    Speaker.SELF: "You",
    Speaker.SELF_TRANSLATED: "Voice",
    Speaker.PEER: "Them",
    Speaker.PEER_TRANSLATED: "Speaker",
}


@dataclass(frozen=True)
class LanguageDescriptor:
    code: str
    display_name: str
    recognition_locale: str


@dataclass(frozen=True)
class ConversationEntry:
    speaker: Speaker
    text: str
    language_code: str


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    source_lang: str = "en"
    target_lang: str = "hi"


@dataclass(frozen=True)
class TranslationResult:
    source_text: str
    translated_text: str
    provider: str


@dataclass(frozen=True)
class TranslationOutcome:
    """Either a translated string or a human-readable error, never both."""
    text: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)


@dataclass(frozen=True)
class SpeechResult:
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ASRSegment:
    text: str
    t0: float
    t1: float
    is_final: bool = True


@dataclass(frozen=True)
class AudioChunk:
    """
    Raw PCM16 audio chunk captured from a live source (e.g., microphone).
    pcm16: little-endian signed 16-bit PCM bytes (interleaved if channels > 1).
    """
    pcm16: bytes
    sample_rate: int
    channels: int
    start_time: float  # seconds since stream start
    duration: float    # seconds


# --- events posted from adapter threads to the orchestrator ---

@dataclass(frozen=True)
class TranscriptUpdated:
    text: str


@dataclass(frozen=True)
class CaptureFinished:
    transcript: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class TranslationFinished:
    turn_id: int
    outcome: TranslationOutcome


@dataclass(frozen=True)
class SpeechFinished:
    turn_id: int
    result: SpeechResult
