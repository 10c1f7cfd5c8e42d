from __future__ import annotations

import threading
from array import array
from typing import List, Optional

import pytest

from turntalk.asr.base import UtteranceTranscriber
from turntalk.audio.vad import EnergyVAD
from turntalk.contracts import ASRSegment, AudioChunk, CaptureFinished, TranscriptUpdated
from turntalk.live.capture import MicSpeechCapture, whisper_language_for_locale
from turntalk.live.utterance import SingleUtteranceEndpointer

SR = 16000
FRAMES = int(0.5 * SR)


def _pcm16_constant(amplitude: int, frames: int) -> bytes:
    return array("h", [amplitude] * frames).tobytes()


class _FakeMic:
    def __init__(self, pattern: str = ".ss..", has_device: bool = True) -> None:
        self.pattern = pattern
        self.has_device = has_device
        self.closed = False

    def has_input_device(self) -> bool:
        return self.has_device

    def chunks(self, stop_event: Optional[threading.Event] = None):
        try:
            for i, c in enumerate(self.pattern):
                if stop_event is not None and stop_event.is_set():
                    return
                amp = 3000 if c == "s" else 0
                yield AudioChunk(
                    pcm16=_pcm16_constant(amp, FRAMES),
                    sample_rate=SR,
                    channels=1,
                    start_time=i * 0.5,
                    duration=0.5,
                )
        finally:
            self.closed = True


class _FakeTranscriber(UtteranceTranscriber):
    def __init__(self, texts: list[str], available: bool = True, fail: Exception | None = None) -> None:
        self.texts = texts
        self.available = available
        self.fail = fail
        self.calls: list[dict] = []

    @property
    def name(self) -> str:
        return "fake"

    def is_available(self) -> bool:
        return self.available

    def transcribe_utterance(
        self,
        pcm16: bytes,
        sample_rate: int,
        channels: int,
        language: Optional[str] = None,
    ) -> List[ASRSegment]:
        self.calls.append({"bytes": len(pcm16), "sample_rate": sample_rate, "language": language})
        if self.fail is not None:
            raise self.fail
        return [ASRSegment(text=t, t0=0.0, t1=0.5) for t in self.texts]


def _capture(mic: _FakeMic, transcriber: _FakeTranscriber, events: list) -> MicSpeechCapture:
    endpointer = SingleUtteranceEndpointer(
        vad=EnergyVAD(rms_threshold=500.0),
        silence_chunks_to_finalize=2,
        min_utter_sec=0.6,
        max_utter_sec=None,
        listen_timeout_sec=None,
    )
    return MicSpeechCapture(mic=mic, transcriber=transcriber, endpointer=endpointer, emit=events.append)


@pytest.mark.parametrize(
    "locale,expected",
    [("en-US", "en"), ("hi-IN", "hi"), ("bho-IN", "hi"), ("ta", "ta"), ("", None), (None, None)],
)
def test_whisper_language_for_locale(locale, expected) -> None:
    assert whisper_language_for_locale(locale) == expected


def test_capture_session_emits_partials_then_one_finish() -> None:
    events: list = []
    mic = _FakeMic()
    transcriber = _FakeTranscriber(["namaste", " dost "])
    capture = _capture(mic, transcriber, events)

    capture._run_session("hi-IN", threading.Event())

    assert events == [
        TranscriptUpdated(text="namaste"),
        TranscriptUpdated(text="namaste dost"),
        CaptureFinished(transcript="namaste dost"),
    ]
    assert transcriber.calls[0]["language"] == "hi"
    assert transcriber.calls[0]["sample_rate"] == SR
    assert mic.closed
    assert not capture.is_capturing


def test_capture_session_without_speech_finishes_empty() -> None:
    events: list = []
    transcriber = _FakeTranscriber(["unused"])
    capture = _capture(_FakeMic(pattern="...."), transcriber, events)

    capture._run_session("en-US", threading.Event())

    assert events == [CaptureFinished(transcript="")]
    assert transcriber.calls == []


def test_stopped_capture_discards_partial_utterance() -> None:
    events: list = []
    transcriber = _FakeTranscriber(["unused"])
    capture = _capture(_FakeMic(), transcriber, events)
    stop = threading.Event()
    stop.set()

    capture._run_session("en-US", stop)

    assert events == [CaptureFinished(transcript="")]
    assert transcriber.calls == []


def test_capture_error_is_reported_in_finish_event() -> None:
    events: list = []
    capture = _capture(_FakeMic(), _FakeTranscriber([], fail=RuntimeError("decoder crashed")), events)

    capture._run_session("en-US", threading.Event())

    assert len(events) == 1
    finished = events[0]
    assert isinstance(finished, CaptureFinished)
    assert finished.transcript == ""
    assert finished.error is not None
    assert finished.error.startswith("Speech recognition failed")
    assert "decoder crashed" in finished.error


def test_start_capture_runs_in_background_and_ignores_second_start() -> None:
    done = threading.Event()
    events: list = []

    def emit(event) -> None:
        events.append(event)
        if isinstance(event, CaptureFinished):
            done.set()

    endpointer = SingleUtteranceEndpointer(
        vad=EnergyVAD(rms_threshold=500.0),
        silence_chunks_to_finalize=2,
        min_utter_sec=0.6,
        max_utter_sec=None,
        listen_timeout_sec=None,
    )
    release = threading.Event()

    class _SlowTranscriber(_FakeTranscriber):
        def transcribe_utterance(self, *args, **kwargs):
            release.wait(timeout=5)
            return super().transcribe_utterance(*args, **kwargs)

    transcriber = _SlowTranscriber(["hello"])
    capture = MicSpeechCapture(mic=_FakeMic(), transcriber=transcriber, endpointer=endpointer, emit=emit)

    capture.start_capture("en-US")
    assert capture.is_capturing
    capture.start_capture("en-US")
    release.set()

    assert done.wait(timeout=5)
    assert [e for e in events if isinstance(e, CaptureFinished)] == [CaptureFinished(transcript="hello")]
    assert len(transcriber.calls) == 1
    assert not capture.is_capturing


def test_capture_supported_needs_model_and_microphone() -> None:
    events: list = []
    assert _capture(_FakeMic(), _FakeTranscriber([]), events).is_supported()
    assert not _capture(_FakeMic(has_device=False), _FakeTranscriber([]), events).is_supported()
    assert not _capture(_FakeMic(), _FakeTranscriber([], available=False), events).is_supported()
