from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from turntalk.audio.vad import SpeechDetector, pcm16_rms
from turntalk.contracts import AudioChunk


@dataclass(frozen=True)
class Utterance:
    pcm16: bytes
    sample_rate: int
    channels: int
    t0: float
    duration: float
    reason: str


class SingleUtteranceEndpointer:
    """
    Consume audio chunks until exactly one utterance has been spoken.

    Speech starts on the first chunk the VAD accepts and ends after
    `silence_chunks_to_finalize` quiet chunks, when `max_utter_sec` is reached,
    or when the chunk stream ends. Utterances shorter than `min_utter_sec` are
    dropped and listening continues. Returns None if nobody speaks within
    `listen_timeout_sec` or the stream ends first.
    """

    def __init__(
        self,
        *,
        vad: SpeechDetector,
        silence_chunks_to_finalize: int = 4,
        min_utter_sec: float = 0.4,
        max_utter_sec: float | None = 12.0,
        listen_timeout_sec: float | None = 8.0,
        debug: bool = False,
    ) -> None:
        if silence_chunks_to_finalize <= 0:
            raise ValueError("silence_chunks_to_finalize must be > 0")
        if min_utter_sec < 0:
            raise ValueError("min_utter_sec must be >= 0")
        if max_utter_sec is not None and max_utter_sec <= 0:
            raise ValueError("max_utter_sec must be > 0 when set")
        if listen_timeout_sec is not None and listen_timeout_sec <= 0:
            raise ValueError("listen_timeout_sec must be > 0 when set")

        self.vad = vad
        self.silence_chunks_to_finalize = int(silence_chunks_to_finalize)
        self.min_utter_sec = float(min_utter_sec)
        self.max_utter_sec = float(max_utter_sec) if max_utter_sec is not None else None
        self.listen_timeout_sec = float(listen_timeout_sec) if listen_timeout_sec is not None else None
        self.debug = debug

    @staticmethod
    def _duration_from_pcm16(pcm16_len: int, sample_rate: int, channels: int) -> float:
        bytes_per_second = sample_rate * channels * 2
        if bytes_per_second <= 0:
            return 0.0
        return pcm16_len / float(bytes_per_second)

    def listen(self, chunk_iter: Iterable[AudioChunk]) -> Optional[Utterance]:
        parts: list[bytes] = []
        n_bytes = 0
        t0 = 0.0
        sr = 0
        ch = 0
        in_utterance = False
        trailing_silence = 0

        def finish(reason: str) -> Optional[Utterance]:
            dur = self._duration_from_pcm16(n_bytes, sr, ch)
            if dur < self.min_utter_sec:
                if self.debug:
                    print(f"[debug] dropped short utterance reason={reason} t0={t0:.2f}s dur={dur:.2f}s")
                return None
            if self.debug:
                print(f"[debug] utterance done reason={reason} t0={t0:.2f}s dur={dur:.2f}s")
            return Utterance(
                pcm16=b"".join(parts),
                sample_rate=sr,
                channels=ch,
                t0=t0,
                duration=dur,
                reason=reason,
            )

        for i, chunk in enumerate(chunk_iter, start=1):
            is_speech = self.vad.is_speech(chunk)

            if self.debug:
                print(
                    f"[debug] chunk#{i} {chunk.start_time:.2f}s "
                    f"rms={pcm16_rms(chunk.pcm16):.1f} speech={is_speech}"
                )

            if is_speech:
                if not in_utterance:
                    in_utterance = True
                    parts = []
                    n_bytes = 0
                    t0 = float(chunk.start_time)
                    sr = int(chunk.sample_rate)
                    ch = int(chunk.channels)
                parts.append(chunk.pcm16)
                n_bytes += len(chunk.pcm16)
                trailing_silence = 0
                if self.max_utter_sec is not None:
                    if self._duration_from_pcm16(n_bytes, sr, ch) >= self.max_utter_sec:
                        out = finish("max_utter_sec")
                        if out is not None:
                            return out
                        in_utterance = False
                continue

            if in_utterance:
                trailing_silence += 1
                if trailing_silence >= self.silence_chunks_to_finalize:
                    out = finish("silence")
                    if out is not None:
                        return out
                    in_utterance = False
                    trailing_silence = 0
                continue

            elapsed = chunk.start_time + chunk.duration
            if self.listen_timeout_sec is not None and elapsed >= self.listen_timeout_sec:
                if self.debug:
                    print(f"[debug] no speech within {self.listen_timeout_sec:.1f}s")
                return None

        if in_utterance and parts:
            return finish("stream_end")
        return None
