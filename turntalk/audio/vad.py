from __future__ import annotations

import math
from array import array
from typing import Protocol

from turntalk.contracts import AudioChunk


class SpeechDetector(Protocol):
    def is_speech(self, chunk: AudioChunk) -> bool:
        ...


def pcm16_rms(pcm16: bytes) -> float:
    """Return RMS energy for little-endian int16 PCM bytes."""
    if len(pcm16) < 2:
        return 0.0

    samples = array("h")
    samples.frombytes(pcm16[: len(pcm16) - (len(pcm16) % 2)])
    sum_sq = 0.0
    for value in samples:
        fv = float(value)
        sum_sq += fv * fv
    return math.sqrt(sum_sq / len(samples))


class EnergyVAD:
    def __init__(self, rms_threshold: float = 250.0) -> None:
        if rms_threshold < 0:
            raise ValueError("rms_threshold must be >= 0")
        self.rms_threshold = float(rms_threshold)

    def is_speech(self, chunk: AudioChunk) -> bool:
        return pcm16_rms(chunk.pcm16) >= self.rms_threshold
