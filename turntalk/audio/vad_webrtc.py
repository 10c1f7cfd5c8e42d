from __future__ import annotations

from array import array

from turntalk.contracts import AudioChunk


def _first_channel_mono_pcm16(pcm16: bytes, channels: int) -> bytes:
    if channels <= 1:
        return pcm16
    samples = array("h")
    samples.frombytes(pcm16)
    mono = array("h")
    for i in range(0, len(samples), channels):
        mono.append(samples[i])
    return mono.tobytes()


class WebRtcVad:
    """
    Chunk-level speech decision from WebRTC VAD.

    WebRTC VAD expects:
      - 16-bit mono PCM
      - sample rate: 8000/16000/32000/48000
      - frame size: 10/20/30 ms
    A chunk counts as speech when at least `min_voiced_ratio` of its frames are voiced.
    aggressiveness: 0 (least) .. 3 (most aggressive)
    """
    def __init__(
        self,
        sr: int = 16000,
        frame_ms: int = 20,
        aggressiveness: int = 2,
        min_voiced_ratio: float = 0.3,
    ) -> None:
        if frame_ms not in (10, 20, 30):
            raise ValueError("frame_ms must be 10/20/30")
        if sr not in (8000, 16000, 32000, 48000):
            raise ValueError("sr must be one of 8000/16000/32000/48000")
        if not 0.0 < min_voiced_ratio <= 1.0:
            raise ValueError("min_voiced_ratio must be in (0, 1]")
        self.sr = sr
        self.frame_ms = frame_ms
        self.frame_bytes = int(sr * frame_ms / 1000) * 2  # int16 => 2 bytes
        self.min_voiced_ratio = float(min_voiced_ratio)
        try:
            import webrtcvad
        except ImportError as e:
            raise RuntimeError(
                "webrtcvad is not installed. Install with: python -m pip install webrtcvad"
            ) from e
        self.vad = webrtcvad.Vad(aggressiveness)

    def is_speech(self, chunk: AudioChunk) -> bool:
        if chunk.sample_rate != self.sr:
            raise ValueError(f"chunk sample rate {chunk.sample_rate} != VAD rate {self.sr}")
        mono = _first_channel_mono_pcm16(chunk.pcm16, chunk.channels)
        total = 0
        voiced = 0
        for i in range(0, len(mono) - self.frame_bytes + 1, self.frame_bytes):
            total += 1
            if self.vad.is_speech(mono[i : i + self.frame_bytes], self.sr):
                voiced += 1
        if total == 0:
            return False
        return voiced / total >= self.min_voiced_ratio
