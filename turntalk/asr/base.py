from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional
from turntalk.contracts import ASRSegment

class UtteranceTranscriber(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def transcribe_utterance(
        self,
        pcm16: bytes,
        sample_rate: int,
        channels: int,
        language: Optional[str] = None,
    ) -> List[ASRSegment]: ...

    def is_available(self) -> bool:
        return True
