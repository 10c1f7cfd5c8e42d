from __future__ import annotations
from abc import ABC, abstractmethod
from concurrent.futures import Future
from turntalk.contracts import SpeechResult

class SpeechOutput(ABC):
    """Speak text in a locale. The returned future always resolves, carrying any error in its result."""

    @abstractmethod
    def is_supported(self) -> bool: ...

    @property
    @abstractmethod
    def is_speaking(self) -> bool: ...

    @abstractmethod
    def speak(self, text: str, locale: str) -> "Future[SpeechResult]": ...

    def shutdown(self) -> None:
        return None
