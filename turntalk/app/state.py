from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from turntalk.contracts import ConversationEntry, Party


class TurnPhase(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    TRANSLATING = "translating"
    SPEAKING = "speaking"


@dataclass(frozen=True)
class RetryPolicy:
    """How many translation failures in a row auto-mode tolerates. None = retry forever."""
    max_consecutive_failures: int | None = None

    def __post_init__(self) -> None:
        if self.max_consecutive_failures is not None and self.max_consecutive_failures < 1:
            raise ValueError("max_consecutive_failures must be >= 1 when set")

    def exhausted(self, failures: int) -> bool:
        if self.max_consecutive_failures is None:
            return False
        return failures >= self.max_consecutive_failures


@dataclass
class SessionState:
    source_language: str = "en"
    target_language: str = "hi"
    auto_mode_enabled: bool = False
    current_speaker: Party = Party.SELF
    is_capturing: bool = False
    is_speaking: bool = False
    phase: TurnPhase = TurnPhase.IDLE
    transcript: str = ""
    last_error: str | None = None
    consecutive_failures: int = 0
    log: list[ConversationEntry] = field(default_factory=list)

    def languages_for(self, party: Party) -> tuple[str, str]:
        """(spoken, wanted) language codes for a party."""
        if party is Party.SELF:
            return self.source_language, self.target_language
        return self.target_language, self.source_language

    def set_error(self, detail: str) -> None:
        self.last_error = detail

    def clear_error(self) -> None:
        self.last_error = None

    def reset_for_new_session(self) -> None:
        self.current_speaker = Party.SELF
        self.transcript = ""
        self.consecutive_failures = 0
        self.last_error = None

    def view(self) -> "SessionView":
        return SessionView(
            source_language=self.source_language,
            target_language=self.target_language,
            auto_mode_enabled=self.auto_mode_enabled,
            current_speaker=self.current_speaker,
            is_capturing=self.is_capturing,
            is_speaking=self.is_speaking,
            phase=self.phase,
            transcript=self.transcript,
            last_error=self.last_error,
            log=tuple(self.log),
        )


@dataclass(frozen=True)
class SessionView:
    """Read-only snapshot handed to the presentation layer."""
    source_language: str
    target_language: str
    auto_mode_enabled: bool
    current_speaker: Party
    is_capturing: bool
    is_speaking: bool
    phase: TurnPhase
    transcript: str
    last_error: str | None
    log: tuple[ConversationEntry, ...]

    @property
    def listening(self) -> bool:
        return self.is_capturing
