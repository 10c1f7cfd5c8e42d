from __future__ import annotations

from turntalk.app.state import SessionView, TurnPhase
from turntalk.contracts import ConversationEntry, Party
from turntalk.languages import LanguageRegistry


def entry_text(entry: ConversationEntry) -> str:
    return f"{entry.speaker.label} ({entry.language_code}): {entry.text}"


def status_text(view: SessionView, languages: LanguageRegistry) -> str:
    who = "You" if view.current_speaker is Party.SELF else "Them"
    spoken = view.source_language if view.current_speaker is Party.SELF else view.target_language
    if view.phase is TurnPhase.LISTENING:
        return f"Listening to {who} ({languages.display_name(spoken)})..."
    if view.phase is TurnPhase.TRANSLATING:
        return "Translating..."
    if view.phase is TurnPhase.SPEAKING:
        return "Speaking translation..."
    if view.auto_mode_enabled:
        return f"Waiting for {who}..."
    return "Press Start to begin the conversation."
