from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial

from turntalk.app.diagnostics import describe_failure
from turntalk.app.logging_setup import log_event
from turntalk.app.state import RetryPolicy, SessionState, SessionView, TurnPhase
from turntalk.contracts import (
    CaptureFinished,
    ConversationEntry,
    Party,
    Speaker,
    SpeechFinished,
    SpeechResult,
    TranscriptUpdated,
    TranslationFinished,
    TranslationOutcome,
)
from turntalk.languages import LANGUAGES, LanguageRegistry
from turntalk.live.capture import SpeechCapture
from turntalk.nlp.translator.client import TRANSLATION_FAILED, TranslationClient
from turntalk.tts.base import SpeechOutput
from turntalk.ui.bridge import EventBus

CAPTURE_UNSUPPORTED = "Speech recognition is not supported on this system."
SPEECH_UNSUPPORTED = "Text-to-speech is not supported on this system."

_ORIGINAL_SPEAKER = {Party.SELF: Speaker.SELF, Party.PEER: Speaker.PEER}
_TRANSLATED_SPEAKER = {Party.SELF: Speaker.SELF_TRANSLATED, Party.PEER: Speaker.PEER_TRANSLATED}


@dataclass
class _Turn:
    turn_id: int
    party: Party
    text: str
    spoken_lang: str
    wanted_lang: str
    generation: int


class ConversationOrchestrator:
    """
    Turn-taking state machine: listen -> translate -> log -> speak -> flip speaker.

    All state changes happen on the thread that calls the public methods and
    handle()/process_pending(). Adapters run elsewhere and report back only by
    pushing events onto the bus, so one turn's steps are strictly ordered and
    capture never overlaps speech output.
    """

    def __init__(
        self,
        *,
        capture: SpeechCapture,
        translator: TranslationClient,
        speech: SpeechOutput,
        bus: EventBus,
        languages: LanguageRegistry = LANGUAGES,
        source_lang: str = "en",
        target_lang: str = "hi",
        retry: RetryPolicy | None = None,
        executor: Executor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        languages.get(source_lang)
        languages.get(target_lang)

        self.capture = capture
        self.translator = translator
        self.speech = speech
        self.bus = bus
        self.languages = languages
        self.retry = retry or RetryPolicy()
        self.logger = logger
        self.state = SessionState(source_language=source_lang, target_language=target_lang)

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="turntalk-translate"
        )
        self._turn: _Turn | None = None
        self._turn_seq = 0
        self._generation = 0
        self._discard_capture = False

        self.capture_supported = bool(capture.is_supported())
        self.speech_supported = bool(speech.is_supported())
        startup_errors = []
        if not self.capture_supported:
            startup_errors.append(CAPTURE_UNSUPPORTED)
        if not self.speech_supported:
            startup_errors.append(SPEECH_UNSUPPORTED)
        if startup_errors:
            self.state.set_error(" ".join(startup_errors))
        log_event(
            self.logger,
            logging.WARNING if startup_errors else logging.INFO,
            "orchestrator_ready",
            capture_supported=self.capture_supported,
            speech_supported=self.speech_supported,
            source=source_lang,
            target=target_lang,
        )

    # --- user commands ---

    def toggle_auto_mode(self) -> None:
        self.set_auto_mode(not self.state.auto_mode_enabled)

    def set_auto_mode(self, enabled: bool) -> None:
        s = self.state
        if not enabled:
            if s.auto_mode_enabled:
                s.auto_mode_enabled = False
                log_event(self.logger, logging.INFO, "auto_mode_changed", enabled=False, reason="user")
            self.capture.stop_capture()
            return

        if not s.auto_mode_enabled:
            s.reset_for_new_session()
            if not self.capture_supported:
                s.set_error(CAPTURE_UNSUPPORTED)
                log_event(self.logger, logging.WARNING, "auto_mode_refused", reason="capture_unsupported")
                return
            s.auto_mode_enabled = True
            self._generation += 1
            if s.is_capturing:
                # the previous session is still winding down after a stop
                self._discard_capture = True
            log_event(
                self.logger,
                logging.INFO,
                "auto_mode_changed",
                enabled=True,
                reason="user",
                generation=self._generation,
            )
        self._maybe_start_capture()

    def set_source_language(self, code: str) -> None:
        self.languages.get(code)
        self.state.source_language = code
        log_event(self.logger, logging.INFO, "language_changed", side="source", code=code)

    def set_target_language(self, code: str) -> None:
        self.languages.get(code)
        self.state.target_language = code
        log_event(self.logger, logging.INFO, "language_changed", side="target", code=code)

    # --- events ---

    def process_pending(self, max_items: int | None = None) -> int:
        return self.bus.drain(self.handle, max_items=max_items)

    def handle(self, event: object) -> None:
        if isinstance(event, TranscriptUpdated):
            self.on_transcript_updated(event.text)
        elif isinstance(event, CaptureFinished):
            self.on_capture_finished(event)
        elif isinstance(event, TranslationFinished):
            self._on_translation_finished(event)
        elif isinstance(event, SpeechFinished):
            self._on_speech_finished(event)
        else:
            raise TypeError(f"unexpected event: {event!r}")

    def on_transcript_updated(self, text: str) -> None:
        if self._discard_capture:
            return
        self.state.transcript = text

    def on_capture_finished(self, event: CaptureFinished) -> None:
        s = self.state
        s.is_capturing = False
        if s.phase is TurnPhase.LISTENING:
            s.phase = TurnPhase.IDLE

        if self._discard_capture:
            self._discard_capture = False
            self._maybe_start_capture()
            return

        if event.error:
            s.set_error(event.error)
            log_event(self.logger, logging.ERROR, "capture_failed", detail=event.error)
            if s.auto_mode_enabled:
                s.auto_mode_enabled = False
                log_event(self.logger, logging.INFO, "auto_mode_changed", enabled=False, reason="capture_error")
            return

        if event.transcript:
            s.transcript = event.transcript
        if not self.on_transcript_finalized(s.transcript):
            self._maybe_start_capture()

    def on_transcript_finalized(self, text: str) -> bool:
        """Start a turn for a finished utterance. Returns False when the text is ignored."""
        s = self.state
        if not text or not text.strip():
            return False
        if not s.auto_mode_enabled or self._turn is not None:
            return False

        spoken, wanted = s.languages_for(s.current_speaker)
        self._turn_seq += 1
        turn = _Turn(
            turn_id=self._turn_seq,
            party=s.current_speaker,
            text=text.strip(),
            spoken_lang=spoken,
            wanted_lang=wanted,
            generation=self._generation,
        )
        self._turn = turn
        s.phase = TurnPhase.TRANSLATING
        log_event(
            self.logger,
            logging.INFO,
            "turn_started",
            turn_id=turn.turn_id,
            party=turn.party.value,
            source=spoken,
            target=wanted,
            chars=len(turn.text),
        )
        future = self._executor.submit(self.translator.translate, turn.text, wanted, spoken)
        future.add_done_callback(partial(self._post_translation, turn.turn_id))
        return True

    def _post_translation(self, turn_id: int, future: "Future[TranslationOutcome]") -> None:
        try:
            outcome = future.result()
        except Exception as e:
            outcome = TranslationOutcome(error=describe_failure("Translation failed", e))
        self.bus.push(TranslationFinished(turn_id=turn_id, outcome=outcome))

    def _post_speech(self, turn_id: int, future: "Future[SpeechResult]") -> None:
        try:
            result = future.result()
        except Exception as e:
            result = SpeechResult(error=describe_failure("Speech synthesis failed", e))
        self.bus.push(SpeechFinished(turn_id=turn_id, result=result))

    def _current_turn(self, turn_id: int, kind: str) -> _Turn | None:
        turn = self._turn
        if turn is None or turn.turn_id != turn_id:
            log_event(self.logger, logging.WARNING, "stale_event_dropped", kind=kind, turn_id=turn_id)
            return None
        return turn

    def _on_translation_finished(self, event: TranslationFinished) -> None:
        turn = self._current_turn(event.turn_id, "translation")
        if turn is None:
            return
        s = self.state
        outcome = event.outcome

        if not outcome.ok:
            self._turn = None
            s.phase = TurnPhase.IDLE
            s.set_error(outcome.error or TRANSLATION_FAILED)
            s.consecutive_failures += 1
            log_event(
                self.logger,
                logging.WARNING,
                "translation_failed",
                turn_id=turn.turn_id,
                failures=s.consecutive_failures,
                detail=s.last_error,
            )
            if s.auto_mode_enabled and self.retry.exhausted(s.consecutive_failures):
                s.auto_mode_enabled = False
                self.capture.stop_capture()
                log_event(self.logger, logging.INFO, "auto_mode_changed", enabled=False, reason="retry_exhausted")
            self._maybe_start_capture()
            return

        s.consecutive_failures = 0
        s.clear_error()
        s.log.append(ConversationEntry(_ORIGINAL_SPEAKER[turn.party], turn.text, turn.spoken_lang))
        s.log.append(ConversationEntry(_TRANSLATED_SPEAKER[turn.party], outcome.text, turn.wanted_lang))
        log_event(self.logger, logging.INFO, "turn_logged", turn_id=turn.turn_id, log_size=len(s.log))

        if not self.speech_supported:
            self._complete_turn(turn)
            return

        s.phase = TurnPhase.SPEAKING
        s.is_speaking = True
        try:
            future = self.speech.speak(outcome.text, self.languages.recognition_locale(turn.wanted_lang))
        except Exception as e:
            s.is_speaking = False
            s.set_error(describe_failure("Speech synthesis failed", e))
            self._complete_turn(turn)
            return
        future.add_done_callback(partial(self._post_speech, turn.turn_id))

    def _on_speech_finished(self, event: SpeechFinished) -> None:
        turn = self._current_turn(event.turn_id, "speech")
        if turn is None:
            return
        self.state.is_speaking = False
        if not event.result.ok:
            self.state.set_error(event.result.error or "Speech synthesis failed")
            log_event(self.logger, logging.WARNING, "speech_failed", turn_id=turn.turn_id, detail=event.result.error)
        self._complete_turn(turn)

    def _complete_turn(self, turn: _Turn) -> None:
        s = self.state
        self._turn = None
        s.phase = TurnPhase.IDLE
        s.transcript = ""
        # a toggle-on during the turn already reset the speaker
        if turn.generation == self._generation:
            s.current_speaker = turn.party.other
        log_event(
            self.logger,
            logging.INFO,
            "turn_completed",
            turn_id=turn.turn_id,
            next_speaker=s.current_speaker.value,
            auto_mode=s.auto_mode_enabled,
        )
        self._maybe_start_capture()

    # --- capture restart guard ---

    def _maybe_start_capture(self) -> bool:
        s = self.state
        if not (s.auto_mode_enabled and self.capture_supported):
            return False
        if s.is_capturing or s.is_speaking or self._turn is not None:
            return False

        spoken, _ = s.languages_for(s.current_speaker)
        locale = self.languages.recognition_locale(spoken)
        s.transcript = ""
        s.is_capturing = True
        s.phase = TurnPhase.LISTENING
        try:
            self.capture.start_capture(locale)
        except Exception as e:
            s.is_capturing = False
            s.phase = TurnPhase.IDLE
            s.auto_mode_enabled = False
            s.set_error(describe_failure("Speech recognition failed", e))
            log_event(self.logger, logging.ERROR, "capture_start_failed", locale=locale, detail=s.last_error)
            return False
        log_event(
            self.logger,
            logging.INFO,
            "capture_started",
            locale=locale,
            party=s.current_speaker.value,
        )
        return True

    # --- presentation boundary ---

    def snapshot(self) -> SessionView:
        return self.state.view()

    @property
    def transcript(self) -> str:
        return self.state.transcript

    @property
    def listening(self) -> bool:
        return self.state.is_capturing

    @property
    def conversation(self) -> tuple[ConversationEntry, ...]:
        return tuple(self.state.log)

    @property
    def last_error(self) -> str | None:
        return self.state.last_error

    def shutdown(self) -> None:
        self.state.auto_mode_enabled = False
        self.capture.stop_capture()
        self.speech.shutdown()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
        log_event(self.logger, logging.INFO, "orchestrator_shutdown", turns=self._turn_seq)
