from __future__ import annotations

import pytest

from turntalk.app.state import RetryPolicy, SessionState, TurnPhase
from turntalk.contracts import ConversationEntry, Party, Speaker


def test_session_state_defaults() -> None:
    s = SessionState()
    assert s.current_speaker is Party.SELF
    assert not s.auto_mode_enabled
    assert not s.is_capturing
    assert not s.is_speaking
    assert s.phase is TurnPhase.IDLE
    assert s.transcript == ""
    assert s.last_error is None
    assert s.log == []


def test_languages_for_each_party() -> None:
    s = SessionState(source_language="te", target_language="bho")
    assert s.languages_for(Party.SELF) == ("te", "bho")
    assert s.languages_for(Party.PEER) == ("bho", "te")


def test_reset_for_new_session_keeps_log_and_languages() -> None:
    s = SessionState(source_language="ta")
    s.current_speaker = Party.PEER
    s.transcript = "partial"
    s.consecutive_failures = 2
    s.set_error("boom")
    s.log.append(ConversationEntry(Speaker.SELF, "Hello", "ta"))

    s.reset_for_new_session()

    assert s.current_speaker is Party.SELF
    assert s.transcript == ""
    assert s.consecutive_failures == 0
    assert s.last_error is None
    assert len(s.log) == 1
    assert s.source_language == "ta"


def test_view_is_detached_from_state() -> None:
    s = SessionState()
    view = s.view()
    s.log.append(ConversationEntry(Speaker.SELF, "Hello", "en"))
    s.is_capturing = True
    assert view.log == ()
    assert not view.listening
    assert s.view().listening


def test_party_other_flips() -> None:
    assert Party.SELF.other is Party.PEER
    assert Party.PEER.other is Party.SELF


def test_retry_policy() -> None:
    assert not RetryPolicy().exhausted(1000)
    policy = RetryPolicy(max_consecutive_failures=2)
    assert not policy.exhausted(1)
    assert policy.exhausted(2)
    with pytest.raises(ValueError):
        RetryPolicy(max_consecutive_failures=0)
