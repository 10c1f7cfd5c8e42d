from __future__ import annotations

from argparse import Namespace

import pytest

from turntalk.app import services as app_services
from turntalk.app.config import load_default_config
from turntalk.audio.vad import EnergyVAD
from turntalk.nlp.translator.stub import StubTranslator


def _args(**overrides) -> Namespace:
    cfg = load_default_config()
    cfg.update(translator="stub")
    cfg.update(overrides)
    return Namespace(**cfg)


class _FakeMic:
    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs

    def has_input_device(self) -> bool:
        return True


class _FakeSpeech:
    def __init__(self, *, rate: int, volume: float) -> None:
        self.rate = rate
        self.volume = volume

    def is_supported(self) -> bool:
        return True

    def shutdown(self) -> None:
        return None


@pytest.fixture
def fakes(monkeypatch) -> dict[str, object]:
    captured: dict[str, object] = {}

    class _FakeTranscriber:
        def __init__(self, *, model_size: str, device: str, compute_type: str) -> None:
            captured["model_size"] = model_size
            captured["device"] = device
            captured["compute_type"] = compute_type

        def is_available(self) -> bool:
            return True

    monkeypatch.setattr(app_services, "FasterWhisperPCM16Transcriber", _FakeTranscriber)
    monkeypatch.setattr(app_services, "SoundDeviceMicSource", _FakeMic)
    monkeypatch.setattr(app_services, "Pyttsx3SpeechOutput", _FakeSpeech)
    return captured


def test_build_services_wires_configured_parts(fakes) -> None:
    services = app_services.build_conversation_services(
        _args(asr_model="base", source_lang="ta", target_lang="en", tts_rate=140)
    )
    try:
        assert fakes["model_size"] == "base"
        assert fakes["compute_type"] == "int8"
        assert isinstance(services.translator.translator, StubTranslator)
        assert services.speech.rate == 140
        assert services.capture.emit == services.bus.push
        assert isinstance(services.capture.endpointer.vad, EnergyVAD)

        orch = services.orchestrator
        assert orch.state.source_language == "ta"
        assert orch.state.target_language == "en"
        assert orch.capture_supported
        assert orch.last_error is None
        assert orch.retry.max_consecutive_failures is None
    finally:
        services.orchestrator.shutdown()


def test_build_services_retry_limit(fakes) -> None:
    services = app_services.build_conversation_services(_args(max_consecutive_failures=3))
    try:
        assert services.orchestrator.retry.max_consecutive_failures == 3
    finally:
        services.orchestrator.shutdown()


def test_build_vad_energy_threshold() -> None:
    vad = app_services.build_vad(_args(rms_th=400.0))
    assert isinstance(vad, EnergyVAD)
    assert vad.rms_threshold == 400.0


def test_build_vad_unknown_kind() -> None:
    with pytest.raises(ValueError, match="Unknown VAD"):
        app_services.build_vad(_args(vad="psychic"))
