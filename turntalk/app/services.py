from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from turntalk.app.state import RetryPolicy
from turntalk.asr.faster_whisper_pcm16 import FasterWhisperPCM16Transcriber
from turntalk.audio.mic import SoundDeviceMicSource
from turntalk.audio.vad import EnergyVAD, SpeechDetector
from turntalk.audio.vad_webrtc import WebRtcVad
from turntalk.live.capture import MicSpeechCapture
from turntalk.live.orchestrator import ConversationOrchestrator
from turntalk.live.utterance import SingleUtteranceEndpointer
from turntalk.nlp.translator.client import TranslationClient
from turntalk.nlp.translator.factory import get_translator
from turntalk.tts.pyttsx3_output import Pyttsx3SpeechOutput
from turntalk.ui.bridge import EventBus


@dataclass(frozen=True)
class ConversationServices:
    bus: EventBus
    capture: MicSpeechCapture
    translator: TranslationClient
    speech: Pyttsx3SpeechOutput
    orchestrator: ConversationOrchestrator


def build_vad(args: Any) -> SpeechDetector:
    kind = str(getattr(args, "vad", "energy")).lower()
    if kind == "webrtc":
        return WebRtcVad(sr=int(args.sr), aggressiveness=int(args.vad_aggressiveness))
    if kind == "energy":
        return EnergyVAD(rms_threshold=float(args.rms_th))
    raise ValueError(f"Unknown VAD: {kind}")


def build_conversation_services(args: Any, logger: logging.Logger | None = None) -> ConversationServices:
    bus = EventBus()
    mic = SoundDeviceMicSource(
        chunk_seconds=float(args.chunk_sec),
        sample_rate=int(args.sr),
        channels=int(args.channels),
        device=args.device,
    )
    endpointer = SingleUtteranceEndpointer(
        vad=build_vad(args),
        silence_chunks_to_finalize=max(1, int(args.silence_chunks)),
        min_utter_sec=max(0.0, float(args.min_utter_sec)),
        max_utter_sec=None if args.max_utter_sec is None else float(args.max_utter_sec),
        listen_timeout_sec=None if args.listen_timeout_sec is None else float(args.listen_timeout_sec),
        debug=bool(args.debug),
    )
    transcriber = FasterWhisperPCM16Transcriber(
        model_size=str(args.asr_model),
        device=str(args.asr_device),
        compute_type=str(args.asr_compute_type),
    )
    capture = MicSpeechCapture(mic=mic, transcriber=transcriber, endpointer=endpointer, emit=bus.push)
    translator = TranslationClient(
        get_translator(str(args.translator), gemini_model=str(args.gemini_model)),
        logger=logger,
    )
    speech = Pyttsx3SpeechOutput(rate=int(args.tts_rate), volume=float(args.tts_volume))
    orchestrator = ConversationOrchestrator(
        capture=capture,
        translator=translator,
        speech=speech,
        bus=bus,
        source_lang=str(args.source_lang),
        target_lang=str(args.target_lang),
        # 0 / null both mean "keep retrying"
        retry=RetryPolicy(max_consecutive_failures=args.max_consecutive_failures or None),
        logger=logger,
    )
    return ConversationServices(
        bus=bus,
        capture=capture,
        translator=translator,
        speech=speech,
        orchestrator=orchestrator,
    )
