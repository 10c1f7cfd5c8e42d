from __future__ import annotations

import argparse
import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from turntalk.languages import LANGUAGES
from turntalk.nlp.translator.factory import PROVIDERS

DEFAULTS: dict[str, Any] = {
    "list_devices": False,
    "debug": False,
    "source_lang": "en",
    "target_lang": "hi",
    "translator": "gemini",
    "gemini_model": "gemini-2.0-flash",
    "asr_model": "small",
    "asr_device": "cpu",
    "asr_compute_type": "int8",
    "device": None,
    "sr": 16000,
    "channels": 1,
    "chunk_sec": 0.25,
    "vad": "energy",
    "rms_th": 250.0,
    "vad_aggressiveness": 2,
    "silence_chunks": 4,
    "min_utter_sec": 0.4,
    "max_utter_sec": 12.0,
    "listen_timeout_sec": 8.0,
    "tts_rate": 170,
    "tts_volume": 1.0,
    "max_consecutive_failures": None,
    "poll_ms": 50,
    "max_events_per_tick": 20,
}
CONFIG_KEYS: tuple[str, ...] = tuple(DEFAULTS.keys())


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    config_path: Path


def app_paths() -> AppPaths:
    config_dir = Path(user_config_dir("TurnTalk", "TurnTalk"))
    return AppPaths(config_dir=config_dir, config_path=config_dir / "config.json")


def _load_json_dict(path: Path) -> dict[str, Any]:
    # Accept UTF-8 with or without BOM for Windows-edited config files.
    with path.open("r", encoding="utf-8-sig") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"config must be a JSON object: {path}")
    return loaded


def _write_json_dict(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")


def _known_only(payload: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in CONFIG_KEYS:
        if key in payload:
            out[key] = payload[key]
    return out


def load_default_config() -> dict[str, Any]:
    return copy.deepcopy(DEFAULTS)


def ensure_user_config_exists(defaults: dict[str, Any] | None = None) -> Path:
    paths = app_paths()
    if paths.config_path.exists():
        return paths.config_path
    _write_json_dict(paths.config_path, defaults or load_default_config())
    return paths.config_path


def load_user_config(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    defaults = load_default_config()
    if config_path:
        chosen = Path(config_path)
        if not chosen.exists():
            raise SystemExit(f"Config file not found: {chosen}")
    else:
        chosen = ensure_user_config_exists(defaults)
    merged = dict(defaults)
    merged.update(_known_only(_load_json_dict(chosen)))
    return merged, chosen


def resolve_defaults(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    return load_user_config(config_path=config_path)


def _positive_int_or_none(value: str) -> int | None:
    if str(value).strip().lower() in ("", "none", "0"):
        return None
    out = int(value)
    if out < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return out


def parser_with_defaults(defaults: dict[str, Any]) -> argparse.ArgumentParser:
    codes = LANGUAGES.codes()
    p = argparse.ArgumentParser(prog="turntalk", description="Two-way spoken conversation translator")
    p.add_argument("--config", default=None, help="JSON config path (CLI flags override config)")
    p.add_argument("--list-devices", action="store_true", help="print audio devices and exit")
    p.add_argument("--debug", action="store_true", help="print chunk RMS and speech decisions")
    p.add_argument("--source-lang", default=defaults["source_lang"], choices=codes, help="your language")
    p.add_argument("--target-lang", default=defaults["target_lang"], choices=codes, help="the other party's language")
    p.add_argument("--translator", default=defaults["translator"], choices=list(PROVIDERS), help="translation provider")
    p.add_argument("--gemini-model", default=defaults["gemini_model"], help="Gemini model name")
    p.add_argument("--asr-model", default=defaults["asr_model"], help="faster-whisper model size")
    p.add_argument("--asr-device", default=defaults["asr_device"], help="faster-whisper device (cpu/cuda/auto)")
    p.add_argument("--asr-compute-type", default=defaults["asr_compute_type"], help="faster-whisper compute type")
    p.add_argument("--device", type=int, default=defaults["device"], help="sounddevice input device id")
    p.add_argument("--sr", type=int, default=defaults["sr"], help="sample rate (Hz)")
    p.add_argument("--channels", type=int, default=defaults["channels"], help="input channels")
    p.add_argument("--chunk-sec", type=float, default=defaults["chunk_sec"], help="mic chunk size in seconds")
    p.add_argument("--vad", default=defaults["vad"], choices=["energy", "webrtc"], help="speech detector")
    p.add_argument("--rms-th", type=float, default=defaults["rms_th"], help="RMS threshold for energy VAD")
    p.add_argument(
        "--vad-aggressiveness",
        type=int,
        default=defaults["vad_aggressiveness"],
        choices=[0, 1, 2, 3],
        help="WebRTC VAD aggressiveness",
    )
    p.add_argument(
        "--silence-chunks",
        type=int,
        default=defaults["silence_chunks"],
        help="end the utterance after this many non-speech chunks",
    )
    p.add_argument(
        "--min-utter-sec",
        type=float,
        default=defaults["min_utter_sec"],
        help="ignore utterances shorter than this",
    )
    p.add_argument(
        "--max-utter-sec",
        type=float,
        default=defaults["max_utter_sec"],
        help="force the utterance to end while continuously speaking (seconds)",
    )
    p.add_argument(
        "--listen-timeout-sec",
        type=float,
        default=defaults["listen_timeout_sec"],
        help="give up listening after this long without speech",
    )
    p.add_argument("--tts-rate", type=int, default=defaults["tts_rate"], help="speech rate (words per minute)")
    p.add_argument("--tts-volume", type=float, default=defaults["tts_volume"], help="speech volume (0-1)")
    p.add_argument(
        "--max-consecutive-failures",
        type=_positive_int_or_none,
        default=defaults["max_consecutive_failures"],
        help="stop the conversation after this many failed translations in a row (0 = never)",
    )
    p.add_argument("--poll-ms", type=int, default=defaults["poll_ms"], help="UI event poll interval (ms)")
    p.add_argument(
        "--max-events-per-tick",
        type=int,
        default=defaults["max_events_per_tick"],
        help="max adapter events to apply per UI timer tick",
    )
    return p


def resolve_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre_args, _ = pre.parse_known_args(argv)
    defaults, _ = resolve_defaults(config_path=pre_args.config)
    parser = parser_with_defaults(defaults)
    args = parser.parse_args(argv)
    if defaults.get("list_devices"):
        args.list_devices = True
    if defaults.get("debug"):
        args.debug = True
    return args
