from __future__ import annotations

import signal
import sys
import traceback

from turntalk.app.config import resolve_args
from turntalk.app.diagnostics import hint_for_exception, summarize_exception
from turntalk.app.logging_setup import setup_app_logger
from turntalk.app.services import build_conversation_services
from turntalk.audio.mic import SoundDeviceMicSource
from turntalk.languages import LANGUAGES


def _preload_asr_runtime() -> None:
    import ctranslate2  # noqa: F401
    from faster_whisper import WhisperModel  # noqa: F401


def main(argv: list[str] | None = None) -> int:
    args = resolve_args(argv)
    logger, _log_dir, log_path = setup_app_logger(debug=bool(args.debug))
    logger.info("app_start", extra={"config_path": str(getattr(args, "config", "")), "argv": argv or []})

    if args.list_devices:
        print(SoundDeviceMicSource.list_devices())
        return 0

    # Load ASR runtime stack before PyQt initializes to avoid Windows DLL init conflicts.
    try:
        _preload_asr_runtime()
    except Exception:
        logger.exception("asr_runtime_preload_failed_startup")

    from PyQt6 import QtCore, QtWidgets
    from turntalk.app.main_window_qt import MainWindow

    app = QtWidgets.QApplication(sys.argv)

    try:
        services = build_conversation_services(args, logger=logger)
    except Exception:
        detail = traceback.format_exc()
        logger.exception("services_build_failed")
        summary = summarize_exception(detail)
        QtWidgets.QMessageBox.critical(
            None,
            "TurnTalk Startup Error",
            f"{summary}\n\n{hint_for_exception(summary)}\nSee log: {log_path}",
        )
        return 1

    orchestrator = services.orchestrator
    window = MainWindow(LANGUAGES)

    def _render() -> None:
        window.render(orchestrator.snapshot())

    def _on_toggle() -> None:
        orchestrator.toggle_auto_mode()
        _render()

    def _on_source(code: str) -> None:
        orchestrator.set_source_language(code)
        _render()

    def _on_target(code: str) -> None:
        orchestrator.set_target_language(code)
        _render()

    window.toggle_requested.connect(_on_toggle)
    window.source_language_changed.connect(_on_source)
    window.target_language_changed.connect(_on_target)

    timer = QtCore.QTimer()

    def _on_tick() -> None:
        if orchestrator.process_pending(max_items=max(1, int(args.max_events_per_tick))):
            _render()

    timer.timeout.connect(_on_tick)
    timer.start(max(10, int(args.poll_ms)))

    def _on_about_to_quit() -> None:
        timer.stop()
        orchestrator.shutdown()
        logger.info("app_quit", extra={"log_size": len(orchestrator.conversation)})

    app.aboutToQuit.connect(_on_about_to_quit)
    signal.signal(signal.SIGINT, lambda *_: app.quit())

    _render()
    window.show()

    print("TurnTalk ready. Pick both languages, then press Start Conversation.")
    print(f"Logs: {log_path}")
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
