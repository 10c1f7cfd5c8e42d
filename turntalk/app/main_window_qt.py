from __future__ import annotations

from PyQt6 import QtCore, QtGui, QtWidgets

from turntalk.app.state import SessionView
from turntalk.contracts import Speaker
from turntalk.languages import LanguageRegistry
from turntalk.ui.format import entry_text, status_text

_ENTRY_COLORS = {
    Speaker.SELF: "#6ec7ff",
    Speaker.SELF_TRANSLATED: "#8fe388",
    Speaker.PEER: "#f3d36b",
    Speaker.PEER_TRANSLATED: "#c79bf2",
}


class MainWindow(QtWidgets.QMainWindow):
    toggle_requested = QtCore.pyqtSignal()
    source_language_changed = QtCore.pyqtSignal(str)
    target_language_changed = QtCore.pyqtSignal(str)

    def __init__(self, languages: LanguageRegistry) -> None:
        super().__init__()
        self.languages = languages
        self.setWindowTitle("TurnTalk")
        self.resize(760, 620)
        self._running = False
        self._rendered_entries = 0

        root = QtWidgets.QWidget(self)
        self.setCentralWidget(root)
        lay = QtWidgets.QVBoxLayout(root)
        lay.setContentsMargins(22, 20, 22, 20)
        lay.setSpacing(14)

        title = QtWidgets.QLabel("Real-Time Translator", root)
        title.setObjectName("title")
        lay.addWidget(title)

        self.error_label = QtWidgets.QLabel("", root)
        self.error_label.setObjectName("error")
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        lay.addWidget(self.error_label)

        lang_row = QtWidgets.QHBoxLayout()
        lang_row.setSpacing(10)
        self.source_combo = QtWidgets.QComboBox(root)
        self.target_combo = QtWidgets.QComboBox(root)
        for lang in languages:
            self.source_combo.addItem(lang.display_name, lang.code)
            self.target_combo.addItem(lang.display_name, lang.code)
        lang_row.addWidget(QtWidgets.QLabel("Your language", root))
        lang_row.addWidget(self.source_combo, 1)
        lang_row.addWidget(QtWidgets.QLabel("Their language", root))
        lang_row.addWidget(self.target_combo, 1)
        lay.addLayout(lang_row)

        btn_row = QtWidgets.QHBoxLayout()
        self.btn_toggle = QtWidgets.QPushButton("Start Conversation", root)
        self.btn_toggle.setObjectName("primary")
        self.listening_label = QtWidgets.QLabel("", root)
        self.listening_label.setObjectName("listening")
        btn_row.addWidget(self.btn_toggle)
        btn_row.addStretch(1)
        btn_row.addWidget(self.listening_label)
        lay.addLayout(btn_row)

        self.status_label = QtWidgets.QLabel("", root)
        self.status_label.setObjectName("status")
        lay.addWidget(self.status_label)

        card = QtWidgets.QFrame(root)
        card.setObjectName("card")
        card_lay = QtWidgets.QVBoxLayout(card)
        card_lay.setContentsMargins(14, 12, 14, 12)
        subhead = QtWidgets.QLabel("Current Transcript", card)
        subhead.setObjectName("subhead")
        self.transcript_label = QtWidgets.QLabel("", card)
        self.transcript_label.setWordWrap(True)
        self.transcript_label.setTextInteractionFlags(QtCore.Qt.TextInteractionFlag.TextSelectableByMouse)
        card_lay.addWidget(subhead)
        card_lay.addWidget(self.transcript_label)
        lay.addWidget(card)

        history_head = QtWidgets.QLabel("Conversation History", root)
        history_head.setObjectName("subhead")
        lay.addWidget(history_head)
        self.history = QtWidgets.QListWidget(root)
        self.history.setWordWrap(True)
        lay.addWidget(self.history, 1)

        self.btn_toggle.clicked.connect(self.toggle_requested.emit)
        self.source_combo.currentIndexChanged.connect(
            lambda _i: self.source_language_changed.emit(str(self.source_combo.currentData()))
        )
        self.target_combo.currentIndexChanged.connect(
            lambda _i: self.target_language_changed.emit(str(self.target_combo.currentData()))
        )

        self.setStyleSheet(
            """
            QMainWindow { background: #121416; color: #e8ecef; }
            QLabel { color: #e8ecef; }
            QLabel#title { font-size: 30px; font-weight: 700; letter-spacing: 0.3px; }
            QLabel#status { color: #a7b0b8; font-size: 13px; }
            QLabel#subhead { color: #b8c1c8; font-size: 12px; font-weight: 600; }
            QLabel#listening { color: #6ec7ff; font-weight: 700; }
            QLabel#error {
                background: #3a1618;
                border: 1px solid #7a2c31;
                border-radius: 10px;
                color: #ffb4b8;
                padding: 10px;
            }
            QFrame#card {
                background: #1a1e22;
                border: 1px solid #2a3138;
                border-radius: 14px;
            }
            QListWidget {
                background: #1a1e22;
                border: 1px solid #2a3138;
                border-radius: 10px;
                color: #e8ecef;
            }
            QPushButton {
                background: #22272d;
                border: 1px solid #313840;
                border-radius: 10px;
                color: #e7edf3;
                padding: 10px 16px;
                font-size: 13px;
                font-weight: 600;
            }
            QPushButton:hover { background: #2a3037; }
            QPushButton#primary {
                background: #c8f25f;
                color: #172005;
                border-color: #c8f25f;
            }
            QPushButton#primary:hover { background: #d3f67f; border-color: #d3f67f; }
            """
        )

    def set_languages(self, source_code: str, target_code: str) -> None:
        for combo, code in ((self.source_combo, source_code), (self.target_combo, target_code)):
            idx = combo.findData(code)
            if idx >= 0 and idx != combo.currentIndex():
                combo.blockSignals(True)
                combo.setCurrentIndex(idx)
                combo.blockSignals(False)

    def set_running(self, running: bool) -> None:
        self._running = running
        self.btn_toggle.setText("Stop Conversation" if running else "Start Conversation")

    def render(self, view: SessionView) -> None:
        self.set_running(view.auto_mode_enabled)
        self.set_languages(view.source_language, view.target_language)
        self.status_label.setText(status_text(view, self.languages))
        self.transcript_label.setText(view.transcript or "...")
        self.listening_label.setText("\U0001F3A4 Listening" if view.listening else "")

        if view.last_error:
            self.error_label.setText(view.last_error)
            self.error_label.show()
        else:
            self.error_label.hide()

        # the log is append-only: only add what is new
        for entry in view.log[self._rendered_entries :]:
            item = QtWidgets.QListWidgetItem(entry_text(entry))
            item.setForeground(QtGui.QBrush(QtGui.QColor(_ENTRY_COLORS[entry.speaker])))
            self.history.addItem(item)
        if len(view.log) > self._rendered_entries:
            self._rendered_entries = len(view.log)
            self.history.scrollToBottom()
