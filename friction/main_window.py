"""
Main window: assembles the friction canvas, control panel, and menu bar.
"""

from __future__ import annotations

import logging

from PyQt5.QtGui import QKeySequence
from PyQt5.QtWidgets import (
    QAction,
    QHBoxLayout,
    QMainWindow,
    QMessageBox,
    QSizePolicy,
    QWidget,
)

from . import __version__
from .canvas import FrictionCanvas
from .controls import ControlPanel
from .describers import FrictionDescribers
from .model import FrictionModel
from .palettes import ColorScheme
from .sound import BookRubSoundGenerator, CoolingSoundGenerator

logger = logging.getLogger(__name__)

KEYBOARD_HELP = (
    "<h3>Move Book</h3>"
    "<p><b>Move book:</b> Left / Right / Up / Down arrow keys, or W A S D</p>"
    "<p><b>Move in smaller steps:</b> hold Shift with the arrow keys or W A S D</p>"
    "<p>Click the chemistry book, in the magnifier or below it, and drag to rub.</p>"
    "<h3>Simulation</h3>"
    "<p><b>Pause / resume:</b> Space &nbsp;&nbsp; <b>Reset:</b> Ctrl+R</p>"
)


class MainWindow(QMainWindow):
    """Top-level window for the Friction simulator."""

    def __init__(
        self,
        model: FrictionModel,
        scheme: ColorScheme,
        describers: FrictionDescribers,
        fps: int = 60,
    ) -> None:
        super().__init__()
        self.setWindowTitle(f"Friction  v{__version__}")

        self.model = model
        self.describers = describers
        self.rub_sound = BookRubSoundGenerator(model)
        self.cooling_sound = CoolingSoundGenerator(model)
        self.canvas = FrictionCanvas(
            model, scheme, describers, self.rub_sound, self.cooling_sound, fps=fps,
        )
        self.controls = ControlPanel(self.canvas, model)

        # Layout
        central = QWidget()
        self.setCentralWidget(central)
        h_layout = QHBoxLayout(central)
        h_layout.setContentsMargins(8, 8, 8, 8)
        h_layout.setSpacing(12)

        self.canvas.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        h_layout.addWidget(self.canvas, stretch=1)
        h_layout.addWidget(self.controls)

        self._build_menu()

        self.statusBar().showMessage("Rub the chemistry book on the physics book.")

        # Signals
        self.canvas.alert_spoken.connect(self.statusBar().showMessage)
        self.canvas.setFocus()

    def _build_menu(self) -> None:
        menu = self.menuBar()

        file_menu = menu.addMenu("&File")
        quit_act = QAction("&Quit", self)
        quit_act.setShortcut(QKeySequence.Quit)
        quit_act.triggered.connect(self.close)
        file_menu.addAction(quit_act)

        edit_menu = menu.addMenu("&Edit")
        pause_act = QAction("&Pause / Resume", self)
        pause_act.setShortcut(QKeySequence("Space"))
        pause_act.triggered.connect(self._toggle_pause)
        edit_menu.addAction(pause_act)
        reset_act = QAction("&Reset All", self)
        reset_act.setShortcut(QKeySequence("Ctrl+R"))
        reset_act.triggered.connect(self._reset)
        edit_menu.addAction(reset_act)

        help_menu = menu.addMenu("&Help")
        keys_act = QAction("&Keyboard Help", self)
        keys_act.setShortcut(QKeySequence.HelpContents)
        keys_act.triggered.connect(self._keyboard_help)
        help_menu.addAction(keys_act)
        about_act = QAction("&About", self)
        about_act.triggered.connect(self._about)
        help_menu.addAction(about_act)

    def _toggle_pause(self) -> None:
        self.controls._pause_btn.setChecked(not self.canvas.paused)

    def _reset(self) -> None:
        self.controls._on_reset()
        self.statusBar().showMessage("Simulation reset")

    def _keyboard_help(self) -> None:
        QMessageBox.information(self, "Hot Keys and Help", KEYBOARD_HELP)

    def _about(self) -> None:
        QMessageBox.about(
            self,
            "About Friction",
            f"<h3>Friction v{__version__}</h3>"
            "<p>Rub a chemistry book on a physics book and watch the atoms "
            "at the surface heat up.</p>"
            "<p><b>Physics model:</b></p>"
            "<ul>"
            "<li>Rubbing in contact raises the atoms' vibration amplitude</li>"
            "<li>Amplitude cools geometrically toward room temperature</li>"
            "<li>Above the evaporation limit atoms break away row by row</li>"
            "<li>Each evaporated atom carries away a little heat</li>"
            "</ul>",
        )
