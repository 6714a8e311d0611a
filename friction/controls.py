"""
Control panel: readouts and adjustable parameters for the friction model.

Organised into groups:
  - Colour scheme
  - State (temperature zone, rows left to evaporate, contact)
  - Sound (rubbing / cooling levels)
  - Physics (cooling rate, heating)
  - Actions (pause, reset)
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QComboBox,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from .canvas import FrictionCanvas
from .model import FrictionModel
from .palettes import SCHEMES, get_scheme, list_schemes

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Labelled slider helper
# ---------------------------------------------------------------------------

class LSlider(QWidget):
    """Horizontal slider with label and readout."""

    valueChanged = pyqtSignal(int)

    def __init__(self, label, lo, hi, val, suffix="", parent=None):
        super().__init__(parent)
        lay = QHBoxLayout(self)
        lay.setContentsMargins(0, 1, 0, 1)

        self._lbl = QLabel(label)
        self._lbl.setFixedWidth(110)
        lay.addWidget(self._lbl)

        self._slider = QSlider(Qt.Horizontal)
        self._slider.setRange(lo, hi)
        self._slider.setValue(val)
        lay.addWidget(self._slider, stretch=1)

        self._suffix = suffix
        self._ro = QLabel(f"{val}{suffix}")
        self._ro.setFixedWidth(48)
        self._ro.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        lay.addWidget(self._ro)

        self._slider.valueChanged.connect(self._changed)

    def _changed(self, v):
        self._ro.setText(f"{v}{self._suffix}")
        self.valueChanged.emit(v)

    def value(self):
        return self._slider.value()

    def setValue(self, v):
        self._slider.setValue(v)


# ---------------------------------------------------------------------------
# Control panel
# ---------------------------------------------------------------------------

class ControlPanel(QWidget):
    """Side panel with simulation readouts and controls."""

    def __init__(
        self,
        canvas: FrictionCanvas,
        model: FrictionModel,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.canvas = canvas
        self.model = model
        self.setFixedWidth(280)

        layout = QVBoxLayout(self)
        layout.setSpacing(8)

        # ── Colour scheme ─────────────────────────────────────────────────
        color_group = QGroupBox("Colour Scheme")
        cg = QVBoxLayout(color_group)
        self._scheme_combo = QComboBox()
        for key in list_schemes():
            self._scheme_combo.addItem(SCHEMES[key].name, key)
            if SCHEMES[key] == canvas.scheme:
                self._scheme_combo.setCurrentIndex(self._scheme_combo.count() - 1)
        self._scheme_combo.currentIndexChanged.connect(self._on_scheme_changed)
        cg.addWidget(self._scheme_combo)
        layout.addWidget(color_group)

        # ── State ─────────────────────────────────────────────────────────
        state_group = QGroupBox("State")
        sg = QVBoxLayout(state_group)
        self._zone_label = QLabel()
        self._rows_label = QLabel()
        self._contact_label = QLabel()
        for lbl in (self._zone_label, self._rows_label, self._contact_label):
            sg.addWidget(lbl)
        layout.addWidget(state_group)

        # ── Sound ─────────────────────────────────────────────────────────
        sound_group = QGroupBox("Sound")
        sdg = QVBoxLayout(sound_group)
        self._rub_meter = self._meter(sdg, "Rubbing")
        self._cool_meter = self._meter(sdg, "Cooling")
        layout.addWidget(sound_group)

        # ── Physics ───────────────────────────────────────────────────────
        phys_group = QGroupBox("Physics")
        pg = QVBoxLayout(phys_group)

        # sliders scale the values the model was launched with
        self._base_cooling = model.params.cooling_rate
        self._base_heating = model.params.heating_multiplier

        self._cooling_slider = LSlider("Cooling Rate", 0, 300, 100, "%")
        self._cooling_slider.valueChanged.connect(
            lambda v: setattr(self.model.params, "cooling_rate", self._base_cooling * v / 100)
        )
        pg.addWidget(self._cooling_slider)

        self._heating_slider = LSlider("Heating", 10, 300, 100, "%")
        self._heating_slider.valueChanged.connect(
            lambda v: setattr(self.model.params, "heating_multiplier", self._base_heating * v / 100)
        )
        pg.addWidget(self._heating_slider)
        layout.addWidget(phys_group)

        # ── Actions ───────────────────────────────────────────────────────
        act_row = QHBoxLayout()
        self._pause_btn = QPushButton("⏸ Pause")
        self._pause_btn.setCheckable(True)
        self._pause_btn.toggled.connect(self._on_pause)
        act_row.addWidget(self._pause_btn)

        reset_btn = QPushButton("↺ Reset")
        reset_btn.clicked.connect(self._on_reset)
        act_row.addWidget(reset_btn)
        layout.addLayout(act_row)
        layout.addStretch()

        # Signals
        model.rows_remaining_changed.connect(self._update_state)
        model.contact_changed.connect(self._update_state)
        canvas.temperature_changed.connect(self._update_state)
        canvas.ticked.connect(self._update_meters)
        self._update_state()

    @staticmethod
    def _meter(layout: QVBoxLayout, label: str) -> QProgressBar:
        row = QHBoxLayout()
        lbl = QLabel(label)
        lbl.setFixedWidth(70)
        row.addWidget(lbl)
        bar = QProgressBar()
        bar.setRange(0, 100)
        bar.setTextVisible(False)
        row.addWidget(bar, stretch=1)
        layout.addLayout(row)
        return bar

    def _update_state(self, *_args) -> None:
        self._zone_label.setText(f"Temperature: {self.canvas.describers.temperature_zone()}")
        self._rows_label.setText(f"Rows left to evaporate: {self.model.rows_remaining}")
        self._contact_label.setText("Books touching" if self.model.contact else "Books apart")

    def _update_meters(self) -> None:
        self._rub_meter.setValue(int(self.canvas.rub_sound.gain * 100))
        self._cool_meter.setValue(int(self.canvas.cooling_sound.gain * 100))

    def _on_scheme_changed(self, idx: int) -> None:
        self.canvas.set_scheme(get_scheme(self._scheme_combo.currentData()))

    def _on_pause(self, checked: bool) -> None:
        self.canvas.paused = checked
        self._pause_btn.setText("▶ Resume" if checked else "⏸ Pause")

    def _on_reset(self) -> None:
        logger.info("Reset requested from control panel")
        self._cooling_slider.setValue(100)
        self._heating_slider.setValue(100)
        # setValue emits nothing when a slider already sits at 100
        self.model.params.cooling_rate = self._base_cooling
        self.model.params.heating_multiplier = self._base_heating
        self.canvas.reset()
        self._update_state()
