"""
Friction canvas widget: animated play area with QTimer-driven stepping.

Shows the two books, the magnifier with the vibrating atoms and a
thermometer.  Dragging the top book (in the magnifier or the macro
view) or using the arrow / WASD keys rubs the books together.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from PyQt5.QtCore import QPointF, QRectF, QTimer, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QFont, QPainter, QPainterPath, QPen
from PyQt5.QtWidgets import QWidget

from .describers import FrictionDescribers
from .model import DND_SCALE, FrictionModel
from .palettes import ColorScheme
from .sound import BookRubSoundGenerator, CoolingSoundGenerator

logger = logging.getLogger(__name__)

# keyboard drag, model units per key press
KEY_STEP = 20
KEY_STEP_FINE = 5

KEY_DIRECTIONS = {
    Qt.Key_Left: (-1, 0), Qt.Key_A: (-1, 0),
    Qt.Key_Right: (1, 0), Qt.Key_D: (1, 0),
    Qt.Key_Up: (0, -1), Qt.Key_W: (0, -1),
    Qt.Key_Down: (0, 1), Qt.Key_S: (0, 1),
}


def _qcolor(rgb, alpha: int = 255) -> QColor:
    return QColor(rgb[0], rgb[1], rgb[2], alpha)


class FrictionCanvas(QWidget):
    """Animated friction play area.

    Signals:
        temperature_changed(float): model temperature after each frame
        fps_changed(float):         current rendering FPS
        alert_spoken(str):          next narration from the utterance queue
        ticked():                   a frame was processed
    """

    temperature_changed = pyqtSignal(float)
    fps_changed = pyqtSignal(float)
    alert_spoken = pyqtSignal(str)
    ticked = pyqtSignal()

    VIEW_W = 780
    VIEW_H = 540
    MAGNIFIER_X = 40
    MAGNIFIER_Y = 20
    ROUND = 30

    def __init__(
        self,
        model: FrictionModel,
        scheme: ColorScheme,
        describers: FrictionDescribers,
        rub_sound: BookRubSoundGenerator,
        cooling_sound: CoolingSoundGenerator,
        fps: int = 60,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.model = model
        self.scheme = scheme
        self.describers = describers
        self.rub_sound = rub_sound
        self.cooling_sound = cooling_sound
        self._paused = False

        # Timing
        self._last_time = time.perf_counter()
        self._frame_count = 0
        self._fps_accum = 0.0
        self._last_temperature = model.temperature

        # Mouse interaction
        self._drag_scale: Optional[float] = None
        self._last_mouse: Optional[QPointF] = None
        self._keys_down = set()

        self.setMinimumSize(self.VIEW_W, self.VIEW_H)
        self.setFocusPolicy(Qt.StrongFocus)

        self._timer = QTimer(self)
        self._timer.setInterval(max(1, int(1000 / fps)))
        self._timer.timeout.connect(self._tick)
        self._timer.start()

    # ── properties ────────────────────────────────────────────────────────

    @property
    def paused(self) -> bool:
        return self._paused

    @paused.setter
    def paused(self, val: bool) -> None:
        self._paused = val
        logger.debug("Animation %s", "paused" if val else "resumed")
        if not val:
            self._last_time = time.perf_counter()

    def set_scheme(self, scheme: ColorScheme) -> None:
        logger.info("Colour scheme: %s", scheme.name)
        self.scheme = scheme
        self.update()

    def reset(self) -> None:
        self.model.reset()
        self.describers.reset()
        self.cooling_sound.reset()
        self._last_temperature = self.model.temperature
        self.temperature_changed.emit(self._last_temperature)
        self.update()

    # ── animation loop ────────────────────────────────────────────────────

    def _tick(self) -> None:
        now = time.perf_counter()
        dt = now - self._last_time
        self._last_time = now

        # stale frames are skipped by the sounds as well as the model
        if not self._paused and dt <= self.model.params.max_dt:
            self.model.step(dt)
            self.rub_sound.step(dt)
            self.cooling_sound.step(dt)

        text = self.describers.utterances.pop_text()
        if text:
            self.alert_spoken.emit(text)

        temperature = self.model.temperature
        if temperature != self._last_temperature:
            self._last_temperature = temperature
            self.temperature_changed.emit(temperature)

        self.update()
        self.ticked.emit()

        # FPS tracking
        self._frame_count += 1
        self._fps_accum += dt
        if self._fps_accum >= 1.0:
            fps = self._frame_count / self._fps_accum
            self.fps_changed.emit(fps)
            self._frame_count = 0
            self._fps_accum = 0.0

    # ── geometry ──────────────────────────────────────────────────────────

    def _offset(self) -> QPointF:
        return QPointF((self.width() - self.VIEW_W) / 2, (self.height() - self.VIEW_H) / 2)

    def _magnifier_rect(self) -> QRectF:
        p = self.model.params
        o = self._offset()
        return QRectF(o.x() + self.MAGNIFIER_X, o.y() + self.MAGNIFIER_Y, p.width, p.height)

    def _macro_top_book_rect(self) -> QRectF:
        o = self._offset()
        x, y = self.model.position
        return QRectF(o.x() + 215 + x * DND_SCALE, o.y() + 395 + y * DND_SCALE, 170, 40)

    def _macro_bottom_book_rect(self) -> QRectF:
        o = self._offset()
        return QRectF(o.x() + 200, o.y() + 440, 200, 45)

    # ── painting ──────────────────────────────────────────────────────────

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), _qcolor(self.scheme.background))

        self._paint_macro_books(painter)
        self._paint_magnifier(painter)
        self._paint_thermometer(painter)

        if self._paused:
            painter.setPen(QColor(120, 120, 120))
            painter.drawText(self.rect(), Qt.AlignBottom | Qt.AlignHCenter, "⏸ PAUSED")

        painter.end()

    def _paint_book(self, painter: QPainter, rect: QRectF, fill, title: str) -> None:
        painter.setPen(QPen(Qt.black, 1))
        painter.setBrush(_qcolor(fill))
        painter.drawRoundedRect(rect, 4, 4)
        painter.setPen(_qcolor(self.scheme.text))
        painter.setFont(QFont("Sans", 11, QFont.Bold))
        painter.drawText(rect, Qt.AlignCenter, title)

    def _paint_macro_books(self, painter: QPainter) -> None:
        s = self.scheme
        self._paint_book(painter, self._macro_bottom_book_rect(), s.bottom_book, "Physics")
        self._paint_book(painter, self._macro_top_book_rect(), s.top_book, "Chemistry")

        # magnifier target on the contact line
        mag = self._magnifier_rect()
        target = QRectF(self._macro_bottom_book_rect().center().x() - 17, self._macro_bottom_book_rect().top() - 8, 34, 15)
        painter.setBrush(Qt.NoBrush)
        painter.setPen(QPen(Qt.black, 1))
        painter.drawRoundedRect(target, 2, 2)
        painter.drawLine(target.topLeft(), QPointF(mag.left() + self.ROUND, mag.bottom()))
        painter.drawLine(target.topRight(), QPointF(mag.right() - self.ROUND, mag.bottom()))

    def _paint_magnifier(self, painter: QPainter) -> None:
        p = self.model.params
        s = self.scheme
        mag = self._magnifier_rect()
        w, h = p.width, p.height
        x, y = self.model.position

        painter.save()
        clip = QPainterPath()
        clip.addRoundedRect(mag, self.ROUND, self.ROUND)
        painter.setClipPath(clip)
        painter.fillRect(mag, Qt.white)
        painter.translate(mag.topLeft())

        # bottom book
        painter.setPen(Qt.NoPen)
        painter.setBrush(_qcolor(s.bottom_magnified))
        painter.drawRoundedRect(QRectF(3, 2 * h / 3 - 2, w - 6, h / 3), 0, self.ROUND - 3)

        # top book, follows the drag
        painter.setBrush(_qcolor(s.top_magnified))
        painter.drawRoundedRect(
            QRectF(-1.125 * w + x, -h + y, 3.25 * w, 4 * h / 3 - p.distance_initial),
            self.ROUND, self.ROUND,
        )

        # atoms
        r = p.atom_radius
        painter.setPen(QPen(Qt.black, 1))
        for atom in self.model.atoms:
            if not atom.visible:
                continue
            painter.setBrush(_qcolor(s.top_atoms if atom.is_top else s.bottom_atoms))
            painter.drawEllipse(QPointF(atom.x, atom.y), r, r)
        painter.setPen(Qt.NoPen)
        painter.setBrush(Qt.white)
        for atom in self.model.atoms:
            if atom.visible:
                painter.drawEllipse(QPointF(atom.x + r * 0.3, atom.y - r * 0.3), r * 0.3, r * 0.3)

        # drag cue
        if self.model.hint_visible:
            painter.setPen(Qt.white)
            painter.setFont(QFont("Sans", 20, QFont.Bold))
            painter.drawText(QRectF(0, 10 + y, w, 40), Qt.AlignCenter, "⟵   ⟶")

        painter.restore()

        painter.setBrush(Qt.NoBrush)
        painter.setPen(QPen(Qt.black, 5))
        painter.drawRoundedRect(mag, self.ROUND, self.ROUND)

    def _paint_thermometer(self, painter: QPainter) -> None:
        am = self.describers.alert_manager
        o = self._offset()
        tube = QRectF(o.x() + 640, o.y() + 350, 12, 150)
        bulb_center = QPointF(tube.center().x(), tube.bottom() + 10)

        frac = (self.model.temperature - am.thermometer_min) / (am.thermometer_max - am.thermometer_min)
        frac = max(0.0, min(1.0, frac))
        fluid_h = tube.height() * frac

        painter.setPen(QPen(Qt.black, 1))
        painter.setBrush(Qt.white)
        painter.drawRoundedRect(tube, 6, 6)
        painter.setPen(Qt.NoPen)
        painter.setBrush(_qcolor(self.scheme.thermometer_fluid))
        painter.drawRect(QRectF(tube.left() + 2, tube.bottom() - fluid_h, tube.width() - 4, fluid_h))
        painter.setPen(QPen(Qt.black, 1))
        painter.drawEllipse(bulb_center, 12, 12)

        painter.setPen(_qcolor(self.scheme.text))
        painter.setFont(QFont("Sans", 9))
        painter.drawText(QRectF(tube.right() + 8, tube.top(), 90, 20), Qt.AlignLeft, self.describers.temperature_zone())

    # ── mouse interaction ─────────────────────────────────────────────────

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            return
        pos = QPointF(event.pos())
        if self._magnifier_rect().contains(pos):
            self._drag_scale = 1.0
        elif self._macro_top_book_rect().contains(pos):
            self._drag_scale = 1.0 / DND_SCALE
        else:
            return
        self._last_mouse = pos
        self.describers.start_drag()

    def mouseMoveEvent(self, event):
        if self._drag_scale is None or self._last_mouse is None:
            return
        pos = QPointF(event.pos())
        dx = (pos.x() - self._last_mouse.x()) * self._drag_scale
        dy = (pos.y() - self._last_mouse.y()) * self._drag_scale
        self.model.move(dx, dy)
        self._last_mouse = pos

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton and self._drag_scale is not None:
            self._drag_scale = None
            self._last_mouse = None
            self.model.end_drag()
            self.describers.end_drag()

    # ── keyboard interaction ──────────────────────────────────────────────

    def keyPressEvent(self, event):
        direction = KEY_DIRECTIONS.get(event.key())
        if direction is None:
            super().keyPressEvent(event)
            return
        if not self._keys_down:
            self.describers.start_drag()
        self._keys_down.add(event.key())
        step = KEY_STEP_FINE if event.modifiers() & Qt.ShiftModifier else KEY_STEP
        self.model.move(direction[0] * step, direction[1] * step)

    def keyReleaseEvent(self, event):
        if event.isAutoRepeat() or event.key() not in self._keys_down:
            super().keyReleaseEvent(event)
            return
        self._keys_down.discard(event.key())
        if not self._keys_down:
            self.model.end_drag()
            self.describers.end_drag()

    def focusInEvent(self, event):
        self.describers.on_focus()
        super().focusInEvent(event)

    def focusOutEvent(self, event):
        # key releases are not delivered once focus is gone
        if self._keys_down:
            self._keys_down.clear()
            self.model.end_drag()
            self.describers.end_drag()
        super().focusOutEvent(event)
