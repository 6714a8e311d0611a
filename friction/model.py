"""
Friction physics model.

Owns the top book position, the gap between the books, the temperature
(atom oscillation amplitude) and the queue of atoms that can still
evaporate.  Observable values are published as Qt signals so views,
sound generators and describers can follow along without polling.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
from PyQt5.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ATOM_RADIUS = 7                # screen units
DISTANCE_X = 20                # x-distance between neighbouring atoms
DISTANCE_Y = 20                # y-distance between rows of atoms
DISTANCE_INITIAL = 25          # initial gap between top and bottom atoms
AMPLITUDE_MIN = 1.0
AMPLITUDE_EVAPORATE = 7.0
AMPLITUDE_MAX = 12.0
COOLING_RATE = 0.2             # proportion per second
HEATING_MULTIPLIER = 0.0075    # per unit of x-distance rubbed while in contact
EVAPORATION_AMPLITUDE_REDUCTION = 0.01
MAX_X_DISPLACEMENT = 600
MIN_Y_POSITION = -70           # keeps the top book inside the magnifier
MAX_DT = 0.5                   # larger steps are treated as clock anomalies
DND_SCALE = 0.025              # macro book to magnifier drag conversion
EVAPORATION_STEPS = 250        # frames for an evaporated atom to fly off

MAGNIFIER_WIDTH = 690
MAGNIFIER_HEIGHT = 300


# ---------------------------------------------------------------------------
# Atom layout
# ---------------------------------------------------------------------------

class AtomGroup(NamedTuple):
    """A run of *num* atoms starting *offset* atom spacings into a row."""
    num: int
    offset: float = 0.0
    evaporate: bool = False


# Top book: first row is fixed, the other four can evaporate.
# Offsets of 0.5 stagger alternate rows into a lattice.
TOP_BOOK_ROWS: Tuple[Tuple[AtomGroup, ...], ...] = (
    (AtomGroup(30),),
    (AtomGroup(29, 0.5, True),),
    (AtomGroup(29, 0.0, True),),
    (
        AtomGroup(5, 0.5, True),
        AtomGroup(8, 6.5, True),
        AtomGroup(5, 15.5, True),
        AtomGroup(5, 21.5, True),
        AtomGroup(1, 27.5, True),
    ),
    (
        AtomGroup(2, 3.0, True),
        AtomGroup(1, 8.0, True),
        AtomGroup(2, 12.0, True),
        AtomGroup(2, 17.0, True),
        AtomGroup(2, 24.0, True),
    ),
)

# Bottom book: three fixed rows.
BOTTOM_BOOK_ROWS: Tuple[Tuple[AtomGroup, ...], ...] = (
    (AtomGroup(29),),
    (AtomGroup(28, 0.5),),
    (AtomGroup(29),),
)


# ---------------------------------------------------------------------------
# Atom
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class Atom:
    """A single atom in the magnified view.

    ``x0``/``y0`` is the centre the atom vibrates around; it follows the
    top book while attached and the flight path once evaporated.
    """
    home_x: float
    home_y: float
    is_top: bool = False
    x0: float = 0.0
    y0: float = 0.0
    x: float = 0.0
    y: float = 0.0
    evaporated: bool = False
    visible: bool = True
    flight_dx: float = 0.0
    flight_dy: float = 0.0
    flight_steps: int = 0

    def __post_init__(self):
        self.reset()

    def reset(self) -> None:
        self.x0 = self.x = self.home_x
        self.y0 = self.y = self.home_y
        self.evaporated = False
        self.visible = True
        self.flight_dx = self.flight_dy = 0.0
        self.flight_steps = 0

    @property
    def in_flight(self) -> bool:
        return self.flight_steps > 0

    def launch(self, dest_x: float, dest_y: float, steps: int) -> None:
        """Detach from the book and head for (*dest_x*, *dest_y*)."""
        self.evaporated = True
        self.flight_steps = steps
        self.flight_dx = (dest_x - self.x0) / steps
        self.flight_dy = (dest_y - self.y0) / steps

    def advance_flight(self) -> None:
        # y grows downward on screen, so the atom rises while flying off
        self.x0 += self.flight_dx
        self.y0 -= self.flight_dy
        self.flight_steps -= 1
        if self.flight_steps == 0:
            self.visible = False


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

@dataclass
class FrictionParams:
    """Tuneable model constants.

    Defaults reproduce the classic Friction simulation.  The control panel
    edits ``cooling_rate`` and ``heating_multiplier`` while running.
    """
    # Thermal
    amplitude_min: float = AMPLITUDE_MIN
    amplitude_max: float = AMPLITUDE_MAX
    evaporation_limit: float = AMPLITUDE_EVAPORATE
    cooling_rate: float = COOLING_RATE
    heating_multiplier: float = HEATING_MULTIPLIER
    evaporation_amplitude_reduction: float = EVAPORATION_AMPLITUDE_REDUCTION

    # Geometry
    atom_radius: float = ATOM_RADIUS
    distance_x: float = DISTANCE_X
    distance_y: float = DISTANCE_Y
    distance_initial: float = DISTANCE_INITIAL
    max_x_displacement: float = MAX_X_DISPLACEMENT
    min_y_position: float = MIN_Y_POSITION
    width: float = MAGNIFIER_WIDTH
    height: float = MAGNIFIER_HEIGHT

    # Timing
    max_dt: float = MAX_DT
    evaporation_steps: int = EVAPORATION_STEPS


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

class FrictionModel(QObject):
    """Top book dragged over a bottom book, heating the contact surface.

    Signals (each value signal fires only when the value changes):
        position_changed(float, float)
        distance_changed(float)
        temperature_changed(float)
        contact_changed(bool)
        rows_remaining_changed(int)
        hint_visible_changed(bool)
        stepped()                    once per accepted frame
        atom_evaporated(object)      the Atom that just broke away

    Parameters:
        params: Model constants (or defaults).
        seed:   RNG seed for reproducibility (None = random).
    """

    position_changed = pyqtSignal(float, float)
    distance_changed = pyqtSignal(float)
    temperature_changed = pyqtSignal(float)
    contact_changed = pyqtSignal(bool)
    rows_remaining_changed = pyqtSignal(int)
    hint_visible_changed = pyqtSignal(bool)
    stepped = pyqtSignal()
    atom_evaporated = pyqtSignal(object)

    def __init__(
        self,
        params: Optional[FrictionParams] = None,
        seed: Optional[int] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.params = params or FrictionParams()
        self.rng = np.random.default_rng(seed)

        p = self.params
        self._position: Tuple[float, float] = (0.0, 0.0)
        self._distance: float = p.distance_initial
        self._temperature: float = p.amplitude_min
        self._contact: bool = False
        self._hint_visible: bool = True
        self._rows_remaining: int = 0
        self.bottom_offset: float = 0.0
        self.scheduled_evaporation_amount: float = 0.0

        self.top_atoms: List[Atom] = []
        self.bottom_atoms: List[Atom] = []
        self.evaporation_sample: List[List[Atom]] = []
        self.evaporation_queue: List[List[Atom]] = []
        self._build_atoms()
        self.reset()

    # ── atom layout ───────────────────────────────────────────────────────

    def _build_atoms(self) -> None:
        p = self.params
        bottom_y0 = 2 * p.height / 3
        top_rows = len(TOP_BOOK_ROWS)
        # lowest top row sits one spacing plus the initial gap above the bottom book
        top_y0 = bottom_y0 - p.distance_y - p.distance_initial - p.distance_y * (top_rows - 1)
        bottom_x0 = (p.width - (BOTTOM_BOOK_ROWS[0][0].num - 1) * p.distance_x) / 2
        top_x0 = bottom_x0 - p.distance_x / 2

        for i, layer in enumerate(TOP_BOOK_ROWS):
            self._add_layer(self.top_atoms, layer, top_x0, top_y0 + p.distance_y * i, True)
        for i, layer in enumerate(BOTTOM_BOOK_ROWS):
            self._add_layer(self.bottom_atoms, layer, bottom_x0, bottom_y0 + p.distance_y * i, False)

    def _add_layer(self, target, layer, x: float, y: float, is_top: bool) -> None:
        row: List[Atom] = []
        evaporate = False
        for group in layer:
            evaporate = group.evaporate
            for n in range(group.num):
                atom = Atom(x + (group.offset + n) * self.params.distance_x, y, is_top)
                target.append(atom)
                if group.evaporate:
                    row.append(atom)
        if evaporate:
            self.evaporation_sample.append(row)

    @property
    def atoms(self) -> List[Atom]:
        return self.top_atoms + self.bottom_atoms

    # ── observable values ─────────────────────────────────────────────────

    @property
    def position(self) -> Tuple[float, float]:
        return self._position

    @property
    def distance(self) -> float:
        return self._distance

    @property
    def temperature(self) -> float:
        return self._temperature

    @property
    def contact(self) -> bool:
        return self._contact

    @property
    def rows_remaining(self) -> int:
        return self._rows_remaining

    @property
    def hint_visible(self) -> bool:
        return self._hint_visible

    def _set_distance(self, distance: float) -> None:
        if distance == self._distance:
            return
        self._distance = distance
        self.distance_changed.emit(distance)
        contact = math.floor(distance) <= 0
        if contact != self._contact:
            self._contact = contact
            self.contact_changed.emit(contact)

    def _set_temperature(self, temperature: float) -> None:
        if temperature == self._temperature:
            return
        self._temperature = temperature
        self.temperature_changed.emit(temperature)
        if temperature > self.params.evaporation_limit:
            self.evaporate()

    def _set_rows_remaining(self, rows: int) -> None:
        if rows != self._rows_remaining:
            self._rows_remaining = rows
            self.rows_remaining_changed.emit(rows)

    def _set_hint_visible(self, visible: bool) -> None:
        if visible != self._hint_visible:
            self._hint_visible = visible
            self.hint_visible_changed.emit(visible)

    def _set_position(self, x: float, y: float) -> None:
        old_x, old_y = self._position
        if (x, y) == (old_x, old_y):
            return
        dx, dy = x - old_x, y - old_y
        self._position = (x, y)
        self.position_changed.emit(x, y)

        for atom in self.top_atoms:
            if not atom.evaporated:
                atom.x0 += dx
                atom.y0 += dy

        self._set_distance(self._distance - dy)
        if self._contact:
            p = self.params
            self._set_temperature(min(self._temperature + abs(dx) * p.heating_multiplier, p.amplitude_max))

    # ── reset ─────────────────────────────────────────────────────────────

    def reset(self) -> None:
        """Restore the initial conditions and refill the evaporation queue."""
        p = self.params
        self.scheduled_evaporation_amount = 0.0
        self.bottom_offset = 0.0
        # bypass _set_position: snapping back must not rub or carry atoms
        if self._position != (0.0, 0.0):
            self._position = (0.0, 0.0)
            self.position_changed.emit(0.0, 0.0)
        self._set_distance(p.distance_initial)
        self._set_temperature(p.amplitude_min)
        self._set_hint_visible(True)

        for atom in self.atoms:
            atom.reset()
        self.evaporation_queue = [list(row) for row in self.evaporation_sample]
        self._set_rows_remaining(len(self.evaporation_queue))
        logger.info(
            "Model reset: %d rows, %d atoms can evaporate",
            len(self.evaporation_queue),
            sum(len(row) for row in self.evaporation_queue),
        )

    # ── time step ─────────────────────────────────────────────────────────

    def step(self, dt: float) -> None:
        """Advance the model by *dt* seconds.

        Steps longer than ``params.max_dt`` (the window was minimised or
        the tab hidden) are ignored.
        """
        p = self.params
        if dt > p.max_dt:
            logger.debug("Ignoring stale frame: dt=%.3f", dt)
            return
        self.stepped.emit()

        scheduled = self.scheduled_evaporation_amount
        self.scheduled_evaporation_amount = 0.0
        temperature = max(p.amplitude_min, (self._temperature - scheduled) * (1 - dt * p.cooling_rate))
        self._set_temperature(temperature)

        self._vibrate()

    def _vibrate(self) -> None:
        atoms = [a for a in self.atoms if a.visible]
        if not atoms:
            return
        jitter = self.rng.uniform(0.0, 1.0, size=(len(atoms), 2)) - 0.5
        jitter *= self._temperature
        for atom, (jx, jy) in zip(atoms, jitter):
            if atom.in_flight:
                atom.advance_flight()
            atom.x = atom.x0 + jx
            atom.y = atom.y0 + jy

    # ── dragging ──────────────────────────────────────────────────────────

    def end_drag(self) -> None:
        """Forget any downward drag absorbed while the books were touching."""
        self.bottom_offset = 0.0

    def move(self, dx: float, dy: float) -> None:
        """Drag the top book by (*dx*, *dy*), limited to valid positions.

        Dragging down into the bottom book is absorbed by ``bottom_offset``,
        which must be paid back by upward motion before the book lifts.
        """
        p = self.params
        self._set_hint_visible(False)
        x, y = self._position

        if self.bottom_offset > 0 and dy < 0:
            self.bottom_offset += dy
            dy = 0.0

        if dy > self._distance:
            self.bottom_offset += dy - self._distance
            dy = self._distance
        elif y + dy < p.min_y_position:
            dy = p.min_y_position - y

        if x + dx > p.max_x_displacement:
            dx = p.max_x_displacement - x
        elif x + dx < -p.max_x_displacement:
            dx = -p.max_x_displacement - x

        self._set_position(x + dx, y + dy)

    # ── evaporation ───────────────────────────────────────────────────────

    def evaporate(self) -> None:
        """Break one random atom away from the lowest remaining row."""
        queue = self.evaporation_queue
        p = self.params
        if queue and not queue[-1]:
            queue.pop()
            logger.debug("Evaporation row exhausted, %d rows left", len(queue))
            self._set_distance(self._distance + p.distance_y)
            self._set_rows_remaining(len(queue))

        if not queue:
            return

        row = queue[-1]
        atom = row.pop(int(self.rng.integers(len(row))))
        y_range = self._distance + p.distance_y * len(queue)
        dest_x = atom.x0 + 4 * p.width * (round(self.rng.uniform()) - 0.5)
        dest_y = atom.y0 + self.rng.uniform() * 1.5 * y_range
        atom.launch(dest_x, dest_y, p.evaporation_steps)
        self.scheduled_evaporation_amount += p.evaporation_amplitude_reduction
        self.atom_evaporated.emit(atom)
