"""
Sound generators driven by the friction model.

Each generator is a small state machine stepped once per frame.  The
noise itself is synthesised with numpy (white noise shaped to pink or
brown, then bandpass filtered in the frequency domain); playback is left
to whatever audio sink the host application wires up, so ``render()``
only returns sample buffers.
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from typing import Callable, Optional, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .model import FrictionModel

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
NOISE_TYPES = ("white", "pink", "brown")

# Rubbing sound
FRICTION_SOUND_CENTER_FREQUENCY = 1000.0   # Hz
FRICTION_SOUND_VARIATION = 0.15            # proportion
DIRECTION_SWITCH_LOCKOUT_TIME = 0.030      # seconds
STILLNESS_TIME = 0.064                     # seconds without motion = still

# Cooling sound
AMPLITUDE_AVERAGING_LENGTH = 10
COOLING_SOUND_DELAY = 0.25                 # seconds of cooling before playing
COOLING_SOUND_DURATION = 2.0               # seconds the sound lasts


# ---------------------------------------------------------------------------
# Noise generator
# ---------------------------------------------------------------------------

class NoiseGenerator:
    """Filtered noise source with a smoothly ramped output level.

    Parameters:
        noise_type:           "white", "pink" or "brown".
        center_frequency:     Bandpass centre in Hz (None = unfiltered).
        q_factor:             Bandpass quality factor.
        initial_output_level: Starting gain, 0–1.
        seed:                 RNG seed for reproducible buffers.
    """

    def __init__(
        self,
        noise_type: str = "pink",
        center_frequency: Optional[float] = None,
        q_factor: float = 1.0,
        initial_output_level: float = 1.0,
        seed: Optional[int] = None,
    ) -> None:
        if noise_type not in NOISE_TYPES:
            raise ValueError(f"Unknown noise type {noise_type!r}, expected one of {NOISE_TYPES}")
        self.noise_type = noise_type
        self.center_frequency = center_frequency
        self.q_factor = q_factor
        self.output_level = initial_output_level   # target level
        self.gain = initial_output_level           # level actually applied
        self.is_playing = False
        self.rng = np.random.default_rng(seed)
        self._time_constant = 0.0
        self._stop_countdown: Optional[float] = None

    # ── transport ─────────────────────────────────────────────────────────

    def start(self) -> None:
        self.is_playing = True
        self._stop_countdown = None

    def stop(self, delay: float = 0.0) -> None:
        """Stop now, or after *delay* seconds of ``advance()``."""
        if delay <= 0:
            self.is_playing = False
            self._stop_countdown = None
        else:
            self._stop_countdown = delay

    # ── level / filter ────────────────────────────────────────────────────

    def set_output_level(self, level: float, time_constant: float = 0.0) -> None:
        """Set the target level; with a time constant the gain approaches it exponentially."""
        self.output_level = level
        self._time_constant = time_constant
        if time_constant <= 0:
            self.gain = level

    def set_bandpass_center_frequency(self, frequency: float) -> None:
        self.center_frequency = frequency

    def advance(self, dt: float) -> None:
        """Move the gain ramp and any pending stop forward by *dt* seconds."""
        if self._time_constant > 0:
            decay = math.exp(-dt / self._time_constant)
            self.gain = self.output_level + (self.gain - self.output_level) * decay
        if self._stop_countdown is not None:
            self._stop_countdown -= dt
            if self._stop_countdown <= 0:
                self.stop()

    # ── synthesis ─────────────────────────────────────────────────────────

    def render(self, num_samples: int) -> np.ndarray:
        """Render *num_samples* of mono float32 audio at the current gain."""
        if not self.is_playing or num_samples <= 0:
            return np.zeros(max(num_samples, 0), dtype=np.float32)

        spectrum = np.fft.rfft(self.rng.standard_normal(num_samples))
        freqs = np.fft.rfftfreq(num_samples, 1.0 / SAMPLE_RATE)
        safe = np.maximum(freqs, 1.0)

        if self.noise_type == "pink":
            spectrum /= np.sqrt(safe)
        elif self.noise_type == "brown":
            spectrum /= safe

        if self.center_frequency:
            # magnitude response of a second-order bandpass
            ratio = freqs / self.center_frequency
            bw = ratio / self.q_factor
            spectrum *= bw / np.sqrt((1.0 - ratio * ratio) ** 2 + bw * bw)

        samples = np.fft.irfft(spectrum, n=num_samples)
        peak = np.max(np.abs(samples))
        if peak > 0:
            samples /= peak
        return (samples * self.gain).astype(np.float32)


# ---------------------------------------------------------------------------
# Book rubbing
# ---------------------------------------------------------------------------

class BookRubSoundGenerator(NoiseGenerator):
    """Sound of the two books rubbing together.

    The bandpass centre shifts up or down with the drag direction, and a
    short silence follows each direction change so the shift does not
    sound like a click.  Velocity comes from position updates timed with
    *clock*.
    """

    def __init__(
        self,
        model: "FrictionModel",
        clock: Callable[[], float] = time.perf_counter,
        max_output_level: float = 1.0,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(
            noise_type="pink",
            center_frequency=FRICTION_SOUND_CENTER_FREQUENCY,
            q_factor=2,
            initial_output_level=0,
            seed=seed,
        )
        self.clock = clock
        self.max_output_level = max_output_level

        self.velocity = 0.0
        self.locked_out = False
        self.lockout_counter = 0.0
        self._time_of_last_update = float("-inf")
        self._last_x = model.position[0]
        self._contact = model.contact

        # stays on; silence is an output level of zero
        self.start()

        model.position_changed.connect(self._on_position_changed)
        model.contact_changed.connect(self._on_contact_changed)

    def _on_position_changed(self, x: float, y: float) -> None:
        now = self.clock()
        elapsed = now - self._time_of_last_update
        if elapsed <= 0:
            return
        velocity = (x - self._last_x) / elapsed
        self._last_x = x
        self._time_of_last_update = now
        self._set_velocity(velocity)

    def _on_contact_changed(self, contact: bool) -> None:
        self._contact = contact
        self._update_output_level()

    def _set_velocity(self, velocity: float) -> None:
        previous = self.velocity
        if velocity == previous:
            return
        self.velocity = velocity

        if velocity > 0 and previous <= 0:
            self.set_bandpass_center_frequency(FRICTION_SOUND_CENTER_FREQUENCY * (1 + FRICTION_SOUND_VARIATION))
            self._lock_out()
        elif velocity < 0 and previous >= 0:
            self.set_bandpass_center_frequency(FRICTION_SOUND_CENTER_FREQUENCY * (1 - FRICTION_SOUND_VARIATION))
            self._lock_out()
        self._update_output_level()

    def _lock_out(self) -> None:
        self.locked_out = True
        self.lockout_counter = DIRECTION_SWITCH_LOCKOUT_TIME

    def _update_output_level(self) -> None:
        if self._contact and abs(self.velocity) > 0 and not self.locked_out:
            level = self.max_output_level * min(abs(self.velocity) ** 0.25, 1.0)
            self.set_output_level(level, 0.05)
        else:
            self.set_output_level(0)

    def step(self, dt: float) -> None:
        """Detect a still book and run the post-direction-change lockout."""
        now = self.clock()
        if abs(self.velocity) > 0 and now - self._time_of_last_update > STILLNESS_TIME:
            self._time_of_last_update = now
            self._set_velocity(0.0)

        if self.lockout_counter > 0:
            self.lockout_counter = max(self.lockout_counter - dt, 0.0)
            if self.lockout_counter == 0:
                self.locked_out = False
                self._update_output_level()

        self.advance(dt)


# ---------------------------------------------------------------------------
# Cooling
# ---------------------------------------------------------------------------

class CoolingSoundGenerator(NoiseGenerator):
    """Hiss played while the atoms cool down after rubbing.

    Fades in once the averaged temperature change rate has been negative
    for ``COOLING_SOUND_DELAY`` and dies away over ``COOLING_SOUND_DURATION``,
    quieter the slower the cooling.
    """

    def __init__(
        self,
        model: "FrictionModel",
        max_output_level: float = 1.0,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(
            noise_type="pink",
            center_frequency=6000.0,
            q_factor=4,
            initial_output_level=0,
            seed=seed,
        )
        self.max_output_level = max_output_level
        self.most_recent_amplitude = model.temperature
        self.previous_amplitude = model.temperature
        self.change_rate_history: deque = deque(maxlen=AMPLITUDE_AVERAGING_LENGTH)
        self.continuous_cooling_time = 0.0

        self.start()
        self.set_output_level(0)

        model.temperature_changed.connect(self._on_temperature_changed)

    def _on_temperature_changed(self, amplitude: float) -> None:
        self.most_recent_amplitude = amplitude

    @property
    def average_change_rate(self) -> float:
        if not self.change_rate_history:
            return 0.0
        return sum(self.change_rate_history) / AMPLITUDE_AVERAGING_LENGTH

    def reset(self) -> None:
        self.change_rate_history.clear()
        self.continuous_cooling_time = 0.0
        self.previous_amplitude = self.most_recent_amplitude
        self.set_output_level(0)

    def step(self, dt: float) -> None:
        if dt <= 0:
            return
        rate = (self.most_recent_amplitude - self.previous_amplitude) / dt
        self.previous_amplitude = self.most_recent_amplitude
        self.change_rate_history.append(rate)

        average = self.average_change_rate
        if len(self.change_rate_history) == AMPLITUDE_AVERAGING_LENGTH and average < 0:
            self.continuous_cooling_time += dt
        else:
            self.continuous_cooling_time = 0.0

        target = 0.0
        if self.continuous_cooling_time > COOLING_SOUND_DELAY:
            elapsed = (self.continuous_cooling_time - COOLING_SOUND_DELAY) / COOLING_SOUND_DURATION
            scaling = (1 - min(elapsed, 1.0)) * min(abs(average), 1.0)
            target = self.max_output_level * scaling

        if self.output_level != target:
            if target > 0:
                if not self.is_playing:
                    logger.debug("Cooling sound started, average rate %.3f", average)
                    self.start()
                self.set_output_level(target, 0.2)
            else:
                # fade quickly, but not abruptly
                self.set_output_level(target, 0.5)
                self.stop(0.01)

        self.advance(dt)
