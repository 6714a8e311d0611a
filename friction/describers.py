"""
Screen-reader narration of the friction model.

Describers watch the model and push short sentences onto an
``UtteranceQueue``.  Instead of global singletons, every describer gets a
``DescriptionContext`` holding the model, the queue, a clock and the
timing parameters, so several simulations (or tests) can run side by side.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional, Sequence, Tuple, Union

from .model import FrictionModel

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------

JIGGLE_TEMPERATURE_PATTERN = "Atoms jiggle {jiggle}. Temperature {temperature}."
BREAK_AWAY_FIRST = "{temp}! Atoms break away from chemistry book."
BREAK_AWAY_AGAIN = "{temp}! Atoms break away again."
SETTLED_AND_COOL = "Atoms jiggle a tiny bit, temperature cool."
RESET_SIM_MORE_OBSERVATION = "Reset sim to make more observations."
VERY_HOT = "Very hot"

# (jiggle, temperature) steps, each hotter than the last
INCREASING: Tuple[Tuple[str, str], ...] = (
    ("more", "warmer"),
    ("faster", "now hotter"),
    ("even faster", "even hotter"),
)
MAX_TEMP_STRING = JIGGLE_TEMPERATURE_PATTERN.format(jiggle="super fast", temperature="super hot")

TEMPERATURE_ZONES = ("cool", "warm", "hot", "very hot")


# ---------------------------------------------------------------------------
# Utterances
# ---------------------------------------------------------------------------

class Utterance:
    """Something to say; may rotate through several phrasings.

    Parameters:
        alert:       One string or a sequence of strings.
        group_id:    Queued utterances sharing a group replace each other.
        loop_alerts: Keep cycling through *alert* instead of stopping at the last.
    """

    def __init__(
        self,
        alert: Union[str, Sequence[str]],
        group_id: Optional[str] = None,
        loop_alerts: bool = False,
    ) -> None:
        self.alerts: List[str] = [alert] if isinstance(alert, str) else list(alert)
        self.group_id = group_id
        self.loop_alerts = loop_alerts
        self._index = 0

    def next_text(self) -> str:
        text = self.alerts[self._index]
        if self.loop_alerts:
            self._index = (self._index + 1) % len(self.alerts)
        else:
            self._index = min(self._index + 1, len(self.alerts) - 1)
        return text

    def reset(self) -> None:
        self._index = 0


class UtteranceQueue:
    """FIFO of pending utterances, read by the view one at a time."""

    def __init__(self) -> None:
        self._queue: Deque[Utterance] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    def _coerce(self, utterance: Union[str, Utterance], group_id: Optional[str]) -> Utterance:
        if isinstance(utterance, Utterance):
            return utterance
        return Utterance(utterance, group_id=group_id)

    def add_to_back(self, utterance: Union[str, Utterance], group_id: Optional[str] = None) -> None:
        utterance = self._coerce(utterance, group_id)
        if utterance.group_id is not None:
            self._queue = deque(u for u in self._queue if u.group_id != utterance.group_id)
        self._queue.append(utterance)
        logger.debug("Queued alert (back): %s", utterance.alerts[0])

    def add_to_front(self, utterance: Union[str, Utterance], group_id: Optional[str] = None) -> None:
        self._queue.appendleft(self._coerce(utterance, group_id))

    def pop_text(self) -> Optional[str]:
        if not self._queue:
            return None
        return self._queue.popleft().next_text()

    def clear(self) -> None:
        self._queue.clear()


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------

@dataclass
class DescriptionParams:
    """Narration timing, in seconds."""
    # a drag starting later than this after the last one starts a new session
    drag_session_threshold: float = 1.0
    # minimum spacing between "temperature increasing" alerts
    warming_alert_time_delay: float = 2.0


@dataclass
class DescriptionContext:
    """Everything a describer needs; one per simulation instance."""
    model: FrictionModel
    utterances: UtteranceQueue = field(default_factory=UtteranceQueue)
    clock: Callable[[], float] = time.perf_counter
    params: DescriptionParams = field(default_factory=DescriptionParams)


# ---------------------------------------------------------------------------
# Alert manager
# ---------------------------------------------------------------------------

class FrictionAlertManager:
    """Builds alert sentences and maps temperatures to descriptive zones."""

    # rise in amplitude needed before "temperature increasing" is alerted
    TEMPERATURE_ALERT_THRESHOLD = 1.5

    def __init__(self, context: DescriptionContext) -> None:
        self.context = context
        p = context.model.params
        self.thermometer_min = p.amplitude_min - 1.05
        self.thermometer_max = p.evaporation_limit * 1.1
        divided = (self.thermometer_max - self.thermometer_min) / 9
        # [cool, warm, hot, very hot]
        self.zone_ranges = (
            (self.thermometer_min, 2 * divided),
            (2 * divided, 5 * divided),
            (5 * divided, 8 * divided),
            (8 * divided, 9 * divided),
        )

    def temperature_zone(self, temperature: float) -> str:
        """Describe *temperature*; values past either end clamp to the end zones."""
        for zone, (_lo, hi) in zip(TEMPERATURE_ZONES, self.zone_ranges):
            if temperature < hi:
                return zone
        return TEMPERATURE_ZONES[-1]

    def alert_temperature_jiggle(
        self,
        jiggle: str,
        temperature: str,
        group_id: Optional[str] = None,
    ) -> None:
        text = JIGGLE_TEMPERATURE_PATTERN.format(jiggle=jiggle, temperature=temperature)
        self.context.utterances.add_to_back(Utterance(text, group_id=group_id))

    def alert_at_evaporation_threshold(self, alerted_before: bool) -> None:
        pattern = BREAK_AWAY_AGAIN if alerted_before else BREAK_AWAY_FIRST
        self.context.utterances.add_to_front(pattern.format(temp=VERY_HOT))

    def alert_settled_and_cool(self) -> None:
        self.context.utterances.add_to_back(SETTLED_AND_COOL, group_id="settled")


# ---------------------------------------------------------------------------
# Describers
# ---------------------------------------------------------------------------

class TemperatureIncreasingDescriber:
    """Alerts with hotter and hotter wording while the books are rubbed.

    Each alert advances through ``INCREASING``.  The sequence restarts when
    a new drag session begins, i.e. a drag starts more than
    ``drag_session_threshold`` after the previous one ended.
    """

    def __init__(self, context: DescriptionContext, alert_manager: FrictionAlertManager) -> None:
        self.context = context
        self.alert_manager = alert_manager
        model = context.model

        self.time_of_last_drag = float("-inf")
        self.initial_amplitude = model.temperature
        self.alert_index = -1
        self._quiet_until = float("-inf")

        self.max_temp_utterance = Utterance(
            [MAX_TEMP_STRING, MAX_TEMP_STRING, RESET_SIM_MORE_OBSERVATION],
            group_id="increasing",
            loop_alerts=True,
        )
        model.temperature_changed.connect(self._on_temperature_changed)

    @property
    def too_soon_for_next_alert(self) -> bool:
        return self.context.clock() < self._quiet_until

    def _on_temperature_changed(self, amplitude: float) -> None:
        if self.too_soon_for_next_alert:
            return
        if amplitude - self.initial_amplitude <= FrictionAlertManager.TEMPERATURE_ALERT_THRESHOLD:
            return
        if amplitude < self.context.model.params.evaporation_limit:
            self.alert_increase()
        else:
            self.alert_max_temp()

    def start_drag(self) -> None:
        now = self.context.clock()
        if now - self.time_of_last_drag > self.context.params.drag_session_threshold:
            self.alert_index = -1
            self.initial_amplitude = self.context.model.temperature

    def end_drag(self) -> None:
        self.time_of_last_drag = self.context.clock()

    def alert_increase(self) -> None:
        self.alert_index += 1
        jiggle, temperature = INCREASING[min(self.alert_index, len(INCREASING) - 1)]
        self._alert(lambda: self.alert_manager.alert_temperature_jiggle(jiggle, temperature, group_id="increasing"))

    def alert_max_temp(self) -> None:
        self._alert(lambda: self.context.utterances.add_to_back(self.max_temp_utterance))

    def _alert(self, alert_function: Callable[[], None]) -> None:
        alert_function()
        # another full threshold rise is needed before the next alert
        self.initial_amplitude = self.context.model.temperature
        self._quiet_until = self.context.clock() + self.context.params.warming_alert_time_delay

    def reset(self) -> None:
        self.max_temp_utterance.reset()
        self.alert_index = -1
        self.initial_amplitude = self.context.model.temperature
        self._quiet_until = float("-inf")


class BreakAwayDescriber:
    """Announces when atoms start breaking away from the top book."""

    def __init__(self, context: DescriptionContext, alert_manager: FrictionAlertManager) -> None:
        self.context = context
        self.alert_manager = alert_manager
        self.alerted_before = False
        self._above_limit = context.model.temperature > context.model.params.evaporation_limit
        context.model.temperature_changed.connect(self._on_temperature_changed)

    def _on_temperature_changed(self, amplitude: float) -> None:
        above = amplitude > self.context.model.params.evaporation_limit
        if above and not self._above_limit:
            self.alert_manager.alert_at_evaporation_threshold(self.alerted_before)
            self.alerted_before = True
        self._above_limit = above

    def reset(self) -> None:
        self.alerted_before = False
        self._above_limit = False


class FrictionDescribers:
    """All describers of one simulation, built from a single context."""

    def __init__(self, context: DescriptionContext) -> None:
        self.context = context
        self.alert_manager = FrictionAlertManager(context)
        self.temperature_increasing = TemperatureIncreasingDescriber(context, self.alert_manager)
        self.break_away = BreakAwayDescriber(context, self.alert_manager)

    @property
    def utterances(self) -> UtteranceQueue:
        return self.context.utterances

    def temperature_zone(self) -> str:
        return self.alert_manager.temperature_zone(self.context.model.temperature)

    def start_drag(self) -> None:
        self.temperature_increasing.start_drag()

    def end_drag(self) -> None:
        self.temperature_increasing.end_drag()

    def on_focus(self) -> None:
        model = self.context.model
        if model.temperature == model.params.amplitude_min:
            self.alert_manager.alert_settled_and_cool()

    def reset(self) -> None:
        self.context.utterances.clear()
        self.temperature_increasing.reset()
        self.break_away.reset()
