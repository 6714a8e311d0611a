"""
Tests for temperature narration: utterance queue behaviour, temperature
zones and the increasing / break-away describers.
"""

import unittest

from friction.describers import (
    BREAK_AWAY_AGAIN,
    BREAK_AWAY_FIRST,
    INCREASING,
    JIGGLE_TEMPERATURE_PATTERN,
    MAX_TEMP_STRING,
    RESET_SIM_MORE_OBSERVATION,
    SETTLED_AND_COOL,
    VERY_HOT,
    DescriptionContext,
    DescriptionParams,
    FrictionDescribers,
    Utterance,
    UtteranceQueue,
)
from friction.model import FrictionModel


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def _jiggle(index):
    jiggle, temperature = INCREASING[index]
    return JIGGLE_TEMPERATURE_PATTERN.format(jiggle=jiggle, temperature=temperature)


class TestUtterances(unittest.TestCase):

    def test_single_alert(self):
        u = Utterance("hello")
        self.assertEqual(u.next_text(), "hello")
        self.assertEqual(u.next_text(), "hello")

    def test_looping_alerts(self):
        u = Utterance(["a", "b"], loop_alerts=True)
        self.assertEqual([u.next_text() for _ in range(3)], ["a", "b", "a"])
        u.reset()
        self.assertEqual(u.next_text(), "a")

    def test_non_looping_alerts_stick_on_last(self):
        u = Utterance(["a", "b"])
        self.assertEqual([u.next_text() for _ in range(3)], ["a", "b", "b"])

    def test_group_replaces_queued(self):
        q = UtteranceQueue()
        q.add_to_back("x", group_id="g")
        q.add_to_back("other")
        q.add_to_back("y", group_id="g")
        self.assertEqual(len(q), 2)
        self.assertEqual(q.pop_text(), "other")
        self.assertEqual(q.pop_text(), "y")
        self.assertIsNone(q.pop_text())

    def test_front_jumps_the_queue(self):
        q = UtteranceQueue()
        q.add_to_back("later")
        q.add_to_front("urgent")
        self.assertEqual(q.pop_text(), "urgent")
        q.clear()
        self.assertEqual(len(q), 0)


class DescriberTestCase(unittest.TestCase):

    def setUp(self):
        self.model = FrictionModel(seed=0)
        self.clock = FakeClock()
        self.context = DescriptionContext(
            model=self.model,
            clock=self.clock,
            params=DescriptionParams(drag_session_threshold=1.0, warming_alert_time_delay=2.0),
        )
        self.describers = FrictionDescribers(self.context)
        self.queue = self.describers.utterances

    def touch(self):
        self.model.move(0, self.model.distance)

    def drain(self):
        texts = []
        while len(self.queue):
            texts.append(self.queue.pop_text())
        return texts


class TestTemperatureZones(DescriberTestCase):

    def test_zones(self):
        zone = self.describers.alert_manager.temperature_zone
        self.assertEqual(zone(-5), "cool")
        self.assertEqual(zone(1.0), "cool")
        self.assertEqual(zone(3.0), "warm")
        self.assertEqual(zone(5.0), "hot")
        self.assertEqual(zone(7.5), "very hot")
        self.assertEqual(zone(12.0), "very hot")

    def test_thermometer_range(self):
        am = self.describers.alert_manager
        self.assertAlmostEqual(am.thermometer_min, -0.05)
        self.assertAlmostEqual(am.thermometer_max, 7.7)

    def test_current_zone(self):
        self.assertEqual(self.describers.temperature_zone(), "cool")

    def test_jiggle_alert_uses_group(self):
        am = self.describers.alert_manager
        am.alert_temperature_jiggle("more", "warmer", group_id="increasing")
        am.alert_temperature_jiggle("faster", "now hotter", group_id="increasing")
        self.assertEqual(self.drain(), [_jiggle(1)])


class TestTemperatureIncreasingDescriber(DescriberTestCase):

    def test_small_rise_is_not_alerted(self):
        self.touch()
        self.describers.start_drag()
        self.model.move(100, 0)
        self.assertEqual(len(self.queue), 0)

    def test_rise_past_threshold_alerts(self):
        self.touch()
        self.describers.start_drag()
        self.model.move(100, 0)
        self.model.move(200, 0)
        self.assertEqual(self.drain(), [_jiggle(0)])

    def test_alerts_are_throttled(self):
        self.touch()
        self.describers.start_drag()
        self.model.move(300, 0)
        self.model.move(250, 0)
        self.assertEqual(self.drain(), [_jiggle(0)])

        self.clock.now = 2.5
        self.model.move(-200, 0)
        self.assertLess(self.model.temperature, self.model.params.evaporation_limit)
        self.assertEqual(self.drain(), [_jiggle(1)])

    def test_wording_gets_hotter_and_stops_at_hottest(self):
        increasing = self.describers.temperature_increasing
        for _ in range(len(INCREASING) + 2):
            increasing.alert_increase()
        texts = self.drain()
        # queued alerts of the same group replace each other
        self.assertEqual(texts, [_jiggle(len(INCREASING) - 1)])
        self.assertEqual(increasing.alert_index, len(INCREASING) + 1)

    def test_max_temperature_alert_loops(self):
        self.touch()
        self.describers.start_drag()
        self.model.move(600, 0)
        self.drain()
        self.clock.now = 10
        self.model.move(-400, 0)
        texts = self.drain()
        self.assertIn(MAX_TEMP_STRING, texts)

        increasing = self.describers.temperature_increasing
        spoken = []
        for _ in range(3):
            increasing.alert_max_temp()
            spoken.append(self.queue.pop_text())
        self.assertEqual(spoken, [MAX_TEMP_STRING, RESET_SIM_MORE_OBSERVATION, MAX_TEMP_STRING])

    def test_drag_session(self):
        increasing = self.describers.temperature_increasing
        self.describers.start_drag()
        increasing.alert_increase()
        self.clock.now = 0.5
        self.describers.end_drag()

        self.clock.now = 1.0
        self.describers.start_drag()
        self.assertEqual(increasing.alert_index, 0)

        self.clock.now = 1.2
        self.describers.end_drag()
        self.clock.now = 5.0
        self.describers.start_drag()
        self.assertEqual(increasing.alert_index, -1)


class TestBreakAwayDescriber(DescriberTestCase):

    def _overheat(self):
        self.touch()
        self.model.move(600, 0)
        self.model.move(-300, 0)

    def test_first_and_again(self):
        self._overheat()
        self.assertGreater(self.model.temperature, self.model.params.evaporation_limit)
        self.assertEqual(self.queue.pop_text(), BREAK_AWAY_FIRST.format(temp=VERY_HOT))

        self.model.reset()
        self._overheat()
        self.assertEqual(self.queue.pop_text(), BREAK_AWAY_AGAIN.format(temp=VERY_HOT))

    def test_staying_hot_does_not_repeat(self):
        self._overheat()
        self.drain()
        self.model.step(0.016)
        self.assertNotIn(BREAK_AWAY_AGAIN.format(temp=VERY_HOT), self.drain())

    def test_reset_forgets_previous_break_away(self):
        self._overheat()
        self.model.reset()
        self.describers.reset()
        self.assertEqual(len(self.queue), 0)
        self._overheat()
        self.assertEqual(self.queue.pop_text(), BREAK_AWAY_FIRST.format(temp=VERY_HOT))


class TestFocus(DescriberTestCase):

    def test_settled_and_cool_on_focus(self):
        self.describers.on_focus()
        self.assertEqual(self.queue.pop_text(), SETTLED_AND_COOL)

    def test_no_settled_alert_when_warm(self):
        self.touch()
        self.model.move(100, 0)
        self.describers.on_focus()
        self.assertEqual(len(self.queue), 0)


if __name__ == "__main__":
    unittest.main()
