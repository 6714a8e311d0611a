"""
Tests for the friction physics model.

Covers dragging limits, contact heating, cooling, evaporation order and
reset behaviour.
"""

import unittest

import numpy as np

from friction.model import (
    AMPLITUDE_MAX,
    AMPLITUDE_MIN,
    BOTTOM_BOOK_ROWS,
    DISTANCE_INITIAL,
    DISTANCE_Y,
    EVAPORATION_AMPLITUDE_REDUCTION,
    HEATING_MULTIPLIER,
    MAX_X_DISPLACEMENT,
    MIN_Y_POSITION,
    TOP_BOOK_ROWS,
    FrictionModel,
)

INITIAL_ROW_COUNTS = [29, 29, 24, 9]


def _bring_into_contact(model):
    model.move(0, model.distance)


class TestInitialState(unittest.TestCase):

    def setUp(self):
        self.model = FrictionModel(seed=1)

    def test_published_values(self):
        m = self.model
        self.assertEqual(m.temperature, AMPLITUDE_MIN)
        self.assertEqual(m.position, (0.0, 0.0))
        self.assertEqual(m.distance, DISTANCE_INITIAL)
        self.assertFalse(m.contact)
        self.assertTrue(m.hint_visible)
        self.assertEqual(m.rows_remaining, 4)

    def test_evaporation_queue_matches_layout(self):
        self.assertEqual([len(row) for row in self.model.evaporation_queue], INITIAL_ROW_COUNTS)

    def test_atom_counts(self):
        top = sum(g.num for layer in TOP_BOOK_ROWS for g in layer)
        bottom = sum(g.num for layer in BOTTOM_BOOK_ROWS for g in layer)
        self.assertEqual(len(self.model.top_atoms), top)
        self.assertEqual(len(self.model.bottom_atoms), bottom)
        self.assertTrue(all(a.is_top for a in self.model.top_atoms))
        self.assertFalse(any(a.is_top for a in self.model.bottom_atoms))

    def test_lowest_top_row_sits_above_bottom_book(self):
        m = self.model
        lowest_top = max(a.home_y for a in m.top_atoms)
        highest_bottom = min(a.home_y for a in m.bottom_atoms)
        self.assertAlmostEqual(highest_bottom - lowest_top, DISTANCE_Y + DISTANCE_INITIAL)

    def test_queue_rows_are_top_atoms(self):
        for row in self.model.evaporation_queue:
            self.assertTrue(all(a.is_top for a in row))


class TestMove(unittest.TestCase):

    def setUp(self):
        self.model = FrictionModel(seed=2)

    def test_move_hides_hint(self):
        seen = []
        self.model.hint_visible_changed.connect(seen.append)
        self.model.move(1, 0)
        self.model.move(1, 0)
        self.assertFalse(self.model.hint_visible)
        self.assertEqual(seen, [False])

    def test_x_is_clamped(self):
        self.model.move(1000, 0)
        self.assertEqual(self.model.position[0], MAX_X_DISPLACEMENT)
        self.model.move(-5000, 0)
        self.assertEqual(self.model.position[0], -MAX_X_DISPLACEMENT)

    def test_y_is_clamped_above(self):
        self.model.move(0, -1000)
        self.assertEqual(self.model.position[1], MIN_Y_POSITION)
        self.assertEqual(self.model.distance, DISTANCE_INITIAL - MIN_Y_POSITION)

    def test_cannot_push_through_bottom_book(self):
        self.model.move(0, 100)
        self.assertEqual(self.model.position[1], DISTANCE_INITIAL)
        self.assertEqual(self.model.distance, 0)
        self.assertTrue(self.model.contact)

    def test_random_moves_stay_in_bounds(self):
        rng = np.random.default_rng(7)
        m = self.model
        for dx, dy in rng.uniform(-300, 300, size=(500, 2)):
            m.move(float(dx), float(dy))
            x, y = m.position
            self.assertLessEqual(abs(x), MAX_X_DISPLACEMENT)
            self.assertGreaterEqual(y, MIN_Y_POSITION)
            self.assertGreaterEqual(m.distance, 0)
            self.assertLessEqual(m.temperature, AMPLITUDE_MAX)

    def test_vertical_move_changes_distance(self):
        self.model.move(0, 10)
        self.assertEqual(self.model.distance, DISTANCE_INITIAL - 10)
        self.model.move(0, -30)
        self.assertEqual(self.model.distance, DISTANCE_INITIAL + 20)

    def test_bottom_offset_absorbs_downward_drag(self):
        m = self.model
        _bring_into_contact(m)
        m.move(0, 30)
        self.assertEqual(m.bottom_offset, 30)
        self.assertEqual(m.position[1], DISTANCE_INITIAL)

        m.move(0, -10)
        self.assertEqual(m.bottom_offset, 20)
        self.assertEqual(m.position[1], DISTANCE_INITIAL)

        m.end_drag()
        self.assertEqual(m.bottom_offset, 0)
        m.move(0, -10)
        self.assertEqual(m.position[1], DISTANCE_INITIAL - 10)
        self.assertEqual(m.distance, 10)

    def test_top_atoms_follow_the_book(self):
        m = self.model
        top, bottom = m.top_atoms[0], m.bottom_atoms[0]
        tx, ty, bx, by = top.x0, top.y0, bottom.x0, bottom.y0
        m.move(10, 5)
        self.assertEqual((top.x0, top.y0), (tx + 10, ty + 5))
        self.assertEqual((bottom.x0, bottom.y0), (bx, by))

    def test_position_signal(self):
        seen = []
        self.model.position_changed.connect(lambda x, y: seen.append((x, y)))
        self.model.move(5, -5)
        self.model.move(0, 0)
        self.assertEqual(seen, [(5.0, -5.0)])


class TestHeating(unittest.TestCase):

    def setUp(self):
        self.model = FrictionModel(seed=3)

    def test_no_heating_without_contact(self):
        self.model.move(500, 0)
        self.assertEqual(self.model.temperature, AMPLITUDE_MIN)

    def test_rub_scenario(self):
        _bring_into_contact(self.model)
        self.model.move(500, 0)
        expected = min(AMPLITUDE_MIN + 500 * HEATING_MULTIPLIER, AMPLITUDE_MAX)
        self.assertAlmostEqual(self.model.temperature, expected)

    def test_rubbing_strictly_heats_until_max(self):
        m = self.model
        _bring_into_contact(m)
        direction = 1
        for _ in range(40):
            before = m.temperature
            target = direction * MAX_X_DISPLACEMENT
            m.move(target - m.position[0], 0)
            direction = -direction
            if before < AMPLITUDE_MAX:
                self.assertGreater(m.temperature, before)
            self.assertLessEqual(m.temperature, AMPLITUDE_MAX)
        self.assertEqual(m.temperature, AMPLITUDE_MAX)

    def test_contact_signal(self):
        seen = []
        self.model.contact_changed.connect(seen.append)
        _bring_into_contact(self.model)
        self.model.move(0, -5)
        self.assertEqual(seen, [True, False])


class TestStep(unittest.TestCase):

    def setUp(self):
        self.model = FrictionModel(seed=4)
        _bring_into_contact(self.model)
        self.model.move(500, 0)

    def test_stale_frames_are_ignored(self):
        m = self.model
        before = (m.temperature, m.position, m.distance)
        ticks = []
        m.stepped.connect(lambda: ticks.append(1))
        for dt in (0.51, 1.0, 30.0):
            m.step(dt)
        self.assertEqual((m.temperature, m.position, m.distance), before)
        self.assertEqual(ticks, [])

    def test_cooling_formula(self):
        self.model.step(0.1)
        self.assertAlmostEqual(self.model.temperature, 4.75 * (1 - 0.1 * 0.2))

    def test_cooling_is_monotonic_and_bounded(self):
        m = self.model
        previous = m.temperature
        for _ in range(2000):
            m.step(1 / 60)
            self.assertLessEqual(m.temperature, previous)
            self.assertGreaterEqual(m.temperature, AMPLITUDE_MIN)
            previous = m.temperature
        self.assertAlmostEqual(m.temperature, AMPLITUDE_MIN, places=3)

    def test_atoms_vibrate_with_temperature(self):
        m = self.model
        m.step(0.016)
        half = m.temperature / 2
        for atom in m.atoms:
            self.assertLessEqual(abs(atom.x - atom.x0), half)
            self.assertLessEqual(abs(atom.y - atom.y0), half)


class TestEvaporation(unittest.TestCase):

    def setUp(self):
        self.model = FrictionModel(seed=5)

    def _overheat(self):
        m = self.model
        _bring_into_contact(m)
        m.move(MAX_X_DISPLACEMENT, 0)
        m.move(-2 * MAX_X_DISPLACEMENT, 0)

    def test_threshold_scenario(self):
        m = self.model
        evaporated = []
        m.atom_evaporated.connect(evaporated.append)
        self._overheat()

        self.assertEqual(m.temperature, AMPLITUDE_MAX)
        self.assertEqual(len(evaporated), 1)
        self.assertEqual(len(m.evaporation_queue[-1]), INITIAL_ROW_COUNTS[-1] - 1)
        self.assertTrue(evaporated[0].evaporated)
        self.assertNotIn(evaporated[0], m.evaporation_queue[-1])
        self.assertAlmostEqual(m.scheduled_evaporation_amount, EVAPORATION_AMPLITUDE_REDUCTION)

        m.step(0.1)
        expected = (AMPLITUDE_MAX - EVAPORATION_AMPLITUDE_REDUCTION) * (1 - 0.1 * 0.2)
        self.assertAlmostEqual(m.temperature, expected)
        # the step's own temperature update was still above the limit
        self.assertEqual(len(evaporated), 2)
        self.assertAlmostEqual(m.scheduled_evaporation_amount, EVAPORATION_AMPLITUDE_REDUCTION)

    def test_rows_are_consumed_in_order(self):
        m = self.model
        total = sum(INITIAL_ROW_COUNTS)
        rows_seen = [m.rows_remaining]
        for _ in range(total + len(INITIAL_ROW_COUNTS) + 5):
            before = sum(len(row) for row in m.evaporation_queue)
            m.evaporate()
            after = sum(len(row) for row in m.evaporation_queue)
            self.assertEqual(before - after, 1 if before else 0)
            self.assertLessEqual(m.rows_remaining, rows_seen[-1])
            rows_seen.append(m.rows_remaining)

        self.assertEqual(m.rows_remaining, 0)
        self.assertEqual(m.evaporation_queue, [])
        self.assertEqual(m.distance, DISTANCE_INITIAL + DISTANCE_Y * len(INITIAL_ROW_COUNTS))
        self.assertEqual(sum(a.evaporated for a in m.top_atoms), total)

    def test_active_row_shrinks_by_one(self):
        m = self.model
        for _ in range(INITIAL_ROW_COUNTS[-1]):
            before = len(m.evaporation_queue[-1])
            m.evaporate()
            self.assertEqual(len(m.evaporation_queue[-1]), before - 1)
        self.assertEqual(m.rows_remaining, 4)

        m.evaporate()
        self.assertEqual(m.rows_remaining, 3)
        self.assertEqual(len(m.evaporation_queue[-1]), INITIAL_ROW_COUNTS[-2] - 1)
        self.assertEqual(m.distance, DISTANCE_INITIAL + DISTANCE_Y)

    def test_rows_remaining_signal(self):
        m = self.model
        seen = []
        m.rows_remaining_changed.connect(seen.append)
        for _ in range(INITIAL_ROW_COUNTS[-1] + 1):
            m.evaporate()
        self.assertEqual(seen, [3])

    def test_evaporated_atom_flies_off_and_hides(self):
        m = self.model
        evaporated = []
        m.atom_evaporated.connect(evaporated.append)
        m.evaporate()
        atom = evaporated[0]
        self.assertTrue(atom.in_flight)
        for _ in range(m.params.evaporation_steps):
            m.step(0.01)
        self.assertFalse(atom.visible)
        self.assertFalse(atom.in_flight)

    def test_evaporated_atoms_stay_put_when_book_moves(self):
        m = self.model
        evaporated = []
        m.atom_evaporated.connect(evaporated.append)
        m.evaporate()
        atom = evaporated[0]
        x0 = atom.x0
        m.move(50, 0)
        self.assertEqual(atom.x0, x0)


class TestReset(unittest.TestCase):

    def test_reset_restores_initial_conditions(self):
        m = FrictionModel(seed=6)
        _bring_into_contact(m)
        for _ in range(10):
            m.move(MAX_X_DISPLACEMENT - m.position[0], 0)
            m.move(-MAX_X_DISPLACEMENT - m.position[0], 0)
            m.step(0.016)
        for _ in range(40):
            m.evaporate()

        m.reset()

        self.assertEqual(m.temperature, AMPLITUDE_MIN)
        self.assertEqual(m.position, (0.0, 0.0))
        self.assertEqual(m.distance, DISTANCE_INITIAL)
        self.assertFalse(m.contact)
        self.assertTrue(m.hint_visible)
        self.assertEqual(m.rows_remaining, len(INITIAL_ROW_COUNTS))
        self.assertEqual([len(row) for row in m.evaporation_queue], INITIAL_ROW_COUNTS)
        self.assertEqual(m.scheduled_evaporation_amount, 0)
        for atom in m.atoms:
            self.assertFalse(atom.evaporated)
            self.assertTrue(atom.visible)
            self.assertEqual((atom.x0, atom.y0), (atom.home_x, atom.home_y))

    def test_reset_does_not_heat(self):
        m = FrictionModel(seed=6)
        _bring_into_contact(m)
        m.move(300, 0)
        temperatures = []
        m.temperature_changed.connect(temperatures.append)
        m.reset()
        self.assertEqual(temperatures, [AMPLITUDE_MIN])


if __name__ == "__main__":
    unittest.main()
