import math
import unittest
from crossroads.controllers.implementations import NoOpStrategy
from crossroads.controllers.traffic_light import TrafficLightStrategy, time_to_clear
from crossroads.domain.config import CRUISE_VELOCITY, SimulationConfig
from crossroads.domain.models import Lane, ShadowRecord, SignalState
from crossroads.systems.signal_system import SignalSystem

def shadow(vehicle_id, lane, position, velocity, max_acceleration=3.0):
    return ShadowRecord(
        id=vehicle_id, lane=lane, max_acceleration=max_acceleration, min_acceleration=-10.0,
        max_velocity=200.0 / 3.6, length=4.0, position=position, velocity=velocity,
    )

def as_records(*records):
    return {r.id: r for r in records}

class TestSignalSystem(unittest.TestCase):
    def test_green_then_amber_then_other_lane(self):
        light = SignalSystem(13.0, 5.0)
        self.assertEqual(light.signal_states(), {Lane.HORIZONTAL: SignalState.GREEN, Lane.VERTICAL: SignalState.RED})

        light.update(12.5)
        self.assertFalse(light.amber)
        light.update(0.5)
        self.assertTrue(light.amber)
        self.assertEqual(light.remaining_amber, 5.0)
        self.assertEqual(light.signal_for(Lane.HORIZONTAL), SignalState.AMBER)
        self.assertEqual(light.signal_for(Lane.VERTICAL), SignalState.RED)

        light.update(5.0)
        self.assertFalse(light.amber)
        self.assertEqual(light.green_lane, Lane.VERTICAL)
        self.assertEqual(light.remaining_green, 13.0)
        self.assertEqual(light.signal_for(Lane.HORIZONTAL), SignalState.RED)

    def test_exactly_one_lane_not_red(self):
        light = SignalSystem(13.0, 5.0)
        for _ in range(200):
            light.update(0.5)
            states = list(light.signal_states().values())
            self.assertEqual(states.count(SignalState.RED), 1)
            self.assertGreaterEqual(light.remaining_green, 0.0)
            self.assertGreaterEqual(light.remaining_amber, 0.0)

class TestTimeToClear(unittest.TestCase):
    def test_already_clear(self):
        self.assertEqual(time_to_clear(shadow("a", Lane.HORIZONTAL, 9.0, 0.0), 4.0), 0.0)

    def test_from_standstill(self):
        record = shadow("a", Lane.HORIZONTAL, -20.0, 0.0)
        # 28 m at 3 m/s^2
        self.assertAlmostEqual(time_to_clear(record, 4.0), math.sqrt(2.0 * 28.0 / 3.0))

    def test_cannot_move(self):
        record = shadow("a", Lane.HORIZONTAL, -20.0, 0.0, max_acceleration=0.0)
        self.assertEqual(time_to_clear(record, 4.0), math.inf)

    def test_cruising_at_max_velocity(self):
        record = shadow("a", Lane.HORIZONTAL, -20.0, 200.0 / 3.6)
        self.assertAlmostEqual(time_to_clear(record, 4.0), 28.0 / (200.0 / 3.6))

class TestTrafficLightStrategy(unittest.TestCase):
    def setUp(self):
        self.config = SimulationConfig()
        self.strategy = TrafficLightStrategy(self.config)

    def start_amber(self, records):
        # Runs the horizontal green phase out
        self.strategy.compute(13000.0, records)
        self.assertTrue(self.strategy.light.amber)
        self.assertEqual(self.strategy.light.green_lane, Lane.HORIZONTAL)

    def test_red_lane_queues_behind_crossing(self):
        first = shadow("v1", Lane.VERTICAL, -50.0, 10.0)
        second = shadow("v2", Lane.VERTICAL, -60.0, 10.0)
        self.strategy.compute(500.0, as_records(first, second))

        self.assertAlmostEqual(first.desired_acceleration, -100.0 / (2.0 * 46.0))
        # Second target is one vehicle length plus spacing further back
        self.assertAlmostEqual(second.desired_acceleration, -100.0 / (2.0 * 48.0))

    def test_red_lane_stopped_vehicle_holds(self):
        parked = shadow("v1", Lane.VERTICAL, -3.0, 0.05)
        rolling = shadow("v2", Lane.VERTICAL, -8.0, 5.0)
        self.strategy.compute(500.0, as_records(parked, rolling))

        self.assertEqual(parked.desired_acceleration, 0.0)
        self.assertEqual(rolling.desired_acceleration, -10.0)

    def test_red_lane_vehicle_inside_crossing_leaves(self):
        inside = shadow("v1", Lane.VERTICAL, 1.0, 2.0)
        self.strategy.compute(500.0, as_records(inside))
        self.assertEqual(inside.desired_acceleration, 3.0)

    def test_braking_limited_to_min_acceleration(self):
        fast = shadow("v1", Lane.VERTICAL, -10.0, 30.0)
        self.strategy.compute(500.0, as_records(fast))
        self.assertEqual(fast.desired_acceleration, -10.0)

    def test_green_lane_followers_at_cruise_keep_speed(self):
        lead = shadow("h1", Lane.HORIZONTAL, -50.0, CRUISE_VELOCITY)
        follower = shadow("h2", Lane.HORIZONTAL, -70.0, CRUISE_VELOCITY)
        self.strategy.compute(500.0, as_records(lead, follower))

        self.assertEqual(lead.desired_acceleration, 0.0)
        self.assertEqual(follower.desired_acceleration, 0.0)

    def test_green_lane_slow_vehicle_speeds_up(self):
        slow = shadow("h1", Lane.HORIZONTAL, -50.0, 5.0)
        self.strategy.compute(500.0, as_records(slow))
        self.assertEqual(slow.desired_acceleration, 3.0)

    def test_green_lane_close_follower_brakes(self):
        lead = shadow("h1", Lane.HORIZONTAL, -50.0, CRUISE_VELOCITY)
        follower = shadow("h2", Lane.HORIZONTAL, -60.0, CRUISE_VELOCITY)
        self.strategy.compute(500.0, as_records(lead, follower))
        self.assertEqual(follower.desired_acceleration, -5.0)

    def test_amber_commit_when_crossing_can_be_cleared(self):
        record = shadow("h1", Lane.HORIZONTAL, -20.0, CRUISE_VELOCITY)
        self.start_amber(as_records(record))
        self.assertEqual(record.desired_acceleration, 3.0)

    def test_amber_committed_follower_keeps_distance(self):
        lead = shadow("h1", Lane.HORIZONTAL, -20.0, CRUISE_VELOCITY)
        follower = shadow("h2", Lane.HORIZONTAL, -30.0, 30.0)
        self.start_amber(as_records(lead, follower))

        self.assertEqual(lead.desired_acceleration, 3.0)
        # 6 m gap at 30 m/s is under the minimum time gap
        self.assertEqual(follower.desired_acceleration, -5.0)

    def test_amber_committed_follower_with_room_accelerates(self):
        lead = shadow("h1", Lane.HORIZONTAL, -10.0, CRUISE_VELOCITY)
        follower = shadow("h2", Lane.HORIZONTAL, -40.0, CRUISE_VELOCITY)
        self.start_amber(as_records(lead, follower))

        self.assertEqual(lead.desired_acceleration, 3.0)
        self.assertEqual(follower.desired_acceleration, 3.0)

    def test_amber_stop_when_crossing_cannot_be_cleared(self):
        record = shadow("h1", Lane.HORIZONTAL, -100.0, 10.0)
        self.start_amber(as_records(record))
        self.assertAlmostEqual(record.desired_acceleration, -100.0 / (2.0 * 96.0))

    def test_amber_vehicles_behind_a_stopping_one_stop(self):
        stopping = shadow("h1", Lane.HORIZONTAL, -100.0, 10.0)
        behind = shadow("h2", Lane.HORIZONTAL, -110.0, 22.0)
        self.start_amber(as_records(stopping, behind))

        self.assertLess(stopping.desired_acceleration, 0.0)
        self.assertAlmostEqual(behind.desired_acceleration, -(22.0 ** 2) / (2.0 * 98.0))

    def test_light_advances_without_vehicles(self):
        self.strategy.compute(13000.0, {})
        self.strategy.compute(5000.0, {})
        self.assertEqual(self.strategy.signal_states()[Lane.VERTICAL], SignalState.GREEN)

class TestNoOpStrategy(unittest.TestCase):
    def test_zero_acceleration_for_everyone(self):
        records = as_records(
            shadow("h1", Lane.HORIZONTAL, -10.0, 20.0),
            shadow("v1", Lane.VERTICAL, -5.0, 20.0),
        )
        for record in records.values():
            record.desired_acceleration = 2.0
        strategy = NoOpStrategy(SimulationConfig())
        strategy.compute(500.0, records)

        self.assertTrue(all(r.desired_acceleration == 0.0 for r in records.values()))
        self.assertIsNone(strategy.signal_states())

if __name__ == '__main__':
    unittest.main()
