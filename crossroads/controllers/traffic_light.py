import math
from typing import Dict, List, Optional

from crossroads.controllers.base import Strategy, order_by_lane
from crossroads.domain.config import SimulationConfig
from crossroads.domain.models import Lane, ShadowRecord, SignalState, StrategyKind
from crossroads.io.logging_utils import logger
from crossroads.systems.signal_system import SignalSystem

log = logger.getChild("traffic_light")


def time_to_clear(record: ShadowRecord, crossing_length: float) -> float:
    """
    Seconds until the rear bumper leaves the crossing, accelerating at the
    maximum until max velocity and cruising from there.
    """
    distance = crossing_length + record.length - record.position
    if distance <= 0:
        return 0.0

    v = record.velocity
    a = record.max_acceleration
    v_max = record.max_velocity
    if v >= v_max or a <= 0:
        return distance / v if v > 0 else math.inf

    t_vmax = (v_max - v) / a
    d_vmax = v * t_vmax + a * t_vmax * t_vmax / 2.0
    if distance <= d_vmax:
        return (-v + math.sqrt(v * v + 2.0 * a * distance)) / a
    return t_vmax + (distance - d_vmax) / v_max


class TrafficLightStrategy(Strategy):
    """
    Fixed-time light. The red lane queues up before the crossing, the green
    lane follows at cruise velocity, and on amber each green-lane vehicle
    either commits to clear the crossing or stops.
    """

    kind = StrategyKind.TRAFFIC_LIGHT

    def __init__(self, config: SimulationConfig):
        super().__init__(config)
        self.light = SignalSystem(config.green_time_s, config.amber_time_s)

    def signal_states(self) -> Optional[Dict[Lane, SignalState]]:
        return self.light.signal_states()

    def compute(self, elapsed_ms: float, records: Dict[str, ShadowRecord]):
        self.light.update(elapsed_ms / 1000.0)
        log.debug(
            "green %s %.2f s, red %s, amber %s %.2f s",
            self.light.green_lane.value, self.light.remaining_green,
            self.light.red_lane.value, self.light.amber, self.light.remaining_amber,
        )

        ordered = order_by_lane(records)
        self._hold_red_lane(ordered[self.light.red_lane])
        if self.light.amber:
            self._clear_on_amber(ordered[self.light.green_lane])
        else:
            self._follow_on_green(ordered[self.light.green_lane])

    # ---------- stopping ----------

    def stop_toward(self, record: ShadowRecord, target: float) -> float:
        """Deceleration that brings the vehicle to rest at target."""
        if record.position >= target:
            if record.velocity <= self.config.stop_velocity_epsilon:
                return 0.0
            return record.min_acceleration
        needed = -record.velocity ** 2 / (2.0 * (target - record.position))
        return max(needed, record.min_acceleration)

    def _hold_red_lane(self, vehicles: List[ShadowRecord]):
        spacing = self.config.spacing
        target = -spacing
        for record in vehicles:
            if record.position > 0.0:
                # Already in the crossing, get it out
                record.desired_acceleration = record.max_acceleration
                continue
            record.desired_acceleration = self.stop_toward(record, target)
            target -= record.length + spacing

    # ---------- green lane ----------

    def _clear_on_amber(self, vehicles: List[ShadowRecord]):
        spacing = self.config.spacing
        crossing = self.config.crossing_length(self.light.green_lane)
        target = -spacing
        stopping = False
        ahead: Optional[ShadowRecord] = None

        for record in vehicles:
            if not stopping:
                if record.position > 0.0 or time_to_clear(record, crossing) <= self.light.remaining_amber:
                    desired = record.max_acceleration
                    if ahead is not None and self.too_close(record, ahead):
                        desired = record.min_acceleration / 2.0
                    record.desired_acceleration = desired
                    ahead = record
                    continue
                # Nobody behind a stopping vehicle may pass it
                stopping = True
            record.desired_acceleration = self.stop_toward(record, target)
            target -= record.length + spacing

    def _follow_on_green(self, vehicles: List[ShadowRecord]):
        ahead: Optional[ShadowRecord] = None
        for record in vehicles:
            desired = self.cruise_control(record)
            if ahead is not None and self.too_close(record, ahead):
                desired = record.min_acceleration / 2.0
            record.desired_acceleration = desired
            ahead = record

    def cruise_control(self, record: ShadowRecord) -> float:
        cruise = self.config.cruise_velocity
        band = self.config.cruise_band
        if record.velocity < cruise - band:
            return record.max_acceleration
        if record.velocity > cruise + band:
            return record.min_acceleration
        return 0.0

    def too_close(self, record: ShadowRecord, ahead: ShadowRecord) -> bool:
        gap = ahead.rear - record.position
        if gap <= 0:
            return True
        if record.velocity > 0 and gap / record.velocity < self.config.min_time_gap_s:
            return True
        closing = record.velocity - ahead.velocity
        return closing > 0 and gap / closing < self.config.ttc_horizon_s
