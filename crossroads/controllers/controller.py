from typing import Dict, List

from crossroads.controllers.base import Strategy
from crossroads.domain.config import SimulationConfig
from crossroads.domain.messages import Arrival, RequestStatus, SetAcceleration, StatusReport, VehicleMessage
from crossroads.domain.models import ControllerView, ShadowRecord
from crossroads.io.logging_utils import logger
from crossroads.kernel.message_bus import MessageBus

log = logger.getChild("controller")


class Controller:
    """
    Tracks a shadow copy of every vehicle it has heard from and, once per
    control cycle, asks the strategy for new accelerations.
    """

    def __init__(self, config: SimulationConfig, strategy: Strategy, bus: MessageBus):
        self.config = config
        self.strategy = strategy
        self.bus = bus
        self.records: Dict[str, ShadowRecord] = {}
        self.clock_ms = 0.0

    def run_cycle(self, elapsed_ms: float):
        self.clock_ms += elapsed_ms

        # 1. Messages from vehicles, in arrival order
        for message in self.bus.drain_from_vehicles():
            self._receive(message)

        # 2. Forget vehicles that went silent
        self._expire_stale()

        # 3. Decide, the light keeps running even with nobody around
        self.strategy.compute(elapsed_ms, self.records)

        # 4. Command and ask for fresh status
        for vehicle_id, record in self.records.items():
            self.bus.send_to_vehicle(vehicle_id, SetAcceleration(id=vehicle_id, value=record.desired_acceleration))
            self.bus.send_to_vehicle(vehicle_id, RequestStatus(id=vehicle_id))
            log.debug("%s set acceleration %.2f", vehicle_id, record.desired_acceleration)

    def _receive(self, message: VehicleMessage):
        if isinstance(message, Arrival):
            self.records[message.id] = ShadowRecord(
                id=message.id,
                lane=message.lane,
                max_acceleration=message.max_acceleration,
                min_acceleration=message.min_acceleration,
                max_velocity=message.max_velocity,
                length=message.length,
                # Enters far away, at the start of the perimeter
                position=-self.config.perimeter(message.lane),
                velocity=0.0,
                acceleration=0.0,
                last_seen_ms=self.clock_ms,
            )
        elif isinstance(message, StatusReport):
            record = self.records.get(message.id)
            if record is None:
                return
            record.position = message.position
            record.velocity = message.velocity
            record.acceleration = message.acceleration
            record.last_seen_ms = self.clock_ms

    def _expire_stale(self):
        timeout = self.config.liveness_timeout_ms
        stale = [
            vehicle_id for vehicle_id, record in self.records.items()
            if self.clock_ms - record.last_seen_ms >= timeout
        ]
        for vehicle_id in stale:
            del self.records[vehicle_id]
            log.debug("Dropping %s from tracking", vehicle_id)

    def tracked(self) -> List[ShadowRecord]:
        return sorted(self.records.values(), key=lambda r: r.id)

    def view(self) -> ControllerView:
        return ControllerView(
            strategy=self.strategy.kind,
            signals=self.strategy.signal_states(),
            tracked=self.tracked(),
        )
