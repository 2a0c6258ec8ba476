from crossroads.domain.messages import RequestStatus, SetAcceleration, StatusReport
from crossroads.domain.models import VehicleRecord
from crossroads.io.logging_utils import logger
from crossroads.kernel.message_bus import MessageBus

log = logger.getChild("vehicle")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class VehicleAgent:
    def __init__(self, record: VehicleRecord):
        self.record = record

    @property
    def id(self) -> str:
        return self.record.id

    def tick(self, dt_ms: float, bus: MessageBus):
        self.integrate(dt_ms)
        self.consume_messages(bus)

    def integrate(self, dt_ms: float):
        """Advance by dt_ms using the currently set acceleration."""
        v = self.record
        dt = dt_ms / 1000.0
        previous = v.position

        v.position = v.position + v.velocity * dt + v.acceleration * dt * dt / 2.0
        v.velocity = v.velocity + v.acceleration * dt

        # Never reverses
        if v.position < previous:
            v.position = previous
        v.velocity = clamp(v.velocity, 0.0, v.max_velocity)

    def consume_messages(self, bus: MessageBus):
        for message in bus.receive_for_vehicle(self.id):
            if isinstance(message, SetAcceleration):
                # Only accelerations within the vehicle's own limits are executed
                self.record.acceleration = clamp(
                    message.value, self.record.min_acceleration, self.record.max_acceleration
                )
                log.debug("%s accepts acceleration %.2f", self.id, self.record.acceleration)
            elif isinstance(message, RequestStatus):
                bus.send_from_vehicle(StatusReport(
                    id=self.id,
                    position=self.record.position,
                    velocity=self.record.velocity,
                    acceleration=self.record.acceleration,
                ))
