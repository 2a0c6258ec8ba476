from collections import deque
from typing import Deque, Dict, Iterator, List, Optional

from crossroads.domain.config import SimulationConfig
from crossroads.domain.errors import CongestedLaneError
from crossroads.domain.messages import Arrival
from crossroads.domain.models import CollisionKind, CollisionReport, Lane, VehicleRecord
from crossroads.io.logging_utils import logger
from crossroads.kernel.message_bus import MessageBus
from crossroads.systems.vehicle_system import VehicleAgent

log = logger.getChild("lanes")


class LaneSystem:
    """
    Both approach lanes and the vehicles on them.

    Each lane keeps its vehicles in arrival order: index 0 is the lead
    (oldest) vehicle, the last one is the tail nearest the entry point.
    """

    def __init__(self, config: SimulationConfig, bus: MessageBus):
        self.config = config
        self.bus = bus
        self.lanes: Dict[Lane, Deque[VehicleAgent]] = {lane: deque() for lane in Lane}
        self.vehicles_created = 0
        self.vehicles_retired = 0

    # ------------------------ ARRIVALS ------------------------

    def entry_velocity(self, lane: Lane) -> float:
        cruise = self.config.cruise_velocity
        if not self.lanes[lane]:
            return cruise

        tail = self.lanes[lane][-1].record
        gap = self.config.perimeter(lane) + tail.rear
        if gap < self.config.saturated_gap:
            raise CongestedLaneError(lane, gap)
        if gap < self.config.free_flow_gap:
            # Joins the tail as a platoon
            return min(cruise, tail.velocity)
        return cruise

    def admit(self, lane: Lane) -> str:
        velocity = self.entry_velocity(lane)
        return self.spawn(lane, velocity=velocity)

    def spawn(
        self,
        lane: Lane,
        position: Optional[float] = None,
        velocity: Optional[float] = None,
        acceleration: float = 0.0,
    ) -> str:
        """Place a new vehicle at the tail of the lane and announce it."""
        cfg = self.config
        vehicle_id = f"car-{self.vehicles_created:04d}"
        self.vehicles_created += 1

        record = VehicleRecord(
            id=vehicle_id,
            lane=lane,
            max_acceleration=cfg.max_acceleration,
            min_acceleration=cfg.min_acceleration,
            max_velocity=cfg.max_velocity,
            length=cfg.vehicle_length,
            position=-cfg.perimeter(lane) if position is None else position,
            velocity=cfg.cruise_velocity if velocity is None else velocity,
            acceleration=acceleration,
        )

        self.bus.open_mailbox(vehicle_id)
        self.bus.send_from_vehicle(Arrival(
            id=vehicle_id,
            lane=lane,
            max_acceleration=record.max_acceleration,
            min_acceleration=record.min_acceleration,
            max_velocity=record.max_velocity,
            length=record.length,
        ))
        self.lanes[lane].append(VehicleAgent(record))
        log.debug("%s arrives on %s at %.2f m/s", vehicle_id, lane.value, record.velocity)
        return vehicle_id

    # ------------------------ MOVEMENT ------------------------

    def tick(self, dt_ms: float):
        for lane in Lane:
            for agent in self.lanes[lane]:
                agent.tick(dt_ms, self.bus)

        for lane in Lane:
            self._retire_lead(lane)

    def _retire_lead(self, lane: Lane):
        vehicles = self.lanes[lane]
        if not vehicles:
            return
        lead = vehicles[0].record
        if lead.position > lead.length + self.config.crossing_length(lane):
            vehicles.popleft()
            self.bus.close_mailbox(lead.id)
            self.vehicles_retired += 1
            log.info("%s left lane %s", lead.id, lane.value)

    # ------------------------ QUERIES ------------------------

    def collision(self) -> Optional[CollisionReport]:
        for lane in Lane:
            records = [agent.record for agent in self.lanes[lane]]
            for lead, follower in zip(records, records[1:]):
                if lead.rear <= follower.position:
                    return CollisionReport(
                        kind=CollisionKind.SAME_LANE,
                        lanes=[lane],
                        vehicles=[lead.id, follower.id],
                        message=f"Collision on lane {lane.value}: {follower.id} hit {lead.id}",
                    )

        crossing = {lane: self._inside_crossing(lane) for lane in Lane}
        if all(crossing.values()):
            return CollisionReport(
                kind=CollisionKind.CROSSING,
                lanes=list(Lane),
                vehicles=[v.id for lane in Lane for v in crossing[lane]],
                message="Collision inside the crossing",
            )
        return None

    def _inside_crossing(self, lane: Lane) -> List[VehicleRecord]:
        extent = self.config.crossing_length(lane)
        return [
            agent.record for agent in self.lanes[lane]
            if 0.0 < agent.record.position < extent + agent.record.length
        ]

    def is_empty(self) -> bool:
        return not any(self.lanes.values())

    def vehicles(self, lane: Lane) -> Iterator[VehicleRecord]:
        for agent in self.lanes[lane]:
            yield agent.record

    def count(self) -> int:
        return sum(len(v) for v in self.lanes.values())
