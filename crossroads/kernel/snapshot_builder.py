from typing import Dict, Optional
from crossroads.domain.config import SimulationConfig, SimulationSettings
from crossroads.domain.models import (
    Lane, LaneView, Motion, SignalState, TrafficSnapshot, VehicleRecord, VehicleView, Viewport
)
from crossroads.domain.state import SimulationState
from crossroads.systems.lane_system import LaneSystem

def motion_of(acceleration: float) -> Motion:
    if acceleration < 0.0:
        return Motion.BRAKING
    if acceleration > 0.0:
        return Motion.ACCELERATING
    return Motion.CRUISING

class SnapshotBuilder:
    def __init__(self, config: SimulationConfig, settings: SimulationSettings):
        self.config = config
        self.settings = settings

    def build(
        self,
        state: SimulationState,
        lanes: LaneSystem,
        signals: Optional[Dict[Lane, SignalState]],
    ) -> TrafficSnapshot:
        return TrafficSnapshot(
            tick=state.tick_id,
            time_ms=state.time_ms,
            strategy=self.settings.strategy,
            paused=state.paused,
            finished=state.finished,
            finish_reason=state.finish_reason,
            collision=state.collision,
            vehicles_admitted=lanes.vehicles_created,
            vehicles_retired=lanes.vehicles_retired,
            arrivals_refused=state.arrivals_refused,
            lanes=[self.build_lane(lane, lanes, signals) for lane in Lane],
            viewport=self.build_viewport(),
        )

    def build_lane(
        self,
        lane: Lane,
        lanes: LaneSystem,
        signals: Optional[Dict[Lane, SignalState]],
    ) -> LaneView:
        return LaneView(
            lane=lane,
            width=self.config.width(lane),
            perimeter=self.config.perimeter(lane),
            signal=signals[lane] if signals else None,
            vehicles=[self.build_vehicle(v) for v in lanes.vehicles(lane)],
        )

    def build_vehicle(self, v: VehicleRecord) -> VehicleView:
        return VehicleView(
            id=v.id,
            lane=v.lane,
            position=v.position,
            length=v.length,
            velocity=v.velocity,
            acceleration=v.acceleration,
            motion=motion_of(v.acceleration),
        )

    def build_viewport(self) -> Viewport:
        size = self.settings.window_size
        return Viewport(
            window_size=size,
            pixels_per_meter={lane: size / self.config.total_extent(lane) for lane in Lane},
        )
