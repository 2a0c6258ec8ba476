from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel

class Lane(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def opposite(self) -> "Lane":
        return Lane.VERTICAL if self is Lane.HORIZONTAL else Lane.HORIZONTAL

class SignalState(str, Enum):
    RED = "RED"
    AMBER = "AMBER"
    GREEN = "GREEN"

class StrategyKind(str, Enum):
    TRAFFIC_LIGHT = "traffic-light"
    NO_OP = "no-op"

class Motion(str, Enum):
    BRAKING = "braking"
    CRUISING = "cruising"
    ACCELERATING = "accelerating"

class CollisionKind(str, Enum):
    SAME_LANE = "same-lane"
    CROSSING = "crossing"

class VehicleState(BaseModel):
    id: str
    lane: Lane
    max_acceleration: float
    min_acceleration: float
    max_velocity: float
    length: float
    position: float
    velocity: float = 0.0
    acceleration: float = 0.0

    @property
    def rear(self) -> float:
        return self.position - self.length

class VehicleRecord(VehicleState):
    """State owned by a vehicle agent."""

class ShadowRecord(VehicleState):
    """Controller's copy of a vehicle, refreshed only by status reports."""
    desired_acceleration: float = 0.0
    last_seen_ms: float = 0.0

class CollisionReport(BaseModel):
    kind: CollisionKind
    lanes: List[Lane]
    vehicles: List[str]
    message: str

# API/Response Models

class VehicleView(BaseModel):
    id: str
    lane: Lane
    position: float
    length: float
    velocity: float
    acceleration: float
    motion: Motion

class LaneView(BaseModel):
    lane: Lane
    width: float
    perimeter: float
    signal: Optional[SignalState] = None
    vehicles: List[VehicleView]

class Viewport(BaseModel):
    window_size: int
    pixels_per_meter: Dict[Lane, float]

class TrafficSnapshot(BaseModel):
    tick: int
    time_ms: float
    strategy: StrategyKind
    paused: bool
    finished: bool
    finish_reason: Optional[str] = None
    collision: Optional[CollisionReport] = None
    vehicles_admitted: int
    vehicles_retired: int
    arrivals_refused: int
    lanes: List[LaneView]
    viewport: Viewport

class ControllerView(BaseModel):
    strategy: StrategyKind
    signals: Optional[Dict[Lane, SignalState]] = None
    tracked: List[ShadowRecord]

class SimulationResult(BaseModel):
    strategy: StrategyKind
    settings: Dict[str, Any]
    ticks: int
    simulated_seconds: float
    wall_time_seconds: float
    vehicles_admitted: int
    vehicles_retired: int
    arrivals_refused: int
    finish_reason: Optional[str] = None
    collision: Optional[CollisionReport] = None
