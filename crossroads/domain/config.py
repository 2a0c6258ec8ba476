# Simulation Configuration
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from crossroads.domain.models import Lane, StrategyKind

# Lane Geometry (meters)
LANE_WIDTH = 4.0
LANE_PERIMETER = 150.0
LANE_MARGIN = 15.0

# Vehicle Physics
VEHICLE_LENGTH = 4.0
CRUISE_VELOCITY = 80.0 * (1000.0 / 3600.0)  # m/s
MAX_VELOCITY = 200.0 * (1000.0 / 3600.0)    # m/s
MAX_ACCELERATION = 3.0                      # m/s^2
MIN_ACCELERATION = -10.0                    # m/s^2

# Admission
FREE_FLOW_GAP = 4.0      # tail farther than this from the entry: lane is free
SATURATED_GAP = 0.5      # tail closer than this: lane is stopped, refuse

# Timing (milliseconds)
TICK_MS = 50.0
CONTROL_PERIOD_MS = 100.0
LIVENESS_TIMEOUT_MS = 200.0

# Traffic Light
GREEN_TIME = 13.0        # seconds
AMBER_TIME = 5.0         # seconds
SPACING = 4.0            # gap kept between queued vehicles
STOP_VELOCITY_EPSILON = 0.1
CRUISE_BAND = 1.0        # m/s around cruise velocity
MIN_TIME_GAP = 0.5       # seconds
TTC_HORIZON = 3.0        # seconds

# Run Settings
MIN_INTERARRIVAL = 2.0   # seconds
WINDOW_SIZE_MIN = 200
WINDOW_SIZE_MAX = 1000


class SimulationConfig(BaseModel):
    """Fixed geometry, vehicle limits and tuning shared by every component."""

    model_config = ConfigDict(frozen=True)

    horizontal_width: float = Field(LANE_WIDTH, gt=0)
    vertical_width: float = Field(LANE_WIDTH, gt=0)
    horizontal_perimeter: float = Field(LANE_PERIMETER, gt=0)
    vertical_perimeter: float = Field(LANE_PERIMETER, gt=0)
    lane_margin: float = Field(LANE_MARGIN, ge=0)

    vehicle_length: float = Field(VEHICLE_LENGTH, gt=0)
    cruise_velocity: float = Field(CRUISE_VELOCITY, gt=0)
    max_velocity: float = Field(MAX_VELOCITY, gt=0)
    max_acceleration: float = Field(MAX_ACCELERATION, gt=0)
    min_acceleration: float = Field(MIN_ACCELERATION, lt=0)

    free_flow_gap: float = FREE_FLOW_GAP
    saturated_gap: float = SATURATED_GAP

    tick_ms: float = Field(TICK_MS, gt=0)
    control_period_ms: float = Field(CONTROL_PERIOD_MS, gt=0)
    liveness_timeout_ms: float = Field(LIVENESS_TIMEOUT_MS, gt=0)

    green_time_s: float = Field(GREEN_TIME, gt=0)
    amber_time_s: float = Field(AMBER_TIME, gt=0)
    spacing: float = Field(SPACING, ge=0)
    stop_velocity_epsilon: float = Field(STOP_VELOCITY_EPSILON, ge=0)
    cruise_band: float = Field(CRUISE_BAND, ge=0)
    min_time_gap_s: float = Field(MIN_TIME_GAP, ge=0)
    ttc_horizon_s: float = Field(TTC_HORIZON, ge=0)

    @model_validator(mode="after")
    def _check_limits(self):
        if self.cruise_velocity > self.max_velocity:
            raise ValueError("cruise_velocity cannot exceed max_velocity")
        if self.saturated_gap > self.free_flow_gap:
            raise ValueError("saturated_gap cannot exceed free_flow_gap")
        return self

    def width(self, lane: Lane) -> float:
        return self.horizontal_width if lane == Lane.HORIZONTAL else self.vertical_width

    def perimeter(self, lane: Lane) -> float:
        return self.horizontal_perimeter if lane == Lane.HORIZONTAL else self.vertical_perimeter

    def crossing_length(self, lane: Lane) -> float:
        # A vehicle crosses the other lane's width
        return self.width(lane.opposite)

    def total_extent(self, lane: Lane) -> float:
        return self.perimeter(lane) + self.crossing_length(lane) + self.lane_margin


class SimulationSettings(BaseModel):
    """Run options chosen by the operator, validated before the run starts."""

    strategy: StrategyKind = StrategyKind.TRAFFIC_LIGHT
    min_interarrival_s: float = 2.0
    max_interarrival_s: float = 4.0
    window_size: int = 600
    seed: int = 42

    @field_validator("min_interarrival_s", "max_interarrival_s")
    @classmethod
    def _check_interarrival(cls, value: float) -> float:
        if value < MIN_INTERARRIVAL:
            raise ValueError(f"time between arrivals must be at least {MIN_INTERARRIVAL} seconds")
        return value

    @field_validator("window_size")
    @classmethod
    def _check_window(cls, value: int) -> int:
        if not WINDOW_SIZE_MIN <= value <= WINDOW_SIZE_MAX:
            raise ValueError(f"window size must be between {WINDOW_SIZE_MIN} and {WINDOW_SIZE_MAX}")
        return value

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min_interarrival_s > self.max_interarrival_s:
            raise ValueError("minimum time between arrivals cannot exceed the maximum")
        return self
