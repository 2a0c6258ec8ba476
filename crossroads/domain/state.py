from typing import Dict, Optional
from pydantic import BaseModel, Field
from crossroads.domain.models import CollisionReport, Lane

class SimulationState(BaseModel):
    tick_id: int = 0
    time_ms: float = 0.0
    paused: bool = False
    finished: bool = False
    finish_reason: Optional[str] = None
    collision: Optional[CollisionReport] = None

    # Timers counting down to the next event
    time_until_arrival_ms: float = 0.0
    time_until_control_ms: float = 0.0

    # Arrivals waiting for room at the lane entry
    pending_arrivals: Dict[Lane, int] = Field(default_factory=lambda: {lane: 0 for lane in Lane})
    arrivals_refused: int = 0
