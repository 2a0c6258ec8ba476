from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from crossroads.domain.config import SimulationConfig
from crossroads.domain.models import Lane, ShadowRecord, SignalState, StrategyKind

class Strategy(ABC):
    kind: StrategyKind

    def __init__(self, config: SimulationConfig):
        self.config = config

    @abstractmethod
    def compute(self, elapsed_ms: float, records: Dict[str, ShadowRecord]):
        """Set desired_acceleration on every record."""

    def signal_states(self) -> Optional[Dict[Lane, SignalState]]:
        return None

def order_by_lane(records: Dict[str, ShadowRecord]) -> Dict[Lane, List[ShadowRecord]]:
    """Vehicles of each lane, nearest to the crossing first."""
    ordered: Dict[Lane, List[ShadowRecord]] = {lane: [] for lane in Lane}
    for record in records.values():
        ordered[record.lane].append(record)
    for vehicles in ordered.values():
        vehicles.sort(key=lambda r: r.position, reverse=True)
    return ordered
