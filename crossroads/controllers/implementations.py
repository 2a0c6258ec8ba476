from typing import Dict, Type
from crossroads.controllers.base import Strategy
from crossroads.controllers.traffic_light import TrafficLightStrategy
from crossroads.domain.config import SimulationConfig
from crossroads.domain.models import ShadowRecord, StrategyKind

class NoOpStrategy(Strategy):
    kind = StrategyKind.NO_OP

    def compute(self, elapsed_ms: float, records: Dict[str, ShadowRecord]):
        # Vehicles keep whatever speed they have
        for record in records.values():
            record.desired_acceleration = 0.0

STRATEGIES: Dict[StrategyKind, Type[Strategy]] = {
    StrategyKind.TRAFFIC_LIGHT: TrafficLightStrategy,
    StrategyKind.NO_OP: NoOpStrategy,
}

def create_strategy(kind: StrategyKind, config: SimulationConfig) -> Strategy:
    try:
        strategy_cls = STRATEGIES[StrategyKind(kind)]
    except (KeyError, ValueError):
        available = ", ".join(k.value for k in STRATEGIES)
        raise ValueError(f"Unknown strategy '{kind}'. Available: {available}")
    return strategy_cls(config)
