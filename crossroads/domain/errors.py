from crossroads.domain.models import CollisionReport, Lane


class SimulationError(Exception):
    """Base class for errors raised by the simulation core."""


class CongestedLaneError(SimulationError):
    """Arrival refused: the lane's tail is too close to the entry point."""

    def __init__(self, lane: Lane, gap: float):
        super().__init__(f"Lane {lane.value} congested, tail {gap:.2f} m from entry")
        self.lane = lane
        self.gap = gap


class CollisionDetected(SimulationError):
    """A same-lane rear-end or a simultaneous crossing occupancy."""

    def __init__(self, report: CollisionReport):
        super().__init__(report.message)
        self.report = report
