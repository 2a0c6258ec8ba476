import random
from typing import Optional

from crossroads.application.commands import Command
from crossroads.controllers.controller import Controller
from crossroads.controllers.implementations import create_strategy
from crossroads.domain.config import SimulationConfig, SimulationSettings
from crossroads.domain.errors import CollisionDetected, CongestedLaneError
from crossroads.domain.models import ControllerView, Lane, TrafficSnapshot
from crossroads.domain.state import SimulationState
from crossroads.io.logging_utils import logger
from crossroads.kernel.command_queue import CommandQueue
from crossroads.kernel.message_bus import MessageBus
from crossroads.kernel.snapshot_builder import SnapshotBuilder
from crossroads.systems.lane_system import LaneSystem

log = logger.getChild("kernel")


class SimulationKernel:
    """
    Drives one simulation run: arrivals, physics ticks, control cycles on a
    coarser period, and the collision and emptiness checks after each tick.
    """

    def __init__(self, config: Optional[SimulationConfig] = None, settings: Optional[SimulationSettings] = None):
        self.config = config or SimulationConfig()
        self.settings = settings or SimulationSettings()
        self.command_queue = CommandQueue()
        self.snapshot_builder = SnapshotBuilder(self.config, self.settings)
        self.initialized = False
        self._build(self.settings.seed)

    def _build(self, seed: int):
        self.rng = random.Random(seed)
        self.state = SimulationState(time_until_control_ms=self.config.control_period_ms)
        self.bus = MessageBus()
        self.lanes = LaneSystem(self.config, self.bus)
        self.strategy = create_strategy(self.settings.strategy, self.config)
        self.controller = Controller(self.config, self.strategy, self.bus)

    def initialize(self, seed: Optional[int] = None, populate: bool = True):
        seed = self.settings.seed if seed is None else seed
        self._build(seed)
        if populate:
            for lane in Lane:
                self.lanes.admit(lane)
        self.state.time_until_arrival_ms = self._next_interarrival_ms()
        self.initialized = True
        log.info("Kernel initialized (strategy: %s, seed: %d)", self.settings.strategy.value, seed)

    def queue_command(self, command: Command):
        self.command_queue.submit(command)

    def request_arrival(self, lane: Lane):
        self.state.pending_arrivals[lane] += 1

    def finish(self, reason: str):
        if self.state.finished:
            return
        self.state.finished = True
        self.state.finish_reason = reason
        log.info("Simulation finished: %s", reason)

    # ------------------------ LOOP ------------------------

    def run_tick(self) -> bool:
        """One physics tick. Returns False once the run is over."""
        if not self.initialized:
            self.initialize()

        # 1. Operator commands
        self.command_queue.execute_all(self)
        if self.state.finished:
            return False
        if self.state.paused:
            return True

        # 2. Physics and control
        dt = self.config.tick_ms
        self.lanes.tick(dt)

        self.state.time_until_control_ms -= dt
        if self.state.time_until_control_ms <= 0:
            self.state.time_until_control_ms += self.config.control_period_ms
            self.controller.run_cycle(self.config.control_period_ms)

        # 3. Time advance
        self.state.time_ms += dt
        self.state.tick_id += 1

        # 4. Safety checks
        report = self.lanes.collision()
        if report is not None:
            self.state.collision = report
            self.finish(report.message)
            log.error(
                "%s (strategy %s, arrivals every %.1f-%.1f s)",
                report.message, self.settings.strategy.value,
                self.settings.min_interarrival_s, self.settings.max_interarrival_s,
            )
            raise CollisionDetected(report)

        if self.lanes.is_empty() and not any(self.state.pending_arrivals.values()):
            self.finish("no vehicles in perimeter")
            return False

        # 5. Arrivals
        self.state.time_until_arrival_ms -= dt
        if self.state.time_until_arrival_ms <= 0:
            for lane in Lane:
                self.request_arrival(lane)
            self.state.time_until_arrival_ms += self._next_interarrival_ms()
        self._admit_pending()
        return True

    def run(self, max_ticks: Optional[int] = None) -> int:
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            if not self.run_tick():
                break
            ticks += 1
        return ticks

    def _admit_pending(self):
        for lane in Lane:
            while self.state.pending_arrivals[lane] > 0:
                try:
                    self.lanes.admit(lane)
                except CongestedLaneError as exc:
                    # Retried on a later tick
                    self.state.arrivals_refused += 1
                    log.debug("Arrival postponed: %s", exc)
                    break
                self.state.pending_arrivals[lane] -= 1

    def _next_interarrival_ms(self) -> float:
        return 1000.0 * self.rng.uniform(self.settings.min_interarrival_s, self.settings.max_interarrival_s)

    # ------------------------ VIEWS ------------------------

    def snapshot(self) -> TrafficSnapshot:
        return self.snapshot_builder.build(self.state, self.lanes, self.strategy.signal_states())

    def controller_view(self) -> ControllerView:
        return self.controller.view()
