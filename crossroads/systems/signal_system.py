from typing import Dict
from crossroads.domain.models import Lane, SignalState

class SignalSystem:
    """
    Two-lane light: one lane is GREEN (then AMBER), the other is RED.

    GREEN -> AMBER when the green timer runs out; AMBER -> GREEN for the
    other lane when the amber timer runs out. Timers never stay negative.
    """

    def __init__(self, green_time: float, amber_time: float, green_lane: Lane = Lane.HORIZONTAL):
        self.green_time = green_time
        self.amber_time = amber_time
        self.green_lane = green_lane
        self.amber = False
        self.remaining_green = green_time
        self.remaining_amber = 0.0

    @property
    def red_lane(self) -> Lane:
        return self.green_lane.opposite

    def update(self, dt: float):
        if self.amber:
            self.remaining_amber -= dt
            if self.remaining_amber <= 0:
                self._switch_signal_phase()
        else:
            self.remaining_green -= dt
            if self.remaining_green <= 0:
                self._switch_signal_phase()

    def _switch_signal_phase(self):
        if self.amber:
            self.amber = False
            self.green_lane = self.green_lane.opposite
            self.remaining_amber = 0.0
            self.remaining_green = self.green_time
        else:
            self.amber = True
            self.remaining_green = 0.0
            self.remaining_amber = self.amber_time

    def signal_for(self, lane: Lane) -> SignalState:
        if lane == self.red_lane:
            return SignalState.RED
        return SignalState.AMBER if self.amber else SignalState.GREEN

    def signal_states(self) -> Dict[Lane, SignalState]:
        return {lane: self.signal_for(lane) for lane in Lane}
