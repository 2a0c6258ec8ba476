from abc import ABC, abstractmethod
from typing import Any
from crossroads.domain.models import Lane

class Command(ABC):
    @abstractmethod
    def execute(self, kernel: Any):
        pass

class PauseCommand(Command):
    def execute(self, kernel: Any):
        kernel.state.paused = True

class ResumeCommand(Command):
    def execute(self, kernel: Any):
        kernel.state.paused = False

class StopCommand(Command):
    def execute(self, kernel: Any):
        kernel.finish("stopped by operator")

class RequestArrivalCommand(Command):
    def __init__(self, lane: Lane):
        self.lane = lane

    def execute(self, kernel: Any):
        # Admitted on this tick if the lane has room, later otherwise
        kernel.request_arrival(self.lane)
