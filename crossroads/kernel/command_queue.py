from collections import deque
from typing import Any, Deque
from crossroads.application.commands import Command
from crossroads.io.logging_utils import logger

log = logger.getChild("commands")

class CommandQueue:
    """Operator commands, applied in FIFO order at the start of a tick."""

    def __init__(self):
        self.queue: Deque[Command] = deque()

    def __len__(self) -> int:
        return len(self.queue)

    def submit(self, command: Command):
        self.queue.append(command)

    def execute_all(self, kernel: Any) -> int:
        # Commands queued while executing wait for the next tick
        commands, self.queue = self.queue, deque()
        for cmd in commands:
            log.info("Executing %s", type(cmd).__name__)
            cmd.execute(kernel)
        return len(commands)
