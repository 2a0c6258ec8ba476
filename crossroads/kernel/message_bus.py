from collections import deque
from typing import Deque, Dict, List

from crossroads.domain.messages import ControllerMessage, VehicleMessage
from crossroads.io.logging_utils import logger

log = logger.getChild("bus")


class MessageBus:
    """
    Mailbox delivery between vehicle agents and the controller.

    Vehicles append to a single list the controller drains every cycle.
    The controller writes to one FIFO mailbox per vehicle, opened when the
    vehicle is admitted and closed when it leaves the lane.
    """

    def __init__(self):
        self.from_vehicles: List[VehicleMessage] = []
        self.mailboxes: Dict[str, Deque[ControllerMessage]] = {}
        self.dropped = 0

    # Vehicle -> Controller

    def send_from_vehicle(self, message: VehicleMessage):
        self.from_vehicles.append(message)

    def drain_from_vehicles(self) -> List[VehicleMessage]:
        messages = self.from_vehicles
        self.from_vehicles = []
        return messages

    # Controller -> Vehicle

    def open_mailbox(self, vehicle_id: str):
        self.mailboxes.setdefault(vehicle_id, deque())

    def close_mailbox(self, vehicle_id: str) -> int:
        mailbox = self.mailboxes.pop(vehicle_id, None)
        if not mailbox:
            return 0
        self.dropped += len(mailbox)
        log.debug("Closed mailbox of %s, %d message(s) dropped", vehicle_id, len(mailbox))
        return len(mailbox)

    def send_to_vehicle(self, vehicle_id: str, message: ControllerMessage):
        mailbox = self.mailboxes.get(vehicle_id)
        if mailbox is None:
            self.dropped += 1
            log.debug("No mailbox for %s, dropping %s", vehicle_id, message.kind)
            return
        mailbox.append(message)

    def receive_for_vehicle(self, vehicle_id: str) -> Deque[ControllerMessage]:
        mailbox = self.mailboxes.get(vehicle_id)
        if mailbox is None:
            return deque()
        self.mailboxes[vehicle_id] = deque()
        return mailbox

    def pending_for(self, vehicle_id: str) -> int:
        return len(self.mailboxes.get(vehicle_id, ()))
