from typing import Literal, Union
from pydantic import BaseModel

from crossroads.domain.models import Lane

# Sent by vehicles to the controller

class Arrival(BaseModel):
    kind: Literal["arrival"] = "arrival"
    id: str
    lane: Lane
    max_acceleration: float
    min_acceleration: float
    max_velocity: float
    length: float

class StatusReport(BaseModel):
    kind: Literal["status"] = "status"
    id: str
    position: float
    velocity: float
    acceleration: float

# Sent by the controller to one vehicle

class SetAcceleration(BaseModel):
    kind: Literal["set-acceleration"] = "set-acceleration"
    id: str
    value: float

class RequestStatus(BaseModel):
    kind: Literal["request-status"] = "request-status"
    id: str

VehicleMessage = Union[Arrival, StatusReport]
ControllerMessage = Union[SetAcceleration, RequestStatus]
