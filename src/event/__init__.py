#  Tapmouse - open-source remote pointer for the local network.
#  Copyright (c) 2026 Federico Izzi.
#
#  This program is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  This program is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with this program.  If not, see <https://www.gnu.org/licenses/>.
#

from abc import ABC
from enum import IntEnum
from time import time
from typing import Optional

from model.action import Action
from model.connection import ConnectionStatus, DiscoveryResult


class EventType(IntEnum):
    """
    Events type to subscribe to and dispatch.

    Remote side:
    - CONNECTION_STATUS_CHANGED: the session status changed (ConnectionStatusChangedEvent).
    - DISCOVERY_COMPLETED: every probe of a sweep returned (DiscoveryCompletedEvent).
    - SEND_FAILED: a frame could not be written, the session is now disconnected.

    Host side:
    - ACTION_RECEIVED: an action was decoded and applied to the pointer.
    - DECODE_FAILED: a connection carried a frame that could not be decoded.
    """

    CONNECTION_STATUS_CHANGED = 1
    DISCOVERY_COMPLETED = 2
    SEND_FAILED = 3

    ACTION_RECEIVED = 4
    DECODE_FAILED = 5


class BusEvent(ABC):
    """
    Base class for events dispatched on the EventBus.
    """

    def __init__(self):
        self.timestamp = time()

    def to_dict(self) -> dict:
        raise NotImplementedError


class ConnectionStatusChangedEvent(BusEvent):
    def __init__(
        self,
        host: Optional[str],
        status: ConnectionStatus,
        previous: ConnectionStatus,
    ):
        super().__init__()
        self.host = host
        self.status = status
        self.previous = previous

    @property
    def is_connected(self) -> bool:
        return self.status is ConnectionStatus.CONNECTED

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "status": self.status.value,
            "previous": self.previous.value,
        }


class DiscoveryCompletedEvent(BusEvent):
    def __init__(self, result: DiscoveryResult):
        super().__init__()
        self.result = result

    def to_dict(self) -> dict:
        return self.result.to_dict()


class SendFailedEvent(BusEvent):
    def __init__(self, host: Optional[str], action: Action, reason: str):
        super().__init__()
        self.host = host
        self.action = action
        self.reason = reason

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "action": type(self.action).__name__,
            "reason": self.reason,
        }


class ActionReceivedEvent(BusEvent):
    def __init__(self, action: Action, peer: Optional[str] = None):
        super().__init__()
        self.action = action
        self.peer = peer

    def to_dict(self) -> dict:
        return {"action": type(self.action).__name__, "peer": self.peer}


class DecodeFailedEvent(BusEvent):
    def __init__(self, reason: str, peer: Optional[str] = None):
        super().__init__()
        self.reason = reason
        self.peer = peer

    def to_dict(self) -> dict:
        return {"reason": self.reason, "peer": self.peer}
