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

import enum
import ipaddress
from dataclasses import dataclass, field
from typing import FrozenSet, List

CONTROL_PORT = 6886


class ConnectionStatus(enum.Enum):
    """
    Reachability of the current target host.

    UNKNOWN is only visible between a target change and the end of its probe.
    """

    UNKNOWN = "unknown"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True, order=False)
class Address:
    """
    A control endpoint. The host is kept as given, connection attempts decide
    whether it is usable.
    """

    host: str
    port: int = CONTROL_PORT

    def sort_key(self) -> tuple:
        try:
            return 0, int(ipaddress.IPv4Address(self.host)), self.port
        except ValueError:
            return 1, self.host, self.port

    def __lt__(self, other: "Address") -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class DiscoveryResult:
    """
    Outcome of one subnet sweep. Never merged with another sweep.
    """

    base_address: str
    range_start: int
    range_end: int
    probed: int
    hosts: FrozenSet[Address] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.hosts

    def host_names(self) -> List[str]:
        """Reachable hosts in numeric address order."""
        return [address.host for address in sorted(self.hosts)]

    def to_dict(self) -> dict:
        return {
            "base_address": self.base_address,
            "range_start": self.range_start,
            "range_end": self.range_end,
            "probed": self.probed,
            "hosts": self.host_names(),
        }
