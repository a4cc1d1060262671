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

import ipaddress
import socket
from typing import List


class MissingIpError(Exception):
    """Raised when the local IP address cannot be determined."""

    pass


def is_valid_ipv4(host: str) -> bool:
    """Dotted-quad check used where the user types a host."""
    try:
        ipaddress.IPv4Address(host)
        return True
    except ValueError:
        return False


def base_address(ip: str) -> str:
    """
    Returns the first three octets of an IPv4 address, e.g. "192.168.1.34" -> "192.168.1".

    Raises:
        ValueError: if ip is not a dotted-quad IPv4 address.
    """
    return str(ipaddress.IPv4Address(ip)).rsplit(".", 1)[0]


def candidate_hosts(base: str, start: int, end: int) -> List[str]:
    """
    Expand base + [start, end] into host strings.

    Raises:
        ValueError: if the base is not three octets or the range is outside 0-255.
    """
    if not 0 <= start <= end <= 255:
        raise ValueError(f"Invalid host range {start}-{end}")

    octets = base.split(".")
    if len(octets) != 3 or not is_valid_ipv4(f"{base}.0"):
        raise ValueError(f"Invalid base address {base!r}, expected three octets")

    return [f"{base}.{i}" for i in range(start, end + 1)]


def get_local_ip() -> str:
    """
    Address of the interface that routes outside traffic.
    No packet is sent, connecting a UDP socket only selects the route.

    Raises:
        MissingIpError: when no route is available.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
    except OSError as e:
        raise MissingIpError(f"Could not determine local IP address ({e})") from e


def local_base_address(default: str) -> str:
    """Base address of the local /24, or default when offline."""
    try:
        return base_address(get_local_ip())
    except (MissingIpError, ValueError):
        return default
