"""
Error taxonomy shared by the wire codec, the prober, the session manager and the control server.
"""

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


class ProtocolError(Exception):
    """Base class for wire protocol errors."""

    pass


class DecodeError(ProtocolError, ValueError):
    """Raised when a frame or its payload cannot be turned into an action."""

    pass


class EmptyFrameError(DecodeError):
    """
    Raised when the peer closed the connection before sending a single byte.
    Reachability probes look exactly like this on the server side.
    """

    pass


class FrameTooLargeError(ProtocolError, ValueError):
    """Raised when a payload does not fit the 16-bit length prefix."""

    pass


class UnreachableHostError(ConnectionError):
    """Connect attempt refused, timed out or failed to resolve."""

    def __init__(self, host: str, port: int, reason: str = ""):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(
            f"{host}:{port} is not reachable" + (f" ({reason})" if reason else "")
        )


class SendFailure(ConnectionError):
    """Writing a frame to the current target failed."""

    pass


class BindFailure(RuntimeError):
    """The control server could not claim its listening address."""

    def __init__(self, host: str, port: int, reason: str = ""):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(
            f"Cannot listen on {host}:{port}" + (f" -> {reason}" if reason else "")
        )
