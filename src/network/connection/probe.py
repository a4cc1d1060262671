"""
TCP handshake liveness checks against a control port.
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

import asyncio
from typing import Optional

from model.connection import CONTROL_PORT
from network.errors import UnreachableHostError
from utils.logging import Logger, get_logger


class ReachabilityProber:
    """
    Decides within a bounded time whether a host accepts connections on the control port.

    Attributes:
        port (int): Control port probed on every host.
        timeout (float): Upper bound, in seconds, of a single connect attempt.
    """

    DEFAULT_TIMEOUT = 2.0  # sec

    def __init__(self, port: int = CONTROL_PORT, timeout: float = DEFAULT_TIMEOUT):
        self.port = port
        self.timeout = timeout

        self._logger = get_logger(self.__class__.__name__)

    async def open_connection(
        self, host: str, port: Optional[int] = None
    ) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """
        Connect to host within the configured timeout.

        Raises:
            UnreachableHostError: refused, timed out, or the host string does not resolve.
        """
        port = self.port if port is None else port
        try:
            return await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise UnreachableHostError(host, port, f"timeout after {self.timeout}s") from e
        except (OSError, UnicodeError, ValueError) as e:
            raise UnreachableHostError(host, port, str(e) or type(e).__name__) from e

    @staticmethod
    async def close_quietly(writer: asyncio.StreamWriter) -> None:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass

    async def probe(self, host: str) -> bool:
        """
        Handshake-only check. Nothing is written and the socket is closed right away.

        Returns:
            bool: True when the connection was accepted, False on any failure.
        """
        try:
            _, writer = await self.open_connection(host)
        except UnreachableHostError as e:
            self._logger.log(f"Probe failed -> {e}", Logger.DEBUG)
            return False

        await self.close_quietly(writer)
        self._logger.log(f"Probe succeeded for {host}:{self.port}", Logger.DEBUG)
        return True
