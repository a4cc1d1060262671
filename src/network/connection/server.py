"""
Host side of the control protocol.
Accepts one connection at a time, decodes its single frame and replays it on the local pointer.
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

from event import ActionReceivedEvent, DecodeFailedEvent, EventType
from event.bus import AsyncEventBus, EventBus
from input.mouse import PointerActuator
from model.action import Action, Click, ClickDown, ClickUp, MouseButton, MoveBy
from model.connection import CONTROL_PORT
from network.errors import BindFailure, DecodeError, EmptyFrameError
from network.protocol.message import MessageCodec
from utils.logging import Logger, get_logger


class ControlServer:
    """
    Listens on the control port and applies received actions through a PointerActuator.

    Every connection carries exactly one frame. Connections are handled strictly one
    after the other (a FIFO lock spans read, decode, apply and close), so actions are
    applied in the order their connections arrived.

    Attributes:
        actuator (PointerActuator): Performs the actual pointer input.
        host (str): Bind address.
        port (int): Requested port, 0 picks a free one (see bound_port).
        read_timeout (float): Seconds a peer has to deliver its frame.
        event_bus (EventBus): Receives ACTION_RECEIVED and DECODE_FAILED events.
    """

    DEFAULT_READ_TIMEOUT = 5.0  # sec
    CLOSE_TIMEOUT = 5.0  # sec

    def __init__(
        self,
        actuator: PointerActuator,
        host: str = "0.0.0.0",
        port: int = CONTROL_PORT,
        event_bus: Optional[EventBus] = None,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
    ):
        self.actuator = actuator
        self.host = host
        self.port = port
        self.read_timeout = read_timeout
        self.event_bus = event_bus if event_bus is not None else AsyncEventBus()

        self.server: Optional[asyncio.AbstractServer] = None
        self._running = False
        self._serial_lock = asyncio.Lock()

        self._logger = get_logger(self.__class__.__name__)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def bound_port(self) -> int:
        if self.server is None or not self.server.sockets:
            return self.port
        return self.server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        """
        Bind and start accepting.

        Raises:
            BindFailure: the address cannot be claimed. This is the only fatal error.
        """
        if self._running:
            return

        try:
            self.server = await asyncio.start_server(
                self._handle_connection, self.host, self.port
            )
        except OSError as e:
            raise BindFailure(self.host, self.port, str(e)) from e

        self._running = True
        self._logger.log(f"Started on {self.host}:{self.bound_port}", Logger.INFO)

    async def serve_forever(self) -> None:
        if self.server is None:
            await self.start()

        try:
            async with self.server:  # type: ignore[union-attr]
                await self.server.serve_forever()  # type: ignore[union-attr]
        except asyncio.CancelledError:
            self._logger.log("Server loop cancelled.", Logger.INFO)
            raise
        finally:
            self._running = False

    async def stop(self) -> None:
        if self.server is None:
            return

        self._running = False
        self.server.close()
        try:
            await asyncio.wait_for(self.server.wait_closed(), timeout=self.CLOSE_TIMEOUT)
        except asyncio.TimeoutError:
            self._logger.log(
                "Timeout while waiting for server to close.", Logger.WARNING
            )
        self.server = None
        self._logger.log("Stopped.", Logger.INFO)

    async def __aenter__(self) -> "ControlServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        peername = writer.get_extra_info("peername")
        peer = f"{peername[0]}:{peername[1]}" if peername else None

        async with self._serial_lock:
            try:
                event = await self._process(reader, peer)
            finally:
                await self._close(writer)

        if event is not None:
            await self.event_bus.dispatch(
                EventType.ACTION_RECEIVED
                if isinstance(event, ActionReceivedEvent)
                else EventType.DECODE_FAILED,
                event,
            )

    async def _process(
        self, reader: asyncio.StreamReader, peer: Optional[str]
    ) -> Optional[ActionReceivedEvent | DecodeFailedEvent]:
        """
        Read, decode and apply the single frame of a connection.
        Every failure is contained here and only logged.
        """
        try:
            action = await asyncio.wait_for(
                MessageCodec.read(reader), timeout=self.read_timeout
            )
        except EmptyFrameError:
            self._logger.log(f"Probe from {peer}", Logger.DEBUG)
            return None
        except DecodeError as e:
            self._logger.log(f"Decode error from {peer} -> {e}", Logger.ERROR)
            return DecodeFailedEvent(reason=str(e), peer=peer)
        except asyncio.TimeoutError:
            self._logger.log(
                f"No frame from {peer} within {self.read_timeout}s", Logger.WARNING
            )
            return None
        except OSError as e:
            self._logger.log(f"Connection error from {peer} -> {e}", Logger.ERROR)
            return None

        try:
            self.apply(action)
        except Exception as e:
            # A broken actuator must not take the accept loop down
            self._logger.exception(f"Failed to apply {action!r} -> {e}")
            return None

        self._logger.log(f"Applied {action!r} from {peer}", Logger.DEBUG)
        return ActionReceivedEvent(action=action, peer=peer)

    @staticmethod
    async def _close(writer: asyncio.StreamWriter) -> None:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass

    def apply(self, action: Action) -> None:
        """
        Replay one action on the actuator. Moves are relative to the current position.
        """
        if isinstance(action, MoveBy):
            x, y = self.actuator.get_position()
            self.actuator.move_to(int(x + action.dx), int(y + action.dy))
        elif isinstance(action, Click):
            self.actuator.click(action.button)
        elif isinstance(action, ClickDown):
            self.actuator.press(MouseButton.LEFT)
        elif isinstance(action, ClickUp):
            self.actuator.release(MouseButton.LEFT)
        else:
            raise TypeError(f"Unsupported action {action!r}")
