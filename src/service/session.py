"""
Remote side session: the current target host, its derived status and best-effort sends.
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
from typing import Optional, Set

from event import ConnectionStatusChangedEvent, EventType, SendFailedEvent
from event.bus import AsyncEventBus, EventBus
from model.action import Action
from model.connection import CONTROL_PORT, ConnectionStatus
from network.connection.probe import ReachabilityProber
from network.errors import SendFailure, UnreachableHostError
from network.protocol.message import MessageCodec
from utils.logging import Logger, get_logger


class SessionManager:
    """
    Owns the target host and its connection status.

    The status is never set directly: it is always the result of the last probe
    against the current target. Sends open one short-lived connection each, are
    dropped while not connected and are never retried.

    Attributes:
        prober (ReachabilityProber): Used for status checks and for send connections.
        event_bus (EventBus): Receives CONNECTION_STATUS_CHANGED and SEND_FAILED.
    """

    def __init__(
        self,
        prober: Optional[ReachabilityProber] = None,
        event_bus: Optional[EventBus] = None,
        port: int = CONTROL_PORT,
        timeout: float = ReachabilityProber.DEFAULT_TIMEOUT,
    ):
        self.prober = (
            prober if prober is not None else ReachabilityProber(port=port, timeout=timeout)
        )
        self.event_bus = event_bus if event_bus is not None else AsyncEventBus()

        self._target_host: Optional[str] = None
        self._status = ConnectionStatus.DISCONNECTED
        # Bumped on every target change, stale probe results are dropped
        self._generation = 0

        self._pending_sends: Set[asyncio.Task] = set()
        self._logger = get_logger(self.__class__.__name__)

    @property
    def target_host(self) -> Optional[str]:
        return self._target_host

    @property
    def port(self) -> int:
        return self.prober.port

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def is_connected(self) -> bool:
        return self._status is ConnectionStatus.CONNECTED

    async def _set_status(self, status: ConnectionStatus) -> None:
        previous = self._status
        if status is previous:
            return

        self._status = status
        self._logger.log(
            f"Status {previous.value} -> {status.value} ({self._target_host})",
            Logger.INFO,
        )
        await self.event_bus.dispatch(
            EventType.CONNECTION_STATUS_CHANGED,
            ConnectionStatusChangedEvent(
                host=self._target_host, status=status, previous=previous
            ),
        )

    async def _probe_target(self) -> ConnectionStatus:
        host = self._target_host
        generation = self._generation
        if host is None:
            await self._set_status(ConnectionStatus.DISCONNECTED)
            return self._status

        reachable = await self.prober.probe(host)

        if generation != self._generation:
            self._logger.log(f"Dropping stale probe result for {host}", Logger.DEBUG)
            return self._status

        await self._set_status(
            ConnectionStatus.CONNECTED if reachable else ConnectionStatus.DISCONNECTED
        )
        return self._status

    async def set_target_host(self, host: Optional[str]) -> ConnectionStatus:
        """
        Switch to a new target and probe it.

        The status is UNKNOWN until the probe returns. If the target changes again
        meanwhile, this probe's result is discarded.
        """
        self._target_host = host
        self._generation += 1
        await self._set_status(ConnectionStatus.UNKNOWN)
        return await self._probe_target()

    def set_target_host_nowait(self, host: Optional[str]) -> asyncio.Task:
        return asyncio.create_task(self.set_target_host(host))

    async def recheck(self) -> ConnectionStatus:
        """Probe the current target again without changing it."""
        return await self._probe_target()

    async def send(self, action: Action) -> bool:
        """
        Deliver one action to the target, at most once.

        Returns:
            bool: True when the frame was written, False when dropped or failed.
        """
        if self._status is not ConnectionStatus.CONNECTED or self._target_host is None:
            self._logger.log(
                f"Not connected, dropping {type(action).__name__}", Logger.DEBUG
            )
            return False

        host = self._target_host
        frame = MessageCodec.encode(action)
        try:
            await self._write_frame(host, frame)
        except SendFailure as e:
            self._logger.log(f"Send to {host} failed -> {e}", Logger.WARNING)
            if host == self._target_host:
                await self._set_status(ConnectionStatus.DISCONNECTED)
            await self.event_bus.dispatch(
                EventType.SEND_FAILED,
                SendFailedEvent(host=host, action=action, reason=str(e)),
            )
            return False

        return True

    async def _write_frame(self, host: str, frame: bytes) -> None:
        """
        Raises:
            SendFailure: connect or write failed.
        """
        try:
            _, writer = await self.prober.open_connection(host)
        except UnreachableHostError as e:
            raise SendFailure(str(e)) from e

        try:
            writer.write(frame)
            await asyncio.wait_for(writer.drain(), timeout=self.prober.timeout)
        except (OSError, asyncio.TimeoutError) as e:
            raise SendFailure(f"write to {host} failed ({e or type(e).__name__})") from e
        finally:
            await self.prober.close_quietly(writer)

    def send_nowait(self, action: Action) -> Optional[asyncio.Task]:
        """
        Fire-and-forget send for dense sample streams such as moves.
        Nothing is scheduled while not connected.
        """
        if self._status is not ConnectionStatus.CONNECTED:
            return None

        task = asyncio.create_task(self.send(action))
        self._pending_sends.add(task)
        task.add_done_callback(self._pending_sends.discard)
        return task

    async def close(self) -> None:
        """Wait for in-flight fire-and-forget sends."""
        if self._pending_sends:
            await asyncio.gather(*list(self._pending_sends), return_exceptions=True)
