"""
Subnet sweep looking for hosts that accept connections on the control port.
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
import inspect
from typing import Any, Callable, Optional, Set

from event import DiscoveryCompletedEvent, EventType
from event.bus import AsyncEventBus, EventBus
from model.connection import Address, DiscoveryResult
from network.connection.probe import ReachabilityProber
from utils.logging import Logger, get_logger
from utils.net import candidate_hosts


class _Sweep:
    """
    Accumulator of one sweep. Probe tasks write into it concurrently.
    """

    def __init__(self, total: int):
        self.total = total
        self.completed = 0
        self.found: Set[str] = set()
        self.lock = asyncio.Lock()
        self.done = asyncio.Event()

    async def record(self, host: str, reachable: bool) -> None:
        async with self.lock:
            if reachable:
                self.found.add(host)
            self.completed += 1
            if self.completed >= self.total:
                self.done.set()


class HostDiscovery:
    """
    Probes every address of a /24 range concurrently and reports the reachable ones.

    A sweep finishes when every issued probe has returned, successful or not. There
    is no overall timeout, each probe is bounded by the prober's own timeout.

    Attributes:
        prober (ReachabilityProber): Used for every candidate address.
        event_bus (EventBus): Receives DISCOVERY_COMPLETED when a sweep ends.
    """

    DEFAULT_BASE = "192.168.1"
    DEFAULT_START = 1
    DEFAULT_END = 252

    def __init__(
        self,
        prober: Optional[ReachabilityProber] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.prober = prober if prober is not None else ReachabilityProber()
        self.event_bus = event_bus if event_bus is not None else AsyncEventBus()

        self._logger = get_logger(self.__class__.__name__)

    async def discover(
        self,
        range_start: int = DEFAULT_START,
        range_end: int = DEFAULT_END,
        base_address: str = DEFAULT_BASE,
        callback: Optional[Callable[[DiscoveryResult], Any]] = None,
    ) -> DiscoveryResult:
        """
        Sweep base_address.range_start .. base_address.range_end (inclusive).

        Args:
            range_start: First host number.
            range_end: Last host number.
            base_address: First three octets, e.g. "192.168.1".
            callback: Optional sync or async function called with the result.

        Returns:
            DiscoveryResult: possibly empty, which is a normal outcome.

        Raises:
            ValueError: invalid base address or range, raised before any probe is issued.
        """
        hosts = candidate_hosts(base_address, range_start, range_end)
        sweep = _Sweep(total=len(hosts))

        self._logger.log(
            f"Scanning {base_address}.{range_start}-{range_end} "
            f"({sweep.total} hosts, port {self.prober.port})",
            Logger.INFO,
        )

        # Keep references so pending probes are not garbage collected
        tasks = [asyncio.create_task(self._probe_one(sweep, host)) for host in hosts]
        await sweep.done.wait()
        await asyncio.gather(*tasks, return_exceptions=True)

        result = DiscoveryResult(
            base_address=base_address,
            range_start=range_start,
            range_end=range_end,
            probed=sweep.completed,
            hosts=frozenset(Address(host, self.prober.port) for host in sweep.found),
        )

        if result.is_empty:
            self._logger.log("No hosts available", Logger.INFO)
        else:
            self._logger.log(
                f"Found {len(result.hosts)} host(s): {', '.join(result.host_names())}",
                Logger.INFO,
            )

        if callback is not None:
            outcome = callback(result)
            if inspect.isawaitable(outcome):
                await outcome

        await self.event_bus.dispatch(
            EventType.DISCOVERY_COMPLETED, DiscoveryCompletedEvent(result)
        )
        return result

    async def _probe_one(self, sweep: _Sweep, host: str) -> None:
        reachable = False
        try:
            reachable = await self.prober.probe(host)
        except Exception as e:
            # The probe itself never raises, a replaced prober might
            self._logger.log(f"Probe of {host} raised -> {e}", Logger.ERROR)
        finally:
            await sweep.record(host, reachable)
