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
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Set

from utils.logging import get_logger

from . import BusEvent


class EventBus(ABC):
    """
    Async event dispatching system that allows registration of event listeners and dispatching events to them.
    """

    @abstractmethod
    def subscribe(
        self,
        event_type: int,
        callback: Callable[[Optional[BusEvent]], Any],
        priority: bool = False,
    ):
        """
        Subscribe a callback function to a specific event type.
        """

    @abstractmethod
    def unsubscribe(self, event_type: int, callback: Callable[[Optional[BusEvent]], Any]):
        """
        Unsubscribe a callback function from a specific event type.
        """

    @abstractmethod
    async def dispatch(self, event_type: int, data: Optional[BusEvent] = None, **kwargs):
        """
        Dispatch an event to all registered listeners for the given event type.
        """

    @abstractmethod
    def dispatch_nowait(self, event_type: int, *args, **kwargs):
        """
        Dispatch an event without waiting (fire and forget).
        """


class AsyncEventBus(EventBus):
    """
    asyncio implementation of the EventBus.
    Listeners of one event run concurrently and a failing listener never affects the others.
    """

    def __init__(self):
        self._subscribers: Dict[int, List[Callable]] = {}
        self._pending: Set[asyncio.Task] = set()

        self._logger = get_logger(self.__class__.__name__)

    def subscribe(
        self,
        event_type: int,
        callback: Callable[[Optional[BusEvent]], Any],
        priority: bool = False,
    ):
        listeners = self._subscribers.setdefault(event_type, [])
        if priority:
            listeners.insert(0, callback)
        else:
            listeners.append(callback)

    def unsubscribe(self, event_type: int, callback: Callable[[Optional[BusEvent]], Any]):
        listeners = self._subscribers.get(event_type)
        if listeners and callback in listeners:
            listeners.remove(callback)

    def has_subscribers(self, event_type: int) -> bool:
        return bool(self._subscribers.get(event_type))

    async def dispatch(self, event_type: int, data: Optional[BusEvent] = None, **kwargs):
        """
        Supports both sync and async callbacks.
        """
        listeners = self._subscribers.get(event_type)
        if not listeners:
            return

        # Copy, a listener may unsubscribe while we dispatch
        tasks = [self._execute_callback(cb, data, **kwargs) for cb in list(listeners)]
        await asyncio.gather(*tasks, return_exceptions=True)

    def dispatch_nowait(self, event_type: int, *args, **kwargs):
        try:
            task = asyncio.get_running_loop().create_task(
                self.dispatch(event_type, *args, **kwargs)
            )
        except RuntimeError:
            self._logger.warning(
                "No running event loop, event dropped", event_type=int(event_type)
            )
            return None

        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _execute_callback(self, callback: Callable, data, **kwargs):
        try:
            if inspect.iscoroutinefunction(callback):
                await callback(data, **kwargs)
            else:
                result = callback(data, **kwargs)
                if inspect.isawaitable(result):
                    await result
        except Exception as e:
            self._logger.exception(
                f"Exception raised while dispatching event -> {e}",
                callback=getattr(callback, "__qualname__", repr(callback)),
            )
