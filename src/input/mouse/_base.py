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

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from model.action import MouseButton
from utils.logging import Logger, get_logger


class PointerActuator(ABC):
    """
    Performs pointer input on the local machine.

    The control server is the only writer, so reading the position and then
    setting it does not race with other movers it knows about.
    """

    @abstractmethod
    def get_position(self) -> tuple[int, int]:
        pass

    @abstractmethod
    def move_to(self, x: int, y: int) -> None:
        pass

    @abstractmethod
    def press(self, button: MouseButton) -> None:
        pass

    @abstractmethod
    def release(self, button: MouseButton) -> None:
        pass

    def click(self, button: MouseButton) -> None:
        """Full click, press then release."""
        self.press(button)
        self.release(button)


class MouseActuator(PointerActuator):
    """
    pynput backed actuator.

    pynput picks its platform backend on import and fails on machines without a
    display, so it is only imported when no controller is injected.
    """

    def __init__(
        self,
        controller: Optional[Any] = None,
        button_map: Optional[Mapping[MouseButton, Any]] = None,
    ):
        if controller is None or button_map is None:
            from pynput.mouse import Button, Controller as MouseController

            if controller is None:
                controller = MouseController()
            if button_map is None:
                button_map = {
                    MouseButton.LEFT: Button.left,
                    MouseButton.RIGHT: Button.right,
                }

        self._controller = controller
        self._buttons = dict(button_map)
        self._logger = get_logger(self.__class__.__name__)

    def check_cursor_validity(self) -> bool:
        """
        We use this check to ensure a cursor is available (On windows may fail if no cursor)
        """
        try:
            pos = self._controller.position
            return pos is not None and len(pos) == 2
        except Exception as e:
            self._logger.log(f"Cursor not available -> {e}", Logger.ERROR)
            return False

    def get_position(self) -> tuple[int, int]:
        x, y = self._controller.position
        return int(x), int(y)

    def move_to(self, x: int, y: int) -> None:
        self._controller.position = (int(x), int(y))

    def _button(self, button: MouseButton) -> Any:
        try:
            return self._buttons[button]
        except KeyError:
            raise ValueError(f"Unsupported button {button!r}") from None

    def press(self, button: MouseButton) -> None:
        self._controller.press(self._button(button))

    def release(self, button: MouseButton) -> None:
        self._controller.release(self._button(button))

    def click(self, button: MouseButton) -> None:
        self._controller.click(self._button(button), 1)
