"""
Turns raw touch samples into pointer actions on the remote side.

Nothing in this package feeds it touches. A touch pad front end calls
touch_down/touch_move/touch_up and hands the returned actions to SessionManager.
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

from typing import Optional

from model.action import Click, MouseButton, MoveBy


class TouchTracker:
    """
    Tracks one finger on the touch pad.

    Every move sample yields the delta since the previous sample, scaled by the
    move speed. Lifting the finger close to where it went down is a left click.
    """

    MIN_SPEED = 1.0
    MAX_SPEED = 5.0
    TAP_SLOP = 5.0  # px on each axis

    def __init__(self, move_speed: float = 1.0, tap_slop: float = TAP_SLOP):
        self._move_speed = self._clamp_speed(move_speed)
        self.tap_slop = tap_slop

        self._start: Optional[tuple[float, float]] = None
        self._last: Optional[tuple[float, float]] = None

    @classmethod
    def _clamp_speed(cls, speed: float) -> float:
        return max(cls.MIN_SPEED, min(float(speed), cls.MAX_SPEED))

    @property
    def move_speed(self) -> float:
        return self._move_speed

    @move_speed.setter
    def move_speed(self, speed: float) -> None:
        self._move_speed = self._clamp_speed(speed)

    @property
    def is_touching(self) -> bool:
        return self._start is not None

    def touch_down(self, x: float, y: float) -> None:
        self._start = (x, y)
        self._last = (x, y)

    def touch_move(self, x: float, y: float) -> Optional[MoveBy]:
        """
        Returns the displacement since the last sample, or None when no finger is down
        or it did not move. Zero deltas are not turned into MoveBy(0, 0) frames, which
        would move nothing on the host.
        """
        if self._last is None:
            return None

        dx = (x - self._last[0]) * self._move_speed
        dy = (y - self._last[1]) * self._move_speed
        self._last = (x, y)

        if dx == 0 and dy == 0:
            return None
        return MoveBy(dx, dy)

    def touch_up(self, x: float, y: float) -> Optional[Click]:
        start = self._start
        self._start = None
        self._last = None

        if start is None:
            return None

        if abs(start[0] - x) > self.tap_slop or abs(start[1] - y) > self.tap_slop:
            return None
        return Click(MouseButton.LEFT)
