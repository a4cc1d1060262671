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

import pytest

from model.action import Click, MouseButton, MoveBy
from model.gesture import TouchTracker


@pytest.fixture
def tracker():
    return TouchTracker()


class TestTouchTracker:
    """Test turning touch samples into actions."""

    def test_move_without_touch(self, tracker):
        assert tracker.touch_move(10, 10) is None

    def test_move_yields_delta_since_last_sample(self, tracker):
        tracker.touch_down(100, 100)
        assert tracker.touch_move(103, 98) == MoveBy(3.0, -2.0)
        assert tracker.touch_move(110, 98) == MoveBy(7.0, 0.0)

    def test_move_scaled_by_speed(self):
        tracker = TouchTracker(move_speed=3)
        tracker.touch_down(0, 0)
        assert tracker.touch_move(2, -1) == MoveBy(6.0, -3.0)

    def test_zero_move_is_skipped(self, tracker):
        tracker.touch_down(5, 5)
        assert tracker.touch_move(5, 5) is None
        assert tracker.touch_move(7, 4) == MoveBy(2.0, -1.0)

    @pytest.mark.parametrize("speed, expected", [(0, 1.0), (2.5, 2.5), (12, 5.0)])
    def test_speed_is_clamped(self, speed, expected):
        tracker = TouchTracker(move_speed=speed)
        assert tracker.move_speed == expected
        tracker.move_speed = speed
        assert tracker.move_speed == expected

    def test_tap_is_left_click(self, tracker):
        tracker.touch_down(50, 50)
        tracker.touch_move(53, 48)
        assert tracker.touch_up(55, 45) == Click(MouseButton.LEFT)

    def test_drag_is_not_click(self, tracker):
        tracker.touch_down(50, 50)
        tracker.touch_move(60, 50)
        assert tracker.touch_up(60, 50) is None

    def test_slop_checked_per_axis(self, tracker):
        tracker.touch_down(0, 0)
        assert tracker.touch_up(0, 6) is None

    def test_touch_up_resets_state(self, tracker):
        tracker.touch_down(0, 0)
        tracker.touch_up(0, 0)
        assert not tracker.is_touching
        assert tracker.touch_move(10, 10) is None
        assert tracker.touch_up(0, 0) is None
