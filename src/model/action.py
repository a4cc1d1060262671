"""
Pointer actions exchanged between the remote and the host, and their mapping to wire messages.
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

import enum
import math
from typing import Dict, Tuple, Type

import msgspec

from network.errors import DecodeError


class MouseButton(enum.Enum):
    """Buttons a remote can drive."""

    LEFT = "left"
    RIGHT = "right"


class Action(msgspec.Struct, frozen=True):
    """
    Base class of every control event.

    Subclasses are immutable and compare by value, so a decoded action can be
    checked against the one that was encoded.
    """

    def to_message(self) -> str:
        return action_to_message(self)


class MoveBy(Action, frozen=True):
    """Relative pointer displacement since the previous sampled point."""

    dx: float = msgspec.field(name="x")
    dy: float = msgspec.field(name="y")


class Click(Action, frozen=True):
    """Full press and release of a button."""

    button: MouseButton = MouseButton.LEFT


class _LeftButtonAction(Action, frozen=True):
    button: MouseButton = MouseButton.LEFT

    def __post_init__(self):
        if self.button is not MouseButton.LEFT:
            raise ValueError(f"{type(self).__name__} supports only the left button")


class ClickDown(_LeftButtonAction, frozen=True):
    """Press without release, used for press-and-hold drags."""

    pass


class ClickUp(_LeftButtonAction, frozen=True):
    """Release of a previous ClickDown."""

    pass


# Sentinel payloads. None of them starts with "{", so they can never collide
# with a JSON move object.
CLICK_LEFT = "CLICK_LEFT"
CLICK_RIGHT = "CLICK_RIGHT"
CLICK_LEFT_DOWN = "CLICK_LEFT_DOWN"
CLICK_LEFT_UP = "CLICK_LEFT_UP"

SENTINEL_ACTIONS: Dict[str, Action] = {
    CLICK_LEFT: Click(MouseButton.LEFT),
    CLICK_RIGHT: Click(MouseButton.RIGHT),
    CLICK_LEFT_DOWN: ClickDown(),
    CLICK_LEFT_UP: ClickUp(),
}

_ACTION_SENTINELS: Dict[Tuple[Type[Action], MouseButton], str] = {
    (type(action), action.button): message  # type: ignore[attr-defined]
    for message, action in SENTINEL_ACTIONS.items()
}

_move_encoder = msgspec.json.Encoder()
_move_decoder = msgspec.json.Decoder(type=MoveBy)


def action_to_message(action: Action) -> str:
    """
    Map an action to its wire text.

    Clicks become one of the sentinel strings, moves become ``{"x": .., "y": ..}``.
    """
    if isinstance(action, MoveBy):
        if not (math.isfinite(action.dx) and math.isfinite(action.dy)):
            raise ValueError(f"Cannot encode non-finite move {action!r}")
        return _move_encoder.encode(action).decode("utf-8")

    try:
        return _ACTION_SENTINELS[(type(action), action.button)]  # type: ignore[attr-defined]
    except (KeyError, AttributeError):
        raise TypeError(f"Unsupported action {action!r}") from None


def action_from_message(message: str) -> Action:
    """
    Map wire text back to an action.

    Sentinels are matched exactly before any JSON parsing is attempted.

    Raises:
        DecodeError: the text is neither a sentinel nor a valid move object.
    """
    action = SENTINEL_ACTIONS.get(message)
    if action is not None:
        return action

    try:
        move = _move_decoder.decode(message)
    except msgspec.DecodeError as e:
        raise DecodeError(f"Unrecognized message {message[:64]!r} ({e})") from e

    if not (math.isfinite(move.dx) and math.isfinite(move.dy)):
        raise DecodeError(f"Non-finite move {message[:64]!r}")
    return move
