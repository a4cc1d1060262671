"""
Length-prefixed text frames carrying one pointer action per connection.
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
import struct
from typing import ClassVar

from model.action import Action, action_from_message, action_to_message
from network.errors import DecodeError, EmptyFrameError, FrameTooLargeError


class ControlFrame:
    """
    One frame is a 2-byte big-endian length followed by that many bytes of UTF-8 text.
    """

    _prefix_format: ClassVar[str] = "!H"
    prefix_length: ClassVar[int] = struct.calcsize(_prefix_format)
    MAX_PAYLOAD_SIZE: ClassVar[int] = 0xFFFF

    @classmethod
    def pack(cls, text: str) -> bytes:
        payload = text.encode("utf-8")
        if len(payload) > cls.MAX_PAYLOAD_SIZE:
            raise FrameTooLargeError(
                f"Payload of {len(payload)} bytes exceeds {cls.MAX_PAYLOAD_SIZE}"
            )
        return struct.pack(cls._prefix_format, len(payload)) + payload

    @classmethod
    def read_length_prefix(cls, data: bytes) -> int:
        """
        Read the payload length announced by a frame.

        Args:
            data: Bytes starting with the frame prefix
        """
        if len(data) < cls.prefix_length:
            raise DecodeError("Invalid frame: too short for length prefix")
        (length,) = struct.unpack(cls._prefix_format, data[: cls.prefix_length])
        return length

    @classmethod
    def _decode_text(cls, payload: bytes) -> str:
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid frame: payload is not UTF-8 ({e})") from e

    @classmethod
    def unpack(cls, data: bytes) -> str:
        """
        Extract the text of exactly one frame.

        Raises:
            DecodeError: the data is truncated, carries trailing bytes or is not UTF-8.
        """
        length = cls.read_length_prefix(data)
        end = cls.prefix_length + length

        if len(data) < end:
            raise DecodeError("Invalid frame: incomplete payload")
        if len(data) > end:
            raise DecodeError("Invalid frame: trailing bytes after payload")

        return cls._decode_text(data[cls.prefix_length : end])

    @classmethod
    async def read(cls, reader: asyncio.StreamReader) -> str:
        """
        Read one frame from a stream.

        Raises:
            EmptyFrameError: the peer closed without sending anything.
            DecodeError: the stream ended in the middle of the frame.
        """
        try:
            prefix = await reader.readexactly(cls.prefix_length)
        except asyncio.IncompleteReadError as e:
            if not e.partial:
                raise EmptyFrameError("Connection closed without data") from e
            raise DecodeError("Invalid frame: truncated length prefix") from e

        length = cls.read_length_prefix(prefix)
        try:
            payload = await reader.readexactly(length)
        except asyncio.IncompleteReadError as e:
            raise DecodeError(
                f"Invalid frame: expected {length} bytes, got {len(e.partial)}"
            ) from e

        return cls._decode_text(payload)


class MessageCodec:
    """
    Encodes actions into frames and back.
    """

    @staticmethod
    def encode(action: Action) -> bytes:
        return ControlFrame.pack(action_to_message(action))

    @staticmethod
    def decode(data: bytes) -> Action:
        """
        Raises:
            DecodeError: for any malformed frame or unknown payload.
        """
        return action_from_message(ControlFrame.unpack(data))

    @classmethod
    def try_decode(cls, data: bytes) -> Action | DecodeError:
        """Like decode, but hands the error back instead of raising it."""
        try:
            return cls.decode(data)
        except DecodeError as e:
            return e

    @staticmethod
    async def read(reader: asyncio.StreamReader) -> Action:
        return action_from_message(await ControlFrame.read(reader))


encode = MessageCodec.encode
decode = MessageCodec.decode
