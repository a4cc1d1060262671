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

import json
import os
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeActuator
from model.action import Click, ClickDown, ClickUp, MouseButton, MoveBy
from network.connection.server import ControlServer
from service.daemon import action_from_args, main
from utils.cli import build_parser
from utils.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    configure_logging(verbose=True, level=None, log_file=None)


# ============================================================================
# Argument parsing
# ============================================================================


class TestArgumentParsing:
    """Test the command line surface."""

    def test_serve_defaults(self):
        args = build_parser().parse_args(["serve"])

        assert args.command == "serve"
        assert args.host is None
        assert args.port is None
        assert args.debug is False

    def test_discover_options(self):
        args = build_parser().parse_args(
            ["discover", "--base", "10.0.0", "--start", "5", "--end", "9"]
        )

        assert (args.base, args.start, args.end) == ("10.0.0", 5, 9)

    def test_send_move_with_negative_delta(self):
        args = build_parser().parse_args(["send", "10.0.0.2", "move", "3", "-2"])

        assert args.action == "move"
        assert args.delta == [3.0, -2.0]

    def test_unknown_action_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["send", "10.0.0.2", "scroll"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestActionFromArgs:
    """Test mapping command line actions to protocol actions."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("click-left", Click(MouseButton.LEFT)),
            ("click-right", Click(MouseButton.RIGHT)),
            ("down", ClickDown()),
            ("up", ClickUp()),
        ],
    )
    def test_button_actions(self, name, expected):
        assert action_from_args(name, []) == expected

    def test_move(self):
        assert action_from_args("move", [3.0, -2.0]) == MoveBy(3.0, -2.0)

    @pytest.mark.parametrize(
        "name, delta",
        [
            ("move", [1.0]),
            ("move", [float("nan"), 1.0]),
            ("click-left", [1.0, 1.0]),
            ("scroll", []),
        ],
    )
    def test_invalid(self, name, delta):
        with pytest.raises(ValueError):
            action_from_args(name, delta)


# ============================================================================
# Commands
# ============================================================================


class TestCommands:
    """Test the remote side commands against a local server."""

    @pytest.mark.anyio
    async def test_probe_unreachable(self, unused_tcp_port, capsys):
        code = await main(
            ["probe", "127.0.0.1", "--port", str(unused_tcp_port), "--timeout", "0.5"]
        )

        assert code == 1
        assert "unreachable" in capsys.readouterr().out

    @pytest.mark.anyio
    async def test_send_persists_last_host(self, temp_dir):
        actuator = FakeActuator(position=(100, 200))
        async with ControlServer(actuator, host="127.0.0.1", port=0) as server:
            code = await main(
                [
                    "send",
                    "127.0.0.1",
                    "move",
                    "3",
                    "-2",
                    "--port",
                    str(server.bound_port),
                    "--config-dir",
                    str(temp_dir),
                ]
            )

        assert code == 0
        with open(os.path.join(str(temp_dir), "config", "client_config.json")) as f:
            assert json.load(f)["server_host"] == "127.0.0.1"

    @pytest.mark.anyio
    async def test_send_to_unreachable_host(self, unused_tcp_port, capsys):
        code = await main(
            ["send", "127.0.0.1", "click-left", "--port", str(unused_tcp_port)]
        )

        assert code == 1
        assert "not reachable" in capsys.readouterr().out

    @pytest.mark.anyio
    async def test_discover_invalid_range(self):
        code = await main(["discover", "--base", "10.0.0", "--start", "9", "--end", "1"])

        assert code == 2

    @pytest.mark.anyio
    async def test_discover_lists_hosts(self, capsys):
        async with ControlServer(FakeActuator(), host="127.0.0.1", port=0) as server:
            code = await main(
                [
                    "discover",
                    "--base",
                    "127.0.0",
                    "--start",
                    "1",
                    "--end",
                    "1",
                    "--port",
                    str(server.bound_port),
                ]
            )

        assert code == 0
        assert "127.0.0.1" in capsys.readouterr().out

    @pytest.mark.anyio
    async def test_serve_bind_failure(self):
        actuator = MagicMock()
        actuator.check_cursor_validity.return_value = True

        async with ControlServer(FakeActuator(), host="127.0.0.1", port=0) as server:
            with patch("input.mouse.MouseActuator", return_value=actuator):
                code = await main(
                    ["serve", "--host", "127.0.0.1", "--port", str(server.bound_port)]
                )

        assert code == 1
