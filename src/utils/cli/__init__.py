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

import argparse

from config import ApplicationConfig

ACTION_CHOICES = ("click-left", "click-right", "down", "up", "move")


def CommonArguments(parser: argparse.ArgumentParser) -> argparse._ArgumentGroup:
    """Logging and config options shared by every command"""
    group = parser.add_argument_group("Common Options")
    group.add_argument("--config-dir", help="Configuration directory path")
    group.add_argument("--debug", action="store_true", help="Enable debug logging")
    group.add_argument("--log-file", help="Append logs to this file instead of stdout")
    return group


def ServeArguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument(
        "--host", default=None, help=f"Bind address (default {ApplicationConfig.DEFAULT_HOST})"
    )
    parser.add_argument(
        "--port", type=int, default=None, help=f"Control port (default {ApplicationConfig.DEFAULT_PORT})"
    )
    CommonArguments(parser)
    return parser


def ProbeArguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument("host", help="Host to check")
    parser.add_argument("--port", type=int, default=None, help="Control port")
    parser.add_argument(
        "--timeout", type=float, default=None, help="Connect timeout in seconds"
    )
    CommonArguments(parser)
    return parser


def DiscoverArguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument(
        "--base",
        default=None,
        help="First three octets to sweep (default: local network)",
    )
    parser.add_argument("--start", type=int, default=None, help="First host number")
    parser.add_argument("--end", type=int, default=None, help="Last host number")
    parser.add_argument("--port", type=int, default=None, help="Control port")
    parser.add_argument(
        "--timeout", type=float, default=None, help="Per-host connect timeout in seconds"
    )
    CommonArguments(parser)
    return parser


def SendArguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument("host", help="Target host")
    parser.add_argument("action", choices=ACTION_CHOICES, help="Action to send")
    parser.add_argument(
        "delta", nargs="*", type=float, help="dx dy, only for the move action"
    )
    parser.add_argument("--port", type=int, default=None, help="Control port")
    parser.add_argument(
        "--timeout", type=float, default=None, help="Connect timeout in seconds"
    )
    CommonArguments(parser)
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tapmouse", description="Remote pointer control over the local network"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    ServeArguments(commands.add_parser("serve", help="Run the control server"))
    ProbeArguments(commands.add_parser("probe", help="Check if a host is reachable"))
    DiscoverArguments(
        commands.add_parser("discover", help="Sweep a /24 for reachable hosts")
    )
    SendArguments(commands.add_parser("send", help="Send one action to a host"))
    return parser
