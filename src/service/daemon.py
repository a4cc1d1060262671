"""
Command line entry point.

`serve` runs the control server on the host machine. `probe`, `discover` and `send`
act as the remote side, which is handy for checking a setup from a terminal.
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

import argparse
import asyncio
import math
import signal
import sys
from typing import List, Optional, Sequence

from config import ApplicationConfig, ClientConfig, ServerConfig
from event.bus import AsyncEventBus
from model.action import Action, Click, ClickDown, ClickUp, MouseButton, MoveBy
from model.connection import ConnectionStatus
from network.connection.probe import ReachabilityProber
from network.connection.server import ControlServer
from network.errors import BindFailure
from service.discovery import HostDiscovery
from service.session import SessionManager
from utils.cli import build_parser
from utils.logging import Logger, configure_logging, get_logger
from utils.net import local_base_address

IS_WINDOWS = sys.platform in ("win32", "cygwin", "cli")

_logger = get_logger("Daemon")


def action_from_args(name: str, delta: Sequence[float]) -> Action:
    """
    Raises:
        ValueError: move without exactly two deltas, or deltas on a click action.
    """
    if name == "move":
        if len(delta) != 2:
            raise ValueError("move needs exactly two values: dx dy")
        if not all(math.isfinite(d) for d in delta):
            raise ValueError("move values must be finite")
        return MoveBy(dx=delta[0], dy=delta[1])

    if delta:
        raise ValueError(f"{name} takes no values")

    if name == "click-left":
        return Click(MouseButton.LEFT)
    if name == "click-right":
        return Click(MouseButton.RIGHT)
    if name == "down":
        return ClickDown()
    if name == "up":
        return ClickUp()
    raise ValueError(f"Unknown action {name!r}")


def _app_config(args: argparse.Namespace) -> ApplicationConfig:
    app_config = ApplicationConfig()
    if args.config_dir:
        app_config.set_save_path(args.config_dir)
    return app_config


def _setup_logging(
    args: argparse.Namespace,
    level: Optional[int] = None,
    log_file: Optional[str] = None,
) -> None:
    if args.debug:
        level = Logger.DEBUG
    log_file = args.log_file or log_file
    configure_logging(
        verbose=log_file is None,
        level=level if level is not None else Logger.INFO,
        log_file=log_file,
    )


def _setup_signal_handlers(stop: asyncio.Event) -> None:
    if IS_WINDOWS:
        return
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass


async def serve(args: argparse.Namespace) -> int:
    server_config = ServerConfig(_app_config(args))
    if args.config_dir:
        server_config.sync_load()
    server_config.set_connection_params(host=args.host, port=args.port)

    _setup_logging(
        args,
        level=server_config.log_level,
        log_file=server_config.log_file_path if server_config.log_to_file else None,
    )

    # pynput is only needed here
    from input.mouse import MouseActuator

    actuator = MouseActuator()
    if not actuator.check_cursor_validity():
        _logger.log("No usable pointer on this machine", Logger.CRITICAL)
        return 1

    server = ControlServer(
        actuator,
        host=server_config.host,
        port=server_config.port,
        event_bus=AsyncEventBus(),
        read_timeout=server_config.read_timeout,
    )

    try:
        await server.start()
    except BindFailure as e:
        _logger.log(str(e), Logger.CRITICAL)
        return 1

    stop = asyncio.Event()
    _setup_signal_handlers(stop)

    serve_task = asyncio.create_task(server.serve_forever())
    stop_task = asyncio.create_task(stop.wait())
    try:
        await asyncio.wait({serve_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        _logger.log("Shutting down", Logger.INFO)
        stop_task.cancel()
        serve_task.cancel()
        await asyncio.gather(serve_task, stop_task, return_exceptions=True)
        await server.stop()
    return 0


def _client_config(args: argparse.Namespace) -> ClientConfig:
    client_config = ClientConfig(_app_config(args))
    if args.config_dir:
        client_config.sync_load()
    if getattr(args, "port", None) is not None:
        client_config.port = args.port
    if getattr(args, "timeout", None) is not None:
        client_config.probe_timeout = args.timeout
    return client_config


async def probe(args: argparse.Namespace) -> int:
    _setup_logging(args)
    client_config = _client_config(args)

    prober = ReachabilityProber(
        port=client_config.port, timeout=client_config.probe_timeout
    )
    reachable = await prober.probe(args.host)
    print(f"{args.host}:{prober.port} {'reachable' if reachable else 'unreachable'}")
    return 0 if reachable else 1


async def discover(args: argparse.Namespace) -> int:
    _setup_logging(args)
    client_config = _client_config(args)
    client_config.set_scan_range(base=args.base, start=args.start, end=args.end)
    if args.base is None and client_config.scan_base == ApplicationConfig.DEFAULT_SCAN_BASE:
        client_config.scan_base = local_base_address(client_config.scan_base)

    discovery = HostDiscovery(
        prober=ReachabilityProber(
            port=client_config.port, timeout=client_config.probe_timeout
        )
    )
    try:
        result = await discovery.discover(
            range_start=client_config.scan_start,
            range_end=client_config.scan_end,
            base_address=client_config.scan_base,
        )
    except ValueError as e:
        _logger.log(str(e), Logger.ERROR)
        return 2

    if result.is_empty:
        print("No hosts available")
    for host in result.host_names():
        print(host)
    return 0


async def send(args: argparse.Namespace) -> int:
    _setup_logging(args)
    try:
        action = action_from_args(args.action, args.delta)
    except ValueError as e:
        _logger.log(str(e), Logger.ERROR)
        return 2

    client_config = _client_config(args)
    session = SessionManager(
        port=client_config.port, timeout=client_config.probe_timeout
    )

    status = await session.set_target_host(args.host)
    if status is not ConnectionStatus.CONNECTED:
        print(f"{args.host} is not reachable")
        return 1

    delivered = await session.send(action)
    await session.close()

    if delivered and args.config_dir:
        client_config.set_server_host(args.host)
        await client_config.save()
    return 0 if delivered else 1


COMMANDS = {
    "serve": serve,
    "probe": probe,
    "discover": discover,
    "send": send,
}


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    return await COMMANDS[args.command](args)


def run() -> None:
    if IS_WINDOWS:
        sys.exit(asyncio.run(main()))

    import uvloop

    sys.exit(uvloop.run(main()))


if __name__ == "__main__":
    run()
