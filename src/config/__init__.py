"""
Configuration for the host daemon and the remote client, with JSON persistence.
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
import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiofiles

from model.connection import CONTROL_PORT
from utils.logging import Logger, get_logger


@dataclass
class ApplicationConfig:
    """Application-wide configuration settings"""

    app_name: str = "Tapmouse"
    main_path: str = ""  # Main application save path

    config_path: str = "config/"
    server_config_file: str = "server_config.json"
    client_config_file: str = "client_config.json"

    DEFAULT_HOST: str = "0.0.0.0"
    DEFAULT_PORT: int = CONTROL_PORT
    DEFAULT_PROBE_TIMEOUT: float = 2.0  # sec
    DEFAULT_READ_TIMEOUT: float = 5.0  # sec

    # /24 sweep, .253 and above are usually reserved on home routers
    DEFAULT_SCAN_BASE: str = "192.168.1"
    DEFAULT_SCAN_START: int = 1
    DEFAULT_SCAN_END: int = 252

    config_files: dict = field(default_factory=dict)

    version: str = "1.0.0"

    def __post_init__(self):
        self.config_files = {
            "server": self.server_config_file,
            "client": self.client_config_file,
        }

    def set_save_path(self, path: str) -> None:
        if not os.path.exists(path):
            os.makedirs(path, exist_ok=True)
        self.main_path = path

    def get_save_path(self) -> str:
        return self.main_path

    def get_config_dir(self) -> str:
        return os.path.join(self.get_save_path(), self.config_path)


class _PersistentConfig(ABC):
    """
    JSON persistence shared by the server and client configurations.
    Subclasses provide to_dict/from_dict.
    """

    def __init__(self, config_file: str):
        self.config_file = config_file
        self._write_lock = asyncio.Lock()
        self._logger = get_logger(self.__class__.__name__)

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def from_dict(self, data: Dict[str, Any]) -> None:
        pass

    async def save(self, file_path: Optional[str] = None) -> None:
        """
        Save configuration to a JSON file, replacing the previous one atomically.

        Args:
            file_path: Destination. Uses self.config_file if None.
        """
        async with self._write_lock:
            file_path = file_path or self.config_file

            dir_path = os.path.dirname(file_path)
            if dir_path:
                os.makedirs(dir_path, exist_ok=True)

            try:
                json_content = json.dumps(self.to_dict(), indent=4)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Failed to serialize configuration ({e})") from e

            temp_file = f"{file_path}.tmp"
            try:
                async with aiofiles.open(temp_file, "w") as f:
                    await f.write(json_content)
                os.replace(temp_file, file_path)
            except OSError as e:
                if os.path.exists(temp_file):
                    os.remove(temp_file)
                raise IOError(f"Failed to save configuration: {e}") from e

    def sync_load(self, file_path: Optional[str] = None) -> bool:
        """
        Returns:
            True if loaded successfully, False if the file is missing or unreadable
        """
        file_path = file_path or self.config_file
        if not os.path.exists(file_path):
            return False

        try:
            with open(file_path, "r") as f:
                data = json.load(f)
            self.from_dict(data)
            return True
        except (OSError, ValueError, TypeError) as e:
            self._logger.log(
                f"Error loading configuration from {file_path} -> {e}", Logger.ERROR
            )
            return False

    async def load(self, file_path: Optional[str] = None) -> bool:
        """
        Returns:
            True if loaded successfully, False if the file is missing or unreadable
        """
        file_path = file_path or self.config_file
        if not os.path.exists(file_path):
            return False

        try:
            async with aiofiles.open(file_path, "r") as f:
                content = await f.read()
            self.from_dict(json.loads(content))
            return True
        except (OSError, ValueError, TypeError) as e:
            self._logger.log(
                f"Error loading configuration from {file_path} -> {e}", Logger.ERROR
            )
            return False


class ServerConfig(_PersistentConfig):
    """
    Host daemon settings: where the control server listens and how it logs.
    """

    DEFAULT_HOST = ApplicationConfig.DEFAULT_HOST
    DEFAULT_PORT = ApplicationConfig.DEFAULT_PORT
    DEFAULT_READ_TIMEOUT = ApplicationConfig.DEFAULT_READ_TIMEOUT
    DEFAULT_LOG_LEVEL: int = Logger.INFO

    def __init__(
        self,
        app_config: Optional[ApplicationConfig] = None,
        config_file: Optional[str] = None,
    ):
        self.app_config = app_config or ApplicationConfig()
        super().__init__(
            config_file
            or os.path.join(
                self.app_config.get_config_dir(), self.app_config.server_config_file
            )
        )

        self.host: str = self.DEFAULT_HOST
        self.port: int = self.DEFAULT_PORT
        self.read_timeout: float = self.DEFAULT_READ_TIMEOUT

        self.log_level: int = self.DEFAULT_LOG_LEVEL
        self.log_to_file: bool = False
        self.log_file_path: Optional[str] = None

    def set_connection_params(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        read_timeout: Optional[float] = None,
    ) -> None:
        if host is not None:
            self.host = host
        if port is not None:
            self.port = port
        if read_timeout is not None:
            self.read_timeout = read_timeout

    def set_logging(
        self,
        level: Optional[int] = None,
        log_to_file: Optional[bool] = None,
        log_file_path: Optional[str] = None,
    ) -> None:
        if level is not None:
            self.log_level = level
        if log_to_file is not None:
            self.log_to_file = log_to_file
        if log_file_path is not None:
            self.log_file_path = log_file_path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "read_timeout": self.read_timeout,
            "log_level": self.log_level,
            "log_to_file": self.log_to_file,
            "log_file_path": self.log_file_path,
        }

    def from_dict(self, data: Dict[str, Any]) -> None:
        self.host = data.get("host", self.host)
        self.port = int(data.get("port", self.port))
        self.read_timeout = float(data.get("read_timeout", self.read_timeout))
        self.log_level = data.get("log_level", self.log_level)
        self.log_to_file = data.get("log_to_file", self.log_to_file)
        self.log_file_path = data.get("log_file_path", self.log_file_path)


class ClientConfig(_PersistentConfig):
    """
    Remote side settings, including the last host the user picked.
    """

    MIN_MOVE_SPEED = 1.0
    MAX_MOVE_SPEED = 5.0

    def __init__(
        self,
        app_config: Optional[ApplicationConfig] = None,
        config_file: Optional[str] = None,
    ):
        self.app_config = app_config or ApplicationConfig()
        super().__init__(
            config_file
            or os.path.join(
                self.app_config.get_config_dir(), self.app_config.client_config_file
            )
        )

        self.server_host: Optional[str] = None
        self.port: int = self.app_config.DEFAULT_PORT
        self.probe_timeout: float = self.app_config.DEFAULT_PROBE_TIMEOUT

        self.scan_base: str = self.app_config.DEFAULT_SCAN_BASE
        self.scan_start: int = self.app_config.DEFAULT_SCAN_START
        self.scan_end: int = self.app_config.DEFAULT_SCAN_END

        self._move_speed: float = self.MIN_MOVE_SPEED

    @property
    def move_speed(self) -> float:
        return self._move_speed

    @move_speed.setter
    def move_speed(self, value: float) -> None:
        self._move_speed = max(self.MIN_MOVE_SPEED, min(float(value), self.MAX_MOVE_SPEED))

    def set_server_host(self, host: Optional[str]) -> None:
        self.server_host = host

    def set_scan_range(
        self,
        base: Optional[str] = None,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> None:
        if base is not None:
            self.scan_base = base
        if start is not None:
            self.scan_start = start
        if end is not None:
            self.scan_end = end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "server_host": self.server_host,
            "port": self.port,
            "probe_timeout": self.probe_timeout,
            "scan_base": self.scan_base,
            "scan_start": self.scan_start,
            "scan_end": self.scan_end,
            "move_speed": self.move_speed,
        }

    def from_dict(self, data: Dict[str, Any]) -> None:
        self.server_host = data.get("server_host", self.server_host)
        self.port = int(data.get("port", self.port))
        self.probe_timeout = float(data.get("probe_timeout", self.probe_timeout))
        self.scan_base = data.get("scan_base", self.scan_base)
        self.scan_start = int(data.get("scan_start", self.scan_start))
        self.scan_end = int(data.get("scan_end", self.scan_end))
        self.move_speed = data.get("move_speed", self.move_speed)
