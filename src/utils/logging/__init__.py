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

import logging
import sys
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, TextIO

import structlog


class BaseLogger(ABC):
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4

    _levels = {
        DEBUG: logging.DEBUG,
        INFO: logging.INFO,
        WARNING: logging.WARNING,
        ERROR: logging.ERROR,
        CRITICAL: logging.CRITICAL,
    }

    @classmethod
    def _parse_level(cls, level: int) -> int:
        """Convert custom level to logging module level"""
        return cls._levels.get(level, logging.INFO)

    def log(self, message: str, level: int = 0, **kw: Any):
        if level == self.DEBUG:
            self.debug(message, **kw)
        elif level == self.INFO:
            self.info(message, **kw)
        elif level == self.WARNING:
            self.warning(message, **kw)
        elif level == self.ERROR:
            self.error(message, **kw)
        elif level == self.CRITICAL:
            self.critical(message, **kw)
        else:
            self.info(message, **kw)

    @abstractmethod
    def debug(self, message: str, **kw: Any):
        pass

    @abstractmethod
    def info(self, message: str, **kw: Any):
        pass

    @abstractmethod
    def warning(self, message: str, **kw: Any):
        pass

    @abstractmethod
    def error(self, message: str, **kw: Any):
        pass

    @abstractmethod
    def critical(self, message: str, **kw: Any):
        pass

    @abstractmethod
    def exception(self, message: str, **kw: Any):
        pass

    @abstractmethod
    def set_level(self, level: int):
        pass


class ColoredFormatter(logging.Formatter):
    """Console formatter for the plain logger"""

    COLORS = {
        "DEBUG": "\033[92m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[1;31m",
        "RESET": "\033[0m",
    }

    def format(self, record):
        cur_time = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        color = self.COLORS.get(record.levelname, "")
        reset = self.COLORS["RESET"]
        return f"{color}[{cur_time}][{record.levelname}][{record.name}] {record.getMessage()}{reset}"


class Logger(BaseLogger):
    """
    Plain logging wrapper, used where structured output is not wanted.
    Context keywords are appended to the message.
    """

    _lock = threading.Lock()
    _shared_handler: Optional[logging.Handler] = None

    def __init__(self, name: Optional[str] = None, verbose: bool = True, level: Optional[int] = None):
        self.logger_name = name or "tapmouse"
        self._logger = logging.getLogger(self.logger_name)
        self._logger.propagate = False

        with self._lock:
            if Logger._shared_handler is None:
                handler = logging.StreamHandler(sys.stdout)
                handler.setFormatter(ColoredFormatter())
                Logger._shared_handler = handler

        if Logger._shared_handler not in self._logger.handlers:
            self._logger.addHandler(Logger._shared_handler)

        self._logger.setLevel(logging.DEBUG if verbose else logging.INFO)
        if level is not None:
            self.set_level(level)

    @staticmethod
    def _with_context(message: str, kw: dict) -> str:
        if not kw:
            return message
        return message + " " + " ".join(f"{k}={v}" for k, v in kw.items())

    def set_level(self, level: int):
        self._logger.setLevel(self._parse_level(level))

    def debug(self, message: str, **kw: Any):
        self._logger.debug(self._with_context(message, kw))

    def info(self, message: str, **kw: Any):
        self._logger.info(self._with_context(message, kw))

    def warning(self, message: str, **kw: Any):
        self._logger.warning(self._with_context(message, kw))

    def error(self, message: str, **kw: Any):
        self._logger.error(self._with_context(message, kw))

    def critical(self, message: str, **kw: Any):
        self._logger.critical(self._with_context(message, kw))

    def exception(self, message: str, **kw: Any):
        self._logger.exception(self._with_context(message, kw))


class StructLogger(BaseLogger):
    """
    Structured, thread-safe logger on top of structlog.

    structlog is configured once for the whole process; every instance only binds
    its own name. Levels are filtered per logger name, with the root level acting
    as a floor for all of them.
    """

    _lock = threading.Lock()
    _configured = False
    _verbose = True
    _root_level: int = logging.DEBUG
    _logger_levels: dict[str, int] = {}
    _log_file_path: Optional[str] = None
    _log_file_handle: Optional[TextIO] = None

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "exception": logging.ERROR,
        "critical": logging.CRITICAL,
    }

    color_map = {
        "debug": "\033[92m",
        "info": "\033[94m",
        "warning": "\033[93m",
        "error": "\033[91m",
        "critical": "\033[1;4;31m",
        "exception": "\033[1;4;31m",
    }

    def __init__(
        self,
        name: Optional[str] = None,
        level: Optional[int] = None,
        **initial_context: Any,
    ):
        """
        Args:
            name: Logger name, usually the class or module name.
            level: Initial level for this logger only (Logger.DEBUG, Logger.INFO, ...).
            **initial_context: Key-value pairs bound to every event of this logger.
        """
        self.logger_name = name or "tapmouse"

        with self._lock:
            if not StructLogger._configured:
                self._configure_structlog()
            if level is not None:
                StructLogger._logger_levels[self.logger_name] = self._parse_level(level)

        # Lazy proxy, assembled on every call so later configure() calls apply
        self._logger = structlog.get_logger(
            logger_name=self.logger_name, **initial_context
        )

    @classmethod
    def configure(
        cls,
        verbose: bool = True,
        level: Optional[int] = None,
        log_file: Optional[str] = None,
    ) -> None:
        """
        (Re)configure process-wide output.

        Args:
            verbose: Colored console output when True, plain output otherwise.
            level: Root level. Defaults to DEBUG when verbose, INFO otherwise.
            log_file: Append to this file instead of writing to stdout.
        """
        with cls._lock:
            cls._verbose = verbose
            if level is None:
                level = cls.DEBUG if verbose else cls.INFO
            cls._root_level = cls._parse_level(level)

            if log_file != cls._log_file_path:
                if cls._log_file_handle is not None:
                    cls._log_file_handle.close()
                    cls._log_file_handle = None
                cls._log_file_path = log_file
                if log_file is not None:
                    path = Path(log_file)
                    path.parent.mkdir(parents=True, exist_ok=True)
                    cls._log_file_handle = open(path, "a", encoding="utf-8", buffering=1)

            cls._configure_structlog()

    @classmethod
    def _filter_by_level(cls, logger, method_name, event_dict):
        """
        Drop events below max(root level, level of the emitting logger).
        """
        logger_name = event_dict.get("logger_name", "")
        min_level = max(
            cls._logger_levels.get(logger_name, cls._root_level), cls._root_level
        )
        if cls.level_map.get(method_name, logging.INFO) < min_level:
            raise structlog.DropEvent
        return event_dict

    @classmethod
    def _configure_structlog(cls):
        # None resolves sys.stdout each time a logger is assembled
        output = cls._log_file_handle
        use_colors = cls._verbose and output is None

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.add_log_level,
                cls._filter_by_level,
                structlog.processors.TimeStamper(fmt="[%H:%M:%S.%f]", utc=False),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.dev.ConsoleRenderer(
                    colors=use_colors,
                    pad_event_to=40,
                    level_styles=cls.color_map if use_colors else None,
                ),
            ],
            wrapper_class=structlog.BoundLogger,
            logger_factory=structlog.WriteLoggerFactory(file=output),
            cache_logger_on_first_use=False,
        )
        cls._configured = True

    def bind(self, **context: Any) -> "StructLogger":
        """
        Returns a new logger sharing this one's name, with extra context bound.
        """
        new_instance = StructLogger.__new__(StructLogger)
        new_instance.logger_name = self.logger_name
        new_instance._logger = self._logger.bind(**context)
        return new_instance

    def unbind(self, *keys: str) -> "StructLogger":
        new_instance = StructLogger.__new__(StructLogger)
        new_instance.logger_name = self.logger_name
        new_instance._logger = self._logger.unbind(*keys)
        return new_instance

    def set_level(self, level: int):
        with self._lock:
            StructLogger._logger_levels[self.logger_name] = self._parse_level(level)

    def debug(self, message: str, **kw: Any):
        self._logger.debug(message, **kw)

    def info(self, message: str, **kw: Any):
        self._logger.info(message, **kw)

    def warning(self, message: str, **kw: Any):
        self._logger.warning(message, **kw)

    def error(self, message: str, **kw: Any):
        self._logger.error(message, **kw)

    def critical(self, message: str, **kw: Any):
        self._logger.critical(message, **kw)

    def exception(self, message: str, **kw: Any):
        """
        Log with the current traceback. Use inside an except block.
        """
        self._logger.exception(message, **kw)


def get_logger(
    name: Optional[str] = None,
    structured: bool = True,
    level: Optional[int] = None,
    **initial_context: Any,
) -> BaseLogger:
    """
    Creates and returns a logger instance.

    Example:
    ::
        from utils.logging import get_logger, Logger

        logger = get_logger(__name__)
        logger.info("Probe finished", host="192.168.1.10", reachable=True)
        logger.log("Server stopped", Logger.INFO)
    """
    if structured:
        return StructLogger(name=name, level=level, **initial_context)
    return Logger(name=name, level=level)


def configure_logging(
    verbose: bool = True, level: Optional[int] = None, log_file: Optional[str] = None
) -> None:
    StructLogger.configure(verbose=verbose, level=level, log_file=log_file)
