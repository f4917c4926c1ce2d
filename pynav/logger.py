# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Logging configuration for pynav

Library modules only call ``logging.getLogger(__name__)``; nothing is printed
until an application attaches handlers, for example with::

    >>> from pynav.logger import setup_logger
    >>> setup_logger(level="DEBUG")
"""

import copy
import logging
import sys
from enum import Enum
from typing import Optional

ROOT_LOGGER = "pynav"


class LogLevel(Enum):
    """Log levels"""
    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


logging.addLevelName(LogLevel.TRACE.value, "TRACE")


def _trace(self, message, *args, **kwargs):
    if self.isEnabledFor(LogLevel.TRACE.value):
        self._log(LogLevel.TRACE.value, message, args, **kwargs)


logging.Logger.trace = _trace


def _level_value(level: str) -> int:
    try:
        return LogLevel[level.upper()].value
    except KeyError:
        raise ValueError(f"Unknown log level: {level}") from None


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminals"""

    COLORS = {
        'TRACE': '\033[36m',     # Cyan
        'DEBUG': '\033[34m',     # Blue
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # other handlers see the same record
        record = copy.copy(record)
        log_color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{log_color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logger(name: str = ROOT_LOGGER,
                 level: str = "INFO",
                 log_file: Optional[str] = None,
                 console: bool = True) -> logging.Logger:
    """
    Setup logger with specified configuration

    Parameters:
    -----------
    name : str
        Logger name; the default covers every pynav module
    level : str
        Log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_file : Optional[str]
        Log file path (if None, no file logging)
    console : bool
        Enable console output

    Returns:
    --------
    logging.Logger
        Configured logger
    """
    value = _level_value(level)
    logger = logging.getLogger(name)
    logger.setLevel(value)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(value)
        console_handler.setFormatter(ColoredFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        ))
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(value)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get logger by name"""
    return logging.getLogger(name)


class LogContext:
    """Context manager for temporary log level change

    >>> with LogContext(logging.getLogger("pynav.io"), "DEBUG"):
    ...     frames = read_nav(path)
    """

    def __init__(self, logger: logging.Logger, level: str):
        self.logger = logger
        self.new_level = _level_value(level)
        self.old_level = None

    def __enter__(self):
        self.old_level = self.logger.level
        self.logger.setLevel(self.new_level)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.setLevel(self.old_level)


class LoggerConfig:
    """Module-specific log levels on top of the package default"""

    def __init__(self):
        self.module_levels = {}
        self.default_level = "INFO"
        self.log_file = None
        self.console = True

    def set_module_level(self, module_name: str, level: str):
        """Set log level for specific module, e.g. 'pynav.io.rinex'"""
        self.module_levels[module_name] = level
        logging.getLogger(module_name).setLevel(_level_value(level))

    def get_level_for_module(self, module_name: str) -> str:
        return self.module_levels.get(module_name, self.default_level)

    def configure_from_dict(self, config: dict):
        """Configure from dictionary"""
        if 'default_level' in config:
            self.default_level = config['default_level']
        if 'log_file' in config:
            self.log_file = config['log_file']
        if 'console' in config:
            self.console = config['console']
        for module, level in config.get('module_levels', {}).items():
            self.set_module_level(module, level)

    def setup_all_loggers(self) -> logging.Logger:
        """Attach handlers to the package logger; module loggers propagate to it"""
        logger = setup_logger(ROOT_LOGGER, self.default_level, self.log_file, self.console)
        # the package handlers must pass whatever a module logger lets through
        for handler in logger.handlers:
            handler.setLevel(LogLevel.TRACE.value)
        for module, level in self.module_levels.items():
            logging.getLogger(module).setLevel(_level_value(level))
        return logger


logger_config = LoggerConfig()


def setup_logger_from_config(config: dict) -> logging.Logger:
    """Setup loggers from configuration dictionary

    Example config:
    {
        'default_level': 'INFO',
        'log_file': 'pynav.log',
        'console': True,
        'module_levels': {
            'pynav.io.rinex': 'DEBUG',
            'pynav.satellite.satellite_position': 'TRACE'
        }
    }
    """
    logger_config.configure_from_dict(config)
    return logger_config.setup_all_loggers()
