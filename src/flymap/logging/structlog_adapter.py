# Copyright 2026 Firefly Software Solutions Inc.
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
"""StructlogAdapter — the default LoggingPort, rendering through structlog.

Library modules hold module-level ``structlog.get_logger("flymap....")``
loggers and emit events with key/value context::

    logger.debug("type_map_built", type_map="TypeMap[User -> UserDTO]", mappings=4)

Rendering is console (coloured key/value) or JSON, selected by
``flymap.logging.format``; levels come from ``flymap.logging.level``.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from flymap.core.config import Config
from flymap.logging.port import LoggingSettings

_COMMON_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
)


def _renderer(output_format: str) -> structlog.types.Processor:
    if output_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


class StructlogAdapter:
    """Routes flymap's structured events through structlog onto stdlib handlers."""

    def __init__(self) -> None:
        self.settings = LoggingSettings()

    def configure(self, config: Config) -> None:
        self.settings = LoggingSettings.from_config(config)
        structlog.configure(
            processors=[*_COMMON_PROCESSORS, _renderer(self.settings.format)],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=_level(self.settings.root_level),
            force=True,
        )
        for name, level in self.settings.module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(_level(level))


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)
