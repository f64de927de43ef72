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
"""StdlibLoggingAdapter — LoggingPort for hosts that only use stdlib logging.

Structured calls are flattened into a single message::

    logger.debug("type_map_built", mappings=4)  ->  "type_map_built | mappings=4"
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from flymap.core.config import Config
from flymap.logging.port import LoggingSettings

_FORMATS = {
    "json": '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
    "console": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
}


def _render(event: str, fields: dict[str, Any]) -> str:
    if not fields:
        return event
    return f"{event} | " + " ".join(f"{key}={value}" for key, value in fields.items())


class _EventLogger:
    """Accepts ``logger.info(event, **fields)`` and forwards to a stdlib logger."""

    __slots__ = ("_target",)

    def __init__(self, target: logging.Logger) -> None:
        self._target = target

    def debug(self, event: str, **fields: Any) -> None:
        self._target.debug(_render(event, fields))

    def info(self, event: str, **fields: Any) -> None:
        self._target.info(_render(event, fields))

    def warning(self, event: str, **fields: Any) -> None:
        self._target.warning(_render(event, fields))

    def error(self, event: str, **fields: Any) -> None:
        self._target.error(_render(event, fields))

    def exception(self, event: str, **fields: Any) -> None:
        self._target.exception(_render(event, fields))


class StdlibLoggingAdapter:
    def __init__(self) -> None:
        self.settings = LoggingSettings()

    def configure(self, config: Config) -> None:
        self.settings = LoggingSettings.from_config(config)
        logging.basicConfig(
            format=_FORMATS.get(self.settings.format, _FORMATS["console"]),
            stream=sys.stdout,
            level=logging.getLevelNamesMapping().get(self.settings.root_level, logging.INFO),
            force=True,
        )
        for name, level in self.settings.module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return _EventLogger(logging.getLogger(name))

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
