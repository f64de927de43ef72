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
"""LoggingPort — the hexagonal port for library logging."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from flymap.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Port defining the logging contract for flymap."""

    def configure(self, config: Config) -> None: ...
    def get_logger(self, name: str) -> Any: ...
    def set_level(self, name: str, level: str) -> None: ...


@dataclass(frozen=True)
class LoggingSettings:
    """Logging options read from the ``flymap.logging`` section."""

    root_level: str = "INFO"
    format: str = "console"
    module_levels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Config) -> LoggingSettings:
        level_section = dict(config.get_section("flymap.logging.level"))
        root_level = str(level_section.pop("root", "INFO")).upper()
        return cls(
            root_level=root_level,
            format=str(config.get("flymap.logging.format", "console")).lower(),
            module_levels={k: str(v).upper() for k, v in level_section.items()},
        )
