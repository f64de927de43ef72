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
"""Engine bootstrap — configuration, logging, then a ready MappingEngine."""

from __future__ import annotations

from pathlib import Path

from flymap.core.config import Config
from flymap.logging.port import LoggingPort
from flymap.logging.structlog_adapter import StructlogAdapter
from flymap.mapping.engine import MappingEngine


def create_engine(
    base_dir: str | Path | None = None,
    active_profiles: list[str] | None = None,
    logging_port: LoggingPort | None = None,
) -> MappingEngine:
    """Load configuration, configure logging and build a MappingEngine.

    With no *base_dir* only the library defaults (plus ``FLYMAP_*``
    environment overrides) are used.
    """
    if base_dir is not None:
        config = Config.from_sources(base_dir, active_profiles=active_profiles)
    else:
        config = Config(Config.load_defaults())

    adapter = logging_port or StructlogAdapter()
    adapter.configure(config)
    engine = MappingEngine.from_config(config)

    adapter.get_logger("flymap.core").info(
        "engine_created",
        sources=config.loaded_sources,
        naming_convention=engine.properties.naming_convention,
        matching_strategy=engine.matching_strategy.value,
    )
    return engine
