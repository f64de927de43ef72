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
"""Tests for create_engine."""

from pathlib import Path
from typing import Any

from flymap.core.bootstrap import create_engine
from flymap.core.config import Config
from flymap.mapping.engine import MappingEngine
from flymap.mapping.matching import MatchingStrategy


class RecordingLogging:
    def __init__(self) -> None:
        self.configured: list[Config] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def configure(self, config: Config) -> None:
        self.configured.append(config)

    def get_logger(self, name: str) -> Any:
        recorder = self

        class _Logger:
            def info(self, event: str, **kwargs: Any) -> None:
                recorder.events.append((event, kwargs))

        return _Logger()

    def set_level(self, name: str, level: str) -> None:
        pass


class TestCreateEngine:
    def test_library_defaults(self):
        logging_port = RecordingLogging()
        engine = create_engine(logging_port=logging_port)

        assert isinstance(engine, MappingEngine)
        assert engine.matching_strategy is MatchingStrategy.STANDARD
        assert len(logging_port.configured) == 1
        event, fields = logging_port.events[0]
        assert event == "engine_created"
        assert fields["naming_convention"] == "tokenized"
        assert fields["matching_strategy"] == "standard"

    def test_reads_files_and_profiles(self, tmp_path: Path):
        (tmp_path / "flymap.yaml").write_text("flymap:\n  mapping:\n    max_depth: 2\n")
        (tmp_path / "flymap-strict.yaml").write_text("flymap:\n  mapping:\n    matching_strategy: strict\n")
        logging_port = RecordingLogging()

        engine = create_engine(tmp_path, active_profiles=["strict"], logging_port=logging_port)

        assert engine.properties.max_depth == 2
        assert engine.matching_strategy is MatchingStrategy.STRICT
        assert len(logging_port.events[0][1]["sources"]) == 3

    def test_default_logging_adapter(self):
        engine = create_engine()
        assert engine.properties.naming_convention == "tokenized"
