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
"""Resolved destination <- source correspondences held by a TypeMap."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flymap.mapping.properties import PropertyPath
from flymap.mapping.types import Condition, Converter, Provider


@dataclass(frozen=True, kw_only=True)
class Mapping:
    """Base mapping: one destination path plus optional per-mapping callables."""

    destination_path: PropertyPath
    condition: Condition | None = None
    converter: Converter | None = None
    provider: Provider | None = None
    skipped: bool = False
    explicit: bool = False

    @property
    def destination_name(self) -> str:
        return self.destination_path.name

    @property
    def source_name(self) -> str | None:
        return None

    @property
    def source_type(self) -> Any:
        return Any

    def resolve_source(self, source: Any) -> Any:
        raise NotImplementedError


@dataclass(frozen=True, kw_only=True)
class PropertyMapping(Mapping):
    """Destination path fed from a source property path."""

    source_path: PropertyPath

    @property
    def source_name(self) -> str | None:
        return self.source_path.name

    @property
    def source_type(self) -> Any:
        return self.source_path.value_type

    def resolve_source(self, source: Any) -> Any:
        return self.source_path.resolve(source)


@dataclass(frozen=True, kw_only=True)
class ConstantMapping(Mapping):
    """Destination path fed from a literal value."""

    value: Any

    @property
    def source_type(self) -> Any:
        return type(self.value)

    def resolve_source(self, source: Any) -> Any:
        return self.value


@dataclass(frozen=True, kw_only=True)
class SourceMapping(Mapping):
    """Destination path fed from the whole source object."""

    source_root: Any = Any

    @property
    def source_type(self) -> Any:
        return self.source_root

    def resolve_source(self, source: Any) -> Any:
        return source
