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
"""Mapping context and the Condition / Converter / Provider callables."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flymap.mapping.engine import MappingEngine
    from flymap.mapping.mappings import Mapping
    from flymap.mapping.type_map import TypeMap


@dataclass
class MappingContext:
    """Everything a Condition, Converter or Provider may inspect.

    For property-level calls ``source`` is the resolved source value and
    ``destination`` the current destination value (``None`` if unset).
    For type-level calls they are the whole source and destination objects.
    For providers ``destination_type`` is the type being requested.
    """

    source: Any
    destination: Any
    source_type: Any
    destination_type: Any
    engine: MappingEngine
    type_map: TypeMap[Any, Any] | None = None
    mapping: Mapping | None = None
    parent: MappingContext | None = None

    def map(self, source: Any, destination_type: Any) -> Any:
        """Map *source* to a new *destination_type* instance through the engine."""
        return self.engine.map(source, destination_type)

    def derive(self, **changes: Any) -> MappingContext:
        return dataclasses.replace(self, **changes)


Condition = Callable[[MappingContext], bool]
"""Predicate deciding whether a mapping (or a whole type map) applies."""

Converter = Callable[[MappingContext], Any]
"""Returns the destination value for ``context.source``."""

Provider = Callable[[MappingContext], Any]
"""Returns a new instance of ``context.destination_type`` (``None`` falls back to construction)."""


class TypeMapState(StrEnum):
    """Lifecycle of a TypeMap."""

    UNBUILT = "unbuilt"
    BUILT = "built"
    CONFIGURED = "configured"
    EXECUTING = "executing"
    EXECUTED = "executed"
