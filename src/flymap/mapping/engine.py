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
"""MappingEngine — owns the TypeMap cache and orchestrates build and execution.

Example::

    engine = MappingEngine()
    dto = engine.map(user, UserDTO)

    # Explicit overrides
    engine.type_map(User, UserDTO).add_mappings(
        PropertyMap().map("display_name", "profile.nickname")
    )

    # From configuration (flymap.mapping.*)
    engine = MappingEngine.from_config(Config.from_sources("."))
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Any, TypeVar

import structlog

from flymap.config.properties.mapping import MappingProperties
from flymap.core.config import Config
from flymap.kernel.exceptions import (
    ConfigurationException,
    ValidationException,
    require_not_none,
)
from flymap.mapping import naming
from flymap.mapping.executor import MappingExecutor
from flymap.mapping.mappings import Mapping
from flymap.mapping.matching import ImplicitMatcher, MatchingStrategy
from flymap.mapping.naming import NamingConvention
from flymap.mapping.properties import (
    DEFAULT_DESCRIBER,
    PropertyDescriber,
    element_type,
    is_collection,
    is_mapping_type,
    raw_type,
    type_name,
)
from flymap.mapping.property_map import PropertyMap
from flymap.mapping.type_map import TypeMap

logger = structlog.get_logger("flymap.mapping.engine")

S = TypeVar("S")
D = TypeVar("D")

TypeMapKey = tuple[Any, Any, str | None]


class MappingEngine:
    """Builds, caches and executes TypeMaps.

    The cache is safe for concurrent use: lookups are lock-free, and at
    most one thread builds the TypeMap for a key while others wait for
    the published result. TypeMaps still under construction are visible
    only to the building call stack, which lets self-referential type
    graphs reuse the in-progress TypeMap instead of recursing.
    """

    def __init__(
        self,
        properties: MappingProperties | None = None,
        *,
        naming_convention: NamingConvention | None = None,
        describer: PropertyDescriber | None = None,
    ) -> None:
        self.properties = properties or MappingProperties()
        if self.properties.max_depth < 1:
            raise ConfigurationException(f"max_depth must be at least 1, got {self.properties.max_depth}")
        self.naming: NamingConvention = naming_convention or naming.naming_convention(
            self.properties.naming_convention
        )
        self.matching_strategy = MatchingStrategy.parse(self.properties.matching_strategy)
        self.describer = describer or DEFAULT_DESCRIBER
        self._matcher = ImplicitMatcher(self.describer, self.naming, self.matching_strategy, self.properties.max_depth)
        self._executor = MappingExecutor(self)
        self._type_maps: dict[TypeMapKey, TypeMap[Any, Any]] = {}
        self._building: dict[TypeMapKey, TypeMap[Any, Any]] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> MappingEngine:
        """Create an engine from the ``flymap.mapping`` configuration section."""
        return cls(config.bind(MappingProperties), **kwargs)

    # ------------------------------------------------------------------
    # TypeMap cache
    # ------------------------------------------------------------------

    def type_map(self, source_type: type[S], destination_type: type[D], name: str | None = None) -> TypeMap[S, D]:
        """Return the cached TypeMap for the pair, building it on first request."""
        require_not_none(source_type, "source_type")
        require_not_none(destination_type, "destination_type")
        key: TypeMapKey = (source_type, destination_type, name)
        type_map = self._type_maps.get(key)
        if type_map is not None:
            return type_map

        with self._lock:
            type_map = self._type_maps.get(key) or self._building.get(key)
            if type_map is not None:
                return type_map
            type_map = TypeMap(source_type, destination_type, self, name)
            self._building[key] = type_map
            try:
                self._build(type_map)
                self._type_maps[key] = type_map
            finally:
                del self._building[key]

        logger.debug(
            "type_map_built",
            type_map=repr(type_map),
            mappings=len(type_map.get_mappings()),
        )
        return type_map

    def get_type_map(
        self, source_type: type[S], destination_type: type[D], name: str | None = None
    ) -> TypeMap[S, D] | None:
        """Return the cached TypeMap for the pair without building one."""
        return self._type_maps.get((source_type, destination_type, name))

    def get_type_maps(self) -> list[TypeMap[Any, Any]]:
        """Snapshot of every cached TypeMap."""
        return list(self._type_maps.values())

    def add_mappings(self, property_map: PropertyMap[S, D], name: str | None = None) -> TypeMap[S, D]:
        """Apply *property_map* to the TypeMap of its declared source/destination types."""
        require_not_none(property_map, "property_map")
        if property_map.source_type is None or property_map.destination_type is None:
            raise ConfigurationException(
                f"{type(property_map).__name__} must declare source_type and destination_type"
            )
        return self.type_map(property_map.source_type, property_map.destination_type, name).add_mappings(
            property_map
        )

    def clear(self) -> None:
        """Drop every cached TypeMap."""
        with self._lock:
            self._type_maps.clear()

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def map(self, source: Any, destination: Any, name: str | None = None) -> Any:
        """Map *source* to a destination type (new instance) or into a destination object."""
        require_not_none(source, "source")
        require_not_none(destination, "destination")
        if isinstance(destination, type):
            return self.type_map(type(source), destination, name).map(source)
        return self.type_map(type(source), type(destination), name).map(source, destination)

    def validate(self) -> None:
        """Validate every cached TypeMap, reporting all unmapped properties together."""
        failed: list[str] = []
        unmapped: list[str] = []
        for type_map in self.get_type_maps():
            missing = type_map.get_unmapped_properties()
            if missing:
                failed.append(repr(type_map))
                prefix = type_name(type_map.destination_type)
                unmapped.extend(f"{prefix}.{prop.name}" for prop in missing)
        if failed:
            raise ValidationException(failed, unmapped)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build(self, type_map: TypeMap[Any, Any]) -> None:
        if self.properties.implicit_matching:
            type_map._add_implicit(self._matcher.match(type_map.source_type, type_map.destination_type))
        else:
            type_map._add_implicit([])
        self._prepare_nested(type_map, type_map.get_mappings())

    def _prepare_nested(self, type_map: TypeMap[Any, Any], mappings: Iterable[Mapping]) -> None:
        """Eagerly build TypeMaps for composite values that differ in type."""
        for mapping in mappings:
            if mapping.skipped or mapping.converter is not None:
                continue
            source_type = mapping.source_type
            destination_type = mapping.destination_path.value_type
            if (is_collection(source_type) and is_collection(destination_type)) or (
                is_mapping_type(source_type) and is_mapping_type(destination_type)
            ):
                source_type, destination_type = element_type(source_type), element_type(destination_type)
            source_raw, destination_raw = raw_type(source_type), raw_type(destination_type)
            if (
                source_raw is None
                or destination_raw is None
                or issubclass(source_raw, destination_raw)
                or not self.describer.is_composite(source_raw)
                or not self.describer.is_composite(destination_raw)
            ):
                continue
            self.type_map(source_raw, destination_raw)

    def _execute(self, type_map: TypeMap[Any, Any], source: Any, destination: Any) -> Any:
        return self._executor.execute(type_map, source, destination)
