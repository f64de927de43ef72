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
"""TypeMap — the cached mapping plan for one (source, destination) type pair.

A TypeMap is created by :meth:`MappingEngine.type_map`, populated by
implicit matching, then optionally overridden with explicit bindings::

    type_map = engine.type_map(Person, PersonDTO)
    type_map.add_mappings(PropertyMap().map("age", value=42))
    type_map.set_property_condition(is_not_null)
    type_map.validate()
    dto = type_map.map(person)

A TypeMap under active configuration is not thread-safe against itself;
only the engine's cache is. ``get_mappings`` and
``get_unmapped_properties`` return snapshots.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from flymap.kernel.exceptions import (
    ConfigurationException,
    InvalidArgumentException,
    ValidationException,
    require_not_none,
)
from flymap.mapping.mappings import ConstantMapping, Mapping, PropertyMapping, SourceMapping
from flymap.mapping.properties import PropertyInfo, PropertyPath, type_name
from flymap.mapping.property_map import UNSET, PropertyBinding, PropertyMap
from flymap.mapping.types import Condition, Converter, Provider, TypeMapState

if TYPE_CHECKING:
    from flymap.mapping.engine import MappingEngine

S = TypeVar("S")
D = TypeVar("D")


class TypeMap(Generic[S, D]):
    """Ordered set of mappings plus type- and property-level callables."""

    def __init__(
        self,
        source_type: type[S],
        destination_type: type[D],
        engine: MappingEngine,
        name: str | None = None,
    ) -> None:
        self._source_type = source_type
        self._destination_type = destination_type
        self._engine = engine
        self._name = name
        self._mappings: dict[str, Mapping] = {}
        self._condition: Condition | None = None
        self._converter: Converter | None = None
        self._provider: Provider | None = None
        self._property_condition: Condition | None = None
        self._property_converter: Converter | None = None
        self._property_provider: Provider | None = None
        self._state = TypeMapState.UNBUILT
        self._validated = False

    def __repr__(self) -> str:
        label = f"{type_name(self._source_type)} -> {type_name(self._destination_type)}"
        if self._name:
            label += f" ({self._name})"
        return f"TypeMap[{label}]"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def source_type(self) -> type[S]:
        return self._source_type

    @property
    def destination_type(self) -> type[D]:
        return self._destination_type

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def state(self) -> TypeMapState:
        return self._state

    @property
    def condition(self) -> Condition | None:
        return self._condition

    @property
    def converter(self) -> Converter | None:
        return self._converter

    @property
    def provider(self) -> Provider | None:
        return self._provider

    @property
    def property_condition(self) -> Condition | None:
        return self._property_condition

    @property
    def property_converter(self) -> Converter | None:
        return self._property_converter

    @property
    def property_provider(self) -> Provider | None:
        return self._property_provider

    # ------------------------------------------------------------------
    # Plan contents
    # ------------------------------------------------------------------

    def add_mappings(self, property_map: PropertyMap[S, D]) -> TypeMap[S, D]:
        """Insert explicit mappings, replacing any mapping for the same destination.

        Every binding is resolved before the plan is touched; all
        resolution problems are reported in one ConfigurationException.
        """
        require_not_none(property_map, "property_map")
        errors: list[str] = []
        for attr, expected in (("source_type", self._source_type), ("destination_type", self._destination_type)):
            declared = getattr(property_map, attr, None)
            if declared is not None and declared is not expected:
                errors.append(
                    f"{type(property_map).__name__} declares {attr} {type_name(declared)}, "
                    f"but {self!r} expects {type_name(expected)}"
                )
        if errors:
            raise ConfigurationException(errors)

        resolved: list[Mapping] = []
        for binding in property_map.bindings:
            try:
                resolved.append(self._resolve_binding(binding))
            except ConfigurationException as exc:
                errors.extend(exc.errors)
        if errors:
            raise ConfigurationException(errors)

        for mapping in resolved:
            self._put(mapping)
        if self._state in (TypeMapState.UNBUILT, TypeMapState.BUILT):
            self._state = TypeMapState.CONFIGURED
        self._engine._prepare_nested(self, resolved)
        return self

    def get_mappings(self) -> list[Mapping]:
        """Snapshot of the current mappings in evaluation order."""
        return list(self._mappings.values())

    def get_mapping(self, destination: str) -> Mapping | None:
        """The mapping targeting the dotted *destination* path, if any."""
        return self._mappings.get(destination)

    def get_unmapped_properties(self) -> list[PropertyInfo]:
        """Writable top-level destination properties that nothing maps.

        Always empty when a type-level converter is set.
        """
        if self._converter is not None:
            return []
        covered = {mapping.destination_path.properties[0].name for mapping in self._mappings.values()}
        return [
            prop
            for prop in self._engine.describer.describe(self._destination_type)
            if prop.writable and prop.name not in covered
        ]

    def validate(self) -> None:
        """Raise ValidationException naming every unmapped top-level destination property."""
        unmapped = self.get_unmapped_properties()
        if unmapped:
            raise ValidationException([repr(self)], [prop.name for prop in unmapped])
        self._validated = True

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def map(self, source: S, destination: Any = UNSET) -> D:
        """Map *source* into a new destination, or into *destination* in place.

        Returns the destination in both forms.
        """
        require_not_none(source, "source")
        if destination is UNSET:
            destination = None
        elif destination is None:
            raise InvalidArgumentException("destination")
        return self._engine._execute(self, source, destination)

    # ------------------------------------------------------------------
    # Fluent configuration
    # ------------------------------------------------------------------

    def set_condition(self, condition: Condition) -> TypeMap[S, D]:
        require_not_none(condition, "condition")
        self._condition = condition
        return self

    def set_converter(self, converter: Converter) -> TypeMap[S, D]:
        require_not_none(converter, "converter")
        self._converter = converter
        return self

    def set_provider(self, provider: Provider) -> TypeMap[S, D]:
        require_not_none(provider, "provider")
        self._provider = provider
        return self

    def set_property_condition(self, condition: Condition) -> TypeMap[S, D]:
        require_not_none(condition, "condition")
        self._property_condition = condition
        return self

    def set_property_converter(self, converter: Converter) -> TypeMap[S, D]:
        require_not_none(converter, "converter")
        self._property_converter = converter
        return self

    def set_property_provider(self, provider: Provider) -> TypeMap[S, D]:
        require_not_none(provider, "provider")
        self._property_provider = provider
        return self

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _add_implicit(self, pairs: list[tuple[PropertyPath, PropertyPath]]) -> None:
        for destination_path, source_path in pairs:
            if destination_path.name not in self._mappings:
                self._put(PropertyMapping(destination_path=destination_path, source_path=source_path))
        self._state = TypeMapState.BUILT

    def _put(self, mapping: Mapping) -> None:
        name = mapping.destination_name
        if mapping.explicit:
            # An explicit mapping owns its whole subtree.
            prefix = name + "."
            for nested in [key for key, m in self._mappings.items() if key.startswith(prefix) and not m.explicit]:
                del self._mappings[nested]
        # Re-inserting moves a replaced mapping behind the implicit ones.
        self._mappings.pop(name, None)
        self._mappings[name] = mapping

    def _resolve_binding(self, binding: PropertyBinding) -> Mapping:
        describer = self._engine.describer
        naming = self._engine.naming
        destination_path = describer.resolve_path(
            self._destination_type, binding.destination, naming, writable=True
        )
        options: dict[str, Any] = {
            "destination_path": destination_path,
            "condition": binding.condition,
            "converter": binding.converter,
            "provider": binding.provider,
            "explicit": True,
        }
        if binding.skip:
            return Mapping(**options, skipped=True)
        if binding.is_constant:
            return ConstantMapping(**options, value=binding.value)
        if binding.source is None:
            return SourceMapping(**options, source_root=self._source_type)
        source_path = describer.resolve_path(self._source_type, binding.source, naming)
        return PropertyMapping(**options, source_path=source_path)
