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
"""MappingExecutor — runs a TypeMap's plan against concrete objects.

Execution order for one ``map`` call:

1. Obtain a destination through the TypeMap provider (default: no-arg
   constructor) when none was supplied.
2. A type-level converter replaces the whole traversal.
3. A false type-level condition makes the call a no-op.
4. Every mapping runs in plan order: condition, source read (``None``
   intermediates skip the mapping), converter or nested mapping, write
   (missing intermediate containers are created).

Failures inside user callables or property writes abort the call with a
MappingException; earlier writes are not rolled back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from flymap.kernel.exceptions import MappingException
from flymap.mapping.mappings import Mapping
from flymap.mapping.properties import (
    UNRESOLVED,
    PropertyPath,
    element_type,
    is_collection,
    is_mapping_type,
    raw_type,
    type_name,
)
from flymap.mapping.types import MappingContext, Provider, TypeMapState

if TYPE_CHECKING:
    from flymap.mapping.engine import MappingEngine
    from flymap.mapping.type_map import TypeMap


class MappingExecutor:
    """Executes TypeMaps on behalf of a MappingEngine."""

    def __init__(self, engine: MappingEngine) -> None:
        self._engine = engine

    def execute(
        self,
        type_map: TypeMap[Any, Any],
        source: Any,
        destination: Any,
        parent: MappingContext | None = None,
    ) -> Any:
        if self._engine.properties.validate_on_map and not type_map._validated:
            type_map.validate()

        type_map._state = TypeMapState.EXECUTING
        context = MappingContext(
            source=source,
            destination=destination,
            source_type=type(source),
            destination_type=type_map.destination_type,
            engine=self._engine,
            type_map=type_map,
            parent=parent,
        )

        if destination is None:
            destination = self._provide(type_map.provider, context, type_map.destination_type)
            context.destination = destination

        if type_map.converter is not None:
            try:
                result = type_map.converter(context)
            except MappingException:
                raise
            except Exception as exc:
                raise MappingException(f"Converter for {type_map!r} failed: {exc}") from exc
            type_map._state = TypeMapState.EXECUTED
            return destination if result is None else result

        if type_map.condition is not None and not self._test(type_map.condition, context, type_map):
            type_map._state = TypeMapState.EXECUTED
            return destination

        for mapping in type_map.get_mappings():
            if not mapping.skipped:
                self._apply(type_map, mapping, source, destination, context)

        type_map._state = TypeMapState.EXECUTED
        return destination

    # ------------------------------------------------------------------
    # Per-mapping execution
    # ------------------------------------------------------------------

    def _apply(
        self,
        type_map: TypeMap[Any, Any],
        mapping: Mapping,
        source: Any,
        destination: Any,
        parent: MappingContext,
    ) -> None:
        try:
            self._apply_mapping(type_map, mapping, source, destination, parent)
        except Exception as exc:
            if isinstance(exc, MappingException) and exc.destination_path is not None:
                raise
            raise MappingException(
                f"Failed to map {type_map!r}: {exc}",
                source_path=mapping.source_name,
                destination_path=mapping.destination_name,
            ) from exc

    def _apply_mapping(
        self,
        type_map: TypeMap[Any, Any],
        mapping: Mapping,
        source: Any,
        destination: Any,
        parent: MappingContext,
    ) -> None:
        value = mapping.resolve_source(source)
        if value is UNRESOLVED:
            return
        if value is None and self._engine.properties.skip_null:
            return

        destination_path = mapping.destination_path
        current = destination_path.resolve(destination)
        context = MappingContext(
            source=value,
            destination=None if current is UNRESOLVED else current,
            source_type=type(value) if value is not None else mapping.source_type,
            destination_type=destination_path.value_type,
            engine=self._engine,
            type_map=type_map,
            mapping=mapping,
            parent=parent,
        )

        condition = mapping.condition or type_map.property_condition
        if condition is not None and not condition(context):
            return
        provider = mapping.provider or type_map.property_provider
        converter = mapping.converter or type_map.property_converter
        if converter is not None:
            value = converter(context)
        elif value is not None:
            value = self._convert(value, context, provider)
        self._write(destination_path, destination, value, provider, context)

    def _convert(self, value: Any, context: MappingContext, provider: Provider | None) -> Any:
        destination_type = context.destination_type
        destination_raw = raw_type(destination_type)
        if destination_raw is None:
            return value

        if is_mapping_type(destination_type):
            item_type = element_type(destination_type)
            if not self._engine.describer.is_composite(item_type):
                return value
            return {key: self._map_element(item, item_type, context) for key, item in value.items()}

        if is_collection(destination_type):
            item_type = element_type(destination_type)
            if not self._engine.describer.is_composite(item_type):
                return value
            items = [self._map_element(item, item_type, context) for item in value]
            container = destination_raw if destination_raw in (list, tuple, set, frozenset) else list
            return container(items)

        if isinstance(value, destination_raw) or not self._engine.describer.is_composite(destination_type):
            return value

        nested = self._engine.type_map(type(value), destination_raw)
        existing = context.destination
        if existing is None and provider is not None:
            existing = self._invoke_provider(provider, context, destination_raw)
        return self.execute(nested, value, existing, parent=context)

    def _map_element(self, item: Any, item_type: Any, context: MappingContext) -> Any:
        item_raw = raw_type(item_type)
        if item is None or item_raw is None or isinstance(item, item_raw):
            return item
        nested = self._engine.type_map(type(item), item_raw)
        return self.execute(nested, item, None, parent=context)

    def _write(
        self,
        path: PropertyPath,
        destination: Any,
        value: Any,
        provider: Provider | None,
        context: MappingContext,
    ) -> None:
        """Write *value* at *path*, creating missing intermediates.

        Intermediates come from the mapping provider, else the property
        provider, else a no-argument constructor.
        """
        target = destination
        for prop in path.properties[:-1]:
            current = prop.read(target)
            if current is None:
                current = self._provide(provider, context, prop.raw_type)
                prop.write(target, current)
            target = current
        path.leaf.write(target, value)

    # ------------------------------------------------------------------
    # Instance creation and type-level conditions
    # ------------------------------------------------------------------

    def _provide(self, provider: Provider | None, context: MappingContext, requested_type: Any) -> Any:
        instance = None if provider is None else self._invoke_provider(provider, context, requested_type)
        return _construct(requested_type) if instance is None else instance

    @staticmethod
    def _invoke_provider(provider: Provider, context: MappingContext, requested_type: Any) -> Any:
        try:
            return provider(context.derive(destination_type=requested_type))
        except MappingException:
            raise
        except Exception as exc:
            raise MappingException(f"Provider failed to create {type_name(requested_type)}: {exc}") from exc

    @staticmethod
    def _test(condition: Any, context: MappingContext, type_map: TypeMap[Any, Any]) -> bool:
        try:
            return bool(condition(context))
        except Exception as exc:
            raise MappingException(f"Condition for {type_map!r} failed: {exc}") from exc


def _construct(cls: Any) -> Any:
    if not isinstance(cls, type):
        raise MappingException(f"Cannot create an instance of {type_name(cls)}: not a concrete type")
    try:
        return cls()
    except Exception as exc:
        if issubclass(cls, BaseModel):
            return cls.model_construct()
        raise MappingException(
            f"Cannot create an instance of {type_name(cls)}: no usable no-argument constructor; "
            f"register a provider for it"
        ) from exc
