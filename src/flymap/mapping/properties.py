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
"""Property discovery and property paths.

:class:`PropertyDescriber` enumerates the accessible properties of a type
(dataclass fields, Pydantic model fields, annotated attributes and
``property`` descriptors) once per type and caches the result.
:class:`PropertyPath` is an immutable route of properties from a root type
to a value, e.g. ``address.city``.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import threading
import types
import typing
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import PurePath
from typing import Any, ClassVar, Union, get_args, get_origin, get_type_hints
from uuid import UUID

from pydantic import BaseModel

from flymap.kernel.exceptions import ConfigurationException
from flymap.mapping.naming import NamingConvention

_SCALAR_TYPES: tuple[type, ...] = (
    str,
    bytes,
    bytearray,
    bool,
    int,
    float,
    complex,
    Decimal,
    date,
    datetime,
    time,
    timedelta,
    UUID,
    PurePath,
    enum.Enum,
)

_COLLECTION_TYPES: tuple[type, ...] = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.Set,
)

_MAPPING_TYPES: tuple[type, ...] = (dict, collections.abc.Mapping)


class _Unresolved:
    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED: Any = _Unresolved()
"""Returned by :meth:`PropertyPath.resolve` when an intermediate value is ``None``."""


# ---------------------------------------------------------------------------
# Type helpers
# ---------------------------------------------------------------------------


def unwrap_optional(tp: Any) -> Any:
    """``Optional[X]`` / ``X | None`` -> ``X``; anything else unchanged."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def raw_type(tp: Any) -> type | None:
    """Return the runtime class behind an annotation, or ``None`` if unknown."""
    tp = unwrap_optional(tp)
    if tp is Any or isinstance(tp, (str, typing.TypeVar, typing.ForwardRef)):
        return None
    origin = get_origin(tp)
    if origin is not None:
        return origin if isinstance(origin, type) else None
    return tp if isinstance(tp, type) else None


def is_scalar(tp: Any) -> bool:
    raw = raw_type(tp)
    return raw is not None and issubclass(raw, _SCALAR_TYPES)


def is_mapping_type(tp: Any) -> bool:
    raw = raw_type(tp)
    return raw is not None and issubclass(raw, _MAPPING_TYPES)


def is_collection(tp: Any) -> bool:
    raw = raw_type(tp)
    return (
        raw is not None
        and not issubclass(raw, _SCALAR_TYPES)
        and not issubclass(raw, _MAPPING_TYPES)
        and issubclass(raw, _COLLECTION_TYPES)
    )


def element_type(tp: Any) -> Any:
    """Declared element type of a collection (value type for mappings)."""
    args = get_args(unwrap_optional(tp))
    if not args:
        return Any
    if is_mapping_type(tp):
        return args[1] if len(args) == 2 else Any
    if raw_type(tp) is tuple and not (len(args) == 2 and args[1] is Ellipsis):
        return Any
    return args[0]


def type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)


# ---------------------------------------------------------------------------
# PropertyInfo / PropertyPath
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PropertyInfo:
    """One accessible property of a type.

    Equality is structural: two infos are equal when their names and
    declared value types are equal.

    ``stored`` marks attributes kept in instance storage without a
    guaranteed value (plain-class annotations, pydantic fields); reading an
    unset one yields ``None``. Every other read goes through ``getattr``
    unguarded so that getter failures propagate.
    """

    name: str
    value_type: Any = Any
    owner: type | None = field(default=None, compare=False, repr=False)
    readable: bool = field(default=True, compare=False)
    writable: bool = field(default=True, compare=False)
    stored: bool = field(default=False, compare=False, repr=False)

    @property
    def raw_type(self) -> type | None:
        return raw_type(self.value_type)

    def read(self, instance: Any) -> Any:
        if self.stored:
            return getattr(instance, self.name, None)
        return getattr(instance, self.name)

    def write(self, instance: Any, value: Any) -> None:
        setattr(instance, self.name, value)


@dataclass(frozen=True)
class PropertyPath:
    """Ordered route of properties from ``root_type`` to a value."""

    root_type: Any = field(compare=False)
    properties: tuple[PropertyInfo, ...] = ()

    @property
    def name(self) -> str:
        return ".".join(prop.name for prop in self.properties)

    @property
    def leaf(self) -> PropertyInfo:
        return self.properties[-1]

    @property
    def value_type(self) -> Any:
        return self.properties[-1].value_type if self.properties else self.root_type

    def append(self, prop: PropertyInfo) -> PropertyPath:
        return PropertyPath(self.root_type, (*self.properties, prop))

    def resolve(self, instance: Any) -> Any:
        """Read the value at the end of the path.

        Returns :data:`UNRESOLVED` when an intermediate node is ``None``.
        """
        current = instance
        for prop in self.properties:
            if current is None:
                return UNRESOLVED
            current = prop.read(current)
        return current

    def __len__(self) -> int:
        return len(self.properties)

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# PropertyDescriber
# ---------------------------------------------------------------------------


class PropertyDescriber:
    """Enumerates and caches the properties of arbitrary types.

    ``describe`` is deterministic for a given type; the first computed
    result is published once and shared by every caller.
    """

    def __init__(self) -> None:
        self._cache: dict[Any, tuple[PropertyInfo, ...]] = {}
        self._lock = threading.Lock()

    def describe(self, tp: Any) -> tuple[PropertyInfo, ...]:
        cls = raw_type(tp)
        if cls is None:
            return ()
        cached = self._cache.get(cls)
        if cached is not None:
            return cached
        described = self._describe(cls)
        with self._lock:
            return self._cache.setdefault(cls, described)

    def is_composite(self, tp: Any) -> bool:
        """True for types that are mapped property by property."""
        cls = raw_type(tp)
        if cls is None or cls is object:
            return False
        if issubclass(cls, _SCALAR_TYPES + _COLLECTION_TYPES + _MAPPING_TYPES):
            return False
        return bool(self.describe(cls))

    def resolve_path(
        self,
        root_type: Any,
        expression: str,
        naming: NamingConvention,
        *,
        writable: bool = False,
    ) -> PropertyPath:
        """Resolve a dotted expression such as ``address.city`` against *root_type*.

        Segments match an attribute name exactly, or failing that a single
        property whose name has the same tokens under *naming*.
        """
        side = "destination" if writable else "source"
        path = PropertyPath(root_type)
        segments = expression.split(".") if expression else []
        if not segments or any(not segment for segment in segments):
            raise ConfigurationException(f"Invalid {side} property path '{expression}'")

        for segment in segments:
            owner = path.value_type
            if path.properties and not self.is_composite(owner):
                raise ConfigurationException(
                    f"Cannot resolve {side} path '{expression}': '{path.name}' of type {type_name(owner)} "
                    "has no properties"
                )
            props = self.describe(owner)
            matches = [prop for prop in props if prop.name == segment]
            if not matches:
                tokens = naming(segment)
                matches = [prop for prop in props if naming(prop.name) == tokens]
            if not matches:
                raise ConfigurationException(
                    f"Invalid {side} path '{expression}': {type_name(owner)} has no property '{segment}'"
                )
            if len(matches) > 1:
                names = ", ".join(prop.name for prop in matches)
                raise ConfigurationException(
                    f"Ambiguous {side} path '{expression}': '{segment}' matches {names} on {type_name(owner)}"
                )
            prop = matches[0]
            if writable and not prop.writable:
                raise ConfigurationException(f"Destination property '{prop.name}' of {type_name(owner)} is read-only")
            if not writable and not prop.readable:
                raise ConfigurationException(f"Source property '{prop.name}' of {type_name(owner)} is not readable")
            path = path.append(prop)
        return path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _describe(self, cls: type) -> tuple[PropertyInfo, ...]:
        if cls is object or issubclass(cls, _SCALAR_TYPES + _COLLECTION_TYPES + _MAPPING_TYPES):
            return ()
        hints = _type_hints(cls)

        if dataclasses.is_dataclass(cls):
            frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
            props = [
                PropertyInfo(f.name, hints.get(f.name, Any), cls, writable=not frozen)
                for f in dataclasses.fields(cls)
                if not f.name.startswith("_")
            ]
        elif issubclass(cls, BaseModel):
            frozen = bool(cls.model_config.get("frozen"))
            props = [
                PropertyInfo(name, info.annotation, cls, writable=not frozen, stored=True)
                for name, info in cls.model_fields.items()
                if not name.startswith("_")
            ]
        else:
            props = [
                PropertyInfo(name, tp, cls, stored=True)
                for name, tp in hints.items()
                if not name.startswith("_") and get_origin(tp) is not ClassVar and tp is not ClassVar
            ]

        seen = {prop.name for prop in props}
        descriptors: dict[str, property] = {}
        for klass in reversed(cls.__mro__):
            if klass is object or klass is BaseModel:
                continue
            for name, attr in vars(klass).items():
                if isinstance(attr, property) and not name.startswith("_"):
                    descriptors[name] = attr
        for name, descriptor in descriptors.items():
            if name in seen:
                continue
            props.append(
                PropertyInfo(
                    name,
                    _return_type(descriptor),
                    cls,
                    readable=descriptor.fget is not None,
                    writable=descriptor.fset is not None,
                )
            )
        return tuple(props)


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls)
    except (NameError, TypeError):
        # Unresolvable forward references: keep the names, lose the types.
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            for name in vars(klass).get("__annotations__", {}):
                hints[name] = Any
        return hints


def _return_type(descriptor: property) -> Any:
    if descriptor.fget is None:
        return Any
    try:
        return get_type_hints(descriptor.fget).get("return", Any)
    except (NameError, TypeError):
        return Any


DEFAULT_DESCRIBER = PropertyDescriber()
"""Process-wide describer shared by engines that are not given their own."""
