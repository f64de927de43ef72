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
"""PropertyMap — declarative explicit bindings for a TypeMap.

Example::

    class OrderMap(PropertyMap[Order, OrderDTO]):
        source_type = Order
        destination_type = OrderDTO

        def configure(self) -> None:
            self.map("customer_name", "customer.name")
            self.map("status", value="NEW")
            self.map("total", "amount", converter=lambda ctx: round(ctx.source, 2))
            self.skip("internal_notes")

    engine.type_map(Order, OrderDTO).add_mappings(OrderMap())

    # Or inline
    pm = PropertyMap(Order, OrderDTO).map("customer_name", "customer.name")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from flymap.kernel.exceptions import InvalidArgumentException
from flymap.mapping.types import Condition, Converter, Provider

S = TypeVar("S")
D = TypeVar("D")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class PropertyBinding:
    """One declared ``destination <- source | value`` binding.

    ``source`` is a dotted source path; ``None`` with no ``value`` binds the
    whole source object.
    """

    destination: str
    source: str | None = None
    value: Any = UNSET
    condition: Condition | None = None
    converter: Converter | None = None
    provider: Provider | None = None
    skip: bool = False

    @property
    def is_constant(self) -> bool:
        return self.value is not UNSET


class PropertyMap(Generic[S, D]):
    """Collects explicit bindings; override :meth:`configure` or call :meth:`map`."""

    source_type: type[S] | None = None
    destination_type: type[D] | None = None

    def __init__(self, source_type: type[S] | None = None, destination_type: type[D] | None = None) -> None:
        if source_type is not None:
            self.source_type = source_type
        if destination_type is not None:
            self.destination_type = destination_type
        self._bindings: list[PropertyBinding] = []
        self.configure()

    def configure(self) -> None:
        """Declare bindings in subclasses."""

    def map(
        self,
        destination: str,
        source: str | None = None,
        *,
        value: Any = UNSET,
        condition: Condition | None = None,
        converter: Converter | None = None,
        provider: Provider | None = None,
    ) -> PropertyMap[S, D]:
        """Bind *destination* to a source path, a literal *value*, or the whole source."""
        self._check_destination(destination)
        if source is not None and value is not UNSET:
            raise InvalidArgumentException("value", f"'{destination}' cannot bind both a source path and a value")
        self._bindings.append(
            PropertyBinding(
                destination=destination,
                source=source,
                value=value,
                condition=condition,
                converter=converter,
                provider=provider,
            )
        )
        return self

    def skip(self, destination: str) -> PropertyMap[S, D]:
        """Never write *destination* and do not report it as unmapped."""
        self._check_destination(destination)
        self._bindings.append(PropertyBinding(destination=destination, skip=True))
        return self

    @property
    def bindings(self) -> tuple[PropertyBinding, ...]:
        return tuple(self._bindings)

    @staticmethod
    def _check_destination(destination: str) -> None:
        if not destination:
            raise InvalidArgumentException("destination", "destination path must be a non-empty string")
