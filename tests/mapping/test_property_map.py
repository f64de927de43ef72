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
"""Tests for PropertyMap — binding collection and argument checks."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from flymap.kernel.exceptions import InvalidArgumentException
from flymap.mapping.property_map import UNSET, PropertyBinding, PropertyMap


@dataclass
class Invoice:
    amount: float = 0.0


@dataclass
class InvoiceDTO:
    total: float = 0.0
    currency: str = ""
    notes: str = ""


class InvoiceMap(PropertyMap[Invoice, InvoiceDTO]):
    source_type = Invoice
    destination_type = InvoiceDTO

    def configure(self) -> None:
        self.map("total", "amount")
        self.map("currency", value="EUR")
        self.skip("notes")


class TestPropertyMap:
    def test_configure_runs_on_construction(self):
        pm = InvoiceMap()

        assert pm.bindings == (
            PropertyBinding(destination="total", source="amount"),
            PropertyBinding(destination="currency", value="EUR"),
            PropertyBinding(destination="notes", skip=True),
        )
        assert pm.source_type is Invoice
        assert pm.destination_type is InvoiceDTO

    def test_inline_types(self):
        pm = PropertyMap(Invoice, InvoiceDTO)
        assert pm.source_type is Invoice
        assert pm.destination_type is InvoiceDTO
        assert pm.bindings == ()

    def test_untyped_map(self):
        pm = PropertyMap()
        assert pm.source_type is None
        assert pm.destination_type is None

    def test_map_is_fluent(self):
        pm = PropertyMap()
        assert pm.map("total", "amount").skip("notes") is pm

    def test_binding_kinds(self):
        convert = lambda ctx: ctx.source  # noqa: E731
        bindings = PropertyMap().map("total").map("currency", value=None).map("notes", converter=convert).bindings

        assert bindings[0].source is None and not bindings[0].is_constant
        assert bindings[1].is_constant and bindings[1].value is None
        assert bindings[2].converter is convert
        assert bindings[2].value is UNSET

    def test_source_and_value_are_exclusive(self):
        with pytest.raises(InvalidArgumentException, match="both a source path and a value"):
            PropertyMap().map("total", "amount", value=1.0)

    def test_empty_destination_is_rejected(self):
        with pytest.raises(InvalidArgumentException):
            PropertyMap().map("")
        with pytest.raises(InvalidArgumentException):
            PropertyMap().skip("")

    def test_bindings_is_a_snapshot(self):
        pm = PropertyMap().map("total", "amount")
        bindings = pm.bindings
        pm.map("currency", value="EUR")
        assert len(bindings) == 1
