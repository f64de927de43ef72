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
"""Built-in conditions for TypeMaps and individual mappings.

Usage::

    type_map.set_property_condition(is_not_null)
    PropertyMap().map("email", "contact.email", condition=and_(is_not_null, is_type(str)))
"""

from __future__ import annotations

from flymap.mapping.types import Condition, MappingContext


def is_not_null(context: MappingContext) -> bool:
    return context.source is not None


def is_null(context: MappingContext) -> bool:
    return context.source is None


def is_type(*types: type) -> Condition:
    """Apply only when the source value is an instance of one of *types*."""

    def condition(context: MappingContext) -> bool:
        return isinstance(context.source, types)

    return condition


def not_(condition: Condition) -> Condition:
    def negated(context: MappingContext) -> bool:
        return not condition(context)

    return negated


def and_(*conditions: Condition) -> Condition:
    def combined(context: MappingContext) -> bool:
        return all(condition(context) for condition in conditions)

    return combined


def or_(*conditions: Condition) -> Condition:
    def combined(context: MappingContext) -> bool:
        return any(condition(context) for condition in conditions)

    return combined
