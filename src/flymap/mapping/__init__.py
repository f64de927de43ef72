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
"""flymap mapping — TypeMap plans, implicit matching and execution."""

from flymap.mapping.conditions import and_, is_not_null, is_null, is_type, not_, or_
from flymap.mapping.engine import MappingEngine
from flymap.mapping.mappings import ConstantMapping, Mapping, PropertyMapping, SourceMapping
from flymap.mapping.matching import ImplicitMatcher, MatchingStrategy
from flymap.mapping.naming import NAMING_CONVENTIONS, NamingConvention
from flymap.mapping.properties import DEFAULT_DESCRIBER, PropertyDescriber, PropertyInfo, PropertyPath
from flymap.mapping.property_map import PropertyBinding, PropertyMap
from flymap.mapping.type_map import TypeMap
from flymap.mapping.types import Condition, Converter, MappingContext, Provider, TypeMapState

__all__ = [
    # Engine
    "MappingEngine",
    "TypeMap",
    "TypeMapState",
    # Declarations
    "PropertyMap",
    "PropertyBinding",
    # Plan contents
    "Mapping",
    "PropertyMapping",
    "ConstantMapping",
    "SourceMapping",
    "PropertyInfo",
    "PropertyPath",
    "PropertyDescriber",
    "DEFAULT_DESCRIBER",
    # Matching
    "ImplicitMatcher",
    "MatchingStrategy",
    "NamingConvention",
    "NAMING_CONVENTIONS",
    # Callables
    "MappingContext",
    "Condition",
    "Converter",
    "Provider",
    "is_not_null",
    "is_null",
    "is_type",
    "not_",
    "and_",
    "or_",
]
