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
"""Mapping engine configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from flymap.core.config import config_properties


@config_properties(prefix="flymap.mapping")
@dataclass
class MappingProperties:
    """Configuration for the mapping engine (flymap.mapping.*).

    Attributes:
        naming_convention: Tokenizer used to compare property names
            (``tokenized``, ``camel_case``, ``snake_case`` or ``none``).
        matching_strategy: Token compatibility rule for implicit matching
            (``standard``, ``loose`` or ``strict``).
        max_depth: How deep property trees are explored while matching.
        implicit_matching: Whether new TypeMaps are populated by name matching.
        skip_null: Leave destination properties untouched for ``None`` source values.
        validate_on_map: Validate a TypeMap the first time it maps.
    """

    naming_convention: str = "tokenized"
    matching_strategy: str = "standard"
    max_depth: int = 5
    implicit_matching: bool = True
    skip_null: bool = False
    validate_on_map: bool = False
