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
"""Implicit matching — proposes destination <- source path correspondences.

Matching is a pure function of the two type shapes, the naming convention,
the matching strategy and the depth bound::

    matcher = ImplicitMatcher(DEFAULT_DESCRIBER, tokenized, MatchingStrategy.STANDARD)
    for destination_path, source_path in matcher.match(Customer, CustomerDTO):
        ...

Field matching strategy:

1. Walk the destination property tree (writable properties only).
2. For every node, collect source paths whose tokens are compatible under
   the strategy and whose value types are structurally compatible.
3. Rank candidates by ``(segments, tokens)``; the shortest wins. A tie at
   the best rank is ambiguous and left unmapped.
4. Composite destinations take a unique assignable candidate whole,
   otherwise they are descended into. When descent is impossible (cycle,
   depth bound) or produces nothing, a unique composite candidate is
   mapped whole and resolved through a nested TypeMap at run time.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog

from flymap.kernel.exceptions import ConfigurationException
from flymap.mapping.naming import NamingConvention
from flymap.mapping.properties import (
    PropertyDescriber,
    PropertyPath,
    is_collection,
    is_mapping_type,
    raw_type,
)

logger = structlog.get_logger("flymap.mapping.matching")

Tokens = Sequence[tuple[str, ...]]


class MatchingStrategy(StrEnum):
    """How tokenized destination and source paths are compared.

    - ``standard``: every destination token is matched, and every source
      segment has at least one matched token.
    - ``loose``: every token of the last destination segment is found in
      the last source segment.
    - ``strict``: the flattened token sequences are identical.
    """

    STANDARD = "standard"
    LOOSE = "loose"
    STRICT = "strict"

    @classmethod
    def parse(cls, value: str | MatchingStrategy) -> MatchingStrategy:
        try:
            return cls(str(value).lower())
        except ValueError:
            known = ", ".join(member.value for member in cls)
            raise ConfigurationException(f"Unknown matching strategy '{value}' (expected one of: {known})") from None

    def matches(self, destination: Tokens, source: Tokens) -> bool:
        if not destination or not source:
            return False
        if self is MatchingStrategy.STRICT:
            return _flatten(destination) == _flatten(source)
        if self is MatchingStrategy.LOOSE:
            last_source = set(source[-1])
            return all(token in last_source for token in destination[-1])
        source_tokens = set(_flatten(source))
        destination_tokens = set(_flatten(destination))
        return all(token in source_tokens for token in destination_tokens) and all(
            any(token in destination_tokens for token in segment) for segment in source
        )


def _flatten(tokens: Tokens) -> tuple[str, ...]:
    return tuple(token for segment in tokens for token in segment)


@dataclass(frozen=True)
class _Candidate:
    path: PropertyPath
    tokens: tuple[tuple[str, ...], ...]

    @property
    def rank(self) -> tuple[int, int]:
        return len(self.path), sum(len(segment) for segment in self.tokens)


class ImplicitMatcher:
    """Stateless matcher producing ``(destination_path, source_path)`` pairs."""

    def __init__(
        self,
        describer: PropertyDescriber,
        naming: NamingConvention,
        strategy: MatchingStrategy = MatchingStrategy.STANDARD,
        max_depth: int = 5,
    ) -> None:
        self._describer = describer
        self._naming = naming
        self._strategy = strategy
        self._max_depth = max_depth

    def match(self, source_type: Any, destination_type: Any) -> list[tuple[PropertyPath, PropertyPath]]:
        candidates = self._source_candidates(source_type)
        matched: list[tuple[PropertyPath, PropertyPath]] = []
        self._match_children(
            PropertyPath(destination_type),
            (),
            (raw_type(destination_type),),
            candidates,
            matched,
        )
        return matched

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _source_candidates(self, source_type: Any) -> list[_Candidate]:
        candidates: list[_Candidate] = []

        def walk(path: PropertyPath, tokens: tuple[tuple[str, ...], ...], ancestry: tuple[Any, ...]) -> None:
            for prop in self._describer.describe(path.value_type):
                if not prop.readable:
                    continue
                child = path.append(prop)
                child_tokens = (*tokens, self._naming(prop.name))
                candidates.append(_Candidate(child, child_tokens))
                nested = prop.raw_type
                if (
                    len(child) < self._max_depth
                    and nested not in ancestry
                    and self._describer.is_composite(prop.value_type)
                ):
                    walk(child, child_tokens, (*ancestry, nested))

        walk(PropertyPath(source_type), (), (raw_type(source_type),))
        return candidates

    def _match_children(
        self,
        parent: PropertyPath,
        parent_tokens: tuple[tuple[str, ...], ...],
        ancestry: tuple[Any, ...],
        candidates: list[_Candidate],
        matched: list[tuple[PropertyPath, PropertyPath]],
    ) -> None:
        for prop in self._describer.describe(parent.value_type):
            if not prop.writable:
                continue
            path = parent.append(prop)
            tokens = (*parent_tokens, self._naming(prop.name))
            best = self._select(path, tokens, candidates)

            if not self._describer.is_composite(prop.value_type):
                if best is not None:
                    matched.append((path, best.path))
                continue

            nested = prop.raw_type
            if best is not None and _assignable(best.path.value_type, nested):
                matched.append((path, best.path))
                continue

            before = len(matched)
            if nested not in ancestry and len(path) < self._max_depth:
                self._match_children(path, tokens, (*ancestry, nested), candidates, matched)
            if len(matched) == before and best is not None:
                matched.append((path, best.path))

    def _select(
        self,
        path: PropertyPath,
        tokens: tuple[tuple[str, ...], ...],
        candidates: list[_Candidate],
    ) -> _Candidate | None:
        found = [
            candidate
            for candidate in candidates
            if self._strategy.matches(tokens, candidate.tokens)
            and self._compatible(candidate.path.value_type, path.value_type)
        ]
        if not found:
            return None
        best_rank = min(candidate.rank for candidate in found)
        best = [candidate for candidate in found if candidate.rank == best_rank]
        if len(best) > 1:
            logger.debug(
                "ambiguous_match",
                destination=path.name,
                candidates=[candidate.path.name for candidate in best],
            )
            return None
        return best[0]

    def _compatible(self, source_type: Any, destination_type: Any) -> bool:
        source_raw, destination_raw = raw_type(source_type), raw_type(destination_type)
        if source_raw is None or destination_raw is None or source_raw is object or destination_raw is object:
            return True
        if is_mapping_type(destination_type):
            return is_mapping_type(source_type)
        if is_collection(destination_type):
            return is_collection(source_type)
        if self._describer.is_composite(destination_type):
            return self._describer.is_composite(source_type) or issubclass(source_raw, destination_raw)
        if is_mapping_type(source_type) or is_collection(source_type) or self._describer.is_composite(source_type):
            return False
        return _assignable(source_type, destination_raw)


def _assignable(source_type: Any, destination_raw: type | None) -> bool:
    source_raw = raw_type(source_type)
    if source_raw is None or destination_raw is None:
        return False
    return issubclass(source_raw, destination_raw) or (destination_raw is float and source_raw is int)
