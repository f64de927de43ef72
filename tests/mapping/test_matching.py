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
"""Tests for MatchingStrategy and ImplicitMatcher."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from flymap.kernel.exceptions import ConfigurationException
from flymap.mapping.matching import ImplicitMatcher, MatchingStrategy
from flymap.mapping.naming import tokenized
from flymap.mapping.properties import PropertyDescriber

# ---------------------------------------------------------------------------
# Test types
# ---------------------------------------------------------------------------


@dataclass
class SnakePerson:
    first_name: str = ""
    last_name: str = ""


@dataclass
class CamelPerson:
    firstName: str = ""  # noqa: N815
    lastName: str = ""  # noqa: N815


@dataclass
class SourceAddress:
    city_name: str = ""


@dataclass
class SourceCustomer:
    full_address: SourceAddress | None = None


@dataclass
class DestinationAddress:
    city: str = ""


@dataclass
class DestinationCustomer:
    fullAddress: DestinationAddress | None = None  # noqa: N815


@dataclass
class Names:
    first_name: str = ""
    last_name: str = ""


@dataclass
class Labelled:
    name: str = ""


@dataclass
class Customer:
    name: str = ""
    user_name: str = ""


@dataclass
class Order:
    customer: Customer | None = None
    total: int = 0


@dataclass
class FlatOrder:
    customer_name: str = ""
    total: float = 0.0


@dataclass
class Node:
    value: int = 0
    next: Node | None = None


@dataclass
class NodeView:
    value: int = 0
    next: NodeView | None = None


@dataclass
class Typed:
    count: str = ""


@dataclass
class Counted:
    count: int = 0


@dataclass
class Home:
    city: str = ""


@dataclass
class Work:
    city_name: str = ""


@dataclass
class Office:
    city: str = ""


@dataclass
class HomeAndWork:
    home: Home | None = None
    work: Work | None = None


@dataclass
class HomeAndOffice:
    home: Home | None = None
    work: Office | None = None


@dataclass
class Resident:
    city_of_residence: str = ""
    home: Home | None = None


@dataclass
class Located:
    city: str = ""


def _matcher(strategy: MatchingStrategy = MatchingStrategy.STANDARD, max_depth: int = 5) -> ImplicitMatcher:
    return ImplicitMatcher(PropertyDescriber(), tokenized, strategy, max_depth)


def _pairs(source_type, destination_type, **kwargs) -> dict[str, str]:
    return {
        destination.name: source.name for destination, source in _matcher(**kwargs).match(source_type, destination_type)
    }


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestStrategies:
    def test_standard_requires_every_destination_token(self):
        assert MatchingStrategy.STANDARD.matches([("city",)], [("city", "name")])
        assert not MatchingStrategy.STANDARD.matches([("city", "zip")], [("city",)])

    def test_standard_requires_every_source_segment_to_contribute(self):
        assert not MatchingStrategy.STANDARD.matches([("name",)], [("customer",), ("name",)])
        assert MatchingStrategy.STANDARD.matches([("customer", "name")], [("customer",), ("name",)])

    def test_loose_compares_last_segments(self):
        assert MatchingStrategy.LOOSE.matches([("address",), ("city",)], [("city",)])

    def test_strict_requires_identical_tokens(self):
        assert MatchingStrategy.STRICT.matches([("first", "name")], [("first", "name")])
        assert not MatchingStrategy.STRICT.matches([("city",)], [("city", "name")])

    def test_parse(self):
        assert MatchingStrategy.parse("LOOSE") is MatchingStrategy.LOOSE
        with pytest.raises(ConfigurationException, match="Unknown matching strategy"):
            MatchingStrategy.parse("fuzzy")


class TestImplicitMatcher:
    def test_case_and_separator_insensitive_names(self):
        assert _pairs(SnakePerson, CamelPerson) == {"firstName": "first_name", "lastName": "last_name"}
        assert _pairs(CamelPerson, SnakePerson) == {"first_name": "firstName", "last_name": "lastName"}

    def test_nested_token_match(self):
        assert _pairs(SourceCustomer, DestinationCustomer) == {"fullAddress.city": "full_address.city_name"}

    def test_ambiguous_candidates_stay_unmapped(self):
        assert _pairs(Names, Labelled) == {}

    def test_shortest_candidate_wins(self):
        assert _pairs(Customer, Labelled) == {"name": "name"}

    def test_flattening(self):
        assert _pairs(Order, FlatOrder) == {"customer_name": "customer.name", "total": "total"}

    def test_self_reference_maps_whole_node(self):
        assert _pairs(Node, NodeView) == {"value": "value", "next": "next"}

    def test_incompatible_types_are_not_matched(self):
        assert _pairs(Counted, Typed) == {}

    def test_strict_strategy_rejects_partial_tokens(self):
        assert _pairs(SourceCustomer, DestinationCustomer, strategy=MatchingStrategy.STRICT) == {
            "fullAddress": "full_address"
        }

    def test_depth_bound(self):
        assert _pairs(Order, FlatOrder, max_depth=1) == {"total": "total"}

    def test_matching_is_deterministic(self):
        assert _matcher().match(Order, FlatOrder) == _matcher().match(Order, FlatOrder)


class TestCandidateRanking:
    """Candidates rank by segment count first, then by token count."""

    def test_fewer_segments_win_over_fewer_tokens(self):
        assert _pairs(Resident, Located, strategy=MatchingStrategy.LOOSE) == {"city": "city_of_residence"}

    def test_equal_segments_fewer_tokens_win(self):
        assert _pairs(HomeAndWork, Located, strategy=MatchingStrategy.LOOSE) == {"city": "home.city"}

    def test_equal_segments_and_tokens_are_ambiguous(self):
        assert _pairs(HomeAndOffice, Located, strategy=MatchingStrategy.LOOSE) == {}
