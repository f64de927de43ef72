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
"""Tests for MappingEngine — cache identity, concurrency, cycles and configuration."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import pytest

from flymap.config.properties.mapping import MappingProperties
from flymap.core.config import Config
from flymap.kernel.exceptions import ConfigurationException, ValidationException
from flymap.mapping.engine import MappingEngine
from flymap.mapping.matching import MatchingStrategy
from flymap.mapping.property_map import PropertyMap
from flymap.mapping.type_map import TypeMap


@dataclass
class Node:
    value: int = 0
    next: Node | None = None


@dataclass
class NodeView:
    value: int = 0
    next: NodeView | None = None



@dataclass
class Parent:
    name: str = ""
    child: Child | None = None


@dataclass
class Child:
    name: str = ""
    parent: Parent | None = None


@dataclass
class ParentView:
    name: str = ""
    child: ChildView | None = None


@dataclass
class ChildView:
    name: str = ""
    parent: ParentView | None = None


@dataclass
class Account:
    account_id: str = ""
    owner_name: str = ""


@dataclass
class AccountDTO:
    accountId: str = ""  # noqa: N815
    ownerName: str = ""  # noqa: N815
    balance: float = 0.0


@dataclass
class Badge:
    label: str = ""
    color: str = ""


class AccountMap(PropertyMap[Account, AccountDTO]):
    source_type = Account
    destination_type = AccountDTO

    def configure(self) -> None:
        self.map("balance", value=10.0)


@pytest.fixture
def engine() -> MappingEngine:
    return MappingEngine()


class TestTypeMapCache:
    def test_same_key_returns_same_instance(self, engine):
        first = engine.type_map(Account, AccountDTO)
        assert engine.type_map(Account, AccountDTO) is first
        assert engine.get_type_map(Account, AccountDTO) is first

    def test_names_select_distinct_type_maps(self, engine):
        default = engine.type_map(Account, AccountDTO)
        named = engine.type_map(Account, AccountDTO, "summary")

        assert named is not default
        assert named.name == "summary"
        assert repr(named) == "TypeMap[Account -> AccountDTO (summary)]"
        assert engine.get_type_map(Account, AccountDTO, "summary") is named

    def test_get_type_map_does_not_build(self, engine):
        assert engine.get_type_map(Account, AccountDTO) is None
        assert engine.get_type_maps() == []

    def test_get_type_maps_is_a_snapshot(self, engine):
        engine.type_map(Account, AccountDTO)
        snapshot = engine.get_type_maps()
        engine.type_map(Badge, Badge)

        assert len(snapshot) == 1
        assert len(engine.get_type_maps()) == 2

    def test_clear(self, engine):
        first = engine.type_map(Account, AccountDTO)
        engine.clear()

        assert engine.get_type_map(Account, AccountDTO) is None
        assert engine.type_map(Account, AccountDTO) is not first

    def test_concurrent_requests_share_one_type_map(self, engine):
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: engine.type_map(Account, AccountDTO), range(32)))

        assert all(isinstance(result, TypeMap) for result in results)
        assert len({id(result) for result in results}) == 1

    def test_concurrent_mapping_is_consistent(self, engine):
        accounts = [Account(account_id=str(i), owner_name=f"owner-{i}") for i in range(50)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            dtos = list(pool.map(lambda account: engine.map(account, AccountDTO), accounts))

        assert [dto.accountId for dto in dtos] == [str(i) for i in range(50)]
        assert [dto.ownerName for dto in dtos] == [f"owner-{i}" for i in range(50)]


class TestCycles:
    def test_self_referential_graph_builds_once(self, engine):
        type_map = engine.type_map(Node, NodeView)

        assert engine.get_type_maps() == [type_map]
        assert type_map.get_mapping("next") is not None

    def test_self_referential_graph_maps(self, engine):
        view = engine.map(Node(1, Node(2, Node(3))), NodeView)

        assert view == NodeView(1, NodeView(2, NodeView(3)))

    def test_mutually_referential_graph_maps(self, engine):
        view = engine.map(Parent("p", Child("c", Parent("q"))), ParentView)

        assert view == ParentView("p", ChildView("c", ParentView("q")))
        assert engine.get_type_map(Child, ChildView) is not None


class TestEngineLevelOperations:
    def test_add_mappings_uses_declared_types(self, engine):
        type_map = engine.add_mappings(AccountMap())

        assert type_map is engine.type_map(Account, AccountDTO)
        assert type_map.map(Account("a-1", "Ada")) == AccountDTO("a-1", "Ada", 10.0)

    def test_add_mappings_requires_declared_types(self, engine):
        with pytest.raises(ConfigurationException, match="must declare source_type and destination_type"):
            engine.add_mappings(PropertyMap().map("balance", value=1.0))

    def test_map_into_existing_instance(self, engine):
        destination = AccountDTO(balance=5.0)
        result = engine.map(Account("a-2", "Grace"), destination)

        assert result is destination
        assert destination == AccountDTO("a-2", "Grace", 5.0)

    def test_validate_aggregates_every_type_map(self, engine):
        engine.type_map(Account, AccountDTO)
        engine.type_map(Badge, Badge)
        engine.type_map(Node, NodeView)

        with pytest.raises(ValidationException) as exc_info:
            engine.validate()

        assert exc_info.value.unmapped == ["AccountDTO.balance"]
        assert exc_info.value.type_names == ["TypeMap[Account -> AccountDTO]"]

    def test_validate_passes_when_everything_is_mapped(self, engine):
        engine.add_mappings(AccountMap())
        engine.type_map(Badge, Badge)
        engine.validate()


class TestConfiguration:
    def test_defaults(self, engine):
        assert engine.properties == MappingProperties()
        assert engine.matching_strategy is MatchingStrategy.STANDARD

    def test_from_config(self):
        config = Config(
            {
                "flymap": {
                    "mapping": {
                        "naming_convention": "snake_case",
                        "matching_strategy": "strict",
                        "max_depth": 3,
                        "skip_null": True,
                    }
                }
            }
        )
        engine = MappingEngine.from_config(config)

        assert engine.properties.max_depth == 3
        assert engine.properties.skip_null is True
        assert engine.matching_strategy is MatchingStrategy.STRICT
        assert engine.naming("owner_name") == ("owner", "name")

    def test_from_config_honours_env_override(self, monkeypatch):
        monkeypatch.setenv("FLYMAP_MAPPING_MATCHING_STRATEGY", "loose")
        engine = MappingEngine.from_config(Config({}))
        assert engine.matching_strategy is MatchingStrategy.LOOSE

    def test_unknown_naming_convention(self):
        with pytest.raises(ConfigurationException, match="Unknown naming convention"):
            MappingEngine(MappingProperties(naming_convention="kebab"))

    def test_unknown_matching_strategy(self):
        with pytest.raises(ConfigurationException, match="Unknown matching strategy"):
            MappingEngine(MappingProperties(matching_strategy="fuzzy"))

    def test_max_depth_must_be_positive(self):
        with pytest.raises(ConfigurationException, match="max_depth"):
            MappingEngine(MappingProperties(max_depth=0))

    def test_custom_naming_convention(self):
        engine = MappingEngine(naming_convention=lambda name: tuple(name.lower().split("-")))
        assert engine.naming("Owner-Name") == ("owner", "name")

    def test_implicit_matching_disabled(self):
        engine = MappingEngine(MappingProperties(implicit_matching=False))
        type_map = engine.type_map(Account, AccountDTO)

        assert type_map.get_mappings() == []
        assert [prop.name for prop in type_map.get_unmapped_properties()] == ["accountId", "ownerName", "balance"]
