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
"""Naming conventions — tokenizers used to compare property names.

A naming convention is any callable turning a property name into an
ordered tuple of lower-case tokens. Two names match when their tokens
match, so ``firstName``, ``first_name`` and ``FirstName`` all become
``("first", "name")`` under the default ``tokenized`` convention.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from flymap.kernel.exceptions import ConfigurationException

NamingConvention = Callable[[str], tuple[str, ...]]

_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATOR_RE = re.compile(r"[_\-.\s]+")


def tokenized(name: str) -> tuple[str, ...]:
    """Split on case changes, digits and any separator (``_``, ``-``, ``.``, spaces)."""
    return tuple(token.lower() for token in _WORD_RE.findall(name))


def camel_case(name: str) -> tuple[str, ...]:
    """Split on case changes only: ``firstName`` -> ``("first", "name")``."""
    return tuple(token.lower() for token in _CAMEL_BOUNDARY_RE.sub(" ", name).split())


def snake_case(name: str) -> tuple[str, ...]:
    """Split on separators only: ``first_name`` -> ``("first", "name")``."""
    return tuple(token.lower() for token in _SEPARATOR_RE.split(name) if token)


def none(name: str) -> tuple[str, ...]:
    """Treat the whole name as one case-sensitive token."""
    return (name,)


NAMING_CONVENTIONS: dict[str, NamingConvention] = {
    "tokenized": tokenized,
    "camel_case": camel_case,
    "snake_case": snake_case,
    "none": none,
}


def naming_convention(name: str) -> NamingConvention:
    """Look up a built-in naming convention by its configuration name."""
    try:
        return NAMING_CONVENTIONS[name.lower()]
    except KeyError:
        known = ", ".join(sorted(NAMING_CONVENTIONS))
        raise ConfigurationException(f"Unknown naming convention '{name}' (expected one of: {known})") from None
