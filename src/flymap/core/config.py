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
"""Engine configuration: layered YAML/TOML sources, env overrides, binding.

Keys are dotted paths into the merged tree, e.g. ``flymap.mapping.max_depth``.
Lookup order for :meth:`Config.get`:

1. ``FLYMAP_*`` environment variable (``flymap.mapping.max_depth`` ->
   ``FLYMAP_MAPPING_MAX_DEPTH``)
2. merged file data (profiles over project files over library defaults)
3. the caller's default
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, TypeVar, get_type_hints

import yaml  # type: ignore[import-untyped]

T = TypeVar("T")

_PREFIX_ATTR = "__flymap_config_prefix__"
_FILE_STEM = "flymap"
_SUFFIXES = (".yaml", ".toml")
_ENV_PREFIX = "FLYMAP_"
_MAX_INTERPOLATION_DEPTH = 10
_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Attach a configuration prefix to a dataclass or pydantic model.

    Example::

        @config_properties(prefix="flymap.mapping")
        @dataclass
        class MappingProperties:
            max_depth: int = 5
    """

    def register(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return register


def _read_file(path: Path) -> dict[str, Any]:
    if path.suffix == ".toml":
        with path.open("rb") as stream:
            return tomllib.load(stream)
    with path.open() as stream:
        return yaml.safe_load(stream) or {}


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in overlay.items():
        existing = result.get(key)
        result[key] = _merge(existing, value) if isinstance(existing, dict) and isinstance(value, dict) else value
    return result


def _env_name(key: str) -> str:
    return _ENV_PREFIX + key.removeprefix("flymap.").replace(".", "_").replace("-", "_").upper()


def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


_COERCIONS: dict[Any, Callable[[str], Any]] = {int: int, float: float, bool: _to_bool}


class Config:
    """Merged configuration tree with dotted-key access."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """Descriptions of the merged sources, lowest precedence first."""
        return list(self._sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_sources(
        cls,
        base_dir: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Merge library defaults with the ``flymap`` files found under *base_dir*.

        Files are looked up in ``config/`` first, then in *base_dir* itself;
        ``flymap-<profile>`` overlays follow in the order the profiles are
        given. A later file overrides an earlier one key by key.
        """
        root = Path(base_dir)
        config = cls(cls.load_defaults() if load_defaults else {})
        if load_defaults:
            config._sources.append("flymap-defaults.yaml (library defaults)")
        for path, label in _candidate_files(root, active_profiles or []):
            if path.is_file():
                config._data = _merge(config._data, _read_file(path))
                config._sources.append(f"{path}{label}")
        return config

    @staticmethod
    def load_defaults() -> dict[str, Any]:
        """Library defaults shipped in ``flymap/resources/flymap-defaults.yaml``."""
        resource = importlib.resources.files("flymap.resources").joinpath("flymap-defaults.yaml")
        return yaml.safe_load(resource.read_text(encoding="utf-8")) or {}

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Value at dotted *key*; ``${...}`` placeholders in strings are expanded."""
        override = os.environ.get(_env_name(key))
        if override is not None:
            return override
        value = self._find(key)
        if value is None:
            return default
        if isinstance(value, str) and "${" in value:
            return self._interpolate(value, 0)
        return value

    def get_section(self, prefix: str) -> dict[str, Any]:
        section = self._find(prefix)
        return section if isinstance(section, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Build a ``@config_properties`` class from its configuration section.

        Pydantic models are validated from the raw section. Dataclass fields
        are read one by one through :meth:`get`, so environment overrides
        apply; string values are coerced for ``int``, ``float`` and ``bool``
        fields.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{config_cls.__name__} is not decorated with @config_properties")

        from pydantic import BaseModel, ValidationError

        if issubclass(config_cls, BaseModel):
            try:
                return config_cls.model_validate(self.get_section(prefix))
            except ValidationError as exc:
                raise ValueError(
                    f"Configuration validation failed for '{config_cls.__name__}' (prefix='{prefix}'):\n{exc}"
                ) from exc

        annotations = get_type_hints(config_cls)
        values: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            value = self.get(f"{prefix}.{field.name}")
            if value is None:
                continue
            coerce = _COERCIONS.get(annotations.get(field.name))
            values[field.name] = coerce(value) if coerce is not None and isinstance(value, str) else value
        return config_cls(**values)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _interpolate(self, text: str, depth: int) -> str:
        # ${name} or ${name:default}; name is an env var or a config key.
        if depth > _MAX_INTERPOLATION_DEPTH:
            raise ValueError(f"Placeholders in '{text}' nest too deeply; check for circular references")

        def substitute(match: re.Match[str]) -> str:
            name, has_default, fallback = match.group(1).partition(":")
            if name in os.environ:
                return os.environ[name]
            found = self._find(name)
            if found is None:
                if has_default:
                    return fallback
                raise ValueError(
                    f"Cannot resolve placeholder '${{{match.group(1)}}}': not found in environment or config"
                )
            found = str(found)
            return self._interpolate(found, depth + 1) if "${" in found else found

        return _PLACEHOLDER.sub(substitute, text)


def _candidate_files(root: Path, profiles: list[str]) -> Iterator[tuple[Path, str]]:
    stems = [(_FILE_STEM, "")] + [(f"{_FILE_STEM}-{profile}", f" (profile: {profile})") for profile in profiles]
    for stem, label in stems:
        for directory in (root / "config", root):
            for suffix in _SUFFIXES:
                yield directory / f"{stem}{suffix}", label
