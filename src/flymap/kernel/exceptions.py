"""Unified exception hierarchy for flymap.

All library exceptions inherit from FlyMapException, enabling unified
error handling: catch FlyMapException to handle every mapping failure,
or catch a specific subclass for targeted handling.

Categories:
- InvalidArgumentException: a required argument was ``None`` or malformed
- ConfigurationException: explicit mappings that do not resolve
- ValidationException: destination properties left unmapped
- MappingException: failures while executing a mapping plan
"""

from __future__ import annotations

from collections.abc import Sequence


# =============================================================================
# Base Exception
# =============================================================================


class FlyMapException(Exception):
    """Base exception for all flymap errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "MAPPING_ERROR").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Argument and configuration errors
# =============================================================================


class InvalidArgumentException(FlyMapException, ValueError):
    """A required argument to a public operation was missing or invalid."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        self.argument = argument
        super().__init__(
            message or f"'{argument}' must not be None",
            code="INVALID_ARGUMENT",
            context={"argument": argument},
        )


def require_not_none(value: object, argument: str) -> None:
    """Raise :class:`InvalidArgumentException` when *value* is ``None``."""
    if value is None:
        raise InvalidArgumentException(argument)


class ConfigurationException(FlyMapException):
    """Explicit mappings or engine settings that cannot be resolved.

    All problems found in one configuration step are reported together.
    """

    def __init__(self, errors: Sequence[str] | str) -> None:
        self.errors: list[str] = [errors] if isinstance(errors, str) else list(errors)
        lines = ["Configuration errors:"]
        lines.extend(f"  {i}) {error}" for i, error in enumerate(self.errors, start=1))
        super().__init__("\n".join(lines), code="CONFIGURATION_ERROR", context={"errors": self.errors})


# =============================================================================
# Validation and runtime errors
# =============================================================================


class ValidationException(FlyMapException):
    """Destination properties remain unmapped after implicit and explicit resolution."""

    def __init__(self, type_names: Sequence[str], unmapped: Sequence[str]) -> None:
        self.type_names = list(type_names)
        self.unmapped = list(unmapped)
        lines = ["Unmapped destination properties found in " + ", ".join(self.type_names) + ":"]
        lines.extend(f"  - {name}" for name in self.unmapped)
        super().__init__(
            "\n".join(lines),
            code="VALIDATION_ERROR",
            context={"type_maps": self.type_names, "unmapped": self.unmapped},
        )


class MappingException(FlyMapException):
    """Failure while executing a mapping plan.

    Identifies the failing mapping by its source and destination paths and
    chains the underlying cause.
    """

    def __init__(
        self,
        message: str,
        *,
        source_path: str | None = None,
        destination_path: str | None = None,
    ) -> None:
        self.source_path = source_path
        self.destination_path = destination_path
        if destination_path is not None:
            message = f"{message} (destination: '{destination_path}', source: '{source_path or '<source>'}')"
        super().__init__(
            message,
            code="MAPPING_ERROR",
            context={"source_path": source_path, "destination_path": destination_path},
        )
