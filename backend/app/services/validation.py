"""Input checks shared by the task services."""

import re
from enum import Enum
from typing import TypeVar

from app.core.errors import InvalidArgumentError

E = TypeVar("E", bound=Enum)

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def parse_choice(enum_cls: type[E], value, field: str) -> E:
    """Coerce ``value`` into ``enum_cls`` or raise InvalidArgumentError."""
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(str(member.value) for member in enum_cls)
        raise InvalidArgumentError(
            f"Invalid {field} '{value}'. Expected one of: {allowed}"
        ) from exc


def require_non_negative(value: int | None, field: str) -> None:
    if value is not None and value < 0:
        raise InvalidArgumentError(f"{field} must be non-negative")


def require_positive(value: int | None, field: str) -> None:
    if value is not None and value < 1:
        raise InvalidArgumentError(f"{field} must be at least 1")
