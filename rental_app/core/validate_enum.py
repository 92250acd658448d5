from enum import Enum
from typing import Type, TypeVar

from .exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def validate_enum(value: str | Enum, enum_cls: Type[E], *, field: str) -> E:
    """Coerce a raw status/type string to ``enum_cls`` by value or member name."""
    if isinstance(value, enum_cls):
        return value

    if isinstance(value, str):
        raw = value.strip()
        by_value = {str(member.value).lower(): member for member in enum_cls}
        member = by_value.get(raw.lower()) or enum_cls.__members__.get(raw.upper())
        if member is not None:
            return member

    allowed = ", ".join(str(member.value) for member in enum_cls)
    raise ValidationError(f"Invalid {field}: {value}. Allowed values: {allowed}")
