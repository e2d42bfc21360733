"""Core jaesve data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

NO_VALUE = "NO_VALUE"
NULL_VALUE = "null"


class JType(str, Enum):
    """Structural type of a JSON value."""

    OBJECT = "Object"
    ARRAY = "Array"
    STRING = "String"
    NUMBER = "Number"
    BOOL = "Bool"
    NULL = "Null"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def of(cls, value: Any) -> "JType":
        """Map a parsed JSON value to its type tag."""
        # bool is a subclass of int, so it must be checked first
        if isinstance(value, bool):
            return cls.BOOL
        if value is None:
            return cls.NULL
        if isinstance(value, dict):
            return cls.OBJECT
        if isinstance(value, list):
            return cls.ARRAY
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, (int, float)):
            return cls.NUMBER
        raise TypeError(f"Not a JSON value: {type(value).__name__}")

    @property
    def is_container(self) -> bool:
        return self in (JType.OBJECT, JType.ARRAY)


def render_leaf(value: Any) -> str:
    """Render a leaf JSON value as text."""
    kind = JType.of(value)
    if kind is JType.STRING:
        return value
    if kind is JType.BOOL:
        return "true" if value else "false"
    if kind is JType.NULL:
        return NULL_VALUE
    if kind is JType.NUMBER:
        return repr(value) if isinstance(value, float) else str(value)
    raise ValueError(f"{kind} is not a leaf type")


@dataclass(slots=True, frozen=True)
class Record:
    """One flattened (pointer, type, value) entry of a document."""

    identifier: int
    pointer: str
    type: JType
    value: str | None


@dataclass(slots=True, frozen=True)
class Document:
    """A parsed JSON value paired with its identifier."""

    identifier: int
    value: Any
    base_path: str = ""
