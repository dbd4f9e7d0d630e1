"""Value system for the evaluator.

Runtime values are plain Python objects drawn from a closed set: ``None``,
``bool``, ``int``, ``float``, ``str``, ``tuple`` (a sequence of values) and
``ObjectReference``.  ``kind_of`` classifies a value into that set and is
the only type probe the operators use.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from aql.model.types import ObjectReference


Value = Union[None, bool, int, float, str, tuple, ObjectReference]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class AQLExecutionError(Exception):
    """Runtime error during expression evaluation."""


class VariableNotFoundError(AQLExecutionError):
    """A name could not be resolved through scopes or the implicit ``self``."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Variable '{name}' not found")


class AQLTypeError(AQLExecutionError):
    """Operand types are incompatible with an operator or operation."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Type error: {message}")


class InvalidOperationError(AQLExecutionError):
    """Unknown operation, missing argument, or an illegal numeric operation."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid operation: {message}")


class PropertyNotFoundError(InvalidOperationError):
    """Raised by model engines when an object has no such property."""

    def __init__(self, type_name: str, property_name: str) -> None:
        self.type_name = type_name
        self.property_name = property_name
        super().__init__(f"'{type_name}' has no property '{property_name}'")


# ---------------------------------------------------------------------------
# Value kinds
# ---------------------------------------------------------------------------

class ValueKind(str, Enum):
    NULL = "Null"
    BOOLEAN = "Boolean"
    INTEGER = "Integer"
    REAL = "Real"
    STRING = "String"
    SEQUENCE = "Sequence"
    OBJECT = "Object"


def kind_of(value: object) -> ValueKind:
    """Classify a runtime value.

    ``bool`` is checked before ``int`` since it is an ``int`` subclass.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.REAL
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, tuple):
        return ValueKind.SEQUENCE
    if isinstance(value, ObjectReference):
        return ValueKind.OBJECT
    raise AQLTypeError(f"Unsupported value of type {type(value).__name__}")


def type_name(value: object) -> str:
    """Name used in error messages: the model type for objects, else the kind."""
    if isinstance(value, ObjectReference):
        return value.type_name
    return kind_of(value).value


def to_value(value: object) -> Value:
    """Normalize a collaborator-supplied object into a runtime value.

    Lists become tuples (recursively); anything outside the value set
    raises ``AQLTypeError``.
    """
    if isinstance(value, (list, tuple)):
        return tuple(to_value(v) for v in value)
    kind_of(value)
    return value


def as_bool(value: Value) -> bool | None:
    """Strict boolean view: ``None`` for anything that is not a boolean."""
    if isinstance(value, bool):
        return value
    return None


def as_real(value: Value) -> float | None:
    """Integer widens to Real; every other kind has no real view."""
    kind = kind_of(value)
    if kind == ValueKind.REAL:
        return value
    if kind == ValueKind.INTEGER:
        return float(value)
    return None


def as_sequence(value: Value) -> tuple:
    """Sequences pass through; any other non-null value becomes a singleton."""
    if isinstance(value, tuple):
        return value
    return (value,)


# ---------------------------------------------------------------------------
# Textual representation
# ---------------------------------------------------------------------------

def to_text(value: Value) -> str:
    """Render a value as text.

    This is what string interpolation emits and what ``=`` compares.
    """
    kind = kind_of(value)
    if kind == ValueKind.NULL:
        return "null"
    if kind == ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind == ValueKind.SEQUENCE:
        return "[" + ", ".join(to_text(v) for v in value) + "]"
    return str(value)
