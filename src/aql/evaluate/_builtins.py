"""Standard operation library for call expressions.

Three dispatch tables keyed by method name:

- ``STRING_OPERATIONS``: ``fn(source: str, args) -> Value``
- ``SEQUENCE_OPERATIONS``: ``fn(source: tuple, args) -> Value``
- ``STANDALONE_FUNCTIONS``: ``fn(args) -> Value`` (calls without a source)

plus the OCL type-reflection checks, which take a type *name* rather than
an evaluated argument.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from aql.model.types import ObjectReference

from ._operators import equals
from ._values import (
    AQLTypeError,
    InvalidOperationError,
    Value,
    ValueKind,
    as_real,
    kind_of,
    to_text,
)


def _string_arg(method: str, args: Sequence[Value], index: int = 0) -> str:
    if len(args) <= index or kind_of(args[index]) != ValueKind.STRING:
        raise AQLTypeError(f"{method} requires string argument")
    return args[index]


def _int_arg(method: str, args: Sequence[Value], index: int = 0) -> int:
    if len(args) <= index or kind_of(args[index]) != ValueKind.INTEGER:
        raise AQLTypeError(f"{method} requires integer argument")
    return args[index]


# ---------------------------------------------------------------------------
# String operations
# ---------------------------------------------------------------------------

def _substring(source: str, args: Sequence[Value]) -> str:
    """substring(start, end): half-open range of character indexes."""
    if len(args) < 2:
        raise AQLTypeError("substring requires two integer arguments")
    start = _int_arg("substring", args, 0)
    end = _int_arg("substring", args, 1)
    if not 0 <= start <= end <= len(source):
        raise AQLTypeError(
            f"substring range {start}..{end} out of bounds for length {len(source)}"
        )
    return source[start:end]


# Tab plus the Unicode space separators (category Zs); line breaks are kept
_HORIZONTAL_WHITESPACE = (
    "\t\u0020\u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u202f\u205f\u3000"
)


def _replace(source: str, args: Sequence[Value]) -> str:
    if len(args) < 2:
        raise AQLTypeError("replace requires two string arguments")
    target = _string_arg("replace", args, 0)
    replacement = _string_arg("replace", args, 1)
    if not target:
        return source
    return source.replace(target, replacement)


STRING_OPERATIONS: dict[str, Callable[[str, Sequence[Value]], Value]] = {
    "size": lambda s, _: len(s),
    "length": lambda s, _: len(s),
    "toUpperCase": lambda s, _: s.upper(),
    "upper": lambda s, _: s.upper(),
    "toLowerCase": lambda s, _: s.lower(),
    "lower": lambda s, _: s.lower(),
    "substring": _substring,
    "startsWith": lambda s, a: s.startswith(_string_arg("startsWith", a)),
    "endsWith": lambda s, a: s.endswith(_string_arg("endsWith", a)),
    "contains": lambda s, a: _string_arg("contains", a) in s,
    "trim": lambda s, _: s.strip(_HORIZONTAL_WHITESPACE),
    "replace": _replace,
}


# ---------------------------------------------------------------------------
# Sequence operations (method-call form)
# ---------------------------------------------------------------------------

def _at(source: tuple, args: Sequence[Value]) -> Value:
    """at(index): 0-based element access, null when out of range."""
    index = _int_arg("at", args)
    if 0 <= index < len(source):
        return source[index]
    return None


def _element_arg(method: str, args: Sequence[Value]) -> Value:
    if not args:
        raise AQLTypeError(f"{method} requires an argument")
    return args[0]


def _index_of(source: tuple, args: Sequence[Value]) -> int:
    element = _element_arg("indexOf", args)
    for index, candidate in enumerate(source):
        if equals(candidate, element):
            return index
    return -1


def _includes(source: tuple, args: Sequence[Value]) -> bool:
    element = _element_arg("includes", args)
    return any(equals(candidate, element) for candidate in source)


SEQUENCE_OPERATIONS: dict[str, Callable[[tuple, Sequence[Value]], Value]] = {
    "size": lambda s, _: len(s),
    "isEmpty": lambda s, _: not s,
    "notEmpty": lambda s, _: bool(s),
    "first": lambda s, _: s[0] if s else None,
    "last": lambda s, _: s[-1] if s else None,
    "at": _at,
    "indexOf": _index_of,
    "includes": _includes,
    "contains": _includes,
}


# ---------------------------------------------------------------------------
# Standalone functions
# ---------------------------------------------------------------------------

def _extremum(name: str, pick: Callable[[object, object], object]):
    def apply(args: Sequence[Value]) -> Value:
        if len(args) != 2:
            raise AQLTypeError(f"{name} requires exactly 2 arguments")
        left, right = args
        if kind_of(left) == ValueKind.INTEGER and kind_of(right) == ValueKind.INTEGER:
            return pick(left, right)
        lhs, rhs = as_real(left), as_real(right)
        if lhs is None or rhs is None:
            raise AQLTypeError(f"{name} requires numeric arguments")
        return pick(lhs, rhs)
    return apply


def _abs(args: Sequence[Value]) -> Value:
    if not args:
        raise AQLTypeError("abs requires an argument")
    value = args[0]
    if kind_of(value) in (ValueKind.INTEGER, ValueKind.REAL):
        return abs(value)
    raise AQLTypeError("abs requires numeric argument")


def _to_string(args: Sequence[Value]) -> str:
    if not args:
        return "null"
    return to_text(args[0])


STANDALONE_FUNCTIONS: dict[str, Callable[[Sequence[Value]], Value]] = {
    "min": _extremum("min", min),
    "max": _extremum("max", max),
    "abs": _abs,
    "toString": _to_string,
}

_KNOWN_METHODS = frozenset(
    [*STRING_OPERATIONS, *SEQUENCE_OPERATIONS, *STANDALONE_FUNCTIONS]
)


def call_builtin(source: Value, has_source: bool, method: str, args: Sequence[Value]) -> Value:
    """Dispatch *method* on an evaluated source value.

    *has_source* distinguishes a standalone call from a call whose source
    evaluated to null. A null source yields null for any known method name.
    """
    if not has_source:
        function = STANDALONE_FUNCTIONS.get(method)
        if function is None:
            raise InvalidOperationError(f"Unknown function: {method}")
        return function(args)

    kind = kind_of(source)
    if kind == ValueKind.NULL:
        if method not in _KNOWN_METHODS:
            raise InvalidOperationError(f"Unknown method: {method}")
        return None
    if kind == ValueKind.STRING:
        operation = STRING_OPERATIONS.get(method)
        if operation is None:
            raise InvalidOperationError(f"Unknown string operation: {method}")
        return operation(source, args)
    if kind == ValueKind.SEQUENCE:
        operation = SEQUENCE_OPERATIONS.get(method)
        if operation is None:
            raise InvalidOperationError(f"Unknown collection operation: {method}")
        return operation(source, args)
    if kind == ValueKind.OBJECT:
        raise InvalidOperationError(
            f"Operation '{method}' cannot be invoked on {source.type_name} objects"
        )
    raise InvalidOperationError(f"Unknown method: {method} on {kind.value}")


# ---------------------------------------------------------------------------
# Type reflection
# ---------------------------------------------------------------------------

TYPE_OPERATIONS = frozenset({"oclIsKindOf", "oclIsTypeOf", "oclAsType"})


def reflect_type(method: str, source: Value, type_name: str) -> Value:
    """Apply an OCL type operation to *source* with the literal *type_name*.

    Objects are checked against their declared type and ancestor closure.
    Other values compare their kind name (``Integer``, ``String``, ...)
    exactly, for both the kind-of and the type-of check.
    """
    if method not in TYPE_OPERATIONS:
        raise InvalidOperationError(f"Unknown OCL type operation: {method}")

    if method == "oclAsType":
        return source

    if source is None:
        return False

    if isinstance(source, ObjectReference):
        if method == "oclIsTypeOf":
            return source.is_type_of(type_name)
        return source.is_kind_of(type_name)

    return kind_of(source).value == type_name
