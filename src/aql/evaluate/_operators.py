"""Binary and unary operator semantics.

Logical operators use three-valued logic: any operand that is not a
boolean counts as *unknown* and the result is ``None`` unless one side
decides it.  Arithmetic and ordering require two non-null operands and
otherwise yield ``None``; incompatible kinds raise ``AQLTypeError``.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from aql.model.expressions import BinaryOp, UnaryOp

from ._values import (
    AQLTypeError,
    InvalidOperationError,
    Value,
    ValueKind,
    as_bool,
    as_real,
    kind_of,
    to_text,
    type_name,
)


# ---------------------------------------------------------------------------
# Logical operators
# ---------------------------------------------------------------------------

def logical_and(left: Value, right: Value) -> bool | None:
    lhs, rhs = as_bool(left), as_bool(right)
    if lhs is False or rhs is False:
        return False
    if lhs is True and rhs is True:
        return True
    return None


def logical_or(left: Value, right: Value) -> bool | None:
    lhs, rhs = as_bool(left), as_bool(right)
    if lhs is True or rhs is True:
        return True
    if lhs is False and rhs is False:
        return False
    return None


def logical_implies(left: Value, right: Value) -> bool | None:
    lhs, rhs = as_bool(left), as_bool(right)
    if lhs is False or rhs is True:
        return True
    if lhs is True and rhs is False:
        return False
    return None


def logical_xor(left: Value, right: Value) -> bool | None:
    lhs, rhs = as_bool(left), as_bool(right)
    if lhs is None or rhs is None:
        return None
    return lhs != rhs


def logical_not(operand: Value) -> bool | None:
    value = as_bool(operand)
    if value is None:
        return None
    return not value


# ---------------------------------------------------------------------------
# Equality
# ---------------------------------------------------------------------------

def equals(left: Value, right: Value) -> bool:
    """Null equals only null; other values compare by their textual form.

    The textual comparison is type-erased: ``'1' = 1`` is true
    and ``1 = 1.0`` is false.
    """
    if left is None and right is None:
        return True
    if left is None or right is None:
        return False
    return to_text(left) == to_text(right)


def not_equals(left: Value, right: Value) -> bool:
    return not equals(left, right)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def _both_integers(left: Value, right: Value) -> bool:
    return kind_of(left) == ValueKind.INTEGER and kind_of(right) == ValueKind.INTEGER


def _reals(left: Value, right: Value) -> tuple[float, float] | None:
    lhs, rhs = as_real(left), as_real(right)
    if lhs is None or rhs is None:
        return None
    return lhs, rhs


def _incompatible(verb: str, left: Value, right: Value) -> AQLTypeError:
    return AQLTypeError(f"Cannot {verb} {type_name(left)} and {type_name(right)}")


def add(left: Value, right: Value) -> Value:
    if kind_of(left) == ValueKind.STRING and kind_of(right) == ValueKind.STRING:
        return left + right
    if _both_integers(left, right):
        return left + right
    reals = _reals(left, right)
    if reals is not None:
        return reals[0] + reals[1]
    raise _incompatible("add", left, right)


def subtract(left: Value, right: Value) -> Value:
    if _both_integers(left, right):
        return left - right
    reals = _reals(left, right)
    if reals is not None:
        return reals[0] - reals[1]
    raise _incompatible("subtract", left, right)


def multiply(left: Value, right: Value) -> Value:
    if _both_integers(left, right):
        return left * right
    reals = _reals(left, right)
    if reals is not None:
        return reals[0] * reals[1]
    raise _incompatible("multiply", left, right)


def divide(left: Value, right: Value) -> Value:
    """Integer division truncates toward zero."""
    if _both_integers(left, right):
        if right == 0:
            raise InvalidOperationError("Division by zero")
        quotient = abs(left) // abs(right)
        return quotient if (left < 0) == (right < 0) else -quotient
    reals = _reals(left, right)
    if reals is not None:
        if reals[1] == 0:
            raise InvalidOperationError("Division by zero")
        return reals[0] / reals[1]
    raise _incompatible("divide", left, right)


def modulo(left: Value, right: Value) -> Value:
    """Remainder with the sign of the dividend."""
    if _both_integers(left, right):
        if right == 0:
            raise InvalidOperationError("Modulo by zero")
        remainder = abs(left) % abs(right)
        return remainder if left >= 0 else -remainder
    reals = _reals(left, right)
    if reals is not None:
        if reals[1] == 0:
            raise InvalidOperationError("Modulo by zero")
        return math.fmod(reals[0], reals[1])
    raise AQLTypeError(
        f"Cannot perform modulo on {type_name(left)} and {type_name(right)}"
    )


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

def _ordering(compare: Callable[[object, object], bool]) -> Callable[[Value, Value], bool]:
    def apply(left: Value, right: Value) -> bool:
        if _both_integers(left, right):
            return compare(left, right)
        reals = _reals(left, right)
        if reals is not None:
            return compare(*reals)
        if kind_of(left) == ValueKind.STRING and kind_of(right) == ValueKind.STRING:
            return compare(left, right)
        raise _incompatible("compare", left, right)
    return apply


less_than = _ordering(lambda a, b: a < b)
greater_than = _ordering(lambda a, b: a > b)
less_or_equal = _ordering(lambda a, b: a <= b)
greater_or_equal = _ordering(lambda a, b: a >= b)


# ---------------------------------------------------------------------------
# Unary
# ---------------------------------------------------------------------------

def negate(operand: Value) -> Value:
    kind = kind_of(operand)
    if kind == ValueKind.NULL:
        return None
    if kind in (ValueKind.INTEGER, ValueKind.REAL):
        return -operand
    raise AQLTypeError(f"Cannot negate non-numeric value: {type_name(operand)}")


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

# Operators that see null operands themselves
NULL_AWARE_OPS: dict[BinaryOp, Callable[[Value, Value], Value]] = {
    BinaryOp.AND: logical_and,
    BinaryOp.OR: logical_or,
    BinaryOp.IMPLIES: logical_implies,
    BinaryOp.XOR: logical_xor,
    BinaryOp.EQ: equals,
    BinaryOp.NE: not_equals,
}

# Operators yielding null when either operand is null
STRICT_OPS: dict[BinaryOp, Callable[[Value, Value], Value]] = {
    BinaryOp.ADD: add,
    BinaryOp.SUB: subtract,
    BinaryOp.MUL: multiply,
    BinaryOp.DIV: divide,
    BinaryOp.MOD: modulo,
    BinaryOp.LT: less_than,
    BinaryOp.GT: greater_than,
    BinaryOp.LE: less_or_equal,
    BinaryOp.GE: greater_or_equal,
}

UNARY_OPS: dict[UnaryOp, Callable[[Value], Value]] = {
    UnaryOp.NOT: logical_not,
    UnaryOp.NEG: negate,
}


def apply_binary(op: BinaryOp, left: Value, right: Value) -> Value:
    handler = NULL_AWARE_OPS.get(op)
    if handler is not None:
        return handler(left, right)
    handler = STRICT_OPS.get(op)
    if handler is None:
        raise InvalidOperationError(f"Unsupported operator: {op.value}")
    if left is None or right is None:
        return None
    return handler(left, right)


def apply_unary(op: UnaryOp, operand: Value) -> Value:
    handler = UNARY_OPS.get(op)
    if handler is None:
        raise InvalidOperationError(f"Unsupported operator: {op.value}")
    return handler(operand)
