"""Expression tree nodes for AQL queries.

Trees are produced by an external parser (or built by hand) and are
frozen: they can be evaluated any number of times, by independent
execution contexts, without being copied.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import ObjectReference


class BinaryOp(str, Enum):
    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "mod"

    # Comparison
    EQ = "="
    NE = "<>"
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="

    # Logical
    AND = "and"
    OR = "or"
    IMPLIES = "implies"
    XOR = "xor"


class UnaryOp(str, Enum):
    NOT = "not"
    NEG = "-"


class CollectionOperation(str, Enum):
    # Filtering
    SELECT = "select"
    REJECT = "reject"

    # Transformation
    COLLECT = "collect"

    # Querying
    ANY = "any"
    EXISTS = "exists"
    FOR_ALL = "forAll"

    # Properties
    SIZE = "size"
    IS_EMPTY = "isEmpty"
    NOT_EMPTY = "notEmpty"
    FIRST = "first"
    LAST = "last"


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


def _freeze_literal(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str, ObjectReference)):
        return value
    if isinstance(value, (list, tuple)):
        return tuple(_freeze_literal(v) for v in value)
    raise ValueError(f"unsupported literal value of type {type(value).__name__}")


class LiteralExpr(_Node):
    """A constant value: null, boolean, integer, real, string or sequence."""

    kind: Literal["literal"] = "literal"
    value: Any = None

    @field_validator("value", mode="before")
    @classmethod
    def _check_value(cls, value: Any) -> Any:
        return _freeze_literal(value)


class VariableRef(_Node):
    """Reference to a variable by name (falls back to a property of ``self``)."""

    kind: Literal["variable"] = "variable"
    name: str = Field(min_length=1)


class NavigationExpr(_Node):
    """Property navigation: source.property."""

    kind: Literal["navigation"] = "navigation"
    source: Expression
    property: str = Field(min_length=1)
    null_safe: bool = True


class CallExpr(_Node):
    """Method call on a source value, or a standalone function if no source."""

    kind: Literal["call"] = "call"
    source: Expression | None = None
    method_name: str = Field(min_length=1)
    arguments: tuple[Expression, ...] = ()


class BinaryExpr(_Node):
    kind: Literal["binary"] = "binary"
    left: Expression
    op: BinaryOp
    right: Expression


class UnaryExpr(_Node):
    kind: Literal["unary"] = "unary"
    op: UnaryOp
    operand: Expression


class ConditionalExpr(_Node):
    """if condition then then_expr else else_expr endif."""

    kind: Literal["conditional"] = "conditional"
    condition: Expression
    then_expr: Expression
    else_expr: Expression


class LetBinding(_Node):
    """One ``name = value`` pair of a let expression."""

    name: str = Field(min_length=1)
    value: Expression


class LetExpr(_Node):
    """let a = x, b = y in body.

    Bindings are evaluated in order and each one sees the previous ones.
    """

    kind: Literal["let"] = "let"
    bindings: tuple[LetBinding, ...]
    body: Expression


class CollectionExpr(_Node):
    """Collection operation: source->operation(iterator | body)."""

    kind: Literal["collection"] = "collection"
    source: Expression
    operation: CollectionOperation
    iterator: str | None = None
    body: Expression | None = None


class InterpolationPart(_Node):
    """Literal text optionally followed by an embedded expression."""

    literal: str = ""
    expression: Expression | None = None


class StringInterpolationExpr(_Node):
    """'text ${expr} more text'."""

    kind: Literal["interpolation"] = "interpolation"
    parts: tuple[InterpolationPart, ...] = ()


Expression = Annotated[
    Union[
        LiteralExpr,
        VariableRef,
        NavigationExpr,
        CallExpr,
        BinaryExpr,
        UnaryExpr,
        ConditionalExpr,
        LetExpr,
        CollectionExpr,
        StringInterpolationExpr,
    ],
    Field(discriminator="kind"),
]

# Rebuild models with recursive Expression references.
NavigationExpr.model_rebuild()
CallExpr.model_rebuild()
BinaryExpr.model_rebuild()
UnaryExpr.model_rebuild()
ConditionalExpr.model_rebuild()
LetBinding.model_rebuild()
LetExpr.model_rebuild()
CollectionExpr.model_rebuild()
InterpolationPart.model_rebuild()
StringInterpolationExpr.model_rebuild()
