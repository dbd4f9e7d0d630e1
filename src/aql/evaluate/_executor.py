"""Evaluator: asynchronous tree-walking interpreter for AQL expressions.

Each node evaluates its children depth-first and left to right (source
before arguments), then applies its own semantics.  Handlers are
coroutines because navigation may wait on the model engine; siblings are
never evaluated concurrently.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from aql.model.expressions import (
    BinaryExpr,
    CallExpr,
    CollectionExpr,
    CollectionOperation,
    ConditionalExpr,
    Expression,
    LetExpr,
    LiteralExpr,
    NavigationExpr,
    StringInterpolationExpr,
    UnaryExpr,
    VariableRef,
)

from ._builtins import TYPE_OPERATIONS, call_builtin, reflect_type
from ._context import ExecutionContext
from ._operators import apply_binary, apply_unary
from ._values import (
    AQLTypeError,
    InvalidOperationError,
    Value,
    as_sequence,
    to_text,
)

logger = logging.getLogger(__name__)


# Results of the scalar collection operations on a null source
_NULL_SOURCE_DEFAULTS: dict[CollectionOperation, Value] = {
    CollectionOperation.SIZE: 0,
    CollectionOperation.IS_EMPTY: True,
    CollectionOperation.NOT_EMPTY: False,
    CollectionOperation.FIRST: None,
    CollectionOperation.LAST: None,
}


class Evaluator:
    """Evaluates expression trees against one execution context.

    Parameters
    ----------
    context : ExecutionContext
        Variable scopes and model engine. Mutated during evaluation and
        restored to its original depth afterwards, also on errors.
    """

    def __init__(self, context: ExecutionContext) -> None:
        self.context = context

    async def evaluate(self, expr: Expression) -> Value:
        handler = self._EXPR_DISPATCH.get(expr.kind)
        if handler is None:
            raise InvalidOperationError(f"Unsupported expression kind: {expr.kind}")
        result = await handler(self, expr)
        if self.context.debug:
            logger.debug("%s -> %r", expr.kind, result)
        return result

    # -----------------------------------------------------------------------
    # Leaves
    # -----------------------------------------------------------------------

    async def _eval_literal(self, expr: LiteralExpr) -> Value:
        return expr.value

    async def _eval_variable(self, expr: VariableRef) -> Value:
        return await self.context.get_variable(expr.name)

    async def _eval_navigation(self, expr: NavigationExpr) -> Value:
        source = await self.evaluate(expr.source)
        if source is None and not expr.null_safe:
            raise AQLTypeError(f"Source for navigation '{expr.property}' is null")
        return await self.context.navigate(source, expr.property)

    # -----------------------------------------------------------------------
    # Operators
    # -----------------------------------------------------------------------

    async def _eval_binary(self, expr: BinaryExpr) -> Value:
        # Both sides are always evaluated, left first
        left = await self.evaluate(expr.left)
        right = await self.evaluate(expr.right)
        return apply_binary(expr.op, left, right)

    async def _eval_unary(self, expr: UnaryExpr) -> Value:
        operand = await self.evaluate(expr.operand)
        return apply_unary(expr.op, operand)

    # -----------------------------------------------------------------------
    # Calls
    # -----------------------------------------------------------------------

    async def _eval_call(self, expr: CallExpr) -> Value:
        if expr.method_name in TYPE_OPERATIONS:
            return await self._eval_type_operation(expr)

        source = await self.evaluate(expr.source) if expr.source is not None else None
        args = [await self.evaluate(arg) for arg in expr.arguments]
        return call_builtin(source, expr.source is not None, expr.method_name, args)

    async def _eval_type_operation(self, expr: CallExpr) -> Value:
        """oclIsKindOf / oclIsTypeOf / oclAsType.

        The argument names a type and is not evaluated.
        """
        source = await self.evaluate(expr.source) if expr.source is not None else None
        if not expr.arguments or not isinstance(expr.arguments[0], VariableRef):
            raise InvalidOperationError(f"{expr.method_name} requires a type name argument")
        return reflect_type(expr.method_name, source, expr.arguments[0].name)

    # -----------------------------------------------------------------------
    # Control and scoping
    # -----------------------------------------------------------------------

    async def _eval_conditional(self, expr: ConditionalExpr) -> Value:
        condition = await self.evaluate(expr.condition)
        # Null and non-boolean conditions take the else branch
        if condition is True:
            return await self.evaluate(expr.then_expr)
        return await self.evaluate(expr.else_expr)

    async def _eval_let(self, expr: LetExpr) -> Value:
        with self.context.scope():
            for binding in expr.bindings:
                value = await self.evaluate(binding.value)
                self.context.set_variable(binding.name, value)
            return await self.evaluate(expr.body)

    async def _eval_interpolation(self, expr: StringInterpolationExpr) -> Value:
        pieces: list[str] = []
        for part in expr.parts:
            pieces.append(part.literal)
            if part.expression is not None:
                pieces.append(to_text(await self.evaluate(part.expression)))
        return "".join(pieces)

    # -----------------------------------------------------------------------
    # Collections
    # -----------------------------------------------------------------------

    async def _eval_collection(self, expr: CollectionExpr) -> Value:
        source = await self.evaluate(expr.source)
        op = expr.operation

        if source is None:
            return _NULL_SOURCE_DEFAULTS.get(op)

        items = as_sequence(source)

        if op == CollectionOperation.SIZE:
            return len(items)
        if op == CollectionOperation.IS_EMPTY:
            return not items
        if op == CollectionOperation.NOT_EMPTY:
            return bool(items)
        if op == CollectionOperation.FIRST:
            return items[0] if items else None
        if op == CollectionOperation.LAST:
            return items[-1] if items else None

        handler = self._ITERATION_DISPATCH.get(op)
        if handler is None:
            raise InvalidOperationError(f"Unsupported collection operation: {op.value}")
        if expr.iterator is None or expr.body is None:
            raise InvalidOperationError(f"{op.value} requires iterator and body")
        return await handler(self, items, expr)

    async def _eval_body(self, element: Value, expr: CollectionExpr) -> Value:
        """Evaluate the body with the iterator bound to *element* in a fresh scope."""
        with self.context.scope():
            self.context.set_variable(expr.iterator, element)
            return await self.evaluate(expr.body)

    async def _select(self, items: tuple, expr: CollectionExpr) -> Value:
        result = []
        for element in items:
            if await self._eval_body(element, expr) is True:
                result.append(element)
        return tuple(result)

    async def _reject(self, items: tuple, expr: CollectionExpr) -> Value:
        # A null body result keeps the element, like false
        result = []
        for element in items:
            outcome = await self._eval_body(element, expr)
            if outcome is False or outcome is None:
                result.append(element)
        return tuple(result)

    async def _collect(self, items: tuple, expr: CollectionExpr) -> Value:
        result = []
        for element in items:
            value = await self._eval_body(element, expr)
            if value is not None:
                result.append(value)
        return tuple(result)

    async def _any(self, items: tuple, expr: CollectionExpr) -> Value:
        for element in items:
            if await self._eval_body(element, expr) is True:
                return True
        return False

    async def _for_all(self, items: tuple, expr: CollectionExpr) -> Value:
        for element in items:
            if await self._eval_body(element, expr) is not True:
                return False
        return True

    _ITERATION_DISPATCH: dict[
        CollectionOperation,
        Callable[[Evaluator, tuple, CollectionExpr], Awaitable[Value]],
    ] = {
        CollectionOperation.SELECT: _select,
        CollectionOperation.REJECT: _reject,
        CollectionOperation.COLLECT: _collect,
        CollectionOperation.ANY: _any,
        CollectionOperation.EXISTS: _any,
        CollectionOperation.FOR_ALL: _for_all,
    }

    # Expression dispatch table
    _EXPR_DISPATCH: dict[str, Callable[[Evaluator, Expression], Awaitable[Value]]] = {
        "literal": _eval_literal,
        "variable": _eval_variable,
        "navigation": _eval_navigation,
        "call": _eval_call,
        "binary": _eval_binary,
        "unary": _eval_unary,
        "conditional": _eval_conditional,
        "let": _eval_let,
        "collection": _eval_collection,
        "interpolation": _eval_interpolation,
    }
