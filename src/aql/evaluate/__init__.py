"""AQL evaluator: computes the value of an expression tree.

Entry point::

    from aql.evaluate import ExecutionContext, InMemoryModelEngine, evaluate

    engine = InMemoryModelEngine()
    person = engine.create("Person", name="Ada", age=36)
    ctx = ExecutionContext(engine, variables={"self": person})
    result = await evaluate(expr, ctx)
"""

from __future__ import annotations

from aql.model.expressions import Expression

from ._context import ExecutionContext
from ._engine import InMemoryModelEngine, ModelEngine
from ._executor import Evaluator
from ._values import (
    AQLExecutionError,
    AQLTypeError,
    InvalidOperationError,
    PropertyNotFoundError,
    Value,
    ValueKind,
    VariableNotFoundError,
    kind_of,
    to_text,
)


async def evaluate(expression: Expression, context: ExecutionContext) -> Value:
    """Evaluate *expression* in *context*.

    Parameters
    ----------
    expression
        A node from ``aql.model.expressions``.
    context
        Bindings and model engine for this evaluation session.

    Returns
    -------
    Value
        ``None``, ``bool``, ``int``, ``float``, ``str``, a tuple of values,
        or an ``ObjectReference``.

    Raises
    ------
    AQLExecutionError
        ``VariableNotFoundError``, ``AQLTypeError`` or
        ``InvalidOperationError``; the first one raised aborts the whole
        evaluation.
    """
    return await Evaluator(context).evaluate(expression)


__all__ = [
    "evaluate",
    "Evaluator",
    "ExecutionContext",
    "ModelEngine",
    "InMemoryModelEngine",
    "AQLExecutionError",
    "AQLTypeError",
    "InvalidOperationError",
    "PropertyNotFoundError",
    "VariableNotFoundError",
    "Value",
    "ValueKind",
    "kind_of",
    "to_text",
]
