"""Shared test helpers for the aql test suite."""

import pytest

from aql.evaluate import ExecutionContext, InMemoryModelEngine, evaluate
from aql.model.expressions import (
    BinaryExpr,
    BinaryOp,
    CallExpr,
    CollectionExpr,
    CollectionOperation,
    LiteralExpr,
    NavigationExpr,
    VariableRef,
)
from aql.model.types import TypeHierarchy


def lit(value=None):
    """Shorthand for LiteralExpr(value=...)."""
    return LiteralExpr(value=value)


def var(name):
    """Shorthand for VariableRef(name=...)."""
    return VariableRef(name=name)


def nav(source, prop, null_safe=True):
    return NavigationExpr(source=source, property=prop, null_safe=null_safe)


def call(source, method, *args):
    return CallExpr(source=source, method_name=method, arguments=list(args))


def binop(left, op, right):
    return BinaryExpr(left=left, op=BinaryOp(op), right=right)


def coll(source, operation, iterator=None, body=None):
    return CollectionExpr(
        source=source,
        operation=CollectionOperation(operation),
        iterator=iterator,
        body=body,
    )


async def run(expr, ctx=None, **variables):
    """Evaluate *expr* in *ctx* (or a fresh context bound to *variables*)."""
    if ctx is None:
        ctx = ExecutionContext(InMemoryModelEngine(), variables=variables)
    return await evaluate(expr, ctx)


def shapes_hierarchy():
    """Shape (abstract) <- Circle, Rectangle; Square <- Rectangle."""
    hierarchy = TypeHierarchy()
    hierarchy.define("Shape", is_abstract=True)
    hierarchy.define("Circle", "Shape")
    hierarchy.define("Rectangle", "Shape")
    hierarchy.define("Square", "Rectangle")
    return hierarchy


@pytest.fixture
def engine():
    return InMemoryModelEngine(shapes_hierarchy())


@pytest.fixture
def circle(engine):
    return engine.create("Circle", name="MyCircle", radius=5)


@pytest.fixture
def ctx(engine):
    return ExecutionContext(engine)
