"""Execution context: variable scopes and access to the model engine.

A context belongs to one evaluation session.  It is mutated by every
scoping construct while an expression is evaluated and must not be shared
between evaluations running at the same time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from aql.model.types import ObjectReference

from ._engine import ModelEngine
from ._values import PropertyNotFoundError, Value, VariableNotFoundError, to_value

logger = logging.getLogger(__name__)

_MISSING = object()


class ExecutionContext:
    """Variable bindings plus the model engine for one evaluation session.

    Parameters
    ----------
    engine : ModelEngine
        Collaborator for property navigation. Shared, not owned.
    variables : Mapping[str, object] | None
        Initial bindings for the outermost frame (conventionally ``self``).
    debug : bool
        Log every node evaluation at DEBUG level.
    """

    def __init__(
        self,
        engine: ModelEngine,
        *,
        variables: Mapping[str, object] | None = None,
        debug: bool = False,
    ) -> None:
        self.engine = engine
        self.debug = debug
        self._frame: dict[str, Value] = {}
        self._stack: list[dict[str, Value]] = []
        for name, value in (variables or {}).items():
            self.set_variable(name, value)

    # -----------------------------------------------------------------------
    # Variables
    # -----------------------------------------------------------------------

    def set_variable(self, name: str, value: object) -> None:
        """Bind *name* in the current frame (last write wins)."""
        self._frame[name] = to_value(value)

    def _lookup(self, name: str) -> object:
        if name in self._frame:
            return self._frame[name]
        for frame in reversed(self._stack):
            if name in frame:
                return frame[name]
        return _MISSING

    async def get_variable(self, name: str) -> Value:
        """Resolve *name* through the frames, then as a property of ``self``.

        The ``self`` fallback is a single extra frame lookup followed by one
        navigation; it never recurses.
        """
        value = self._lookup(name)
        if value is not _MISSING:
            return value

        if name != "self":
            self_obj = self._lookup("self")
            if isinstance(self_obj, ObjectReference):
                try:
                    result = await self.engine.navigate(self_obj, name)
                except PropertyNotFoundError:
                    pass
                else:
                    logger.debug("resolved '%s' as a property of self (%s)", name, self_obj)
                    return to_value(result)

        raise VariableNotFoundError(name)

    # -----------------------------------------------------------------------
    # Scopes
    # -----------------------------------------------------------------------

    @property
    def depth(self) -> int:
        """Number of saved outer frames."""
        return len(self._stack)

    def push_scope(self) -> None:
        self._stack.append(self._frame)
        self._frame = {}
        logger.debug("push scope -> depth %d", len(self._stack))

    def pop_scope(self) -> None:
        """Restore the last saved frame. No-op when nothing was pushed."""
        if not self._stack:
            return
        self._frame = self._stack.pop()
        logger.debug("pop scope -> depth %d", len(self._stack))

    @contextmanager
    def scope(self) -> Iterator[ExecutionContext]:
        """Run a block in a fresh frame, popped on every exit path.

        Usage::

            with ctx.scope():
                ctx.set_variable("x", element)
                ...
        """
        self.push_scope()
        try:
            yield self
        finally:
            self.pop_scope()

    # -----------------------------------------------------------------------
    # Navigation
    # -----------------------------------------------------------------------

    async def navigate(self, obj: Value, property: str) -> Value:
        """Navigate *property* on *obj*; ``None`` for non-object sources."""
        if not isinstance(obj, ObjectReference):
            return None
        return to_value(await self.engine.navigate(obj, property))
