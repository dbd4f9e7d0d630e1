"""Model engine interface and an in-memory reference implementation.

The evaluator never inspects model storage itself.  Structural navigation
goes through a ``ModelEngine``; type information travels on the
``ObjectReference`` handles the engine hands out.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from aql.model.types import ObjectReference, TypeHierarchy

from ._values import InvalidOperationError, PropertyNotFoundError, Value, to_value

logger = logging.getLogger(__name__)


@runtime_checkable
class ModelEngine(Protocol):
    """Collaborator resolving properties of model objects.

    ``navigate`` may suspend (it can cross into model storage).  Engines
    raise ``PropertyNotFoundError`` for properties the object's type does
    not have; a declared but unset property is ``None``.
    """

    async def navigate(self, obj: ObjectReference, property: str) -> Value: ...


class InMemoryModelEngine:
    """Model engine over objects held in a dict.

    Parameters
    ----------
    hierarchy : TypeHierarchy | None
        Type hierarchy used to compute ancestor closures for new objects.
        Types not yet known are registered on first use with no supertypes.
    """

    def __init__(self, hierarchy: TypeHierarchy | None = None) -> None:
        self.hierarchy = hierarchy if hierarchy is not None else TypeHierarchy()
        self._features: dict[int | str, dict[str, Value]] = {}

    def create(
        self,
        type_name: str,
        object_id: int | str | None = None,
        **features: object,
    ) -> ObjectReference:
        """Create an object of *type_name* with initial feature values.

        Abstract types cannot be instantiated.
        """
        if type_name not in self.hierarchy:
            self.hierarchy.define(type_name)
        elif self.hierarchy.get(type_name).is_abstract:
            raise InvalidOperationError(f"Cannot instantiate abstract type '{type_name}'")
        obj = ObjectReference(
            type_name,
            supertypes=self.hierarchy.ancestors(type_name),
            object_id=object_id,
        )
        self._features[obj.object_id] = {
            name: to_value(value) for name, value in features.items()
        }
        return obj

    def set(self, obj: ObjectReference, property: str, value: object) -> None:
        self._storage(obj)[property] = to_value(value)

    async def navigate(self, obj: ObjectReference, property: str) -> Value:
        features = self._storage(obj)
        if property not in features:
            raise PropertyNotFoundError(obj.type_name, property)
        value = features[property]
        logger.debug("navigate %s.%s -> %r", obj, property, value)
        return value

    def _storage(self, obj: ObjectReference) -> dict[str, Value]:
        try:
            return self._features[obj.object_id]
        except KeyError:
            raise InvalidOperationError(f"Object {obj} does not belong to this model") from None
