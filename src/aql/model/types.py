"""Type hierarchy and object references for the model seen by AQL.

Two distinct concepts:
- TypeDescriptor: a named class in the external model together with its
  *direct* supertypes.  Descriptors live in a ``TypeHierarchy`` arena.
- ObjectReference: an opaque handle to one model object.  It carries the
  declared type name and the full ancestor closure, computed once by the
  hierarchy when the reference is created.

The hierarchy must be acyclic; a cycle is a configuration error in the
model and is reported as ``TypeHierarchyError``.
"""

from __future__ import annotations

import itertools

from pydantic import BaseModel, ConfigDict, model_validator


class TypeHierarchyError(ValueError):
    """Invalid type hierarchy (unknown type, duplicate, or cycle)."""


# ---------------------------------------------------------------------------
# Type descriptors
# ---------------------------------------------------------------------------

class TypeDescriptor(BaseModel):
    """A model class and the names of its direct supertypes."""

    model_config = ConfigDict(frozen=True)

    name: str
    supertypes: tuple[str, ...] = ()
    is_abstract: bool = False

    @model_validator(mode="after")
    def _check_names(self):
        if not self.name:
            raise ValueError("type name must not be empty")
        if self.name in self.supertypes:
            raise ValueError(f"type '{self.name}' cannot be its own supertype")
        return self


class TypeHierarchy:
    """Arena of type descriptors indexed by name.

    Ancestor closures are computed lazily on first request and cached;
    registering a new type clears the cache.

    Parameters
    ----------
    types : list[TypeDescriptor] | None
        Descriptors to register up front.
    """

    def __init__(self, types: list[TypeDescriptor] | None = None) -> None:
        self._types: dict[str, TypeDescriptor] = {}
        self._closures: dict[str, tuple[str, ...]] = {}
        # Types whose closure is being computed, outermost first
        self._in_progress: list[str] = []
        for descriptor in types or []:
            self.register(descriptor)

    def register(self, descriptor: TypeDescriptor) -> TypeDescriptor:
        if descriptor.name in self._types:
            raise TypeHierarchyError(f"Type '{descriptor.name}' is already registered")
        self._types[descriptor.name] = descriptor
        self._closures.clear()
        return descriptor

    def define(self, name: str, *supertypes: str, is_abstract: bool = False) -> TypeDescriptor:
        """Shorthand for ``register(TypeDescriptor(...))``."""
        return self.register(
            TypeDescriptor(name=name, supertypes=supertypes, is_abstract=is_abstract)
        )

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def get(self, name: str) -> TypeDescriptor:
        try:
            return self._types[name]
        except KeyError:
            raise TypeHierarchyError(
                f"Unknown type '{name}'. Available: {sorted(self._types)}"
            ) from None

    def ancestors(self, name: str) -> tuple[str, ...]:
        """Transitive supertypes of *name*, nearest first, without duplicates."""
        cached = self._closures.get(name)
        if cached is not None:
            return cached
        if name in self._in_progress:
            cycle = " -> ".join(self._in_progress + [name])
            raise TypeHierarchyError(f"Cyclic type hierarchy: {cycle}")
        descriptor = self.get(name)

        self._in_progress.append(name)
        try:
            # Direct supertypes first, then their ancestors in declaration order
            result: list[str] = list(descriptor.supertypes)
            seen = set(result)
            for parent in descriptor.supertypes:
                for ancestor in self.ancestors(parent):
                    if ancestor not in seen:
                        seen.add(ancestor)
                        result.append(ancestor)
        finally:
            self._in_progress.pop()

        closure = tuple(result)
        self._closures[name] = closure
        return closure

    def conforms(self, name: str, ancestor: str) -> bool:
        """True if *name* is *ancestor* or has it among its supertypes."""
        return name == ancestor or ancestor in self.ancestors(name)


# ---------------------------------------------------------------------------
# Object references
# ---------------------------------------------------------------------------

_object_ids = itertools.count(1)


class ObjectReference:
    """Opaque handle to a model object.

    Identity is model identity: two references are equal only if they are
    the same handle.  The textual form ``Type@id`` is what equality and
    string interpolation see.
    """

    __slots__ = ("type_name", "supertypes", "object_id")

    def __init__(
        self,
        type_name: str,
        supertypes: tuple[str, ...] = (),
        object_id: int | str | None = None,
    ) -> None:
        self.type_name = type_name
        self.supertypes = tuple(supertypes)
        self.object_id = next(_object_ids) if object_id is None else object_id

    def is_type_of(self, name: str) -> bool:
        return self.type_name == name

    def is_kind_of(self, name: str) -> bool:
        return self.type_name == name or name in self.supertypes

    def __str__(self) -> str:
        return f"{self.type_name}@{self.object_id}"

    def __repr__(self) -> str:
        return f"ObjectReference({self.type_name!r}, object_id={self.object_id!r})"
