from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from scopewire.bindings import Binding, TypeKey
from scopewire.exceptions import (
    ScopeWireBindingConflictError,
    ScopeWireInvalidMultiBindingError,
)
from scopewire.lifecycle import ConflictResolution, Lifecycle

BindingPredicate = Callable[[Binding], bool]

logger = logging.getLogger(__name__)


class BindingsRegistry:
    """Ordered store of bindings with conflict resolution on registration.

    Order matters for default lookups (the first match wins) and for
    ``find_all_of``, which always returns bindings in registration order.
    Read operations never mutate the registry.
    """

    __slots__ = ("_bindings",)

    def __init__(self) -> None:
        self._bindings: list[Binding] = []

    def register(
        self,
        binding: Binding,
        conflict_resolution: ConflictResolution | str,
    ) -> None:
        """Register ``binding``, resolving a clash with an existing (type, name).

        Args:
            binding: Binding to store.
            conflict_resolution: Policy applied when a binding with the same type
                and name (and a compatible scope restriction) already exists.

        Raises:
            ScopeWireBindingConflictError: On conflict under ``THROW``.
            ScopeWireInvalidMultiBindingError: On conflict under ``BIND`` when the new
                binding is not a ``SINGLETON``.

        """
        policy = ConflictResolution.coerce(conflict_resolution)
        if self._has_conflict(binding):
            if policy is ConflictResolution.SKIP:
                logger.debug("Skipping conflicting binding %r", binding)
                return
            if policy is ConflictResolution.THROW:
                raise ScopeWireBindingConflictError(binding.type, binding.name)
            if policy is ConflictResolution.BIND and binding.lifecycle is not Lifecycle.SINGLETON:
                raise ScopeWireInvalidMultiBindingError(
                    binding.type,
                    binding.name,
                    binding.lifecycle,
                )
            if policy is ConflictResolution.OVERRIDE:
                index = self._index_of(binding.type, binding.name)
                if index is not None:
                    logger.debug("Overriding %r with %r", self._bindings[index], binding)
                    self._bindings[index] = binding
                    return

        self._bindings.append(binding)

    def find(self, type_key: TypeKey, predicate: BindingPredicate | None = None) -> Binding | None:
        """Return the first binding of ``type_key`` matching ``predicate``.

        Without a predicate only the default (unnamed) binding matches.
        """
        for binding in self._iter_matching(type_key, predicate):
            return binding
        return None

    def find_all_of(
        self,
        type_key: TypeKey,
        predicate: BindingPredicate | None = None,
    ) -> tuple[Binding, ...]:
        """Return every binding of ``type_key`` matching ``predicate``, in registration order."""
        return tuple(self._iter_matching(type_key, predicate))

    def get_all_bindings(self) -> tuple[Binding, ...]:
        return tuple(self._bindings)

    def copy(self) -> BindingsRegistry:
        """Return a registry holding the same bindings, unaffected by later registrations."""
        registry = BindingsRegistry()
        registry._bindings = list(self._bindings)
        return registry

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Binding]:
        return iter(tuple(self._bindings))

    def _iter_matching(
        self,
        type_key: TypeKey,
        predicate: BindingPredicate | None,
    ) -> Iterator[Binding]:
        for binding in self._bindings:
            if binding.type != type_key:
                continue
            if predicate is not None:
                if predicate(binding):
                    yield binding
            elif binding.name is None:
                yield binding

    def _has_conflict(self, binding: Binding) -> bool:
        return any(
            existing.type == binding.type
            and existing.name == binding.name
            and (binding.scope is None or existing.scope == binding.scope)
            for existing in self._bindings
        )

    def _index_of(self, type_key: TypeKey, name: object) -> int | None:
        for index, existing in enumerate(self._bindings):
            if existing.type == type_key and existing.name == name:
                return index
        return None
