from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from scopewire.exceptions import ScopeWireDependencyCycleError, ScopeWireNullableBindingError
from scopewire.lifecycle import Lifecycle

if TYPE_CHECKING:
    from scopewire.bindings import Binding, TypeKey
    from scopewire.registry import BindingPredicate, BindingsRegistry
    from scopewire.resolver import DependencyResolver

# Bindings currently being constructed in this execution context. Threads and
# asyncio tasks each get their own view, so interleaved resolutions never see
# each other's in-flight activations.
_activation_chain: ContextVar[tuple[Binding, ...]] = ContextVar(
    "scopewire_activation_chain",
    default=(),
)


def current_activation_chain() -> tuple[Binding, ...]:
    """Return the bindings being activated in the current execution context, outermost first."""
    return _activation_chain.get()


class InstanceActivator:
    """Turn bindings into instances while detecting reentrant activation.

    The activator is also a read-only view of the registry it wraps, so scopes
    only need the activator to both look bindings up and activate them.
    """

    __slots__ = ("_repository",)

    def __init__(self, repository: BindingsRegistry) -> None:
        self._repository = repository

    def find(self, type_key: TypeKey, predicate: BindingPredicate | None = None) -> Binding | None:
        return self._repository.find(type_key, predicate)

    def find_all_of(
        self,
        type_key: TypeKey,
        predicate: BindingPredicate | None = None,
    ) -> tuple[Binding, ...]:
        return self._repository.find_all_of(type_key, predicate)

    def get_all_bindings(self) -> tuple[Binding, ...]:
        return self._repository.get_all_bindings()

    def activate(self, resolver: DependencyResolver, binding: Binding) -> Any:
        """Produce the instance described by ``binding``.

        A prebuilt instance is returned as-is. Otherwise the factory is called
        with ``resolver`` so it can request its own dependencies.

        Args:
            resolver: Resolver (usually the requesting scope) handed to the factory.
            binding: Binding to activate.

        Raises:
            ScopeWireDependencyCycleError: If ``binding`` is already being activated
                further up the current call chain.
            ScopeWireNullableBindingError: If the binding has neither an instance nor
                a factory.

        """
        if binding.instance is not None:
            return binding.instance

        if binding.factory is None:
            raise ScopeWireNullableBindingError(binding.type, binding.name)

        chain = _activation_chain.get()
        if binding in chain:
            raise ScopeWireDependencyCycleError((*chain, binding))

        token = _activation_chain.set((*chain, binding))
        try:
            return binding.factory(resolver)
        finally:
            _activation_chain.reset(token)

    def eager_singletons(self) -> tuple[Binding, ...]:
        """Return the SINGLETON bindings without a prebuilt instance, in registration order."""
        return tuple(
            binding
            for binding in self.get_all_bindings()
            if binding.lifecycle is Lifecycle.SINGLETON and binding.instance is None
        )
