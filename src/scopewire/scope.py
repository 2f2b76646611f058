from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import ExitStack
from types import TracebackType
from typing import TYPE_CHECKING, Any

from scopewire.bindings import BindingName, ScopeKey, TypeKey, display_name
from scopewire.exceptions import ScopeWireBindingNotFoundError, ScopeWireClosedScopeAccessError
from scopewire.lifecycle import Lifecycle
from scopewire.phantom import PhantomInstance
from scopewire.resolver import ScopeDisposable

if TYPE_CHECKING:
    from typing_extensions import Self

    from scopewire.activator import InstanceActivator
    from scopewire.bindings import Binding

logger = logging.getLogger(__name__)

_SHARED_LIFECYCLES = frozenset({Lifecycle.SINGLETON, Lifecycle.LAZY_SINGLETON})


class DIScope:
    """A lifetime boundary with its own instance cache.

    A scope without a parent is a root scope: it activates every eager
    singleton as soon as it is created and anchors every singleton and lazy
    singleton for its children. Child scopes cache ``SCOPED`` instances and
    dispose them when the scope is disposed.

    Examples:
        .. code-block:: python

            with container.scope("request") as request_scope:
                handler = request_scope.get("handler")

    """

    __slots__ = (
        "_activated",
        "_activated_bindings",
        "_activator",
        "_disposed",
        "_instances",
        "_parent",
        "key",
    )

    def __init__(
        self,
        key: ScopeKey,
        activator: InstanceActivator,
        parent: DIScope | None = None,
    ) -> None:
        self.key = key
        self._activator = activator
        self._parent = parent
        # type key -> binding name -> activated instances, in activation order
        self._instances: dict[TypeKey, dict[BindingName, list[Any]]] = {}
        self._activated: list[Any] = []
        self._activated_bindings: set[Binding] = set()
        self._disposed = False

        if parent is None:
            self._activate_singletons()

    @property
    def parent(self) -> DIScope | None:
        return self._parent

    def is_disposed(self) -> bool:
        return self._disposed

    def get(self, type_key: TypeKey, name: BindingName = None) -> Any:
        """Resolve the instance bound to ``type_key`` and ``name`` in this scope.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.

        Raises:
            ScopeWireClosedScopeAccessError: If the scope was disposed.
            ScopeWireBindingNotFoundError: If no binding is available in this scope.

        """
        self._ensure_not_disposed()
        binding = self._find_binding(type_key, name)
        if binding is None:
            raise ScopeWireBindingNotFoundError(type_key, name, self.key)
        return self._resolve_binding(binding)

    def get_optional(
        self,
        type_key: TypeKey,
        name: BindingName = None,
        default: Any = None,
    ) -> Any:
        """Resolve like :meth:`get`, returning ``default`` when no binding is available.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.
            default: Value returned when no binding matches.

        """
        self._ensure_not_disposed()
        binding = self._find_binding(type_key, name)
        if binding is None:
            return default
        return self._resolve_binding(binding)

    def get_all(self, type_key: TypeKey, name: BindingName = None) -> tuple[Any, ...]:
        """Return prebuilt and already activated instances bound to ``type_key``.

        Multi-bindings always live at the root, so child scopes delegate to
        their parent. Factory bindings that were never requested are not
        activated by this call.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.

        """
        self._ensure_not_disposed()
        if self._parent is not None:
            return self._parent.get_all(type_key, name)

        bindings = self._activator.find_all_of(type_key, self._matcher(name))
        if not bindings:
            return ()
        prebuilt = [binding.instance for binding in bindings if binding.instance is not None]
        activated = self._instances.get(type_key, {}).get(name, [])
        return (*prebuilt, *activated)

    def get_provider(self, type_key: TypeKey, name: BindingName = None) -> Callable[[], Any]:
        """Return a callable that resolves ``type_key`` from this scope on each call.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.

        """
        self._ensure_not_disposed()
        scope = self

        def provider() -> Any:
            scope._ensure_not_disposed()
            return scope.get(type_key, name)

        provider.__name__ = provider.__qualname__ = (
            f"provide_{display_name(type_key)}_{display_name(self.key)}"
        )
        return provider

    def get_phantom(self, type_key: TypeKey, name: BindingName = None) -> Any:
        """Return the instance if it is already available, else a phantom deferring activation.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.

        Raises:
            ScopeWireClosedScopeAccessError: If the scope was disposed.
            ScopeWireBindingNotFoundError: If no binding is available in this scope.

        """
        self._ensure_not_disposed()
        binding = self._find_binding(type_key, name)
        if binding is None:
            raise ScopeWireBindingNotFoundError(type_key, name, self.key)

        found, instance = self._get_activated_instance(
            binding,
            inherit=binding.lifecycle is Lifecycle.SINGLETON,
        )
        if found:
            return instance
        return PhantomInstance(binding.type, self.get_provider(type_key, name))

    get_lazy = get_phantom

    def get_scope_disposable(self) -> ScopeDisposable:
        return ScopeDisposable(
            scope_key=self.key,
            is_scope_disposed=self.is_disposed,
            dispose=self.dispose,
        )

    def dispose(self) -> None:
        """Dispose this scope and every disposable instance it cached.

        Disposing twice, or disposing a root scope, does nothing. Each cached
        instance exposing a callable ``dispose`` attribute has it called exactly
        once, most recently activated first.
        """
        if self._disposed or self._parent is None:
            return
        self._disposed = True

        instances = self._activated
        self._activated = []
        self._instances.clear()
        self._activated_bindings.clear()
        logger.debug("Disposing scope %r with %d cached instance(s)", self.key, len(instances))

        seen: set[int] = set()
        with ExitStack() as stack:
            for instance in instances:
                if id(instance) in seen:
                    continue
                seen.add(id(instance))
                dispose = getattr(instance, "dispose", None)
                if callable(dispose):
                    stack.callback(dispose)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"DIScope({self.key!r}, {state})"

    def _ensure_not_disposed(self) -> None:
        if self._disposed:
            raise ScopeWireClosedScopeAccessError(self.key)

    def _matcher(self, name: BindingName) -> Callable[[Binding], bool]:
        key = self.key

        def matches(binding: Binding) -> bool:
            return binding.name == name and binding.is_available_in_scope(key)

        return matches

    def _find_binding(self, type_key: TypeKey, name: BindingName) -> Binding | None:
        return self._activator.find(type_key, self._matcher(name))

    def _resolve_binding(self, binding: Binding) -> Any:
        found, instance = self._get_activated_instance(
            binding,
            inherit=binding.lifecycle in _SHARED_LIFECYCLES,
        )
        if found:
            return instance

        instance = self._activator.activate(self, binding)
        if binding.lifecycle is not Lifecycle.TRANSIENT:
            self._push_instance(binding, instance)
        return instance

    def _get_activated_instance(self, binding: Binding, *, inherit: bool) -> tuple[bool, Any]:
        if binding.instance is not None:
            return True, binding.instance

        if inherit and self._parent is not None:
            return True, self._parent._resolve_binding(binding)

        activated = self._instances.get(binding.type, {}).get(binding.name)
        if activated:
            return True, activated[0]
        return False, None

    def _push_instance(self, binding: Binding, instance: Any) -> None:
        self._instances.setdefault(binding.type, {}).setdefault(binding.name, []).append(instance)
        self._activated.append(instance)
        self._activated_bindings.add(binding)

    def _activate_singletons(self) -> None:
        # A singleton may already be cached when an earlier factory requested it.
        activated = 0
        for binding in self._activator.eager_singletons():
            if binding in self._activated_bindings:
                continue
            self._push_instance(binding, self._activator.activate(self, binding))
            activated += 1
        logger.debug("Scope %r activated %d singleton(s)", self.key, activated)
