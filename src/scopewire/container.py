from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from scopewire.activator import InstanceActivator
from scopewire.bindings import Binding, RequiredTypeToken
from scopewire.configurator import ConditionalConfigurator
from scopewire.defaults import (
    DEFAULT_CONFLICT_RESOLUTION,
    DEFAULT_GLOBAL_SCOPE_KEY,
    DEFAULT_LIFECYCLE,
)
from scopewire.exceptions import ScopeWireMissingRequiredTypeError, ScopeWireNullableBindingError
from scopewire.lifecycle import ConflictResolution, Lifecycle
from scopewire.modules import (
    AnyModule,
    DynamicModule,
    DynamicModuleConfigurator,
    DynamicModulesManager,
    ModuleKey,
)
from scopewire.registry import BindingsRegistry
from scopewire.scope import DIScope

if TYPE_CHECKING:
    from typing_extensions import Self

    from scopewire.bindings import BindingName, InstanceFactory, ScopeKey, ScopeRestriction, TypeKey
    from scopewire.resolver import ScopeDisposable

logger = logging.getLogger(__name__)


class Container:
    """Resolve instances from the global scope and manage named child scopes.

    Containers are usually created through :meth:`builder`:

    .. code-block:: python

        container = (
            Container.builder()
            .bind_instance("origin", 32)
            .bind_factory("value", lambda resolver: resolver.get("origin") + 10)
            .build()
        )
        assert container.get("value") == 42

    Creating the container creates the global scope, which activates every
    eager ``SINGLETON`` binding right away.
    """

    __slots__ = ("_activator", "_global_scope", "_modules_manager", "_scopes")

    def __init__(
        self,
        activator: InstanceActivator,
        *,
        global_scope_key: ScopeKey = DEFAULT_GLOBAL_SCOPE_KEY,
        modules_manager: DynamicModulesManager | None = None,
    ) -> None:
        self._activator = activator
        self._modules_manager = modules_manager or DynamicModulesManager()
        self._scopes: dict[ScopeKey, DIScope] = {}
        self._global_scope = DIScope(global_scope_key, activator)

    @staticmethod
    def builder(**config: Any) -> ContainerBuilder:
        """Return a builder; keyword arguments are forwarded to :class:`ContainerBuilder`."""
        return ContainerBuilder(**config)

    @property
    def global_scope(self) -> DIScope:
        return self._global_scope

    @property
    def global_scope_key(self) -> ScopeKey:
        return self._global_scope.key

    def get(self, type_key: TypeKey, name: BindingName = None) -> Any:
        return self._global_scope.get(type_key, name)

    def get_optional(
        self,
        type_key: TypeKey,
        name: BindingName = None,
        default: Any = None,
    ) -> Any:
        return self._global_scope.get_optional(type_key, name, default)

    def get_all(self, type_key: TypeKey, name: BindingName = None) -> tuple[Any, ...]:
        return self._global_scope.get_all(type_key, name)

    def get_provider(self, type_key: TypeKey, name: BindingName = None) -> Callable[[], Any]:
        return self._global_scope.get_provider(type_key, name)

    def get_phantom(self, type_key: TypeKey, name: BindingName = None) -> Any:
        return self._global_scope.get_phantom(type_key, name)

    get_lazy = get_phantom

    def scope(self, key: ScopeKey) -> DIScope:
        """Return the live scope registered under ``key``, creating it when needed.

        The global scope key returns the global scope itself. A disposed scope
        found under ``key`` is replaced by a fresh one.

        Args:
            key: Scope key to look up.

        """
        if key == self.global_scope_key:
            return self._global_scope

        scope = self._scopes.get(key)
        if scope is not None:
            if not scope.is_disposed():
                return scope
            logger.debug("Replacing disposed scope %r", key)

        scope = DIScope(key, self._activator, parent=self._global_scope)
        self._scopes[key] = scope
        logger.debug("Created scope %r", key)
        return scope

    def dispose_scope(self, key: ScopeKey) -> None:
        """Dispose the scope registered under ``key``. The global scope is never disposed."""
        if key == self.global_scope_key:
            return

        scope = self._scopes.pop(key, None)
        if scope is None:
            return
        scope.dispose()
        logger.debug("Disposed scope %r", key)

    def get_scope_disposable(self, key: ScopeKey | None = None) -> ScopeDisposable:
        if key is None:
            return self._global_scope.get_scope_disposable()
        return self.scope(key).get_scope_disposable()

    async def load_module_async(self, module: DynamicModule) -> None:
        """Import the unit of a dynamic module added to this container's builder.

        Raises:
            ScopeWireIllegalStateError: If the module is unknown or its import failed.

        """
        await self._modules_manager.load_module_async(module)

    def __repr__(self) -> str:
        scopes = list(self._scopes)
        return f"Container(global_scope_key={self.global_scope_key!r}, scopes={scopes!r})"


class ContainerBuilder:
    """Collect bindings, required types and modules, then build a :class:`Container`.

    Every declaration returns the builder, so calls can be chained.
    """

    __slots__ = (
        "_applied_modules",
        "_default_conflict_resolution",
        "_global_scope_key",
        "_modules_manager",
        "_registry",
        "_required_types",
    )

    def __init__(
        self,
        *,
        default_conflict_resolution: ConflictResolution | str = DEFAULT_CONFLICT_RESOLUTION,
        global_scope_key: ScopeKey = DEFAULT_GLOBAL_SCOPE_KEY,
    ) -> None:
        self._default_conflict_resolution = ConflictResolution.coerce(default_conflict_resolution)
        self._global_scope_key = global_scope_key
        self._registry = BindingsRegistry()
        self._required_types: list[RequiredTypeToken] = []
        self._applied_modules: set[ModuleKey] = set()
        self._modules_manager = DynamicModulesManager()

    def bind_instance(
        self,
        type_key: TypeKey,
        instance: Any,
        *,
        name: BindingName = None,
        scope: ScopeRestriction = None,
        conflict_resolution: ConflictResolution | str | None = None,
    ) -> Self:
        """Bind a prebuilt instance.

        Args:
            type_key: Type key to bind.
            instance: Instance returned for every request.
            name: Optional binding name.
            scope: Scope key(s) the binding is available in; ``None`` for all scopes.
            conflict_resolution: Policy for an existing binding with the same type
                and name. Defaults to the builder's default policy.

        Raises:
            ScopeWireNullableBindingError: If ``instance`` is ``None``.

        """
        if instance is None:
            raise ScopeWireNullableBindingError(type_key, name)
        binding = Binding(
            type=type_key,
            name=name,
            lifecycle=Lifecycle.SINGLETON,
            instance=instance,
            scope=scope,
        )
        self._registry.register(binding, conflict_resolution or self._default_conflict_resolution)
        return self

    def bind_factory(
        self,
        type_key: TypeKey,
        factory: InstanceFactory,
        lifecycle: Lifecycle | str = DEFAULT_LIFECYCLE,
        *,
        name: BindingName = None,
        scope: ScopeRestriction = None,
        conflict_resolution: ConflictResolution | str | None = None,
    ) -> Self:
        """Bind a factory receiving the requesting resolver.

        Args:
            type_key: Type key to bind.
            factory: Callable invoked with the resolver of the requesting scope.
            lifecycle: How activated instances are shared.
            name: Optional binding name.
            scope: Scope key(s) the binding is available in; ``None`` for all scopes.
            conflict_resolution: Policy for an existing binding with the same type
                and name. Defaults to the builder's default policy.

        Raises:
            ScopeWireNullableBindingError: If ``factory`` is ``None``.

        """
        if factory is None:
            raise ScopeWireNullableBindingError(type_key, name)
        binding = Binding(
            type=type_key,
            name=name,
            lifecycle=Lifecycle(lifecycle),
            factory=factory,
            scope=scope,
        )
        self._registry.register(binding, conflict_resolution or self._default_conflict_resolution)
        return self

    def require_type(
        self,
        type_key: TypeKey,
        *,
        name: BindingName = None,
        scope: ScopeKey | None = None,
    ) -> Self:
        """Make :meth:`build` fail unless a matching binding has been declared by then."""
        self._required_types.append(RequiredTypeToken(type=type_key, name=name, scope=scope))
        return self

    def when(self, condition: object) -> ConditionalConfigurator[Self]:
        return ConditionalConfigurator(self, condition)

    def add_module(self, module: AnyModule) -> Self:
        """Apply the bindings of ``module``. A module key is only applied once."""
        if module.key in self._applied_modules:
            logger.debug("Module %r already applied, skipping", module.key)
            return self
        self._applied_modules.add(module.key)

        if isinstance(module, DynamicModule):
            self._modules_manager.add_module(module)
            module.build_delegate(
                DynamicModuleConfigurator(self, module),
                self._modules_manager.create_module_proxy(module),
            )
        else:
            module.build_delegate(self)
        return self

    def get_binding_of_type(self, type_key: TypeKey, name: BindingName = None) -> Binding | None:
        return self._registry.find(type_key, lambda binding: binding.name == name)

    def build(self) -> Container:
        """Check required types, then create the container.

        The container works on a snapshot of the bindings declared so far, so
        later declarations on this builder only affect containers built after them.

        Raises:
            ScopeWireMissingRequiredTypeError: For the first required type that no
                binding satisfies.

        """
        for token in self._required_types:
            candidates = self._registry.find_all_of(token.type, token.is_satisfied_by)
            if not candidates:
                raise ScopeWireMissingRequiredTypeError(token.type, token.name, token.scope)

        return Container(
            InstanceActivator(self._registry.copy()),
            global_scope_key=self._global_scope_key,
            modules_manager=self._modules_manager,
        )
