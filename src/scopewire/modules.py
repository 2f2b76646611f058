"""Reusable groups of bindings.

A static module applies its bindings immediately. A dynamic module depends on
a unit (usually a Python module) that is imported asynchronously: its build
delegate receives a stand-in for that unit, and factories reading from the
stand-in fail with ``ScopeWireIllegalStateError`` until
``Container.load_module_async`` has imported it.

.. code-block:: python

    reports = dynamic_module(
        "reports",
        import_module_delegate("myapp.reports"),
        lambda configurator, unit: configurator.bind_factory(
            "renderer",
            lambda resolver: unit.Renderer(resolver.get("templates")),
        ),
    )

"""

from __future__ import annotations

import asyncio
import importlib
import logging
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from scopewire.bindings import display_name
from scopewire.configurator import ConditionalConfigurator
from scopewire.defaults import DEFAULT_DYNAMIC_LIFECYCLE
from scopewire.exceptions import ScopeWireIllegalStateError
from scopewire.lifecycle import Lifecycle

if TYPE_CHECKING:
    from types import ModuleType

    from typing_extensions import Self

    from scopewire.bindings import BindingName, InstanceFactory, ScopeKey, ScopeRestriction, TypeKey
    from scopewire.configurator import ContainerConfigurator
    from scopewire.lifecycle import ConflictResolution

logger = logging.getLogger(__name__)

ModuleKey = Hashable
ImportDelegate = Callable[[], Awaitable[Any]]
StaticBuildDelegate = Callable[["ContainerConfigurator"], None]
DynamicBuildDelegate = Callable[["DynamicModuleConfigurator", "DynamicModuleProxy"], None]


@dataclass(frozen=True, kw_only=True)
class StaticModule:
    """Bindings applied to the builder as soon as the module is added."""

    key: ModuleKey
    build_delegate: StaticBuildDelegate


@dataclass(frozen=True, kw_only=True)
class DynamicModule:
    """Bindings whose factories depend on a unit imported asynchronously."""

    key: ModuleKey
    import_delegate: ImportDelegate
    build_delegate: DynamicBuildDelegate


AnyModule = Union[StaticModule, DynamicModule]


def static_module(key: ModuleKey, build: StaticBuildDelegate) -> StaticModule:
    return StaticModule(key=key, build_delegate=build)


def dynamic_module(
    key: ModuleKey,
    import_delegate: ImportDelegate,
    build: DynamicBuildDelegate,
) -> DynamicModule:
    return DynamicModule(key=key, import_delegate=import_delegate, build_delegate=build)


def import_module_delegate(dotted_path: str) -> ImportDelegate:
    """Return an import delegate importing ``dotted_path`` in a worker thread.

    Args:
        dotted_path: Absolute module path, as accepted by ``importlib.import_module``.

    """

    async def import_delegate() -> ModuleType:
        return await asyncio.to_thread(importlib.import_module, dotted_path)

    import_delegate.__qualname__ = f"import_{dotted_path.replace('.', '_')}"
    return import_delegate


class DynamicModulesManager:
    """Track dynamic modules and the units their import delegates produced."""

    __slots__ = ("_loaded_units", "_modules")

    def __init__(self) -> None:
        self._modules: dict[ModuleKey, DynamicModule] = {}
        self._loaded_units: dict[ModuleKey, Any] = {}

    def add_module(self, module: DynamicModule) -> None:
        """Mark ``module`` as loadable without importing it."""
        self._modules[module.key] = module

    def is_known(self, module: DynamicModule) -> bool:
        return module.key in self._modules

    def is_loaded(self, module: DynamicModule) -> bool:
        return module.key in self._loaded_units

    def get_unit(self, module: DynamicModule) -> Any:
        """Return the imported unit of ``module``.

        Raises:
            ScopeWireIllegalStateError: If the module has not been loaded yet.

        """
        try:
            return self._loaded_units[module.key]
        except KeyError:
            msg = f"Module {display_name(module.key)} not loaded"
            raise ScopeWireIllegalStateError(msg) from None

    async def load_module_async(self, module: DynamicModule) -> None:
        """Import the unit of ``module`` and make it visible through its stand-ins.

        Loading an already loaded module does nothing.

        Raises:
            ScopeWireIllegalStateError: If the module was never added, or if its
                import delegate failed (the original error is kept as ``cause``).

        """
        if not self.is_known(module):
            msg = f"Module {display_name(module.key)} not found"
            raise ScopeWireIllegalStateError(msg)
        if self.is_loaded(module):
            return

        try:
            unit = await module.import_delegate()
        except Exception as e:
            msg = f"Module {display_name(module.key)} import failure: {e}"
            raise ScopeWireIllegalStateError(msg, cause=e) from e

        self._loaded_units[module.key] = unit
        logger.debug("Loaded dynamic module %r", module.key)

    def create_module_proxy(self, module: DynamicModule) -> DynamicModuleProxy:
        return DynamicModuleProxy(self, module)


class DynamicModuleProxy:
    """Stand-in for the unit of a dynamic module.

    Once the unit is loaded, attribute access forwards to it. Before that, each
    attribute read yields a :class:`DeferredModuleMember` that resolves the
    member on use.
    """

    __slots__ = ("_scopewire_manager", "_scopewire_module")

    def __init__(self, manager: DynamicModulesManager, module: DynamicModule) -> None:
        object.__setattr__(self, "_scopewire_manager", manager)
        object.__setattr__(self, "_scopewire_module", module)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        manager: DynamicModulesManager = object.__getattribute__(self, "_scopewire_manager")
        module: DynamicModule = object.__getattribute__(self, "_scopewire_module")
        if manager.is_loaded(module):
            return getattr(manager.get_unit(module), name)
        return DeferredModuleMember(manager, module, name)

    def __setattr__(self, name: str, value: Any) -> None:
        msg = "dynamic module stand-ins are read-only"
        raise AttributeError(msg)

    def __repr__(self) -> str:
        module: DynamicModule = object.__getattribute__(self, "_scopewire_module")
        return f"<DynamicModuleProxy {display_name(module.key)}>"


class DeferredModuleMember:
    """Member of a dynamic module that was read before the module was loaded."""

    __slots__ = ("_manager", "member_name", "module")

    is_dynamic = True

    def __init__(
        self,
        manager: DynamicModulesManager,
        module: DynamicModule,
        member_name: str,
    ) -> None:
        self._manager = manager
        self.module = module
        self.member_name = member_name

    def get(self) -> Any:
        return getattr(self._manager.get_unit(self.module), self.member_name)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.get()(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        return getattr(self.get(), name)

    def __repr__(self) -> str:
        return f"<DeferredModuleMember {display_name(self.module.key)}.{self.member_name}>"


class DynamicModuleConfigurator:
    """Configurator handed to the build delegate of a dynamic module.

    Declarations go to the wrapped builder. Factories default to
    ``LAZY_SINGLETON`` and may not be eager ``SINGLETON`` bindings, since those
    are activated before the module can be loaded.
    """

    __slots__ = ("_configurator", "module")

    def __init__(self, configurator: ContainerConfigurator, module: DynamicModule) -> None:
        self._configurator = configurator
        self.module = module

    def bind_instance(
        self,
        type_key: TypeKey,
        instance: Any,
        *,
        name: BindingName = None,
        scope: ScopeRestriction = None,
        conflict_resolution: ConflictResolution | str | None = None,
    ) -> Self:
        self._configurator.bind_instance(
            type_key,
            instance,
            name=name,
            scope=scope,
            conflict_resolution=conflict_resolution,
        )
        return self

    def bind_factory(
        self,
        type_key: TypeKey,
        factory: InstanceFactory,
        lifecycle: Lifecycle | str = DEFAULT_DYNAMIC_LIFECYCLE,
        *,
        name: BindingName = None,
        scope: ScopeRestriction = None,
        conflict_resolution: ConflictResolution | str | None = None,
    ) -> Self:
        """Bind a factory reading from the module's unit.

        Raises:
            ScopeWireIllegalStateError: If ``lifecycle`` is ``SINGLETON``.

        """
        lifecycle = Lifecycle(lifecycle)
        if lifecycle is Lifecycle.SINGLETON:
            msg = (
                f"Dynamic module {display_name(self.module.key)} cannot bind "
                f'"{display_name(type_key)}" as {lifecycle.value}'
            )
            raise ScopeWireIllegalStateError(msg)
        self._configurator.bind_factory(
            type_key,
            factory,
            lifecycle,
            name=name,
            scope=scope,
            conflict_resolution=conflict_resolution,
        )
        return self

    def require_type(
        self,
        type_key: TypeKey,
        *,
        name: BindingName = None,
        scope: ScopeKey | None = None,
    ) -> Self:
        self._configurator.require_type(type_key, name=name, scope=scope)
        return self

    def when(self, condition: object) -> ConditionalConfigurator[Self]:
        return ConditionalConfigurator(self, condition)
