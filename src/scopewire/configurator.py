from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

if TYPE_CHECKING:
    from scopewire.bindings import BindingName, InstanceFactory, ScopeKey, ScopeRestriction, TypeKey
    from scopewire.lifecycle import ConflictResolution, Lifecycle

ConfiguratorT = TypeVar("ConfiguratorT", bound="ContainerConfigurator")


class ContainerConfigurator(Protocol):
    """Protocol for anything that accepts binding declarations.

    The container builder implements it, and so does the configurator that
    dynamic modules receive.
    """

    def bind_instance(
        self,
        type_key: TypeKey,
        instance: Any,
        *,
        name: BindingName = None,
        scope: ScopeRestriction = None,
        conflict_resolution: ConflictResolution | str | None = None,
    ) -> ContainerConfigurator:
        """Bind a prebuilt instance, shared everywhere it is available."""

    def bind_factory(
        self,
        type_key: TypeKey,
        factory: InstanceFactory,
        lifecycle: Lifecycle | str = ...,
        *,
        name: BindingName = None,
        scope: ScopeRestriction = None,
        conflict_resolution: ConflictResolution | str | None = None,
    ) -> ContainerConfigurator:
        """Bind a factory activated according to ``lifecycle``."""

    def require_type(
        self,
        type_key: TypeKey,
        *,
        name: BindingName = None,
        scope: ScopeKey | None = None,
    ) -> ContainerConfigurator:
        """Declare a binding that must exist when the container is built."""

    def when(self, condition: object) -> ConditionalConfigurator[Any]:
        """Return a configurator applying the next declaration only if ``condition`` holds."""


class ConditionalConfigurator(Generic[ConfiguratorT]):
    """Apply a single declaration to ``configurator`` only when ``condition`` is truthy.

    Every declaration returns the wrapped configurator, so chaining continues
    unconditionally after the guarded call:

    .. code-block:: python

        builder.when(settings.debug).bind_instance("log_level", "DEBUG").bind_instance(
            "app_name",
            "demo",
        )

    """

    __slots__ = ("_configurator", "condition")

    def __init__(self, configurator: ConfiguratorT, condition: object) -> None:
        self._configurator = configurator
        self.condition = bool(condition)

    def bind_instance(
        self,
        type_key: TypeKey,
        instance: Any,
        *,
        name: BindingName = None,
        scope: ScopeRestriction = None,
        conflict_resolution: ConflictResolution | str | None = None,
    ) -> ConfiguratorT:
        if self.condition:
            self._configurator.bind_instance(
                type_key,
                instance,
                name=name,
                scope=scope,
                conflict_resolution=conflict_resolution,
            )
        return self._configurator

    def bind_factory(
        self,
        type_key: TypeKey,
        factory: InstanceFactory,
        lifecycle: Lifecycle | str | None = None,
        *,
        name: BindingName = None,
        scope: ScopeRestriction = None,
        conflict_resolution: ConflictResolution | str | None = None,
    ) -> ConfiguratorT:
        if self.condition:
            # Leave the lifecycle to the wrapped configurator's own default.
            kwargs: dict[str, Any] = {} if lifecycle is None else {"lifecycle": lifecycle}
            self._configurator.bind_factory(
                type_key,
                factory,
                name=name,
                scope=scope,
                conflict_resolution=conflict_resolution,
                **kwargs,
            )
        return self._configurator

    def require_type(
        self,
        type_key: TypeKey,
        *,
        name: BindingName = None,
        scope: ScopeKey | None = None,
    ) -> ConfiguratorT:
        if self.condition:
            self._configurator.require_type(type_key, name=name, scope=scope)
        return self._configurator

    def when(self, condition: object) -> ConditionalConfigurator[ConfiguratorT]:
        return ConditionalConfigurator(self._configurator, condition)
