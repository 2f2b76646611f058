from __future__ import annotations

import enum
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias, Union

from scopewire.lifecycle import Lifecycle

if TYPE_CHECKING:
    from scopewire.resolver import DependencyResolver

TypeKey: TypeAlias = Hashable
"""Key a binding is registered and resolved under (a string, a class, an enum member...)."""

BindingName: TypeAlias = Union[Hashable, None]
"""Optional name distinguishing several bindings of the same type key."""

ScopeKey: TypeAlias = Hashable
"""Opaque, comparable token identifying a scope."""

ScopeRestriction: TypeAlias = Union[ScopeKey, tuple[ScopeKey, ...], frozenset[ScopeKey], None]
"""Scope(s) a binding may be resolved from. ``None`` means any scope."""

InstanceFactory: TypeAlias = "Callable[[DependencyResolver], Any]"
"""Factory receiving the requesting resolver and returning a new instance."""

DEFAULT_NAME_DISPLAY = "<default>"


@dataclass(frozen=True, eq=False, kw_only=True)
class Binding:
    """Describe how an instance of ``type`` is produced and shared.

    Bindings are compared and hashed by identity: two structurally equal
    bindings are still separate registry entries and separate members of an
    activation chain.

    Exactly one of ``instance`` and ``factory`` is expected to be set when the
    binding is activated; ``None`` means "not set".
    """

    type: TypeKey
    """Type key the binding is registered under."""

    name: BindingName = None
    """Optional binding name. ``None`` is the default (unnamed) binding."""

    lifecycle: Lifecycle = Lifecycle.SINGLETON
    """Sharing policy for activated instances."""

    instance: Any = None
    """Prebuilt instance returned as-is on every request."""

    factory: InstanceFactory | None = None
    """Factory invoked with the requesting resolver."""

    scope: ScopeRestriction = None
    """Scope key(s) the binding is available in, or ``None`` for every scope."""

    def __post_init__(self) -> None:
        if isinstance(self.scope, (list, set)):
            object.__setattr__(self, "scope", tuple(self.scope))

    def is_available_in_scope(self, scope_key: ScopeKey) -> bool:
        return is_available_in_scope(self.scope, scope_key)

    @property
    def display_name(self) -> str:
        return binding_display_name(self.type, self.name)

    def __repr__(self) -> str:
        return (
            f"Binding({self.display_name}, lifecycle={self.lifecycle.value}, scope={self.scope!r})"
        )


@dataclass(frozen=True, kw_only=True)
class RequiredTypeToken:
    """Declare that a binding for ``type`` must exist when the container is built."""

    type: TypeKey
    name: BindingName = None
    scope: ScopeKey | None = None

    def is_satisfied_by(self, binding: Binding) -> bool:
        if binding.name != self.name:
            return False
        return self.scope is None or binding.is_available_in_scope(self.scope)


def is_available_in_scope(restriction: ScopeRestriction, scope_key: ScopeKey) -> bool:
    """Return whether a binding restricted to ``restriction`` resolves from ``scope_key``."""
    if restriction is None:
        return True
    if isinstance(restriction, (tuple, frozenset)):
        return scope_key in restriction
    return bool(restriction == scope_key)


def display_name(value: Any) -> str:
    """Render a type key, binding name or scope key for diagnostics."""
    if value is None:
        return DEFAULT_NAME_DISPLAY
    if isinstance(value, str):
        return value
    if isinstance(value, enum.Enum):
        return value.name
    name = getattr(value, "__name__", None)
    if isinstance(name, str):
        return name
    return str(value)


def binding_display_name(type_key: TypeKey, name: BindingName = None) -> str:
    """Render ``type`` or ``type:name``."""
    rendered = display_name(type_key)
    if name is not None:
        rendered += f":{display_name(name)}"
    return rendered
