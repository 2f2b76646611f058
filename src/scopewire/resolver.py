from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scopewire.bindings import BindingName, ScopeKey, TypeKey


@dataclass(frozen=True)
class ScopeDisposable:
    """Handle that lets a holder check and end the lifetime of one scope."""

    scope_key: ScopeKey
    is_scope_disposed: Callable[[], bool]
    dispose: Callable[[], None]


@runtime_checkable
class DependencyResolver(Protocol):
    """Protocol for anything that resolves instances by type key and optional name.

    Scopes and the container implement it, and factories receive it as their
    only argument.
    """

    def get(self, type_key: TypeKey, name: BindingName = None) -> Any:
        """Return the instance bound to ``type_key``.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.

        """

    def get_optional(
        self,
        type_key: TypeKey,
        name: BindingName = None,
        default: Any = None,
    ) -> Any:
        """Return the instance bound to ``type_key`` or ``default`` when nothing is bound.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.
            default: Value returned when no binding matches.

        """

    def get_all(self, type_key: TypeKey, name: BindingName = None) -> tuple[Any, ...]:
        """Return every available instance bound to ``type_key``.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.

        """

    def get_provider(self, type_key: TypeKey, name: BindingName = None) -> Callable[[], Any]:
        """Return a zero-argument callable deferring ``get`` until it is invoked.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.

        """

    def get_phantom(self, type_key: TypeKey, name: BindingName = None) -> Any:
        """Return the instance, or a phantom that activates it on first use.

        Args:
            type_key: Type key to resolve.
            name: Optional binding name.

        """

    def get_scope_disposable(self) -> ScopeDisposable:
        """Return a disposal handle for the resolver's scope."""
