from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

from scopewire.bindings import binding_display_name, display_name

if TYPE_CHECKING:
    from scopewire.bindings import Binding, BindingName, ScopeKey, TypeKey
    from scopewire.lifecycle import Lifecycle


class ErrorType(str, Enum):
    """Classify every ``ScopeWireError`` so callers can branch without ``isinstance`` chains."""

    BINDING_CONFLICT = "BindingConflict"
    BINDING_NOT_FOUND = "BindingNotFound"
    ILLEGAL_CLOSED_SCOPE_ACCESS = "IllegalClosedScopeAccess"
    DEPENDENCY_CYCLE = "DependencyCycle"
    INVALID_MULTI_BINDING = "InvalidMultiBinding"
    NULLABLE_BINDING = "NullableBinding"
    MISSING_REQUIRED_TYPE = "MissingRequiredType"
    ILLEGAL_STATE = "IllegalState"


class ScopeWireError(Exception):
    """Represent a base class for all scopewire-specific failures.

    Catch this type when you want to handle any scopewire error path without
    matching each concrete exception class individually. ``error_type`` tells
    the concrete failure kind.
    """

    error_type: ErrorType

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ScopeWireBindingConflictError(ScopeWireError):
    """Signal that a binding for an already registered (type, name) was rejected.

    Raised by ``BindingsRegistry.register`` under the ``THROW`` conflict
    resolution. Use ``SKIP``, ``OVERRIDE`` or a distinct binding name instead.
    """

    error_type = ErrorType.BINDING_CONFLICT

    def __init__(self, type_key: TypeKey, name: BindingName) -> None:
        self.type_key = type_key
        self.name = name
        super().__init__(
            f'Found binding conflict of type "{binding_display_name(type_key, name)}"',
        )


class ScopeWireBindingNotFoundError(ScopeWireError):
    """Signal that no binding matches a request in the requesting scope.

    Raised by ``get`` and ``get_phantom`` when no binding with the requested
    type and name is available in the scope. ``get_optional`` recovers from
    this error and returns its default instead.
    """

    error_type = ErrorType.BINDING_NOT_FOUND

    def __init__(self, type_key: TypeKey, name: BindingName, scope_key: ScopeKey) -> None:
        self.type_key = type_key
        self.name = name
        self.scope_key = scope_key
        super().__init__(
            f'Binding of type "{binding_display_name(type_key, name)}" '
            f'not found in scope "{display_name(scope_key)}"',
        )


class ScopeWireClosedScopeAccessError(ScopeWireError):
    """Signal use of a scope after it was disposed.

    Every resolver operation of a disposed scope raises this, including
    providers created before disposal. Request a fresh scope from the
    container under the same key instead.
    """

    error_type = ErrorType.ILLEGAL_CLOSED_SCOPE_ACCESS

    def __init__(self, scope_key: ScopeKey) -> None:
        self.scope_key = scope_key
        super().__init__(
            f'Attempt to resolve instance from disposed scope "{display_name(scope_key)}"',
        )


class ScopeWireDependencyCycleError(ScopeWireError):
    """Signal a binding whose factory, directly or transitively, requests itself.

    ``activation_chain`` holds the bindings in activation order, ending with
    the binding that was requested a second time.
    """

    error_type = ErrorType.DEPENDENCY_CYCLE

    def __init__(self, activation_chain: Sequence[Binding]) -> None:
        self.activation_chain = tuple(activation_chain)
        super().__init__(f"Dependency cycle detected [{self.rendered_chain}]")

    @property
    def rendered_chain(self) -> str:
        return " -> ".join(binding.display_name for binding in self.activation_chain)


class ScopeWireInvalidMultiBindingError(ScopeWireError):
    """Signal a second non-singleton binding under the ``BIND`` conflict resolution.

    Several candidates for one request are only unambiguous when they are all
    eagerly activated singletons.
    """

    error_type = ErrorType.INVALID_MULTI_BINDING

    def __init__(self, type_key: TypeKey, name: BindingName, lifecycle: Lifecycle) -> None:
        self.type_key = type_key
        self.name = name
        self.lifecycle = lifecycle
        super().__init__(
            f'Multiple binding of {lifecycle.value} "{binding_display_name(type_key, name)}". '
            "Multiple binding is only possible for singletons.",
        )


class ScopeWireNullableBindingError(ScopeWireError):
    """Signal a binding that has neither an instance nor a factory."""

    error_type = ErrorType.NULLABLE_BINDING

    def __init__(self, type_key: TypeKey, name: BindingName = None) -> None:
        self.type_key = type_key
        self.name = name
        super().__init__(
            f'Unexpected nullable binding of type "{binding_display_name(type_key, name)}"',
        )


class ScopeWireMissingRequiredTypeError(ScopeWireError):
    """Signal a ``require_type`` declaration that no binding satisfies.

    Raised by ``ContainerBuilder.build`` before any instance is activated.
    """

    error_type = ErrorType.MISSING_REQUIRED_TYPE

    def __init__(
        self,
        type_key: TypeKey,
        name: BindingName = None,
        scope_key: ScopeKey | None = None,
    ) -> None:
        self.type_key = type_key
        self.name = name
        self.scope_key = scope_key
        message = f'Required type "{binding_display_name(type_key, name)}" is not provided'
        if scope_key is not None:
            message += f' in scope "{display_name(scope_key)}"'
        super().__init__(message)


class ScopeWireIllegalStateError(ScopeWireError):
    """Signal an operation attempted in a state that does not allow it.

    Raised by the dynamic module manager for unknown or not yet loaded
    modules, for failed imports (``cause`` holds the original error), and for
    eager singleton factories bound by dynamic modules.
    """

    error_type = ErrorType.ILLEGAL_STATE

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)
