"""Errors: every failure is a ``ScopeWireError`` tagged with an ``ErrorType``."""

from __future__ import annotations

from scopewire import (
    ConflictResolution,
    Container,
    Lifecycle,
    ScopeWireDependencyCycleError,
    ScopeWireError,
    ScopeWireMissingRequiredTypeError,
)


def main() -> None:
    builder = (
        Container.builder()
        .bind_factory("A", lambda r: r.get("B"), Lifecycle.LAZY_SINGLETON)
        .bind_factory("B", lambda r: r.get("C"), Lifecycle.LAZY_SINGLETON)
        .bind_factory("C", lambda r: r.get("A"), Lifecycle.LAZY_SINGLETON)
        .require_type("settings")
    )

    try:
        builder.build()
    except ScopeWireMissingRequiredTypeError as error:
        print(error)  # => Required type "settings" is not provided

    container = builder.bind_instance("settings", {"debug": True}).build()
    try:
        container.get("A")
    except ScopeWireDependencyCycleError as error:
        print(error)  # => Dependency cycle detected [A -> B -> C -> A]

    try:
        builder.bind_instance("settings", {}, conflict_resolution=ConflictResolution.THROW)
    except ScopeWireError as error:
        print(f"{error.error_type.value}: {error}")  # => BindingConflict: Found binding conflict of type "settings"

    try:
        container.get("missing")
    except ScopeWireError as error:
        print(error.error_type.value)  # => BindingNotFound


if __name__ == "__main__":
    main()
