from __future__ import annotations

from enum import Enum


class Lifecycle(str, Enum):
    """Define how long and how widely an activated instance is shared."""

    SINGLETON = "Singleton"
    """Activated eagerly when the container is built and shared everywhere."""

    LAZY_SINGLETON = "LazySingleton"
    """Activated on first request and shared everywhere afterwards."""

    SCOPED = "Scoped"
    """Activated once per scope and shared within that scope only."""

    TRANSIENT = "Transient"
    """Activated on every request and never cached."""


class ConflictResolution(str, Enum):
    """Select what happens when a binding for an existing (type, name) is registered.

    Registration APIs also accept the plain string values (``"bind"``,
    ``"throw"``, ``"skip"``, ``"override"``) and coerce them with
    :meth:`coerce`.
    """

    BIND = "bind"
    """Keep both bindings. Only legal when the new binding is a ``SINGLETON``."""

    THROW = "throw"
    """Reject the new binding with ``ScopeWireBindingConflictError``."""

    SKIP = "skip"
    """Keep the first binding and silently drop the new one."""

    OVERRIDE = "override"
    """Replace the existing binding in place."""

    @classmethod
    def coerce(cls, value: ConflictResolution | str) -> ConflictResolution:
        if isinstance(value, cls):
            return value
        return cls(value)
