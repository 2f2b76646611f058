"""Deferred instances that activate their target on first interaction.

A :class:`PhantomInstance` stands in for an instance that has not been
activated yet. The first attribute read or write (or any forwarded special
method) calls the provider once; afterwards every interaction is routed to
that same captured instance.

The wrapper keeps the target's shape closed: reading an attribute the target
does not have yields ``None``, while assigning one raises ``AttributeError``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from scopewire.bindings import TypeKey, display_name


class PhantomInstance:
    __slots__ = ("_phantom_provider", "_phantom_resolved", "_phantom_type", "_phantom_value")

    def __init__(self, type_key: TypeKey, provider: Callable[[], Any]) -> None:
        object.__setattr__(self, "_phantom_type", type_key)
        object.__setattr__(self, "_phantom_provider", provider)
        object.__setattr__(self, "_phantom_resolved", False)
        object.__setattr__(self, "_phantom_value", None)

    def _phantom_target(self) -> Any:
        if not object.__getattribute__(self, "_phantom_resolved"):
            provider = object.__getattribute__(self, "_phantom_provider")
            object.__setattr__(self, "_phantom_value", provider())
            object.__setattr__(self, "_phantom_resolved", True)
        return object.__getattribute__(self, "_phantom_value")

    def __getattr__(self, name: str) -> Any:
        target = self._phantom_target()
        if name.startswith("__") and name.endswith("__"):
            # Protocol probes (copy, pickle, ...) must still see missing dunders.
            return getattr(target, name)
        return getattr(target, name, None)

    def __setattr__(self, name: str, value: Any) -> None:
        target = self._phantom_target()
        if not hasattr(target, name):
            msg = (
                f"{type(target).__name__!r} object has no attribute {name!r}; "
                "phantom instances cannot add attributes to their target"
            )
            raise AttributeError(msg)
        setattr(target, name, value)

    def __delattr__(self, name: str) -> None:
        delattr(self._phantom_target(), name)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._phantom_target()(*args, **kwargs)

    def __len__(self) -> int:
        return len(self._phantom_target())

    def __iter__(self) -> Iterator[Any]:
        return iter(self._phantom_target())

    def __contains__(self, item: Any) -> bool:
        return item in self._phantom_target()

    def __getitem__(self, key: Any) -> Any:
        return self._phantom_target()[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._phantom_target()[key] = value

    def __delitem__(self, key: Any) -> None:
        del self._phantom_target()[key]

    def __bool__(self) -> bool:
        return bool(self._phantom_target())

    def __eq__(self, other: object) -> bool:
        return bool(self._phantom_target() == other)

    def __ne__(self, other: object) -> bool:
        return bool(self._phantom_target() != other)

    def __hash__(self) -> int:
        return hash(self._phantom_target())

    def __str__(self) -> str:
        return str(self._phantom_target())

    def __repr__(self) -> str:
        if object.__getattribute__(self, "_phantom_resolved"):
            return repr(object.__getattribute__(self, "_phantom_value"))
        type_key = object.__getattribute__(self, "_phantom_type")
        return f"<PhantomInstance of {display_name(type_key)} (unresolved)>"


def is_phantom_instance(obj: object) -> bool:
    """Return whether ``obj`` is a phantom wrapper. Never triggers activation."""
    return type(obj) is PhantomInstance


def is_phantom_resolved(obj: object) -> bool:
    """Return whether the phantom ``obj`` already activated its target.

    Non-phantom objects are always considered resolved.
    """
    if not is_phantom_instance(obj):
        return True
    return bool(object.__getattribute__(obj, "_phantom_resolved"))
