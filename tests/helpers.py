"""Test doubles shared across scopewire tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class Resource:
    """Disposable test double recording how often it was disposed."""

    def __init__(self, label: str = "resource", log: list[str] | None = None) -> None:
        self.label = label
        self.dispose_calls = 0
        self._log = log

    def dispose(self) -> None:
        self.dispose_calls += 1
        if self._log is not None:
            self._log.append(self.label)


class CountingFactory:
    """Factory wrapper counting its invocations."""

    def __init__(self, build: Callable[[Any], Any]) -> None:
        self.calls = 0
        self._build = build

    def __call__(self, resolver: Any) -> Any:
        self.calls += 1
        return self._build(resolver)
