"""Quickstart: bind values and factories, then resolve them.

Factories receive the resolver and request their own dependencies from it.
Singletons are built once, when the container is built.
"""

from __future__ import annotations

from typing import Any

from scopewire import Container


def main() -> None:
    calls = {"value": 0}

    def provide_value(resolver: Any) -> int:
        calls["value"] += 1
        return resolver.get("origin") + 10

    container = (
        Container.builder()
        .bind_instance("origin", 32)
        .bind_factory("value", provide_value)
        .build()
    )

    print(f"value={container.get('value')}")  # => value=42
    print(f"again={container.get('value')}")  # => again=42
    print(f"factory_calls={calls['value']}")  # => factory_calls=1


if __name__ == "__main__":
    main()
