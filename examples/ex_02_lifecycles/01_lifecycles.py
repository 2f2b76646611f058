"""Lifecycles: how widely and how long instances are shared.

1. ``SINGLETON`` is built with the container and shared everywhere.
2. ``LAZY_SINGLETON`` is built on first request and shared everywhere.
3. ``SCOPED`` is built once per scope key.
4. ``TRANSIENT`` is built on every request.
"""

from __future__ import annotations

from itertools import count

from scopewire import Container, Lifecycle


def main() -> None:
    built: list[str] = []
    sequence = count(1)

    def tracked(label: str) -> object:
        built.append(label)
        return next(sequence)

    container = (
        Container.builder()
        .bind_factory("eager", lambda _: tracked("eager"), Lifecycle.SINGLETON)
        .bind_factory("lazy", lambda _: tracked("lazy"), Lifecycle.LAZY_SINGLETON)
        .bind_factory("session", lambda _: tracked("session"), Lifecycle.SCOPED)
        .bind_factory("event", lambda _: tracked("event"), Lifecycle.TRANSIENT)
        .build()
    )
    print(f"built_at_startup={built}")  # => built_at_startup=['eager']

    request = container.scope("request")
    print(
        f"lazy_shared={request.get('lazy') == container.get('lazy')}",
    )  # => lazy_shared=True

    same_session = request.get("session") == request.get("session")
    print(f"session_within_scope={same_session}")  # => session_within_scope=True

    other_session = container.scope("job").get("session") != request.get("session")
    print(f"session_across_scopes={other_session}")  # => session_across_scopes=True

    print(f"event_fresh={container.get('event') != container.get('event')}")  # => event_fresh=True


if __name__ == "__main__":
    main()
