"""Scopes and disposal.

Disposing a scope calls ``dispose()`` on every instance it cached, most
recently activated first. The global scope is never disposed.
"""

from __future__ import annotations

from scopewire import Container, Lifecycle


class Connection:
    def __init__(self, log: list[str]) -> None:
        self._log = log

    def dispose(self) -> None:
        self._log.append("connection")


class UnitOfWork:
    def __init__(self, connection: Connection, log: list[str]) -> None:
        self.connection = connection
        self._log = log

    def dispose(self) -> None:
        self._log.append("unit_of_work")


def main() -> None:
    log: list[str] = []
    container = (
        Container.builder()
        .bind_factory("connection", lambda _: Connection(log), Lifecycle.SCOPED)
        .bind_factory(
            "unit_of_work",
            lambda r: UnitOfWork(r.get("connection"), log),
            Lifecycle.SCOPED,
        )
        .build()
    )

    with container.scope("request") as request:
        first = request.get("unit_of_work")
    print(f"disposed={log}")  # => disposed=['unit_of_work', 'connection']

    second = container.scope("request").get("unit_of_work")
    print(f"fresh_after_dispose={first is not second}")  # => fresh_after_dispose=True

    container.dispose_scope(container.global_scope_key)
    print(f"global_disposed={container.global_scope.is_disposed()}")  # => global_disposed=False


if __name__ == "__main__":
    main()
