"""Phantom instances: hand out a dependency before it is built.

``get_phantom`` returns a stand-in that builds the real instance on first
use. Already available instances are returned as-is.
"""

from __future__ import annotations

from typing import Any

from scopewire import Container, Lifecycle, is_phantom_instance


class Mailer:
    def __init__(self) -> None:
        self.sent = 0

    def send(self) -> int:
        self.sent += 1
        return self.sent


def main() -> None:
    built = {"mailer": 0}

    def provide_mailer(_: Any) -> Mailer:
        built["mailer"] += 1
        return Mailer()

    container = (
        Container.builder()
        .bind_factory("mailer", provide_mailer, Lifecycle.LAZY_SINGLETON)
        .bind_instance("sender", "noreply@example.com")
        .build()
    )

    mailer = container.get_phantom("mailer")
    print(f"is_phantom={is_phantom_instance(mailer)}")  # => is_phantom=True
    print(f"built_before_use={built['mailer']}")  # => built_before_use=0

    mailer.send()
    mailer.send()
    print(f"sent={mailer.sent} built={built['mailer']}")  # => sent=2 built=1

    sender = container.get_phantom("sender")
    print(f"sender_is_phantom={is_phantom_instance(sender)}")  # => sender_is_phantom=False


if __name__ == "__main__":
    main()
