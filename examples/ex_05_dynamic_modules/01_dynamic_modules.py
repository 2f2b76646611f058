"""Dynamic modules: bindings backed by a module imported asynchronously.

The build delegate receives a stand-in for the module. Factories using it fail
until ``load_module_async`` has imported the module.
"""

from __future__ import annotations

import asyncio

from scopewire import Container, ScopeWireIllegalStateError, dynamic_module, import_module_delegate

json_module = dynamic_module(
    "json",
    import_module_delegate("json"),
    lambda configurator, json: configurator.bind_factory(
        "encoder",
        lambda _: json.JSONEncoder(sort_keys=True),
    ),
)


async def main() -> None:
    container = Container.builder().add_module(json_module).build()

    try:
        container.get("encoder")
    except ScopeWireIllegalStateError as error:
        print(f"before_load={error}")  # => before_load=Module json not loaded

    await container.load_module_async(json_module)

    encoder = container.get("encoder")
    print(f"after_load={encoder.encode({'b': 1, 'a': 2})}")  # => after_load={"a": 2, "b": 1}


if __name__ == "__main__":
    asyncio.run(main())
