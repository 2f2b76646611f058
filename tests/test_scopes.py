"""Tests for DIScope lifecycles, scope restrictions and disposal."""

from __future__ import annotations

from itertools import count

import pytest

from scopewire.activator import InstanceActivator
from scopewire.bindings import Binding
from scopewire.container import ContainerBuilder
from scopewire.exceptions import (
    ScopeWireBindingNotFoundError,
    ScopeWireClosedScopeAccessError,
)
from scopewire.lifecycle import ConflictResolution, Lifecycle
from scopewire.registry import BindingsRegistry
from scopewire.scope import DIScope
from tests.helpers import CountingFactory, Resource


class TestSingleton:
    def test_activated_once_at_build(self, builder: ContainerBuilder) -> None:
        """SINGLETON factories run exactly once, when the container is built."""
        factory = CountingFactory(lambda _: object())
        builder.bind_factory("service", factory, Lifecycle.SINGLETON)

        container = builder.build()

        assert factory.calls == 1
        instance = container.get("service")
        assert container.scope("request").get("service") is instance
        assert container.scope("job").get("service") is instance
        assert factory.calls == 1

    def test_singleton_is_the_default_lifecycle(self, builder: ContainerBuilder) -> None:
        """bind_factory defaults to an eager SINGLETON."""
        factory = CountingFactory(lambda _: object())
        builder.bind_factory("service", factory)

        builder.build()

        assert factory.calls == 1

    @pytest.mark.parametrize("dependency_first", [True, False])
    def test_singleton_depending_on_singleton(
        self,
        builder: ContainerBuilder,
        dependency_first: bool,
    ) -> None:
        """A singleton requested by another singleton's factory is activated once."""
        base = CountingFactory(lambda _: object())
        consumer = CountingFactory(lambda r: ("consumer", r.get("base")))
        bindings = [("base", base), ("consumer", consumer)]
        if not dependency_first:
            bindings.reverse()
        for type_key, factory in bindings:
            builder.bind_factory(type_key, factory, Lifecycle.SINGLETON)

        container = builder.build()

        assert (base.calls, consumer.calls) == (1, 1)
        assert container.get("consumer") == ("consumer", container.get("base"))
        assert container.get_all("base") == (container.get("base"),)
        assert (base.calls, consumer.calls) == (1, 1)


class TestLazySingleton:
    def test_activated_on_first_request(self, builder: ContainerBuilder) -> None:
        """LAZY_SINGLETON factories run on first request only."""
        factory = CountingFactory(lambda _: object())
        builder.bind_factory("service", factory, Lifecycle.LAZY_SINGLETON)
        container = builder.build()

        assert factory.calls == 0
        instance = container.get("service")
        assert container.get("service") is instance
        assert factory.calls == 1

    def test_first_request_from_child_scope_is_shared_globally(
        self,
        builder: ContainerBuilder,
    ) -> None:
        """A lazy singleton first requested in a child scope is anchored at the root."""
        factory = CountingFactory(lambda _: Resource())
        builder.bind_factory("service", factory, Lifecycle.LAZY_SINGLETON)
        container = builder.build()

        instance = container.scope("request").get("service")
        container.dispose_scope("request")

        assert container.get("service") is instance
        assert container.scope("job").get("service") is instance
        assert instance.dispose_calls == 0
        assert factory.calls == 1


class TestTransient:
    def test_every_request_activates(self, builder: ContainerBuilder) -> None:
        """TRANSIENT factories run on every request and are never cached."""
        factory = CountingFactory(lambda _: object())
        builder.bind_factory("service", factory, Lifecycle.TRANSIENT)
        container = builder.build()

        instances = [container.get("service") for _ in range(5)]

        assert factory.calls == 5
        assert len({id(instance) for instance in instances}) == 5


class TestScoped:
    def test_shared_within_one_scope(self, builder: ContainerBuilder) -> None:
        """SCOPED instances are shared within a scope."""
        builder.bind_factory("session", lambda _: object(), Lifecycle.SCOPED)
        container = builder.build()
        scope = container.scope("request")

        assert scope.get("session") is scope.get("session")

    def test_distinct_between_scope_keys(self, builder: ContainerBuilder) -> None:
        """Different scope keys get different SCOPED instances."""
        builder.bind_factory("session", lambda _: object(), Lifecycle.SCOPED)
        container = builder.build()

        assert container.scope("request").get("session") is not container.scope("job").get(
            "session",
        )

    def test_new_instance_after_reentering_disposed_key(self, builder: ContainerBuilder) -> None:
        """Disposing a scope and re-entering its key yields a new instance."""
        counter = count()
        builder.bind_factory("session", lambda _: next(counter), Lifecycle.SCOPED)
        container = builder.build()

        first = container.scope("request").get("session")
        container.dispose_scope("request")
        second = container.scope("request").get("session")

        assert (first, second) == (0, 1)

    def test_scoped_dependencies_resolve_from_requesting_scope(
        self,
        builder: ContainerBuilder,
    ) -> None:
        """Factories receive the requesting scope as their resolver."""
        builder.bind_factory("session", lambda _: object(), Lifecycle.SCOPED)
        builder.bind_factory(
            "handler",
            lambda r: ("handler", r.get("session")),
            Lifecycle.SCOPED,
        )
        container = builder.build()
        scope = container.scope("request")

        _, session = scope.get("handler")

        assert session is scope.get("session")


class TestScopeRestriction:
    def test_restricted_binding_not_found_elsewhere(self, builder: ContainerBuilder) -> None:
        """A binding restricted to a scope is not visible from other scopes."""
        builder.bind_factory("session", lambda _: object(), Lifecycle.SCOPED, scope="request")
        container = builder.build()

        with pytest.raises(ScopeWireBindingNotFoundError) as exc_info:
            container.get("session")

        assert exc_info.value.scope_key == "global"
        assert str(exc_info.value) == 'Binding of type "session" not found in scope "global"'
        assert container.scope("request").get("session") is not None

    def test_restriction_to_several_scopes(self, builder: ContainerBuilder) -> None:
        """A tuple restriction makes the binding available in each listed scope."""
        builder.bind_factory(
            "session",
            lambda _: object(),
            Lifecycle.SCOPED,
            scope=("request", "job"),
        )
        container = builder.build()

        assert container.scope("request").get("session") is not None
        assert container.scope("job").get("session") is not None
        with pytest.raises(ScopeWireBindingNotFoundError):
            container.scope("other").get("session")

    def test_restricted_bindings_per_scope(self, builder: ContainerBuilder) -> None:
        """Each scope sees the binding restricted to it."""
        builder.bind_instance("mode", "web", scope="request")
        builder.bind_instance("mode", "batch", scope="job")
        container = builder.build()

        assert container.scope("request").get("mode") == "web"
        assert container.scope("job").get("mode") == "batch"


class TestGetOptional:
    def test_returns_default_when_missing(self, builder: ContainerBuilder) -> None:
        """get_optional returns the default for a missing binding."""
        container = builder.build()

        assert container.get_optional("missing") is None
        assert container.get_optional("missing", default="fallback") == "fallback"

    def test_returns_instance_when_bound(self, builder: ContainerBuilder) -> None:
        """get_optional resolves like get when a binding exists."""
        container = builder.bind_instance("a", 1).build()

        assert container.get_optional("a", default=2) == 1

    def test_does_not_recover_closed_scope_access(self, builder: ContainerBuilder) -> None:
        """get_optional still fails on a disposed scope."""
        container = builder.build()
        scope = container.scope("request")
        scope.dispose()

        with pytest.raises(ScopeWireClosedScopeAccessError):
            scope.get_optional("missing")

    def test_does_not_recover_errors_of_dependencies(self, builder: ContainerBuilder) -> None:
        """Missing dependencies of an existing binding still propagate."""
        builder.bind_factory("a", lambda r: r.get("missing"), Lifecycle.TRANSIENT)
        container = builder.build()

        with pytest.raises(ScopeWireBindingNotFoundError):
            container.get_optional("a")


class TestGetAll:
    def test_prebuilt_then_activated_instances(self, builder: ContainerBuilder) -> None:
        """get_all lists prebuilt instances before activated singletons."""
        builder.bind_instance("plugin", "a")
        builder.bind_factory("plugin", lambda _: "c")
        builder.bind_instance("plugin", "b")
        container = builder.build()

        assert container.get_all("plugin") == ("a", "b", "c")

    @pytest.mark.parametrize("consumer_first", [True, False])
    def test_one_instance_per_singleton_binding(
        self,
        builder: ContainerBuilder,
        consumer_first: bool,
    ) -> None:
        """Singletons requested during build are not collected twice."""
        labels = count()
        plugin = CountingFactory(lambda _: f"plugin-{next(labels)}")
        if consumer_first:
            builder.bind_factory("consumer", lambda r: r.get("plugin"))
        builder.bind_factory("plugin", plugin).bind_factory("plugin", plugin)
        if not consumer_first:
            builder.bind_factory("consumer", lambda r: r.get("plugin"))

        container = builder.build()

        assert container.get_all("plugin") == ("plugin-0", "plugin-1")
        assert container.get("consumer") == "plugin-0"
        assert plugin.calls == 2

    def test_child_scope_delegates_to_root(self, builder: ContainerBuilder) -> None:
        """Child scopes return the root collection."""
        builder.bind_instance("plugin", "a").bind_instance("plugin", "b")
        container = builder.build()

        assert container.scope("request").get_all("plugin") == ("a", "b")

    def test_does_not_force_activation(self, builder: ContainerBuilder) -> None:
        """Lazy bindings appear only once they were requested."""
        factory = CountingFactory(lambda _: "lazy")
        builder.bind_factory("plugin", factory, Lifecycle.LAZY_SINGLETON)
        container = builder.build()

        assert container.get_all("plugin") == ()
        assert factory.calls == 0

        container.scope("request").get("plugin")

        assert container.get_all("plugin") == ("lazy",)

    def test_unknown_type(self, builder: ContainerBuilder) -> None:
        """Unknown types yield an empty tuple."""
        assert builder.build().get_all("missing") == ()


class TestGetProvider:
    def test_defers_activation_until_called(self, builder: ContainerBuilder) -> None:
        """Creating a provider does not activate the binding."""
        factory = CountingFactory(lambda _: object())
        builder.bind_factory("service", factory, Lifecycle.LAZY_SINGLETON)
        container = builder.build()

        provider = container.get_provider("service")

        assert factory.calls == 0
        assert provider() is provider()
        assert factory.calls == 1

    def test_provider_name(self, builder: ContainerBuilder) -> None:
        """Providers are named after the type and scope they resolve from."""
        container = builder.bind_instance("value", 1).build()

        assert container.get_provider("value").__name__ == "provide_value_global"
        assert container.scope("request").get_provider("value").__name__ == (
            "provide_value_request"
        )

    def test_provider_of_disposed_scope_fails(self, builder: ContainerBuilder) -> None:
        """Providers re-check disposal on every call."""
        container = builder.bind_instance("value", 1).build()
        scope = container.scope("request")
        provider = scope.get_provider("value")

        assert provider() == 1
        scope.dispose()

        with pytest.raises(ScopeWireClosedScopeAccessError):
            provider()
        with pytest.raises(ScopeWireClosedScopeAccessError):
            scope.get_provider("value")


class TestDispose:
    def test_disposes_each_cached_instance_once(self, builder: ContainerBuilder) -> None:
        """Every disposable cached instance is disposed exactly once."""
        builder.bind_factory("a", lambda _: Resource("a"), Lifecycle.SCOPED)
        builder.bind_factory("b", lambda _: Resource("b"), Lifecycle.SCOPED)
        container = builder.build()
        scope = container.scope("request")
        a = scope.get("a")
        b = scope.get("b")

        scope.dispose()
        scope.dispose()

        assert (a.dispose_calls, b.dispose_calls) == (1, 1)
        assert scope.is_disposed()

    def test_disposes_in_reverse_activation_order(self, builder: ContainerBuilder) -> None:
        """The most recently activated instance is disposed first."""
        log: list[str] = []
        builder.bind_factory("first", lambda _: Resource("first", log), Lifecycle.SCOPED)
        builder.bind_factory(
            "second",
            lambda r: (r.get("first"), Resource("second", log))[1],
            Lifecycle.SCOPED,
        )
        container = builder.build()
        scope = container.scope("request")
        scope.get("second")

        scope.dispose()

        assert log == ["second", "first"]

    def test_shared_instance_disposed_once(self, builder: ContainerBuilder) -> None:
        """An instance cached under two bindings is disposed once."""
        shared = Resource()
        builder.bind_factory("a", lambda _: shared, Lifecycle.SCOPED)
        builder.bind_factory("b", lambda _: shared, Lifecycle.SCOPED)
        container = builder.build()
        scope = container.scope("request")
        scope.get("a")
        scope.get("b")

        scope.dispose()

        assert shared.dispose_calls == 1

    def test_transient_and_prebuilt_instances_are_not_disposed(
        self,
        builder: ContainerBuilder,
    ) -> None:
        """Only instances cached by the scope are disposed."""
        prebuilt = Resource()
        builder.bind_instance("prebuilt", prebuilt)
        builder.bind_factory("transient", lambda _: Resource(), Lifecycle.TRANSIENT)
        container = builder.build()
        scope = container.scope("request")
        scope.get("prebuilt")
        transient = scope.get("transient")

        scope.dispose()

        assert prebuilt.dispose_calls == 0
        assert transient.dispose_calls == 0

    def test_all_hooks_run_when_one_fails(self, builder: ContainerBuilder) -> None:
        """A failing hook does not prevent the others from running."""

        class Failing:
            def dispose(self) -> None:
                raise RuntimeError("dispose failed")

        survivor = Resource()
        builder.bind_factory("survivor", lambda _: survivor, Lifecycle.SCOPED)
        builder.bind_factory("failing", lambda _: Failing(), Lifecycle.SCOPED)
        container = builder.build()
        scope = container.scope("request")
        scope.get("survivor")
        scope.get("failing")

        with pytest.raises(RuntimeError, match="dispose failed"):
            scope.dispose()

        assert survivor.dispose_calls == 1
        assert scope.is_disposed()

    def test_root_scope_is_not_disposable(self, builder: ContainerBuilder) -> None:
        """Disposing the root scope is a no-op."""
        resource = Resource()
        builder.bind_factory("resource", lambda _: resource)
        container = builder.build()

        container.global_scope.dispose()

        assert not container.global_scope.is_disposed()
        assert resource.dispose_calls == 0
        assert container.get("resource") is resource

    def test_disposed_scope_rejects_access(self, builder: ContainerBuilder) -> None:
        """Every resolver operation of a disposed scope fails."""
        container = builder.bind_instance("a", 1).build()
        scope = container.scope("request")
        scope.dispose()

        for operation in (scope.get, scope.get_all, scope.get_phantom):
            with pytest.raises(ScopeWireClosedScopeAccessError, match='"request"'):
                operation("a")

    def test_context_manager_disposes_on_exit(self, builder: ContainerBuilder) -> None:
        """Leaving a ``with`` block disposes the scope."""
        builder.bind_factory("resource", lambda _: Resource(), Lifecycle.SCOPED)
        container = builder.build()

        with container.scope("request") as scope:
            resource = scope.get("resource")

        assert scope.is_disposed()
        assert resource.dispose_calls == 1

    def test_scope_disposable_handle(self, builder: ContainerBuilder) -> None:
        """The scope disposable reports and ends the scope lifetime."""
        container = builder.build()
        scope = container.scope("request")
        disposable = scope.get_scope_disposable()

        assert disposable.scope_key == "request"
        assert not disposable.is_scope_disposed()

        disposable.dispose()

        assert disposable.is_scope_disposed()
        assert scope.is_disposed()


class TestScopeConstruction:
    def test_parentless_scope_activates_singletons(
        self,
        registry: BindingsRegistry,
        activator: InstanceActivator,
    ) -> None:
        """A scope built without a parent activates eager singletons itself."""
        factory = CountingFactory(lambda _: object())
        registry.register(Binding(type="service", factory=factory), ConflictResolution.THROW)

        root = DIScope("root", activator)

        assert root.parent is None
        assert factory.calls == 1
        assert root.get("service") is root.get("service")
        assert repr(root) == "DIScope('root', active)"

    def test_child_scope_does_not_activate_singletons(
        self,
        registry: BindingsRegistry,
        activator: InstanceActivator,
    ) -> None:
        """Child scopes reuse the root's singletons."""
        factory = CountingFactory(lambda _: object())
        registry.register(Binding(type="service", factory=factory), ConflictResolution.THROW)
        root = DIScope("root", activator)

        child = DIScope("child", activator, parent=root)

        assert child.parent is root
        assert child.get("service") is root.get("service")
        assert factory.calls == 1
