"""Shared pytest fixtures for scopewire tests."""

import pytest

from scopewire.activator import InstanceActivator
from scopewire.container import Container, ContainerBuilder
from scopewire.registry import BindingsRegistry


@pytest.fixture()
def builder() -> ContainerBuilder:
    """Builder with default configuration."""
    return Container.builder()


@pytest.fixture()
def registry() -> BindingsRegistry:
    """Empty bindings registry."""
    return BindingsRegistry()


@pytest.fixture()
def activator(registry: BindingsRegistry) -> InstanceActivator:
    """Activator over the ``registry`` fixture."""
    return InstanceActivator(registry)
