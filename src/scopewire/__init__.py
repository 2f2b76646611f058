from scopewire.activator import InstanceActivator
from scopewire.bindings import Binding, RequiredTypeToken, binding_display_name, display_name
from scopewire.configurator import ConditionalConfigurator, ContainerConfigurator
from scopewire.container import Container, ContainerBuilder
from scopewire.exceptions import (
    ErrorType,
    ScopeWireBindingConflictError,
    ScopeWireBindingNotFoundError,
    ScopeWireClosedScopeAccessError,
    ScopeWireDependencyCycleError,
    ScopeWireError,
    ScopeWireIllegalStateError,
    ScopeWireInvalidMultiBindingError,
    ScopeWireMissingRequiredTypeError,
    ScopeWireNullableBindingError,
)
from scopewire.lifecycle import ConflictResolution, Lifecycle
from scopewire.modules import (
    DeferredModuleMember,
    DynamicModule,
    DynamicModuleConfigurator,
    DynamicModuleProxy,
    DynamicModulesManager,
    StaticModule,
    dynamic_module,
    import_module_delegate,
    static_module,
)
from scopewire.phantom import PhantomInstance, is_phantom_instance, is_phantom_resolved
from scopewire.registry import BindingsRegistry
from scopewire.resolver import DependencyResolver, ScopeDisposable
from scopewire.scope import DIScope

__all__ = [
    "Binding",
    "BindingsRegistry",
    "ConditionalConfigurator",
    "ConflictResolution",
    "Container",
    "ContainerBuilder",
    "ContainerConfigurator",
    "DIScope",
    "DeferredModuleMember",
    "DependencyResolver",
    "DynamicModule",
    "DynamicModuleConfigurator",
    "DynamicModuleProxy",
    "DynamicModulesManager",
    "ErrorType",
    "InstanceActivator",
    "Lifecycle",
    "PhantomInstance",
    "RequiredTypeToken",
    "ScopeDisposable",
    "ScopeWireBindingConflictError",
    "ScopeWireBindingNotFoundError",
    "ScopeWireClosedScopeAccessError",
    "ScopeWireDependencyCycleError",
    "ScopeWireError",
    "ScopeWireIllegalStateError",
    "ScopeWireInvalidMultiBindingError",
    "ScopeWireMissingRequiredTypeError",
    "ScopeWireNullableBindingError",
    "StaticModule",
    "binding_display_name",
    "display_name",
    "dynamic_module",
    "import_module_delegate",
    "is_phantom_instance",
    "is_phantom_resolved",
    "static_module",
]
