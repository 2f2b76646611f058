from scopewire.bindings import ScopeKey
from scopewire.lifecycle import ConflictResolution, Lifecycle

DEFAULT_GLOBAL_SCOPE_KEY: ScopeKey = "global"

DEFAULT_LIFECYCLE = Lifecycle.SINGLETON

# Eager singletons cannot wait for an asynchronous import.
DEFAULT_DYNAMIC_LIFECYCLE = Lifecycle.LAZY_SINGLETON

DEFAULT_CONFLICT_RESOLUTION = ConflictResolution.BIND
