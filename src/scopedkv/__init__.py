"""scopedkv - Embedded key-value store with global, workflow and execution scopes."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("scopedkv")
except PackageNotFoundError:
    __version__ = "0+local"
from scopedkv.config import KvsConfig
from scopedkv.exceptions import InvalidScopeError, KvsConfigError, KvsError, ScopeIdRequiredError
from scopedkv.state.scope import ABSENT, Scope, ScopeRef
from scopedkv.state.store import ScopedStore, ScopeView, StoreEntry

__all__ = [
    "__version__",
    "ABSENT",
    "InvalidScopeError",
    "KvsConfig",
    "KvsConfigError",
    "KvsError",
    "Scope",
    "ScopeIdRequiredError",
    "ScopeRef",
    "ScopeView",
    "ScopedStore",
    "StoreEntry",
]
