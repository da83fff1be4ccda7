from .backend_base import ConnectionScope, DatabaseBackend, ScopeReleasedError
from .database import create_backend
from .descriptor import BackendDescriptor
from .result import ExecutionResult, normalize_result
# Note: driver backends are imported lazily by create_backend so only the selected driver is required

__all__ = [
    "BackendDescriptor",
    "ConnectionScope",
    "DatabaseBackend",
    "ExecutionResult",
    "ScopeReleasedError",
    "create_backend",
    "normalize_result",
]
