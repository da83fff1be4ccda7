"""Abstract base class for database backends."""
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from .descriptor import BackendDescriptor
from .result import ExecutionResult

logger = logging.getLogger(__name__)


class ScopeReleasedError(RuntimeError):
    """A ConnectionScope was used or released after its connection went back to the pool."""


class ConnectionScope:
    """One pooled connection reserved for a caller until release().

    Queries go through the same pipeline as DatabaseBackend.query, so
    BEGIN/COMMIT/ROLLBACK issued here apply to this connection only.
    """

    def __init__(self, backend: "DatabaseBackend", connection: Any):
        self._backend = backend
        self._connection = connection

    @property
    def released(self) -> bool:
        return self._connection is None

    def query(self, text: str, params: Sequence[Any] = ()) -> ExecutionResult:
        if self._connection is None:
            raise ScopeReleasedError("Cannot query through a released connection scope")
        return self._backend._run(self._connection, text, params)

    def release(self):
        if self._connection is None:
            raise ScopeReleasedError("Connection scope already released")
        connection, self._connection = self._connection, None
        self._backend._putconn(connection)


class DatabaseBackend(ABC):
    """Abstract database backend interface.

    Subclasses supply the driver-specific pieces: checking connections out
    of their pool and back in, and running one statement on a connection.
    A checkout that finds no free connection within ``pool_timeout`` seconds
    raises PoolExhaustedException.
    """

    name = "database"

    def __init__(
        self,
        descriptor: BackendDescriptor,
        pool_size: int = 10,
        pool_timeout: Optional[float] = 30.0,
    ):
        self.descriptor = descriptor
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout

    def query(self, text: str, params: Sequence[Any] = ()) -> ExecutionResult:
        """Run one statement on a pooled connection."""
        connection = self._getconn()
        try:
            return self._run(connection, text, params)
        finally:
            self._putconn(connection)

    def connect(self) -> ConnectionScope:
        """Reserve a connection; the caller must release() it on every path."""
        return ConnectionScope(self, self._getconn())

    @contextmanager
    def scope(self) -> Iterator[ConnectionScope]:
        """connect() paired with a guaranteed release()."""
        connection_scope = self.connect()
        try:
            yield connection_scope
        finally:
            connection_scope.release()

    @abstractmethod
    def _getconn(self) -> Any:
        """Check a connection out of the pool, raising PoolExhaustedException on timeout."""
        pass

    @abstractmethod
    def _putconn(self, connection: Any):
        """Hand a driver connection back to the pool."""
        pass

    @abstractmethod
    def _run(self, connection: Any, text: str, params: Sequence[Any]) -> ExecutionResult:
        """Execute a PostgreSQL-dialect statement on ``connection``."""
        pass

    @abstractmethod
    def close(self):
        """Close every pooled connection."""
        pass
