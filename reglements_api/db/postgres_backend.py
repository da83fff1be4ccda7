"""PostgreSQL database backend."""
import logging
import threading
from typing import Any, Optional, Sequence, Tuple

import psycopg2
from psycopg2 import extensions, pool
from psycopg2.extras import RealDictCursor

from reglements_api.core.exceptions import PoolExhaustedException

from .backend_base import DatabaseBackend
from .descriptor import BackendDescriptor
from .dialect import POSITIONAL_RE, bind_positional
from .result import ExecutionResult

logger = logging.getLogger(__name__)


class PostgresBackend(DatabaseBackend):
    """PostgreSQL database backend implementation.

    Queries already use this engine's dialect and run as written.
    ThreadedConnectionPool raises PoolError instead of waiting when every
    connection is out, so checkouts first take a slot from a semaphore
    sized like the pool.
    """

    name = "PostgreSQL"

    def __init__(
        self,
        descriptor: BackendDescriptor,
        pool_size: int = 10,
        pool_timeout: Optional[float] = 30.0,
        ssl: bool = False,
    ):
        super().__init__(descriptor, pool_size=pool_size, pool_timeout=pool_timeout)
        self.conn_params = {"dsn": descriptor.url}
        if ssl:
            self.conn_params["sslmode"] = "require"
        self._pool: Optional[pool.ThreadedConnectionPool] = None
        self._slots = threading.BoundedSemaphore(pool_size)
        logger.info(f"PostgresBackend initialized for {descriptor.host}:{descriptor.port}/{descriptor.database}")

    def _init_pool(self):
        """Initialize the connection pool if not already initialized"""
        if self._pool is None:
            logger.info("Creating new PostgreSQL connection pool")
            self._pool = pool.ThreadedConnectionPool(
                minconn=1,
                maxconn=self.pool_size,
                **self.conn_params
            )

    def _getconn(self):
        if not self._slots.acquire(timeout=self.pool_timeout):
            logger.error(
                f"No PostgreSQL connection available after {self.pool_timeout}s "
                f"(pool size {self.pool_size})"
            )
            raise PoolExhaustedException(
                detail=f"Timed out after {self.pool_timeout}s waiting for a free connection"
            )
        try:
            self._init_pool()
            connection = self._pool.getconn()
        except Exception:
            self._slots.release()
            raise
        # BEGIN/COMMIT/ROLLBACK arrive as ordinary statements
        connection.autocommit = True
        return connection

    def _putconn(self, connection):
        try:
            self._return_connection(connection)
        finally:
            self._slots.release()

    def _return_connection(self, connection):
        if self._pool is None:
            connection.close()
            return
        if not connection.closed and (
            connection.info.transaction_status != extensions.TRANSACTION_STATUS_IDLE
        ):
            logger.warning("Connection returned to the pool inside a transaction; rolling back")
            try:
                with connection.cursor() as cursor:
                    cursor.execute("ROLLBACK")
            except psycopg2.Error:
                self._pool.putconn(connection, close=True)
                return
        self._pool.putconn(connection, close=bool(connection.closed))

    def _convert_placeholders(self, query: str, params: Sequence[Any]) -> Tuple[str, Optional[tuple]]:
        """Bind $n markers for psycopg2, which only understands %s."""
        if not POSITIONAL_RE.search(query):
            return query, None
        return bind_positional(query.replace("%", "%%"), params, "%s")

    def _run(self, connection, text: str, params: Sequence[Any]) -> ExecutionResult:
        query, bound = self._convert_placeholders(text, params)
        cursor = connection.cursor(cursor_factory=RealDictCursor)
        try:
            cursor.execute(query, bound)
            if cursor.description is not None:
                rows = [dict(row) for row in cursor.fetchall()]
                return ExecutionResult(rows=rows, row_count=cursor.rowcount)
            return ExecutionResult(rows=[], row_count=max(cursor.rowcount, 0))
        except psycopg2.Error as e:
            logger.error(f"Error executing query: {str(e)}")
            raise
        finally:
            cursor.close()

    def close(self):
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
