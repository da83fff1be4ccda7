"""MySQL database backend.

Every statement is rewritten from the PostgreSQL dialect by
:mod:`reglements_api.db.dialect` before it reaches PyMySQL.
"""
import logging
from typing import Any, Optional, Sequence, Tuple

import pymysql
import pymysql.cursors
from sqlalchemy import exc as sa_exc
from sqlalchemy.pool import QueuePool

from reglements_api.core.exceptions import PoolExhaustedException

from .backend_base import DatabaseBackend
from .descriptor import BackendDescriptor
from .dialect import MYSQL_PLACEHOLDER, adapt_query, finish_returning
from .result import ExecutionResult, NativeResult

logger = logging.getLogger(__name__)


class MySQLBackend(DatabaseBackend):
    """MySQL database backend implementation."""

    name = "MySQL"

    def __init__(
        self,
        descriptor: BackendDescriptor,
        pool_size: int = 10,
        pool_timeout: Optional[float] = 30.0,
        returning_key_column: str = "ID_reglement",
    ):
        super().__init__(descriptor, pool_size=pool_size, pool_timeout=pool_timeout)
        self.returning_key_column = returning_key_column
        self.conn_params = {
            "host": descriptor.host,
            "port": descriptor.port,
            "user": descriptor.user,
            "password": descriptor.password or "",
            "database": descriptor.database,
            "charset": "utf8mb4",
            "cursorclass": pymysql.cursors.DictCursor,
            "autocommit": True,
        }
        # Checked-in connections are rolled back
        self._pool = QueuePool(
            lambda: pymysql.connect(**self.conn_params),
            pool_size=pool_size,
            max_overflow=0,
            timeout=pool_timeout,
            reset_on_return="rollback",
        )
        logger.info(f"MySQLBackend initialized for {descriptor.host}:{descriptor.port}/{descriptor.database}")

    def _getconn(self):
        try:
            connection = self._pool.connect()
        except sa_exc.TimeoutError as e:
            logger.error(
                f"No MySQL connection available after {self.pool_timeout}s "
                f"(pool size {self.pool_size})"
            )
            raise PoolExhaustedException(detail=str(e))
        connection.ping(reconnect=True)
        return connection

    def _putconn(self, connection):
        if not connection.open:
            # Dead connection; drop it from the pool
            connection.invalidate()
            return
        connection.close()

    def _convert_placeholders(self, query: str, params: Sequence[Any]) -> Tuple[str, Optional[tuple]]:
        """Convert ? placeholders to %s for PyMySQL."""
        if not params:
            return query, None
        return query.replace("%", "%%").replace(MYSQL_PLACEHOLDER, "%s"), tuple(params)

    def _execute(self, connection, query: str, params: Sequence[Any]) -> NativeResult:
        """Run a MySQL-dialect statement; rows for result sets, a count header otherwise."""
        query, args = self._convert_placeholders(query, params)
        try:
            with connection.cursor() as cursor:
                cursor.execute(query, args)
                if cursor.description is not None:
                    return list(cursor.fetchall())
                return {"affectedRows": cursor.rowcount, "insertId": cursor.lastrowid}
        except pymysql.MySQLError as e:
            logger.error(f"MySQL Error: {str(e)}")
            raise

    def _run(self, connection, text: str, params: Sequence[Any]) -> ExecutionResult:
        adapted = adapt_query(text, params, self.returning_key_column)
        logger.debug(f"MySQL Query: {adapted.text}")
        logger.debug(f"MySQL Params (converted): {adapted.params}")

        native = self._execute(connection, adapted.text, adapted.params)
        return finish_returning(
            adapted.returning,
            native,
            lambda query, query_params: self._execute(connection, query, query_params),
        )

    def close(self):
        self._pool.dispose()
