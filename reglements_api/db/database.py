import logging
from typing import Optional

from reglements_api.core.config import Settings, get_settings

from .backend_base import DatabaseBackend
from .descriptor import BackendDescriptor

logger = logging.getLogger(__name__)


def create_backend(settings: Optional[Settings] = None) -> DatabaseBackend:
    """Pick the backend for this process from the DATABASE_URL scheme.

    Called once at startup; the returned backend is handed to every
    component that needs database access.
    """
    settings = settings or get_settings()
    descriptor = BackendDescriptor.from_url(settings.database_url)

    try:
        if descriptor.is_mysql:
            from .mysql_backend import MySQLBackend

            backend = MySQLBackend(
                descriptor,
                pool_size=settings.db_pool_size,
                pool_timeout=settings.db_pool_timeout,
                returning_key_column=settings.returning_key_column,
            )
            logger.info("Using MySQL database")
        else:
            from .postgres_backend import PostgresBackend

            backend = PostgresBackend(
                descriptor,
                pool_size=settings.db_pool_size,
                pool_timeout=settings.db_pool_timeout,
                ssl=settings.is_production,
            )
            logger.info("Using PostgreSQL database")
        return backend

    except Exception as e:
        logger.error(f"Failed to create database backend: {str(e)}", exc_info=True)
        raise
