"""Data access for settlement records."""
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from .backend_base import ConnectionScope, DatabaseBackend
from .result import ExecutionResult
from .sql_queries import (
    DELETE_REGLEMENT_SQL,
    GET_REGLEMENT_SQL,
    GET_REGLEMENT_WITH_SALLE_SQL,
    INSERT_REGLEMENT_SQL,
    LIST_REGLEMENTS_SQL,
    REPLACE_REGLEMENT_SQL,
    SALLE_EXISTS_SQL,
    update_reglement_sql,
)

logger = logging.getLogger(__name__)

QueryInterface = Union[DatabaseBackend, ConnectionScope]


class ReglementStore:
    """Reglement queries over a backend or a reserved connection scope.

    Results keep the backend's shape: on MySQL an UPDATE ... RETURNING *
    yields ``{"affectedRows": n}`` instead of the updated row, and a
    DELETE yields the count header.
    """

    def __init__(self, db: QueryInterface):
        self.db = db

    def begin(self):
        self.db.query("BEGIN")

    def commit(self):
        self.db.query("COMMIT")

    def rollback(self):
        self.db.query("ROLLBACK")

    def list(self, limit: int = 100) -> ExecutionResult:
        return self.db.query(LIST_REGLEMENTS_SQL, [limit])

    def get(self, reglement_id: Any) -> Optional[Dict[str, Any]]:
        """Fetch one record with its salle name."""
        return self.db.query(GET_REGLEMENT_WITH_SALLE_SQL, [reglement_id]).first()

    def get_raw(self, reglement_id: Any) -> Optional[Dict[str, Any]]:
        return self.db.query(GET_REGLEMENT_SQL, [reglement_id]).first()

    def salle_exists(self, salle_id: Any) -> bool:
        return bool(self.db.query(SALLE_EXISTS_SQL, [salle_id]).rows)

    def create(self, values: Sequence[Any]) -> Optional[Dict[str, Any]]:
        logger.info("Inserting reglement")
        return self.db.query(INSERT_REGLEMENT_SQL, list(values)).first()

    def replace(self, reglement_id: Any, values: Sequence[Any]) -> Optional[Dict[str, Any]]:
        logger.info(f"Replacing reglement {reglement_id}")
        return self.db.query(REPLACE_REGLEMENT_SQL, list(values) + [reglement_id]).first()

    def update_fields(self, reglement_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update ``fields`` (already mapped to column names) on one record."""
        columns: List[str] = list(fields)
        logger.info(f"Updating reglement {reglement_id}: {', '.join(columns)}")
        params = [fields[column] for column in columns] + [reglement_id]
        return self.db.query(update_reglement_sql(columns), params).first()

    def delete(self, reglement_id: Any) -> Optional[Dict[str, Any]]:
        logger.info(f"Deleting reglement {reglement_id}")
        return self.db.query(DELETE_REGLEMENT_SQL, [reglement_id]).first()
