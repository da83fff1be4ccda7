from fastapi import Depends, Request

from reglements_api.db.backend_base import DatabaseBackend
from reglements_api.db.reglements import ReglementStore


def get_db(request: Request) -> DatabaseBackend:
    """FastAPI dependency for the backend chosen at startup"""
    return request.app.state.db


def get_store(db: DatabaseBackend = Depends(get_db)) -> ReglementStore:
    """FastAPI dependency for settlement queries on pooled connections"""
    return ReglementStore(db)
