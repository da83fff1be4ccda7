from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class BulkReglementCreate(BaseModel):
    """Request model for inserting several settlements at once"""

    reglements: Optional[List[Dict[str, Any]]] = Field(
        None, description="Settlement payloads, each validated like a single insert"
    )


class BulkReglementUpdate(BaseModel):
    """Request model for partially updating several settlements"""

    updates: Optional[List[Dict[str, Any]]] = Field(
        None, description="Partial updates; each must carry the numeric 'id' of its record"
    )


class BulkReglementDelete(BaseModel):
    """Request model for deleting several settlements"""

    ids: Optional[List[Any]] = Field(None, description="IDs of the settlements to delete")
