from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

Row = Dict[str, Any]


class ErrorResponse(BaseModel):
    """Response model for errors"""

    success: bool = Field(default=False, description="Always false for errors")
    error: Optional[str] = Field(None, description="Error message")
    errors: Optional[List[str]] = Field(None, description="Validation messages")
    details: Optional[str] = Field(None, description="Underlying error, development only")


class RootResponse(BaseModel):
    """Response model for the API banner"""

    message: str = Field(..., description="Service banner")
    timestamp: str = Field(..., description="Current server time (ISO 8601)")
    endpoints: Dict[str, str] = Field(default_factory=dict, description="Available endpoint prefixes")


class ReglementListResponse(BaseModel):
    """Response model for settlement listings"""

    success: bool = Field(default=True)
    data: List[Row] = Field(default_factory=list, description="Settlements, newest first")
    count: int = Field(default=0, description="Number of settlements returned")


class ReglementResponse(BaseModel):
    """Response model for a single settlement"""

    success: bool = Field(default=True)
    data: Optional[Row] = Field(None, description="Settlement with its salle name")


class ReglementCreateResponse(BaseModel):
    """Response model for an inserted settlement"""

    success: bool = Field(default=True)
    message: str = Field(..., description="Outcome message")
    data: Optional[Row] = Field(None, description="Inserted settlement")


class ReglementReplaceResponse(ReglementCreateResponse):
    """Response model for a fully replaced settlement"""

    previous: Optional[Row] = Field(None, description="Settlement before the change")


class ReglementPatchResponse(ReglementReplaceResponse):
    """Response model for a partially updated settlement"""

    updatedFields: List[str] = Field(default_factory=list, description="Fields that were written")


class ReglementDeleteResponse(BaseModel):
    """Response model for a deleted settlement"""

    success: bool = Field(default=True)
    message: str = Field(..., description="Outcome message")
    deleted: Optional[Row] = Field(None, description="Deleted settlement")


class BulkInsertResponse(BaseModel):
    """Response model for bulk inserts"""

    success: bool = Field(default=True)
    message: str = Field(..., description="Outcome message")
    inserted: int = Field(default=0, description="Number of settlements inserted")
    errors: int = Field(default=0, description="Number of rejected items")
    data: List[Optional[Row]] = Field(default_factory=list, description="Inserted settlements")
    errorDetails: List[Row] = Field(default_factory=list, description="Per-item errors")


class BulkUpdateResponse(BaseModel):
    """Response model for bulk partial updates"""

    success: bool = Field(default=True)
    message: str = Field(..., description="Outcome message")
    updated: int = Field(default=0, description="Number of settlements updated")
    errors: int = Field(default=0, description="Number of rejected items")
    data: List[Row] = Field(default_factory=list, description="Updated settlements with their updatedFields")
    errorDetails: List[Row] = Field(default_factory=list, description="Per-item errors")


class BulkDeleteResponse(BaseModel):
    """Response model for bulk deletes"""

    success: bool = Field(default=True)
    message: str = Field(..., description="Outcome message")
    deleted: int = Field(default=0, description="Number of settlements deleted")
    notFound: int = Field(default=0, description="Number of ids that could not be deleted")
    deletedReglements: List[Optional[Row]] = Field(default_factory=list, description="Deleted settlements")
    notFoundIds: List[Any] = Field(default_factory=list, description="IDs that could not be deleted")
