"""Settlement (reglement) endpoints for the Reglements API"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query, status

from reglements_api.core.exceptions import (
    DatabaseException,
    NotFoundException,
    ReglementsAPIException,
    ValidationException,
)
from reglements_api.db.backend_base import DatabaseBackend
from reglements_api.db.reglements import ReglementStore
from reglements_api.dependencies.auth import require_api_key
from reglements_api.dependencies.database import get_db, get_store
from reglements_api.models.requests import (
    BulkReglementCreate,
    BulkReglementDelete,
    BulkReglementUpdate,
)
from reglements_api.models.responses import (
    BulkDeleteResponse,
    BulkInsertResponse,
    BulkUpdateResponse,
    ReglementCreateResponse,
    ReglementDeleteResponse,
    ReglementListResponse,
    ReglementPatchResponse,
    ReglementReplaceResponse,
    ReglementResponse,
)
from reglements_api.validation import (
    clean_update_fields,
    parse_id,
    reglement_values,
    to_columns,
    validate_reglement,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/reglements",
    tags=["reglements"],
    dependencies=[Depends(require_api_key)],
)


def _require_salle(store: ReglementStore, salle_id: Any):
    if not store.salle_exists(salle_id):
        raise ValidationException(f"Salle with id {salle_id} not found")


@router.get("", response_model=ReglementListResponse)
@router.get("/", response_model=ReglementListResponse, include_in_schema=False)
def list_reglements(
    limit: int = Query(100, ge=1, description="Maximum number of settlements to return"),
    store: ReglementStore = Depends(get_store),
):
    """Get the most recent settlements"""
    try:
        result = store.list(limit)
        return ReglementListResponse(data=result.rows, count=result.row_count)
    except ReglementsAPIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching reglements: {str(e)}")
        raise DatabaseException("Failed to fetch reglements", detail=str(e))


@router.post("/bulk", response_model=BulkInsertResponse, status_code=status.HTTP_201_CREATED)
def bulk_create_reglements(
    payload: BulkReglementCreate,
    db: DatabaseBackend = Depends(get_db),
):
    """Insert several settlements in one transaction, reporting rejected items"""
    reglements = payload.reglements
    if not reglements:
        raise ValidationException("reglements array is required and must not be empty")

    with db.scope() as scope:
        store = ReglementStore(scope)
        try:
            store.begin()

            inserted = []
            errors = []
            for index, data in enumerate(reglements):
                try:
                    validation_errors = validate_reglement(data)
                    if validation_errors:
                        errors.append({"index": index, "errors": validation_errors, "data": data})
                        continue

                    if not store.salle_exists(data["id_salle"]):
                        errors.append({
                            "index": index,
                            "errors": [f"Salle with id {data['id_salle']} not found"],
                            "data": data,
                        })
                        continue

                    inserted.append(store.create(reglement_values(data)))
                except Exception as e:
                    logger.warning(f"Bulk insert item {index} failed: {str(e)}")
                    errors.append({"index": index, "error": str(e), "data": data})

            store.commit()
        except Exception as e:
            logger.error(f"Error in bulk insert: {str(e)}", exc_info=True)
            store.rollback()
            raise DatabaseException("Failed to insert reglements", detail=str(e))

    return BulkInsertResponse(
        message=f"Successfully inserted {len(inserted)} reglements",
        inserted=len(inserted),
        errors=len(errors),
        data=inserted,
        errorDetails=errors,
    )


@router.patch("/bulk/update", response_model=BulkUpdateResponse)
def bulk_update_reglements(
    payload: BulkReglementUpdate,
    db: DatabaseBackend = Depends(get_db),
):
    """Partially update several settlements in one transaction"""
    updates = payload.updates
    if not updates:
        raise ValidationException("updates array is required and must not be empty")

    for index, update in enumerate(updates):
        if parse_id(update.get("id")) is None:
            raise ValidationException(f"Update at index {index} must have a valid numeric id")

    with db.scope() as scope:
        store = ReglementStore(scope)
        try:
            store.begin()

            updated = []
            errors = []
            for index, update in enumerate(updates):
                update_data = dict(update)
                raw_id = update_data.pop("id")
                reglement_id = parse_id(raw_id)
                try:
                    if store.get_raw(reglement_id) is None:
                        errors.append({"index": index, "id": raw_id, "error": "Reglement not found"})
                        continue

                    if not update_data:
                        errors.append({
                            "index": index,
                            "id": raw_id,
                            "error": "At least one field must be provided for update",
                        })
                        continue

                    fields, validation_errors = clean_update_fields(update_data, store.salle_exists)
                    if validation_errors:
                        errors.append({"index": index, "id": raw_id, "errors": validation_errors})
                        continue

                    if not fields:
                        errors.append({
                            "index": index,
                            "id": raw_id,
                            "error": "No valid fields provided for update",
                        })
                        continue

                    row = store.update_fields(reglement_id, to_columns(fields))
                    updated.append({**(row or {}), "updatedFields": list(fields)})
                except Exception as e:
                    logger.warning(f"Bulk update of reglement {raw_id} failed: {str(e)}")
                    errors.append({"index": index, "id": raw_id, "error": str(e)})

            store.commit()
        except Exception as e:
            logger.error(f"Error in bulk patch: {str(e)}", exc_info=True)
            store.rollback()
            raise DatabaseException("Failed to update reglements", detail=str(e))

    return BulkUpdateResponse(
        message=f"Successfully updated {len(updated)} reglements",
        updated=len(updated),
        errors=len(errors),
        data=updated,
        errorDetails=errors,
    )


@router.delete("/bulk/delete", response_model=BulkDeleteResponse)
def bulk_delete_reglements(
    payload: BulkReglementDelete,
    db: DatabaseBackend = Depends(get_db),
):
    """Delete several settlements in one transaction"""
    ids = payload.ids
    if not ids:
        raise ValidationException("ids array is required and must not be empty")

    invalid_ids = [raw_id for raw_id in ids if parse_id(raw_id) is None]
    if invalid_ids:
        raise ValidationException("All IDs must be valid numbers", extra={"invalidIds": invalid_ids})

    with db.scope() as scope:
        store = ReglementStore(scope)
        try:
            store.begin()

            deleted = []
            not_found = []
            for raw_id in ids:
                reglement_id = parse_id(raw_id)
                try:
                    if store.get_raw(reglement_id) is None:
                        not_found.append(raw_id)
                        continue
                    deleted.append(store.delete(reglement_id))
                except Exception as e:
                    logger.error(f"Error deleting reglement {raw_id}: {str(e)}")
                    not_found.append(raw_id)

            store.commit()
        except Exception as e:
            logger.error(f"Error in bulk delete: {str(e)}", exc_info=True)
            store.rollback()
            raise DatabaseException("Failed to delete reglements", detail=str(e))

    return BulkDeleteResponse(
        message=f"Successfully deleted {len(deleted)} reglements",
        deleted=len(deleted),
        notFound=len(not_found),
        deletedReglements=deleted,
        notFoundIds=not_found,
    )


@router.get("/{reglement_id}", response_model=ReglementResponse)
def get_reglement(reglement_id: int, store: ReglementStore = Depends(get_store)):
    """Get a settlement by ID"""
    try:
        reglement = store.get(reglement_id)
    except ReglementsAPIException:
        raise
    except Exception as e:
        logger.error(f"Error fetching reglement: {str(e)}")
        raise DatabaseException("Failed to fetch reglement", detail=str(e))

    if reglement is None:
        raise NotFoundException("Reglement not found")
    return ReglementResponse(data=reglement)


@router.post("", response_model=ReglementCreateResponse, status_code=status.HTTP_201_CREATED)
@router.post(
    "/", response_model=ReglementCreateResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False
)
def create_reglement(
    data: Dict[str, Any] = Body(...),
    store: ReglementStore = Depends(get_store),
):
    """Insert a settlement"""
    validation_errors = validate_reglement(data)
    if validation_errors:
        raise ValidationException(errors=validation_errors)

    try:
        _require_salle(store, data["id_salle"])
        created = store.create(reglement_values(data))
        return ReglementCreateResponse(message="Reglement created successfully", data=created)
    except ReglementsAPIException:
        raise
    except Exception as e:
        logger.error(f"Error creating reglement: {str(e)}")
        raise DatabaseException("Failed to create reglement", detail=str(e))


@router.patch("/{reglement_id}", response_model=ReglementPatchResponse)
def patch_reglement(
    reglement_id: int,
    update_data: Dict[str, Any] = Body(...),
    store: ReglementStore = Depends(get_store),
):
    """Update one or more fields of a settlement"""
    try:
        existing = store.get_raw(reglement_id)
        if existing is None:
            raise NotFoundException("Reglement not found")

        if not update_data:
            raise ValidationException("At least one field must be provided for update")

        fields, validation_errors = clean_update_fields(update_data, store.salle_exists)
        if validation_errors:
            raise ValidationException(errors=validation_errors)
        if not fields:
            raise ValidationException("No valid fields provided for update")

        updated = store.update_fields(reglement_id, to_columns(fields))
        return ReglementPatchResponse(
            message="Reglement updated successfully",
            data=updated,
            previous=existing,
            updatedFields=list(fields),
        )
    except ReglementsAPIException:
        raise
    except Exception as e:
        logger.error(f"Error updating reglement: {str(e)}")
        raise DatabaseException("Failed to update reglement", detail=str(e))


@router.put("/{reglement_id}", response_model=ReglementReplaceResponse)
def replace_reglement(
    reglement_id: int,
    data: Dict[str, Any] = Body(...),
    store: ReglementStore = Depends(get_store),
):
    """Replace every field of a settlement"""
    try:
        existing = store.get_raw(reglement_id)
        if existing is None:
            raise NotFoundException("Reglement not found")

        validation_errors = validate_reglement(data)
        if validation_errors:
            raise ValidationException(errors=validation_errors)

        _require_salle(store, data["id_salle"])
        updated = store.replace(reglement_id, reglement_values(data))
        return ReglementReplaceResponse(
            message="Reglement updated successfully",
            data=updated,
            previous=existing,
        )
    except ReglementsAPIException:
        raise
    except Exception as e:
        logger.error(f"Error updating reglement: {str(e)}")
        raise DatabaseException("Failed to update reglement", detail=str(e))


@router.delete("/{reglement_id}", response_model=ReglementDeleteResponse)
def delete_reglement(reglement_id: int, store: ReglementStore = Depends(get_store)):
    """Delete a settlement"""
    try:
        if store.get_raw(reglement_id) is None:
            raise NotFoundException("Reglement not found")

        deleted = store.delete(reglement_id)
        return ReglementDeleteResponse(message="Reglement deleted successfully", deleted=deleted)
    except ReglementsAPIException:
        raise
    except Exception as e:
        logger.error(f"Error deleting reglement: {str(e)}")
        raise DatabaseException("Failed to delete reglement", detail=str(e))
