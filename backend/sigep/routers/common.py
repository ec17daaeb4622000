"""Shared OpenAPI error examples and crud-error -> HTTP status mapping for the routers."""
from fastapi import HTTPException

from sigep import crud

RESPONSE_400 = {400: {"description": "Invalid data", "content": {"application/json": {"example": {"detail": "Invalid data", "errors": [{"loc": ["body", "national_id"], "msg": "national_id must have 11 digits"}]}}}}}
RESPONSE_404 = {404: {"description": "Not found", "content": {"application/json": {"example": {"detail": "person 7 not found"}}}}}
RESPONSE_409 = {409: {"description": "Duplicate unique key", "content": {"application/json": {"example": {"detail": "national ID already registered"}}}}}
RESPONSE_422 = {422: {"description": "Business rule violated (status transition, unit hierarchy)", "content": {"application/json": {"example": {"detail": "shift status cannot change from PRESENTE to FALTOU"}}}}}

_STATUS_BY_ERROR = (
    (crud.NotFoundError, 404),
    (crud.ConflictError, 409),
    (crud.InvalidTransitionError, 422),
    (crud.UnitHierarchyError, 422),
    (crud.ReferenceNotFoundError, 400),
    (crud.InvalidDataError, 400),
)


def http_error(exc: ValueError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


CRUD_ERRORS = tuple(error_type for error_type, _ in _STATUS_BY_ERROR)
