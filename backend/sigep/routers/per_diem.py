"""Per-diem requests API (diárias)."""
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.database import get_db
from sigep import crud, schemas
from sigep.routers.common import CRUD_ERRORS, RESPONSE_400, RESPONSE_404, http_error

router = APIRouter(prefix="/api/per-diem-requests", tags=["per-diem"])


@router.get("", response_model=List[schemas.PerDiemRequestRead])
async def list_per_diem_requests(
    person_id: int | None = Query(None),
    status_id: int | None = Query(None),
    start_from: date | None = Query(None, description="start_date >= start_from"),
    end_until: date | None = Query(None, description="end_date <= end_until"),
    db: AsyncSession = Depends(get_db),
):
    requests = await crud.get_per_diem_requests(
        db, person_id=person_id, status_id=status_id, start_from=start_from, end_until=end_until
    )
    return [schemas.PerDiemRequestRead.model_validate(r) for r in requests]


@router.post("", response_model=schemas.PerDiemRequestRead, status_code=201, responses={**RESPONSE_400})
async def create_per_diem_request(data: schemas.PerDiemRequestCreate, db: AsyncSession = Depends(get_db)):
    try:
        req = await crud.create_per_diem_request(db, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.PerDiemRequestRead.model_validate(req)


@router.get("/{request_id}", response_model=schemas.PerDiemRequestRead, responses={**RESPONSE_404})
async def get_per_diem_request(request_id: int, db: AsyncSession = Depends(get_db)):
    req = await crud.get_per_diem_request_by_id(db, request_id)
    if not req:
        raise HTTPException(status_code=404, detail="Per-diem request not found")
    return schemas.PerDiemRequestRead.model_validate(req)


@router.put("/{request_id}", response_model=schemas.PerDiemRequestRead, responses={**RESPONSE_400, **RESPONSE_404})
async def update_per_diem_request(
    request_id: int,
    data: schemas.PerDiemRequestUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        req = await crud.update_per_diem_request(db, request_id, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.PerDiemRequestRead.model_validate(req)


@router.delete("/{request_id}", status_code=204, responses={**RESPONSE_404})
async def delete_per_diem_request(request_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await crud.delete_per_diem_request(db, request_id)
    except crud.NotFoundError:
        raise HTTPException(status_code=404, detail="Per-diem request not found")
