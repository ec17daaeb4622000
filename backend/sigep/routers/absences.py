"""Absences API. currently_active is derived from the dates on every read."""
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.database import get_db
from sigep import crud, schemas
from sigep.models import Absence, is_absence_active
from sigep.routers.common import CRUD_ERRORS, RESPONSE_400, RESPONSE_404, http_error

router = APIRouter(prefix="/api/absences", tags=["absences"])


def _to_read(absence: Absence, as_of: date) -> schemas.AbsenceRead:
    out = schemas.AbsenceRead.model_validate(absence)
    out.currently_active = is_absence_active(absence, as_of)
    return out


@router.get("", response_model=List[schemas.AbsenceRead])
async def list_absences(
    person_id: int | None = Query(None),
    absence_type_id: int | None = Query(None),
    active: bool | None = Query(None, description="true: in effect on as_of; false: not in effect; omitted: all"),
    as_of: date | None = Query(None, description="Reference date, defaults to today"),
    db: AsyncSession = Depends(get_db),
):
    ref = as_of or date.today()
    absences = await crud.get_absences(
        db, person_id=person_id, absence_type_id=absence_type_id, active=active, as_of=ref
    )
    return [_to_read(a, ref) for a in absences]


@router.post("", response_model=schemas.AbsenceRead, status_code=201, responses={**RESPONSE_400})
async def create_absence(data: schemas.AbsenceCreate, db: AsyncSession = Depends(get_db)):
    try:
        absence = await crud.create_absence(db, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return _to_read(absence, date.today())


@router.get("/{absence_id}", response_model=schemas.AbsenceRead, responses={**RESPONSE_404})
async def get_absence(absence_id: int, db: AsyncSession = Depends(get_db)):
    absence = await crud.get_absence_by_id(db, absence_id)
    if not absence:
        raise HTTPException(status_code=404, detail="Absence not found")
    return _to_read(absence, date.today())


@router.put("/{absence_id}", response_model=schemas.AbsenceRead, responses={**RESPONSE_400, **RESPONSE_404})
async def update_absence(absence_id: int, data: schemas.AbsenceUpdate, db: AsyncSession = Depends(get_db)):
    try:
        absence = await crud.update_absence(db, absence_id, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return _to_read(absence, date.today())


@router.delete("/{absence_id}", status_code=204, responses={**RESPONSE_404})
async def delete_absence(absence_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await crud.delete_absence(db, absence_id)
    except crud.NotFoundError:
        raise HTTPException(status_code=404, detail="Absence not found")
