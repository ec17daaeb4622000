"""Shift schedules API (escalas). Status changes follow SHIFT_STATUS_TRANSITIONS."""
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.database import get_db
from sigep import crud, schemas
from sigep.routers.common import CRUD_ERRORS, RESPONSE_400, RESPONSE_404, RESPONSE_422, http_error

router = APIRouter(prefix="/api/shift-schedules", tags=["shift-schedules"])


@router.get("", response_model=List[schemas.ShiftScheduleRead])
async def list_shift_schedules(
    shift_date: date | None = Query(None, alias="date", description="Exact shift date"),
    person_id: int | None = Query(None),
    unit_id: int | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    status: str | None = Query(None, description="AGENDADA / PRESENTE / FALTOU / JUSTIFICADA"),
    db: AsyncSession = Depends(get_db),
):
    schedules = await crud.get_shift_schedules(
        db,
        shift_date=shift_date,
        person_id=person_id,
        unit_id=unit_id,
        date_from=date_from,
        date_to=date_to,
        status=status,
    )
    return [schemas.ShiftScheduleRead.model_validate(s) for s in schedules]


@router.post("", response_model=schemas.ShiftScheduleRead, status_code=201, responses={**RESPONSE_400})
async def create_shift_schedule(data: schemas.ShiftScheduleCreate, db: AsyncSession = Depends(get_db)):
    try:
        schedule = await crud.create_shift_schedule(db, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.ShiftScheduleRead.model_validate(schedule)


@router.get("/{schedule_id}", response_model=schemas.ShiftScheduleRead, responses={**RESPONSE_404})
async def get_shift_schedule(schedule_id: int, db: AsyncSession = Depends(get_db)):
    schedule = await crud.get_shift_schedule_by_id(db, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Shift schedule not found")
    return schemas.ShiftScheduleRead.model_validate(schedule)


@router.put(
    "/{schedule_id}",
    response_model=schemas.ShiftScheduleRead,
    responses={**RESPONSE_400, **RESPONSE_404, **RESPONSE_422},
)
async def update_shift_schedule(
    schedule_id: int,
    data: schemas.ShiftScheduleUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        schedule = await crud.update_shift_schedule(db, schedule_id, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.ShiftScheduleRead.model_validate(schedule)


@router.delete("/{schedule_id}", status_code=204, responses={**RESPONSE_404})
async def delete_shift_schedule(schedule_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await crud.delete_shift_schedule(db, schedule_id)
    except crud.NotFoundError:
        raise HTTPException(status_code=404, detail="Shift schedule not found")
