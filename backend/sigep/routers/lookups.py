"""Reference tables (read-only lists) and organizational unit maintenance."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.database import get_db
from sigep import crud, schemas
from sigep.routers.common import CRUD_ERRORS, RESPONSE_400, RESPONSE_404, RESPONSE_422, http_error

router = APIRouter(prefix="/api", tags=["lookups"])


@router.get("/positions", response_model=List[schemas.PositionRead])
async def list_positions(db: AsyncSession = Depends(get_db)):
    return [schemas.PositionRead.model_validate(p) for p in await crud.get_positions(db)]


@router.get("/municipalities", response_model=List[schemas.MunicipalityRead])
async def list_municipalities(
    state_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return [schemas.MunicipalityRead.model_validate(m) for m in await crud.get_municipalities(db, state_id=state_id)]


@router.get("/states", response_model=List[schemas.StateRead])
async def list_states(db: AsyncSession = Depends(get_db)):
    return [schemas.StateRead.model_validate(s) for s in await crud.get_states(db)]


@router.get("/absence-types", response_model=List[schemas.AbsenceTypeRead])
async def list_absence_types(db: AsyncSession = Depends(get_db)):
    return [schemas.AbsenceTypeRead.model_validate(t) for t in await crud.get_absence_types(db)]


@router.get("/shift-types", response_model=List[schemas.ShiftTypeRead])
async def list_shift_types(db: AsyncSession = Depends(get_db)):
    return [schemas.ShiftTypeRead.model_validate(t) for t in await crud.get_shift_types(db)]


@router.get("/per-diem-statuses", response_model=List[schemas.PerDiemStatusRead])
async def list_per_diem_statuses(db: AsyncSession = Depends(get_db)):
    return [schemas.PerDiemStatusRead.model_validate(s) for s in await crud.get_per_diem_statuses(db)]


@router.get("/weapon-types", response_model=List[schemas.WeaponTypeRead])
async def list_weapon_types(db: AsyncSession = Depends(get_db)):
    return [schemas.WeaponTypeRead.model_validate(t) for t in await crud.get_weapon_types(db)]


@router.get("/document-types", response_model=List[schemas.DocumentTypeRead])
async def list_document_types(db: AsyncSession = Depends(get_db)):
    return [schemas.DocumentTypeRead.model_validate(t) for t in await crud.get_document_types(db)]


# ---------- organizational units ----------
@router.get("/units", response_model=List[schemas.UnitRead])
async def list_units(db: AsyncSession = Depends(get_db)):
    return [schemas.UnitRead.model_validate(u) for u in await crud.get_units(db)]


@router.post("/units", response_model=schemas.UnitRead, status_code=201, responses={**RESPONSE_400, **RESPONSE_422})
async def create_unit(data: schemas.UnitCreate, db: AsyncSession = Depends(get_db)):
    try:
        unit = await crud.create_unit(db, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.UnitRead.model_validate(unit)


@router.get("/units/{unit_id}", response_model=schemas.UnitRead, responses={**RESPONSE_404})
async def get_unit(unit_id: int, db: AsyncSession = Depends(get_db)):
    unit = await crud.get_unit_by_id(db, unit_id)
    if not unit:
        raise HTTPException(status_code=404, detail="Unit not found")
    return schemas.UnitRead.model_validate(unit)


@router.put(
    "/units/{unit_id}",
    response_model=schemas.UnitRead,
    summary="Update a unit; re-parenting must keep the hierarchy acyclic",
    responses={**RESPONSE_400, **RESPONSE_404, **RESPONSE_422},
)
async def update_unit(unit_id: int, data: schemas.UnitUpdate, db: AsyncSession = Depends(get_db)):
    try:
        unit = await crud.update_unit(db, unit_id, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.UnitRead.model_validate(unit)


@router.delete("/units/{unit_id}", status_code=204, responses={**RESPONSE_404})
async def delete_unit(unit_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await crud.delete_unit(db, unit_id)
    except crud.NotFoundError:
        raise HTTPException(status_code=404, detail="Unit not found")


@router.get("/units/{unit_id}/children", response_model=List[schemas.UnitRead], responses={**RESPONSE_404})
async def list_unit_children(unit_id: int, db: AsyncSession = Depends(get_db)):
    if not await crud.get_unit_by_id(db, unit_id):
        raise HTTPException(status_code=404, detail="Unit not found")
    return [schemas.UnitRead.model_validate(u) for u in await crud.get_unit_children(db, unit_id)]
