"""Weapon inventory and check-outs (armamento / cautelas)."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.database import get_db
from sigep import crud, schemas
from sigep.routers.common import CRUD_ERRORS, RESPONSE_400, RESPONSE_404, RESPONSE_409, RESPONSE_422, http_error

router = APIRouter(tags=["weapons"])


@router.get("/api/weapons", response_model=List[schemas.WeaponRead])
async def list_weapons(
    situation: str | None = Query(None, description="DISPONIVEL / EM_USO / MANUTENCAO / BAIXADO"),
    weapon_type_id: int | None = Query(None),
    serial_number: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    weapons = await crud.get_weapons(
        db, situation=situation, weapon_type_id=weapon_type_id, serial_number=serial_number
    )
    return [schemas.WeaponRead.model_validate(w) for w in weapons]


@router.post(
    "/api/weapons",
    response_model=schemas.WeaponRead,
    status_code=201,
    responses={**RESPONSE_400, **RESPONSE_409},
)
async def create_weapon(data: schemas.WeaponCreate, db: AsyncSession = Depends(get_db)):
    try:
        weapon = await crud.create_weapon(db, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.WeaponRead.model_validate(weapon)


@router.get("/api/weapons/{weapon_id}", response_model=schemas.WeaponRead, responses={**RESPONSE_404})
async def get_weapon(weapon_id: int, db: AsyncSession = Depends(get_db)):
    weapon = await crud.get_weapon_by_id(db, weapon_id)
    if not weapon:
        raise HTTPException(status_code=404, detail="Weapon not found")
    return schemas.WeaponRead.model_validate(weapon)


@router.put(
    "/api/weapons/{weapon_id}",
    response_model=schemas.WeaponRead,
    responses={**RESPONSE_400, **RESPONSE_404, **RESPONSE_409, **RESPONSE_422},
)
async def update_weapon(weapon_id: int, data: schemas.WeaponUpdate, db: AsyncSession = Depends(get_db)):
    try:
        weapon = await crud.update_weapon(db, weapon_id, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.WeaponRead.model_validate(weapon)


@router.delete("/api/weapons/{weapon_id}", status_code=204, responses={**RESPONSE_404})
async def delete_weapon(weapon_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await crud.delete_weapon(db, weapon_id)
    except crud.NotFoundError:
        raise HTTPException(status_code=404, detail="Weapon not found")


# ---------- check-outs ----------
@router.post(
    "/api/weapons/{weapon_id}/checkout",
    response_model=schemas.WeaponCheckoutRead,
    status_code=201,
    summary="Check a weapon out to a person (weapon must be DISPONIVEL)",
    responses={**RESPONSE_400, **RESPONSE_404, **RESPONSE_422},
)
async def checkout_weapon(
    weapon_id: int,
    data: schemas.WeaponCheckoutCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        checkout = await crud.checkout_weapon(db, weapon_id, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.WeaponCheckoutRead.model_validate(checkout)


@router.get("/api/weapon-checkouts", response_model=List[schemas.WeaponCheckoutRead])
async def list_weapon_checkouts(
    weapon_id: int | None = Query(None),
    person_id: int | None = Query(None),
    open_only: bool = Query(False, description="Only check-outs not yet returned"),
    db: AsyncSession = Depends(get_db),
):
    checkouts = await crud.get_weapon_checkouts(db, weapon_id=weapon_id, person_id=person_id, open_only=open_only)
    return [schemas.WeaponCheckoutRead.model_validate(c) for c in checkouts]


@router.post(
    "/api/weapon-checkouts/{checkout_id}/return",
    response_model=schemas.WeaponCheckoutRead,
    summary="Return a checked-out weapon",
    responses={**RESPONSE_400, **RESPONSE_404, **RESPONSE_422},
)
async def return_weapon(
    checkout_id: int,
    data: schemas.WeaponReturn | None = None,
    db: AsyncSession = Depends(get_db),
):
    try:
        checkout = await crud.return_weapon(db, checkout_id, data or schemas.WeaponReturn())
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.WeaponCheckoutRead.model_validate(checkout)
