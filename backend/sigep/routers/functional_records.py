"""Functional records and bank accounts maintenance."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.database import get_db
from sigep import crud, schemas
from sigep.routers.common import CRUD_ERRORS, RESPONSE_400, RESPONSE_404, RESPONSE_409, RESPONSE_422, http_error

router = APIRouter(tags=["functional-records"])


@router.get("/api/functional-records", response_model=List[schemas.FunctionalRecordRead])
async def list_functional_records(
    unit_id: int | None = Query(None),
    position_id: int | None = Query(None),
    status: str | None = Query(None, description="ATIVO / INATIVO / APOSENTADO / EXONERADO"),
    db: AsyncSession = Depends(get_db),
):
    records = await crud.list_functional_records(db, unit_id=unit_id, position_id=position_id, status=status)
    return [schemas.FunctionalRecordRead.model_validate(r) for r in records]


@router.post(
    "/api/functional-records",
    response_model=schemas.FunctionalRecordRead,
    status_code=201,
    responses={**RESPONSE_400, **RESPONSE_409},
)
async def create_functional_record(data: schemas.FunctionalRecordCreate, db: AsyncSession = Depends(get_db)):
    try:
        record = await crud.create_functional_record(db, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.FunctionalRecordRead.model_validate(record)


@router.get("/api/functional-records/{record_id}", response_model=schemas.FunctionalRecordRead, responses={**RESPONSE_404})
async def get_functional_record(record_id: int, db: AsyncSession = Depends(get_db)):
    record = await crud.get_functional_record_by_id(db, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Functional record not found")
    return schemas.FunctionalRecordRead.model_validate(record)


@router.put(
    "/api/functional-records/{record_id}",
    response_model=schemas.FunctionalRecordRead,
    responses={**RESPONSE_400, **RESPONSE_404, **RESPONSE_409, **RESPONSE_422},
)
async def update_functional_record(
    record_id: int,
    data: schemas.FunctionalRecordUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        record = await crud.update_functional_record(db, record_id, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.FunctionalRecordRead.model_validate(record)


@router.delete("/api/functional-records/{record_id}", status_code=204, responses={**RESPONSE_404})
async def delete_functional_record(record_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await crud.delete_functional_record(db, record_id)
    except crud.NotFoundError:
        raise HTTPException(status_code=404, detail="Functional record not found")


# ---------- bank accounts (created under /api/persons/{id}/bank-accounts) ----------
@router.put(
    "/api/bank-accounts/{account_id}",
    response_model=schemas.BankAccountRead,
    responses={**RESPONSE_400, **RESPONSE_404},
)
async def update_bank_account(account_id: int, data: schemas.BankAccountUpdate, db: AsyncSession = Depends(get_db)):
    try:
        account = await crud.update_bank_account(db, account_id, data)
    except crud.NotFoundError:
        raise HTTPException(status_code=404, detail="Bank account not found")
    return schemas.BankAccountRead.model_validate(account)


@router.delete("/api/bank-accounts/{account_id}", status_code=204, responses={**RESPONSE_404})
async def delete_bank_account(account_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await crud.delete_bank_account(db, account_id)
    except crud.NotFoundError:
        raise HTTPException(status_code=404, detail="Bank account not found")
