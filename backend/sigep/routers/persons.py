"""Persons API: CRUD (soft delete), the person's functional record and bank accounts."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.database import get_db
from sigep import crud, schemas
from sigep.routers.common import CRUD_ERRORS, RESPONSE_400, RESPONSE_404, RESPONSE_409, http_error

router = APIRouter(prefix="/api/persons", tags=["persons"])


@router.get("", response_model=List[schemas.PersonRead], summary="List persons (newest first)")
async def list_persons(
    name: str | None = Query(None, description="Case-insensitive substring of the full name"),
    national_id: str | None = Query(None, description="Exact CPF, with or without punctuation"),
    person_type: str | None = Query(None, description="S=Staff, T=Contractor"),
    db: AsyncSession = Depends(get_db),
):
    persons = await crud.get_persons(db, name=name, national_id=national_id, person_type=person_type)
    return [schemas.PersonRead.model_validate(p) for p in persons]


@router.post(
    "",
    response_model=schemas.PersonRead,
    status_code=201,
    summary="Register a person",
    responses={**RESPONSE_400, **RESPONSE_409},
)
async def create_person(data: schemas.PersonCreate, db: AsyncSession = Depends(get_db)):
    try:
        person = await crud.create_person(db, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.PersonRead.model_validate(person)


@router.get("/{person_id}", response_model=schemas.PersonRead, responses={**RESPONSE_404})
async def get_person(person_id: int, db: AsyncSession = Depends(get_db)):
    person = await crud.get_person_by_id(db, person_id)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return schemas.PersonRead.model_validate(person)


@router.put(
    "/{person_id}",
    response_model=schemas.PersonRead,
    responses={**RESPONSE_400, **RESPONSE_404, **RESPONSE_409},
)
async def update_person(person_id: int, data: schemas.PersonUpdate, db: AsyncSession = Depends(get_db)):
    try:
        person = await crud.update_person(db, person_id, data)
    except CRUD_ERRORS as e:
        raise http_error(e)
    return schemas.PersonRead.model_validate(person)


@router.delete("/{person_id}", status_code=204, responses={**RESPONSE_404})
async def delete_person(person_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await crud.delete_person(db, person_id)
    except crud.NotFoundError:
        raise HTTPException(status_code=404, detail="Person not found")


@router.get(
    "/{person_id}/functional-record",
    response_model=schemas.FunctionalRecordRead,
    summary="The person's active functional record",
    responses={**RESPONSE_404},
)
async def get_person_functional_record(person_id: int, db: AsyncSession = Depends(get_db)):
    if not await crud.get_person_by_id(db, person_id):
        raise HTTPException(status_code=404, detail="Person not found")
    record = await crud.get_functional_record_by_person(db, person_id)
    if not record:
        raise HTTPException(status_code=404, detail="Functional record not found")
    return schemas.FunctionalRecordRead.model_validate(record)


@router.get(
    "/{person_id}/bank-accounts",
    response_model=List[schemas.BankAccountRead],
    responses={**RESPONSE_404},
)
async def list_person_bank_accounts(person_id: int, db: AsyncSession = Depends(get_db)):
    if not await crud.get_person_by_id(db, person_id):
        raise HTTPException(status_code=404, detail="Person not found")
    accounts = await crud.list_bank_accounts(db, person_id)
    return [schemas.BankAccountRead.model_validate(a) for a in accounts]


@router.post(
    "/{person_id}/bank-accounts",
    response_model=schemas.BankAccountRead,
    status_code=201,
    responses={**RESPONSE_400, **RESPONSE_404},
)
async def create_person_bank_account(
    person_id: int,
    data: schemas.BankAccountCreate,
    db: AsyncSession = Depends(get_db),
):
    if not await crud.get_person_by_id(db, person_id):
        raise HTTPException(status_code=404, detail="Person not found")
    account = await crud.create_bank_account(db, person_id, data)
    return schemas.BankAccountRead.model_validate(account)
