"""CRUD operations - the single place that builds queries.
Every read filters is_active = True; deletes only flip is_active."""
import logging
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy import select, func, and_, or_, not_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.config import settings
from sigep.models import (
    Base, utcnow,
    State, Municipality, DocumentType, Position, OrganizationalUnit, AbsenceType, ShiftType,
    PerDiemStatus, WeaponType,
    Person, FunctionalRecord, BankAccount, Absence, ShiftSchedule, PerDiemRequest,
    WeaponItem, WeaponCheckout, User,
)
from sigep.schemas import (
    national_id_digits,
    PersonCreate, PersonUpdate, FunctionalRecordCreate, FunctionalRecordUpdate,
    BankAccountCreate, BankAccountUpdate, AbsenceCreate, AbsenceUpdate,
    ShiftScheduleCreate, ShiftScheduleUpdate, PerDiemRequestCreate, PerDiemRequestUpdate,
    WeaponCreate, WeaponUpdate, WeaponCheckoutCreate, WeaponReturn, UnitCreate, UnitUpdate,
)
from sigep.rules.status_transitions import (
    InvalidTransitionError,  # noqa: F401  re-exported for routers
    ensure_transition,
    SHIFT_STATUS_TRANSITIONS,
    WEAPON_SITUATION_TRANSITIONS,
    FUNCTIONAL_STATUS_TRANSITIONS,
)
from sigep.services import status_registry

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class NotFoundError(ValueError):
    """Requested id does not resolve to an active row."""
    pass


class ReferenceNotFoundError(ValueError):
    """A referenced row (person, type, unit, ...) is missing or inactive."""
    pass


class ConflictError(ValueError):
    """Unique key already taken (national ID, registration number, serial number)."""
    pass


class InvalidDataError(ValueError):
    """Patched value is inconsistent with what is already stored."""
    pass


class UnitHierarchyError(ValueError):
    """Re-parenting would make the unit tree cyclic."""
    pass


# ---------- shared helpers ----------
async def _get_active(db: AsyncSession, model: Type[ModelT], obj_id: int) -> Optional[ModelT]:
    r = await db.execute(select(model).where(model.id == obj_id, model.is_active.is_(True)))
    return r.scalar_one_or_none()


async def _require_active(db: AsyncSession, model: Type[ModelT], obj_id: int, label: str) -> ModelT:
    obj = await _get_active(db, model, obj_id)
    if obj is None:
        raise NotFoundError(f"{label} {obj_id} not found")
    return obj


async def _require_reference(db: AsyncSession, model: Type[ModelT], obj_id: Optional[int], label: str) -> None:
    if obj_id is None:
        return
    if await _get_active(db, model, obj_id) is None:
        raise ReferenceNotFoundError(f"{label} {obj_id} not found")


UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """PostgreSQL drivers expose the SQLSTATE; SQLite only has the message."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == UNIQUE_VIOLATION_SQLSTATE
    return "UNIQUE constraint failed" in str(orig)


async def _flush_or_conflict(db: AsyncSession, message: str) -> None:
    """The unique constraint is the source of truth; a violation becomes ConflictError.
    Any other integrity failure (NOT NULL, foreign key) propagates as an internal error."""
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        if not is_unique_violation(exc):
            raise
        logger.warning("unique constraint rejected write: %s", message)
        raise ConflictError(message) from exc


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamp columns are naive UTC; aware inputs are converted."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _apply_update(obj: Any, update_data: Dict[str, Any]) -> None:
    for k, v in update_data.items():
        setattr(obj, k, v)
    obj.updated_at = utcnow()


async def _soft_delete(db: AsyncSession, model: Type[ModelT], obj_id: int, label: str) -> None:
    """Idempotent: an already inactive row is left alone; only an unknown id is an error."""
    obj = await db.get(model, obj_id)
    if obj is None:
        raise NotFoundError(f"{label} {obj_id} not found")
    if obj.is_active:
        obj.is_active = False
        obj.updated_at = utcnow()
        await db.flush()
        logger.info("soft-deleted %s id=%s", model.__tablename__, obj_id)


# ---------- persons ----------
async def get_persons(
    db: AsyncSession,
    name: Optional[str] = None,
    national_id: Optional[str] = None,
    person_type: Optional[str] = None,
) -> List[Person]:
    q = select(Person).where(Person.is_active.is_(True))
    if name and name.strip():
        q = q.where(Person.full_name.ilike(f"%{name.strip()}%"))
    if national_id and national_id.strip():
        q = q.where(Person.national_id == national_id_digits(national_id))
    if person_type and person_type.strip():
        q = q.where(Person.person_type == person_type.strip().upper())
    q = q.order_by(Person.created_at.desc(), Person.id.desc())
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_person_by_id(db: AsyncSession, person_id: int) -> Optional[Person]:
    return await _get_active(db, Person, person_id)


async def get_person_by_national_id(db: AsyncSession, national_id: str) -> Optional[Person]:
    r = await db.execute(
        select(Person).where(Person.national_id == national_id_digits(national_id), Person.is_active.is_(True))
    )
    return r.scalar_one_or_none()


async def create_person(db: AsyncSession, data: PersonCreate) -> Person:
    await _require_reference(db, Municipality, data.municipality_id, "municipality")
    person = Person(**data.model_dump())
    db.add(person)
    await _flush_or_conflict(db, "national ID already registered")
    await db.refresh(person)
    logger.info("created person id=%s", person.id)
    return person


async def update_person(db: AsyncSession, person_id: int, data: PersonUpdate) -> Person:
    person = await _require_active(db, Person, person_id, "person")
    update_data = data.model_dump(exclude_unset=True)
    if "municipality_id" in update_data:
        await _require_reference(db, Municipality, update_data["municipality_id"], "municipality")
    _apply_update(person, update_data)
    await _flush_or_conflict(db, "national ID already registered")
    await db.refresh(person)
    return person


async def delete_person(db: AsyncSession, person_id: int) -> None:
    await _soft_delete(db, Person, person_id, "person")


# ---------- functional records ----------
async def get_functional_record_by_person(db: AsyncSession, person_id: int) -> Optional[FunctionalRecord]:
    """The person's active functional record; the newest one wins if several exist."""
    r = await db.execute(
        select(FunctionalRecord)
        .where(FunctionalRecord.person_id == person_id, FunctionalRecord.is_active.is_(True))
        .order_by(FunctionalRecord.created_at.desc(), FunctionalRecord.id.desc())
        .limit(1)
    )
    return r.scalars().first()


async def get_functional_record_by_id(db: AsyncSession, record_id: int) -> Optional[FunctionalRecord]:
    return await _get_active(db, FunctionalRecord, record_id)


async def list_functional_records(
    db: AsyncSession,
    unit_id: Optional[int] = None,
    position_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[FunctionalRecord]:
    q = select(FunctionalRecord).where(FunctionalRecord.is_active.is_(True))
    if unit_id is not None:
        q = q.where(FunctionalRecord.unit_id == unit_id)
    if position_id is not None:
        q = q.where(FunctionalRecord.position_id == position_id)
    if status and status.strip():
        q = q.where(FunctionalRecord.status == status.strip().upper())
    q = q.order_by(FunctionalRecord.created_at.desc(), FunctionalRecord.id.desc())
    r = await db.execute(q)
    return list(r.scalars().all())


async def create_functional_record(db: AsyncSession, data: FunctionalRecordCreate) -> FunctionalRecord:
    await _require_reference(db, Person, data.person_id, "person")
    await _require_reference(db, Position, data.position_id, "position")
    await _require_reference(db, OrganizationalUnit, data.unit_id, "unit")
    record = FunctionalRecord(**data.model_dump())
    db.add(record)
    await _flush_or_conflict(db, "registration number already registered")
    await db.refresh(record)
    logger.info("created functional record id=%s person_id=%s", record.id, record.person_id)
    return record


async def update_functional_record(
    db: AsyncSession, record_id: int, data: FunctionalRecordUpdate
) -> FunctionalRecord:
    record = await _require_active(db, FunctionalRecord, record_id, "functional record")
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("status") is not None:
        ensure_transition(FUNCTIONAL_STATUS_TRANSITIONS, record.status, update_data["status"], "functional status")
    if "position_id" in update_data:
        await _require_reference(db, Position, update_data["position_id"], "position")
    if "unit_id" in update_data:
        await _require_reference(db, OrganizationalUnit, update_data["unit_id"], "unit")
    _apply_update(record, update_data)
    await _flush_or_conflict(db, "registration number already registered")
    await db.refresh(record)
    return record


async def delete_functional_record(db: AsyncSession, record_id: int) -> None:
    await _soft_delete(db, FunctionalRecord, record_id, "functional record")


# ---------- bank accounts ----------
async def list_bank_accounts(db: AsyncSession, person_id: int) -> List[BankAccount]:
    r = await db.execute(
        select(BankAccount)
        .where(BankAccount.person_id == person_id, BankAccount.is_active.is_(True))
        .order_by(BankAccount.id)
    )
    return list(r.scalars().all())


async def create_bank_account(db: AsyncSession, person_id: int, data: BankAccountCreate) -> BankAccount:
    await _require_reference(db, Person, person_id, "person")
    account = BankAccount(person_id=person_id, **data.model_dump())
    db.add(account)
    await db.flush()
    await db.refresh(account)
    return account


async def update_bank_account(db: AsyncSession, account_id: int, data: BankAccountUpdate) -> BankAccount:
    account = await _require_active(db, BankAccount, account_id, "bank account")
    _apply_update(account, data.model_dump(exclude_unset=True))
    await db.flush()
    await db.refresh(account)
    return account


async def delete_bank_account(db: AsyncSession, account_id: int) -> None:
    await _soft_delete(db, BankAccount, account_id, "bank account")


# ---------- absences ----------
def absence_active_clause(as_of: date):
    """SQL form of models.is_absence_active."""
    return and_(
        Absence.start_date <= as_of,
        or_(Absence.end_date.is_(None), Absence.end_date >= as_of),
    )


async def get_absences(
    db: AsyncSession,
    person_id: Optional[int] = None,
    absence_type_id: Optional[int] = None,
    active: Optional[bool] = None,
    as_of: Optional[date] = None,
) -> List[Absence]:
    """active=True keeps absences in effect on as_of (default today), False the others, None all."""
    q = select(Absence).where(Absence.is_active.is_(True))
    if person_id is not None:
        q = q.where(Absence.person_id == person_id)
    if absence_type_id is not None:
        q = q.where(Absence.absence_type_id == absence_type_id)
    if active is not None:
        clause = absence_active_clause(as_of or date.today())
        q = q.where(clause if active else not_(clause))
    q = q.order_by(Absence.created_at.desc(), Absence.id.desc())
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_absence_by_id(db: AsyncSession, absence_id: int) -> Optional[Absence]:
    return await _get_active(db, Absence, absence_id)


async def create_absence(db: AsyncSession, data: AbsenceCreate) -> Absence:
    await _require_reference(db, Person, data.person_id, "person")
    await _require_reference(db, AbsenceType, data.absence_type_id, "absence type")
    absence = Absence(**data.model_dump())
    db.add(absence)
    await db.flush()
    await db.refresh(absence)
    logger.info("created absence id=%s person_id=%s", absence.id, absence.person_id)
    return absence


async def update_absence(db: AsyncSession, absence_id: int, data: AbsenceUpdate) -> Absence:
    absence = await _require_active(db, Absence, absence_id, "absence")
    update_data = data.model_dump(exclude_unset=True)
    if "absence_type_id" in update_data:
        await _require_reference(db, AbsenceType, update_data["absence_type_id"], "absence type")
    start = update_data.get("start_date", absence.start_date)
    end = update_data.get("end_date", absence.end_date)
    if end is not None and start is not None and end < start:
        raise InvalidDataError("end_date must not be before start_date")
    _apply_update(absence, update_data)
    await db.flush()
    await db.refresh(absence)
    return absence


async def delete_absence(db: AsyncSession, absence_id: int) -> None:
    await _soft_delete(db, Absence, absence_id, "absence")


# ---------- shift schedules ----------
async def get_shift_schedules(
    db: AsyncSession,
    shift_date: Optional[date] = None,
    person_id: Optional[int] = None,
    unit_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status: Optional[str] = None,
) -> List[ShiftSchedule]:
    q = select(ShiftSchedule).where(ShiftSchedule.is_active.is_(True))
    if shift_date is not None:
        q = q.where(ShiftSchedule.shift_date == shift_date)
    if person_id is not None:
        q = q.where(ShiftSchedule.person_id == person_id)
    if unit_id is not None:
        q = q.where(ShiftSchedule.unit_id == unit_id)
    if date_from is not None:
        q = q.where(ShiftSchedule.shift_date >= date_from)
    if date_to is not None:
        q = q.where(ShiftSchedule.shift_date <= date_to)
    if status and status.strip():
        q = q.where(ShiftSchedule.status == status.strip().upper())
    q = q.order_by(ShiftSchedule.shift_date.desc(), ShiftSchedule.id.desc())
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_shift_schedule_by_id(db: AsyncSession, schedule_id: int) -> Optional[ShiftSchedule]:
    return await _get_active(db, ShiftSchedule, schedule_id)


async def create_shift_schedule(db: AsyncSession, data: ShiftScheduleCreate) -> ShiftSchedule:
    await _require_reference(db, Person, data.person_id, "person")
    await _require_reference(db, ShiftType, data.shift_type_id, "shift type")
    await _require_reference(db, OrganizationalUnit, data.unit_id, "unit")
    raw = data.model_dump()
    if raw.get("start_time") is None or raw.get("end_time") is None:
        # fall back to the shift type's default hours
        shift_type = await db.get(ShiftType, data.shift_type_id)
        if raw.get("start_time") is None:
            raw["start_time"] = shift_type.start_time
        if raw.get("end_time") is None:
            raw["end_time"] = shift_type.end_time
    schedule = ShiftSchedule(**raw)
    db.add(schedule)
    await db.flush()
    await db.refresh(schedule)
    logger.info("created shift schedule id=%s person_id=%s date=%s", schedule.id, schedule.person_id, schedule.shift_date)
    return schedule


async def update_shift_schedule(db: AsyncSession, schedule_id: int, data: ShiftScheduleUpdate) -> ShiftSchedule:
    schedule = await _require_active(db, ShiftSchedule, schedule_id, "shift schedule")
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("status") is not None:
        ensure_transition(SHIFT_STATUS_TRANSITIONS, schedule.status, update_data["status"], "shift status")
    if "shift_type_id" in update_data:
        await _require_reference(db, ShiftType, update_data["shift_type_id"], "shift type")
    if "unit_id" in update_data:
        await _require_reference(db, OrganizationalUnit, update_data["unit_id"], "unit")
    _apply_update(schedule, update_data)
    await db.flush()
    await db.refresh(schedule)
    return schedule


async def delete_shift_schedule(db: AsyncSession, schedule_id: int) -> None:
    await _soft_delete(db, ShiftSchedule, schedule_id, "shift schedule")


# ---------- per diem ----------
CENT = Decimal("0.01")


def compute_per_diem_total(
    start_date: date,
    end_date: date,
    daily_rate: Optional[Decimal],
    transport_amount: Optional[Decimal] = None,
) -> Optional[Decimal]:
    """daily_rate x days (both ends inclusive) + transport; None without a daily rate."""
    if daily_rate is None:
        return None
    days = (end_date - start_date).days + 1
    total = Decimal(daily_rate) * days + Decimal(transport_amount or 0)
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


async def get_per_diem_requests(
    db: AsyncSession,
    person_id: Optional[int] = None,
    status_id: Optional[int] = None,
    start_from: Optional[date] = None,
    end_until: Optional[date] = None,
) -> List[PerDiemRequest]:
    """start_from bounds start_date from below, end_until bounds end_date from above (both inclusive)."""
    q = select(PerDiemRequest).where(PerDiemRequest.is_active.is_(True))
    if person_id is not None:
        q = q.where(PerDiemRequest.person_id == person_id)
    if status_id is not None:
        q = q.where(PerDiemRequest.status_id == status_id)
    if start_from is not None:
        q = q.where(PerDiemRequest.start_date >= start_from)
    if end_until is not None:
        q = q.where(PerDiemRequest.end_date <= end_until)
    q = q.order_by(PerDiemRequest.created_at.desc(), PerDiemRequest.id.desc())
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_per_diem_request_by_id(db: AsyncSession, request_id: int) -> Optional[PerDiemRequest]:
    return await _get_active(db, PerDiemRequest, request_id)


async def create_per_diem_request(db: AsyncSession, data: PerDiemRequestCreate) -> PerDiemRequest:
    await _require_reference(db, Person, data.person_id, "person")
    await _require_reference(db, PerDiemStatus, data.status_id, "per-diem status")
    raw = data.model_dump()
    if raw.get("total_amount") is None:
        raw["total_amount"] = compute_per_diem_total(
            data.start_date, data.end_date, data.daily_rate, data.transport_amount
        )
    req = PerDiemRequest(**raw)
    db.add(req)
    await db.flush()
    await db.refresh(req)
    logger.info("created per-diem request id=%s person_id=%s", req.id, req.person_id)
    return req


async def update_per_diem_request(
    db: AsyncSession, request_id: int, data: PerDiemRequestUpdate
) -> PerDiemRequest:
    req = await _require_active(db, PerDiemRequest, request_id, "per-diem request")
    update_data = data.model_dump(exclude_unset=True)
    if "status_id" in update_data:
        await _require_reference(db, PerDiemStatus, update_data["status_id"], "per-diem status")
    start = update_data.get("start_date", req.start_date)
    end = update_data.get("end_date", req.end_date)
    if end < start:
        raise InvalidDataError("end_date must not be before start_date")
    amount_fields = {"daily_rate", "transport_amount", "start_date", "end_date"}
    if "total_amount" not in update_data and amount_fields & update_data.keys():
        total = compute_per_diem_total(
            start, end,
            update_data.get("daily_rate", req.daily_rate),
            update_data.get("transport_amount", req.transport_amount),
        )
        if total is not None:
            update_data["total_amount"] = total
    _apply_update(req, update_data)
    await db.flush()
    await db.refresh(req)
    return req


async def delete_per_diem_request(db: AsyncSession, request_id: int) -> None:
    await _soft_delete(db, PerDiemRequest, request_id, "per-diem request")


# ---------- weapons ----------
async def get_weapons(
    db: AsyncSession,
    situation: Optional[str] = None,
    weapon_type_id: Optional[int] = None,
    serial_number: Optional[str] = None,
) -> List[WeaponItem]:
    q = select(WeaponItem).where(WeaponItem.is_active.is_(True))
    if situation and situation.strip():
        q = q.where(WeaponItem.situation == situation.strip().upper())
    if weapon_type_id is not None:
        q = q.where(WeaponItem.weapon_type_id == weapon_type_id)
    if serial_number and serial_number.strip():
        q = q.where(WeaponItem.serial_number == serial_number.strip())
    q = q.order_by(WeaponItem.created_at.desc(), WeaponItem.id.desc())
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_weapon_by_id(db: AsyncSession, weapon_id: int) -> Optional[WeaponItem]:
    return await _get_active(db, WeaponItem, weapon_id)


async def create_weapon(db: AsyncSession, data: WeaponCreate) -> WeaponItem:
    await _require_reference(db, WeaponType, data.weapon_type_id, "weapon type")
    weapon = WeaponItem(**data.model_dump())
    db.add(weapon)
    await _flush_or_conflict(db, "serial number already registered")
    await db.refresh(weapon)
    logger.info("created weapon id=%s serial=%s", weapon.id, weapon.serial_number)
    return weapon


async def update_weapon(db: AsyncSession, weapon_id: int, data: WeaponUpdate) -> WeaponItem:
    weapon = await _require_active(db, WeaponItem, weapon_id, "weapon")
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("situation") is not None:
        ensure_transition(WEAPON_SITUATION_TRANSITIONS, weapon.situation, update_data["situation"], "weapon situation")
    if "weapon_type_id" in update_data:
        await _require_reference(db, WeaponType, update_data["weapon_type_id"], "weapon type")
    _apply_update(weapon, update_data)
    await _flush_or_conflict(db, "serial number already registered")
    await db.refresh(weapon)
    return weapon


async def delete_weapon(db: AsyncSession, weapon_id: int) -> None:
    await _soft_delete(db, WeaponItem, weapon_id, "weapon")


async def get_weapon_checkouts(
    db: AsyncSession,
    weapon_id: Optional[int] = None,
    person_id: Optional[int] = None,
    open_only: bool = False,
) -> List[WeaponCheckout]:
    q = select(WeaponCheckout).where(WeaponCheckout.is_active.is_(True))
    if weapon_id is not None:
        q = q.where(WeaponCheckout.weapon_id == weapon_id)
    if person_id is not None:
        q = q.where(WeaponCheckout.person_id == person_id)
    if open_only:
        q = q.where(WeaponCheckout.returned_at.is_(None))
    q = q.order_by(WeaponCheckout.checked_out_at.desc(), WeaponCheckout.id.desc())
    r = await db.execute(q)
    return list(r.scalars().all())


async def checkout_weapon(db: AsyncSession, weapon_id: int, data: WeaponCheckoutCreate) -> WeaponCheckout:
    """Hand an available weapon to a person; the weapon moves to EM_USO."""
    weapon = await _require_active(db, WeaponItem, weapon_id, "weapon")
    await _require_reference(db, Person, data.person_id, "person")
    if weapon.situation != "DISPONIVEL":
        raise InvalidTransitionError(f"weapon {weapon.serial_number} is not available ({weapon.situation})")
    checkout = WeaponCheckout(
        weapon_id=weapon.id,
        person_id=data.person_id,
        checked_out_at=_naive_utc(data.checked_out_at) or utcnow(),
        purpose=data.purpose,
        notes=data.notes,
    )
    db.add(checkout)
    _apply_update(weapon, {"situation": "EM_USO"})
    await db.flush()
    await db.refresh(checkout)
    logger.info("weapon id=%s checked out to person_id=%s", weapon.id, data.person_id)
    return checkout


async def return_weapon(db: AsyncSession, checkout_id: int, data: WeaponReturn) -> WeaponCheckout:
    checkout = await _require_active(db, WeaponCheckout, checkout_id, "weapon checkout")
    if checkout.returned_at is not None:
        raise InvalidTransitionError("weapon already returned for this checkout")
    returned_at = _naive_utc(data.returned_at) or utcnow()
    if returned_at < checkout.checked_out_at:
        raise InvalidDataError("returned_at must not be before checked_out_at")
    update_data: Dict[str, Any] = {"returned_at": returned_at}
    if data.notes is not None:
        update_data["notes"] = data.notes
    _apply_update(checkout, update_data)
    weapon = await db.get(WeaponItem, checkout.weapon_id)
    if weapon is not None and weapon.situation == "EM_USO":
        _apply_update(weapon, {"situation": "DISPONIVEL"})
    await db.flush()
    await db.refresh(checkout)
    logger.info("weapon id=%s returned (checkout id=%s)", checkout.weapon_id, checkout.id)
    return checkout


# ---------- lookups ----------
async def list_lookup(db: AsyncSession, model: Type[ModelT], **filters: Any) -> List[ModelT]:
    q = select(model).where(model.is_active.is_(True))
    for column, value in filters.items():
        if value is not None:
            q = q.where(getattr(model, column) == value)
    q = q.order_by(model.name, model.id)
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_lookup_by_name(db: AsyncSession, model: Type[ModelT], name: str) -> Optional[ModelT]:
    r = await db.execute(select(model).where(model.name == name, model.is_active.is_(True)).limit(1))
    return r.scalars().first()


async def _refresh_status_registry(db: AsyncSession, model: Type[ModelT]) -> None:
    """Status rows feed the name -> id registry; reload it after any change to them."""
    if model is PerDiemStatus:
        await status_registry.load_status_registry(db)


async def create_lookup(db: AsyncSession, model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    """Insert a reference row; used by the reference-data seeder and maintenance scripts."""
    obj = model(**data)
    db.add(obj)
    await _flush_or_conflict(db, f"{model.__tablename__}: duplicate entry")
    await db.refresh(obj)
    await _refresh_status_registry(db, model)
    return obj


async def update_lookup(db: AsyncSession, model: Type[ModelT], obj_id: int, data: Dict[str, Any]) -> ModelT:
    obj = await _require_active(db, model, obj_id, model.__tablename__)
    _apply_update(obj, data)
    await _flush_or_conflict(db, f"{model.__tablename__}: duplicate entry")
    await db.refresh(obj)
    await _refresh_status_registry(db, model)
    return obj


async def delete_lookup(db: AsyncSession, model: Type[ModelT], obj_id: int) -> None:
    await _soft_delete(db, model, obj_id, model.__tablename__)
    await _refresh_status_registry(db, model)


async def get_positions(db: AsyncSession) -> List[Position]:
    return await list_lookup(db, Position)


async def get_units(db: AsyncSession) -> List[OrganizationalUnit]:
    return await list_lookup(db, OrganizationalUnit)


async def get_municipalities(db: AsyncSession, state_id: Optional[int] = None) -> List[Municipality]:
    return await list_lookup(db, Municipality, state_id=state_id)


async def get_states(db: AsyncSession) -> List[State]:
    return await list_lookup(db, State)


async def get_absence_types(db: AsyncSession) -> List[AbsenceType]:
    return await list_lookup(db, AbsenceType)


async def get_shift_types(db: AsyncSession) -> List[ShiftType]:
    return await list_lookup(db, ShiftType)


async def get_per_diem_statuses(db: AsyncSession) -> List[PerDiemStatus]:
    return await list_lookup(db, PerDiemStatus)


async def get_weapon_types(db: AsyncSession) -> List[WeaponType]:
    return await list_lookup(db, WeaponType)


async def get_document_types(db: AsyncSession) -> List[DocumentType]:
    return await list_lookup(db, DocumentType)


# ---------- organizational units ----------
async def get_unit_by_id(db: AsyncSession, unit_id: int) -> Optional[OrganizationalUnit]:
    return await _get_active(db, OrganizationalUnit, unit_id)


async def get_unit_children(db: AsyncSession, unit_id: int) -> List[OrganizationalUnit]:
    return await list_lookup(db, OrganizationalUnit, parent_unit_id=unit_id)


async def ensure_acyclic_parent(db: AsyncSession, unit_id: Optional[int], parent_id: Optional[int]) -> None:
    """Walk up from parent_id; reaching unit_id (or revisiting a node) means a cycle."""
    if parent_id is None:
        return
    if unit_id is not None and parent_id == unit_id:
        raise UnitHierarchyError("a unit cannot be its own parent")
    visited = set()
    current: Optional[int] = parent_id
    while current is not None:
        if unit_id is not None and current == unit_id:
            raise UnitHierarchyError(f"unit {unit_id} would become its own ancestor")
        if current in visited:
            raise UnitHierarchyError(f"unit hierarchy already contains a cycle at unit {current}")
        visited.add(current)
        node = await db.get(OrganizationalUnit, current)
        if node is None:
            raise ReferenceNotFoundError(f"unit {current} not found")
        current = node.parent_unit_id


async def create_unit(db: AsyncSession, data: UnitCreate) -> OrganizationalUnit:
    await _require_reference(db, OrganizationalUnit, data.parent_unit_id, "parent unit")
    await _require_reference(db, Municipality, data.municipality_id, "municipality")
    await ensure_acyclic_parent(db, None, data.parent_unit_id)
    unit = OrganizationalUnit(**data.model_dump())
    db.add(unit)
    await db.flush()
    await db.refresh(unit)
    logger.info("created unit id=%s parent=%s", unit.id, unit.parent_unit_id)
    return unit


async def update_unit(db: AsyncSession, unit_id: int, data: UnitUpdate) -> OrganizationalUnit:
    unit = await _require_active(db, OrganizationalUnit, unit_id, "unit")
    update_data = data.model_dump(exclude_unset=True)
    if "parent_unit_id" in update_data and update_data["parent_unit_id"] != unit.parent_unit_id:
        await _require_reference(db, OrganizationalUnit, update_data["parent_unit_id"], "parent unit")
        try:
            await ensure_acyclic_parent(db, unit.id, update_data["parent_unit_id"])
        except UnitHierarchyError:
            logger.warning("rejected re-parenting of unit id=%s to %s", unit.id, update_data["parent_unit_id"])
            raise
    if "municipality_id" in update_data:
        await _require_reference(db, Municipality, update_data["municipality_id"], "municipality")
    _apply_update(unit, update_data)
    await db.flush()
    await db.refresh(unit)
    return unit


async def delete_unit(db: AsyncSession, unit_id: int) -> None:
    await _soft_delete(db, OrganizationalUnit, unit_id, "unit")


# ---------- users ----------
async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    return await db.get(User, user_id)


async def upsert_user(
    db: AsyncSession,
    user_id: str,
    email: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    profile_image_url: Optional[str] = None,
) -> User:
    user = await db.get(User, user_id)
    if user is None:
        user = User(id=user_id)
        db.add(user)
    user.email = email
    user.first_name = first_name
    user.last_name = last_name
    user.profile_image_url = profile_image_url
    user.updated_at = utcnow()
    await db.flush()
    await db.refresh(user)
    return user


# ---------- dashboard ----------
async def _count(db: AsyncSession, model: Type[ModelT], *criteria) -> int:
    total = await db.scalar(
        select(func.count()).select_from(model).where(model.is_active.is_(True), *criteria)
    )
    return int(total or 0)


async def get_dashboard_stats(db: AsyncSession, as_of: Optional[date] = None) -> Dict[str, int]:
    """Four independent counters; the pending per-diem status is resolved by name."""
    today = as_of or date.today()
    active_staff = await _count(db, Person, Person.person_type == "S")
    active_absences = await _count(db, Absence, absence_active_clause(today))
    pending_id = await status_registry.resolve_status_id(db, settings.pending_per_diem_status)
    if pending_id is None:
        logger.warning("per-diem status %r not found; pending count is 0", settings.pending_per_diem_status)
        pending = 0
    else:
        pending = await _count(db, PerDiemRequest, PerDiemRequest.status_id == pending_id)
    weapons_in_use = await _count(db, WeaponItem, WeaponItem.situation == "EM_USO")
    return {
        "active_staff_count": active_staff,
        "active_absence_count": active_absences,
        "pending_per_diem_count": pending,
        "weapons_in_use_count": weapons_in_use,
    }


RECENT_PERSONS_LIMIT = 3
RECENT_PER_DIEM_LIMIT = 2


async def get_recent_activities(db: AsyncSession) -> List[Dict[str, Any]]:
    """Best-effort feed: newest persons and per-diem requests merged, newest first (max 5)."""
    activities: List[Dict[str, Any]] = []

    r = await db.execute(
        select(Person.id, Person.full_name, Person.created_at)
        .where(Person.is_active.is_(True))
        .order_by(Person.created_at.desc(), Person.id.desc())
        .limit(RECENT_PERSONS_LIMIT)
    )
    for pid, full_name, created_at in r.all():
        activities.append({
            "id": pid,
            "kind": "person_created",
            "description": f"New person registered: {full_name}",
            "timestamp": created_at,
            "person_name": full_name,
        })

    r = await db.execute(
        select(PerDiemRequest.id, PerDiemRequest.destination, PerDiemRequest.created_at, Person.full_name)
        .outerjoin(Person, PerDiemRequest.person_id == Person.id)
        .where(PerDiemRequest.is_active.is_(True))
        .order_by(PerDiemRequest.created_at.desc(), PerDiemRequest.id.desc())
        .limit(RECENT_PER_DIEM_LIMIT)
    )
    for rid, destination, created_at, person_name in r.all():
        activities.append({
            "id": rid,
            "kind": "per_diem_created",
            "description": f"New per-diem request to {destination}",
            "timestamp": created_at,
            "person_name": person_name,
        })

    activities.sort(key=lambda a: a["timestamp"] or datetime.min, reverse=True)
    return activities[:RECENT_PERSONS_LIMIT + RECENT_PER_DIEM_LIMIT]
