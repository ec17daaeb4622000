"""Database models - personnel administration.
Rows are never physically removed: every table carries is_active and reads filter on it."""
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Optional, List
from sqlalchemy import String, Date, Time, Text, Numeric, ForeignKey, DateTime, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sigep.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns below."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


PERSON_TYPES = ("S", "T")  # Staff / Contractor
SEXES = ("M", "F")
FUNCTIONAL_STATUSES = ("ATIVO", "INATIVO", "APOSENTADO", "EXONERADO")
SHIFT_STATUSES = ("AGENDADA", "PRESENTE", "FALTOU", "JUSTIFICADA")
WEAPON_SITUATIONS = ("DISPONIVEL", "EM_USO", "MANUTENCAO", "BAIXADO")
ACCOUNT_TYPES = ("CORRENTE", "POUPANCA")


class TimestampMixin:
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


# ---------- reference / lookup tables ----------
class State(TimestampMixin, Base):
    __tablename__ = "states"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    abbreviation: Mapped[str] = mapped_column(String(2))

    municipalities: Mapped[List["Municipality"]] = relationship("Municipality", back_populates="state")


class Municipality(TimestampMixin, Base):
    __tablename__ = "municipalities"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200))
    state_id: Mapped[Optional[int]] = mapped_column(ForeignKey("states.id"), index=True)

    state: Mapped[Optional["State"]] = relationship("State", back_populates="municipalities")


class DocumentType(TimestampMixin, Base):
    __tablename__ = "document_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50))
    description: Mapped[Optional[str]] = mapped_column(Text)


class Position(TimestampMixin, Base):
    """Job position (cargo); weekly_hours is the contractual workload."""
    __tablename__ = "positions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    abbreviation: Mapped[Optional[str]] = mapped_column(String(10))
    weekly_hours: Mapped[int] = mapped_column(Integer, default=40)
    description: Mapped[Optional[str]] = mapped_column(Text)


class OrganizationalUnit(TimestampMixin, Base):
    """Organizational unit. parent_unit_id forms a tree; writes must keep it acyclic."""
    __tablename__ = "organizational_units"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200))
    abbreviation: Mapped[Optional[str]] = mapped_column(String(20))
    address: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    municipality_id: Mapped[Optional[int]] = mapped_column(ForeignKey("municipalities.id"))
    parent_unit_id: Mapped[Optional[int]] = mapped_column(ForeignKey("organizational_units.id"), index=True)

    parent: Mapped[Optional["OrganizationalUnit"]] = relationship(
        "OrganizationalUnit", remote_side="OrganizationalUnit.id", back_populates="children"
    )
    children: Mapped[List["OrganizationalUnit"]] = relationship("OrganizationalUnit", back_populates="parent")


class AbsenceType(TimestampMixin, Base):
    __tablename__ = "absence_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text)
    requires_document: Mapped[bool] = mapped_column(Boolean, default=False)


class ShiftType(TimestampMixin, Base):
    __tablename__ = "shift_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text)
    start_time: Mapped[Optional[time]] = mapped_column(Time)
    end_time: Mapped[Optional[time]] = mapped_column(Time)
    hours: Mapped[Optional[int]] = mapped_column(Integer)


class PerDiemStatus(TimestampMixin, Base):
    """Per-diem status lookup. Editable admin data; resolve rows by name, never by id."""
    __tablename__ = "per_diem_statuses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)


class WeaponType(TimestampMixin, Base):
    __tablename__ = "weapon_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    caliber: Mapped[Optional[str]] = mapped_column(String(50))
    category: Mapped[Optional[str]] = mapped_column(String(50))


# ---------- people ----------
class Person(TimestampMixin, Base):
    """Staff member (S) or contractor (T). national_id (CPF) is unique at the column level."""
    __tablename__ = "persons"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(200), index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(200))
    national_id: Mapped[str] = mapped_column(String(11), unique=True)
    secondary_id: Mapped[Optional[str]] = mapped_column(String(20))
    birth_date: Mapped[date] = mapped_column(Date)
    sex: Mapped[str] = mapped_column(String(1))
    marital_status: Mapped[Optional[str]] = mapped_column(String(20))
    father_name: Mapped[Optional[str]] = mapped_column(String(200))
    mother_name: Mapped[Optional[str]] = mapped_column(String(200))
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    address: Mapped[Optional[str]] = mapped_column(Text)
    municipality_id: Mapped[Optional[int]] = mapped_column(ForeignKey("municipalities.id"))
    postal_code: Mapped[Optional[str]] = mapped_column(String(8))
    person_type: Mapped[str] = mapped_column(String(1), index=True)

    functional_records: Mapped[List["FunctionalRecord"]] = relationship("FunctionalRecord", back_populates="person")
    bank_accounts: Mapped[List["BankAccount"]] = relationship("BankAccount", back_populates="person")


class FunctionalRecord(TimestampMixin, Base):
    """Employment record; by convention a person has at most one active record."""
    __tablename__ = "functional_records"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), index=True)
    registration_number: Mapped[str] = mapped_column(String(30), unique=True)
    position_id: Mapped[int] = mapped_column(ForeignKey("positions.id"))
    unit_id: Mapped[int] = mapped_column(ForeignKey("organizational_units.id"), index=True)
    appointment_date: Mapped[Optional[date]] = mapped_column(Date)
    possession_date: Mapped[date] = mapped_column(Date)
    duty_start_date: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="ATIVO")
    notes: Mapped[Optional[str]] = mapped_column(Text)

    person: Mapped["Person"] = relationship("Person", back_populates="functional_records")
    position: Mapped["Position"] = relationship("Position")
    unit: Mapped["OrganizationalUnit"] = relationship("OrganizationalUnit")


class BankAccount(TimestampMixin, Base):
    __tablename__ = "bank_accounts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), index=True)
    bank: Mapped[str] = mapped_column(String(100))
    branch: Mapped[str] = mapped_column(String(10))
    account: Mapped[str] = mapped_column(String(20))
    account_type: Mapped[str] = mapped_column(String(20), default="CORRENTE")

    person: Mapped["Person"] = relationship("Person", back_populates="bank_accounts")


# ---------- attendance ----------
class Absence(TimestampMixin, Base):
    """Leave of absence. end_date NULL means still ongoing; "currently active" is derived, not stored."""
    __tablename__ = "absences"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), index=True)
    absence_type_id: Mapped[int] = mapped_column(ForeignKey("absence_types.id"))
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    process_number: Mapped[Optional[str]] = mapped_column(String(50))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    person: Mapped["Person"] = relationship("Person")
    absence_type: Mapped["AbsenceType"] = relationship("AbsenceType")


class ShiftSchedule(TimestampMixin, Base):
    __tablename__ = "shift_schedules"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), index=True)
    shift_type_id: Mapped[int] = mapped_column(ForeignKey("shift_types.id"))
    unit_id: Mapped[int] = mapped_column(ForeignKey("organizational_units.id"), index=True)
    shift_date: Mapped[date] = mapped_column(Date, index=True)
    start_time: Mapped[Optional[time]] = mapped_column(Time)
    end_time: Mapped[Optional[time]] = mapped_column(Time)
    status: Mapped[str] = mapped_column(String(20), default="AGENDADA")
    notes: Mapped[Optional[str]] = mapped_column(Text)

    person: Mapped["Person"] = relationship("Person")
    shift_type: Mapped["ShiftType"] = relationship("ShiftType")
    unit: Mapped["OrganizationalUnit"] = relationship("OrganizationalUnit")


# ---------- per diem ----------
class PerDiemRequest(TimestampMixin, Base):
    __tablename__ = "per_diem_requests"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), index=True)
    status_id: Mapped[int] = mapped_column(ForeignKey("per_diem_statuses.id"), index=True)
    destination: Mapped[str] = mapped_column(String(200))
    purpose: Mapped[str] = mapped_column(Text)
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)
    daily_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    transport_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    total_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    process_number: Mapped[Optional[str]] = mapped_column(String(50))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    person: Mapped["Person"] = relationship("Person")
    status: Mapped["PerDiemStatus"] = relationship("PerDiemStatus")


# ---------- weapons ----------
class WeaponItem(TimestampMixin, Base):
    __tablename__ = "weapons"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    serial_number: Mapped[str] = mapped_column(String(50), unique=True)
    weapon_type_id: Mapped[int] = mapped_column(ForeignKey("weapon_types.id"), index=True)
    brand: Mapped[Optional[str]] = mapped_column(String(100))
    model: Mapped[Optional[str]] = mapped_column(String(100))
    manufacture_year: Mapped[Optional[int]] = mapped_column(Integer)
    situation: Mapped[str] = mapped_column(String(20), default="DISPONIVEL", index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    weapon_type: Mapped["WeaponType"] = relationship("WeaponType")
    checkouts: Mapped[List["WeaponCheckout"]] = relationship("WeaponCheckout", back_populates="weapon")


class WeaponCheckout(TimestampMixin, Base):
    """Weapon taken out by a person. returned_at NULL means it is still out."""
    __tablename__ = "weapon_checkouts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    weapon_id: Mapped[int] = mapped_column(ForeignKey("weapons.id"), index=True)
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), index=True)
    checked_out_at: Mapped[datetime] = mapped_column(DateTime)
    returned_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    purpose: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    weapon: Mapped["WeaponItem"] = relationship("WeaponItem", back_populates="checkouts")
    person: Mapped["Person"] = relationship("Person")


# ---------- login identities ----------
class User(Base):
    """Identity from the external login provider; id is the provider subject."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), unique=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    profile_image_url: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


def is_absence_active(absence: Absence, as_of: date) -> bool:
    """An absence is in effect on as_of when it has started and has not ended yet."""
    if absence.start_date > as_of:
        return False
    return absence.end_date is None or absence.end_date >= as_of
