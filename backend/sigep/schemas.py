"""API request/response models - Pydantic."""
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, List
import re
from pydantic import BaseModel, Field, ConfigDict, ValidationInfo, field_validator, model_validator

from sigep.models import (
    PERSON_TYPES, SEXES, FUNCTIONAL_STATUSES, SHIFT_STATUSES, WEAPON_SITUATIONS, ACCOUNT_TYPES,
)

NATIONAL_ID_PATTERN = re.compile(r"^\d{11}$")
POSTAL_CODE_PATTERN = re.compile(r"^\d{8}$")


def national_id_digits(v: str) -> str:
    return re.sub(r"[.\-\s]", "", str(v))


def normalize_national_id(v: Optional[str]) -> Optional[str]:
    """CPF: accepts 123.456.789-01 or 12345678901, stores digits only."""
    if v is None:
        return v
    digits = national_id_digits(v)
    if not NATIONAL_ID_PATTERN.match(digits):
        raise ValueError("national_id must have 11 digits")
    return digits


def normalize_postal_code(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    digits = re.sub(r"[\-\s]", "", str(v))
    if not digits:
        return None
    if not POSTAL_CODE_PATTERN.match(digits):
        raise ValueError("postal_code must have 8 digits")
    return digits


def _choice(v: Optional[str], choices, label: str) -> Optional[str]:
    if v is None:
        return v
    value = v.strip().upper()
    if value not in choices:
        raise ValueError(f"{label} must be one of: {', '.join(choices)}")
    return value


def _not_null(v, info: ValidationInfo):
    """Update bodies may omit a required column, but not send it as null."""
    if v is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return v


def _check_range(start: Optional[date], end: Optional[date], label: str = "end_date") -> None:
    if start is not None and end is not None and end < start:
        raise ValueError(f"{label} must not be before start_date")


# ---------- lookups ----------
class LookupRead(BaseModel):
    """Shared shape of the name/code reference tables."""
    id: int
    name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class StateRead(LookupRead):
    abbreviation: str


class MunicipalityRead(LookupRead):
    state_id: Optional[int] = None


class DocumentTypeRead(LookupRead):
    description: Optional[str] = None


class PositionRead(LookupRead):
    abbreviation: Optional[str] = None
    weekly_hours: int
    description: Optional[str] = None


class AbsenceTypeRead(LookupRead):
    description: Optional[str] = None
    requires_document: bool = False


class ShiftTypeRead(LookupRead):
    description: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    hours: Optional[int] = None


class PerDiemStatusRead(LookupRead):
    description: Optional[str] = None


class WeaponTypeRead(LookupRead):
    caliber: Optional[str] = None
    category: Optional[str] = None


# ---------- organizational units ----------
class UnitBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    abbreviation: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    municipality_id: Optional[int] = None
    parent_unit_id: Optional[int] = None


class UnitCreate(UnitBase):
    pass


class UnitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    abbreviation: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    municipality_id: Optional[int] = None
    parent_unit_id: Optional[int] = None

    @field_validator("name", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        return _not_null(v, info)


class UnitRead(UnitBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- persons ----------
class PersonBase(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    display_name: Optional[str] = Field(None, max_length=200)
    national_id: str = Field(..., description="CPF, 11 digits")
    secondary_id: Optional[str] = Field(None, max_length=20, description="RG")
    birth_date: date
    sex: str = Field(..., description="M/F")
    marital_status: Optional[str] = Field(None, max_length=20)
    father_name: Optional[str] = Field(None, max_length=200)
    mother_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    municipality_id: Optional[int] = None
    postal_code: Optional[str] = None
    person_type: str = Field(..., description="S=Staff, T=Contractor")


class PersonCreate(PersonBase):
    @field_validator("national_id")
    @classmethod
    def check_national_id(cls, v: str) -> str:
        return normalize_national_id(v)

    @field_validator("postal_code")
    @classmethod
    def check_postal_code(cls, v: Optional[str]) -> Optional[str]:
        return normalize_postal_code(v)

    @field_validator("sex")
    @classmethod
    def check_sex(cls, v: str) -> str:
        return _choice(v, SEXES, "sex")

    @field_validator("person_type")
    @classmethod
    def check_person_type(cls, v: str) -> str:
        return _choice(v, PERSON_TYPES, "person_type")


class PersonUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    display_name: Optional[str] = Field(None, max_length=200)
    national_id: Optional[str] = None
    secondary_id: Optional[str] = Field(None, max_length=20)
    birth_date: Optional[date] = None
    sex: Optional[str] = None
    marital_status: Optional[str] = Field(None, max_length=20)
    father_name: Optional[str] = Field(None, max_length=200)
    mother_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    municipality_id: Optional[int] = None
    postal_code: Optional[str] = None
    person_type: Optional[str] = None

    @field_validator("full_name", "national_id", "birth_date", "sex", "person_type", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        return _not_null(v, info)

    @field_validator("national_id")
    @classmethod
    def check_national_id(cls, v: Optional[str]) -> Optional[str]:
        return normalize_national_id(v)

    @field_validator("postal_code")
    @classmethod
    def check_postal_code(cls, v: Optional[str]) -> Optional[str]:
        return normalize_postal_code(v)

    @field_validator("sex")
    @classmethod
    def check_sex(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, SEXES, "sex")

    @field_validator("person_type")
    @classmethod
    def check_person_type(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, PERSON_TYPES, "person_type")


class PersonRead(PersonBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- functional records ----------
class FunctionalRecordBase(BaseModel):
    person_id: int
    registration_number: str = Field(..., min_length=1, max_length=30)
    position_id: int
    unit_id: int
    appointment_date: Optional[date] = None
    possession_date: date
    duty_start_date: Optional[date] = None
    status: str = "ATIVO"
    notes: Optional[str] = None


class FunctionalRecordCreate(FunctionalRecordBase):
    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        return _choice(v, FUNCTIONAL_STATUSES, "status")


class FunctionalRecordUpdate(BaseModel):
    registration_number: Optional[str] = Field(None, min_length=1, max_length=30)
    position_id: Optional[int] = None
    unit_id: Optional[int] = None
    appointment_date: Optional[date] = None
    possession_date: Optional[date] = None
    duty_start_date: Optional[date] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("registration_number", "position_id", "unit_id", "possession_date", "status", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        return _not_null(v, info)

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, FUNCTIONAL_STATUSES, "status")


class FunctionalRecordRead(FunctionalRecordBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- bank accounts ----------
class BankAccountBase(BaseModel):
    bank: str = Field(..., min_length=1, max_length=100)
    branch: str = Field(..., min_length=1, max_length=10)
    account: str = Field(..., min_length=1, max_length=20)
    account_type: str = "CORRENTE"


class BankAccountCreate(BankAccountBase):
    @field_validator("account_type")
    @classmethod
    def check_account_type(cls, v: str) -> str:
        return _choice(v, ACCOUNT_TYPES, "account_type")


class BankAccountUpdate(BaseModel):
    bank: Optional[str] = Field(None, min_length=1, max_length=100)
    branch: Optional[str] = Field(None, min_length=1, max_length=10)
    account: Optional[str] = Field(None, min_length=1, max_length=20)
    account_type: Optional[str] = None

    @field_validator("bank", "branch", "account", "account_type", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        return _not_null(v, info)

    @field_validator("account_type")
    @classmethod
    def check_account_type(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, ACCOUNT_TYPES, "account_type")


class BankAccountRead(BankAccountBase):
    id: int
    person_id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- absences ----------
class AbsenceBase(BaseModel):
    person_id: int
    absence_type_id: int
    start_date: date
    end_date: Optional[date] = Field(None, description="empty while the absence is ongoing")
    reason: Optional[str] = None
    process_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class AbsenceCreate(AbsenceBase):
    @model_validator(mode="after")
    def check_dates(self) -> "AbsenceCreate":
        _check_range(self.start_date, self.end_date)
        return self


class AbsenceUpdate(BaseModel):
    absence_type_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    process_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None

    # end_date stays nullable: clearing it reopens the absence
    @field_validator("absence_type_id", "start_date", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        return _not_null(v, info)

    @model_validator(mode="after")
    def check_dates(self) -> "AbsenceUpdate":
        _check_range(self.start_date, self.end_date)
        return self


class AbsenceRead(AbsenceBase):
    id: int
    is_active: bool
    currently_active: bool = False
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- shift schedules ----------
class ShiftScheduleBase(BaseModel):
    person_id: int
    shift_type_id: int
    unit_id: int
    shift_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = Field(None, description="may be earlier than start_time for night shifts")
    status: str = "AGENDADA"
    notes: Optional[str] = None


class ShiftScheduleCreate(ShiftScheduleBase):
    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        return _choice(v, SHIFT_STATUSES, "status")


class ShiftScheduleUpdate(BaseModel):
    shift_type_id: Optional[int] = None
    unit_id: Optional[int] = None
    shift_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("shift_type_id", "unit_id", "shift_date", "status", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        return _not_null(v, info)

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, SHIFT_STATUSES, "status")


class ShiftScheduleRead(ShiftScheduleBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- per diem ----------
class PerDiemRequestBase(BaseModel):
    person_id: int
    status_id: int
    destination: str = Field(..., min_length=1, max_length=200)
    purpose: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    daily_rate: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    transport_amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    total_amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2,
                                            description="computed from daily_rate and transport when omitted")
    process_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class PerDiemRequestCreate(PerDiemRequestBase):
    @model_validator(mode="after")
    def check_dates(self) -> "PerDiemRequestCreate":
        _check_range(self.start_date, self.end_date)
        return self


class PerDiemRequestUpdate(BaseModel):
    status_id: Optional[int] = None
    destination: Optional[str] = Field(None, min_length=1, max_length=200)
    purpose: Optional[str] = Field(None, min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    daily_rate: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    transport_amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    total_amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    process_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None

    @field_validator("status_id", "destination", "purpose", "start_date", "end_date", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        return _not_null(v, info)

    @model_validator(mode="after")
    def check_dates(self) -> "PerDiemRequestUpdate":
        _check_range(self.start_date, self.end_date)
        return self


class PerDiemRequestRead(PerDiemRequestBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- weapons ----------
class WeaponBase(BaseModel):
    serial_number: str = Field(..., min_length=1, max_length=50)
    weapon_type_id: int
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    manufacture_year: Optional[int] = Field(None, ge=1800, le=2100)
    situation: str = "DISPONIVEL"
    notes: Optional[str] = None

    # "model" is a field name here, not the pydantic namespace
    model_config = ConfigDict(protected_namespaces=())


class WeaponCreate(WeaponBase):
    @field_validator("serial_number")
    @classmethod
    def strip_serial(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("serial_number is required")
        return v

    @field_validator("situation")
    @classmethod
    def check_situation(cls, v: str) -> str:
        return _choice(v, WEAPON_SITUATIONS, "situation")


class WeaponUpdate(BaseModel):
    serial_number: Optional[str] = Field(None, min_length=1, max_length=50)
    weapon_type_id: Optional[int] = None
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    manufacture_year: Optional[int] = Field(None, ge=1800, le=2100)
    situation: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(protected_namespaces=())

    @field_validator("serial_number", "weapon_type_id", "situation", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        return _not_null(v, info)

    @field_validator("situation")
    @classmethod
    def check_situation(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, WEAPON_SITUATIONS, "situation")


class WeaponRead(WeaponBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class WeaponCheckoutCreate(BaseModel):
    person_id: int
    checked_out_at: Optional[datetime] = Field(None, description="defaults to now")
    purpose: Optional[str] = None
    notes: Optional[str] = None


class WeaponReturn(BaseModel):
    returned_at: Optional[datetime] = Field(None, description="defaults to now")
    notes: Optional[str] = None


class WeaponCheckoutRead(BaseModel):
    id: int
    weapon_id: int
    person_id: int
    checked_out_at: datetime
    returned_at: Optional[datetime] = None
    purpose: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- dashboard ----------
class DashboardStats(BaseModel):
    active_staff_count: int
    active_absence_count: int
    pending_per_diem_count: int
    weapons_in_use_count: int


class Activity(BaseModel):
    id: int
    kind: str = Field(..., description="person_created / per_diem_created")
    description: str
    timestamp: datetime
    person_name: Optional[str] = None


# ---------- reports ----------
class ReportFilterInfo(BaseModel):
    name: str
    required: bool = False


class ReportInfo(BaseModel):
    id: str
    title: str
    category: str
    filters: List[ReportFilterInfo] = []
