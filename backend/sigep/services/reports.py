"""
Report catalogue and Excel rendering.
Each report builder returns (title, headers, rows); build_workbook() turns that into .xlsx bytes.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sigep import crud
from sigep.models import (
    Person, FunctionalRecord, ShiftSchedule, Absence, PerDiemRequest, WeaponItem, is_absence_active,
)

logger = logging.getLogger(__name__)

ReportData = Tuple[str, List[str], List[List[Any]]]
Builder = Callable[[AsyncSession, Dict[str, Any]], Awaitable[ReportData]]


class ReportNotFoundError(ValueError):
    pass


class MissingReportFilterError(ValueError):
    pass


@dataclass(frozen=True)
class ReportDefinition:
    id: str
    title: str
    category: str
    builder: Builder
    required: Tuple[str, ...] = ()
    optional: Tuple[str, ...] = field(default_factory=tuple)


def _d(value: Optional[date]) -> str:
    return value.strftime("%d/%m/%Y") if value else ""


def _money(value) -> Any:
    return float(value) if value is not None else ""


async def _active_staff(db: AsyncSession, params: Dict[str, Any]) -> ReportData:
    q = (
        select(FunctionalRecord)
        .join(Person, FunctionalRecord.person_id == Person.id)
        .where(
            FunctionalRecord.is_active.is_(True),
            FunctionalRecord.status == "ATIVO",
            Person.is_active.is_(True),
            Person.person_type == "S",
        )
        .options(
            selectinload(FunctionalRecord.person),
            selectinload(FunctionalRecord.position),
            selectinload(FunctionalRecord.unit),
        )
        .order_by(Person.full_name)
    )
    if params.get("unit_id") is not None:
        q = q.where(FunctionalRecord.unit_id == params["unit_id"])
    if params.get("position_id") is not None:
        q = q.where(FunctionalRecord.position_id == params["position_id"])
    records = (await db.execute(q)).scalars().all()
    headers = ["Matrícula", "Nome", "CPF", "Cargo", "Lotação", "Posse"]
    rows = [
        [
            fr.registration_number, fr.person.full_name, fr.person.national_id,
            fr.position.name if fr.position else "", fr.unit.name if fr.unit else "",
            _d(fr.possession_date),
        ]
        for fr in records
    ]
    return "Servidores Ativos", headers, rows


async def _functional_sheet(db: AsyncSession, params: Dict[str, Any]) -> ReportData:
    person = await crud.get_person_by_id(db, params["person_id"])
    if person is None:
        raise crud.NotFoundError(f"person {params['person_id']} not found")
    record = await crud.get_functional_record_by_person(db, person.id)
    rows: List[List[Any]] = [
        ["Nome", person.full_name],
        ["CPF", person.national_id],
        ["RG", person.secondary_id or ""],
        ["Nascimento", _d(person.birth_date)],
        ["Sexo", person.sex],
        ["Tipo", "Servidor" if person.person_type == "S" else "Terceirizado"],
        ["Telefone", person.phone or ""],
        ["E-mail", person.email or ""],
        ["Endereço", person.address or ""],
    ]
    if record is not None:
        rows += [
            ["Matrícula", record.registration_number],
            ["Situação", record.status],
            ["Nomeação", _d(record.appointment_date)],
            ["Posse", _d(record.possession_date)],
            ["Exercício", _d(record.duty_start_date)],
        ]
    for account in await crud.list_bank_accounts(db, person.id):
        rows.append(["Conta bancária", f"{account.bank} ag. {account.branch} c/c {account.account} ({account.account_type})"])
    return f"Ficha Funcional - {person.full_name}", ["Campo", "Valor"], rows


async def _shift_schedules(db: AsyncSession, params: Dict[str, Any]) -> ReportData:
    q = (
        select(ShiftSchedule)
        .where(
            ShiftSchedule.is_active.is_(True),
            ShiftSchedule.shift_date >= params["date_from"],
            ShiftSchedule.shift_date <= params["date_to"],
        )
        .options(
            selectinload(ShiftSchedule.person),
            selectinload(ShiftSchedule.shift_type),
            selectinload(ShiftSchedule.unit),
        )
        .order_by(ShiftSchedule.shift_date, ShiftSchedule.id)
    )
    if params.get("unit_id") is not None:
        q = q.where(ShiftSchedule.unit_id == params["unit_id"])
    schedules = (await db.execute(q)).scalars().all()
    headers = ["Data", "Servidor", "Turno", "Lotação", "Início", "Fim", "Situação"]
    rows = [
        [
            _d(s.shift_date), s.person.full_name, s.shift_type.name, s.unit.name,
            s.start_time.strftime("%H:%M") if s.start_time else "",
            s.end_time.strftime("%H:%M") if s.end_time else "",
            s.status,
        ]
        for s in schedules
    ]
    return "Escalas de Serviço", headers, rows


async def _active_absences(db: AsyncSession, params: Dict[str, Any]) -> ReportData:
    as_of = params.get("as_of") or date.today()
    q = (
        select(Absence)
        .where(Absence.is_active.is_(True), crud.absence_active_clause(as_of))
        .options(selectinload(Absence.person), selectinload(Absence.absence_type))
        .order_by(Absence.start_date, Absence.id)
    )
    if params.get("absence_type_id") is not None:
        q = q.where(Absence.absence_type_id == params["absence_type_id"])
    absences = (await db.execute(q)).scalars().all()
    headers = ["Servidor", "Tipo", "Início", "Fim", "Processo", "Motivo"]
    rows = [
        [
            a.person.full_name, a.absence_type.name, _d(a.start_date), _d(a.end_date) or "em aberto",
            a.process_number or "", a.reason or "",
        ]
        for a in absences
        if is_absence_active(a, as_of)
    ]
    return f"Afastamentos Vigentes em {_d(as_of)}", headers, rows


async def _per_diem(db: AsyncSession, params: Dict[str, Any]) -> ReportData:
    q = (
        select(PerDiemRequest)
        .where(
            PerDiemRequest.is_active.is_(True),
            PerDiemRequest.start_date >= params["date_from"],
            PerDiemRequest.end_date <= params["date_to"],
        )
        .options(selectinload(PerDiemRequest.person), selectinload(PerDiemRequest.status))
        .order_by(PerDiemRequest.start_date, PerDiemRequest.id)
    )
    if params.get("status_id") is not None:
        q = q.where(PerDiemRequest.status_id == params["status_id"])
    requests = (await db.execute(q)).scalars().all()
    headers = ["Servidor", "Destino", "Início", "Fim", "Diária", "Transporte", "Total", "Situação"]
    rows: List[List[Any]] = []
    grand_total = 0.0
    for r in requests:
        total = _money(r.total_amount)
        if total != "":
            grand_total += total
        rows.append([
            r.person.full_name, r.destination, _d(r.start_date), _d(r.end_date),
            _money(r.daily_rate), _money(r.transport_amount), total, r.status.name,
        ])
    rows.append(["Total", "", "", "", "", "", grand_total, ""])
    return "Diárias do Período", headers, rows


async def _weapons(db: AsyncSession, params: Dict[str, Any]) -> ReportData:
    q = (
        select(WeaponItem)
        .where(WeaponItem.is_active.is_(True))
        .options(selectinload(WeaponItem.weapon_type))
        .order_by(WeaponItem.serial_number)
    )
    if params.get("situation"):
        q = q.where(WeaponItem.situation == str(params["situation"]).upper())
    weapons = (await db.execute(q)).scalars().all()
    headers = ["Nº de Série", "Tipo", "Calibre", "Marca", "Modelo", "Ano", "Situação"]
    rows = [
        [
            w.serial_number, w.weapon_type.name, w.weapon_type.caliber or "", w.brand or "",
            w.model or "", w.manufacture_year or "", w.situation,
        ]
        for w in weapons
    ]
    return "Inventário de Armamento", headers, rows


REPORTS: Dict[str, ReportDefinition] = {
    r.id: r
    for r in (
        ReportDefinition("active-staff", "Servidores Ativos", "pessoas", _active_staff,
                         optional=("unit_id", "position_id")),
        ReportDefinition("functional-sheet", "Ficha Funcional", "pessoas", _functional_sheet,
                         required=("person_id",)),
        ReportDefinition("shift-schedules", "Escalas de Serviço", "frequencia", _shift_schedules,
                         required=("date_from", "date_to"), optional=("unit_id",)),
        ReportDefinition("active-absences", "Afastamentos Vigentes", "frequencia", _active_absences,
                         optional=("absence_type_id", "as_of")),
        ReportDefinition("per-diem", "Diárias do Período", "diarias", _per_diem,
                         required=("date_from", "date_to"), optional=("status_id",)),
        ReportDefinition("weapons", "Inventário de Armamento", "armamento", _weapons,
                         optional=("situation",)),
    )
}


def list_reports() -> List[Dict[str, Any]]:
    return [
        {
            "id": r.id,
            "title": r.title,
            "category": r.category,
            "filters": [{"name": n, "required": True} for n in r.required]
            + [{"name": n, "required": False} for n in r.optional],
        }
        for r in REPORTS.values()
    ]


async def run_report(db: AsyncSession, report_id: str, params: Dict[str, Any]) -> ReportData:
    report = REPORTS.get(report_id)
    if report is None:
        raise ReportNotFoundError(f"report {report_id!r} not found")
    missing = [name for name in report.required if params.get(name) is None]
    if missing:
        raise MissingReportFilterError(f"missing required filter(s): {', '.join(missing)}")
    title, headers, rows = await report.builder(db, params)
    logger.info("report %s generated with %d rows", report_id, len(rows))
    return title, headers, rows


def _style_header(ws):
    thin = Side(style="thin")
    for row in ws.iter_rows(min_row=1, max_row=1):
        for cell in row:
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
            cell.border = Border(top=thin, left=thin, right=thin, bottom=thin)


def build_workbook(title: str, headers: List[str], rows: List[List[Any]]) -> BytesIO:
    wb = Workbook()
    ws = wb.active
    # sheet titles are capped at 31 chars and reject a few symbols
    ws.title = "".join(c for c in title if c not in "[]:*?/\\")[:31] or "Relatorio"
    ws.append(headers)
    for row in rows:
        ws.append(row)
    _style_header(ws)
    for col in ws.columns:
        ws.column_dimensions[col[0].column_letter].width = 18
    buf = BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf
