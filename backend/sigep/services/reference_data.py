"""
Reference data seeding. Idempotent: a row is only inserted when no row with
the same name exists (active or not), so admin edits and soft deletes survive re-runs.
"""
import logging
from datetime import time
from typing import Any, Dict, List, Sequence, Tuple, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sigep import crud
from sigep.models import (
    Base, State, DocumentType, AbsenceType, ShiftType, PerDiemStatus, WeaponType,
)

logger = logging.getLogger(__name__)

STATES: List[Dict[str, Any]] = [
    {"name": "Acre", "abbreviation": "AC"},
    {"name": "Amazonas", "abbreviation": "AM"},
    {"name": "Bahia", "abbreviation": "BA"},
    {"name": "Distrito Federal", "abbreviation": "DF"},
    {"name": "Minas Gerais", "abbreviation": "MG"},
    {"name": "Pará", "abbreviation": "PA"},
    {"name": "Paraná", "abbreviation": "PR"},
    {"name": "Pernambuco", "abbreviation": "PE"},
    {"name": "Rio de Janeiro", "abbreviation": "RJ"},
    {"name": "Rio Grande do Sul", "abbreviation": "RS"},
    {"name": "Rondônia", "abbreviation": "RO"},
    {"name": "São Paulo", "abbreviation": "SP"},
]

PER_DIEM_STATUSES: List[Dict[str, Any]] = [
    {"name": "PENDENTE", "description": "Awaiting review"},
    {"name": "EM_ANALISE", "description": "Under review"},
    {"name": "APROVADA", "description": "Approved"},
    {"name": "REJEITADA", "description": "Rejected"},
]

ABSENCE_TYPES: List[Dict[str, Any]] = [
    {"name": "Férias", "description": "Annual vacation", "requires_document": False},
    {"name": "Licença Médica", "description": "Medical leave", "requires_document": True},
    {"name": "Licença Maternidade", "description": "Maternity leave", "requires_document": True},
    {"name": "Licença Paternidade", "description": "Paternity leave", "requires_document": True},
    {"name": "Licença Capacitação", "description": "Training leave", "requires_document": True},
    {"name": "Falta Justificada", "description": "Justified absence", "requires_document": True},
]

SHIFT_TYPES: List[Dict[str, Any]] = [
    {"name": "Diurno 12h", "start_time": time(7, 0), "end_time": time(19, 0), "hours": 12},
    {"name": "Noturno 12h", "start_time": time(19, 0), "end_time": time(7, 0), "hours": 12},
    {"name": "Plantão 24h", "start_time": time(7, 0), "end_time": time(7, 0), "hours": 24},
    {"name": "Expediente 8h", "start_time": time(8, 0), "end_time": time(17, 0), "hours": 8},
]

WEAPON_TYPES: List[Dict[str, Any]] = [
    {"name": "Pistola", "caliber": ".40", "category": "Arma curta"},
    {"name": "Revólver", "caliber": ".38", "category": "Arma curta"},
    {"name": "Espingarda", "caliber": "12", "category": "Arma longa"},
    {"name": "Carabina", "caliber": "5.56", "category": "Arma longa"},
]

DOCUMENT_TYPES: List[Dict[str, Any]] = [
    {"name": "CPF", "description": "Cadastro de Pessoas Físicas"},
    {"name": "RG", "description": "Registro Geral"},
    {"name": "CNH", "description": "Carteira Nacional de Habilitação"},
    {"name": "Atestado", "description": "Medical certificate"},
    {"name": "Portaria", "description": "Administrative act"},
]

SEED_TABLES: Sequence[Tuple[Type[Base], List[Dict[str, Any]]]] = (
    (State, STATES),
    (PerDiemStatus, PER_DIEM_STATUSES),
    (AbsenceType, ABSENCE_TYPES),
    (ShiftType, SHIFT_TYPES),
    (WeaponType, WEAPON_TYPES),
    (DocumentType, DOCUMENT_TYPES),
)


async def seed_reference_data(db: AsyncSession) -> Dict[str, int]:
    """Insert missing lookup rows; returns the number inserted per table."""
    inserted: Dict[str, int] = {}
    for model, rows in SEED_TABLES:
        r = await db.execute(select(model.name))
        existing = set(r.scalars().all())
        count = 0
        for row in rows:
            if row["name"] in existing:
                continue
            await crud.create_lookup(db, model, row)
            count += 1
        inserted[model.__tablename__] = count
    total = sum(inserted.values())
    if total:
        logger.info("reference data seeded: %s", inserted)
    else:
        logger.info("reference data already present")
    return inserted
