"""
Per-diem status ids resolved by name.

Status rows are editable reference data, so ids differ between databases.
load_status_registry() runs at startup and again after any status write made through
crud, freezing name -> id; names missing from it fall back to a query.
"""
import logging
from types import MappingProxyType
from typing import Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.models import PerDiemStatus

logger = logging.getLogger(__name__)

_registry: Mapping[str, int] = MappingProxyType({})


def get_registry() -> Mapping[str, int]:
    return _registry


def reset_status_registry() -> None:
    global _registry
    _registry = MappingProxyType({})


async def load_status_registry(db: AsyncSession) -> Mapping[str, int]:
    global _registry
    r = await db.execute(
        select(PerDiemStatus.name, PerDiemStatus.id).where(PerDiemStatus.is_active.is_(True))
    )
    _registry = MappingProxyType({name: sid for name, sid in r.all()})
    logger.info("per-diem status registry loaded: %s", ", ".join(sorted(_registry)) or "(empty)")
    return _registry


async def resolve_status_id(db: AsyncSession, name: str) -> Optional[int]:
    if name in _registry:
        return _registry[name]
    r = await db.execute(
        select(PerDiemStatus.id).where(PerDiemStatus.name == name, PerDiemStatus.is_active.is_(True))
    )
    return r.scalar_one_or_none()
