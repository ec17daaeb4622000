"""
Shared fixtures: in-memory SQLite (StaticPool, one connection shared by every session),
an httpx client bound to the app with get_db / require_user overridden, and a small
set of reference rows.
"""
from datetime import date, time
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from sigep.auth import AuthenticatedUser, require_user
from sigep.database import Base, get_db
from sigep.main import app
from sigep.models import (
    State, Municipality, Position, OrganizationalUnit, AbsenceType, ShiftType, PerDiemStatus, WeaponType,
)
from sigep.services.status_registry import reset_status_registry


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def _fresh_status_registry():
    reset_status_registry()
    yield
    reset_status_registry()


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[require_user] = lambda: AuthenticatedUser(
        id="tester", email="tester@example.gov.br", name="Test User"
    )
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def refs(session_factory):
    """One row per lookup table the write paths reference."""
    async with session_factory() as db:
        state = State(name="Rondônia", abbreviation="RO")
        db.add(state)
        await db.flush()
        municipality = Municipality(name="Porto Velho", state_id=state.id)
        position = Position(name="Agente Penitenciário", abbreviation="AGEPEN", weekly_hours=40)
        unit = OrganizationalUnit(name="Presídio Central", abbreviation="PC")
        absence_type = AbsenceType(name="Férias", requires_document=False)
        shift_type = ShiftType(name="Diurno 12h", start_time=time(7, 0), end_time=time(19, 0), hours=12)
        pending = PerDiemStatus(name="PENDENTE")
        approved = PerDiemStatus(name="APROVADA")
        weapon_type = WeaponType(name="Pistola", caliber=".40", category="Arma curta")
        db.add_all([municipality, position, unit, absence_type, shift_type, pending, approved, weapon_type])
        await db.commit()
        return SimpleNamespace(
            state_id=state.id,
            municipality_id=municipality.id,
            position_id=position.id,
            unit_id=unit.id,
            absence_type_id=absence_type.id,
            shift_type_id=shift_type.id,
            pending_status_id=pending.id,
            approved_status_id=approved.id,
            weapon_type_id=weapon_type.id,
        )


def person_payload(**overrides):
    data = {
        "full_name": "Maria da Silva",
        "national_id": "123.456.789-01",
        "birth_date": date(1985, 3, 14).isoformat(),
        "sex": "F",
        "person_type": "S",
        "postal_code": "76800-000",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_person_payload():
    return person_payload
