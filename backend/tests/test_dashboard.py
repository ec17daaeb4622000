"""
Dashboard counters, the recent-activity feed, and per-diem status resolution by name.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from sigep import crud
from sigep.models import Absence, PerDiemRequest, PerDiemStatus, Person, WeaponItem
from sigep.services import status_registry
from sigep.services.reference_data import seed_reference_data


def _person(n: int, person_type="S", **extra) -> Person:
    return Person(
        full_name=f"Pessoa {n}", national_id=f"{n:011d}", birth_date=date(1990, 1, 1),
        sex="M", person_type=person_type, **extra,
    )


@pytest.mark.asyncio
async def test_stats_count_each_dimension(db, refs):
    staff = _person(1)
    contractor = _person(2, person_type="T")
    deleted = _person(3, is_active=False)
    db.add_all([staff, contractor, deleted])
    await db.flush()
    db.add_all([
        Absence(person_id=staff.id, absence_type_id=refs.absence_type_id, start_date=date(2026, 5, 1)),
        Absence(person_id=staff.id, absence_type_id=refs.absence_type_id,
                start_date=date(2026, 1, 1), end_date=date(2026, 1, 10)),
        PerDiemRequest(person_id=staff.id, status_id=refs.pending_status_id, destination="A", purpose="p",
                       start_date=date(2026, 5, 1), end_date=date(2026, 5, 2)),
        PerDiemRequest(person_id=staff.id, status_id=refs.approved_status_id, destination="B", purpose="p",
                       start_date=date(2026, 5, 1), end_date=date(2026, 5, 2)),
        WeaponItem(serial_number="W1", weapon_type_id=refs.weapon_type_id, situation="EM_USO"),
        WeaponItem(serial_number="W2", weapon_type_id=refs.weapon_type_id),
    ])
    await db.flush()
    stats = await crud.get_dashboard_stats(db, as_of=date(2026, 5, 10))
    assert stats == {
        "active_staff_count": 1,
        "active_absence_count": 1,
        "pending_per_diem_count": 1,
        "weapons_in_use_count": 1,
    }


@pytest.mark.asyncio
async def test_pending_count_follows_status_name_not_id(db, refs):
    """Status ids differ between databases; the pending row is found by its name."""
    renamed = await db.get(PerDiemStatus, refs.pending_status_id)
    renamed.name = "ARQUIVADA"
    await db.flush()
    other = PerDiemStatus(name="PENDENTE")
    db.add(other)
    staff = _person(1)
    db.add(staff)
    await db.flush()
    db.add(PerDiemRequest(person_id=staff.id, status_id=other.id, destination="A", purpose="p",
                          start_date=date(2026, 5, 1), end_date=date(2026, 5, 1)))
    await db.flush()
    registry = await status_registry.load_status_registry(db)
    assert registry["PENDENTE"] == other.id
    stats = await crud.get_dashboard_stats(db)
    assert stats["pending_per_diem_count"] == 1


@pytest.mark.asyncio
async def test_missing_pending_status_counts_zero(db):
    stats = await crud.get_dashboard_stats(db)
    assert stats["pending_per_diem_count"] == 0


@pytest.mark.asyncio
async def test_registry_is_read_only(db, refs):
    registry = await status_registry.load_status_registry(db)
    with pytest.raises(TypeError):
        registry["NOVA"] = 1


@pytest.mark.asyncio
async def test_recent_activities_merge_and_cap(db, refs):
    base = datetime(2026, 5, 1, 8, 0)
    persons = []
    for n in range(1, 5):
        p = _person(n)
        p.created_at = base + timedelta(hours=n)
        persons.append(p)
    db.add_all(persons)
    await db.flush()
    for n, hours in enumerate((10, 0, 20), start=1):
        db.add(PerDiemRequest(
            person_id=persons[0].id, status_id=refs.pending_status_id, destination=f"Destino {n}", purpose="p",
            start_date=date(2026, 5, 1), end_date=date(2026, 5, 1), daily_rate=Decimal("10"),
            created_at=base + timedelta(hours=hours, minutes=30),
        ))
    await db.flush()

    activities = await crud.get_recent_activities(db)
    assert len(activities) == 5
    kinds = [a["kind"] for a in activities]
    assert kinds.count("person_created") == 3
    assert kinds.count("per_diem_created") == 2
    stamps = [a["timestamp"] for a in activities]
    assert stamps == sorted(stamps, reverse=True)
    assert activities[0]["description"] == "New per-diem request to Destino 3"
    assert activities[0]["person_name"] == "Pessoa 1"
    assert "New person registered: Pessoa 4" in [a["description"] for a in activities]
    assert "New person registered: Pessoa 1" not in [a["description"] for a in activities]


@pytest.mark.asyncio
async def test_recent_activities_empty_database(db):
    assert await crud.get_recent_activities(db) == []


@pytest.mark.asyncio
async def test_reference_seed_is_idempotent(db):
    first = await seed_reference_data(db)
    assert first["per_diem_statuses"] == 4
    second = await seed_reference_data(db)
    assert sum(second.values()) == 0
    names = [s.name for s in await crud.get_per_diem_statuses(db)]
    assert sorted(names) == ["APROVADA", "EM_ANALISE", "PENDENTE", "REJEITADA"]


@pytest.mark.asyncio
async def test_http_dashboard(client, refs, make_person_payload):
    await client.post("/api/persons", json=make_person_payload())
    r = await client.get("/api/dashboard/stats")
    assert r.status_code == 200
    assert r.json()["active_staff_count"] == 1
    r = await client.get("/api/dashboard/activities")
    assert r.status_code == 200
    body = r.json()
    assert body[0]["kind"] == "person_created"
    assert body[0]["description"] == "New person registered: Maria da Silva"


@pytest.mark.asyncio
async def test_status_writes_refresh_the_registry(db, refs):
    await status_registry.load_status_registry(db)
    staff = _person(1)
    db.add(staff)
    await db.flush()
    db.add(PerDiemRequest(person_id=staff.id, status_id=refs.pending_status_id, destination="A", purpose="p",
                          start_date=date(2026, 5, 1), end_date=date(2026, 5, 1)))
    await db.flush()
    assert (await crud.get_dashboard_stats(db))["pending_per_diem_count"] == 1

    await crud.delete_lookup(db, PerDiemStatus, refs.pending_status_id)
    assert "PENDENTE" not in status_registry.get_registry()
    assert (await crud.get_dashboard_stats(db))["pending_per_diem_count"] == 0

    await crud.update_lookup(db, PerDiemStatus, refs.approved_status_id, {"name": "EM_ANALISE"})
    created = await crud.create_lookup(db, PerDiemStatus, {"name": "APROVADA"})
    assert status_registry.get_registry()["APROVADA"] == created.id
    assert status_registry.get_registry()["EM_ANALISE"] == refs.approved_status_id
