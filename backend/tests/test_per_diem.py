"""Per-diem requests: computed totals, inclusive date-window filter."""
from datetime import date
from decimal import Decimal

import pytest

from sigep import crud
from sigep.crud import compute_per_diem_total
from sigep.models import Person
from sigep.schemas import PerDiemRequestCreate, PerDiemRequestUpdate


def test_total_counts_both_ends_and_adds_transport():
    total = compute_per_diem_total(date(2026, 3, 10), date(2026, 3, 12), Decimal("177.50"), Decimal("90"))
    assert total == Decimal("622.50")


def test_total_single_day_without_transport():
    assert compute_per_diem_total(date(2026, 3, 10), date(2026, 3, 10), Decimal("100")) == Decimal("100.00")


def test_total_needs_daily_rate():
    assert compute_per_diem_total(date(2026, 3, 10), date(2026, 3, 12), None, Decimal("50")) is None


async def _person(db) -> Person:
    person = Person(full_name="Beatriz Rocha", national_id="99988877766", birth_date=date(1992, 2, 2), sex="F", person_type="S")
    db.add(person)
    await db.flush()
    return person


def _request(person_id, status_id, start, end, **extra) -> PerDiemRequestCreate:
    return PerDiemRequestCreate(
        person_id=person_id, status_id=status_id, destination="Ji-Paraná", purpose="Escolta",
        start_date=start, end_date=end, **extra,
    )


@pytest.mark.asyncio
async def test_create_computes_total_unless_given(db, refs):
    person = await _person(db)
    computed = await crud.create_per_diem_request(db, _request(
        person.id, refs.pending_status_id, date(2026, 3, 10), date(2026, 3, 11), daily_rate=Decimal("200")))
    assert computed.total_amount == Decimal("400.00")
    explicit = await crud.create_per_diem_request(db, _request(
        person.id, refs.pending_status_id, date(2026, 3, 10), date(2026, 3, 11),
        daily_rate=Decimal("200"), total_amount=Decimal("350")))
    assert explicit.total_amount == Decimal("350")


@pytest.mark.asyncio
async def test_update_recomputes_total_when_dates_change(db, refs):
    person = await _person(db)
    req = await crud.create_per_diem_request(db, _request(
        person.id, refs.pending_status_id, date(2026, 3, 10), date(2026, 3, 10), daily_rate=Decimal("150")))
    updated = await crud.update_per_diem_request(db, req.id, PerDiemRequestUpdate(end_date=date(2026, 3, 12)))
    assert updated.total_amount == Decimal("450.00")
    with pytest.raises(crud.InvalidDataError):
        await crud.update_per_diem_request(db, req.id, PerDiemRequestUpdate(end_date=date(2026, 3, 1)))


@pytest.mark.asyncio
async def test_window_filter_is_inclusive(db, refs):
    person = await _person(db)
    inside = await crud.create_per_diem_request(db, _request(
        person.id, refs.pending_status_id, date(2026, 3, 1), date(2026, 3, 31)))
    await crud.create_per_diem_request(db, _request(
        person.id, refs.pending_status_id, date(2026, 2, 28), date(2026, 3, 2)))
    await crud.create_per_diem_request(db, _request(
        person.id, refs.approved_status_id, date(2026, 3, 30), date(2026, 4, 1)))
    found = await crud.get_per_diem_requests(db, start_from=date(2026, 3, 1), end_until=date(2026, 3, 31))
    assert [r.id for r in found] == [inside.id]
    approved = await crud.get_per_diem_requests(db, status_id=refs.approved_status_id)
    assert len(approved) == 1


@pytest.mark.asyncio
async def test_http_per_diem(client, refs, make_person_payload):
    person = (await client.post("/api/persons", json=make_person_payload())).json()
    r = await client.post("/api/per-diem-requests", json={
        "person_id": person["id"],
        "status_id": refs.pending_status_id,
        "destination": "Vilhena",
        "purpose": "Transferência de custodiado",
        "start_date": "2026-03-10",
        "end_date": "2026-03-12",
        "daily_rate": "120.00",
        "transport_amount": "80.00",
    })
    assert r.status_code == 201
    body = r.json()
    assert Decimal(body["total_amount"]) == Decimal("440.00")

    r = await client.post("/api/per-diem-requests", json={
        "person_id": person["id"],
        "status_id": refs.pending_status_id,
        "destination": "Vilhena",
        "purpose": "x",
        "start_date": "2026-03-12",
        "end_date": "2026-03-10",
    })
    assert r.status_code == 400

    r = await client.put(f"/api/per-diem-requests/{body['id']}", json={"status_id": refs.approved_status_id})
    assert r.status_code == 200
    assert r.json()["status_id"] == refs.approved_status_id
    r = await client.put(f"/api/per-diem-requests/{body['id']}", json={"status_id": 999})
    assert r.status_code == 400
