"""Shift schedules: defaults from the shift type, filters, status transitions over HTTP."""
from datetime import date, time

import pytest

from sigep import crud
from sigep.models import Person
from sigep.schemas import ShiftScheduleCreate, ShiftScheduleUpdate


async def _person(db) -> Person:
    person = Person(full_name="Carlos Lima", national_id="10120230344", birth_date=date(1988, 8, 8), sex="M", person_type="S")
    db.add(person)
    await db.flush()
    return person


@pytest.mark.asyncio
async def test_times_default_to_shift_type_hours(db, refs):
    person = await _person(db)
    schedule = await crud.create_shift_schedule(db, ShiftScheduleCreate(
        person_id=person.id, shift_type_id=refs.shift_type_id, unit_id=refs.unit_id, shift_date=date(2026, 6, 1)))
    assert schedule.start_time == time(7, 0)
    assert schedule.end_time == time(19, 0)
    assert schedule.status == "AGENDADA"


@pytest.mark.asyncio
async def test_night_shift_may_end_before_it_starts(db, refs):
    person = await _person(db)
    schedule = await crud.create_shift_schedule(db, ShiftScheduleCreate(
        person_id=person.id, shift_type_id=refs.shift_type_id, unit_id=refs.unit_id,
        shift_date=date(2026, 6, 1), start_time=time(19, 0), end_time=time(7, 0)))
    assert schedule.end_time < schedule.start_time


@pytest.mark.asyncio
async def test_filters_by_date_range_and_status(db, refs):
    person = await _person(db)
    for day in (1, 2, 3):
        await crud.create_shift_schedule(db, ShiftScheduleCreate(
            person_id=person.id, shift_type_id=refs.shift_type_id, unit_id=refs.unit_id,
            shift_date=date(2026, 6, day)))
    in_range = await crud.get_shift_schedules(db, date_from=date(2026, 6, 2), date_to=date(2026, 6, 3))
    assert [s.shift_date for s in in_range] == [date(2026, 6, 3), date(2026, 6, 2)]
    one_day = await crud.get_shift_schedules(db, shift_date=date(2026, 6, 1))
    assert len(one_day) == 1
    await crud.update_shift_schedule(db, one_day[0].id, ShiftScheduleUpdate(status="PRESENTE"))
    present = await crud.get_shift_schedules(db, status="presente")
    assert [s.id for s in present] == [one_day[0].id]


@pytest.mark.asyncio
async def test_terminal_status_cannot_change(db, refs):
    person = await _person(db)
    schedule = await crud.create_shift_schedule(db, ShiftScheduleCreate(
        person_id=person.id, shift_type_id=refs.shift_type_id, unit_id=refs.unit_id, shift_date=date(2026, 6, 1)))
    await crud.update_shift_schedule(db, schedule.id, ShiftScheduleUpdate(status="JUSTIFICADA"))
    with pytest.raises(crud.InvalidTransitionError):
        await crud.update_shift_schedule(db, schedule.id, ShiftScheduleUpdate(status="FALTOU"))


@pytest.mark.asyncio
async def test_http_status_flow(client, refs, make_person_payload):
    person = (await client.post("/api/persons", json=make_person_payload())).json()
    r = await client.post("/api/shift-schedules", json={
        "person_id": person["id"],
        "shift_type_id": refs.shift_type_id,
        "unit_id": refs.unit_id,
        "shift_date": "2026-06-01",
    })
    assert r.status_code == 201
    schedule = r.json()
    assert schedule["start_time"] == "07:00:00"

    r = await client.get("/api/shift-schedules", params={"date": "2026-06-01"})
    assert [s["id"] for s in r.json()] == [schedule["id"]]

    r = await client.put(f"/api/shift-schedules/{schedule['id']}", json={"status": "FALTOU"})
    assert r.status_code == 200
    r = await client.put(f"/api/shift-schedules/{schedule['id']}", json={"status": "JUSTIFICADA"})
    assert r.status_code == 200
    r = await client.put(f"/api/shift-schedules/{schedule['id']}", json={"status": "PRESENTE"})
    assert r.status_code == 422
    r = await client.put(f"/api/shift-schedules/{schedule['id']}", json={"status": "CANCELADA"})
    assert r.status_code == 400
    assert (await client.put("/api/shift-schedules/999", json={"notes": "x"})).status_code == 404
