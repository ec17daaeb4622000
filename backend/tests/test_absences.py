"""
Absences: "currently active" is derived from start/end dates against a reference day.
"""
from datetime import date

import pytest

from sigep import crud
from sigep.models import Absence, Person, is_absence_active
from sigep.schemas import AbsenceCreate, AbsenceUpdate

AS_OF = date(2026, 5, 10)


def test_is_absence_active_boundaries():
    open_ended = Absence(start_date=date(2026, 5, 1), end_date=None)
    assert is_absence_active(open_ended, AS_OF)
    ends_today = Absence(start_date=date(2026, 5, 1), end_date=AS_OF)
    assert is_absence_active(ends_today, AS_OF)
    starts_today = Absence(start_date=AS_OF, end_date=date(2026, 5, 20))
    assert is_absence_active(starts_today, AS_OF)
    future = Absence(start_date=date(2026, 5, 11), end_date=None)
    assert not is_absence_active(future, AS_OF)
    past = Absence(start_date=date(2026, 4, 1), end_date=date(2026, 5, 9))
    assert not is_absence_active(past, AS_OF)


def test_absence_create_rejects_end_before_start():
    with pytest.raises(ValueError):
        AbsenceCreate(person_id=1, absence_type_id=1, start_date=date(2026, 5, 10), end_date=date(2026, 5, 1))


async def _person(db) -> Person:
    person = Person(full_name="Ana Costa", national_id="55566677788", birth_date=date(1990, 1, 1), sex="F", person_type="S")
    db.add(person)
    await db.flush()
    return person


@pytest.mark.asyncio
async def test_active_filter_splits_absences(db, refs):
    person = await _person(db)
    ongoing = await crud.create_absence(db, AbsenceCreate(
        person_id=person.id, absence_type_id=refs.absence_type_id, start_date=date(2026, 5, 1)))
    finished = await crud.create_absence(db, AbsenceCreate(
        person_id=person.id, absence_type_id=refs.absence_type_id,
        start_date=date(2026, 3, 1), end_date=date(2026, 3, 30)))
    upcoming = await crud.create_absence(db, AbsenceCreate(
        person_id=person.id, absence_type_id=refs.absence_type_id, start_date=date(2026, 6, 1)))
    await db.commit()

    active = await crud.get_absences(db, active=True, as_of=AS_OF)
    assert [a.id for a in active] == [ongoing.id]
    inactive = await crud.get_absences(db, active=False, as_of=AS_OF)
    assert {a.id for a in inactive} == {finished.id, upcoming.id}
    assert len(await crud.get_absences(db, as_of=AS_OF)) == 3


@pytest.mark.asyncio
async def test_update_end_date_before_stored_start_is_rejected(db, refs):
    person = await _person(db)
    absence = await crud.create_absence(db, AbsenceCreate(
        person_id=person.id, absence_type_id=refs.absence_type_id, start_date=date(2026, 5, 1)))
    with pytest.raises(crud.InvalidDataError):
        await crud.update_absence(db, absence.id, AbsenceUpdate(end_date=date(2026, 4, 1)))


@pytest.mark.asyncio
async def test_unknown_absence_type_is_a_reference_error(db):
    person = await _person(db)
    with pytest.raises(crud.ReferenceNotFoundError):
        await crud.create_absence(db, AbsenceCreate(person_id=person.id, absence_type_id=999, start_date=AS_OF))


@pytest.mark.asyncio
async def test_http_absence_lifecycle(client, refs, make_person_payload):
    person = (await client.post("/api/persons", json=make_person_payload())).json()
    r = await client.post("/api/absences", json={
        "person_id": person["id"],
        "absence_type_id": refs.absence_type_id,
        "start_date": "2026-05-01",
        "reason": "Férias regulamentares",
    })
    assert r.status_code == 201
    absence = r.json()
    assert absence["end_date"] is None

    r = await client.get("/api/absences", params={"active": "true", "as_of": "2026-05-10"})
    body = r.json()
    assert [a["id"] for a in body] == [absence["id"]]
    assert body[0]["currently_active"] is True
    r = await client.get("/api/absences", params={"active": "true", "as_of": "2026-04-10"})
    assert r.json() == []

    r = await client.put(f"/api/absences/{absence['id']}", json={"end_date": "2026-04-01"})
    assert r.status_code == 400
    r = await client.put(f"/api/absences/{absence['id']}", json={"end_date": "2026-05-30"})
    assert r.status_code == 200
    assert r.json()["end_date"] == "2026-05-30"

    assert (await client.delete(f"/api/absences/{absence['id']}")).status_code == 204
    assert (await client.get(f"/api/absences/{absence['id']}")).status_code == 404
