"""Weapons: serial uniqueness, situation transitions, check-out / return cycle."""
from datetime import date, datetime

import pytest

from sigep import crud
from sigep.models import Person, WeaponItem
from sigep.schemas import WeaponCheckoutCreate, WeaponCreate, WeaponUpdate


@pytest.mark.asyncio
async def test_duplicate_serial_conflicts(db, refs):
    await crud.create_weapon(db, WeaponCreate(serial_number="SXA12345", weapon_type_id=refs.weapon_type_id))
    await db.commit()
    with pytest.raises(crud.ConflictError):
        await crud.create_weapon(db, WeaponCreate(serial_number="SXA12345", weapon_type_id=refs.weapon_type_id))


@pytest.mark.asyncio
async def test_decommissioned_weapon_is_terminal(db, refs):
    weapon = await crud.create_weapon(db, WeaponCreate(serial_number="B-1", weapon_type_id=refs.weapon_type_id))
    await crud.update_weapon(db, weapon.id, WeaponUpdate(situation="BAIXADO"))
    with pytest.raises(crud.InvalidTransitionError):
        await crud.update_weapon(db, weapon.id, WeaponUpdate(situation="DISPONIVEL"))


async def _setup(client, refs, make_person_payload, serial="TAURUS-001"):
    person = (await client.post("/api/persons", json=make_person_payload())).json()
    r = await client.post("/api/weapons", json={
        "serial_number": serial,
        "weapon_type_id": refs.weapon_type_id,
        "brand": "Taurus",
        "model": "PT 100",
        "manufacture_year": 2012,
    })
    assert r.status_code == 201
    return person, r.json()


@pytest.mark.asyncio
async def test_checkout_and_return_cycle(client, refs, make_person_payload, session_factory):
    person, weapon = await _setup(client, refs, make_person_payload)
    assert weapon["situation"] == "DISPONIVEL"

    r = await client.post(f"/api/weapons/{weapon['id']}/checkout", json={
        "person_id": person["id"],
        "checked_out_at": "2026-07-01T07:00:00",
        "purpose": "Plantão",
    })
    assert r.status_code == 201
    checkout = r.json()
    assert checkout["returned_at"] is None
    assert (await client.get(f"/api/weapons/{weapon['id']}")).json()["situation"] == "EM_USO"

    # a weapon in use cannot be checked out again
    r = await client.post(f"/api/weapons/{weapon['id']}/checkout", json={"person_id": person["id"]})
    assert r.status_code == 422

    r = await client.get("/api/weapon-checkouts", params={"open_only": "true"})
    assert [c["id"] for c in r.json()] == [checkout["id"]]

    r = await client.post(f"/api/weapon-checkouts/{checkout['id']}/return", json={"returned_at": "2026-07-01T19:00:00"})
    assert r.status_code == 200
    assert r.json()["returned_at"] == "2026-07-01T19:00:00"
    async with session_factory() as db:
        row = await db.get(WeaponItem, weapon["id"])
        assert row.situation == "DISPONIVEL"

    # returning twice is rejected
    r = await client.post(f"/api/weapon-checkouts/{checkout['id']}/return")
    assert r.status_code == 422
    r = await client.get("/api/weapon-checkouts", params={"open_only": "true"})
    assert r.json() == []


@pytest.mark.asyncio
async def test_return_before_checkout_is_rejected(client, refs, make_person_payload):
    person, weapon = await _setup(client, refs, make_person_payload, serial="GLOCK-9")
    checkout = (await client.post(f"/api/weapons/{weapon['id']}/checkout", json={
        "person_id": person["id"], "checked_out_at": "2026-07-01T07:00:00",
    })).json()
    r = await client.post(f"/api/weapon-checkouts/{checkout['id']}/return", json={"returned_at": "2026-06-30T07:00:00"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_aware_timestamps_are_stored_as_utc(db, refs):
    weapon = await crud.create_weapon(db, WeaponCreate(serial_number="TZ-1", weapon_type_id=refs.weapon_type_id))
    person = Person(full_name="Tz", national_id="12312312312", birth_date=date(1990, 1, 1), sex="M", person_type="S")
    db.add(person)
    await db.flush()
    checkout = await crud.checkout_weapon(db, weapon.id, WeaponCheckoutCreate(
        person_id=person.id, checked_out_at=datetime.fromisoformat("2026-07-01T07:00:00-04:00")))
    assert checkout.checked_out_at == datetime(2026, 7, 1, 11, 0)


@pytest.mark.asyncio
async def test_http_duplicate_serial_and_filters(client, refs, make_person_payload):
    await _setup(client, refs, make_person_payload, serial="DUP-1")
    r = await client.post("/api/weapons", json={"serial_number": "DUP-1", "weapon_type_id": refs.weapon_type_id})
    assert r.status_code == 409
    r = await client.get("/api/weapons", params={"situation": "DISPONIVEL"})
    assert [w["serial_number"] for w in r.json()] == ["DUP-1"]
    r = await client.get("/api/weapons", params={"situation": "EM_USO"})
    assert r.json() == []
