"""Organizational units: the parent chain must stay acyclic."""
import pytest

from sigep import crud
from sigep.models import OrganizationalUnit
from sigep.schemas import UnitCreate, UnitUpdate


@pytest.mark.asyncio
async def test_reparenting_under_own_descendant_is_rejected(db):
    root = await crud.create_unit(db, UnitCreate(name="SEJUS"))
    child = await crud.create_unit(db, UnitCreate(name="Coordenadoria", parent_unit_id=root.id))
    grandchild = await crud.create_unit(db, UnitCreate(name="Presídio", parent_unit_id=child.id))
    with pytest.raises(crud.UnitHierarchyError):
        await crud.update_unit(db, root.id, UnitUpdate(parent_unit_id=grandchild.id))
    with pytest.raises(crud.UnitHierarchyError):
        await crud.update_unit(db, child.id, UnitUpdate(parent_unit_id=child.id))


@pytest.mark.asyncio
async def test_reparenting_to_sibling_branch_is_allowed(db):
    root = await crud.create_unit(db, UnitCreate(name="SEJUS"))
    a = await crud.create_unit(db, UnitCreate(name="A", parent_unit_id=root.id))
    b = await crud.create_unit(db, UnitCreate(name="B", parent_unit_id=root.id))
    moved = await crud.update_unit(db, b.id, UnitUpdate(parent_unit_id=a.id))
    assert moved.parent_unit_id == a.id
    assert [u.id for u in await crud.get_unit_children(db, a.id)] == [b.id]


@pytest.mark.asyncio
async def test_existing_cycle_is_detected_without_looping(db):
    x = OrganizationalUnit(name="X")
    y = OrganizationalUnit(name="Y")
    db.add_all([x, y])
    await db.flush()
    x.parent_unit_id = y.id
    y.parent_unit_id = x.id
    await db.flush()
    z = await crud.create_unit(db, UnitCreate(name="Z"))
    with pytest.raises(crud.UnitHierarchyError):
        await crud.ensure_acyclic_parent(db, z.id, x.id)


@pytest.mark.asyncio
async def test_http_units(client):
    root = (await client.post("/api/units", json={"name": "SEJUS", "abbreviation": "SEJUS"})).json()
    child = (await client.post("/api/units", json={"name": "Presídio Central", "parent_unit_id": root["id"]})).json()
    r = await client.get(f"/api/units/{root['id']}/children")
    assert [u["id"] for u in r.json()] == [child["id"]]

    r = await client.put(f"/api/units/{root['id']}", json={"parent_unit_id": child["id"]})
    assert r.status_code == 422
    r = await client.post("/api/units", json={"name": "Órfã", "parent_unit_id": 999})
    assert r.status_code == 400

    assert (await client.delete(f"/api/units/{child['id']}")).status_code == 204
    r = await client.get("/api/units")
    assert [u["name"] for u in r.json()] == ["SEJUS"]
