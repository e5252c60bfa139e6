"""Tests for the table store"""

from uuid import uuid4

import pytest

from tableside.errors import (
    DuplicateTableNumber,
    InvalidCapacity,
    InvalidTableNumber,
    TableInUse,
    TableNotFound,
    TokenNotFound,
    UnknownArea,
)
from tableside.models.table import TableStatus
from tableside.services import QRCodeBinding, StatusTransitionEngine, TableStore, UsageHistoryLedger
from tableside.services.tables import auto_number, validate_capacity


def test_auto_number_format():
    assert auto_number(1) == "T001"
    assert auto_number(42) == "T042"
    assert auto_number(999) == "T999"


@pytest.mark.parametrize("capacity", [0, -1, True, "4", 2.5, None])
def test_invalid_capacity_values(capacity):
    with pytest.raises(InvalidCapacity):
        validate_capacity(capacity)


@pytest.mark.asyncio
async def test_create_and_get_table(test_db, make_table):
    """Created tables start available and read back unchanged"""
    table = await make_table(number="T010", capacity=6, area="vip", location_description="By the window")

    fetched = await TableStore(test_db).get_table(table.id)
    assert fetched.number == "T010"
    assert fetched.capacity == 6
    assert fetched.area == "vip"
    assert fetched.location_description == "By the window"
    assert fetched.status == TableStatus.AVAILABLE
    assert fetched.is_active is True
    assert fetched.version == 1


@pytest.mark.asyncio
async def test_create_issues_qr_token(test_db, make_table):
    table = await make_table()
    binding = await QRCodeBinding(test_db).find_binding(table.id)
    assert binding is not None
    assert binding.token


@pytest.mark.asyncio
async def test_duplicate_number(test_db, make_table):
    await make_table(number="T001")

    with pytest.raises(DuplicateTableNumber):
        await TableStore(test_db).create_table(capacity=2, area="indoor", number="T001")


@pytest.mark.asyncio
async def test_duplicate_number_includes_inactive(test_db, make_table):
    """Deactivated tables keep their number reserved"""
    table = await make_table(number="T001")
    await TableStore(test_db).update_table(table.id, {"is_active": False})
    await test_db.commit()

    with pytest.raises(DuplicateTableNumber):
        await TableStore(test_db).create_table(capacity=2, area="indoor", number="T001")


@pytest.mark.asyncio
async def test_create_rejects_unknown_area(test_db, test_areas):
    with pytest.raises(UnknownArea):
        await TableStore(test_db).create_table(capacity=4, area="rooftop", number="T001")


@pytest.mark.asyncio
async def test_create_rejects_bad_capacity(test_db, test_areas):
    with pytest.raises(InvalidCapacity):
        await TableStore(test_db).create_table(capacity=0, area="indoor", number="T001")


@pytest.mark.asyncio
async def test_auto_numbering_fills_gaps(test_db, make_table):
    """Omitted numbers take the first free T-label"""
    await make_table(number="T001")
    await make_table(number="T003")

    store = TableStore(test_db)
    second = await store.create_table(capacity=2, area="indoor")
    fourth = await store.create_table(capacity=2, area="indoor")
    await test_db.commit()

    assert second.number == "T002"
    assert fourth.number == "T004"


@pytest.mark.asyncio
async def test_update_table_fields(test_db, make_table):
    table = await make_table()
    table_id = table.id

    updated = await TableStore(test_db).update_table(
        table_id,
        {"capacity": 8, "notes": "Needs high chair", "status": "occupied", "number": None},
    )
    await test_db.commit()

    assert updated.capacity == 8
    assert updated.notes == "Needs high chair"
    # Status only changes through the transition engine
    assert updated.status == TableStatus.AVAILABLE
    assert updated.number == "T001"


@pytest.mark.asyncio
async def test_update_rejects_taken_number(test_db, make_table):
    await make_table(number="T001")
    second = await make_table(number="T002")

    with pytest.raises(DuplicateTableNumber):
        await TableStore(test_db).update_table(second.id, {"number": "T001"})


@pytest.mark.asyncio
async def test_update_rejects_blank_number(test_db, make_table):
    """A table keeps its number when the new one is only whitespace"""
    table = await make_table(number="T001")
    store = TableStore(test_db)

    with pytest.raises(InvalidTableNumber):
        await store.update_table(table.id, {"number": "   "})

    assert (await store.get_table(table.id)).number == "T001"


@pytest.mark.asyncio
async def test_update_rejects_unknown_area(test_db, make_table):
    table = await make_table()

    with pytest.raises(UnknownArea):
        await TableStore(test_db).update_table(table.id, {"area": "rooftop"})


@pytest.mark.asyncio
async def test_cannot_deactivate_occupied_table(test_db, make_table):
    table = await make_table()
    await StatusTransitionEngine(test_db).request_transition(table.id, "occupied")
    await test_db.commit()

    with pytest.raises(TableInUse):
        await TableStore(test_db).update_table(table.id, {"is_active": False})


@pytest.mark.asyncio
async def test_delete_table(test_db, make_table):
    """Deletion removes the table, its history and its token"""
    table = await make_table()
    table_id = table.id
    token = (await QRCodeBinding(test_db).find_binding(table_id)).token

    engine = StatusTransitionEngine(test_db)
    await engine.request_transition(table_id, "occupied", guest_count=2)
    await engine.request_transition(table_id, "cleaning")
    await test_db.commit()

    store = TableStore(test_db)
    await store.delete_table(table_id)
    await test_db.commit()

    with pytest.raises(TableNotFound):
        await store.get_table(table_id)
    with pytest.raises(TokenNotFound):
        await QRCodeBinding(test_db).resolve_token(token)
    _, total = await UsageHistoryLedger(test_db).list_history(table_id)
    assert total == 0


@pytest.mark.asyncio
async def test_delete_occupied_table_is_refused(test_db, make_table):
    table = await make_table()
    await StatusTransitionEngine(test_db).request_transition(table.id, "occupied")
    await test_db.commit()

    with pytest.raises(TableInUse):
        await TableStore(test_db).delete_table(table.id)


@pytest.mark.asyncio
async def test_delete_unknown_table(test_db, test_areas):
    with pytest.raises(TableNotFound):
        await TableStore(test_db).delete_table(uuid4())


@pytest.mark.asyncio
async def test_list_tables_filters(test_db, make_table):
    await make_table(number="T001", capacity=2, area="indoor")
    await make_table(number="T002", capacity=4, area="outdoor", location_description="Patio corner")
    third = await make_table(number="T003", capacity=8, area="vip")
    await StatusTransitionEngine(test_db).request_transition(third.id, "reserved")
    await test_db.commit()

    store = TableStore(test_db)

    tables, total = await store.list_tables()
    assert total == 3
    assert [t.number for t in tables] == ["T001", "T002", "T003"]

    tables, total = await store.list_tables(status=TableStatus.RESERVED)
    assert [t.number for t in tables] == ["T003"]

    tables, total = await store.list_tables(area="outdoor")
    assert [t.number for t in tables] == ["T002"]

    tables, total = await store.list_tables(capacity_min=3, capacity_max=6)
    assert [t.number for t in tables] == ["T002"]

    tables, total = await store.list_tables(search="patio")
    assert [t.number for t in tables] == ["T002"]

    tables, total = await store.list_tables(page=2, page_size=2)
    assert total == 3
    assert [t.number for t in tables] == ["T003"]


@pytest.mark.asyncio
async def test_stats(test_db, make_table):
    first = await make_table(number="T001", capacity=2, area="indoor")
    second = await make_table(number="T002", capacity=4, area="indoor")
    await make_table(number="T003", capacity=4, area="vip")
    engine = StatusTransitionEngine(test_db)
    await engine.request_transition(first.id, "occupied")
    await engine.request_transition(second.id, "reserved")
    await test_db.commit()

    stats = await TableStore(test_db).stats()

    assert stats["total"] == 3
    assert stats["counts"][TableStatus.OCCUPIED] == 1
    assert stats["counts"][TableStatus.RESERVED] == 1
    assert stats["counts"][TableStatus.AVAILABLE] == 1
    assert stats["counts"][TableStatus.CLEANING] == 0
    assert stats["by_area"] == [
        {"area": "indoor", "label": "Indoor", "count": 2},
        {"area": "vip", "label": "VIP", "count": 1},
    ]
    assert stats["by_capacity"] == [
        {"capacity": 2, "count": 1},
        {"capacity": 4, "count": 2},
    ]
    assert stats["utilization_rate"] == 66.7
