"""Tests for QR code binding"""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from tableside.config import settings
from tableside.errors import TableNotFound, TokenExpired, TokenNotFound
from tableside.services import QRCodeBinding, TableStore
from tableside.services.qr import order_url


@pytest.mark.asyncio
async def test_get_or_create_is_stable(test_db, make_table):
    """Repeated lookups return the same token"""
    table = await make_table()
    qr = QRCodeBinding(test_db)

    first = await qr.get_or_create_token(table.id)
    second = await qr.get_or_create_token(table.id)

    assert first.token == second.token
    assert len(first.token) >= 32


@pytest.mark.asyncio
async def test_tokens_are_unique_per_table(test_db, make_table):
    first = await make_table(number="T001")
    second = await make_table(number="T002")
    qr = QRCodeBinding(test_db)

    assert (await qr.get_or_create_token(first.id)).token != (await qr.get_or_create_token(second.id)).token


@pytest.mark.asyncio
async def test_get_or_create_unknown_table(test_db, test_areas):
    with pytest.raises(TableNotFound):
        await QRCodeBinding(test_db).get_or_create_token(uuid4())


@pytest.mark.asyncio
async def test_resolve_counts_scans(test_db, make_table):
    table = await make_table(number="T007")
    qr = QRCodeBinding(test_db)
    token = (await qr.get_or_create_token(table.id)).token

    resolved, binding = await qr.resolve_token(token)
    await qr.resolve_token(token)
    await test_db.commit()

    assert resolved.id == table.id
    assert binding.scan_count == 2
    assert binding.last_scanned_at is not None


@pytest.mark.asyncio
async def test_resolve_unknown_token(test_db, test_areas):
    with pytest.raises(TokenNotFound):
        await QRCodeBinding(test_db).resolve_token("not-a-token")


@pytest.mark.asyncio
async def test_regenerate_invalidates_old_token(test_db, make_table):
    table = await make_table()
    qr = QRCodeBinding(test_db)
    old_token = (await qr.get_or_create_token(table.id)).token

    binding = await qr.regenerate_token(table.id)
    await test_db.commit()

    assert binding.token != old_token
    assert binding.scan_count == 0
    with pytest.raises(TokenNotFound):
        await qr.resolve_token(old_token)
    resolved, _ = await qr.resolve_token(binding.token)
    assert resolved.id == table.id


@pytest.mark.asyncio
async def test_inactive_table_token_expired(test_db, make_table):
    """Tokens of deactivated tables stop granting access"""
    table = await make_table()
    qr = QRCodeBinding(test_db)
    token = (await qr.get_or_create_token(table.id)).token

    await TableStore(test_db).update_table(table.id, {"is_active": False})
    await test_db.commit()

    with pytest.raises(TokenExpired):
        await qr.resolve_token(token)


@pytest.mark.asyncio
async def test_expired_token(test_db, make_table):
    table = await make_table()
    qr = QRCodeBinding(test_db)
    binding = await qr.get_or_create_token(table.id)
    binding.expires_at = datetime.utcnow() - timedelta(minutes=1)
    await test_db.commit()

    with pytest.raises(TokenExpired):
        await qr.resolve_token(binding.token)


@pytest.mark.asyncio
async def test_ttl_sets_expiry(test_db, make_table, monkeypatch):
    monkeypatch.setattr(settings, "qr_token_ttl_days", 30)
    table = await make_table()

    binding = await QRCodeBinding(test_db).regenerate_token(table.id)

    assert binding.expires_at is not None
    assert binding.expires_at - binding.generated_at == timedelta(days=30)


@pytest.mark.asyncio
async def test_order_url(test_db, make_table, monkeypatch):
    monkeypatch.setattr(settings, "frontend_url", "https://menu.example.com/")
    table = await make_table(number="T012")
    binding = await QRCodeBinding(test_db).get_or_create_token(table.id)

    assert order_url(table, binding) == f"https://menu.example.com/order/table/T012?token={binding.token}"
