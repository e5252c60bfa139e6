"""QR code binding: opaque customer access tokens per table"""

import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple
from uuid import UUID
from urllib.parse import quote

from sqlalchemy import select, delete, update
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.config import settings
from tableside.errors import TableNotFound, TokenNotFound, TokenExpired
from tableside.models.qr import QRBinding
from tableside.models.table import Table
from tableside.models.user import StaffUser
from tableside.services.audit import record_audit

logger = structlog.get_logger()


def generate_token() -> str:
    return secrets.token_urlsafe(settings.qr_token_bytes)


def token_expiry(now: datetime) -> Optional[datetime]:
    if settings.qr_token_ttl_days <= 0:
        return None
    return now + timedelta(days=settings.qr_token_ttl_days)


def order_url(table: Table, binding: QRBinding) -> str:
    """Customer-facing ordering link encoded into the QR image"""
    base = settings.frontend_url.rstrip("/")
    return f"{base}/order/table/{quote(table.number)}?token={binding.token}"


class QRCodeBinding:
    """Maps tables to customer-facing tokens"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_table(self, table_id: UUID) -> Table:
        result = await self.db.execute(select(Table).where(Table.id == table_id))
        table = result.scalar_one_or_none()
        if not table:
            raise TableNotFound(table_id=str(table_id))
        return table

    async def find_binding(self, table_id: UUID) -> Optional[QRBinding]:
        result = await self.db.execute(select(QRBinding).where(QRBinding.table_id == table_id))
        return result.scalar_one_or_none()

    async def get_or_create_token(self, table_id: UUID) -> QRBinding:
        """Existing binding for the table, or a freshly issued one"""
        await self._get_table(table_id)

        binding = await self.find_binding(table_id)
        if binding:
            return binding

        now = datetime.utcnow()
        binding = QRBinding(
            table_id=table_id,
            token=generate_token(),
            qr_type="table_ordering",
            is_active=True,
            expires_at=token_expiry(now),
            scan_count=0,
            generated_at=now,
        )
        self.db.add(binding)
        await self.db.flush()
        logger.info("QR token issued", table_id=str(table_id))
        return binding

    async def regenerate_token(self, table_id: UUID, actor: Optional[StaffUser] = None) -> QRBinding:
        """Rotate the token; the previous one stops resolving"""
        binding = await self.get_or_create_token(table_id)

        now = datetime.utcnow()
        binding.token = generate_token()
        binding.is_active = True
        binding.expires_at = token_expiry(now)
        binding.scan_count = 0
        binding.last_scanned_at = None
        binding.generated_at = now
        await self.db.flush()

        record_audit(self.db, actor, "regenerate_qr", "qr_code", table_id)
        logger.info("QR token regenerated", table_id=str(table_id))
        return binding

    async def resolve_token(self, token: str) -> Tuple[Table, QRBinding]:
        """Table a token grants access to; counts the scan"""
        result = await self.db.execute(select(QRBinding).where(QRBinding.token == token))
        binding = result.scalar_one_or_none()
        if not binding:
            raise TokenNotFound()

        result = await self.db.execute(select(Table).where(Table.id == binding.table_id))
        table = result.scalar_one_or_none()
        if not table:
            raise TokenNotFound()

        now = datetime.utcnow()
        if not binding.is_active or not table.is_active:
            raise TokenExpired("Table is not accepting customer access", table_id=str(table.id))
        if binding.expires_at is not None and binding.expires_at <= now:
            raise TokenExpired(table_id=str(table.id))

        # Increment in the database so concurrent scans are all counted
        await self.db.execute(
            update(QRBinding)
            .where(QRBinding.id == binding.id)
            .values(scan_count=QRBinding.scan_count + 1, last_scanned_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.db.refresh(binding, ["scan_count", "last_scanned_at"])
        return table, binding

    async def revoke_token(self, table_id: UUID) -> bool:
        """Remove the binding; True when one existed"""
        result = await self.db.execute(
            delete(QRBinding).where(QRBinding.table_id == table_id)
        )
        revoked = bool(result.rowcount)
        if revoked:
            logger.info("QR token revoked", table_id=str(table_id))
        return revoked
