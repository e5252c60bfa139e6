"""QR code API endpoints

Staff fetch or rotate a table's token; the customer-facing ordering flow
resolves tokens without staff credentials.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.database import get_db
from tableside.models.qr import QRBinding
from tableside.models.table import Table
from tableside.models.user import StaffUser, StaffRole
from tableside.schemas.qr import QRCodeResponse, QRResolveResponse
from tableside.services import QRCodeBinding, TableStore, run_in_transaction
from tableside.services.qr import order_url
from tableside.api.auth import get_current_active_user, require_role

router = APIRouter()
logger = structlog.get_logger()


def build_qr_response(table: Table, binding: QRBinding) -> QRCodeResponse:
    return QRCodeResponse(
        table_id=table.id,
        table_number=table.number,
        token=binding.token,
        order_url=order_url(table, binding),
        qr_type=binding.qr_type,
        is_active=binding.is_active,
        expires_at=binding.expires_at,
        scan_count=binding.scan_count,
        last_scanned_at=binding.last_scanned_at,
        generated_at=binding.generated_at,
    )


@router.get("/tables/{table_id}/qr-code", response_model=QRCodeResponse)
async def get_table_qr_code(
    table_id: UUID,
    current_user: StaffUser = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the table's token, issuing one if missing"""
    qr = QRCodeBinding(db)

    async def _get_or_create():
        table = await TableStore(db).get_table(table_id)
        binding = await qr.get_or_create_token(table_id)
        return table, binding

    table, binding = await run_in_transaction(db, _get_or_create, name="get_qr_code")
    return build_qr_response(table, binding)


@router.post("/tables/{table_id}/qr-code/regenerate", response_model=QRCodeResponse)
async def regenerate_table_qr_code(
    table_id: UUID,
    current_user: StaffUser = Depends(require_role(StaffRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Rotate the table's token"""
    qr = QRCodeBinding(db)

    async def _regenerate():
        table = await TableStore(db).get_table(table_id)
        binding = await qr.regenerate_token(table_id, actor=current_user)
        return table, binding

    table, binding = await run_in_transaction(db, _regenerate, name="regenerate_qr_code")
    return build_qr_response(table, binding)


@router.get("/qr/{token}", response_model=QRResolveResponse)
async def resolve_qr_token(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """Resolve a customer token to its table"""
    qr = QRCodeBinding(db)
    table, binding = await run_in_transaction(
        db,
        lambda: qr.resolve_token(token),
        name="resolve_qr_token",
    )
    logger.info("QR token resolved", table_id=str(table.id), scan_count=binding.scan_count)

    return QRResolveResponse(
        table_id=table.id,
        table_number=table.number,
        area=table.area,
        capacity=table.capacity,
        status=table.status,
    )
