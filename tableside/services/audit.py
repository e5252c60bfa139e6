"""Audit trail helpers"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tableside.models.audit import AuditLog
from tableside.models.table import Table
from tableside.models.user import StaffUser


def table_snapshot(table: Table) -> Dict[str, Any]:
    """JSON-safe view of a table for before/after audit data"""
    return {
        "number": table.number,
        "capacity": table.capacity,
        "status": table.status.value if table.status else None,
        "area": table.area,
        "location_description": table.location_description,
        "notes": table.notes,
        "is_active": table.is_active,
    }


def record_audit(
    db: AsyncSession,
    actor: Optional[StaffUser],
    action: str,
    resource_type: str,
    resource_id: Any,
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Stage an audit entry in the current unit of work"""
    entry = AuditLog(
        actor_id=actor.id if actor else None,
        actor_name=actor.display_name if actor else "system",
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id),
        data_json={"before": before, "after": after},
    )
    db.add(entry)
    return entry
