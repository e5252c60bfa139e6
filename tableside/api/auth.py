"""Staff identity adapter

Staff sign in through the restaurant's identity service, which issues
bearer JWTs signed with the shared ``jwt_secret_key``. This module only
turns such a token into the acting ``StaffUser`` and gates floor actions by
role: ``waiter`` and up may seat, release and feed session updates, while
table, area and QR administration needs ``admin``.
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.config import settings
from tableside.database import get_db
from tableside.models.user import StaffUser, StaffRole
from tableside.schemas.auth import StaffResponse

router = APIRouter()
logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user: StaffUser, expires_in: Optional[timedelta] = None) -> str:
    """Token in the identity service's format, for seeding and tests"""
    expire = datetime.utcnow() + (expires_in or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {
        "sub": str(user.id),
        "role": user.role.value,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_staff_id(token: str) -> Optional[UUID]:
    """Staff id carried by a valid access token, else None"""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("type") != "access":
        return None
    try:
        return UUID(payload.get("sub"))
    except (TypeError, ValueError):
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> StaffUser:
    """Acting staff member for this request"""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    staff_id = decode_staff_id(credentials.credentials)
    if staff_id is None:
        raise unauthorized

    result = await db.execute(select(StaffUser).where(StaffUser.id == staff_id))
    user = result.scalar_one_or_none()
    if user is None:
        logger.info("Token for unknown staff member", staff_id=str(staff_id))
        raise unauthorized
    return user


async def get_current_active_user(
    current_user: StaffUser = Depends(get_current_user),
) -> StaffUser:
    """Reject staff whose account was switched off after the token was issued"""
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff account is disabled")
    return current_user


def require_role(required_role: StaffRole):
    """Dependency factory gating an action to ``required_role`` and above"""
    async def role_checker(current_user: StaffUser = Depends(get_current_active_user)) -> StaffUser:
        if not current_user.has_permission(required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires {required_role.value} role",
            )
        return current_user
    return role_checker


@router.get("/me", response_model=StaffResponse)
async def get_current_staff(
    current_user: StaffUser = Depends(get_current_active_user),
):
    """Who the presented token acts as"""
    return current_user
