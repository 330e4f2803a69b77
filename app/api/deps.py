# app/api/deps.py

from typing import AsyncGenerator
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jwt import InvalidTokenError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_token
from app.core.database import get_session
from app.realtime.server import RealtimeServer
from app.services.auth_service import get_user_by_id
from app.models.user import User, UserRole


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


# ------------------------------------------------------------
# Realtime server (created in app.main)
# ------------------------------------------------------------
def get_realtime(request: Request) -> RealtimeServer:
    return request.app.state.realtime


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


# ------------------------------------------------------------
# Get current logged-in user from JWT
# ------------------------------------------------------------
async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User:

    if credentials is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Access token required")

    try:
        payload = decode_token(credentials.credentials)
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid or expired token")

    user_id = payload.get("id")
    if not user_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token payload")

    user = await get_user_by_id(session, user_id)

    if not user or not user.is_active:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "User not found")

    return user


# ------------------------------------------------------------
# Role-based access control
# ------------------------------------------------------------
def role_required(*allowed_roles: UserRole):
    """
    Enforces that the current user has one of the allowed roles.
    """

    def normalize_role(role):
        if isinstance(role, UserRole):
            return role.value.strip().lower()
        return str(role).strip().lower()

    normalized_allowed = set(normalize_role(r) for r in allowed_roles)

    async def checker(current_user: User = Depends(get_current_user)):

        if normalize_role(current_user.role) not in normalized_allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role '{normalize_role(current_user.role)}'"
            )

        return current_user

    return checker


def is_admin(user: User) -> bool:
    return user.role == UserRole.Admin


# ------------------------------------------------------------
# Exposed dependencies for routers
# ------------------------------------------------------------

require_admin = role_required(UserRole.Admin)
require_head_or_admin = role_required(UserRole.Admin, UserRole.Head)
