# app/services/auth_service.py

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from loguru import logger
import uuid

from app.core.config import settings
from app.models.user import User, UserRole
from app.models.login_log import LoginLog
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
)
from app.schemas.auth import TokenWithUser
from app.schemas.user import UserRead


# ============================================================================
# FETCH USER BY EMAIL
# ============================================================================
async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower().strip()))
    return result.scalar_one_or_none()


# ============================================================================
# FETCH USER BY ID
# ============================================================================
async def get_user_by_id(session: AsyncSession, user_id: str | uuid.UUID) -> User | None:
    try:
        user_uuid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
    except ValueError:
        return None
    return await session.get(User, user_uuid)


# ============================================================================
# CREATE USER
# ============================================================================
async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.Staff,
    department: str | None = None,
) -> User:

    # Heads approve on behalf of a department, so they need one
    if role == UserRole.Head and not department:
        raise ValueError("Department head must be assigned to a department")

    user = User(
        id=uuid.uuid4(),
        name=name,
        email=email.lower().strip(),
        password_hash=hash_password(password),
        role=role,
        department=department,
    )

    session.add(user)

    try:
        await session.commit()
        await session.refresh(user)
        return user

    except IntegrityError:
        await session.rollback()
        raise ValueError("User with this email already exists")


# ============================================================================
# AUTHENTICATE
# ============================================================================
async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(session, email)
    if not user or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


# ============================================================================
# LOGIN LOG
# ============================================================================
async def record_login_attempt(
    session: AsyncSession,
    email: str,
    user: User | None,
    ip_address: str | None,
    user_agent: str | None,
) -> None:
    """
    Writes a login log row. Failures are logged and never block the login
    response itself.
    """
    entry = LoginLog(
        user_id=user.id if user else None,
        email=email.lower().strip(),
        status="success" if user else "failed",
        ip_address=ip_address,
        user_agent=user_agent,
    )
    session.add(entry)
    try:
        await session.commit()
    except Exception as e:
        logger.error(f"❌ LOGIN LOG ERROR: {e}")
        await session.rollback()


# ============================================================================
# CREATE LOGIN RESPONSE
# ============================================================================
def create_login_response(user: User) -> TokenWithUser:
    role_str = user.role.value if isinstance(user.role, UserRole) else str(user.role)

    token = create_access_token(
        subject=str(user.id),
        data={
            "role": role_str,
            "department": user.department,
        },
    )

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserRead.model_validate(user),
    )
