# app/api/endpoints/users.py

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Optional
from uuid import UUID
from sqlmodel import select

from app.api.deps import client_ip, get_current_user, get_db_session, is_admin, require_admin
from app.core.rate_limiter import limiter
from app.core.security import hash_password
from app.schemas.auth import LoginRequest, TokenWithUser
from app.schemas.user import UserCreate, UserRead, UserUpdate
from app.services.auth_service import (
    authenticate_user,
    create_login_response,
    create_user,
    get_user_by_email,
    record_login_attempt,
)
from app.models.user import User

router = APIRouter(prefix="/api/users", tags=["Users"])


# -------------------------------------------------------------------
# LOGIN (public, every attempt is written to the login log)
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
@limiter.limit("10/minute")
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    user = await authenticate_user(session, payload.email, payload.password)

    await record_login_attempt(
        session,
        email=payload.email,
        user=user,
        ip_address=client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )

    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return create_login_response(user)


# -------------------------------------------------------------------
# Current user
# -------------------------------------------------------------------
@router.get("/me")
async def read_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": UserRead.model_validate(current_user)}


# -------------------------------------------------------------------
# List users (optionally by department)
# -------------------------------------------------------------------
@router.get("")
async def list_users(
    department: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    query = select(User).order_by(User.name)
    if department:
        query = query.where(User.department == department)

    result = await session.execute(query)
    users: List[User] = result.scalars().all()
    return {"success": True, "data": [UserRead.model_validate(u) for u in users]}


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "data": UserRead.model_validate(user)}


# -------------------------------------------------------------------
# Create user (Admin only)
# -------------------------------------------------------------------
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_new_user(
    data: UserCreate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    existing = await get_user_by_email(session, data.email)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    try:
        user = await create_user(
            session,
            name=data.name,
            email=data.email,
            password=data.password,
            role=data.role,
            department=data.department,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "message": "User created successfully", "data": UserRead.model_validate(user)}


# -------------------------------------------------------------------
# Update user (Admin, or the user themselves without role changes)
# -------------------------------------------------------------------
@router.put("/{user_id}")
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    if not is_admin(current_user) and current_user.id != user_id:
        raise HTTPException(status_code=403, detail="Not allowed to edit this user")

    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    updates = data.model_dump(exclude_unset=True)

    if not is_admin(current_user) and ({"role", "is_active", "department"} & updates.keys()):
        raise HTTPException(status_code=403, detail="Only admins can change role, status or department")

    if "password" in updates:
        password = updates.pop("password")
        if password:
            user.password_hash = hash_password(password)
    if updates.get("email"):
        updates["email"] = updates["email"].lower().strip()

    for key, value in updates.items():
        setattr(user, key, value)

    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    await session.refresh(user)

    return {"success": True, "message": "User updated successfully", "data": UserRead.model_validate(user)}


# -------------------------------------------------------------------
# Delete a user (Admin only)
# -------------------------------------------------------------------
@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_admin),
):
    if current_user.id == user_id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    await session.delete(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(
            status_code=400,
            detail="User still owns events or messages; deactivate the account instead"
        )
    return {"success": True, "message": "User deleted successfully"}
