# app/api/endpoints/departments.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.deps import get_current_user, get_db_session, require_admin
from app.models.department import Department
from app.models.user import User
from app.schemas.department import DepartmentCreate, DepartmentRead, DepartmentUpdate

router = APIRouter(prefix="/api/departments", tags=["Departments"])


async def _get_or_404(session: AsyncSession, department_id: int) -> Department:
    department = await session.get(Department, department_id)
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department


async def _commit_unique(session: AsyncSession, department: Department) -> Department:
    session.add(department)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=400, detail="Department name already exists")
    await session.refresh(department)
    return department


# ----------------------------------------------------------
# LIST (alphabetical, used by dropdowns)
# ----------------------------------------------------------
@router.get("")
async def list_departments(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    result = await session.execute(select(Department).order_by(Department.name))
    return {"success": True, "data": [DepartmentRead.model_validate(d) for d in result.scalars().all()]}


@router.get("/{department_id}")
async def get_department(
    department_id: int,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    department = await _get_or_404(session, department_id)
    return {"success": True, "data": DepartmentRead.model_validate(department)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_department(
    data: DepartmentCreate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Department name is required")

    department = await _commit_unique(session, Department(name=name, description=data.description))
    return {"success": True, "message": "Department created successfully", "data": DepartmentRead.model_validate(department)}


@router.put("/{department_id}")
async def update_department(
    department_id: int,
    data: DepartmentUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    department = await _get_or_404(session, department_id)

    updates = data.model_dump(exclude_unset=True)
    if "name" in updates:
        if not updates["name"] or not updates["name"].strip():
            raise HTTPException(status_code=400, detail="Department name is required")
        updates["name"] = updates["name"].strip()

    for key, value in updates.items():
        setattr(department, key, value)

    department = await _commit_unique(session, department)
    return {"success": True, "message": "Department updated successfully", "data": DepartmentRead.model_validate(department)}


@router.delete("/{department_id}")
async def delete_department(
    department_id: int,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    department = await _get_or_404(session, department_id)
    await session.delete(department)
    await session.commit()
    return {"success": True, "message": "Department deleted successfully"}
