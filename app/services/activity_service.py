# app/services/activity_service.py

from uuid import UUID
from typing import Optional, Dict, Any
from loguru import logger

from app.models.activity_log import UserActivityLog
from app.core.database import AsyncSessionLocal

async def log_activity(
    action: str,
    user_id: Optional[UUID],
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
):
    """
    Creates a user activity log entry in a separate DB session.
    Safe for use in BackgroundTasks.
    """
    async with AsyncSessionLocal() as session:
        try:
            entry = UserActivityLog(
                user_id=user_id,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                details=details or {},
                ip_address=ip_address,
            )

            session.add(entry)
            await session.commit()

        except Exception as e:
            # Never let an audit write break the request that triggered it
            logger.error(f"❌ ACTIVITY LOG ERROR: {e}")
            await session.rollback()
