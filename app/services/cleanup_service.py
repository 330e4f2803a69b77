# app/services/cleanup_service.py

"""
Stale-record sweep.

Each step is a single set-based statement against a fresh session, so two
sweeps running at the same time only race on rows that both would remove or
update anyway.
"""

from datetime import datetime, timedelta
from typing import Dict

from loguru import logger
from sqlalchemy import delete, update

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.models.activity_log import UserActivityLog
from app.models.availability import LocationAvailability, ResourceAvailability
from app.models.event import Event, EventStatus
from app.models.login_log import LoginLog
from app.models.notification import Notification


async def run_cleanup() -> Dict[str, int]:
    now = datetime.utcnow()
    today = now.date()
    notification_cutoff = now - timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)
    log_cutoff = now - timedelta(days=settings.LOG_RETENTION_DAYS)

    statements = {
        "notifications": delete(Notification)
            .where(Notification.is_read == True)  # noqa: E712
            .where(Notification.created_at < notification_cutoff),
        "login_logs": delete(LoginLog).where(LoginLog.timestamp < log_cutoff),
        "user_activity_logs": delete(UserActivityLog).where(UserActivityLog.timestamp < log_cutoff),
        "resource_availability": delete(ResourceAvailability).where(ResourceAvailability.date < today),
        "location_availability": delete(LocationAvailability).where(LocationAvailability.date < today),
        "completed_events": update(Event)
            .where(Event.status == EventStatus.Approved)
            .where(Event.end_at < now)
            .values(status=EventStatus.Completed, updated_at=now),
    }

    result: Dict[str, int] = {}
    async with AsyncSessionLocal() as session:
        for name, stmt in statements.items():
            res = await session.execute(stmt)
            result[name] = res.rowcount or 0
        await session.commit()

    logger.info(f"🧹 Cleanup sweep finished: {result}")
    return result
