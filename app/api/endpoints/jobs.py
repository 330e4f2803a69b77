# app/api/endpoints/jobs.py

from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from app.core.config import settings

router = APIRouter(prefix="/api", tags=["Background Jobs"])


@router.post("/cleanup-now")
async def cleanup_now(
    request: Request,
    x_job_secret: Optional[str] = Header(None),
):
    """
    Runs the stale-record sweep immediately. Safe to call while a scheduled
    sweep is in progress.
    """
    # Only enforced when a job secret is configured
    if settings.JOB_SECRET and x_job_secret != settings.JOB_SECRET:
        logger.warning("Unauthorized access attempt to cleanup job.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing Job Secret Key."
        )

    scheduler = request.app.state.scheduler
    try:
        result = await scheduler.run_now()
    except Exception as e:
        logger.exception("❌ Manual cleanup failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Cleanup failed", "error": str(e) or type(e).__name__},
        )

    return {
        "success": True,
        "message": "Cleanup completed successfully",
        "result": result,
    }
