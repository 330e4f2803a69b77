# app/main.py

from datetime import datetime, timezone
import os
import sys

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.cors import is_origin_allowed
from app.core.database import test_connection, init_db, AsyncSessionLocal
from app.core.rate_limiter import limiter
from app.models.user import UserRole
from app.realtime.server import RealtimeServer
from app.services.auth_service import get_user_by_email, create_user
from app.services.cleanup_service import run_cleanup
from app.services.scheduler import CleanupScheduler

# Routers
from app.api.endpoints import (
    department_permissions as department_permissions_router,
    departments as departments_router,
    events as events_router,
    jobs as jobs_router,
    location_availability as location_availability_router,
    messages as messages_router,
    notifications as notifications_router,
    resource_availability as resource_availability_router,
    users as users_router,
)
from app.api.endpoints.logs import activity_logs_router, login_logs_router

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV != "prod",
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="PGB Event Scheduler Backend",
    version="1.0.0",
    description="Events, departments, availability, messaging and notifications for the PGB event scheduler.",
)

ALLOWED_ORIGINS = settings.allowed_origins
logger.info(f"🌐 CORS allowed origins: {ALLOWED_ORIGINS}")

# ------------------------------------------------------------
# REALTIME + SCHEDULER (owned by this app instance)
# ------------------------------------------------------------
realtime = RealtimeServer(ALLOWED_ORIGINS)
scheduler = CleanupScheduler(run_cleanup, interval_seconds=settings.CLEANUP_INTERVAL_MINUTES * 60)

app.state.realtime = realtime
app.state.scheduler = scheduler
app.state.limiter = limiter

# ------------------------------------------------------------
# STATIC FILES (uploads)
# ------------------------------------------------------------
os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")

# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def reject_unknown_origins(request: Request, call_next):
    # CORSMiddleware only withholds headers; unknown origins are refused outright
    origin = request.headers.get("origin")
    if not is_origin_allowed(origin, ALLOWED_ORIGINS):
        logger.warning(f"❌ CORS blocked origin: {origin}")
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"success": False, "message": "Not allowed by CORS"},
        )
    return await call_next(request)


# ------------------------------------------------------------
# ERROR RESPONSES
# ------------------------------------------------------------
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Invalid request data",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(events_router.router)
app.include_router(users_router.router)
app.include_router(departments_router.router)
app.include_router(resource_availability_router.router)
app.include_router(location_availability_router.router)
app.include_router(department_permissions_router.router)
app.include_router(messages_router.router)
app.include_router(notifications_router.router)
app.include_router(login_logs_router)
app.include_router(activity_logs_router)
app.include_router(jobs_router.router)


# ------------------------------------------------------------
# HEALTH CHECK
# ------------------------------------------------------------
@app.get("/api/health", tags=["System"])
async def health():
    return {
        "success": True,
        "message": "PGB Event Scheduler API is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ------------------------------------------------------------
# APPLICATION STARTUP / SHUTDOWN
# ------------------------------------------------------------
async def seed_super_admin():
    if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
        logger.warning("Missing Super Admin credentials in settings.")
        return

    async with AsyncSessionLocal() as session:
        existing = await get_user_by_email(session, settings.SUPER_ADMIN_EMAIL)
        if existing:
            logger.info("Super Admin already exists. Skipping.")
            return

        logger.info(f"Seeding Super Admin: {settings.SUPER_ADMIN_EMAIL}")
        await create_user(
            session=session,
            name=settings.SUPER_ADMIN_NAME or "Super Admin",
            email=settings.SUPER_ADMIN_EMAIL,
            password=settings.SUPER_ADMIN_PASSWORD,
            role=UserRole.Admin,
        )
        logger.success("Super Admin created successfully.")


@app.on_event("startup")
async def on_startup():
    logger.info("🚀 Starting PGB Event Scheduler Backend...")

    # 1) Database connection; without it there is nothing to serve
    try:
        await test_connection()
        await init_db()
        logger.success("Database connection established, tables ready.")
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        raise

    # 2) Seed Super Admin
    try:
        await seed_super_admin()
    except Exception:
        logger.exception("Super Admin seeding failed.")

    # 3) Cleanup scheduler
    if settings.CLEANUP_ENABLED:
        scheduler.start()
    else:
        logger.warning("Cleanup scheduler disabled (CLEANUP_ENABLED=false).")

    logger.success("Backend startup completed successfully.\n")


@app.on_event("shutdown")
async def on_shutdown():
    await scheduler.stop()


# ------------------------------------------------------------
# ASGI ENTRYPOINT (Socket.IO in front of FastAPI)
# ------------------------------------------------------------
asgi_app = realtime.asgi_app(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:asgi_app", host="0.0.0.0", port=settings.PORT)
