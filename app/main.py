# app/main.py

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import sys

from app.core.database import test_connection, init_db, AsyncSessionLocal
from app.core.config import settings
from app.core.exceptions import IdentityError
from app.core.rate_limiter import limiter
from app.services.auth_service import ensure_super_admin
from app.services.profile_store import ProfileStore

# Routers
from app.api.endpoints import (
    auth as auth_router,
    account as account_router,
    admin as admin_router,
)

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
    title="LMS Identity Backend",
    version="1.0.0",
    description="HR federation, profile provisioning and permission resolution for the LMS.",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ------------------------------------------------------------
# IDENTITY ERRORS -> HTTP
# ------------------------------------------------------------
@app.exception_handler(IdentityError)
async def identity_error_handler(request: Request, exc: IdentityError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(account_router.router)
app.include_router(admin_router.router)


# ------------------------------------------------------------
# APPLICATION STARTUP EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("Starting LMS Identity Backend...")

    # 1) Database connection test
    try:
        await test_connection()
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        return

    # 2) Initialize database tables
    await init_db()
    logger.success("Database tables ready.")

    # 3) Seed Super Admin
    if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
        logger.warning("Missing Super Admin credentials in settings.")
    else:
        async with AsyncSessionLocal() as session:
            created = await ensure_super_admin(
                ProfileStore(session),
                email=settings.SUPER_ADMIN_EMAIL,
                secret=settings.SUPER_ADMIN_PASSWORD,
                display_name=settings.SUPER_ADMIN_NAME or "Super Admin",
            )
            if created:
                logger.success(f"Super Admin created: {created.email}")
            else:
                logger.info("Super Admin already exists. Skipping.")

    logger.success("Backend startup completed successfully.")


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "LMS Identity Backend",
        "version": app.version,
    }
