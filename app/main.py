# app/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import sys

from app.core.config import settings
from app.core.database import test_connection, init_db
from app.core.exceptions import AllocationFailed, Unauthenticated, Unauthorized
from app.core.rate_limiter import limiter
from app.core.seeding_logic import run_seeding

# Routers
from app.api.endpoints import (
    auth as auth_router,
    account as account_router,
    users as users_router,
    students as students_router,
    departments as departments_router,
    attendance as attendance_router,
    logs as logs_router,
    settings as settings_router,
    homepage as homepage_router,
    metrics as metrics_router,
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
    level="DEBUG" if settings.ENV == "dev" else "INFO",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV == "dev",
)


# ------------------------------------------------------------
# STARTUP
# ------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting MealAttend Backend...")

    # 1) Database connection test
    try:
        await test_connection()
        logger.success("Database connection established.")
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        yield
        return

    # 2) Tables, settings row, Super Admin
    try:
        await init_db()
        logger.success("Database tables ready.")
        await run_seeding()
    except Exception:
        logger.exception("Database initialization or seeding failed.")

    logger.success("Backend startup completed successfully.")
    yield


# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="MealAttend Backend",
    version="1.0.0",
    description="Meal attendance tracking: students, QR scans, users and departments.",
    lifespan=lifespan,
)

app.state.limiter = limiter


# ------------------------------------------------------------
# ERROR HANDLERS
# ------------------------------------------------------------
@app.exception_handler(Unauthenticated)
async def unauthenticated_handler(request: Request, exc: Unauthenticated):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": "Authentication required"},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(Unauthorized)
async def unauthorized_handler(request: Request, exc: Unauthorized):
    # Never reveal which capability was missing
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": "Not permitted"},
    )


@app.exception_handler(AllocationFailed)
async def allocation_failed_handler(request: Request, exc: AllocationFailed):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Could not generate the next ID. Please try again."},
        headers={"Retry-After": "1"},
    )


app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(account_router.router)
app.include_router(users_router.router)
app.include_router(students_router.router)
app.include_router(departments_router.router)
app.include_router(attendance_router.router)
app.include_router(logs_router.router)
app.include_router(settings_router.router)
app.include_router(homepage_router.router)
app.include_router(metrics_router.router)


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "MealAttend Backend",
        "version": app.version,
    }
