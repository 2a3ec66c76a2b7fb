import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401 - registers tables on Base
from .database import Base, engine
from .domain.admin.router import router as admin_router
from .domain.analytics.router import router as analytics_router
from .domain.appointments.router import patients_router as patient_appointments_router
from .domain.appointments.router import router as appointments_router
from .domain.auth.router import router as auth_router
from .domain.bank_accounts.router import router as bank_accounts_router
from .domain.chat.router import router as chat_router
from .domain.medical_records.router import admin_router as admin_medical_records_router
from .domain.medical_records.router import router as medical_records_router
from .domain.notifications.router import router as notifications_router
from .domain.optometrists.router import router as optometrists_router
from .domain.orders.router import router as orders_router
from .domain.payments.router import router as payments_router
from .domain.payments.webhooks import router as xendit_webhooks_router
from .domain.products.router import router as products_router
from .domain.reports.router import router as reports_router
from .domain.reviews.router import router as reviews_router
from .domain.schedules.router import router as schedules_router
from .domain.service_pricing.router import router as service_pricing_router
from .domain.users.router import router as users_router
from .domain.videosdk.router import router as videosdk_router
from .domain.wallets.router import router as wallets_router
from .domain.withdrawals.router import router as withdrawals_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

# Schema is normally managed by run_migrations.py; create_all is for local setups
DB_CREATE_TABLES = os.getenv("DB_CREATE_TABLES", "false").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    if DB_CREATE_TABLES:
        try:
            Base.metadata.create_all(bind=engine, checkfirst=True)
            logger.info("Database tables created successfully")
        except Exception as e:
            error_msg = str(e)
            if "already exists" in error_msg or "duplicate key" in error_msg:
                logger.info("Database tables already exist (created by another worker)")
            else:
                logger.error(f"Failed to create database tables: {e}")

    try:
        from .redis_client import get_redis_client

        get_redis_client().ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed - cache and rate limiting will fail open: {e}")

    yield
    logger.info("Application shutting down...")
    from .redis_client import reset_redis_client

    reset_redis_client()


app = FastAPI(title="Halo Optom API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors to 401 when the problem is the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    # ValueError instances raised in validators sit in ctx and are not JSON serializable
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000,http://localhost:5173,http://localhost:8081",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Routes, all served under /api
api = APIRouter(prefix="/api")
api.include_router(auth_router)
api.include_router(users_router)
api.include_router(admin_medical_records_router)
api.include_router(admin_router)
api.include_router(optometrists_router)
api.include_router(schedules_router)
api.include_router(service_pricing_router)
api.include_router(appointments_router)
api.include_router(patient_appointments_router)
api.include_router(xendit_webhooks_router)
api.include_router(payments_router)
api.include_router(wallets_router)
api.include_router(withdrawals_router)
api.include_router(products_router)
api.include_router(orders_router)
api.include_router(reviews_router)
api.include_router(notifications_router)
api.include_router(bank_accounts_router)
api.include_router(medical_records_router)
api.include_router(chat_router)
api.include_router(videosdk_router)
api.include_router(analytics_router)
api.include_router(reports_router)
app.include_router(api)


@app.get("/")
def root():
    return {"message": "Halo Optom API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
async def redis_health_check():
    """Check Redis connectivity for monitoring"""
    try:
        from .redis_client import get_redis_client

        redis_client = get_redis_client()

        start_time = time.time()
        redis_client.ping()
        response_time = (time.time() - start_time) * 1000

        info = redis_client.info()

        return {
            "status": "healthy",
            "redis": {
                "connected": True,
                "response_time_ms": round(response_time, 2),
                "version": info.get("redis_version", "unknown"),
                "used_memory_human": info.get("used_memory_human", "unknown"),
                "connected_clients": info.get("connected_clients", 0),
            },
        }
    except Exception as e:
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}
