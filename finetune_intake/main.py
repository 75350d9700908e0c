import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from .cache import close_redis_client, get_redis_client
from .domain.agreements.router import router as agreements_router
from .domain.customers.router import router as customers_router
from .domain.customers.schemas import CustomerResponse
from .domain.equipment.router import router as equipment_router
from .domain.wizard.router import router as wizard_router
from .domain.wizard.steps import Step
from .errors import (
    AlreadySubmittedError,
    DuplicateCustomerError,
    InvalidTransitionError,
    NetworkError,
    QuotaExceededError,
    SessionNotFoundError,
    SubmissionInProgressError,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Intake service starting up...")

    try:
        await get_redis_client()  # Connection test
    except (RedisError, OSError) as e:
        logger.warning(f"Redis connection failed - Agreement drafts will not be cached: {e}")

    yield
    await close_redis_client()
    logger.info("Intake service shutting down...")


app = FastAPI(title="FineTune Intake API", version="1.0.0", lifespan=lifespan)


# ============================================================================
# ERROR HANDLING
# ============================================================================


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(ValidationError)
async def intake_validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})


@app.exception_handler(DuplicateCustomerError)
async def duplicate_customer_handler(request: Request, exc: DuplicateCustomerError):
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "existing": CustomerResponse.from_customer(exc.existing).model_dump(),
        },
    )


@app.exception_handler(NetworkError)
async def network_error_handler(request: Request, exc: NetworkError):
    # The draft stays on the session; the client shows a dismissible banner
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "upstreamStatus": exc.status_code},
    )


@app.exception_handler(QuotaExceededError)
async def quota_exceeded_handler(request: Request, exc: QuotaExceededError):
    return JSONResponse(
        status_code=429,
        content={"detail": exc.message, "step": Step.LIMIT_REACHED.value},
    )


@app.exception_handler(InvalidTransitionError)
@app.exception_handler(SubmissionInProgressError)
@app.exception_handler(AlreadySubmittedError)
async def conflict_handler(request: Request, exc: Exception):
    logger.warning(f"⚠️ Conflict on {request.url.path}: {exc}")
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(wizard_router)
app.include_router(customers_router)
app.include_router(equipment_router)
app.include_router(agreements_router)


@app.get("/")
def root():
    return {"message": "FineTune Intake API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
async def redis_health_check():
    """Check Redis connectivity for monitoring"""
    try:
        redis_client = await get_redis_client()

        start_time = time.time()
        await redis_client.ping()
        response_time = (time.time() - start_time) * 1000  # Convert to milliseconds

        info = await redis_client.info()

        return {
            "status": "healthy",
            "redis": {
                "connected": True,
                "response_time_ms": round(response_time, 2),
                "version": info.get("redis_version", "unknown"),
                "used_memory_human": info.get("used_memory_human", "unknown"),
            },
        }
    except (RedisError, OSError) as e:
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}
