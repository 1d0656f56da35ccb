"""
Main FastAPI application for the Taskflow board API
"""
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy import text

from taskflow.config import settings
from taskflow.core.exceptions import APIException
from taskflow.api.v1.router import api_router
from taskflow.core.database import async_session_factory, close_db, init_db
from taskflow.core.logging import setup_logging, get_logger
from taskflow.services.change_notifier import RedisChangeRelay, notifier

# Configure structured logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    await init_db()

    relay = None
    if settings.redis_url:
        relay = RedisChangeRelay(notifier, settings.redis_url, settings.redis_channel_prefix)
        try:
            await relay.start()
        except Exception as e:
            logger.error(f"Redis relay unavailable, change events stay in-process: {e}")
            relay = None

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    if relay is not None:
        await relay.stop()
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Collaborative kanban boards with live change notifications",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Add CORS middleware with proper dev/prod configuration
logger.info(f"CORS allowed origins: {settings.allowed_origins}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to responses"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": details
            },
            "timestamp": time.time()
        }
    )


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions"""
    return error_response(exc.status_code, exc.error_code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render request validation failures in the API error envelope"""
    return error_response(422, "VAL_001", "Validation failed", {"errors": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    details = {"exception_type": type(exc).__name__, "exception_message": str(exc)} if settings.debug else None
    return error_response(500, "SYS_001", "Internal server error", details)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "success": True,
        "data": {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.environment
        },
        "timestamp": time.time()
    }


@app.get("/health")
async def health_check():
    """Health check endpoint with database status"""
    db_status = "unknown"
    db_error = None

    try:
        async with async_session_factory() as db:
            await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = "unhealthy"
        db_error = str(e)

    return {
        "success": True,
        "data": {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "version": settings.app_version,
            "environment": settings.environment,
            "database": {
                "status": db_status,
                "error": db_error
            },
            "change_relay": "redis" if notifier.relay is not None else "local"
        },
        "timestamp": time.time()
    }


# Include API routes
app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
