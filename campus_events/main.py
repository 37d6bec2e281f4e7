import os
import time
import logging
from typing import Callable
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from campus_events.api.v1.api import api_router
from campus_events.core.config import settings
from campus_events.core.exceptions import CampusEventsError
from campus_events.db.database import Base, engine
from campus_events import models  # noqa: F401  registers every table on Base.metadata

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
)

allowed_origins = settings.cors_origins

# CORS goes on before the logging middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=allowed_origins != ["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH", "HEAD"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next: Callable) -> Response:
    """Log every request with its status and timing"""
    start_time = time.time()

    try:
        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response

    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            f"{request.method} {request.url.path} - "
            f"Error: {str(e)} - "
            f"Time: {process_time:.4f}s"
        )
        logger.exception("Full error traceback:")

        return JSONResponse(
            status_code=500,
            content={
                "kind": "internal_error",
                "message": "Internal server error",
                "detail": "Internal server error",
                "path": request.url.path,
                "method": request.method,
            },
        )


@app.exception_handler(CampusEventsError)
async def campus_events_error_handler(request: Request, exc: CampusEventsError):
    """Render service errors as JSON with their HTTP status"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.kind}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} - {exc.kind}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_dict()),
        headers=headers,
    )


@app.on_event("startup")
async def startup_event():
    """Check the database and optionally create tables"""
    logger.info(f"Starting {settings.PROJECT_NAME}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"API V1 prefix: {settings.API_V1_STR}")
    logger.info(f"Allowed CORS origins: {allowed_origins}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connected")

        if settings.AUTO_CREATE_TABLES:
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables ensured")

        logger.info("Application startup completed")

    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        # Production keeps serving so /health can report the failure
        if not settings.is_production:
            raise


# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
def read_root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "docs_url": "/docs",
        "status": "running",
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "database": "connected",
            "timestamp": time.time(),
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "environment": settings.ENVIRONMENT,
                "database": f"error: {str(e)}",
                "timestamp": time.time(),
            },
        )


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    host = "0.0.0.0" if settings.is_production else "127.0.0.1"

    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(
        "campus_events.main:app",
        host=host,
        port=port,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.is_development,
    )
