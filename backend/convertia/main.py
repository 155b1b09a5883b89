"""
Convert-IA Recruiting - Main FastAPI application
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import structlog

from convertia.core.config import settings
from convertia.core.database import init_db
from convertia.core.logging_config import configure_logging
from convertia.core.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    ExceptionHandlerMiddleware,
    error_response,
)
from convertia.core.exceptions import ConvertiaException
from convertia.auth.router import router as auth_router
from convertia.jobs.router import router as jobs_router, public_router
from convertia.candidates.router import router as candidates_router
from convertia.applications.router import router as applications_router
from convertia.campaigns.router import router as campaigns_router
from convertia.dashboard.router import router as dashboard_router
from convertia.training.router import router as training_router, function_router
from convertia.rrhh.router import router as rrhh_router

# Configure logging
configure_logging()
logger = structlog.get_logger()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Recruiting, sales-training simulations and RRHH for contact-center teams",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.add_middleware(CorrelationIDMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(ExceptionHandlerMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConvertiaException)
async def convertia_exception_handler(request: Request, exc: ConvertiaException):
    """Handle application exceptions"""
    return error_response(request, exc.status_code, exc.message, exc.details, exc.__class__.__name__)


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
    }


app.include_router(auth_router)
app.include_router(public_router)
app.include_router(jobs_router)
app.include_router(candidates_router)
app.include_router(applications_router)
app.include_router(campaigns_router)
app.include_router(dashboard_router)
app.include_router(function_router)
app.include_router(training_router)
app.include_router(rrhh_router)


@app.on_event("startup")
async def startup_event():
    logger.info("application_starting", version=settings.APP_VERSION, environment=settings.ENVIRONMENT)
    try:
        init_db()
    except Exception as e:
        logger.error("database_init_failed", error=str(e))


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("application_shutting_down")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "convertia.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
